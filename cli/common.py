"""Helpers shared by the CLI commands."""

import argparse
import asyncio
import sys
from datetime import date
from decimal import Decimal
from typing import List, Optional

from tagtree import BudgetSession, Mode, OperationResult
from tagtree.builder import Forest
from logger import get_logger

logger = get_logger()


def open_session(services, mode: Optional[str] = None, since=None) -> BudgetSession:
    """Create a BudgetSession for the configured user and load it."""
    session = BudgetSession(
        services.store,
        services.config.user_id,
        mode=Mode(mode or services.config.default_mode),
        since=since,
    )
    asyncio.run(session.load())
    return session


def open_session_for_category(services, category_id: int) -> BudgetSession:
    """Load a session whose active mode is the hierarchy holding ``category_id``.

    Exits with an error if the category does not exist.
    """
    session = open_session(services)
    record = next((r for r in session.records if r.id == category_id), None)
    if record is None:
        logger.error(f"Category with ID {category_id} not found.")
        sys.exit(1)
    session.set_mode(Mode(record.type.value))
    return session


def report_result(result: OperationResult) -> None:
    """Log the outcome of a session operation; exit 1 on failure."""
    if result.ok:
        if result.message:
            logger.info(f"✓ {result.message}")
        return
    logger.error(f"Error: {result.message}")
    sys.exit(1)


def format_amount(value: Decimal) -> str:
    return f"{value:,.2f}"


def format_forest(forest: Forest, depth: int = 0) -> List[str]:
    """Render a forest as indented lines, one category per line."""
    lines = []
    for node in forest:
        budget = ""
        if node.budget_amount > 0:
            budget = f"  (budget {format_amount(node.budget_amount)})"
        lines.append(f"{'    ' * depth}- [{node.id}] {node.name}{budget}")
        lines.extend(format_forest(node.children, depth + 1))
    return lines


def month_count(value: str) -> int:
    """argparse type for ``--months``: a whole number of at least 1."""
    try:
        months = int(value)
    except ValueError:
        raise argparse.ArgumentTypeError(f"invalid month count: '{value}'") from None
    if months < 1:
        raise argparse.ArgumentTypeError(f"month count must be at least 1, got {months}")
    return months


def months_back(months: int, today: Optional[date] = None) -> date:
    """First day of the month ``months - 1`` months before ``today``.

    ``months_back(1)`` is the start of the current month.
    """
    if months < 1:
        raise ValueError(f"months must be at least 1, got {months}")
    from dateutil.relativedelta import relativedelta

    today = today or date.today()
    return today + relativedelta(months=-(months - 1), day=1)
