#!/usr/bin/env python3

import sys
from decimal import Decimal
from tagtree import Mode
from tagtree.session import ViewModel
from cli.common import format_amount, month_count, months_back, open_session
from logger import get_logger

logger = get_logger()

BAR_WIDTH = 20


def budget_bar(percent: Decimal, width: int = BAR_WIDTH) -> str:
    """Render a budget progress bar such as ``[#####---------------]  25%``."""
    filled = int(percent * width / 100)
    return f"[{'#' * filled}{'-' * (width - filled)}] {int(percent):>3}%"


def render_view(view: ViewModel) -> list:
    """Render a view model as report lines."""
    trail = " > ".join(crumb.label for crumb in view.breadcrumbs)
    lines = [
        f"\n{view.mode.value.capitalize()}: {trail}",
        "=" * 80,
    ]

    if not view.entries:
        lines.append("(no categories)")

    for entry in view.entries:
        marker = "+" if entry.drillable else " "
        node = f"[{entry.node_id}]" if entry.node_id is not None else ""
        line = f"{marker} {node:>6} {entry.label[:30]:<30} {format_amount(entry.value):>12}"
        if entry.has_budget_bar:
            line += (
                f"  {budget_bar(entry.percent)}"
                f"  of {format_amount(entry.budget)}"
                f" ({format_amount(entry.remaining)} left)"
            )
        lines.append(line)

    lines.append("-" * 80)
    lines.append(f"{'Total':<39} {format_amount(view.total):>12}")
    return lines


def cmd_report(args, services):
    """Show totals per category at a drill path."""
    since = months_back(args.months) if args.months else None
    session = open_session(services, mode=args.mode, since=since)

    for node_id in args.path or []:
        result = session.descend(node_id)
        if not result.ok:
            logger.error(f"Error: {result.message}")
            sys.exit(1)

    view = session.view(hide_empty=not args.all)
    if since:
        logger.info(f"Transactions since {since.isoformat()}")
    for line in render_view(view):
        logger.info(line)


def setup_parser(subparsers):
    """Setup report command parser.

    Args:
        subparsers: The subparsers object from the main CLI
    """
    parser = subparsers.add_parser(
        "report",
        help="Show income or spend per category",
        description="Roll transaction totals up the category tree and compare them to budgets",
        epilog="""
Examples:
  python -m cli report
  python -m cli report --mode income
  python -m cli report --path 1 --path 4 --months 3
        """,
    )
    parser.add_argument(
        "--mode",
        choices=[m.value for m in Mode],
        help="Hierarchy to report on (default: report.default_mode)",
    )
    parser.add_argument(
        "--path",
        type=int,
        action="append",
        metavar="ID",
        help="Drill into this category; repeat to go deeper",
    )
    parser.add_argument(
        "--months",
        type=month_count,
        help="Only count the last N calendar months, including the current one",
    )
    parser.add_argument(
        "--all",
        action="store_true",
        help="Also show categories with no transactions and no budget",
    )
    parser.set_defaults(func=cmd_report)
