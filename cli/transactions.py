#!/usr/bin/env python3

import sys
import asyncio
from pathlib import Path
from ingestion import get_ingestion_module, get_available_modules
from cli.common import (
    format_amount,
    month_count,
    months_back,
    open_session,
    report_result,
)
from logger import get_logger

logger = get_logger()


def cmd_ingest(args, services):
    """Ingest transactions from a CSV export.

    Args:
        args: Parsed command-line arguments with csv_file and format
        services: Services container with the transactions service
    """
    csv_path = Path(args.csv_file)
    if not csv_path.exists():
        logger.error(f"File not found: {args.csv_file}")
        sys.exit(1)

    try:
        ingestion_module = get_ingestion_module(args.format)
    except ValueError as e:
        logger.error(str(e))
        sys.exit(1)

    logger.info(f"CSV file: {args.csv_file}")
    logger.info(f"Format: {args.format}")
    logger.info("-" * 80)

    try:
        with open(csv_path, "r", newline="") as f:
            transactions = ingestion_module.ingest(f)

        logger.info(f"\nParsed {len(transactions)} transactions from CSV")

        if not transactions:
            logger.info("No transactions to import.")
            return

        inserted_count = services.transactions.bulk_create(
            services.config.user_id, transactions
        )
        logger.info(f"✓ Successfully inserted {inserted_count} transactions")

        if inserted_count < len(transactions):
            skipped = len(transactions) - inserted_count
            logger.info(f"  ({skipped} duplicate transaction(s) skipped)")

    except Exception as e:
        logger.error(f"Error during ingestion: {e}")
        sys.exit(1)


def cmd_list(args, services):
    """List transactions with their category."""
    start_date = months_back(args.months) if args.months else None
    transactions = services.transactions.find_all(
        services.config.user_id,
        start_date=start_date,
        untagged_only=args.untagged,
    )

    if not transactions:
        logger.info("No transactions found.")
        return

    names = {c.id: c.name for c in services.categories.find_all(services.config.user_id)}

    logger.info(f"\n{'ID':>6}  {'Date':<10}  {'Amount':>12}  {'Category':<20}  Merchant")
    logger.info("=" * 80)
    for t in transactions:
        category = names.get(t.tag_id, "-") if t.tag_id is not None else "-"
        logger.info(
            f"{t.id:>6}  {t.date.isoformat():<10}  {format_amount(t.amount):>12}  "
            f"{category[:20]:<20}  {t.merchant_details[:40]}"
        )

    logger.info(f"\nTotal transactions: {len(transactions)}")


def cmd_tag(args, services):
    """Assign a transaction to a category, or untag it."""
    session = open_session(services)
    result = asyncio.run(session.tag_transaction(args.transaction_id, args.category_id))
    report_result(result)


def setup_parser(subparsers):
    """Setup transactions subcommand parser.

    Args:
        subparsers: The subparsers object from the main CLI
    """
    parser = subparsers.add_parser(
        "transactions",
        help="Import and tag transactions",
        description="Import transactions from CSV files and assign them to categories",
    )

    transactions_subparsers = parser.add_subparsers(
        title="subcommands",
        description="Available transaction commands",
        dest="subcommand",
        required=True,
    )

    # transactions ingest
    ingest_parser = transactions_subparsers.add_parser(
        "ingest",
        help="Ingest transactions from a CSV file",
        epilog="""
Examples:
  python -m cli transactions ingest export.csv
  python -m cli transactions ingest export.csv --format bank_csv
        """,
    )
    ingest_parser.add_argument(
        "csv_file",
        help="Path to the CSV file to ingest",
    )
    ingest_parser.add_argument(
        "--format",
        default="bank_csv",
        choices=get_available_modules(),
        help="Layout of the CSV file (default: bank_csv)",
    )
    ingest_parser.set_defaults(func=cmd_ingest)

    # transactions list
    list_parser = transactions_subparsers.add_parser("list", help="List transactions")
    list_parser.add_argument(
        "--untagged", action="store_true", help="Only show untagged transactions"
    )
    list_parser.add_argument(
        "--months",
        type=month_count,
        help="Only show the last N calendar months, including the current one",
    )
    list_parser.set_defaults(func=cmd_list)

    # transactions tag
    tag_parser = transactions_subparsers.add_parser(
        "tag",
        help="Set the category of a transaction",
        description="Assign a transaction to a category. Omit the category to untag it.",
    )
    tag_parser.add_argument("transaction_id", type=int, help="Transaction ID")
    tag_parser.add_argument(
        "category_id", type=int, nargs="?", default=None, help="Category ID"
    )
    tag_parser.set_defaults(func=cmd_tag)
