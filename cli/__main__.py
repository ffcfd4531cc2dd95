#!/usr/bin/env python3
"""
Tagtree CLI - command-line interface for budget categories and transactions.

Usage:
    python -m cli <command> <subcommand> [options]

Commands:
    categories   Manage the category tree
    transactions Import and tag transactions
    report       Show spend or income rolled up per category
    migrate      Database migrations

Examples:
    python -m cli migrate apply
    python -m cli categories seed
    python -m cli categories move 5 --parent 2
    python -m cli transactions ingest export.csv
    python -m cli report --mode expense --path 1
"""

import sys
import argparse
from cli import transactions, migrate, categories, report
from config import load_config
from services.base import Services
from db.manager import DatabaseManager
from logger import setup_logging


def main():
    """Main CLI entry point with subcommands."""
    parser = argparse.ArgumentParser(
        prog="cli",
        description="Tagtree - Budget categories and spend roll-ups",
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )

    subparsers = parser.add_subparsers(
        title="commands",
        description="Available commands",
        dest="command",
        required=True,
    )

    categories.setup_parser(subparsers)
    transactions.setup_parser(subparsers)
    report.setup_parser(subparsers)
    migrate.setup_parser(subparsers)

    args = parser.parse_args()

    if hasattr(args, "func"):
        try:
            config = load_config()
            setup_logging(config)

            # Commands that use services: categories, transactions, report
            # Commands that use db_manager directly: migrate
            if args.command == "migrate":
                db_manager = DatabaseManager(config)
                args.func(args, db_manager)
            else:
                services = Services(config)
                args.func(args, services)
        except Exception as e:
            print(f"Error: {e}")
            sys.exit(1)
    else:
        parser.print_help()
        sys.exit(1)


if __name__ == "__main__":
    main()
