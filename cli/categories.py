#!/usr/bin/env python3

import sys
import json
import asyncio
from decimal import Decimal, InvalidOperation

from config import get_seed_file
from models.category import CategoryType
from tagtree import Mode
from cli.common import (
    format_forest,
    open_session,
    open_session_for_category,
    report_result,
)
from logger import get_logger

logger = get_logger()


def cmd_list(args, services):
    """List the category tree of one or both modes."""
    session = open_session(services)
    modes = [Mode(args.mode)] if args.mode else list(Mode)

    if not session.records:
        logger.info("No categories found.")
        return

    for mode in modes:
        forest = session.build_forest(mode)
        logger.info(f"\n{mode.value.capitalize()} categories:")
        logger.info("=" * 80)
        if not forest:
            logger.info("(none)")
            continue
        for line in format_forest(forest):
            logger.info(line)

    logger.info(f"\nTotal categories: {len(session.records)}")


def cmd_create(args, services):
    """Create a category at the root, or under a parent of the same type."""
    budget = _parse_budget(args.budget)
    mode = args.mode or services.config.default_mode

    session = open_session(services, mode=mode)
    if args.parent is None:
        result = asyncio.run(session.create_root_node(args.name, budget))
        report_result(result)
        created = session.forest[0]
    else:
        parent = next((r for r in session.records if r.id == args.parent), None)
        if parent is None:
            logger.error(f"Parent category with ID {args.parent} not found.")
            sys.exit(1)
        if parent.type.value != session.mode.value:
            logger.error(
                f"Parent category '{parent.name}' is a {parent.type.value} category."
            )
            sys.exit(1)

        result = asyncio.run(session.create_child_node(args.parent, args.name, budget))
        report_result(result)
        created = session.records[-1]

    logger.info(f"  ID: {created.id}")
    logger.info(f"  Name: {created.name}")
    logger.info(f"  Type: {created.type.value}")
    if created.parent_id is not None:
        logger.info(f"  Parent ID: {created.parent_id}")


def cmd_rename(args, services):
    """Rename a category."""
    session = open_session_for_category(services, args.category_id)
    report_result(asyncio.run(session.rename_node(args.category_id, args.name)))


def cmd_budget(args, services):
    """Set a category's budget amount."""
    amount = _parse_budget(args.amount)
    session = open_session_for_category(services, args.category_id)
    report_result(asyncio.run(session.rebudget_node(args.category_id, amount)))


def cmd_move(args, services):
    """Move a category (and its subtree) under a new parent or to the root."""
    session = open_session_for_category(services, args.category_id)
    result = asyncio.run(
        session.move_node(args.category_id, args.parent, index=args.position)
    )
    report_result(result)
    if result.ok and not result.message:
        logger.info("Nothing to change.")


def cmd_delete(args, services):
    """Delete a leaf category. Its transactions become untagged."""
    user_id = services.config.user_id
    category_id = args.category_id

    category = services.categories.find(user_id, category_id)
    if not category:
        logger.error(f"Category with ID {category_id} not found.")
        sys.exit(1)

    children = [
        c for c in services.categories.find_all(user_id) if c.parent_id == category_id
    ]
    if children:
        logger.error(
            f"Cannot delete '{category.name}': it has {len(children)} subcategories. "
            "Move them first."
        )
        sys.exit(1)

    if not args.yes:
        confirm = (
            input(f"\nDelete category '{category.name}'? (yes/no): ").strip().lower()
        )
        if confirm != "yes":
            logger.info("Deletion cancelled.")
            return

    try:
        untagged = services.transactions.untag_category(user_id, category_id)
        if services.categories.delete(user_id, category_id):
            logger.info(f"✓ Category '{category.name}' deleted successfully.")
            if untagged:
                logger.info(f"  {untagged} transactions are now untagged.")
        else:
            logger.error("Failed to delete category.")
            sys.exit(1)
    except Exception as e:
        logger.error(f"Error deleting category: {e}")
        sys.exit(1)


def cmd_seed(args, services):
    """Seed the default category hierarchy from JSON."""
    seed_file = get_seed_file()

    if not seed_file.exists():
        logger.error(f"Seed file not found: {seed_file}")
        sys.exit(1)

    try:
        with open(seed_file, "r") as f:
            categories_data = json.load(f)
    except json.JSONDecodeError as e:
        logger.error(f"Error parsing JSON file: {e}")
        sys.exit(1)

    logger.info(f"\nSeeding categories from {seed_file.name}")
    logger.info("=" * 80)

    created, skipped = seed_categories(services, categories_data)

    logger.info("=" * 80)
    logger.info("\nSeeding complete!")
    logger.info(f"Created: {created}")
    logger.info(f"Skipped: {skipped}")
    logger.info(f"Total: {created + skipped}")


def seed_categories(services, categories_data, parent=None, depth=0):
    """Create the categories in ``categories_data`` under ``parent``.

    Children inherit their parent's type. Categories that already exist under
    the same parent are skipped but their children are still seeded.

    Returns:
        Tuple of (created count, skipped count).
    """
    user_id = services.config.user_id
    indent = "  " * depth
    created = skipped = 0

    for data in categories_data:
        name = (data.get("name") or "").strip()
        if not name:
            logger.warning(f"{indent}Skipping category with no name")
            continue

        if parent is not None:
            category_type = parent.type
        else:
            try:
                category_type = CategoryType(data.get("type", "expense"))
            except ValueError:
                logger.warning(f"{indent}Skipping '{name}': unknown type {data.get('type')!r}")
                continue

        parent_id = parent.id if parent else None
        category = services.categories.find_by_name(user_id, name, parent_id)
        if category:
            logger.info(f"{indent}⊘ Skipped '{name}' (already exists)")
            skipped += 1
        else:
            category = services.categories.create(
                user_id,
                name,
                category_type,
                budget_amount=Decimal(str(data.get("budget_amount", 0))),
                parent_id=parent_id,
            )
            logger.info(f"{indent}✓ Created '{name}' (ID: {category.id})")
            created += 1

        child_created, child_skipped = seed_categories(
            services, data.get("children", []), category, depth + 1
        )
        created += child_created
        skipped += child_skipped

    return created, skipped


def _parse_budget(value):
    if value is None:
        return Decimal("0")
    try:
        return Decimal(value)
    except InvalidOperation:
        logger.error(f"Invalid budget amount: {value}")
        sys.exit(1)


def setup_parser(subparsers):
    """Setup categories subcommand parser.

    Args:
        subparsers: The subparsers object from the main CLI
    """
    parser = subparsers.add_parser(
        "categories",
        help="Manage categories",
        description="Create, reshape, budget and delete income and expense categories",
    )

    categories_subparsers = parser.add_subparsers(
        title="subcommands",
        description="Available category commands",
        dest="subcommand",
        required=True,
    )

    mode_choices = [m.value for m in Mode]

    # categories list
    list_parser = categories_subparsers.add_parser(
        "list", help="Show the category tree"
    )
    list_parser.add_argument(
        "--mode", choices=mode_choices, help="Only show one hierarchy"
    )
    list_parser.set_defaults(func=cmd_list)

    # categories create
    create_parser = categories_subparsers.add_parser(
        "create", help="Create a new category"
    )
    create_parser.add_argument("name", help="Category name")
    create_parser.add_argument(
        "--mode",
        choices=mode_choices,
        help="Hierarchy to create the category in (default: report.default_mode)",
    )
    create_parser.add_argument("--budget", help="Budget amount (default: 0)")
    create_parser.add_argument(
        "--parent", type=int, help="ID of the category to create it under"
    )
    create_parser.set_defaults(func=cmd_create)

    # categories rename
    rename_parser = categories_subparsers.add_parser("rename", help="Rename a category")
    rename_parser.add_argument("category_id", type=int, help="ID of the category")
    rename_parser.add_argument("name", help="New name")
    rename_parser.set_defaults(func=cmd_rename)

    # categories budget
    budget_parser = categories_subparsers.add_parser(
        "budget", help="Set a category's budget"
    )
    budget_parser.add_argument("category_id", type=int, help="ID of the category")
    budget_parser.add_argument("amount", help="Budget amount")
    budget_parser.set_defaults(func=cmd_budget)

    # categories move
    move_parser = categories_subparsers.add_parser(
        "move", help="Move a category under another category or to the root"
    )
    move_parser.add_argument("category_id", type=int, help="ID of the category to move")
    move_parser.add_argument(
        "--parent", type=int, help="ID of the new parent (omit to move to the root)"
    )
    move_parser.add_argument(
        "--position", type=int, help="Position among the new siblings (default: last)"
    )
    move_parser.set_defaults(func=cmd_move)

    # categories delete
    delete_parser = categories_subparsers.add_parser(
        "delete", help="Delete a category without subcategories"
    )
    delete_parser.add_argument(
        "category_id",
        type=int,
        help="ID of the category to delete",
    )
    delete_parser.add_argument(
        "-y", "--yes", action="store_true", help="Do not ask for confirmation"
    )
    delete_parser.set_defaults(func=cmd_delete)

    # categories seed
    seed_parser = categories_subparsers.add_parser(
        "seed", help="Seed the default category hierarchy"
    )
    seed_parser.set_defaults(func=cmd_seed)
