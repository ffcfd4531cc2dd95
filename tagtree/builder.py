"""Build category forests from flat category records."""

import logging
from typing import Dict, Iterable, Iterator, List, Optional, Tuple

from models.category import CategoryRecord, CategoryType
from tagtree.node import TreeNode

logger = logging.getLogger(__name__)

Forest = List[TreeNode]


def build_forest(
    records: Iterable[CategoryRecord],
    category_type: Optional[CategoryType] = None,
) -> Forest:
    """Convert flat category records into a list of root nodes.

    Roots keep the order in which they appear in ``records``, and so do the
    children of each node. A record whose parent is missing from the set (a
    deleted parent, or a parent of the other type) becomes a root and its
    ``parent_id`` is corrected to None, which is what the next save of that
    node would write anyway.

    The build is a single pass with dictionary lookups, so a corrupted store
    cannot make it loop: records caught in a parent cycle are simply never
    reachable from a root and are left out (with a warning).

    Args:
        records: Category records of one user, in store order.
        category_type: When given, only records of this type are used.

    Returns:
        Root nodes of the forest.
    """
    if category_type is not None:
        records = [r for r in records if r.type == category_type]

    by_id: Dict[int, TreeNode] = {}
    for record in records:
        by_id[record.id] = TreeNode.from_record(record)

    roots: Forest = []
    for node in by_id.values():
        if node.parent_id is None:
            roots.append(node)
            continue

        parent = by_id.get(node.parent_id)
        if parent is not None:
            parent.children.append(node)
        else:
            logger.warning(
                f"Category {node.id} ({node.name}) references missing parent "
                f"{node.parent_id}; treating it as a root"
            )
            node.parent_id = None
            roots.append(node)

    reachable = sum(1 for _ in iter_nodes(roots))
    if reachable < len(by_id):
        reachable_ids = {node.id for node in iter_nodes(roots)}
        unreachable = sorted(set(by_id) - reachable_ids)
        logger.warning(f"Categories with cyclic parent references skipped: {unreachable}")

    return roots


def build_forests(records: Iterable[CategoryRecord]) -> Tuple[Forest, Forest]:
    """Build the income and expense forests from the same record list.

    Returns:
        Tuple of (income_forest, expense_forest).
    """
    records = list(records)
    return (
        build_forest(records, CategoryType.income),
        build_forest(records, CategoryType.expense),
    )


def iter_nodes(forest: Forest) -> Iterator[TreeNode]:
    """Yield every node depth-first, parents before children, in display order."""
    stack = list(reversed(forest))
    while stack:
        node = stack.pop()
        yield node
        stack.extend(reversed(node.children))


def find_node(forest: Forest, node_id: int) -> Optional[TreeNode]:
    """Return the node with ``node_id``, or None."""
    for node in iter_nodes(forest):
        if node.id == node_id:
            return node
    return None


def flatten_parents(
    forest: Forest, parent_id: Optional[int] = None
) -> List[Tuple[int, Optional[int]]]:
    """List ``(node_id, parent_id)`` pairs derived from tree position.

    The parent is the id of the enclosing node, never the node's own
    ``parent_id`` field.
    """
    pairs: List[Tuple[int, Optional[int]]] = []
    for node in forest:
        pairs.append((node.id, parent_id))
        pairs.extend(flatten_parents(node.children, node.id))
    return pairs


def parent_map(forest: Forest) -> Dict[int, Optional[int]]:
    """Map each node id to its positional parent id."""
    return dict(flatten_parents(forest))
