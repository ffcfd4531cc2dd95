"""Apply structural and field edits to a category forest.

A proposed forest (for example the result of a drag-and-drop reorder) is
trusted for its shape only: the ``parent_id`` fields on its nodes may be
stale, so they are recomputed from position once the diff is taken. The
previous forest is read the other way round, through its ``parent_id``
fields, which hold the last accepted parents.
"""

import copy
from dataclasses import dataclass
from decimal import Decimal, InvalidOperation
from typing import Dict, List, Optional

from tagtree.builder import Forest, find_node, iter_nodes, parent_map
from tagtree.errors import NodeNotFound, ValidationError
from tagtree.node import TreeNode


@dataclass(frozen=True)
class ParentChange:
    """A node whose effective parent differs from the previous shape."""

    node_id: int
    parent_id: Optional[int]


@dataclass
class RestructureResult:
    forest: Forest
    changes: List[ParentChange]


def normalize_parent_ids(forest: Forest, parent_id: Optional[int] = None) -> Forest:
    """Overwrite every node's ``parent_id`` with the id of its enclosing node.

    Mutates the nodes in place and returns the same forest.
    """
    for node in forest:
        node.parent_id = parent_id
        normalize_parent_ids(node.children, node.id)
    return forest


def recorded_parents(forest: Forest) -> Dict[int, Optional[int]]:
    """Map each node id to its ``parent_id`` field, the last accepted parent."""
    return {node.id: node.parent_id for node in iter_nodes(forest)}


def diff_parent_changes(previous: Forest, proposed: Forest) -> List[ParentChange]:
    """List the nodes of ``proposed`` whose positional parent changed.

    The old parent of a node is its ``parent_id`` field in ``previous``, not
    its position there, so a forest edited in place still diffs against what
    was last accepted. Only parent edges are compared, so moving a whole
    subtree reports just the subtree's root. Nodes missing from ``previous``
    are reported with their new parent.
    """
    before = recorded_parents(previous)
    after = parent_map(proposed)

    changes = []
    for node_id, parent_id in after.items():
        if node_id not in before or before[node_id] != parent_id:
            changes.append(ParentChange(node_id=node_id, parent_id=parent_id))
    return changes


def propose_restructure(previous: Forest, proposed: Forest) -> RestructureResult:
    """Normalize a proposed forest and diff it against the previous one.

    Args:
        previous: The forest as last accepted. May be the same object as
            ``proposed`` when the caller edited it in place.
        proposed: Full replacement forest of the same nodes.

    Returns:
        The normalized proposed forest and its parent changes. A proposal
        with the same shape as ``previous`` yields no changes.

    Raises:
        ValidationError: If a node id occurs more than once in ``proposed``,
            or the two forests do not hold the same set of nodes.
    """
    ensure_unique_ids(proposed)
    ensure_same_nodes(previous, proposed)
    # Diff before normalizing, which overwrites the parent_id fields
    changes = diff_parent_changes(previous, proposed)
    forest = normalize_parent_ids(proposed)
    return RestructureResult(forest=forest, changes=changes)


def ensure_same_nodes(previous: Forest, proposed: Forest) -> None:
    """Reject a proposal that adds or drops nodes.

    A node from the other hierarchy counts as added, since it is never part
    of ``previous``.
    """
    before = {node.id for node in iter_nodes(previous)}
    after = {node.id for node in iter_nodes(proposed)}
    if before == after:
        return

    problems = []
    missing = sorted(before - after)
    extra = sorted(after - before)
    if missing:
        problems.append(f"missing {missing}")
    if extra:
        problems.append(f"unknown {extra}")
    raise ValidationError(
        f"Proposed tree does not match the current categories: {', '.join(problems)}"
    )


def ensure_unique_ids(forest: Forest) -> None:
    """Reject a forest that repeats a node, which is how a cycle would show up.

    The walk stops at the first repeat, so a node listed among its own
    descendants cannot make it loop.
    """
    seen = set()
    stack = list(forest)
    while stack:
        node = stack.pop()
        if node.id in seen:
            raise ValidationError(f"Category {node.id} appears more than once in the proposed tree")
        seen.add(node.id)
        stack.extend(node.children)


def move_subtree(
    forest: Forest,
    node_id: int,
    new_parent_id: Optional[int],
    index: Optional[int] = None,
) -> Forest:
    """Return a copy of ``forest`` with a node (and its subtree) moved.

    The node is placed under ``new_parent_id`` (or among the roots when
    None) at ``index``, appended when ``index`` is None. The input forest is
    left untouched, so the result can be passed to ``propose_restructure``
    together with the original.

    Raises:
        NodeNotFound: If the node or the new parent is not in the forest.
        ValidationError: If the new parent is the node itself or one of its
            descendants.
    """
    proposed = copy_forest(forest)
    node = _require(proposed, node_id)

    if new_parent_id is not None:
        new_parent = _require(proposed, new_parent_id)
        if find_node([node], new_parent_id) is not None:
            raise ValidationError(
                f"Cannot move category {node_id} under itself or one of its subcategories"
            )
        siblings = new_parent.children
    else:
        siblings = proposed

    _detach(proposed, node)
    if index is None:
        siblings.append(node)
    else:
        siblings.insert(index, node)
    return proposed


def _detach(forest: Forest, target: TreeNode) -> None:
    if target in forest:
        forest.remove(target)
        return
    for node in forest:
        if target in node.children:
            node.children.remove(target)
            return
        _detach(node.children, target)


def insert_root(forest: Forest, node: TreeNode) -> Forest:
    """Insert ``node`` as the first root and normalize parent ids."""
    forest.insert(0, node)
    return normalize_parent_ids(forest)


def validate_name(name: Optional[str]) -> str:
    """Return the trimmed name, rejecting an empty one."""
    trimmed = (name or "").strip()
    if not trimmed:
        raise ValidationError("Category name cannot be empty")
    return trimmed


def validate_budget(amount) -> Decimal:
    """Return the budget as a non-negative Decimal, rejecting non-finite input."""
    if isinstance(amount, float):
        # Go through str so 0.1 stays 0.1
        amount = str(amount)
    try:
        value = Decimal(amount)
    except (InvalidOperation, TypeError, ValueError):
        raise ValidationError(f"Budget amount {amount!r} is not a number") from None
    if not value.is_finite():
        raise ValidationError(f"Budget amount {amount!r} is not a finite number")
    return abs(value)


def rename_node(forest: Forest, node_id: int, name: str) -> TreeNode:
    """Rename a node in place after validating the name.

    Raises:
        ValidationError: If the name is empty after trimming.
        NodeNotFound: If the node is not in the forest.
    """
    trimmed = validate_name(name)
    node = _require(forest, node_id)
    node.name = trimmed
    return node


def rebudget_node(forest: Forest, node_id: int, amount) -> TreeNode:
    """Set a node's budget in place; negative input is stored as its magnitude.

    Raises:
        ValidationError: If the amount is not a finite number.
        NodeNotFound: If the node is not in the forest.
    """
    value = validate_budget(amount)
    node = _require(forest, node_id)
    node.budget_amount = value
    return node


def copy_forest(forest: Forest) -> Forest:
    """Deep copy of the forest, used to keep the previous shape around."""
    return copy.deepcopy(forest)


def _require(forest: Forest, node_id: int) -> TreeNode:
    node = find_node(forest, node_id)
    if node is None:
        raise NodeNotFound(node_id)
    return node
