"""Roll transaction amounts up the category forest.

Amounts are ``Decimal`` throughout. A mode selects which transactions count:

- ``expense``: only negative amounts, taken as magnitudes
- ``income``: only positive amounts, taken as-is

Transactions of the other sign are absent from the mode's totals, not
counted as zero.
"""

from dataclasses import dataclass, field
from decimal import Decimal
from enum import Enum
from typing import Dict, Iterable, List, Optional

from models.category import CategoryType
from models.transaction import TransactionRecord
from tagtree.builder import Forest
from tagtree.node import TreeNode

ZERO = Decimal("0")
HUNDRED = Decimal("100")

OTHER_LABEL = "Other"
UNTAGGED_LABEL = "Other (Untagged)"


class Mode(str, Enum):
    income = "income"
    expense = "expense"

    @property
    def category_type(self) -> CategoryType:
        """The category hierarchy shown in this mode."""
        return CategoryType(self.value)


def signed_magnitude(amount: Decimal, mode: Mode) -> Optional[Decimal]:
    """Return the amount's contribution under ``mode``, or None if excluded."""
    if mode == Mode.expense:
        return -amount if amount < 0 else None
    return amount if amount > 0 else None


def direct_totals(
    transactions: Iterable[TransactionRecord], mode: Mode
) -> Dict[int, Decimal]:
    """Sum sign-filtered amounts per tag id. Untagged transactions are skipped."""
    totals: Dict[int, Decimal] = {}
    for txn in transactions:
        if txn.tag_id is None:
            continue
        value = signed_magnitude(txn.amount, mode)
        if value is None:
            continue
        totals[txn.tag_id] = totals.get(txn.tag_id, ZERO) + value
    return totals


def untagged_total(transactions: Iterable[TransactionRecord], mode: Mode) -> Decimal:
    """Sum sign-filtered amounts of transactions without a tag."""
    total = ZERO
    for txn in transactions:
        if txn.tag_id is not None:
            continue
        value = signed_magnitude(txn.amount, mode)
        if value is not None:
            total += value
    return total


def recursive_total(node: TreeNode, totals: Dict[int, Decimal]) -> Decimal:
    """A node's direct total plus the recursive totals of all its descendants."""
    total = totals.get(node.id, ZERO)
    for child in node.children:
        total += recursive_total(child, totals)
    return total


def recursive_totals(forest: Forest, totals: Dict[int, Decimal]) -> Dict[int, Decimal]:
    """Recursive totals of every node in the forest, computed in one walk."""
    result: Dict[int, Decimal] = {}

    def visit(node: TreeNode) -> Decimal:
        total = totals.get(node.id, ZERO)
        for child in node.children:
            total += visit(child)
        result[node.id] = total
        return total

    for root in forest:
        visit(root)
    return result


def budget_percent(spent: Decimal, budget: Decimal) -> Decimal:
    """Share of the budget used, capped at 100. Zero when there is no budget."""
    if budget <= 0:
        return ZERO
    return min(HUNDRED, HUNDRED * spent / budget)


@dataclass
class Aggregation:
    """Totals of one forest under one mode.

    Attributes:
        mode: Mode the totals were computed for.
        direct: Direct total per tagged node id (nodes without transactions absent).
        recursive: Recursive total for every node of the forest.
        untagged: Total of untagged transactions.
    """

    mode: Mode
    direct: Dict[int, Decimal] = field(default_factory=dict)
    recursive: Dict[int, Decimal] = field(default_factory=dict)
    untagged: Decimal = ZERO
    tagged: Decimal = ZERO

    def direct_total(self, node_id: Optional[int]) -> Decimal:
        if node_id is None:
            return ZERO
        return self.direct.get(node_id, ZERO)

    def recursive_total(self, node_id: int) -> Decimal:
        return self.recursive.get(node_id, ZERO)

    @property
    def total(self) -> Decimal:
        """Everything visible at the root view: the forest plus the untagged bucket."""
        return self.tagged + self.untagged


def aggregate(
    forest: Forest, transactions: Iterable[TransactionRecord], mode: Mode
) -> Aggregation:
    """Compute direct, recursive and untagged totals for ``forest``.

    Transactions tagged with an id outside the forest (for example a category
    of the other type) show up in ``direct`` but never in ``recursive``.
    """
    transactions = list(transactions)
    direct = direct_totals(transactions, mode)
    recursive = recursive_totals(forest, direct)
    return Aggregation(
        mode=mode,
        direct=direct,
        recursive=recursive,
        untagged=untagged_total(transactions, mode),
        tagged=sum((recursive[root.id] for root in forest), ZERO),
    )


@dataclass
class BreakdownEntry:
    """One slice of the current view: a child category or a synthetic bucket.

    Synthetic buckets ("Other", "Other (Untagged)") have no node id and are
    never drillable.
    """

    label: str
    value: Decimal
    node_id: Optional[int] = None
    budget: Decimal = ZERO
    drillable: bool = False
    synthetic: bool = False

    @property
    def percent(self) -> Decimal:
        return budget_percent(self.value, self.budget)

    @property
    def remaining(self) -> Decimal:
        return self.budget - self.value

    @property
    def has_budget_bar(self) -> bool:
        return self.budget > 0


def breakdown(
    current,
    aggregation: Aggregation,
    at_root: bool,
    hide_empty: bool = False,
) -> List[BreakdownEntry]:
    """Entries shown when viewing ``current``'s children.

    Args:
        current: The viewed node, or the navigator's pseudo-root at the root
                 view. Anything with ``id`` and ``children`` works.
        aggregation: Totals for the active forest and mode.
        at_root: Whether the drill path is empty; only then is the untagged
                 bucket shown.
        hide_empty: Drop entries with neither a value nor a budget.

    Returns:
        One entry per child in display order, then "Other" when the viewed
        node has transactions of its own, then the untagged bucket.
    """
    entries: List[BreakdownEntry] = []

    for child in current.children:
        entries.append(
            BreakdownEntry(
                label=child.name,
                value=aggregation.recursive_total(child.id),
                node_id=child.id,
                budget=child.budget_amount,
                drillable=not child.is_leaf,
            )
        )

    own_total = aggregation.direct_total(current.id)
    if own_total != 0:
        entries.append(BreakdownEntry(label=OTHER_LABEL, value=own_total, synthetic=True))

    if at_root and aggregation.untagged != 0:
        entries.append(
            BreakdownEntry(label=UNTAGGED_LABEL, value=aggregation.untagged, synthetic=True)
        )

    if hide_empty:
        entries = [e for e in entries if e.value > 0 or e.budget > 0]
    return entries
