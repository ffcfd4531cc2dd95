"""Budget session: the operations a front-end calls on the category tree.

Edits follow an optimistic model. The local forest changes first, the store
write follows, and if the store rejects anything the session reloads every
record from the store (``resync``) so local state never drifts from what was
accepted. Every operation returns an ``OperationResult`` holding the updated
view and, on failure, the error.
"""

import asyncio
from dataclasses import dataclass, field
from datetime import date
from decimal import Decimal
from typing import Dict, List, Optional

from models.category import CategoryRecord
from models.transaction import TransactionRecord
from schemas.category import CategoryCreate
from services.store import RecordStore
from tagtree.aggregator import (
    ZERO,
    Aggregation,
    BreakdownEntry,
    Mode,
    aggregate,
    breakdown,
)
from tagtree.builder import Forest, build_forests, find_node
from tagtree.errors import (
    InvalidDrillTarget,
    NodeNotFound,
    PersistenceFailure,
    TagTreeError,
    ValidationError,
)
from tagtree.navigator import Breadcrumb, DrillNavigator
from tagtree.node import TreeNode
from tagtree.persister import DiffPersister, PersistResult
from tagtree.restructure import (
    insert_root,
    move_subtree,
    propose_restructure,
    rebudget_node,
    rename_node,
    validate_budget,
    validate_name,
)
from logger import get_logger

logger = get_logger()

DEFAULT_NAMES = {
    Mode.income: "New Income Tag",
    Mode.expense: "New Expense Tag",
}


@dataclass
class ViewModel:
    """What the presentation layer renders for the current mode and drill path."""

    mode: Mode
    title: str
    path: List[int]
    breadcrumbs: List[Breadcrumb]
    entries: List[BreakdownEntry]
    total: Decimal
    untagged_total: Decimal
    forest: Forest


@dataclass
class OperationResult:
    view: ViewModel
    error: Optional[TagTreeError] = None
    message: str = ""

    @property
    def ok(self) -> bool:
        return self.error is None


@dataclass
class _ModeState:
    forest: Forest = field(default_factory=list)
    navigator: DrillNavigator = None

    def __post_init__(self):
        if self.navigator is None:
            self.navigator = DrillNavigator(self.forest)

    def replace_forest(self, forest: Forest) -> None:
        self.forest = forest
        self.navigator.rebind(forest)


class BudgetSession:
    """Holds one user's income and expense forests and the active mode.

    Args:
        store: Record store holding the user's categories and transactions.
        user_id: The user's scope in the store.
        mode: Mode shown first.
        since: When set, only transactions on or after this date are aggregated.
    """

    def __init__(
        self,
        store: RecordStore,
        user_id: str,
        mode: Mode = Mode.expense,
        since: Optional[date] = None,
    ):
        self.store = store
        self.user_id = user_id
        self.mode = Mode(mode)
        self.since = since
        self.persister = DiffPersister(store, user_id)
        self.records: List[CategoryRecord] = []
        self.transactions: List[TransactionRecord] = []
        self._states: Dict[Mode, _ModeState] = {m: _ModeState() for m in Mode}

    # -- loading -----------------------------------------------------------

    async def load(self) -> OperationResult:
        """Fetch categories and transactions and build both forests."""
        self.records, self.transactions = await asyncio.gather(
            self.store.list_categories(self.user_id),
            self.store.list_transactions(self.user_id),
        )
        income, expense = build_forests(self.records)
        self._states[Mode.income].replace_forest(income)
        self._states[Mode.expense].replace_forest(expense)
        logger.debug(
            f"Loaded {len(self.records)} categories and "
            f"{len(self.transactions)} transactions for {self.user_id}"
        )
        return self._result()

    async def resync(self) -> OperationResult:
        """Discard local edits and rebuild from the store."""
        logger.info(f"Resyncing categories for {self.user_id} from the store")
        return await self.load()

    # -- reading -----------------------------------------------------------

    @property
    def forest(self) -> Forest:
        """Forest of the active mode."""
        return self._states[self.mode].forest

    @property
    def navigator(self) -> DrillNavigator:
        return self._states[self.mode].navigator

    def build_forest(self, mode: Optional[Mode] = None) -> Forest:
        """Current forest of ``mode`` (the active mode by default)."""
        return self._states[Mode(mode) if mode else self.mode].forest

    def visible_transactions(self) -> List[TransactionRecord]:
        if self.since is None:
            return list(self.transactions)
        return [t for t in self.transactions if t.date >= self.since]

    def aggregate(self, mode: Optional[Mode] = None) -> Aggregation:
        mode = Mode(mode) if mode else self.mode
        return aggregate(self._states[mode].forest, self.visible_transactions(), mode)

    def view(self, hide_empty: bool = False) -> ViewModel:
        """Build the view model of the active mode at the current drill path."""
        aggregation = self.aggregate()
        navigator = self.navigator
        current = navigator.current_node

        if navigator.at_root:
            total = aggregation.total
        else:
            total = aggregation.recursive_total(current.id)

        return ViewModel(
            mode=self.mode,
            title=current.name,
            path=list(navigator.path),
            breadcrumbs=navigator.breadcrumbs,
            entries=breakdown(current, aggregation, navigator.at_root, hide_empty=hide_empty),
            total=total,
            untagged_total=aggregation.untagged,
            forest=self.forest,
        )

    # -- navigation --------------------------------------------------------

    def set_mode(self, mode: Mode) -> OperationResult:
        """Switch hierarchy. The drill path always restarts at the root view."""
        self.mode = Mode(mode)
        self.navigator.reset()
        return self._result()

    def descend(self, node_id: Optional[int]) -> OperationResult:
        try:
            self.navigator.descend(node_id)
        except InvalidDrillTarget as e:
            return self._result(error=e)
        return self._result()

    def ascend_to(self, index: int) -> OperationResult:
        try:
            self.navigator.ascend_to(index)
        except InvalidDrillTarget as e:
            return self._result(error=e)
        return self._result()

    # -- edits -------------------------------------------------------------

    async def propose_restructure(self, proposed: Forest) -> OperationResult:
        """Adopt a reshaped forest and save the parent edges that changed.

        ``proposed`` holds the same nodes as the active forest, such as the
        output of a drag-and-drop editor or ``move_subtree``. It may also be
        the active forest itself after an in-place edit. A proposal that adds
        or drops nodes is rejected before anything changes.
        """
        try:
            result = propose_restructure(self.forest, proposed)
        except ValidationError as e:
            return self._result(error=e)

        self._states[self.mode].replace_forest(result.forest)

        if not result.changes:
            return self._result()

        persisted = await self.persister.persist_parent_changes(result.changes)
        if not persisted.ok:
            return await self._fail(
                persisted, "Some moves failed to save. Categories were reloaded from the store."
            )
        return self._result(message="Saved.")

    async def move_node(
        self,
        node_id: int,
        new_parent_id: Optional[int],
        index: Optional[int] = None,
    ) -> OperationResult:
        """Move a node under another node (None for root) and save the change."""
        try:
            proposed = move_subtree(self.forest, node_id, new_parent_id, index)
        except (ValidationError, NodeNotFound) as e:
            return self._result(error=e)
        return await self.propose_restructure(proposed)

    async def rename_node(self, node_id: int, name: str) -> OperationResult:
        try:
            trimmed = validate_name(name)
            node = rename_node(self.forest, node_id, trimmed)
        except (ValidationError, NodeNotFound) as e:
            return self._result(error=e)

        persisted = await self.persister.persist_fields(node, name=trimmed)
        if not persisted.ok:
            return await self._fail(persisted, "Rename failed to save.")
        return self._result(message="Updated.")

    async def rebudget_node(self, node_id, amount) -> OperationResult:
        try:
            value = validate_budget(amount)
            node = rebudget_node(self.forest, node_id, value)
        except (ValidationError, NodeNotFound) as e:
            return self._result(error=e)

        persisted = await self.persister.persist_fields(node, budget_amount=value)
        if not persisted.ok:
            return await self._fail(persisted, "Budget change failed to save.")
        return self._result(message="Updated.")

    async def create_root_node(
        self,
        name: Optional[str] = None,
        budget_amount=ZERO,
    ) -> OperationResult:
        """Create a category of the active mode's type at the front of the roots.

        The store assigns the id, so the category is created there first and
        inserted locally once it exists.
        """
        try:
            record = await self._create_record(name, budget_amount, parent_id=None)
        except TagTreeError as e:
            return self._result(error=e)

        insert_root(self.forest, TreeNode.from_record(record))
        return self._result(message=f"Created '{record.name}'.")

    async def create_child_node(
        self,
        parent_id: int,
        name: Optional[str] = None,
        budget_amount=ZERO,
    ) -> OperationResult:
        """Create a category as the last child of ``parent_id`` in one write.

        The parent must belong to the active forest, so a child always shares
        its parent's type.
        """
        parent = find_node(self.forest, parent_id)
        if parent is None:
            return self._result(error=NodeNotFound(parent_id))
        try:
            record = await self._create_record(name, budget_amount, parent_id=parent_id)
        except TagTreeError as e:
            return self._result(error=e)

        parent.children.append(TreeNode.from_record(record))
        return self._result(message=f"Created '{record.name}'.")

    async def _create_record(
        self, name: Optional[str], budget_amount, parent_id: Optional[int]
    ) -> CategoryRecord:
        trimmed = validate_name(name or DEFAULT_NAMES[self.mode])
        value = validate_budget(budget_amount)

        payload = CategoryCreate(
            parent_id=parent_id,
            name=trimmed,
            budget_amount=value,
            type=self.mode.category_type,
        )
        try:
            record = await self.store.create_category(self.user_id, payload)
        except Exception as e:
            logger.error(f"Failed to create category '{trimmed}': {e}")
            raise PersistenceFailure(f"Create failed: {e}") from e

        self.records.append(record)
        return record

    async def tag_transaction(
        self, transaction_id: int, tag_id: Optional[int]
    ) -> OperationResult:
        """Assign a transaction to a category (None to untag it)."""
        txn = next((t for t in self.transactions if t.id == transaction_id), None)
        if txn is None:
            return self._result(error=ValidationError(f"Transaction {transaction_id} not found"))
        if tag_id is not None and not any(
            find_node(state.forest, tag_id) for state in self._states.values()
        ):
            return self._result(error=NodeNotFound(tag_id))

        txn.tag_id = tag_id
        try:
            await self.store.patch_transaction_tag(self.user_id, transaction_id, tag_id)
        except Exception as e:
            logger.error(f"Failed to tag transaction {transaction_id}: {e}")
            failed = PersistResult(errors={transaction_id: e})
            return await self._fail(failed, "Failed to update transaction tag.")
        return self._result(message="Transaction tag updated.")

    # -- helpers -----------------------------------------------------------

    async def _fail(self, persisted: PersistResult, message: str) -> OperationResult:
        try:
            await self.resync()
        except Exception as e:
            logger.error(f"Resync after failed save also failed: {e}")
            message = f"{message} Reload failed, refresh to re-sync."
        error = PersistenceFailure(message, persisted.failed, persisted.errors)
        return self._result(error=error)

    def _result(self, error: Optional[TagTreeError] = None, message: str = "") -> OperationResult:
        if error is not None and not message:
            message = str(error)
        return OperationResult(view=self.view(), error=error, message=message)
