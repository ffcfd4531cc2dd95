"""Push local tree edits to the record store."""

import asyncio
import logging
from dataclasses import dataclass, field
from decimal import Decimal
from typing import Dict, List, Optional, Sequence

from schemas.category import CategoryPatch
from services.store import RecordStore
from tagtree.node import TreeNode
from tagtree.restructure import ParentChange

logger = logging.getLogger(__name__)


@dataclass
class PersistResult:
    """Outcome of a batch of store writes.

    Attributes:
        succeeded: Ids whose write was accepted.
        errors: Error raised for each id whose write failed.
    """

    succeeded: List[int] = field(default_factory=list)
    errors: Dict[int, BaseException] = field(default_factory=dict)

    @property
    def ok(self) -> bool:
        return not self.errors

    @property
    def failed(self) -> List[int]:
        return list(self.errors)


class DiffPersister:
    """Writes parent changes and field edits of one user's categories.

    Args:
        store: Record store to write to.
        user_id: Scope of every write.
    """

    def __init__(self, store: RecordStore, user_id: str):
        self.store = store
        self.user_id = user_id

    async def persist_parent_changes(self, changes: Sequence[ParentChange]) -> PersistResult:
        """Patch the parent of every changed node, all at once.

        Each patch carries only the parent id. Every patch is awaited even if
        others fail; the result lists which ones did.
        """
        result = PersistResult()
        if not changes:
            return result

        outcomes = await asyncio.gather(
            *(
                self.store.patch_category(
                    self.user_id, change.node_id, CategoryPatch(parent_id=change.parent_id)
                )
                for change in changes
            ),
            return_exceptions=True,
        )

        for change, outcome in zip(changes, outcomes):
            if isinstance(outcome, Exception):
                logger.error(
                    f"Failed to move category {change.node_id} under "
                    f"{change.parent_id}: {outcome}"
                )
                result.errors[change.node_id] = outcome
            elif isinstance(outcome, BaseException):
                # Cancellation and interpreter exits are not write failures
                raise outcome
            else:
                result.succeeded.append(change.node_id)

        logger.info(
            f"Saved {len(result.succeeded)}/{len(changes)} parent change(s) "
            f"for {self.user_id}"
        )
        return result

    async def persist_fields(
        self,
        node: TreeNode,
        name: Optional[str] = None,
        budget_amount: Optional[Decimal] = None,
    ) -> PersistResult:
        """Patch the name and/or budget of one node.

        The node's current parent id is resupplied with the patch.
        """
        result = PersistResult()
        patch = CategoryPatch(parent_id=node.parent_id, name=name, budget_amount=budget_amount)
        try:
            await self.store.patch_category(self.user_id, node.id, patch)
        except Exception as e:
            logger.error(f"Failed to update category {node.id}: {e}")
            result.errors[node.id] = e
        else:
            result.succeeded.append(node.id)
        return result
