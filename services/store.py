"""Asynchronous, user-scoped record store consumed by the category tree engine."""

import asyncio
from abc import ABC, abstractmethod
from typing import List, Optional

from models.category import CategoryRecord
from models.transaction import TransactionRecord
from schemas.category import CategoryCreate, CategoryPatch
from services.categories import CategoryService
from services.transactions import TransactionService
from logger import get_logger

logger = get_logger()


class RecordNotFound(LookupError):
    """Raised when a record id does not exist in the user's scope."""


class RecordStore(ABC):
    """Abstract store of category and transaction records.

    Every method is a coroutine and every record is keyed by ``(user_id, id)``.
    Implementations may be backed by any storage engine.
    """

    @abstractmethod
    async def list_categories(self, user_id: str) -> List[CategoryRecord]:
        """Return all of the user's categories."""

    @abstractmethod
    async def create_category(self, user_id: str, payload: CategoryCreate) -> CategoryRecord:
        """Create a category; the store assigns its id."""

    @abstractmethod
    async def patch_category(
        self, user_id: str, category_id: int, patch: CategoryPatch
    ) -> CategoryRecord:
        """Apply a partial update. ``patch.parent_id`` is always written.

        Raises:
            RecordNotFound: If the category does not exist.
        """

    @abstractmethod
    async def list_transactions(self, user_id: str) -> List[TransactionRecord]:
        """Return all of the user's transactions."""

    @abstractmethod
    async def patch_transaction_tag(
        self, user_id: str, transaction_id: int, tag_id: Optional[int]
    ) -> None:
        """Set or clear a transaction's tag.

        Raises:
            RecordNotFound: If the transaction does not exist.
        """


class SqliteRecordStore(RecordStore):
    """RecordStore over the SQLite services.

    Blocking database calls run in a worker thread so the event loop stays
    responsive while a batch of patches is in flight.

    Args:
        categories: CategoryService instance.
        transactions: TransactionService instance.
    """

    def __init__(self, categories: CategoryService, transactions: TransactionService):
        self.categories = categories
        self.transactions = transactions

    async def list_categories(self, user_id: str) -> List[CategoryRecord]:
        return await asyncio.to_thread(self.categories.find_all, user_id)

    async def create_category(self, user_id: str, payload: CategoryCreate) -> CategoryRecord:
        record = await asyncio.to_thread(
            self.categories.create,
            user_id,
            payload.name,
            payload.type,
            payload.budget_amount,
            payload.parent_id,
        )
        logger.debug(f"Created category {record.id} ({record.name}) for {user_id}")
        return record

    async def patch_category(
        self, user_id: str, category_id: int, patch: CategoryPatch
    ) -> CategoryRecord:
        record = await asyncio.to_thread(
            self.categories.update, user_id, category_id, patch.changed_fields()
        )
        if record is None:
            raise RecordNotFound(f"Category {category_id} not found for user '{user_id}'")
        return record

    async def list_transactions(self, user_id: str) -> List[TransactionRecord]:
        return await asyncio.to_thread(self.transactions.find_all, user_id)

    async def patch_transaction_tag(
        self, user_id: str, transaction_id: int, tag_id: Optional[int]
    ) -> None:
        updated = await asyncio.to_thread(
            self.transactions.update_tag, user_id, transaction_id, tag_id
        )
        if not updated:
            raise RecordNotFound(
                f"Transaction {transaction_id} not found for user '{user_id}'"
            )
