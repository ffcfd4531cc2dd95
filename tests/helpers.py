"""Helper utilities for tests."""

import asyncio
from datetime import date
from decimal import Decimal
from typing import Dict, List, Optional, Set

from cli.migrate import apply_pending
from models.category import CategoryRecord, CategoryType
from models.transaction import TransactionRecord
from schemas.category import CategoryCreate, CategoryPatch
from services.store import RecordNotFound, RecordStore


def run_migrations(db_manager) -> List[str]:
    """Apply all SQL migrations to the manager's database."""
    return apply_pending(db_manager)


def category(
    id: int,
    name: str,
    parent_id: Optional[int] = None,
    budget: str = "0",
    type: CategoryType = CategoryType.expense,
) -> CategoryRecord:
    """Build a CategoryRecord with short positional arguments."""
    return CategoryRecord(
        id=id,
        parent_id=parent_id,
        name=name,
        budget_amount=Decimal(budget),
        type=type,
    )


def txn(
    id: int,
    amount: str,
    tag_id: Optional[int] = None,
    on: date = date(2025, 3, 15),
) -> TransactionRecord:
    """Build a TransactionRecord with a signed string amount."""
    return TransactionRecord(
        id=id,
        tag_id=tag_id,
        date=on,
        amount=Decimal(amount),
        merchant_details=f"Merchant {id}",
    )


class StoreWriteError(RuntimeError):
    """Error raised by FakeRecordStore for injected write failures."""


class FakeRecordStore(RecordStore):
    """In-memory RecordStore with failure injection.

    Attributes:
        categories: Stored category records by id.
        transactions: Stored transaction records by id.
        fail_patch_ids: Category ids whose patches raise StoreWriteError.
        fail_transaction_ids: Transaction ids whose tag patches raise.
        fail_create: Make create_category raise.
        fail_list: Make list_categories raise.
        patches: Every (category_id, patch) received, in call order.
        list_calls: Number of list_categories calls.
    """

    def __init__(
        self,
        categories: Optional[List[CategoryRecord]] = None,
        transactions: Optional[List[TransactionRecord]] = None,
    ):
        self.categories: Dict[int, CategoryRecord] = {c.id: c for c in categories or []}
        self.transactions: Dict[int, TransactionRecord] = {
            t.id: t for t in transactions or []
        }
        self.fail_patch_ids: Set[int] = set()
        self.fail_transaction_ids: Set[int] = set()
        self.fail_create = False
        self.fail_list = False
        self.patches: List[tuple] = []
        self.creates: List[CategoryCreate] = []
        self.list_calls = 0

    async def list_categories(self, user_id: str) -> List[CategoryRecord]:
        await asyncio.sleep(0)
        self.list_calls += 1
        if self.fail_list:
            raise StoreWriteError("store unavailable")
        return [_copy_category(c) for c in self.categories.values()]

    async def create_category(self, user_id: str, payload: CategoryCreate) -> CategoryRecord:
        await asyncio.sleep(0)
        self.creates.append(payload)
        if self.fail_create:
            raise StoreWriteError("create rejected")
        new_id = max(self.categories, default=0) + 1
        record = CategoryRecord(
            id=new_id,
            parent_id=payload.parent_id,
            name=payload.name,
            budget_amount=payload.budget_amount,
            type=payload.type,
        )
        self.categories[new_id] = record
        return _copy_category(record)

    async def patch_category(
        self, user_id: str, category_id: int, patch: CategoryPatch
    ) -> CategoryRecord:
        await asyncio.sleep(0)
        self.patches.append((category_id, patch))
        if category_id in self.fail_patch_ids:
            raise StoreWriteError(f"patch of {category_id} rejected")
        record = self.categories.get(category_id)
        if record is None:
            raise RecordNotFound(f"Category {category_id} not found")
        for name, value in patch.changed_fields().items():
            setattr(record, name, value)
        return _copy_category(record)

    async def list_transactions(self, user_id: str) -> List[TransactionRecord]:
        await asyncio.sleep(0)
        return [
            TransactionRecord(
                id=t.id,
                tag_id=t.tag_id,
                date=t.date,
                amount=t.amount,
                merchant_details=t.merchant_details,
                checksum=t.checksum,
            )
            for t in self.transactions.values()
        ]

    async def patch_transaction_tag(
        self, user_id: str, transaction_id: int, tag_id: Optional[int]
    ) -> None:
        await asyncio.sleep(0)
        if transaction_id in self.fail_transaction_ids:
            raise StoreWriteError(f"tag of transaction {transaction_id} rejected")
        if transaction_id not in self.transactions:
            raise RecordNotFound(f"Transaction {transaction_id} not found")
        self.transactions[transaction_id].tag_id = tag_id


def _copy_category(record: CategoryRecord) -> CategoryRecord:
    return CategoryRecord(
        id=record.id,
        parent_id=record.parent_id,
        name=record.name,
        budget_amount=record.budget_amount,
        type=record.type,
    )
