from dataclasses import dataclass
from datetime import date
from decimal import Decimal
from typing import Optional
import hashlib


@dataclass
class TransactionRecord:
    id: Optional[int]  # assigned by the store
    tag_id: Optional[int]  # None means untagged
    date: date
    amount: Decimal  # signed: > 0 income, < 0 expense
    merchant_details: str
    checksum: Optional[str] = None  # sha256 of the raw import line

    @classmethod
    def create_with_checksum(
        cls,
        raw_data: str,
        date: date,
        amount: Decimal,
        merchant_details: str,
        tag_id: Optional[int] = None,
    ) -> "TransactionRecord":
        """Create an unsaved TransactionRecord with a checksum of its raw line."""
        checksum = hashlib.sha256(raw_data.encode("utf-8")).hexdigest()
        return cls(
            id=None,
            tag_id=tag_id,
            date=date,
            amount=amount,
            merchant_details=merchant_details,
            checksum=checksum,
        )

    @property
    def is_income(self) -> bool:
        return self.amount > 0

    @property
    def is_expense(self) -> bool:
        return self.amount < 0

    def to_dict(self) -> dict:
        """Convert transaction to a plain dictionary."""
        return {
            "id": self.id,
            "tag_id": self.tag_id,
            "date": self.date.isoformat(),
            "amount": str(self.amount),
            "merchant_details": self.merchant_details,
        }
