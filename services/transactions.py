"""Transaction service for database operations."""

from typing import List, Optional
from datetime import date
from decimal import Decimal
from models.transaction import TransactionRecord

_TRANSACTION_SELECT_FIELDS = "id, tag_id, transaction_date, amount, merchant_details, checksum"

_TRANSACTION_INSERT_FIELDS = (
    "user_id, tag_id, transaction_date, amount, merchant_details, checksum"
)

# Automatically generate placeholders from field count
_TRANSACTION_INSERT_PLACEHOLDERS = (
    f"({', '.join(['?'] * len(_TRANSACTION_INSERT_FIELDS.split(',')))})"
)


class TransactionService:
    """Service for managing transactions within a user's scope."""

    def __init__(self, db_manager):
        """Initialize the transaction service.

        Args:
            db_manager: Database manager instance for database operations.
        """
        self.db_manager = db_manager

    def create(self, user_id: str, transaction: TransactionRecord) -> TransactionRecord:
        """Create a single transaction in the database.

        Args:
            user_id: Owner of the transaction.
            transaction: TransactionRecord to insert. Its id is ignored.

        Returns:
            The TransactionRecord with its store-assigned id.
        """
        with self.db_manager.connect() as conn:
            cursor = conn.execute(
                f"""
                INSERT INTO transactions ({_TRANSACTION_INSERT_FIELDS})
                VALUES {_TRANSACTION_INSERT_PLACEHOLDERS}
                """,
                self._to_row(user_id, transaction),
            )
            conn.commit()
            transaction.id = cursor.lastrowid

        return transaction

    def bulk_create(self, user_id: str, transactions: List[TransactionRecord]) -> int:
        """Create multiple transactions in a single database transaction.

        Transactions whose checksum already exists for the user are skipped.

        Returns:
            Number of transactions actually inserted.
        """
        if not transactions:
            return 0

        with self.db_manager.connect() as conn:
            before = conn.total_changes
            conn.executemany(
                f"""
                INSERT OR IGNORE INTO transactions ({_TRANSACTION_INSERT_FIELDS})
                VALUES {_TRANSACTION_INSERT_PLACEHOLDERS}
                """,
                [self._to_row(user_id, t) for t in transactions],
            )
            conn.commit()
            return conn.total_changes - before

    def find_all(
        self,
        user_id: str,
        start_date: Optional[date] = None,
        end_date: Optional[date] = None,
        untagged_only: bool = False,
    ) -> List[TransactionRecord]:
        """Get a user's transactions, optionally limited to a date range.

        Args:
            user_id: Owner of the transactions.
            start_date: Inclusive lower bound on the transaction date.
            end_date: Inclusive upper bound on the transaction date.
            untagged_only: Only return transactions without a tag.

        Returns:
            List of TransactionRecord objects ordered by date, then id.
        """
        query = f"SELECT {_TRANSACTION_SELECT_FIELDS} FROM transactions WHERE user_id = ?"
        params: list = [user_id]

        if start_date is not None:
            query += " AND transaction_date >= ?"
            params.append(start_date.isoformat())
        if end_date is not None:
            query += " AND transaction_date <= ?"
            params.append(end_date.isoformat())
        if untagged_only:
            query += " AND tag_id IS NULL"

        query += " ORDER BY transaction_date, id"

        with self.db_manager.connect() as conn:
            cursor = conn.execute(query, params)
            return [self._row_to_transaction(row) for row in cursor.fetchall()]

    def find(self, user_id: str, transaction_id: int) -> Optional[TransactionRecord]:
        """Get a single transaction by ID."""
        with self.db_manager.connect() as conn:
            cursor = conn.execute(
                f"SELECT {_TRANSACTION_SELECT_FIELDS} FROM transactions "
                "WHERE user_id = ? AND id = ?",
                (user_id, transaction_id),
            )
            row = cursor.fetchone()

            if row:
                return self._row_to_transaction(row)
            return None

    def update_tag(self, user_id: str, transaction_id: int, tag_id: Optional[int]) -> bool:
        """Set or clear the tag of a transaction.

        Returns:
            True if the transaction was updated, False if not found.
        """
        with self.db_manager.connect() as conn:
            cursor = conn.execute(
                "UPDATE transactions SET tag_id = ? WHERE user_id = ? AND id = ?",
                (tag_id, user_id, transaction_id),
            )
            conn.commit()
            return cursor.rowcount > 0

    def untag_category(self, user_id: str, tag_id: int) -> int:
        """Clear the tag from every transaction tagged with ``tag_id``.

        Returns:
            Number of transactions that became untagged.
        """
        with self.db_manager.connect() as conn:
            cursor = conn.execute(
                "UPDATE transactions SET tag_id = NULL WHERE user_id = ? AND tag_id = ?",
                (user_id, tag_id),
            )
            conn.commit()
            return cursor.rowcount

    def _to_row(self, user_id: str, t: TransactionRecord) -> tuple:
        return (
            user_id,
            t.tag_id,
            t.date.isoformat(),
            str(t.amount),
            t.merchant_details,
            t.checksum,
        )

    def _row_to_transaction(self, row: tuple) -> TransactionRecord:
        """Convert a database row to a TransactionRecord."""
        return TransactionRecord(
            id=row[0],
            tag_id=row[1],
            date=date.fromisoformat(row[2]),
            amount=Decimal(row[3]),
            merchant_details=row[4],
            checksum=row[5],
        )
