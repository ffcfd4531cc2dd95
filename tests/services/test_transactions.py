from datetime import date
from decimal import Decimal

from models.category import CategoryType
from models.transaction import TransactionRecord

USER = "test-user"


def _transaction(raw, amount, on=date(2025, 3, 15), tag_id=None):
    return TransactionRecord.create_with_checksum(
        raw_data=raw,
        date=on,
        amount=Decimal(amount),
        merchant_details=f"Merchant for {raw}",
        tag_id=tag_id,
    )


class TestTransactionService:
    """Tests for TransactionService."""

    def test_create_assigns_id(self, services):
        """Test creating a transaction sets its id."""
        created = services.transactions.create(USER, _transaction("a", "-12.50"))

        assert created.id is not None
        found = services.transactions.find(USER, created.id)
        assert found.amount == Decimal("-12.50")
        assert found.date == date(2025, 3, 15)
        assert found.tag_id is None

    def test_bulk_create_skips_duplicates(self, services):
        """Test transactions with a known checksum are ignored."""
        services.transactions.bulk_create(USER, [_transaction("a", "-1")])

        inserted = services.transactions.bulk_create(
            USER, [_transaction("a", "-1"), _transaction("b", "-2")]
        )

        assert inserted == 1
        assert len(services.transactions.find_all(USER)) == 2

    def test_bulk_create_empty(self, services):
        """Test an empty batch inserts nothing."""
        assert services.transactions.bulk_create(USER, []) == 0

    def test_same_checksum_for_different_users(self, services):
        """Test duplicate detection is per user."""
        services.transactions.bulk_create(USER, [_transaction("a", "-1")])

        inserted = services.transactions.bulk_create("other", [_transaction("a", "-1")])

        assert inserted == 1

    def test_find_all_date_range_and_order(self, services):
        """Test date bounds are inclusive and results are ordered by date."""
        services.transactions.bulk_create(
            USER,
            [
                _transaction("c", "-3", on=date(2025, 3, 1)),
                _transaction("a", "-1", on=date(2025, 1, 31)),
                _transaction("b", "-2", on=date(2025, 2, 1)),
            ],
        )

        found = services.transactions.find_all(
            USER, start_date=date(2025, 2, 1), end_date=date(2025, 3, 1)
        )

        assert [t.amount for t in found] == [Decimal("-2"), Decimal("-3")]

    def test_find_all_untagged_only(self, services):
        """Test filtering to untagged transactions."""
        food = services.categories.create(USER, "Food", CategoryType.expense)
        services.transactions.bulk_create(
            USER, [_transaction("a", "-1", tag_id=food.id), _transaction("b", "-2")]
        )

        found = services.transactions.find_all(USER, untagged_only=True)

        assert [t.amount for t in found] == [Decimal("-2")]

    def test_update_tag(self, services):
        """Test setting and clearing a transaction's tag."""
        food = services.categories.create(USER, "Food", CategoryType.expense)
        created = services.transactions.create(USER, _transaction("a", "-1"))

        assert services.transactions.update_tag(USER, created.id, food.id) is True
        assert services.transactions.find(USER, created.id).tag_id == food.id

        assert services.transactions.update_tag(USER, created.id, None) is True
        assert services.transactions.find(USER, created.id).tag_id is None

    def test_update_tag_missing(self, services):
        """Test tagging a non-existent transaction returns False."""
        assert services.transactions.update_tag(USER, 9999, None) is False

    def test_untag_category(self, services):
        """Test clearing a tag from all of its transactions."""
        food = services.categories.create(USER, "Food", CategoryType.expense)
        services.transactions.bulk_create(
            USER,
            [
                _transaction("a", "-1", tag_id=food.id),
                _transaction("b", "-2", tag_id=food.id),
                _transaction("c", "-3"),
            ],
        )

        count = services.transactions.untag_category(USER, food.id)

        assert count == 2
        assert len(services.transactions.find_all(USER, untagged_only=True)) == 3


class TestTransactionRecord:
    """Tests for the TransactionRecord model."""

    def test_checksum_is_deterministic(self):
        """Test the checksum depends only on the raw line."""
        first = _transaction("03/01/2025,-4.50,*,,COFFEE", "-4.50")
        second = _transaction("03/01/2025,-4.50,*,,COFFEE", "-4.50")

        assert first.checksum == second.checksum
        assert len(first.checksum) == 64

    def test_sign_helpers(self):
        """Test is_income and is_expense follow the amount's sign."""
        assert _transaction("a", "10").is_income is True
        assert _transaction("b", "-10").is_expense is True
        assert _transaction("c", "0").is_income is False
