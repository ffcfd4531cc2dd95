"""Category service for database operations."""

from decimal import Decimal
from typing import List, Optional
from models.category import CategoryRecord, CategoryType

_CATEGORY_SELECT_FIELDS = "id, parent_id, name, budget_amount, category_type"

# Maps CategoryRecord attribute names to their columns
_UPDATABLE_COLUMNS = {
    "parent_id": "parent_id",
    "name": "name",
    "budget_amount": "budget_amount",
    "type": "category_type",
}


class CategoryService:
    """Service for managing categories within a user's scope."""

    def __init__(self, db_manager):
        """Initialize the category service.

        Args:
            db_manager: Database manager instance for database operations.
        """
        self.db_manager = db_manager

    def find_all(self, user_id: str) -> List[CategoryRecord]:
        """Get all categories of a user.

        Args:
            user_id: Owner of the categories.

        Returns:
            List of CategoryRecord objects in creation order.
        """
        with self.db_manager.connect() as conn:
            cursor = conn.execute(
                f"SELECT {_CATEGORY_SELECT_FIELDS} FROM categories "
                "WHERE user_id = ? ORDER BY id",
                (user_id,),
            )
            return [self._row_to_category(row) for row in cursor.fetchall()]

    def find(self, user_id: str, category_id: int) -> Optional[CategoryRecord]:
        """Get a single category by ID.

        Returns:
            CategoryRecord if found in the user's scope, None otherwise.
        """
        with self.db_manager.connect() as conn:
            cursor = conn.execute(
                f"SELECT {_CATEGORY_SELECT_FIELDS} FROM categories "
                "WHERE user_id = ? AND id = ?",
                (user_id, category_id),
            )
            row = cursor.fetchone()

            if row:
                return self._row_to_category(row)
            return None

    def find_by_name(
        self,
        user_id: str,
        name: str,
        parent_id: Optional[int] = None,
    ) -> Optional[CategoryRecord]:
        """Get a category by name under a given parent (None for roots)."""
        with self.db_manager.connect() as conn:
            cursor = conn.execute(
                f"SELECT {_CATEGORY_SELECT_FIELDS} FROM categories "
                "WHERE user_id = ? AND name = ? AND parent_id IS ? ORDER BY id",
                (user_id, name, parent_id),
            )
            row = cursor.fetchone()

            if row:
                return self._row_to_category(row)
            return None

    def create(
        self,
        user_id: str,
        name: str,
        category_type: CategoryType,
        budget_amount: Decimal = Decimal("0"),
        parent_id: Optional[int] = None,
    ) -> CategoryRecord:
        """Create a new category.

        Args:
            user_id: Owner of the category.
            name: Category name.
            category_type: Income or expense.
            budget_amount: Non-negative budget.
            parent_id: Optional parent category ID.

        Returns:
            The created CategoryRecord with id populated.
        """
        with self.db_manager.connect() as conn:
            cursor = conn.execute(
                """
                INSERT INTO categories (user_id, parent_id, name, budget_amount, category_type)
                VALUES (?, ?, ?, ?, ?)
                """,
                (user_id, parent_id, name, str(budget_amount), category_type.value),
            )
            conn.commit()

            return CategoryRecord(
                id=cursor.lastrowid,
                parent_id=parent_id,
                name=name,
                budget_amount=budget_amount,
                type=category_type,
            )

    def update(self, user_id: str, category_id: int, fields: dict) -> Optional[CategoryRecord]:
        """Update the given fields of a category.

        Args:
            user_id: Owner of the category.
            category_id: The category ID to update.
            fields: Mapping of CategoryRecord attribute names to new values.
                    Supported: 'parent_id', 'name', 'budget_amount', 'type'.

        Returns:
            The updated CategoryRecord, or None if it does not exist.

        Raises:
            ValueError: If unsupported field names are provided.
        """
        invalid_fields = set(fields) - set(_UPDATABLE_COLUMNS)
        if invalid_fields:
            raise ValueError(f"Unsupported field names: {invalid_fields}")

        if fields:
            set_clause = ", ".join(f"{_UPDATABLE_COLUMNS[name]} = ?" for name in fields)
            values = [self._to_column_value(name, value) for name, value in fields.items()]

            with self.db_manager.connect() as conn:
                conn.execute(
                    f"UPDATE categories SET {set_clause} WHERE user_id = ? AND id = ?",
                    (*values, user_id, category_id),
                )
                conn.commit()

        return self.find(user_id, category_id)

    def delete(self, user_id: str, category_id: int) -> bool:
        """Delete a category by ID.

        Returns:
            True if category was deleted, False if not found.
        """
        with self.db_manager.connect() as conn:
            cursor = conn.execute(
                "DELETE FROM categories WHERE user_id = ? AND id = ?",
                (user_id, category_id),
            )
            conn.commit()
            return cursor.rowcount > 0

    def _to_column_value(self, name: str, value):
        if name == "budget_amount":
            return str(value)
        if name == "type":
            return CategoryType(value).value
        return value

    def _row_to_category(self, row: tuple) -> CategoryRecord:
        """Convert a database row to a CategoryRecord."""
        return CategoryRecord(
            id=row[0],
            parent_id=row[1],
            name=row[2],
            budget_amount=Decimal(row[3]),
            type=CategoryType(row[4]),
        )
