"""Category model for budget categories ("tags")."""

from dataclasses import dataclass
from decimal import Decimal
from enum import Enum
from typing import Optional


class CategoryType(str, Enum):
    income = "income"
    expense = "expense"


@dataclass
class CategoryRecord:
    """Represents a user-defined budget category.

    Income and expense categories live in separate hierarchies; a category's
    type is fixed when it is created.

    Attributes:
        id: Unique identifier within the user's scope (assigned by the store).
        parent_id: Parent category ID, or None for a root-level category.
        name: Display name.
        budget_amount: Budget as a non-negative magnitude.
        type: Income or expense.
    """

    id: int
    parent_id: Optional[int]
    name: str
    budget_amount: Decimal
    type: CategoryType

    def to_dict(self) -> dict:
        """Convert category to a plain dictionary."""
        return {
            "id": self.id,
            "parent_id": self.parent_id,
            "name": self.name,
            "budget_amount": str(self.budget_amount),
            "type": self.type.value,
        }
