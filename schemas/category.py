"""Request payloads accepted by the record store for categories."""

from decimal import Decimal
from typing import Optional

from pydantic import BaseModel, field_validator

from models.category import CategoryType


def _clean_name(value: Optional[str]) -> Optional[str]:
    if value is None:
        return None
    value = value.strip()
    if not value:
        raise ValueError("Category name cannot be empty")
    return value


def _clean_budget(value: Optional[Decimal]) -> Optional[Decimal]:
    if value is None:
        return None
    if not value.is_finite():
        raise ValueError("Budget amount must be a finite number")
    # Budgets are stored as magnitudes regardless of category type
    return abs(value)


class CategoryCreate(BaseModel):
    """Fields for creating a category."""

    parent_id: Optional[int] = None
    name: str
    budget_amount: Decimal = Decimal("0")
    type: CategoryType

    clean_name = field_validator("name")(_clean_name)
    clean_budget_amount = field_validator("budget_amount")(_clean_budget)


class CategoryPatch(BaseModel):
    """Partial update of a category.

    ``parent_id`` has no default: every patch restates the parent, and None
    means the category becomes a root.
    """

    parent_id: Optional[int]
    name: Optional[str] = None
    budget_amount: Optional[Decimal] = None
    type: Optional[CategoryType] = None

    clean_name = field_validator("name")(_clean_name)
    clean_budget_amount = field_validator("budget_amount")(_clean_budget)

    def changed_fields(self) -> dict:
        """Fields to write: always parent_id, plus every field that was given."""
        fields = {"parent_id": self.parent_id}
        for name in ("name", "budget_amount", "type"):
            value = getattr(self, name)
            if value is not None:
                fields[name] = value
        return fields
