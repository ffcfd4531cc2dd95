"""Tree node wrapping one category record."""

from dataclasses import dataclass, field
from decimal import Decimal
from typing import List, Optional

from models.category import CategoryRecord, CategoryType


@dataclass(eq=False)
class TreeNode:
    """A category plus its ordered children.

    Nodes are transient: they are rebuilt from the stored records on every
    refresh and mutated locally by edits until the next rebuild.

    Attributes:
        id: Category id.
        parent_id: Parent id as last known; normalized from position before diffing.
        name: Display name.
        budget_amount: Non-negative budget.
        type: Income or expense.
        children: Child nodes in display order.
        collapsed: Display flag, True for freshly built nodes.
    """

    id: int
    parent_id: Optional[int]
    name: str
    budget_amount: Decimal
    type: CategoryType
    children: List["TreeNode"] = field(default_factory=list)
    collapsed: bool = True

    @classmethod
    def from_record(cls, record: CategoryRecord) -> "TreeNode":
        return cls(
            id=record.id,
            parent_id=record.parent_id,
            name=record.name,
            budget_amount=record.budget_amount,
            type=record.type,
        )

    @property
    def is_leaf(self) -> bool:
        return not self.children

    def to_record(self) -> CategoryRecord:
        return CategoryRecord(
            id=self.id,
            parent_id=self.parent_id,
            name=self.name,
            budget_amount=self.budget_amount,
            type=self.type,
        )

    def __repr__(self) -> str:
        return f"<TreeNode(id={self.id}, name='{self.name}', children={len(self.children)})>"
