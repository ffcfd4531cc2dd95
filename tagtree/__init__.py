"""Category tree engine: build, aggregate, navigate and restructure budget categories."""

from tagtree.aggregator import Aggregation, BreakdownEntry, Mode, aggregate, breakdown
from tagtree.builder import build_forest, build_forests, find_node, flatten_parents
from tagtree.errors import (
    InvalidDrillTarget,
    NodeNotFound,
    PersistenceFailure,
    TagTreeError,
    ValidationError,
)
from tagtree.navigator import DrillNavigator
from tagtree.node import TreeNode
from tagtree.persister import DiffPersister, PersistResult
from tagtree.restructure import ParentChange, move_subtree, propose_restructure
from tagtree.session import BudgetSession, OperationResult, ViewModel

__all__ = [
    "Aggregation",
    "BreakdownEntry",
    "BudgetSession",
    "DiffPersister",
    "DrillNavigator",
    "InvalidDrillTarget",
    "Mode",
    "NodeNotFound",
    "OperationResult",
    "ParentChange",
    "PersistResult",
    "PersistenceFailure",
    "TagTreeError",
    "TreeNode",
    "ValidationError",
    "ViewModel",
    "aggregate",
    "breakdown",
    "build_forest",
    "build_forests",
    "find_node",
    "flatten_parents",
    "move_subtree",
    "propose_restructure",
]
