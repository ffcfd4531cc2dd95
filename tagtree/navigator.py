"""Drill-down navigation over a category forest."""

from dataclasses import dataclass, field
from typing import List, Optional

from tagtree.builder import Forest
from tagtree.errors import InvalidDrillTarget
from tagtree.node import TreeNode

ROOT_LABEL = "All Categories"


@dataclass
class PseudoRoot:
    """Stand-in for the forest itself when the drill path is empty."""

    children: Forest
    name: str = ROOT_LABEL
    id: Optional[int] = None

    @property
    def is_leaf(self) -> bool:
        return not self.children


@dataclass
class Breadcrumb:
    """One step of the trail; pass ``index`` to ``ascend_to`` to go back to it."""

    label: str
    node_id: Optional[int]
    index: int


@dataclass
class DrillNavigator:
    """Tracks the path of node ids from the roots to the viewed node.

    Attributes:
        forest: Root nodes being navigated.
        path: Node ids from a root down to the viewed node; empty at the root view.
    """

    forest: Forest
    path: List[int] = field(default_factory=list)

    @property
    def at_root(self) -> bool:
        return not self.path

    @property
    def current_node(self):
        """The viewed node, or a PseudoRoot over the forest when the path is empty."""
        node = PseudoRoot(children=self.forest)
        for node_id in self.path:
            node = _child(node, node_id)
        return node

    @property
    def breadcrumbs(self) -> List[Breadcrumb]:
        crumbs = [Breadcrumb(label=ROOT_LABEL, node_id=None, index=0)]
        node = PseudoRoot(children=self.forest)
        for index, node_id in enumerate(self.path, start=1):
            node = _child(node, node_id)
            crumbs.append(Breadcrumb(label=node.name, node_id=node_id, index=index))
        return crumbs

    def descend(self, node_id: Optional[int]) -> TreeNode:
        """Drill into a child of the viewed node.

        Raises:
            InvalidDrillTarget: If ``node_id`` is None (a synthetic bucket), is
                not a child of the viewed node, or is a leaf.
        """
        if node_id is None:
            raise InvalidDrillTarget("Synthetic entries cannot be drilled into")

        child = _child(self.current_node, node_id, strict=False)
        if child is None:
            raise InvalidDrillTarget(f"Category {node_id} is not a child of the current view")
        if child.is_leaf:
            raise InvalidDrillTarget(f"Category {node_id} ({child.name}) has no subcategories")

        self.path.append(node_id)
        return child

    def ascend_to(self, index: int) -> None:
        """Truncate the path to ``index`` entries (0 returns to the root view).

        Raises:
            InvalidDrillTarget: If ``index`` is outside ``0..len(path)``.
        """
        if not 0 <= index <= len(self.path):
            raise InvalidDrillTarget(f"Breadcrumb index {index} is out of range")
        del self.path[index:]

    def reset(self) -> None:
        self.path.clear()

    def rebind(self, forest: Forest) -> None:
        """Switch to a rebuilt forest, keeping as much of the path as still resolves."""
        self.forest = forest
        node = PseudoRoot(children=forest)
        for depth, node_id in enumerate(self.path):
            child = _child(node, node_id, strict=False)
            if child is None or child.is_leaf:
                del self.path[depth:]
                break
            node = child


def _child(node, node_id: int, strict: bool = True) -> Optional[TreeNode]:
    for child in node.children:
        if child.id == node_id:
            return child
    if strict:
        # The path only ever holds ids that resolved when they were appended
        raise InvalidDrillTarget(f"Drill path no longer resolves at category {node_id}")
    return None
