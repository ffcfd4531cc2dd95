"""Failures reported by the category tree engine."""

from typing import Dict, List, Optional


class TagTreeError(Exception):
    """Base class for category tree errors."""


class ValidationError(TagTreeError):
    """A local edit was rejected before touching the tree or the store."""


class InvalidDrillTarget(TagTreeError):
    """A drill transition was rejected; the drill path is unchanged."""


class NodeNotFound(TagTreeError):
    """An edit addressed a node id that is not in the active forest."""

    def __init__(self, node_id: int):
        super().__init__(f"Category {node_id} not found")
        self.node_id = node_id


class PersistenceFailure(TagTreeError):
    """One or more store writes failed and local state was resynced.

    Attributes:
        failed_ids: Ids of the records whose write failed.
        errors: Error raised for each failed id.
    """

    def __init__(
        self,
        message: str,
        failed_ids: Optional[List[int]] = None,
        errors: Optional[Dict[int, BaseException]] = None,
    ):
        super().__init__(message)
        self.message = message
        self.failed_ids = failed_ids or []
        self.errors = errors or {}
