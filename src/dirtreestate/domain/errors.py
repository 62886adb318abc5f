from __future__ import annotations

"""
Tree State Error Hierarchy.

Named failure kinds raised by the tree-state core. Every kind derives from
TreeStateError so that interface layers (CLI/GUI) can degrade gracefully
with a single except clause.
"""

from typing import Any


class TreeStateError(Exception):
    """Base class for every failure raised by the tree-state core."""


class NotFound(TreeStateError):
    """
    A path (or one of its segments) does not match any node.

    Attributes:
        path: The path that failed to resolve.
        segment: The first segment without a match, if known.
    """

    def __init__(self, path: str, segment: str = "") -> None:
        self.path = path
        self.segment = segment
        detail = f" (no match for segment '{segment}')" if segment else ""
        super().__init__(f"Path not found: '{path}'{detail}")


class DetachedNode(TreeStateError):
    """The ParentLink chain of a lazily fetched node is broken."""

    def __init__(self, node: Any) -> None:
        self.node = node
        name = getattr(node, "name", repr(node))
        super().__init__(f"Node '{name}' is not attached to the tree index")


class InvalidName(TreeStateError):
    """A node name is empty or contains the path separator."""

    def __init__(self, name: Any) -> None:
        self.name = name
        super().__init__(f"Invalid node name: {name!r}")


class InvalidNode(TreeStateError):
    """A raw node mapping cannot be ingested (unknown type, bad shape, duplicates)."""


class UnsupportedOperation(TreeStateError):
    """The operation has no meaning in the current operating mode."""


class FetchAbandoned(TreeStateError):
    """An in-flight lazy fetch resolved after its cache epoch was discarded."""
