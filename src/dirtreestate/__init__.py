from __future__ import annotations

"""
dirtreestate: tree-state engine for interactive file/folder trees.

Tracks expansion, selection and path resolution for eager (in-memory) and
lazy (pulled on demand) trees, independently of any rendering toolkit.
"""

from dirtreestate.core.engine import LazyTreeStateEngine, TreeStateEngine, VisibleRow
from dirtreestate.core.expansion import ExpansionMode, ExpansionStore
from dirtreestate.core.index import TreeIndex, in_memory_source
from dirtreestate.core.paths import path_of, resolve, segments_of
from dirtreestate.core.selection import SelectionController
from dirtreestate.domain.config import ContextMenuItem, TreeConfig
from dirtreestate.domain.errors import (
    DetachedNode,
    FetchAbandoned,
    InvalidName,
    InvalidNode,
    NotFound,
    TreeStateError,
    UnsupportedOperation,
)
from dirtreestate.domain.events import SelectionEvent
from dirtreestate.domain.tree_models import FileNode, FolderNode, Node, NodeKind, parse_tree, tree_to_dict

__version__ = "1.0.0"

__all__ = [
    "TreeStateEngine",
    "LazyTreeStateEngine",
    "VisibleRow",
    "ExpansionMode",
    "ExpansionStore",
    "TreeIndex",
    "in_memory_source",
    "path_of",
    "resolve",
    "segments_of",
    "SelectionController",
    "ContextMenuItem",
    "TreeConfig",
    "SelectionEvent",
    "FileNode",
    "FolderNode",
    "Node",
    "NodeKind",
    "parse_tree",
    "tree_to_dict",
    "TreeStateError",
    "NotFound",
    "DetachedNode",
    "InvalidName",
    "InvalidNode",
    "UnsupportedOperation",
    "FetchAbandoned",
]
