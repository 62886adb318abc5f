from __future__ import annotations

"""
Tree State Event Models.

Payloads emitted by the engines towards the host application and the
rendering collaborator.
"""

from dataclasses import dataclass
from typing import Any, Dict

from dirtreestate.domain.tree_models import Node, NodeKind

# Wire-level name of the selection notification
FILE_SELECT_EVENT = "file-select"


@dataclass(frozen=True)
class SelectionEvent:
    """
    Notification emitted whenever a selection succeeds.

    Attributes:
        path: Selected path.
        is_file: True when the selected node is a file.
        node_type: Kind tag of the selected node.
    """
    path: str
    is_file: bool
    node_type: NodeKind

    @classmethod
    def for_node(cls, path: str, node: Node) -> "SelectionEvent":
        return cls(path=path, is_file=node.kind is NodeKind.FILE, node_type=node.kind)

    def to_dict(self) -> Dict[str, Any]:
        return {"file": self.path, "isFile": self.is_file, "nodeType": self.node_type.value}


@dataclass(frozen=True)
class ContextMenuState:
    """Transient state of an open context menu (anchor position and target)."""
    path: str
    node: Node
    x: int = 0
    y: int = 0
