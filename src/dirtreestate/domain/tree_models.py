from __future__ import annotations

"""
Directory Tree Structure Data Models.

Provides the closed Folder/File variant used by every layer of the tree-state
engine, plus ingestion and serialisation of the JSON shape accepted by hosts:
`[{"name": ..., "type": "folder" | "file", "children": [...]}]`.

Sibling names are expected to be unique. The ingestion step does not enforce
this unless explicitly asked to; with duplicate siblings, path resolution is
undefined (the first match wins).
"""

from dataclasses import dataclass
from enum import Enum
from typing import Any, Dict, Iterable, List, Sequence, Set, Tuple, Union

from dirtreestate.domain.errors import InvalidName, InvalidNode

PATH_SEPARATOR = "/"

# -----------------------------------------------------------------------------
# STRUCTURAL COMPONENTS
# -----------------------------------------------------------------------------

class NodeKind(str, Enum):
    """Closed set of node kinds. The value is the wire-level `type` tag."""
    FOLDER = "folder"
    FILE = "file"


@dataclass(frozen=True)
class FileNode:
    """
    Represents a leaf entry (file) in the directory tree.

    Attributes:
        name: Segment name, unique among its siblings.
    """
    name: str

    @property
    def kind(self) -> NodeKind:
        return NodeKind.FILE


@dataclass(frozen=True)
class FolderNode:
    """
    Represents a container entry (folder) in the directory tree.

    Attributes:
        name: Segment name, unique among its siblings.
        children: Ordered child nodes. Ignored in lazy mode, where children
            are pulled from the data source instead.
    """
    name: str
    children: Tuple["Node", ...] = ()

    @property
    def kind(self) -> NodeKind:
        return NodeKind.FOLDER


Node = Union[FolderNode, FileNode]


def is_folder(node: Node) -> bool:
    """Return True when the node is a FolderNode."""
    return isinstance(node, FolderNode)


def validate_name(name: Any) -> str:
    """
    Reject names that cannot take part in a slash-delimited path.

    Raises:
        InvalidName: If the name is not a non-empty string free of '/'.
    """
    if not isinstance(name, str) or not name or PATH_SEPARATOR in name:
        raise InvalidName(name)
    return name

# -----------------------------------------------------------------------------
# INGESTION AND SERIALISATION
# -----------------------------------------------------------------------------

def parse_tree(data: Iterable[Dict[str, Any]], *, check_unique: bool = False) -> Tuple[Node, ...]:
    """
    Convert the raw JSON shape into immutable Node instances.

    Args:
        data: Sequence of node mappings for the root level.
        check_unique: Reject duplicate sibling names instead of leaving
            resolution undefined.

    Returns:
        Tuple[Node, ...]: Root-level nodes in input order.

    Raises:
        InvalidName: A node name is empty or contains '/'.
        InvalidNode: A mapping is malformed or has an unknown type.
    """
    if isinstance(data, (str, bytes)) or not isinstance(data, Iterable):
        raise InvalidNode(f"Expected a list of nodes, got {type(data).__name__}")
    return tuple(_parse_level(data, check_unique, parent_path=""))


def node_from_dict(raw: Dict[str, Any], *, check_unique: bool = False) -> Node:
    """Convert a single node mapping (and its subtree) into a Node."""
    return _parse_node(raw, check_unique, parent_path="")


def tree_to_dict(nodes: Sequence[Node]) -> List[Dict[str, Any]]:
    """Serialise Node instances back into the raw JSON shape."""
    out: List[Dict[str, Any]] = []
    for node in nodes:
        if isinstance(node, FolderNode):
            out.append({
                "name": node.name,
                "type": NodeKind.FOLDER.value,
                "children": tree_to_dict(node.children),
            })
        else:
            out.append({"name": node.name, "type": NodeKind.FILE.value})
    return out

# -----------------------------------------------------------------------------
# PRIVATE HELPERS
# -----------------------------------------------------------------------------

def _parse_level(items: Iterable[Any], check_unique: bool, parent_path: str) -> List[Node]:
    nodes: List[Node] = []
    seen: Set[str] = set()
    for raw in items:
        node = _parse_node(raw, check_unique, parent_path)
        if check_unique:
            if node.name in seen:
                where = parent_path or "<root>"
                raise InvalidNode(f"Duplicate sibling name '{node.name}' under {where}")
            seen.add(node.name)
        nodes.append(node)
    return nodes


def _parse_node(raw: Any, check_unique: bool, parent_path: str) -> Node:
    if not isinstance(raw, dict):
        raise InvalidNode(f"Expected a node mapping, got {type(raw).__name__}")

    name = validate_name(raw.get("name"))
    children = raw.get("children")
    tag = raw.get("type")

    # Untagged nodes are folders when they carry children
    if tag is None:
        tag = NodeKind.FOLDER.value if children is not None else NodeKind.FILE.value

    if tag == NodeKind.FILE.value:
        return FileNode(name=name)

    if tag == NodeKind.FOLDER.value:
        if children is None:
            children = []
        if not isinstance(children, list):
            raise InvalidNode(f"Children of '{name}' must be a list")
        path = f"{parent_path}{PATH_SEPARATOR}{name}" if parent_path else name
        return FolderNode(name=name, children=tuple(_parse_level(children, check_unique, path)))

    raise InvalidNode(f"Unknown node type {tag!r} for '{name}'")
