from __future__ import annotations

"""
Path Resolution.

Pure functions mapping between a node's position in the hierarchy and its
canonical slash-delimited path. Names containing '/' cannot be represented;
such names are rejected at ingestion rather than escaped.
"""

from typing import Iterator, List, Sequence, Tuple

from dirtreestate.domain.errors import NotFound
from dirtreestate.domain.tree_models import PATH_SEPARATOR, FolderNode, Node

# -----------------------------------------------------------------------------
# PUBLIC API
# -----------------------------------------------------------------------------

def path_of(ancestor_names: Sequence[str], node_name: str) -> str:
    """
    Join ancestor names and the node name into a path.

    Args:
        ancestor_names: Names from the root-level folder down to the parent.
        node_name: Name of the node itself.

    Returns:
        str: e.g. 'src/app/main.ts'; the bare name for root-level nodes.
    """
    return PATH_SEPARATOR.join([*ancestor_names, node_name])


def join_path(parent_path: str, name: str) -> str:
    """Append one segment to an existing path ('' is the root)."""
    return f"{parent_path}{PATH_SEPARATOR}{name}" if parent_path else name


def segments_of(path: str) -> List[str]:
    """Split a path into its segments. Inverse of path_of."""
    return path.split(PATH_SEPARATOR)


def ancestor_paths(path: str) -> List[str]:
    """
    Rebuild every proper-ancestor path of `path`, outermost first.

    'a/b/c.ts' -> ['a', 'a/b']
    """
    parts = segments_of(path)
    out: List[str] = []
    current = ""
    for part in parts[:-1]:
        current = join_path(current, part)
        out.append(current)
    return out


def resolve(roots: Sequence[Node], path: str) -> Node:
    """
    Walk the tree segment by segment and return the node at `path`.

    With duplicate sibling names the first match wins; that situation is
    undefined and not detected here.

    Raises:
        NotFound: A segment has no match, or a non-terminal segment names a file.
    """
    if not path:
        raise NotFound(path)

    level: Sequence[Node] = roots
    parts = segments_of(path)
    node: Node
    for i, part in enumerate(parts):
        match = _find_child(level, part)
        if match is None:
            raise NotFound(path, part)
        node = match
        if i < len(parts) - 1:
            if not isinstance(node, FolderNode):
                raise NotFound(path, parts[i + 1])
            level = node.children
    return node


def iter_nodes(roots: Sequence[Node], parent_path: str = "") -> Iterator[Tuple[str, Node]]:
    """Depth-first (path, node) pairs for the whole tree, in sibling order."""
    for node in roots:
        path = join_path(parent_path, node.name)
        yield path, node
        if isinstance(node, FolderNode):
            yield from iter_nodes(node.children, path)


def iter_folder_paths(roots: Sequence[Node]) -> Iterator[str]:
    """Paths of every folder reachable from `roots`."""
    for path, node in iter_nodes(roots):
        if isinstance(node, FolderNode):
            yield path

# -----------------------------------------------------------------------------
# PRIVATE HELPERS
# -----------------------------------------------------------------------------

def _find_child(level: Sequence[Node], name: str):
    for candidate in level:
        if candidate.name == name:
            return candidate
    return None
