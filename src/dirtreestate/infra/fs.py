from __future__ import annotations

"""
FileSystem Infrastructure Layer.

Bridges real directories into the tree-state engine: an eager scanner that
materialises a whole directory as immutable nodes, and a pull-based data
source that lists one directory level per call for lazy mode. Also resolves
the per-user data directory used for persistent configuration.
"""

import asyncio
import logging
import os
from dataclasses import dataclass
from typing import List, Optional, Sequence, Tuple

from dirtreestate.domain.tree_models import FileNode, FolderNode, Node
from dirtreestate.infra.filters import (
    compile_patterns,
    default_exclude_patterns,
    default_include_patterns,
    is_hidden,
    matches_any,
    matches_include,
)

logger = logging.getLogger(__name__)

# -----------------------------------------------------------------------------
# GLOBAL CONSTANTS
# -----------------------------------------------------------------------------

APP_DIR_NAME = "DirTreeState"
UNIX_APP_DIR_NAME = ".dirtreestate"

# -----------------------------------------------------------------------------
# PATH RESOLUTION API
# -----------------------------------------------------------------------------

def get_user_data_dir() -> str:
    """
    Resolve the standard OS-specific directory for persistent application data.

    Automatically creates the hierarchy if it does not exist.
    Standards:
    - Windows: %LOCALAPPDATA%/DirTreeState
    - Linux/Mac: ~/.dirtreestate

    Returns:
        str: Absolute path to the application data directory.
    """
    path: str = ""

    if os.name == "nt":
        base = os.environ.get("LOCALAPPDATA") or os.environ.get("APPDATA")
        if base:
            path = os.path.join(base, APP_DIR_NAME)

    if not path:
        path = os.path.join(os.path.expanduser("~"), UNIX_APP_DIR_NAME)

    try:
        os.makedirs(path, exist_ok=True)
    except OSError:
        logger.debug(f"Could not create user data dir at {path}")

    return os.path.abspath(path)

# -----------------------------------------------------------------------------
# DISK-BACKED NODES
# -----------------------------------------------------------------------------

@dataclass(frozen=True)
class DiskFolderNode(FolderNode):
    """Folder node that remembers the directory it was listed from."""
    abs_path: str = ""


@dataclass(frozen=True)
class DiskFileNode(FileNode):
    """File node that remembers its absolute location."""
    abs_path: str = ""

# -----------------------------------------------------------------------------
# EAGER SCANNER
# -----------------------------------------------------------------------------

def scan_directory(
        root_path: str,
        include_patterns: Optional[List[str]] = None,
        exclude_patterns: Optional[List[str]] = None,
        show_hidden: bool = False,
) -> Tuple[Node, ...]:
    """
    Materialise a whole directory as a tuple of root-level nodes.

    Folders come first, then files, both sorted by name. Unreadable
    directories are logged and rendered empty.

    Args:
        root_path: Directory to scan. It does not appear in the tree.
        include_patterns: Inclusion regexes applied to file names.
        exclude_patterns: Exclusion regexes applied to every entry name.
        show_hidden: Keep dot-prefixed entries.

    Returns:
        Tuple[Node, ...]: Root-level nodes.
    """
    lister = _DirectoryLister(include_patterns, exclude_patterns, show_hidden)
    root = os.path.abspath(root_path)
    logger.info(f"Scanning directory tree: {root}")
    return tuple(_scan_level(root, lister))


def _scan_level(directory: str, lister: "_DirectoryLister") -> List[Node]:
    nodes: List[Node] = []
    dirs, files = lister.list(directory)
    for name, full in dirs:
        nodes.append(DiskFolderNode(name=name, children=tuple(_scan_level(full, lister)), abs_path=full))
    for name, full in files:
        nodes.append(DiskFileNode(name=name, abs_path=full))
    return nodes

# -----------------------------------------------------------------------------
# LAZY DATA SOURCE
# -----------------------------------------------------------------------------

class FileSystemDataSource:
    """
    Pull-based data source listing one directory level per call.

    Called with None for the root level, or with a folder node previously
    produced by this source. Returned folders carry no children; the engine
    asks for them when the folder is expanded.
    """

    def __init__(
            self,
            root_path: str,
            include_patterns: Optional[List[str]] = None,
            exclude_patterns: Optional[List[str]] = None,
            show_hidden: bool = False,
    ) -> None:
        self.root_path = os.path.abspath(root_path)
        self._lister = _DirectoryLister(include_patterns, exclude_patterns, show_hidden)

    def __call__(self, parent: Optional[Node]) -> Sequence[Node]:
        directory = self._directory_of(parent)
        dirs, files = self._lister.list(directory)
        logger.debug(f"Listed {len(dirs)} folders and {len(files)} files in {directory}")
        nodes: List[Node] = [DiskFolderNode(name=n, abs_path=p) for n, p in dirs]
        nodes.extend(DiskFileNode(name=n, abs_path=p) for n, p in files)
        return nodes

    async def fetch(self, parent: Optional[Node]) -> Sequence[Node]:
        """Coroutine variant running the listing in a worker thread."""
        return await asyncio.to_thread(self, parent)

    def _directory_of(self, parent: Optional[Node]) -> str:
        if parent is None:
            return self.root_path
        if isinstance(parent, DiskFolderNode) and parent.abs_path:
            return parent.abs_path
        raise ValueError(f"Node '{parent.name}' was not produced by this data source")

# -----------------------------------------------------------------------------
# PRIVATE HELPERS
# -----------------------------------------------------------------------------

class _DirectoryLister:
    """Applies the filter set to a single os.scandir listing."""

    def __init__(
            self,
            include_patterns: Optional[List[str]],
            exclude_patterns: Optional[List[str]],
            show_hidden: bool,
    ) -> None:
        inc = include_patterns if include_patterns is not None else default_include_patterns()
        exc = exclude_patterns if exclude_patterns is not None else default_exclude_patterns()
        self._include_rx = compile_patterns(inc)
        self._exclude_rx = compile_patterns(exc)
        self._show_hidden = show_hidden

    def list(self, directory: str) -> Tuple[List[Tuple[str, str]], List[Tuple[str, str]]]:
        dirs: List[Tuple[str, str]] = []
        files: List[Tuple[str, str]] = []
        try:
            with os.scandir(directory) as it:
                entries = sorted(it, key=lambda e: e.name)
        except OSError as e:
            logger.warning(f"Cannot list directory '{directory}': {e}")
            return dirs, files

        for entry in entries:
            name = entry.name
            if not self._show_hidden and is_hidden(name):
                continue
            if matches_any(name, self._exclude_rx):
                continue
            try:
                entry_is_dir = entry.is_dir()
            except OSError:
                continue
            if entry_is_dir:
                dirs.append((name, entry.path))
            elif matches_include(name, self._include_rx):
                files.append((name, entry.path))
        return dirs, files
