from __future__ import annotations

"""
Tree State Engine.

Composes path resolution, expansion, selection and (in lazy mode) the tree
index into the contract consumed by a rendering collaborator:

- predicates: is_expanded / is_collapsed / is_selected, icon lookup;
- user intents: on_node_activate, on_toggle_expand, open_context_menu,
  on_context_action;
- programmatic API: select_file, expand_all, collapse_all.

State transitions are synchronous except where the lazy data source must be
consulted. A failing operation raises a TreeStateError and leaves the state
as it was. Renderers should read state after a change notification.
"""

import logging
from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Callable, Iterator, Optional, Sequence, Tuple, Union

from dirtreestate.core import paths
from dirtreestate.core.expansion import ExpansionMode, ExpansionStore
from dirtreestate.core.index import DataSource, NodeId, TreeIndex
from dirtreestate.core.listeners import ListenerRegistry
from dirtreestate.core.selection import SelectionController, SelectionListener
from dirtreestate.domain.config import (
    ICON_FILE,
    ICON_FOLDER_CLOSED,
    ICON_FOLDER_OPEN,
    ContextMenuItem,
    TreeConfig,
)
from dirtreestate.domain.errors import NotFound
from dirtreestate.domain.events import ContextMenuState
from dirtreestate.domain.tree_models import FileNode, FolderNode, Node

logger = logging.getLogger(__name__)

ChangeListener = Callable[[], None]


@dataclass(frozen=True)
class VisibleRow:
    """One row a renderer would draw."""
    path: str
    node: Node
    depth: int
    expanded: bool


# -----------------------------------------------------------------------------
# SHARED BEHAVIOUR
# -----------------------------------------------------------------------------

class _EngineBase(ABC):
    """Selection routing, context menu and notifications common to both modes."""

    def __init__(self, config: Optional[TreeConfig], mode: ExpansionMode) -> None:
        self.config = config or TreeConfig()
        self.expansion = ExpansionStore(mode)
        self.selection = SelectionController(self.config.folder_selectable, reveal=self._reveal)
        self._context_menu: Optional[ContextMenuState] = None
        self._changes = ListenerRegistry("change")

    # --- Notifications ---
    def add_change_listener(self, listener: ChangeListener) -> Callable[[], None]:
        return self._changes.add(listener)

    def add_selection_listener(self, listener: SelectionListener) -> Callable[[], None]:
        return self.selection.add_listener(listener)

    def _notify(self) -> None:
        self._changes.emit()

    # --- Selection ---
    @property
    def selected_path(self) -> Optional[str]:
        return self.selection.selected

    def is_selected(self, path: str) -> bool:
        return self.selection.is_selected(path)

    def select(self, path: str, node: Node) -> bool:
        """Select a node, revealing it and closing any open context menu."""
        changed = self.selection.select(path, node)
        if changed:
            self._context_menu = None
            self._notify()
        return changed

    def on_node_activate(self, path: str, node: Node) -> bool:
        """
        Route a click on a node label.

        Folders that cannot be selected are toggled instead. Everything else
        goes through selection.

        Returns:
            bool: True if the selection changed.
        """
        if isinstance(node, FolderNode) and not self.config.folder_selectable:
            self._toggle(path, node)
            return False
        return self.select(path, node)

    # --- Context menu ---
    @property
    def context_menu(self) -> Optional[ContextMenuState]:
        return self._context_menu

    @property
    def context_menu_items(self) -> Tuple[ContextMenuItem, ...]:
        return self.config.context_menu_items

    def open_context_menu(self, path: str, node: Node, x: int = 0, y: int = 0) -> bool:
        """Open the menu for file nodes when at least one item is configured."""
        if not isinstance(node, FileNode) or not self.config.context_menu_items:
            return False
        self._context_menu = ContextMenuState(path=path, node=node, x=x, y=y)
        self._notify()
        return True

    def close_context_menu(self) -> None:
        if self._context_menu is not None:
            self._context_menu = None
            self._notify()

    def on_context_action(self, item: ContextMenuItem, path: str, node: Node) -> None:
        """Close the menu, then fire the item's callback with (path, node)."""
        self.close_context_menu()
        if item.callback is not None:
            logger.debug(f"Context action '{item.title}' on '{path}'")
            item.callback(path, node)

    # --- Theming ---
    def icon_for(self, node: Node, expanded: bool = False) -> str:
        if isinstance(node, FolderNode):
            key = ICON_FOLDER_OPEN if expanded else ICON_FOLDER_CLOSED
        elif isinstance(node, FileNode):
            key = ICON_FILE
        else:
            raise TypeError(f"Unsupported node type: {type(node).__name__}")
        return self.config.get_icon(key)

    # --- Mode hooks ---
    @abstractmethod
    def _reveal(self, path: str, node: Node) -> None:
        """Expand whatever hides `path`; raising aborts the selection."""

    @abstractmethod
    def _toggle(self, path: str, node: Node) -> bool:
        """Flip a folder the user activated without selecting it."""

# -----------------------------------------------------------------------------
# EAGER MODE
# -----------------------------------------------------------------------------

class TreeStateEngine(_EngineBase):
    """
    Engine over a tree held entirely in memory.

    Expansion is tracked as a set of collapsed paths; a new engine shows
    every folder open.
    """

    def __init__(self, roots: Sequence[Node] = (), config: Optional[TreeConfig] = None) -> None:
        super().__init__(config, ExpansionMode.COLLAPSED_SET)
        self._roots: Tuple[Node, ...] = tuple(roots)

    @property
    def roots(self) -> Tuple[Node, ...]:
        return self._roots

    def swap_tree(self, roots: Sequence[Node]) -> None:
        """Replace the tree. Expansion and selection entries are kept as-is."""
        self._roots = tuple(roots)
        self._context_menu = None
        self._notify()

    # --- Queries ---
    def is_expanded(self, path: str) -> bool:
        return self.expansion.is_expanded(path)

    def is_collapsed(self, path: str) -> bool:
        return self.expansion.is_collapsed(path)

    def resolve(self, path: str) -> Node:
        return paths.resolve(self._roots, path)

    def iter_visible(self) -> Iterator[VisibleRow]:
        """Depth-first rows, skipping the contents of collapsed folders."""
        yield from self._visible(self._roots, "", 0)

    def _visible(self, nodes: Sequence[Node], parent_path: str, depth: int) -> Iterator[VisibleRow]:
        for node in nodes:
            path = paths.join_path(parent_path, node.name)
            if isinstance(node, FolderNode):
                expanded = self.expansion.is_expanded(path)
                yield VisibleRow(path, node, depth, expanded)
                if expanded:
                    yield from self._visible(node.children, path, depth + 1)
            else:
                yield VisibleRow(path, node, depth, False)

    # --- Intents ---
    def on_toggle_expand(self, path: str) -> bool:
        """Flip one folder. Returns its new expanded state."""
        expanded = self.expansion.toggle(path)
        self._notify()
        return expanded

    def expand_all(self) -> None:
        self.expansion.expand_all()
        self._notify()

    def collapse_all(self) -> None:
        self.expansion.collapse_all(paths.iter_folder_paths(self._roots))
        self._notify()

    def expand_ancestors_of(self, path: str) -> None:
        self.expansion.expand_ancestors_of(path)
        self._notify()

    def select_by_path(self, path: str) -> bool:
        """
        Resolve and select a node, expanding its ancestors.

        Raises:
            NotFound: The path does not resolve.
        """
        return self.select(path, self.resolve(path))

    select_file = select_by_path

    # --- Hooks ---
    def _reveal(self, path: str, node: Node) -> None:
        self.expansion.expand_ancestors_of(path)

    def _toggle(self, path: str, node: Node) -> bool:
        return self.on_toggle_expand(path)

# -----------------------------------------------------------------------------
# LAZY MODE
# -----------------------------------------------------------------------------

NodeOrPath = Union[Node, str]


class LazyTreeStateEngine(_EngineBase):
    """
    Engine over a tree pulled on demand from a data source.

    Expansion is tracked as a set of expanded node identities; a new engine
    shows every folder closed. Operations that may need to fetch are
    coroutines. Path targets are resolved through the index keys, so they
    stay exact when a node instance is shared between parents.
    """

    def __init__(self, data_source: DataSource, config: Optional[TreeConfig] = None) -> None:
        super().__init__(config, ExpansionMode.EXPANDED_SET)
        self.index = TreeIndex(data_source)

    def swap_source(self, data_source: DataSource) -> None:
        """
        Switch to a new data source. In-flight fetches are abandoned; the
        previous identities are dropped, so their expansion markers go inert.
        """
        self.index.reset(data_source)
        self._context_menu = None
        self._notify()

    # --- Queries ---
    def is_expanded(self, target: NodeOrPath) -> bool:
        node_id = self._lookup_id(target)
        return node_id is not None and self.expansion.is_expanded(node_id)

    def is_collapsed(self, target: NodeOrPath) -> bool:
        return not self.is_expanded(target)

    def path_of(self, node: Node) -> str:
        return self.index.path_of(node)

    async def children_of(self, parent: Optional[Node] = None, *, refresh: bool = False) -> Tuple[Node, ...]:
        children = await self.index.children_of(parent, refresh=refresh)
        self._notify()
        return children

    async def find_by_path(self, path: str) -> Node:
        """
        Fetch down to `path` and return the node found there.

        Listeners are notified once when any level had to be fetched, also
        when the walk ends in NotFound.
        """
        before = self.index.fetch_count
        try:
            return await self.index.find_by_path(path)
        finally:
            if self.index.fetch_count != before:
                self._notify()

    def iter_visible(self) -> Iterator[VisibleRow]:
        """Rows over materialised children only; never fetches."""
        yield from self._visible(None, "", 0)

    def _visible(self, parent_id: Optional[NodeId], parent_path: str, depth: int) -> Iterator[VisibleRow]:
        for node, node_id in self.index.cached_child_ids(parent_id) or ():
            path = paths.join_path(parent_path, node.name)
            if isinstance(node, FolderNode):
                expanded = self.expansion.is_expanded(node_id)
                yield VisibleRow(path, node, depth, expanded)
                if expanded:
                    yield from self._visible(node_id, path, depth + 1)
            else:
                yield VisibleRow(path, node, depth, False)

    # --- Intents ---
    def on_toggle_expand(self, target: NodeOrPath) -> bool:
        """
        Flip one folder. Returns its new expanded state.

        Raises:
            DetachedNode: The node is not attached to the index.
            NotFound: A path target is not materialised.
        """
        expanded = self.expansion.toggle(self._require_id(target))
        self._notify()
        return expanded

    async def expand_node(self, target: NodeOrPath) -> Tuple[Node, ...]:
        """Mark a folder expanded and make sure its children are materialised."""
        node_id = self._require_id(target)
        self.expansion.expand(node_id)
        children = await self.index.children_by_id(node_id)
        self._notify()
        return children

    def expand_all(self) -> None:
        # Raises UnsupportedOperation: an unbounded tree cannot be fully opened
        self.expansion.expand_all()

    def collapse_all(self) -> None:
        self.expansion.collapse_all()
        self._notify()

    def expand_ancestors_of(self, target: NodeOrPath) -> None:
        """
        Expand every ancestor of a fetched node or a materialised path.

        Raises:
            DetachedNode: The ParentLink chain is broken; nothing is changed.
            NotFound: A path target is not materialised; nothing is changed.
        """
        if isinstance(target, str):
            ancestor_ids = self.index.lookup_ids(target)[:-1]
        else:
            ancestor_ids = self.index.ancestor_ids_of(target)
        self.expansion.expand_many(ancestor_ids)
        self._notify()

    async def select_by_path(self, path: str) -> bool:
        """
        Fetch down to `path` and select the node found there.

        Raises:
            NotFound: The path does not resolve.
        """
        node = await self.find_by_path(path)
        return self.select(path, node)

    select_file = select_by_path

    # --- Hooks ---
    def _reveal(self, path: str, node: Node) -> None:
        self.expansion.expand_many(self.index.lookup_ids(path)[:-1])

    def _toggle(self, path: str, node: Node) -> bool:
        return self.on_toggle_expand(path)

    def _require_id(self, target: NodeOrPath) -> NodeId:
        if isinstance(target, str):
            return self.index.lookup_ids(target)[-1]
        return self.index.node_id(target)

    def _lookup_id(self, target: NodeOrPath) -> Optional[NodeId]:
        if isinstance(target, str):
            try:
                return self.index.lookup_ids(target)[-1]
            except NotFound:
                return None
        if not self.index.is_attached(target):
            return None
        return self.index.node_id(target)
