from __future__ import annotations

"""
Treeview Binder.

Rendering collaborator for Tk: mirrors an engine's visible rows into a
ttk.Treeview and turns widget events back into engine intents. The binder
holds no tree state of its own; it redraws whenever the engine reports a
change.
"""

import asyncio
import logging
import tkinter as tk
from typing import Any, Callable, Dict, Optional, Union

from dirtreestate.core.engine import LazyTreeStateEngine, TreeStateEngine, VisibleRow
from dirtreestate.domain.errors import TreeStateError
from dirtreestate.domain.tree_models import FolderNode

logger = logging.getLogger(__name__)

Engine = Union[TreeStateEngine, LazyTreeStateEngine]

# Child item that gives a closed folder its expander arrow
_PLACEHOLDER_SUFFIX = "/\0placeholder"


class TreeViewBinder:
    """
    Two-way bridge between an engine and a ttk.Treeview.

    Args:
        tree: The Treeview widget (anything exposing its API).
        engine: Eager or lazy engine driving the view.
        menu_factory: Builds the popup menu; defaults to a tearoff-less tk.Menu.
    """

    def __init__(self, tree: Any, engine: Engine, menu_factory: Optional[Callable[[], Any]] = None) -> None:
        self.tree = tree
        self.engine = engine
        self._menu_factory = menu_factory or (lambda: tk.Menu(self.tree, tearoff=0))
        self._rows: Dict[str, VisibleRow] = {}

        self._unsubscribe = engine.add_change_listener(self.refresh)
        tree.bind("<<TreeviewOpen>>", self._on_open)
        tree.bind("<<TreeviewClose>>", self._on_close)
        tree.bind("<ButtonRelease-1>", self._on_click)
        tree.bind("<Button-3>", self._on_context_menu)

    def row(self, item_id: str) -> Optional[VisibleRow]:
        return self._rows.get(item_id)

    def prime(self) -> None:
        """Load the root level (lazy mode) and draw the first frame."""
        if isinstance(self.engine, LazyTreeStateEngine):
            asyncio.run(self.engine.children_of(None))
        self.refresh()

    def detach(self) -> None:
        """Stop following engine changes."""
        self._unsubscribe()

    # -------------------------------------------------------------------------
    # Rendering
    # -------------------------------------------------------------------------
    def refresh(self) -> None:
        """Rebuild the widget from the engine's visible rows."""
        self.tree.delete(*self.tree.get_children(""))
        self._rows.clear()

        for row in self.engine.iter_visible():
            parent_id = row.path.rsplit("/", 1)[0] if "/" in row.path else ""
            label = f"{self.engine.icon_for(row.node, row.expanded)} {row.node.name}"
            self.tree.insert(parent_id, "end", iid=row.path, text=label, open=row.expanded)
            self._rows[row.path] = row
            if isinstance(row.node, FolderNode) and not row.expanded:
                self.tree.insert(row.path, "end", iid=row.path + _PLACEHOLDER_SUFFIX, text="")

        selected = self.engine.selected_path
        if selected and selected in self._rows:
            self.tree.selection_set(selected)
            self.tree.see(selected)

    # -------------------------------------------------------------------------
    # Widget events
    # -------------------------------------------------------------------------
    def _on_open(self, _event: Any = None) -> None:
        row = self._rows.get(self.tree.focus())
        if row is not None and not row.expanded:
            self.toggle(row)

    def _on_close(self, _event: Any = None) -> None:
        row = self._rows.get(self.tree.focus())
        if row is not None and row.expanded:
            self.toggle(row)

    def _on_click(self, event: Any) -> None:
        if "indicator" in str(self.tree.identify_element(event.x, event.y)):
            return
        row = self._rows.get(self.tree.identify_row(event.y))
        if row is not None:
            self.activate(row)

    def _on_context_menu(self, event: Any) -> None:
        row = self._rows.get(self.tree.identify_row(event.y))
        if row is None:
            return
        if not self.engine.open_context_menu(row.path, row.node, event.x_root, event.y_root):
            return

        menu = self._menu_factory()
        for item in self.engine.context_menu_items:
            menu.add_command(
                label=item.title,
                command=lambda it=item, r=row: self.engine.on_context_action(it, r.path, r.node),
            )
        try:
            menu.tk_popup(event.x_root, event.y_root)
        finally:
            menu.grab_release()

    # -------------------------------------------------------------------------
    # Intents
    # -------------------------------------------------------------------------
    def toggle(self, row: VisibleRow) -> None:
        """Flip a folder, fetching its children first when a lazy folder opens."""
        try:
            if isinstance(self.engine, LazyTreeStateEngine) and not row.expanded:
                asyncio.run(self.engine.expand_node(row.path))
            else:
                self.engine.on_toggle_expand(row.path)
        except TreeStateError as e:
            logger.warning(f"Toggle failed for '{row.path}': {e}")

    def activate(self, row: VisibleRow) -> None:
        """Route a label click through the engine's selection policy."""
        try:
            self.engine.on_node_activate(row.path, row.node)
            if isinstance(self.engine, LazyTreeStateEngine) and isinstance(row.node, FolderNode):
                self._ensure_children(row)
        except TreeStateError as e:
            logger.warning(f"Activation failed for '{row.path}': {e}")

    def _ensure_children(self, row: VisibleRow) -> None:
        engine = self.engine
        if not isinstance(engine, LazyTreeStateEngine) or not engine.is_expanded(row.path):
            return
        node_id = engine.index.lookup_ids(row.path)[-1]
        if engine.index.cached_child_ids(node_id) is None:
            asyncio.run(engine.expand_node(row.path))
