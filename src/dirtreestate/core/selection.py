from __future__ import annotations

"""
Selection Controller.

Owns the single selected path, enforces the folder-selectability policy and
asks its owner to reveal a new selection (expand its ancestors) before the
selection is committed and announced.
"""

import logging
from typing import Callable, Optional

from dirtreestate.core.listeners import ListenerRegistry
from dirtreestate.domain.events import FILE_SELECT_EVENT, SelectionEvent
from dirtreestate.domain.tree_models import FileNode, FolderNode, Node

logger = logging.getLogger(__name__)

RevealCallback = Callable[[str, Node], None]
SelectionListener = Callable[[SelectionEvent], None]


class SelectionController:
    """
    Single-selection model.

    Args:
        folder_selectable: Whether folders take part in selection.
        reveal: Called with (path, node) before a selection is committed.
            If it raises, the selection is left untouched.
    """

    def __init__(self, folder_selectable: bool = False, reveal: Optional[RevealCallback] = None) -> None:
        self.folder_selectable = folder_selectable
        self._reveal = reveal
        self._selected: Optional[str] = None
        self._listeners = ListenerRegistry(FILE_SELECT_EVENT)

    @property
    def selected(self) -> Optional[str]:
        return self._selected

    def is_selected(self, path: str) -> bool:
        return self._selected is not None and self._selected == path

    def can_select(self, node: Node) -> bool:
        if isinstance(node, FileNode):
            return True
        if isinstance(node, FolderNode):
            return self.folder_selectable
        raise TypeError(f"Unsupported node type: {type(node).__name__}")

    def select(self, path: str, node: Node) -> bool:
        """
        Select `node` at `path` if the policy allows it.

        Returns:
            bool: True when the selection changed hands and was announced;
                  False when suppressed by policy (no state change, no event).
        """
        if not self.can_select(node):
            logger.debug(f"Selection of folder '{path}' suppressed by policy")
            return False

        if self._reveal is not None:
            self._reveal(path, node)

        self._selected = path
        logger.debug(f"Selected '{path}'")
        self._listeners.emit(SelectionEvent.for_node(path, node))
        return True

    def clear(self) -> None:
        self._selected = None

    def add_listener(self, listener: SelectionListener) -> Callable[[], None]:
        """Subscribe to selection events. Returns an unsubscribe handle."""
        return self._listeners.add(listener)
