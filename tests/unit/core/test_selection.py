from __future__ import annotations

"""
Unit tests for the SelectionController policy and its reveal hook.
"""

from typing import List

import pytest

from dirtreestate.core.selection import SelectionController
from dirtreestate.domain.events import SelectionEvent
from dirtreestate.domain.tree_models import FileNode, FolderNode


def test_files_are_always_selectable() -> None:
    ctrl = SelectionController(folder_selectable=False)
    assert ctrl.can_select(FileNode("a.ts"))
    assert not ctrl.can_select(FolderNode("a"))


def test_unknown_node_type_is_rejected() -> None:
    with pytest.raises(TypeError):
        SelectionController().can_select(object())  # type: ignore[arg-type]


def test_reveal_runs_before_commit() -> None:
    order: List[str] = []
    ctrl = SelectionController(reveal=lambda path, node: order.append(f"reveal:{path}"))
    ctrl.add_listener(lambda event: order.append(f"event:{event.path}"))

    assert ctrl.select("a/b.ts", FileNode("b.ts")) is True
    assert order == ["reveal:a/b.ts", "event:a/b.ts"]


def test_failed_reveal_leaves_selection_untouched() -> None:
    def _reveal(_path, _node):
        raise LookupError("cannot reveal")

    ctrl = SelectionController(reveal=_reveal)
    received: List[SelectionEvent] = []
    ctrl.add_listener(received.append)

    with pytest.raises(LookupError):
        ctrl.select("a/b.ts", FileNode("b.ts"))
    assert ctrl.selected is None
    assert received == []


def test_reselecting_same_path_emits_again() -> None:
    ctrl = SelectionController()
    received: List[SelectionEvent] = []
    ctrl.add_listener(received.append)

    ctrl.select("x.ts", FileNode("x.ts"))
    ctrl.select("x.ts", FileNode("x.ts"))
    assert len(received) == 2


def test_clear_and_unsubscribe() -> None:
    ctrl = SelectionController()
    received: List[SelectionEvent] = []
    unsubscribe = ctrl.add_listener(received.append)

    ctrl.select("x.ts", FileNode("x.ts"))
    ctrl.clear()
    assert ctrl.selected is None
    assert not ctrl.is_selected("x.ts")

    unsubscribe()
    unsubscribe()
    ctrl.select("y.ts", FileNode("y.ts"))
    assert len(received) == 1
