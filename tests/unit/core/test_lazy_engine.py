from __future__ import annotations

"""
Unit tests for the LazyTreeStateEngine.

Covers expansion by node identity, on-demand selection, the visible-row view
over materialised children and the lazy-mode restrictions.
"""

import asyncio
from typing import List, Optional

import pytest

from dirtreestate.core.engine import LazyTreeStateEngine
from dirtreestate.core.index import in_memory_source
from dirtreestate.domain.config import TreeConfig
from dirtreestate.domain.errors import DetachedNode, NotFound, UnsupportedOperation
from dirtreestate.domain.events import SelectionEvent
from dirtreestate.domain.tree_models import FileNode, FolderNode, Node


def fresh_source(parent: Optional[Node]):
    """Mimic a remote listing: new instances on every call."""
    if parent is None:
        return [FolderNode("dir"), FileNode("top.txt")]
    if parent.name == "dir":
        return [FileNode("x.txt"), FolderNode("sub")]
    if parent.name == "sub":
        return [FileNode("deep.txt")]
    return []


@pytest.fixture
def engine() -> LazyTreeStateEngine:
    return LazyTreeStateEngine(fresh_source)


def test_new_engine_starts_collapsed(engine: LazyTreeStateEngine) -> None:
    asyncio.run(engine.children_of())
    assert engine.is_collapsed("dir")
    assert [r.path for r in engine.iter_visible()] == ["dir", "top.txt"]


def test_unknown_targets_report_collapsed(engine: LazyTreeStateEngine) -> None:
    assert engine.is_collapsed("dir")
    assert not engine.is_expanded(FolderNode("dir"))


def test_expand_node_materialises_children(engine: LazyTreeStateEngine) -> None:
    async def scenario():
        dir_node = (await engine.children_of())[0]
        await engine.expand_node(dir_node)

    asyncio.run(scenario())
    assert engine.is_expanded("dir")
    assert [(r.path, r.depth) for r in engine.iter_visible()] == [
        ("dir", 0), ("dir/x.txt", 1), ("dir/sub", 1), ("top.txt", 0),
    ]


def test_expansion_survives_refresh(engine: LazyTreeStateEngine) -> None:
    """Refetched instances inherit the expansion of their predecessors."""
    async def scenario():
        dir_node = (await engine.children_of())[0]
        await engine.expand_node(dir_node)
        return (await engine.children_of(refresh=True))[0]

    new_dir = asyncio.run(scenario())
    assert engine.is_expanded(new_dir)


def test_select_by_path_reveals_ancestors(engine: LazyTreeStateEngine) -> None:
    received: List[SelectionEvent] = []
    engine.add_selection_listener(received.append)

    assert asyncio.run(engine.select_file("dir/sub/deep.txt")) is True
    assert engine.selected_path == "dir/sub/deep.txt"
    assert engine.is_expanded("dir")
    assert engine.is_expanded("dir/sub")
    assert [e.path for e in received] == ["dir/sub/deep.txt"]


def test_select_by_path_not_found_keeps_state(engine: LazyTreeStateEngine) -> None:
    asyncio.run(engine.select_file("top.txt"))
    with pytest.raises(NotFound):
        asyncio.run(engine.select_file("dir/ghost.txt"))
    assert engine.selected_path == "top.txt"
    assert engine.expansion.snapshot() == frozenset()


def test_folder_activation_toggles(engine: LazyTreeStateEngine) -> None:
    dir_node = asyncio.run(engine.children_of())[0]
    assert engine.on_node_activate("dir", dir_node) is False
    assert engine.is_expanded(dir_node)
    assert engine.selected_path is None


def test_folder_activation_selects_when_allowed() -> None:
    engine = LazyTreeStateEngine(fresh_source, TreeConfig(folder_selectable=True))
    sub = asyncio.run(engine.find_by_path("dir/sub"))
    assert engine.on_node_activate("dir/sub", sub) is True
    assert engine.is_expanded("dir")
    assert engine.is_collapsed("dir/sub")


def test_toggle_by_path_requires_materialised_node(engine: LazyTreeStateEngine) -> None:
    with pytest.raises(NotFound):
        engine.on_toggle_expand("dir")
    asyncio.run(engine.children_of())
    assert engine.on_toggle_expand("dir") is True


def test_expand_ancestors_of_detached_node_changes_nothing(engine: LazyTreeStateEngine) -> None:
    with pytest.raises(DetachedNode):
        engine.expand_ancestors_of(FileNode("x.txt"))
    assert engine.expansion.snapshot() == frozenset()


def test_expand_ancestors_of_fetched_node(engine: LazyTreeStateEngine) -> None:
    deep = asyncio.run(engine.find_by_path("dir/sub/deep.txt"))
    engine.expand_ancestors_of(deep)
    engine.expand_ancestors_of(deep)
    assert engine.is_expanded("dir") and engine.is_expanded("dir/sub")
    assert engine.path_of(deep) == "dir/sub/deep.txt"


def test_expand_all_is_unsupported(engine: LazyTreeStateEngine) -> None:
    with pytest.raises(UnsupportedOperation):
        engine.expand_all()


def test_collapse_all_then_select(engine: LazyTreeStateEngine) -> None:
    asyncio.run(engine.select_file("dir/x.txt"))
    engine.collapse_all()
    assert engine.is_collapsed("dir")

    asyncio.run(engine.select_file("dir/sub/deep.txt"))
    assert engine.is_expanded("dir") and engine.is_expanded("dir/sub")


def test_swap_source_resets_identities(engine: LazyTreeStateEngine, roots) -> None:
    asyncio.run(engine.select_file("dir/x.txt"))
    engine.swap_source(in_memory_source(roots))

    assert engine.is_collapsed("dir")
    assert list(engine.iter_visible()) == []
    asyncio.run(engine.children_of())
    assert [r.path for r in engine.iter_visible()] == ["src", "docs", "README.md"]


def test_children_of_notifies_listeners(engine: LazyTreeStateEngine) -> None:
    ticks: List[int] = []
    engine.add_change_listener(lambda: ticks.append(1))
    asyncio.run(engine.children_of())
    assert ticks == [1]


# -----------------------------------------------------------------------------
# Shared instances and fetch notifications
# -----------------------------------------------------------------------------

@pytest.fixture
def shared_engine() -> LazyTreeStateEngine:
    """Two parents listing the very same 'lib' instance."""
    lib = FolderNode("lib", (FileNode("x.txt"),))
    return LazyTreeStateEngine(in_memory_source([FolderNode("a", (lib,)), FolderNode("b", (lib,))]))


def test_select_in_shared_subtree_reveals_its_own_branch(shared_engine: LazyTreeStateEngine) -> None:
    asyncio.run(shared_engine.find_by_path("a/lib"))
    asyncio.run(shared_engine.find_by_path("b/lib"))
    shared_engine.collapse_all()

    assert asyncio.run(shared_engine.select_file("a/lib/x.txt")) is True
    assert shared_engine.is_expanded("a") and shared_engine.is_expanded("a/lib")
    assert shared_engine.is_collapsed("b") and shared_engine.is_collapsed("b/lib")


def test_shared_subtree_branches_expand_independently(shared_engine: LazyTreeStateEngine) -> None:
    asyncio.run(shared_engine.find_by_path("b/lib"))
    asyncio.run(shared_engine.find_by_path("a/lib"))

    asyncio.run(shared_engine.expand_node("b/lib"))
    assert shared_engine.is_expanded("b/lib")
    assert shared_engine.is_collapsed("a/lib")

    shared_engine.on_toggle_expand("a/lib")
    shared_engine.on_toggle_expand("b/lib")
    assert shared_engine.is_expanded("a/lib")
    assert shared_engine.is_collapsed("b/lib")


def test_find_by_path_notifies_after_fetching() -> None:
    def chain(parent: Optional[Node]):
        if parent is None:
            return [FolderNode("a")]
        return {"a": [FolderNode("b")], "b": [FileNode("c")]}.get(parent.name, [])

    engine = LazyTreeStateEngine(chain)
    ticks: List[int] = []
    engine.add_change_listener(lambda: ticks.append(1))

    node = asyncio.run(engine.find_by_path("a/b/c"))
    assert node.name == "c"
    assert ticks == [1]

    asyncio.run(engine.find_by_path("a/b/c"))
    assert ticks == [1], "A fully cached walk changes nothing a renderer shows."


def test_suppressed_folder_selection_still_reports_fetch(engine: LazyTreeStateEngine) -> None:
    ticks: List[int] = []
    engine.add_change_listener(lambda: ticks.append(1))

    assert asyncio.run(engine.select_file("dir/sub")) is False
    assert engine.selected_path is None
    assert ticks == [1]
    assert [r.path for r in engine.iter_visible()] == ["dir", "top.txt"]


def test_not_found_after_fetching_still_notifies(engine: LazyTreeStateEngine) -> None:
    ticks: List[int] = []
    engine.add_change_listener(lambda: ticks.append(1))

    with pytest.raises(NotFound):
        asyncio.run(engine.find_by_path("dir/ghost.txt"))
    assert ticks == [1]


def test_duplicate_sibling_names_share_identity() -> None:
    first, second = FolderNode("dup"), FolderNode("dup")
    engine = LazyTreeStateEngine(lambda parent: [first, second] if parent is None else [])
    asyncio.run(engine.children_of())

    assert engine.index.node_id(first) == engine.index.node_id(second)
    assert engine.index.lookup("dup") is first
    engine.on_toggle_expand(second)
    assert engine.is_expanded(first)
