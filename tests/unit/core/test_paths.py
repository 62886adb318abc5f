from __future__ import annotations

"""
Unit tests for path resolution.

Verifies joining/splitting, ancestor reconstruction, resolution failures and
the round-trip between resolve and the path of every reachable node.
"""

import pytest

from dirtreestate.core.paths import (
    ancestor_paths,
    iter_folder_paths,
    iter_nodes,
    join_path,
    path_of,
    resolve,
    segments_of,
)
from dirtreestate.domain.errors import NotFound
from dirtreestate.domain.tree_models import FileNode, FolderNode


def test_path_of_joins_ancestors() -> None:
    assert path_of(["src", "app"], "main.ts") == "src/app/main.ts"


def test_path_of_root_level_is_bare_name() -> None:
    assert path_of([], "README.md") == "README.md"


def test_join_path_handles_root() -> None:
    assert join_path("", "src") == "src"
    assert join_path("src", "app") == "src/app"


def test_segments_of_splits_on_separator() -> None:
    assert segments_of("src/app/main.ts") == ["src", "app", "main.ts"]
    assert segments_of("README.md") == ["README.md"]


def test_ancestor_paths_are_proper_and_ordered() -> None:
    assert ancestor_paths("a/b/c.ts") == ["a", "a/b"]
    assert ancestor_paths("top.ts") == []


def test_resolve_finds_nested_file(roots) -> None:
    node = resolve(roots, "src/app/main.ts")
    assert node == FileNode(name="main.ts")


def test_resolve_finds_folder(roots) -> None:
    node = resolve(roots, "src/app")
    assert isinstance(node, FolderNode)
    assert node.name == "app"


@pytest.mark.parametrize("missing", ["nope", "src/nope", "src/app/main.ts/extra", "README.md/x", ""])
def test_resolve_raises_not_found(roots, missing) -> None:
    with pytest.raises(NotFound):
        resolve(roots, missing)


def test_not_found_reports_failing_segment(roots) -> None:
    with pytest.raises(NotFound) as exc_info:
        resolve(roots, "src/ghost/main.ts")
    assert exc_info.value.segment == "ghost"
    assert exc_info.value.path == "src/ghost/main.ts"


def test_round_trip_for_every_reachable_node(roots) -> None:
    """segments_of(path) matches the ancestor names, and resolve(path) finds the node."""
    for path, node in iter_nodes(roots):
        assert segments_of(path)[-1] == node.name
        assert resolve(roots, path) is node


def test_iter_folder_paths_lists_every_folder(roots) -> None:
    assert list(iter_folder_paths(roots)) == ["src", "src/app", "docs"]
