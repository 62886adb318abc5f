from __future__ import annotations

"""
Unit tests for the ExpansionStore.

Covers both polarities: collapsed-path markers (eager) and expanded-id
markers (lazy).
"""

import pytest

from dirtreestate.core.expansion import ExpansionMode, ExpansionStore
from dirtreestate.core.paths import iter_folder_paths
from dirtreestate.domain.errors import UnsupportedOperation


@pytest.fixture
def eager_store() -> ExpansionStore:
    return ExpansionStore(ExpansionMode.COLLAPSED_SET)


@pytest.fixture
def lazy_store() -> ExpansionStore:
    return ExpansionStore(ExpansionMode.EXPANDED_SET)


def test_eager_default_is_expanded(eager_store: ExpansionStore) -> None:
    assert eager_store.is_expanded("src")
    assert not eager_store.is_collapsed("src")


def test_lazy_default_is_collapsed(lazy_store: ExpansionStore) -> None:
    assert lazy_store.is_collapsed(1)
    assert not lazy_store.is_expanded(1)


def test_toggle_flips_only_one_marker(eager_store: ExpansionStore) -> None:
    assert eager_store.toggle("src") is False
    assert eager_store.is_collapsed("src")
    assert eager_store.is_expanded("src/app")

    assert eager_store.toggle("src") is True
    assert eager_store.is_expanded("src")


def test_lazy_toggle(lazy_store: ExpansionStore) -> None:
    assert lazy_store.toggle(7) is True
    assert lazy_store.is_expanded(7)
    assert lazy_store.toggle(7) is False


def test_collapse_all_eager_marks_every_folder(eager_store: ExpansionStore, roots) -> None:
    eager_store.collapse_all(iter_folder_paths(roots))
    assert eager_store.snapshot() == frozenset({"src", "src/app", "docs"})


def test_expand_all_then_collapse_all_equals_collapse_all(roots) -> None:
    """expand_all followed by collapse_all matches collapse_all alone."""
    a = ExpansionStore()
    a.toggle("src/app")
    a.expand_all()
    a.collapse_all(iter_folder_paths(roots))

    b = ExpansionStore()
    b.collapse_all(iter_folder_paths(roots))

    assert a.snapshot() == b.snapshot()


def test_expand_all_clears_collapsed_set(eager_store: ExpansionStore) -> None:
    eager_store.collapse("src")
    eager_store.collapse("docs")
    eager_store.expand_all()
    assert eager_store.snapshot() == frozenset()


def test_expand_all_is_unsupported_in_lazy_mode(lazy_store: ExpansionStore) -> None:
    with pytest.raises(UnsupportedOperation):
        lazy_store.expand_all()


def test_collapse_all_lazy_clears_expanded_ids(lazy_store: ExpansionStore) -> None:
    lazy_store.expand_many([1, 2, 3])
    lazy_store.collapse_all()
    assert lazy_store.snapshot() == frozenset()


def test_expand_ancestors_of_is_idempotent(eager_store: ExpansionStore, roots) -> None:
    eager_store.collapse_all(iter_folder_paths(roots))

    eager_store.expand_ancestors_of("src/app/main.ts")
    once = eager_store.snapshot()
    eager_store.expand_ancestors_of("src/app/main.ts")

    assert eager_store.snapshot() == once
    assert once == frozenset({"docs"})


def test_expand_ancestors_of_leaves_target_folder_alone(eager_store: ExpansionStore) -> None:
    eager_store.collapse("src")
    eager_store.collapse("src/app")
    eager_store.expand_ancestors_of("src/app")
    assert eager_store.is_expanded("src")
    assert eager_store.is_collapsed("src/app")


def test_expand_ancestors_of_requires_path_markers(lazy_store: ExpansionStore) -> None:
    with pytest.raises(UnsupportedOperation):
        lazy_store.expand_ancestors_of("a/b")


def test_stale_markers_are_harmless(eager_store: ExpansionStore) -> None:
    eager_store.collapse("gone/forever")
    eager_store.expand_ancestors_of("gone/forever/file.txt")
    assert eager_store.is_collapsed("gone/forever")
    assert eager_store.is_expanded("gone")
