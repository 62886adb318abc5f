from __future__ import annotations

"""
Integration tests for the filesystem sources.

Builds small directory trees under tmp_path and checks the eager scanner,
the lazy data source and their use through both engines.
"""

import asyncio
from pathlib import Path

import pytest

from dirtreestate.core.engine import LazyTreeStateEngine, TreeStateEngine
from dirtreestate.domain.tree_models import FileNode, FolderNode
from dirtreestate.infra.fs import DiskFolderNode, FileSystemDataSource, scan_directory


@pytest.fixture
def project(tmp_path: Path) -> Path:
    """
    Structure:
      b.txt
      a/
        z.py
        cache.pyc
        __pycache__/
      .hidden
      node_modules/
    """
    (tmp_path / "a").mkdir()
    (tmp_path / "a" / "z.py").write_text("print(1)", encoding="utf-8")
    (tmp_path / "a" / "cache.pyc").write_bytes(b"\0")
    (tmp_path / "a" / "__pycache__").mkdir()
    (tmp_path / "b.txt").write_text("b", encoding="utf-8")
    (tmp_path / ".hidden").write_text("h", encoding="utf-8")
    (tmp_path / "node_modules").mkdir()
    return tmp_path


def test_scan_directory_orders_and_filters(project: Path) -> None:
    roots = scan_directory(str(project))

    assert [n.name for n in roots] == ["a", "b.txt"]
    folder = roots[0]
    assert isinstance(folder, FolderNode)
    assert [c.name for c in folder.children] == ["z.py"]
    assert isinstance(roots[1], FileNode)
    assert roots[1].abs_path == str(project / "b.txt")


def test_scan_directory_show_hidden_and_include(project: Path) -> None:
    roots = scan_directory(str(project), include_patterns=[r"\.py$"], show_hidden=True)
    assert [n.name for n in roots] == ["a"]
    assert [c.name for c in roots[0].children] == ["z.py"]

    roots = scan_directory(str(project), show_hidden=True)
    assert ".hidden" in [n.name for n in roots]


def test_scan_missing_directory_is_empty(tmp_path: Path) -> None:
    assert scan_directory(str(tmp_path / "absent")) == ()


def test_data_source_lists_one_level(project: Path) -> None:
    source = FileSystemDataSource(str(project))
    roots = source(None)

    assert [n.name for n in roots] == ["a", "b.txt"]
    folder = roots[0]
    assert isinstance(folder, DiskFolderNode)
    assert folder.children == ()
    assert [n.name for n in source(folder)] == ["z.py"]


def test_data_source_rejects_foreign_nodes(project: Path) -> None:
    source = FileSystemDataSource(str(project))
    with pytest.raises(ValueError):
        source(FolderNode("a"))


def test_lazy_engine_over_filesystem(project: Path) -> None:
    engine = LazyTreeStateEngine(FileSystemDataSource(str(project)).fetch)

    assert asyncio.run(engine.select_file("a/z.py")) is True
    assert engine.is_expanded("a")
    assert [r.path for r in engine.iter_visible()] == ["a", "a/z.py", "b.txt"]


def test_eager_engine_over_filesystem(project: Path) -> None:
    engine = TreeStateEngine(scan_directory(str(project)))
    engine.collapse_all()
    engine.select_file("a/z.py")
    assert engine.is_expanded("a")
