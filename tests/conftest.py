from __future__ import annotations

"""
Global Pytest Configuration and Fixtures.

This module sets up the testing environment, including:
1. Path manipulation to ensure the 'src' directory is importable.
2. Shared tree fixtures (raw JSON shape and parsed nodes) used across suites.
"""

import os
import sys
from typing import Any, Dict, List, Tuple

import pytest

# -----------------------------------------------------------------------------
# Path Configuration
# -----------------------------------------------------------------------------
_SRC_PATH = os.path.abspath(os.path.join(os.path.dirname(__file__), "..", "src"))
if _SRC_PATH not in sys.path:
    sys.path.insert(0, _SRC_PATH)

from dirtreestate.domain.tree_models import Node, parse_tree  # noqa: E402


def pytest_configure(config: Any) -> None:
    config.addinivalue_line("markers", "gui: tests exercising the Tk rendering collaborator")


# -----------------------------------------------------------------------------
# Shared Fixtures
# -----------------------------------------------------------------------------
@pytest.fixture
def tree_data() -> List[Dict[str, Any]]:
    """
    Return a small project tree in the raw JSON shape.

    Structure:
      src/
        app/
          main.ts
          util.ts
        index.ts
      docs/
      README.md
    """
    return [
        {
            "name": "src",
            "type": "folder",
            "children": [
                {
                    "name": "app",
                    "type": "folder",
                    "children": [
                        {"name": "main.ts", "type": "file"},
                        {"name": "util.ts", "type": "file"},
                    ],
                },
                {"name": "index.ts", "type": "file"},
            ],
        },
        {"name": "docs", "type": "folder", "children": []},
        {"name": "README.md", "type": "file"},
    ]


@pytest.fixture
def roots(tree_data: List[Dict[str, Any]]) -> Tuple[Node, ...]:
    """Parsed version of `tree_data`."""
    return parse_tree(tree_data)
