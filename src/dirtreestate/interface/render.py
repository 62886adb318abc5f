from __future__ import annotations

"""
Tree Renderer.

Converts the visible rows of an engine into ASCII lines, or into plain
dictionaries for JSON output. Collapsed folders hide their contents and the
selected row is flagged.
"""

from typing import Any, Dict, List, Sequence, Union

from dirtreestate.core.engine import LazyTreeStateEngine, TreeStateEngine, VisibleRow

Engine = Union[TreeStateEngine, LazyTreeStateEngine]

SELECTED_MARK = "  <"

# -----------------------------------------------------------------------------
# PUBLIC API
# -----------------------------------------------------------------------------

def render_tree(engine: Engine, show_icons: bool = True) -> List[str]:
    """
    Render the currently visible rows using standard connectors (├──, └──).

    Args:
        engine: Eager or lazy engine to read state from.
        show_icons: Prefix names with the configured glyphs.

    Returns:
        List[str]: One line per visible node.
    """
    rows = list(engine.iter_visible())
    last_flags = _last_sibling_flags(rows)

    lines: List[str] = []
    open_levels: List[bool] = []
    for row, is_last in zip(rows, last_flags):
        del open_levels[row.depth:]
        prefix = "".join("    " if done else "│   " for done in open_levels)
        connector = "└── " if is_last else "├── "

        label = row.node.name
        if show_icons:
            label = f"{engine.icon_for(row.node, row.expanded)} {label}"
        if engine.is_selected(row.path):
            label += SELECTED_MARK

        lines.append(f"{prefix}{connector}{label}")
        open_levels.append(is_last)
    return lines


def rows_to_dicts(engine: Engine) -> List[Dict[str, Any]]:
    """Serialise the visible rows for machine consumption."""
    out: List[Dict[str, Any]] = []
    for row in engine.iter_visible():
        out.append({
            "path": row.path,
            "type": row.node.kind.value,
            "depth": row.depth,
            "expanded": row.expanded,
            "selected": engine.is_selected(row.path),
        })
    return out

# -----------------------------------------------------------------------------
# PRIVATE HELPERS
# -----------------------------------------------------------------------------

def _last_sibling_flags(rows: Sequence[VisibleRow]) -> List[bool]:
    """A row is the last sibling when no later row shares its depth before the parent level ends."""
    flags = [True] * len(rows)
    # Depths seen to the right of the current position, innermost open level
    seen_depths: List[int] = []
    for i in range(len(rows) - 1, -1, -1):
        depth = rows[i].depth
        while seen_depths and seen_depths[-1] > depth:
            seen_depths.pop()
        flags[i] = not (seen_depths and seen_depths[-1] == depth)
        if not seen_depths or seen_depths[-1] != depth:
            seen_depths.append(depth)
    return flags
