from __future__ import annotations

"""
Configuration Domain Management.

Dict-based defaults and JSON persistence for host preferences (folder
selectability, icon glyphs, filesystem filters), plus the immutable runtime
TreeConfig consumed by the engines. Expansion and selection are never
persisted.
"""

import json
import logging
import os
from dataclasses import dataclass, field
from typing import Any, Callable, Dict, Mapping, Optional, Sequence, Tuple

from dirtreestate.domain.tree_models import Node
from dirtreestate.infra.filters import default_exclude_patterns, default_include_patterns
from dirtreestate.infra.fs import get_user_data_dir

logger = logging.getLogger(__name__)

# -----------------------------------------------------------------------------
# Constants & Defaults
# -----------------------------------------------------------------------------
CONFIG_FILE_NAME = "config.json"
CURRENT_CONFIG_VERSION = "1.0.0"

ICON_FOLDER_CLOSED = "folder-icon-closed"
ICON_FOLDER_OPEN = "folder-icon-open"
ICON_FILE = "file-icon"
FALLBACK_ICON = "\U0001F4C4"

DEFAULT_ICONS: Dict[str, str] = {
    ICON_FOLDER_CLOSED: "\U0001F4C1",
    ICON_FOLDER_OPEN: "\U0001F4C2",
    ICON_FILE: "\U0001F4C4",
}

ContextCallback = Callable[[str, Node], None]


def get_default_config() -> Dict[str, Any]:
    """
    Generate the default host configuration.

    Returns:
        Dict[str, Any]: Default configuration values.
    """
    return {
        # Selection policy
        "folder_selectable": False,

        # Operating mode
        "lazy": False,

        # Theming
        "icons": dict(DEFAULT_ICONS),

        # Filesystem sources
        "include_patterns": default_include_patterns(),
        "exclude_patterns": default_exclude_patterns(),
        "show_hidden": False,
    }


def get_config_path() -> str:
    """Resolve the persistent configuration file inside the user data dir."""
    return os.path.join(get_user_data_dir(), CONFIG_FILE_NAME)

# -----------------------------------------------------------------------------
# Persistence Logic
# -----------------------------------------------------------------------------
def load_config(path: Optional[str] = None) -> Dict[str, Any]:
    """
    Load host configuration from disk, merged over the defaults.

    Args:
        path: Explicit JSON file. Defaults to the user data directory.

    Returns:
        Dict[str, Any]: The loaded configuration or defaults on failure.
    """
    defaults = get_default_config()
    target = path or get_config_path()

    if not os.path.exists(target):
        logger.debug(f"Config file not found at {target}. Returning defaults.")
        return defaults

    try:
        with open(target, "r", encoding="utf-8") as f:
            data = json.load(f)

        if not isinstance(data, dict):
            logger.warning("Corrupted config file. Resetting to defaults.")
            return defaults

        data.pop("version", None)
        icons = data.pop("icons", None)
        defaults.update(data)
        if isinstance(icons, dict):
            defaults["icons"].update(icons)
        return defaults

    except (OSError, ValueError) as e:
        logger.error(f"Failed to load config: {e}. Using defaults.")
        return defaults


def save_config(config: Dict[str, Any], path: Optional[str] = None) -> None:
    """
    Persist the host configuration to disk.

    Args:
        config: Configuration dictionary to save.
        path: Explicit JSON file. Defaults to the user data directory.
    """
    target = path or get_config_path()
    try:
        os.makedirs(os.path.dirname(os.path.abspath(target)), exist_ok=True)
        payload = dict(config)
        payload["version"] = CURRENT_CONFIG_VERSION
        with open(target, "w", encoding="utf-8") as f:
            json.dump(payload, f, ensure_ascii=False, indent=4)
        logger.debug(f"Configuration saved to {target}")
    except OSError as e:
        logger.error(f"Failed to save configuration: {e}")

# -----------------------------------------------------------------------------
# Runtime Models
# -----------------------------------------------------------------------------
@dataclass(frozen=True)
class ContextMenuItem:
    """
    A host-supplied context-menu entry.

    Attributes:
        title: Label shown by the rendering collaborator.
        callback: Invoked with (path, node) when the entry is chosen.
    """
    title: str
    callback: Optional[ContextCallback] = None


@dataclass(frozen=True)
class TreeConfig:
    """
    Immutable runtime configuration shared by the engines.

    Attributes:
        folder_selectable: When False, activating a folder only toggles it.
        context_menu_items: Entries offered on file nodes.
        icons: Glyph lookup keyed by icon name.
    """
    folder_selectable: bool = False
    context_menu_items: Tuple[ContextMenuItem, ...] = ()
    icons: Mapping[str, str] = field(default_factory=lambda: dict(DEFAULT_ICONS))

    @classmethod
    def from_dict(
            cls,
            data: Mapping[str, Any],
            context_menu_items: Sequence[ContextMenuItem] = (),
    ) -> "TreeConfig":
        """Build a runtime config from a (validated) configuration dictionary."""
        icons = dict(DEFAULT_ICONS)
        icons.update(data.get("icons") or {})
        return cls(
            folder_selectable=bool(data.get("folder_selectable", False)),
            context_menu_items=tuple(context_menu_items),
            icons=icons,
        )

    def get_icon(self, key: str) -> str:
        """Opaque glyph lookup with a fixed fallback."""
        glyph = (self.icons.get(key) or "").strip()
        return glyph or FALLBACK_ICON
