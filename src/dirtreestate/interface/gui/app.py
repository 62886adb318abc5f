from __future__ import annotations

"""
GUI Entrypoint and Application Lifecycle Orchestrator.

Initializes the CustomTkinter window, loads host preferences, builds an
engine for the chosen directory and hands it to the Treeview binder. The
binder renders; the engine owns every piece of tree state.
"""

import logging
import os
import sys
from tkinter import filedialog, ttk
from typing import Any, Dict, Optional

import customtkinter as ctk

from dirtreestate.core.engine import LazyTreeStateEngine, TreeStateEngine
from dirtreestate.core.validator import validate_config
from dirtreestate.domain import config as cfg
from dirtreestate.domain.errors import UnsupportedOperation
from dirtreestate.domain.events import SelectionEvent
from dirtreestate.domain.tree_models import Node
from dirtreestate.infra.fs import FileSystemDataSource, scan_directory
from dirtreestate.infra.logging import LoggingConfig, configure_logging, get_default_log_path
from dirtreestate.interface.gui.tree_view import TreeViewBinder
from dirtreestate.utils.i18n import i18n

logger = logging.getLogger(__name__)


# -----------------------------------------------------------------------------
# ENGINE FACTORY
# -----------------------------------------------------------------------------

def build_engine(root_path: str, conf: Dict[str, Any], app: Optional[Any] = None):
    """
    Create the engine for a directory, wiring the 'Copy path' context action.

    Args:
        root_path: Directory to browse.
        conf: Validated host configuration.
        app: Tk root used for clipboard access.
    """

    def copy_path(path: str, _node: Node) -> None:
        if app is not None:
            app.clipboard_clear()
            app.clipboard_append(path)
        logger.info(f"Copied path: {path}")

    items = [cfg.ContextMenuItem(i18n.t("gui.menu.copy_path"), copy_path)]
    tree_config = cfg.TreeConfig.from_dict(conf, context_menu_items=items)

    filters = dict(
        include_patterns=conf["include_patterns"],
        exclude_patterns=conf["exclude_patterns"],
        show_hidden=conf["show_hidden"],
    )
    if conf["lazy"]:
        engine = LazyTreeStateEngine(FileSystemDataSource(root_path, **filters), tree_config)
    else:
        engine = TreeStateEngine(scan_directory(root_path, **filters), tree_config)
    return engine


# -----------------------------------------------------------------------------
# MAIN APPLICATION LOOP
# -----------------------------------------------------------------------------

def main() -> None:
    """Initialize and launch the tree browser window."""
    configure_logging(LoggingConfig(level="INFO", console=True, log_file=get_default_log_path()))

    conf, warnings = validate_config(cfg.load_config())
    for w in warnings:
        logger.warning(f"Configuration Constraint: {w}")

    ctk.set_appearance_mode("System")
    ctk.set_default_color_theme("blue")

    app = ctk.CTk()
    app.title(i18n.t("gui.title"))
    app.geometry("640x720")
    app.grid_columnconfigure(0, weight=1)
    app.grid_rowconfigure(1, weight=1)

    toolbar = ctk.CTkFrame(app)
    toolbar.grid(row=0, column=0, sticky="ew", padx=10, pady=(10, 0))

    tree_frame = ctk.CTkFrame(app)
    tree_frame.grid(row=1, column=0, sticky="nsew", padx=10, pady=10)
    tree_frame.grid_columnconfigure(0, weight=1)
    tree_frame.grid_rowconfigure(0, weight=1)

    tree = ttk.Treeview(tree_frame, show="tree", selectmode="browse")
    tree.grid(row=0, column=0, sticky="nsew")

    status = ctk.CTkLabel(app, text=i18n.t("gui.status.nothing"), anchor="w")
    status.grid(row=2, column=0, sticky="ew", padx=10, pady=(0, 10))

    state: Dict[str, Any] = {"binder": None}

    def on_select(event: SelectionEvent) -> None:
        status.configure(text=i18n.t("gui.status.selected", path=event.path))

    def load(root_path: str) -> None:
        """Swap in a fresh engine/binder pair for a new directory."""
        if state["binder"] is not None:
            state["binder"].detach()
        engine = build_engine(root_path, conf, app)
        engine.add_selection_listener(on_select)
        binder = TreeViewBinder(tree, engine)
        state["binder"] = binder
        binder.prime()
        status.configure(text=i18n.t("gui.status.nothing"))
        logger.info(f"Browsing {root_path}")

    def on_open_folder() -> None:
        chosen = filedialog.askdirectory(parent=app)
        if chosen:
            load(chosen)

    def on_expand_all() -> None:
        binder = state["binder"]
        if binder is None:
            return
        try:
            binder.engine.expand_all()
        except UnsupportedOperation as e:
            logger.info(f"Expand all unavailable: {e}")

    def on_collapse_all() -> None:
        if state["binder"] is not None:
            state["binder"].engine.collapse_all()

    ctk.CTkButton(toolbar, text=i18n.t("gui.buttons.open"), command=on_open_folder).pack(side="left", padx=5, pady=5)
    ctk.CTkButton(toolbar, text=i18n.t("gui.buttons.expand_all"), command=on_expand_all).pack(side="left", padx=5, pady=5)
    ctk.CTkButton(toolbar, text=i18n.t("gui.buttons.collapse_all"), command=on_collapse_all).pack(side="left", padx=5, pady=5)

    start = sys.argv[1] if len(sys.argv) > 1 else os.getcwd()
    load(start)

    app.mainloop()


if __name__ == "__main__":
    main()
