from __future__ import annotations

"""
CLI Argument Definition and Mapping.

Defines the command-line interface schema and translates the parsed
namespace into configuration overrides.
"""

import argparse
from typing import Any, Dict, List, Optional

from dirtreestate.utils.i18n import i18n

# -----------------------------------------------------------------------------
# ARGUMENT DEFINITION
# -----------------------------------------------------------------------------

def build_parser() -> argparse.ArgumentParser:
    """
    Construct the argument parser for the dirtreestate CLI.

    Returns:
        argparse.ArgumentParser: Configured parser instance.
    """
    p = argparse.ArgumentParser(
        prog="dirtreestate",
        description=i18n.t("app.description"),
    )

    p.add_argument("source", help=i18n.t("cli.args.source"))

    # --- Tree State ---
    p.add_argument("--lazy", action="store_true", default=None, help=i18n.t("cli.args.lazy"))
    p.add_argument("--select", dest="select_path", default=None, help=i18n.t("cli.args.select"))
    p.add_argument("--collapse-all", action="store_true", help=i18n.t("cli.args.collapse_all"))
    p.add_argument(
        "--folders-selectable",
        dest="folder_selectable",
        action="store_true",
        default=None,
        help=i18n.t("cli.args.folders_selectable"),
    )

    # --- Filesystem Filters ---
    p.add_argument("--include", dest="include_patterns", default=None, help=i18n.t("cli.args.include"))
    p.add_argument("--exclude", dest="exclude_patterns", default=None, help=i18n.t("cli.args.exclude"))
    p.add_argument("--show-hidden", action="store_true", default=None, help=i18n.t("cli.args.show_hidden"))

    # --- Configuration and Diagnostic Tools ---
    p.add_argument("--config", dest="config_file", default=None, help=i18n.t("cli.args.config"))
    p.add_argument("--use-defaults", action="store_true", help=i18n.t("cli.args.defaults"))
    p.add_argument("--dump-config", action="store_true", help=i18n.t("cli.args.dump"))
    p.add_argument("--debug", action="store_true", help=i18n.t("cli.args.debug"))

    # --- Format Selection ---
    p.add_argument("--json", dest="json_output", action="store_true", help=i18n.t("cli.args.json"))

    return p

# -----------------------------------------------------------------------------
# ARGUMENT MAPPING
# -----------------------------------------------------------------------------

def args_to_overrides(args: argparse.Namespace) -> Dict[str, Any]:
    """
    Translate the argparse Namespace into configuration overrides.

    Only flags the user actually passed produce a key, so saved
    preferences survive unless explicitly overridden.

    Args:
        args: Parsed command-line arguments.

    Returns:
        Dict[str, Any]: Configuration overrides subset.
    """
    overrides: Dict[str, Any] = {}

    if args.lazy is not None:
        overrides["lazy"] = True
    if args.folder_selectable is not None:
        overrides["folder_selectable"] = True
    if args.show_hidden is not None:
        overrides["show_hidden"] = True

    include = _split_csv(args.include_patterns)
    if include is not None:
        overrides["include_patterns"] = include
    exclude = _split_csv(args.exclude_patterns)
    if exclude is not None:
        overrides["exclude_patterns"] = exclude

    return overrides


def _split_csv(value: Optional[str]) -> Optional[List[str]]:
    """Split a comma-separated flag value; None when the flag is absent."""
    if value is None:
        return None
    return [x.strip() for x in value.split(",") if x.strip()]
