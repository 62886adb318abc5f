from __future__ import annotations

"""
Command Line Interface (CLI) Application Controller.

Orchestrates the CLI lifecycle: logging bootstrap, configuration merging
(defaults, saved preferences, CLI overrides), tree loading from a directory
or a JSON file, optional reveal/selection of a path, and rendering of the
visible rows. Tree-state failures degrade to an unselected tree rather than
aborting.
"""

import asyncio
import json
import os
import sys
from typing import Any, Dict, List, Optional, Tuple

from dirtreestate.core.engine import LazyTreeStateEngine, TreeStateEngine
from dirtreestate.core.index import in_memory_source
from dirtreestate.core.validator import validate_config
from dirtreestate.domain.config import TreeConfig, get_default_config, load_config
from dirtreestate.domain.errors import NotFound, TreeStateError
from dirtreestate.domain.tree_models import Node, parse_tree
from dirtreestate.infra.fs import FileSystemDataSource, scan_directory
from dirtreestate.infra.logging import LoggingConfig, configure_logging, get_logger
from dirtreestate.interface.cli import args as cli_args
from dirtreestate.interface.render import render_tree, rows_to_dicts
from dirtreestate.utils.i18n import i18n

logger = get_logger(__name__)

# -----------------------------------------------------------------------------
# ENTRYPOINT ORCHESTRATOR
# -----------------------------------------------------------------------------

def main(argv: Optional[List[str]] = None) -> int:
    """
    Execute the main CLI application workflow.

    Args:
        argv: Optional list of command line arguments. Defaults to sys.argv.

    Returns:
        int: Process exit code (0 success, 1 unexpected failure, 2 bad source).
    """
    # 1. Argument parsing phase
    parser = cli_args.build_parser()
    args = parser.parse_args(argv)

    # 2. Logging bootstrap (CLI-specific: Console stderr)
    log_level = "DEBUG" if args.debug else "WARNING"
    configure_logging(LoggingConfig(level=log_level, console=True, log_file=None))

    # 3. Resolve configuration hierarchy
    base_conf = get_default_config() if args.use_defaults else load_config(args.config_file)
    raw_conf = _merge_config(base_conf, cli_args.args_to_overrides(args))
    clean_conf, warnings = validate_config(raw_conf, strict=False)
    for w in warnings:
        logger.warning(f"Configuration Constraint: {w}")

    if args.dump_config:
        print(json.dumps(clean_conf, ensure_ascii=False, indent=2))
        return 0

    # 4. Pre-flight source verification
    source = args.source
    if not os.path.exists(source):
        msg = i18n.t("cli.errors.source_missing", path=source)
        logger.error(msg)
        print(f"ERROR: {msg}", file=sys.stderr)
        return 2

    tree_config = TreeConfig.from_dict(clean_conf)

    # 5. Engine construction and state preparation
    try:
        if os.path.isdir(source):
            engine = _build_directory_engine(source, clean_conf, tree_config)
        else:
            engine = _build_json_engine(source, clean_conf, tree_config)
    except (OSError, ValueError, TreeStateError) as e:
        msg = i18n.t("cli.errors.bad_tree", path=source, error=str(e))
        logger.error(msg)
        print(f"ERROR: {msg}", file=sys.stderr)
        return 2
    except Exception as e:
        return _report_unexpected(e)

    try:
        if isinstance(engine, LazyTreeStateEngine):
            asyncio.run(_prepare_lazy(engine, args.select_path, args.collapse_all))
        else:
            _prepare_eager(engine, args.select_path, args.collapse_all)
    except KeyboardInterrupt:
        print(i18n.t("cli.status.interrupted"), file=sys.stderr)
        return 130
    except Exception as e:
        return _report_unexpected(e)

    # 6. Output rendering phase
    try:
        if args.json_output:
            payload = {"selected": engine.selected_path, "rows": rows_to_dicts(engine)}
            print(json.dumps(payload, ensure_ascii=False, indent=2))
        else:
            for line in render_tree(engine):
                print(line)
    except Exception as e:
        return _report_unexpected(e)
    return 0

# -----------------------------------------------------------------------------
# ENGINE CONSTRUCTION
# -----------------------------------------------------------------------------

def _build_directory_engine(path: str, conf: Dict[str, Any], tree_config: TreeConfig):
    filters = dict(
        include_patterns=conf["include_patterns"],
        exclude_patterns=conf["exclude_patterns"],
        show_hidden=conf["show_hidden"],
    )
    if conf["lazy"]:
        return LazyTreeStateEngine(FileSystemDataSource(path, **filters).fetch, tree_config)
    return TreeStateEngine(scan_directory(path, **filters), tree_config)


def _build_json_engine(path: str, conf: Dict[str, Any], tree_config: TreeConfig):
    roots = load_tree_file(path)
    if conf["lazy"]:
        return LazyTreeStateEngine(in_memory_source(roots), tree_config)
    return TreeStateEngine(roots, tree_config)


def load_tree_file(path: str) -> Tuple[Node, ...]:
    """
    Read a JSON node list from disk.

    Raises:
        OSError / ValueError: Unreadable or malformed JSON.
        TreeStateError: The node structure is invalid.
    """
    with open(path, "r", encoding="utf-8") as f:
        data = json.load(f)
    return parse_tree(data)

# -----------------------------------------------------------------------------
# STATE PREPARATION
# -----------------------------------------------------------------------------

def _prepare_eager(engine: TreeStateEngine, select_path: Optional[str], collapse: bool) -> None:
    if collapse:
        engine.collapse_all()
    if select_path:
        try:
            engine.select_file(select_path)
        except NotFound:
            _report_not_found(select_path)


async def _prepare_lazy(engine: LazyTreeStateEngine, select_path: Optional[str], collapse: bool) -> None:
    await engine.children_of(None)
    if collapse:
        engine.collapse_all()
    if select_path:
        try:
            await engine.select_file(select_path)
        except NotFound:
            _report_not_found(select_path)


def _report_not_found(path: str) -> None:
    msg = i18n.t("cli.status.not_found", path=path)
    logger.warning(msg)
    print(msg, file=sys.stderr)


def _report_unexpected(error: Exception) -> int:
    msg = i18n.t("cli.errors.unexpected", error=str(error))
    logger.critical(msg, exc_info=True)
    print(f"ERROR: {msg}", file=sys.stderr)
    return 1

# -----------------------------------------------------------------------------
# CONFIGURATION MERGING
# -----------------------------------------------------------------------------

def _merge_config(base: Dict[str, Any], overrides: Dict[str, Any]) -> Dict[str, Any]:
    """
    Shallow merge of known override keys into the base configuration.

    Args:
        base: The primary configuration dictionary.
        overrides: New values to inject.

    Returns:
        Dict[str, Any]: The merged configuration state.
    """
    out = dict(base)
    keys_to_merge = [
        "folder_selectable", "lazy", "show_hidden",
        "include_patterns", "exclude_patterns",
    ]
    for k in keys_to_merge:
        if k in overrides and overrides[k] is not None:
            out[k] = overrides[k]
    return out


if __name__ == "__main__":
    sys.exit(main())
