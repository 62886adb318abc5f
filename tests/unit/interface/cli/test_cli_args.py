from __future__ import annotations

"""
Unit tests for CLI Argument Parsing.

Verifies:
1. Mapping of CLI flags to configuration keys.
2. CSV string parsing logic.
3. Absent flags produce no overrides.
"""

from dirtreestate.interface.cli.args import args_to_overrides, build_parser


def parse_args(arg_list):
    """Helper to simulate CLI argument parsing."""
    parser = build_parser()
    return parser.parse_args(arg_list)


def test_cli_simple_flags_mapping():
    """Verify boolean flags are mapped correctly to config overrides."""
    args = parse_args(["tree.json", "--lazy", "--folders-selectable", "--show-hidden"])

    overrides = args_to_overrides(args)

    assert overrides["lazy"] is True
    assert overrides["folder_selectable"] is True
    assert overrides["show_hidden"] is True


def test_cli_absent_flags_keep_saved_preferences():
    args = parse_args(["tree.json"])
    assert args_to_overrides(args) == {}


def test_cli_csv_list_parsing():
    """Verify comma-separated strings are parsed into lists."""
    args = parse_args(["src", "--include", r"\.ts$, \.js$", "--exclude", "dist,,build"])

    overrides = args_to_overrides(args)

    assert overrides["include_patterns"] == [r"\.ts$", r"\.js$"]
    assert overrides["exclude_patterns"] == ["dist", "build"]


def test_cli_state_arguments():
    """Verify selection and display arguments are captured."""
    args = parse_args([
        "src",
        "--select", "app/main.ts",
        "--collapse-all",
        "--config", "prefs.json",
        "--json",
    ])

    assert args.source == "src"
    assert args.select_path == "app/main.ts"
    assert args.collapse_all is True
    assert args.config_file == "prefs.json"
    assert args.json_output is True
    assert args.debug is False
