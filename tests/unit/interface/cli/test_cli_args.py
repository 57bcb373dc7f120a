from __future__ import annotations

"""
Unit tests for CLI Argument Parsing.

Verifies:
1. Mapping of CLI flags to configuration keys.
2. CSV string parsing logic.
3. Action selection (--ls / --cat / --out).
"""

import pytest

from gitfs.interface.cli.args import _split_csv, args_to_overrides, build_parser


def parse_args(arg_list):
    """Helper to simulate CLI argument parsing."""
    parser = build_parser()
    return parser.parse_args(arg_list)


def test_cli_defaults_produce_no_overrides():
    """Without flags nothing overrides the configuration."""
    args = parse_args(["github.com/o/r"])
    assert args.project == "github.com/o/r"
    assert args_to_overrides(args) == {}
    assert args.ls_path is None
    assert args.cat_path is None
    assert args.pack_files == []


def test_cli_flags_mapping():
    """Tree construction and remote flags map onto config keys."""
    args = parse_args([
        "github.com/o/r",
        "--prefetch",
        "--glob", "docs/*.md, README.md",
        "--token", "t0k",
        "--timeout", "2.5",
        "--workers", "3",
        "--debug",
    ])
    overrides = args_to_overrides(args)

    assert overrides["prefetch"] is True
    assert overrides["glob_patterns"] == ["docs/*.md", "README.md"]
    assert overrides["token"] == "t0k"
    assert overrides["timeout"] == 2.5
    assert overrides["max_workers"] == 3
    assert overrides["log_level"] == "DEBUG"


def test_cli_ls_optional_path():
    """--ls takes an optional start path."""
    assert parse_args(["github.com/o/r", "--ls"]).ls_path == ""
    assert parse_args(["github.com/o/r", "--ls", "docs"]).ls_path == "docs"


def test_cli_actions_are_exclusive():
    """Only one of --ls, --cat and --out may be given."""
    with pytest.raises(SystemExit):
        parse_args(["github.com/o/r", "--cat", "a", "--out", "b"])


def test_cli_pack_is_repeatable():
    """--pack accumulates files."""
    args = parse_args(["github.com/o/r", "--pack", "a.json", "--pack", "b.json"])
    assert args.pack_files == ["a.json", "b.json"]


def test_split_csv_logic():
    """Verify CSV splitting helper handles spaces and empty items."""
    assert _split_csv(" a, b ,,c ") == ["a", "b", "c"]
    assert _split_csv("") == []
    assert _split_csv(None) is None
