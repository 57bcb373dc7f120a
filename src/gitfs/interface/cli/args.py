from __future__ import annotations

"""
CLI Argument Definition and Mapping.

Defines the command-line schema of the gitfs tool and translates the
parsed namespace into configuration overrides.
"""

import argparse
from typing import Any, Dict, List, Optional

# -----------------------------------------------------------------------------
# ARGUMENT DEFINITION
# -----------------------------------------------------------------------------

def build_parser() -> argparse.ArgumentParser:
    """
    Construct the argument parser for the gitfs CLI.

    Returns:
        argparse.ArgumentParser: Configured parser instance.
    """
    p = argparse.ArgumentParser(
        prog="gitfs",
        description="Browse, read and pack a git repository as a read-only filesystem.",
    )
    p.add_argument(
        "project",
        help="Project identifier: host/owner/repo[/subpath][@ref], e.g. github.com/owner/repo@v1.0.0",
    )

    # --- Actions ---
    action = p.add_mutually_exclusive_group()
    action.add_argument(
        "--ls",
        dest="ls_path",
        nargs="?",
        const="",
        default=None,
        metavar="PATH",
        help="List the tree recursively from PATH (default action, root if omitted).",
    )
    action.add_argument(
        "--cat",
        dest="cat_path",
        default=None,
        metavar="PATH",
        help="Write the content of a file to stdout.",
    )
    action.add_argument(
        "--out",
        dest="out_file",
        default=None,
        metavar="FILE",
        help="Download everything and write a pack file loadable with --pack.",
    )

    # --- Tree Construction ---
    p.add_argument(
        "--prefetch",
        action="store_true",
        default=None,
        help="Download all files while building the tree.",
    )
    p.add_argument(
        "--glob",
        dest="glob_patterns",
        default=None,
        help="Comma-separated include patterns, e.g. 'docs/*.md,README.md'.",
    )
    p.add_argument(
        "--local",
        dest="local_path",
        default=None,
        help="Serve the project from the git checkout enclosing this path.",
    )
    p.add_argument(
        "--pack",
        dest="pack_files",
        action="append",
        default=[],
        metavar="FILE",
        help="Register a pack file before opening the project (repeatable).",
    )

    # --- Remote Access ---
    p.add_argument("--token", default=None, help="API access token (else $GITHUB_TOKEN).")
    p.add_argument("--timeout", type=float, default=None, help="Per-request timeout in seconds.")
    p.add_argument("--workers", dest="max_workers", type=int, default=None,
                   help="Concurrent requests during --prefetch.")

    # --- Configuration and Diagnostic Tools ---
    p.add_argument("--config", dest="config_path", default=None, help="Configuration JSON file.")
    p.add_argument("--use-defaults", action="store_true", help="Ignore the saved configuration file.")
    p.add_argument("--dump-config", action="store_true", help="Print the effective configuration and exit.")
    p.add_argument("--log-file", dest="log_file", default=None, help="Also write logs to this file.")
    p.add_argument(
        "--debug",
        action="store_true",
        help="Elevate logging verbosity to DEBUG.",
    )

    # --- Format Selection ---
    p.add_argument(
        "--json",
        dest="json_output",
        action="store_true",
        help="Print listings as JSON.",
    )

    return p

# -----------------------------------------------------------------------------
# ARGUMENT MAPPING
# -----------------------------------------------------------------------------

def args_to_overrides(args: argparse.Namespace) -> Dict[str, Any]:
    """
    Translate the argparse Namespace into configuration overrides.

    Only options given on the command line appear in the result.
    """
    overrides: Dict[str, Any] = {}

    if args.prefetch:
        overrides["prefetch"] = True
    if args.glob_patterns is not None:
        overrides["glob_patterns"] = _split_csv(args.glob_patterns)
    if args.token:
        overrides["token"] = args.token
    if args.timeout is not None:
        overrides["timeout"] = args.timeout
    if args.max_workers is not None:
        overrides["max_workers"] = args.max_workers
    if args.log_file:
        overrides["log_file"] = args.log_file
    if args.debug:
        overrides["log_level"] = "DEBUG"

    return overrides

# -----------------------------------------------------------------------------
# HELPERS
# -----------------------------------------------------------------------------

def _split_csv(value: Optional[str]) -> Optional[List[str]]:
    """Convert a comma-separated string into a list of stripped, non-empty items."""
    if value is None:
        return None
    return [x.strip() for x in value.split(",") if x.strip()]
