from __future__ import annotations

"""
Command Line Interface (CLI) Application Controller.

Orchestrates the CLI lifecycle: logging bootstrap, configuration merging
(defaults, saved file, command-line overrides), registration of pack
files, opening the project and running the requested action (list, cat
or pack).
"""

import json
import sys
from typing import Any, Dict, List, Optional

from gitfs.core.engine import open_filesystem
from gitfs.core.services import codec
from gitfs.core.services.registry import BinaryRegistry, make_pack_record
from gitfs.core.services.walker import walk
from gitfs.core.tree.path_tree import PathTree
from gitfs.domain.config import get_default_config, load_config, validate_config
from gitfs.domain.errors import GitFSError, InvalidRequestError, ParseError
from gitfs.infra.logging import LoggingConfig, configure_logging, get_logger
from gitfs.interface.cli import args as cli_args

logger = get_logger(__name__)

EXIT_OK = 0
EXIT_FAILURE = 1
EXIT_USAGE = 2
EXIT_INTERRUPTED = 130

# -----------------------------------------------------------------------------
# ENTRYPOINT ORCHESTRATOR
# -----------------------------------------------------------------------------

def main(argv: Optional[List[str]] = None) -> int:
    """
    Execute the CLI workflow.

    Args:
        argv: Optional list of command line arguments. Defaults to sys.argv.

    Returns:
        int: Process exit code.
    """
    # 1. Argument parsing phase
    parser = cli_args.build_parser()
    args = parser.parse_args(argv)

    # 2. Configuration hierarchy
    base_conf = get_default_config() if args.use_defaults else load_config(args.config_path)
    raw_conf = dict(base_conf)
    raw_conf.update(cli_args.args_to_overrides(args))
    clean_conf, warnings = validate_config(raw_conf, strict=False)

    # 3. Logging bootstrap (stderr, optional file)
    configure_logging(LoggingConfig(
        level=clean_conf["log_level"],
        console=True,
        log_file=clean_conf["log_file"] or None,
    ), force=True)

    for w in warnings:
        logger.warning(f"Configuration Warning: {w}")

    if args.dump_config:
        print(json.dumps(_redact(clean_conf), ensure_ascii=False, indent=2))
        return EXIT_OK

    # 4. Open the project and run the action
    try:
        registry = _load_registry(args.pack_files)
        fs = open_filesystem(
            args.project,
            local_path=args.local_path,
            registry=registry,
            config=clean_conf,
        )
        if args.cat_path is not None:
            _cat(fs, args.cat_path)
        elif args.out_file is not None:
            _write_pack(fs, args.project, args.out_file)
        else:
            _list(fs, args.ls_path or "", args.json_output)
    except KeyboardInterrupt:
        logger.warning("Interrupted by user.")
        return EXIT_INTERRUPTED
    except ParseError as e:
        logger.error(str(e))
        print(f"ERROR: {e}", file=sys.stderr)
        return EXIT_USAGE
    except (GitFSError, OSError) as e:
        logger.debug("Command failed", exc_info=True)
        print(f"ERROR: {e}", file=sys.stderr)
        return EXIT_FAILURE

    return EXIT_OK

# -----------------------------------------------------------------------------
# ACTIONS
# -----------------------------------------------------------------------------

def _load_registry(pack_files: List[str]) -> Optional[BinaryRegistry]:
    if not pack_files:
        return None
    registry = BinaryRegistry()
    for path in pack_files:
        registry.load_pack(path)
    return registry


def _list(fs: PathTree, root: str, json_output: bool) -> None:
    entries = list(walk(fs, root))
    if json_output:
        rows = [{"path": p, "is_dir": i.is_dir, "size": i.size} for p, i in entries if p]
        print(json.dumps(rows, ensure_ascii=False, indent=2))
        return
    for path, info in entries:
        if not path:
            continue
        print(path + "/" if info.is_dir else path)


def _cat(fs: PathTree, path: str) -> None:
    with fs.open(path) as f:
        if f.stat().is_dir:
            raise InvalidRequestError(f"cat {path}: is a directory")
        data = f.read()
    out = getattr(sys.stdout, "buffer", None)
    if out is None:
        sys.stdout.write(data.decode("utf-8", errors="replace"))
        return
    sys.stdout.flush()
    out.write(data)
    out.flush()


def _write_pack(fs: PathTree, project: str, out_file: str) -> None:
    record = make_pack_record(project, codec.encode(fs))
    with open(out_file, "w", encoding="utf-8") as f:
        json.dump(record, f)
    logger.info(f"Wrote pack of {project} ({fs.file_count()} files) to {out_file}")


def _redact(conf: Dict[str, Any]) -> Dict[str, Any]:
    out = dict(conf)
    if out.get("token"):
        out["token"] = "***"
    return out

# -----------------------------------------------------------------------------
# CLI ENTRYPOINT
# -----------------------------------------------------------------------------

if __name__ == "__main__":
    sys.exit(main())
