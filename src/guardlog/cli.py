# src/guardlog/cli.py
"""
guardlog CLI

Operator surface over the checkout journal.

Subcommands:
  - tail     Print the last lines of the journal (or of one of its rotations)
  - stats    Print journal statistics as JSON
  - rotate   Force a rotation of the active file
  - purge    Delete rotations older than the retention window
  - log      Append a message record
  - secure   Create the journal directory and its access markers

Examples:
  python -m guardlog.cli --config deploy/journal.yaml tail --lines 500
  GUARDLOG_LOG_BASE_PATH=/srv/shop/uploads python -m guardlog.cli stats
"""

from __future__ import annotations

import argparse
import json
import logging
import sys
from pathlib import Path
from typing import List, Optional

from guardlog import build_logger
from guardlog.config import LogConfig, config_from_env, load_config
from guardlog.errors import ConfigError
from guardlog.events import LOG_LEVELS
from guardlog.facade import LogFacade
from guardlog.validator import is_valid_filepath

MIN_TAIL_LINES = 10
MAX_TAIL_LINES = 2000
NO_LOG_MESSAGE = "No log available."


def _clamp_lines(n: int) -> int:
    return max(MIN_TAIL_LINES, min(int(n), MAX_TAIL_LINES))


def _resolve_config(path: Optional[str]) -> LogConfig:
    base = load_config(path) if path else None
    return config_from_env(base=base)


# -----------------------------------------------------------------------------
# Subcommands
# -----------------------------------------------------------------------------


def _cmd_tail(journal: LogFacade, args: argparse.Namespace) -> int:
    lines = _clamp_lines(args.lines if args.lines is not None else journal.config.default_tail_lines)
    if args.file:
        if not is_valid_filepath(args.file) or not journal.store.is_journal_file(args.file):
            print(f"Refusing to read {args.file!r}.", file=sys.stderr)
            return 2
        target = Path(args.file)
    else:
        target = journal.store.log_path

    if not target.is_file():
        print(NO_LOG_MESSAGE)
        return 0
    print(journal.store.tail(target, lines))
    return 0


def _cmd_stats(journal: LogFacade, args: argparse.Namespace) -> int:
    print(json.dumps(journal.stats(), indent=2, sort_keys=True))
    return 0


def _cmd_rotate(journal: LogFacade, args: argparse.Namespace) -> int:
    if journal.force_rotate():
        print("Rotation done.")
        return 0
    print("Rotation failed: no active log file.", file=sys.stderr)
    return 1


def _cmd_purge(journal: LogFacade, args: argparse.Namespace) -> int:
    print(json.dumps({"deleted_count": journal.purge()}, sort_keys=True))
    return 0


def _cmd_log(journal: LogFacade, args: argparse.Namespace) -> int:
    result = journal.log_message(args.message, level=args.level)
    if result:
        return 0
    print(f"Record not written: {result.reason}", file=sys.stderr)
    return 1


def _cmd_secure(journal: LogFacade, args: argparse.Namespace) -> int:
    journal.ensure_directory_secure()
    print(str(journal.store.log_path.parent))
    return 0


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="guardlog", description="Inspect and maintain the checkout journal.")
    parser.add_argument("--config", help="YAML file with journal settings (GUARDLOG_* env vars override it).")
    parser.add_argument("-v", "--verbose", action="store_true", help="Enable debug logging.")
    subparsers = parser.add_subparsers(dest="command", required=True)

    tail_parser = subparsers.add_parser("tail", help="Print the last lines of the journal.")
    tail_parser.add_argument(
        "--lines",
        type=int,
        default=None,
        help=f"Number of lines, clamped to [{MIN_TAIL_LINES}, {MAX_TAIL_LINES}].",
    )
    tail_parser.add_argument("--file", help="Read a rotation of the journal instead of the active file.")
    tail_parser.set_defaults(func=_cmd_tail)

    stats_parser = subparsers.add_parser("stats", help="Print journal statistics as JSON.")
    stats_parser.set_defaults(func=_cmd_stats)

    rotate_parser = subparsers.add_parser("rotate", help="Force a rotation of the active file.")
    rotate_parser.set_defaults(func=_cmd_rotate)

    purge_parser = subparsers.add_parser("purge", help="Delete expired rotations.")
    purge_parser.set_defaults(func=_cmd_purge)

    log_parser = subparsers.add_parser("log", help="Append a message record.")
    log_parser.add_argument("message", help="Message text.")
    log_parser.add_argument("--level", default="info", choices=sorted(LOG_LEVELS), help="Message level.")
    log_parser.set_defaults(func=_cmd_log)

    secure_parser = subparsers.add_parser("secure", help="Create the journal directory and markers.")
    secure_parser.set_defaults(func=_cmd_secure)

    return parser


def main(argv: Optional[List[str]] = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)
    logging.basicConfig(level=logging.DEBUG if args.verbose else logging.WARNING)

    try:
        config = _resolve_config(args.config)
    except ConfigError as e:
        print(str(e), file=sys.stderr)
        return 2

    journal = build_logger(config)
    return int(args.func(journal, args))


if __name__ == "__main__":
    raise SystemExit(main())
