"""Command-line interface for remarker."""

from __future__ import annotations

import argparse
import sys
from pathlib import Path

from loguru import logger

from parse.treesitter_js import JavaScriptSyntaxError
from remark.engine import collect, process
from remark.errors import RemarkError
from remark.output import dumps_jsonl, record_rows, write_jsonl
from rules.config import ConfigError, RemarkConfig, load_config
from scan.files import find_source_files


def _add_common_paths(parser: argparse.ArgumentParser) -> None:
    parser.add_argument(
        "root",
        nargs="?",
        default=".",
        help="JavaScript file or directory to scan (default: .)",
    )
    parser.add_argument(
        "-v",
        "--verbose",
        action="store_true",
        help="Log resolution details",
    )


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="remarker")
    subparsers = parser.add_subparsers(dest="command", required=True)

    scan_parser = subparsers.add_parser(
        "scan", help="Write resolved annotations as JSONL"
    )
    _add_common_paths(scan_parser)
    scan_parser.add_argument(
        "--out",
        default=None,
        help="Output JSONL file (default: stdout)",
    )

    describe_parser = subparsers.add_parser(
        "describe", help="Log every annotation and the declaration it decorates"
    )
    _add_common_paths(describe_parser)

    return parser


def _configure_logging(verbose: bool) -> None:
    logger.remove()
    logger.add(
        sys.stderr,
        level="DEBUG" if verbose else "INFO",
        format="{level}: {message}",
    )


def _discover(root: Path, config: RemarkConfig) -> list[Path]:
    if root.is_file():
        return [root]
    return list(
        find_source_files(
            root,
            extensions=config.extensions,
            include_patterns=config.include,
            exclude_patterns=config.exclude,
            nested_gitignore=config.nested_gitignore,
        )
    )


def _relative(path: Path, root: Path) -> str:
    if root.is_file():
        return path.name
    return path.relative_to(root).as_posix()


def _handle_scan(root: Path, config: RemarkConfig, out: str | None) -> int:
    rows = []
    failed = False
    for path in _discover(root, config):
        relative_path = _relative(path, root)
        try:
            records = collect(path.read_bytes(), config=config)
        except (JavaScriptSyntaxError, RemarkError) as exc:
            sys.stderr.write(f"{relative_path}: error: {exc}\n")
            failed = True
            continue
        rows.extend(record_rows(relative_path, records))

    if out is None:
        sys.stdout.write(dumps_jsonl(rows).decode("utf-8"))
    else:
        write_jsonl(Path(out).expanduser().resolve(), rows)
    return 1 if failed else 0


def _handle_describe(root: Path, config: RemarkConfig) -> int:
    failed = False
    for path in _discover(root, config):
        relative_path = _relative(path, root)
        logger.info("{}", relative_path)
        try:
            process(path.read_bytes(), config=config)
        except (JavaScriptSyntaxError, RemarkError) as exc:
            sys.stderr.write(f"{relative_path}: error: {exc}\n")
            failed = True
    return 1 if failed else 0


def main(argv: list[str] | None = None) -> int:
    parser = _build_parser()
    args = parser.parse_args(argv)
    _configure_logging(args.verbose)

    root = Path(args.root).expanduser().resolve()
    if not root.exists():
        sys.stderr.write(f"error: {root} does not exist\n")
        return 2

    try:
        config = load_config(root.parent if root.is_file() else root)
    except ConfigError as exc:
        sys.stderr.write(f"error: {exc}\n")
        return 2

    if args.command == "scan":
        return _handle_scan(root, config, args.out)

    if args.command == "describe":
        return _handle_describe(root, config)

    raise AssertionError


if __name__ == "__main__":
    raise SystemExit(main())
