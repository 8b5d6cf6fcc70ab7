"""JavaScript source discovery for remarker."""

from __future__ import annotations

import os
from fnmatch import fnmatch
from pathlib import Path
from typing import TYPE_CHECKING, cast

from gitignore_parser import parse_gitignore  # type: ignore[import-untyped]

if TYPE_CHECKING:
    from collections.abc import Callable, Collection, Iterator

    GitignoreMatcher = Callable[[str], bool]

DEFAULT_EXTENSIONS = (".js", ".mjs", ".cjs")


def _load_gitignore(directory: Path) -> GitignoreMatcher | None:
    path = directory / ".gitignore"
    # A symlinked .gitignore could pull in rules from outside the tree.
    if path.is_symlink() or not path.is_file():
        return None
    return cast("GitignoreMatcher", parse_gitignore(path))


def _is_ignored(
    path: Path, root: Path, matchers: dict[Path, GitignoreMatcher]
) -> bool:
    """Apply the .gitignore of every directory from ``path`` up to ``root``."""
    for directory in path.parents:
        matcher = matchers.get(directory)
        if matcher is not None and matcher(str(path)):
            return True
        if directory == root:
            break
    return False


def _matches_any(rel_path: str, patterns: list[str] | None) -> bool:
    return bool(patterns) and any(fnmatch(rel_path, pat) for pat in patterns)


def find_source_files(
    directory: Path,
    *,
    extensions: Collection[str] = DEFAULT_EXTENSIONS,
    include_patterns: list[str] | None = None,
    exclude_patterns: list[str] | None = None,
    nested_gitignore: bool = False,
) -> Iterator[Path]:
    """Find JavaScript files under ``directory``, sorted by relative path.

    Symlinked files and directories are never followed, so every result
    lives inside the tree. The root ``.gitignore`` always applies; with
    ``nested_gitignore`` each subdirectory's own ``.gitignore`` applies to
    the files beneath it as well.

    Args:
        directory: Directory to search
        extensions: File suffixes to accept (compared case-insensitively)
        include_patterns: fnmatch patterns on the relative path; when given,
            a file must match at least one
        exclude_patterns: fnmatch patterns on the relative path; a match
            drops the file
        nested_gitignore: Honour .gitignore files below the root
    """
    root = Path(directory)
    suffixes = tuple(suffix.lower() for suffix in extensions)
    matchers: dict[Path, GitignoreMatcher] = {}

    found: list[tuple[str, Path]] = []
    for dirpath, _dirnames, filenames in os.walk(root):
        base = Path(dirpath)
        if base == root or nested_gitignore:
            matcher = _load_gitignore(base)
            if matcher is not None:
                matchers[base] = matcher

        for name in filenames:
            if not name.lower().endswith(suffixes):
                continue
            path = base / name
            if path.is_symlink() or _is_ignored(path, root, matchers):
                continue
            rel_path = path.relative_to(root).as_posix()
            if include_patterns and not _matches_any(rel_path, include_patterns):
                continue
            if _matches_any(rel_path, exclude_patterns):
                continue
            found.append((rel_path, path))

    found.sort()
    for _, path in found:
        yield path


__all__ = ["DEFAULT_EXTENSIONS", "find_source_files"]
