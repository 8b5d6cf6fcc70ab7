"""Offset to line/column mapping for JavaScript source text."""

from __future__ import annotations

import re
from bisect import bisect_left
from dataclasses import dataclass
from functools import cached_property

# CRLF counts as a single break; U+2028/U+2029 are encoded as UTF-8 here.
_LINE_BREAK = re.compile(rb"\r\n|[\n\r]|\xe2\x80[\xa8\xa9]")


@dataclass(frozen=True)
class LinePosition:
    line: int
    column: int


class LineMapper:
    """Map byte offsets of a source unit to 1-based line numbers.

    Break offsets are computed once on first use; every query is a binary
    search, so offsets may be asked for in any order.
    """

    def __init__(self, source: bytes) -> None:
        self._source = source

    @cached_property
    def _breaks(self) -> tuple[list[int], list[int]]:
        starts: list[int] = []
        ends: list[int] = []
        for match in _LINE_BREAK.finditer(self._source):
            starts.append(match.start())
            ends.append(match.end())
        return starts, ends

    @property
    def line_count(self) -> int:
        starts, _ = self._breaks
        return len(starts) + 1

    def line_of(self, offset: int) -> LinePosition:
        starts, ends = self._breaks
        # A break counts once it starts strictly before the offset.
        passed = bisect_left(starts, offset)
        line_start = ends[passed - 1] if passed else 0
        return LinePosition(line=passed + 1, column=max(0, offset - line_start))

    def line_span(self, line: int) -> tuple[int, int]:
        """Return the ``[start, end)`` byte span of a line, without its break."""
        starts, ends = self._breaks
        if line < 1 or line > len(starts) + 1:
            msg = f"line {line} out of range 1..{len(starts) + 1}"
            raise ValueError(msg)
        begin = ends[line - 2] if line > 1 else 0
        finish = starts[line - 1] if line <= len(starts) else len(self._source)
        return begin, finish

    def is_blank(self, line: int) -> bool:
        begin, finish = self.line_span(line)
        return not self._source[begin:finish].strip()

    def next_code_line(self, line: int) -> int:
        """First line at or after ``line`` holding non-whitespace text.

        Lines past the end of the source are returned unchanged.
        """
        last = self.line_count
        while line <= last and self.is_blank(line):
            line += 1
        return line


__all__ = ["LineMapper", "LinePosition"]
