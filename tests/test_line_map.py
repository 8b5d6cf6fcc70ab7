from __future__ import annotations

import pytest

from parse.line_map import LineMapper, LinePosition


def test_line_of_counts_every_break_style_once() -> None:
    mapper = LineMapper(b"a\nb\r\nc\rd")

    assert mapper.line_of(0) == LinePosition(line=1, column=0)
    assert mapper.line_of(2) == LinePosition(line=2, column=0)
    assert mapper.line_of(5) == LinePosition(line=3, column=0)
    assert mapper.line_of(7) == LinePosition(line=4, column=0)
    assert mapper.line_count == 4


def test_line_of_is_correct_for_out_of_order_queries() -> None:
    source = b"one\ntwo\nthree\nfour\n"
    mapper = LineMapper(source)
    offsets = [source.index(b"four"), source.index(b"two"), 0, source.index(b"three")]

    lines = [mapper.line_of(offset).line for offset in offsets]

    assert lines == [4, 2, 1, 3]
    assert mapper.line_of(source.index(b"hree")).column == 1


def test_break_offset_itself_belongs_to_the_line_it_ends() -> None:
    mapper = LineMapper(b"ab\ncd")

    assert mapper.line_of(2) == LinePosition(line=1, column=2)


def test_unicode_line_separators_break_lines() -> None:
    mapper = LineMapper("a\u2028b\u2029c".encode())

    assert mapper.line_of(4).line == 2
    assert mapper.line_of(8).line == 3


def test_next_code_line_skips_blank_lines() -> None:
    mapper = LineMapper(b"// @Log\n\n   \nfunction f() {}\n")

    assert mapper.is_blank(2)
    assert mapper.is_blank(3)
    assert not mapper.is_blank(4)
    assert mapper.next_code_line(2) == 4
    assert mapper.next_code_line(4) == 4


def test_next_code_line_past_end_is_unchanged() -> None:
    mapper = LineMapper(b"// @Log\n")

    assert mapper.next_code_line(2) == 3


def test_line_span_rejects_out_of_range_lines() -> None:
    mapper = LineMapper(b"x\ny")

    assert mapper.line_span(2) == (2, 3)
    with pytest.raises(ValueError):
        mapper.line_span(3)
