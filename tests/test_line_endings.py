"""Tests for line terminator detection and line offsets."""

from __future__ import annotations

import pytest

from tideline.core.line_endings import (
    LineEnding,
    LineIndex,
    count_lines,
    detect_line_ending,
    line_ending_counts,
    line_spans,
    replace_line_endings,
)


@pytest.mark.parametrize(
    ("text", "expected"),
    [
        ("a\nb", LineEnding.LF),
        ("a\r\nb", LineEnding.CRLF),
        ("a\rb", LineEnding.CR),
        ("a\u0085b", LineEnding.NEL),
        ("a\u2028b", LineEnding.LINE_SEPARATOR),
        ("a\u2029b", LineEnding.PARAGRAPH_SEPARATOR),
        ("a\r\nb\nc", LineEnding.CRLF),
    ],
)
def test_detect_line_ending_reports_first_terminator(text: str, expected: LineEnding) -> None:
    assert detect_line_ending(text) is expected


@pytest.mark.parametrize("text", ["", "hello", None])
def test_detect_line_ending_without_terminators(text) -> None:
    assert detect_line_ending(text) is None


def test_replace_line_endings_rewrites_every_style() -> None:
    text = "a\r\nb\rc\nd\u2028e"

    assert replace_line_endings(text) == "a\nb\nc\nd\ne"
    assert replace_line_endings("a\nb", LineEnding.CRLF) == "a\r\nb"


def test_replace_line_endings_leaves_plain_text_alone() -> None:
    assert replace_line_endings("hello", LineEnding.CRLF) == "hello"


def test_line_ending_counts_groups_by_style() -> None:
    counts = line_ending_counts("a\r\nb\r\nc\nd")

    assert counts[LineEnding.CRLF] == 2
    assert counts[LineEnding.LF] == 1
    assert LineEnding.CR not in counts


def test_coerce_accepts_names_labels_and_sequences() -> None:
    assert LineEnding.coerce("crlf") is LineEnding.CRLF
    assert LineEnding.coerce("LS") is LineEnding.LINE_SEPARATOR
    assert LineEnding.coerce("paragraph-separator") is LineEnding.PARAGRAPH_SEPARATOR
    assert LineEnding.coerce("\r") is LineEnding.CR
    assert LineEnding.coerce(LineEnding.LF) is LineEnding.LF
    with pytest.raises(ValueError):
        LineEnding.coerce("dos")


def test_line_spans_include_terminators(three_line_text: str) -> None:
    assert line_spans(three_line_text) == [(0, 6), (6, 11), (11, 17)]
    assert line_spans("a\nb") == [(0, 2), (2, 3)]
    assert line_spans("a\r\nb") == [(0, 3), (3, 4)]


def test_empty_text_is_one_empty_line() -> None:
    assert line_spans("") == [(0, 0)]
    assert LineIndex.build("").line_count == 1
    assert count_lines("") == 0


def test_count_lines_counts_partial_lines() -> None:
    assert count_lines("a") == 1
    assert count_lines("a\n") == 1
    assert count_lines("a\nb") == 2


def test_line_index_reports_line_numbers() -> None:
    index = LineIndex.build("a\nb")

    assert [index.line_number_at(offset) for offset in range(4)] == [1, 1, 2, 2]
    assert index.span_for_line(2) == (2, 3)
    with pytest.raises(IndexError):
        index.span_for_line(3)


def test_line_number_after_trailing_terminator_is_next_line() -> None:
    index = LineIndex.build("a\n")

    assert index.line_count == 1
    assert index.line_number_at(2) == 2
