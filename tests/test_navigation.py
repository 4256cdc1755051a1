"""Tests for resolving go-to-line requests."""

from __future__ import annotations

import pytest

from tideline.core.line_endings import LineIndex
from tideline.core.ranges import FuzzyRange, TextRange
from tideline.editor.navigation import initial_fuzzy_range, resolve_line_range


def test_resolves_single_line_including_terminator(three_line_text: str) -> None:
    resolved = resolve_line_range(FuzzyRange(2), three_line_text)

    assert resolved == TextRange(6, 11)
    assert three_line_text[resolved.start : resolved.end] == "beta\n"


def test_resolves_multiple_lines(three_line_text: str) -> None:
    assert resolve_line_range(FuzzyRange(1, 2), three_line_text) == TextRange(0, 11)


def test_length_is_clipped_at_the_last_line(three_line_text: str) -> None:
    assert resolve_line_range(FuzzyRange(2, 10), three_line_text) == TextRange(6, 17)


def test_zero_and_negative_locations_count_from_the_end(three_line_text: str) -> None:
    assert resolve_line_range(FuzzyRange(0), three_line_text) == TextRange(11, 17)
    assert resolve_line_range(FuzzyRange(-1), three_line_text) == TextRange(6, 11)
    assert resolve_line_range(FuzzyRange(-2), three_line_text) == TextRange(0, 6)


@pytest.mark.parametrize("location", [4, 99, -3, -10])
def test_locations_outside_the_document_resolve_to_none(three_line_text: str, location: int) -> None:
    assert resolve_line_range(FuzzyRange(location), three_line_text) is None


def test_negative_length_is_rejected(three_line_text: str) -> None:
    assert resolve_line_range(FuzzyRange(1, -1), three_line_text) is None


def test_empty_document_has_one_line() -> None:
    assert resolve_line_range(FuzzyRange(1), "") == TextRange(0, 0)
    assert resolve_line_range(FuzzyRange(0), "") == TextRange(0, 0)
    assert resolve_line_range(FuzzyRange(2), "") is None


def test_last_line_without_terminator() -> None:
    assert resolve_line_range(FuzzyRange(2), "one\ntwo") == TextRange(4, 7)


def test_crlf_terminators_belong_to_their_line() -> None:
    text = "one\r\ntwo\r\n"

    assert resolve_line_range(FuzzyRange(1), text) == TextRange(0, 5)
    assert resolve_line_range(FuzzyRange(2), text) == TextRange(5, 10)


def test_every_line_resolves_to_its_own_span(three_line_text: str) -> None:
    index = LineIndex.build(three_line_text)
    pieces = []
    for number in range(1, index.line_count + 1):
        resolved = resolve_line_range(FuzzyRange(number), three_line_text, index=index)
        assert resolved is not None
        pieces.append(three_line_text[resolved.start : resolved.end])

    assert "".join(pieces) == three_line_text


def test_stale_index_is_rebuilt() -> None:
    stale = LineIndex.build("a\nb\nc")

    assert resolve_line_range(FuzzyRange(2), "xx\nyy", index=stale) == TextRange(3, 5)


def test_initial_range_for_caret_reports_line_only(three_line_text: str) -> None:
    assert initial_fuzzy_range(three_line_text, TextRange(7, 7)) == FuzzyRange(2, 0)


def test_initial_range_for_multi_line_selection(three_line_text: str) -> None:
    fuzzy = initial_fuzzy_range(three_line_text, TextRange(1, 13))

    assert fuzzy == FuzzyRange(1, 3)
    assert fuzzy.to_string() == "1:3"


def test_initial_range_round_trips_through_resolver(three_line_text: str) -> None:
    fuzzy = initial_fuzzy_range(three_line_text, TextRange(6, 17))

    assert fuzzy == FuzzyRange(2, 2)
    assert resolve_line_range(fuzzy, three_line_text) == TextRange(6, 17)
