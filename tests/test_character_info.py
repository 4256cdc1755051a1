"""Tests for single-character inspection."""

from __future__ import annotations

import pytest

from tideline.core.line_endings import LineEnding
from tideline.editor.character_info import (
    CharacterInfo,
    NotSingleCharacterError,
    grapheme_range_at,
    inspect_character,
    parse_code_point,
)


def test_precomposed_letter() -> None:
    info = inspect_character("\u00E9")

    assert info is not None
    assert not info.is_complex
    scalar = info.scalars[0]
    assert scalar.code_point_label == "U+00E9"
    assert scalar.name == "LATIN SMALL LETTER E WITH ACUTE"
    assert scalar.category_name == "Lowercase Letter"
    assert scalar.utf8_bytes == b"\xc3\xa9"
    assert scalar.byte_lengths == {"UTF-8": 2, "UTF-16": 2, "UTF-32": 4}


def test_combining_sequence_is_one_complex_character() -> None:
    info = inspect_character("e\u0301")

    assert info is not None
    assert info.is_complex
    assert [scalar.code_point for scalar in info.scalars] == [0x65, 0x301]
    assert info.description == "LATIN SMALL LETTER E + COMBINING ACUTE ACCENT"
    assert info.scalars[1].category == "Mn"


@pytest.mark.parametrize("selection", ["", None, "ab", "e\u0301e"])
def test_selections_that_are_not_one_character(selection) -> None:
    assert inspect_character(selection) is None


def test_from_string_raises_for_multiple_characters() -> None:
    with pytest.raises(NotSingleCharacterError):
        CharacterInfo.from_string("ab")


@pytest.mark.parametrize(
    ("line_ending", "expected"),
    [
        (LineEnding.LF, [0x0A]),
        (LineEnding.CR, [0x0D]),
        (LineEnding.CRLF, [0x0D, 0x0A]),
        (LineEnding.PARAGRAPH_SEPARATOR, [0x2029]),
    ],
)
def test_selected_newline_uses_the_document_line_ending(line_ending: LineEnding, expected: list[int]) -> None:
    info = inspect_character("\n", line_ending)

    assert info is not None
    assert [scalar.code_point for scalar in info.scalars] == expected


def test_crlf_is_described_with_control_names_and_pictures() -> None:
    info = inspect_character("\n", LineEnding.CRLF)

    assert info is not None
    assert info.description == "CARRIAGE RETURN (CR) + LINE FEED (LF)"
    assert info.picture_string == "\u240D\u240A"


def test_tab_has_a_control_picture() -> None:
    info = inspect_character("\t")

    assert info is not None
    assert info.scalars[0].picture == "\u2409"
    assert info.scalars[0].category_name == "Control"


def test_astral_character_reports_surrogate_pair() -> None:
    info = inspect_character("\U0001F600")

    assert info is not None
    scalar = info.scalars[0]
    assert scalar.name == "GRINNING FACE"
    assert scalar.is_surrogate_pair
    assert scalar.utf16_code_units == (0xD83D, 0xDE00)
    assert scalar.byte_lengths["UTF-8"] == 4


def test_flag_sequence_is_one_character() -> None:
    info = inspect_character("\U0001F1EF\U0001F1F5")

    assert info is not None
    assert len(info.scalars) == 2


def test_variation_selector_is_flagged() -> None:
    info = inspect_character("\u2764\uFE0F")

    assert info is not None
    assert info.scalars[1].is_variation_selector


@pytest.mark.parametrize(
    ("character", "expected"),
    [
        ("\u0378", "<reserved-0378>"),
        ("\uE000", "<private-use-E000>"),
        ("\uFFFF", "<noncharacter-FFFF>"),
    ],
)
def test_unnamed_code_points_get_labels(character: str, expected: str) -> None:
    info = inspect_character(character)

    assert info is not None
    assert info.scalars[0].name == expected


def test_to_dict_is_json_friendly() -> None:
    info = inspect_character("A")

    assert info is not None
    payload = info.to_dict()
    assert payload["character"] == "A"
    assert payload["scalars"][0]["code_point"] == "U+0041"
    assert payload["scalars"][0]["utf8"] == "0x41"


@pytest.mark.parametrize(
    ("value", "expected"),
    [
        ("U+1F600", "\U0001F600"),
        ("u+00e9", "\u00E9"),
        ("0x41", "A"),
        ("263A", "\u263A"),
        ("A", "A"),
        ("7", "7"),
        (" \u00E9 ", "\u00E9"),
    ],
)
def test_parse_code_point(value: str, expected: str) -> None:
    assert parse_code_point(value) == expected


@pytest.mark.parametrize("value", ["", "U+", "zz", "U+110000", "0xGG"])
def test_parse_code_point_rejects_bad_input(value: str) -> None:
    with pytest.raises(ValueError):
        parse_code_point(value)


def test_grapheme_range_at_covers_whole_cluster() -> None:
    text = "ae\u0301b"

    assert grapheme_range_at(text, 0) == (0, 1)
    assert grapheme_range_at(text, 2) == (1, 3)
    assert grapheme_range_at(text, 3) == (3, 4)
    assert grapheme_range_at(text, 4) is None
    assert grapheme_range_at("", 0) is None
