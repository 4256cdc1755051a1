"""Decompose a single user-perceived character into Unicode scalar descriptors."""

from __future__ import annotations

import logging
import unicodedata
from dataclasses import dataclass
from typing import Any

import grapheme

from ..core.line_endings import LineEnding, detect_line_ending, replace_line_endings

__all__ = [
    "CharacterInfo",
    "NotSingleCharacterError",
    "UnicodeScalarInfo",
    "grapheme_range_at",
    "inspect_character",
    "parse_code_point",
]

_LOGGER = logging.getLogger(__name__)

_CONTROL_NAMES: dict[int, str] = {
    0x00: "NULL",
    0x01: "START OF HEADING",
    0x02: "START OF TEXT",
    0x03: "END OF TEXT",
    0x04: "END OF TRANSMISSION",
    0x05: "ENQUIRY",
    0x06: "ACKNOWLEDGE",
    0x07: "BELL",
    0x08: "BACKSPACE",
    0x09: "CHARACTER TABULATION",
    0x0A: "LINE FEED (LF)",
    0x0B: "LINE TABULATION",
    0x0C: "FORM FEED (FF)",
    0x0D: "CARRIAGE RETURN (CR)",
    0x0E: "SHIFT OUT",
    0x0F: "SHIFT IN",
    0x10: "DATA LINK ESCAPE",
    0x11: "DEVICE CONTROL ONE",
    0x12: "DEVICE CONTROL TWO",
    0x13: "DEVICE CONTROL THREE",
    0x14: "DEVICE CONTROL FOUR",
    0x15: "NEGATIVE ACKNOWLEDGE",
    0x16: "SYNCHRONOUS IDLE",
    0x17: "END OF TRANSMISSION BLOCK",
    0x18: "CANCEL",
    0x19: "END OF MEDIUM",
    0x1A: "SUBSTITUTE",
    0x1B: "ESCAPE",
    0x1C: "INFORMATION SEPARATOR FOUR",
    0x1D: "INFORMATION SEPARATOR THREE",
    0x1E: "INFORMATION SEPARATOR TWO",
    0x1F: "INFORMATION SEPARATOR ONE",
    0x7F: "DELETE",
    0x85: "NEXT LINE (NEL)",
}

_CATEGORY_NAMES: dict[str, str] = {
    "Lu": "Uppercase Letter",
    "Ll": "Lowercase Letter",
    "Lt": "Titlecase Letter",
    "Lm": "Modifier Letter",
    "Lo": "Other Letter",
    "Mn": "Nonspacing Mark",
    "Mc": "Spacing Mark",
    "Me": "Enclosing Mark",
    "Nd": "Decimal Number",
    "Nl": "Letter Number",
    "No": "Other Number",
    "Pc": "Connector Punctuation",
    "Pd": "Dash Punctuation",
    "Ps": "Open Punctuation",
    "Pe": "Close Punctuation",
    "Pi": "Initial Punctuation",
    "Pf": "Final Punctuation",
    "Po": "Other Punctuation",
    "Sm": "Math Symbol",
    "Sc": "Currency Symbol",
    "Sk": "Modifier Symbol",
    "So": "Other Symbol",
    "Zs": "Space Separator",
    "Zl": "Line Separator",
    "Zp": "Paragraph Separator",
    "Cc": "Control",
    "Cf": "Format",
    "Cs": "Surrogate",
    "Co": "Private Use",
    "Cn": "Unassigned",
}

_LABEL_PREFIXES: dict[str, str] = {
    "Cc": "control",
    "Cs": "surrogate",
    "Co": "private-use",
}


class NotSingleCharacterError(ValueError):
    """Raised when a string is not exactly one grapheme cluster."""


@dataclass(slots=True, frozen=True)
class UnicodeScalarInfo:
    """Metadata for one code point inside an inspected character."""

    code_point: int
    name: str
    category: str
    utf8_bytes: bytes
    utf16_code_units: tuple[int, ...]

    @classmethod
    def from_scalar(cls, scalar: str) -> UnicodeScalarInfo:
        code_point = ord(scalar)
        category = unicodedata.category(scalar)
        utf16 = scalar.encode("utf-16-be", errors="surrogatepass")
        units = tuple(int.from_bytes(utf16[i : i + 2], "big") for i in range(0, len(utf16), 2))
        return cls(
            code_point=code_point,
            name=_scalar_name(scalar, category),
            category=category,
            utf8_bytes=scalar.encode("utf-8", errors="surrogatepass"),
            utf16_code_units=units,
        )

    @property
    def code_point_label(self) -> str:
        return f"U+{self.code_point:04X}"

    @property
    def category_name(self) -> str:
        return _CATEGORY_NAMES.get(self.category, "Unknown")

    @property
    def is_surrogate_pair(self) -> bool:
        return len(self.utf16_code_units) == 2

    @property
    def is_variation_selector(self) -> bool:
        return 0xFE00 <= self.code_point <= 0xFE0F or 0xE0100 <= self.code_point <= 0xE01EF

    @property
    def byte_lengths(self) -> dict[str, int]:
        return {
            "UTF-8": len(self.utf8_bytes),
            "UTF-16": len(self.utf16_code_units) * 2,
            "UTF-32": 4,
        }

    @property
    def picture(self) -> str | None:
        """Return the visible Control Pictures stand-in for C0 controls and DEL."""

        if self.code_point < 0x20:
            return chr(0x2400 + self.code_point)
        if self.code_point == 0x7F:
            return "\u2421"
        return None

    def to_dict(self) -> dict[str, Any]:
        return {
            "code_point": self.code_point_label,
            "name": self.name,
            "category": self.category,
            "category_name": self.category_name,
            "utf8": " ".join(f"0x{byte:02X}" for byte in self.utf8_bytes),
            "utf16": " ".join(f"0x{unit:04X}" for unit in self.utf16_code_units),
            "byte_lengths": self.byte_lengths,
        }


@dataclass(slots=True, frozen=True)
class CharacterInfo:
    """One grapheme cluster and the scalars it is made of."""

    string: str
    scalars: tuple[UnicodeScalarInfo, ...]

    @classmethod
    def from_string(cls, string: str) -> CharacterInfo:
        if not string or grapheme.length(string) != 1:
            raise NotSingleCharacterError("Character information requires exactly one character")
        return cls(string=string, scalars=tuple(UnicodeScalarInfo.from_scalar(ch) for ch in string))

    @property
    def is_complex(self) -> bool:
        """Return ``True`` when the character is composed of several scalars."""

        return len(self.scalars) > 1

    @property
    def description(self) -> str:
        return " + ".join(scalar.name for scalar in self.scalars)

    @property
    def picture_string(self) -> str | None:
        pictures = [scalar.picture for scalar in self.scalars]
        if any(picture is None for picture in pictures):
            return None
        return "".join(pictures)  # type: ignore[arg-type]

    def to_dict(self) -> dict[str, Any]:
        return {
            "character": self.string,
            "description": self.description,
            "is_complex": self.is_complex,
            "scalars": [scalar.to_dict() for scalar in self.scalars],
        }


def inspect_character(
    selection: str | None,
    document_line_ending: LineEnding = LineEnding.LF,
) -> CharacterInfo | None:
    """Return details for ``selection`` or ``None`` when it is not a single character.

    A selected LF is reported as the document's own line ending so a CRLF
    document shows CR + LF rather than the in-memory terminator.
    """

    if not selection or grapheme.length(selection) != 1:
        return None
    string = selection
    if document_line_ending is not LineEnding.LF and detect_line_ending(string) is LineEnding.LF:
        string = replace_line_endings(string, document_line_ending)
    try:
        info = CharacterInfo.from_string(string)
    except NotSingleCharacterError:
        _LOGGER.debug("Selection %r does not render as a single character", string)
        return None
    _LOGGER.debug("Inspected %s", info.description)
    return info


def parse_code_point(value: str) -> str:
    """Return the character for ``U+1F600``, ``1F600``, ``0x41`` or a literal character."""

    text = (value or "").strip()
    if not text:
        raise ValueError("Code point is required")
    digits = text
    for prefix in ("U+", "u+", "0x", "0X"):
        if digits.startswith(prefix):
            digits = digits[len(prefix) :]
            break
    else:
        # A lone character such as "A" is taken literally, not as hex.
        if grapheme.length(text) == 1:
            return text
    try:
        code_point = int(digits, 16)
    except ValueError as exc:
        raise ValueError(f"Invalid code point: {value!r}") from exc
    if not 0 <= code_point <= 0x10FFFF:
        raise ValueError(f"Code point out of range: {value!r}")
    return chr(code_point)


def _scalar_name(scalar: str, category: str) -> str:
    code_point = ord(scalar)
    alias = _CONTROL_NAMES.get(code_point)
    if alias is not None:
        return alias
    name = unicodedata.name(scalar, "")
    if name:
        return name
    prefix = _LABEL_PREFIXES.get(category)
    if prefix is None:
        prefix = "noncharacter" if _is_noncharacter(code_point) else "reserved"
    return f"<{prefix}-{code_point:04X}>"


def _is_noncharacter(code_point: int) -> bool:
    return 0xFDD0 <= code_point <= 0xFDEF or (code_point & 0xFFFE) == 0xFFFE


def grapheme_range_at(text: str, offset: int) -> tuple[int, int] | None:
    """Return the ``(start, end)`` offsets of the grapheme cluster containing ``offset``."""

    if not text or not 0 <= offset < len(text):
        return None
    cursor = 0
    for cluster in grapheme.graphemes(text):
        end = cursor + len(cluster)
        if offset < end:
            return cursor, end
        cursor = end
    return None
