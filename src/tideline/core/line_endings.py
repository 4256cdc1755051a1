"""Line terminator classification and line-offset helpers."""

from __future__ import annotations

import re
from bisect import bisect_right
from collections import Counter
from dataclasses import dataclass
from enum import Enum
from typing import Any

__all__ = [
    "LineEnding",
    "LineIndex",
    "count_lines",
    "detect_line_ending",
    "line_ending_counts",
    "line_spans",
    "replace_line_endings",
]

# CRLF must be tried before the single-character terminators.
_TERMINATOR_RE = re.compile("\r\n|[\n\r\u0085\u2028\u2029]")


class LineEnding(Enum):
    """Recognized line terminator sequences."""

    LF = "\n"
    CR = "\r"
    CRLF = "\r\n"
    NEL = "\u0085"
    LINE_SEPARATOR = "\u2028"
    PARAGRAPH_SEPARATOR = "\u2029"

    @property
    def sequence(self) -> str:
        return self.value

    @property
    def label(self) -> str:
        """Return the short label shown in menus and the status bar."""

        return _LABELS[self]

    @classmethod
    def coerce(cls, value: Any) -> LineEnding:
        """Resolve a member, member name, label or raw sequence into a :class:`LineEnding`."""

        if isinstance(value, LineEnding):
            return value
        if not isinstance(value, str):
            raise TypeError(f"Unsupported line ending value: {value!r}")
        try:
            return cls(value)
        except ValueError:
            pass
        key = value.strip().replace("-", "_").replace(" ", "_").upper()
        if key in cls.__members__:
            return cls[key]
        for member, label in _LABELS.items():
            if label.upper() == key:
                return member
        raise ValueError(f"Unknown line ending: {value!r}")


_LABELS: dict[LineEnding, str] = {
    LineEnding.LF: "LF",
    LineEnding.CR: "CR",
    LineEnding.CRLF: "CRLF",
    LineEnding.NEL: "NEL",
    LineEnding.LINE_SEPARATOR: "LS",
    LineEnding.PARAGRAPH_SEPARATOR: "PS",
}


def detect_line_ending(text: str | None) -> LineEnding | None:
    """Return the style of the first terminator in ``text`` or ``None`` when there is none."""

    if not text:
        return None
    match = _TERMINATOR_RE.search(text)
    if match is None:
        return None
    return LineEnding(match.group(0))


def line_ending_counts(text: str | None) -> Counter[LineEnding]:
    """Count terminator occurrences per style."""

    counts: Counter[LineEnding] = Counter()
    if text:
        for match in _TERMINATOR_RE.finditer(text):
            counts[LineEnding(match.group(0))] += 1
    return counts


def replace_line_endings(text: str, ending: LineEnding = LineEnding.LF) -> str:
    """Rewrite every terminator in ``text`` with ``ending``."""

    if not text:
        return text
    return _TERMINATOR_RE.sub(ending.sequence, text)


def line_spans(text: str | None) -> list[tuple[int, int]]:
    """Return ``(start, end)`` offsets for each line, terminators included.

    An empty text is a single empty line; a trailing terminator does not open
    an extra line.
    """

    document = text or ""
    spans: list[tuple[int, int]] = []
    cursor = 0
    for match in _TERMINATOR_RE.finditer(document):
        spans.append((cursor, match.end()))
        cursor = match.end()
    if cursor < len(document) or not spans:
        spans.append((cursor, len(document)))
    return spans


def count_lines(text: str | None) -> int:
    """Return the number of lines touched by ``text`` (``0`` for empty text)."""

    if not text:
        return 0
    return len(line_spans(text))


@dataclass(slots=True, frozen=True)
class LineIndex:
    """Cached line offsets for a text snapshot."""

    text: str
    spans: tuple[tuple[int, int], ...]
    line_starts: tuple[int, ...]

    @classmethod
    def build(cls, text: str | None) -> LineIndex:
        document = text or ""
        spans = tuple(line_spans(document))
        return cls(text=document, spans=spans, line_starts=tuple(start for start, _ in spans))

    @property
    def line_count(self) -> int:
        return len(self.spans)

    def span_for_line(self, line_number: int) -> tuple[int, int]:
        """Return the span of the 1-based ``line_number``."""

        if not 1 <= line_number <= self.line_count:
            raise IndexError(f"Line {line_number} is outside 1..{self.line_count}")
        return self.spans[line_number - 1]

    def line_number_at(self, offset: int) -> int:
        """Return the 1-based line number containing ``offset``.

        Counts the terminators before ``offset``, so the end of a text with a
        trailing terminator reports the line after the last one.
        """

        length = len(self.text)
        cursor = max(0, min(int(offset), length))
        if cursor == length and self.text and _ends_with_terminator(self.text):
            return self.line_count + 1
        return bisect_right(self.line_starts, cursor)


def _ends_with_terminator(text: str) -> bool:
    return text[-1] in "\n\r\u0085\u2028\u2029"
