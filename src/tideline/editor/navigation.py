"""Resolve fuzzy "go to line" requests into character ranges."""

from __future__ import annotations

import logging

from ..core.line_endings import LineIndex, count_lines
from ..core.ranges import FuzzyRange, TextRange

__all__ = ["initial_fuzzy_range", "resolve_line_range"]

_LOGGER = logging.getLogger(__name__)


def resolve_line_range(
    fuzzy: FuzzyRange,
    text: str | None,
    *,
    index: LineIndex | None = None,
) -> TextRange | None:
    """Return the character span covered by ``fuzzy`` inside ``text``.

    ``None`` means the request cannot be satisfied: the location falls outside
    the document after counting back from the end, or the length is negative.
    Pass a prebuilt ``index`` to skip rescanning an unchanged text.
    """

    document = text or ""
    if index is None or index.text != document:
        index = LineIndex.build(document)
    line_count = index.line_count

    if fuzzy.length < 0:
        _LOGGER.debug("Rejected line range %s: negative length", fuzzy.to_string())
        return None

    location = fuzzy.location
    if fuzzy.counts_from_end:
        location = line_count + location
    if not 1 <= location <= line_count:
        _LOGGER.debug(
            "Rejected line range %s: location outside 1..%s", fuzzy.to_string(), line_count
        )
        return None

    last_line = min(location + fuzzy.line_span - 1, line_count)
    start, _ = index.span_for_line(location)
    _, end = index.span_for_line(last_line)
    return TextRange(start, end)


def initial_fuzzy_range(text: str | None, selection: TextRange) -> FuzzyRange:
    """Describe ``selection`` as the range the go-to field is prefilled with."""

    document = text or ""
    bounded = selection.clamp(upper=len(document))
    line_number = LineIndex.build(document).line_number_at(bounded.start)
    selected = document[bounded.start : bounded.end]
    return FuzzyRange(location=line_number, length=count_lines(selected))
