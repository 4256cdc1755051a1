"""Pre-commit hook that keeps inserted text on LF line endings."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Protocol

from ..core.line_endings import LineEnding, detect_line_ending, replace_line_endings
from ..core.ranges import TextRange

__all__ = ["EditableBuffer", "LineEndingNormalizer", "canonical_replacement"]

_LOGGER = logging.getLogger(__name__)


class EditableBuffer(Protocol):
    """Buffer the normalizer writes its substitution into."""

    def replace(self, text_range: TextRange, replacement: str, *, selection: TextRange | None = None) -> bool:
        """Replace ``text_range`` with ``replacement`` and return ``True`` on success."""
        ...


def canonical_replacement(
    replacement: str | None,
    *,
    is_undoing: bool = False,
    canonical: LineEnding = LineEnding.LF,
) -> str | None:
    """Return ``replacement`` rewritten to ``canonical`` endings, or ``None`` to accept it as-is.

    The first terminator decides the style; text that opens with a canonical
    terminator is accepted even if later lines use another one.
    """

    if replacement is None:  # attribute-only change
        return None
    if not replacement:  # deletion
        return None
    if is_undoing:
        return None
    line_ending = detect_line_ending(replacement)
    if line_ending is None or line_ending is canonical:
        return None
    return replace_line_endings(replacement, canonical)


@dataclass(slots=True)
class LineEndingNormalizer:
    """Intercepts proposed replacements before they reach the buffer."""

    canonical: LineEnding = LineEnding.LF

    def should_change_text(
        self,
        buffer: EditableBuffer,
        affected_range: TextRange,
        replacement: str | None,
        *,
        is_undoing: bool = False,
    ) -> bool:
        """Return ``True`` when the caller should perform its default insertion.

        When the replacement needs canonical line endings the normalizer
        performs the substitution itself and returns ``False``. A buffer that
        refuses the substitution falls back to the default insertion.
        """

        rewritten = canonical_replacement(replacement, is_undoing=is_undoing, canonical=self.canonical)
        if rewritten is None:
            return True
        applied = buffer.replace(affected_range, rewritten, selection=None)
        if applied:
            _LOGGER.debug(
                "Normalized line endings of %s-character replacement at %s",
                len(rewritten),
                affected_range.to_tuple(),
            )
        return not applied
