"""Structured helpers for representing text and line spans."""

from __future__ import annotations

from collections.abc import Mapping, Sequence
from dataclasses import dataclass
from typing import Any, Iterator


@dataclass(slots=True, frozen=True)
class TextRange:
    """Character span using absolute offsets; ``end`` is exclusive."""

    start: int
    end: int

    def __post_init__(self) -> None:
        start = self._coerce_index(self.start, "start")
        end = self._coerce_index(self.end, "end")
        if end < start:
            start, end = end, start
        object.__setattr__(self, "start", start)
        object.__setattr__(self, "end", end)

    @staticmethod
    def _coerce_index(value: Any, label: str) -> int:
        try:
            number = int(value)
        except (TypeError, ValueError) as exc:
            raise ValueError(f"TextRange {label} must be an integer") from exc
        if number < 0:
            return 0
        return number

    def __iter__(self) -> Iterator[int]:
        yield self.start
        yield self.end

    @property
    def length(self) -> int:
        """Return the width of the range."""

        return self.end - self.start

    def to_tuple(self) -> tuple[int, int]:
        return (self.start, self.end)

    def to_dict(self) -> dict[str, int]:
        return {"start": self.start, "end": self.end}

    def clamp(self, *, lower: int = 0, upper: int | None = None) -> TextRange:
        """Clamp the range to ``[lower, upper]`` bounds."""

        start = max(lower, self.start)
        end = max(lower, self.end)
        if upper is not None:
            start = min(start, upper)
            end = min(end, upper)
        return TextRange(start=start, end=end)

    @classmethod
    def from_value(cls, value: Any) -> TextRange:
        """Coerce a range, ``(start, end)`` pair or ``{"start", "end"}`` mapping."""

        if isinstance(value, TextRange):
            return value
        if isinstance(value, Mapping):
            start = value.get("start")
            end = value.get("end")
            if start is None or end is None:
                raise ValueError("TextRange mappings require start and end keys")
            return cls(start, end)
        if isinstance(value, Sequence) and not isinstance(value, (str, bytes)):
            seq = list(value)
            if len(seq) != 2:
                raise ValueError("TextRange sequences must have exactly two entries")
            return cls(seq[0], seq[1])
        start = getattr(value, "start", None)
        end = getattr(value, "end", None)
        if start is not None and end is not None:
            return cls(start, end)
        raise TypeError("Unsupported TextRange input")


@dataclass(slots=True, frozen=True)
class FuzzyRange:
    """Line-oriented request such as "line 12" or "3 lines from the end".

    ``location`` is 1-based; zero and negative values count back from the last
    line (``0`` is the last line, ``-1`` the one before). ``length`` is the
    number of lines to cover, where ``0`` and ``1`` both mean a single line.
    """

    location: int
    length: int = 0

    def __post_init__(self) -> None:
        for label in ("location", "length"):
            value = getattr(self, label)
            if isinstance(value, bool) or not isinstance(value, int):
                raise TypeError(f"FuzzyRange {label} must be an integer")

    @property
    def counts_from_end(self) -> bool:
        return self.location <= 0

    @property
    def line_span(self) -> int:
        """Return the number of lines requested (at least one)."""

        return max(1, self.length)

    def to_string(self) -> str:
        """Render the range the way the go-to field displays it (``"5"`` or ``"5:3"``)."""

        if self.length > 1:
            return f"{self.location}:{self.length}"
        return str(self.location)

    @classmethod
    def from_string(cls, value: str) -> FuzzyRange:
        """Parse ``"location"`` or ``"location:length"``."""

        parts = [part.strip() for part in (value or "").strip().split(":")]
        if not parts[0] or len(parts) > 2:
            raise ValueError(f"Invalid line range: {value!r}")
        try:
            location = int(parts[0], 10)
            length = int(parts[1], 10) if len(parts) == 2 and parts[1] else 0
        except ValueError as exc:
            raise ValueError(f"Invalid line range: {value!r}") from exc
        return cls(location=location, length=length)


__all__ = ["FuzzyRange", "TextRange"]
