"""Core text types shared by the editor and the command line tools."""

from .line_endings import LineEnding, LineIndex, detect_line_ending, replace_line_endings
from .ranges import FuzzyRange, TextRange

__all__ = [
    "FuzzyRange",
    "LineEnding",
    "LineIndex",
    "TextRange",
    "detect_line_ending",
    "replace_line_endings",
]
