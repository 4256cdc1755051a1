"""Tideline: a text editor core with line-ending normalization, go-to-line and character inspection."""

__all__ = ["__version__"]

__version__ = "0.1.0"
