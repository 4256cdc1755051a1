"""Go-to-line dialog and character popover with headless fallbacks."""

from __future__ import annotations

import logging
from typing import Any, Callable

from ..core.ranges import FuzzyRange
from .character_info import CharacterInfo

try:  # pragma: no cover - optional Qt dependency
    from PySide6.QtCore import Qt
    from PySide6.QtWidgets import (
        QApplication,
        QDialog,
        QDialogButtonBox,
        QFormLayout,
        QLabel,
        QLineEdit,
    )

    _QT_AVAILABLE = True
except Exception:  # pragma: no cover - headless fallback
    Qt = None  # type: ignore[assignment]
    QApplication = None  # type: ignore[assignment]
    QDialog = None  # type: ignore[assignment]
    QDialogButtonBox = None  # type: ignore[assignment]
    QFormLayout = None  # type: ignore[assignment]
    QLabel = None  # type: ignore[assignment]
    QLineEdit = None  # type: ignore[assignment]
    _QT_AVAILABLE = False

__all__ = ["CharacterPopover", "GoToLineDialog", "format_character_info", "format_fuzzy_range"]

_LOGGER = logging.getLogger(__name__)

CompletionHandler = Callable[[FuzzyRange], bool]


def format_fuzzy_range(line_range: FuzzyRange) -> str:
    """Return the text the go-to field is prefilled with."""

    return line_range.to_string()


def format_character_info(info: CharacterInfo) -> list[str]:
    """Render ``info`` into the lines shown by the character popover."""

    lines = [info.picture_string or info.string]
    if info.is_complex:
        lines.append(f"{len(info.scalars)} code points")
    for scalar in info.scalars:
        lines.append(f"{scalar.code_point_label}  {scalar.name}")
        category = scalar.category_name
        if scalar.is_variation_selector:
            category = f"{category}, Variation Selector"
        lines.append(f"    {category}")
        utf8 = " ".join(f"{byte:02X}" for byte in scalar.utf8_bytes)
        lines.append(f"    UTF-8: {utf8}")
        if scalar.is_surrogate_pair:
            utf16 = " ".join(f"{unit:04X}" for unit in scalar.utf16_code_units)
            lines.append(f"    UTF-16: {utf16}")
    return lines


def _qt_ready() -> bool:
    if not _QT_AVAILABLE or QApplication is None:
        return False
    return QApplication.instance() is not None


class GoToLineDialog:
    """Collects a ``location[:length]`` request and hands it to a completion handler."""

    def __init__(
        self,
        line_range: FuzzyRange,
        *,
        parent: Any | None = None,
        enable_qt: bool | None = None,
    ) -> None:
        self.line_range = line_range
        self.completion_handler: CompletionHandler | None = None
        self._parent = parent
        self._qt_enabled = _qt_ready() if enable_qt is None else bool(enable_qt and _qt_ready())
        self._dialog: Any | None = None
        self._field: Any | None = None
        if self._qt_enabled:
            self._build_dialog()

    @property
    def initial_text(self) -> str:
        return format_fuzzy_range(self.line_range)

    def submit(self, value: str) -> bool:
        """Parse ``value`` and report whether the completion handler applied it."""

        try:
            line_range = FuzzyRange.from_string(value)
        except ValueError as exc:
            _LOGGER.debug("Ignoring go-to request: %s", exc)
            return False
        self.line_range = line_range
        if self.completion_handler is None:
            return False
        applied = bool(self.completion_handler(line_range))
        if applied and self._dialog is not None:
            self._dialog.accept()
        return applied

    def show(self) -> None:
        if self._dialog is None:
            return
        self._field.setText(self.initial_text)
        self._field.selectAll()
        self._dialog.open()

    def _build_dialog(self) -> None:
        dialog = QDialog(self._parent)
        dialog.setWindowTitle("Go to Line")
        field = QLineEdit(dialog)
        field.setPlaceholderText("line or line:count")
        buttons = QDialogButtonBox(QDialogButtonBox.StandardButton.Ok | QDialogButtonBox.StandardButton.Cancel, parent=dialog)
        buttons.accepted.connect(lambda: self.submit(field.text()))  # type: ignore[attr-defined]
        buttons.rejected.connect(dialog.reject)  # type: ignore[attr-defined]
        layout = QFormLayout(dialog)
        layout.addRow("Line:", field)
        layout.addRow(buttons)
        self._dialog = dialog
        self._field = field


class CharacterPopover:
    """Transient overlay listing the code points of an inspected character."""

    def __init__(
        self,
        info: CharacterInfo,
        *,
        parent: Any | None = None,
        enable_qt: bool | None = None,
    ) -> None:
        self.info = info
        self._parent = parent
        self._qt_enabled = _qt_ready() if enable_qt is None else bool(enable_qt and _qt_ready())
        self._label: Any | None = None

    @property
    def lines(self) -> list[str]:
        return format_character_info(self.info)

    @property
    def text(self) -> str:
        return "\n".join(self.lines)

    def show(self, anchor: Any | None = None) -> None:
        """Show the popover near ``anchor`` (a ``QPoint``) when Qt is running."""

        if not self._qt_enabled:
            return
        if self._label is None:
            label = QLabel(self.text, self._parent)
            label.setWindowFlags(Qt.WindowType.Popup)
            label.setTextInteractionFlags(Qt.TextInteractionFlag.TextSelectableByMouse)
            label.setMargin(8)
            self._label = label
        if anchor is not None:
            self._label.move(anchor)
        self._label.show()
