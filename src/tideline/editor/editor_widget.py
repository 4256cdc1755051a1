"""Editor widget implementation with Qt + headless fallbacks.

Document state, selection handling, line-ending normalization, navigation and
character inspection live in plain Python so tests can run headless. When
PySide6 is available and a ``QApplication`` has been instantiated, the widget
also builds a ``QPlainTextEdit`` next to a line-number gutter.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from enum import Enum
from typing import Any, Mapping, Protocol, Sequence

from ..core.line_endings import LineEnding, LineIndex
from ..core.ranges import FuzzyRange, TextRange
from .character_info import CharacterInfo, inspect_character, parse_code_point
from .dialogs import CharacterPopover, GoToLineDialog
from .document_model import DocumentState, SelectionRange
from .line_ending_normalizer import LineEndingNormalizer
from .navigation import initial_fuzzy_range, resolve_line_range

try:  # pragma: no cover - PySide6 optional in CI
    from PySide6.QtGui import QFont, QTextCursor
    from PySide6.QtWidgets import QApplication, QBoxLayout, QLabel, QPlainTextEdit, QWidget

    _QT_AVAILABLE = True
except Exception:  # pragma: no cover - runtime fallback
    QFont = None  # type: ignore[assignment]
    QTextCursor = None  # type: ignore[assignment]
    QApplication = None  # type: ignore[assignment]
    QBoxLayout = None  # type: ignore[assignment]
    QLabel = None  # type: ignore[assignment]
    QPlainTextEdit = None  # type: ignore[assignment]
    QWidget = None  # type: ignore[assignment]
    _QT_AVAILABLE = False

__all__ = ["EditorFont", "EditorWidget", "GutterState", "LayoutOrientation"]

_LOGGER = logging.getLogger(__name__)


class LayoutOrientation(Enum):
    """Text layout direction shared by the text view and its line-number gutter."""

    HORIZONTAL = "horizontal"
    VERTICAL = "vertical"


class TextChangeListener(Protocol):
    """Callback signature invoked when the editor text changes."""

    def __call__(self, text: str, state: DocumentState) -> None:
        ...


class SelectionListener(Protocol):
    """Callback invoked when the active selection or caret moves."""

    def __call__(self, selection: SelectionRange) -> None:
        ...


class OrientationListener(Protocol):
    def __call__(self, orientation: LayoutOrientation) -> None:
        ...


@dataclass(slots=True)
class _UndoEntry:
    """Represents a text snapshot for undo/redo bookkeeping."""

    text: str


@dataclass(slots=True, frozen=True)
class EditorFont:
    """Font shared by the text view and the line-number gutter."""

    family: str = "JetBrains Mono"
    point_size: int = 13


@dataclass(slots=True)
class GutterState:
    """Visibility and orientation of the line-number gutter."""

    visible: bool = True
    orientation: LayoutOrientation = LayoutOrientation.HORIZONTAL


class EditorWidget:
    """High-level controller orchestrating the text editor component."""

    MAX_HISTORY = 50

    def __init__(
        self,
        parent: Any | None = None,
        *,
        normalizer: LineEndingNormalizer | None = None,
        show_line_numbers: bool = True,
        orientation: LayoutOrientation | str = LayoutOrientation.HORIZONTAL,
        font: EditorFont | None = None,
    ) -> None:
        self._parent = parent
        self._state = DocumentState()
        self._selection = SelectionRange()
        self._insertion_points: tuple[int, ...] = ()
        self._text_buffer: str = ""
        self._line_index: LineIndex | None = None
        self._normalizer = normalizer or LineEndingNormalizer()
        self._undo_stack: list[_UndoEntry] = []
        self._redo_stack: list[_UndoEntry] = []
        self._history_action: str | None = None
        self._text_listeners: list[TextChangeListener] = []
        self._selection_listeners: list[SelectionListener] = []
        self._orientation_listeners: list[OrientationListener] = []
        self._gutter = GutterState(visible=bool(show_line_numbers))
        self._font = font or EditorFont()
        self._container_orientation = LayoutOrientation.HORIZONTAL
        self._qt_container: Any = None
        self._qt_layout: Any = None
        self._qt_editor: Any = None
        self._qt_gutter: Any = None

        self._build_ui()
        self.set_layout_orientation(orientation)

    # ------------------------------------------------------------------
    # UI construction & helpers
    # ------------------------------------------------------------------
    def _build_ui(self) -> None:
        """Instantiate Qt widgets when a QApplication is available."""

        if not _QT_AVAILABLE:
            return
        if QApplication.instance() is None:
            # Headless mode; the logical bits keep working.
            return

        self._qt_container = QWidget(self._parent)
        self._qt_gutter = QLabel(self._qt_container)
        self._qt_gutter.setObjectName("lineNumberGutter")
        self._qt_editor = QPlainTextEdit(self._qt_container)
        self._qt_editor.textChanged.connect(self._handle_qt_text_changed)  # type: ignore[attr-defined]
        self._qt_editor.cursorPositionChanged.connect(  # type: ignore[attr-defined]
            self._handle_qt_selection_changed
        )
        self._qt_layout = QBoxLayout(QBoxLayout.Direction.LeftToRight, self._qt_container)
        self._qt_layout.setContentsMargins(0, 0, 0, 0)
        self._qt_layout.addWidget(self._qt_gutter)
        self._qt_layout.addWidget(self._qt_editor)
        self._sync_qt_gutter()
        self._apply_qt_font()

    @property
    def qt_widget(self) -> Any | None:
        """Return the Qt container when the UI was built."""

        return self._qt_container

    # ------------------------------------------------------------------
    # Document accessors
    # ------------------------------------------------------------------
    def load_document(self, document: DocumentState) -> None:
        """Load a new document state into the widget."""

        self._state = document
        self._selection = SelectionRange()
        self._insertion_points = ()
        self._text_buffer = document.text
        self._line_index = None
        self._undo_stack.clear()
        self._redo_stack.clear()
        if self._qt_editor is not None:
            self._qt_editor.blockSignals(True)
            self._qt_editor.setPlainText(document.text)
            self._qt_editor.blockSignals(False)
        self._emit_text_changed()
        self._emit_selection_changed()

    def to_document(self) -> DocumentState:
        """Return the current document representation."""

        self._state.text = self._text_buffer
        self._state.selection = SelectionRange(self._selection.start, self._selection.end)
        return self._state

    @property
    def text(self) -> str:
        return self._text_buffer

    @property
    def line_ending(self) -> LineEnding:
        """Return the line ending the document is saved with."""

        return self._state.line_ending

    def set_line_ending(self, line_ending: LineEnding | str) -> None:
        self._state.line_ending = LineEnding.coerce(line_ending)

    @property
    def line_index(self) -> LineIndex:
        """Return line offsets for the current text, rebuilt only after edits."""

        if self._line_index is None or self._line_index.text != self._text_buffer:
            self._line_index = LineIndex.build(self._text_buffer)
        return self._line_index

    @property
    def line_count(self) -> int:
        return self.line_index.line_count

    # ------------------------------------------------------------------
    # Editing
    # ------------------------------------------------------------------
    def replace(self, text_range: TextRange, replacement: str, *, selection: TextRange | None = None) -> bool:
        """Commit ``replacement`` over ``text_range`` without consulting the normalizer."""

        begin, finish = self._clamp_range(*text_range)
        previous = self._text_buffer
        updated = previous[:begin] + replacement + previous[finish:]
        if updated != previous:
            if self._history_action is None:
                self._push_undo_snapshot(previous)
                self._redo_stack.clear()
            self._commit_text(updated)
        caret = begin + len(replacement)
        self._set_selection(selection if selection is not None else SelectionRange(caret, caret))
        return True

    def user_replace(self, start: int, end: int, replacement: str | None) -> None:
        """Apply a user edit, letting the line-ending normalizer intercept it first."""

        affected = TextRange(*self._clamp_range(start, end))
        is_undoing = self._history_action == "undo"
        if not self._normalizer.should_change_text(self, affected, replacement, is_undoing=is_undoing):
            return
        if replacement is None:
            return
        caret = affected.start + len(replacement)
        self.replace(affected, replacement, selection=TextRange(caret, caret))

    def insert_text(self, text: str) -> None:
        """Insert ``text`` over the current selection as a user edit."""

        self.user_replace(self._selection.start, self._selection.end, text)

    def insert_unicode_character(self, value: str) -> str:
        """Insert the character named by ``value`` (``U+1F600``, ``1F600`` or a literal)."""

        character = parse_code_point(value)
        self.insert_text(character)
        return character

    def set_text(self, text: str) -> None:
        """Replace the entire document programmatically, bypassing the normalizer."""

        self.replace(TextRange(0, len(self._text_buffer)), text, selection=TextRange(0, 0))

    def undo(self) -> None:
        """Restore the previous text snapshot if available."""

        if not self._undo_stack:
            return
        entry = self._undo_stack.pop()
        self._redo_stack.append(_UndoEntry(text=self._text_buffer))
        self._apply_history(entry, "undo")

    def redo(self) -> None:
        """Reapply an undone text snapshot if available."""

        if not self._redo_stack:
            return
        entry = self._redo_stack.pop()
        self._undo_stack.append(_UndoEntry(text=self._text_buffer))
        self._apply_history(entry, "redo")

    def _apply_history(self, entry: _UndoEntry, action: str) -> None:
        caret = self._selection.start
        self._history_action = action
        try:
            self.user_replace(0, len(self._text_buffer), entry.text)
        finally:
            self._history_action = None
        self._collapse_selection_to(caret)

    # ------------------------------------------------------------------
    # Selection
    # ------------------------------------------------------------------
    def selection_range(self) -> SelectionRange:
        """Return a copy of the current selection for internal consumers."""

        return SelectionRange(self._selection.start, self._selection.end)

    def selection_span(self) -> tuple[int, int]:
        return self._selection.as_tuple()

    def selected_text(self) -> str:
        return self._text_buffer[self._selection.start : self._selection.end]

    def set_selection(self, start: int, end: int | None = None) -> None:
        self._set_selection(SelectionRange(start, start if end is None else end))

    def set_insertion_points(self, offsets: Sequence[int]) -> None:
        """Register additional carets; more than one disables character inspection."""

        length = len(self._text_buffer)
        self._insertion_points = tuple(max(0, min(int(offset), length)) for offset in offsets)

    @property
    def has_multiple_insertions(self) -> bool:
        return len(self._insertion_points) > 1

    def _set_selection(
        self,
        selection: SelectionRange | TextRange | Mapping[str, Any] | Sequence[int],
    ) -> None:
        normalized = TextRange.from_value(selection)
        start, end = self._clamp_range(normalized.start, normalized.end)
        self._selection = SelectionRange(start, end)
        self._insertion_points = ()
        if self._qt_editor is not None and QTextCursor is not None:
            cursor = self._qt_editor.textCursor()
            cursor.setPosition(start)
            cursor.setPosition(end, QTextCursor.MoveMode.KeepAnchor)  # type: ignore[attr-defined]
            self._qt_editor.blockSignals(True)
            self._qt_editor.setTextCursor(cursor)
            self._qt_editor.blockSignals(False)
        self._emit_selection_changed()

    # ------------------------------------------------------------------
    # Go to line
    # ------------------------------------------------------------------
    def goto_initial_range(self) -> FuzzyRange:
        """Describe the current selection as a line range for the go-to field."""

        return initial_fuzzy_range(self._text_buffer, TextRange(*self._selection.as_tuple()))

    def select_fuzzy_range(self, line_range: FuzzyRange) -> bool:
        """Select the lines described by ``line_range``; ``False`` leaves the selection alone."""

        resolved = resolve_line_range(line_range, self._text_buffer, index=self.line_index)
        if resolved is None:
            return False
        self._set_selection(resolved)
        _LOGGER.debug("Selected lines %s -> %s", line_range.to_string(), resolved.to_tuple())
        return True

    def goto_location(self, *, enable_qt: bool | None = None) -> GoToLineDialog:
        """Open the go-to dialog prefilled from the current selection."""

        dialog = GoToLineDialog(self.goto_initial_range(), parent=self._qt_container, enable_qt=enable_qt)
        dialog.completion_handler = self.select_fuzzy_range
        dialog.show()
        return dialog

    # ------------------------------------------------------------------
    # Character inspection
    # ------------------------------------------------------------------
    def can_inspect_selection(self) -> bool:
        if self.has_multiple_insertions:
            return False
        return inspect_character(self.selected_text()) is not None

    def selection_character_info(self) -> CharacterInfo | None:
        """Inspect the selection using the document's line ending."""

        return inspect_character(self.selected_text(), self._state.line_ending)

    def show_selection_info(self, *, enable_qt: bool | None = None) -> CharacterPopover | None:
        """Show the character popover; silently does nothing for other selections."""

        info = self.selection_character_info()
        if info is None:
            return None
        popover = CharacterPopover(info, parent=self._qt_container, enable_qt=enable_qt)
        popover.show(self._selection_anchor())
        return popover

    def validate_action(self, action: str | None) -> bool:
        """Return whether an editor action is currently enabled."""

        if action is None:
            return False
        if action == "show_selection_info":
            return self.can_inspect_selection()
        return True

    # ------------------------------------------------------------------
    # Line numbers & orientation
    # ------------------------------------------------------------------
    @property
    def shows_line_numbers(self) -> bool:
        return self._gutter.visible

    @shows_line_numbers.setter
    def shows_line_numbers(self, visible: bool) -> None:
        self._gutter.visible = bool(visible)
        self._sync_qt_gutter()

    @property
    def font(self) -> EditorFont:
        return self._font

    def set_font(self, family: str, point_size: int) -> None:
        """Apply one font to the text view and its line-number gutter."""

        family = (family or "").strip()
        if not family:
            raise ValueError("Font family is required")
        if isinstance(point_size, bool) or not isinstance(point_size, int) or point_size <= 0:
            raise ValueError(f"Font size must be a positive integer, got {point_size!r}")
        self._font = EditorFont(family, point_size)
        self._apply_qt_font()

    @property
    def gutter(self) -> GutterState:
        return GutterState(self._gutter.visible, self._gutter.orientation)

    @property
    def layout_orientation(self) -> LayoutOrientation:
        return self._container_orientation

    def set_layout_orientation(self, orientation: LayoutOrientation | str) -> None:
        """Propagate the text orientation to the gutter and its container."""

        resolved = LayoutOrientation(orientation)
        changed = resolved is not self._gutter.orientation
        self._gutter.orientation = resolved
        self._container_orientation = resolved
        if self._qt_layout is not None:
            direction = (
                QBoxLayout.Direction.LeftToRight if resolved is LayoutOrientation.HORIZONTAL else QBoxLayout.Direction.TopToBottom
            )
            self._qt_layout.setDirection(direction)
        if changed:
            for listener in list(self._orientation_listeners):
                try:
                    listener(resolved)
                except Exception:
                    _LOGGER.exception("Orientation listener failed")

    # ------------------------------------------------------------------
    # Listeners
    # ------------------------------------------------------------------
    def add_text_listener(self, listener: TextChangeListener) -> None:
        self._text_listeners.append(listener)

    def add_selection_listener(self, listener: SelectionListener) -> None:
        self._selection_listeners.append(listener)

    def add_orientation_listener(self, listener: OrientationListener) -> None:
        self._orientation_listeners.append(listener)

    def request_snapshot(self) -> dict:
        snapshot = self.to_document().snapshot()
        snapshot["line_count"] = self.line_count
        return snapshot

    # ------------------------------------------------------------------
    # Internal helpers
    # ------------------------------------------------------------------
    def _commit_text(self, text: str) -> None:
        self._text_buffer = text
        self._state.update_text(text)
        if self._qt_editor is not None and self._qt_editor.toPlainText() != text:
            self._qt_editor.blockSignals(True)
            self._qt_editor.setPlainText(text)
            self._qt_editor.blockSignals(False)
        self._emit_text_changed()

    def _clamp_range(self, start: int, end: int) -> tuple[int, int]:
        length = len(self._text_buffer)
        start = max(0, min(int(start), length))
        end = max(0, min(int(end), length))
        if end < start:
            start, end = end, start
        return start, end

    def _collapse_selection_to(self, position: int) -> None:
        caret = max(0, min(position, len(self._text_buffer)))
        self._set_selection(SelectionRange(caret, caret))

    def _push_undo_snapshot(self, previous_text: str) -> None:
        self._undo_stack.append(_UndoEntry(text=previous_text))
        if len(self._undo_stack) > self.MAX_HISTORY:
            del self._undo_stack[0]

    def _emit_text_changed(self) -> None:
        self._sync_qt_gutter()
        for listener in list(self._text_listeners):
            try:
                listener(self._text_buffer, self._state)
            except Exception:
                _LOGGER.exception("Text listener failed")

    def _emit_selection_changed(self) -> None:
        selection = self.selection_range()
        for listener in list(self._selection_listeners):
            try:
                listener(selection)
            except Exception:
                _LOGGER.exception("Selection listener failed")

    def _selection_anchor(self) -> Any | None:
        if self._qt_editor is None:
            return None
        rect = self._qt_editor.cursorRect()
        return self._qt_editor.mapToGlobal(rect.bottomLeft())

    def _apply_qt_font(self) -> None:
        if self._qt_editor is None or QFont is None:
            return
        qt_font = QFont(self._font.family, self._font.point_size)
        self._qt_editor.setFont(qt_font)
        self._qt_gutter.setFont(qt_font)

    def _sync_qt_gutter(self) -> None:
        if self._qt_gutter is None:
            return
        self._qt_gutter.setVisible(self._gutter.visible)
        if self._gutter.visible:
            self._qt_gutter.setText("\n".join(str(number) for number in range(1, self.line_count + 1)))

    def _handle_qt_text_changed(self) -> None:
        """Replay an edit made in the Qt view as a user edit on the buffer."""

        if self._qt_editor is None:
            return
        text = self._qt_editor.toPlainText()
        if text == self._text_buffer:
            return
        start, old_end, new_end = _changed_span(self._text_buffer, text)
        self.user_replace(start, old_end, text[start:new_end])

    def _handle_qt_selection_changed(self) -> None:
        if self._qt_editor is None:
            return
        cursor = self._qt_editor.textCursor()
        start, end = self._clamp_range(cursor.selectionStart(), cursor.selectionEnd())
        self._selection = SelectionRange(start, end)
        self._emit_selection_changed()


def _changed_span(old: str, new: str) -> tuple[int, int, int]:
    """Return ``(start, old_end, new_end)`` of the region where ``new`` differs from ``old``."""

    limit = min(len(old), len(new))
    start = 0
    while start < limit and old[start] == new[start]:
        start += 1
    old_end, new_end = len(old), len(new)
    while old_end > start and new_end > start and old[old_end - 1] == new[new_end - 1]:
        old_end -= 1
        new_end -= 1
    return start, old_end, new_end
