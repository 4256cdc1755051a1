"""Application bootstrap and command line entry point for Tideline."""

from __future__ import annotations

import argparse
import json
import logging
import os
import sys
from dataclasses import asdict
from pathlib import Path
from typing import Any, Mapping, Optional, Sequence, TextIO, cast

from .core.line_endings import LineEnding, detect_line_ending, replace_line_endings
from .core.ranges import FuzzyRange
from .editor.character_info import grapheme_range_at, inspect_character
from .editor.document_model import DocumentState
from .editor.editor_widget import EditorFont, EditorWidget
from .editor.navigation import resolve_line_range
from .services.settings import Settings, SettingsStore, parse_overrides
from .utils import file_io
from .utils import logging as logging_utils

_TRUE_VALUES = {"1", "true", "yes", "on", "debug"}
_LOGGER = logging.getLogger(__name__)


def configure_logging(debug: bool = False, *, force: bool = False) -> None:
    """Configure structured logging for the application."""

    config = logging_utils.LogConfig.from_environment(logging.DEBUG if debug else None)
    logging_utils.setup_logging(config, force=force)
    _LOGGER.debug("Logging configured (level=%s)", logging.getLevelName(config.level))
    _install_qt_message_handler()


def load_settings(
    path: Optional[Path] = None,
    *,
    store: SettingsStore | None = None,
    overrides: Mapping[str, Any] | None = None,
) -> Settings:
    """Load persisted settings or fall back to defaults."""

    active_store = store or SettingsStore(path)
    try:
        settings = active_store.load(overrides=overrides)
    except OSError as exc:
        _LOGGER.warning("Failed to load settings from %s: %s", active_store.path, exc)
        settings = Settings()
    return settings


def create_qapp() -> Any:
    """Return the running ``QApplication`` or create one."""

    try:  # Local import to avoid mandatory PySide6 dependency at import time.
        from PySide6.QtWidgets import QApplication
    except ImportError as exc:  # pragma: no cover - depends on desktop stack
        raise RuntimeError("PySide6 must be installed to launch the Tideline UI.") from exc

    os.environ.setdefault("QT_ENABLE_HIGHDPI_SCALING", "1")
    app = cast(Any, QApplication.instance() or QApplication(sys.argv))
    app.setApplicationName("Tideline")
    app.setApplicationDisplayName("Tideline")
    return app


def main(argv: Sequence[str] | None = None) -> None:
    """Entry point invoked by the `tideline` console script."""

    args = _parse_cli_args(argv)

    debug = _env_flag("TIDELINE_DEBUG", default=False)
    configure_logging(debug)

    settings_path = args.settings_path or os.environ.get("TIDELINE_SETTINGS_PATH")
    resolved_path = Path(settings_path).expanduser() if settings_path else None
    settings_store = SettingsStore(resolved_path)
    try:
        cli_overrides = parse_overrides(args.overrides or [])
    except ValueError as exc:
        print(f"Invalid --set override: {exc}", file=sys.stderr)
        raise SystemExit(2) from exc

    settings = load_settings(resolved_path, store=settings_store, overrides=cli_overrides or None)

    if args.dump_settings:
        _dump_settings(settings, settings_store, overrides=cli_overrides)
        return

    if settings.debug_logging and not debug:
        configure_logging(True, force=True)

    line_ending: LineEnding | None = None
    if args.line_ending:
        try:
            line_ending = LineEnding.coerce(args.line_ending)
        except ValueError as exc:
            print(str(exc), file=sys.stderr)
            raise SystemExit(2) from exc

    if args.goto is not None or args.inspect is not None or args.inspect_at is not None:
        status = run_headless(args, settings, line_ending=line_ending)
        if status:
            raise SystemExit(status)
        return

    _launch_window(args.path, settings, line_ending=line_ending)


def run_headless(
    args: argparse.Namespace,
    settings: Settings,
    *,
    line_ending: LineEnding | None = None,
    stream: TextIO | None = None,
) -> int:
    """Run the requested non-interactive action and print its JSON result."""

    destination = stream or sys.stdout
    if args.inspect is not None:
        ending = line_ending or settings.default_line_ending
        info = inspect_character(args.inspect, ending)
        if info is None:
            print("Selection is not a single character.", file=sys.stderr)
            return 1
        _write_json(info.to_dict(), destination)
        return 0

    document = _load_input(args.path, settings)
    if line_ending is not None:
        document.line_ending = line_ending

    if args.goto is not None:
        try:
            fuzzy = FuzzyRange.from_string(args.goto)
        except ValueError as exc:
            print(str(exc), file=sys.stderr)
            return 2
        resolved = resolve_line_range(fuzzy, document.text)
        if resolved is None:
            print(f"Line range {args.goto} is outside the document.", file=sys.stderr)
            return 1
        payload = {"range": fuzzy.to_string(), **resolved.to_dict()}
        payload["text"] = document.text[resolved.start : resolved.end]
        _write_json(payload, destination)
        return 0

    span = grapheme_range_at(document.text, args.inspect_at)
    info = None
    if span is not None:
        info = inspect_character(document.text[span[0] : span[1]], document.line_ending)
    if info is None:
        print(f"No character at offset {args.inspect_at}.", file=sys.stderr)
        return 1
    _write_json({"offset": span[0], **info.to_dict()}, destination)
    return 0


def build_editor(
    path: str | None,
    settings: Settings,
    *,
    line_ending: LineEnding | None = None,
) -> EditorWidget:
    """Create an editor configured from ``settings`` with ``path`` (or an empty document) loaded."""

    widget = EditorWidget(
        show_line_numbers=settings.show_line_numbers,
        orientation=settings.layout_orientation,
        font=EditorFont(settings.font_family, settings.font_size),
    )
    document = file_io.read_document(path) if path else DocumentState(line_ending=settings.default_line_ending)
    if line_ending is not None:
        document.line_ending = line_ending
    widget.load_document(document)
    return widget


def _launch_window(path: str | None, settings: Settings, *, line_ending: LineEnding | None) -> None:
    app = create_qapp()
    widget = build_editor(path, settings, line_ending=line_ending)
    document = widget.to_document()
    window = widget.qt_widget
    if window is None:  # pragma: no cover - QApplication creation failed
        raise RuntimeError("Unable to build the editor window.")
    window.setWindowTitle(Path(path).name if path else "Untitled")
    window.resize(900, 640)
    window.show()
    _LOGGER.info("Editor window opened (line ending=%s)", document.line_ending.label)
    try:
        app.exec()
    except KeyboardInterrupt:  # pragma: no cover - manual shutdown path
        _LOGGER.info("Shutdown requested by user.")


def _load_input(path: str | None, settings: Settings) -> DocumentState:
    if path and path != "-":
        return file_io.read_document(path)
    text = sys.stdin.read()
    ending = detect_line_ending(text) or settings.default_line_ending
    return DocumentState(text=replace_line_endings(text, LineEnding.LF), line_ending=ending)


def _write_json(payload: Mapping[str, Any], destination: TextIO) -> None:
    json.dump(payload, destination, indent=2, ensure_ascii=False)
    destination.write("\n")


def _env_flag(name: str, *, default: bool = False) -> bool:
    value = os.environ.get(name)
    if value is None:
        return default
    return value.strip().lower() in _TRUE_VALUES


def _install_qt_message_handler() -> None:
    """Redirect Qt warnings to the Python logging stack when available."""

    try:
        from PySide6.QtCore import QtMsgType, qInstallMessageHandler
    except Exception:  # pragma: no cover - PySide6 optional during tests
        return

    level_map = {
        QtMsgType.QtDebugMsg: logging.DEBUG,
        QtMsgType.QtInfoMsg: logging.INFO,
        QtMsgType.QtWarningMsg: logging.WARNING,
        QtMsgType.QtCriticalMsg: logging.ERROR,
        QtMsgType.QtFatalMsg: logging.CRITICAL,
    }

    def _handler(mode, context, message):  # type: ignore[no-untyped-def]
        del context
        level = level_map.get(mode, logging.INFO)
        logging.getLogger("PySide6").log(level, message)

    qInstallMessageHandler(_handler)


def _parse_cli_args(argv: Sequence[str] | None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(
        prog="tideline",
        description="Open the Tideline editor or run a navigation/inspection query on a file.",
    )
    parser.add_argument("path", nargs="?", help="File to open or query ('-' reads stdin).")
    parser.add_argument(
        "--goto",
        metavar="RANGE",
        help="Print the character range of LINE[:COUNT]; zero and negatives count from the end.",
    )
    parser.add_argument("--inspect", metavar="TEXT", help="Describe a single character and exit.")
    parser.add_argument(
        "--inspect-at",
        metavar="OFFSET",
        type=int,
        help="Describe the character at OFFSET in the input and exit.",
    )
    parser.add_argument(
        "--line-ending",
        metavar="NAME",
        help="Treat the document as using this line ending (LF, CR, CRLF, NEL, LS, PS).",
    )
    parser.add_argument(
        "--dump-settings",
        action="store_true",
        help="Print the effective settings payload and exit.",
    )
    parser.add_argument(
        "--settings-path",
        metavar="PATH",
        help="Override the default ~/.tideline/settings.json path.",
    )
    parser.add_argument(
        "--set",
        dest="overrides",
        metavar="KEY=VALUE",
        action="append",
        default=[],
        help="Override persisted settings before launch (repeatable).",
    )
    return parser.parse_args(argv)


def _dump_settings(
    settings: Settings,
    store: SettingsStore,
    *,
    overrides: Mapping[str, Any],
    stream: TextIO | None = None,
) -> None:
    destination = stream or sys.stdout
    metadata = {
        "path": str(store.path),
        "cli_overrides": sorted(overrides.keys()),
        "environment_variables": _active_env_overrides(),
    }
    output = {"settings": asdict(settings), "meta": metadata}
    json.dump(output, destination, indent=2)
    destination.write("\n")


def _active_env_overrides() -> list[str]:
    return sorted(name for name in os.environ if name.startswith("TIDELINE_"))
