"""Tests for file IO and logging helpers."""

from __future__ import annotations

import codecs
import logging
import logging.handlers
from pathlib import Path

import pytest

from tideline.core.line_endings import LineEnding
from tideline.editor.document_model import DocumentMetadata, DocumentState
from tideline.utils import file_io
from tideline.utils import logging as logging_utils


@pytest.fixture
def restore_root_logging():
    root = logging.getLogger()
    level = root.level
    yield
    for handler in list(root.handlers):
        if isinstance(handler, logging.handlers.RotatingFileHandler) or type(handler) is logging.StreamHandler:
            root.removeHandler(handler)
            handler.close()
    root.setLevel(level)


def test_read_document_normalizes_to_lf(tmp_path: Path) -> None:
    path = tmp_path / "windows.txt"
    path.write_bytes(b"one\r\ntwo\r\n")

    document = file_io.read_document(path)

    assert document.text == "one\ntwo\n"
    assert document.line_ending is LineEnding.CRLF
    assert document.metadata.path == path
    assert document.metadata.encoding == "utf-8"
    assert document.metadata.inconsistent_line_endings is False
    assert document.dirty is False


def test_read_document_flags_mixed_line_endings(tmp_path: Path) -> None:
    path = tmp_path / "mixed.txt"
    path.write_bytes(b"a\r\nb\nc\rd")

    document = file_io.read_document(path)

    assert document.text == "a\nb\nc\nd"
    assert document.line_ending is LineEnding.CRLF
    assert document.metadata.inconsistent_line_endings is True
    assert document.snapshot()["inconsistent_line_endings"] is True


def test_read_document_without_terminators_defaults_to_lf(tmp_path: Path) -> None:
    path = tmp_path / "single.txt"
    path.write_bytes(b"solo")

    assert file_io.read_document(path).line_ending is LineEnding.LF


def test_read_document_honours_byte_order_marks(tmp_path: Path) -> None:
    utf8 = tmp_path / "bom8.txt"
    utf8.write_bytes(codecs.BOM_UTF8 + b"x\ry")
    utf16 = tmp_path / "bom16.txt"
    utf16.write_bytes("a\r\nb".encode("utf-16"))

    first = file_io.read_document(utf8)
    second = file_io.read_document(utf16)

    assert first.text == "x\ny"
    assert first.line_ending is LineEnding.CR
    assert first.metadata.encoding == "utf-8-sig"
    assert second.text == "a\nb"
    assert second.metadata.encoding == "utf-16"


def test_read_document_falls_back_for_non_utf8_bytes(tmp_path: Path) -> None:
    path = tmp_path / "legacy.txt"
    path.write_bytes(b"caf\xe9")

    assert file_io.read_document(path).text == "caf\u00E9"


def test_write_document_restores_line_endings(tmp_path: Path) -> None:
    document = DocumentState(text="one\ntwo\n", line_ending=LineEnding.CRLF, dirty=True)
    target = tmp_path / "out" / "saved.txt"

    written = file_io.write_document(target, document)

    assert written == target
    assert target.read_bytes() == b"one\r\ntwo\r\n"
    assert document.dirty is False
    assert document.metadata.path == target
    assert list(target.parent.glob("*.tmp")) == []


def test_write_document_uses_metadata_path(tmp_path: Path) -> None:
    target = tmp_path / "existing.txt"
    document = DocumentState(text="a\nb", metadata=DocumentMetadata(path=target), line_ending="CR")

    file_io.write_document(None, document)

    assert target.read_bytes() == b"a\rb"


def test_write_document_requires_a_path() -> None:
    with pytest.raises(ValueError):
        file_io.write_document(None, DocumentState(text="orphan"))


def test_read_write_round_trip_preserves_bytes(tmp_path: Path) -> None:
    path = tmp_path / "round.txt"
    path.write_bytes(b"l1\rl2\rl3")

    document = file_io.read_document(path)
    file_io.write_document(path, document)

    assert path.read_bytes() == b"l1\rl2\rl3"


def test_setup_logging_writes_to_log_file(tmp_path: Path, restore_root_logging) -> None:
    log_path = logging_utils.setup_logging(logging.DEBUG, log_dir=tmp_path, console=False, force=True)

    logging.getLogger("tideline.tests").debug("hello from tests")
    for handler in logging.getLogger().handlers:
        handler.flush()

    assert log_path == tmp_path / "tideline.log"
    assert logging_utils.get_log_path() == log_path
    assert "hello from tests" in log_path.read_text(encoding="utf-8")
    assert logging_utils.setup_logging(logging.INFO) == log_path


def test_setup_logging_respects_log_dir_environment(tmp_path: Path, monkeypatch: pytest.MonkeyPatch, restore_root_logging) -> None:
    monkeypatch.setenv("TIDELINE_LOG_DIR", str(tmp_path / "env-logs"))

    log_path = logging_utils.setup_logging(console=False, force=True)

    assert log_path == tmp_path / "env-logs" / "tideline.log"
    assert log_path.parent.is_dir()


def test_log_config_reads_level_from_environment(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("TIDELINE_LOG_LEVEL", "warning")

    config = logging_utils.LogConfig.from_environment(console=False)

    assert config.level == logging.WARNING
    assert config.log_path == tmp_path / "logs" / "tideline.log"
    assert logging_utils.LogConfig.from_environment(logging.DEBUG).level == logging.DEBUG


def test_log_config_ignores_unknown_level_names(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("TIDELINE_LOG_LEVEL", "chatty")

    assert logging_utils.LogConfig.from_environment().level == logging.INFO


def test_setup_logging_accepts_a_config(tmp_path: Path, restore_root_logging) -> None:
    config = logging_utils.LogConfig(level=logging.DEBUG, log_dir=tmp_path / "cfg", console=False)

    log_path = logging_utils.setup_logging(config, force=True)

    assert log_path == tmp_path / "cfg" / "tideline.log"
    assert logging.getLogger().level == logging.DEBUG
