"""Reading and writing documents with their on-disk line endings."""

from __future__ import annotations

import codecs
import locale
import logging
import os
import tempfile
from pathlib import Path

from ..core.line_endings import LineEnding, detect_line_ending, line_ending_counts, replace_line_endings
from ..editor.document_model import DocumentMetadata, DocumentState

__all__ = ["read_document", "write_document"]

_LOGGER = logging.getLogger(__name__)

_BOM_MAP: dict[bytes, str] = {
    codecs.BOM_UTF32_LE: "utf-32",
    codecs.BOM_UTF32_BE: "utf-32",
    codecs.BOM_UTF8: "utf-8-sig",
    codecs.BOM_UTF16_LE: "utf-16",
    codecs.BOM_UTF16_BE: "utf-16",
}


def read_document(path: Path | str, *, encoding: str | None = None) -> DocumentState:
    """Load ``path`` into a document whose text uses LF line endings.

    The first terminator in the file decides the document's line ending;
    files mixing several styles are flagged in the metadata.
    """

    target = Path(path)
    raw = target.read_bytes()
    detected_encoding = encoding or _detect_encoding(raw)
    text = raw.decode(detected_encoding)
    if text.startswith("\ufeff"):
        text = text[1:]

    line_ending = detect_line_ending(text) or LineEnding.LF
    inconsistent = len(line_ending_counts(text)) > 1
    if inconsistent:
        _LOGGER.info("%s mixes line endings; using %s", target, line_ending.label)
    metadata = DocumentMetadata(
        path=target,
        encoding=detected_encoding,
        inconsistent_line_endings=inconsistent,
    )
    return DocumentState(
        text=replace_line_endings(text, LineEnding.LF),
        metadata=metadata,
        line_ending=line_ending,
    )


def write_document(path: Path | str | None, document: DocumentState, *, encoding: str | None = None) -> Path:
    """Atomically write ``document`` using its configured line ending."""

    target = Path(path) if path is not None else document.metadata.path
    if target is None:
        raise ValueError("Document has no path to save to")
    target.parent.mkdir(parents=True, exist_ok=True)
    content = replace_line_endings(document.text, document.line_ending)
    resolved_encoding = encoding or document.metadata.encoding or "utf-8"

    descriptor, tmp_name = tempfile.mkstemp(dir=str(target.parent), prefix=f".{target.name}.", suffix=".tmp")
    try:
        with os.fdopen(descriptor, "w", encoding=resolved_encoding, newline="") as handle:
            handle.write(content)
            handle.flush()
            os.fsync(handle.fileno())
        os.replace(tmp_name, target)
    finally:
        if os.path.exists(tmp_name):  # pragma: no cover - cleanup path
            try:
                os.unlink(tmp_name)
            except OSError:
                pass
    document.metadata.path = target
    document.dirty = False
    _LOGGER.debug("Wrote %s with %s line endings", target, document.line_ending.label)
    return target


def _detect_encoding(raw: bytes) -> str:
    for bom, encoding in _BOM_MAP.items():
        if raw.startswith(bom):
            return encoding

    preferred = locale.getpreferredencoding(False) or "utf-8"
    seen: set[str] = set()
    for candidate in ("utf-8", preferred, "latin-1"):
        if not candidate or candidate in seen:
            continue
        seen.add(candidate)
        try:
            raw.decode(candidate)
            return candidate
        except UnicodeDecodeError:
            continue
    return "utf-8"
