"""Dataclasses representing editor document state."""

from __future__ import annotations

import hashlib
import uuid
from dataclasses import dataclass, field
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Dict, Optional

from ..core.line_endings import LineEnding


def _utcnow() -> datetime:
    """Return the current UTC time as a timezone-aware datetime."""

    return datetime.now(timezone.utc)


def _hash_text(text: str) -> str:
    return hashlib.sha1(text.encode("utf-8")).hexdigest()


@dataclass(slots=True)
class DocumentMetadata:
    """Metadata describing the currently loaded document."""

    path: Optional[Path] = None
    language: str = "text"
    encoding: str = "utf-8"
    inconsistent_line_endings: bool = False
    updated_at: datetime = field(default_factory=_utcnow)


@dataclass(slots=True)
class SelectionRange:
    """Represents the current selection inside the editor widget."""

    start: int = 0
    end: int = 0

    def as_tuple(self) -> tuple[int, int]:
        return (self.start, self.end)


@dataclass(slots=True)
class DocumentState:
    """Document text (always LF internally) and the line ending it is saved with."""

    text: str = ""
    metadata: DocumentMetadata = field(default_factory=DocumentMetadata)
    selection: SelectionRange = field(default_factory=SelectionRange)
    line_ending: LineEnding = LineEnding.LF
    dirty: bool = False
    document_id: str = field(default_factory=lambda: uuid.uuid4().hex)
    version_id: int = 1
    content_hash: str = field(default_factory=str)

    def __post_init__(self) -> None:
        self.line_ending = LineEnding.coerce(self.line_ending)
        if not self.content_hash:
            self.content_hash = _hash_text(self.text)

    def update_text(self, new_text: str) -> None:
        """Update the document text and mark it dirty."""

        self.text = new_text
        self.dirty = True
        self.metadata.updated_at = _utcnow()
        self.version_id += 1
        self.content_hash = _hash_text(new_text)

    def snapshot(self) -> Dict[str, Any]:
        """Return a serializable summary used by the status bar and the CLI."""

        payload: Dict[str, Any] = {
            "selection": self.selection.as_tuple(),
            "language": self.metadata.language,
            "line_ending": self.line_ending.label,
            "dirty": self.dirty,
            "document_id": self.document_id,
            "version_id": self.version_id,
            "content_hash": self.content_hash,
            "updated_at": self.metadata.updated_at.isoformat(),
        }
        if self.metadata.path:
            payload["path"] = str(self.metadata.path)
        if self.metadata.inconsistent_line_endings:
            payload["inconsistent_line_endings"] = True
        return payload
