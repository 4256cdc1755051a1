"""Settings dataclasses and persistence helpers."""

from __future__ import annotations

import json
import logging
import os
from dataclasses import asdict, dataclass, fields, replace
from pathlib import Path
from typing import Any, Callable, Dict, Mapping, Sequence

from ..core.line_endings import LineEnding

__all__ = ["Settings", "SettingsStore", "parse_overrides"]

LOGGER = logging.getLogger(__name__)
_SETTINGS_DIR = Path.home() / ".tideline"
_DEFAULT_SETTINGS_PATH = _SETTINGS_DIR / "settings.json"
_SETTINGS_VERSION = 1
_DEFAULT_FONT_SIZE = 13
_ENV_OVERRIDES: Mapping[str, str] = {
    "TIDELINE_LINE_ENDING": "line_ending",
    "TIDELINE_FONT_FAMILY": "font_family",
    "TIDELINE_LAYOUT_ORIENTATION": "layout_orientation",
}
_BOOL_ENV_OVERRIDES: Mapping[str, str] = {
    "TIDELINE_DEBUG_LOGGING": "debug_logging",
    "TIDELINE_SHOW_LINE_NUMBERS": "show_line_numbers",
}
_INT_ENV_OVERRIDES: Mapping[str, str] = {
    "TIDELINE_FONT_SIZE": "font_size",
}
_TRUE_VALUES = {"1", "true", "yes", "on", "debug"}
_FALSE_VALUES = {"0", "false", "no", "off", "disabled"}
_ORIENTATIONS = ("horizontal", "vertical")


@dataclass(slots=True)
class Settings:
    """User-configurable settings persisted between sessions."""

    line_ending: str = LineEnding.LF.label
    show_line_numbers: bool = True
    layout_orientation: str = "horizontal"
    font_family: str = "JetBrains Mono"
    font_size: int = _DEFAULT_FONT_SIZE
    debug_logging: bool = False

    @property
    def default_line_ending(self) -> LineEnding:
        """Return the line ending new documents are saved with."""

        try:
            return LineEnding.coerce(self.line_ending)
        except (TypeError, ValueError):
            LOGGER.warning("Unknown line ending %r in settings; using LF", self.line_ending)
            return LineEnding.LF


class SettingsStore:
    """Persistence adapter for :class:`Settings`."""

    def __init__(self, path: Path | None = None) -> None:
        self._path = path or _DEFAULT_SETTINGS_PATH

    @property
    def path(self) -> Path:
        """Return the resolved path backing this store."""

        return self._path

    def load(self, *, overrides: Mapping[str, Any] | None = None) -> Settings:
        """Load settings from disk, applying CLI/environment overrides when present."""

        payload = self._read_payload()
        settings = Settings()
        if payload:
            data = _filter_fields(payload)
            try:
                settings = Settings(**data)
            except TypeError as exc:
                LOGGER.warning("Settings payload contained unexpected data: %s", exc)
                settings = Settings()
            LOGGER.debug("Settings loaded from %s (version=%s)", self._path, payload.get("version"))

        if overrides:
            settings = self._apply_overrides(settings, overrides, source="CLI")

        settings = self._apply_env_overrides(settings)
        return _sanitize(settings)

    def save(self, settings: Settings) -> Path:
        """Persist settings to disk with atomic file writes."""

        payload = asdict(settings)
        payload["version"] = _SETTINGS_VERSION
        body = json.dumps(payload, indent=2, sort_keys=True)
        self._path.parent.mkdir(parents=True, exist_ok=True)
        tmp_path = self._path.with_suffix(".tmp")
        tmp_path.write_text(body, encoding="utf-8")
        tmp_path.replace(self._path)
        LOGGER.debug("Settings saved to %s", self._path)
        return self._path

    def _read_payload(self) -> Dict[str, Any]:
        if not self._path.exists():
            return {}
        try:
            text = self._path.read_text(encoding="utf-8")
            payload = json.loads(text)
        except FileNotFoundError:
            return {}
        except json.JSONDecodeError as exc:
            LOGGER.warning("Settings file %s is not valid JSON: %s", self._path, exc)
            return {}
        if not isinstance(payload, dict):
            LOGGER.warning("Settings file %s does not contain an object", self._path)
            return {}
        return payload

    def _apply_overrides(
        self,
        settings: Settings,
        overrides: Mapping[str, Any],
        *,
        source: str = "runtime",
    ) -> Settings:
        allowed = {item.name for item in fields(Settings)}
        filtered: Dict[str, Any] = {}
        for key, value in overrides.items():
            if key not in allowed or value is None:
                continue
            filtered[key] = value
        if filtered:
            LOGGER.debug("Applying %s settings overrides: %s", source, sorted(filtered))
            settings = replace(settings, **filtered)
        return settings

    def _apply_env_overrides(self, settings: Settings) -> Settings:
        overrides: Dict[str, Any] = {}
        for env_name, field_name in _ENV_OVERRIDES.items():
            value = os.environ.get(env_name)
            if value is not None:
                overrides[field_name] = value
        for env_name, field_name in _BOOL_ENV_OVERRIDES.items():
            value = os.environ.get(env_name)
            if value is not None:
                overrides[field_name] = value.strip().lower() in _TRUE_VALUES
        for env_name, field_name in _INT_ENV_OVERRIDES.items():
            value = os.environ.get(env_name)
            if value is None:
                continue
            try:
                overrides[field_name] = int(value, 10)
            except ValueError:
                LOGGER.warning(
                    "Environment override %s=%s is not a valid integer",
                    env_name,
                    value,
                )
        if overrides:
            settings = self._apply_overrides(settings, overrides, source="environment")
        return settings


def _filter_fields(payload: Mapping[str, Any]) -> Dict[str, Any]:
    allowed = {item.name for item in fields(Settings)}
    return {key: value for key, value in payload.items() if key in allowed}


def _sanitize(settings: Settings) -> Settings:
    """Replace values the editor cannot use with their defaults."""

    updates: Dict[str, Any] = {}
    try:
        label = LineEnding.coerce(settings.line_ending).label
    except (TypeError, ValueError):
        LOGGER.warning("Ignoring unknown line ending setting %r", settings.line_ending)
        label = LineEnding.LF.label
    if label != settings.line_ending:
        updates["line_ending"] = label
    orientation = str(settings.layout_orientation).strip().lower()
    if orientation not in _ORIENTATIONS:
        LOGGER.warning("Ignoring unknown layout orientation %r", settings.layout_orientation)
        orientation = "horizontal"
    if orientation != settings.layout_orientation:
        updates["layout_orientation"] = orientation
    if not isinstance(settings.font_size, int) or isinstance(settings.font_size, bool) or settings.font_size <= 0:
        LOGGER.warning("Ignoring invalid font size %r", settings.font_size)
        updates["font_size"] = _DEFAULT_FONT_SIZE
    return replace(settings, **updates) if updates else settings


def parse_overrides(items: Sequence[str]) -> Dict[str, Any]:
    """Parse ``KEY=VALUE`` strings from ``--set`` into typed setting values.

    Raises ``ValueError`` for unknown keys and values the field cannot hold.
    """

    overrides: Dict[str, Any] = {}
    for entry in items:
        if "=" not in entry:
            raise ValueError(f"Override '{entry}' must use KEY=VALUE syntax.")
        key, raw_value = (part.strip() for part in entry.split("=", 1))
        if not key:
            raise ValueError("Override is missing a field name.")
        parser = _OVERRIDE_PARSERS.get(key)
        if parser is None:
            raise ValueError(f"Unknown setting '{key}'.")
        overrides[key] = parser(raw_value)
    return overrides


def _parse_bool(value: str) -> bool:
    lowered = value.lower()
    if lowered in _TRUE_VALUES:
        return True
    if lowered in _FALSE_VALUES:
        return False
    raise ValueError(f"Cannot coerce '{value}' to a boolean.")


def _parse_font_size(value: str) -> int:
    size = int(value, 10)
    if size <= 0:
        raise ValueError("font_size must be positive")
    return size


def _parse_line_ending(value: str) -> str:
    return LineEnding.coerce(value).label


def _parse_orientation(value: str) -> str:
    orientation = value.lower()
    if orientation not in _ORIENTATIONS:
        raise ValueError(f"layout_orientation must be one of {', '.join(_ORIENTATIONS)}")
    return orientation


_OVERRIDE_PARSERS: Mapping[str, Callable[[str], Any]] = {
    "line_ending": _parse_line_ending,
    "show_line_numbers": _parse_bool,
    "layout_orientation": _parse_orientation,
    "font_family": str,
    "font_size": _parse_font_size,
    "debug_logging": _parse_bool,
}
