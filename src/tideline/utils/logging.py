"""Logging setup for the Tideline editor.

Headless commands print their results as JSON on stdout, so console logging
always goes to stderr.
"""

from __future__ import annotations

import logging
import logging.handlers
import os
import sys
from dataclasses import dataclass, field
from pathlib import Path

__all__ = ["LogConfig", "get_log_path", "setup_logging"]

_DEFAULT_LOG_DIR = Path.home() / ".tideline" / "logs"
_LOG_FILE_NAME = "tideline.log"
_FORMAT = "%(asctime)s | %(levelname)-8s | %(name)s | %(message)s"
_DATE_FORMAT = "%Y-%m-%d %H:%M:%S"
_NOISY_LOGGERS: tuple[str, ...] = ("PySide6",)
_CONFIGURED = False
_LOG_PATH: Path | None = None


def _default_log_dir() -> Path:
    return Path(os.environ.get("TIDELINE_LOG_DIR") or _DEFAULT_LOG_DIR).expanduser()


@dataclass(slots=True)
class LogConfig:
    """Where and how verbosely the editor writes its log."""

    level: int = logging.INFO
    log_dir: Path = field(default_factory=_default_log_dir)
    console: bool = True
    max_bytes: int = 1_000_000
    backup_count: int = 3

    @classmethod
    def from_environment(cls, level: int | None = None, **overrides) -> LogConfig:
        """Build a config honouring ``TIDELINE_LOG_DIR`` and ``TIDELINE_LOG_LEVEL``."""

        if level is None:
            name = os.environ.get("TIDELINE_LOG_LEVEL", "").strip().upper()
            resolved = logging.getLevelName(name) if name else logging.INFO
            level = resolved if isinstance(resolved, int) else logging.INFO
        return cls(level=level, **overrides)

    @property
    def log_path(self) -> Path:
        return Path(self.log_dir).expanduser() / _LOG_FILE_NAME


def setup_logging(
    level: int | LogConfig = logging.INFO,
    *,
    log_dir: Path | str | None = None,
    console: bool = True,
    force: bool = False,
) -> Path:
    """Configure root logging with a rotating file and an optional stderr handler."""

    global _CONFIGURED, _LOG_PATH
    if _CONFIGURED and not force and _LOG_PATH is not None:
        return _LOG_PATH

    if isinstance(level, LogConfig):
        config = level
    else:
        config = LogConfig(level=level, console=console)
        if log_dir is not None:
            config.log_dir = Path(log_dir)

    log_path = config.log_path
    log_path.parent.mkdir(parents=True, exist_ok=True)
    formatter = logging.Formatter(fmt=_FORMAT, datefmt=_DATE_FORMAT)

    handlers: list[logging.Handler] = [
        logging.handlers.RotatingFileHandler(
            log_path,
            maxBytes=config.max_bytes,
            backupCount=config.backup_count,
            encoding="utf-8",
        )
    ]
    if config.console:
        handlers.append(logging.StreamHandler(sys.stderr))
    for handler in handlers:
        handler.setFormatter(formatter)
        handler.setLevel(config.level)

    logging.basicConfig(level=config.level, handlers=handlers, force=True)
    logging.captureWarnings(True)
    quiet_level = max(logging.WARNING, config.level)
    for logger_name in _NOISY_LOGGERS:
        logging.getLogger(logger_name).setLevel(quiet_level)

    _CONFIGURED = True
    _LOG_PATH = log_path
    return log_path


def get_log_path() -> Path | None:
    """Return the currently configured log file if available."""

    return _LOG_PATH
