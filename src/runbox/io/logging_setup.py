"""Centralized logging bootstrap for the runbox runtime.

// [LAW:single-enforcer] Logger handler wiring is enforced in this module only.
// [LAW:one-source-of-truth] Runtime log path/level are derived here and returned to callers.
"""

from __future__ import annotations

import logging
import os
from dataclasses import dataclass
from logging.handlers import RotatingFileHandler
from pathlib import Path


@dataclass(frozen=True)
class LoggingRuntime:
    """Resolved runtime logging configuration."""

    level_name: str
    level: int
    file_path: str


_RUNTIME: LoggingRuntime | None = None


def _parse_level(raw: str) -> tuple[str, int]:
    normalized = str(raw or "INFO").strip().upper()
    level = getattr(logging, normalized, logging.INFO)
    if not isinstance(level, int):
        level = logging.INFO
    level_name = logging.getLevelName(level)
    return str(level_name), int(level)


def _default_log_path() -> str:
    log_dir = Path(
        os.environ.get("RUNBOX_LOG_DIR", os.path.expanduser("~/.local/share/runbox/logs"))
    )
    log_dir.mkdir(parents=True, exist_ok=True)
    # One file shared by every launch; rotation caps it.
    return str(log_dir / "runbox.log")


def _make_stream_handler(level: int) -> logging.Handler:
    handler = logging.StreamHandler()
    handler.setLevel(level)
    handler.setFormatter(logging.Formatter("[%(name)s] %(levelname)s %(message)s"))
    return handler


def _make_file_handler(level: int, file_path: str) -> logging.Handler:
    handler = RotatingFileHandler(
        file_path,
        maxBytes=2 * 1024 * 1024,
        backupCount=3,
        encoding="utf-8",
    )
    handler.setLevel(level)
    handler.setFormatter(
        logging.Formatter(
            "%(asctime)s %(levelname)s %(name)s [%(threadName)s] %(message)s",
            datefmt="%Y-%m-%dT%H:%M:%S",
        )
    )
    return handler


def configure(*, stream: bool = False) -> LoggingRuntime:
    """Configure runbox logger hierarchy with a rotating file handler.

    stream adds a stderr handler; leave it off while the full-screen TUI owns the terminal.
    Idempotent: repeated calls return the originally configured runtime.
    """
    global _RUNTIME
    if _RUNTIME is not None:
        return _RUNTIME

    level_name, level = _parse_level(os.environ.get("RUNBOX_LOG_LEVEL", "INFO"))
    file_path = _default_log_path()

    # [LAW:single-enforcer] All runbox module loggers propagate to this one logger.
    logger = logging.getLogger("runbox")
    logger.setLevel(level)
    logger.propagate = False
    logger.handlers.clear()
    if stream:
        logger.addHandler(_make_stream_handler(level))
    logger.addHandler(_make_file_handler(level, file_path))

    _RUNTIME = LoggingRuntime(level_name=level_name, level=level, file_path=file_path)
    return _RUNTIME


def get_runtime() -> LoggingRuntime | None:
    """Return configured logging runtime, if configure() has run."""
    return _RUNTIME
