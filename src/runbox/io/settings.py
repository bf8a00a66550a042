"""Settings file I/O for runbox.

Manages a JSON settings file at XDG_CONFIG_HOME/runbox/settings.json.
Unknown keys are ignored; missing or corrupt files fall back to defaults.

This module is a STABLE BOUNDARY.
Import as: import runbox.io.settings
"""

from __future__ import annotations

import json
import logging
import os
import tempfile
from dataclasses import dataclass, field, replace
from pathlib import Path

logger = logging.getLogger(__name__)


def get_config_path() -> Path:
    """Return path to settings file.

    Uses XDG_CONFIG_HOME (default ~/.config) / runbox / settings.json.
    """
    config_home = os.environ.get("XDG_CONFIG_HOME", os.path.expanduser("~/.config"))
    return Path(config_home) / "runbox" / "settings.json"


def load_settings() -> dict:
    """Load settings from JSON file. Returns empty dict on missing/corrupt file."""
    path = get_config_path()
    # [LAW:dataflow-not-control-flow] Always attempt read; empty dict is the "no data" value.
    try:
        data = json.loads(path.read_text(encoding="utf-8"))
    except (FileNotFoundError, json.JSONDecodeError, OSError):
        return {}
    return data if isinstance(data, dict) else {}


def save_settings(data: dict) -> Path:
    """Write the settings dict atomically and return the file path.

    The JSON goes to a sibling temp file first and is renamed over the target,
    so a crash mid-write never leaves a truncated settings.json.
    """
    path = get_config_path()
    path.parent.mkdir(parents=True, exist_ok=True)
    with tempfile.NamedTemporaryFile(
        "w", encoding="utf-8", dir=path.parent, suffix=".tmp", delete=False
    ) as tmp:
        json.dump(data, tmp, indent=2, sort_keys=True)
        tmp.write("\n")
    try:
        os.replace(tmp.name, path)
    except OSError:
        os.unlink(tmp.name)
        raise
    return path


def update_settings(changes: dict) -> dict:
    """Merge non-None changes into the settings file. Returns the merged dict."""
    updates = {k: v for k, v in changes.items() if v is not None}
    data = load_settings()
    data.update(updates)
    path = save_settings(data)
    logger.info("saved settings to %s: %s", path, sorted(updates))
    return data


# ─── Resolved configuration ──────────────────────────────────────────────────

LOCATOR_KINDS = ("path", "http")


@dataclass(frozen=True)
class RunboxConfig:
    debounce_ms: int = 300
    max_results: int = 50
    locator: str = "path"
    locator_url: str = ""
    commands: tuple[dict, ...] = field(default_factory=tuple)
    close_on_launch: bool = True

    @property
    def debounce_seconds(self) -> float:
        return self.debounce_ms / 1000.0


def _as_int(value, default: int, minimum: int = 0) -> int:
    try:
        return max(minimum, int(value))
    except (TypeError, ValueError):
        return default


def _as_bool(key: str, value, default: bool) -> bool:
    if value is None:
        return default
    if isinstance(value, bool):
        return value
    logger.warning("setting %s=%r is not a boolean, using %r", key, value, default)
    return default


def _as_commands(value) -> tuple[dict, ...] | None:
    if not isinstance(value, list):
        return None
    return tuple(item for item in value if isinstance(item, dict) and item.get("title"))


def load_config(overrides: dict | None = None) -> RunboxConfig:
    """Build RunboxConfig from disk, then apply non-None overrides (CLI flags)."""
    data = load_settings()
    if overrides:
        data.update({k: v for k, v in overrides.items() if v is not None})

    defaults = RunboxConfig()
    locator = str(data.get("locator", defaults.locator) or defaults.locator).strip().lower()
    if locator not in LOCATOR_KINDS:
        logger.warning("unknown locator %r, using %r", locator, defaults.locator)
        locator = defaults.locator

    config = replace(
        defaults,
        debounce_ms=_as_int(data.get("debounce_ms"), defaults.debounce_ms),
        max_results=_as_int(data.get("max_results"), defaults.max_results, minimum=1),
        locator=locator,
        locator_url=str(data.get("locator_url", "") or ""),
        close_on_launch=_as_bool(
            "close_on_launch", data.get("close_on_launch"), defaults.close_on_launch
        ),
    )
    commands = _as_commands(data.get("commands"))
    if commands is not None:
        config = replace(config, commands=commands)
    return config
