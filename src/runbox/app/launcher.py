"""Subprocess launcher — category + reference to a detached process.

// [LAW:one-source-of-truth] Category→argv strategy table lives here.
// [LAW:dataflow-not-control-flow] Strategy picked by lookup, not if/elif chains.
"""

from __future__ import annotations

import asyncio
import logging
import os
import shlex
import shutil
import subprocess
import sys
from collections.abc import Callable

from runbox.core.candidates import (
    CATEGORY_APP,
    CATEGORY_COMMAND,
    CATEGORY_FILE,
    CATEGORY_FOLDER,
    CATEGORY_URL,
)
from runbox.core.errors import LaunchFailed

logger = logging.getLogger(__name__)


def default_opener() -> str:
    return "open" if sys.platform == "darwin" else "xdg-open"


def _argv_exec(reference: str, opener: str) -> list[str]:
    return [reference]


def _argv_open(reference: str, opener: str) -> list[str]:
    return [opener, reference]


def _argv_shell(reference: str, opener: str) -> list[str]:
    return shlex.split(reference)


_STRATEGIES: dict[str, Callable[[str, str], list[str]]] = {
    CATEGORY_APP: _argv_exec,
    "executable": _argv_exec,
    CATEGORY_FILE: _argv_open,
    CATEGORY_FOLDER: _argv_open,
    CATEGORY_URL: _argv_open,
    CATEGORY_COMMAND: _argv_shell,
}


def build_argv(category: str, reference: str, opener: str | None = None) -> list[str]:
    """Resolve (category, reference) to argv. Raises LaunchFailed."""
    strategy = _STRATEGIES.get(str(category or "").strip().lower())
    if strategy is None:
        raise LaunchFailed(
            f"unknown category {category!r}", category=category, reference=reference
        )
    try:
        argv = strategy(reference, opener or default_opener())
    except ValueError as e:
        # shlex: unbalanced quotes
        raise LaunchFailed(str(e), category=category, reference=reference) from e
    if not argv or not argv[0]:
        raise LaunchFailed("empty command", category=category, reference=reference)
    return argv


class SubprocessLauncher:
    """Spawns detached processes. Does not wait for them to exit."""

    def __init__(self, opener: str | None = None, popen=subprocess.Popen):
        self.opener = opener or default_opener()
        self._popen = popen

    def _spawn(self, category: str, reference: str) -> int:
        argv = build_argv(category, reference, self.opener)
        program = argv[0]
        if os.sep not in program:
            resolved = shutil.which(program)
            if resolved is None:
                raise LaunchFailed(
                    f"{program!r} not found on PATH", category=category, reference=reference
                )
            argv[0] = resolved
        try:
            proc = self._popen(
                argv,
                stdin=subprocess.DEVNULL,
                stdout=subprocess.DEVNULL,
                stderr=subprocess.DEVNULL,
                start_new_session=True,
            )
        except OSError as e:
            raise LaunchFailed(str(e), category=category, reference=reference) from e
        logger.info("spawned pid=%s argv=%r", getattr(proc, "pid", "?"), argv)
        return getattr(proc, "pid", 0)

    async def execute(self, category: str, reference: str) -> None:
        await asyncio.to_thread(self._spawn, category, reference)
