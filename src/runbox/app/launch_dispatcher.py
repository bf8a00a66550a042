"""Launch dispatcher — selected candidate to exactly one launcher call.

Re-entrancy policy: while a launch is pending every further activation is
ignored. The pending slot is claimed synchronously, before the launcher
coroutine is spawned, so two Enter presses in the same loop turn still
produce a single launch.

// [LAW:single-enforcer] _pending is the sole double-activation guard.
"""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Awaitable, Callable

from runbox.app.notices import NoticeLog
from runbox.app.protocols import Launcher
from runbox.core.candidates import Candidate
from runbox.core.errors import LaunchFailed

logger = logging.getLogger(__name__)


Spawn = Callable[[Awaitable[object]], object]

# Strong references for tasks started by loop_spawn; the loop only keeps weak ones.
_BACKGROUND_TASKS: set[asyncio.Task] = set()


def loop_spawn(coro: Awaitable[object]) -> asyncio.Task:
    """Run coro as a task on the running loop, held until it finishes."""
    task = asyncio.ensure_future(coro)
    _BACKGROUND_TASKS.add(task)
    task.add_done_callback(_BACKGROUND_TASKS.discard)
    return task


class LaunchDispatcher:
    def __init__(
        self,
        launcher: Launcher,
        notices: NoticeLog | None = None,
        *,
        spawn: Spawn | None = None,
        on_launched: Callable[[Candidate], None] | None = None,
    ):
        self._launcher = launcher
        self._notices = notices if notices is not None else NoticeLog()
        self._spawn = spawn or loop_spawn
        self._pending: Candidate | None = None
        self.on_launched = on_launched
        self.launch_count = 0

    @property
    def pending(self) -> Candidate | None:
        return self._pending

    def activate(self, candidate: Candidate) -> bool:
        """Start launching candidate. Returns False if ignored because one is pending."""
        if self._pending is not None:
            logger.debug(
                "activation ignored, launch pending: %r (requested %r)",
                self._pending.name,
                candidate.name,
            )
            return False
        self._pending = candidate
        self._spawn(self._launch(candidate))
        return True

    async def _launch(self, candidate: Candidate) -> bool:
        self.launch_count += 1
        logger.info("launch %s %r (%s)", candidate.category, candidate.reference, candidate.name)
        try:
            await self._launcher.execute(candidate.category, candidate.reference)
        except Exception as exc:
            error = exc
            if not isinstance(exc, LaunchFailed):
                error = LaunchFailed(
                    str(exc) or type(exc).__name__,
                    category=candidate.category,
                    reference=candidate.reference,
                )
                error.__cause__ = exc
            self._notices.report(error, context=candidate.name)
            return False
        finally:
            self._pending = None

        if self.on_launched is not None:
            self.on_launched(candidate)
        return True
