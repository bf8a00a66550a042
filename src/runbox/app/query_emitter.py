"""Debounced query emitter.

Turns a stream of query edits into a rate-limited stream of dispatches. Each
edit restarts a single pending timer; when the quiet interval elapses the
query is dispatched with a fresh generation number.

// [LAW:single-enforcer] _generation is bumped only here, one bump per dispatch or reservation.
// [LAW:locality-or-seam] Timers come from an injected set_timer(delay, callback) -> handle.stop().

Inside Textual, pass App.set_timer. Elsewhere the asyncio adapter below is used.
"""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Callable

logger = logging.getLogger(__name__)

DEFAULT_DEBOUNCE_SECONDS = 0.3


class _LoopTimer:
    """asyncio TimerHandle behind the Textual Timer.stop() interface."""

    __slots__ = ("_handle",)

    def __init__(self, handle: asyncio.TimerHandle):
        self._handle = handle

    def stop(self) -> None:
        self._handle.cancel()


def loop_set_timer(delay: float, callback: Callable[[], object]) -> _LoopTimer:
    """Schedule callback on the running asyncio loop."""
    loop = asyncio.get_running_loop()
    return _LoopTimer(loop.call_later(delay, callback))


class QueryEmitter:
    """Owns the debounce timer and the generation counter."""

    def __init__(
        self,
        on_dispatch: Callable[[int, str], None],
        *,
        delay: float = DEFAULT_DEBOUNCE_SECONDS,
        set_timer: Callable[[float, Callable[[], object]], object] | None = None,
    ):
        self._on_dispatch = on_dispatch
        self.delay = delay
        self._set_timer = set_timer or loop_set_timer
        self._timer: object | None = None
        self._generation = 0

    @property
    def generation(self) -> int:
        return self._generation

    @property
    def pending(self) -> bool:
        return self._timer is not None

    def schedule(self, query: str) -> None:
        """Restart the quiet interval for query. Cancel and reschedule happen in one call."""
        self.cancel()
        self._timer = self._set_timer(self.delay, lambda: self._fire(query))

    def cancel(self) -> None:
        if self._timer is not None:
            self._timer.stop()
            self._timer = None

    def next_generation(self) -> int:
        """Reserve a generation without dispatching. Supersedes anything in flight."""
        self._generation += 1
        return self._generation

    def dispatch(self, query: str) -> int:
        """Dispatch now, bypassing the timer."""
        self.cancel()
        generation = self.next_generation()
        logger.debug("dispatch generation=%d query=%r", generation, query)
        self._on_dispatch(generation, query)
        return generation

    def _fire(self, query: str) -> None:
        self._timer = None
        self.dispatch(query)
