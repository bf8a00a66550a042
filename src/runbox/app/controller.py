"""Launcher controller — query text in, ranked view and launch actions out.

// [LAW:one-way-deps] Depends on core + the app-level parts below. No UI imports.
// [LAW:single-enforcer] _refresh_cursor is the only place the cursor learns a new view length.
// [LAW:dataflow-not-control-flow] view is recomputed on read from (ResultSet, query); never stored.

State machine: IDLE → TYPING → IN_FLIGHT → IDLE, with the selection cursor
as an orthogonal sub-state. Text edits restart the debounce timer; the four
intercepted keys drive the cursor, the launch dispatcher and close.

Empty query policy: no debounce and no round trip. The cached baseline
listing is published under a freshly reserved generation, which also
supersedes every request still in flight. Until a baseline exists, list_all()
is dispatched immediately.
"""

from __future__ import annotations

import logging
from collections.abc import Awaitable, Callable

from runbox.app.input_modes import InputPhase, action_for_key
from runbox.app.launch_dispatcher import LaunchDispatcher, loop_spawn
from runbox.app.notices import NoticeLog
from runbox.app.protocols import Launcher, Locator
from runbox.app.query_emitter import DEFAULT_DEBOUNCE_SECONDS, QueryEmitter
from runbox.app.result_store import ResultStore
from runbox.core.candidates import Candidate, ResultSet, compute_view, to_candidates
from runbox.core.selection import SelectionCursor

logger = logging.getLogger(__name__)


class LauncherController:
    """Owns Query, ResultSet and selection. Nothing else mutates them."""

    def __init__(
        self,
        locator: Locator,
        launcher: Launcher,
        *,
        delay: float = DEFAULT_DEBOUNCE_SECONDS,
        set_timer: Callable[[float, Callable[[], object]], object] | None = None,
        spawn: Callable[[Awaitable[object]], object] | None = None,
        notices: NoticeLog | None = None,
        on_change: Callable[[], None] | None = None,
        on_close: Callable[[], None] | None = None,
        on_launched: Callable[[Candidate], None] | None = None,
    ):
        self._locator = locator
        self.notices = notices if notices is not None else NoticeLog()
        self._spawn = spawn or loop_spawn
        self._store = ResultStore(self.notices)
        self._cursor = SelectionCursor()
        self._emitter = QueryEmitter(self._on_dispatch, delay=delay, set_timer=set_timer)
        self._dispatcher = LaunchDispatcher(
            launcher,
            self.notices,
            spawn=self._spawn,
            on_launched=on_launched,
        )
        self._query = ""
        self._phase = InputPhase.IDLE
        self._in_flight: set[int] = set()
        self._closed = False
        self.on_change = on_change
        self.on_close = on_close

    # ── Read accessors ──

    @property
    def query(self) -> str:
        return self._query

    @property
    def phase(self) -> InputPhase:
        return self._phase

    @property
    def result_set(self) -> ResultSet:
        return self._store.result_set

    @property
    def store(self) -> ResultStore:
        return self._store

    @property
    def emitter(self) -> QueryEmitter:
        return self._emitter

    @property
    def dispatcher(self) -> LaunchDispatcher:
        return self._dispatcher

    @property
    def view(self) -> tuple[Candidate, ...]:
        return compute_view(self._store.result_set, self._query)

    @property
    def selected_index(self) -> int:
        return self._cursor.index

    @property
    def selected(self) -> Candidate | None:
        view = self.view
        if not view:
            return None
        return view[min(self._cursor.index, len(view) - 1)]

    @property
    def in_flight(self) -> frozenset[int]:
        return frozenset(self._in_flight)

    # ── Text input ──

    def set_query(self, text: str) -> None:
        """Text box changed. Filters locally now, searches after the quiet interval."""
        text = text or ""
        if self._closed or text == self._query:
            return
        self._query = text
        self._refresh_cursor()
        if text.strip():
            self._emitter.schedule(text)
        else:
            self._serve_empty()
        self._update_phase()
        self._changed()

    def _serve_empty(self) -> None:
        self._emitter.cancel()
        baseline = self._store.baseline
        if baseline is None:
            self._emitter.dispatch("")
            return
        generation = self._emitter.next_generation()
        self._store.on_response(generation, baseline, query="")
        self._refresh_cursor()

    def load_baseline(self) -> int:
        """Fetch the unfiltered listing under a fresh generation."""
        return self._emitter.dispatch("")

    # ── Keys ──

    def handle_key(self, key: str) -> bool:
        """Route an intercepted key. Returns False to let the text field have it."""
        action = action_for_key(key)
        if action is None:
            return False
        getattr(self, action)()
        return True

    def move_down(self) -> None:
        if self._cursor.move_down():
            self._changed()

    def move_up(self) -> None:
        if self._cursor.move_up():
            self._changed()

    def activate(self) -> bool:
        """Launch the selected candidate, if there is one."""
        candidate = self.selected
        if candidate is None:
            logger.debug("activate with empty view ignored")
            return False
        return self._dispatcher.activate(candidate)

    def escape(self) -> None:
        self._emitter.cancel()
        self._update_phase()
        self._changed()
        if self.on_close is not None:
            self.on_close()

    def close(self) -> None:
        """Teardown: no dispatch may happen after this."""
        self._emitter.cancel()
        self._closed = True

    # ── Locator round trip ──

    def _on_dispatch(self, generation: int, query: str) -> None:
        self._in_flight.add(generation)
        self._phase = InputPhase.IN_FLIGHT
        self._spawn(self._run_locator(generation, query))

    async def _run_locator(self, generation: int, query: str) -> None:
        listing = not query.strip()
        try:
            if listing:
                items = await self._locator.list_all()
            else:
                items = await self._locator.search(query)
            candidates = to_candidates(items)
        except Exception as exc:
            self._store.on_failure(generation, exc, query=query)
        else:
            if listing:
                self._store.remember_baseline(candidates)
            if self._store.on_response(generation, candidates, query=query):
                self._refresh_cursor()
        finally:
            self._in_flight.discard(generation)
            self._update_phase()
            self._changed()

    # ── Internals ──

    def _refresh_cursor(self) -> None:
        self._cursor.reset(len(self.view))

    def _update_phase(self) -> None:
        if self._emitter.pending:
            self._phase = InputPhase.TYPING
        elif self._in_flight:
            self._phase = InputPhase.IN_FLIGHT
        else:
            self._phase = InputPhase.IDLE

    def _changed(self) -> None:
        if self.on_change is not None and not self._closed:
            self.on_change()
