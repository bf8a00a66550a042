"""Main TUI application using Textual.

// [LAW:locality-or-seam] Thin shell; all query/selection/launch logic lives in
//   runbox.app.controller. This module wires widgets, timers and workers to it.
// [LAW:single-enforcer] _render_view is the sole path from controller state to widgets.
"""

from __future__ import annotations

import logging
import traceback

from textual import events
from textual.app import App, ComposeResult
from textual.css.query import NoMatches
from textual.message import Message
from textual.widgets import Input

from runbox.app.controller import LauncherController
from runbox.app.input_modes import INTERCEPTED_KEYS
from runbox.app.notices import Notice, NoticeLog
from runbox.app.protocols import Launcher, Locator
from runbox.core.candidates import Candidate
from runbox.io.settings import RunboxConfig
from runbox.tui.results_view import HintBar, ResultsView

logger = logging.getLogger(__name__)

PLACEHOLDER = "Type a command or app name..."


class QueryInput(Input):
    """Query box. Up/Down/Escape/Enter become Navigate messages; the rest is text editing."""

    class Navigate(Message):
        def __init__(self, key: str) -> None:
            self.key = key
            super().__init__()

    def on_key(self, event: events.Key) -> None:
        # Enter arrives through the submit binding below.
        if event.key in INTERCEPTED_KEYS and event.key != "enter":
            event.prevent_default()
            event.stop()
            self.post_message(self.Navigate(event.key))

    async def action_submit(self) -> None:
        self.post_message(self.Navigate("enter"))


class RunboxApp(App):
    """Launcher surface: one query box, one result list."""

    TITLE = "runbox"

    CSS = """
    Screen {
        align: center top;
    }

    QueryInput {
        width: 100%;
        margin: 1 1 0 1;
    }
    """

    def __init__(
        self,
        locator: Locator,
        launcher: Launcher,
        config: RunboxConfig | None = None,
    ):
        super().__init__()
        self._locator = locator
        self._launcher = launcher
        self._config = config or RunboxConfig()
        self._controller: LauncherController | None = None
        self._error_log: list[str] = []
        self.launched: Candidate | None = None

    @property
    def controller(self) -> LauncherController | None:
        return self._controller

    def compose(self) -> ComposeResult:
        yield QueryInput(placeholder=PLACEHOLDER, id="query")
        yield ResultsView(id="results")
        yield HintBar(id="hints")

    def on_mount(self) -> None:
        self._controller = LauncherController(
            self._locator,
            self._launcher,
            delay=self._config.debounce_seconds,
            set_timer=self.set_timer,
            spawn=self._spawn,
            notices=NoticeLog(listener=self._on_notice),
            on_change=self._render_view,
            on_close=self._on_close,
            on_launched=self._on_launched,
        )
        self._controller.load_baseline()
        self._render_view()
        self.query_one(QueryInput).focus()

    def on_unmount(self) -> None:
        if self._controller is not None:
            self._controller.close()

    def _spawn(self, coro):
        return self.run_worker(coro, group="runbox", exclusive=False, exit_on_error=False)

    # ── Events → controller ──

    def on_input_changed(self, event: Input.Changed) -> None:
        if self._controller is not None:
            self._controller.set_query(event.value)

    def on_query_input_navigate(self, message: QueryInput.Navigate) -> None:
        if self._controller is not None:
            self._controller.handle_key(message.key)

    async def on_key(self, event: events.Key) -> None:
        """Keys reaching the app while the query box is not focused."""
        if self._controller is None or isinstance(self.focused, QueryInput):
            return
        if self._controller.handle_key(event.key):
            event.prevent_default()

    # ── Controller → widgets ──

    def _render_view(self) -> None:
        if self._controller is None:
            return
        try:
            results = self.query_one(ResultsView)
            hints = self.query_one(HintBar)
        except NoMatches:
            # Not mounted yet, or already torn down.
            return
        results.update_display(self._controller.view, self._controller.selected_index)
        hints.update_display(self._controller.phase)

    def _on_notice(self, notice: Notice) -> None:
        self.notify(f"{notice.icon} {notice.summary}", severity="warning", timeout=4)

    def _on_close(self) -> None:
        self.exit()

    def _on_launched(self, candidate: Candidate) -> None:
        self.launched = candidate
        if self._config.close_on_launch:
            self.exit(candidate)

    def _handle_exception(self, error: Exception) -> None:
        """Log unhandled exceptions and keep the launcher open."""
        tb = "".join(traceback.format_exception(type(error), error, error.__traceback__))
        self._error_log.append(f"EXCEPTION: {error}")
        self._error_log.append(tb)
        logger.error("Unhandled exception: %s\n%s", error, tb)
        self.notify(f"{type(error).__name__}: {error}", severity="error")
