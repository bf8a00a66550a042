"""Non-blocking failure notices.

Every recoverable failure (locator down, launch failed) is recorded here,
logged, and forwarded to a listener. The TUI turns notices into toasts.

// [LAW:single-enforcer] NoticeLog.report is the sole observability sink for controller failures.
"""

from __future__ import annotations

import itertools
import logging
from collections import deque, namedtuple
from collections.abc import Callable

from runbox.core.errors import LaunchFailed, LocatorUnavailable

logger = logging.getLogger(__name__)


Notice = namedtuple("Notice", ["id", "icon", "summary"])

# // [LAW:dataflow-not-control-flow] Icon chosen by lookup, not branches.
_ICONS: dict[type, str] = {
    LocatorUnavailable: "\u26a0",  # ⚠
    LaunchFailed: "\u274c",  # ❌
}
_DEFAULT_ICON = "\U0001f4a5"  # 💥

MAX_NOTICES = 50


class NoticeLog:
    """Bounded, ordered record of failure notices."""

    def __init__(self, listener: Callable[[Notice], None] | None = None, maxlen: int = MAX_NOTICES):
        self._items: deque[Notice] = deque(maxlen=maxlen)
        self._ids = itertools.count(1)
        self.listener = listener

    @property
    def items(self) -> list[Notice]:
        return list(self._items)

    @property
    def latest(self) -> Notice | None:
        return self._items[-1] if self._items else None

    def __len__(self) -> int:
        return len(self._items)

    def report(self, error: BaseException, context: str = "") -> Notice:
        """Record error as a notice. Never raises."""
        icon = _ICONS.get(type(error), _DEFAULT_ICON)
        summary = f"{type(error).__name__}: {error}"
        if context:
            summary = f"{summary} ({context})"
        notice = Notice(id=f"notice-{next(self._ids)}", icon=icon, summary=summary)
        self._items.append(notice)
        logger.warning("%s", summary)

        if self.listener is not None:
            try:
                self.listener(notice)
            except Exception:
                logger.exception("notice listener failed")
        return notice

    def clear(self) -> None:
        self._items.clear()
