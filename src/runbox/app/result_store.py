"""Result store — latest accepted ResultSet plus race resolution.

// [LAW:single-enforcer] on_response is the sole writer of the visible ResultSet.
// [LAW:one-source-of-truth] highest_generation decides which response wins; arrival order never does.

Locator responses may arrive in any order. A response whose generation is
older than the newest accepted one lost the race and is dropped without
merging. Failures never move the ResultSet or the generation watermark, so
an older response can still land after a newer request failed.
"""

from __future__ import annotations

import logging
from collections.abc import Iterable

from runbox.app.notices import NoticeLog
from runbox.core.candidates import EMPTY_RESULT_SET, Candidate, ResultSet, to_candidates
from runbox.core.errors import LocatorUnavailable

logger = logging.getLogger(__name__)


class ResultStore:
    """Holds the authoritative ResultSet and the cached baseline listing."""

    def __init__(self, notices: NoticeLog | None = None):
        self._notices = notices if notices is not None else NoticeLog()
        self._result_set: ResultSet = EMPTY_RESULT_SET
        self._highest_generation = 0
        self._baseline: tuple[Candidate, ...] | None = None
        self.stale_dropped = 0

    @property
    def result_set(self) -> ResultSet:
        return self._result_set

    @property
    def highest_generation(self) -> int:
        return self._highest_generation

    @property
    def baseline(self) -> tuple[Candidate, ...] | None:
        return self._baseline

    @property
    def notices(self) -> NoticeLog:
        return self._notices

    def on_response(self, generation: int, candidates: Iterable[object], query: str = "") -> bool:
        """Accept a locator response unless a newer generation already won.

        Returns True when the response became the visible ResultSet.
        """
        if generation < self._highest_generation:
            self.stale_dropped += 1
            logger.debug(
                "stale response dropped: generation=%d highest=%d query=%r",
                generation,
                self._highest_generation,
                query,
            )
            return False

        self._result_set = ResultSet(
            generation=generation,
            candidates=to_candidates(candidates),
            query=query,
        )
        self._highest_generation = generation
        logger.debug(
            "accepted generation=%d query=%r count=%d",
            generation,
            query,
            len(self._result_set),
        )
        return True

    def on_failure(self, generation: int, error: BaseException, query: str | None = None) -> None:
        """Report a failed locator call. ResultSet and watermark stay put."""
        if not isinstance(error, LocatorUnavailable):
            wrapped = LocatorUnavailable(str(error) or type(error).__name__, query=query)
            wrapped.__cause__ = error
            error = wrapped
        self._notices.report(error, context=f"generation {generation}")

    def remember_baseline(self, candidates: Iterable[object]) -> tuple[Candidate, ...]:
        """Cache the unfiltered listing, independent of race resolution."""
        self._baseline = to_candidates(candidates)
        return self._baseline
