"""Default Locator implementations.

PathLocator          executables on $PATH
StaticCommandLocator configured seed commands
HttpLocator          remote locator service speaking JSON over HTTP
CompositeLocator     sections concatenated in a fixed order

Blocking work (directory scans, HTTP) runs in asyncio.to_thread so the event
loop never stalls.

// [LAW:locality-or-seam] All indexing/matching lives here; the controller sees only the Locator protocol.
"""

from __future__ import annotations

import asyncio
import json
import logging
import os
import ssl
import urllib.error
import urllib.parse
import urllib.request
from collections.abc import Iterable, Mapping, Sequence

from runbox.app.protocols import Locator
from runbox.core.candidates import CATEGORY_APP, Candidate, compute_view, to_candidates
from runbox.core.errors import LocatorUnavailable

logger = logging.getLogger(__name__)

DEFAULT_MAX_RESULTS = 50

# Seed list shown before any search results.
DEFAULT_COMMANDS: tuple[dict[str, str], ...] = (
    {"title": "Firefox", "subtitle": "Web browser", "exec": "firefox"},
    {"title": "VS Code", "subtitle": "Code editor", "exec": "code"},
)

RANK_PREFIX = 1.0
RANK_SUBSTRING = 0.5


def _score(name: str, needle: str) -> float:
    lowered = name.lower()
    if lowered.startswith(needle):
        return RANK_PREFIX
    if needle in lowered:
        return RANK_SUBSTRING
    return 0.0


class PathLocator:
    """Executables found on $PATH, ranked prefix-first then by name."""

    def __init__(self, path: str | None = None, max_results: int = DEFAULT_MAX_RESULTS):
        self._path = path
        self.max_results = max_results
        self._index: dict[str, str] | None = None

    def refresh(self) -> None:
        self._index = None

    def _scan(self) -> dict[str, str]:
        if self._index is not None:
            return self._index
        raw = self._path if self._path is not None else os.environ.get("PATH", "")
        index: dict[str, str] = {}
        for directory in raw.split(os.pathsep):
            if not directory:
                continue
            try:
                with os.scandir(directory) as it:
                    entries = list(it)
            except OSError:
                continue
            for entry in entries:
                # First hit on $PATH wins, same as the shell.
                if entry.name in index:
                    continue
                try:
                    if entry.is_file() and os.access(entry.path, os.X_OK):
                        index[entry.name] = entry.path
                except OSError:
                    continue
        logger.debug("indexed %d executables", len(index))
        self._index = index
        return index

    def _search_sync(self, query: str) -> list[Candidate]:
        needle = query.strip().lower()
        index = self._scan()
        hits = []
        for name, path in index.items():
            rank = _score(name, needle) if needle else 0.0
            if needle and rank <= 0.0:
                continue
            hits.append(Candidate(name=name, reference=path, category=CATEGORY_APP, rank=rank, subtitle=path))
        hits.sort(key=lambda c: (-c.rank, c.name.lower()))
        return hits[: self.max_results]

    async def search(self, query: str) -> Sequence[Candidate]:
        try:
            return await asyncio.to_thread(self._search_sync, query)
        except OSError as e:
            raise LocatorUnavailable(str(e), query=query) from e

    async def list_all(self) -> Sequence[Candidate]:
        return await self.search("")


class StaticCommandLocator:
    """Fixed command list, filtered locally. Keeps its configured order."""

    def __init__(self, commands: Iterable[Mapping[str, object]] = DEFAULT_COMMANDS):
        self._commands = to_candidates(commands)

    @property
    def commands(self) -> tuple[Candidate, ...]:
        return self._commands

    async def search(self, query: str) -> Sequence[Candidate]:
        return compute_view(self._commands, query)

    async def list_all(self) -> Sequence[Candidate]:
        return self._commands


class HttpLocator:
    """Remote locator: GET {base}/search?q=... and GET {base}/list, JSON arrays back."""

    def __init__(self, base_url: str, timeout: float = 5.0):
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout

    def _get(self, path: str, params: dict[str, str] | None = None, query: str | None = None) -> list:
        url = f"{self.base_url}/{path}"
        if params:
            url = f"{url}?{urllib.parse.urlencode(params)}"
        req = urllib.request.Request(url, headers={"Accept": "application/json"}, method="GET")
        try:
            ctx = ssl.create_default_context()
            with urllib.request.urlopen(req, context=ctx, timeout=self.timeout) as resp:
                payload = json.loads(resp.read().decode("utf-8"))
        except urllib.error.HTTPError as e:
            raise LocatorUnavailable(f"HTTP {e.code} from {url}", query=query) from e
        except (urllib.error.URLError, OSError, ValueError) as e:
            raise LocatorUnavailable(f"{url} ({e})", query=query) from e

        # Accept a bare array or {"results": [...]}
        if isinstance(payload, dict):
            payload = payload.get("results", [])
        if not isinstance(payload, list):
            raise LocatorUnavailable(f"unexpected payload from {url}", query=query)
        return payload

    async def search(self, query: str) -> Sequence[Candidate]:
        items = await asyncio.to_thread(self._get, "search", {"q": query}, query)
        try:
            return to_candidates(items)
        except (ValueError, AttributeError) as e:
            raise LocatorUnavailable(f"malformed candidate: {e}", query=query) from e

    async def list_all(self) -> Sequence[Candidate]:
        items = await asyncio.to_thread(self._get, "list")
        try:
            return to_candidates(items)
        except (ValueError, AttributeError) as e:
            raise LocatorUnavailable(f"malformed candidate: {e}") from e


class CompositeLocator:
    """Concatenate sections in order. Each section keeps its own ranking.

    Sections are queried concurrently; any failure fails the whole call so the
    controller keeps the previous view instead of showing a partial one.
    """

    def __init__(self, sections: Sequence[Locator]):
        self.sections = tuple(sections)

    async def _gather(self, calls) -> Sequence[Candidate]:
        results = await asyncio.gather(*calls)
        merged: list[Candidate] = []
        for items in results:
            merged.extend(to_candidates(items))
        return merged

    async def search(self, query: str) -> Sequence[Candidate]:
        return await self._gather([s.search(query) for s in self.sections])

    async def list_all(self) -> Sequence[Candidate]:
        return await self._gather([s.list_all() for s in self.sections])
