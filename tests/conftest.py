"""Pytest configuration and shared fixtures for runbox tests."""

import asyncio

import pytest

from runbox.core.candidates import Candidate


# ---------------------------------------------------------------------------
# Smart wait helpers
# ---------------------------------------------------------------------------

async def settle(rounds: int = 10) -> None:
    """Let spawned tasks run until they block again."""
    for _ in range(rounds):
        await asyncio.sleep(0)


# ---------------------------------------------------------------------------
# Fake timers with the Textual Timer.stop() interface, fired by hand
# ---------------------------------------------------------------------------

class FakeTimer:
    def __init__(self, delay, callback):
        self.delay = delay
        self.callback = callback
        self.stopped = False
        self.fired = False

    def stop(self):
        self.stopped = True

    def fire(self):
        assert not self.stopped, "fired a stopped timer"
        self.fired = True
        self.callback()


class FakeTimers:
    def __init__(self):
        self.created: list[FakeTimer] = []

    def set_timer(self, delay, callback):
        timer = FakeTimer(delay, callback)
        self.created.append(timer)
        return timer

    @property
    def active(self) -> list[FakeTimer]:
        return [t for t in self.created if not t.stopped and not t.fired]

    def fire_all(self) -> None:
        for timer in self.active:
            timer.fire()


# ---------------------------------------------------------------------------
# Locator whose responses the test resolves by hand, in any order
# ---------------------------------------------------------------------------

class PendingCall:
    def __init__(self, kind: str, query: str, future: asyncio.Future):
        self.kind = kind
        self.query = query
        self.future = future

    def resolve(self, items):
        self.future.set_result(items)

    def fail(self, error: BaseException):
        self.future.set_exception(error)


class ControlledLocator:
    def __init__(self):
        self.calls: list[PendingCall] = []

    async def _call(self, kind: str, query: str):
        future = asyncio.get_running_loop().create_future()
        self.calls.append(PendingCall(kind, query, future))
        return await future

    async def search(self, query):
        return await self._call("search", query)

    async def list_all(self):
        return await self._call("list_all", "")

    def last(self, kind: str | None = None) -> PendingCall:
        calls = [c for c in self.calls if kind is None or c.kind == kind]
        return calls[-1]


class ImmediateLocator:
    """Answers at once from a fixed list, filtering by substring."""

    def __init__(self, items):
        self.items = list(items)
        self.queries: list[str] = []

    async def search(self, query):
        self.queries.append(query)
        needle = query.lower()
        return [c for c in self.items if needle in c.name.lower()]

    async def list_all(self):
        self.queries.append("")
        return list(self.items)


class RecordingLauncher:
    def __init__(self, error: BaseException | None = None, gate: bool = False):
        self.calls: list[tuple[str, str]] = []
        self.error = error
        self._gate = asyncio.Event() if gate else None

    def release(self):
        if self._gate is not None:
            self._gate.set()

    async def execute(self, category, reference):
        self.calls.append((category, reference))
        if self._gate is not None:
            await self._gate.wait()
        if self.error is not None:
            raise self.error


# ---------------------------------------------------------------------------
# Data builders
# ---------------------------------------------------------------------------

def make_candidates(*names: str, category: str = "app") -> list[Candidate]:
    return [
        Candidate(name=name, reference=f"/usr/bin/{name.lower()}", category=category, rank=1.0 - i * 0.1)
        for i, name in enumerate(names)
    ]


FIREFOX = Candidate(name="Firefox", reference="/usr/bin/firefox", category="app", rank=0.9)


@pytest.fixture
def timers():
    return FakeTimers()


@pytest.fixture
def locator():
    return ControlledLocator()


@pytest.fixture
def launcher():
    return RecordingLauncher()


@pytest.fixture
def tmp_settings(tmp_path, monkeypatch):
    """Redirect settings file to a temp directory."""
    settings_file = tmp_path / "runbox" / "settings.json"
    monkeypatch.setattr(
        "runbox.io.settings.get_config_path",
        lambda: settings_file,
    )
    return settings_file
