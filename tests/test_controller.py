"""Tests for the launcher controller — race resolution, key routing, empty-query policy."""

import itertools

import pytest

from runbox.app.controller import LauncherController
from runbox.app.input_modes import InputPhase
from runbox.core.errors import LaunchFailed, LocatorUnavailable
from tests.conftest import FIREFOX, RecordingLauncher, make_candidates, settle


def _controller(locator, launcher, timers, **kwargs):
    return LauncherController(locator, launcher, set_timer=timers.set_timer, **kwargs)


async def _type(ctrl, timers, text):
    """Edit the query and let the debounce timer fire."""
    ctrl.set_query(text)
    timers.fire_all()
    await settle()


class TestRaceResolution:
    async def test_stale_generation_after_newer_is_discarded(self, locator, launcher, timers):
        ctrl = _controller(locator, launcher, timers)
        ctrl.load_baseline()  # generation 1
        await settle()
        await _type(ctrl, timers, "fi")  # generation 2
        await _type(ctrl, timers, "fire")  # generation 3

        fi_call, fire_call = locator.calls[1], locator.calls[2]
        assert (fi_call.query, fire_call.query) == ("fi", "fire")

        fire_call.resolve([{"name": "Firefox", "reference": "/usr/bin/firefox", "category": "app", "rank": 0.9}])
        await settle()
        fi_call.resolve(make_candidates("Firefox", "Fish", "Fingerd", "Figlet", "Filezilla"))
        await settle()

        assert ctrl.result_set.generation == 3
        assert ctrl.result_set.candidates == (FIREFOX,)
        assert ctrl.view == (FIREFOX,)
        assert ctrl.store.stale_dropped == 1

    async def test_older_response_shows_when_newer_fails(self, locator, launcher, timers):
        ctrl = _controller(locator, launcher, timers)
        await _type(ctrl, timers, "f")  # generation 1
        await _type(ctrl, timers, "fo")  # generation 2

        g1, g2 = locator.calls
        g2.fail(LocatorUnavailable("timeout"))
        await settle()
        g1.resolve(make_candidates("Foot", "Fontforge"))
        await settle()

        assert ctrl.result_set.generation == 1
        assert [c.name for c in ctrl.view] == ["Foot", "Fontforge"]
        assert len(ctrl.notices) == 1

    @pytest.mark.parametrize("order", list(itertools.permutations(range(3))))
    async def test_any_arrival_order_of_three_in_flight_ends_on_newest(self, locator, launcher, timers, order):
        ctrl = _controller(locator, launcher, timers)
        for text in ("a", "ab", "abc"):
            await _type(ctrl, timers, text)
        assert len(ctrl.in_flight) == 3

        for i in order:
            locator.calls[i].resolve(make_candidates(f"abc-{i}"))
            await settle()

        assert ctrl.result_set.generation == 3
        assert [c.name for c in ctrl.result_set] == ["abc-2"]
        assert ctrl.phase == InputPhase.IDLE

    async def test_locator_failure_keeps_previous_view(self, locator, launcher, timers):
        ctrl = _controller(locator, launcher, timers)
        ctrl.load_baseline()
        await settle()
        locator.last().resolve(make_candidates("Firefox", "Files", "Fish"))
        await settle()

        await _type(ctrl, timers, "fi")
        locator.last().fail(OSError("network unreachable"))
        await settle()

        assert [c.name for c in ctrl.view] == ["Firefox", "Files", "Fish"]
        notice = ctrl.notices.latest
        assert notice is not None
        assert "LocatorUnavailable" in notice.summary
        assert "network unreachable" in notice.summary

    async def test_malformed_payload_is_a_locator_failure(self, locator, launcher, timers):
        ctrl = _controller(locator, launcher, timers)
        await _type(ctrl, timers, "x")
        locator.last().resolve([{"category": "app"}])
        await settle()

        assert ctrl.result_set.generation == 0
        assert len(ctrl.notices) == 1


class TestLocalFilter:
    async def test_view_refilters_older_results_while_typing(self, locator, launcher, timers):
        ctrl = _controller(locator, launcher, timers)
        await _type(ctrl, timers, "f")
        locator.last().resolve(make_candidates("Firefox", "Foot", "Fish"))
        await settle()

        # No timer fired yet: the locator has not seen "fi"
        ctrl.set_query("fi")
        assert [c.name for c in ctrl.view] == ["Firefox", "Fish"]
        assert ctrl.result_set.query == "f"
        assert ctrl.phase == InputPhase.TYPING

    async def test_typing_resets_selection(self, locator, launcher, timers):
        ctrl = _controller(locator, launcher, timers)
        ctrl.load_baseline()
        await settle()
        locator.last().resolve(make_candidates("Alacritty", "Atom", "Audacity"))
        await settle()
        ctrl.move_down()
        ctrl.move_down()
        assert ctrl.selected_index == 2

        ctrl.set_query("a")
        assert ctrl.selected_index == 0

    async def test_accepted_response_resets_selection(self, locator, launcher, timers):
        ctrl = _controller(locator, launcher, timers)
        await _type(ctrl, timers, "a")
        locator.last().resolve(make_candidates("Alacritty", "Atom", "Audacity"))
        await settle()
        ctrl.move_down()
        ctrl.move_down()

        await _type(ctrl, timers, "at")
        locator.last().resolve(make_candidates("Atom"))
        await settle()
        assert ctrl.selected_index == 0
        assert ctrl.selected.name == "Atom"


class TestEmptyQuery:
    async def test_empty_query_served_from_baseline_without_round_trip(self, locator, launcher, timers):
        ctrl = _controller(locator, launcher, timers)
        ctrl.load_baseline()
        await settle()
        locator.last().resolve(make_candidates("Alacritty", "Btop", "Code"))
        await settle()

        await _type(ctrl, timers, "co")
        pending = locator.last()
        calls_before = len(locator.calls)

        ctrl.set_query("")
        assert len(locator.calls) == calls_before
        assert timers.active == []
        assert [c.name for c in ctrl.view] == ["Alacritty", "Btop", "Code"]

        # The in-flight "co" search lost the race to the empty query
        pending.resolve(make_candidates("Code"))
        await settle()
        assert [c.name for c in ctrl.view] == ["Alacritty", "Btop", "Code"]

    async def test_empty_query_without_baseline_lists_all(self, locator, launcher, timers):
        ctrl = _controller(locator, launcher, timers)
        await _type(ctrl, timers, "x")
        ctrl.set_query("")
        await settle()

        assert locator.last().kind == "list_all"
        locator.last().resolve(make_candidates("Xterm", "Yes"))
        await settle()
        assert ctrl.store.baseline is not None
        assert [c.name for c in ctrl.view] == ["Xterm", "Yes"]


class TestKeys:
    async def test_arrow_down_then_enter_on_empty_view_launches_nothing(self, locator, launcher, timers):
        ctrl = _controller(locator, launcher, timers)
        assert ctrl.handle_key("ArrowDown") is True
        assert ctrl.handle_key("Enter") is True
        await settle()
        assert launcher.calls == []
        assert ctrl.selected_index == 0

    async def test_navigation_clamps_and_enter_launches_selection(self, locator, launcher, timers):
        ctrl = _controller(locator, launcher, timers)
        ctrl.load_baseline()
        await settle()
        locator.last().resolve(make_candidates("Alacritty", "Btop"))
        await settle()

        for _ in range(5):
            ctrl.handle_key("down")
        assert ctrl.selected_index == 1
        ctrl.handle_key("up")
        ctrl.handle_key("up")
        assert ctrl.selected_index == 0
        ctrl.handle_key("down")

        ctrl.handle_key("enter")
        await settle()
        assert launcher.calls == [("app", "/usr/bin/btop")]

    async def test_navigation_does_not_touch_query_or_timer(self, locator, launcher, timers):
        ctrl = _controller(locator, launcher, timers)
        ctrl.set_query("fi")
        timer = timers.active[0]
        ctrl.handle_key("down")
        ctrl.handle_key("up")
        assert ctrl.query == "fi"
        assert timers.active == [timer]

    async def test_other_keys_fall_through(self, locator, launcher, timers):
        ctrl = _controller(locator, launcher, timers)
        for key in ("a", "backspace", "left", "tab", ""):
            assert ctrl.handle_key(key) is False

    async def test_escape_cancels_pending_dispatch_and_closes(self, locator, launcher, timers):
        closed = []
        ctrl = _controller(locator, launcher, timers, on_close=lambda: closed.append(True))
        ctrl.set_query("fire")
        assert ctrl.emitter.pending

        assert ctrl.handle_key("escape") is True
        assert closed == [True]
        assert not ctrl.emitter.pending
        assert timers.active == []
        await settle()
        assert locator.calls == []
        assert ctrl.phase == InputPhase.IDLE

    async def test_double_enter_issues_one_launch(self, locator, timers):
        launcher = RecordingLauncher(gate=True)
        ctrl = _controller(locator, launcher, timers)
        ctrl.load_baseline()
        await settle()
        locator.last().resolve([FIREFOX])
        await settle()

        assert ctrl.activate() is True
        assert ctrl.activate() is False
        await settle()
        assert launcher.calls == [("app", "/usr/bin/firefox")]

        launcher.release()
        await settle()
        assert ctrl.activate() is True
        await settle()
        assert len(launcher.calls) == 2

    async def test_launch_failure_keeps_query_and_view(self, locator, timers):
        launcher = RecordingLauncher(error=OSError("permission denied"))
        ctrl = _controller(locator, launcher, timers)
        ctrl.load_baseline()
        await settle()
        locator.last().resolve([FIREFOX])
        await settle()
        ctrl.set_query("fire")

        ctrl.handle_key("enter")
        await settle()

        assert ctrl.query == "fire"
        assert ctrl.view == (FIREFOX,)
        assert "LaunchFailed" in ctrl.notices.latest.summary
        assert ctrl.dispatcher.pending is None

    async def test_launch_failed_passes_through_unwrapped(self, locator, timers):
        launcher = RecordingLauncher(error=LaunchFailed("no such file"))
        ctrl = _controller(locator, launcher, timers)
        ctrl.load_baseline()
        await settle()
        locator.last().resolve([FIREFOX])
        await settle()
        ctrl.activate()
        await settle()
        assert ctrl.notices.latest.summary.startswith("LaunchFailed: no such file")


class TestLifecycle:
    async def test_phase_transitions(self, locator, launcher, timers):
        ctrl = _controller(locator, launcher, timers)
        assert ctrl.phase == InputPhase.IDLE
        ctrl.set_query("v")
        assert ctrl.phase == InputPhase.TYPING
        timers.fire_all()
        await settle()
        assert ctrl.phase == InputPhase.IN_FLIGHT
        locator.last().resolve(make_candidates("Vim"))
        await settle()
        assert ctrl.phase == InputPhase.IDLE

    async def test_close_cancels_timer_and_silences_callbacks(self, locator, launcher, timers):
        changes = []
        ctrl = _controller(locator, launcher, timers, on_change=lambda: changes.append(1))
        ctrl.set_query("v")
        count = len(changes)
        ctrl.close()
        assert timers.active == []

        ctrl.set_query("vi")
        assert timers.active == []
        assert ctrl.query == "v"
        assert len(changes) == count

    async def test_same_query_is_not_a_change(self, locator, launcher, timers):
        ctrl = _controller(locator, launcher, timers)
        ctrl.set_query("v")
        first = timers.active[0]
        ctrl.set_query("v")
        assert timers.active == [first]

    async def test_on_launched_receives_candidate(self, locator, launcher, timers):
        launched = []
        ctrl = _controller(locator, launcher, timers, on_launched=launched.append)
        ctrl.load_baseline()
        await settle()
        locator.last().resolve([FIREFOX])
        await settle()
        ctrl.activate()
        await settle()
        assert launched == [FIREFOX]
