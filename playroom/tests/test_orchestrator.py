"""
Tests for the Orchestrator.

Tests:
- Unknown activity ids change nothing
- Exclusive mounting
- Mount failures and callback failures return to the menu
- Pause / resume state checks
"""

import pytest

from ..errors import ActivityNotFound
from ..services import CueKind
from ..shell import ActivityRegistry, Orchestrator, ShellState
from ..shell.orchestrator import ACTIVITY_FAILED
from .conftest import BrokenActivity, FaultyTimerActivity, TickerActivity


@pytest.fixture
def ticker(services):
    return TickerActivity(services)


@pytest.fixture
def orchestrator(surface, store, services, ticker):
    registry = ActivityRegistry([
        ticker,
        BrokenActivity(services),
        FaultyTimerActivity(services),
    ])
    return Orchestrator(surface, registry, store, services)


class TestRegistry:
    """Tests for the activity registry."""

    def test_duplicate_id_is_rejected(self, ticker):
        registry = ActivityRegistry([ticker])

        with pytest.raises(ValueError):
            registry.register(TickerActivity())

    def test_lookup(self, ticker):
        registry = ActivityRegistry([ticker])

        assert "ticker" in registry
        assert registry.get("nope") is None
        assert registry.ids() == ["ticker"]
        assert len(registry) == 1
        with pytest.raises(ActivityNotFound):
            registry.require("nope")


class TestStart:
    """Tests for starting activities."""

    def test_unknown_id_raises_and_changes_nothing(self, orchestrator, ticker, store, scheduler):
        """Starting a missing activity reports not-found; the mounted one keeps running."""
        orchestrator.start("ticker")

        with pytest.raises(ActivityNotFound) as exc_info:
            orchestrator.start("missingId")

        assert exc_info.value.activity_id == "missingId"
        assert orchestrator.current is ticker
        assert orchestrator.state == ShellState.PLAYING
        assert ticker.is_mounted
        assert store.get("current_activity") == "ticker"

        scheduler.advance(1500)
        assert len(ticker.ticks) == 1

    def test_start_mounts_and_records(self, orchestrator, ticker, store, services):
        result = orchestrator.start("ticker")

        assert result.success
        assert result.state == ShellState.PLAYING
        assert result.activity_id == "ticker"
        assert result.previous_activity_id is None
        assert ticker.is_mounted
        assert store.get("current_activity") == "ticker"
        assert services.audio.cues == [CueKind.POP]

    def test_only_one_activity_is_mounted(self, orchestrator, ticker, services, surface, scheduler):
        """Switching activities fully unmounts the previous one."""
        other = TickerActivity(services)
        other.activity_id = "other_ticker"
        orchestrator.registry.register(other)

        orchestrator.start("ticker")
        result = orchestrator.start("other_ticker")

        assert result.previous_activity_id == "ticker"
        assert not ticker.is_mounted
        assert not ticker.scope.active
        assert other.is_mounted
        assert scheduler.pending_count() == 1

        scheduler.advance(3000)
        assert ticker.ticks == []
        assert len(other.ticks) == 2

    def test_restart_same_activity_remounts(self, orchestrator, ticker, scheduler):
        orchestrator.start("ticker")
        orchestrator.start("ticker")

        assert ticker.mount_count == 2
        assert orchestrator.outstanding_resources() == 2
        assert scheduler.pending_count() == 1

    def test_show_menu_unmounts(self, orchestrator, ticker, store, surface, scheduler):
        orchestrator.start("ticker")

        result = orchestrator.show_menu()

        assert result.previous_activity_id == "ticker"
        assert orchestrator.state == ShellState.MENU
        assert orchestrator.current is None
        assert not ticker.is_mounted
        assert store.get("current_activity") is None
        assert surface.children == []
        assert scheduler.pending_count() == 0


class TestFailures:
    """Tests for failure recovery."""

    def test_mount_failure_returns_to_menu(self, orchestrator, store, surface, scheduler):
        """A build() exception is contained: menu, failure notice, nothing leaked."""
        result = orchestrator.start("broken")

        assert not result.success
        assert result.error_code == ACTIVITY_FAILED
        assert "missing asset" in result.errors[0]
        assert result.state == ShellState.MENU
        assert orchestrator.current is None
        assert store.get("failure_notice") is True
        assert surface.children == []
        assert scheduler.pending_count() == 0

        broken = orchestrator.registry.get("broken")
        assert not broken.is_mounted
        assert not broken.scope.active

    def test_mount_failure_after_running_activity(self, orchestrator, ticker):
        orchestrator.start("ticker")

        result = orchestrator.start("broken")

        assert not result.success
        assert result.previous_activity_id == "ticker"
        assert not ticker.is_mounted

    def test_successful_start_clears_failure_notice(self, orchestrator, store):
        orchestrator.start("broken")
        assert store.get("failure_notice") is True

        orchestrator.start("ticker")
        assert store.get("failure_notice") is False

    def test_timer_failure_returns_to_menu(self, orchestrator, store, scheduler):
        """An exception escaping a timer unmounts the activity and shows the menu."""
        orchestrator.start("faulty_timer")
        faulty = orchestrator.current

        scheduler.advance(100)

        assert orchestrator.state == ShellState.MENU
        assert orchestrator.current is None
        assert not faulty.is_mounted
        assert store.get("failure_notice") is True
        assert scheduler.pending_count() == 0

    def test_listener_failure_returns_to_menu(self, orchestrator, ticker, store, surface):
        orchestrator.start("ticker")

        def explode(event):
            raise RuntimeError("listener failed")

        ticker.scope.listen(ticker.button, "pointerdown", explode)
        surface.input_source.tap(50, 50)

        assert orchestrator.state == ShellState.MENU
        assert store.get("failure_notice") is True
        assert not ticker.is_mounted


class TestPause:
    """Tests for pause and resume."""

    def test_pause_and_resume(self, orchestrator):
        orchestrator.start("ticker")

        paused = orchestrator.pause()
        assert paused.success
        assert orchestrator.state == ShellState.PAUSED

        resumed = orchestrator.resume()
        assert resumed.success
        assert orchestrator.state == ShellState.PLAYING

    def test_pause_holds_timers(self, orchestrator, ticker, scheduler):
        """A paused activity's periodic timer is withdrawn and restarts on resume."""
        orchestrator.start("ticker")
        scheduler.advance(1000)

        orchestrator.pause()
        assert scheduler.pending_count() == 0
        scheduler.advance(5000)
        assert ticker.ticks == []

        orchestrator.resume()
        scheduler.advance(1500)
        assert ticker.ticks == [7500]

    def test_pause_in_menu_fails(self, orchestrator):
        result = orchestrator.pause()

        assert not result.success
        assert result.state == ShellState.MENU

    def test_resume_while_playing_fails(self, orchestrator):
        orchestrator.start("ticker")

        assert not orchestrator.resume().success
