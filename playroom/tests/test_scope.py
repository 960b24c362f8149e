"""
Tests for ResourceScope.

Tests:
- Tracking of periodic, one-shot, frame and listener resources
- Total, idempotent release
- Inert acquisition after release
- Self-re-registering frame loops
- Suspending and resuming timers
"""

import pytest

from ..runtime import Element, EventKind, Rect, ResourceKind, ResourceScope


class TestAcquisition:
    """Tests for acquiring resources through a scope."""

    def test_periodic_runs_until_released(self, scheduler):
        """A periodic callback keeps firing until its scope is released."""
        scope = ResourceScope(scheduler, name="test")
        calls = []
        scope.schedule_periodic(lambda: calls.append(scheduler.now()), 500)

        scheduler.advance(1200)
        assert calls == [500, 1000]

        scope.release_all()
        scheduler.advance(5000)
        assert calls == [500, 1000]

    def test_one_shot_is_forgotten_after_firing(self, scheduler):
        """A fired one-shot is no longer outstanding and its handle is released."""
        scope = ResourceScope(scheduler)
        handle = scope.schedule_once(lambda: None, 100)
        assert scope.outstanding()[ResourceKind.TIMEOUT] == 1

        scheduler.advance(100)

        assert len(scope) == 0
        assert handle.released

    def test_frame_loop_can_be_stopped_between_frames(self, scheduler):
        """A frame callback that re-registers itself stops when the scope is released."""
        scope = ResourceScope(scheduler)
        frames = []

        def animate(timestamp):
            frames.append(timestamp)
            scope.schedule_frame(animate)

        scope.schedule_frame(animate)
        scheduler.advance(16 * 3)
        assert len(frames) == 3
        assert scope.outstanding()[ResourceKind.FRAME] == 1

        scope.release_all()
        scheduler.advance(16 * 10)
        assert len(frames) == 3
        assert scheduler.pending_count() == 0

    def test_listener_is_attached_and_detached(self, scheduler, surface):
        """listen() attaches to the target; release_all() detaches it."""
        scope = ResourceScope(scheduler)
        button = surface.append(Element("button", Rect(0, 0, 50, 50)))
        taps = []
        record = taps.append
        scope.listen(button, EventKind.POINTER_DOWN, record)

        surface.input_source.tap(10, 10)
        assert len(taps) == 1
        assert button.has_listener(EventKind.POINTER_DOWN, record)

        scope.release_all()
        surface.input_source.tap(10, 10)
        assert len(taps) == 1
        assert button.listener_count() == 0

    def test_once_listener_releases_itself(self, scheduler, surface):
        scope = ResourceScope(scheduler)
        button = surface.append(Element("button", Rect(0, 0, 50, 50)))
        taps = []
        handle = scope.listen(button, EventKind.POINTER_DOWN, taps.append, once=True)

        surface.input_source.tap(10, 10)
        surface.input_source.tap(10, 10)

        assert len(taps) == 1
        assert handle.released
        assert scope.outstanding()[ResourceKind.LISTENER] == 0

    def test_cancel_single_handle(self, scheduler):
        """Cancelling one handle leaves the others running."""
        scope = ResourceScope(scheduler)
        calls = []
        first = scope.schedule_periodic(lambda: calls.append("first"), 100)
        scope.schedule_periodic(lambda: calls.append("second"), 100)

        first.cancel()
        first.cancel()
        scheduler.advance(100)

        assert calls == ["second"]
        assert len(scope) == 1

    def test_handle_from_another_scope_is_ignored(self, scheduler):
        mine = ResourceScope(scheduler, name="mine")
        theirs = ResourceScope(scheduler, name="theirs")
        handle = theirs.schedule_once(lambda: None, 100)

        mine.cancel(handle)

        assert handle.active
        assert len(theirs) == 1


class TestRelease:
    """Tests for release_all and the inactive state."""

    def test_release_all_clears_everything(self, scheduler, surface):
        """After release_all nothing is outstanding in the scope or the scheduler."""
        scope = ResourceScope(scheduler)
        button = surface.append(Element("button", Rect(0, 0, 50, 50)))
        scope.schedule_periodic(lambda: None, 100)
        scope.schedule_once(lambda: None, 100)
        scope.schedule_frame(lambda ts: None)
        scope.listen(button, EventKind.POINTER_DOWN, lambda e: None)
        assert len(scope) == 4

        scope.release_all()

        assert not scope.active
        assert len(scope) == 0
        assert scheduler.pending_count() == 0
        assert button.listener_count() == 0

    def test_release_all_is_idempotent(self, scheduler):
        scope = ResourceScope(scheduler)
        scope.schedule_periodic(lambda: None, 100)

        scope.release_all()
        scope.release_all()

        assert not scope.active
        assert len(scope) == 0

    def test_acquisition_after_release_is_inert(self, scheduler, surface):
        """An inactive scope hands back released handles and schedules nothing."""
        scope = ResourceScope(scheduler)
        scope.release_all()
        button = surface.append(Element("button", Rect(0, 0, 50, 50)))
        calls = []

        handles = [
            scope.schedule_periodic(lambda: calls.append("p"), 10),
            scope.schedule_once(lambda: calls.append("o"), 10),
            scope.schedule_frame(lambda ts: calls.append("f")),
            scope.listen(button, EventKind.POINTER_DOWN, lambda e: calls.append("l")),
        ]
        scheduler.advance(100)
        surface.input_source.tap(10, 10)

        assert all(h.released for h in handles)
        assert calls == []
        assert scheduler.pending_count() == 0
        assert button.listener_count() == 0
        handles[0].cancel()

    def test_context_manager_releases(self, scheduler):
        with ResourceScope(scheduler) as scope:
            scope.schedule_periodic(lambda: None, 100)
            assert scheduler.pending_count() == 1

        assert not scope.active
        assert scheduler.pending_count() == 0

    def test_release_from_inside_a_callback(self, scheduler):
        """A callback may release its own scope; later entries at that instant are skipped."""
        scope = ResourceScope(scheduler)
        calls = []
        scope.schedule_once(scope.release_all, 100)
        scope.schedule_once(lambda: calls.append("late"), 100)

        scheduler.advance(200)

        assert calls == []
        assert not scope.active

    @pytest.mark.parametrize("kind", list(ResourceKind))
    def test_outstanding_reports_every_kind(self, scheduler, kind):
        scope = ResourceScope(scheduler)
        assert scope.outstanding()[kind] == 0


class TestSuspension:
    """Tests for suspend and resume."""

    def test_suspend_holds_every_timer(self, scheduler):
        """Timeouts keep their remaining delay; periodic timers restart their interval."""
        scope = ResourceScope(scheduler)
        calls = []
        scope.schedule_periodic(lambda: calls.append("periodic"), 500)
        scope.schedule_once(lambda: calls.append("once"), 700)
        scope.schedule_frame(lambda ts: calls.append("frame"))
        scheduler.advance(10)

        scope.suspend()
        assert scope.suspended
        assert scheduler.pending_count() == 0
        assert len(scope) == 3

        scheduler.advance(2000)
        assert calls == []

        scope.resume()
        assert scheduler.pending_count() == 3
        scheduler.advance(6)
        assert calls == ["frame"]

        scheduler.advance_to(2700)
        assert calls == ["frame", "periodic", "once"]

    def test_acquisition_while_suspended_waits_for_resume(self, scheduler):
        scope = ResourceScope(scheduler)
        calls = []
        scope.suspend()

        scope.schedule_once(lambda: calls.append(scheduler.now()), 100)
        assert scheduler.pending_count() == 0
        scheduler.advance(500)

        scope.resume()
        scheduler.advance(100)

        assert calls == [600]
        assert len(scope) == 0

    def test_cancel_while_suspended(self, scheduler):
        scope = ResourceScope(scheduler)
        handle = scope.schedule_periodic(lambda: None, 100)
        scope.suspend()

        handle.cancel()
        scope.resume()

        assert handle.released
        assert scheduler.pending_count() == 0

    def test_release_all_while_suspended(self, scheduler, surface):
        scope = ResourceScope(scheduler)
        button = surface.append(Element("button", Rect(0, 0, 50, 50)))
        scope.schedule_periodic(lambda: None, 100)
        scope.listen(button, EventKind.POINTER_DOWN, lambda e: None)
        scope.suspend()

        scope.release_all()
        scope.resume()

        assert len(scope) == 0
        assert scheduler.pending_count() == 0
        assert button.listener_count() == 0

    def test_listeners_stay_attached(self, scheduler, surface):
        scope = ResourceScope(scheduler)
        button = surface.append(Element("button", Rect(0, 0, 50, 50)))
        taps = []
        scope.listen(button, EventKind.POINTER_DOWN, taps.append)

        scope.suspend()
        surface.input_source.tap(10, 10)

        assert len(taps) == 1
