"""
Tests for DragController.

Tests:
- Match / mismatch / miss resolution
- Registration-order precedence of overlapping targets
- Cancellation and pointer binding
- Sessions dropped when the element or the scope goes away
- Target capacity
"""

import pytest

from ..interaction import DragController, DragOutcomeKind
from ..interaction.drag import DRAGGING_CLASS, LIFT_SCALE, LIFT_Z_INDEX
from ..runtime import Element, Point, Rect, ResourceScope


def accepts(kind):
    return lambda item, target: item == kind


@pytest.fixture
def scope(scheduler):
    return ResourceScope(scheduler, name="drag-test")


@pytest.fixture
def outcomes():
    return []


@pytest.fixture
def drag(scope, surface, outcomes):
    return DragController(
        scope,
        surface.input_source,
        on_match=outcomes.append,
        on_mismatch=outcomes.append,
        on_miss=outcomes.append,
    )


@pytest.fixture
def red_item(surface, drag):
    """A 40x40 'red' item whose centre is (420, 620)."""
    element = surface.append(Element("div", Rect(400, 600, 40, 40), classes=["item"]))
    drag.register(element, "red")
    return element


class TestResolution:
    """Tests for how a release is resolved."""

    def test_release_inside_accepting_target_matches(self, surface, drag, red_item, outcomes):
        """Dropping a red item on a red target is a match."""
        target = drag.add_target("red", lambda: Rect(0, 0, 100, 100), accepts("red"))

        surface.input_source.drag((420, 620), (50, 50))

        assert [o.kind for o in outcomes] == [DragOutcomeKind.MATCH]
        outcome = outcomes[0]
        assert outcome.matched
        assert outcome.target is target
        assert outcome.point == Point(50, 50)
        assert red_item.bounds().center == Point(50, 50)
        assert target.fill_count == 1
        assert not drag.is_draggable(red_item)

    def test_release_outside_targets_misses_and_restores(self, surface, drag, red_item, outcomes):
        """A miss puts the item back where it was picked up."""
        drag.add_target("red", lambda: Rect(0, 0, 100, 100), accepts("red"))

        surface.input_source.drag((420, 620), (500, 500))

        assert [o.kind for o in outcomes] == [DragOutcomeKind.MISS]
        assert outcomes[0].target is None
        assert outcomes[0].position == Point(400, 600)
        assert red_item.bounds() == Rect(400, 600, 40, 40)
        assert drag.is_draggable(red_item)

    def test_first_registered_target_wins(self, surface, drag, red_item, outcomes):
        """With overlapping targets the first registered one decides, even if it rejects."""
        first = drag.add_target("blue", lambda: Rect(0, 0, 100, 100), accepts("blue"))
        drag.add_target("red", lambda: Rect.from_edges(50, 50, 150, 150), accepts("red"))

        surface.input_source.drag((420, 620), (75, 75))

        assert [o.kind for o in outcomes] == [DragOutcomeKind.MISMATCH]
        assert outcomes[0].target is first
        assert first.fill_count == 0
        assert red_item.bounds() == Rect(400, 600, 40, 40)

    def test_edges_are_inclusive(self, surface, drag, red_item, outcomes):
        drag.add_target("red", lambda: Rect(0, 0, 100, 100), accepts("red"))

        surface.input_source.drag((420, 620), (100, 100))

        assert outcomes[0].kind == DragOutcomeKind.MATCH

    def test_grab_offset_is_kept(self, surface, drag, red_item, outcomes):
        """The centre that is tested follows the grab offset, not the raw pointer."""
        drag.add_target("red", lambda: Rect(0, 0, 100, 100), accepts("red"))

        # Grabbed at the top-left corner: releasing at (90, 90) puts the centre at (110, 110).
        surface.input_source.drag((400, 600), (90, 90))

        assert outcomes[0].kind == DragOutcomeKind.MISS
        assert outcomes[0].point == Point(110, 110)

    def test_full_target_is_skipped(self, surface, drag, outcomes):
        """Once a target reaches its capacity the next item falls through to later targets."""
        first = drag.add_target("red", lambda: Rect(0, 0, 100, 100), accepts("red"))
        second = drag.add_target("red-2", lambda: Rect(0, 0, 200, 200), accepts("red"))
        a = surface.append(Element("div", Rect(400, 600, 40, 40)))
        b = surface.append(Element("div", Rect(500, 600, 40, 40)))
        drag.register(a, "red")
        drag.register(b, "red")

        surface.input_source.drag((420, 620), (50, 50))
        surface.input_source.drag((520, 620), (50, 50))

        assert [o.kind for o in outcomes] == [DragOutcomeKind.MATCH, DragOutcomeKind.MATCH]
        assert outcomes[0].target is first
        assert outcomes[1].target is second
        assert first.is_full

    def test_unlimited_capacity(self, surface, drag, outcomes):
        bucket = drag.add_target("red", lambda: Rect(0, 0, 200, 200), accepts("red"), capacity=None)
        for x in (300, 400, 500):
            element = surface.append(Element("div", Rect(x, 600, 40, 40)))
            drag.register(element, "red")
            surface.input_source.drag((x + 20, 620), (100, 100))

        assert [o.kind for o in outcomes] == [DragOutcomeKind.MATCH] * 3
        assert bucket.fill_count == 3
        assert not bucket.is_full

    def test_bounds_are_read_at_release(self, surface, drag, red_item, outcomes):
        """A moving target is tested where it is when the item is released."""
        box = {"rect": Rect(0, 0, 100, 100)}
        drag.add_target("red", lambda: box["rect"], accepts("red"))

        surface.input_source.pointer_down(1, 420, 620)
        box["rect"] = Rect(600, 0, 100, 100)
        surface.input_source.pointer_move(1, 50, 50)
        surface.input_source.pointer_up(1, 50, 50)

        assert outcomes[0].kind == DragOutcomeKind.MISS


class TestSession:
    """Tests for the drag session lifecycle."""

    def test_pick_up_lifts_and_release_restores(self, surface, drag, red_item):
        """The item is lifted while dragged and its presentation restored afterwards."""
        picked = []
        drag.on_pick_up = picked.append

        surface.input_source.pointer_down(1, 420, 620)

        assert drag.is_dragging
        assert len(picked) == 1
        assert red_item.scale == LIFT_SCALE
        assert red_item.z_index == LIFT_Z_INDEX
        assert red_item.has_class(DRAGGING_CLASS)
        assert surface.input_source.has_pointer_capture(1, red_item)

        surface.input_source.pointer_up(1, 420, 620)

        assert not drag.is_dragging
        assert red_item.scale == 1.0
        assert red_item.z_index == 0
        assert not red_item.has_class(DRAGGING_CLASS)
        assert not surface.input_source.has_pointer_capture(1)

    def test_move_follows_pointer(self, surface, drag, red_item):
        surface.input_source.pointer_down(1, 420, 620)
        surface.input_source.pointer_move(1, 220, 320)

        assert red_item.bounds() == Rect(200, 300, 40, 40)

    def test_second_pointer_is_ignored(self, surface, drag, red_item, outcomes):
        """Only one session at a time; other pointers neither start nor end it."""
        other = surface.append(Element("div", Rect(700, 600, 40, 40)))
        drag.register(other, "blue")
        drag.add_target("red", lambda: Rect(0, 0, 100, 100), accepts("red"))

        surface.input_source.pointer_down(1, 420, 620)
        surface.input_source.pointer_down(2, 720, 620)
        surface.input_source.pointer_move(2, 50, 50)
        surface.input_source.pointer_up(2, 50, 50)

        assert drag.is_dragging
        assert drag.session.element is red_item
        assert outcomes == []
        assert other.bounds() == Rect(700, 600, 40, 40)

        surface.input_source.pointer_move(1, 50, 50)
        surface.input_source.pointer_up(1, 50, 50)
        assert [o.kind for o in outcomes] == [DragOutcomeKind.MATCH]

    def test_pointer_cancel_resolves_as_miss(self, surface, drag, red_item, outcomes):
        """A cancelled gesture reports a miss and restores the item, even over a target."""
        drag.add_target("red", lambda: Rect(0, 0, 100, 100), accepts("red"))

        surface.input_source.pointer_down(1, 420, 620)
        surface.input_source.pointer_move(1, 50, 50)
        surface.input_source.pointer_cancel(1)

        assert len(outcomes) == 1
        assert outcomes[0].kind == DragOutcomeKind.MISS
        assert outcomes[0].cancelled
        assert red_item.bounds() == Rect(400, 600, 40, 40)

    def test_cancel_method(self, surface, drag, red_item, outcomes):
        assert drag.cancel() is None

        surface.input_source.pointer_down(1, 420, 620)
        outcome = drag.cancel()

        assert outcome.kind == DragOutcomeKind.MISS
        assert outcome.cancelled
        assert not drag.is_dragging

    def test_detached_element_drops_session_silently(self, surface, drag, red_item, outcomes):
        """An element removed mid-drag ends the session without any outcome."""
        surface.input_source.pointer_down(1, 420, 620)
        red_item.remove()
        surface.input_source.pointer_move(1, 50, 50)
        surface.input_source.pointer_up(1, 50, 50)

        assert outcomes == []
        assert not drag.is_dragging

    def test_released_scope_drops_session_silently(self, scope, surface, drag, red_item, outcomes):
        """Unmounting mid-drag detaches the controller; no outcome is reported."""
        surface.input_source.pointer_down(1, 420, 620)
        scope.release_all()
        surface.input_source.pointer_up(1, 50, 50)

        assert outcomes == []
        assert surface.input_source.listener_count() == 0
        assert red_item.listener_count() == 0

    def test_matched_item_cannot_be_dragged_again(self, surface, drag, red_item, outcomes):
        drag.add_target("red", lambda: Rect(0, 0, 100, 100), accepts("red"))
        surface.input_source.drag((420, 620), (50, 50))

        surface.input_source.pointer_down(1, 50, 50)

        assert not drag.is_dragging
        assert len(outcomes) == 1

    def test_reset_forgets_items_and_targets(self, surface, drag, red_item):
        drag.add_target("red", lambda: Rect(0, 0, 100, 100), accepts("red"))
        surface.input_source.pointer_down(1, 420, 620)

        drag.reset()

        assert not drag.is_dragging
        assert drag.targets == []
        assert not drag.is_draggable(red_item)
        assert red_item.listener_count() == 0

    def test_unregistered_element_is_not_draggable(self, surface, drag, red_item):
        drag.unregister(red_item)

        surface.input_source.pointer_down(1, 420, 620)

        assert not drag.is_dragging

    def test_no_pick_up_while_scope_is_suspended(self, scope, surface, drag, red_item, outcomes):
        scope.suspend()

        surface.input_source.drag((420, 620), (50, 50))

        assert not drag.is_dragging
        assert outcomes == []
        assert red_item.bounds() == Rect(400, 600, 40, 40)
