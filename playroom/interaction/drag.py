"""
Drag Controller - The one pointer drag-and-drop engine every drag activity
shares.

STATE MACHINE:
    Idle --pointerdown on a registered element--> Dragging
    Dragging --pointermove (bound pointer)--> Dragging
    Dragging --pointerup / pointercancel (bound pointer)--> Idle (resolved)

RESOLUTION:
On release the element's centre is tested against the drop targets in
registration order. Full targets are skipped. The FIRST target whose
bounds contain the centre (edges inclusive) decides:
- accept(item, target) is true  -> MATCH: element centred on the target,
  no longer draggable, target fill count incremented
- accept(item, target) is false -> MISMATCH: element back at its pick-up
  position
- no containing target          -> MISS: element back at its pick-up
  position

A cancelled drag always resolves as MISS. Exactly one outcome is reported
per session, unless the element left the surface or the scope was
released, in which case the session is dropped without a report.

All listeners go through the owning ResourceScope, so unmounting the
activity detaches the controller completely.
"""

from __future__ import annotations
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Callable
import logging

from ..runtime.events import EventKind, PointerEvent
from ..runtime.geometry import Point, Rect
from ..runtime.input import InputSource
from ..runtime.scope import ResourceScope, ScopeHandle
from ..runtime.surface import Element

logger = logging.getLogger(__name__)

LIFT_SCALE = 1.2
LIFT_Z_INDEX = 1000
DRAGGING_CLASS = "dragging"


class DragOutcomeKind(Enum):
    """How a drag session ended."""
    MATCH = "match"
    MISMATCH = "mismatch"
    MISS = "miss"


@dataclass(eq=False)
class DropTarget:
    """
    A place items can be dropped.

    bounds_provider is called at release time, so targets that move or
    resize are tested where they are now. capacity None means unlimited.
    """
    key: Any
    bounds_provider: Callable[[], Rect]
    accept: Callable[[Any, "DropTarget"], bool]
    payload: Any = None
    capacity: int | None = 1
    fill_count: int = 0

    @property
    def is_full(self) -> bool:
        return self.capacity is not None and self.fill_count >= self.capacity

    def bounds(self) -> Rect:
        return self.bounds_provider()


@dataclass(eq=False)
class DragSession:
    """The live state of one drag gesture."""
    element: Element
    item: Any
    pointer_id: int
    start: Point
    origin: Rect
    grab_offset: Point
    targets: tuple[DropTarget, ...]
    saved_scale: float = 1.0
    saved_z_index: int = 0
    last_point: Point | None = None


@dataclass
class DragOutcome:
    """
    The single report of a resolved session.

    `point` is the element centre used for the containment test;
    `position` is where the element's top-left corner ended up.
    """
    kind: DragOutcomeKind
    item: Any
    element: Element
    target: DropTarget | None
    point: Point
    position: Point
    cancelled: bool = False

    @property
    def matched(self) -> bool:
        return self.kind == DragOutcomeKind.MATCH


OutcomeCallback = Callable[[DragOutcome], Any]


class DragController:
    """
    Pointer drag-and-drop for one activity instance.

    Usage:
        drag = DragController(self.scope, surface.input_source,
                              on_match=self._fed, on_mismatch=self._refused)
        drag.add_target("dog", lambda: dog.bounds(),
                        accept=lambda item, t: item == "bone")
        drag.register(bone_element, "bone")
    """

    def __init__(
        self,
        scope: ResourceScope,
        input_source: InputSource,
        *,
        targets: list[DropTarget] | tuple[DropTarget, ...] = (),
        on_pick_up: Callable[[DragSession], Any] | None = None,
        on_match: OutcomeCallback | None = None,
        on_mismatch: OutcomeCallback | None = None,
        on_miss: OutcomeCallback | None = None,
        lift_scale: float = LIFT_SCALE,
    ):
        self.scope = scope
        self.input_source = input_source
        self.targets: list[DropTarget] = list(targets)
        self.on_pick_up = on_pick_up
        self.on_match = on_match
        self.on_mismatch = on_mismatch
        self.on_miss = on_miss
        self.lift_scale = lift_scale

        self.session: DragSession | None = None
        self.last_outcome: DragOutcome | None = None
        self._items: dict[Element, Any] = {}
        self._handles: dict[Element, ScopeHandle] = {}
        self._disabled: set[Element] = set()

        # Document level: the bound pointer is followed wherever it goes.
        scope.listen(input_source, EventKind.POINTER_MOVE, self._on_pointer_move)
        scope.listen(input_source, EventKind.POINTER_UP, self._on_pointer_up)
        scope.listen(input_source, EventKind.POINTER_CANCEL, self._on_pointer_cancel)

    # =========================================================================
    # Registration
    # =========================================================================

    def add_target(
        self,
        key: Any,
        bounds_provider: Callable[[], Rect],
        accept: Callable[[Any, DropTarget], bool],
        *,
        payload: Any = None,
        capacity: int | None = 1,
    ) -> DropTarget:
        target = DropTarget(
            key=key,
            bounds_provider=bounds_provider,
            accept=accept,
            payload=payload,
            capacity=capacity,
        )
        self.targets.append(target)
        return target

    def register(self, element: Element, item: Any):
        """Make element draggable, carrying item."""
        if element in self._handles:
            self._items[element] = item
            return

        def on_down(event: PointerEvent):
            self._on_pointer_down(element, event)

        self._items[element] = item
        self._disabled.discard(element)
        self._handles[element] = self.scope.listen(element, EventKind.POINTER_DOWN, on_down)

    def unregister(self, element: Element):
        handle = self._handles.pop(element, None)
        if handle is not None:
            handle.cancel()
        self._items.pop(element, None)
        self._disabled.discard(element)

    def reset(self):
        """Forget every draggable and target (new level). A live drag is dropped unreported."""
        if self.session is not None:
            self._discard("controller reset")
        for element in list(self._handles):
            self.unregister(element)
        self._items.clear()
        self._disabled.clear()
        self.targets.clear()

    def is_draggable(self, element: Element) -> bool:
        return element in self._items and element not in self._disabled

    @property
    def is_dragging(self) -> bool:
        return self.session is not None

    def cancel(self) -> DragOutcome | None:
        """Abort the live drag, resolving it as a cancelled miss."""
        if self.session is None:
            return None
        return self._resolve(cancelled=True)

    # =========================================================================
    # Pointer handlers
    # =========================================================================

    def _on_pointer_down(self, element: Element, event: PointerEvent):
        if self.session is not None:
            return
        if not self.scope.active or self.scope.suspended or not element.is_attached:
            return
        if not self.is_draggable(element):
            return

        event.prevent_default()
        rect = element.bounds()
        self.session = DragSession(
            element=element,
            item=self._items[element],
            pointer_id=event.pointer_id,
            start=Point(event.x, event.y),
            origin=rect,
            grab_offset=Point(event.x - rect.x, event.y - rect.y),
            targets=tuple(self.targets),
            saved_scale=element.scale,
            saved_z_index=element.z_index,
            last_point=Point(event.x, event.y),
        )
        self.input_source.set_pointer_capture(event.pointer_id, element)

        element.scale = self.lift_scale
        element.z_index = LIFT_Z_INDEX
        element.add_class(DRAGGING_CLASS)
        logger.debug("Picked up %s at (%.0f, %.0f)", element.element_id, event.x, event.y)

        if self.on_pick_up is not None:
            self.on_pick_up(self.session)

    def _on_pointer_move(self, event: PointerEvent):
        session = self._session_for(event)
        if session is None:
            return
        if not session.element.is_attached:
            self._discard("element left the surface")
            return
        self._follow(session, event)

    def _on_pointer_up(self, event: PointerEvent):
        session = self._session_for(event)
        if session is None:
            return
        if session.element.is_attached:
            self._follow(session, event)
        self._resolve(cancelled=False)

    def _on_pointer_cancel(self, event: PointerEvent):
        if self._session_for(event) is None:
            return
        self._resolve(cancelled=True)

    def _session_for(self, event: PointerEvent) -> DragSession | None:
        session = self.session
        if session is None or event.pointer_id != session.pointer_id:
            return None
        return session

    def _follow(self, session: DragSession, event: PointerEvent):
        session.last_point = Point(event.x, event.y)
        session.element.move_to(
            event.x - session.grab_offset.x,
            event.y - session.grab_offset.y,
        )

    # =========================================================================
    # Resolution
    # =========================================================================

    def _resolve(self, cancelled: bool) -> DragOutcome | None:
        session = self.session
        self.session = None
        if session is None:
            return None
        self.input_source.release_pointer_capture(session.pointer_id)

        element = session.element
        if not self.scope.active or not element.is_attached:
            logger.debug("Dropping drag of %s: activity no longer mounted", element.element_id)
            return None

        element.scale = session.saved_scale
        element.z_index = session.saved_z_index
        element.remove_class(DRAGGING_CLASS)

        center = element.bounds().center
        target = None if cancelled else self.find_target(center, session.targets)

        if target is None:
            kind = DragOutcomeKind.MISS
            element.rect = session.origin
        elif target.accept(session.item, target):
            kind = DragOutcomeKind.MATCH
            element.center_on(target.bounds().center)
            self._disabled.add(element)
            target.fill_count += 1
        else:
            kind = DragOutcomeKind.MISMATCH
            element.rect = session.origin

        outcome = DragOutcome(
            kind=kind,
            item=session.item,
            element=element,
            target=target,
            point=center,
            position=element.bounds().origin,
            cancelled=cancelled,
        )
        self.last_outcome = outcome
        logger.debug(
            "Drag of %s resolved: %s%s",
            element.element_id,
            kind.value,
            " (cancelled)" if cancelled else "",
        )

        callback = {
            DragOutcomeKind.MATCH: self.on_match,
            DragOutcomeKind.MISMATCH: self.on_mismatch,
            DragOutcomeKind.MISS: self.on_miss,
        }[kind]
        if callback is not None:
            callback(outcome)
        return outcome

    @staticmethod
    def find_target(point: Point, targets: tuple[DropTarget, ...] | list[DropTarget]) -> DropTarget | None:
        """First non-full target, in registration order, containing point."""
        for target in targets:
            if target.is_full:
                continue
            if target.bounds().contains(point):
                return target
        return None

    def _discard(self, reason: str):
        session = self.session
        self.session = None
        if session is not None:
            self.input_source.release_pointer_capture(session.pointer_id)
            logger.debug("Discarding drag of %s: %s", session.element.element_id, reason)
