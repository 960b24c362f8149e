"""
Input Source - Pointer events with capture semantics.

The input source plays the role of the document:
- pointer_down is routed to the hit element
- move / up / cancel go to the capturing element when the pointer is
  captured, otherwise to the hit element
- every event bubbles from its target up through its ancestors and
  finally reaches the input source itself (document-level listeners)
"""

from __future__ import annotations
from typing import Any, TYPE_CHECKING
import logging

from .events import EventKind, EventTarget, PointerEvent

if TYPE_CHECKING:
    from .surface import Element, Surface

logger = logging.getLogger(__name__)


class InputSource(EventTarget):
    """
    Emits pointer events into a surface.

    Usage:
        source = surface.input_source
        source.pointer_down(1, 50, 50)
        source.pointer_move(1, 80, 90)
        source.pointer_up(1, 80, 90)
    """

    def __init__(self):
        super().__init__()
        self.surface: Surface | None = None
        self._captures: dict[int, Element] = {}
        self._positions: dict[int, tuple[float, float]] = {}

    def attach(self, surface: Surface):
        self.surface = surface

    # =========================================================================
    # Capture
    # =========================================================================

    def set_pointer_capture(self, pointer_id: int, element: Element):
        self._captures[pointer_id] = element

    def release_pointer_capture(self, pointer_id: int):
        self._captures.pop(pointer_id, None)

    def has_pointer_capture(self, pointer_id: int, element: Element | None = None) -> bool:
        captured = self._captures.get(pointer_id)
        if element is None:
            return captured is not None
        return captured is element

    # =========================================================================
    # Emitters
    # =========================================================================

    def pointer_down(self, pointer_id: int, x: float, y: float) -> PointerEvent:
        return self.emit(EventKind.POINTER_DOWN, pointer_id, x, y)

    def pointer_move(self, pointer_id: int, x: float, y: float) -> PointerEvent:
        return self.emit(EventKind.POINTER_MOVE, pointer_id, x, y)

    def pointer_up(self, pointer_id: int, x: float, y: float) -> PointerEvent:
        return self.emit(EventKind.POINTER_UP, pointer_id, x, y)

    def pointer_cancel(self, pointer_id: int) -> PointerEvent:
        """Cancel a pointer (device lost) at its last known position."""
        x, y = self._positions.get(pointer_id, (0.0, 0.0))
        return self.emit(EventKind.POINTER_CANCEL, pointer_id, x, y)

    def tap(self, x: float, y: float, pointer_id: int = 1) -> PointerEvent:
        """Press and release at the same point."""
        down = self.pointer_down(pointer_id, x, y)
        self.pointer_up(pointer_id, x, y)
        return down

    def drag(
        self,
        start: tuple[float, float],
        end: tuple[float, float],
        pointer_id: int = 1,
        steps: int = 4,
    ) -> PointerEvent:
        """Press at start, move to end in steps, release. Returns the up event."""
        (x0, y0), (x1, y1) = start, end
        self.pointer_down(pointer_id, x0, y0)
        for i in range(1, steps + 1):
            t = i / steps
            self.pointer_move(pointer_id, x0 + (x1 - x0) * t, y0 + (y1 - y0) * t)
        return self.pointer_up(pointer_id, x1, y1)

    def emit(self, kind: EventKind, pointer_id: int, x: float, y: float) -> PointerEvent:
        """Route one pointer event and let it bubble to the document."""
        target = self._route(kind, pointer_id, x, y)
        event = PointerEvent(kind=kind, pointer_id=pointer_id, x=x, y=y, target=target)

        if kind in (EventKind.POINTER_UP, EventKind.POINTER_CANCEL):
            self._positions.pop(pointer_id, None)
        else:
            self._positions[pointer_id] = (x, y)

        path: list[Any] = []
        if target is not None:
            path.append(target)
            path.extend(target.ancestors())
        path.append(self)

        for node in path:
            event.current_target = node
            node.dispatch(kind, event, error_handler=self.error_handler)
            if event.propagation_stopped:
                break

        if kind in (EventKind.POINTER_UP, EventKind.POINTER_CANCEL):
            self._captures.pop(pointer_id, None)
        return event

    def _route(self, kind: EventKind, pointer_id: int, x: float, y: float) -> Element | None:
        if kind != EventKind.POINTER_DOWN:
            captured = self._captures.get(pointer_id)
            if captured is not None:
                if captured.is_attached:
                    return captured
                logger.debug("Dropping capture of detached %s", captured)
                self._captures.pop(pointer_id, None)
        if self.surface is None:
            return None
        return self.surface.hit_test(x, y)
