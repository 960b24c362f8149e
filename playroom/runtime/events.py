"""
Events - Listener registries and pointer events.

EventTarget is the attach/detach surface every tracked listener goes
through. Elements, the surface and the input source are all targets.
"""

from __future__ import annotations
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Callable, TYPE_CHECKING

if TYPE_CHECKING:
    from .scheduler import ErrorHandler

Handler = Callable[[Any], Any]


class EventKind(str, Enum):
    """Event kinds emitted by the input source."""
    POINTER_DOWN = "pointerdown"
    POINTER_MOVE = "pointermove"
    POINTER_UP = "pointerup"
    POINTER_CANCEL = "pointercancel"


@dataclass
class PointerEvent:
    """
    A pointer event.

    `target` is the element the event was routed to (hit element, or the
    capturing element); `current_target` changes while the event bubbles.
    """
    kind: EventKind
    pointer_id: int
    x: float
    y: float
    target: Any = None
    current_target: Any = None
    propagation_stopped: bool = False
    default_prevented: bool = False

    def stop_propagation(self):
        self.propagation_stopped = True

    def prevent_default(self):
        self.default_prevented = True


@dataclass
class _Listener:
    handler: Handler
    once: bool = False
    removed: bool = field(default=False, repr=False)


class EventTarget:
    """
    Something listeners can be attached to.

    Adding the same handler twice for one kind is ignored; removing an
    unknown handler is a no-op.
    """

    def __init__(self):
        self._listeners: dict[str, list[_Listener]] = {}
        self.error_handler: ErrorHandler | None = None

    def add_listener(self, kind: str, handler: Handler, *, once: bool = False):
        kind = _kind_key(kind)
        listeners = self._listeners.setdefault(kind, [])
        if any(entry.handler is handler for entry in listeners):
            return
        listeners.append(_Listener(handler=handler, once=once))

    def remove_listener(self, kind: str, handler: Handler):
        kind = _kind_key(kind)
        listeners = self._listeners.get(kind)
        if not listeners:
            return
        for entry in listeners:
            if entry.handler is handler:
                entry.removed = True
        self._listeners[kind] = [e for e in listeners if not e.removed]

    def has_listener(self, kind: str, handler: Handler | None = None) -> bool:
        listeners = self._listeners.get(_kind_key(kind), [])
        if handler is None:
            return bool(listeners)
        return any(entry.handler is handler for entry in listeners)

    def listener_count(self, kind: str | None = None) -> int:
        if kind is not None:
            return len(self._listeners.get(_kind_key(kind), []))
        return sum(len(v) for v in self._listeners.values())

    def dispatch(
        self,
        kind: str,
        event: Any,
        error_handler: ErrorHandler | None = None,
    ):
        """
        Invoke the listeners for kind with event.

        The listener list is snapshotted first: listeners added during
        dispatch wait for the next event, listeners removed during dispatch
        are skipped. Handler exceptions go to error_handler (or this
        target's own) when one is set.
        """
        kind = _kind_key(kind)
        error_handler = error_handler or self.error_handler
        for entry in list(self._listeners.get(kind, [])):
            if entry.removed:
                continue
            if entry.once:
                self.remove_listener(kind, entry.handler)
            try:
                entry.handler(event)
            except Exception as exc:
                if error_handler is None:
                    raise
                error_handler(exc)


def _kind_key(kind: str) -> str:
    return kind.value if isinstance(kind, EventKind) else str(kind)
