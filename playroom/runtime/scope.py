"""
Resource Scope - Owns every timer, frame callback and listener of one
activity instance.

The scope is the only way activity code acquires scheduled work or input
listeners. Acquisition and release live in one object:

    scope = ResourceScope(surface.scheduler, name="balloon_pop")
    scope.schedule_periodic(spawn, 1500)
    scope.listen(balloon, EventKind.POINTER_DOWN, pop)
    ...
    scope.release_all()   # everything is gone, exactly once

INVARIANTS:
- Once `active` is false, no tracked handle is outstanding and no tracked
  listener is attached.
- release_all() is idempotent; cancelling a handle twice is a no-op.
- Acquisitions on an inactive scope are refused silently: the returned
  handle is already released and nothing reaches the scheduler.
- A callback that is already running when the scope is released is not
  preempted. Its owner must check liveness before producing effects.
- suspend() withdraws every timer and frame callback from the scheduler
  and resume() re-arms them: timeouts keep their remaining delay,
  periodic timers restart their interval, frame callbacks wait for the
  next frame. Listeners stay attached.
"""

from __future__ import annotations
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Callable
import logging

from .events import EventTarget, Handler
from .scheduler import Scheduler, TimerToken

logger = logging.getLogger(__name__)


class ResourceKind(Enum):
    """Kinds of resources a scope tracks."""
    PERIODIC = "periodic"
    TIMEOUT = "timeout"
    FRAME = "frame"
    LISTENER = "listener"


@dataclass(eq=False)
class ScopeHandle:
    """
    A tracked resource.

    For timers `token` is the scheduler token (None while the scope is
    suspended) and `delay_ms` the interval or delay it was armed with; for
    listeners `target`, `event_kind` and `handler` identify the
    registration.
    """
    kind: ResourceKind
    scope: ResourceScope | None = field(default=None, repr=False)
    token: TimerToken | None = field(default=None, repr=False)
    target: EventTarget | None = field(default=None, repr=False)
    event_kind: str | None = None
    handler: Handler | None = field(default=None, repr=False)
    callback: Callable[..., Any] | None = field(default=None, repr=False)
    delay_ms: float = 0.0
    released: bool = False

    @property
    def active(self) -> bool:
        return not self.released

    def cancel(self):
        """Release this one resource. Safe to call repeatedly."""
        if self.scope is None:
            self.released = True
            return
        self.scope.cancel(self)


class ResourceScope:
    """
    Tracks and releases the resources owned by one activity instance.

    Also usable as a context manager:

        with ResourceScope(scheduler) as scope:
            scope.schedule_once(cb, 100)
    """

    def __init__(self, scheduler: Scheduler, name: str = "scope"):
        self.scheduler = scheduler
        self.name = name
        self._active = True
        self._suspended = False
        self._held: list[ScopeHandle] = []
        self._periodic: set[ScopeHandle] = set()
        self._timeouts: set[ScopeHandle] = set()
        self._frames: set[ScopeHandle] = set()
        self._listeners: list[ScopeHandle] = []

    def __repr__(self) -> str:
        return f"<ResourceScope {self.name} active={self._active} outstanding={len(self)}>"

    def __enter__(self) -> ResourceScope:
        return self

    def __exit__(self, exc_type, exc, tb):
        self.release_all()

    def __len__(self) -> int:
        return (
            len(self._periodic)
            + len(self._timeouts)
            + len(self._frames)
            + len(self._listeners)
        )

    @property
    def active(self) -> bool:
        return self._active

    @property
    def suspended(self) -> bool:
        return self._suspended

    def outstanding(self) -> dict[ResourceKind, int]:
        """Per-kind count of tracked, unreleased resources."""
        return {
            ResourceKind.PERIODIC: len(self._periodic),
            ResourceKind.TIMEOUT: len(self._timeouts),
            ResourceKind.FRAME: len(self._frames),
            ResourceKind.LISTENER: len(self._listeners),
        }

    # =========================================================================
    # Acquisition
    # =========================================================================

    def schedule_periodic(self, callback: Callable[[], Any], interval_ms: float) -> ScopeHandle:
        """Run callback every interval_ms until released."""
        if not self._active:
            return self._refused(ResourceKind.PERIODIC)
        handle = ScopeHandle(
            kind=ResourceKind.PERIODIC, scope=self, callback=callback, delay_ms=interval_ms,
        )
        self._periodic.add(handle)
        self._arm(handle)
        return handle

    def schedule_once(self, callback: Callable[[], Any], delay_ms: float) -> ScopeHandle:
        """Run callback once after delay_ms."""
        if not self._active:
            return self._refused(ResourceKind.TIMEOUT)
        handle = ScopeHandle(kind=ResourceKind.TIMEOUT, scope=self, delay_ms=delay_ms)

        def fire():
            self._forget(handle)
            callback()

        handle.callback = fire
        self._timeouts.add(handle)
        self._arm(handle)
        return handle

    def schedule_frame(self, callback: Callable[[float], Any]) -> ScopeHandle:
        """
        Run callback(timestamp_ms) on the next frame.

        A callback that schedules itself again forms an animation loop;
        every registration is its own handle, so the loop can be stopped
        between any two frames.
        """
        if not self._active:
            return self._refused(ResourceKind.FRAME)
        handle = ScopeHandle(kind=ResourceKind.FRAME, scope=self)

        def fire(timestamp: float):
            self._forget(handle)
            callback(timestamp)

        handle.callback = fire
        self._frames.add(handle)
        self._arm(handle)
        return handle

    def listen(
        self,
        target: EventTarget,
        kind: str,
        handler: Handler,
        *,
        once: bool = False,
    ) -> ScopeHandle:
        """Attach handler for kind on target until released."""
        if not self._active:
            return self._refused(ResourceKind.LISTENER)
        handle = ScopeHandle(
            kind=ResourceKind.LISTENER,
            scope=self,
            target=target,
            event_kind=kind,
        )

        if once:
            def attached(event):
                self._forget(handle)
                handle.released = True
                return handler(event)
        else:
            attached = handler

        handle.handler = attached
        target.add_listener(kind, attached, once=once)
        self._listeners.append(handle)
        return handle

    # =========================================================================
    # Suspension
    # =========================================================================

    def suspend(self):
        """Hold every timer and frame callback until resume()."""
        if not self._active or self._suspended:
            return
        self._suspended = True
        now = self.scheduler.now()
        armed = [
            handle
            for handle in (*self._periodic, *self._timeouts, *self._frames)
            if handle.token is not None
        ]
        armed.sort(key=lambda handle: handle.token.token_id)
        for handle in armed:
            if handle.kind == ResourceKind.TIMEOUT:
                handle.delay_ms = max(0.0, handle.token.due - now)
            self.scheduler.cancel(handle.token)
            handle.token = None
        self._held = armed
        logger.debug("Scope %s suspended %d timers", self.name, len(armed))

    def resume(self):
        """Re-arm what suspend() held, in the order it was scheduled."""
        if not self._active or not self._suspended:
            return
        self._suspended = False
        held, self._held = self._held, []
        for handle in held:
            if not handle.released:
                self._arm(handle)
        logger.debug("Scope %s resumed", self.name)

    # =========================================================================
    # Release
    # =========================================================================

    def cancel(self, handle: ScopeHandle):
        """Release a single handle. Unknown or released handles are ignored."""
        if handle.released:
            return
        if handle.scope is not self:
            return
        self._forget(handle)
        self._release(handle)

    def release_all(self):
        """
        Release every tracked resource and deactivate the scope.

        Order is unspecified. A failure releasing one resource is logged
        and does not stop the others.
        """
        if not self._active:
            return
        self._active = False

        handles = [
            *self._periodic,
            *self._timeouts,
            *self._frames,
            *self._listeners,
        ]
        self._periodic.clear()
        self._timeouts.clear()
        self._frames.clear()
        self._listeners.clear()
        self._held = []

        for handle in handles:
            try:
                self._release(handle)
            except Exception:
                logger.exception("Failed to release %s in scope %s", handle.kind.value, self.name)
                handle.released = True

        logger.debug("Scope %s released %d resources", self.name, len(handles))

    # =========================================================================
    # Internals
    # =========================================================================

    def _arm(self, handle: ScopeHandle):
        if self._suspended:
            self._held.append(handle)
            return
        if handle.kind == ResourceKind.PERIODIC:
            handle.token = self.scheduler.call_every(handle.delay_ms, handle.callback)
        elif handle.kind == ResourceKind.TIMEOUT:
            handle.token = self.scheduler.call_later(handle.delay_ms, handle.callback)
        else:
            handle.token = self.scheduler.call_next_frame(handle.callback)

    def _release(self, handle: ScopeHandle):
        if handle.released:
            return
        handle.released = True
        if handle.token is not None:
            self.scheduler.cancel(handle.token)
        elif handle.target is not None and handle.handler is not None:
            handle.target.remove_listener(handle.event_kind, handle.handler)

    def _forget(self, handle: ScopeHandle):
        """Stop tracking a handle whose resource is gone (fired or cancelled)."""
        if handle.kind == ResourceKind.LISTENER:
            if handle in self._listeners:
                self._listeners.remove(handle)
            return
        bucket = {
            ResourceKind.PERIODIC: self._periodic,
            ResourceKind.TIMEOUT: self._timeouts,
            ResourceKind.FRAME: self._frames,
        }[handle.kind]
        bucket.discard(handle)
        if handle.kind != ResourceKind.PERIODIC and handle.token is not None and handle.token.fired:
            handle.released = True

    def _refused(self, kind: ResourceKind) -> ScopeHandle:
        logger.debug("Scope %s is released; ignoring %s acquisition", self.name, kind.value)
        return ScopeHandle(kind=kind, scope=None, released=True)
