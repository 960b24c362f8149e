"""
Activity - Abstract base for everything the shell can mount.

LIFECYCLE:
    Unmounted --mount(surface)--> Mounted --unmount()--> Unmounted
    (any number of times on the same instance)

- mount() clears the surface, allocates a fresh ResourceScope and calls
  build(). Mounting an already-mounted activity first unmounts it, so a
  level restart never doubles timers.
- unmount() marks the activity unmounted, releases the scope, calls
  teardown() and gives the surface back. Unmounting twice is a no-op.
- Exceptions from build() are NOT handled here; the orchestrator catches
  them and returns to the menu.

Scheduled work goes through the guarded helpers (after / every /
next_frame / on). A guarded callback runs only while the mount that
registered it is still the live one and not paused.
"""

from __future__ import annotations
from abc import ABC, abstractmethod
from typing import Any, Callable, TYPE_CHECKING
import logging
import random

from ..runtime.scope import ResourceScope, ScopeHandle
from ..services import Services

if TYPE_CHECKING:
    from ..runtime.events import EventTarget
    from ..runtime.surface import Surface

logger = logging.getLogger(__name__)


class Activity(ABC):
    """
    Base class for activities.

    Subclasses set activity_id / name / icon and implement build().
    """
    activity_id: str = ""
    name: str = ""
    icon: str = ""

    def __init__(
        self,
        services: Services | None = None,
        rng: random.Random | None = None,
    ):
        if not self.activity_id:
            raise TypeError(f"{type(self).__name__} must define activity_id")
        self.services = services or Services.null()
        self.rng = rng or random.Random()
        self.surface: Surface | None = None
        self.scope: ResourceScope | None = None
        self.is_mounted = False
        self.is_paused = False
        self.mount_count = 0

    def __repr__(self) -> str:
        return f"<{type(self).__name__} {self.activity_id} mounted={self.is_mounted}>"

    @property
    def audio(self):
        return self.services.audio

    @property
    def voice(self):
        return self.services.voice

    @property
    def effects(self):
        return self.services.effects

    def info(self) -> dict[str, Any]:
        """Menu metadata."""
        return {
            "activity_id": self.activity_id,
            "name": self.name,
            "icon": self.icon,
            "is_mounted": self.is_mounted,
        }

    # =========================================================================
    # Lifecycle
    # =========================================================================

    def mount(self, surface: Surface):
        """Mount into surface, rebuilding from scratch."""
        if self.is_mounted or (self.scope is not None and self.scope.active):
            self.unmount()

        self.mount_count += 1
        self.surface = surface
        self.scope = ResourceScope(
            surface.scheduler,
            name=f"{self.activity_id}#{self.mount_count}",
        )
        self.is_mounted = True
        self.is_paused = False
        surface.clear()
        logger.debug("Mounting %s (mount #%d)", self.activity_id, self.mount_count)
        self.build(surface)

    def unmount(self):
        """Release everything and detach from the surface."""
        scope_live = self.scope is not None and self.scope.active
        if not self.is_mounted and not scope_live:
            return

        self.is_mounted = False
        self.is_paused = False
        if self.scope is not None:
            self.scope.release_all()
        self.teardown()
        if self.surface is not None:
            self.surface.clear()
            self.surface = None
        logger.debug("Unmounted %s", self.activity_id)

    def pause(self):
        """Hold every timer and frame callback; guarded handlers ignore input."""
        if not self.is_mounted or self.is_paused:
            return
        self.is_paused = True
        if self.scope is not None:
            self.scope.suspend()

    def resume(self):
        if not self.is_mounted or not self.is_paused:
            return
        self.is_paused = False
        if self.scope is not None:
            self.scope.resume()

    @abstractmethod
    def build(self, surface: Surface):
        """Create elements and acquire timers / listeners."""

    def teardown(self):
        """Drop references to presentation state. Scope is already released."""

    # =========================================================================
    # Guarded acquisition helpers
    # =========================================================================

    def after(self, delay_ms: float, callback: Callable[[], Any]) -> ScopeHandle:
        return self._require_scope().schedule_once(self._guard(callback), delay_ms)

    def every(self, interval_ms: float, callback: Callable[[], Any]) -> ScopeHandle:
        return self._require_scope().schedule_periodic(self._guard(callback), interval_ms)

    def next_frame(self, callback: Callable[[float], Any]) -> ScopeHandle:
        return self._require_scope().schedule_frame(self._guard(callback))

    def on(
        self,
        target: EventTarget,
        kind: str,
        handler: Callable[[Any], Any],
        *,
        once: bool = False,
    ) -> ScopeHandle:
        return self._require_scope().listen(target, kind, self._guard(handler), once=once)

    def _guard(self, callback: Callable[..., Any]) -> Callable[..., Any]:
        generation = self.mount_count

        def guarded(*args: Any) -> Any:
            if not self.is_mounted or self.is_paused or self.mount_count != generation:
                return None
            return callback(*args)

        return guarded

    def _require_scope(self) -> ResourceScope:
        if self.scope is None:
            raise RuntimeError(f"{self.activity_id} has never been mounted")
        return self.scope
