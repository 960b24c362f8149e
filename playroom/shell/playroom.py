"""
Playroom - Composition root of one shell.

Wires the surface, scheduler, input source, store, services, activity
registry and orchestrator together:

    shell = Playroom.create()
    shell.start("balloon_pop")
    shell.scheduler.advance(3000)
    shell.toggle_mute()
    shell.show_menu()
"""

from __future__ import annotations
from typing import Any
import logging
import random

from ..activities import Activity, default_activities
from ..config import ShellConfig
from ..runtime.input import InputSource
from ..runtime.scheduler import ManualScheduler, Scheduler
from ..runtime.surface import Surface
from ..services import CueKind, JsonFileStorage, MemoryStorage, Services, Store
from .orchestrator import ActivityRegistry, Orchestrator, TransitionResult

logger = logging.getLogger(__name__)


class Playroom:
    """
    One shell: a surface plus everything that drives it.

    Pass `storage` to persist the mute flag (JsonFileStorage); the default
    keeps it in memory.
    """

    def __init__(
        self,
        config: ShellConfig | None = None,
        *,
        scheduler: Scheduler | None = None,
        storage: MemoryStorage | JsonFileStorage | None = None,
        services: Services | None = None,
        store: Store | None = None,
    ):
        self.config = config or ShellConfig()
        self.scheduler = scheduler or ManualScheduler(frame_interval_ms=self.config.frame_interval_ms)
        self.input_source = InputSource()
        self.surface = Surface(
            self.config.surface_width,
            self.config.surface_height,
            scheduler=self.scheduler,
            input_source=self.input_source,
        )
        self.store = store or Store(storage)
        self.services = services or Services.for_store(
            self.store,
            width=self.config.surface_width,
            height=self.config.surface_height,
        )
        self.registry = ActivityRegistry()
        self.orchestrator = Orchestrator(self.surface, self.registry, self.store, self.services)

    @classmethod
    def create(
        cls,
        config: ShellConfig | None = None,
        *,
        activities: list[Activity] | None = None,
        rng: random.Random | None = None,
        **kwargs: Any,
    ) -> Playroom:
        """Build a shell and register the catalogue. The shell starts at the menu, silently."""
        shell = cls(config, **kwargs)
        if activities is None:
            activities = default_activities(shell.services, rng)
        for activity in activities:
            shell.registry.register(activity)
        logger.info("Playroom ready with %d activities", len(shell.registry))
        return shell

    # =========================================================================
    # Navigation
    # =========================================================================

    def start(self, activity_id: str) -> TransitionResult:
        return self.orchestrator.start(activity_id)

    def show_menu(self) -> TransitionResult:
        return self.orchestrator.show_menu()

    def pause(self) -> TransitionResult:
        return self.orchestrator.pause()

    def resume(self) -> TransitionResult:
        return self.orchestrator.resume()

    @property
    def current(self) -> Activity | None:
        return self.orchestrator.current

    # =========================================================================
    # Mute
    # =========================================================================

    @property
    def is_muted(self) -> bool:
        return self.store.is_muted

    def toggle_mute(self) -> bool:
        return self.set_muted(not self.store.is_muted)

    def set_muted(self, muted: bool) -> bool:
        """Write the mute flag and give audible feedback when it turns off."""
        self.store.set(is_muted=bool(muted))
        self.services.audio.play_cue(CueKind.POP)
        logger.info("Sound %s", "muted" if muted else "unmuted")
        return self.store.is_muted

    # =========================================================================
    # Introspection
    # =========================================================================

    def activities(self) -> list[dict[str, Any]]:
        return [activity.info() for activity in self.registry]

    def status(self) -> dict[str, Any]:
        state = self.store.snapshot()
        return {
            "state": self.orchestrator.state.value,
            "current_activity": state["current_activity"],
            "is_muted": state["is_muted"],
            "failure_notice": state["failure_notice"],
            "outstanding_resources": self.orchestrator.outstanding_resources(),
            "pending_timers": self.scheduler.pending_count(),
            "clock_ms": self.scheduler.now(),
        }
