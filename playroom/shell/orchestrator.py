"""
Orchestrator - Switches the shared surface between activities.

TRANSITION RULES (Non-Negotiable):
1. At most one activity is mounted at any time
2. Starting an activity ALWAYS fully unmounts the current one first,
   including a restart of the same activity
3. An unknown activity id raises ActivityNotFound and changes nothing
4. A failure while mounting never escapes: the half-built activity is
   unmounted, the shell returns to the menu and the failure notice is
   raised in the store

The orchestrator is also the error handler of the scheduler and the input
source, so an exception escaping a timer, frame callback or listener of
the current activity follows rule 4 as well.
"""

from __future__ import annotations
from dataclasses import dataclass, field
from enum import Enum
from typing import Iterator
import logging

from ..activities.base import Activity
from ..errors import ActivityMountError, ActivityNotFound
from ..runtime.surface import Surface
from ..services import CueKind, Services, Store

logger = logging.getLogger(__name__)

ACTIVITY_FAILED = "ACTIVITY_FAILED"


class ShellState(Enum):
    """What the surface is showing."""
    MENU = "menu"
    PLAYING = "playing"
    PAUSED = "paused"


@dataclass
class TransitionResult:
    """
    Result of a shell transition.

    A failed start still leaves the shell in a consistent state (the
    menu); error_code and errors say why.
    """
    success: bool
    state: ShellState
    activity_id: str | None = None
    previous_activity_id: str | None = None
    error_code: str | None = None
    errors: list[str] = field(default_factory=list)


class ActivityRegistry:
    """
    Activity id -> Activity, in registration order.

    Ids are unique; registering a second activity under a known id is a
    programming error.
    """

    def __init__(self, activities: list[Activity] | tuple[Activity, ...] = ()):
        self._activities: dict[str, Activity] = {}
        for activity in activities:
            self.register(activity)

    def __contains__(self, activity_id: object) -> bool:
        return activity_id in self._activities

    def __iter__(self) -> Iterator[Activity]:
        return iter(list(self._activities.values()))

    def __len__(self) -> int:
        return len(self._activities)

    def register(self, activity: Activity) -> Activity:
        if activity.activity_id in self._activities:
            raise ValueError(f"Activity already registered: {activity.activity_id}")
        self._activities[activity.activity_id] = activity
        return activity

    def get(self, activity_id: str) -> Activity | None:
        return self._activities.get(activity_id)

    def require(self, activity_id: str) -> Activity:
        activity = self._activities.get(activity_id)
        if activity is None:
            raise ActivityNotFound(activity_id)
        return activity

    def ids(self) -> list[str]:
        return list(self._activities)


class Orchestrator:
    """
    Owns the current-activity pointer of one shell.

    Usage:
        orchestrator = Orchestrator(surface, ActivityRegistry([BalloonPop()]), store)
        result = orchestrator.start("balloon_pop")
        orchestrator.show_menu()
    """

    def __init__(
        self,
        surface: Surface,
        registry: ActivityRegistry | None = None,
        store: Store | None = None,
        services: Services | None = None,
    ):
        self.surface = surface
        self.registry = registry or ActivityRegistry()
        self.store = store or Store()
        self.services = services or Services.null()
        self.current_id: str | None = None
        self.state = ShellState.MENU
        self._recovering = False

        surface.scheduler.error_handler = self.handle_error
        surface.input_source.error_handler = self.handle_error

    @property
    def current(self) -> Activity | None:
        if self.current_id is None:
            return None
        return self.registry.get(self.current_id)

    # =========================================================================
    # Transitions
    # =========================================================================

    def start(self, activity_id: str) -> TransitionResult:
        """
        Unmount the current activity and mount activity_id.

        Raises:
            ActivityNotFound: activity_id is not registered (no state change)
        """
        activity = self.registry.require(activity_id)
        previous = self.current_id

        self._unmount_current()

        try:
            activity.mount(self.surface)
        except Exception as e:
            error = ActivityMountError(activity_id, e)
            logger.exception("Failed to start %s", activity_id)
            self._return_to_menu(activity, failure=True)
            return TransitionResult(
                success=False,
                state=self.state,
                activity_id=None,
                previous_activity_id=previous,
                error_code=ACTIVITY_FAILED,
                errors=[str(error)],
            )

        self.current_id = activity_id
        self.state = ShellState.PLAYING
        self.store.set(current_activity=activity_id, failure_notice=False)
        self.services.audio.play_cue(CueKind.POP)
        logger.info("Started %s (previous: %s)", activity_id, previous or "menu")

        return TransitionResult(
            success=True,
            state=self.state,
            activity_id=activity_id,
            previous_activity_id=previous,
        )

    def show_menu(self) -> TransitionResult:
        """Unmount the current activity and show the menu."""
        previous = self.current_id
        self._unmount_current()
        self.state = ShellState.MENU
        self.store.set(current_activity=None)
        self.services.audio.play_cue(CueKind.POP)
        if previous is not None:
            logger.info("Back to menu from %s", previous)
        return TransitionResult(
            success=True,
            state=self.state,
            previous_activity_id=previous,
        )

    def pause(self) -> TransitionResult:
        """Suspend the current activity: its timers are held until resume()."""
        activity = self.current
        if activity is None or self.state != ShellState.PLAYING:
            return TransitionResult(success=False, state=self.state, activity_id=self.current_id)
        activity.pause()
        self.state = ShellState.PAUSED
        return TransitionResult(success=True, state=self.state, activity_id=self.current_id)

    def resume(self) -> TransitionResult:
        activity = self.current
        if activity is None or self.state != ShellState.PAUSED:
            return TransitionResult(success=False, state=self.state, activity_id=self.current_id)
        activity.resume()
        self.state = ShellState.PLAYING
        return TransitionResult(success=True, state=self.state, activity_id=self.current_id)

    # =========================================================================
    # Failure recovery
    # =========================================================================

    def handle_error(self, exc: BaseException):
        """
        Recover from an exception raised by an activity callback.

        Installed on the scheduler and the input source.
        """
        logger.error(
            "Activity %s raised during a callback",
            self.current_id or "<none>",
            exc_info=(type(exc), exc, exc.__traceback__),
        )
        if self._recovering:
            return
        self._return_to_menu(self.current, failure=True)

    def _return_to_menu(self, activity: Activity | None, failure: bool):
        self._recovering = True
        try:
            if activity is not None:
                self._safe_unmount(activity)
            self.surface.clear()
            self.current_id = None
            self.state = ShellState.MENU
            self.store.set(current_activity=None, failure_notice=failure)
        finally:
            self._recovering = False

    def _unmount_current(self):
        activity = self.current
        self.current_id = None
        if activity is not None:
            self._safe_unmount(activity)
        self.surface.clear()

    def _safe_unmount(self, activity: Activity):
        try:
            activity.unmount()
        except Exception:
            logger.exception("Error while unmounting %s", activity.activity_id)
            if activity.scope is not None:
                activity.scope.release_all()
            activity.is_mounted = False
            activity.surface = None

    def outstanding_resources(self) -> int:
        activity = self.current
        if activity is None or activity.scope is None:
            return 0
        return len(activity.scope)
