"""
API Service - Business logic layer between the API and the shell.

The service:
1. Translates API requests to shell calls
2. Injects pointer events into the surface
3. Formats shell state for rendering clients

This layer is framework-agnostic (can be used with FastAPI, Flask, etc.)
"""

from __future__ import annotations
from dataclasses import dataclass, field
import logging

from .schemas import (
    # Requests
    PointerEventRequest,
    # Responses
    ActivityListResponse,
    TransitionResponse,
    ShellStatusResponse,
    SurfaceResponse,
    MuteResponse,
    PointerEventResponse,
    ErrorResponse,
    # Shared
    ActivityInfo,
    ElementInfo,
    # Enums
    ErrorCode,
    PointerKind,
    ShellStatus,
)
from ..errors import ActivityNotFound
from ..runtime.events import EventKind
from ..shell import Playroom, TransitionResult

logger = logging.getLogger(__name__)


@dataclass
class ShellService:
    """
    API service for a remote shell.

    Usage:
        service = ShellService(Playroom.create())

        service.start_activity("balloon_pop")
        service.inject_pointer(PointerEventRequest(kind="pointerdown", x=10, y=10))
        status = service.status()
    """
    shell: Playroom = field(default_factory=Playroom.create)

    def list_activities(self) -> ActivityListResponse:
        activities = [ActivityInfo(**info) for info in self.shell.activities()]
        return ActivityListResponse(activities=activities, count=len(activities))

    def start_activity(self, activity_id: str) -> TransitionResponse | ErrorResponse:
        """Start an activity. Unknown ids come back as an ErrorResponse."""
        try:
            result = self.shell.start(activity_id)
        except ActivityNotFound as e:
            return ErrorResponse(
                error=str(e),
                error_code=ErrorCode.ACTIVITY_NOT_FOUND,
                details={"activity_id": activity_id},
            )
        return self._transition(result)

    def show_menu(self) -> TransitionResponse:
        return self._transition(self.shell.show_menu())

    def pause(self) -> TransitionResponse:
        return self._transition(self.shell.pause())

    def resume(self) -> TransitionResponse:
        return self._transition(self.shell.resume())

    def status(self) -> ShellStatusResponse:
        return ShellStatusResponse(**self.shell.status())

    def surface(self) -> SurfaceResponse:
        surface = self.shell.surface
        elements = [ElementInfo(**snapshot) for snapshot in surface.snapshot_tree()]
        return SurfaceResponse(
            width=surface.width,
            height=surface.height,
            elements=elements,
            count=len(elements),
        )

    def set_mute(self, is_muted: bool) -> MuteResponse:
        return MuteResponse(is_muted=self.shell.set_muted(is_muted))

    def toggle_mute(self) -> MuteResponse:
        return MuteResponse(is_muted=self.shell.toggle_mute())

    def inject_pointer(self, request: PointerEventRequest) -> PointerEventResponse:
        """Emit a pointer event into the surface, as a browser would."""
        source = self.shell.input_source
        kind = EventKind(request.kind.value)
        if kind == EventKind.POINTER_CANCEL:
            event = source.pointer_cancel(request.pointer_id)
        else:
            event = source.emit(kind, request.pointer_id, request.x, request.y)

        logger.debug("Injected %s at (%.0f, %.0f)", kind.value, event.x, event.y)
        return PointerEventResponse(
            kind=PointerKind(kind.value),
            pointer_id=request.pointer_id,
            target_id=event.target.element_id if event.target is not None else None,
            default_prevented=event.default_prevented,
            shell=self.status(),
        )

    def _transition(self, result: TransitionResult) -> TransitionResponse:
        return TransitionResponse(
            success=result.success,
            state=ShellStatus(result.state.value),
            activity_id=result.activity_id,
            previous_activity_id=result.previous_activity_id,
            error_code=ErrorCode(result.error_code) if result.error_code else None,
            errors=result.errors,
        )
