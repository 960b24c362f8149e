"""
Errors - Exception types raised across the shell.

Only lookups fail loudly. Everything below the orchestrator is recovered:
- Activity construction failures return the shell to the menu
- Double release / double cancel are silent no-ops
- Late callbacks and drags on detached elements are ignored
"""

from __future__ import annotations


class PlayroomError(Exception):
    """Base class for shell errors."""


class ActivityNotFound(PlayroomError, LookupError):
    """Raised when an activity identifier is not registered."""

    def __init__(self, activity_id: str):
        super().__init__(f"Activity not found: {activity_id}")
        self.activity_id = activity_id


class ActivityMountError(PlayroomError):
    """
    Wraps an exception raised while an activity was building itself.

    Never escapes the orchestrator; it is logged and carried in the
    transition result.
    """

    def __init__(self, activity_id: str, cause: BaseException):
        super().__init__(f"Activity '{activity_id}' failed to mount: {cause}")
        self.activity_id = activity_id
        self.cause = cause
