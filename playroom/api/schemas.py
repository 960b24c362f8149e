"""
Pydantic Schemas for API - Request/response models for the remote shell.

These models define the contract between a rendering client and the
shell. All responses have explicit types for OpenAPI schema generation.

Error Codes:
- ACTIVITY_NOT_FOUND: The activity id is not registered
- ACTIVITY_FAILED: The activity failed to start; the shell is on the menu
- VALIDATION_ERROR: The request body is invalid
- INTERNAL_ERROR: Unexpected server error
"""

from enum import Enum
from typing import Optional, Any
from pydantic import BaseModel, Field


# =============================================================================
# Enums
# =============================================================================

class ShellStatus(str, Enum):
    """What the shell is showing."""
    MENU = "menu"
    PLAYING = "playing"
    PAUSED = "paused"


class PointerKind(str, Enum):
    """Pointer event kinds a client can inject."""
    DOWN = "pointerdown"
    MOVE = "pointermove"
    UP = "pointerup"
    CANCEL = "pointercancel"


class ErrorCode(str, Enum):
    """Structured error codes."""
    ACTIVITY_NOT_FOUND = "ACTIVITY_NOT_FOUND"
    ACTIVITY_FAILED = "ACTIVITY_FAILED"
    VALIDATION_ERROR = "VALIDATION_ERROR"
    INTERNAL_ERROR = "INTERNAL_ERROR"


# =============================================================================
# Shared Models
# =============================================================================

class ActivityInfo(BaseModel):
    """Menu entry for one activity."""
    activity_id: str
    name: str
    icon: str
    is_mounted: bool = False


class ElementInfo(BaseModel):
    """One element of the surface, flattened for rendering."""
    element_id: str
    tag: str
    parent_id: Optional[str] = None
    x: float
    y: float
    width: float
    height: float
    text: str = ""
    classes: list[str] = Field(default_factory=list)
    z_index: int = 0
    scale: float = 1.0
    opacity: float = 1.0
    hidden: bool = False


# =============================================================================
# Requests
# =============================================================================

class MuteRequest(BaseModel):
    """Set the persisted mute flag."""
    is_muted: bool


class PointerEventRequest(BaseModel):
    """A pointer event to inject into the surface."""
    kind: PointerKind
    pointer_id: int = Field(1, ge=0, description="Pointer identifier")
    x: float = Field(0.0, description="Surface x coordinate (ignored for cancel)")
    y: float = Field(0.0, description="Surface y coordinate (ignored for cancel)")


# =============================================================================
# Responses
# =============================================================================

class ActivityListResponse(BaseModel):
    """The activity catalogue in menu order."""
    activities: list[ActivityInfo]
    count: int


class TransitionResponse(BaseModel):
    """Result of a start / menu / pause / resume request."""
    success: bool
    state: ShellStatus
    activity_id: Optional[str] = None
    previous_activity_id: Optional[str] = None
    error_code: Optional[ErrorCode] = None
    errors: list[str] = Field(default_factory=list)
    api_version: str = "v1"


class ShellStatusResponse(BaseModel):
    """Current shell status."""
    state: ShellStatus
    current_activity: Optional[str] = None
    is_muted: bool
    failure_notice: bool
    outstanding_resources: int = Field(0, description="Resources held by the mounted activity")
    pending_timers: int = Field(0, description="Timers that may still fire")
    clock_ms: float
    api_version: str = "v1"


class SurfaceResponse(BaseModel):
    """The surface element tree, document ordered."""
    width: float
    height: float
    elements: list[ElementInfo]
    count: int


class MuteResponse(BaseModel):
    """Mute flag after the change."""
    is_muted: bool


class PointerEventResponse(BaseModel):
    """Where an injected pointer event landed."""
    kind: PointerKind
    pointer_id: int
    target_id: Optional[str] = None
    default_prevented: bool = False
    shell: ShellStatusResponse


class ErrorResponse(BaseModel):
    """Standard error payload."""
    error: str
    error_code: ErrorCode
    details: Optional[dict[str, Any]] = None


class HealthResponse(BaseModel):
    """Health check response."""
    status: str
    service: str
    version: str
