"""
API Module - Remote shell interface.

Exposes one shell over REST so a rendering client can:
1. List and start activities
2. Render the surface element tree
3. Forward pointer input
4. Toggle sound
"""

from .schemas import (
    # Requests
    MuteRequest,
    PointerEventRequest,
    # Responses
    ActivityListResponse,
    TransitionResponse,
    ShellStatusResponse,
    SurfaceResponse,
    MuteResponse,
    PointerEventResponse,
    ErrorResponse,
    HealthResponse,
    # Shared
    ActivityInfo,
    ElementInfo,
    # Enums
    ErrorCode,
    PointerKind,
    ShellStatus,
)
from .service import ShellService
from .app import create_app, create_service

__all__ = [
    # Requests
    "MuteRequest",
    "PointerEventRequest",
    # Responses
    "ActivityListResponse",
    "TransitionResponse",
    "ShellStatusResponse",
    "SurfaceResponse",
    "MuteResponse",
    "PointerEventResponse",
    "ErrorResponse",
    "HealthResponse",
    # Shared
    "ActivityInfo",
    "ElementInfo",
    # Enums
    "ErrorCode",
    "PointerKind",
    "ShellStatus",
    # Service
    "ShellService",
    "create_app",
    "create_service",
]
