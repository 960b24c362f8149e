"""
FastAPI Application - REST API for a remote shell.

Endpoints:
    GET    /api/v1/health                          Health check
    GET    /api/v1/activities                      Activity catalogue
    POST   /api/v1/activities/{activity_id}/start  Start (or restart) an activity
    POST   /api/v1/menu                            Back to the menu
    GET    /api/v1/shell                           Shell status
    POST   /api/v1/shell/pause                     Pause the current activity
    POST   /api/v1/shell/resume                    Resume the current activity
    GET    /api/v1/surface                         Element tree for rendering
    PUT    /api/v1/settings/mute                   Set the mute flag
    POST   /api/v1/settings/mute/toggle            Toggle the mute flag
    POST   /api/v1/input/pointer                   Inject a pointer event

The shell runs on the server's event loop: timers of the mounted activity
fire between requests. A client renders GET /surface and forwards the
child's taps and drags to POST /input/pointer.

All responses are JSON with explicit Pydantic schemas.

Run with:
    uvicorn playroom.api.app:create_app --factory
"""

from typing import Optional, Union
import logging

from fastapi import FastAPI, Request
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from .. import __version__
from ..config import ShellConfig
from ..runtime.scheduler import AsyncioScheduler
from ..services import JsonFileStorage
from ..shell import Playroom
from .service import ShellService
from .schemas import (
    # Request models
    MuteRequest,
    PointerEventRequest,
    # Response models
    ActivityListResponse,
    TransitionResponse,
    ShellStatusResponse,
    SurfaceResponse,
    MuteResponse,
    PointerEventResponse,
    ErrorResponse,
    HealthResponse,
    # Enums
    ErrorCode,
)

logger = logging.getLogger(__name__)


def create_service(config: Optional[ShellConfig] = None) -> ShellService:
    """A shell on the running event loop, with the mute flag persisted to disk."""
    config = config or ShellConfig.from_env()
    shell = Playroom.create(
        config,
        scheduler=AsyncioScheduler(frame_interval_ms=config.frame_interval_ms),
        storage=JsonFileStorage(config.state_file),
    )
    return ShellService(shell=shell)


def create_app(service: Optional[ShellService] = None, config: Optional[ShellConfig] = None):
    """
    Create the FastAPI application.

    Args:
        service: Optional ShellService instance (creates a persisted,
            event-loop driven shell if not provided)
        config: Optional ShellConfig (read from the environment if not provided)

    Returns:
        FastAPI application instance
    """
    config = config or ShellConfig.from_env()

    app = FastAPI(
        title="Playroom Shell API",
        description="""
Remote shell for the Playroom children's activities.

## Flow

1. `GET /activities` lists the menu
2. `POST /activities/{activity_id}/start` mounts an activity
3. Render `GET /surface`; forward input to `POST /input/pointer`
4. `POST /menu` unmounts it again

## Error Codes

| Code | Description |
|------|-------------|
| `ACTIVITY_NOT_FOUND` | Activity id is not registered |
| `ACTIVITY_FAILED` | Activity failed to start; shell is back on the menu |
| `VALIDATION_ERROR` | Request body is invalid |
        """,
        version=__version__,
        docs_url="/api/docs",
        redoc_url="/api/redoc",
    )

    app.add_middleware(
        CORSMiddleware,
        allow_origins=config.allowed_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    api_service = service or create_service(config)
    app.state.service = api_service

    # =========================================================================
    # Error helpers
    # =========================================================================

    def make_error_response(
        error_code: ErrorCode,
        message: str,
        status_code: int = 400,
        details: Optional[dict] = None,
    ) -> JSONResponse:
        """Create a standardized error response."""
        return JSONResponse(
            status_code=status_code,
            content=ErrorResponse(
                error=message,
                error_code=error_code,
                details=details,
            ).model_dump(mode="json"),
        )

    @app.exception_handler(RequestValidationError)
    async def validation_error(request: Request, exc: RequestValidationError) -> JSONResponse:
        return make_error_response(
            ErrorCode.VALIDATION_ERROR,
            "Invalid request",
            status_code=422,
            details={"errors": jsonable_encoder(exc.errors())},
        )

    # =========================================================================
    # Activities
    # =========================================================================

    @app.get(
        "/api/v1/activities",
        response_model=ActivityListResponse,
        tags=["Activities"],
        summary="List activities",
    )
    async def list_activities() -> ActivityListResponse:
        """The catalogue in menu order, with mount state."""
        return api_service.list_activities()

    @app.post(
        "/api/v1/activities/{activity_id}/start",
        response_model=TransitionResponse,
        responses={404: {"model": ErrorResponse, "description": "Activity not found"}},
        tags=["Activities"],
        summary="Start an activity",
    )
    async def start_activity(activity_id: str) -> Union[TransitionResponse, JSONResponse]:
        """
        Unmount the current activity and mount this one.

        A start that fails while the activity builds itself still returns
        200, with `success=false` and `error_code=ACTIVITY_FAILED`.
        """
        response = api_service.start_activity(activity_id)
        if isinstance(response, ErrorResponse):
            return make_error_response(
                response.error_code,
                response.error,
                status_code=404,
                details=response.details,
            )
        return response

    @app.post(
        "/api/v1/menu",
        response_model=TransitionResponse,
        tags=["Activities"],
        summary="Return to the menu",
    )
    async def show_menu() -> TransitionResponse:
        return api_service.show_menu()

    # =========================================================================
    # Shell
    # =========================================================================

    @app.get(
        "/api/v1/shell",
        response_model=ShellStatusResponse,
        tags=["Shell"],
        summary="Shell status",
    )
    async def shell_status() -> ShellStatusResponse:
        return api_service.status()

    @app.post(
        "/api/v1/shell/pause",
        response_model=TransitionResponse,
        tags=["Shell"],
        summary="Pause the current activity",
    )
    async def pause() -> TransitionResponse:
        """Hold the activity's timers and animations. Taps are ignored until resume."""
        return api_service.pause()

    @app.post(
        "/api/v1/shell/resume",
        response_model=TransitionResponse,
        tags=["Shell"],
        summary="Resume the current activity",
    )
    async def resume() -> TransitionResponse:
        return api_service.resume()

    @app.get(
        "/api/v1/surface",
        response_model=SurfaceResponse,
        tags=["Shell"],
        summary="Element tree for rendering",
    )
    async def surface() -> SurfaceResponse:
        return api_service.surface()

    # =========================================================================
    # Settings
    # =========================================================================

    @app.put(
        "/api/v1/settings/mute",
        response_model=MuteResponse,
        tags=["Settings"],
        summary="Set the mute flag",
    )
    async def set_mute(request: MuteRequest) -> MuteResponse:
        return api_service.set_mute(request.is_muted)

    @app.post(
        "/api/v1/settings/mute/toggle",
        response_model=MuteResponse,
        tags=["Settings"],
        summary="Toggle the mute flag",
    )
    async def toggle_mute() -> MuteResponse:
        return api_service.toggle_mute()

    # =========================================================================
    # Input
    # =========================================================================

    @app.post(
        "/api/v1/input/pointer",
        response_model=PointerEventResponse,
        responses={422: {"model": ErrorResponse}},
        tags=["Input"],
        summary="Inject a pointer event",
    )
    async def inject_pointer(request: PointerEventRequest) -> PointerEventResponse:
        """Route a pointer event through the surface like a real device would."""
        return api_service.inject_pointer(request)

    # =========================================================================
    # Health Check
    # =========================================================================

    @app.get(
        "/api/v1/health",
        response_model=HealthResponse,
        tags=["System"],
        summary="Health check",
    )
    async def health_check() -> HealthResponse:
        return HealthResponse(
            status="healthy",
            service="playroom-shell",
            version=__version__,
        )

    @app.get("/", tags=["System"])
    async def root():
        """Root endpoint with API info."""
        return {
            "name": "Playroom Shell API",
            "version": __version__,
            "docs": "/api/docs",
            "health": "/api/v1/health",
        }

    return app
