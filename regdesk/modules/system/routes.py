"""Service health and server clock."""

from datetime import datetime

from fastapi import APIRouter, Depends

from regdesk import __version__
from regdesk.core.config import Settings
from regdesk.core.registry import RouteDescriptor
from regdesk.core.timeutils import resolve_timezone
from regdesk.interfaces.http.deps import get_app_settings
from regdesk.schemas import ApiResponse, HealthResponse, ServerTimeResponse

router = APIRouter(tags=["system"])


@router.get("/health", response_model=ApiResponse[HealthResponse])
async def health(settings: Settings = Depends(get_app_settings)):
    return ApiResponse(
        data=HealthResponse(status="ok", version=__version__, environment=settings.environment),
    )


@router.get("/time", response_model=ApiResponse[ServerTimeResponse])
async def server_time(settings: Settings = Depends(get_app_settings)):
    tz = resolve_timezone(settings.stats.timezone)
    now = datetime.now(tz)
    return ApiResponse(
        data=ServerTimeResponse(
            server_time=now,
            timestamp=int(now.timestamp() * 1000),
            timezone=str(tz),
        ),
    )


def route_descriptor() -> RouteDescriptor:
    return RouteDescriptor.simple(router)
