"""Page view tracking and public statistics."""

from fastapi import APIRouter, Depends, Request

from regdesk.core.registry import RouteDescriptor
from regdesk.interfaces.http.deps import get_statistics_service
from regdesk.schemas import ApiResponse, PageViewResponse, PublicStatsResponse

from .service import StatisticsService

router = APIRouter(prefix="/statistics", tags=["statistics"])


@router.post("/record-view", response_model=ApiResponse[PageViewResponse])
async def record_view(request: Request, service: StatisticsService = Depends(get_statistics_service)):
    view = await service.record_view(request.client.host if request.client else None)
    return ApiResponse(data=PageViewResponse.model_validate(view))


@router.get("/public", response_model=ApiResponse[PublicStatsResponse])
async def public_stats(service: StatisticsService = Depends(get_statistics_service)):
    return ApiResponse(data=PublicStatsResponse(**await service.public_stats()))


def route_descriptor() -> RouteDescriptor:
    return RouteDescriptor.simple(router)
