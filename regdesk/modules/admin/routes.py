"""Administrative endpoints: registration listing, statistics, exports and user management."""

from typing import Literal, Optional

from fastapi import APIRouter, Depends, Query, Response

from regdesk.core.config import Settings
from regdesk.core.registry import RouteDescriptor
from regdesk.core.security import get_current_admin
from regdesk.interfaces.http.deps import get_aggregation_service, get_app_settings
from regdesk.modules.accounts.models import AdminProfile, AdminUserCreateInput, AdminUserUpdateInput
from regdesk.modules.registrations.models import RegistrationCriteria
from regdesk.schemas import (
    AdminProfileResponse,
    AdminUserCreate,
    AdminUserUpdate,
    ApiResponse,
    PageResponse,
    RegistrationResponse,
    StatsSnapshotResponse,
)
from regdesk.services.export import ExportArtifact

from .service import AggregationService

router = APIRouter(prefix="/admin", tags=["admin"], dependencies=[Depends(get_current_admin)])


def _download(artifact: ExportArtifact) -> Response:
    return Response(
        content=artifact.payload,
        media_type=artifact.content_type,
        headers={"Content-Disposition": artifact.content_disposition},
    )


@router.get("/registrations", response_model=ApiResponse[PageResponse[RegistrationResponse]])
async def list_registrations(
    status: Optional[str] = None,
    search: Optional[str] = None,
    page: int = Query(1, ge=1),
    limit: Optional[int] = Query(None, ge=1),
    sort: str = "created_at",
    order: Literal["asc", "desc"] = "desc",
    settings: Settings = Depends(get_app_settings),
    service: AggregationService = Depends(get_aggregation_service),
):
    criteria = RegistrationCriteria(
        status=status,
        search=search,
        page=page,
        limit=limit or settings.admin.default_page_size,
        sort=sort,
        order=order,
    )
    result = await service.list_registrations(criteria)
    return ApiResponse(data=PageResponse[RegistrationResponse].from_page(result, RegistrationResponse))


@router.get("/stats", response_model=ApiResponse[StatsSnapshotResponse])
async def get_stats(service: AggregationService = Depends(get_aggregation_service)):
    snapshot = await service.build_stats_snapshot()
    return ApiResponse(data=StatsSnapshotResponse.model_validate(snapshot.to_dict()))


@router.get("/export/registrations")
async def export_registrations(
    format: Optional[str] = None,
    status: Optional[str] = None,
    admin: AdminProfile = Depends(get_current_admin),
    settings: Settings = Depends(get_app_settings),
    service: AggregationService = Depends(get_aggregation_service),
):
    artifact = await service.export_registrations(
        format or settings.admin.default_export_format,
        status,
        actor=admin.username,
    )
    return _download(artifact)


@router.get("/export/payments")
async def export_payments(
    format: Optional[str] = None,
    status: Optional[str] = None,
    admin: AdminProfile = Depends(get_current_admin),
    settings: Settings = Depends(get_app_settings),
    service: AggregationService = Depends(get_aggregation_service),
):
    artifact = await service.export_payments(
        format or settings.admin.default_export_format,
        status,
        actor=admin.username,
    )
    return _download(artifact)


@router.get("/users", response_model=ApiResponse[list[AdminProfileResponse]])
async def list_users(service: AggregationService = Depends(get_aggregation_service)):
    users = await service.list_users()
    return ApiResponse(data=[AdminProfileResponse.model_validate(user) for user in users])


@router.post("/users", response_model=ApiResponse[AdminProfileResponse], status_code=201)
async def create_user(
    payload: AdminUserCreate,
    admin: AdminProfile = Depends(get_current_admin),
    service: AggregationService = Depends(get_aggregation_service),
):
    user = await service.create_user(AdminUserCreateInput(**payload.model_dump()), admin)
    return ApiResponse(data=AdminProfileResponse.model_validate(user), message="User created")


@router.put("/users/{user_id}", response_model=ApiResponse[AdminProfileResponse])
async def update_user(
    user_id: str,
    payload: AdminUserUpdate,
    admin: AdminProfile = Depends(get_current_admin),
    service: AggregationService = Depends(get_aggregation_service),
):
    changes = AdminUserUpdateInput(**payload.model_dump(exclude_unset=True))
    user = await service.update_user(user_id, changes, admin)
    return ApiResponse(data=AdminProfileResponse.model_validate(user), message="User updated")


@router.delete("/users/{user_id}", response_model=ApiResponse[None])
async def delete_user(
    user_id: str,
    admin: AdminProfile = Depends(get_current_admin),
    service: AggregationService = Depends(get_aggregation_service),
):
    await service.delete_user(user_id, admin)
    return ApiResponse(message="User deleted")


def route_descriptor() -> RouteDescriptor:
    return RouteDescriptor.simple(router)
