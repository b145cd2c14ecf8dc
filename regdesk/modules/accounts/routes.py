"""Account endpoints: sign-in for every operator plus the admin-only account views."""

import logging

from fastapi import APIRouter, Depends, Request

from regdesk.core.config import Settings
from regdesk.core.errors import AuthenticationError
from regdesk.core.registry import RouteDescriptor
from regdesk.core.security import create_access_token, get_current_account, get_current_admin
from regdesk.interfaces.http.deps import get_account_service, get_aggregation_service, get_app_settings
from regdesk.modules.admin.service import AggregationService
from regdesk.schemas import (
    AdminProfileResponse,
    AdminStatusUpdate,
    ApiResponse,
    LoginRequest,
    LoginResponse,
    PasswordChangeRequest,
)

from .models import AdminProfile, AdminUserUpdateInput
from .service import AccountService

logger = logging.getLogger(__name__)

auth_router = APIRouter(prefix="/account", tags=["account"])
admin_router = APIRouter(prefix="/account/admin", tags=["account"], dependencies=[Depends(get_current_admin)])


@auth_router.post("/login", response_model=ApiResponse[LoginResponse])
async def login(
    payload: LoginRequest,
    request: Request,
    settings: Settings = Depends(get_app_settings),
    service: AccountService = Depends(get_account_service),
):
    user = await service.authenticate(payload.username, payload.password)
    if user is None:
        raise AuthenticationError("Invalid username or password")

    await service.record_login(user.id, request.client.host if request.client else None)
    token = create_access_token(settings, user.id, user.username, user.role)
    return ApiResponse(
        data=LoginResponse(
            access_token=token,
            expires_in=settings.security.access_token_expire_minutes * 60,
            user=AdminProfileResponse.model_validate(user.to_profile()),
        ),
        message="Signed in",
    )


@auth_router.post("/logout", response_model=ApiResponse[None])
async def logout(account: AdminProfile = Depends(get_current_account)):
    # tokens are stateless; the client discards its copy
    logger.info("Admin user %s signed out", account.username)
    return ApiResponse(message="Signed out")


@auth_router.get("/me", response_model=ApiResponse[AdminProfileResponse])
async def current_account(account: AdminProfile = Depends(get_current_account)):
    return ApiResponse(data=AdminProfileResponse.model_validate(account))


@auth_router.put("/password", response_model=ApiResponse[None])
async def change_password(
    payload: PasswordChangeRequest,
    account: AdminProfile = Depends(get_current_account),
    service: AccountService = Depends(get_account_service),
):
    await service.change_password(account.id, payload.current_password, payload.new_password)
    return ApiResponse(message="Password updated")


@admin_router.get("/list", response_model=ApiResponse[list[AdminProfileResponse]])
async def list_admins(service: AggregationService = Depends(get_aggregation_service)):
    users = await service.list_users()
    return ApiResponse(data=[AdminProfileResponse.model_validate(user) for user in users])


@admin_router.put("/{user_id}/status", response_model=ApiResponse[AdminProfileResponse])
async def update_admin_status(
    user_id: str,
    payload: AdminStatusUpdate,
    admin: AdminProfile = Depends(get_current_admin),
    service: AggregationService = Depends(get_aggregation_service),
):
    user = await service.update_user(user_id, AdminUserUpdateInput(status=payload.status), admin)
    return ApiResponse(data=AdminProfileResponse.model_validate(user), message="Status updated")


def route_descriptor() -> RouteDescriptor:
    return RouteDescriptor.dual(auth_router, admin_router)
