"""Public registration endpoints and operator maintenance."""

from fastapi import APIRouter, Depends

from regdesk.core.registry import RouteDescriptor
from regdesk.core.security import get_current_account, get_current_admin
from regdesk.interfaces.http.deps import get_registration_service
from regdesk.modules.accounts.models import AdminProfile
from regdesk.schemas import ApiResponse, RegistrationCreate, RegistrationResponse, RegistrationUpdate

from .models import RegistrationCreateInput
from .service import RegistrationService

router = APIRouter(prefix="/registration", tags=["registration"])


@router.get("", response_model=ApiResponse[list[RegistrationResponse]])
async def list_recent_registrations(service: RegistrationService = Depends(get_registration_service)):
    registrations = await service.list_recent()
    return ApiResponse(data=[RegistrationResponse.model_validate(item) for item in registrations])


@router.post("", response_model=ApiResponse[RegistrationResponse], status_code=201)
async def create_registration(
    payload: RegistrationCreate,
    service: RegistrationService = Depends(get_registration_service),
):
    registration = await service.create(RegistrationCreateInput(**payload.model_dump()))
    return ApiResponse(data=RegistrationResponse.model_validate(registration), message="Registration submitted")


@router.get("/{registration_id}", response_model=ApiResponse[RegistrationResponse])
async def get_registration(
    registration_id: str,
    service: RegistrationService = Depends(get_registration_service),
):
    registration = await service.get(registration_id)
    return ApiResponse(data=RegistrationResponse.model_validate(registration))


@router.put("/{registration_id}", response_model=ApiResponse[RegistrationResponse])
async def update_registration(
    registration_id: str,
    payload: RegistrationUpdate,
    account: AdminProfile = Depends(get_current_account),
    service: RegistrationService = Depends(get_registration_service),
):
    registration = await service.update(registration_id, payload.model_dump(exclude_unset=True))
    return ApiResponse(data=RegistrationResponse.model_validate(registration), message="Registration updated")


@router.delete("/{registration_id}", response_model=ApiResponse[None])
async def delete_registration(
    registration_id: str,
    admin: AdminProfile = Depends(get_current_admin),
    service: RegistrationService = Depends(get_registration_service),
):
    await service.delete(registration_id, actor=admin.username)
    return ApiResponse(message="Registration deleted")


def route_descriptor() -> RouteDescriptor:
    return RouteDescriptor.simple(router)
