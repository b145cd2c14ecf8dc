"""Payment order endpoints and the payment event subscription."""

import logging

from fastapi import APIRouter, Depends, FastAPI

from regdesk.core.events import PAYMENT_SUCCEEDED
from regdesk.core.registry import RouteDescriptor
from regdesk.core.security import get_current_account, get_current_admin
from regdesk.interfaces.http.deps import get_payment_service
from regdesk.modules.accounts.models import AdminProfile
from regdesk.schemas import (
    ApiResponse,
    PaymentCreate,
    PaymentResponse,
    PaymentStatusUpdate,
    RefundRequest,
)

from .models import PaymentCreateInput
from .service import PaymentService

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/payment", tags=["payment"])


@router.post("/create", response_model=ApiResponse[PaymentResponse], status_code=201)
async def create_payment_order(
    payload: PaymentCreate,
    service: PaymentService = Depends(get_payment_service),
):
    payment = await service.create_order(PaymentCreateInput(**payload.model_dump()))
    return ApiResponse(data=PaymentResponse.model_validate(payment), message="Payment order created")


@router.get("/status/{order_number}", response_model=ApiResponse[PaymentResponse])
async def get_payment_status(order_number: str, service: PaymentService = Depends(get_payment_service)):
    payment = await service.get_status(order_number)
    return ApiResponse(data=PaymentResponse.model_validate(payment))


@router.get("/registration/{registration_id}", response_model=ApiResponse[list[PaymentResponse]])
async def list_registration_payments(
    registration_id: str,
    account: AdminProfile = Depends(get_current_account),
    service: PaymentService = Depends(get_payment_service),
):
    payments = await service.list_for_registration(registration_id)
    return ApiResponse(data=[PaymentResponse.model_validate(payment) for payment in payments])


@router.put("/{payment_id}/status", response_model=ApiResponse[PaymentResponse])
async def update_payment_status(
    payment_id: str,
    payload: PaymentStatusUpdate,
    admin: AdminProfile = Depends(get_current_admin),
    service: PaymentService = Depends(get_payment_service),
):
    payment = await service.update_status(payment_id, payload.status, remarks=payload.remarks, actor=admin.username)
    return ApiResponse(data=PaymentResponse.model_validate(payment), message="Payment status updated")


@router.post("/refund/{payment_id}", response_model=ApiResponse[PaymentResponse])
async def refund_payment(
    payment_id: str,
    payload: RefundRequest,
    admin: AdminProfile = Depends(get_current_admin),
    service: PaymentService = Depends(get_payment_service),
):
    payment = await service.refund(payment_id, reason=payload.reason, actor=admin.username)
    return ApiResponse(data=PaymentResponse.model_validate(payment), message="Payment refunded")


@router.get("/test-complete/{order_number}", response_model=ApiResponse[PaymentResponse])
async def complete_test_payment(order_number: str, service: PaymentService = Depends(get_payment_service)):
    await service.complete_test_payment(order_number)
    payment = await service.get_status(order_number)
    return ApiResponse(data=PaymentResponse.model_validate(payment), message="Test payment completed")


def init_event_handlers(app: FastAPI) -> None:
    """Settle orders whenever a payment success event is published."""
    container = app.state.container

    async def on_payment_succeeded(payload: dict) -> None:
        await container.payment_service.handle_payment_success(payload)

    container.events.subscribe(PAYMENT_SUCCEEDED, on_payment_succeeded)
    logger.debug("Payment event handlers initialised")


def route_descriptor() -> RouteDescriptor:
    return RouteDescriptor.with_hook(router, init_event_handlers)
