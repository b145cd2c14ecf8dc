"""Pydantic schemas used across the project."""
from datetime import datetime
from typing import Any, Generic, Optional, TypeVar

from pydantic import BaseModel, ConfigDict, Field

DataT = TypeVar("DataT")


class ApiResponse(BaseModel, Generic[DataT]):
    """Envelope wrapping every JSON response."""

    success: bool = True
    data: Optional[DataT] = None
    message: Optional[str] = None
    error: Optional[str] = None


class PageResponse(BaseModel, Generic[DataT]):
    items: list[DataT]
    page: int
    limit: int
    total: int
    pages: int

    @classmethod
    def from_page(cls, page: Any, schema: type[BaseModel]) -> "PageResponse":
        return cls(
            items=[schema.model_validate(item) for item in page.items],
            page=page.page,
            limit=page.limit,
            total=page.total,
            pages=page.pages,
        )


class TokenData(BaseModel):
    account_id: str
    username: str
    role: str


class LoginRequest(BaseModel):
    username: str = Field(..., min_length=3, max_length=50)
    password: str = Field(..., min_length=6)


class AdminProfileResponse(BaseModel):
    id: str
    username: str
    name: str
    role: str
    status: str
    email: Optional[str] = None
    phone: Optional[str] = None
    remarks: Optional[str] = None
    created_by: Optional[str] = None
    last_login_at: Optional[datetime] = None
    last_login_ip: Optional[str] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    model_config = ConfigDict(from_attributes=True)


class LoginResponse(BaseModel):
    access_token: str
    token_type: str = "bearer"
    expires_in: int
    user: AdminProfileResponse


class PasswordChangeRequest(BaseModel):
    current_password: str
    new_password: str = Field(..., min_length=6)


class AdminUserCreate(BaseModel):
    username: str = Field(..., min_length=3, max_length=50)
    password: str = Field(..., min_length=6)
    name: str = Field(..., min_length=1, max_length=50)
    email: Optional[str] = Field(default=None, max_length=100)
    phone: Optional[str] = None
    role: str = "admin"
    status: str = "active"
    remarks: Optional[str] = Field(default=None, max_length=500)


class AdminUserUpdate(BaseModel):
    name: Optional[str] = Field(default=None, max_length=50)
    email: Optional[str] = Field(default=None, max_length=100)
    phone: Optional[str] = None
    role: Optional[str] = None
    status: Optional[str] = None
    remarks: Optional[str] = Field(default=None, max_length=500)


class AdminStatusUpdate(BaseModel):
    status: str


class RegistrationCreate(BaseModel):
    team_name: str = Field(..., min_length=1, max_length=100)
    leader_name: str = Field(..., min_length=1, max_length=50)
    leader_phone: str
    leader_email: Optional[str] = Field(default=None, max_length=100)
    leader_organization: Optional[str] = Field(default=None, max_length=100)
    members: list[dict[str, Any]] = Field(default_factory=list)
    total_amount_cents: int = Field(default=0, ge=0)
    remarks: Optional[str] = None


class RegistrationUpdate(BaseModel):
    team_name: Optional[str] = Field(default=None, min_length=1, max_length=100)
    leader_name: Optional[str] = Field(default=None, min_length=1, max_length=50)
    leader_phone: Optional[str] = None
    leader_email: Optional[str] = Field(default=None, max_length=100)
    leader_organization: Optional[str] = None
    members: Optional[list[dict[str, Any]]] = None
    status: Optional[str] = None
    total_amount_cents: Optional[int] = Field(default=None, ge=0)
    remarks: Optional[str] = None
    reject_reason: Optional[str] = None


class RegistrationResponse(BaseModel):
    id: str
    team_name: str
    leader_name: str
    leader_phone: str
    leader_email: Optional[str] = None
    leader_organization: Optional[str] = None
    members: list[dict[str, Any]] = Field(default_factory=list)
    status: Optional[str] = None
    payment_status: str
    total_amount_cents: int
    paid_amount_cents: int
    paid_at: Optional[datetime] = None
    reviewed_at: Optional[datetime] = None
    remarks: Optional[str] = None
    reject_reason: Optional[str] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    model_config = ConfigDict(from_attributes=True)


class PaymentCreate(BaseModel):
    registration_id: str
    amount_cents: int = Field(..., gt=0)
    payment_method: str = "other"
    payer_name: Optional[str] = None
    payer_phone: Optional[str] = None
    payer_email: Optional[str] = Field(default=None, max_length=100)
    remarks: Optional[str] = Field(default=None, max_length=500)


class PaymentResponse(BaseModel):
    id: str
    order_number: str
    registration_id: Optional[str] = None
    team_name: Optional[str] = None
    payer_name: Optional[str] = None
    payer_phone: Optional[str] = None
    payer_email: Optional[str] = None
    payment_method: str
    amount_cents: int
    status: Optional[str] = None
    transaction_id: Optional[str] = None
    paid_at: Optional[datetime] = None
    refunded_at: Optional[datetime] = None
    remarks: Optional[str] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    model_config = ConfigDict(from_attributes=True)


class PaymentStatusUpdate(BaseModel):
    status: str
    remarks: Optional[str] = Field(default=None, max_length=500)


class RefundRequest(BaseModel):
    reason: Optional[str] = Field(default=None, max_length=500)


class AmountBucketResponse(BaseModel):
    count: int
    amount: int


class RegistrationStatsResponse(BaseModel):
    total: int
    today: int
    statuses: dict[str, int]


class PaymentStatsResponse(BaseModel):
    total: int
    today: int
    amount: int
    today_amount: int
    statuses: dict[str, AmountBucketResponse]


class StatsSnapshotResponse(BaseModel):
    registration: RegistrationStatsResponse
    payment: PaymentStatsResponse

    model_config = ConfigDict(from_attributes=True)


class PublicStatsResponse(BaseModel):
    total_views: int
    today_views: int
    today_visitors: int
    registrations: int


class PageViewResponse(BaseModel):
    date: str
    count: int

    model_config = ConfigDict(from_attributes=True)


class HealthResponse(BaseModel):
    status: str
    version: str
    environment: str


class ServerTimeResponse(BaseModel):
    server_time: datetime
    timestamp: int
    timezone: str
