from __future__ import annotations

import math
from datetime import date, datetime
from typing import Generic, TypeVar
from uuid import UUID

from pydantic import BaseModel, ConfigDict, EmailStr, Field, field_validator

from futsal.models import BookingStatus, DayType, FieldType, PaymentStatus

T = TypeVar("T")


# ---------------------------------------------------------------------------
# Envelope & pagination
# ---------------------------------------------------------------------------


class PageMeta(BaseModel):
    total: int
    page: int
    limit: int
    total_pages: int

    @classmethod
    def build(cls, total: int, page: int, limit: int) -> PageMeta:
        return cls(
            total=total, page=page, limit=limit, total_pages=math.ceil(total / limit)
        )


class ApiResponse(BaseModel, Generic[T]):
    message: str
    data: T
    meta: PageMeta | None = None


class Pagination(BaseModel):
    """Bind to a FastAPI route via Depends(Pagination)."""

    page: int = Field(default=1, ge=1)
    limit: int = Field(default=10, ge=1, le=100)

    @property
    def offset(self) -> int:
        return (self.page - 1) * self.limit


class Page(BaseModel, Generic[T]):
    """What list CRUD methods return: one page of items plus the total count."""

    items: list[T]
    meta: PageMeta


# ---------------------------------------------------------------------------
# Auth
# ---------------------------------------------------------------------------


class CustomerRegister(BaseModel):
    name: str = Field(min_length=1, max_length=100)
    email: EmailStr
    password: str = Field(min_length=6, max_length=72)
    phone: str | None = Field(default=None, max_length=30)


class LoginRequest(BaseModel):
    email: EmailStr
    password: str = Field(min_length=1)


class CustomerResponse(BaseModel):
    id: UUID
    name: str
    email: str
    phone: str | None
    created_at: datetime
    updated_at: datetime

    model_config = ConfigDict(from_attributes=True)


class CustomerSummary(BaseModel):
    id: UUID
    name: str
    email: str
    phone: str | None = None

    model_config = ConfigDict(from_attributes=True)


class AdminSummary(BaseModel):
    id: UUID
    name: str
    email: str

    model_config = ConfigDict(from_attributes=True)


class TokenResponse(BaseModel):
    access_token: str
    token_type: str = "Bearer"
    expires_in: int  # seconds


class CustomerAuthResponse(BaseModel):
    customer: CustomerResponse
    token: TokenResponse


class AdminRegister(BaseModel):
    name: str = Field(min_length=1, max_length=100)
    email: EmailStr
    password: str = Field(min_length=6, max_length=72)
    role_id: UUID
    venue_id: UUID | None = None


class AdminAuthResponse(BaseModel):
    id: UUID
    name: str
    role: str
    access_token: str


class NamedRef(BaseModel):
    id: UUID
    name: str

    model_config = ConfigDict(from_attributes=True)


class AdminProfile(BaseModel):
    id: UUID
    name: str
    email: str
    role: NamedRef
    venue: NamedRef | None
    created_at: datetime
    updated_at: datetime


# ---------------------------------------------------------------------------
# Roles & venues
# ---------------------------------------------------------------------------


class RoleCreate(BaseModel):
    name: str = Field(min_length=1, max_length=50)
    description: str | None = Field(default=None, max_length=500)


class RoleUpdate(BaseModel):
    name: str | None = Field(default=None, min_length=1, max_length=50)
    description: str | None = Field(default=None, max_length=500)


class RoleResponse(BaseModel):
    id: UUID
    name: str
    description: str | None
    admin_count: int = 0
    created_at: datetime
    updated_at: datetime


class VenueCreate(BaseModel):
    name: str = Field(min_length=1, max_length=100)
    address: str = Field(min_length=1, max_length=255)
    description: str | None = Field(default=None, max_length=500)
    latitude: float | None = Field(default=None, ge=-90, le=90)
    longitude: float | None = Field(default=None, ge=-180, le=180)


class VenueUpdate(BaseModel):
    name: str | None = Field(default=None, min_length=1, max_length=100)
    address: str | None = Field(default=None, min_length=1, max_length=255)
    description: str | None = Field(default=None, max_length=500)
    latitude: float | None = Field(default=None, ge=-90, le=90)
    longitude: float | None = Field(default=None, ge=-180, le=180)


class VenueResponse(BaseModel):
    id: UUID
    name: str
    address: str
    description: str | None
    latitude: float | None
    longitude: float | None
    field_count: int = 0
    admin_count: int = 0
    created_at: datetime
    updated_at: datetime


# ---------------------------------------------------------------------------
# Fields & prices
# ---------------------------------------------------------------------------


class FieldPriceCreate(BaseModel):
    day_type: DayType
    start_hour: int = Field(ge=0, le=23)
    end_hour: int = Field(ge=1, le=24)
    price: int = Field(ge=0)


class FieldPriceUpdate(BaseModel):
    day_type: DayType | None = None
    start_hour: int | None = Field(default=None, ge=0, le=23)
    end_hour: int | None = Field(default=None, ge=1, le=24)
    price: int | None = Field(default=None, ge=0)


class FieldPriceResponse(BaseModel):
    id: UUID
    day_type: DayType
    start_hour: int
    end_hour: int
    price: int

    model_config = ConfigDict(from_attributes=True)


class FieldImageResponse(BaseModel):
    id: UUID
    image_url: str
    is_primary: bool
    order: int

    model_config = ConfigDict(from_attributes=True)


class FieldCreate(BaseModel):
    venue_id: UUID
    name: str = Field(min_length=1, max_length=100)
    type: FieldType
    is_active: bool = True
    length_meter: float | None = Field(default=None, gt=0, le=1000)
    width_meter: float | None = Field(default=None, gt=0, le=1000)
    image_urls: list[str] | None = Field(default=None, max_length=10)
    prices: list[FieldPriceCreate] | None = Field(default=None, max_length=50)

    @field_validator("image_urls")
    @classmethod
    def no_blank_urls(cls, v: list[str] | None) -> list[str] | None:
        if v and any(not u or not u.strip() for u in v):
            raise ValueError("image_urls must not contain empty strings")
        return v


class FieldUpdate(BaseModel):
    venue_id: UUID | None = None
    name: str | None = Field(default=None, min_length=1, max_length=100)
    type: FieldType | None = None
    is_active: bool | None = None
    length_meter: float | None = Field(default=None, gt=0, le=1000)
    width_meter: float | None = Field(default=None, gt=0, le=1000)
    # None keeps the current list, [] clears it
    image_urls: list[str] | None = Field(default=None, max_length=10)
    prices: list[FieldPriceCreate] | None = Field(default=None, max_length=50)

    @field_validator("image_urls")
    @classmethod
    def no_blank_urls(cls, v: list[str] | None) -> list[str] | None:
        if v and any(not u or not u.strip() for u in v):
            raise ValueError("image_urls must not contain empty strings")
        return v


class FieldFilters(BaseModel):
    """Bind to a FastAPI route via Depends(FieldFilters)."""

    search: str | None = None
    venue_id: UUID | None = None
    type: FieldType | None = None
    is_active: bool | None = None


class FieldResponse(BaseModel):
    id: UUID
    venue: NamedRef
    name: str
    type: FieldType
    is_active: bool
    length_meter: float | None
    width_meter: float | None
    prices: list[FieldPriceResponse]
    images: list[FieldImageResponse]
    booking_count: int = 0
    created_at: datetime
    updated_at: datetime


class DeletedResponse(BaseModel):
    id: UUID


# ---------------------------------------------------------------------------
# Bookings
# ---------------------------------------------------------------------------


class BookingCreate(BaseModel):
    field_id: UUID
    # ISO-8601 datetime, or a time of day ("14:00" / "14.00") combined with order_date
    start_time: str | None = None
    end_time: str | None = None
    order_date: str | None = None
    start_hour: int | None = Field(default=None, ge=0, le=23)
    duration_hours: int | None = Field(default=None, ge=1, le=24)
    proof_url: str | None = Field(default=None, max_length=2048)


class PaymentProofUpload(BaseModel):
    proof_url: str = Field(min_length=1, max_length=2048)


class BookingCancel(BaseModel):
    reason: str = Field(min_length=1, max_length=1000)


class VerifyPayment(BaseModel):
    approved: bool
    note: str | None = Field(default=None, max_length=1000)


class DisplayStatus(BaseModel):
    label: str
    color: str


class PaymentResponse(BaseModel):
    id: UUID
    proof_url: str
    status: PaymentStatus
    verified_by: AdminSummary | None = None
    verified_at: datetime | None = None
    note: str | None = None
    created_at: datetime


class BookingFieldSummary(BaseModel):
    id: UUID
    name: str
    type: FieldType
    length_meter: float | None = None
    width_meter: float | None = None
    venue: NamedRef | None = None


class BookingResponse(BaseModel):
    id: UUID
    booking_number: str
    customer_id: UUID
    field_id: UUID
    start_time: datetime
    end_time: datetime
    duration_hours: float
    total_price: int
    status: BookingStatus
    display_status: DisplayStatus
    created_at: datetime
    updated_at: datetime


class BookingDetail(BookingResponse):
    field_name: str
    primary_image: str | None
    field: BookingFieldSummary
    customer: CustomerSummary
    payment: PaymentResponse | None


class BookingListItem(BaseModel):
    """Compact row for the customer's own booking list."""

    id: UUID
    booking_number: str
    field_name: str
    status: DisplayStatus
    booking_date: date
    start_time: datetime
    duration_hours: float


class BookingSlot(BaseModel):
    """Minimal occupied slot: reveals no customer identity."""

    start_time: datetime
    end_time: datetime

    model_config = ConfigDict(from_attributes=True)


class BookingVerification(BaseModel):
    booking: BookingDetail
    payment: PaymentResponse


class AdminBookingFilters(BaseModel):
    """Bind to a FastAPI route via Depends(AdminBookingFilters)."""

    search: str | None = None
    status: BookingStatus | None = None
    field_id: UUID | None = None
    venue_id: UUID | None = None
    start_date: datetime | None = None
    end_date: datetime | None = None
    today: bool = False


class DashboardStats(BaseModel):
    today_bookings: int
    active_bookings: int
    monthly_revenue: int
    pending_verification: int


# ---------------------------------------------------------------------------
# Mobile field availability
# ---------------------------------------------------------------------------


class MobileFieldQuery(BaseModel):
    """Bind to a FastAPI route via Depends(MobileFieldQuery)."""

    start_time: datetime | None = None
    end_time: datetime | None = None
    date: str | None = None
    start_hour: int | None = Field(default=None, ge=0, le=23)
    duration_hours: int | None = Field(default=None, ge=1, le=24)
    search: str | None = None
    venue_id: UUID | None = None
    only_available: bool = False
    page: int = Field(default=1, ge=1)
    limit: int = Field(default=20, ge=1, le=100)


class SlotWindow(BaseModel):
    start_time: datetime
    end_time: datetime


class FieldSize(BaseModel):
    length_meter: float | None
    width_meter: float | None


class MobileField(BaseModel):
    id: UUID
    name: str
    type: FieldType
    venue: NamedRef
    image_url: str | None
    size: FieldSize
    price_per_hour: int | None
    is_available: bool


class MobileFieldDetail(MobileField):
    images: list[FieldImageResponse]


class MobileFieldsResponse(ApiResponse[list[MobileField]]):
    slot: SlotWindow


class MobileFieldDetailResponse(ApiResponse[MobileFieldDetail | None]):
    slot: SlotWindow
