"""Booking Pydantic schemas."""


import uuid
from datetime import date, datetime
from decimal import Decimal
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field, model_validator

from tripgo.checkout.schemas import CruiseCheckoutInput
from tripgo.common.constants import BookingStatus, BookingType, PaymentStatus
from tripgo.users.schemas import UserBrief


# ═════════════════════════════════════════════════════════════════════
# Customer requests
# ═════════════════════════════════════════════════════════════════════


class CruiseBookingCreate(CruiseCheckoutInput):
    cruise_id: uuid.UUID
    special_requests: Optional[str] = Field(None, max_length=2000)
    # Shown total from the client; accepted but never used for pricing
    total_amount: Optional[Decimal] = None


class HotelBookingCreate(BaseModel):
    hotel_id: uuid.UUID
    check_in: date
    check_out: date
    guests: int = Field(..., ge=1, le=50)
    special_requests: Optional[str] = Field(None, max_length=2000)

    @model_validator(mode="after")
    def _check_out_after_check_in(self) -> "HotelBookingCreate":
        if self.check_out <= self.check_in:
            raise ValueError("check_out must be after check_in")
        return self


class PackageBookingCreate(BaseModel):
    package_id: uuid.UUID
    guests: int = Field(..., ge=1, le=50)
    travel_date: Optional[date] = None
    special_requests: Optional[str] = Field(None, max_length=2000)


class BookingUpdate(BaseModel):
    """Customer edits while the booking is still pending."""

    special_requests: Optional[str] = Field(None, max_length=2000)
    guests: Optional[int] = Field(None, ge=1, le=50)
    adults: Optional[int] = Field(None, ge=1, le=20)
    children: Optional[int] = Field(None, ge=0, le=20)


class CancelRequest(BaseModel):
    reason: Optional[str] = Field(None, max_length=1000)


class PaymentConfirmation(BaseModel):
    payment_reference: Optional[str] = Field(None, max_length=100)


# ═════════════════════════════════════════════════════════════════════
# Admin requests
# ═════════════════════════════════════════════════════════════════════


class ApproveRequest(BaseModel):
    notes: Optional[str] = Field(None, max_length=2000)


class RejectRequest(BaseModel):
    reason: str = Field(..., min_length=1, max_length=1000)


class AssignAgentRequest(BaseModel):
    agent_id: uuid.UUID


class BulkStatusUpdate(BaseModel):
    booking_ids: list[uuid.UUID] = Field(..., min_length=1, max_length=200)
    status: BookingStatus
    notes: Optional[str] = Field(None, max_length=2000)


# ═════════════════════════════════════════════════════════════════════
# Responses
# ═════════════════════════════════════════════════════════════════════


class BookingResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: uuid.UUID
    reference: str
    booking_type: BookingType
    user_id: uuid.UUID
    cruise_id: Optional[uuid.UUID] = None
    hotel_id: Optional[uuid.UUID] = None
    package_id: Optional[uuid.UUID] = None
    item_name: Optional[str] = None
    guests: int
    adults: int
    children: int
    sailing_date: Optional[date] = None
    travel_date: Optional[date] = None
    check_in: Optional[date] = None
    check_out: Optional[date] = None
    nights: Optional[int] = None
    cabin_type: Optional[str] = None
    addons: list[str] = []
    promo_code: Optional[str] = None
    subtotal: Decimal
    discount: Decimal
    taxes: Decimal
    fees: Decimal
    total_amount: Decimal
    status: BookingStatus
    payment_status: PaymentStatus
    payment_reference: Optional[str] = None
    special_requests: Optional[str] = None
    cancellation_reason: Optional[str] = None
    confirmed_at: Optional[datetime] = None
    cancelled_at: Optional[datetime] = None
    created_at: datetime
    updated_at: datetime


class AdminBookingResponse(BookingResponse):
    user: Optional[UserBrief] = None
    assigned_agent: Optional[UserBrief] = None
    admin_notes: Optional[str] = None
    completed_at: Optional[datetime] = None
    reminder_sent_at: Optional[datetime] = None
    confirmation_sent_at: Optional[datetime] = None


class BulkUpdateResult(BaseModel):
    updated: list[uuid.UUID] = []
    skipped: dict[str, str] = {}


class BookingOverview(BaseModel):
    total: int
    by_status: dict[str, int]
    confirmed_revenue: Decimal
    pending_approval: int
    recent: list[AdminBookingResponse]


class DailyReport(BaseModel):
    report_date: date
    count: int
    confirmed_revenue: Decimal
    by_status: dict[str, int]
    by_type: dict[str, int]


class DayPoint(BaseModel):
    day: date
    count: int
    revenue: Decimal = Decimal("0")


class MonthlyReport(BaseModel):
    year: int
    month: int
    count: int
    confirmed_revenue: Decimal
    days: list[DayPoint]


class CancellationReport(BaseModel):
    period_days: int
    start_date: date
    end_date: date
    count: int
    by_type: dict[str, int]
    trend: list[DayPoint]
