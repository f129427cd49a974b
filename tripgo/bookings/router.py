"""Bookings router — customer reservations and the admin booking desk.

Customer routes (``/api/v1/bookings``):
    POST /cruise, /hotel, /package   — Create a booking (price computed server-side)
    GET  ""                          — My bookings
    GET  /{id}                       — One booking (owner or booking staff)
    PUT  /{id}                       — Edit a pending booking
    POST /{id}/cancel                — Cancel
    POST /{id}/confirm-payment       — Mark paid and confirm

Admin routes (``/api/v1/admin/bookings``) require ``booking:manage``.
"""


import uuid
from datetime import date
from typing import Optional

from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.ext.asyncio import AsyncSession

from tripgo.auth.dependencies import get_current_user, require_permission
from tripgo.bookings.schemas import (
    AdminBookingResponse,
    ApproveRequest,
    AssignAgentRequest,
    BookingResponse,
    BookingUpdate,
    BulkStatusUpdate,
    CancelRequest,
    CruiseBookingCreate,
    HotelBookingCreate,
    PackageBookingCreate,
    PaymentConfirmation,
    RejectRequest,
)
from tripgo.bookings.service import BookingAdminService, BookingService, is_booking_staff
from tripgo.common.constants import BookingStatus, BookingType, PaymentStatus
from tripgo.common.pagination import PaginationParams
from tripgo.common.responses import paginated_response, success_response
from tripgo.database import get_db
from tripgo.tenants.dependencies import get_current_tenant
from tripgo.tenants.models import Tenant
from tripgo.users.models import User

router = APIRouter(prefix="", tags=["bookings"])
admin_router = APIRouter(prefix="", tags=["admin-bookings"])

_manage = require_permission("booking:manage")


def _view(booking, user: User):
    if is_booking_staff(user):
        return AdminBookingResponse.model_validate(booking)
    return BookingResponse.model_validate(booking)


# ═════════════════════════════════════════════════════════════════════
# Customer
# ═════════════════════════════════════════════════════════════════════


@router.post("/cruise", status_code=status.HTTP_201_CREATED)
async def create_cruise_booking(
    body: CruiseBookingCreate,
    db: AsyncSession = Depends(get_db),
    tenant: Tenant = Depends(get_current_tenant),
    current_user: User = Depends(require_permission("booking:create")),
):
    booking = await BookingService.create_cruise_booking(db, tenant.id, current_user, body)
    return success_response(BookingResponse.model_validate(booking), "Booking created successfully")


@router.post("/hotel", status_code=status.HTTP_201_CREATED)
async def create_hotel_booking(
    body: HotelBookingCreate,
    db: AsyncSession = Depends(get_db),
    tenant: Tenant = Depends(get_current_tenant),
    current_user: User = Depends(require_permission("booking:create")),
):
    booking = await BookingService.create_hotel_booking(db, tenant.id, current_user, body)
    return success_response(BookingResponse.model_validate(booking), "Booking created successfully")


@router.post("/package", status_code=status.HTTP_201_CREATED)
async def create_package_booking(
    body: PackageBookingCreate,
    db: AsyncSession = Depends(get_db),
    tenant: Tenant = Depends(get_current_tenant),
    current_user: User = Depends(require_permission("booking:create")),
):
    booking = await BookingService.create_package_booking(db, tenant.id, current_user, body)
    return success_response(BookingResponse.model_validate(booking), "Booking created successfully")


@router.get("")
async def list_my_bookings(
    pagination: PaginationParams = Depends(),
    status_filter: Optional[BookingStatus] = Query(None, alias="status"),
    booking_type: Optional[BookingType] = Query(None),
    db: AsyncSession = Depends(get_db),
    tenant: Tenant = Depends(get_current_tenant),
    current_user: User = Depends(get_current_user),
):
    result = await BookingService.list_for_user(
        db, tenant.id, current_user.id, pagination,
        status=status_filter, booking_type=booking_type,
    )
    return paginated_response(
        [BookingResponse.model_validate(b) for b in result.data], result.meta,
    )


@router.get("/{booking_id}")
async def get_booking(
    booking_id: uuid.UUID,
    db: AsyncSession = Depends(get_db),
    tenant: Tenant = Depends(get_current_tenant),
    current_user: User = Depends(get_current_user),
):
    booking = await BookingService.get_for_user(db, tenant.id, booking_id, current_user)
    return success_response(_view(booking, current_user))


@router.put("/{booking_id}")
async def update_booking(
    booking_id: uuid.UUID,
    body: BookingUpdate,
    db: AsyncSession = Depends(get_db),
    tenant: Tenant = Depends(get_current_tenant),
    current_user: User = Depends(get_current_user),
):
    booking = await BookingService.update_booking(db, tenant.id, booking_id, current_user, body)
    return success_response(BookingResponse.model_validate(booking), "Booking updated successfully")


@router.post("/{booking_id}/cancel")
async def cancel_booking(
    booking_id: uuid.UUID,
    body: Optional[CancelRequest] = None,
    db: AsyncSession = Depends(get_db),
    tenant: Tenant = Depends(get_current_tenant),
    current_user: User = Depends(get_current_user),
):
    booking = await BookingService.cancel_booking(
        db, tenant.id, booking_id, current_user, body.reason if body else None,
    )
    return success_response(_view(booking, current_user), "Booking cancelled")


@router.post("/{booking_id}/confirm-payment")
async def confirm_payment(
    booking_id: uuid.UUID,
    body: Optional[PaymentConfirmation] = None,
    db: AsyncSession = Depends(get_db),
    tenant: Tenant = Depends(get_current_tenant),
    current_user: User = Depends(get_current_user),
):
    booking = await BookingService.confirm_payment(
        db, tenant.id, booking_id, current_user, body.payment_reference if body else None,
    )
    return success_response(_view(booking, current_user), "Payment confirmed")


# ═════════════════════════════════════════════════════════════════════
# Admin desk
# ═════════════════════════════════════════════════════════════════════


@admin_router.get("")
async def admin_list_bookings(
    pagination: PaginationParams = Depends(),
    status_filter: Optional[BookingStatus] = Query(None, alias="status"),
    booking_type: Optional[BookingType] = Query(None),
    payment_status: Optional[PaymentStatus] = Query(None),
    date_from: Optional[date] = Query(None),
    date_to: Optional[date] = Query(None),
    assigned_agent_id: Optional[uuid.UUID] = Query(None),
    search: Optional[str] = Query(None, max_length=100),
    db: AsyncSession = Depends(get_db),
    tenant: Tenant = Depends(get_current_tenant),
    current_user: User = Depends(_manage),
):
    result = await BookingAdminService.list_bookings(
        db,
        tenant.id,
        pagination,
        status=status_filter,
        booking_type=booking_type,
        payment_status=payment_status,
        date_from=date_from,
        date_to=date_to,
        assigned_agent_id=assigned_agent_id,
        search=search,
    )
    return paginated_response(
        [AdminBookingResponse.model_validate(b) for b in result.data], result.meta,
    )


@admin_router.get("/overview")
async def admin_overview(
    db: AsyncSession = Depends(get_db),
    tenant: Tenant = Depends(get_current_tenant),
    current_user: User = Depends(_manage),
):
    return success_response(await BookingAdminService.overview(db, tenant.id))


@admin_router.get("/pending-approval")
async def admin_pending(
    pagination: PaginationParams = Depends(),
    db: AsyncSession = Depends(get_db),
    tenant: Tenant = Depends(get_current_tenant),
    current_user: User = Depends(_manage),
):
    result = await BookingAdminService.pending_approval(db, tenant.id, pagination)
    return paginated_response(
        [AdminBookingResponse.model_validate(b) for b in result.data], result.meta,
    )


@admin_router.post("/bulk-update")
async def admin_bulk_update(
    body: BulkStatusUpdate,
    db: AsyncSession = Depends(get_db),
    tenant: Tenant = Depends(get_current_tenant),
    current_user: User = Depends(_manage),
):
    result = await BookingAdminService.bulk_update(
        db, tenant.id, body.booking_ids, body.status, actor=current_user, notes=body.notes,
    )
    return success_response(result, f"{len(result.updated)} booking(s) updated")


# ── Reports ─────────────────────────────────────────────────────────

@admin_router.get("/reports/daily")
async def report_daily(
    report_date: Optional[date] = Query(None, alias="date"),
    db: AsyncSession = Depends(get_db),
    tenant: Tenant = Depends(get_current_tenant),
    current_user: User = Depends(_manage),
):
    return success_response(await BookingAdminService.daily_report(db, tenant.id, report_date))


@admin_router.get("/reports/monthly")
async def report_monthly(
    year: Optional[int] = Query(None, ge=2000, le=2100),
    month: Optional[int] = Query(None, ge=1, le=12),
    db: AsyncSession = Depends(get_db),
    tenant: Tenant = Depends(get_current_tenant),
    current_user: User = Depends(_manage),
):
    today = date.today()
    report = await BookingAdminService.monthly_report(
        db, tenant.id, year or today.year, month or today.month,
    )
    return success_response(report)


@admin_router.get("/reports/cancellations")
async def report_cancellations(
    days: int = Query(30, ge=1, le=365),
    db: AsyncSession = Depends(get_db),
    tenant: Tenant = Depends(get_current_tenant),
    current_user: User = Depends(_manage),
):
    return success_response(await BookingAdminService.cancellation_report(db, tenant.id, days))


# ── Single booking actions ──────────────────────────────────────────

@admin_router.get("/{booking_id}")
async def admin_get_booking(
    booking_id: uuid.UUID,
    db: AsyncSession = Depends(get_db),
    tenant: Tenant = Depends(get_current_tenant),
    current_user: User = Depends(_manage),
):
    booking = await BookingService.load(db, tenant.id, booking_id)
    return success_response(AdminBookingResponse.model_validate(booking))


@admin_router.post("/{booking_id}/approve")
async def admin_approve(
    booking_id: uuid.UUID,
    body: Optional[ApproveRequest] = None,
    db: AsyncSession = Depends(get_db),
    tenant: Tenant = Depends(get_current_tenant),
    current_user: User = Depends(_manage),
):
    booking = await BookingAdminService.approve(
        db, tenant.id, booking_id, actor=current_user, notes=body.notes if body else None,
    )
    return success_response(AdminBookingResponse.model_validate(booking), "Booking approved")


@admin_router.post("/{booking_id}/reject")
async def admin_reject(
    booking_id: uuid.UUID,
    body: RejectRequest,
    db: AsyncSession = Depends(get_db),
    tenant: Tenant = Depends(get_current_tenant),
    current_user: User = Depends(_manage),
):
    booking = await BookingAdminService.reject(
        db, tenant.id, booking_id, actor=current_user, reason=body.reason,
    )
    return success_response(AdminBookingResponse.model_validate(booking), "Booking rejected")


@admin_router.post("/{booking_id}/complete")
async def admin_complete(
    booking_id: uuid.UUID,
    db: AsyncSession = Depends(get_db),
    tenant: Tenant = Depends(get_current_tenant),
    current_user: User = Depends(_manage),
):
    booking = await BookingAdminService.complete(db, tenant.id, booking_id, actor=current_user)
    return success_response(AdminBookingResponse.model_validate(booking), "Booking completed")


@admin_router.put("/{booking_id}/assign-agent")
async def admin_assign_agent(
    booking_id: uuid.UUID,
    body: AssignAgentRequest,
    db: AsyncSession = Depends(get_db),
    tenant: Tenant = Depends(get_current_tenant),
    current_user: User = Depends(_manage),
):
    booking = await BookingAdminService.assign_agent(
        db, tenant.id, booking_id, body.agent_id, actor=current_user,
    )
    return success_response(AdminBookingResponse.model_validate(booking), "Agent assigned")


@admin_router.post("/{booking_id}/send-reminder")
async def admin_send_reminder(
    booking_id: uuid.UUID,
    db: AsyncSession = Depends(get_db),
    tenant: Tenant = Depends(get_current_tenant),
    current_user: User = Depends(_manage),
):
    booking = await BookingAdminService.send_reminder(db, tenant.id, booking_id, actor=current_user)
    return success_response(AdminBookingResponse.model_validate(booking), "Reminder sent")


@admin_router.post("/{booking_id}/send-confirmation")
async def admin_send_confirmation(
    booking_id: uuid.UUID,
    db: AsyncSession = Depends(get_db),
    tenant: Tenant = Depends(get_current_tenant),
    current_user: User = Depends(_manage),
):
    booking = await BookingAdminService.send_confirmation(db, tenant.id, booking_id, actor=current_user)
    return success_response(AdminBookingResponse.model_validate(booking), "Confirmation sent")
