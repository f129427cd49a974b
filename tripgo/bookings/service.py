"""Booking service layer — customer reservations, admin desk, reports.

Prices are always computed here: cruise bookings go through the checkout
calculator after an availability check, hotels are ``price_per_night *
nights * guests`` and packages ``price * guests``.
"""

from __future__ import annotations

import logging
import uuid
from collections import Counter, defaultdict
from datetime import date, datetime, time, timedelta, timezone
from decimal import Decimal
from typing import Any, Iterable, Optional, Sequence

from sqlalchemy import func, or_, select
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from tripgo.bookings.models import Booking
from tripgo.bookings.schemas import (
    AdminBookingResponse,
    BookingOverview,
    BookingUpdate,
    BulkUpdateResult,
    CancellationReport,
    CruiseBookingCreate,
    DailyReport,
    DayPoint,
    HotelBookingCreate,
    MonthlyReport,
    PackageBookingCreate,
)
from tripgo.catalog.service import HotelService, PackageService
from tripgo.checkout.schemas import CruiseCheckoutInput
from tripgo.checkout.service import CheckoutService
from tripgo.common.audit import create_audit_entry
from tripgo.common.constants import (
    BOOKING_REFERENCE_PREFIX,
    PERMISSIONS,
    BookingStatus,
    BookingType,
    PaymentStatus,
    UserRole,
)
from tripgo.common.exceptions import (
    BadRequestException,
    ConflictError,
    ForbiddenException,
    NotFoundException,
    ValidationException,
)
from tripgo.common.filters import apply_filters
from tripgo.common.pagination import PaginatedResponse, PaginationParams, paginate
from tripgo.users.models import User

logger = logging.getLogger(__name__)

# Allowed status transitions (admin desk and bulk updates)
_TRANSITIONS: dict[BookingStatus, set[BookingStatus]] = {
    BookingStatus.pending: {BookingStatus.confirmed, BookingStatus.cancelled},
    BookingStatus.confirmed: {BookingStatus.completed, BookingStatus.cancelled},
    BookingStatus.cancelled: set(),
    BookingStatus.completed: set(),
}

# Statuses summed into every revenue figure
REVENUE_STATUSES = (BookingStatus.confirmed, BookingStatus.completed)


def _now() -> datetime:
    return datetime.now(timezone.utc)


def _today() -> date:
    return _now().date()


def _day_bounds(start: date, end_inclusive: date) -> tuple[datetime, datetime]:
    return (
        datetime.combine(start, time.min, tzinfo=timezone.utc),
        datetime.combine(end_inclusive + timedelta(days=1), time.min, tzinfo=timezone.utc),
    )


def _created_day(booking: Booking) -> date:
    return booking.created_at.date()


def is_booking_staff(user: User) -> bool:
    return "booking:read_all" in PERMISSIONS.get(user.role, [])


def _with_relations():
    return (
        selectinload(Booking.user),
        selectinload(Booking.assigned_agent),
        selectinload(Booking.cruise),
        selectinload(Booking.hotel),
        selectinload(Booking.package),
    )


class BookingService:
    """Customer-facing booking lifecycle."""

    # ── Lookup ──────────────────────────────────────────────────────

    @staticmethod
    async def load(db: AsyncSession, tenant_id: uuid.UUID, booking_id: uuid.UUID) -> Booking:
        result = await db.execute(
            select(Booking)
            .where(Booking.id == booking_id, Booking.tenant_id == tenant_id)
            .options(*_with_relations())
            .execution_options(populate_existing=True),
        )
        booking = result.scalars().first()
        if booking is None:
            raise NotFoundException("Booking", str(booking_id))
        return booking

    @staticmethod
    async def get_for_user(
        db: AsyncSession,
        tenant_id: uuid.UUID,
        booking_id: uuid.UUID,
        user: User,
    ) -> Booking:
        """Owner or booking staff only; others get a 404 rather than a hint."""
        booking = await BookingService.load(db, tenant_id, booking_id)
        if booking.user_id != user.id and not is_booking_staff(user):
            raise NotFoundException("Booking", str(booking_id))
        return booking

    @staticmethod
    async def list_for_user(
        db: AsyncSession,
        tenant_id: uuid.UUID,
        user_id: uuid.UUID,
        pagination: PaginationParams,
        *,
        status: Optional[BookingStatus] = None,
        booking_type: Optional[BookingType] = None,
    ) -> PaginatedResponse:
        query = (
            select(Booking)
            .where(Booking.tenant_id == tenant_id, Booking.user_id == user_id)
            .options(*_with_relations())
            .order_by(Booking.created_at.desc())
        )
        query = apply_filters(query, Booking, {"status": status, "booking_type": booking_type})
        return await paginate(db, query, pagination, model=Booking)

    # ── Create ──────────────────────────────────────────────────────

    @staticmethod
    async def _new_reference(db: AsyncSession) -> str:
        while True:
            reference = f"{BOOKING_REFERENCE_PREFIX}-{uuid.uuid4().hex[:8].upper()}"
            taken = await db.execute(select(Booking.id).where(Booking.reference == reference))
            if taken.first() is None:
                return reference

    @staticmethod
    async def _persist(
        db: AsyncSession,
        booking: Booking,
        *,
        actor_id: uuid.UUID,
    ) -> Booking:
        booking.reference = await BookingService._new_reference(db)
        db.add(booking)
        await db.flush()

        await create_audit_entry(
            db,
            action="create",
            entity_type="booking",
            entity_id=booking.id,
            tenant_id=booking.tenant_id,
            actor_id=actor_id,
            new_values={
                "reference": booking.reference,
                "booking_type": booking.booking_type.value,
                "total_amount": str(booking.total_amount),
            },
        )
        logger.info(
            "Booking %s created (%s, total %s)",
            booking.reference, booking.booking_type.value, booking.total_amount,
        )
        return await BookingService.load(db, booking.tenant_id, booking.id)

    @staticmethod
    async def create_cruise_booking(
        db: AsyncSession,
        tenant_id: uuid.UUID,
        user: User,
        data: CruiseBookingCreate,
    ) -> Booking:
        """Re-run availability and pricing; 409 when the sailing cannot take the party."""
        checkout = await CheckoutService.quote_cruise(db, tenant_id, data.cruise_id, data)
        if not checkout.bookable:
            raise ConflictError(
                "sailing_date",
                data.sailing_date.isoformat(),
                detail=checkout.availability.reason or "Cruise is not available for the selected date.",
            )

        quote = checkout.quote
        if data.total_amount is not None and Decimal(data.total_amount) != quote.total:
            logger.info(
                "Client total %s differs from computed %s for cruise %s",
                data.total_amount, quote.total, data.cruise_id,
            )

        booking = Booking(
            tenant_id=tenant_id,
            user_id=user.id,
            booking_type=BookingType.cruise,
            cruise_id=data.cruise_id,
            guests=quote.travelers,
            adults=quote.adults,
            children=quote.children,
            sailing_date=data.sailing_date,
            cabin_type=quote.cabin,
            addons=quote.addons,
            promo_code=quote.promo_code,
            subtotal=quote.subtotal,
            discount=quote.discount,
            taxes=quote.taxes,
            fees=quote.fees,
            total_amount=quote.total,
            special_requests=data.special_requests,
        )
        return await BookingService._persist(db, booking, actor_id=user.id)

    @staticmethod
    async def create_hotel_booking(
        db: AsyncSession,
        tenant_id: uuid.UUID,
        user: User,
        data: HotelBookingCreate,
    ) -> Booking:
        if data.check_in < _today():
            raise ValidationException({"check_in": ["Check-in date cannot be in the past."]})

        hotel = await HotelService.get(db, tenant_id, data.hotel_id, include_inactive=False)
        nights = (data.check_out - data.check_in).days
        total = Decimal(hotel.price_per_night) * nights * data.guests

        booking = Booking(
            tenant_id=tenant_id,
            user_id=user.id,
            booking_type=BookingType.hotel,
            hotel_id=hotel.id,
            guests=data.guests,
            adults=data.guests,
            children=0,
            check_in=data.check_in,
            check_out=data.check_out,
            subtotal=total,
            total_amount=total,
            special_requests=data.special_requests,
        )
        return await BookingService._persist(db, booking, actor_id=user.id)

    @staticmethod
    async def create_package_booking(
        db: AsyncSession,
        tenant_id: uuid.UUID,
        user: User,
        data: PackageBookingCreate,
    ) -> Booking:
        if data.travel_date is not None and data.travel_date <= _today():
            raise ValidationException({"travel_date": ["Travel date must be in the future."]})

        package = await PackageService.get(db, tenant_id, data.package_id, include_inactive=False)
        total = Decimal(package.price) * data.guests

        booking = Booking(
            tenant_id=tenant_id,
            user_id=user.id,
            booking_type=BookingType.package,
            package_id=package.id,
            guests=data.guests,
            adults=data.guests,
            children=0,
            travel_date=data.travel_date,
            subtotal=total,
            total_amount=total,
            special_requests=data.special_requests,
        )
        return await BookingService._persist(db, booking, actor_id=user.id)

    # ── Update / cancel / pay ───────────────────────────────────────

    @staticmethod
    async def update_booking(
        db: AsyncSession,
        tenant_id: uuid.UUID,
        booking_id: uuid.UUID,
        user: User,
        data: BookingUpdate,
    ) -> Booking:
        booking = await BookingService.load(db, tenant_id, booking_id)
        if booking.user_id != user.id:
            raise NotFoundException("Booking", str(booking_id))
        if booking.status != BookingStatus.pending:
            raise BadRequestException(
                f"Booking cannot be modified once it is {booking.status.value}.",
            )

        changes = data.model_dump(exclude_unset=True)
        if "special_requests" in changes:
            booking.special_requests = changes["special_requests"]

        if booking.booking_type == BookingType.cruise:
            if {"adults", "children", "guests"} & changes.keys():
                await BookingService._reprice_cruise(db, booking, changes)
        elif changes.get("guests") is not None:
            guests = changes["guests"]
            if booking.booking_type == BookingType.hotel:
                unit = Decimal(booking.hotel.price_per_night) * (booking.nights or 0)
            else:
                unit = Decimal(booking.package.price)
            booking.guests = guests
            booking.adults = guests
            booking.subtotal = unit * guests
            booking.total_amount = unit * guests

        await db.flush()
        return await BookingService.load(db, tenant_id, booking.id)

    @staticmethod
    async def _reprice_cruise(db: AsyncSession, booking: Booking, changes: dict[str, Any]) -> None:
        adults = changes.get("adults") or booking.adults
        children = changes.get("children", booking.children) or 0
        if "guests" in changes and "adults" not in changes and "children" not in changes:
            adults = changes["guests"] - children
            if adults < 1:
                raise ValidationException({"guests": [
                    f"Guests must cover at least one adult plus {children} children.",
                ]})
        if booking.cruise_id is None or booking.sailing_date is None:
            raise BadRequestException("The cruise for this booking is no longer available.")

        checkout = await CheckoutService.quote_cruise(
            db,
            booking.tenant_id,
            booking.cruise_id,
            CruiseCheckoutInput(
                sailing_date=booking.sailing_date,
                adults=adults,
                children=children,
                cabin=booking.cabin_type or "Interior",
                addons=list(booking.addons or []),
                promo_code=booking.promo_code,
            ),
            exclude_booking_id=booking.id,
        )
        if not checkout.bookable:
            raise ConflictError(
                "guests", adults + children, detail=checkout.availability.reason,
            )
        quote = checkout.quote
        booking.adults = quote.adults
        booking.children = quote.children
        booking.guests = quote.travelers
        booking.subtotal = quote.subtotal
        booking.discount = quote.discount
        booking.taxes = quote.taxes
        booking.fees = quote.fees
        booking.total_amount = quote.total

    @staticmethod
    async def cancel_booking(
        db: AsyncSession,
        tenant_id: uuid.UUID,
        booking_id: uuid.UUID,
        user: User,
        reason: Optional[str] = None,
    ) -> Booking:
        booking = await BookingService.get_for_user(db, tenant_id, booking_id, user)
        if booking.status in (BookingStatus.cancelled, BookingStatus.completed):
            raise BadRequestException(f"Booking is already {booking.status.value}.")

        BookingService._mark_cancelled(booking, reason)
        await db.flush()
        await create_audit_entry(
            db,
            action="cancel",
            entity_type="booking",
            entity_id=booking.id,
            tenant_id=tenant_id,
            actor_id=user.id,
            new_values={"reason": reason},
        )
        logger.info("Booking %s cancelled by %s", booking.reference, user.id)
        return await BookingService.load(db, tenant_id, booking.id)

    @staticmethod
    async def confirm_payment(
        db: AsyncSession,
        tenant_id: uuid.UUID,
        booking_id: uuid.UUID,
        user: User,
        payment_reference: Optional[str] = None,
    ) -> Booking:
        booking = await BookingService.get_for_user(db, tenant_id, booking_id, user)
        if booking.status != BookingStatus.pending:
            raise BadRequestException(f"Booking is {booking.status.value}; payment cannot be confirmed.")
        if booking.payment_status == PaymentStatus.paid:
            raise BadRequestException("Booking is already paid.")

        booking.status = BookingStatus.confirmed
        booking.payment_status = PaymentStatus.paid
        booking.payment_reference = payment_reference
        booking.confirmed_at = _now()
        await db.flush()

        await create_audit_entry(
            db,
            action="confirm_payment",
            entity_type="booking",
            entity_id=booking.id,
            tenant_id=tenant_id,
            actor_id=user.id,
            new_values={"payment_reference": payment_reference},
        )
        logger.info("Payment confirmed for booking %s", booking.reference)
        return await BookingService.load(db, tenant_id, booking.id)

    @staticmethod
    def _mark_cancelled(booking: Booking, reason: Optional[str]) -> None:
        booking.status = BookingStatus.cancelled
        booking.cancelled_at = _now()
        booking.cancellation_reason = reason
        if booking.payment_status == PaymentStatus.paid:
            booking.payment_status = PaymentStatus.refunded


# ═════════════════════════════════════════════════════════════════════
# Admin desk
# ═════════════════════════════════════════════════════════════════════


class BookingAdminService:
    """Back-office booking management and reporting."""

    @staticmethod
    async def list_bookings(
        db: AsyncSession,
        tenant_id: uuid.UUID,
        pagination: PaginationParams,
        *,
        status: Optional[BookingStatus] = None,
        booking_type: Optional[BookingType] = None,
        payment_status: Optional[PaymentStatus] = None,
        date_from: Optional[date] = None,
        date_to: Optional[date] = None,
        assigned_agent_id: Optional[uuid.UUID] = None,
        search: Optional[str] = None,
    ) -> PaginatedResponse:
        query = (
            select(Booking)
            .where(Booking.tenant_id == tenant_id)
            .options(*_with_relations())
            .order_by(Booking.created_at.desc())
        )
        filters: dict[str, Any] = {
            "status": status,
            "booking_type": booking_type,
            "payment_status": payment_status,
            "assigned_agent_id": assigned_agent_id,
        }
        if date_from is not None:
            filters["created_at__from"] = _day_bounds(date_from, date_from)[0]
        if date_to is not None:
            filters["created_at__to"] = _day_bounds(date_to, date_to)[1]
        query = apply_filters(query, Booking, filters)

        if search and search.strip():
            term = f"%{search.strip()}%"
            customer_ids = select(User.id).where(
                User.tenant_id == tenant_id,
                or_(
                    User.email.ilike(term),
                    User.first_name.ilike(term),
                    User.last_name.ilike(term),
                ),
            )
            query = query.where(
                or_(Booking.reference.ilike(term), Booking.user_id.in_(customer_ids)),
            )

        return await paginate(db, query, pagination, model=Booking)

    @staticmethod
    async def overview(db: AsyncSession, tenant_id: uuid.UUID) -> BookingOverview:
        rows = await db.execute(
            select(Booking.status, func.count(Booking.id))
            .where(Booking.tenant_id == tenant_id)
            .group_by(Booking.status),
        )
        by_status = {s.value: 0 for s in BookingStatus}
        for status, count in rows.all():
            by_status[status.value] = count

        revenue = (
            await db.execute(
                select(func.coalesce(func.sum(Booking.total_amount), 0)).where(
                    Booking.tenant_id == tenant_id,
                    Booking.status.in_(REVENUE_STATUSES),
                ),
            )
        ).scalar()

        recent = (
            await db.execute(
                select(Booking)
                .where(Booking.tenant_id == tenant_id)
                .options(*_with_relations())
                .order_by(Booking.created_at.desc())
                .limit(10),
            )
        ).scalars().all()

        return BookingOverview(
            total=sum(by_status.values()),
            by_status=by_status,
            confirmed_revenue=Decimal(str(revenue or 0)),
            pending_approval=by_status[BookingStatus.pending.value],
            recent=[AdminBookingResponse.model_validate(b) for b in recent],
        )

    @staticmethod
    async def pending_approval(
        db: AsyncSession,
        tenant_id: uuid.UUID,
        pagination: PaginationParams,
    ) -> PaginatedResponse:
        query = (
            select(Booking)
            .where(Booking.tenant_id == tenant_id, Booking.status == BookingStatus.pending)
            .options(*_with_relations())
            .order_by(Booking.created_at.asc())
        )
        return await paginate(db, query, pagination, model=Booking)

    # ── Status changes ──────────────────────────────────────────────

    @staticmethod
    def _check_transition(booking: Booking, target: BookingStatus) -> None:
        if target not in _TRANSITIONS[booking.status]:
            raise BadRequestException(
                f"Cannot change booking from {booking.status.value} to {target.value}.",
            )

    @staticmethod
    def _apply_status(booking: Booking, target: BookingStatus, notes: Optional[str]) -> None:
        if target == BookingStatus.cancelled:
            BookingService._mark_cancelled(booking, notes)
        else:
            booking.status = target
            if target == BookingStatus.confirmed:
                booking.confirmed_at = _now()
            elif target == BookingStatus.completed:
                booking.completed_at = _now()
        if notes:
            booking.admin_notes = notes

    @staticmethod
    async def change_status(
        db: AsyncSession,
        tenant_id: uuid.UUID,
        booking_id: uuid.UUID,
        target: BookingStatus,
        *,
        actor: User,
        notes: Optional[str] = None,
        action: str = "status_change",
    ) -> Booking:
        booking = await BookingService.load(db, tenant_id, booking_id)
        BookingAdminService._check_transition(booking, target)
        previous = booking.status
        BookingAdminService._apply_status(booking, target, notes)
        await db.flush()

        await create_audit_entry(
            db,
            action=action,
            entity_type="booking",
            entity_id=booking.id,
            tenant_id=tenant_id,
            actor_id=actor.id,
            old_values={"status": previous.value},
            new_values={"status": target.value, "notes": notes},
        )
        logger.info(
            "Booking %s %s -> %s by %s", booking.reference, previous.value, target.value, actor.id,
        )
        return await BookingService.load(db, tenant_id, booking.id)

    @staticmethod
    async def approve(db, tenant_id, booking_id, *, actor: User, notes: Optional[str] = None) -> Booking:
        booking = await BookingService.load(db, tenant_id, booking_id)
        if booking.status != BookingStatus.pending:
            raise BadRequestException("Only pending bookings can be approved.")
        return await BookingAdminService.change_status(
            db, tenant_id, booking_id, BookingStatus.confirmed, actor=actor, notes=notes, action="approve",
        )

    @staticmethod
    async def reject(db, tenant_id, booking_id, *, actor: User, reason: str) -> Booking:
        booking = await BookingService.load(db, tenant_id, booking_id)
        if booking.status != BookingStatus.pending:
            raise BadRequestException("Only pending bookings can be rejected.")
        return await BookingAdminService.change_status(
            db, tenant_id, booking_id, BookingStatus.cancelled, actor=actor, notes=reason, action="reject",
        )

    @staticmethod
    async def complete(db, tenant_id, booking_id, *, actor: User) -> Booking:
        return await BookingAdminService.change_status(
            db, tenant_id, booking_id, BookingStatus.completed, actor=actor, action="complete",
        )

    @staticmethod
    async def assign_agent(
        db: AsyncSession,
        tenant_id: uuid.UUID,
        booking_id: uuid.UUID,
        agent_id: uuid.UUID,
        *,
        actor: User,
    ) -> Booking:
        booking = await BookingService.load(db, tenant_id, booking_id)
        result = await db.execute(
            select(User).where(
                User.id == agent_id,
                User.tenant_id == tenant_id,
                User.is_active.is_(True),
            ),
        )
        agent = result.scalars().first()
        if agent is None:
            raise NotFoundException("User", str(agent_id))
        if agent.role == UserRole.customer:
            raise BadRequestException("Bookings can only be assigned to staff members.")

        booking.assigned_agent_id = agent.id
        await db.flush()
        await create_audit_entry(
            db,
            action="assign_agent",
            entity_type="booking",
            entity_id=booking.id,
            tenant_id=tenant_id,
            actor_id=actor.id,
            new_values={"assigned_agent_id": str(agent.id)},
        )
        return await BookingService.load(db, tenant_id, booking.id)

    @staticmethod
    async def bulk_update(
        db: AsyncSession,
        tenant_id: uuid.UUID,
        booking_ids: Iterable[uuid.UUID],
        target: BookingStatus,
        *,
        actor: User,
        notes: Optional[str] = None,
    ) -> BulkUpdateResult:
        """Apply *target* to every booking that allows the transition; report the rest."""
        ids = list(dict.fromkeys(booking_ids))
        rows = await db.execute(
            select(Booking).where(Booking.tenant_id == tenant_id, Booking.id.in_(ids)),
        )
        found = {b.id: b for b in rows.scalars().all()}

        outcome = BulkUpdateResult()
        for booking_id in ids:
            booking = found.get(booking_id)
            if booking is None:
                outcome.skipped[str(booking_id)] = "not found"
                continue
            if target not in _TRANSITIONS[booking.status]:
                outcome.skipped[str(booking_id)] = (
                    f"cannot change from {booking.status.value} to {target.value}"
                )
                continue
            BookingAdminService._apply_status(booking, target, notes)
            outcome.updated.append(booking_id)
        await db.flush()

        if outcome.updated:
            logger.info(
                "Bulk status %s applied to %d bookings by %s",
                target.value, len(outcome.updated), actor.id,
            )
        return outcome

    # ── Notifications ───────────────────────────────────────────────

    @staticmethod
    async def send_reminder(
        db: AsyncSession,
        tenant_id: uuid.UUID,
        booking_id: uuid.UUID,
        *,
        actor: User,
    ) -> Booking:
        booking = await BookingService.load(db, tenant_id, booking_id)
        if booking.status in (BookingStatus.cancelled, BookingStatus.completed):
            raise BadRequestException(f"No reminder for a {booking.status.value} booking.")
        booking.reminder_sent_at = _now()
        await db.flush()
        logger.info(
            "Reminder for booking %s queued to %s by %s",
            booking.reference, booking.user.email if booking.user else booking.user_id, actor.id,
        )
        return booking

    @staticmethod
    async def send_confirmation(
        db: AsyncSession,
        tenant_id: uuid.UUID,
        booking_id: uuid.UUID,
        *,
        actor: User,
    ) -> Booking:
        booking = await BookingService.load(db, tenant_id, booking_id)
        if booking.status != BookingStatus.confirmed:
            raise BadRequestException("Only confirmed bookings can receive a confirmation.")
        booking.confirmation_sent_at = _now()
        await db.flush()
        logger.info(
            "Confirmation for booking %s queued to %s by %s",
            booking.reference, booking.user.email if booking.user else booking.user_id, actor.id,
        )
        return booking

    # ── Reports ─────────────────────────────────────────────────────

    @staticmethod
    async def _bookings_between(
        db: AsyncSession,
        tenant_id: uuid.UUID,
        start: date,
        end_inclusive: date,
        *conditions,
    ) -> Sequence[Booking]:
        lower, upper = _day_bounds(start, end_inclusive)
        result = await db.execute(
            select(Booking).where(
                Booking.tenant_id == tenant_id,
                Booking.created_at >= lower,
                Booking.created_at < upper,
                *conditions,
            ),
        )
        return result.scalars().all()

    @staticmethod
    def _revenue(bookings: Iterable[Booking]) -> Decimal:
        return sum(
            (Decimal(b.total_amount) for b in bookings if b.status in REVENUE_STATUSES),
            Decimal("0"),
        )

    @staticmethod
    async def daily_report(
        db: AsyncSession,
        tenant_id: uuid.UUID,
        report_date: Optional[date] = None,
    ) -> DailyReport:
        day = report_date or _today()
        bookings = await BookingAdminService._bookings_between(db, tenant_id, day, day)
        by_status = {s.value: 0 for s in BookingStatus}
        by_status.update(Counter(b.status.value for b in bookings))
        by_type = {t.value: 0 for t in BookingType}
        by_type.update(Counter(b.booking_type.value for b in bookings))
        return DailyReport(
            report_date=day,
            count=len(bookings),
            confirmed_revenue=BookingAdminService._revenue(bookings),
            by_status=by_status,
            by_type=by_type,
        )

    @staticmethod
    async def monthly_report(
        db: AsyncSession,
        tenant_id: uuid.UUID,
        year: int,
        month: int,
    ) -> MonthlyReport:
        first = date(year, month, 1)
        next_month = date(year + (month // 12), month % 12 + 1, 1)
        last = next_month - timedelta(days=1)
        bookings = await BookingAdminService._bookings_between(db, tenant_id, first, last)

        grouped: dict[date, list[Booking]] = defaultdict(list)
        for booking in bookings:
            grouped[_created_day(booking)].append(booking)

        days = [
            DayPoint(
                day=first + timedelta(days=offset),
                count=len(grouped.get(first + timedelta(days=offset), [])),
                revenue=BookingAdminService._revenue(grouped.get(first + timedelta(days=offset), [])),
            )
            for offset in range((last - first).days + 1)
        ]
        return MonthlyReport(
            year=year,
            month=month,
            count=len(bookings),
            confirmed_revenue=BookingAdminService._revenue(bookings),
            days=days,
        )

    @staticmethod
    async def cancellation_report(
        db: AsyncSession,
        tenant_id: uuid.UUID,
        period_days: int = 30,
    ) -> CancellationReport:
        end = _today()
        start = end - timedelta(days=period_days - 1)
        bookings = await BookingAdminService._bookings_between(
            db, tenant_id, start, end, Booking.status == BookingStatus.cancelled,
        )
        by_type = {t.value: 0 for t in BookingType}
        by_type.update(Counter(b.booking_type.value for b in bookings))
        per_day = Counter(_created_day(b) for b in bookings)
        trend = [
            DayPoint(day=start + timedelta(days=i), count=per_day.get(start + timedelta(days=i), 0))
            for i in range(period_days)
        ]
        return CancellationReport(
            period_days=period_days,
            start_date=start,
            end_date=end,
            count=len(bookings),
            by_type=by_type,
            trend=trend,
        )
