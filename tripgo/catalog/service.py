"""Catalog service layer — async CRUD, listing filters, availability, reviews.

Uses:
  - ``paginate()`` from tripgo.common.pagination
  - ``apply_filters / apply_search`` from tripgo.common.filters
  - ``unique_slug`` from tripgo.common.slugs
  - ``create_audit_entry`` from tripgo.common.audit
"""

from __future__ import annotations

import logging
import uuid
from datetime import date, datetime, timezone
from decimal import ROUND_HALF_UP, Decimal
from typing import Any, ClassVar, Optional, Sequence

from pydantic import BaseModel
from sqlalchemy import Select, func, select
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from tripgo.bookings.models import Booking
from tripgo.catalog.models import (
    Cruise,
    CruiseCategory,
    CruiseDeparture,
    Hotel,
    Package,
    Review,
)
from tripgo.catalog.schemas import (
    AvailabilityResponse,
    CategoryCreate,
    CategoryUpdate,
    DepartureCreate,
    DepartureUpdate,
    ReviewCreate,
)
from tripgo.common.audit import create_audit_entry
from tripgo.common.constants import BookingStatus, BookingType, DepartureStatus
from tripgo.common.exceptions import (
    BadRequestException,
    ConflictError,
    NotFoundException,
    ValidationException,
)
from tripgo.common.filters import apply_filters, apply_search
from tripgo.common.pagination import PaginatedResponse, PaginationParams, paginate
from tripgo.common.slugs import slug_exists, unique_slug
from tripgo.users.models import User

logger = logging.getLogger(__name__)

# Bookings that hold places on a sailing
ACTIVE_BOOKING_STATUSES = (BookingStatus.pending, BookingStatus.confirmed)


def _today() -> date:
    return datetime.now(timezone.utc).date()


def _parse_uuid(value: str) -> Optional[uuid.UUID]:
    try:
        return uuid.UUID(value)
    except ValueError:
        return None


# ═════════════════════════════════════════════════════════════════════
# CategoryService
# ═════════════════════════════════════════════════════════════════════


class CategoryService:
    """Cruise categories, listed with the number of cruises in each."""

    @staticmethod
    async def list_categories(
        db: AsyncSession,
        tenant_id: uuid.UUID,
        *,
        include_inactive: bool = False,
    ) -> list[tuple[CruiseCategory, int]]:
        count_col = func.count(Cruise.id)
        query = (
            select(CruiseCategory, count_col)
            .outerjoin(Cruise, Cruise.category_id == CruiseCategory.id)
            .where(CruiseCategory.tenant_id == tenant_id)
            .group_by(CruiseCategory.id)
            .order_by(CruiseCategory.sort_order.asc(), CruiseCategory.name.asc())
        )
        if not include_inactive:
            query = query.where(CruiseCategory.is_active.is_(True))
        result = await db.execute(query)
        return [(row[0], row[1]) for row in result.all()]

    @staticmethod
    async def get_category(
        db: AsyncSession,
        tenant_id: uuid.UUID,
        category_id: uuid.UUID,
    ) -> CruiseCategory:
        result = await db.execute(
            select(CruiseCategory).where(
                CruiseCategory.id == category_id,
                CruiseCategory.tenant_id == tenant_id,
            ),
        )
        category = result.scalars().first()
        if category is None:
            raise NotFoundException("CruiseCategory", str(category_id))
        return category

    @staticmethod
    async def create_category(
        db: AsyncSession,
        tenant_id: uuid.UUID,
        data: CategoryCreate,
    ) -> CruiseCategory:
        if data.slug:
            if await slug_exists(db, CruiseCategory, data.slug, tenant_id=tenant_id):
                raise ConflictError("slug", data.slug)
            slug = data.slug
        else:
            slug = await unique_slug(db, CruiseCategory, data.name, tenant_id=tenant_id)

        category = CruiseCategory(
            tenant_id=tenant_id,
            **data.model_dump(exclude={"slug"}),
            slug=slug,
        )
        db.add(category)
        await db.flush()
        return category

    @staticmethod
    async def update_category(
        db: AsyncSession,
        tenant_id: uuid.UUID,
        category_id: uuid.UUID,
        data: CategoryUpdate,
    ) -> CruiseCategory:
        category = await CategoryService.get_category(db, tenant_id, category_id)
        for field, value in data.model_dump(exclude_unset=True).items():
            setattr(category, field, value)
        await db.flush()
        return category

    @staticmethod
    async def delete_category(
        db: AsyncSession,
        tenant_id: uuid.UUID,
        category_id: uuid.UUID,
    ) -> None:
        category = await CategoryService.get_category(db, tenant_id, category_id)
        in_use = await db.execute(
            select(func.count()).select_from(Cruise).where(Cruise.category_id == category.id),
        )
        if (in_use.scalar() or 0) > 0:
            raise BadRequestException("Category still has cruises assigned to it.")
        await db.delete(category)
        await db.flush()


# ═════════════════════════════════════════════════════════════════════
# Shared CRUD for cruises, hotels and packages
# ═════════════════════════════════════════════════════════════════════


class CatalogItemService:
    """CRUD shared by every bookable catalog product."""

    model: ClassVar[Any]
    entity_type: ClassVar[str]
    item_type: ClassVar[BookingType]
    search_columns: ClassVar[Sequence[str]] = ("name", "description")

    @classmethod
    def _base_query(cls) -> Select:
        return select(cls.model)

    @classmethod
    async def get(
        cls,
        db: AsyncSession,
        tenant_id: uuid.UUID,
        identifier: uuid.UUID | str,
        *,
        include_inactive: bool = True,
    ) -> Any:
        """Look an item up by id or slug."""
        query = cls._base_query().where(cls.model.tenant_id == tenant_id)
        item_id = identifier if isinstance(identifier, uuid.UUID) else _parse_uuid(identifier)
        if item_id is not None:
            query = query.where(cls.model.id == item_id)
        else:
            query = query.where(cls.model.slug == identifier)
        if not include_inactive:
            query = query.where(cls.model.is_active.is_(True))

        item = (await db.execute(query)).scalars().first()
        if item is None:
            raise NotFoundException(cls.model.__name__, str(identifier))
        return item

    @classmethod
    async def create(
        cls,
        db: AsyncSession,
        tenant_id: uuid.UUID,
        data: BaseModel,
        *,
        actor_id: Optional[uuid.UUID] = None,
    ) -> Any:
        payload = data.model_dump(exclude={"slug"})
        explicit_slug = getattr(data, "slug", None)
        if explicit_slug:
            if await slug_exists(db, cls.model, explicit_slug, tenant_id=tenant_id):
                raise ConflictError("slug", explicit_slug)
            slug = explicit_slug
        else:
            slug = await unique_slug(db, cls.model, payload["name"], tenant_id=tenant_id)

        item = cls.model(tenant_id=tenant_id, slug=slug, **payload)
        db.add(item)
        await db.flush()

        await create_audit_entry(
            db,
            action="create",
            entity_type=cls.entity_type,
            entity_id=item.id,
            tenant_id=tenant_id,
            actor_id=actor_id,
            new_values=data.model_dump(mode="json"),
        )
        return await cls.get(db, tenant_id, item.id)

    @classmethod
    async def update(
        cls,
        db: AsyncSession,
        tenant_id: uuid.UUID,
        item_id: uuid.UUID,
        data: BaseModel,
        *,
        actor_id: Optional[uuid.UUID] = None,
    ) -> Any:
        item = await cls.get(db, tenant_id, item_id)
        changes = data.model_dump(exclude_unset=True)
        for field, value in changes.items():
            setattr(item, field, value)
        await db.flush()

        await create_audit_entry(
            db,
            action="update",
            entity_type=cls.entity_type,
            entity_id=item.id,
            tenant_id=tenant_id,
            actor_id=actor_id,
            new_values=data.model_dump(mode="json", exclude_unset=True),
        )
        db.expire(item)
        return await cls.get(db, tenant_id, item_id)

    @classmethod
    async def delete(
        cls,
        db: AsyncSession,
        tenant_id: uuid.UUID,
        item_id: uuid.UUID,
        *,
        actor_id: Optional[uuid.UUID] = None,
    ) -> None:
        item = await cls.get(db, tenant_id, item_id)
        await db.delete(item)
        await db.flush()

        await create_audit_entry(
            db,
            action="delete",
            entity_type=cls.entity_type,
            entity_id=item_id,
            tenant_id=tenant_id,
            actor_id=actor_id,
        )
        logger.info("Deleted %s %s", cls.entity_type, item_id)


# ═════════════════════════════════════════════════════════════════════
# CruiseService
# ═════════════════════════════════════════════════════════════════════


class CruiseService(CatalogItemService):
    model = Cruise
    entity_type = "cruise"
    item_type = BookingType.cruise
    search_columns = ("name", "description", "destination", "departure_port")

    @classmethod
    def _base_query(cls) -> Select:
        return select(Cruise).options(
            selectinload(Cruise.category),
            selectinload(Cruise.departures),
        )

    @staticmethod
    async def list_cruises(
        db: AsyncSession,
        tenant_id: uuid.UUID,
        pagination: PaginationParams,
        *,
        include_inactive: bool = False,
        search: Optional[str] = None,
        destination: Optional[str] = None,
        category_id: Optional[uuid.UUID] = None,
        min_price: Optional[Decimal] = None,
        max_price: Optional[Decimal] = None,
        duration: Optional[int] = None,
        min_rating: Optional[Decimal] = None,
    ) -> PaginatedResponse:
        query = (
            select(Cruise)
            .where(Cruise.tenant_id == tenant_id)
            .options(selectinload(Cruise.category))
            .order_by(Cruise.created_at.desc())
        )
        if not include_inactive:
            query = query.where(Cruise.is_active.is_(True))

        filters: dict[str, Any] = {
            "destination__ilike": destination,
            "category_id": category_id,
            "price__gte": min_price,
            "price__lte": max_price,
            "duration": duration,
            "rating__gte": min_rating,
        }
        query = apply_filters(query, Cruise, filters)
        query = apply_search(query, Cruise, search, CruiseService.search_columns)
        return await paginate(db, query, pagination, model=Cruise)

    @classmethod
    async def create(cls, db, tenant_id, data, *, actor_id=None):
        if getattr(data, "category_id", None) is not None:
            await CategoryService.get_category(db, tenant_id, data.category_id)
        return await super().create(db, tenant_id, data, actor_id=actor_id)

    @classmethod
    async def update(cls, db, tenant_id, item_id, data, *, actor_id=None):
        if getattr(data, "category_id", None) is not None:
            await CategoryService.get_category(db, tenant_id, data.category_id)
        return await super().update(db, tenant_id, item_id, data, actor_id=actor_id)

    # ── Availability ────────────────────────────────────────────────

    @staticmethod
    async def booked_guests(
        db: AsyncSession,
        cruise_id: uuid.UUID,
        sailing_date: date,
        *,
        exclude_booking_id: Optional[uuid.UUID] = None,
    ) -> int:
        """Guests on pending or confirmed bookings for one sailing."""
        query = select(func.coalesce(func.sum(Booking.guests), 0)).where(
            Booking.cruise_id == cruise_id,
            Booking.sailing_date == sailing_date,
            Booking.status.in_(ACTIVE_BOOKING_STATUSES),
        )
        if exclude_booking_id is not None:
            query = query.where(Booking.id != exclude_booking_id)
        return int((await db.execute(query)).scalar() or 0)

    @staticmethod
    async def check_availability(
        db: AsyncSession,
        tenant_id: uuid.UUID,
        cruise_id: uuid.UUID,
        *,
        sailing_date: Optional[date],
        guests: int,
        exclude_booking_id: Optional[uuid.UUID] = None,
    ) -> AvailabilityResponse:
        """
        ``available = is_active and 1 <= guests <= remaining and
        (sailing_date is None or sailing_date > today)``.

        ``remaining`` is the capacity minus guests already holding places on
        the same sailing date.
        """
        cruise = await CruiseService.get(db, tenant_id, cruise_id)

        booked = 0
        if sailing_date is not None:
            booked = await CruiseService.booked_guests(
                db, cruise.id, sailing_date, exclude_booking_id=exclude_booking_id,
            )
        remaining = max(0, cruise.capacity - booked)

        reason: Optional[str] = None
        if not cruise.is_active:
            reason = "Cruise is not available for booking."
        elif guests < 1:
            reason = "At least one guest is required."
        elif sailing_date is not None and sailing_date <= _today():
            reason = "Sailing date must be in the future."
        elif guests > remaining:
            reason = f"Only {remaining} spots remaining for this sailing."

        price = Decimal(cruise.price)
        return AvailabilityResponse(
            cruise_id=cruise.id,
            available=reason is None,
            capacity=cruise.capacity,
            remaining_spots=remaining,
            price_per_person=price,
            total_price=price * guests,
            sailing_date=sailing_date,
            guests=guests,
            reason=reason,
        )


# ═════════════════════════════════════════════════════════════════════
# DepartureService
# ═════════════════════════════════════════════════════════════════════


class DepartureService:
    """Dated sailings of a cruise."""

    @staticmethod
    async def list_departures(
        db: AsyncSession,
        tenant_id: uuid.UUID,
        cruise_id: uuid.UUID,
        *,
        upcoming_only: bool = True,
    ) -> Sequence[CruiseDeparture]:
        await CruiseService.get(db, tenant_id, cruise_id)
        query = (
            select(CruiseDeparture)
            .where(CruiseDeparture.cruise_id == cruise_id)
            .order_by(CruiseDeparture.departure_date.asc())
        )
        if upcoming_only:
            query = query.where(
                CruiseDeparture.departure_date > _today(),
                CruiseDeparture.status == DepartureStatus.scheduled,
            )
        return (await db.execute(query)).scalars().all()

    @staticmethod
    async def get_departure(
        db: AsyncSession,
        tenant_id: uuid.UUID,
        departure_id: uuid.UUID,
    ) -> CruiseDeparture:
        result = await db.execute(
            select(CruiseDeparture).where(
                CruiseDeparture.id == departure_id,
                CruiseDeparture.tenant_id == tenant_id,
            ),
        )
        departure = result.scalars().first()
        if departure is None:
            raise NotFoundException("CruiseDeparture", str(departure_id))
        return departure

    @staticmethod
    async def create_departure(
        db: AsyncSession,
        tenant_id: uuid.UUID,
        cruise_id: uuid.UUID,
        data: DepartureCreate,
    ) -> CruiseDeparture:
        cruise = await CruiseService.get(db, tenant_id, cruise_id)
        clash = await db.execute(
            select(CruiseDeparture.id).where(
                CruiseDeparture.cruise_id == cruise.id,
                CruiseDeparture.departure_date == data.departure_date,
            ),
        )
        if clash.first() is not None:
            raise ConflictError("departure_date", data.departure_date.isoformat())

        departure = CruiseDeparture(tenant_id=tenant_id, cruise_id=cruise.id, **data.model_dump())
        db.add(departure)
        await db.flush()
        return departure

    @staticmethod
    async def update_departure(
        db: AsyncSession,
        tenant_id: uuid.UUID,
        departure_id: uuid.UUID,
        data: DepartureUpdate,
    ) -> CruiseDeparture:
        departure = await DepartureService.get_departure(db, tenant_id, departure_id)
        changes = data.model_dump(exclude_unset=True)
        departure_date = changes.get("departure_date", departure.departure_date)
        return_date = changes.get("return_date", departure.return_date)
        if return_date <= departure_date:
            raise ValidationException({"return_date": ["return_date must be after departure_date"]})

        for field, value in changes.items():
            setattr(departure, field, value)
        await db.flush()
        return departure

    @staticmethod
    async def delete_departure(
        db: AsyncSession,
        tenant_id: uuid.UUID,
        departure_id: uuid.UUID,
    ) -> None:
        departure = await DepartureService.get_departure(db, tenant_id, departure_id)
        await db.delete(departure)
        await db.flush()


# ═════════════════════════════════════════════════════════════════════
# Hotels / packages
# ═════════════════════════════════════════════════════════════════════


class HotelService(CatalogItemService):
    model = Hotel
    entity_type = "hotel"
    item_type = BookingType.hotel
    search_columns = ("name", "description", "city", "country")

    @staticmethod
    async def list_hotels(
        db: AsyncSession,
        tenant_id: uuid.UUID,
        pagination: PaginationParams,
        *,
        include_inactive: bool = False,
        search: Optional[str] = None,
        city: Optional[str] = None,
        country: Optional[str] = None,
        min_price: Optional[Decimal] = None,
        max_price: Optional[Decimal] = None,
        min_rating: Optional[Decimal] = None,
    ) -> PaginatedResponse:
        query = (
            select(Hotel)
            .where(Hotel.tenant_id == tenant_id)
            .order_by(Hotel.created_at.desc())
        )
        if not include_inactive:
            query = query.where(Hotel.is_active.is_(True))
        query = apply_filters(
            query,
            Hotel,
            {
                "city__ilike": city,
                "country__ilike": country,
                "price_per_night__gte": min_price,
                "price_per_night__lte": max_price,
                "rating__gte": min_rating,
            },
        )
        query = apply_search(query, Hotel, search, HotelService.search_columns)
        return await paginate(db, query, pagination, model=Hotel)


class PackageService(CatalogItemService):
    model = Package
    entity_type = "package"
    item_type = BookingType.package
    search_columns = ("name", "description", "destination")

    @staticmethod
    async def list_packages(
        db: AsyncSession,
        tenant_id: uuid.UUID,
        pagination: PaginationParams,
        *,
        include_inactive: bool = False,
        search: Optional[str] = None,
        destination: Optional[str] = None,
        min_price: Optional[Decimal] = None,
        max_price: Optional[Decimal] = None,
        duration: Optional[int] = None,
    ) -> PaginatedResponse:
        query = (
            select(Package)
            .where(Package.tenant_id == tenant_id)
            .order_by(Package.created_at.desc())
        )
        if not include_inactive:
            query = query.where(Package.is_active.is_(True))
        query = apply_filters(
            query,
            Package,
            {
                "destination__ilike": destination,
                "price__gte": min_price,
                "price__lte": max_price,
                "duration": duration,
            },
        )
        query = apply_search(query, Package, search, PackageService.search_columns)
        return await paginate(db, query, pagination, model=Package)


# ═════════════════════════════════════════════════════════════════════
# ReviewService
# ═════════════════════════════════════════════════════════════════════


_SERVICES_BY_TYPE: dict[BookingType, type[CatalogItemService]] = {
    BookingType.cruise: CruiseService,
    BookingType.hotel: HotelService,
    BookingType.package: PackageService,
}


class ReviewService:
    """Reviews for any catalog item; the item's rating is the rounded mean."""

    @staticmethod
    async def list_reviews(
        db: AsyncSession,
        tenant_id: uuid.UUID,
        item_type: BookingType,
        item_id: uuid.UUID,
        pagination: PaginationParams,
    ) -> PaginatedResponse:
        await _SERVICES_BY_TYPE[item_type].get(db, tenant_id, item_id)
        query = (
            select(Review)
            .where(Review.item_type == item_type, Review.item_id == item_id)
            .options(selectinload(Review.user))
            .order_by(Review.created_at.desc())
        )
        return await paginate(db, query, pagination, model=Review)

    @staticmethod
    async def add_review(
        db: AsyncSession,
        tenant_id: uuid.UUID,
        item_type: BookingType,
        item_id: uuid.UUID,
        user: User,
        data: ReviewCreate,
    ) -> Review:
        service = _SERVICES_BY_TYPE[item_type]
        item = await service.get(db, tenant_id, item_id, include_inactive=False)

        review = Review(
            tenant_id=tenant_id,
            item_type=item_type,
            item_id=item.id,
            user_id=user.id,
            rating=data.rating,
            comment=data.comment,
        )
        db.add(review)
        await db.flush()

        stats = await db.execute(
            select(func.avg(Review.rating), func.count(Review.id)).where(
                Review.item_type == item_type,
                Review.item_id == item.id,
            ),
        )
        average, count = stats.one()
        item.rating = Decimal(str(average or 0)).quantize(Decimal("0.01"), rounding=ROUND_HALF_UP)
        item.review_count = count
        await db.flush()

        result = await db.execute(
            select(Review).where(Review.id == review.id).options(selectinload(Review.user)),
        )
        return result.scalars().one()
