"""Catalog router — cruise categories, cruises, departures, hotels, packages, reviews.

Routes:
    /cruise-categories                  — List (with cruise counts), create
    /cruise-categories/{id}             — Get, update, delete
    /cruises                            — List (filters), create
    /cruises/{id_or_slug}               — Get by id or slug
    /cruises/{id}                       — Update, delete
    /cruises/{id}/availability          — Availability for a sailing date + guests
    /cruises/{id}/departures            — List upcoming, create
    /cruises/departures/{departure_id}  — Update, delete
    /cruises/{id}/reviews               — List, add
    /hotels, /packages                  — Same shape as cruises (no departures)

Inactive items are hidden from the storefront; staff holding the matching
``*:update`` permission can pass ``include_inactive=true``.
"""


import uuid
from decimal import Decimal
from typing import Optional

from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.ext.asyncio import AsyncSession

from tripgo.auth.dependencies import get_current_user, get_optional_user, require_permission
from tripgo.catalog.schemas import (
    AvailabilityRequest,
    CategoryCreate,
    CategoryResponse,
    CategoryUpdate,
    CruiseCreate,
    CruiseDetail,
    CruiseResponse,
    CruiseUpdate,
    DepartureCreate,
    DepartureResponse,
    DepartureUpdate,
    HotelCreate,
    HotelResponse,
    HotelUpdate,
    PackageCreate,
    PackageResponse,
    PackageUpdate,
    ReviewCreate,
    ReviewResponse,
)
from tripgo.catalog.service import (
    CategoryService,
    CruiseService,
    DepartureService,
    HotelService,
    PackageService,
    ReviewService,
)
from tripgo.common.constants import PERMISSIONS, BookingType
from tripgo.common.pagination import PaginationParams
from tripgo.common.responses import paginated_response, success_response
from tripgo.database import get_db
from tripgo.tenants.dependencies import get_current_tenant
from tripgo.tenants.models import Tenant
from tripgo.users.models import User


# ═════════════════════════════════════════════════════════════════════
# Routers
# ═════════════════════════════════════════════════════════════════════

categories_router = APIRouter(prefix="", tags=["cruise-categories"])
cruises_router = APIRouter(prefix="", tags=["cruises"])
hotels_router = APIRouter(prefix="", tags=["hotels"])
packages_router = APIRouter(prefix="", tags=["packages"])


# ── Helpers ─────────────────────────────────────────────────────────

def _can(user: Optional[User], permission: str) -> bool:
    return user is not None and permission in PERMISSIONS.get(user.role, [])


def _review_item(review) -> ReviewResponse:
    item = ReviewResponse.model_validate(review)
    item.user_name = review.user.full_name if review.user else None
    return item


async def _list_reviews(db, tenant, item_type, item_id, pagination):
    result = await ReviewService.list_reviews(db, tenant.id, item_type, item_id, pagination)
    return paginated_response([_review_item(r) for r in result.data], result.meta)


async def _add_review(db, tenant, item_type, item_id, user, body):
    review = await ReviewService.add_review(db, tenant.id, item_type, item_id, user, body)
    return success_response(_review_item(review), "Review added successfully")


# ═════════════════════════════════════════════════════════════════════
# Cruise categories
# ═════════════════════════════════════════════════════════════════════


@categories_router.get("")
async def list_categories(
    db: AsyncSession = Depends(get_db),
    tenant: Tenant = Depends(get_current_tenant),
    current_user: Optional[User] = Depends(get_optional_user),
    include_inactive: bool = Query(False),
):
    rows = await CategoryService.list_categories(
        db,
        tenant.id,
        include_inactive=include_inactive and _can(current_user, "cruise:update"),
    )
    items = []
    for category, count in rows:
        item = CategoryResponse.model_validate(category)
        item.cruise_count = count
        items.append(item)
    return success_response(items)


@categories_router.post("", status_code=status.HTTP_201_CREATED)
async def create_category(
    body: CategoryCreate,
    db: AsyncSession = Depends(get_db),
    tenant: Tenant = Depends(get_current_tenant),
    current_user: User = Depends(require_permission("cruise:create")),
):
    category = await CategoryService.create_category(db, tenant.id, body)
    return success_response(CategoryResponse.model_validate(category), "Category created successfully")


@categories_router.get("/{category_id}")
async def get_category(
    category_id: uuid.UUID,
    db: AsyncSession = Depends(get_db),
    tenant: Tenant = Depends(get_current_tenant),
):
    category = await CategoryService.get_category(db, tenant.id, category_id)
    return success_response(CategoryResponse.model_validate(category))


@categories_router.put("/{category_id}")
async def update_category(
    category_id: uuid.UUID,
    body: CategoryUpdate,
    db: AsyncSession = Depends(get_db),
    tenant: Tenant = Depends(get_current_tenant),
    current_user: User = Depends(require_permission("cruise:update")),
):
    category = await CategoryService.update_category(db, tenant.id, category_id, body)
    return success_response(CategoryResponse.model_validate(category), "Category updated successfully")


@categories_router.delete("/{category_id}")
async def delete_category(
    category_id: uuid.UUID,
    db: AsyncSession = Depends(get_db),
    tenant: Tenant = Depends(get_current_tenant),
    current_user: User = Depends(require_permission("cruise:delete")),
):
    await CategoryService.delete_category(db, tenant.id, category_id)
    return success_response(None, "Category deleted successfully")


# ═════════════════════════════════════════════════════════════════════
# Cruises
# ═════════════════════════════════════════════════════════════════════


@cruises_router.get("")
async def list_cruises(
    db: AsyncSession = Depends(get_db),
    tenant: Tenant = Depends(get_current_tenant),
    current_user: Optional[User] = Depends(get_optional_user),
    pagination: PaginationParams = Depends(),
    search: Optional[str] = Query(None, description="Search name, description, ports"),
    destination: Optional[str] = Query(None),
    category_id: Optional[uuid.UUID] = Query(None),
    min_price: Optional[Decimal] = Query(None, ge=0),
    max_price: Optional[Decimal] = Query(None, ge=0),
    duration: Optional[int] = Query(None, ge=1),
    min_rating: Optional[Decimal] = Query(None, ge=0, le=5),
    include_inactive: bool = Query(False),
):
    result = await CruiseService.list_cruises(
        db,
        tenant.id,
        pagination,
        include_inactive=include_inactive and _can(current_user, "cruise:update"),
        search=search,
        destination=destination,
        category_id=category_id,
        min_price=min_price,
        max_price=max_price,
        duration=duration,
        min_rating=min_rating,
    )
    items = [CruiseResponse.model_validate(c) for c in result.data]
    return paginated_response(items, result.meta)


@cruises_router.post("", status_code=status.HTTP_201_CREATED)
async def create_cruise(
    body: CruiseCreate,
    db: AsyncSession = Depends(get_db),
    tenant: Tenant = Depends(get_current_tenant),
    current_user: User = Depends(require_permission("cruise:create")),
):
    cruise = await CruiseService.create(db, tenant.id, body, actor_id=current_user.id)
    return success_response(CruiseDetail.model_validate(cruise), "Cruise created successfully")


# ── Departures (static segment first) ───────────────────────────────

@cruises_router.put("/departures/{departure_id}")
async def update_departure(
    departure_id: uuid.UUID,
    body: DepartureUpdate,
    db: AsyncSession = Depends(get_db),
    tenant: Tenant = Depends(get_current_tenant),
    current_user: User = Depends(require_permission("cruise:update")),
):
    departure = await DepartureService.update_departure(db, tenant.id, departure_id, body)
    return success_response(DepartureResponse.model_validate(departure), "Departure updated successfully")


@cruises_router.delete("/departures/{departure_id}")
async def delete_departure(
    departure_id: uuid.UUID,
    db: AsyncSession = Depends(get_db),
    tenant: Tenant = Depends(get_current_tenant),
    current_user: User = Depends(require_permission("cruise:update")),
):
    await DepartureService.delete_departure(db, tenant.id, departure_id)
    return success_response(None, "Departure deleted successfully")


@cruises_router.get("/{identifier}")
async def get_cruise(
    identifier: str,
    db: AsyncSession = Depends(get_db),
    tenant: Tenant = Depends(get_current_tenant),
    current_user: Optional[User] = Depends(get_optional_user),
):
    cruise = await CruiseService.get(
        db, tenant.id, identifier, include_inactive=_can(current_user, "cruise:update"),
    )
    return success_response(CruiseDetail.model_validate(cruise))


@cruises_router.put("/{cruise_id}")
async def update_cruise(
    cruise_id: uuid.UUID,
    body: CruiseUpdate,
    db: AsyncSession = Depends(get_db),
    tenant: Tenant = Depends(get_current_tenant),
    current_user: User = Depends(require_permission("cruise:update")),
):
    cruise = await CruiseService.update(db, tenant.id, cruise_id, body, actor_id=current_user.id)
    return success_response(CruiseDetail.model_validate(cruise), "Cruise updated successfully")


@cruises_router.delete("/{cruise_id}")
async def delete_cruise(
    cruise_id: uuid.UUID,
    db: AsyncSession = Depends(get_db),
    tenant: Tenant = Depends(get_current_tenant),
    current_user: User = Depends(require_permission("cruise:delete")),
):
    await CruiseService.delete(db, tenant.id, cruise_id, actor_id=current_user.id)
    return success_response(None, "Cruise deleted successfully")


@cruises_router.post("/{cruise_id}/availability")
async def check_availability(
    cruise_id: uuid.UUID,
    body: AvailabilityRequest,
    db: AsyncSession = Depends(get_db),
    tenant: Tenant = Depends(get_current_tenant),
):
    result = await CruiseService.check_availability(
        db, tenant.id, cruise_id, sailing_date=body.sailing_date, guests=body.guests,
    )
    message = "Cruise is available" if result.available else result.reason
    return success_response(result, message)


@cruises_router.get("/{cruise_id}/departures")
async def list_departures(
    cruise_id: uuid.UUID,
    db: AsyncSession = Depends(get_db),
    tenant: Tenant = Depends(get_current_tenant),
    upcoming_only: bool = Query(True),
):
    departures = await DepartureService.list_departures(
        db, tenant.id, cruise_id, upcoming_only=upcoming_only,
    )
    return success_response([DepartureResponse.model_validate(d) for d in departures])


@cruises_router.post("/{cruise_id}/departures", status_code=status.HTTP_201_CREATED)
async def create_departure(
    cruise_id: uuid.UUID,
    body: DepartureCreate,
    db: AsyncSession = Depends(get_db),
    tenant: Tenant = Depends(get_current_tenant),
    current_user: User = Depends(require_permission("cruise:update")),
):
    departure = await DepartureService.create_departure(db, tenant.id, cruise_id, body)
    return success_response(DepartureResponse.model_validate(departure), "Departure created successfully")


@cruises_router.get("/{cruise_id}/reviews")
async def list_cruise_reviews(
    cruise_id: uuid.UUID,
    db: AsyncSession = Depends(get_db),
    tenant: Tenant = Depends(get_current_tenant),
    pagination: PaginationParams = Depends(),
):
    return await _list_reviews(db, tenant, BookingType.cruise, cruise_id, pagination)


@cruises_router.post("/{cruise_id}/reviews", status_code=status.HTTP_201_CREATED)
async def add_cruise_review(
    cruise_id: uuid.UUID,
    body: ReviewCreate,
    db: AsyncSession = Depends(get_db),
    tenant: Tenant = Depends(get_current_tenant),
    current_user: User = Depends(get_current_user),
):
    return await _add_review(db, tenant, BookingType.cruise, cruise_id, current_user, body)


# ═════════════════════════════════════════════════════════════════════
# Hotels
# ═════════════════════════════════════════════════════════════════════


@hotels_router.get("")
async def list_hotels(
    db: AsyncSession = Depends(get_db),
    tenant: Tenant = Depends(get_current_tenant),
    current_user: Optional[User] = Depends(get_optional_user),
    pagination: PaginationParams = Depends(),
    search: Optional[str] = Query(None),
    city: Optional[str] = Query(None),
    country: Optional[str] = Query(None),
    min_price: Optional[Decimal] = Query(None, ge=0),
    max_price: Optional[Decimal] = Query(None, ge=0),
    min_rating: Optional[Decimal] = Query(None, ge=0, le=5),
    include_inactive: bool = Query(False),
):
    result = await HotelService.list_hotels(
        db,
        tenant.id,
        pagination,
        include_inactive=include_inactive and _can(current_user, "hotel:update"),
        search=search,
        city=city,
        country=country,
        min_price=min_price,
        max_price=max_price,
        min_rating=min_rating,
    )
    items = [HotelResponse.model_validate(h) for h in result.data]
    return paginated_response(items, result.meta)


@hotels_router.post("", status_code=status.HTTP_201_CREATED)
async def create_hotel(
    body: HotelCreate,
    db: AsyncSession = Depends(get_db),
    tenant: Tenant = Depends(get_current_tenant),
    current_user: User = Depends(require_permission("hotel:create")),
):
    hotel = await HotelService.create(db, tenant.id, body, actor_id=current_user.id)
    return success_response(HotelResponse.model_validate(hotel), "Hotel created successfully")


@hotels_router.get("/{identifier}")
async def get_hotel(
    identifier: str,
    db: AsyncSession = Depends(get_db),
    tenant: Tenant = Depends(get_current_tenant),
    current_user: Optional[User] = Depends(get_optional_user),
):
    hotel = await HotelService.get(
        db, tenant.id, identifier, include_inactive=_can(current_user, "hotel:update"),
    )
    return success_response(HotelResponse.model_validate(hotel))


@hotels_router.put("/{hotel_id}")
async def update_hotel(
    hotel_id: uuid.UUID,
    body: HotelUpdate,
    db: AsyncSession = Depends(get_db),
    tenant: Tenant = Depends(get_current_tenant),
    current_user: User = Depends(require_permission("hotel:update")),
):
    hotel = await HotelService.update(db, tenant.id, hotel_id, body, actor_id=current_user.id)
    return success_response(HotelResponse.model_validate(hotel), "Hotel updated successfully")


@hotels_router.delete("/{hotel_id}")
async def delete_hotel(
    hotel_id: uuid.UUID,
    db: AsyncSession = Depends(get_db),
    tenant: Tenant = Depends(get_current_tenant),
    current_user: User = Depends(require_permission("hotel:delete")),
):
    await HotelService.delete(db, tenant.id, hotel_id, actor_id=current_user.id)
    return success_response(None, "Hotel deleted successfully")


@hotels_router.get("/{hotel_id}/reviews")
async def list_hotel_reviews(
    hotel_id: uuid.UUID,
    db: AsyncSession = Depends(get_db),
    tenant: Tenant = Depends(get_current_tenant),
    pagination: PaginationParams = Depends(),
):
    return await _list_reviews(db, tenant, BookingType.hotel, hotel_id, pagination)


@hotels_router.post("/{hotel_id}/reviews", status_code=status.HTTP_201_CREATED)
async def add_hotel_review(
    hotel_id: uuid.UUID,
    body: ReviewCreate,
    db: AsyncSession = Depends(get_db),
    tenant: Tenant = Depends(get_current_tenant),
    current_user: User = Depends(get_current_user),
):
    return await _add_review(db, tenant, BookingType.hotel, hotel_id, current_user, body)


# ═════════════════════════════════════════════════════════════════════
# Packages
# ═════════════════════════════════════════════════════════════════════


@packages_router.get("")
async def list_packages(
    db: AsyncSession = Depends(get_db),
    tenant: Tenant = Depends(get_current_tenant),
    current_user: Optional[User] = Depends(get_optional_user),
    pagination: PaginationParams = Depends(),
    search: Optional[str] = Query(None),
    destination: Optional[str] = Query(None),
    min_price: Optional[Decimal] = Query(None, ge=0),
    max_price: Optional[Decimal] = Query(None, ge=0),
    duration: Optional[int] = Query(None, ge=1),
    include_inactive: bool = Query(False),
):
    result = await PackageService.list_packages(
        db,
        tenant.id,
        pagination,
        include_inactive=include_inactive and _can(current_user, "package:update"),
        search=search,
        destination=destination,
        min_price=min_price,
        max_price=max_price,
        duration=duration,
    )
    items = [PackageResponse.model_validate(p) for p in result.data]
    return paginated_response(items, result.meta)


@packages_router.post("", status_code=status.HTTP_201_CREATED)
async def create_package(
    body: PackageCreate,
    db: AsyncSession = Depends(get_db),
    tenant: Tenant = Depends(get_current_tenant),
    current_user: User = Depends(require_permission("package:create")),
):
    package = await PackageService.create(db, tenant.id, body, actor_id=current_user.id)
    return success_response(PackageResponse.model_validate(package), "Package created successfully")


@packages_router.get("/{identifier}")
async def get_package(
    identifier: str,
    db: AsyncSession = Depends(get_db),
    tenant: Tenant = Depends(get_current_tenant),
    current_user: Optional[User] = Depends(get_optional_user),
):
    package = await PackageService.get(
        db, tenant.id, identifier, include_inactive=_can(current_user, "package:update"),
    )
    return success_response(PackageResponse.model_validate(package))


@packages_router.put("/{package_id}")
async def update_package(
    package_id: uuid.UUID,
    body: PackageUpdate,
    db: AsyncSession = Depends(get_db),
    tenant: Tenant = Depends(get_current_tenant),
    current_user: User = Depends(require_permission("package:update")),
):
    package = await PackageService.update(db, tenant.id, package_id, body, actor_id=current_user.id)
    return success_response(PackageResponse.model_validate(package), "Package updated successfully")


@packages_router.delete("/{package_id}")
async def delete_package(
    package_id: uuid.UUID,
    db: AsyncSession = Depends(get_db),
    tenant: Tenant = Depends(get_current_tenant),
    current_user: User = Depends(require_permission("package:delete")),
):
    await PackageService.delete(db, tenant.id, package_id, actor_id=current_user.id)
    return success_response(None, "Package deleted successfully")


@packages_router.get("/{package_id}/reviews")
async def list_package_reviews(
    package_id: uuid.UUID,
    db: AsyncSession = Depends(get_db),
    tenant: Tenant = Depends(get_current_tenant),
    pagination: PaginationParams = Depends(),
):
    return await _list_reviews(db, tenant, BookingType.package, package_id, pagination)


@packages_router.post("/{package_id}/reviews", status_code=status.HTTP_201_CREATED)
async def add_package_review(
    package_id: uuid.UUID,
    body: ReviewCreate,
    db: AsyncSession = Depends(get_db),
    tenant: Tenant = Depends(get_current_tenant),
    current_user: User = Depends(get_current_user),
):
    return await _add_review(db, tenant, BookingType.package, package_id, current_user, body)
