"""Catalog Pydantic v2 schemas — request / response validation.

Naming conventions:
  - *Create / *Update  → request bodies (write)
  - *Response / *Detail → response bodies (read)
  - *Brief → compact read representations
"""


import uuid
from datetime import date, datetime
from decimal import Decimal
from typing import Any, Optional

from pydantic import BaseModel, ConfigDict, Field, model_validator

from tripgo.common.constants import DepartureStatus

_SLUG_PATTERN = r"^[a-z0-9]+(?:-[a-z0-9]+)*$"


# ═════════════════════════════════════════════════════════════════════
# Cruise categories
# ═════════════════════════════════════════════════════════════════════


class CategoryCreate(BaseModel):
    name: str = Field(..., min_length=1, max_length=150)
    slug: Optional[str] = Field(None, max_length=160, pattern=_SLUG_PATTERN)
    description: Optional[str] = None
    icon: Optional[str] = Field(None, max_length=100)
    sort_order: int = 0
    is_active: bool = True


class CategoryUpdate(BaseModel):
    name: Optional[str] = Field(None, min_length=1, max_length=150)
    description: Optional[str] = None
    icon: Optional[str] = Field(None, max_length=100)
    sort_order: Optional[int] = None
    is_active: Optional[bool] = None


class CategoryBrief(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: uuid.UUID
    name: str
    slug: str


class CategoryResponse(CategoryBrief):
    description: Optional[str] = None
    icon: Optional[str] = None
    sort_order: int = 0
    is_active: bool = True
    created_at: datetime
    updated_at: datetime
    # Enriched by the service layer
    cruise_count: int = 0


# ═════════════════════════════════════════════════════════════════════
# Cruises
# ═════════════════════════════════════════════════════════════════════


class CruiseCreate(BaseModel):
    name: str = Field(..., min_length=1, max_length=200)
    slug: Optional[str] = Field(None, max_length=220, pattern=_SLUG_PATTERN)
    description: Optional[str] = None
    departure_port: str = Field(..., min_length=1, max_length=150)
    destination: str = Field(..., min_length=1, max_length=150)
    duration: int = Field(..., ge=1, description="Length of the voyage in days")
    capacity: int = Field(..., ge=1)
    price: Decimal = Field(..., ge=0, max_digits=10, decimal_places=2)
    category_id: Optional[uuid.UUID] = None
    images: list[str] = Field(default_factory=list)
    amenities: list[str] = Field(default_factory=list)
    itinerary: list[Any] = Field(default_factory=list)
    highlights: list[str] = Field(default_factory=list)
    is_active: bool = True


class CruiseUpdate(BaseModel):
    name: Optional[str] = Field(None, min_length=1, max_length=200)
    description: Optional[str] = None
    departure_port: Optional[str] = Field(None, min_length=1, max_length=150)
    destination: Optional[str] = Field(None, min_length=1, max_length=150)
    duration: Optional[int] = Field(None, ge=1)
    capacity: Optional[int] = Field(None, ge=1)
    price: Optional[Decimal] = Field(None, ge=0, max_digits=10, decimal_places=2)
    category_id: Optional[uuid.UUID] = None
    images: Optional[list[str]] = None
    amenities: Optional[list[str]] = None
    itinerary: Optional[list[Any]] = None
    highlights: Optional[list[str]] = None
    is_active: Optional[bool] = None


class CruiseResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: uuid.UUID
    name: str
    slug: str
    description: Optional[str] = None
    departure_port: str
    destination: str
    duration: int
    capacity: int
    price: Decimal
    rating: Decimal
    review_count: int
    category_id: Optional[uuid.UUID] = None
    category: Optional[CategoryBrief] = None
    images: list[str] = []
    amenities: list[str] = []
    itinerary: list[Any] = []
    highlights: list[str] = []
    is_active: bool
    created_at: datetime
    updated_at: datetime


# ── Departures ──────────────────────────────────────────────────────

class DepartureCreate(BaseModel):
    departure_date: date
    return_date: date
    available_cabins: int = Field(0, ge=0)
    price_override: Optional[Decimal] = Field(None, ge=0, max_digits=10, decimal_places=2)
    status: DepartureStatus = DepartureStatus.scheduled

    @model_validator(mode="after")
    def _return_after_departure(self) -> "DepartureCreate":
        if self.return_date <= self.departure_date:
            raise ValueError("return_date must be after departure_date")
        return self


class DepartureUpdate(BaseModel):
    departure_date: Optional[date] = None
    return_date: Optional[date] = None
    available_cabins: Optional[int] = Field(None, ge=0)
    price_override: Optional[Decimal] = Field(None, ge=0, max_digits=10, decimal_places=2)
    status: Optional[DepartureStatus] = None


class DepartureResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: uuid.UUID
    cruise_id: uuid.UUID
    departure_date: date
    return_date: date
    available_cabins: int
    price_override: Optional[Decimal] = None
    status: DepartureStatus


class CruiseDetail(CruiseResponse):
    departures: list[DepartureResponse] = []


# ── Availability ────────────────────────────────────────────────────

class AvailabilityRequest(BaseModel):
    sailing_date: Optional[date] = None
    guests: int = Field(1, ge=0, le=100)


class AvailabilityResponse(BaseModel):
    cruise_id: uuid.UUID
    available: bool
    capacity: int
    remaining_spots: int
    price_per_person: Decimal
    total_price: Decimal
    sailing_date: Optional[date] = None
    guests: int
    reason: Optional[str] = None


# ═════════════════════════════════════════════════════════════════════
# Hotels
# ═════════════════════════════════════════════════════════════════════


class HotelCreate(BaseModel):
    name: str = Field(..., min_length=1, max_length=200)
    slug: Optional[str] = Field(None, max_length=220, pattern=_SLUG_PATTERN)
    description: Optional[str] = None
    address: Optional[str] = None
    city: str = Field(..., min_length=1, max_length=120)
    country: str = Field(..., min_length=1, max_length=120)
    price_per_night: Decimal = Field(..., ge=0, max_digits=10, decimal_places=2)
    images: list[str] = Field(default_factory=list)
    amenities: list[str] = Field(default_factory=list)
    rooms: list[dict[str, Any]] = Field(default_factory=list)
    is_active: bool = True


class HotelUpdate(BaseModel):
    name: Optional[str] = Field(None, min_length=1, max_length=200)
    description: Optional[str] = None
    address: Optional[str] = None
    city: Optional[str] = Field(None, min_length=1, max_length=120)
    country: Optional[str] = Field(None, min_length=1, max_length=120)
    price_per_night: Optional[Decimal] = Field(None, ge=0, max_digits=10, decimal_places=2)
    images: Optional[list[str]] = None
    amenities: Optional[list[str]] = None
    rooms: Optional[list[dict[str, Any]]] = None
    is_active: Optional[bool] = None


class HotelResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: uuid.UUID
    name: str
    slug: str
    description: Optional[str] = None
    address: Optional[str] = None
    city: str
    country: str
    rating: Decimal
    review_count: int
    price_per_night: Decimal
    images: list[str] = []
    amenities: list[str] = []
    rooms: list[dict[str, Any]] = []
    is_active: bool
    created_at: datetime
    updated_at: datetime


# ═════════════════════════════════════════════════════════════════════
# Packages
# ═════════════════════════════════════════════════════════════════════


class PackageCreate(BaseModel):
    name: str = Field(..., min_length=1, max_length=200)
    slug: Optional[str] = Field(None, max_length=220, pattern=_SLUG_PATTERN)
    description: Optional[str] = None
    destination: str = Field(..., min_length=1, max_length=150)
    duration: int = Field(..., ge=1)
    price: Decimal = Field(..., ge=0, max_digits=10, decimal_places=2)
    images: list[str] = Field(default_factory=list)
    inclusions: list[str] = Field(default_factory=list)
    exclusions: list[str] = Field(default_factory=list)
    itinerary: list[Any] = Field(default_factory=list)
    is_active: bool = True


class PackageUpdate(BaseModel):
    name: Optional[str] = Field(None, min_length=1, max_length=200)
    description: Optional[str] = None
    destination: Optional[str] = Field(None, min_length=1, max_length=150)
    duration: Optional[int] = Field(None, ge=1)
    price: Optional[Decimal] = Field(None, ge=0, max_digits=10, decimal_places=2)
    images: Optional[list[str]] = None
    inclusions: Optional[list[str]] = None
    exclusions: Optional[list[str]] = None
    itinerary: Optional[list[Any]] = None
    is_active: Optional[bool] = None


class PackageResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: uuid.UUID
    name: str
    slug: str
    description: Optional[str] = None
    destination: str
    duration: int
    price: Decimal
    rating: Decimal
    review_count: int
    images: list[str] = []
    inclusions: list[str] = []
    exclusions: list[str] = []
    itinerary: list[Any] = []
    is_active: bool
    created_at: datetime
    updated_at: datetime


# ═════════════════════════════════════════════════════════════════════
# Reviews
# ═════════════════════════════════════════════════════════════════════


class ReviewCreate(BaseModel):
    rating: int = Field(..., ge=1, le=5)
    comment: Optional[str] = Field(None, max_length=5000)


class ReviewResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: uuid.UUID
    item_id: uuid.UUID
    user_id: uuid.UUID
    rating: int
    comment: Optional[str] = None
    created_at: datetime
    # Enriched by the service layer
    user_name: Optional[str] = None
