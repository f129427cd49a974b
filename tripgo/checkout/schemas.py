"""Checkout Pydantic schemas."""


import enum
import uuid
from datetime import date
from decimal import Decimal
from typing import Optional

from pydantic import BaseModel, Field

from tripgo.catalog.schemas import AvailabilityResponse
from tripgo.checkout.pricing import DEFAULT_CABIN, PriceQuote


class CheckoutStep(str, enum.Enum):
    details = "details"
    payment = "payment"
    confirm = "confirm"


CHECKOUT_STEPS: list[CheckoutStep] = [CheckoutStep.details, CheckoutStep.payment, CheckoutStep.confirm]


class CruiseCheckoutInput(BaseModel):
    """Traveller choices on the details step; reused by booking creation."""

    sailing_date: date
    adults: int = Field(2, ge=1, le=20)
    children: int = Field(0, ge=0, le=20)
    cabin: str = DEFAULT_CABIN
    addons: list[str] = Field(default_factory=list)
    promo_code: Optional[str] = Field(None, max_length=50)

    @property
    def guests(self) -> int:
        return self.adults + self.children


class QuoteResponse(BaseModel):
    cruise_id: uuid.UUID
    cruise_name: str
    availability: AvailabilityResponse
    quote: PriceQuote
    bookable: bool
    next_step: Optional[CheckoutStep] = None


class CheckoutOptions(BaseModel):
    steps: list[CheckoutStep]
    cabins: dict[str, Decimal]
    addons: dict[str, Decimal]
    tax_rate: Decimal
    service_fee: Decimal
