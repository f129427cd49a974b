"""Checkout service — availability + server-side pricing for a cruise."""

from __future__ import annotations

import uuid
from typing import Optional

from sqlalchemy.ext.asyncio import AsyncSession

from tripgo.catalog.service import CruiseService
from tripgo.checkout.pricing import calculate_quote
from tripgo.checkout.schemas import CheckoutStep, CruiseCheckoutInput, QuoteResponse


class CheckoutService:

    @staticmethod
    async def quote_cruise(
        db: AsyncSession,
        tenant_id: uuid.UUID,
        cruise_id: uuid.UUID,
        data: CruiseCheckoutInput,
        *,
        exclude_booking_id: Optional[uuid.UUID] = None,
    ) -> QuoteResponse:
        """Check availability for the sailing and price it from the stored cruise price."""
        cruise = await CruiseService.get(db, tenant_id, cruise_id)
        availability = await CruiseService.check_availability(
            db,
            tenant_id,
            cruise.id,
            sailing_date=data.sailing_date,
            guests=data.guests,
            exclude_booking_id=exclude_booking_id,
        )
        quote = calculate_quote(
            cruise.price,
            adults=data.adults,
            children=data.children,
            cabin=data.cabin,
            addons=data.addons,
            promo_code=data.promo_code,
        )
        return QuoteResponse(
            cruise_id=cruise.id,
            cruise_name=cruise.name,
            availability=availability,
            quote=quote,
            bookable=availability.available,
            next_step=CheckoutStep.payment if availability.available else None,
        )
