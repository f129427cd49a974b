"""Checkout router — price tables and cruise quotes."""


import uuid

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from tripgo.checkout.pricing import ADDON_PRICES, CABIN_UPCHARGES, SERVICE_FEE, TAX_RATE
from tripgo.checkout.schemas import CHECKOUT_STEPS, CheckoutOptions, CruiseCheckoutInput
from tripgo.checkout.service import CheckoutService
from tripgo.common.responses import success_response
from tripgo.database import get_db
from tripgo.tenants.dependencies import get_current_tenant
from tripgo.tenants.models import Tenant

router = APIRouter(prefix="", tags=["checkout"])


@router.get("/options")
async def checkout_options():
    return success_response(
        CheckoutOptions(
            steps=CHECKOUT_STEPS,
            cabins=CABIN_UPCHARGES,
            addons=ADDON_PRICES,
            tax_rate=TAX_RATE,
            service_fee=SERVICE_FEE,
        ),
    )


@router.post("/cruises/{cruise_id}/quote")
async def quote_cruise(
    cruise_id: uuid.UUID,
    body: CruiseCheckoutInput,
    db: AsyncSession = Depends(get_db),
    tenant: Tenant = Depends(get_current_tenant),
):
    result = await CheckoutService.quote_cruise(db, tenant.id, cruise_id, body)
    message = None if result.bookable else result.availability.reason
    return success_response(result, message)
