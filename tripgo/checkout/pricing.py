"""Cruise checkout price calculator.

Pure and synchronous: the same inputs always give the same ``PriceQuote``.

    per_person   = base + cabin upcharge + sum(selected add-ons)
    subtotal     = per_person * (adults + children)
    discount     = promo rule applied to subtotal (unknown code -> 0)
    taxed_base   = max(0, subtotal - discount)
    taxes        = round(taxed_base * 0.12)
    fees         = 59
    total        = taxed_base + taxes + fees

``round`` is half-up to whole currency units.
"""

from __future__ import annotations

from decimal import ROUND_HALF_UP, Decimal
from typing import Iterable, Literal, Optional

from pydantic import BaseModel

from tripgo.common.exceptions import ValidationException

# ── Price tables ────────────────────────────────────────────────────

CABIN_UPCHARGES: dict[str, Decimal] = {
    "Interior": Decimal("0"),
    "Oceanview": Decimal("120"),
    "Balcony": Decimal("260"),
    "Suite": Decimal("520"),
}

ADDON_PRICES: dict[str, Decimal] = {
    "wifi": Decimal("6"),
    "drinks": Decimal("25"),
    "excursion": Decimal("60"),
    "insurance": Decimal("12"),
}

TAX_RATE = Decimal("0.12")
SERVICE_FEE = Decimal("59")
DEFAULT_CABIN = "Balcony"


def round_half_up(value: Decimal) -> Decimal:
    return value.quantize(Decimal("1"), rounding=ROUND_HALF_UP)


# ── Promo codes ─────────────────────────────────────────────────────

class PromoRule(BaseModel):
    """A promo code's discount on the subtotal.

    * ``capped_percent`` — ``min(cap, subtotal * percent)``, not rounded.
    * ``percent`` — ``round(subtotal * percent)``.
    """

    code: str
    kind: Literal["capped_percent", "percent"]
    percent: Decimal
    cap: Optional[Decimal] = None
    description: str = ""

    def discount(self, subtotal: Decimal) -> Decimal:
        raw = subtotal * self.percent
        if self.kind == "capped_percent":
            return min(self.cap if self.cap is not None else raw, raw)
        return round_half_up(raw)


PROMO_CODES: dict[str, PromoRule] = {
    "SAIL50": PromoRule(
        code="SAIL50",
        kind="capped_percent",
        percent=Decimal("0.05"),
        cap=Decimal("50"),
        description="5% off, up to 50",
    ),
    "WOW10": PromoRule(
        code="WOW10",
        kind="percent",
        percent=Decimal("0.10"),
        description="10% off",
    ),
}


def normalize_promo_code(code: Optional[str]) -> Optional[str]:
    """Trim and upper-case a code; blank becomes ``None``."""
    if code is None:
        return None
    code = code.strip().upper()
    return code or None


def promo_discount(code: Optional[str], subtotal: Decimal) -> Decimal:
    """Discount for *code*; unknown codes silently give zero."""
    rule = PROMO_CODES.get(normalize_promo_code(code) or "")
    if rule is None:
        return Decimal("0")
    return rule.discount(subtotal)


# ── Quote ───────────────────────────────────────────────────────────

class PriceQuote(BaseModel):
    base_price: Decimal
    cabin: str
    cabin_upcharge: Decimal
    addons: list[str]
    addons_per_person: Decimal
    per_person: Decimal
    adults: int
    children: int
    travelers: int
    subtotal: Decimal
    promo_code: Optional[str] = None
    promo_applied: bool = False
    discount: Decimal
    taxed_base: Decimal
    taxes: Decimal
    fees: Decimal
    total: Decimal


def calculate_quote(
    base_price: Decimal | int | float | str,
    adults: int,
    children: int = 0,
    cabin: str = DEFAULT_CABIN,
    addons: Iterable[str] = (),
    promo_code: Optional[str] = None,
) -> PriceQuote:
    """Price a cruise booking; raises ``ValidationException`` on bad inputs."""
    errors: dict[str, list[str]] = {}
    base = Decimal(str(base_price))
    if base < 0:
        errors.setdefault("base_price", []).append("Base price cannot be negative.")
    if adults < 0:
        errors.setdefault("adults", []).append("Adults cannot be negative.")
    if children < 0:
        errors.setdefault("children", []).append("Children cannot be negative.")
    if adults + children <= 0:
        errors.setdefault("travelers", []).append("At least one traveler is required.")
    if cabin not in CABIN_UPCHARGES:
        errors.setdefault("cabin", []).append(
            f"Unknown cabin '{cabin}'. Choose one of: {', '.join(CABIN_UPCHARGES)}.",
        )

    # Keep order, drop duplicates
    selected = list(dict.fromkeys(addons))
    unknown = [name for name in selected if name not in ADDON_PRICES]
    if unknown:
        errors.setdefault("addons", []).append(f"Unknown add-ons: {', '.join(unknown)}.")
    if errors:
        raise ValidationException(errors)

    cabin_upcharge = CABIN_UPCHARGES[cabin]
    addons_per_person = sum((ADDON_PRICES[name] for name in selected), Decimal("0"))
    per_person = base + cabin_upcharge + addons_per_person
    travelers = adults + children
    subtotal = per_person * travelers

    code = normalize_promo_code(promo_code)
    discount = promo_discount(code, subtotal)
    taxed_base = max(Decimal("0"), subtotal - discount)
    taxes = round_half_up(taxed_base * TAX_RATE)
    total = taxed_base + taxes + SERVICE_FEE

    return PriceQuote(
        base_price=base,
        cabin=cabin,
        cabin_upcharge=cabin_upcharge,
        addons=selected,
        addons_per_person=addons_per_person,
        per_person=per_person,
        adults=adults,
        children=children,
        travelers=travelers,
        subtotal=subtotal,
        promo_code=code,
        promo_applied=code in PROMO_CODES,
        discount=discount,
        taxed_base=taxed_base,
        taxes=taxes,
        fees=SERVICE_FEE,
        total=total,
    )
