"""Cruise checkout calculator — per-person price, promo codes, tax rounding."""

from __future__ import annotations

from decimal import Decimal

import pytest

from tripgo.checkout.pricing import (
    PROMO_CODES,
    SERVICE_FEE,
    calculate_quote,
    normalize_promo_code,
    promo_discount,
    round_half_up,
)
from tripgo.common.exceptions import ValidationException


# ═════════════════════════════════════════════════════════════════════
# Quote arithmetic
# ═════════════════════════════════════════════════════════════════════


class TestCalculateQuote:

    def test_default_balcony_no_promo(self):
        quote = calculate_quote(1000, adults=2)
        assert quote.cabin == "Balcony"
        assert quote.per_person == Decimal("1260")
        assert quote.subtotal == Decimal("2520")
        assert quote.discount == 0
        assert quote.taxes == Decimal("302")  # 302.40 rounded
        assert quote.fees == SERVICE_FEE
        assert quote.total == Decimal("2881")

    def test_cabin_and_addons_per_traveler(self):
        quote = calculate_quote(
            "1000", adults=2, children=1, cabin="Oceanview", addons=["wifi", "drinks"],
        )
        assert quote.addons_per_person == Decimal("31")
        assert quote.per_person == Decimal("1151")
        assert quote.travelers == 3
        assert quote.subtotal == Decimal("3453")

    def test_duplicate_addons_counted_once(self):
        quote = calculate_quote(500, adults=1, cabin="Interior", addons=["wifi", "wifi", "insurance"])
        assert quote.addons == ["wifi", "insurance"]
        assert quote.per_person == Decimal("518")

    def test_sail50_caps_at_fifty(self):
        quote = calculate_quote(1000, adults=2, promo_code="SAIL50")
        assert quote.discount == Decimal("50")
        assert quote.taxed_base == Decimal("2470")
        assert quote.taxes == Decimal("296")
        assert quote.total == Decimal("2825")

    def test_sail50_below_cap_uses_five_percent(self):
        quote = calculate_quote(100, adults=1, cabin="Interior", promo_code="SAIL50")
        assert quote.discount == Decimal("5.00")
        assert quote.taxes == Decimal("11")
        assert quote.total == Decimal("165")

    def test_wow10_rounds_half_up(self):
        # 10% of 1005 = 100.5 -> 101
        quote = calculate_quote(1005, adults=1, cabin="Interior", promo_code="WOW10")
        assert quote.discount == Decimal("101")
        assert quote.taxed_base == Decimal("904")
        assert quote.taxes == Decimal("108")
        assert quote.total == Decimal("1071")

    def test_promo_code_is_normalised(self):
        quote = calculate_quote(1000, adults=2, promo_code="  wow10 ")
        assert quote.promo_code == "WOW10"
        assert quote.promo_applied is True
        assert quote.discount == Decimal("252")

    def test_unknown_promo_gives_no_discount(self):
        quote = calculate_quote(1000, adults=2, promo_code="BOGUS")
        assert quote.promo_code == "BOGUS"
        assert quote.promo_applied is False
        assert quote.discount == 0
        assert quote.total == Decimal("2881")

    def test_free_cruise_still_pays_fee(self):
        quote = calculate_quote(0, adults=1, cabin="Interior")
        assert quote.taxes == 0
        assert quote.total == SERVICE_FEE

    def test_same_inputs_same_quote(self):
        first = calculate_quote(1234, adults=2, children=2, addons=["excursion"], promo_code="SAIL50")
        second = calculate_quote(1234, adults=2, children=2, addons=["excursion"], promo_code="SAIL50")
        assert first == second


# ═════════════════════════════════════════════════════════════════════
# Validation
# ═════════════════════════════════════════════════════════════════════


class TestQuoteValidation:

    def test_unknown_cabin(self):
        with pytest.raises(ValidationException) as exc:
            calculate_quote(1000, adults=1, cabin="Penthouse")
        assert "cabin" in exc.value.errors

    def test_no_travelers(self):
        with pytest.raises(ValidationException) as exc:
            calculate_quote(1000, adults=0, children=0)
        assert "travelers" in exc.value.errors

    def test_unknown_addon(self):
        with pytest.raises(ValidationException) as exc:
            calculate_quote(1000, adults=1, addons=["jetski"])
        assert "addons" in exc.value.errors

    def test_negative_base_price(self):
        with pytest.raises(ValidationException) as exc:
            calculate_quote(-1, adults=1)
        assert "base_price" in exc.value.errors
        assert exc.value.status_code == 422


# ═════════════════════════════════════════════════════════════════════
# Helpers
# ═════════════════════════════════════════════════════════════════════


def test_round_half_up():
    assert round_half_up(Decimal("2.5")) == Decimal("3")
    assert round_half_up(Decimal("3.5")) == Decimal("4")
    assert round_half_up(Decimal("2.49")) == Decimal("2")


def test_normalize_promo_code():
    assert normalize_promo_code(None) is None
    assert normalize_promo_code("   ") is None
    assert normalize_promo_code(" sail50") == "SAIL50"


def test_promo_discount_table():
    assert set(PROMO_CODES) == {"SAIL50", "WOW10"}
    assert promo_discount("sail50", Decimal("2000")) == Decimal("50")
    assert promo_discount(None, Decimal("2000")) == 0
