"""
Unit tests for payments.money module.

These tests guard the order document against cent drift: every amount the
backend receives must add up exactly.
"""

import pytest
from decimal import Decimal

from payments.money import (
    currency_exponent,
    quantize_decimal,
    quantize,
    to_minor,
    from_minor,
    format_money,
    money_field,
    price_field,
    validate_minor_sum,
)


class TestCurrencyExponent:
    """Test currency exponent lookup."""

    def test_eur_exponent(self):
        assert currency_exponent("EUR") == 2

    def test_jpy_exponent(self):
        assert currency_exponent("JPY") == 0

    def test_kwd_exponent(self):
        assert currency_exponent("KWD") == 3

    def test_case_insensitive(self):
        assert currency_exponent("eur") == 2

    def test_unknown_currency_defaults_to_2(self):
        assert currency_exponent("XXX") == 2

    def test_quantize_decimal(self):
        assert quantize_decimal("EUR") == Decimal("0.01")
        assert quantize_decimal("JPY") == Decimal("1")


class TestQuantize:
    """Test Decimal quantization, half away from zero."""

    def test_half_rounds_up(self):
        assert quantize("EUR", "10.125") == Decimal("10.13")
        assert quantize("EUR", "10.135") == Decimal("10.14")

    def test_negative_half_rounds_away_from_zero(self):
        assert quantize("EUR", "-2.345") == Decimal("-2.35")

    def test_below_half_rounds_down(self):
        assert quantize("EUR", "2.344") == Decimal("2.34")

    def test_jpy_no_decimals(self):
        assert quantize("JPY", "1234.5") == Decimal("1235")

    def test_from_float(self):
        # Floats go through str, so 10.125 is not 10.12499999...
        assert quantize("EUR", 10.125) == Decimal("10.13")

    def test_from_int(self):
        assert quantize("EUR", 10) == Decimal("10.00")


class TestToMinor:
    """Test conversion to minor units (cents)."""

    def test_eur_to_cents(self):
        assert to_minor("EUR", "8.00") == 800
        assert to_minor("EUR", Decimal("1.00")) == 100

    def test_rounds_before_converting(self):
        assert to_minor("EUR", "10.125") == 1013

    def test_float_sum_has_no_binary_drift(self):
        assert to_minor("EUR", 0.1 + 0.2) == 30

    def test_jpy(self):
        assert to_minor("JPY", "1234.56") == 1235

    def test_kwd_three_decimals(self):
        assert to_minor("KWD", "10.123") == 10123

    def test_negative_amount(self):
        assert to_minor("EUR", "-10.50") == -1050

    def test_zero(self):
        assert to_minor("EUR", "0") == 0


class TestFromMinor:
    """Test conversion from minor units to Decimal."""

    def test_eur_from_cents(self):
        assert from_minor("EUR", 1013) == Decimal("10.13")

    def test_jpy_from_yen(self):
        assert from_minor("JPY", 1235) == Decimal("1235")

    def test_zero(self):
        assert from_minor("EUR", 0) == Decimal("0.00")


class TestWireFields:
    """Test the money objects embedded in the order document."""

    def test_format_money(self):
        assert format_money("EUR", 850) == "8.5 EUR"
        assert format_money("EUR", 1235) == "12.35 EUR"
        assert format_money("eur", 5) == "0.05 EUR"
        assert format_money("JPY", 1235) == "1235 JPY"

    def test_format_money_drops_trailing_zeros(self):
        assert format_money("EUR", 800) == "8 EUR"
        assert format_money("EUR", 1000) == "10 EUR"
        assert format_money("EUR", 0) == "0 EUR"
        # Integer currencies keep their zeros
        assert format_money("JPY", 100) == "100 JPY"
        assert format_money("KWD", 1500) == "1.5 KWD"

    def test_money_field(self):
        assert money_field("EUR", 800) == {
            "amount": 800,
            "currency_code": "EUR",
            "formatted_amount": "8 EUR",
        }

    def test_price_field_total_is_unit_times_quantity(self):
        field = price_field("EUR", 150, 3)
        assert field["unit_price"]["amount"] == 150
        assert field["total_price"]["amount"] == 450
        assert field["total_price"]["formatted_amount"] == "4.5 EUR"

    def test_price_field_zero_price(self):
        field = price_field("EUR", 0, 4)
        assert field["total_price"]["amount"] == 0

    def test_thirds_do_not_drift(self):
        # 3 x 0.33 is 99 cents, never a rounded 1.00 recomputed from a float
        unit = to_minor("EUR", Decimal("1") / 3)
        assert price_field("EUR", unit, 3)["total_price"]["amount"] == 99


class TestValidateMinorSum:
    """Test sum validation (catches penny drift)."""

    def test_exact_match_passes(self):
        validate_minor_sum([800, 100, 0], 900)

    def test_mismatch_raises(self):
        with pytest.raises(ValueError, match="expected 900, got 901"):
            validate_minor_sum([800, 101], 900)

    def test_context_in_message(self):
        with pytest.raises(ValueError, match="for order 42"):
            validate_minor_sum([1], 2, context="for order 42")

    def test_tolerance(self):
        validate_minor_sum([101], 100, tolerance=1)
        with pytest.raises(ValueError):
            validate_minor_sum([102], 100, tolerance=1)

    def test_empty_components(self):
        validate_minor_sum([], 0)
