"""
Monetary precision helpers for the kiosk order payload.

Catalog and cart prices are Decimals in major units ("8.50"). The order
backend wants integer minor units ("850") plus a display string. Everything
here converts between the two without ever passing through float arithmetic.

Key Principles:
1. NEVER use float for money (floats are converted through str first)
2. Quantize to the currency's decimals before going to minor units
3. Use ROUND_HALF_UP (half away from zero), which is what the order backend expects
4. Multiply line totals in minor units, never re-derive them from a float total
5. Validate sums match exactly (no ±1¢ drift)
"""

from decimal import Decimal, ROUND_HALF_UP
from typing import Dict, List, Union

DEFAULT_CURRENCY = "EUR"

# Decimal places per ISO 4217 code; anything not listed uses 2
CURRENCY_EXPONENT = {
    "EUR": 2,
    "GBP": 2,
    "CHF": 2,
    "USD": 2,
    "JPY": 0,
    "KWD": 3,
}

Amount = Union[Decimal, str, int, float]


def currency_exponent(currency: str) -> int:
    """
    Decimal places of a currency's minor unit.

    Examples:
        >>> currency_exponent("eur")
        2
        >>> currency_exponent("XXX")
        2
    """
    return CURRENCY_EXPONENT.get(currency.upper(), 2)


def quantize_decimal(currency: str) -> Decimal:
    """The smallest representable step, e.g. Decimal('0.01') for EUR."""
    return Decimal(1).scaleb(-currency_exponent(currency))


def to_decimal(amount: Amount) -> Decimal:
    """Coerce any numeric input to Decimal, going through str for floats."""
    if isinstance(amount, Decimal):
        return amount
    if isinstance(amount, float):
        # repr of a float is its shortest round-tripping form: 0.1 -> "0.1"
        return Decimal(repr(amount))
    return Decimal(amount)


def quantize(currency: str, amount: Amount) -> Decimal:
    """
    Round to currency decimals, half away from zero.

    - 2.345 → 2.35
    - -2.345 → -2.35
    - 2.344 → 2.34
    """
    return to_decimal(amount).quantize(quantize_decimal(currency), rounding=ROUND_HALF_UP)


def to_minor(currency: str, amount: Amount) -> int:
    """
    Major units to integer minor units, rounding first.

    Examples:
        >>> to_minor("EUR", "8.00")
        800
        >>> to_minor("EUR", "10.125")
        1013
        >>> to_minor("EUR", 0.1 + 0.2)
        30
    """
    return int(quantize(currency, amount).scaleb(currency_exponent(currency)))


def from_minor(currency: str, minor: int) -> Decimal:
    """Integer minor units back to a Decimal in major units: 1013 -> Decimal('10.13')."""
    return Decimal(minor).scaleb(-currency_exponent(currency))


def format_money(currency: str, minor: int) -> str:
    """
    Format minor units the way the order backend displays them.

    Trailing fractional zeros are dropped, so whole amounts carry no decimals.

    Examples:
        >>> format_money("EUR", 850)
        '8.5 EUR'
        >>> format_money("EUR", 800)
        '8 EUR'
        >>> format_money("EUR", 1235)
        '12.35 EUR'
        >>> format_money("JPY", 100)
        '100 JPY'
    """
    text = f"{from_minor(currency, minor):.{currency_exponent(currency)}f}"
    if "." in text:
        text = text.rstrip("0").rstrip(".")
    return f"{text} {currency.upper()}"


def money_field(currency: str, minor: int) -> Dict[str, object]:
    """Build one `{amount, currency_code, formatted_amount}` wire object."""
    return {
        "amount": minor,
        "currency_code": currency.upper(),
        "formatted_amount": format_money(currency, minor),
    }


def price_field(currency: str, unit_minor: int, quantity: int) -> Dict[str, Dict[str, object]]:
    """
    Build a `{unit_price, total_price}` pair.

    The total is computed in integer minor units (unit × quantity) so that
    summing line totals never drifts from the unit prices.

    Examples:
        >>> price_field("EUR", 150, 3)["total_price"]["amount"]
        450
    """
    return {
        "unit_price": money_field(currency, unit_minor),
        "total_price": money_field(currency, unit_minor * quantity),
    }


def validate_minor_sum(
    parts: List[int],
    expected_total: int,
    context: str = "",
    tolerance: int = 0,
) -> None:
    """
    Check that the parts of an order add up to its total.

    Raises:
        ValueError: If the sum is off by more than `tolerance` minor units

    Examples:
        >>> validate_minor_sum([800, 100], 900)
        >>> validate_minor_sum([800, 101], 900)
        Traceback (most recent call last):
        ValueError: Order total mismatch: expected 900, got 901 (diff: +1)
    """
    actual = sum(parts)
    diff = actual - expected_total
    if abs(diff) <= tolerance:
        return

    where = f" {context}" if context else ""
    raise ValueError(f"Order total mismatch{where}: expected {expected_total}, got {actual} (diff: {diff:+d})")
