"""
Numeric boundary helpers.

Editing-layer values arrive as numbers or as their string serialization
(often half-typed). `parse_decimal` is the single conversion point: the
schemas call it once in their `mode="before"` validators and everything
downstream works on `Decimal` only.
"""

from decimal import ROUND_HALF_UP, Decimal, InvalidOperation, localcontext
from typing import Any

MONEY_QUANT = Decimal("0.01")
ZERO = Decimal("0")
ONE = Decimal("1")
HUNDRED = Decimal("100")

# One lakh crore. Larger inputs are treated as malformed.
MAX_MAGNITUDE = Decimal("1e12")
MONEY_PRECISION = 60


def parse_decimal(value: Any, default: Decimal) -> Decimal:
    """
    Convert a loosely typed numeric value to Decimal.

    Accepts Decimal, int, float and numeric strings (surrounding whitespace
    and thousands separators are ignored). Anything else, including
    None, booleans, empty strings, NaN, infinities and magnitudes above
    MAX_MAGNITUDE, yields `default`.

    Args:
        value: Raw value from the editing layer
        default: Value to use when `value` is not a finite number

    Returns:
        A finite Decimal.
    """
    if value is None or isinstance(value, bool):
        return default

    if isinstance(value, Decimal):
        result = value
    elif isinstance(value, (int, float)):
        result = Decimal(str(value))
    elif isinstance(value, str):
        cleaned = value.strip().replace(",", "")
        if not cleaned:
            return default
        try:
            result = Decimal(cleaned)
        except InvalidOperation:
            return default
    else:
        return default

    if not result.is_finite() or abs(result) > MAX_MAGNITUDE:
        return default

    return result


def quantize_money(value: Decimal) -> Decimal:
    """Round to paise (two decimals, half up). Negative zero becomes 0.00."""
    with localcontext() as ctx:
        ctx.prec = MONEY_PRECISION
        return value.quantize(MONEY_QUANT, rounding=ROUND_HALF_UP) + ZERO


def to_fixed_point(value: Decimal) -> str:
    """
    Serialize a monetary Decimal as a fixed-point string with two decimals.

    This is the persistence format: never a binary float.
    """
    return f"{quantize_money(value):.2f}"


def format_indian(value: Decimal) -> str:
    """
    Format an amount with Indian digit grouping, e.g. 110920 -> "1,10,920.00".

    The last three integer digits form one group, every group above it has
    two digits (thousand, lakh, crore).
    """
    text = to_fixed_point(value)
    sign = ""
    if text.startswith("-"):
        sign, text = "-", text[1:]

    whole, fraction = text.split(".")
    if len(whole) > 3:
        head, tail = whole[:-3], whole[-3:]
        groups = []
        while len(head) > 2:
            groups.insert(0, head[-2:])
            head = head[:-2]
        if head:
            groups.insert(0, head)
        whole = ",".join(groups + [tail])

    return f"{sign}{whole}.{fraction}"


def format_quantity(value: Decimal) -> str:
    """Render a quantity without trailing zeros ("2", "2.5")."""
    normalized = value.normalize()
    if normalized == normalized.to_integral_value():
        return str(normalized.quantize(ONE))
    return format(normalized, "f")
