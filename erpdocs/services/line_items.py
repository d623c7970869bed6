"""
Line item calculator.

Computes the taxable base of one line item. Tax is resolved separately
(see tax_rules) on the discounted base returned here.
"""

from dataclasses import dataclass
from decimal import Decimal

from erpdocs.schemas.line_items import LineItem
from erpdocs.utils.constants import DISCOUNT_KINDS
from erpdocs.utils.numbers import HUNDRED, ZERO, quantize_money


@dataclass(frozen=True)
class LineItemAmounts:
    """
    Attributes:
        base: quantity * unit_rate
        discounted_base: base after the item discount, never negative
    """
    base: Decimal
    discounted_base: Decimal


def compute_line_item(item: LineItem) -> LineItemAmounts:
    """
    Compute base and discounted base for one item.

    The item discount is applied to `base` only: never after tax and never
    combined with the document-level discount. A discount larger than the
    base clamps the discounted base to zero.

    Args:
        item: Validated line item (numeric fields already coerced)

    Returns:
        LineItemAmounts with both values rounded to paise.
    """
    base = quantize_money(item.quantity * item.unit_rate)
    discounted = base

    discount = item.item_discount
    if discount is not None and discount.value > 0:
        if discount.kind == DISCOUNT_KINDS["PERCENTAGE"]:
            discounted = base - (base * discount.value / HUNDRED)
        else:
            discounted = base - discount.value

    if discounted < 0:
        discounted = ZERO

    return LineItemAmounts(base=base, discounted_base=quantize_money(discounted))
