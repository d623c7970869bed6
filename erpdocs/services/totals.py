"""
Totals aggregation.

`aggregate()` is the single source of truth for a document's numbers. It is
pure: it reads its arguments, never mutates them, never raises for malformed
data (the models already coerced it) and returns an immutable breakdown.
Editing sessions call it on every change; the commit path calls it once
more and persists that result, not the client's.
"""

import logging
from decimal import Decimal
from typing import Iterable, Optional, Sequence

from erpdocs.config import BusinessConfig, get_business_config
from erpdocs.schemas.line_items import (
    Discount,
    DocumentCharge,
    Jurisdiction,
    LineItem,
    LineItemResult,
    TaxRegime,
    TotalsBreakdown,
)
from erpdocs.services.line_items import compute_line_item
from erpdocs.services.tax_rules import resolve_regime, resolve_tax
from erpdocs.utils.constants import DISCOUNT_KINDS, TAX_REGIMES
from erpdocs.utils.numbers import HUNDRED, ZERO, quantize_money

logger = logging.getLogger(__name__)


def _sum_amounts(entries: Iterable[DocumentCharge]) -> Decimal:
    return quantize_money(sum((entry.amount for entry in entries), ZERO))


def compute_document_discount(document_discount: Optional[Discount], running_total: Decimal) -> Decimal:
    """
    Amount of the document-level discount.

    A percentage applies to `running_total` (taxable subtotal + tax + extra
    charges, before any discount entry is subtracted) and is capped at 100%.
    An amount is used literally.
    """
    if document_discount is None or document_discount.value <= 0:
        return ZERO

    if document_discount.kind == DISCOUNT_KINDS["PERCENTAGE"]:
        percent = min(document_discount.value, HUNDRED)
        return quantize_money(running_total * percent / HUNDRED)

    return quantize_money(document_discount.value)


def aggregate(
    items: Sequence[LineItem],
    charges: Sequence[DocumentCharge],
    discounts: Sequence[DocumentCharge],
    document_discount: Optional[Discount],
    counterparty: Jurisdiction,
    config: Optional[BusinessConfig] = None,
) -> TotalsBreakdown:
    """
    Compute the full totals breakdown of a document.

    Steps:
    1. Per item: discounted base, then tax on that base
    2. Taxable subtotal and tax totals as sums of the per-item values
    3. Extra charges and discount entries as literal sums
    4. Document discount against subtotal + tax + extra charges
    5. Grand total; a negative result is clamped to zero

    Args:
        items: Line items in display order
        charges: Extra charges (added)
        discounts: Discount entries (subtracted)
        document_discount: Optional document-level discount
        counterparty: Jurisdiction of the customer or vendor
        config: Business constants (defaults to the configured ones)

    Returns:
        TotalsBreakdown whose `lines` follow the order of `items`.
    """
    config = config or get_business_config()

    lines = []
    taxable_subtotal = ZERO
    split_a_total = ZERO
    split_b_total = ZERO
    unified_total = ZERO

    for item in items:
        amounts = compute_line_item(item)
        tax = resolve_tax(amounts.discounted_base, counterparty, config)

        lines.append(
            LineItemResult(
                base=amounts.base,
                discounted_base=amounts.discounted_base,
                tax=tax,
                line_amount=amounts.discounted_base + tax.total,
            )
        )

        taxable_subtotal += amounts.discounted_base
        split_a_total += tax.split_tax_a
        split_b_total += tax.split_tax_b
        unified_total += tax.unified_tax

    extra_charges_total = _sum_amounts(charges)
    discounts_total = _sum_amounts(discounts)

    running_total = taxable_subtotal + split_a_total + split_b_total + unified_total + extra_charges_total
    document_discount_amount = compute_document_discount(document_discount, running_total)

    grand_total = running_total - discounts_total - document_discount_amount
    if grand_total < 0:
        logger.warning(
            f"Discounts exceed document value by {-grand_total}; grand total clamped to 0"
        )
        grand_total = ZERO

    regime: TaxRegime = resolve_regime(counterparty, config)
    tax_rate = config.tax_rate if regime in (TAX_REGIMES["SPLIT"], TAX_REGIMES["UNIFIED"]) else ZERO

    logger.debug(
        f"Aggregated {len(lines)} items: regime={regime}, grand_total={grand_total}"
    )

    return TotalsBreakdown(
        taxable_subtotal=quantize_money(taxable_subtotal),
        split_tax_a_total=quantize_money(split_a_total),
        split_tax_b_total=quantize_money(split_b_total),
        unified_tax_total=quantize_money(unified_total),
        extra_charges_total=extra_charges_total,
        discounts_total=discounts_total,
        document_discount_amount=document_discount_amount,
        grand_total=quantize_money(grand_total),
        tax_regime=regime,
        tax_rate=tax_rate,
        lines=lines,
    )
