"""
GST rule resolution.

Decides from the counterparty's jurisdiction whether tax is split
(CGST + SGST), unified (IGST), exempt (cross-border) or pending (region not
captured yet), and computes the amounts on a taxable base.

The branches are evaluated in this order:
1. country differs from the home country   -> exempt, no tax
2. region equals the home region           -> split, rate/2 + rate/2
3. region set and differs from home region -> unified, full rate
4. region empty                            -> pending, no tax

The draft recalculation and the commit-time recalculation both reach this
module through totals.aggregate(); nothing else computes GST.
"""

import logging
from decimal import Decimal
from typing import Optional

from erpdocs.config import BusinessConfig, get_business_config
from erpdocs.schemas.line_items import Jurisdiction, TaxOutcome, TaxRegime
from erpdocs.utils.numbers import HUNDRED, ZERO, quantize_money

logger = logging.getLogger(__name__)


def _normalize(value: str) -> str:
    return " ".join(value.split()).casefold()


def resolve_regime(counterparty: Jurisdiction, config: Optional[BusinessConfig] = None) -> TaxRegime:
    """
    Pick the tax regime for a counterparty.

    An empty country is read as the home country: drafts start from the
    company's own country and most counterparties never change it.

    Args:
        counterparty: Jurisdiction of the customer or vendor
        config: Business constants (defaults to the configured ones)

    Returns:
        One of "exempt", "split", "unified", "pending".
    """
    config = config or get_business_config()

    country = _normalize(counterparty.country) or _normalize(config.home_country)
    if country != _normalize(config.home_country):
        return "exempt"

    region = _normalize(counterparty.region)
    if region and region == _normalize(config.home_region):
        return "split"
    if region:
        return "unified"

    return "pending"


def resolve_tax(
    base: Decimal,
    counterparty: Jurisdiction,
    config: Optional[BusinessConfig] = None,
) -> TaxOutcome:
    """
    Compute the tax outcome for one taxable base.

    Split halves are rounded individually, so CGST always equals SGST.

    Args:
        base: Taxable base (already discounted, never negative)
        counterparty: Jurisdiction of the customer or vendor
        config: Business constants (defaults to the configured ones)

    Returns:
        TaxOutcome with exactly one family of components populated, or none.
    """
    config = config or get_business_config()
    regime = resolve_regime(counterparty, config)

    if regime == "split":
        half = quantize_money(base * config.tax_rate / 2 / HUNDRED)
        return TaxOutcome(
            split_tax_a=half,
            split_tax_b=half,
            regime=regime,
            rate=config.tax_rate,
        )

    if regime == "unified":
        return TaxOutcome(
            unified_tax=quantize_money(base * config.tax_rate / HUNDRED),
            regime=regime,
            rate=config.tax_rate,
        )

    if regime == "pending":
        logger.debug("Counterparty region not set; tax pending (zero)")

    return TaxOutcome(regime=regime, rate=ZERO)
