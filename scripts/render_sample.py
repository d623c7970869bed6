#!/usr/bin/env python3
"""
Sample Document Render Script

Renders a sample quotation, proforma invoice or purchase order locally,
without Supabase or the HTTP layer, and prints the totals block.

Usage:
    python scripts/render_sample.py
    python scripts/render_sample.py --kind purchaseOrder --region Karnataka
    python scripts/render_sample.py --kind proforma --country Germany --out proforma.html
"""

import argparse
import logging
import os
import sys

# Add the project root to the path
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from erpdocs.config import get_business_config
from erpdocs.schemas.documents import DocumentMeta, PartyInfo, RenderOptions
from erpdocs.schemas.line_items import (
    Discount,
    DocumentCharge,
    Jurisdiction,
    LineItem,
)
from erpdocs.services.amount_in_words import amount_in_words
from erpdocs.services.renderer import LAYOUTS, render, totals_rows
from erpdocs.services.totals import aggregate


# Configure logging
logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s"
)
logger = logging.getLogger(__name__)


SAMPLE_ITEMS = [
    {"description": "Hot Mounting Press 24x36", "quantity": "1", "rate": "144000", "hsn_sac": "8443"},
    {
        "description": "Lamination Roll (Glossy)",
        "quantity": "4",
        "rate": "2500",
        "discount": "10",
        "discountType": "percentage",
        "unit": "roll",
    },
    {"description": "Installation", "quantity": "1", "rate": "5000", "discount": "500"},
]


def build_sample(region: str, country: str, with_charges: bool):
    """Build the sample inputs for one counterparty jurisdiction."""
    items = [LineItem.model_validate(raw) for raw in SAMPLE_ITEMS]
    charges = [DocumentCharge(description="Freight", amount="1200")] if with_charges else []
    discounts = [DocumentCharge(description="Loyalty", amount="300")] if with_charges else []
    party = PartyInfo(
        name="Rahul Mehta",
        company="Mehta Prints Pvt. Ltd.",
        address="12 Industrial Estate",
        city="Pune",
        pincode="411019",
        jurisdiction=Jurisdiction(region=region, country=country),
        gstin="27ABCDE1234F1Z5",
    )
    return items, charges, discounts, party


def print_totals(kind: str, breakdown, currency: str, currency_label: str):
    """Pretty print the totals block exactly as it is rendered."""
    print("\n" + "=" * 60)
    print(f"{LAYOUTS[kind].title.upper()}  (regime: {breakdown.tax_regime})")
    print("=" * 60)
    for label, value in totals_rows(breakdown, currency):
        print(f"  {label:<30} {value:>20}")
    print()
    print(f"  {amount_in_words(breakdown.grand_total, currency_label)}")
    print()


def main():
    parser = argparse.ArgumentParser(description="Render a sample financial document")
    parser.add_argument("--kind", default="quotation", choices=sorted(LAYOUTS))
    parser.add_argument("--region", default="Maharashtra", help="Counterparty region")
    parser.add_argument("--country", default="India", help="Counterparty country")
    parser.add_argument("--no-charges", action="store_true", help="Omit extra charges and discounts")
    parser.add_argument("--document-discount", help="Document discount, e.g. 5%% or 1000")
    parser.add_argument("--out", help="Write the rendered HTML to this file")

    args = parser.parse_args()

    config = get_business_config()
    items, charges, discounts, party = build_sample(args.region, args.country, not args.no_charges)

    document_discount = None
    if args.document_discount:
        raw = args.document_discount.strip()
        if raw.endswith("%"):
            document_discount = Discount(value=raw[:-1], kind="percentage")
        else:
            document_discount = Discount(value=raw, kind="amount")

    breakdown = aggregate(items, charges, discounts, document_discount, party.jurisdiction, config)
    print_totals(args.kind, breakdown, config.currency, config.currency_label)

    if args.out:
        markup = render(
            args.kind,
            breakdown,
            party,
            items,
            RenderOptions(show_hsn_sac=True),
            meta=DocumentMeta(number="SAMPLE-001", date="01/04/2025"),
            config=config,
        )
        with open(args.out, "w", encoding="utf-8") as f:
            f.write(markup)
        logger.info(f"Wrote {len(markup)} characters to {args.out}")


if __name__ == "__main__":
    main()
