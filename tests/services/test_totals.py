"""
Tests for the totals aggregator.

The aggregator is the single source of truth for a document's numbers; these
tests pin its arithmetic, its ordering rules and its guarantees (pure,
deterministic, tax families mutually exclusive, grand total never negative).
"""

import logging
from decimal import Decimal

import pytest

from erpdocs.schemas.line_items import (
    Discount,
    DocumentCharge,
    Jurisdiction,
    LineItem,
    TotalsBreakdown,
)
from erpdocs.services.totals import aggregate, compute_document_discount


@pytest.fixture
def items():
    return [LineItem(description="Hot Mounting Press", quantity="2", unit_rate="500")]


@pytest.fixture
def freight():
    return [DocumentCharge(description="Freight", amount="200")]


@pytest.fixture
def loyalty():
    return [DocumentCharge(description="Loyalty", amount="100")]


def _invariant_holds(totals: TotalsBreakdown) -> bool:
    expected = (
        totals.taxable_subtotal
        + totals.split_tax_a_total
        + totals.split_tax_b_total
        + totals.unified_tax_total
        + totals.extra_charges_total
        - totals.discounts_total
        - totals.document_discount_amount
    )
    return totals.grand_total == max(expected, Decimal("0"))


class TestJurisdictionScenarios:
    """Two units at 500.00 under each tax regime."""

    def test_intra_state(self, business_config, items, intra_state):
        totals = aggregate(items, [], [], None, intra_state, business_config)

        assert totals.taxable_subtotal == Decimal("1000.00")
        assert totals.split_tax_a_total == Decimal("90.00")
        assert totals.split_tax_b_total == Decimal("90.00")
        assert totals.unified_tax_total == Decimal("0")
        assert totals.grand_total == Decimal("1180.00")
        assert totals.tax_regime == "split"
        assert totals.tax_rate == Decimal("18")

    def test_inter_state(self, business_config, items, inter_state):
        totals = aggregate(items, [], [], None, inter_state, business_config)

        assert totals.unified_tax_total == Decimal("180.00")
        assert totals.split_tax_a_total == totals.split_tax_b_total == Decimal("0")
        assert totals.grand_total == Decimal("1180.00")
        assert totals.tax_regime == "unified"

    def test_foreign_counterparty(self, business_config, items, foreign):
        totals = aggregate(items, [], [], None, foreign, business_config)

        assert totals.tax_total == Decimal("0")
        assert totals.grand_total == Decimal("1000.00")
        assert totals.tax_regime == "exempt"
        assert totals.tax_rate == Decimal("0")

    def test_region_not_captured_yet(self, business_config, items, region_pending):
        totals = aggregate(items, [], [], None, region_pending, business_config)

        assert totals.tax_total == Decimal("0")
        assert totals.grand_total == Decimal("1000.00")
        assert totals.tax_regime == "pending"

    @pytest.mark.parametrize("region, country", [
        ("Maharashtra", "India"),
        ("Karnataka", "India"),
        ("Bavaria", "Germany"),
        ("", "India"),
    ])
    def test_split_and_unified_never_both_nonzero(self, business_config, items, region, country):
        totals = aggregate(items, [], [], None, Jurisdiction(region=region, country=country), business_config)

        has_split = totals.split_tax_a_total > 0 or totals.split_tax_b_total > 0
        has_unified = totals.unified_tax_total > 0
        assert not (has_split and has_unified)
        for line in totals.lines:
            assert not ((line.tax.split_tax_a or line.tax.split_tax_b) and line.tax.unified_tax)


class TestDocumentLevelAdjustments:

    def test_charges_and_discount_entries_are_literal(self, business_config, items, freight, loyalty, intra_state):
        totals = aggregate(items, freight, loyalty, None, intra_state, business_config)

        assert totals.extra_charges_total == Decimal("200.00")
        assert totals.discounts_total == Decimal("100.00")
        assert totals.grand_total == Decimal("1280.00")
        assert _invariant_holds(totals)

    def test_extra_charges_are_not_taxed(self, business_config, items, freight, intra_state):
        totals = aggregate(items, freight, [], None, intra_state, business_config)

        assert totals.split_tax_a_total == Decimal("90.00")

    def test_amount_document_discount(self, business_config, items, freight, loyalty, intra_state):
        discount = Discount(value="50", kind="amount")

        totals = aggregate(items, freight, loyalty, discount, intra_state, business_config)

        assert totals.document_discount_amount == Decimal("50.00")
        assert totals.grand_total == Decimal("1230.00")
        assert _invariant_holds(totals)

    def test_percentage_document_discount_applies_after_tax_and_charges(
        self, business_config, items, freight, loyalty, intra_state
    ):
        """10% of (1000 + 90 + 90 + 200), before the discount entries are subtracted."""
        discount = Discount(value="10", kind="percentage")

        totals = aggregate(items, freight, loyalty, discount, intra_state, business_config)

        assert totals.document_discount_amount == Decimal("138.00")
        assert totals.grand_total == Decimal("1142.00")
        assert _invariant_holds(totals)

    def test_document_discount_does_not_change_tax(self, business_config, items, intra_state):
        discount = Discount(value="10", kind="percentage")

        totals = aggregate(items, [], [], discount, intra_state, business_config)

        assert totals.split_tax_a_total == Decimal("90.00")
        assert totals.taxable_subtotal == Decimal("1000.00")

    def test_item_discount_applies_before_tax(self, business_config, intra_state):
        items = [LineItem(description="Press", quantity="2", unit_rate="500",
                          item_discount={"value": "10", "kind": "percentage"})]

        totals = aggregate(items, [], [], None, intra_state, business_config)

        assert totals.taxable_subtotal == Decimal("900.00")
        assert totals.split_tax_a_total == Decimal("81.00")
        assert totals.grand_total == Decimal("1062.00")

    def test_percentage_discount_is_capped_at_hundred(self):
        running_total = Decimal("1380.00")

        assert compute_document_discount(Discount(value="150", kind="percentage"), running_total) == running_total

    def test_no_document_discount(self):
        assert compute_document_discount(None, Decimal("100")) == Decimal("0")
        assert compute_document_discount(Discount(value="0"), Decimal("100")) == Decimal("0")


class TestGrandTotalClamp:

    def test_negative_grand_total_is_clamped_to_zero(self, business_config, items, intra_state, caplog):
        discounts = [DocumentCharge(description="Write-off", amount="5000")]

        with caplog.at_level(logging.WARNING, logger="erpdocs.services.totals"):
            totals = aggregate(items, [], discounts, None, intra_state, business_config)

        assert totals.grand_total == Decimal("0.00")
        assert "clamped" in caplog.text
        assert _invariant_holds(totals)

    def test_item_discounts_never_make_lines_negative(self, business_config, intra_state):
        items = [LineItem(description="Free sample", unit_rate="100", item_discount=500)]

        totals = aggregate(items, [], [], None, intra_state, business_config)

        assert totals.lines[0].discounted_base == Decimal("0.00")
        assert totals.lines[0].line_amount == Decimal("0.00")
        assert totals.grand_total == Decimal("0.00")


class TestAggregateGuarantees:

    def test_is_deterministic(self, business_config, items, freight, loyalty, intra_state):
        discount = Discount(value="5", kind="percentage")

        first = aggregate(items, freight, loyalty, discount, intra_state, business_config)
        second = aggregate(items, freight, loyalty, discount, intra_state, business_config)

        assert first == second

    def test_does_not_mutate_inputs(self, business_config, items, freight, intra_state):
        before = [item.model_dump() for item in items]

        aggregate(items, freight, [], None, intra_state, business_config)

        assert [item.model_dump() for item in items] == before
        assert len(freight) == 1

    def test_lines_follow_item_order(self, business_config, intra_state):
        items = [
            LineItem(description="First", unit_rate="100"),
            LineItem(description="Second", unit_rate="200"),
            LineItem(description="Third", unit_rate="300"),
        ]

        totals = aggregate(items, [], [], None, intra_state, business_config)

        assert [line.base for line in totals.lines] == [
            Decimal("100.00"), Decimal("200.00"), Decimal("300.00"),
        ]
        assert totals.lines[1].line_amount == Decimal("236.00")

    def test_totals_are_sums_of_rounded_lines(self, business_config, intra_state):
        """Each line is rounded first; the totals add the rounded values."""
        items = [LineItem(description=f"Item {i}", unit_rate="0.05") for i in range(3)]

        totals = aggregate(items, [], [], None, intra_state, business_config)

        # 0.05 * 9% = 0.0045 -> 0.00 per line
        assert totals.split_tax_a_total == Decimal("0.00")
        assert totals.grand_total == Decimal("0.15")

    def test_empty_document(self, business_config, intra_state):
        totals = aggregate([], [], [], None, intra_state, business_config)

        assert totals.grand_total == Decimal("0")
        assert totals.lines == []

    def test_serializes_amounts_as_fixed_point_strings(self, business_config, items, intra_state):
        totals = aggregate(items, [], [], None, intra_state, business_config)

        dumped = totals.model_dump(mode="json")

        assert dumped["grand_total"] == "1180.00"
        assert dumped["split_tax_a_total"] == "90.00"
        assert dumped["lines"][0]["tax"]["split_tax_a"] == "90.00"
        assert TotalsBreakdown.model_validate(dumped) == totals

    def test_oversized_numbers_fall_back_instead_of_raising(self, business_config, intra_state):
        items = [
            LineItem(description="Press", quantity="1e27", unit_rate="1"),
            LineItem(description="Roll", quantity="2", rate="99999999999999999999999999999"),
        ]

        totals = aggregate(items, [], [], None, intra_state, business_config)

        assert totals.taxable_subtotal == Decimal("1.00")
        assert totals.grand_total == Decimal("1.18")
        assert _invariant_holds(totals)

    def test_largest_accepted_amounts_aggregate(self, business_config, intra_state):
        items = [LineItem(description="Plant", quantity="1000000000000", unit_rate="1000000000000")]

        totals = aggregate(items, [], [], None, intra_state, business_config)

        assert totals.taxable_subtotal == Decimal("1E+24")
        assert _invariant_holds(totals)
