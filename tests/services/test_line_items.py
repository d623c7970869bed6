"""
Tests for the line item model and calculator.
"""

from decimal import Decimal

import pytest

from erpdocs.schemas.line_items import Discount, LineItem
from erpdocs.services.line_items import compute_line_item


class TestLineItemCoercion:
    """Malformed editing input is coerced instead of rejected."""

    @pytest.mark.parametrize("raw", ["", "abc", "0", "-3", None, 0, -1])
    def test_invalid_quantity_becomes_one(self, raw):
        item = LineItem(description="Press", quantity=raw, unit_rate="100")
        assert item.quantity == Decimal("1")

    @pytest.mark.parametrize("raw", ["", "abc", "-5", None, -1])
    def test_invalid_rate_becomes_zero(self, raw):
        item = LineItem(description="Press", quantity="2", unit_rate=raw)
        assert item.unit_rate == Decimal("0")

    def test_accepts_editing_form_aliases(self):
        item = LineItem.model_validate({
            "description": "Lamination Roll",
            "quantity": "4",
            "rate": "2,500",
            "discount": "10",
            "discountType": "percentage",
            "hsnSac": "3920",
        })

        assert item.unit_rate == Decimal("2500")
        assert item.item_discount == Discount(value=Decimal("10"), kind="percentage")
        assert item.hsn_sac == "3920"

    def test_bare_number_discount_is_an_amount(self):
        item = LineItem.model_validate({"description": "Installation", "rate": 5000, "discount": 500})
        assert item.item_discount is not None
        assert item.item_discount.kind == "amount"
        assert item.item_discount.value == Decimal("500")

    def test_unknown_discount_kind_is_an_amount(self):
        assert Discount(value="5", kind="weird").kind == "amount"

    def test_negative_discount_becomes_zero(self):
        item = LineItem(description="Press", unit_rate="100", item_discount={"value": "-5", "kind": "amount"})
        assert not item.has_discount()

    def test_blank_unit_falls_back_to_default(self):
        assert LineItem(description="Press", unit="  ").unit == "nos"


class TestComputeLineItem:
    """Base and discounted base of one item."""

    def test_base_is_quantity_times_rate(self):
        amounts = compute_line_item(LineItem(description="Press", quantity="2", unit_rate="500"))

        assert amounts.base == Decimal("1000.00")
        assert amounts.discounted_base == Decimal("1000.00")

    def test_percentage_discount_applies_to_base(self):
        item = LineItem(description="Press", quantity="2", unit_rate="500",
                        item_discount={"value": "10", "kind": "percentage"})

        assert compute_line_item(item).discounted_base == Decimal("900.00")

    def test_amount_discount_applies_to_base(self):
        item = LineItem(description="Press", quantity="2", unit_rate="500", item_discount=250)

        assert compute_line_item(item).discounted_base == Decimal("750.00")

    def test_discount_larger_than_base_clamps_to_zero(self):
        item = LineItem(description="Press", quantity="1", unit_rate="1000", item_discount=1500)

        amounts = compute_line_item(item)

        assert amounts.base == Decimal("1000.00")
        assert amounts.discounted_base == Decimal("0.00")

    def test_percentage_over_hundred_clamps_to_zero(self):
        item = LineItem(description="Press", unit_rate="1000",
                        item_discount={"value": "120", "kind": "percentage"})

        assert compute_line_item(item).discounted_base == Decimal("0.00")

    def test_rounds_half_up_to_paise(self):
        item = LineItem(description="Ink", quantity="3", unit_rate="33.335")

        assert compute_line_item(item).base == Decimal("100.01")

    def test_fractional_quantity(self):
        item = LineItem(description="Cable", quantity="2.5", unit_rate="120")

        assert compute_line_item(item).base == Decimal("300.00")
