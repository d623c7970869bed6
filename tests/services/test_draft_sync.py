"""
Tests for the draft editing session.

Every mutation must leave `totals` equal to a fresh aggregate() over the
current inputs.
"""

from decimal import Decimal

import pytest

from erpdocs.schemas.documents import CalculateRequest
from erpdocs.schemas.line_items import Discount
from erpdocs.services.draft_sync import DraftSyncCoordinator
from erpdocs.services.totals import aggregate


@pytest.fixture
def draft(business_config):
    return DraftSyncCoordinator(config=business_config)


def _fresh_totals(draft, config):
    return aggregate(
        draft.items,
        draft.extra_charges,
        draft.discounts,
        draft.document_discount,
        draft.counterparty,
        config,
    )


class TestDraftSyncCoordinator:

    def test_new_draft_has_zero_totals(self, draft):
        assert draft.totals.grand_total == Decimal("0")
        assert draft.totals.tax_regime == "pending"

    def test_add_item_recomputes(self, draft, business_config):
        draft.set_counterparty(region="Maharashtra", country="India")

        totals = draft.add_item(description="Hot Mounting Press", quantity="1", unit_rate="144000")

        assert totals.grand_total == Decimal("169920.00")
        assert draft.totals == totals == _fresh_totals(draft, business_config)

    def test_counterparty_change_re_resolves_tax(self, draft):
        draft.add_item(description="Press", quantity="2", unit_rate="500")
        assert draft.totals.tax_total == Decimal("0")

        draft.set_counterparty(region="Maharashtra", country="India")
        assert draft.totals.split_tax_a_total == Decimal("90.00")

        draft.set_counterparty(region="Karnataka", country="India")
        assert draft.totals.unified_tax_total == Decimal("180.00")
        assert draft.totals.split_tax_a_total == Decimal("0")

        draft.set_counterparty(region="Bavaria", country="Germany")
        assert draft.totals.grand_total == Decimal("1000.00")

    def test_update_item_revalidates_fields(self, draft):
        draft.add_item(description="Press", quantity="2", unit_rate="500")

        draft.update_item(0, quantity="")

        assert draft.items[0].quantity == Decimal("1")
        assert draft.items[0].description == "Press"
        assert draft.totals.taxable_subtotal == Decimal("500.00")

    def test_update_item_accepts_rate_alias(self, draft):
        draft.add_item(description="Press", unit_rate="1000")

        draft.update_item(0, rate="2000")

        assert draft.items[0].unit_rate == Decimal("2000")
        assert draft.totals.taxable_subtotal == Decimal("2000.00")

    def test_update_item_accepts_flat_form_discount(self, draft):
        draft.add_item(description="Press", unit_rate="1000")

        draft.update_item(0, discount="10", discountType="percentage")

        assert draft.items[0].item_discount == Discount(value=Decimal("10"), kind="percentage")
        assert draft.items[0].unit_rate == Decimal("1000")
        assert draft.totals.taxable_subtotal == Decimal("900.00")

    def test_update_charge_keeps_untouched_fields(self, draft):
        draft.add_item(description="Press", unit_rate="1000")
        draft.add_charge("Freight", "200")

        draft.update_charge(0, amount="300")

        assert draft.extra_charges[0].description == "Freight"
        assert draft.totals.extra_charges_total == Decimal("300.00")

    def test_update_missing_item_raises(self, draft):
        with pytest.raises(IndexError):
            draft.update_item(3, quantity="2")

    def test_remove_item(self, draft):
        draft.add_item(description="Press", unit_rate="500")
        draft.add_item(description="Roll", unit_rate="100")

        draft.remove_item(0)

        assert [item.description for item in draft.items] == ["Roll"]
        assert draft.totals.taxable_subtotal == Decimal("100.00")

    def test_charges_and_discounts(self, draft, business_config):
        draft.set_counterparty(region="Maharashtra", country="India")
        draft.add_item(description="Press", quantity="2", unit_rate="500")

        draft.add_charge("Freight", "200")
        draft.add_discount("Loyalty", "100")
        assert draft.totals.grand_total == Decimal("1280.00")

        draft.update_charge(0, amount="abc")
        assert draft.totals.extra_charges_total == Decimal("0")

        draft.remove_discount(0)
        draft.remove_charge(0)
        assert draft.totals == _fresh_totals(draft, business_config)
        assert draft.totals.grand_total == Decimal("1180.00")

    def test_update_discount_entry(self, draft):
        draft.add_item(description="Press", unit_rate="1000")
        draft.add_discount("Loyalty", "100")

        draft.update_discount(0, amount="250")

        assert draft.totals.discounts_total == Decimal("250.00")

    def test_document_discount_set_and_clear(self, draft):
        draft.set_counterparty(region="Maharashtra", country="India")
        draft.add_item(description="Press", quantity="2", unit_rate="500")

        draft.set_document_discount("10", "percentage")
        assert draft.totals.document_discount_amount == Decimal("118.00")

        draft.set_document_discount(None)
        assert draft.totals.document_discount_amount == Decimal("0")
        assert draft.totals.grand_total == Decimal("1180.00")

    def test_commit_payload_has_no_totals_and_reproduces_them(self, draft, business_config):
        draft.set_counterparty(region="Karnataka", country="India")
        draft.add_item(description="Press", quantity="2", unit_rate="500",
                       item_discount={"value": "10", "kind": "percentage"})
        draft.add_charge("Freight", "200")
        draft.set_document_discount("50")

        payload = draft.to_commit_payload()

        assert "totals" not in payload
        request = CalculateRequest.model_validate(payload)
        recomputed = aggregate(
            request.items,
            request.extra_charges,
            request.discounts,
            request.document_discount,
            request.counterparty,
            business_config,
        )
        assert recomputed == draft.totals
