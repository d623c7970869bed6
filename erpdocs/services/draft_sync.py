"""
Draft editing session.

Holds the editable state of one document (items, charges, discounts,
document discount, counterparty) and keeps its totals in sync: every
mutation re-runs totals.aggregate() over the whole state. Totals are never
set directly, so what is displayed is always derived from the inputs.

Raw values are accepted exactly as an editing form produces them (strings,
numbers, half-typed input) and pass through the same Pydantic models the
API uses.
"""

import logging
from typing import Any, Dict, List, Optional, TypeVar

from pydantic import BaseModel

from erpdocs.config import BusinessConfig, get_business_config
from erpdocs.schemas.line_items import (
    Discount,
    DocumentCharge,
    Jurisdiction,
    LineItem,
    TotalsBreakdown,
)
from erpdocs.services.totals import aggregate

ModelT = TypeVar("ModelT", bound=BaseModel)

logger = logging.getLogger(__name__)


def _merge(current: ModelT, edit: ModelT) -> ModelT:
    """Copy `current` with only the fields the validated edit actually set."""
    return current.model_copy(update={name: getattr(edit, name) for name in edit.model_fields_set})


class DraftSyncCoordinator:
    """
    Editable document state with always-current totals.

    Usage:
        >>> draft = DraftSyncCoordinator()
        >>> draft.set_counterparty(region="Maharashtra", country="India")
        >>> draft.add_item(description="Hot Mounting Press", quantity="1", unit_rate="144000")
        >>> draft.totals.grand_total
        Decimal('169920.00')
    """

    def __init__(self, config: Optional[BusinessConfig] = None) -> None:
        self._config = config or get_business_config()
        self.items: List[LineItem] = []
        self.extra_charges: List[DocumentCharge] = []
        self.discounts: List[DocumentCharge] = []
        self.document_discount: Optional[Discount] = None
        self.counterparty = Jurisdiction()
        self._totals = self._recompute()

    @property
    def totals(self) -> TotalsBreakdown:
        return self._totals

    def _recompute(self) -> TotalsBreakdown:
        self._totals = aggregate(
            self.items,
            self.extra_charges,
            self.discounts,
            self.document_discount,
            self.counterparty,
            self._config,
        )
        return self._totals

    # --- Items ---

    def add_item(self, **fields: Any) -> TotalsBreakdown:
        self.items.append(LineItem.model_validate(fields))
        return self._recompute()

    def update_item(self, index: int, **fields: Any) -> TotalsBreakdown:
        """
        Replace some fields of one item and recompute.

        Accepts the same keys as a new item, including the form aliases
        (`rate`, `discount` with `discountType`, ...). The edit is validated
        on its own first, so a cleared quantity falls back to 1 just as it
        would for a new item, and only the fields it sets are replaced.

        Raises:
            IndexError: If there is no item at `index`
        """
        self.items[index] = _merge(self.items[index], LineItem.model_validate(fields))
        return self._recompute()

    def remove_item(self, index: int) -> TotalsBreakdown:
        del self.items[index]
        return self._recompute()

    # --- Extra charges and discount entries ---

    def add_charge(self, description: Any = "", amount: Any = None) -> TotalsBreakdown:
        self.extra_charges.append(DocumentCharge(description=description, amount=amount))
        return self._recompute()

    def update_charge(self, index: int, **fields: Any) -> TotalsBreakdown:
        self.extra_charges[index] = _merge(self.extra_charges[index], DocumentCharge.model_validate(fields))
        return self._recompute()

    def remove_charge(self, index: int) -> TotalsBreakdown:
        del self.extra_charges[index]
        return self._recompute()

    def add_discount(self, description: Any = "", amount: Any = None) -> TotalsBreakdown:
        self.discounts.append(DocumentCharge(description=description, amount=amount))
        return self._recompute()

    def update_discount(self, index: int, **fields: Any) -> TotalsBreakdown:
        self.discounts[index] = _merge(self.discounts[index], DocumentCharge.model_validate(fields))
        return self._recompute()

    def remove_discount(self, index: int) -> TotalsBreakdown:
        del self.discounts[index]
        return self._recompute()

    # --- Document-level settings ---

    def set_document_discount(self, value: Any = None, kind: Any = "amount") -> TotalsBreakdown:
        """Set (or clear, with value=None) the document-level discount."""
        if value is None:
            self.document_discount = None
        else:
            self.document_discount = Discount(value=value, kind=kind)
        return self._recompute()

    def set_counterparty(self, region: Any = "", country: Any = "") -> TotalsBreakdown:
        """Change the counterparty's jurisdiction; every item's tax is re-resolved."""
        self.counterparty = Jurisdiction(region=region, country=country)
        logger.debug("Counterparty jurisdiction changed; recomputing draft totals")
        return self._recompute()

    def to_commit_payload(self) -> Dict[str, Any]:
        """
        Inputs to submit for the authoritative recomputation.

        Totals are absent: the commit path computes its own.
        """
        return {
            "items": [item.model_dump() for item in self.items],
            "extra_charges": [charge.model_dump() for charge in self.extra_charges],
            "discounts": [discount.model_dump() for discount in self.discounts],
            "document_discount": (
                self.document_discount.model_dump() if self.document_discount else None
            ),
            "counterparty": self.counterparty.model_dump(),
        }
