"""
Pydantic models for line items, charges, jurisdictions and computed totals.

Input models (LineItem, Discount, DocumentCharge, Jurisdiction) are tolerant:
every numeric field accepts a number or its string form and is coerced once,
here, through `parse_decimal`. Malformed values fall back to safe defaults
instead of failing validation, so a half-typed form still produces totals.

Output models (TaxOutcome, LineItemResult, TotalsBreakdown) are frozen and
serialize every monetary field as a fixed-point string.
"""

from decimal import Decimal
from typing import Any, List, Literal, Optional

from pydantic import AliasChoices, BaseModel, Field, field_serializer, field_validator, model_validator

from erpdocs.utils.constants import DEFAULT_UNIT
from erpdocs.utils.numbers import ONE, ZERO, parse_decimal, to_fixed_point

DiscountKind = Literal["amount", "percentage"]
TaxRegime = Literal["exempt", "split", "unified", "pending"]


def _non_negative(value: Any) -> Decimal:
    parsed = parse_decimal(value, ZERO)
    return parsed if parsed >= 0 else ZERO


def _text(value: Any) -> str:
    if value is None:
        return ""
    return value if isinstance(value, str) else str(value)


# --- Input models ---

class Discount(BaseModel):
    """
    A discount expressed either as a literal amount or as a percentage.

    Used for the item-level discount and for the document-level discount.
    """
    value: Decimal = Field(ZERO, description="Discount value (amount or percent), never negative")
    kind: DiscountKind = Field("amount", description="How `value` is applied")

    @field_validator("value", mode="before")
    @classmethod
    def coerce_value(cls, v: Any) -> Decimal:
        return _non_negative(v)

    @field_validator("kind", mode="before")
    @classmethod
    def coerce_kind(cls, v: Any) -> str:
        if isinstance(v, str) and v.strip().lower() == "percentage":
            return "percentage"
        return "amount"

    def is_zero(self) -> bool:
        return self.value == 0


class LineItem(BaseModel):
    """
    One priced entry in a document.

    Only `description`, `quantity`, `unit_rate` and `item_discount` take part
    in the computation; `unit` and `hsn_sac` are printed as-is.
    """
    description: str = Field("", description="Item description (required at commit time)")
    quantity: Decimal = Field(
        ONE,
        description="Quantity (> 0). Missing or non-numeric values become 1",
    )
    unit_rate: Decimal = Field(
        ZERO,
        validation_alias=AliasChoices("unit_rate", "unitRate", "rate"),
        description="Price per unit (>= 0). Missing or non-numeric values become 0",
    )
    item_discount: Optional[Discount] = Field(
        None,
        validation_alias=AliasChoices("item_discount", "itemDiscount", "discount"),
        description="Optional discount applied to quantity * unit_rate",
    )
    unit: str = Field(DEFAULT_UNIT, description="Unit label printed in the item table")
    hsn_sac: Optional[str] = Field(
        None,
        validation_alias=AliasChoices("hsn_sac", "hsnSac"),
        description="HSN/SAC classification code",
    )

    model_config = {
        "populate_by_name": True,
        "str_strip_whitespace": True,
    }

    @model_validator(mode="before")
    @classmethod
    def fold_flat_discount(cls, data: Any) -> Any:
        """Accept the flat `discount` + `discountType` pair sent by the editing forms."""
        if not isinstance(data, dict):
            return data
        kind = data.get("discountType", data.get("discount_type"))
        flat = data.get("discount")
        if kind is not None and flat is not None and not isinstance(flat, (dict, Discount)):
            data = dict(data)
            data["discount"] = {"value": flat, "kind": kind}
        return data

    @field_validator("description", mode="before")
    @classmethod
    def coerce_description(cls, v: Any) -> str:
        return _text(v)

    @field_validator("quantity", mode="before")
    @classmethod
    def coerce_quantity(cls, v: Any) -> Decimal:
        parsed = parse_decimal(v, ONE)
        return parsed if parsed > 0 else ONE

    @field_validator("unit_rate", mode="before")
    @classmethod
    def coerce_unit_rate(cls, v: Any) -> Decimal:
        return _non_negative(v)

    @field_validator("item_discount", mode="before")
    @classmethod
    def coerce_item_discount(cls, v: Any) -> Any:
        """A bare number is read as an amount discount."""
        if v is None or isinstance(v, (dict, Discount)):
            return v
        return {"value": v, "kind": "amount"}

    @field_validator("unit", mode="before")
    @classmethod
    def coerce_unit(cls, v: Any) -> str:
        return _text(v).strip() or DEFAULT_UNIT

    def has_discount(self) -> bool:
        return self.item_discount is not None and not self.item_discount.is_zero()


class DocumentCharge(BaseModel):
    """
    A document-level line with a literal amount.

    The same shape is used for extra charges (added) and for discount
    entries (subtracted); the list it sits in decides the sign.
    """
    description: str = Field("", description="Label printed in the totals block")
    amount: Decimal = Field(ZERO, description="Amount, never negative")

    @field_validator("description", mode="before")
    @classmethod
    def coerce_description(cls, v: Any) -> str:
        return _text(v).strip()

    @field_validator("amount", mode="before")
    @classmethod
    def coerce_amount(cls, v: Any) -> Decimal:
        return _non_negative(v)


class Jurisdiction(BaseModel):
    """Region (state) and country of a party."""
    region: str = Field("", description="Sub-national region, e.g. 'Maharashtra'")
    country: str = Field("", description="Country, e.g. 'India'")

    model_config = {"str_strip_whitespace": True}

    @field_validator("region", "country", mode="before")
    @classmethod
    def coerce_text(cls, v: Any) -> str:
        return _text(v)


# --- Computed models ---

class TaxOutcome(BaseModel):
    """
    Tax on one taxable base.

    INVARIANT: the split pair and the unified component are mutually
    exclusive; at most one of them is non-zero.
    """
    split_tax_a: Decimal = ZERO
    split_tax_b: Decimal = ZERO
    unified_tax: Decimal = ZERO
    regime: TaxRegime = "pending"
    rate: Decimal = Field(ZERO, description="Composite rate applied, in percent (0 when no tax)")

    model_config = {"frozen": True}

    @model_validator(mode="after")
    def validate_exclusive_components(self):
        if (self.split_tax_a or self.split_tax_b) and self.unified_tax:
            raise ValueError(
                "tax outcome invariant violated: split and unified tax cannot both be non-zero"
            )
        return self

    @field_serializer("split_tax_a", "split_tax_b", "unified_tax")
    def serialize_money(self, value: Decimal) -> str:
        return to_fixed_point(value)

    @field_serializer("rate")
    def serialize_rate(self, value: Decimal) -> str:
        return to_fixed_point(value)

    @property
    def total(self) -> Decimal:
        return self.split_tax_a + self.split_tax_b + self.unified_tax


class LineItemResult(BaseModel):
    """Computed amounts for one line, in the same order as the input items."""
    base: Decimal
    discounted_base: Decimal
    tax: TaxOutcome
    line_amount: Decimal

    model_config = {"frozen": True}

    @field_serializer("base", "discounted_base", "line_amount")
    def serialize_money(self, value: Decimal) -> str:
        return to_fixed_point(value)


class TotalsBreakdown(BaseModel):
    """
    Aggregate result for one document.

    INVARIANT (whenever the right-hand side is not negative):
        grand_total = taxable_subtotal + split_tax_a_total + split_tax_b_total
                      + unified_tax_total + extra_charges_total
                      - discounts_total - document_discount_amount
    A negative right-hand side is clamped to 0.00.
    """
    taxable_subtotal: Decimal = ZERO
    split_tax_a_total: Decimal = ZERO
    split_tax_b_total: Decimal = ZERO
    unified_tax_total: Decimal = ZERO
    extra_charges_total: Decimal = ZERO
    discounts_total: Decimal = ZERO
    document_discount_amount: Decimal = ZERO
    grand_total: Decimal = ZERO
    tax_regime: TaxRegime = "pending"
    tax_rate: Decimal = ZERO
    lines: List[LineItemResult] = Field(default_factory=list)

    model_config = {"frozen": True}

    @field_serializer(
        "taxable_subtotal",
        "split_tax_a_total",
        "split_tax_b_total",
        "unified_tax_total",
        "extra_charges_total",
        "discounts_total",
        "document_discount_amount",
        "grand_total",
        "tax_rate",
    )
    def serialize_money(self, value: Decimal) -> str:
        return to_fixed_point(value)

    @property
    def tax_total(self) -> Decimal:
        return self.split_tax_a_total + self.split_tax_b_total + self.unified_tax_total
