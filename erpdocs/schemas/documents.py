"""
Pydantic schemas for the document endpoints.

These models define the request/response contracts for calculating, previewing
and committing quotations, proforma invoices and purchase orders.
"""

import re
from typing import Any, Dict, List, Literal, Optional

from pydantic import AliasChoices, BaseModel, Field, field_validator

from erpdocs.schemas.line_items import (
    Discount,
    DocumentCharge,
    Jurisdiction,
    LineItem,
    TotalsBreakdown,
)

DocumentKind = Literal["quotation", "proforma", "purchaseOrder"]

_TERMS_SEPARATOR = re.compile(r"\r?\n|[•;]+")


# --- Party and presentation models ---

class PartyInfo(BaseModel):
    """
    Counterparty of a document: the customer on quotations and proforma
    invoices, the vendor on purchase orders.

    Resolved by the customer/vendor directory; the engine never looks it up.
    """
    name: str = Field("", description="Party or contact name")
    company: str = Field("", description="Company name")
    contact_person: str = Field(
        "",
        validation_alias=AliasChoices("contact_person", "contactPerson"),
        description="Point of contact at the party",
    )
    address: str = Field("", description="Street address")
    city: str = Field("", description="City")
    pincode: str = Field("", description="Postal code")
    jurisdiction: Jurisdiction = Field(
        default_factory=Jurisdiction,
        description="Region and country; decides the tax regime",
    )
    gstin: str = Field("", description="GST registration number")
    pan: str = Field("", description="PAN")
    phone: str = Field("", description="Phone number")
    email: str = Field("", description="Email address")

    model_config = {"populate_by_name": True, "str_strip_whitespace": True}

    @property
    def display_name(self) -> str:
        return self.company or self.name


class RenderOptions(BaseModel):
    """
    Optional sections of a rendered document.

    Every flag only toggles a markup block; none of them changes a number.
    """
    show_header: bool = True
    show_party_information: bool = True
    show_bank_details: bool = True
    show_digital_signature: bool = False
    show_gst_number: bool = True
    show_party_gstin: bool = True
    show_hsn_sac: bool = False
    show_discount_column: bool = True
    show_amount_in_words: bool = True
    show_terms: bool = True
    show_footer_disclaimer: bool = True

    model_config = {"frozen": True}


class DocumentMeta(BaseModel):
    """Document number, dates and free text printed around the tables."""
    number: str = Field("", description="Business number, e.g. 'QT-2025-014'")
    date: str = Field("", description="Document date as printed")
    valid_until: str = Field("", description="Quotation validity date")
    expected_delivery: str = Field("", description="Purchase order delivery date")
    payment_terms: str = Field("", description="Payment terms line")
    delivery_terms: str = Field("", description="Delivery terms line")
    terms: List[str] = Field(default_factory=list, description="Terms & conditions lines")
    notes: str = Field("", description="Free-form notes")

    model_config = {"str_strip_whitespace": True}

    @field_validator("terms", mode="before")
    @classmethod
    def split_terms(cls, v: Any) -> List[str]:
        """
        Accept a list or one block of text.

        Text is split on newlines, semicolons and bullet characters, the same
        separators the terms editor produces.
        """
        if v is None:
            return []
        if isinstance(v, str):
            return [t.strip() for t in _TERMS_SEPARATOR.split(v) if t.strip()]
        return [str(t).strip() for t in v if str(t).strip()]


# --- Calculation models ---

class CalculateRequest(BaseModel):
    """
    Request to compute totals for the current editing state.

    All numeric fields accept numbers or strings.
    """
    items: List[LineItem] = Field(default_factory=list, description="Line items")
    extra_charges: List[DocumentCharge] = Field(
        default_factory=list,
        validation_alias=AliasChoices("extra_charges", "extraCharges"),
        description="Additive document-level charges (freight, packing, ...)",
    )
    discounts: List[DocumentCharge] = Field(
        default_factory=list,
        description="Subtractive document-level entries",
    )
    document_discount: Optional[Discount] = Field(
        None,
        validation_alias=AliasChoices("document_discount", "documentDiscount"),
        description="Document-level discount (amount or percentage)",
    )
    counterparty: Jurisdiction = Field(
        default_factory=Jurisdiction,
        description="Jurisdiction of the customer or vendor",
    )

    model_config = {"populate_by_name": True}


class CalculateResponse(BaseModel):
    """Computed totals plus the printed amount-in-words line."""
    totals: TotalsBreakdown
    amount_in_words: str = Field(..., examples=["Rupees One Thousand One Hundred and Eighty Only"])


# --- Preview / commit models ---

class DocumentRequest(BaseModel):
    """
    Full document as submitted by the editing layer.

    Totals are NOT part of the input: they are recomputed from these fields.
    `client_totals` is accepted only so a stale client value can be detected
    and logged; it never reaches persistence or rendering.
    """
    items: List[LineItem] = Field(default_factory=list)
    extra_charges: List[DocumentCharge] = Field(
        default_factory=list,
        validation_alias=AliasChoices("extra_charges", "extraCharges"),
    )
    discounts: List[DocumentCharge] = Field(default_factory=list)
    document_discount: Optional[Discount] = Field(
        None,
        validation_alias=AliasChoices("document_discount", "documentDiscount"),
    )
    party: PartyInfo = Field(default_factory=PartyInfo)
    meta: DocumentMeta = Field(default_factory=DocumentMeta)
    options: RenderOptions = Field(default_factory=RenderOptions)
    client_totals: Optional[Dict[str, Any]] = Field(
        None,
        validation_alias=AliasChoices("client_totals", "clientTotals", "totals"),
        description="Totals last displayed by the client (ignored, logged if stale)",
    )

    model_config = {"populate_by_name": True}

    @property
    def counterparty(self) -> Jurisdiction:
        return self.party.jurisdiction


class DocumentCommitResponse(BaseModel):
    """Response after persisting a document with its authoritative totals."""
    status: Literal["COMMITTED"] = Field("COMMITTED")
    document_id: str = Field(..., description="UUID of the created document record")
    kind: DocumentKind
    grand_total: str = Field(..., description="Authoritative grand total (fixed-point string)")
    markup_path: Optional[str] = Field(None, description="Storage path of the rendered markup")
    message: str = Field(..., examples=["Document saved successfully"])


class DocumentDetailResponse(BaseModel):
    """Response for GET /documents/{document_id}."""
    id: str
    user_id: str
    kind: DocumentKind
    document_number: str = ""
    party: PartyInfo
    meta: DocumentMeta
    items: List[LineItem]
    totals: TotalsBreakdown
    markup_path: Optional[str] = None
    created_at: str
    updated_at: Optional[str] = None


class DocumentListResponse(BaseModel):
    """Response for GET /documents."""
    documents: List[DocumentDetailResponse]
    count: int
    limit: int
    offset: int


class DocumentDeleteResponse(BaseModel):
    """Response after soft-deleting a document."""
    status: Literal["DELETED"] = Field("DELETED")
    document_id: str
    deleted_at: str
    message: str = Field(..., examples=["Document deleted successfully"])


class DocumentMarkupUrlResponse(BaseModel):
    """Signed URL the PDF rasterizer fetches stored markup from."""
    document_id: str
    markup_path: str
    url: str
    expires_in: int = Field(3600, description="URL lifetime in seconds")
