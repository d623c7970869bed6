"""
Document renderer.

Binds a TotalsBreakdown plus party and company metadata into printable
markup for a quotation, proforma invoice or purchase order.

All three kinds share one item-table grammar and one totals-block grammar.
A kind only contributes a DocumentKindLayout (title, labels, default terms);
RenderOptions only toggles sections. Numbers are formatted, never computed:
every amount printed comes from the breakdown handed in.
"""

import html
import logging
from dataclasses import dataclass
from decimal import Decimal
from typing import Dict, List, Optional, Sequence, Tuple

from erpdocs.config import BusinessConfig, get_business_config
from erpdocs.schemas.documents import DocumentMeta, PartyInfo, RenderOptions
from erpdocs.schemas.line_items import LineItem, LineItemResult, TotalsBreakdown
from erpdocs.services import document_templates as tpl
from erpdocs.services.amount_in_words import amount_in_words
from erpdocs.utils.numbers import format_indian, format_quantity, to_fixed_point

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class DocumentKindLayout:
    """
    Per-kind labels plugged into the shared layout.

    Attributes:
        kind: Document kind tag ("quotation", "proforma", "purchaseOrder")
        title: Heading printed at the top of the document
        number_label: Label of the business number
        date_label: Label of the document date
        party_heading: Heading of the counterparty block
        extra_meta: (label, DocumentMeta attribute) pairs printed after the date
        default_terms: Terms printed when the document carries none
        prints_bank_details: Whether the company's bank block applies to this kind
    """
    kind: str
    title: str
    number_label: str
    date_label: str
    party_heading: str
    extra_meta: Tuple[Tuple[str, str], ...] = ()
    default_terms: Tuple[str, ...] = ()
    prints_bank_details: bool = True


LAYOUTS: Dict[str, DocumentKindLayout] = {
    "quotation": DocumentKindLayout(
        kind="quotation",
        title="Quotation",
        number_label="Quotation No.",
        date_label="Date",
        party_heading="Bill To",
        extra_meta=(("Valid Until", "valid_until"),),
        default_terms=(
            "Installation & Commissioning: Extra",
            "Payment Terms: 50% Advance Along with PO, Balance 50% and Taxes before delivery",
            "Delivery: 5 to 6 Weeks",
            "Freight: At Actual",
        ),
    ),
    "proforma": DocumentKindLayout(
        kind="proforma",
        title="Proforma Invoice",
        number_label="Proforma No.",
        date_label="Date",
        party_heading="Bill To",
        extra_meta=(("Payment Terms", "payment_terms"), ("Delivery Terms", "delivery_terms")),
        default_terms=(
            "Installation & Commissioning: Extra",
            "Payment Terms: 50% Advance Along with PO, Balance 50% and Taxes before delivery",
            "Delivery: 5 to 6 Weeks",
            "Freight: At Actual",
            "P&F: 4% Extra",
        ),
    ),
    "purchaseOrder": DocumentKindLayout(
        kind="purchaseOrder",
        title="Purchase Order",
        number_label="PO No.",
        date_label="PO Date",
        party_heading="Vendor",
        extra_meta=(
            ("Expected Delivery", "expected_delivery"),
            ("Delivery Terms", "delivery_terms"),
            ("Payment Terms", "payment_terms"),
        ),
        default_terms=(
            "Goods should be as per specifications and quality standards",
            "Delivery should be completed within the specified timeframe",
            "Payment will be made as per agreed payment terms",
            "All taxes and duties to be paid by the vendor",
            "Replacement warranty for manufacturing defects",
        ),
        prints_bank_details=False,
    ),
}


def get_layout(kind: str) -> DocumentKindLayout:
    """
    Look up the layout for a document kind.

    Raises:
        ValueError: If the kind is unknown
    """
    try:
        return LAYOUTS[kind]
    except KeyError:
        raise ValueError(f"Unknown document kind: {kind!r}") from None


def _e(value: object) -> str:
    return html.escape(str(value), quote=True)


def _lines(values: Sequence[str]) -> str:
    return "<br/>".join(_e(v) for v in values if v)


def _percent(rate: Decimal) -> str:
    return f"{to_fixed_point(rate)}%"


# --- Sections ---

def _render_header(config: BusinessConfig, options: RenderOptions) -> str:
    company = config.company
    contact = " | ".join(v for v in (company.phone, company.email) if v)
    lines = [company.tagline, company.address, contact]
    if options.show_gst_number and company.gstin:
        lines.append(f"GSTIN: {company.gstin}")
    return tpl.HEADER_FORMAT.format(
        company_name=_e(company.name),
        company_lines=_lines(lines),
    )


def _render_meta(layout: DocumentKindLayout, meta: DocumentMeta) -> str:
    pairs = [(layout.number_label, meta.number), (layout.date_label, meta.date)]
    pairs.extend((label, getattr(meta, attr)) for label, attr in layout.extra_meta)
    cells = "".join(
        tpl.META_CELL_FORMAT.format(label=_e(label), value=_e(value))
        for label, value in pairs
        if value
    )
    if not cells:
        return ""
    return tpl.META_FORMAT.format(cells=cells)


def _render_party(layout: DocumentKindLayout, party: PartyInfo, options: RenderOptions) -> str:
    place = ", ".join(v for v in (party.city, party.pincode) if v)
    region = ", ".join(v for v in (party.jurisdiction.region, party.jurisdiction.country) if v)
    lines = [
        party.display_name,
        f"Kind Attn: {party.contact_person}" if party.contact_person else "",
        party.address,
        place,
        region,
    ]
    if options.show_party_gstin and party.gstin:
        lines.append(f"GSTIN: {party.gstin}")
    if party.phone:
        lines.append(f"Phone: {party.phone}")
    if party.email:
        lines.append(f"Email: {party.email}")
    return tpl.PARTY_FORMAT.format(heading=_e(layout.party_heading), lines=_lines(lines))


def _show_discount_column(
    items: Sequence[LineItem],
    breakdown: TotalsBreakdown,
    options: RenderOptions,
) -> bool:
    if not options.show_discount_column:
        return False
    return any(item.has_discount() for item in items) or breakdown.document_discount_amount > 0


def _discount_cell(item: LineItem) -> str:
    discount = item.item_discount
    if discount is None or discount.is_zero():
        return "-"
    if discount.kind == "percentage":
        return _percent(discount.value)
    return format_indian(discount.value)


def _render_item_row(
    index: int,
    item: LineItem,
    line: LineItemResult,
    show_discount: bool,
    show_hsn: bool,
) -> str:
    cells = [
        f'<td class="c">{index}</td>',
        f"<td>{_e(item.description).replace(chr(10), '<br/>')}</td>",
    ]
    if show_hsn:
        cells.append(f'<td class="c">{_e(item.hsn_sac or "-")}</td>')
    cells.extend([
        f'<td class="c">{format_quantity(item.quantity)}</td>',
        f'<td class="c">{_e(item.unit)}</td>',
        f'<td class="r">{format_indian(item.unit_rate)}</td>',
    ])
    if show_discount:
        cells.append(f'<td class="c">{_discount_cell(item)}</td>')
    cells.extend([
        f'<td class="r">{format_indian(line.discounted_base)}</td>',
        f'<td class="c">{_percent(line.tax.rate) if line.tax.rate > 0 else "-"}</td>',
        f'<td class="r">{format_indian(line.line_amount)}</td>',
    ])
    return "<tr>" + "".join(cells) + "</tr>"


def _render_items_table(
    items: Sequence[LineItem],
    breakdown: TotalsBreakdown,
    options: RenderOptions,
    currency: str,
) -> str:
    show_discount = _show_discount_column(items, breakdown, options)
    headers = ["No.", "Item &amp; Description"]
    if options.show_hsn_sac:
        headers.append("HSN/SAC")
    headers.extend(["Qty", "Unit", f"Rate ({_e(currency)})"])
    if show_discount:
        headers.append("Discount")
    headers.extend([f"Taxable ({_e(currency)})", "GST", f"Amount ({_e(currency)})"])

    rows = [
        _render_item_row(i, item, line, show_discount, options.show_hsn_sac)
        for i, (item, line) in enumerate(zip(items, breakdown.lines), start=1)
    ]
    return tpl.ITEMS_TABLE_FORMAT.format(
        header_cells="".join(f"<th>{h}</th>" for h in headers),
        rows="\n".join(rows),
    )


def totals_rows(breakdown: TotalsBreakdown, currency: str) -> List[Tuple[str, str]]:
    """
    Label/value rows of the totals block, in their fixed order:
    subtotal, discounts, tax, extra charges, grand total.

    Shared by every document kind so a quotation and a purchase order built
    from the same breakdown print the same numbers.
    """
    half_rate = breakdown.tax_rate / 2
    rows: List[Tuple[str, str]] = [
        (f"Sub Total ({currency})", format_indian(breakdown.taxable_subtotal)),
    ]
    if breakdown.document_discount_amount > 0:
        rows.append((f"Less: Discount ({currency})", format_indian(breakdown.document_discount_amount)))
    if breakdown.discounts_total > 0:
        rows.append((f"Less: Other Discounts ({currency})", format_indian(breakdown.discounts_total)))
    if breakdown.split_tax_a_total > 0:
        rows.append((
            f"Add: {tpl.SPLIT_TAX_A_LABEL} @ {_percent(half_rate)} ({currency})",
            format_indian(breakdown.split_tax_a_total),
        ))
    if breakdown.split_tax_b_total > 0:
        rows.append((
            f"Add: {tpl.SPLIT_TAX_B_LABEL} @ {_percent(half_rate)} ({currency})",
            format_indian(breakdown.split_tax_b_total),
        ))
    if breakdown.unified_tax_total > 0:
        rows.append((
            f"Add: {tpl.UNIFIED_TAX_LABEL} @ {_percent(breakdown.tax_rate)} ({currency})",
            format_indian(breakdown.unified_tax_total),
        ))
    if breakdown.extra_charges_total > 0:
        rows.append((f"Add: Extra Charges ({currency})", format_indian(breakdown.extra_charges_total)))
    rows.append((f"Grand Total ({currency})", format_indian(breakdown.grand_total)))
    return rows


def _render_totals(breakdown: TotalsBreakdown, currency: str) -> str:
    rows = totals_rows(breakdown, currency)
    *body, (grand_label, grand_value) = rows
    markup = [tpl.TOTALS_ROW_FORMAT.format(label=_e(label), value=value) for label, value in body]
    markup.append(tpl.GRAND_TOTAL_ROW_FORMAT.format(label=_e(grand_label), value=grand_value))
    return tpl.TOTALS_TABLE_FORMAT.format(rows="\n".join(markup))


def _render_bank_details(config: BusinessConfig) -> str:
    bank = config.bank
    lines = [
        f"Bank Name: {bank.bank_name}" if bank.bank_name else "",
        f"Account No.: {bank.account_no}" if bank.account_no else "",
        f"IFSC: {bank.ifsc}" if bank.ifsc else "",
        f"Branch: {bank.branch}" if bank.branch else "",
        f"UPI: {bank.upi}" if bank.upi else "",
    ]
    return tpl.BANK_DETAILS_FORMAT.format(lines=_lines(lines))


def _render_terms(layout: DocumentKindLayout, meta: DocumentMeta) -> str:
    terms = meta.terms or list(layout.default_terms)
    if not terms:
        return ""
    return tpl.TERMS_FORMAT.format(items="".join(f"<li>{_e(t)}</li>" for t in terms))


def _render_footer(config: BusinessConfig, options: RenderOptions) -> str:
    company_name = _e(config.company.name)
    digital = ""
    if options.show_digital_signature:
        digital = tpl.DIGITAL_SIGNATURE_FORMAT.format(company_name=company_name)
    footer = tpl.FOOTER_FORMAT.format(company_name=company_name, digital_signature=digital)
    if options.show_footer_disclaimer:
        footer += "\n" + tpl.DISCLAIMER_FORMAT.format(text=_e(tpl.DISCLAIMER_TEXT))
    return footer


# --- Entry point ---

def render(
    kind: str,
    breakdown: TotalsBreakdown,
    party: PartyInfo,
    items: Sequence[LineItem],
    options: Optional[RenderOptions] = None,
    *,
    meta: Optional[DocumentMeta] = None,
    config: Optional[BusinessConfig] = None,
) -> str:
    """
    Render a document as HTML markup.

    Args:
        kind: "quotation", "proforma" or "purchaseOrder"
        breakdown: Totals computed by totals.aggregate() for these items
        party: Customer (quotation, proforma) or vendor (purchase order)
        items: The line items the breakdown was computed from, same order
        options: Optional sections to include (defaults to RenderOptions())
        meta: Document number, dates, terms and notes
        config: Business constants (defaults to the configured ones)

    Returns:
        A complete HTML document handed unchanged to the PDF rasterizer.

    Raises:
        ValueError: If the kind is unknown or items and breakdown.lines differ in length
    """
    layout = get_layout(kind)
    if len(items) != len(breakdown.lines):
        raise ValueError(
            f"breakdown has {len(breakdown.lines)} lines for {len(items)} items; "
            "render() must receive the breakdown computed for these items"
        )

    options = options or RenderOptions()
    meta = meta or DocumentMeta()
    config = config or get_business_config()
    currency = config.currency

    sections = [
        _render_header(config, options) if options.show_header else "",
        _render_meta(layout, meta),
        _render_party(layout, party, options) if options.show_party_information else "",
        _render_items_table(items, breakdown, options, currency),
        _render_totals(breakdown, currency),
    ]
    if options.show_amount_in_words:
        sections.append(tpl.AMOUNT_IN_WORDS_FORMAT.format(
            words=_e(amount_in_words(breakdown.grand_total, config.currency_label))
        ))
    if options.show_bank_details and layout.prints_bank_details and not config.bank.is_empty():
        sections.append(_render_bank_details(config))
    if meta.notes:
        sections.append(tpl.NOTES_FORMAT.format(notes=_e(meta.notes)))
    if options.show_terms:
        sections.append(_render_terms(layout, meta))
    sections.append(_render_footer(config, options))

    logger.debug(f"Rendered {kind} with {len(items)} items")

    title = f"{layout.title} - {meta.number}" if meta.number else layout.title
    return tpl.DOCUMENT_HTML_FORMAT.format(
        title=_e(title),
        styles=tpl.DOCUMENT_STYLES,
        kind=_e(layout.kind),
        heading=_e(layout.title.upper()),
        body="\n".join(s for s in sections if s),
    )
