"""
Document persistence service.

RULES:
1. Totals are recomputed here, at commit time, with totals.aggregate().
   Whatever the client last displayed is never persisted.
2. The stored `totals` object is the fixed-point string serialization of
   that TotalsBreakdown; stored markup is rendered from the same object.
3. Re-rendering a stored document uses the stored breakdown as-is; it never
   calls the aggregator again.
4. RLS is enforced automatically via the authenticated Supabase client.
"""

import logging
from typing import Any, Dict, List, Optional, Tuple, cast

from supabase import Client

from erpdocs.config import BusinessConfig
from erpdocs.schemas.documents import (
    CalculateRequest,
    DocumentMeta,
    DocumentRequest,
    PartyInfo,
    RenderOptions,
)
from erpdocs.schemas.line_items import LineItem, TotalsBreakdown
from erpdocs.services.renderer import render
from erpdocs.services.storage import delete_document_markup, upload_document_markup
from erpdocs.services.totals import aggregate
from erpdocs.utils.numbers import parse_decimal, to_fixed_point

logger = logging.getLogger(__name__)

DOCUMENT_TABLE = "document"


def compute_totals(
    request: CalculateRequest | DocumentRequest,
    config: Optional[BusinessConfig] = None,
) -> TotalsBreakdown:
    """Run the aggregator over a calculate or document request."""
    return aggregate(
        request.items,
        request.extra_charges,
        request.discounts,
        request.document_discount,
        request.counterparty,
        config,
    )


def validate_for_commit(request: DocumentRequest) -> List[str]:
    """
    Form-level checks applied before a document is persisted.

    Drafts may be incomplete; a committed document may not.

    Returns:
        Human-readable problems (empty when the request can be committed).
    """
    problems = []
    if not request.items:
        problems.append("at least one line item is required")
    for index, item in enumerate(request.items, start=1):
        if not item.description:
            problems.append(f"item {index}: description cannot be empty")
    if not request.party.display_name:
        problems.append("party name or company is required")
    return problems


def client_totals_are_stale(client_totals: Optional[Dict[str, Any]], totals: TotalsBreakdown) -> bool:
    """
    Whether the grand total the client last displayed differs from ours.

    Only used for logging: the client's value is discarded either way.
    """
    if not client_totals:
        return False
    raw = client_totals.get("grand_total", client_totals.get("grandTotal"))
    if raw is None:
        return False
    return parse_decimal(raw, totals.grand_total) != totals.grand_total


def build_document_record(
    user_id: str,
    kind: str,
    request: DocumentRequest,
    totals: TotalsBreakdown,
    markup_path: Optional[str],
) -> Dict[str, Any]:
    """Row inserted into the document table; every amount is a fixed-point string."""
    return {
        "user_id": user_id,
        "kind": kind,
        "document_number": request.meta.number,
        "party": request.party.model_dump(mode="json"),
        "meta": request.meta.model_dump(mode="json"),
        "options": request.options.model_dump(mode="json"),
        "items": [item.model_dump(mode="json") for item in request.items],
        "extra_charges": [charge.model_dump(mode="json") for charge in request.extra_charges],
        "discounts": [discount.model_dump(mode="json") for discount in request.discounts],
        "document_discount": (
            request.document_discount.model_dump(mode="json")
            if request.document_discount else None
        ),
        "totals": totals.model_dump(mode="json"),
        "grand_total": to_fixed_point(totals.grand_total),
        "markup_path": markup_path,
    }


async def commit_document(
    supabase_client: Client,
    user_id: str,
    kind: str,
    request: DocumentRequest,
    config: Optional[BusinessConfig] = None,
) -> Tuple[Dict[str, Any], TotalsBreakdown]:
    """
    Persist a document with its authoritative totals.

    This function:
    1. Recomputes the totals from the submitted inputs
    2. Renders the markup from that breakdown and uploads it to storage
    3. Inserts the document record (RLS enforces user_id = auth.uid())

    If the insert fails, the uploaded markup is removed again before the
    error is re-raised.

    Args:
        supabase_client: Authenticated Supabase client (with user token)
        user_id: The authenticated user's ID (from JWT token)
        kind: "quotation", "proforma" or "purchaseOrder"
        request: Submitted document (client totals are ignored)
        config: Business constants (defaults to the configured ones)

    Returns:
        Tuple of (created record, authoritative TotalsBreakdown)

    Raises:
        ValueError: If the kind is unknown
        Exception: If the storage upload or the insert fails
    """
    totals = compute_totals(request, config)

    if client_totals_are_stale(request.client_totals, totals):
        logger.warning(
            f"Client totals for {kind} were stale; persisting recomputed "
            f"grand_total={to_fixed_point(totals.grand_total)}"
        )

    markup = render(
        kind,
        totals,
        request.party,
        request.items,
        request.options,
        meta=request.meta,
        config=config,
    )
    markup_path = await upload_document_markup(supabase_client, user_id, kind, markup)

    record = build_document_record(user_id, kind, request, totals, markup_path)

    logger.info(
        f"Creating {kind} for user {user_id}: items={len(request.items)}, "
        f"regime={totals.tax_regime}, grand_total={record['grand_total']}"
    )

    try:
        result = supabase_client.table(DOCUMENT_TABLE).insert(record).execute()

        if not result.data or len(result.data) == 0:
            raise Exception("Failed to create document: no data returned")
    except Exception as e:
        logger.error(f"Failed to insert {kind} for user {user_id}, removing {markup_path}: {e}")
        await delete_document_markup(supabase_client, markup_path)
        raise

    created = cast(Dict[str, Any], result.data[0])

    logger.info(f"Document created successfully: id={created.get('id')}, kind={kind}")

    return created, totals


async def get_user_documents(
    supabase_client: Client,
    user_id: str,
    kind: Optional[str] = None,
    limit: int = 50,
    offset: int = 0,
) -> List[Dict[str, Any]]:
    """
    Fetch the user's documents, newest first.

    Args:
        supabase_client: Authenticated Supabase client
        user_id: The authenticated user's ID
        kind: Optional document kind filter
        limit: Maximum number of documents to return
        offset: Number of documents to skip (for pagination)

    Returns:
        List of document records (RLS ensures only the user's own)
    """
    logger.debug(f"Fetching documents for user {user_id} (kind={kind}, limit={limit}, offset={offset})")

    query = supabase_client.table(DOCUMENT_TABLE).select("*")
    if kind:
        query = query.eq("kind", kind)

    result = (
        query
        .order("created_at", desc=True)
        .range(offset, offset + limit - 1)
        .execute()
    )

    documents = cast(List[Dict[str, Any]], result.data)

    logger.info(f"Fetched {len(documents)} documents for user {user_id}")

    return documents


async def get_document_by_id(
    supabase_client: Client,
    user_id: str,
    document_id: str,
) -> Optional[Dict[str, Any]]:
    """
    Fetch a single document by its UUID.

    Returns:
        The document record, or None if it does not exist or belongs to
        another user.
    """
    logger.debug(f"Fetching document {document_id} for user {user_id}")

    result = (
        supabase_client.table(DOCUMENT_TABLE)
        .select("*")
        .eq("id", document_id)
        .execute()
    )

    if not result.data or len(result.data) == 0:
        logger.warning(f"Document {document_id} not found or not accessible by user {user_id}")
        return None

    return cast(Dict[str, Any], result.data[0])


def render_stored_document(record: Dict[str, Any], config: Optional[BusinessConfig] = None) -> str:
    """
    Re-render a persisted document from its stored breakdown.

    The stored fixed-point strings are parsed back into a TotalsBreakdown
    and formatted; the aggregator is not called, so the output matches
    what was printed at commit time even if tax settings changed since.
    """
    totals = TotalsBreakdown.model_validate(record["totals"])
    items = [LineItem.model_validate(item) for item in record.get("items") or []]

    return render(
        record["kind"],
        totals,
        PartyInfo.model_validate(record.get("party") or {}),
        items,
        RenderOptions.model_validate(record.get("options") or {}),
        meta=DocumentMeta.model_validate(record.get("meta") or {}),
        config=config,
    )


async def delete_document(
    supabase_client: Client,
    user_id: str,
    document_id: str,
) -> Tuple[bool, Optional[str]]:
    """
    Soft-delete a document using the delete_document RPC.

    Returns:
        Tuple of (success, deleted_at timestamp or None)

    Raises:
        Exception: If the RPC call fails
    """
    logger.info(f"Preparing to soft-delete document {document_id} for user {user_id}")

    try:
        rpc_res = supabase_client.rpc(
            "delete_document",
            {
                "p_document_id": document_id,
                "p_user_id": user_id,
            },
        ).execute()
    except Exception as e:
        logger.error(f"Failed to soft-delete document via RPC for {document_id}: {e}", exc_info=True)
        raise

    data = getattr(rpc_res, "data", None)
    if not isinstance(data, list) or len(data) == 0:
        logger.warning(f"RPC delete_document returned no rows for document {document_id}")
        return (False, None)

    row = cast(Dict[str, Any], data[0])
    if not row.get("document_soft_deleted", False):
        logger.warning(f"Document {document_id} soft-delete failed via RPC")
        return (False, None)

    deleted_at = row.get("deleted_at")
    logger.info(f"Document {document_id} soft-deleted successfully via RPC at {deleted_at}")
    return (True, deleted_at)
