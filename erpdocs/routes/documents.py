"""
Document API endpoints.

Provides endpoints for calculating, previewing and committing quotations,
proforma invoices and purchase orders.

Flow:
1. POST /documents/calculate - Totals for the current editing state (not persisted)
2. POST /documents/{kind}/preview - Rendered markup (PREVIEW ONLY, not persisted)
3. POST /documents/{kind} - Recompute authoritatively, render and persist
"""

import logging
from typing import Annotated, Any, Dict, Optional

from fastapi import APIRouter, Depends, HTTPException, status
from fastapi.responses import HTMLResponse

from erpdocs.auth.dependencies import AuthenticatedUser, get_authenticated_user
from erpdocs.config import get_business_config
from erpdocs.db.client import get_supabase_client
from erpdocs.schemas.documents import (
    CalculateRequest,
    CalculateResponse,
    DocumentCommitResponse,
    DocumentDeleteResponse,
    DocumentDetailResponse,
    DocumentListResponse,
    DocumentMarkupUrlResponse,
    DocumentMeta,
    DocumentRequest,
    PartyInfo,
)
from erpdocs.schemas.line_items import LineItem, TotalsBreakdown
from erpdocs.services import (
    amount_in_words,
    commit_document,
    compute_totals,
    delete_document,
    delete_document_markup,
    get_document_by_id,
    get_document_markup_url,
    get_layout,
    get_user_documents,
    render,
    render_stored_document,
    validate_for_commit,
)
from erpdocs.utils.constants import DOCUMENT_KINDS
from erpdocs.utils.numbers import to_fixed_point

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/documents", tags=["documents"])

MARKUP_URL_TTL_SECONDS = 3600


def _require_kind(kind: str) -> str:
    """
    Validate the {kind} path segment.

    Raises:
        HTTPException 400: If the kind is not a known document kind
    """
    try:
        get_layout(kind)
    except ValueError:
        logger.warning(f"Unknown document kind requested: {kind!r}")
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail={
                "error": "invalid_kind",
                "details": f"kind must be one of: {', '.join(DOCUMENT_KINDS.values())}"
            }
        )
    return kind


def _not_found(document_id: str) -> HTTPException:
    return HTTPException(
        status_code=status.HTTP_404_NOT_FOUND,
        detail={
            "error": "not_found",
            "details": f"Document {document_id} not found or not accessible"
        }
    )


def _to_detail(record: Dict[str, Any]) -> DocumentDetailResponse:
    """Map a stored document row to the response model (totals are not recomputed)."""
    return DocumentDetailResponse(
        id=str(record.get("id")),
        user_id=str(record.get("user_id")),
        kind=record.get("kind"),
        document_number=record.get("document_number") or "",
        party=PartyInfo.model_validate(record.get("party") or {}),
        meta=DocumentMeta.model_validate(record.get("meta") or {}),
        items=[LineItem.model_validate(item) for item in record.get("items") or []],
        totals=TotalsBreakdown.model_validate(record.get("totals") or {}),
        markup_path=record.get("markup_path"),
        created_at=str(record.get("created_at", "")),
        updated_at=record.get("updated_at"),
    )


@router.post(
    "/calculate",
    response_model=CalculateResponse,
    status_code=status.HTTP_200_OK,
    summary="Calculate document totals",
    description="""
    Compute line amounts, taxes and the grand total for the current editing state.

    This endpoint:
    - Accepts items, charges, discounts and the counterparty jurisdiction
    - Coerces malformed numeric input instead of rejecting it
    - NEVER persists anything (draft only)

    Security:
    - Requires valid Authorization Bearer token
    """
)
async def calculate_document(
    request: CalculateRequest,
    auth_user: Annotated[AuthenticatedUser, Depends(get_authenticated_user)]
) -> CalculateResponse:
    """Run the aggregator and attach the amount in words."""
    config = get_business_config()
    totals = compute_totals(request, config)

    logger.debug(
        f"Calculated totals for user_id={auth_user.user_id}: "
        f"items={len(request.items)}, regime={totals.tax_regime}, "
        f"grand_total={to_fixed_point(totals.grand_total)}"
    )

    return CalculateResponse(
        totals=totals,
        amount_in_words=amount_in_words(totals.grand_total, config.currency_label),
    )


@router.post(
    "/{kind}/preview",
    response_class=HTMLResponse,
    status_code=status.HTTP_200_OK,
    summary="Preview rendered document",
    description="""
    Render a document without persisting it.

    Totals in the markup are recomputed from the submitted inputs; any
    client-side totals in the body are ignored.

    Security:
    - Requires valid Authorization Bearer token
    """
)
async def preview_document(
    kind: str,
    request: DocumentRequest,
    auth_user: Annotated[AuthenticatedUser, Depends(get_authenticated_user)]
) -> HTMLResponse:
    kind = _require_kind(kind)
    config = get_business_config()

    totals = compute_totals(request, config)
    markup = render(
        kind,
        totals,
        request.party,
        request.items,
        request.options,
        meta=request.meta,
        config=config,
    )

    logger.info(f"Rendered {kind} preview for user_id={auth_user.user_id}: items={len(request.items)}")

    return HTMLResponse(content=markup)


@router.post(
    "/{kind}",
    response_model=DocumentCommitResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Commit document to database",
    description="""
    Persist a document with authoritative totals.

    This endpoint:
    - Recomputes every total from the submitted inputs (client totals are discarded)
    - Renders the markup and uploads it to Supabase Storage
    - Inserts the record into the document table with RLS enforcement

    Security:
    - Requires valid Authorization Bearer token
    - RLS ensures user can only create documents for themselves
    """
)
async def commit_document_record(
    kind: str,
    request: DocumentRequest,
    auth_user: Annotated[AuthenticatedUser, Depends(get_authenticated_user)]
) -> DocumentCommitResponse:
    """
    Persist a document to Supabase with RLS enforcement.

    Domain & Intent Filter
    - Validate the kind path segment
    - Reject incomplete documents (no items, empty descriptions, no party)

    Persistence
    - Create authenticated Supabase client
    - Call document_service.commit_document()
    """
    kind = _require_kind(kind)

    problems = validate_for_commit(request)
    if problems:
        logger.warning(f"Rejected {kind} commit for user_id={auth_user.user_id}: {problems}")
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail={
                "error": "invalid_request",
                "details": "; ".join(problems)
            }
        )

    logger.info(
        f"Committing {kind} for user_id={auth_user.user_id}, "
        f"number={request.meta.number or '-'}, items={len(request.items)}"
    )

    supabase_client = get_supabase_client(auth_user.access_token)

    try:
        created, totals = await commit_document(
            supabase_client=supabase_client,
            user_id=auth_user.user_id,
            kind=kind,
            request=request,
            config=get_business_config(),
        )

        document_id = created.get("id")

        if not document_id:
            raise Exception("Document created but no ID returned")

        logger.info(f"Document committed successfully: id={document_id}, user_id={auth_user.user_id}")

        return DocumentCommitResponse(
            status="COMMITTED",
            document_id=str(document_id),
            kind=kind,
            grand_total=to_fixed_point(totals.grand_total),
            markup_path=created.get("markup_path"),
            message="Document saved successfully"
        )

    except Exception as e:
        logger.error(f"Failed to commit {kind}: {e}", exc_info=True)
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail={
                "error": "persistence_error",
                "details": "Failed to save document to database"
            }
        )


@router.get(
    "",
    response_model=DocumentListResponse,
    status_code=status.HTTP_200_OK,
    summary="List user's documents",
    description="""
    Retrieve documents belonging to the authenticated user, newest first.

    Supports an optional kind filter and limit/offset pagination.

    Security:
    - RLS ensures users only see their own documents
    """
)
async def list_documents(
    auth_user: Annotated[AuthenticatedUser, Depends(get_authenticated_user)],
    kind: Optional[str] = None,
    limit: int = 50,
    offset: int = 0
) -> DocumentListResponse:
    if kind is not None:
        kind = _require_kind(kind)

    logger.info(
        f"Listing documents for user {auth_user.user_id} "
        f"(kind={kind}, limit={limit}, offset={offset})"
    )

    supabase_client = get_supabase_client(auth_user.access_token)

    try:
        documents = await get_user_documents(
            supabase_client=supabase_client,
            user_id=auth_user.user_id,
            kind=kind,
            limit=limit,
            offset=offset
        )

        responses = [_to_detail(doc) for doc in documents]

        return DocumentListResponse(
            documents=responses,
            count=len(responses),
            limit=limit,
            offset=offset
        )

    except Exception as e:
        logger.error(f"Failed to fetch documents: {e}", exc_info=True)
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail={
                "error": "fetch_error",
                "details": "Failed to retrieve documents from database"
            }
        )


@router.get(
    "/{document_id}",
    response_model=DocumentDetailResponse,
    status_code=status.HTTP_200_OK,
    summary="Get document details",
    description="""
    Retrieve a single document by its ID, with the totals stored at commit time.

    Returns 404 if the document doesn't exist or belongs to another user.
    """
)
async def get_document(
    document_id: str,
    auth_user: Annotated[AuthenticatedUser, Depends(get_authenticated_user)]
) -> DocumentDetailResponse:
    logger.info(f"Fetching document {document_id} for user {auth_user.user_id}")

    supabase_client = get_supabase_client(auth_user.access_token)

    try:
        document = await get_document_by_id(
            supabase_client=supabase_client,
            user_id=auth_user.user_id,
            document_id=document_id
        )

        if not document:
            raise _not_found(document_id)

        return _to_detail(document)

    except HTTPException:
        raise
    except Exception as e:
        logger.error(f"Failed to fetch document {document_id}: {e}", exc_info=True)
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail={
                "error": "fetch_error",
                "details": "Failed to retrieve document from database"
            }
        )


@router.get(
    "/{document_id}/markup",
    response_class=HTMLResponse,
    status_code=status.HTTP_200_OK,
    summary="Re-render a stored document",
    description="""
    Render a stored document from its persisted totals.

    The totals are read back exactly as committed; nothing is recomputed.
    """
)
async def get_document_markup(
    document_id: str,
    auth_user: Annotated[AuthenticatedUser, Depends(get_authenticated_user)]
) -> HTMLResponse:
    supabase_client = get_supabase_client(auth_user.access_token)

    try:
        document = await get_document_by_id(
            supabase_client=supabase_client,
            user_id=auth_user.user_id,
            document_id=document_id
        )

        if not document:
            raise _not_found(document_id)

        markup = render_stored_document(document, get_business_config())

    except HTTPException:
        raise
    except Exception as e:
        logger.error(f"Failed to render document {document_id}: {e}", exc_info=True)
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail={
                "error": "render_error",
                "details": "Failed to render stored document"
            }
        )

    logger.info(f"Re-rendered document {document_id} for user {auth_user.user_id}")

    return HTMLResponse(content=markup)


@router.get(
    "/{document_id}/markup-url",
    response_model=DocumentMarkupUrlResponse,
    status_code=status.HTTP_200_OK,
    summary="Get signed URL of stored markup",
    description="""
    Issue a signed Storage URL for the markup rendered at commit time.

    The external PDF rasterizer fetches the markup from this URL.
    """
)
async def get_document_markup_signed_url(
    document_id: str,
    auth_user: Annotated[AuthenticatedUser, Depends(get_authenticated_user)]
) -> DocumentMarkupUrlResponse:
    supabase_client = get_supabase_client(auth_user.access_token)

    try:
        document = await get_document_by_id(
            supabase_client=supabase_client,
            user_id=auth_user.user_id,
            document_id=document_id
        )

        if not document or not document.get("markup_path"):
            raise _not_found(document_id)

        url = get_document_markup_url(
            supabase_client,
            document["markup_path"],
            expires_in=MARKUP_URL_TTL_SECONDS
        )

    except HTTPException:
        raise
    except Exception as e:
        logger.error(f"Failed to sign markup URL for document {document_id}: {e}", exc_info=True)
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail={
                "error": "storage_error",
                "details": "Failed to generate markup URL"
            }
        )

    return DocumentMarkupUrlResponse(
        document_id=document_id,
        markup_path=document["markup_path"],
        url=url,
        expires_in=MARKUP_URL_TTL_SECONDS,
    )


@router.delete(
    "/{document_id}",
    response_model=DocumentDeleteResponse,
    status_code=status.HTTP_200_OK,
    summary="Delete a document",
    description="""
    Soft-delete a document and remove its stored markup.

    Returns 404 if the document doesn't exist or belongs to another user.
    """
)
async def delete_document_record(
    document_id: str,
    auth_user: Annotated[AuthenticatedUser, Depends(get_authenticated_user)]
) -> DocumentDeleteResponse:
    logger.info(f"Deleting document {document_id} for user {auth_user.user_id}")

    supabase_client = get_supabase_client(auth_user.access_token)

    try:
        document = await get_document_by_id(
            supabase_client=supabase_client,
            user_id=auth_user.user_id,
            document_id=document_id
        )

        if not document:
            raise _not_found(document_id)

        success, deleted_at = await delete_document(
            supabase_client=supabase_client,
            user_id=auth_user.user_id,
            document_id=document_id,
        )

        if not success:
            raise _not_found(document_id)

    except HTTPException:
        raise
    except Exception as e:
        logger.error(f"Failed to delete document {document_id}: {e}", exc_info=True)
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail={
                "error": "delete_error",
                "details": "Failed to delete document"
            }
        )

    if document.get("markup_path"):
        await delete_document_markup(supabase_client, document["markup_path"])

    logger.info(f"Document {document_id} deleted successfully for user {auth_user.user_id}")

    return DocumentDeleteResponse(
        status="DELETED",
        document_id=str(document_id),
        deleted_at=str(deleted_at or ""),
        message="Document deleted successfully"
    )
