"""
Supabase Storage service for rendered document markup.

The committed markup is uploaded so the external PDF rasterizer can fetch
it by signed URL. The rasterizer's availability never affects a commit:
it reads what is stored here whenever it runs.
"""

import logging
from uuid import uuid4

from supabase import Client

from erpdocs.config import settings

logger = logging.getLogger(__name__)

MARKUP_CONTENT_TYPE = "text/html; charset=utf-8"


def build_markup_path(user_id: str, kind: str) -> str:
    """Storage path for a new markup file: documents/{user_id}/{kind}/{uuid}.html"""
    return f"documents/{user_id}/{kind}/{uuid4()}.html"


async def upload_document_markup(
    supabase_client: Client,
    user_id: str,
    kind: str,
    markup: str,
) -> str:
    """
    Upload rendered markup to Supabase Storage.

    Args:
        supabase_client: Authenticated Supabase client
        user_id: The authenticated user's ID (for path organization)
        kind: Document kind, used as a path segment
        markup: HTML produced by renderer.render()

    Returns:
        The storage path, stored in document.markup_path.

    Raises:
        Exception: If upload fails
    """
    storage_path = build_markup_path(user_id, kind)
    payload = markup.encode("utf-8")

    logger.info(
        f"Uploading {kind} markup for user {user_id}: "
        f"size={len(payload)} bytes, storage_path={storage_path}"
    )

    try:
        supabase_client.storage.from_(
            settings.SUPABASE_STORAGE_BUCKET
        ).upload(
            path=storage_path,
            file=payload,
            file_options={"content-type": MARKUP_CONTENT_TYPE}
        )
    except Exception as e:
        logger.error(f"Failed to upload document markup: {e}", exc_info=True)
        raise

    logger.info(f"Uploaded document markup: storage_path={storage_path}")
    return storage_path


async def delete_document_markup(
    supabase_client: Client,
    storage_path: str,
) -> bool:
    """
    Remove stored markup.

    Returns:
        True if the removal call succeeded, False otherwise. Failures are
        logged and not raised, so the caller keeps its own outcome.
    """
    if not storage_path:
        logger.warning("delete_document_markup called with empty storage_path")
        return False

    logger.info(f"Deleting document markup: storage_path={storage_path}")

    try:
        supabase_client.storage.from_(
            settings.SUPABASE_STORAGE_BUCKET
        ).remove([storage_path])
        return True

    except Exception as e:
        logger.error(
            f"Failed to delete document markup: storage_path={storage_path}, error={e}",
            exc_info=True
        )
        return False


def get_document_markup_url(
    supabase_client: Client,
    storage_path: str,
    expires_in: int = 3600,
) -> str:
    """
    Generate a signed URL the rasterizer can fetch the markup from.

    Raises:
        Exception: If URL generation fails
    """
    try:
        response = supabase_client.storage.from_(
            settings.SUPABASE_STORAGE_BUCKET
        ).create_signed_url(
            path=storage_path,
            expires_in=expires_in
        )
    except Exception as e:
        logger.error(
            f"Failed to generate signed URL for storage_path={storage_path}: {e}",
            exc_info=True
        )
        raise

    # Response shape differs across storage client versions
    if isinstance(response, dict):
        return response.get("signedURL") or response.get("signed_url") or str(response)
    if hasattr(response, "signed_url"):
        return response.signed_url
    return str(response)
