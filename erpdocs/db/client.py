"""
Supabase client factory with RLS enforcement.

Provides authenticated Supabase clients that enforce Row Level Security by
carrying the user's JWT.

RULES:
1. NEVER use the service_role key for user operations
2. ALWAYS use the user's JWT token from Supabase Auth
3. The client MUST be created per-request with the user's token
"""

import logging

from erpdocs.config import settings
from supabase import Client, create_client

logger = logging.getLogger(__name__)


def get_supabase_client(access_token: str) -> Client:
    """
    Create an authenticated Supabase client for a specific user.

    Args:
        access_token: The user's JWT access token, as verified by
                      erpdocs/auth/dependencies.py.

    Returns:
        An authenticated Supabase client; every query on the document table
        and the documents bucket is scoped to the token's user.
    """
    client: Client = create_client(
        supabase_url=settings.SUPABASE_URL,
        supabase_key=settings.SUPABASE_PUBLISHABLE_KEY
    )

    # The token's 'sub' claim becomes auth.uid() in the RLS policies
    client.auth.set_session(access_token, access_token)

    logger.debug("Created authenticated Supabase client with user token (RLS enforced)")

    return client
