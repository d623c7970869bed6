"""
Database access layer for the ERP documents backend.

All database operations MUST:
- Use a client created per request with the user's access token
- Respect Row Level Security (RLS): user_id = auth.uid()
- Never bypass RLS

Totals are stored exactly as produced by the commit-time aggregation
(fixed-point strings); nothing in this layer computes amounts.
"""

from .client import get_supabase_client

__all__ = ["get_supabase_client"]
