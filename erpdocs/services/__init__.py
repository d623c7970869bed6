"""
Service layer for the document engine.

Contains the pure calculation engine and its orchestration:
- line_items / tax_rules / totals: Decimal arithmetic for every amount
- amount_in_words: Indian-system words for the grand total
- renderer: printable markup for each document kind
- draft_sync: editing state whose totals always follow its inputs
- document_service / storage: persistence coordination (DB layer under RLS)

Services act as the glue between routes (HTTP layer) and the database.
"""

from .amount_in_words import amount_in_words, to_words
from .document_service import (
    commit_document,
    compute_totals,
    delete_document,
    get_document_by_id,
    get_user_documents,
    render_stored_document,
    validate_for_commit,
)
from .draft_sync import DraftSyncCoordinator
from .line_items import compute_line_item
from .renderer import get_layout, render, totals_rows
from .storage import delete_document_markup, get_document_markup_url, upload_document_markup
from .tax_rules import resolve_regime, resolve_tax
from .totals import aggregate

__all__ = [
    "compute_line_item",
    "resolve_regime",
    "resolve_tax",
    "aggregate",
    "to_words",
    "amount_in_words",
    "get_layout",
    "render",
    "totals_rows",
    "DraftSyncCoordinator",
    "compute_totals",
    "validate_for_commit",
    "commit_document",
    "get_user_documents",
    "get_document_by_id",
    "render_stored_document",
    "delete_document",
    "upload_document_markup",
    "get_document_markup_url",
    "delete_document_markup",
]
