"""
Tests for the /documents endpoints.

- Happy path: calculate, preview, commit, fetch, re-render, delete
- Failure path: missing token -> 401
- Failure path: unknown kind or incomplete document -> 400
- Failure path: missing document -> 404, persistence failure -> 500
"""

from unittest.mock import MagicMock, Mock, patch

import pytest
from fastapi.testclient import TestClient

from erpdocs.auth.dependencies import AuthenticatedUser, get_authenticated_user
from erpdocs.main import app
from erpdocs.schemas.documents import DocumentRequest
from erpdocs.services.document_service import build_document_record, compute_totals

TEST_USER_ID = "test-user-uuid-123"


@pytest.fixture
def client():
    """Create test client for FastAPI app."""
    return TestClient(app)


async def mock_authenticated_user():
    """Mock dependency that returns a test user."""
    return AuthenticatedUser(user_id=TEST_USER_ID, access_token="test-access-token")


@pytest.fixture
def mock_auth():
    """Override get_authenticated_user dependency."""
    app.dependency_overrides[get_authenticated_user] = mock_authenticated_user

    yield

    app.dependency_overrides.clear()


@pytest.fixture
def mock_supabase():
    """Patch the per-request Supabase client factory."""
    client = MagicMock()
    with patch("erpdocs.routes.documents.get_supabase_client", return_value=client):
        yield client


@pytest.fixture
def document_body():
    return {
        "items": [{"description": "Hot Mounting Press", "quantity": "2", "rate": "500"}],
        "party": {
            "name": "Rahul Mehta",
            "company": "Mehta Prints Pvt. Ltd.",
            "jurisdiction": {"region": "Maharashtra", "country": "India"},
        },
        "meta": {"number": "QT-2025-014"},
    }


@pytest.fixture
def stored_record(document_body):
    request = DocumentRequest.model_validate(document_body)
    totals = compute_totals(request)
    record = build_document_record(TEST_USER_ID, "quotation", request, totals, "documents/u/quotation/x.html")
    record.update({"id": "doc-uuid-123", "created_at": "2025-04-01T10:00:00Z", "updated_at": None})
    return record


def _select_returns(mock_supabase, rows):
    mock_supabase.table.return_value.select.return_value.eq.return_value.execute.return_value = Mock(data=rows)


class TestHealth:

    def test_health_is_public(self, client):
        response = client.get("/health")

        assert response.status_code == 200
        assert response.json() == {"status": "ok"}


class TestCalculateEndpoint:

    def test_returns_totals_and_words(self, client, mock_auth):
        response = client.post("/documents/calculate", json={
            "items": [{"description": "Press", "quantity": 2, "rate": 500}],
            "counterparty": {"region": "Karnataka", "country": "India"},
        })

        assert response.status_code == 200
        data = response.json()
        assert data["totals"]["unified_tax_total"] == "180.00"
        assert data["totals"]["split_tax_a_total"] == "0.00"
        assert data["totals"]["grand_total"] == "1180.00"
        assert data["totals"]["tax_regime"] == "unified"
        assert data["amount_in_words"] == "Rupees One Thousand One Hundred and Eighty Only"

    def test_malformed_numbers_are_coerced(self, client, mock_auth):
        response = client.post("/documents/calculate", json={
            "items": [{"description": "Press", "quantity": "abc", "rate": "-10"}],
        })

        assert response.status_code == 200
        assert response.json()["totals"]["grand_total"] == "0.00"

    def test_oversized_rate_is_coerced(self, client, mock_auth):
        response = client.post("/documents/calculate", json={
            "items": [{"description": "Press", "quantity": 1, "rate": "99999999999999999999999999999"}],
        })

        assert response.status_code == 200
        assert response.json()["totals"]["grand_total"] == "0.00"

    def test_missing_token_returns_401(self, client):
        response = client.post("/documents/calculate", json={"items": []})

        assert response.status_code == 401
        assert response.json()["detail"]["error"] == "unauthorized"

    def test_invalid_body_returns_422(self, client, mock_auth):
        response = client.post("/documents/calculate", json={"items": "not-a-list"})

        assert response.status_code == 422
        assert response.json()["error"] == "validation_error"


class TestPreviewEndpoint:

    def test_returns_html(self, client, mock_auth, document_body):
        response = client.post("/documents/purchaseOrder/preview", json=document_body)

        assert response.status_code == 200
        assert response.headers["content-type"].startswith("text/html")
        assert "PURCHASE ORDER" in response.text
        assert "1,180.00" in response.text

    def test_client_totals_are_ignored(self, client, mock_auth, document_body):
        document_body["totals"] = {"grand_total": "5.00"}

        response = client.post("/documents/quotation/preview", json=document_body)

        assert "1,180.00" in response.text

    def test_unknown_kind_returns_400(self, client, mock_auth, document_body):
        response = client.post("/documents/invoice/preview", json=document_body)

        assert response.status_code == 400
        assert response.json()["detail"]["error"] == "invalid_kind"


class TestCommitEndpoint:

    def test_commit_persists_recomputed_totals(self, client, mock_auth, mock_supabase, document_body):
        mock_supabase.table.return_value.insert.return_value.execute.return_value = Mock(
            data=[{"id": "doc-uuid-123", "markup_path": "documents/u/quotation/x.html"}]
        )
        document_body["clientTotals"] = {"grand_total": "5.00"}

        response = client.post("/documents/quotation", json=document_body)

        assert response.status_code == 201
        data = response.json()
        assert data["status"] == "COMMITTED"
        assert data["document_id"] == "doc-uuid-123"
        assert data["kind"] == "quotation"
        assert data["grand_total"] == "1180.00"
        assert data["markup_path"] == "documents/u/quotation/x.html"

        record = mock_supabase.table.return_value.insert.call_args[0][0]
        assert record["totals"]["grand_total"] == "1180.00"

    def test_commit_without_items_returns_400(self, client, mock_auth, mock_supabase, document_body):
        document_body["items"] = []

        response = client.post("/documents/quotation", json=document_body)

        assert response.status_code == 400
        assert "at least one line item" in response.json()["detail"]["details"]
        mock_supabase.table.assert_not_called()

    def test_commit_without_party_returns_400(self, client, mock_auth, mock_supabase, document_body):
        document_body["party"] = {"jurisdiction": {"region": "Maharashtra", "country": "India"}}

        response = client.post("/documents/quotation", json=document_body)

        assert response.status_code == 400
        assert response.json()["detail"]["error"] == "invalid_request"

    def test_persistence_failure_returns_500(self, client, mock_auth, mock_supabase, document_body):
        mock_supabase.table.return_value.insert.return_value.execute.return_value = Mock(data=[])

        response = client.post("/documents/proforma", json=document_body)

        assert response.status_code == 500
        assert response.json()["detail"]["error"] == "persistence_error"


class TestStoredDocumentEndpoints:

    def test_list_documents(self, client, mock_auth, mock_supabase, stored_record):
        query = mock_supabase.table.return_value.select.return_value
        query.eq.return_value.order.return_value.range.return_value.execute.return_value = Mock(
            data=[stored_record]
        )

        response = client.get("/documents?kind=quotation&limit=10")

        assert response.status_code == 200
        data = response.json()
        assert data["count"] == 1
        assert data["limit"] == 10
        assert data["documents"][0]["totals"]["grand_total"] == "1180.00"

    def test_list_with_unknown_kind_returns_400(self, client, mock_auth, mock_supabase):
        response = client.get("/documents?kind=receipt")

        assert response.status_code == 400

    def test_get_document(self, client, mock_auth, mock_supabase, stored_record):
        _select_returns(mock_supabase, [stored_record])

        response = client.get("/documents/doc-uuid-123")

        assert response.status_code == 200
        data = response.json()
        assert data["id"] == "doc-uuid-123"
        assert data["document_number"] == "QT-2025-014"
        assert data["party"]["company"] == "Mehta Prints Pvt. Ltd."

    def test_missing_document_returns_404(self, client, mock_auth, mock_supabase):
        _select_returns(mock_supabase, [])

        response = client.get("/documents/missing-id")

        assert response.status_code == 404
        assert response.json()["detail"]["error"] == "not_found"

    def test_markup_is_rendered_from_stored_totals(self, client, mock_auth, mock_supabase, stored_record):
        stored_record["totals"]["grand_total"] = "1234.00"
        _select_returns(mock_supabase, [stored_record])

        response = client.get("/documents/doc-uuid-123/markup")

        assert response.status_code == 200
        assert "1,234.00" in response.text

    def test_markup_url(self, client, mock_auth, mock_supabase, stored_record):
        _select_returns(mock_supabase, [stored_record])
        mock_supabase.storage.from_.return_value.create_signed_url.return_value = {
            "signedURL": "https://example.supabase.co/sign/x.html"
        }

        response = client.get("/documents/doc-uuid-123/markup-url")

        assert response.status_code == 200
        assert response.json()["url"] == "https://example.supabase.co/sign/x.html"
        assert response.json()["markup_path"] == "documents/u/quotation/x.html"

    def test_delete_document_removes_markup(self, client, mock_auth, mock_supabase, stored_record):
        _select_returns(mock_supabase, [stored_record])
        mock_supabase.rpc.return_value.execute.return_value = Mock(
            data=[{"document_soft_deleted": True, "deleted_at": "2025-04-02T09:00:00Z"}]
        )

        response = client.delete("/documents/doc-uuid-123")

        assert response.status_code == 200
        assert response.json()["status"] == "DELETED"
        assert response.json()["deleted_at"] == "2025-04-02T09:00:00Z"
        mock_supabase.storage.from_.return_value.remove.assert_called_once_with(
            ["documents/u/quotation/x.html"]
        )

    def test_delete_missing_document_returns_404(self, client, mock_auth, mock_supabase):
        _select_returns(mock_supabase, [])

        response = client.delete("/documents/missing-id")

        assert response.status_code == 404
        mock_supabase.rpc.assert_not_called()
