"""
Integration tests for moderation routes.

Tests POST /api/v1/admin/products/{id}/approve, /{id}/reject and
/images/cleanup. Verifies admin enforcement, error mapping and the
approve response for published and publish-failed outcomes, running the
real pipeline against the fake Shopify.
"""
import pytest
from unittest.mock import AsyncMock, MagicMock, patch

from fastapi.testclient import TestClient

from vendor_hub.core.exceptions import InvalidStatusTransition, ProductNotFoundError
from vendor_hub.schemas.moderation import ImageCleanupResponse

from shopify_fakes import LOOPBACK_SOURCE, SOURCE_A, STAGING_URL

ADMIN = {"user_id": "admin-001", "email": "admin@portal.test", "roles": ["admin"]}
VENDOR = {"user_id": "vendor-001", "email": "vendor@portal.test", "roles": ["vendor"]}


def _make_client(user):
    from vendor_hub.main import app
    from vendor_hub.core.auth import get_current_user

    app.dependency_overrides.clear()
    if user is not None:
        app.dependency_overrides[get_current_user] = lambda: user
    return app


@pytest.fixture
def purge_disabled():
    store = MagicMock()
    store.purge_expired = AsyncMock(return_value=0)
    with patch("vendor_hub.container.get_credential_store", return_value=store):
        yield


@pytest.fixture
def client(purge_disabled):
    """Test client authenticated as an admin."""
    app = _make_client(ADMIN)
    with TestClient(app, raise_server_exceptions=False) as c:
        yield c
    app.dependency_overrides.clear()


@pytest.fixture
def vendor_client(purge_disabled):
    app = _make_client(VENDOR)
    with TestClient(app, raise_server_exceptions=False) as c:
        yield c
    app.dependency_overrides.clear()


@pytest.fixture
def unauthenticated_client(purge_disabled):
    app = _make_client(None)
    with TestClient(app, raise_server_exceptions=False) as c:
        yield c


@pytest.fixture
def wired_orchestrator(orchestrator):
    with patch("vendor_hub.routes.moderation._get_orchestrator", return_value=orchestrator):
        yield orchestrator


@pytest.fixture
def mock_orchestrator():
    orchestrator = MagicMock()
    orchestrator.approve_product = AsyncMock()
    orchestrator.reject_product = AsyncMock()
    with patch("vendor_hub.routes.moderation._get_orchestrator", return_value=orchestrator):
        yield orchestrator


@pytest.mark.integration
class TestApprove:

    def test_approve_publishes_and_reports_images(
        self, client, wired_orchestrator, seed_credential, mock_product_store
    ):
        seed_credential("shpat_cached", valid=True)

        response = client.post("/api/v1/admin/products/prod-001/approve", json={"admin_notes": "ok"})

        assert response.status_code == 200
        data = response.json()
        assert data["status"] == "approved"
        assert data["published"] is True
        assert data["message"] == "Product approved and published to Shopify"
        assert data["shopify_product_id"] == "632910392"
        assert data["images"] == [f"{STAGING_URL}tmp/1/a.jpg", f"{STAGING_URL}tmp/2/b.png"]
        assert data["skipped_images"] == []
        assert data["failed_images"] == []

    def test_approve_without_body(self, client, wired_orchestrator, seed_credential):
        seed_credential("shpat_cached", valid=True)

        response = client.post("/api/v1/admin/products/prod-001/approve")

        assert response.status_code == 200
        assert response.json()["published"] is True

    def test_skipped_image_listed(
        self, client, wired_orchestrator, seed_credential, sample_product_row
    ):
        seed_credential("shpat_cached", valid=True)
        sample_product_row["images"] = [SOURCE_A, LOOPBACK_SOURCE]

        data = client.post("/api/v1/admin/products/prod-001/approve").json()

        assert data["images"] == [f"{STAGING_URL}tmp/1/a.jpg"]
        assert data["skipped_images"][0]["source"] == LOOPBACK_SOURCE
        assert "loopback" in data["skipped_images"][0]["reason"]

    def test_publish_failure_still_200_with_error(
        self, client, wired_orchestrator, seed_credential, fake_shopify
    ):
        seed_credential("shpat_cached", valid=True)
        fake_shopify.catalog_status = 500

        response = client.post("/api/v1/admin/products/prod-001/approve")

        assert response.status_code == 200
        data = response.json()
        assert data["status"] == "approved"
        assert data["published"] is False
        assert data["message"].startswith("Product approved, but Shopify publish failed: ")
        assert "500" in data["publish_error"]

    def test_missing_product_is_404(self, client, mock_orchestrator):
        mock_orchestrator.approve_product.side_effect = ProductNotFoundError("Product x not found")

        response = client.post("/api/v1/admin/products/x/approve")

        assert response.status_code == 404

    def test_invalid_transition_is_409(self, client, mock_orchestrator):
        mock_orchestrator.approve_product.side_effect = InvalidStatusTransition("p", "draft", "approve")

        response = client.post("/api/v1/admin/products/p/approve")

        assert response.status_code == 409
        assert "draft" in response.json()["detail"]

    def test_persistence_error_is_500(self, client, mock_orchestrator):
        mock_orchestrator.approve_product.side_effect = RuntimeError("db unavailable")

        response = client.post("/api/v1/admin/products/p/approve")

        assert response.status_code == 500

    def test_non_admin_forbidden(self, vendor_client, mock_orchestrator):
        response = vendor_client.post("/api/v1/admin/products/prod-001/approve")

        assert response.status_code == 403
        mock_orchestrator.approve_product.assert_not_awaited()

    def test_requires_auth(self, unauthenticated_client, mock_orchestrator):
        response = unauthenticated_client.post("/api/v1/admin/products/prod-001/approve")

        assert response.status_code in (401, 403)


@pytest.mark.integration
class TestReject:

    def test_reject_with_notes(self, client, wired_orchestrator, mock_product_store, fake_shopify):
        response = client.post(
            "/api/v1/admin/products/prod-001/reject", json={"admin_notes": "Blurry photos"}
        )

        assert response.status_code == 200
        data = response.json()
        assert data["status"] == "rejected"
        assert data["message"] == "Product rejected"
        assert data["published"] is None
        mock_product_store.update_product_status.assert_awaited_once_with(
            "prod-001", "rejected", notes="Blurry photos"
        )
        assert fake_shopify.requests == []

    def test_reject_draft_is_409(self, client, wired_orchestrator, sample_product_row):
        sample_product_row["status"] = "draft"

        response = client.post("/api/v1/admin/products/prod-001/reject")

        assert response.status_code == 409


@pytest.mark.integration
class TestImageCleanup:

    def test_cleanup_returns_summary(self, client):
        service = MagicMock()
        service.clean_stored_images = AsyncMock(return_value=ImageCleanupResponse(
            success=True, scanned=3, cleaned=1, removed={"prod-001": ["blob:x"]},
        ))
        with patch("vendor_hub.routes.moderation._get_maintenance_service", return_value=service):
            response = client.post("/api/v1/admin/products/images/cleanup")

        assert response.status_code == 200
        assert response.json()["removed"] == {"prod-001": ["blob:x"]}
