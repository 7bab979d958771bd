"""
Pytest configuration and shared fixtures for Vendor Hub tests.

Provides settings, a fake clock, an in-memory credential store, a fake
Shopify, wired pipeline services, mocked stores and sample product rows.
"""
from datetime import datetime, timedelta, timezone

import httpx
import pytest
from unittest.mock import AsyncMock, MagicMock

from vendor_hub.clients.shopify_client import ShopifyClient
from vendor_hub.core.config import Settings
from vendor_hub.schemas.credentials import Credential
from vendor_hub.services.catalog_publisher import CatalogPublisher
from vendor_hub.services.image_batch import ImageBatchProcessor
from vendor_hub.services.publish_orchestrator import PublishOrchestrator
from vendor_hub.services.request_executor import ResilientRequestExecutor
from vendor_hub.services.staged_upload import StagedUploadClient
from vendor_hub.services.token_manager import TokenLifecycleManager

from shopify_fakes import (
    API_VERSION,
    SOURCE_A,
    SOURCE_B,
    STAGING_HOST,
    STORE_DOMAIN,
    FakeClock,
    FakeShopify,
    InMemoryCredentialStore,
)


# ---------------------------------------------------------------------------
# Settings and clock
# ---------------------------------------------------------------------------

@pytest.fixture
def test_settings():
    """Settings object with test defaults (no real credentials)."""
    return Settings(
        supabase_url="https://test.supabase.co",
        supabase_service_role_key="test-service-role-key",
        supabase_jwt_secret="test-jwt-secret",
        shopify_store_domain=STORE_DOMAIN,
        shopify_api_version=API_VERSION,
        shopify_client_id="test-client-id",
        shopify_client_secret="test-client-secret",
        shopify_scopes="read_products,write_products",
        shopify_redirect_uri="https://portal.test/api/v1/shopify/callback",
        shopify_token_ttl_days=30,
        shopify_probe_timeout=5,
        shopify_exchange_timeout=20,
        shopify_request_timeout=30,
        shopify_transfer_timeout=60,
        shopify_resource_domains=["cdn.shopify.com", STAGING_HOST],
    )


@pytest.fixture
def clock():
    return FakeClock(datetime(2026, 1, 15, 12, 0, tzinfo=timezone.utc))


@pytest.fixture
def credential_store():
    return InMemoryCredentialStore()


@pytest.fixture
def fake_shopify():
    return FakeShopify()


@pytest.fixture
def shopify_client(test_settings, fake_shopify):
    return ShopifyClient(test_settings, transport=httpx.MockTransport(fake_shopify.handler))


@pytest.fixture
def seed_credential(credential_store, clock, fake_shopify):
    """Put a credential in the store; `valid` controls whether the fake accepts it."""
    def _seed(token: str = "shpat_cached", valid: bool = True, expires_in_days: int = 10):
        if valid:
            fake_shopify.valid_tokens.add(token)
        credential_store.credentials[STORE_DOMAIN] = Credential(
            storefront_id=STORE_DOMAIN,
            secret_value=token,
            expires_at=clock() + timedelta(days=expires_in_days),
        )
        return token
    return _seed


# ---------------------------------------------------------------------------
# Pipeline services (real, wired to the fakes)
# ---------------------------------------------------------------------------

@pytest.fixture
def token_manager(shopify_client, credential_store, test_settings, clock):
    return TokenLifecycleManager(shopify_client, credential_store, test_settings, clock=clock)


@pytest.fixture
def executor(shopify_client, token_manager):
    return ResilientRequestExecutor(shopify_client, token_manager)


@pytest.fixture
def uploader(shopify_client, executor, test_settings):
    return StagedUploadClient(shopify_client, executor, test_settings)


@pytest.fixture
def batch_processor(uploader):
    return ImageBatchProcessor(uploader)


@pytest.fixture
def publisher(shopify_client, executor, test_settings):
    return CatalogPublisher(shopify_client, executor, test_settings)


@pytest.fixture
def orchestrator(mock_product_store, token_manager, batch_processor, publisher, shopify_client):
    return PublishOrchestrator(
        product_store=mock_product_store,
        token_manager=token_manager,
        batch_processor=batch_processor,
        publisher=publisher,
        shopify_client=shopify_client,
    )


# ---------------------------------------------------------------------------
# Clients and stores (mocked)
# ---------------------------------------------------------------------------

@pytest.fixture
def mock_supabase_client():
    """Mocked SupabaseClient with a chained table builder."""
    client = MagicMock()
    mock_table = MagicMock()
    mock_table.select.return_value = mock_table
    mock_table.upsert.return_value = mock_table
    mock_table.update.return_value = mock_table
    mock_table.delete.return_value = mock_table
    mock_table.eq.return_value = mock_table
    mock_table.lt.return_value = mock_table
    mock_table.limit.return_value = mock_table
    mock_table.execute.return_value = MagicMock(data=[])
    client.client.table.return_value = mock_table
    return client


@pytest.fixture
def mock_product_store(sample_product_row):
    """Mocked ProductStore returning `sample_product_row`."""
    store = MagicMock()
    store.get_product = AsyncMock(return_value=sample_product_row)
    store.update_product_status = AsyncMock()
    store.update_product_images = AsyncMock()
    store.set_platform_ids = AsyncMock()
    store.list_products_with_images = AsyncMock(return_value=[])
    return store


# ---------------------------------------------------------------------------
# Sample test data
# ---------------------------------------------------------------------------

@pytest.fixture
def sample_product_row():
    """A pending `products` row with the vendor joined in."""
    return {
        "id": "prod-001",
        "vendor_id": "vendor-001",
        "title": "Handwoven Linen Throw",
        "description": "Soft linen throw, 130x170cm.",
        "price": 89.5,
        "compare_at_price": 120,
        "sku": "LIN-THROW-01",
        "barcode": "0123456789012",
        "inventory_quantity": 12,
        "category": "Home Textiles",
        "tags": ["linen", "handmade"],
        "weight": 0.8,
        "weight_unit": "kg",
        "images": [SOURCE_A, SOURCE_B],
        "status": "pending",
        "publish_state": None,
        "admin_notes": None,
        "vendors": {"business_name": "Loom & Thread"},
    }
