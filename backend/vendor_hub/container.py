"""
Lazy DI container — singleton access to clients, stores, and services.

Each getter builds its object on first use; routes call the getters
rather than constructing services themselves.
"""

from functools import lru_cache

from vendor_hub.core.config import settings
from vendor_hub.clients.supabase_client import SupabaseClient
from vendor_hub.clients.shopify_client import ShopifyClient
from vendor_hub.db.credential_store import CredentialStore
from vendor_hub.db.product_store import ProductStore
from vendor_hub.services.catalog_publisher import CatalogPublisher
from vendor_hub.services.image_batch import ImageBatchProcessor
from vendor_hub.services.image_maintenance import ImageMaintenanceService
from vendor_hub.services.publish_orchestrator import PublishOrchestrator
from vendor_hub.services.request_executor import ResilientRequestExecutor
from vendor_hub.services.staged_upload import StagedUploadClient
from vendor_hub.services.token_manager import TokenLifecycleManager


# -- Clients ---------------------------------------------------------------

@lru_cache(maxsize=1)
def get_supabase_client():
    return SupabaseClient(settings)


@lru_cache(maxsize=1)
def get_shopify_client():
    return ShopifyClient(settings)


# -- DB Stores -------------------------------------------------------------

@lru_cache(maxsize=1)
def get_credential_store():
    return CredentialStore(get_supabase_client())


@lru_cache(maxsize=1)
def get_product_store():
    return ProductStore(get_supabase_client())


# -- Services --------------------------------------------------------------

@lru_cache(maxsize=1)
def get_token_manager():
    return TokenLifecycleManager(get_shopify_client(), get_credential_store(), settings)


@lru_cache(maxsize=1)
def get_request_executor():
    return ResilientRequestExecutor(get_shopify_client(), get_token_manager())


@lru_cache(maxsize=1)
def get_staged_upload_client():
    return StagedUploadClient(get_shopify_client(), get_request_executor(), settings)


@lru_cache(maxsize=1)
def get_image_batch_processor():
    return ImageBatchProcessor(get_staged_upload_client())


@lru_cache(maxsize=1)
def get_catalog_publisher():
    return CatalogPublisher(get_shopify_client(), get_request_executor(), settings)


@lru_cache(maxsize=1)
def get_publish_orchestrator():
    return PublishOrchestrator(
        product_store=get_product_store(),
        token_manager=get_token_manager(),
        batch_processor=get_image_batch_processor(),
        publisher=get_catalog_publisher(),
        shopify_client=get_shopify_client(),
    )


@lru_cache(maxsize=1)
def get_image_maintenance_service():
    return ImageMaintenanceService(get_product_store(), settings)
