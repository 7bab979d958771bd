"""
Catalog publisher — creates the Shopify product for one publish request.

Only images that reached platform storage are referenced in the payload.
Every failure is returned as a PublishResult, never raised, so the
orchestrator can persist it.
"""
import logging
from typing import Any, Dict, List, Optional

from vendor_hub.clients.shopify_client import RequestSpec, ShopifyClient
from vendor_hub.core.config import Settings
from vendor_hub.core.exceptions import CatalogCreateError, VendorHubException
from vendor_hub.schemas.credentials import CredentialLease
from vendor_hub.schemas.publishing import (
    ProductPublishRequest,
    PublishResult,
    Uploaded,
    UploadOutcome,
    uploaded_in_order,
)
from vendor_hub.services.request_executor import ResilientRequestExecutor
from vendor_hub.utils.shopify_payload_builder import build_product_payload

logger = logging.getLogger("catalog_publisher")

PRODUCTS_PATH = "/products.json"


class CatalogPublisher:
    def __init__(
        self,
        client: ShopifyClient,
        executor: ResilientRequestExecutor,
        settings: Settings,
    ) -> None:
        self._client = client
        self._executor = executor
        self._request_timeout = settings.shopify_request_timeout

    async def publish(
        self,
        request: ProductPublishRequest,
        outcomes: List[UploadOutcome],
        lease: Optional[CredentialLease] = None,
    ) -> PublishResult:
        uploaded = uploaded_in_order(outcomes)
        body = build_product_payload(request, uploaded)
        storefront_id = lease.storefront_id if lease else self._client.storefront_id

        logger.info(
            "catalog create product_id=%s title=%s images=%s",
            request.product_id, request.title, len(uploaded),
        )
        spec = RequestSpec("POST", PRODUCTS_PATH, json=body, timeout=self._request_timeout)

        try:
            resp = await self._executor.execute(spec, storefront_id, lease)
            if not resp.is_success:
                raise CatalogCreateError(resp.status_code, resp.text)
        except VendorHubException as exc:
            logger.warning("catalog create failed product_id=%s error=%s", request.product_id, exc)
            return PublishResult.failure(str(exc))

        try:
            product = (resp.json() or {}).get("product") or {}
        except ValueError:
            product = {}

        product_id = product.get("id")
        if product_id is None:
            logger.warning("catalog create returned no product id product_id=%s", request.product_id)
            return PublishResult.failure("Shopify API error: product id missing from response")

        variants = product.get("variants") or []
        variant_id = variants[0].get("id") if variants else None

        result = PublishResult(
            success=True,
            platform_product_id=str(product_id),
            platform_variant_id=str(variant_id) if variant_id is not None else None,
            confirmed_image_uris=self._confirmed_images(product, uploaded),
        )
        logger.info(
            "catalog create ok product_id=%s shopify_product_id=%s images=%s",
            request.product_id, result.platform_product_id, len(result.confirmed_image_uris),
        )
        return result

    @staticmethod
    def _confirmed_images(product: Dict[str, Any], uploaded: List[Uploaded]) -> List[str]:
        if not uploaded:
            return []
        returned = [img.get("src") for img in product.get("images") or [] if img.get("src")]
        if returned:
            return returned
        return [o.platform_resource_uri for o in uploaded]
