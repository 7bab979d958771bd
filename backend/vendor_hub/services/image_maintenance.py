"""
Image maintenance — strips unresolved URIs (blob:, data:, local hosts,
malformed) from stored product image lists.
"""
import logging
from typing import Dict, List

from vendor_hub.core.config import Settings
from vendor_hub.db.product_store import ProductStore
from vendor_hub.schemas.moderation import ImageCleanupResponse
from vendor_hub.utils.image_sources import split_persistable

logger = logging.getLogger("image_maintenance")


class ImageMaintenanceService:
    def __init__(self, product_store: ProductStore, settings: Settings) -> None:
        self._products = product_store
        self._resource_domains = list(settings.shopify_resource_domains)

    async def clean_stored_images(self) -> ImageCleanupResponse:
        rows = await self._products.list_products_with_images()
        removed: Dict[str, List[str]] = {}

        for row in rows:
            kept, dropped = split_persistable(row.get("images") or [], self._resource_domains)
            if not dropped:
                continue
            product_id = str(row["id"])
            await self._products.update_product_images(product_id, kept)
            removed[product_id] = [str(uri) for uri in dropped]
            logger.info(
                "stored images cleaned product_id=%s kept=%s removed=%s",
                product_id, len(kept), len(dropped),
            )

        logger.info("image cleanup done scanned=%s cleaned=%s", len(rows), len(removed))
        return ImageCleanupResponse(
            success=True, scanned=len(rows), cleaned=len(removed), removed=removed
        )
