"""
Product store — moderation status, image list and Shopify id updates.

Each write touches a single products row and is idempotent
(last write wins).
"""

import logging
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional

from vendor_hub.core.exceptions import ProductNotFoundError
from vendor_hub.db.base_store import BaseStore

logger = logging.getLogger("product_store")

PRODUCTS_TABLE = "products"
PRODUCT_COLUMNS = "*, vendors(business_name)"


def _now() -> str:
    return datetime.now(timezone.utc).isoformat()


class ProductStore(BaseStore):
    """Read/update access to the products table."""

    async def get_product(self, product_id: str) -> Dict[str, Any]:
        rows = await self._select(
            PRODUCTS_TABLE, columns=PRODUCT_COLUMNS, filters={"id": product_id}, limit=1
        )
        if not rows:
            raise ProductNotFoundError(f"Product {product_id} not found")
        return rows[0]

    async def list_products_with_images(self) -> List[Dict[str, Any]]:
        rows = await self._select(PRODUCTS_TABLE, columns="id, title, images, status")
        return [row for row in rows if row.get("images")]

    async def update_product_status(
        self,
        product_id: str,
        status: str,
        notes: Optional[str] = None,
        publish_state: Optional[str] = None,
    ) -> None:
        """Set the moderation status; notes and publish_state are always written (None clears them)."""
        payload = {
            "status": status,
            "admin_notes": notes,
            "publish_state": publish_state,
            "reviewed_at": _now(),
            "updated_at": _now(),
        }
        logger.info(
            "product status update id=%s status=%s publish_state=%s",
            product_id, status, publish_state,
        )
        await self._update(PRODUCTS_TABLE, {"id": product_id}, payload)

    async def update_product_images(self, product_id: str, images: List[str]) -> None:
        logger.info("product images update id=%s count=%s", product_id, len(images))
        await self._update(
            PRODUCTS_TABLE,
            {"id": product_id},
            {"images": list(images) or None, "updated_at": _now()},
        )

    async def set_platform_ids(
        self, product_id: str, platform_product_id: str, platform_variant_id: Optional[str]
    ) -> None:
        logger.info(
            "product shopify ids id=%s shopify_product_id=%s shopify_variant_id=%s",
            product_id, platform_product_id, platform_variant_id,
        )
        await self._update(
            PRODUCTS_TABLE,
            {"id": product_id},
            {
                "shopify_product_id": platform_product_id,
                "shopify_variant_id": platform_variant_id or "",
                "updated_at": _now(),
            },
        )
