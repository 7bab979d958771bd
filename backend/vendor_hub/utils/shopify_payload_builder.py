"""
Shopify payload builder — pure transformation from publish request to the
Shopify REST product-create payload.

Kept apart from the publisher so the mapping can be unit-tested without
network calls.
"""

import logging
from typing import Any, Dict, List, Optional

from vendor_hub.core.constants.publishing import (
    ALLOWED_WEIGHT_UNITS,
    DEFAULT_VENDOR_NAME,
    DEFAULT_WEIGHT_UNIT,
    PRODUCT_STATUS_ACTIVE,
    TAG_SEPARATOR,
)
from vendor_hub.schemas.publishing import ProductPublishRequest, Uploaded

logger = logging.getLogger("shopify_payload_builder")


# ── Field helpers ─────────────────────────────────────────────────

def format_money(amount: Optional[float]) -> Optional[str]:
    """Two-decimal string, or None for a missing/zero amount."""
    if not amount:
        return None
    return f"{float(amount):.2f}"


def map_weight_unit(unit: Optional[str]) -> str:
    if not unit:
        return DEFAULT_WEIGHT_UNIT
    normalized = unit.strip().lower()
    if normalized not in ALLOWED_WEIGHT_UNITS:
        logger.info("weight unit not supported by shopify, using default unit=%s", unit)
        return DEFAULT_WEIGHT_UNIT
    return normalized


def join_tags(tags: List[str]) -> str:
    return TAG_SEPARATOR.join(t.strip() for t in tags if t and t.strip())


def build_variant(request: ProductPublishRequest) -> Dict[str, Any]:
    variant: Dict[str, Any] = {
        "price": format_money(request.price) or "0.00",
        "compare_at_price": format_money(request.compare_at_price),
        "inventory_quantity": request.inventory_quantity or 0,
        "weight_unit": map_weight_unit(request.weight_unit),
    }
    if request.sku:
        variant["sku"] = request.sku
    if request.barcode:
        variant["barcode"] = request.barcode
    if request.weight:
        variant["weight"] = request.weight
    return variant


# ── Full payload builder ──────────────────────────────────────────

def build_product_payload(
    request: ProductPublishRequest, uploaded: List[Uploaded]
) -> Dict[str, Any]:
    """Build the `POST /products.json` body.

    Only uploaded images are referenced, in the order given (the caller
    passes them sorted by ordinal index).
    """
    images = [
        {"src": outcome.platform_resource_uri, "position": position}
        for position, outcome in enumerate(uploaded, start=1)
    ]
    return {
        "product": {
            "title": request.title,
            "body_html": request.description or "",
            "vendor": request.vendor_display_name or DEFAULT_VENDOR_NAME,
            "product_type": request.category or "",
            "tags": join_tags(request.tags),
            "status": PRODUCT_STATUS_ACTIVE,
            "variants": [build_variant(request)],
            "images": images,
        }
    }
