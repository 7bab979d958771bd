"""
Shopify routes — app install (OAuth) and connection check.

Provides:
- GET /api/v1/shopify/install      – redirect to the Shopify authorize page
- GET /api/v1/shopify/callback     – verify the callback and store the access token
- GET /api/v1/shopify/connection   – authenticated shop.json read (admin)
"""
import logging

from fastapi import APIRouter, Depends, HTTPException, Query, Request
from fastapi.responses import RedirectResponse

from vendor_hub.clients.shopify_client import RequestSpec
from vendor_hub.container import get_request_executor, get_shopify_client, get_token_manager
from vendor_hub.core.auth import require_admin
from vendor_hub.core.config import settings
from vendor_hub.core.constants.publishing import CREDENTIAL_PROBE_PATH
from vendor_hub.core.exceptions import AuthenticationError, VendorHubException
from vendor_hub.schemas.shopify import ShopifyConnectionResponse, ShopifyInstallResponse
from vendor_hub.utils.shopify_oauth import (
    build_authorize_url,
    is_valid_shop_domain,
    new_state,
    verify_callback_hmac,
)

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/v1/shopify", tags=["shopify"])


def _require_oauth_settings(*names: str) -> None:
    missing = [name.upper() for name in names if not getattr(settings, name)]
    if missing:
        raise HTTPException(
            status_code=500,
            detail=f"Missing required Shopify OAuth settings: {', '.join(missing)}",
        )


@router.get("/install")
async def shopify_install(shop: str = Query(..., description="<store>.myshopify.com")):
    """Start the OAuth install flow for the configured store."""
    _require_oauth_settings(
        "shopify_client_id", "shopify_client_secret", "shopify_scopes", "shopify_redirect_uri"
    )
    if not is_valid_shop_domain(shop):
        raise HTTPException(status_code=400, detail="Invalid shop domain")

    url = build_authorize_url(
        shop,
        settings.shopify_client_id,
        settings.shopify_scopes,
        settings.shopify_redirect_uri,
        new_state(),
    )
    logger.info(f"Shopify install redirect: shop={shop}")
    return RedirectResponse(url)


@router.get("/callback", response_model=ShopifyInstallResponse)
async def shopify_callback(request: Request):
    """Exchange the authorization code for an access token and store it."""
    _require_oauth_settings("shopify_client_id", "shopify_client_secret")

    params = dict(request.query_params)
    shop = params.get("shop")
    code = params.get("code")
    if not shop or not code:
        raise HTTPException(status_code=400, detail="Missing required parameters")

    if not verify_callback_hmac(params, settings.shopify_client_secret):
        logger.warning(f"Shopify callback rejected: bad hmac shop={shop}")
        raise HTTPException(status_code=401, detail="Invalid callback signature")

    client = get_shopify_client()
    if shop != client.store_domain:
        raise HTTPException(status_code=400, detail="Callback shop does not match configured store")

    try:
        credential = await get_token_manager().exchange_authorization_code(
            client.storefront_id, code
        )
    except AuthenticationError as e:
        logger.error(f"Shopify code exchange failed: shop={shop} error={e}")
        raise HTTPException(status_code=502, detail=str(e))

    return ShopifyInstallResponse(
        success=True,
        shop=shop,
        expires_at=credential.expires_at.isoformat(),
        message="Shopify app installed; access token stored",
    )


@router.get("/connection", response_model=ShopifyConnectionResponse)
async def shopify_connection(current_user: dict = Depends(require_admin)):
    """Check that the stored credential works against the Admin API."""
    client = get_shopify_client()
    spec = RequestSpec("GET", CREDENTIAL_PROBE_PATH, timeout=settings.shopify_request_timeout)
    try:
        resp = await get_request_executor().execute(spec, client.storefront_id)
    except VendorHubException as e:
        logger.warning(f"Shopify connection check failed: {e}")
        return ShopifyConnectionResponse(success=False, shop=client.store_domain, message=str(e))

    if not resp.is_success:
        return ShopifyConnectionResponse(
            success=False,
            shop=client.store_domain,
            message=f"Shopify API error: {resp.status_code}",
        )

    try:
        body = resp.json()
    except ValueError:
        return ShopifyConnectionResponse(
            success=False,
            shop=client.store_domain,
            message="Shopify API returned a non-JSON response",
        )

    shop_name = ((body or {}).get("shop") or {}).get("name")
    return ShopifyConnectionResponse(
        success=True,
        shop=client.store_domain,
        shop_name=shop_name,
        message=f"Connected to {shop_name or client.store_domain}",
    )
