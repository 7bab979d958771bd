"""
Shopify OAuth helpers — install URL building and callback HMAC verification.

Pure functions; the code exchange itself lives in the token manager.
"""

import hashlib
import hmac
import secrets
from typing import Mapping
from urllib.parse import urlencode

SHOP_DOMAIN_SUFFIX = ".myshopify.com"
SIGNATURE_PARAMS = frozenset({"hmac", "signature"})


def is_valid_shop_domain(shop: str | None) -> bool:
    if not shop:
        return False
    name = shop[: -len(SHOP_DOMAIN_SUFFIX)] if shop.endswith(SHOP_DOMAIN_SUFFIX) else ""
    return bool(name) and all(c.isalnum() or c == "-" for c in name)


def new_state() -> str:
    """Random nonce for the authorize redirect."""
    return secrets.token_hex(16)


def build_authorize_url(
    shop: str, client_id: str, scopes: str, redirect_uri: str, state: str
) -> str:
    query = urlencode(
        {
            "client_id": client_id,
            "scope": scopes,
            "redirect_uri": redirect_uri,
            "state": state,
        }
    )
    return f"https://{shop}/admin/oauth/authorize?{query}"


def compute_callback_hmac(params: Mapping[str, str], client_secret: str) -> str:
    """Hex HMAC-SHA256 over the sorted `key=value` pairs, signature params excluded."""
    message = "&".join(
        f"{key}={params[key]}" for key in sorted(params) if key not in SIGNATURE_PARAMS
    )
    return hmac.new(
        client_secret.encode("utf-8"), message.encode("utf-8"), hashlib.sha256
    ).hexdigest()


def verify_callback_hmac(params: Mapping[str, str], client_secret: str) -> bool:
    supplied = params.get("hmac")
    if not supplied or not client_secret:
        return False
    return hmac.compare_digest(compute_callback_hmac(params, client_secret), supplied)
