"""
Shopify HTTP client — transport only.

Builds Admin API URLs for the configured storefront, attaches a caller
supplied access token and sends the request. It never decides what a
status code means and never acquires credentials; those concerns live in
the token manager and the request executor.
"""
import logging
from dataclasses import dataclass
from typing import Any, Dict, Optional

import httpx

from vendor_hub.core.config import Settings
from vendor_hub.core.exceptions import NonRetryableError
from vendor_hub.schemas.credentials import redact

logger = logging.getLogger("shopify_client")

ACCESS_TOKEN_HEADER = "X-Shopify-Access-Token"


@dataclass(frozen=True)
class RequestSpec:
    """One outbound Admin API call, independent of the credential used to send it."""

    method: str
    path: str
    json: Optional[Dict[str, Any]] = None
    params: Optional[Dict[str, Any]] = None
    timeout: Optional[float] = None

    @classmethod
    def graphql(
        cls,
        query: str,
        variables: Optional[Dict[str, Any]] = None,
        timeout: Optional[float] = None,
    ) -> "RequestSpec":
        return cls(
            method="POST",
            path="/graphql.json",
            json={"query": query, "variables": variables or {}},
            timeout=timeout,
        )


class ShopifyClient:
    def __init__(self, settings: Settings, transport: httpx.AsyncBaseTransport | None = None) -> None:
        raw_domain = settings.shopify_store_domain
        self._store_domain = self.normalize_store_domain(raw_domain)
        self._api_version = settings.shopify_api_version
        self._request_timeout = settings.shopify_request_timeout
        self._transport = transport
        logger.info(
            "ShopifyClient initialized: domain=%s (raw: %s) api_version=%s",
            self._store_domain, raw_domain, self._api_version,
        )

    @staticmethod
    def normalize_store_domain(domain: Optional[str]) -> Optional[str]:
        """
        Normalize Shopify store domain to ensure it has .myshopify.com suffix.

        - "my-store" -> "my-store.myshopify.com"
        - "my-store.myshopify.com" -> unchanged
        - "https://my-store.myshopify.com/" -> "my-store.myshopify.com"
        """
        if not domain:
            return domain

        domain = domain.strip().replace("https://", "").replace("http://", "")
        domain = domain.rstrip("/").lower()

        if not domain.endswith(".myshopify.com"):
            domain = f"{domain}.myshopify.com"

        return domain

    @property
    def storefront_id(self) -> str:
        """Key under which this storefront's credential is stored."""
        return self._require_domain()

    @property
    def store_domain(self) -> Optional[str]:
        return self._store_domain

    @staticmethod
    def to_gid(entity: str, value: str | int) -> str:
        if isinstance(value, str) and value.startswith("gid://"):
            return value
        return f"gid://shopify/{entity}/{value}"

    @staticmethod
    def from_gid(value: str | int | None) -> Optional[str]:
        """'gid://shopify/Product/123' -> '123'; plain ids pass through as strings."""
        if value is None:
            return None
        text = str(value)
        return text.rsplit("/", 1)[-1] if text.startswith("gid://") else text

    def _require_domain(self) -> str:
        if not self._store_domain:
            raise NonRetryableError("SHOPIFY_STORE_DOMAIN must be set")
        return self._store_domain

    def admin_url(self, path: str) -> str:
        return f"https://{self._require_domain()}/admin/api/{self._api_version}{path}"

    def oauth_url(self, endpoint: str) -> str:
        return f"https://{self._require_domain()}/admin/oauth/{endpoint}"

    def http(self, timeout: float | httpx.Timeout | None = None, **kwargs: Any) -> httpx.AsyncClient:
        """A short-lived AsyncClient sharing this client's transport (tests inject a mock one)."""
        return httpx.AsyncClient(
            timeout=timeout if timeout is not None else self._request_timeout,
            transport=self._transport,
            **kwargs,
        )

    async def send(self, spec: RequestSpec, access_token: str) -> httpx.Response:
        """Send one Admin API request. Status codes are returned, not raised."""
        url = self.admin_url(spec.path)
        headers = {
            ACCESS_TOKEN_HEADER: access_token,
            "Content-Type": "application/json",
            "Accept": "application/json",
        }
        logger.info(
            "shopify request method=%s path=%s params=%s token=%s",
            spec.method, spec.path, spec.params, redact(access_token),
        )

        async with self.http(spec.timeout) as client:
            resp = await client.request(
                method=spec.method, url=url, headers=headers, json=spec.json, params=spec.params,
            )

        logger.info("shopify response status=%s path=%s", resp.status_code, spec.path)
        return resp
