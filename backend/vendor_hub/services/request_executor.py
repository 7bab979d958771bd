"""
Resilient request executor — every authenticated Shopify Admin call goes
through here.

Handles a single 401 -> refresh -> retry cycle. No backoff and no retry on
any other status; non-2xx responses are handed back to the caller, which
decides what they mean.
"""
import logging
from typing import Optional

import httpx

from vendor_hub.clients.shopify_client import RequestSpec, ShopifyClient
from vendor_hub.core.exceptions import (
    AuthorizationError,
    ConnectionTimeoutError,
    ExternalAPIError,
)
from vendor_hub.schemas.credentials import CredentialLease, redact
from vendor_hub.services.token_manager import TokenLifecycleManager

logger = logging.getLogger("request_executor")


class ResilientRequestExecutor:
    def __init__(self, client: ShopifyClient, token_manager: TokenLifecycleManager) -> None:
        self._client = client
        self._tokens = token_manager

    async def execute(
        self,
        spec: RequestSpec,
        storefront_id: str,
        lease: Optional[CredentialLease] = None,
    ) -> httpx.Response:
        """
        Send `spec` with a valid credential.

        When `lease` is given its secret is used, and it is updated in place
        if a refresh happens so later calls of the same invocation pick up
        the new credential.

        Raises:
            CredentialAcquisitionError: no credential could be obtained
            AuthorizationError: still 401 after a fresh credential
            ConnectionTimeoutError / ExternalAPIError: transport failures
        """
        if lease is None:
            lease = await self._tokens.lease(storefront_id)

        resp = await self._send(spec, lease.secret)
        if resp.status_code != 401:
            return resp

        stale = lease.secret
        logger.info(
            "401 from shopify path=%s token=%s, refreshing credential",
            spec.path, redact(stale),
        )
        lease.secret = await self._tokens.refresh_credential(storefront_id, stale)

        resp = await self._send(spec, lease.secret)
        if resp.status_code == 401:
            logger.info("401 after refresh path=%s token=%s", spec.path, redact(lease.secret))
            raise AuthorizationError(
                f"Shopify rejected a freshly exchanged credential for {spec.method} {spec.path}"
            )
        return resp

    async def _send(self, spec: RequestSpec, secret: str) -> httpx.Response:
        try:
            return await self._client.send(spec, secret)
        except httpx.TimeoutException as exc:
            raise ConnectionTimeoutError(
                f"Shopify request timed out: {spec.method} {spec.path}"
            ) from exc
        except httpx.RequestError as exc:
            raise ExternalAPIError("Shopify", f"request error: {exc!r}") from exc
