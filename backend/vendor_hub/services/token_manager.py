"""
Token lifecycle manager — acquisition, validity probing and refresh of the
Shopify access token.

The only component that talks to the Shopify OAuth token endpoint. Holds
the current credential per storefront in memory (backed by the
CredentialStore) and serializes every exchange per storefront, so that
concurrent publish invocations never clobber each other's refresh.
"""
import asyncio
import logging
from datetime import datetime, timedelta, timezone
from typing import Any, Callable, Dict, Optional

import httpx

from vendor_hub.clients.shopify_client import RequestSpec, ShopifyClient
from vendor_hub.core.config import Settings
from vendor_hub.core.constants.publishing import CREDENTIAL_PROBE_PATH
from vendor_hub.core.exceptions import CredentialAcquisitionError
from vendor_hub.db.credential_store import CredentialStore
from vendor_hub.schemas.credentials import Credential, CredentialLease, redact


class TokenLifecycleManager:
    def __init__(
        self,
        client: ShopifyClient,
        store: CredentialStore,
        settings: Settings,
        clock: Callable[[], datetime] | None = None,
    ) -> None:
        self._client = client
        self._store = store
        self._client_id = settings.shopify_client_id
        self._client_secret = settings.shopify_client_secret
        self._ttl = timedelta(days=settings.shopify_token_ttl_days)
        self._probe_timeout = settings.shopify_probe_timeout
        self._exchange_timeout = settings.shopify_exchange_timeout
        self._clock = clock or (lambda: datetime.now(timezone.utc))
        self._credentials: Dict[str, Credential] = {}
        self._locks: Dict[str, asyncio.Lock] = {}
        self._logger = logging.getLogger("token_manager")

    # ------------------------------------------------------------------
    # Public API
    # ------------------------------------------------------------------

    async def obtain_valid_credential(self, storefront_id: str) -> str:
        """
        Return a secret that the platform currently accepts.

        1. Cached and unexpired credential -> probe it; reuse it unchanged if
           the probe succeeds.
        2. Missing, expired or failed probe -> exchange for a new one and
           persist it.
        3. Exchange failure -> CredentialAcquisitionError.
        """
        cached = await self._load(storefront_id)
        if cached is not None:
            if await self._probe(cached.secret_value):
                self._logger.info(
                    "credential probe ok storefront=%s token=%s",
                    storefront_id, redact(cached.secret_value),
                )
                return cached.secret_value
            self._logger.info(
                "credential probe failed storefront=%s token=%s, exchanging",
                storefront_id, redact(cached.secret_value),
            )
        stale = cached.secret_value if cached else None
        return await self._exchange_once(storefront_id, stale)

    async def lease(self, storefront_id: str) -> CredentialLease:
        """Credential handle for one publish invocation."""
        secret = await self.obtain_valid_credential(storefront_id)
        return CredentialLease(storefront_id=storefront_id, secret=secret)

    async def refresh_credential(self, storefront_id: str, stale_secret: Optional[str]) -> str:
        """
        Force an exchange, bypassing the cache (called after a 401).

        If another caller already replaced `stale_secret` while this one
        waited for the storefront lock, that fresh credential is returned
        instead of exchanging a second time.
        """
        return await self._exchange_once(storefront_id, stale_secret)

    async def exchange_authorization_code(self, storefront_id: str, code: str) -> Credential:
        """Complete the OAuth install flow: trade an authorization code for a token."""
        async with self._lock_for(storefront_id):
            return await self._exchange(storefront_id, {"code": code})

    # ------------------------------------------------------------------
    # Internals
    # ------------------------------------------------------------------

    def _lock_for(self, storefront_id: str) -> asyncio.Lock:
        lock = self._locks.get(storefront_id)
        if lock is None:
            lock = self._locks[storefront_id] = asyncio.Lock()
        return lock

    async def _load(self, storefront_id: str, evict: bool = False) -> Optional[Credential]:
        """
        Unexpired credential from memory, falling back to the store.

        Expired credentials are only removed with `evict=True`, which callers
        pass while holding the storefront lock.
        """
        credential = self._credentials.get(storefront_id)
        if credential is None:
            credential = await self._store.get_credential(storefront_id)
        if credential is None:
            return None

        if credential.is_expired(self._clock()):
            self._logger.info(
                "credential expired storefront=%s expires_at=%s",
                storefront_id, credential.expires_at.isoformat(),
            )
            if evict:
                cached = self._credentials.get(storefront_id)
                if cached is not None and cached.secret_value == credential.secret_value:
                    del self._credentials[storefront_id]
                await self._store.delete_credential(storefront_id, credential.secret_value)
            return None

        # A fresher credential may have been cached while the store read was in flight.
        return self._credentials.setdefault(storefront_id, credential)

    async def _exchange_once(self, storefront_id: str, stale_secret: Optional[str]) -> str:
        async with self._lock_for(storefront_id):
            current = await self._load(storefront_id, evict=True)
            if current is not None and current.secret_value != stale_secret:
                self._logger.info(
                    "credential already refreshed storefront=%s token=%s",
                    storefront_id, redact(current.secret_value),
                )
                return current.secret_value
            credential = await self._exchange(
                storefront_id, {"grant_type": "client_credentials"}
            )
            return credential.secret_value

    async def _probe(self, secret: str) -> bool:
        spec = RequestSpec("GET", CREDENTIAL_PROBE_PATH, timeout=self._probe_timeout)
        try:
            resp = await self._client.send(spec, secret)
        except httpx.TimeoutException:
            self._logger.info("credential probe timed out after %ss", self._probe_timeout)
            return False
        except httpx.HTTPError as exc:
            self._logger.info("credential probe error detail=%r", exc)
            return False
        return resp.is_success

    async def _exchange(self, storefront_id: str, grant: Dict[str, Any]) -> Credential:
        if not (self._client_id and self._client_secret):
            raise CredentialAcquisitionError(
                "SHOPIFY_CLIENT_ID and SHOPIFY_CLIENT_SECRET env vars are required"
            )

        payload = {
            "client_id": self._client_id,
            "client_secret": self._client_secret,
            **grant,
        }
        self._logger.info("credential exchange storefront=%s grant=%s", storefront_id, sorted(grant))

        try:
            async with self._client.http(self._exchange_timeout) as http:
                resp = await http.post(
                    self._client.oauth_url("access_token"),
                    json=payload,
                    headers={"Content-Type": "application/json", "Accept": "application/json"},
                )
        except httpx.TimeoutException as exc:
            raise CredentialAcquisitionError(
                f"Shopify token exchange timed out after {self._exchange_timeout}s"
            ) from exc
        except httpx.HTTPError as exc:
            raise CredentialAcquisitionError(f"Shopify token exchange error: {exc!r}") from exc

        if resp.status_code != 200:
            self._logger.info(
                "credential exchange failed status=%s body=%s", resp.status_code, resp.text
            )
            raise CredentialAcquisitionError(
                f"Shopify token exchange failed: {resp.status_code} - {resp.text}"
            )

        try:
            body = resp.json()
        except ValueError:
            body = {}
        token = body.get("access_token")
        if not token:
            raise CredentialAcquisitionError("No access_token in Shopify token exchange response")

        now = self._clock()
        expires_in = body.get("expires_in")
        expires_at = now + (timedelta(seconds=int(expires_in)) if expires_in else self._ttl)
        credential = Credential(storefront_id=storefront_id, secret_value=token, expires_at=expires_at)

        self._credentials[storefront_id] = credential
        try:
            await self._store.save_credential(credential)
        except Exception as exc:
            # Token stays usable from memory until restart.
            self._logger.warning(
                "credential persist failed storefront=%s detail=%s", storefront_id, exc
            )

        self._logger.info(
            "credential exchanged storefront=%s token=%s expires_at=%s",
            storefront_id, redact(token), expires_at.isoformat(),
        )
        return credential
