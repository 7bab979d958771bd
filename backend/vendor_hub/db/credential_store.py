"""
Credential store — one Shopify access token per storefront, with expiry.

Pure data access: no network calls to Shopify and no validity decisions
beyond the stored expiry timestamp.
"""

import logging
from datetime import datetime, timezone
from typing import Callable, Optional

from fastapi import HTTPException
from postgrest.exceptions import APIError

from vendor_hub.clients.supabase_client import SupabaseClient
from vendor_hub.db.base_store import BaseStore
from vendor_hub.schemas.credentials import Credential, redact

logger = logging.getLogger("credential_store")

CREDENTIALS_TABLE = "shopify_credentials"


class CredentialStore(BaseStore):
    """CRUD for the shopify_credentials table (primary key: storefront_id)."""

    def __init__(
        self,
        supabase_client: SupabaseClient | None = None,
        clock: Callable[[], datetime] | None = None,
    ) -> None:
        super().__init__(supabase_client)
        self._clock = clock or (lambda: datetime.now(timezone.utc))

    async def get_credential(self, storefront_id: str) -> Optional[Credential]:
        rows = await self._select(
            CREDENTIALS_TABLE, filters={"storefront_id": storefront_id}, limit=1
        )
        if not rows:
            logger.info("credential missing storefront=%s", storefront_id)
            return None
        return Credential.from_row(rows[0])

    async def save_credential(self, credential: Credential) -> None:
        """Replace the storefront's credential as a whole."""
        row = credential.to_row()
        row["updated_at"] = self._clock().isoformat()
        await self._upsert(CREDENTIALS_TABLE, [row], on_conflict="storefront_id")
        logger.info(
            "credential stored storefront=%s token=%s expires_at=%s",
            credential.storefront_id,
            redact(credential.secret_value),
            credential.expires_at.isoformat(),
        )

    async def delete_credential(self, storefront_id: str, secret_value: Optional[str] = None) -> None:
        """Delete the storefront's credential; with `secret_value`, only if it still holds that token."""
        filters = {"storefront_id": storefront_id}
        if secret_value is not None:
            filters["access_token"] = secret_value
        await self._delete(CREDENTIALS_TABLE, filters)
        logger.info("credential deleted storefront=%s", storefront_id)

    async def purge_expired(self) -> int:
        """Delete every credential whose expiry has passed; returns the number removed."""
        now = self._clock().isoformat()
        try:
            response = (
                self._client.table(CREDENTIALS_TABLE)
                .delete()
                .lt("expires_at", now)
                .execute()
            )
        except APIError as e:
            logger.info("supabase error table=%s detail=%s", CREDENTIALS_TABLE, str(e))
            raise HTTPException(
                status_code=500,
                detail=f"Supabase delete from {CREDENTIALS_TABLE} failed: {e}",
            )
        removed = len(response.data or [])
        if removed:
            logger.info("credential purge removed=%s", removed)
        return removed
