"""
Unit tests for CredentialStore — shopify_credentials table access.
"""
from datetime import datetime, timedelta, timezone

import pytest
from unittest.mock import MagicMock, call

from fastapi import HTTPException
from postgrest.exceptions import APIError

from vendor_hub.db.credential_store import CREDENTIALS_TABLE, CredentialStore
from vendor_hub.schemas.credentials import Credential

from shopify_fakes import STORE_DOMAIN


pytestmark = pytest.mark.unit

NOW = datetime(2026, 1, 15, 12, 0, tzinfo=timezone.utc)


@pytest.fixture
def mock_table(mock_supabase_client):
    return mock_supabase_client.client.table.return_value


@pytest.fixture
def store(mock_supabase_client):
    return CredentialStore(mock_supabase_client, clock=lambda: NOW)


class TestGetCredential:

    @pytest.mark.asyncio
    async def test_returns_credential_from_row(self, store, mock_table):
        mock_table.execute.return_value = MagicMock(data=[{
            "storefront_id": STORE_DOMAIN,
            "access_token": "shpat_stored",
            "expires_at": "2026-02-14T12:00:00+00:00",
        }])

        credential = await store.get_credential(STORE_DOMAIN)

        assert credential.secret_value == "shpat_stored"
        assert credential.expires_at == datetime(2026, 2, 14, 12, 0, tzinfo=timezone.utc)
        mock_table.eq.assert_called_once_with("storefront_id", STORE_DOMAIN)

    @pytest.mark.asyncio
    async def test_missing_returns_none(self, store, mock_table):
        assert await store.get_credential(STORE_DOMAIN) is None

    @pytest.mark.asyncio
    async def test_zulu_timestamp_parsed(self, store, mock_table):
        mock_table.execute.return_value = MagicMock(data=[{
            "storefront_id": STORE_DOMAIN,
            "access_token": "shpat_stored",
            "expires_at": "2026-02-14T12:00:00Z",
        }])

        credential = await store.get_credential(STORE_DOMAIN)

        assert credential.expires_at.tzinfo is not None


class TestSaveCredential:

    @pytest.mark.asyncio
    async def test_upserts_whole_row_on_storefront(self, store, mock_supabase_client, mock_table):
        credential = Credential(
            storefront_id=STORE_DOMAIN,
            secret_value="shpat_new",
            expires_at=NOW + timedelta(days=30),
        )

        await store.save_credential(credential)

        mock_supabase_client.client.table.assert_called_with(CREDENTIALS_TABLE)
        rows = mock_table.upsert.call_args.args[0]
        assert rows == [{
            "storefront_id": STORE_DOMAIN,
            "access_token": "shpat_new",
            "expires_at": (NOW + timedelta(days=30)).isoformat(),
            "updated_at": NOW.isoformat(),
        }]
        assert mock_table.upsert.call_args.kwargs == {"on_conflict": "storefront_id"}


class TestDeleteAndPurge:

    @pytest.mark.asyncio
    async def test_delete_by_storefront(self, store, mock_table):
        await store.delete_credential(STORE_DOMAIN)

        mock_table.delete.assert_called_once()
        mock_table.eq.assert_called_once_with("storefront_id", STORE_DOMAIN)

    @pytest.mark.asyncio
    async def test_delete_guarded_by_secret(self, store, mock_table):
        await store.delete_credential(STORE_DOMAIN, "shpat_expired")

        assert mock_table.eq.call_args_list == [
            call("storefront_id", STORE_DOMAIN),
            call("access_token", "shpat_expired"),
        ]

    @pytest.mark.asyncio
    async def test_purge_expired_deletes_before_now(self, store, mock_table):
        mock_table.execute.return_value = MagicMock(data=[{"storefront_id": "a"}, {"storefront_id": "b"}])

        removed = await store.purge_expired()

        assert removed == 2
        mock_table.lt.assert_called_once_with("expires_at", NOW.isoformat())

    @pytest.mark.asyncio
    async def test_purge_raises_http_exception_on_api_error(self, store, mock_table):
        mock_table.execute.side_effect = APIError(
            {"message": "delete failed", "code": "42000", "details": "", "hint": ""}
        )

        with pytest.raises(HTTPException) as exc_info:
            await store.purge_expired()

        assert exc_info.value.status_code == 500
