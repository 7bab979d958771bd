"""
Base store — shared Supabase client access for all stores.

Domain stores inherit from this class to get standardised
select / upsert / update / delete primitives. Every primitive is a
single-table, last-write-wins operation.
"""

import logging
from typing import Any, Dict, List

from fastapi import HTTPException
from postgrest.exceptions import APIError

from vendor_hub.core.config import settings
from vendor_hub.clients.supabase_client import SupabaseClient

logger = logging.getLogger("base_store")


class BaseStore:
    """Base class for all Supabase stores providing shared CRUD operations."""

    def __init__(self, supabase_client: SupabaseClient | None = None) -> None:
        self._supabase_client = supabase_client or SupabaseClient(settings)

    @property
    def _client(self):
        return self._supabase_client.client

    async def _select(
        self,
        table: str,
        columns: str = "*",
        filters: Dict[str, Any] | None = None,
        limit: int | None = None,
    ) -> List[Dict[str, Any]]:
        """Select rows from a table with optional equality filters."""
        try:
            query = self._client.table(table).select(columns)
            for key, value in (filters or {}).items():
                query = query.eq(key, value)
            if limit is not None:
                query = query.limit(limit)
            response = query.execute()
            return response.data or []
        except APIError as e:
            logger.info("supabase error table=%s detail=%s", table, str(e))
            raise HTTPException(
                status_code=500,
                detail=f"Supabase select from {table} failed: {e}",
            )

    async def _upsert(
        self, table: str, rows: List[Dict[str, Any]], on_conflict: str | None = None
    ) -> None:
        """Upsert rows into a table (insert or replace on conflict)."""
        if not rows:
            return
        try:
            if on_conflict:
                self._client.table(table).upsert(rows, on_conflict=on_conflict).execute()
            else:
                self._client.table(table).upsert(rows).execute()
        except APIError as e:
            logger.info("supabase error table=%s detail=%s", table, str(e))
            raise HTTPException(
                status_code=500,
                detail=f"Supabase upsert into {table} failed: {e}",
            )

    async def _update(
        self, table: str, filters: Dict[str, Any], payload: Dict[str, Any]
    ) -> None:
        """Update rows in a table matching the filters."""
        try:
            query = self._client.table(table).update(payload)
            for key, value in filters.items():
                query = query.eq(key, value)
            query.execute()
        except APIError as e:
            logger.info("supabase error table=%s detail=%s", table, str(e))
            raise HTTPException(
                status_code=500,
                detail=f"Supabase update {table} failed: {e}",
            )

    async def _delete(self, table: str, filters: Dict[str, Any]) -> None:
        """Delete rows matching the filters."""
        try:
            query = self._client.table(table).delete()
            for key, value in filters.items():
                query = query.eq(key, value)
            query.execute()
        except APIError as e:
            logger.info("supabase error table=%s detail=%s", table, str(e))
            raise HTTPException(
                status_code=500,
                detail=f"Supabase delete from {table} failed: {e}",
            )
