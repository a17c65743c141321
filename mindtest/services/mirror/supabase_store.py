"""Supabase mirror store.

Writes go to the ``events`` / ``results`` tables of a Supabase project with the
hosted schema (``ts`` timestamptz, ``payload`` / ``score_json`` jsonb). The
supabase client is synchronous, so each call runs in a worker thread.
"""

import asyncio
from typing import Any

from supabase import Client, create_client
from supabase.lib.client_options import ClientOptions

from mindtest.core.logging import get_logger

from .base import BaseMirrorStore

logger = get_logger(__name__)

EVENTS_TABLE = "events"
RESULTS_TABLE = "results"


class SupabaseMirrorStore(BaseMirrorStore):
    """Mirror writes to a hosted Supabase Postgres."""

    provider_name = "supabase"

    def __init__(
        self,
        url: str,
        key: str,
        timeout_seconds: int = 10,
        client: Client | None = None,
    ) -> None:
        """
        Initialize the Supabase mirror.

        Args:
            url: Project URL (https://<ref>.supabase.co)
            key: Anon or service-role key
            timeout_seconds: PostgREST request timeout
            client: Pre-built client, mainly for tests
        """
        self._url = url
        self._client = client or create_client(
            url,
            key,
            ClientOptions(postgrest_client_timeout=timeout_seconds),
        )
        logger.bind(url=url).info("supabase_mirror_initialized")

    async def insert_event(self, row: dict[str, Any]) -> None:
        await asyncio.to_thread(
            lambda: self._client.table(EVENTS_TABLE).insert(row).execute()
        )

    async def insert_result(self, row: dict[str, Any]) -> None:
        await asyncio.to_thread(
            lambda: self._client.table(RESULTS_TABLE).insert(row).execute()
        )

    async def results_for_session(self, session_id: str) -> list[dict[str, Any]]:
        response = await asyncio.to_thread(
            lambda: self._client.table(RESULTS_TABLE)
            .select("*")
            .eq("session_id", session_id)
            .order("ts", desc=True)
            .execute()
        )
        return list(response.data or [])
