"""Null mirror - used when no secondary store is configured."""

from typing import Any

from .base import BaseMirrorStore


class NullMirrorStore(BaseMirrorStore):
    """Discards writes and never has rows."""

    provider_name = "null"
    enabled = False

    async def insert_event(self, row: dict[str, Any]) -> None:
        return None

    async def insert_result(self, row: dict[str, Any]) -> None:
        return None

    async def results_for_session(self, session_id: str) -> list[dict[str, Any]]:
        return []
