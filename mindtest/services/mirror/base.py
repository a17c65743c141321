"""Abstract base class for secondary (mirror) stores."""

from abc import ABC, abstractmethod
from typing import Any


class BaseMirrorStore(ABC):
    """
    Best-effort secondary persistence target.

    Rows use the hosted schema produced by ``Event.to_mirror_row`` and
    ``Result.to_mirror_row``. Implementations may raise freely; callers treat
    every failure as a dropped write.
    """

    provider_name: str = "unknown"
    enabled: bool = True

    @abstractmethod
    async def insert_event(self, row: dict[str, Any]) -> None:
        """Insert one event row."""
        pass

    @abstractmethod
    async def insert_result(self, row: dict[str, Any]) -> None:
        """Insert one result row."""
        pass

    @abstractmethod
    async def results_for_session(self, session_id: str) -> list[dict[str, Any]]:
        """
        Fetch a visitor's results, newest first.

        Args:
            session_id: The visitor's session token

        Returns:
            Raw result rows (``id``, ``ts``, ``result_name``, ``score_json``)
        """
        pass
