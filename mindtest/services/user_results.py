"""A visitor's own quiz results, read from the mirror first, then the primary store."""

import json
from datetime import datetime
from typing import Any

from mindtest.core.datetime_utils import isoformat_utc
from mindtest.core.logging import get_logger
from mindtest.core.storage import Storage
from mindtest.models import Result
from mindtest.schemas.result import UserResultItem
from mindtest.services.mirror import BaseMirrorStore

logger = get_logger(__name__)


def _scores_from_row(value: Any) -> dict[str, Any]:
    # score_json is jsonb in the hosted schema but older rows hold a JSON string
    if isinstance(value, str):
        try:
            value = json.loads(value)
        except ValueError:
            return {}
    return value if isinstance(value, dict) else {}


def _timestamp_from_row(value: Any) -> str:
    if isinstance(value, datetime):
        return isoformat_utc(value)
    return str(value or "")


def item_from_mirror_row(row: dict[str, Any]) -> UserResultItem:
    return UserResultItem(
        id=str(row.get("id", "")),
        timestamp=_timestamp_from_row(row.get("ts")),
        result_name=str(row.get("result_name") or ""),
        scores=_scores_from_row(row.get("score_json")),
    )


def item_from_result(result: Result) -> UserResultItem:
    return UserResultItem(
        id=result.id,
        timestamp=isoformat_utc(result.ts),
        result_name=result.result_name,
        scores=result.scores,
    )


async def fetch_session_results(
    session_id: str,
    storage: Storage,
    mirror: BaseMirrorStore,
) -> list[UserResultItem]:
    """
    Look up a session's results, newest first.

    Step 1 asks the mirror store (when enabled). If it errors or has no rows,
    step 2 reads the primary store, whose errors do propagate.
    """
    if mirror.enabled:
        try:
            rows = await mirror.results_for_session(session_id)
        except Exception as e:
            logger.bind(provider=mirror.provider_name, error=str(e)).warning(
                "mirror_read_failed_falling_back"
            )
            rows = []
        if rows:
            return [item_from_mirror_row(row) for row in rows]

    results = await storage.results_for_session(session_id)
    return [item_from_result(result) for result in results]
