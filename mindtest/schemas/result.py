from typing import Any

from pydantic import BaseModel, Field

from mindtest.core.datetime_utils import isoformat_utc
from mindtest.models import Result


class ResultOut(BaseModel):
    """Stored quiz result as listed to the admin UI."""

    id: str
    timestamp: str
    user_id: str | None
    session_id: str | None
    result: str
    scores: dict[str, Any] = Field(default_factory=dict)

    @classmethod
    def from_model(cls, result: Result) -> "ResultOut":
        return cls(
            id=result.id,
            timestamp=isoformat_utc(result.ts),
            user_id=result.session_id,
            session_id=result.session_id,
            result=result.result_name or "",
            scores=result.scores,
        )


class UserResultItem(BaseModel):
    id: str
    timestamp: str
    result_name: str
    scores: dict[str, Any] = Field(default_factory=dict)


class UserResultsResponse(BaseModel):
    """A visitor's own results."""

    session_id: str
    results: list[UserResultItem]
    total: int
