from datetime import datetime
from typing import Any

from sqlalchemy import Index, String, Text
from sqlalchemy.orm import Mapped, mapped_column

from mindtest.core.datetime_utils import isoformat_utc
from mindtest.core.security import generate_record_id
from mindtest.models.base import Base
from mindtest.models.event import load_json


class Result(Base):
    """Computed quiz outcome for one visitor."""

    __tablename__ = "results"
    __table_args__ = (
        Index("idx_results_ts", "ts"),
        Index("idx_results_session_id", "session_id"),
    )

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=generate_record_id)
    ts: Mapped[datetime]
    session_id: Mapped[str | None] = mapped_column(String(128), nullable=True)
    result_name: Mapped[str] = mapped_column(Text, default="")
    score_json: Mapped[str] = mapped_column(Text, default="{}")

    @property
    def scores(self) -> dict[str, Any]:
        return load_json(self.score_json)

    def to_mirror_row(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "ts": isoformat_utc(self.ts),
            "session_id": self.session_id,
            "result_name": self.result_name,
            "score_json": self.scores,
        }

    def __repr__(self) -> str:
        return f"<Result {self.result_name} @ {self.ts}>"
