"""
Storage engine for the ``events`` and ``results`` tables.

A ``Storage`` is constructed once per process (application lifespan, CLI or
test fixture) and passed to whoever needs it. Writes run in one transaction
per call; reads run in their own short-lived session.
"""

from collections.abc import AsyncIterator, Sequence
from contextlib import asynccontextmanager
from datetime import datetime
from typing import Any

from sqlalchemy import Select, select, text
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession, async_sessionmaker

from mindtest.core.database import create_engine
from mindtest.core.errors import StorageError
from mindtest.core.logging import get_logger
from mindtest.core.pagination import MAX_PAGE_SIZE
from mindtest.models import Base, Event, Result

logger = get_logger(__name__)


def _ranged(stmt: Select, column: Any, start: datetime | None, end: datetime | None) -> Select:
    if start is not None:
        stmt = stmt.where(column >= start)
    if end is not None:
        stmt = stmt.where(column <= end)
    return stmt


class Storage:
    """Owns the engine and exposes insert and range-query primitives."""

    def __init__(self, engine: AsyncEngine) -> None:
        self.engine = engine
        self._session_factory = async_sessionmaker(
            engine,
            class_=AsyncSession,
            expire_on_commit=False,
            autoflush=False,
        )

    @classmethod
    def from_url(cls, url: str, echo: bool = False, **engine_kwargs: Any) -> "Storage":
        return cls(create_engine(url, echo=echo, **engine_kwargs))

    async def create_all(self) -> None:
        """Create both tables and their indexes if they don't exist."""
        async with self.engine.begin() as conn:
            await conn.run_sync(Base.metadata.create_all)

    async def dispose(self) -> None:
        await self.engine.dispose()

    async def ping(self) -> bool:
        """Return True when the database answers a trivial query."""
        try:
            async with self.engine.connect() as conn:
                await conn.execute(text("SELECT 1"))
        except SQLAlchemyError as e:
            logger.bind(error=str(e)).warning("database_ping_failed")
            return False
        return True

    @asynccontextmanager
    async def session(self) -> AsyncIterator[AsyncSession]:
        """Read session for aggregate queries."""
        async with self._session_factory() as session:
            yield session

    # ------------------------------------------------------------------
    # Writes
    # ------------------------------------------------------------------

    async def insert_events_batch(self, events: Sequence[Event]) -> int:
        """
        Insert all events in a single transaction.

        Either every row is committed or none is; on failure the transaction
        is rolled back and StorageError is raised.
        """
        if not events:
            return 0
        try:
            async with self._session_factory() as session, session.begin():
                session.add_all(events)
        except SQLAlchemyError as e:
            logger.bind(error=str(e), batch_size=len(events)).error("event_batch_insert_failed")
            raise StorageError(
                "Failed to insert events.",
                operation="insert_events_batch",
                table="events",
                original_error=e,
            ) from e
        return len(events)

    async def insert_event(self, event: Event) -> None:
        await self.insert_events_batch([event])

    async def insert_result(self, result: Result) -> None:
        try:
            async with self._session_factory() as session, session.begin():
                session.add(result)
        except SQLAlchemyError as e:
            logger.bind(error=str(e)).error("result_insert_failed")
            raise StorageError(
                "Failed to insert quiz result.",
                operation="insert_result",
                table="results",
                original_error=e,
            ) from e

    # ------------------------------------------------------------------
    # Reads
    # ------------------------------------------------------------------

    async def _fetch(self, stmt: Select, message: str, operation: str) -> list[Any]:
        try:
            async with self._session_factory() as session:
                result = await session.execute(stmt)
                return list(result.scalars().all())
        except SQLAlchemyError as e:
            logger.bind(error=str(e), operation=operation).error("storage_query_failed")
            raise StorageError(message, operation=operation, original_error=e) from e

    async def query_events(
        self,
        start: datetime | None = None,
        end: datetime | None = None,
        limit: int = 100,
        offset: int = 0,
    ) -> list[Event]:
        """Events with ``start <= ts <= end``, newest first."""
        stmt = _ranged(select(Event), Event.ts, start, end)
        stmt = (
            stmt.order_by(Event.ts.desc(), Event.id.desc())
            .limit(min(limit, MAX_PAGE_SIZE))
            .offset(max(offset, 0))
        )
        return await self._fetch(stmt, "Failed to fetch events from database.", "query_events")

    async def query_results(
        self,
        start: datetime | None = None,
        end: datetime | None = None,
        limit: int = 100,
        offset: int = 0,
    ) -> list[Result]:
        """Results with ``start <= ts <= end``, newest first."""
        stmt = _ranged(select(Result), Result.ts, start, end)
        stmt = (
            stmt.order_by(Result.ts.desc(), Result.id.desc())
            .limit(min(limit, MAX_PAGE_SIZE))
            .offset(max(offset, 0))
        )
        return await self._fetch(
            stmt, "Failed to fetch quiz results from database.", "query_results"
        )

    async def results_for_session(self, session_id: str) -> list[Result]:
        stmt = (
            select(Result)
            .where(Result.session_id == session_id)
            .order_by(Result.ts.desc(), Result.id.desc())
        )
        return await self._fetch(stmt, "Failed to fetch user results.", "results_for_session")
