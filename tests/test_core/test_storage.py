"""Tests for the Storage engine."""

from datetime import datetime, timedelta

import pytest
from sqlalchemy import text

from mindtest.core.errors import StorageError
from mindtest.core.security import generate_record_id
from mindtest.core.storage import Storage
from mindtest.models import Event, Result

pytestmark = pytest.mark.asyncio

BASE_TS = datetime(2026, 10, 17, 10, 0, 0)


def make_event(event_type: str = "page_view", ts: datetime = BASE_TS, **kwargs) -> Event:
    return Event(
        id=kwargs.pop("id", generate_record_id()),
        ts=ts,
        event_type=event_type,
        session_id=kwargs.pop("session_id", "session-aaaa"),
        **kwargs,
    )


class TestInsertEventsBatch:
    """Tests for Storage.insert_events_batch."""

    async def test_inserts_all(self, storage: Storage):
        inserted = await storage.insert_events_batch([make_event(), make_event(), make_event()])

        assert inserted == 3
        assert len(await storage.query_events()) == 3

    async def test_empty_batch(self, storage: Storage):
        assert await storage.insert_events_batch([]) == 0

    async def test_all_or_nothing(self, storage: Storage):
        """A batch containing a conflicting row commits none of its rows."""
        seed = make_event(event_type="seed")
        await storage.insert_event(seed)

        batch = [make_event(event_type="ok-1"), make_event(event_type="dup", id=seed.id)]
        with pytest.raises(StorageError) as exc_info:
            await storage.insert_events_batch(batch)

        assert exc_info.value.message == "Failed to insert events."
        assert exc_info.value.details == {"operation": "insert_events_batch", "table": "events"}
        assert [event.event_type for event in await storage.query_events()] == ["seed"]

    async def test_column_defaults(self, storage: Storage):
        await storage.insert_event(Event(ts=BASE_TS))

        stored = (await storage.query_events())[0]
        assert stored.id
        assert stored.event_type == "custom"
        assert stored.page == ""
        assert stored.properties == {}


class TestQueryEvents:
    """Tests for Storage.query_events."""

    async def test_newest_first(self, storage: Storage):
        await storage.insert_events_batch(
            [make_event(f"e{i}", ts=BASE_TS + timedelta(seconds=i)) for i in range(3)]
        )

        events = await storage.query_events()

        assert [event.event_type for event in events] == ["e2", "e1", "e0"]

    async def test_limit_clamped(self, storage: Storage):
        await storage.insert_events_batch([make_event() for _ in range(505)])

        assert len(await storage.query_events(limit=10_000)) == 500

    async def test_offset(self, storage: Storage):
        await storage.insert_events_batch(
            [make_event(f"e{i}", ts=BASE_TS + timedelta(seconds=i)) for i in range(6)]
        )

        events = await storage.query_events(limit=2, offset=2)

        assert [event.event_type for event in events] == ["e3", "e2"]

    async def test_range_bounds_inclusive(self, storage: Storage):
        start = BASE_TS
        end = BASE_TS + timedelta(hours=1)
        await storage.insert_events_batch(
            [
                make_event("before", ts=start - timedelta(milliseconds=1)),
                make_event("at-start", ts=start),
                make_event("at-end", ts=end),
                make_event("after", ts=end + timedelta(milliseconds=1)),
            ]
        )

        events = await storage.query_events(start=start, end=end)

        assert {event.event_type for event in events} == {"at-start", "at-end"}


class TestResults:
    """Tests for result writes and reads."""

    async def test_insert_and_query(self, storage: Storage):
        await storage.insert_result(
            Result(ts=BASE_TS, session_id="s-1", result_name="INTJ", score_json='{"mind": 80}')
        )

        results = await storage.query_results()

        assert results[0].result_name == "INTJ"
        assert results[0].scores == {"mind": 80}

    async def test_results_for_session(self, storage: Storage):
        await storage.insert_result(Result(ts=BASE_TS, session_id="s-1", result_name="old"))
        await storage.insert_result(
            Result(ts=BASE_TS + timedelta(minutes=1), session_id="s-1", result_name="new")
        )
        await storage.insert_result(Result(ts=BASE_TS, session_id="s-2", result_name="other"))

        results = await storage.results_for_session("s-1")

        assert [result.result_name for result in results] == ["new", "old"]

    async def test_duplicate_result_raises(self, storage: Storage):
        result = Result(id="fixed-id", ts=BASE_TS, result_name="a")
        await storage.insert_result(result)

        with pytest.raises(StorageError, match="Failed to insert quiz result."):
            await storage.insert_result(Result(id="fixed-id", ts=BASE_TS, result_name="b"))


class TestLifecycle:
    async def test_ping(self, storage: Storage):
        assert await storage.ping() is True


class TestTimestampStorage:
    """Timestamps are stored as millisecond ISO text on SQLite."""

    async def _insert_raw_event(self, storage: Storage, event_id: str, ts: str) -> None:
        async with storage.engine.begin() as conn:
            await conn.execute(
                text(
                    "INSERT INTO events (id, ts, session_id, ip, page, type, payload) "
                    "VALUES (:id, :ts, 's-legacy', '', '/quiz', 'legacy', '{}')"
                ),
                {"id": event_id, "ts": ts},
            )

    async def test_stored_layout(self, storage: Storage):
        await storage.insert_event(make_event(ts=datetime(2026, 10, 17, 14, 30, 0, 123456)))

        async with storage.engine.connect() as conn:
            raw = (await conn.execute(text("SELECT ts FROM events"))).scalar()

        assert raw == "2026-10-17T14:30:00.123Z"

    async def test_existing_rows_within_range(self, storage: Storage):
        """Rows written by earlier deployments match day filters and sort with new rows."""
        await self._insert_raw_event(storage, "legacy-1", "2026-10-17T14:30:00.000Z")
        await storage.insert_event(make_event("new", ts=datetime(2026, 10, 17, 15, 0, 0)))

        events = await storage.query_events(
            start=datetime(2026, 10, 17, 0, 0), end=datetime(2026, 10, 17, 23, 59, 59, 999999)
        )

        assert [event.event_type for event in events] == ["new", "legacy"]
        assert events[1].ts == datetime(2026, 10, 17, 14, 30, 0)

    async def test_last_millisecond_of_day_included(self, storage: Storage):
        await self._insert_raw_event(storage, "legacy-2", "2026-10-17T23:59:59.999Z")

        events = await storage.query_events(end=datetime(2026, 10, 17, 23, 59, 59, 999999))

        assert [event.id for event in events] == ["legacy-2"]
