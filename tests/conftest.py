"""
Pytest configuration and fixtures for mindtest tests.

Provides:
- Storage backed by an in-memory SQLite database
- Mirror forwarders (disabled, and a recording fake)
- Test client for API testing
- Factory fixtures for creating test data
"""

from collections.abc import AsyncGenerator
from datetime import datetime
from typing import Any

import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient
from sqlalchemy import StaticPool

from mindtest.config import Settings, get_settings
from mindtest.core.datetime_utils import utc_now
from mindtest.core.security import generate_record_id
from mindtest.core.storage import Storage
from mindtest.main import app
from mindtest.models import Event, Result
from mindtest.models.event import dump_json
from mindtest.services.mirror import BaseMirrorStore, MirrorForwarder, NullMirrorStore

# Test database URL (in-memory SQLite)
TEST_DATABASE_URL = "sqlite+aiosqlite:///:memory:"


# Override settings for testing
class TestSettings(Settings):
    database_url: str = TEST_DATABASE_URL
    debug: bool = True
    timezone: str = "UTC"
    supabase_url: str = ""
    supabase_anon_key: str = ""


class RecordingMirrorStore(BaseMirrorStore):
    """In-memory mirror that records writes and serves canned reads."""

    provider_name = "recording"

    def __init__(
        self,
        rows: list[dict[str, Any]] | None = None,
        fail_writes: bool = False,
        fail_reads: bool = False,
    ) -> None:
        self.events: list[dict[str, Any]] = []
        self.results: list[dict[str, Any]] = []
        self.rows = rows or []
        self.fail_writes = fail_writes
        self.fail_reads = fail_reads

    async def insert_event(self, row: dict[str, Any]) -> None:
        if self.fail_writes:
            raise ConnectionError("mirror unreachable")
        self.events.append(row)

    async def insert_result(self, row: dict[str, Any]) -> None:
        if self.fail_writes:
            raise ConnectionError("mirror unreachable")
        self.results.append(row)

    async def results_for_session(self, session_id: str) -> list[dict[str, Any]]:
        if self.fail_reads:
            raise ConnectionError("mirror unreachable")
        return [row for row in self.rows if row.get("session_id") == session_id]


@pytest.fixture
def test_settings() -> TestSettings:
    return TestSettings()


@pytest_asyncio.fixture
async def storage() -> AsyncGenerator[Storage, None]:
    """Storage on a fresh in-memory database with both tables created."""
    storage = Storage.from_url(TEST_DATABASE_URL, poolclass=StaticPool)
    await storage.create_all()

    yield storage

    await storage.dispose()


@pytest_asyncio.fixture
async def mirror() -> AsyncGenerator[MirrorForwarder, None]:
    """Disabled mirror, as when Supabase isn't configured."""
    forwarder = MirrorForwarder(NullMirrorStore())
    await forwarder.start()
    yield forwarder
    await forwarder.stop()


@pytest.fixture
def recording_store() -> RecordingMirrorStore:
    return RecordingMirrorStore()


@pytest.fixture
def mirror_store_factory():
    """Factory for RecordingMirrorStore instances with canned rows or failures."""
    return RecordingMirrorStore


@pytest_asyncio.fixture
async def recording_mirror(
    recording_store: RecordingMirrorStore,
) -> AsyncGenerator[MirrorForwarder, None]:
    forwarder = MirrorForwarder(recording_store)
    await forwarder.start()
    yield forwarder
    await forwarder.stop()


@pytest_asyncio.fixture
async def client(
    storage: Storage,
    mirror: MirrorForwarder,
    test_settings: TestSettings,
) -> AsyncGenerator[AsyncClient, None]:
    """Create async test client wired to the test storage and mirror."""
    app.state.storage = storage
    app.state.mirror = mirror
    app.dependency_overrides[get_settings] = lambda: test_settings

    transport = ASGITransport(app=app, raise_app_exceptions=False)
    async with AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac

    app.dependency_overrides.clear()


# ============================================================================
# Factory Fixtures
# ============================================================================


@pytest.fixture
def event_factory(storage: Storage):
    """Factory for inserting events with explicit timestamps."""

    async def _create_event(
        event_type: str = "page_view",
        ts: datetime | None = None,
        session_id: str | None = "session-aaaa",
        page: str = "/",
        properties: dict[str, Any] | None = None,
    ) -> Event:
        event = Event(
            id=generate_record_id(),
            ts=ts or utc_now(),
            session_id=session_id,
            source_ip="127.0.0.1",
            page=page,
            event_type=event_type,
            payload=dump_json(properties or {}),
        )
        await storage.insert_event(event)
        return event

    return _create_event


@pytest.fixture
def result_factory(storage: Storage):
    """Factory for inserting quiz results with explicit timestamps."""

    async def _create_result(
        result_name: str = "INTJ",
        ts: datetime | None = None,
        session_id: str | None = "session-aaaa",
        scores: dict[str, Any] | None = None,
    ) -> Result:
        result = Result(
            id=generate_record_id(),
            ts=ts or utc_now(),
            session_id=session_id,
            result_name=result_name,
            score_json=dump_json(scores or {}),
        )
        await storage.insert_result(result)
        return result

    return _create_result
