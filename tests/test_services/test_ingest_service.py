"""Tests for payload normalization and the ingest service."""

import pytest

from mindtest.core.storage import Storage
from mindtest.services.ingest import (
    IngestService,
    normalize_event,
    normalize_result,
    unpack_batch,
)
from mindtest.services.mirror import MirrorForwarder


class TestNormalizeEvent:
    """Tests for normalize_event field precedence."""

    def test_type_precedence(self):
        assert normalize_event({"type": "a", "event": "b", "event_name": "c"}).event_type == "a"
        assert normalize_event({"event": "b", "event_name": "c"}).event_type == "b"
        assert normalize_event({"event_name": "c"}).event_type == "c"
        assert normalize_event({"properties": {"event": "d"}}).event_type == "d"

    def test_empty_type_falls_through(self):
        assert normalize_event({"type": "", "event": "b"}).event_type == "b"
        assert normalize_event({"type": None}).event_type == "custom"

    def test_page_precedence(self):
        assert normalize_event({"page": "/a", "properties": {"page": "/b"}}).page == "/a"
        assert normalize_event({"properties": {"page": "/b"}}).page == "/b"
        assert normalize_event({"payload": {"page": "/c"}}).page == "/c"
        assert normalize_event({}).page == ""

    def test_properties_prefer_payload(self):
        normalized = normalize_event({"payload": {"x": 1}, "properties": {"y": 2}})
        assert normalized.properties == {"x": 1}

    def test_properties_fall_back(self):
        assert normalize_event({"payload": {}, "properties": {"y": 2}}).properties == {"y": 2}
        assert normalize_event({"properties": "not a mapping"}).properties == {}

    def test_non_mapping_item(self):
        normalized = normalize_event("page_view")
        assert normalized.event_type == "custom"
        assert normalized.page == ""
        assert normalized.properties == {}

    def test_scalar_values_are_stringified(self):
        assert normalize_event({"type": 42}).event_type == "42"
        assert normalize_event({"type": {"nested": True}}).event_type == "custom"


class TestNormalizeResult:
    def test_fields(self):
        normalized = normalize_result({"result_name": "INTJ", "scores": {"mind": 80}})
        assert normalized.result_name == "INTJ"
        assert normalized.scores == {"mind": 80}

    def test_defaults(self):
        assert normalize_result(None).result_name == ""
        assert normalize_result({"scores": [1, 2]}).scores == {}


class TestUnpackBatch:
    def test_batch_key(self):
        assert unpack_batch({"batch": [{"a": 1}, {"b": 2}]}) == [{"a": 1}, {"b": 2}]

    def test_bare_list(self):
        assert unpack_batch([{"a": 1}]) == [{"a": 1}]

    def test_single_event(self):
        assert unpack_batch({"event": "x"}) == [{"event": "x"}]

    def test_missing_body(self):
        assert unpack_batch(None) == [{}]

    def test_non_list_batch_is_single_event(self):
        assert unpack_batch({"batch": "nope"}) == [{"batch": "nope"}]


@pytest.mark.asyncio
class TestIngestService:
    """Tests for IngestService writes and mirror hand-off."""

    async def test_record_events(self, storage: Storage, recording_mirror, recording_store):
        service = IngestService(storage, recording_mirror)

        inserted = await service.record_events(
            {"batch": [{"event": "a"}, {"event": "b"}]},
            session_id="session-1234",
            source_ip="10.0.0.1",
        )
        await recording_mirror.join()

        assert inserted == 2
        events = await storage.query_events()
        assert {event.source_ip for event in events} == {"10.0.0.1"}
        assert len({event.ts for event in events}) == 1
        assert sorted(row["type"] for row in recording_store.events) == ["a", "b"]
        assert recording_store.events[0]["ts"].endswith("Z")

    async def test_record_result(self, storage: Storage, recording_mirror, recording_store):
        service = IngestService(storage, recording_mirror)

        result = await service.record_result(
            {"result_name": "ENFP", "scores": {"energy": 70}}, session_id="session-1234"
        )
        await recording_mirror.join()

        assert result.scores == {"energy": 70}
        assert recording_store.results == [result.to_mirror_row()]
        assert recording_store.results[0]["score_json"] == {"energy": 70}

    async def test_mirror_failure_does_not_fail_write(
        self, storage: Storage, mirror_store_factory
    ):
        forwarder = MirrorForwarder(mirror_store_factory(fail_writes=True))
        await forwarder.start()
        service = IngestService(storage, forwarder)

        inserted = await service.record_events({"event": "a"}, session_id="session-1234")
        await forwarder.join()
        await forwarder.stop()

        assert inserted == 1
        assert len(await storage.query_events()) == 1
