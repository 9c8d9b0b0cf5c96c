"""
Unit tests for the saved trip collection
"""
import json
from datetime import datetime, timedelta, timezone
from unittest.mock import AsyncMock, patch

import pytest
import pytest_asyncio

from tebitrip.core.exceptions import ErrorCode, PersistenceError, StorageError
from tebitrip.core.storage import InMemoryKeyValueStore
from tebitrip.schemas.trip import TripContent
from tebitrip.services.saved_trip_store import SavedTripStore, same_itinerary

KEY = "@saved_trips"


class Ticker:
    """Returns a strictly increasing UTC timestamp per call."""

    def __init__(self):
        self.current = datetime(2026, 3, 1, 9, 0, tzinfo=timezone.utc)

    def __call__(self) -> datetime:
        self.current += timedelta(minutes=1)
        return self.current


@pytest.fixture
def content(trip_payload) -> TripContent:
    return TripContent.model_validate(trip_payload)


@pytest_asyncio.fixture
async def store(storage) -> SavedTripStore:
    trips = SavedTripStore(storage, storage_key=KEY, now=Ticker())
    await trips.init()
    return trips


class TestSaveAndDelete:

    @pytest.mark.asyncio
    async def test_save_then_delete_round_trip(self, store, storage, paris_request, content):
        saved = await store.save(paris_request, content)

        assert store.get(saved.id) == saved
        assert saved.destination == "Paris, France"
        assert saved.saved_at.tzinfo is not None
        persisted = await storage.get_json(KEY)
        assert [t["id"] for t in persisted] == [saved.id]
        assert "tripContent" in persisted[0]
        assert "savedAt" in persisted[0]

        await store.delete(saved.id)

        assert store.get(saved.id) is None
        assert store.list() == []
        assert await storage.get_json(KEY) == []

    @pytest.mark.asyncio
    async def test_ids_are_unique(self, store, paris_request, content):
        a = await store.save(paris_request, content)
        b = await store.save(paris_request, content)
        assert a.id != b.id
        assert len(store.list()) == 2

    @pytest.mark.asyncio
    async def test_newest_first(self, store, paris_request, content):
        first = await store.save(paris_request, content)
        second = await store.save(paris_request, content)

        assert [t.id for t in store.list()] == [second.id, first.id]

    @pytest.mark.asyncio
    async def test_delete_unknown_id_does_not_write(self, store, storage, paris_request, content):
        saved = await store.save(paris_request, content)

        with patch.object(storage, "set", AsyncMock()) as mocked_set:
            await store.delete("does-not-exist")

        mocked_set.assert_not_called()
        assert [t.id for t in store.list()] == [saved.id]

    @pytest.mark.asyncio
    async def test_list_returns_a_copy(self, store, paris_request, content):
        await store.save(paris_request, content)
        store.list().clear()
        assert len(store.list()) == 1


class TestPersistenceFailures:

    @pytest.mark.asyncio
    async def test_failed_save_leaves_state_unchanged(self, store, storage, paris_request, content):
        with patch.object(storage, "set", AsyncMock(side_effect=StorageError("disk full"))):
            with pytest.raises(PersistenceError, match="Failed to save trip") as exc_info:
                await store.save(paris_request, content)

        assert exc_info.value.error_code == ErrorCode.PERSISTENCE_FAILED
        assert store.list() == []
        assert await storage.get(KEY) is None

    @pytest.mark.asyncio
    async def test_failed_delete_keeps_trip(self, store, storage, paris_request, content):
        saved = await store.save(paris_request, content)

        with patch.object(storage, "set", AsyncMock(side_effect=StorageError("read only"))):
            with pytest.raises(PersistenceError, match="Failed to delete trip"):
                await store.delete(saved.id)

        assert store.get(saved.id) == saved

    @pytest.mark.asyncio
    async def test_unreadable_collection_fails_init(self):
        storage = InMemoryKeyValueStore({KEY: "not json"})
        trips = SavedTripStore(storage, storage_key=KEY)

        with pytest.raises(PersistenceError, match="Failed to load trip"):
            await trips.init()
        assert not trips.is_loaded


class TestLoading:

    @pytest.mark.asyncio
    async def test_loads_persisted_camel_case_collection(self, trip_payload):
        older = {
            "id": "a1",
            "destination": "Rome, Italy",
            "startDate": "2026-05-01",
            "endDate": "2026-05-02",
            "budget": "Low",
            "travelStyles": ["Food Trip"],
            "tripContent": trip_payload,
            "savedAt": "2026-02-01T10:00:00Z",
        }
        newer = {**older, "id": "b2", "destination": "Oslo, Norway", "savedAt": "2026-02-10T10:00:00Z"}
        storage = InMemoryKeyValueStore({KEY: json.dumps([older, newer])})
        trips = SavedTripStore(storage, storage_key=KEY)

        await trips.init()

        assert trips.is_loaded
        assert [t.id for t in trips.list()] == ["b2", "a1"]
        rome = trips.get("a1")
        assert rome.trip_content.hotels[0].name == "Hotel 1"
        assert rome.to_request().travel_styles[0].value == "Food Trip"

    @pytest.mark.asyncio
    async def test_save_loads_lazily(self, storage, paris_request, content):
        trips = SavedTripStore(storage, storage_key=KEY)
        saved = await trips.save(paris_request, content)
        assert trips.is_loaded
        assert trips.get(saved.id) is not None

    @pytest.mark.asyncio
    async def test_reload_sees_previous_writes(self, store, storage, paris_request, content):
        saved = await store.save(paris_request, content)

        fresh = SavedTripStore(storage, storage_key=KEY)
        await fresh.init()

        assert fresh.get(saved.id) == saved


class TestDuplicates:

    @pytest.mark.asyncio
    async def test_same_trip_is_found(self, store, paris_request, content, trip_payload):
        saved = await store.save(paris_request, content)
        regenerated = TripContent.model_validate(trip_payload)

        assert store.find_duplicate("Paris, France", paris_request.start_date, paris_request.end_date, regenerated) == saved
        assert store.is_trip_saved(paris_request, regenerated)

    @pytest.mark.asyncio
    async def test_different_itinerary_is_not_a_duplicate(self, store, paris_request, content, make_trip_payload):
        await store.save(paris_request, content)
        payload = make_trip_payload()
        payload["itinerary"][1]["evening"]["placeName"] = "Somewhere Else"
        other = TripContent.model_validate(payload)

        assert not store.is_trip_saved(paris_request, other)

    @pytest.mark.asyncio
    async def test_hotels_do_not_affect_duplicate_check(self, store, paris_request, content, make_trip_payload):
        await store.save(paris_request, content)
        other = TripContent.model_validate(make_trip_payload(hotels=1))

        assert store.is_trip_saved(paris_request, other)

    @pytest.mark.asyncio
    async def test_different_dates_are_not_a_duplicate(self, store, paris_request, content):
        await store.save(paris_request, content)
        later = paris_request.start_date + timedelta(days=7)

        assert store.find_duplicate("Paris, France", later, later, content) is None


def test_same_itinerary_compares_structure(trip_payload):
    a = TripContent.model_validate(trip_payload)
    b = TripContent.model_validate(json.loads(json.dumps(trip_payload)))
    assert same_itinerary(a.itinerary, b.itinerary)
    assert not same_itinerary(a.itinerary, b.itinerary[:2])
