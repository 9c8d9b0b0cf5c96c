"""
Saved Trip Store - manages the user's saved trips.

The whole collection is persisted as one JSON array under a single key and
that persisted list is the source of truth. In-memory state only changes
after a write has succeeded.
"""
import asyncio
import logging
import uuid
from datetime import date, datetime, timezone
from typing import Callable, List, Optional

from pydantic import TypeAdapter, ValidationError as PydanticValidationError

from tebitrip.config.settings import get_settings
from tebitrip.core.exceptions import PersistenceError, StorageError
from tebitrip.core.storage import KeyValueStore
from tebitrip.schemas.trip import DayPlan, SavedTrip, TripContent, TripRequest

logger = logging.getLogger(__name__)

_SAVED_TRIPS = TypeAdapter(List[SavedTrip])


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


def same_itinerary(a: List[DayPlan], b: List[DayPlan]) -> bool:
    """Structural equality of two itineraries"""
    return [d.model_dump() for d in a] == [d.model_dump() for d in b]


class SavedTripStore:
    """CRUD over the persisted saved-trip collection"""

    def __init__(
        self,
        storage: KeyValueStore,
        storage_key: Optional[str] = None,
        now: Callable[[], datetime] = _utcnow,
    ):
        self.storage = storage
        self.storage_key = storage_key or get_settings().storage.saved_trips_key
        self._now = now
        self._trips: List[SavedTrip] = []
        self._loaded = False
        self._lock = asyncio.Lock()

    @property
    def is_loaded(self) -> bool:
        return self._loaded

    async def init(self) -> None:
        """
        Load saved trips from storage

        Raises:
            PersistenceError: If the stored collection cannot be read
        """
        async with self._lock:
            await self._load()

    async def dispose(self) -> None:
        self._trips = []
        self._loaded = False

    async def _load(self) -> None:
        try:
            data = await self.storage.get_json(self.storage_key)
            trips = _SAVED_TRIPS.validate_python(data) if data is not None else []
        except (StorageError, PydanticValidationError) as e:
            logger.error(f"Failed to load saved trips: {e}")
            raise PersistenceError("load", str(e)) from e
        self._trips = sorted(trips, key=lambda t: t.saved_at, reverse=True)
        self._loaded = True
        logger.info(f"Loaded {len(self._trips)} saved trips")

    async def _ensure_loaded(self) -> None:
        if not self._loaded:
            await self._load()

    async def _persist(self, trips: List[SavedTrip], operation: str) -> None:
        try:
            await self.storage.set_json(self.storage_key, _SAVED_TRIPS.dump_python(trips, mode="json", by_alias=True))
        except StorageError as e:
            logger.error(f"Failed to {operation} trip: {e}")
            raise PersistenceError(operation, str(e)) from e

    def list(self) -> List[SavedTrip]:
        """Saved trips, most recently saved first"""
        return list(self._trips)

    def get(self, trip_id: str) -> Optional[SavedTrip]:
        for trip in self._trips:
            if trip.id == trip_id:
                return trip
        return None

    def find_duplicate(
        self,
        destination: str,
        start_date: date,
        end_date: date,
        content: TripContent,
    ) -> Optional[SavedTrip]:
        """
        Find a saved trip with the same destination, dates and itinerary.

        Callers check this before save(); save() itself does not.
        """
        for trip in self._trips:
            if (
                trip.destination == destination
                and trip.start_date == start_date
                and trip.end_date == end_date
                and same_itinerary(trip.trip_content.itinerary, content.itinerary)
            ):
                return trip
        return None

    def is_trip_saved(self, request: TripRequest, content: TripContent) -> bool:
        return self.find_duplicate(request.destination, request.start_date, request.end_date, content) is not None

    async def save(self, request: TripRequest, content: TripContent) -> SavedTrip:
        """
        Persist a new saved trip.

        Returns:
            The stored SavedTrip with its new id

        Raises:
            PersistenceError: If the collection could not be written
        """
        async with self._lock:
            await self._ensure_loaded()
            trip = SavedTrip(
                id=uuid.uuid4().hex,
                destination=request.destination,
                start_date=request.start_date,
                end_date=request.end_date,
                budget=request.budget,
                travel_styles=request.travel_styles,
                trip_content=content,
                saved_at=self._now(),
            )
            updated = [trip] + self._trips
            await self._persist(updated, "save")
            self._trips = updated
            logger.info("Trip saved successfully", extra={"trip_id": trip.id})
            return trip

    async def delete(self, trip_id: str) -> None:
        """
        Remove a saved trip. Unknown ids are ignored.

        Raises:
            PersistenceError: If the collection could not be written
        """
        async with self._lock:
            await self._ensure_loaded()
            updated = [t for t in self._trips if t.id != trip_id]
            if len(updated) == len(self._trips):
                logger.debug(f"No saved trip with id {trip_id}")
                return
            await self._persist(updated, "delete")
            self._trips = updated
            logger.info("Trip deleted successfully", extra={"trip_id": trip_id})
