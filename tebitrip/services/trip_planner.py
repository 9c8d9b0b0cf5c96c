"""
Trip Planner - the entry point the UI talks to.

Flow: a submitted request passes the date policy, then the daily quota gate,
then the results view opens it (generating through the cache, or reading a
saved trip when a trip id is given). Photos are resolved lazily per place.
"""
import asyncio
import logging
from dataclasses import dataclass
from datetime import date
from typing import Any, Callable, Dict, Iterable, List, Optional

from pydantic import ValidationError as PydanticValidationError

from tebitrip.core.exceptions import InvalidTripRequestError
from tebitrip.schemas.trip import SavedTrip, TripContent, TripRequest, TripRouteParams
from tebitrip.services.date_validation import validate_trip_dates
from tebitrip.services.place_photo_resolver import PlacePhotoResolver
from tebitrip.services.rate_limiter import RateLimiter
from tebitrip.services.saved_trip_store import SavedTripStore
from tebitrip.services.trip_generation_cache import TripGenerationCache

logger = logging.getLogger(__name__)


def parse_trip_request(**fields: Any) -> TripRequest:
    """
    Build a TripRequest from form fields.

    Raises:
        InvalidTripRequestError: If destination, dates, budget or styles are malformed
    """
    try:
        return TripRequest(**fields)
    except PydanticValidationError as e:
        errors = e.errors(include_url=False, include_context=False, include_input=False)
        problems = "; ".join(f"{'.'.join(str(p) for p in err['loc'])}: {err['msg']}" for err in errors)
        raise InvalidTripRequestError(f"Invalid trip request: {problems}", errors=errors) from e


@dataclass
class TripView:
    """What the results view renders"""
    request: TripRequest
    content: TripContent
    saved_trip: Optional[SavedTrip] = None

    @property
    def is_saved(self) -> bool:
        return self.saved_trip is not None


@dataclass
class SubmissionResult:
    accepted: bool
    generations_left: int
    params: Optional[TripRouteParams] = None
    view: Optional[TripView] = None


class TripPlanner:
    """Coordinates validation, quota, generation, photos and saved trips"""

    def __init__(
        self,
        rate_limiter: RateLimiter,
        generation_cache: TripGenerationCache,
        photo_resolver: PlacePhotoResolver,
        saved_trips: SavedTripStore,
        today: Callable[[], date] = date.today,
    ):
        self.rate_limiter = rate_limiter
        self.generation_cache = generation_cache
        self.photo_resolver = photo_resolver
        self.saved_trips = saved_trips
        self._today = today

    def quota(self) -> Dict[str, Any]:
        return {
            "generations_left": self.rate_limiter.generations_left,
            "max_generations": self.rate_limiter.max_generations,
            "can_generate": self.rate_limiter.can_generate,
        }

    async def refresh_quota(self) -> Dict[str, Any]:
        """quota() after picking up a day rollover"""
        await self.rate_limiter.ensure_current()
        return self.quota()

    async def submit(self, request: TripRequest) -> SubmissionResult:
        """
        Gate a request before the results view opens it.

        A request whose result is already cached or being generated does not
        use up quota and is never blocked by it.

        Raises:
            TripValidationError: If the date range breaks the policy
        """
        validate_trip_dates(request.start_date, request.end_date, today=self._today())

        already_paid = (
            self.generation_cache.peek(request) is not None
            or self.generation_cache.is_in_flight(request)
        )
        if not already_paid:
            await self.rate_limiter.ensure_current()
            if not self.rate_limiter.can_generate:
                logger.info("Daily generation limit reached")
                return SubmissionResult(accepted=False, generations_left=0)
            await self.rate_limiter.increment()

        return SubmissionResult(
            accepted=True,
            generations_left=self.rate_limiter.generations_left,
            params=TripRouteParams.from_request(request),
        )

    async def open(self, params: TripRouteParams) -> Optional[TripView]:
        """
        Resolve route parameters to something renderable.

        Returns:
            The trip view, or None when a saved trip id no longer exists

        Raises:
            InvalidTripRequestError: If the parameters do not form a request
            GenerationTransportError / GenerationParseError: If generation fails
        """
        if params.trip_id:
            saved = self.saved_trips.get(params.trip_id)
            if saved is None:
                logger.info(f"Saved trip {params.trip_id} not found")
                return None
            return TripView(request=saved.to_request(), content=saved.trip_content, saved_trip=saved)

        try:
            request = params.to_request()
        except PydanticValidationError as e:
            raise InvalidTripRequestError(
                "Invalid trip parameters",
                errors=e.errors(include_url=False, include_context=False, include_input=False),
            ) from e

        content = await self.generation_cache.get(request)
        duplicate = self.saved_trips.find_duplicate(
            request.destination, request.start_date, request.end_date, content
        )
        return TripView(request=request, content=content, saved_trip=duplicate)

    async def restyle(self, request: TripRequest, travel_styles: Any) -> SubmissionResult:
        """
        Submit the same trip with different travel styles.

        Raises:
            InvalidTripRequestError: If the new styles are empty, repeated or unknown
            TripValidationError: If the date range breaks the policy
        """
        restyled = parse_trip_request(
            destination=request.destination,
            start_date=request.start_date,
            end_date=request.end_date,
            budget=request.budget,
            travel_styles=travel_styles,
        )
        return await self.submit(restyled)

    async def plan(self, request: TripRequest) -> SubmissionResult:
        """Submit and, when accepted, generate in one call."""
        submission = await self.submit(request)
        if submission.accepted:
            submission.view = await self.open(submission.params)
        return submission

    def is_saved(self, request: TripRequest, content: TripContent) -> bool:
        return self.saved_trips.is_trip_saved(request, content)

    async def save(self, request: TripRequest, content: TripContent) -> SavedTrip:
        """
        Save a trip unless an identical one is already saved.

        Returns:
            The new saved trip, or the existing duplicate

        Raises:
            PersistenceError: If the save could not be written
        """
        existing = self.saved_trips.find_duplicate(
            request.destination, request.start_date, request.end_date, content
        )
        if existing is not None:
            logger.info(f"Trip already saved as {existing.id}")
            return existing
        return await self.saved_trips.save(request, content)

    async def delete_saved(self, trip_id: str) -> None:
        await self.saved_trips.delete(trip_id)

    def list_saved(self) -> List[SavedTrip]:
        return self.saved_trips.list()

    async def photo_for(self, place_name: str, destination: str) -> Optional[str]:
        return await self.photo_resolver.resolve(place_name, destination)

    async def photos_for(self, view: TripView, places: Optional[Iterable[str]] = None) -> Dict[str, Optional[str]]:
        """Resolve photos for every place of a trip concurrently."""
        names = list(dict.fromkeys(places if places is not None else view.content.place_names()))
        destination = view.request.destination
        results = await asyncio.gather(*(self.photo_for(name, destination) for name in names))
        return dict(zip(names, results))
