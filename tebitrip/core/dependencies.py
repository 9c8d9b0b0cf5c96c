"""
Service container for the trip planning core.

Builds the storage adapter, HTTP clients and services from settings and owns
their lifecycle. Nothing here is a module-level singleton: each container is
an explicit context passed to whoever needs the services.
"""

import asyncio
import logging
from datetime import date
from typing import Callable, Optional

import httpx

from tebitrip.config.settings import Settings, get_settings
from tebitrip.core.storage import KeyValueStore, create_key_value_store
from tebitrip.services.generation_client import GenerationClient
from tebitrip.services.place_photo_resolver import PlacePhotoResolver
from tebitrip.services.rate_limiter import RateLimiter
from tebitrip.services.saved_trip_store import SavedTripStore
from tebitrip.services.trip_generation_cache import TripGenerationCache
from tebitrip.services.trip_planner import TripPlanner

logger = logging.getLogger(__name__)


class ServiceContainer:
    """
    Container for managing planner services with lifecycle management.

    Usage:
        async with ServiceContainer() as container:
            planner = container.get_planner()
    """

    def __init__(
        self,
        settings: Optional[Settings] = None,
        storage: Optional[KeyValueStore] = None,
        generation_http_client: Optional[httpx.AsyncClient] = None,
        photo_http_client: Optional[httpx.AsyncClient] = None,
        today: Callable[[], date] = date.today,
    ):
        self.settings = settings or get_settings()
        self._storage = storage
        self._owns_storage = storage is None
        self._generation_http_client = generation_http_client
        self._photo_http_client = photo_http_client
        self._today = today

        self._generation_client: Optional[GenerationClient] = None
        self._rate_limiter: Optional[RateLimiter] = None
        self._generation_cache: Optional[TripGenerationCache] = None
        self._photo_resolver: Optional[PlacePhotoResolver] = None
        self._saved_trips: Optional[SavedTripStore] = None
        self._planner: Optional[TripPlanner] = None
        self._initialized = False
        self._initialization_lock = asyncio.Lock()

    async def initialize_services(self) -> None:
        """Initialize all services in dependency order."""
        async with self._initialization_lock:
            if self._initialized:
                return

            logger.info("Initializing service container")

            try:
                if self._storage is None:
                    self._storage = create_key_value_store(self.settings)

                self._rate_limiter = RateLimiter(
                    self._storage,
                    config=self.settings.rate_limit,
                    today=self._today,
                )
                await self._rate_limiter.init()

                self._saved_trips = SavedTripStore(
                    self._storage,
                    storage_key=self.settings.storage.saved_trips_key,
                )
                await self._saved_trips.init()

                self._generation_client = GenerationClient(
                    config=self.settings.generation,
                    client=self._generation_http_client,
                )
                self._generation_cache = TripGenerationCache(
                    self._generation_client,
                    max_entries=self.settings.generation.cache_max_entries,
                )
                self._photo_resolver = PlacePhotoResolver(
                    config=self.settings.photos,
                    client=self._photo_http_client,
                )

                self._planner = TripPlanner(
                    rate_limiter=self._rate_limiter,
                    generation_cache=self._generation_cache,
                    photo_resolver=self._photo_resolver,
                    saved_trips=self._saved_trips,
                    today=self._today,
                )

                self._initialized = True
                logger.info("Service container initialization completed")

            except Exception as e:
                logger.error(f"Service container initialization failed: {e}", exc_info=True)
                await self._release()
                raise

    async def cleanup_services(self) -> None:
        """Cleanup all services in reverse dependency order."""
        logger.info("Cleaning up service container")
        try:
            await self._release()
            logger.info("Service container cleanup completed")
        finally:
            self._initialized = False

    async def _release(self) -> None:
        if self._photo_resolver:
            await self._photo_resolver.dispose()
        if self._generation_cache:
            await self._generation_cache.dispose()
        if self._generation_client:
            await self._generation_client.close()
        if self._saved_trips:
            await self._saved_trips.dispose()
        if self._rate_limiter:
            await self._rate_limiter.dispose()
        if self._storage is not None and self._owns_storage:
            await self._storage.close()
            self._storage = None

        self._planner = None
        self._photo_resolver = None
        self._generation_cache = None
        self._generation_client = None
        self._saved_trips = None
        self._rate_limiter = None

    async def __aenter__(self) -> "ServiceContainer":
        await self.initialize_services()
        return self

    async def __aexit__(self, exc_type, exc, tb) -> None:
        await self.cleanup_services()

    def _require(self, service, name: str):
        if not self._initialized or service is None:
            raise RuntimeError(f"Service container not initialized ({name} unavailable)")
        return service

    def get_planner(self) -> TripPlanner:
        return self._require(self._planner, "planner")

    def get_rate_limiter(self) -> RateLimiter:
        return self._require(self._rate_limiter, "rate limiter")

    def get_generation_cache(self) -> TripGenerationCache:
        return self._require(self._generation_cache, "generation cache")

    def get_photo_resolver(self) -> PlacePhotoResolver:
        return self._require(self._photo_resolver, "photo resolver")

    def get_saved_trips(self) -> SavedTripStore:
        return self._require(self._saved_trips, "saved trips")
