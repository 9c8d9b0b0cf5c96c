"""
Place Photo Resolver - best-effort photo lookup for itinerary places.

A missing photo must never hold up an itinerary, so every failure resolves to
None and the caller shows a placeholder. Only timeouts and network errors are
retried; a response that arrived but carries no usable photo (bad status,
empty or unreadable body, no photoURL) is a final answer.
"""

import asyncio
import json
import logging
import time
from dataclasses import dataclass
from typing import Awaitable, Callable, Dict, Optional, Tuple

import httpx

from tebitrip.config.settings import PhotoSettings, get_settings
from tebitrip.core.exceptions import PhotoResolutionFailure

logger = logging.getLogger(__name__)

PhotoKey = Tuple[str, str]


@dataclass
class PhotoCacheEntry:
    photo_url: Optional[str]
    fetched_at: float


@dataclass
class _PendingFetch:
    task: asyncio.Task
    superseded: bool = False


class PlacePhotoResolver:
    """Resolves (place name, destination) pairs to photo URLs with an in-memory cache."""

    def __init__(
        self,
        config: Optional[PhotoSettings] = None,
        client: Optional[httpx.AsyncClient] = None,
        clock: Callable[[], float] = time.monotonic,
        sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
    ):
        self.config = config or get_settings().photos
        self.endpoint_url = self.config.endpoint_url
        self.timeout = self.config.timeout_seconds
        self._client = client
        self._owns_client = client is None
        self._clock = clock
        self._sleep = sleep
        self._cache: Dict[PhotoKey, PhotoCacheEntry] = {}
        self._pending: Dict[PhotoKey, _PendingFetch] = {}

        if not self.endpoint_url:
            logger.warning(
                "Photo endpoint not configured. "
                "Set PHOTO_ENDPOINT_URL to enable place photos."
            )

    def _get_client(self) -> httpx.AsyncClient:
        if self._client is None:
            self._client = httpx.AsyncClient(
                timeout=self.timeout,
                headers={"Accept": "application/json"},
            )
        return self._client

    def retry_delay(self, attempt: int) -> float:
        """Backoff before retry number attempt + 1 (attempt counts from 0)."""
        return min(self.config.backoff_base_seconds * (2 ** attempt), self.config.backoff_max_seconds)

    def cached(self, place_name: str, destination: str) -> Optional[PhotoCacheEntry]:
        return self._cache.get((place_name, destination))

    async def resolve(self, place_name: str, destination: str) -> Optional[str]:
        """
        Get a photo URL for a place.

        A fresh cached answer is returned directly. Otherwise a new fetch is
        started, cancelling any earlier fetch still running for the same key.
        A stale URL is kept when its refresh finds nothing.

        Returns:
            Photo URL, or None when no photo could be found
        """
        if not place_name or not destination or not self.endpoint_url:
            return None

        key = (place_name, destination)
        self._collect_garbage()

        entry = self._cache.get(key)
        if entry is not None and self._clock() - entry.fetched_at < self.config.fresh_seconds:
            logger.debug(f"Photo cache hit for '{place_name}'")
            return entry.photo_url

        previous = self._pending.get(key)
        if previous is not None and not previous.task.done():
            logger.debug(f"Superseding in-flight photo fetch for '{place_name}'")
            previous.superseded = True
            previous.task.cancel()

        pending = _PendingFetch(task=asyncio.create_task(self._fetch_with_retry(place_name, destination)))
        self._pending[key] = pending
        try:
            photo_url = await pending.task
        except asyncio.CancelledError:
            if pending.superseded:
                return None
            raise
        finally:
            if self._pending.get(key) is pending:
                del self._pending[key]

        if photo_url is None and entry is not None and entry.photo_url:
            logger.debug(f"Keeping stale photo for '{place_name}' after failed refresh")
            return entry.photo_url

        self._cache[key] = PhotoCacheEntry(photo_url=photo_url, fetched_at=self._clock())
        return photo_url

    def cancel(self, place_name: str, destination: str) -> bool:
        """Abort the in-flight fetch for a place; its caller receives None."""
        pending = self._pending.get((place_name, destination))
        if pending is None or pending.task.done():
            return False
        pending.superseded = True
        pending.task.cancel()
        return True

    async def _fetch_with_retry(self, place_name: str, destination: str) -> Optional[str]:
        query = f"{place_name}, {destination}"
        attempts = self.config.max_retries + 1

        for attempt in range(attempts):
            try:
                photo_url = await self._fetch_once(query)
                logger.info(f"Fetched photo for '{query}'")
                return photo_url
            except PhotoResolutionFailure as e:
                if not e.retryable or attempt == attempts - 1:
                    logger.info(f"No photo for '{query}': {e.message}")
                    return None
                delay = self.retry_delay(attempt)
                logger.debug(f"Photo fetch attempt {attempt + 1} failed ({e.message}), retrying in {delay}s")
                await self._sleep(delay)
            except Exception as e:
                logger.warning(f"Unexpected error fetching photo for '{query}': {e!r}")
                return None
        return None

    async def _fetch_once(self, query: str) -> str:
        try:
            response = await asyncio.wait_for(
                self._get_client().get(self.endpoint_url, params={"place": query}),
                timeout=self.timeout,
            )
        except (asyncio.TimeoutError, httpx.TimeoutException) as e:
            raise PhotoResolutionFailure(f"Request timeout ({self.timeout}s)") from e
        except httpx.HTTPError as e:
            raise PhotoResolutionFailure(f"Network error: {e!r}") from e

        if not response.is_success:
            raise PhotoResolutionFailure(f"Non-OK response status: {response.status_code}", retryable=False)

        body = response.text
        if not body or not body.strip():
            raise PhotoResolutionFailure("Empty response body", retryable=False)

        try:
            data = json.loads(body)
        except ValueError as e:
            raise PhotoResolutionFailure("Response is not valid JSON", retryable=False) from e

        photo_url = data.get("photoURL") if isinstance(data, dict) else None
        if not isinstance(photo_url, str) or not photo_url:
            raise PhotoResolutionFailure("No photoURL in response", retryable=False)
        return photo_url

    def _collect_garbage(self) -> None:
        now = self._clock()
        expired = [
            key for key, entry in self._cache.items()
            if now - entry.fetched_at >= self.config.retention_seconds
        ]
        for key in expired:
            del self._cache[key]
        if expired:
            logger.debug(f"Dropped {len(expired)} expired photo cache entries")

    async def dispose(self) -> None:
        """Cancel every in-flight fetch and release the HTTP client."""
        for pending in list(self._pending.values()):
            if not pending.task.done():
                pending.superseded = True
                pending.task.cancel()
        self._cache.clear()
        if self._client is not None and self._owns_client:
            await self._client.aclose()
            self._client = None
