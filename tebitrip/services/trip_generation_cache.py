"""
Generation pipeline with per-request caching and in-flight deduplication.

Every distinct request fingerprint triggers at most one external call at a
time. Callers asking for a fingerprint that is already being generated join
the pending call and receive the same TripContent object (or the same
error). Successful results are kept for the life of the cache; failures are
not cached, so asking again retries.
"""

import asyncio
import logging
from collections import OrderedDict
from dataclasses import dataclass
from typing import Dict, Optional

from tebitrip.schemas.trip import TripContent, TripRequest
from tebitrip.services.generation_client import GenerationClient
from tebitrip.services.prompt_builder import build_trip_prompt
from tebitrip.services.response_extractor import extract_trip_content

logger = logging.getLogger(__name__)


@dataclass
class _InFlightGeneration:
    task: asyncio.Task
    waiters: int = 0


class TripGenerationCache:
    """Resolves TripRequests to TripContent, calling the generator only when needed."""

    def __init__(self, client: GenerationClient, max_entries: Optional[int] = None):
        """
        Args:
            client: Generation endpoint client
            max_entries: Optional LRU cap on completed results; no time-based expiry
        """
        self.client = client
        self.max_entries = max_entries
        self._results: "OrderedDict[str, TripContent]" = OrderedDict()
        self._in_flight: Dict[str, _InFlightGeneration] = {}
        self.external_calls = 0

    def peek(self, request: TripRequest) -> Optional[TripContent]:
        """Return the cached result without generating."""
        return self._results.get(request.fingerprint)

    def is_in_flight(self, request: TripRequest) -> bool:
        return request.fingerprint in self._in_flight

    def waiter_count(self, request: TripRequest) -> int:
        entry = self._in_flight.get(request.fingerprint)
        return entry.waiters if entry else 0

    def __len__(self) -> int:
        return len(self._results)

    async def get(self, request: TripRequest) -> TripContent:
        """
        Resolve request from cache, a pending call, or a new generation.

        Cancelling one caller does not cancel the shared generation.

        Raises:
            GenerationTransportError: The endpoint failed
            GenerationParseError: The generated text held no valid trip
        """
        key = request.fingerprint

        cached = self._results.get(key)
        if cached is not None:
            self._results.move_to_end(key)
            logger.debug(f"Cache hit for {key}")
            return cached

        entry = self._in_flight.get(key)
        if entry is None:
            task = asyncio.create_task(self._generate(key, request))
            entry = _InFlightGeneration(task=task)
            self._in_flight[key] = entry
            task.add_done_callback(lambda t, k=key: self._on_done(k, t))
        else:
            logger.info(f"Joining in-flight generation for {request.destination}")

        entry.waiters += 1
        try:
            return await asyncio.shield(entry.task)
        finally:
            entry.waiters -= 1

    async def _generate(self, key: str, request: TripRequest) -> TripContent:
        logger.info(
            f"Generating trip for {request.destination}",
            extra={"days": request.day_count, "budget": request.budget.value},
        )
        prompt = build_trip_prompt(request)
        self.external_calls += 1
        text = await self.client.generate_text(prompt)
        content = extract_trip_content(text, expected_days=request.day_count)
        return self._store(key, content)

    def _store(self, key: str, content: TripContent) -> TripContent:
        existing = self._results.get(key)
        if existing is not None:
            return existing
        self._results[key] = content
        if self.max_entries is not None:
            while len(self._results) > self.max_entries:
                evicted, _ = self._results.popitem(last=False)
                logger.debug(f"Evicted cached trip {evicted}")
        return content

    def _on_done(self, key: str, task: asyncio.Task) -> None:
        entry = self._in_flight.get(key)
        if entry is not None and entry.task is task:
            del self._in_flight[key]
        if task.cancelled():
            return
        error = task.exception()
        if error is not None:
            logger.warning(f"Trip generation failed: {error}")

    async def dispose(self) -> None:
        """Cancel pending generations and drop all results."""
        pending = [entry.task for entry in self._in_flight.values()]
        for task in pending:
            task.cancel()
        if pending:
            await asyncio.gather(*pending, return_exceptions=True)
        self._in_flight.clear()
        self._results.clear()
