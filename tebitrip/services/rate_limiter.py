"""
Daily generation quota with persisted, date-rolling state.

The counter lives in the key/value store as {"count": int, "date": "YYYY-M-D"}.
Storage problems never block the user: a failed load leaves the full quota
available and a failed increment is only logged.
"""

import asyncio
import logging
from datetime import date
from typing import Callable, Optional

from pydantic import ValidationError as PydanticValidationError

from tebitrip.config.settings import RateLimitSettings, get_settings
from tebitrip.core.exceptions import StorageError
from tebitrip.core.storage import KeyValueStore
from tebitrip.schemas.trip import RateLimitState

logger = logging.getLogger(__name__)


def day_key(d: date) -> str:
    """Calendar-day key without zero padding, e.g. 2026-4-3"""
    return f"{d.year}-{d.month}-{d.day}"


class RateLimiter:
    """Tracks how many trips were generated today."""

    def __init__(
        self,
        storage: KeyValueStore,
        config: Optional[RateLimitSettings] = None,
        today: Callable[[], date] = date.today,
    ):
        self.storage = storage
        self.config = config or get_settings().rate_limit
        self.max_generations = self.config.max_generations_per_day
        self.storage_key = self.config.storage_key
        self._today = today
        self._generations_left = self.max_generations
        self._is_loading = True
        self._loaded_day: Optional[str] = None
        self._increment_lock = asyncio.Lock()

    @property
    def generations_left(self) -> int:
        return self._generations_left

    @property
    def can_generate(self) -> bool:
        return self._generations_left > 0

    @property
    def is_loading(self) -> bool:
        return self._is_loading

    @property
    def loaded_day(self) -> Optional[str]:
        """Day key the visible counter belongs to"""
        return self._loaded_day

    async def init(self) -> None:
        await self.load()

    async def dispose(self) -> None:
        self._is_loading = True
        self._loaded_day = None

    async def ensure_current(self) -> int:
        """
        Reload when the calendar day has changed since the last load.

        Returns:
            Generations left today
        """
        if self._loaded_day != day_key(self._today()):
            return await self.load()
        return self._generations_left

    async def load(self) -> int:
        """
        Read the persisted counter, resetting it when the day has changed.

        Returns:
            Generations left today
        """
        today = day_key(self._today())
        try:
            state = await self._read_state()
            if state is not None and state.date == today:
                self._generations_left = max(0, self.max_generations - state.count)
            else:
                self._generations_left = self.max_generations
                await self._write_state(RateLimitState(count=0, date=today))
        except (StorageError, PydanticValidationError) as e:
            logger.error(f"Failed to load rate limit: {e}")
            self._generations_left = self.max_generations
        finally:
            self._is_loading = False
            self._loaded_day = today
        return self._generations_left

    async def increment(self) -> None:
        """
        Count one generation.

        The persisted value is re-read right before writing so a stale
        in-memory view or a day rollover since load() never loses a count.
        """
        async with self._increment_lock:
            today = day_key(self._today())
            try:
                state = await self._read_state()
                if state is not None and state.date == today:
                    new_count = state.count + 1
                else:
                    new_count = 1
                await self._write_state(RateLimitState(count=new_count, date=today))
            except (StorageError, PydanticValidationError) as e:
                logger.error(f"Failed to increment generation count: {e}")
                return
            self._generations_left = max(0, self.max_generations - new_count)
            self._loaded_day = today
            logger.info(
                "Generation counted",
                extra={"count": new_count, "generations_left": self._generations_left},
            )

    async def _read_state(self) -> Optional[RateLimitState]:
        data = await self.storage.get_json(self.storage_key)
        if data is None:
            return None
        return RateLimitState.model_validate(data)

    async def _write_state(self, state: RateLimitState) -> None:
        await self.storage.set_json(self.storage_key, state.model_dump())
