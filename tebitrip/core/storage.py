"""
Key/value persistence for planner state.

Values are JSON blobs stored under string keys, the same shape a mobile
async storage offers. Three adapters are provided: in-memory, a single JSON
file, and Redis. Adapters raise StorageError on failure; callers decide
whether to degrade or propagate.
"""

import asyncio
import json
import logging
import os
import tempfile
from abc import ABC, abstractmethod
from pathlib import Path
from typing import Any, Dict, Optional, Union

from redis import asyncio as aioredis
from redis.asyncio import Redis

from tebitrip.config.settings import Settings, StorageBackend
from tebitrip.core.exceptions import StorageError


class KeyValueStore(ABC):
    """Async key -> string store."""

    @abstractmethod
    async def get(self, key: str) -> Optional[str]:
        """Return the stored string or None when the key is absent."""

    @abstractmethod
    async def set(self, key: str, value: str) -> None:
        """Store value under key, replacing any previous value."""

    @abstractmethod
    async def delete(self, key: str) -> None:
        """Remove key; absent keys are ignored."""

    async def get_json(self, key: str) -> Any:
        """
        Get a JSON value.

        Raises:
            StorageError: If the store fails or the blob is not valid JSON
        """
        raw = await self.get(key)
        if raw is None:
            return None
        try:
            return json.loads(raw)
        except json.JSONDecodeError as e:
            raise StorageError(f"Stored value is not valid JSON: {e}", key=key) from e

    async def set_json(self, key: str, value: Any) -> None:
        await self.set(key, json.dumps(value, ensure_ascii=False))

    async def close(self) -> None:
        return None


class InMemoryKeyValueStore(KeyValueStore):
    """Process-local store, used for tests and throwaway sessions."""

    def __init__(self, initial: Optional[Dict[str, str]] = None):
        self._data: Dict[str, str] = dict(initial or {})

    async def get(self, key: str) -> Optional[str]:
        return self._data.get(key)

    async def set(self, key: str, value: str) -> None:
        self._data[key] = value

    async def delete(self, key: str) -> None:
        self._data.pop(key, None)


class JsonFileKeyValueStore(KeyValueStore):
    """
    All keys live in one JSON object on disk.

    Writes go to a temporary file that replaces the original, so a crash
    never leaves a half-written state file. File I/O runs in a worker thread
    to keep the event loop free.
    """

    def __init__(self, path: Union[str, Path]):
        self.path = Path(path)
        self.logger = logging.getLogger(__name__)
        self._lock = asyncio.Lock()

    def _read_all(self) -> Dict[str, str]:
        if not self.path.exists():
            return {}
        text = self.path.read_text(encoding="utf-8")
        if not text.strip():
            return {}
        data = json.loads(text)
        if not isinstance(data, dict):
            raise ValueError(f"State file {self.path} does not hold a JSON object")
        return data

    def _write_all(self, data: Dict[str, str]) -> None:
        self.path.parent.mkdir(parents=True, exist_ok=True)
        fd, tmp_name = tempfile.mkstemp(dir=self.path.parent, prefix=f".{self.path.name}.", suffix=".tmp")
        try:
            with os.fdopen(fd, "w", encoding="utf-8") as f:
                json.dump(data, f, ensure_ascii=False)
            os.replace(tmp_name, self.path)
        except BaseException:
            if os.path.exists(tmp_name):
                os.unlink(tmp_name)
            raise

    async def get(self, key: str) -> Optional[str]:
        try:
            data = await asyncio.to_thread(self._read_all)
        except (OSError, ValueError) as e:
            self.logger.warning(f"Error reading state file '{self.path}': {str(e)}")
            raise StorageError(f"Cannot read state file: {e}", key=key) from e
        return data.get(key)

    async def set(self, key: str, value: str) -> None:
        async with self._lock:
            try:
                data = await asyncio.to_thread(self._read_all)
                data[key] = value
                await asyncio.to_thread(self._write_all, data)
            except (OSError, ValueError) as e:
                self.logger.warning(f"Error writing key '{key}' to '{self.path}': {str(e)}")
                raise StorageError(f"Cannot write state file: {e}", key=key) from e

    async def delete(self, key: str) -> None:
        async with self._lock:
            try:
                data = await asyncio.to_thread(self._read_all)
                if key in data:
                    del data[key]
                    await asyncio.to_thread(self._write_all, data)
            except (OSError, ValueError) as e:
                raise StorageError(f"Cannot write state file: {e}", key=key) from e


class RedisKeyValueStore(KeyValueStore):
    """
    Redis-backed store with lazy connection management.

    Unlike a cache, this store holds durable state, so failures are raised
    as StorageError rather than treated as misses.
    """

    def __init__(self, redis_url: str, socket_timeout: float = 5.0, client: Optional[Redis] = None):
        """
        Initialize the store.

        Args:
            redis_url: Redis connection URL
            socket_timeout: Socket and connect timeout in seconds
            client: Pre-built client (optional, used in tests)
        """
        self.redis_url = redis_url
        self.socket_timeout = socket_timeout
        self.redis_client: Optional[Redis] = client
        self.logger = logging.getLogger(__name__)
        self._connection_lock = asyncio.Lock()
        self._is_connected = client is not None

    async def connect(self) -> None:
        """
        Establish connection to Redis server.

        Raises:
            StorageError: If the server cannot be reached
        """
        async with self._connection_lock:
            if self._is_connected and self.redis_client:
                return

            try:
                self.logger.info(f"Connecting to Redis at {self.redis_url}")
                self.redis_client = aioredis.from_url(
                    self.redis_url,
                    encoding="utf-8",
                    decode_responses=True,
                    socket_timeout=self.socket_timeout,
                    socket_connect_timeout=self.socket_timeout,
                )
                await self.redis_client.ping()
                self._is_connected = True
                self.logger.info("Successfully connected to Redis")
            except Exception as e:
                self.logger.error(f"Failed to connect to Redis: {str(e)}")
                await self._handle_connection_error()
                raise StorageError(f"Redis unavailable: {e}") from e

    async def close(self) -> None:
        """Disconnect from Redis server."""
        async with self._connection_lock:
            if self.redis_client:
                try:
                    await self.redis_client.aclose()
                    self.logger.info("Disconnected from Redis")
                except Exception as e:
                    self.logger.warning(f"Error during Redis disconnect: {str(e)}")
                finally:
                    self.redis_client = None
                    self._is_connected = False

    async def get(self, key: str) -> Optional[str]:
        await self._ensure_connection()
        try:
            value = await self.redis_client.get(key)
        except Exception as e:
            self.logger.warning(f"Error getting key '{key}': {str(e)}")
            await self._handle_connection_error()
            raise StorageError(f"Redis get failed: {e}", key=key) from e
        if isinstance(value, bytes):
            value = value.decode("utf-8")
        return value

    async def set(self, key: str, value: str) -> None:
        await self._ensure_connection()
        try:
            await self.redis_client.set(key, value)
        except Exception as e:
            self.logger.warning(f"Error setting key '{key}': {str(e)}")
            await self._handle_connection_error()
            raise StorageError(f"Redis set failed: {e}", key=key) from e

    async def delete(self, key: str) -> None:
        await self._ensure_connection()
        try:
            await self.redis_client.delete(key)
        except Exception as e:
            self.logger.warning(f"Error deleting key '{key}': {str(e)}")
            await self._handle_connection_error()
            raise StorageError(f"Redis delete failed: {e}", key=key) from e

    async def _ensure_connection(self) -> None:
        if self._is_connected and self.redis_client:
            return
        await self.connect()

    async def _handle_connection_error(self) -> None:
        """Mark the connection as failed so the next call reconnects."""
        self._is_connected = False
        if self.redis_client:
            try:
                await self.redis_client.aclose()
            except Exception as e:
                self.logger.debug(f"Ignoring error while closing Redis client: {e}")
            self.redis_client = None

    @property
    def is_connected(self) -> bool:
        """Check if client is connected to Redis."""
        return self._is_connected and self.redis_client is not None


def create_key_value_store(settings: Settings) -> KeyValueStore:
    """Build the adapter selected by settings.storage.backend."""
    backend = settings.storage.backend
    if backend == StorageBackend.MEMORY:
        return InMemoryKeyValueStore()
    if backend == StorageBackend.REDIS:
        return RedisKeyValueStore(settings.redis.url, socket_timeout=settings.redis.socket_timeout)
    return JsonFileKeyValueStore(settings.storage.get_file_path())
