"""Process-wide TTL cache with single-flight loading."""

from __future__ import annotations

import asyncio
import logging
import threading
import time
from typing import Awaitable, Callable, Dict, Generic, Hashable, Optional, Tuple, TypeVar

logger = logging.getLogger(__name__)

K = TypeVar("K", bound=Hashable)
V = TypeVar("V")


class TTLCache(Generic[K, V]):
    """Maps key -> (timestamp, value) plus key -> pending load.

    ``get_or_fetch`` is the only way to populate the cache, so concurrent
    callers asking for the same key always share one underlying load.
    Failed loads (the loader raising) are not cached; a loader that returns
    ``None`` is cached like any other value.
    """

    def __init__(self, name: str = "cache", clock: Callable[[], float] = time.monotonic):
        self.name = name
        self._clock = clock
        self._entries: Dict[K, Tuple[float, V]] = {}
        self._in_flight: Dict[K, "asyncio.Task[V]"] = {}
        self._lock = threading.Lock()

    async def get_or_fetch(
        self,
        key: K,
        ttl: float,
        loader: Callable[[], Awaitable[V]],
    ) -> V:
        with self._lock:
            entry = self._entries.get(key)
            if entry is not None and self._clock() - entry[0] < ttl:
                logger.debug(f"[{self.name}] hit {key!r}")
                return entry[1]

            task = self._in_flight.get(key)
            if task is None:
                logger.debug(f"[{self.name}] miss {key!r}")
                task = asyncio.ensure_future(self._load(key, loader))
                self._in_flight[key] = task
            else:
                logger.debug(f"[{self.name}] joining in-flight load {key!r}")

        return await task

    async def _load(self, key: K, loader: Callable[[], Awaitable[V]]) -> V:
        try:
            value = await loader()
            with self._lock:
                self._entries[key] = (self._clock(), value)
            return value
        finally:
            with self._lock:
                self._in_flight.pop(key, None)

    def peek(self, key: K) -> Optional[V]:
        with self._lock:
            entry = self._entries.get(key)
        return entry[1] if entry else None

    def clear(self) -> None:
        with self._lock:
            self._entries.clear()

    def __len__(self) -> int:
        return len(self._entries)
