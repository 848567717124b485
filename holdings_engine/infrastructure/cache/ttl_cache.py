"""
In-memory TTL cache with in-flight load sharing.

Used for FX rates, currency lists and aggregated performance results.
Entries are only ever overwritten with fresher values, so concurrent
loads of the same key are harmless.
"""

from __future__ import annotations

import asyncio
import logging
import time
from typing import Any, Awaitable, Callable, Dict, Generic, Optional, Tuple, TypeVar

logger = logging.getLogger(__name__)

T = TypeVar("T")

_MISSING = object()


class TTLCache(Generic[T]):
    def __init__(
        self,
        ttl_seconds: float,
        name: str = "cache",
        clock: Callable[[], float] = time.monotonic,
    ):
        self.ttl_seconds = ttl_seconds
        self.name = name
        self._clock = clock
        # key -> (stored_at, value)
        self._entries: Dict[str, Tuple[float, T]] = {}
        self._inflight: Dict[str, "asyncio.Task[T]"] = {}
        # in-flight load -> callers still awaiting it
        self._waiters: Dict["asyncio.Task[T]", int] = {}

    def __len__(self) -> int:
        return len(self._entries)

    def _lookup(self, key: str) -> Any:
        cached = self._entries.get(key)
        if not cached:
            return _MISSING
        stored_at, value = cached
        if self._clock() - stored_at >= self.ttl_seconds:
            self._entries.pop(key, None)
            return _MISSING
        return value

    def get(self, key: str) -> Optional[T]:
        value = self._lookup(key)
        return None if value is _MISSING else value

    def set(self, key: str, value: T) -> None:
        self._entries[key] = (self._clock(), value)

    def clear(self) -> None:
        self._entries.clear()

    async def get_or_load(self, key: str, loader: Callable[[], Awaitable[T]]) -> T:
        """
        Return the cached value, or run `loader` once for all concurrent callers.

        A loader that raises caches nothing; the error reaches every waiter.
        The load is cancelled only when its last waiter is cancelled.
        """
        value = self._lookup(key)
        if value is not _MISSING:
            logger.debug("%s hit: %s", self.name, key)
            return value

        task = self._inflight.get(key)
        if task is None:
            task = asyncio.ensure_future(self._load(key, loader))
            self._inflight[key] = task
        self._waiters[task] = self._waiters.get(task, 0) + 1
        try:
            # One waiter giving up must not cancel the load for the others
            return await asyncio.shield(task)
        finally:
            remaining = self._waiters.pop(task) - 1
            if remaining:
                self._waiters[task] = remaining
            elif not task.done():
                logger.debug("%s load abandoned: %s", self.name, key)
                if self._inflight.get(key) is task:
                    del self._inflight[key]
                task.cancel()

    async def _load(self, key: str, loader: Callable[[], Awaitable[T]]) -> T:
        try:
            value = await loader()
            self.set(key, value)
            return value
        finally:
            if self._inflight.get(key) is asyncio.current_task():
                del self._inflight[key]
