"""
Single-slot in-memory cache with a time-to-live.

Used for low-volatility settings (ad settings, public mode, site layout). Instances are
created by the app factory and injected, so tests can pass a fake clock.
"""
import time
from dataclasses import dataclass
from typing import Awaitable, Callable, Generic, Optional, TypeVar

T = TypeVar("T")


@dataclass
class _Entry(Generic[T]):
    value: T
    fetched_at: float


class TTLCache(Generic[T]):
    """
    Holds one value for `ttl_seconds`.

    Refresh contract: get_or_load() returns the cached value while it is
    fresh, otherwise awaits the loader and stores its result. Concurrent
    refreshes may both call the loader; the last write wins.
    """

    def __init__(
        self,
        ttl_seconds: float = 60.0,
        clock: Callable[[], float] = time.monotonic,
    ):
        self.ttl_seconds = ttl_seconds
        self.clock = clock
        self._entry: Optional[_Entry[T]] = None

    def get(self) -> Optional[T]:
        """Cached value, or None when empty or expired."""
        entry = self._entry
        if entry is None:
            return None
        if self.clock() - entry.fetched_at >= self.ttl_seconds:
            return None
        return entry.value

    def set(self, value: T) -> None:
        self._entry = _Entry(value=value, fetched_at=self.clock())

    def clear(self) -> None:
        self._entry = None

    async def get_or_load(self, loader: Callable[[], Awaitable[T]]) -> T:
        cached = self.get()
        if cached is not None:
            return cached
        value = await loader()
        self.set(value)
        return value
