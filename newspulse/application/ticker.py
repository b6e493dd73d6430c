"""
Background poller for the breaking-news ticker.

The poller keeps the latest ticker texts in memory so server-rendered pages
can show them without a backend call per request.
"""
import asyncio
import contextlib
import logging
import random
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Awaitable, Callable, Optional

logger = logging.getLogger(__name__)


def default_jitter() -> float:
    """Random backoff multiplier in [1.0, 1.5)."""
    return random.uniform(1.0, 1.5)


@dataclass
class TickerSnapshot:
    texts: list[str] = field(default_factory=list)
    updated_at: Optional[datetime] = None
    error: Optional[str] = None


class TickerPoller:
    """
    Polls a fetch coroutine for ticker texts.

    Each refresh cancels any refresh still in flight before starting a new
    one. An empty (or failed) fetch is retried up to `max_retries` times
    with delay `retry_base_seconds * attempt * jitter()`.
    """

    def __init__(
        self,
        fetch: Callable[[], Awaitable[list[str]]],
        interval_seconds: float = 300.0,
        retry_base_seconds: float = 5.0,
        max_retries: int = 3,
        jitter: Callable[[], float] = default_jitter,
        sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
    ):
        self.fetch = fetch
        self.interval_seconds = interval_seconds
        self.retry_base_seconds = retry_base_seconds
        self.max_retries = max_retries
        self.jitter = jitter
        self.sleep = sleep

        self.snapshot = TickerSnapshot()
        self._inflight: Optional[asyncio.Task] = None
        self._loop_task: Optional[asyncio.Task] = None

    @property
    def running(self) -> bool:
        return self._loop_task is not None and not self._loop_task.done()

    async def refresh(self) -> TickerSnapshot:
        """
        Run one tick.

        Returns the snapshot after the tick. A tick superseded by a newer
        refresh returns whatever snapshot is current at that point.
        """
        previous = self._inflight
        if previous is not None and not previous.done():
            logger.debug("Cancelling in-flight ticker fetch")
            previous.cancel()

        task = asyncio.create_task(self._fetch_with_retry())
        self._inflight = task
        try:
            await asyncio.wait({task})
        except asyncio.CancelledError:
            task.cancel()
            raise

        if task.cancelled():
            return self.snapshot
        return task.result()

    async def _fetch_once(self) -> Optional[list[str]]:
        try:
            return list(await self.fetch())
        except Exception as e:
            logger.warning(f"Ticker fetch failed: {e}")
            self.snapshot.error = str(e) or type(e).__name__
            return None

    async def _fetch_with_retry(self) -> TickerSnapshot:
        texts = await self._fetch_once()
        attempt = 0
        while not texts and attempt < self.max_retries:
            attempt += 1
            delay = self.retry_base_seconds * attempt * self.jitter()
            logger.info(f"Ticker empty; retry {attempt}/{self.max_retries} in {delay:.1f}s")
            await self.sleep(delay)
            texts = await self._fetch_once()

        if texts is None:
            # Every attempt failed; keep showing the last good texts
            return self.snapshot

        self.snapshot = TickerSnapshot(texts=texts, updated_at=datetime.now(timezone.utc))
        return self.snapshot

    async def _run(self) -> None:
        while True:
            await self.refresh()
            await self.sleep(self.interval_seconds)

    def start(self) -> None:
        """Start polling in the background. No-op if already running."""
        if self.running:
            return
        logger.info(f"Starting ticker poller (every {self.interval_seconds:.0f}s)")
        self._loop_task = asyncio.create_task(self._run())

    async def stop(self) -> None:
        """Stop polling and cancel any in-flight fetch."""
        for task in (self._loop_task, self._inflight):
            if task is not None and not task.done():
                task.cancel()
                with contextlib.suppress(asyncio.CancelledError):
                    await task
        self._loop_task = None
        self._inflight = None
        logger.info("Ticker poller stopped")
