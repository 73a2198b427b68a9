"""
Background refresh of personalized news cache entries.

One asyncio task per process walks every user with preferences, refetching
entries older than the refresh interval so that foreground requests mostly
hit a warm cache. Users are processed one at a time with a pacing delay
between provider calls.
"""

import asyncio
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Any, Awaitable, Callable, Dict, Iterable, Optional, Tuple

import structlog

from ..core.exceptions import FetchError
from .cache import NewsCache, canonical_preferences, personalized_news_key
from .fetcher import NewsFetcher

logger = structlog.get_logger(__name__)


@dataclass(frozen=True)
class UserPreferenceSnapshot:
    """A user's preference list as read at the start of a refresh cycle."""
    user_id: int
    preferences: Tuple[str, ...]


UserSource = Callable[[], Iterable[UserPreferenceSnapshot]]


class BackgroundRefresher:

    def __init__(
        self,
        cache: NewsCache,
        fetcher: NewsFetcher,
        user_source: UserSource,
        interval_seconds: float = 10 * 60,
        initial_delay_seconds: float = 5,
        pacing_seconds: float = 1,
        sleep: Callable[[float], Awaitable[Any]] = asyncio.sleep,
    ):
        self.cache = cache
        self.fetcher = fetcher
        self.user_source = user_source
        self.interval_seconds = interval_seconds
        self.initial_delay_seconds = initial_delay_seconds
        self.pacing_seconds = pacing_seconds
        self._sleep = sleep
        self._task: Optional[asyncio.Task] = None
        self._stop_event: Optional[asyncio.Event] = None
        self.cycles_completed = 0
        self.last_cycle: Optional[Dict[str, Any]] = None

    @property
    def is_running(self) -> bool:
        return self._is_active() and not self._stop_event.is_set()

    def _is_active(self) -> bool:
        return self._task is not None and not self._task.done()

    def start(self) -> bool:
        """Schedule the refresh loop. Returns False if it is already running."""
        if self._is_active():
            # A stopped loop still finishing its cycle counts as active.
            return False

        self._stop_event = asyncio.Event()
        self._task = asyncio.create_task(self._run(self._stop_event), name="news-cache-refresher")
        logger.info(
            "Starting periodic cache updates",
            interval_seconds=self.interval_seconds,
            initial_delay_seconds=self.initial_delay_seconds
        )
        return True

    def stop(self) -> Optional[asyncio.Task]:
        """
        Prevent any further refresh cycles.

        A cycle already in progress is allowed to finish; the returned task
        completes once it has. Until then ``start`` refuses to launch a new loop.
        """
        if self._task is None:
            return None

        if not self._stop_event.is_set():
            self._stop_event.set()
            logger.info("Stopped periodic cache updates")
        return self._task

    async def _run(self, stop_event: asyncio.Event):
        delay = self.initial_delay_seconds
        while not await self._wait_for_stop(stop_event, delay):
            try:
                await self.run_cycle()
            except Exception as e:
                logger.error("Cache refresh cycle failed", error=str(e), exc_info=e)
            delay = self.interval_seconds

    @staticmethod
    async def _wait_for_stop(stop_event: asyncio.Event, timeout: float) -> bool:
        try:
            await asyncio.wait_for(stop_event.wait(), timeout)
            return True
        except asyncio.TimeoutError:
            return False

    async def run_cycle(self) -> Dict[str, Any]:
        """Refresh every stale personalized entry once."""
        stats = {"users": 0, "refreshed": 0, "skipped": 0, "failed": 0}

        if not self.fetcher.is_configured:
            logger.debug("News provider not configured, skipping cache refresh")
            return self._finish_cycle(stats)

        logger.info("Starting cache refresh")
        fetched_any = False

        loop = asyncio.get_running_loop()
        snapshots = await loop.run_in_executor(None, lambda: list(self.user_source()))

        for snapshot in snapshots:
            terms = canonical_preferences(snapshot.preferences)
            if not terms:
                continue
            stats["users"] += 1

            cache_key = personalized_news_key(terms)
            entry = self.cache.get(cache_key)
            if entry is not None and self.cache.is_fresh(entry, self.interval_seconds):
                stats["skipped"] += 1
                continue

            if fetched_any:
                await self._sleep(self.pacing_seconds)
            fetched_any = True

            try:
                articles = await self.fetcher.fetch(terms)
            except FetchError as e:
                stats["failed"] += 1
                logger.warning(
                    "Error updating cache for user",
                    user_id=snapshot.user_id,
                    error_code=e.error_code,
                    details=e.details
                )
                continue
            except Exception as e:
                stats["failed"] += 1
                logger.error("Unexpected error updating cache for user", user_id=snapshot.user_id, error=str(e), exc_info=e)
                continue

            self.cache.put(cache_key, articles)
            stats["refreshed"] += 1
            logger.info("Cache updated for user", user_id=snapshot.user_id, articles=len(articles))

        logger.info("Cache refresh completed", **stats)
        return self._finish_cycle(stats)

    def _finish_cycle(self, stats: Dict[str, Any]) -> Dict[str, Any]:
        self.cycles_completed += 1
        self.last_cycle = {**stats, "finished_at": datetime.now(timezone.utc).isoformat()}
        return stats

    def status(self) -> Dict[str, Any]:
        return {
            "running": self.is_running,
            "interval_seconds": self.interval_seconds,
            "cycles_completed": self.cycles_completed,
            "last_cycle": self.last_cycle,
        }
