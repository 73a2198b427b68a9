import asyncio
from dataclasses import dataclass
from typing import Optional

from ..config import Settings, get_settings
from .cache import NewsCache
from .fetcher import NewsFetcher
from .refresher import BackgroundRefresher, UserSource
from .service import NewsService


@dataclass
class NewsContext:
    """Process-wide news state shared by request handlers and the refresher."""
    cache: NewsCache
    fetcher: NewsFetcher
    refresher: BackgroundRefresher
    ttl_seconds: float

    @classmethod
    def create(
        cls,
        user_source: UserSource,
        settings: Optional[Settings] = None,
        fetcher: Optional[NewsFetcher] = None,
        cache: Optional[NewsCache] = None,
    ) -> "NewsContext":
        settings = settings if settings is not None else get_settings()
        # NewsCache defines __len__, so an empty injected cache is falsy.
        cache = cache if cache is not None else NewsCache()
        fetcher = fetcher if fetcher is not None else NewsFetcher.from_settings(settings)
        refresher = BackgroundRefresher(
            cache=cache,
            fetcher=fetcher,
            user_source=user_source,
            interval_seconds=settings.news_refresh_interval_seconds,
            initial_delay_seconds=settings.news_refresh_initial_delay_seconds,
            pacing_seconds=settings.news_refresh_pacing_seconds,
        )
        return cls(cache=cache, fetcher=fetcher, refresher=refresher, ttl_seconds=settings.news_cache_ttl_seconds)

    def news_service(self) -> NewsService:
        return NewsService(self.cache, self.fetcher, ttl_seconds=self.ttl_seconds)

    async def aclose(self):
        task = self.refresher.stop()
        if task is not None:
            # Let an in-flight cycle finish its current fetch before the client closes.
            _, pending = await asyncio.wait({task}, timeout=self.fetcher.timeout_seconds)
            for leftover in pending:
                leftover.cancel()
        await self.fetcher.close()
