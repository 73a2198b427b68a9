"""
Foreground cache policies for the news endpoints.

Each operation builds a cache key, serves a fresh entry when one exists and
otherwise asks the fetcher, writing the result back only on success. The
operations differ in how they treat provider failures:

- personalized news degrades to placeholder articles on an unconfigured or
  failing provider
- query search surfaces every failure
- keyword search serves a placeholder when unconfigured, surfaces the rest

Timeouts are never masked.
"""

from dataclasses import dataclass
from typing import List, Optional, Sequence

import structlog

from ..core.exceptions import MissingQueryError, NoPreferencesError, ProviderError, ProviderUnconfiguredError
from .cache import Article, NewsCache, canonical_preferences, keyword_key, personalized_news_key, search_key
from .fetcher import NewsFetcher, SearchFilters

logger = structlog.get_logger(__name__)

SOURCE_CACHE = "cache"
SOURCE_API = "api"
SOURCE_PLACEHOLDER = "placeholder"

PLACEHOLDER_ARTICLES: List[Article] = [
    {
        "title": "Mock News Article",
        "description": "This is a mock news article",
        "url": "https://example.com",
        "source": "Mock Source",
    }
]


def placeholder_articles() -> List[Article]:
    return [dict(article) for article in PLACEHOLDER_ARTICLES]


def keyword_placeholder_articles(keyword: str) -> List[Article]:
    return [
        {
            "id": "mock-1",
            "title": f"Mock article about {keyword}",
            "description": f"This is a mock article related to {keyword}",
            "url": "https://example.com",
            "source": {"name": "Mock Source"},
        }
    ]


@dataclass
class NewsResult:
    articles: List[Article]
    source: str

    @property
    def total_results(self) -> int:
        return len(self.articles)


class NewsService:
    """Serves article sets from the shared cache, falling back to the provider."""

    def __init__(self, cache: NewsCache, fetcher: NewsFetcher, ttl_seconds: float = 15 * 60):
        self.cache = cache
        self.fetcher = fetcher
        self.ttl_seconds = ttl_seconds

    async def _cached_fetch(
        self,
        cache_key: str,
        query_terms: Sequence[str],
        filters: Optional[SearchFilters] = None
    ) -> NewsResult:
        entry = self.cache.get_fresh(cache_key, self.ttl_seconds)
        if entry is not None:
            logger.debug("Serving cached articles", cache_key=cache_key)
            return NewsResult(articles=entry.article_list(), source=SOURCE_CACHE)

        # Fetch outside the cache lock; only a successful result is written.
        articles = await self.fetcher.fetch(query_terms, filters)
        self.cache.put(cache_key, articles)
        logger.info("Fetched articles from provider", cache_key=cache_key, articles=len(articles))
        return NewsResult(articles=articles, source=SOURCE_API)

    async def get_personalized_news(self, user_id: int, preferences: Sequence[str]) -> NewsResult:
        terms = canonical_preferences(preferences)
        if not terms:
            raise NoPreferencesError(user_id)

        if not self.fetcher.is_configured:
            return NewsResult(articles=placeholder_articles(), source=SOURCE_PLACEHOLDER)

        try:
            return await self._cached_fetch(personalized_news_key(terms), terms)
        except (ProviderError, ProviderUnconfiguredError) as e:
            logger.warning(
                "Provider failed, serving placeholder news",
                user_id=user_id,
                error_code=e.error_code,
                details=e.details
            )
            return NewsResult(articles=placeholder_articles(), source=SOURCE_PLACEHOLDER)

    async def search(self, query: Optional[str], filters: Optional[SearchFilters] = None) -> NewsResult:
        query = (query or "").strip()
        if not query:
            raise MissingQueryError("query")

        if not self.fetcher.is_configured:
            raise ProviderUnconfiguredError()

        filters = filters or SearchFilters()
        return await self._cached_fetch(search_key(query, filters.as_key_parts()), [query], filters)

    async def search_by_keyword(self, keyword: Optional[str]) -> NewsResult:
        keyword = (keyword or "").strip()
        if not keyword:
            raise MissingQueryError("keyword")

        cache_key = keyword_key(keyword)
        if self.fetcher.is_configured:
            return await self._cached_fetch(cache_key, [keyword])

        # Entries written before the key was removed are still served.
        entry = self.cache.get_fresh(cache_key, self.ttl_seconds)
        if entry is not None:
            return NewsResult(articles=entry.article_list(), source=SOURCE_CACHE)
        return NewsResult(articles=keyword_placeholder_articles(keyword), source=SOURCE_PLACEHOLDER)

    def clear_cache(self) -> int:
        return self.cache.clear_all()
