"""
In-process response cache for provider article sets.

Entries are stamped when written and judged fresh or stale by the caller's
TTL, so the request path and the background refresher can apply different
windows to the same entry. Nothing is evicted except by ``clear_all``.
"""

import copy
import json
import threading
import time
from dataclasses import dataclass
from typing import Any, Callable, Dict, Iterable, List, Mapping, Optional, Sequence, Tuple

import structlog

logger = structlog.get_logger(__name__)

Article = Dict[str, Any]

NEWS_DISCRIMINATOR = "news"
SEARCH_DISCRIMINATOR = "search"
KEYWORD_DISCRIMINATOR = "keyword"


@dataclass(frozen=True)
class CacheEntry:
    articles: Tuple[Article, ...]
    cached_at: float

    def article_list(self) -> List[Article]:
        return copy.deepcopy(list(self.articles))


def canonical_preferences(preferences: Iterable[str]) -> List[str]:
    """Trimmed, case-folded, de-duplicated and sorted preference terms."""
    cleaned = {str(p).strip().lower() for p in preferences if p and str(p).strip()}
    return sorted(cleaned)


def _build_key(discriminator: str, *parts: Any) -> str:
    return f"{discriminator}:" + json.dumps(list(parts), sort_keys=True, separators=(",", ":"))


def personalized_news_key(preferences: Iterable[str]) -> str:
    # Users with the same preference set share one entry.
    return _build_key(NEWS_DISCRIMINATOR, canonical_preferences(preferences))


def search_key(query: str, filters: Optional[Mapping[str, Optional[str]]] = None) -> str:
    filters = filters or {}
    return _build_key(
        SEARCH_DISCRIMINATOR,
        query,
        filters.get("from") or "",
        filters.get("to") or "",
        filters.get("sortBy") or "",
    )


def keyword_key(keyword: str) -> str:
    return _build_key(KEYWORD_DISCRIMINATOR, keyword)


class NewsCache:
    """Thread-safe map of cache key to CacheEntry.

    The lock guards only the dictionary access; callers must never hold it
    across a provider request.
    """

    def __init__(self, clock: Callable[[], float] = time.time):
        self._clock = clock
        self._entries: Dict[str, CacheEntry] = {}
        self._lock = threading.Lock()
        self._stats = {"hits": 0, "misses": 0, "writes": 0}

    def get(self, key: str) -> Optional[CacheEntry]:
        with self._lock:
            return self._entries.get(key)

    def put(self, key: str, articles: Sequence[Article]) -> CacheEntry:
        # Articles are copied in and out so callers never share dicts with the cache.
        entry = CacheEntry(articles=tuple(copy.deepcopy(list(articles))), cached_at=self._clock())
        with self._lock:
            self._entries[key] = entry
            self._stats["writes"] += 1
        logger.debug("Cache entry written", cache_key=key, articles=len(entry.articles))
        return entry

    def clear_all(self) -> int:
        with self._lock:
            removed = len(self._entries)
            self._entries.clear()
        logger.info("Cache cleared", removed_entries=removed)
        return removed

    def is_fresh(self, entry: CacheEntry, ttl: float) -> bool:
        return self._clock() - entry.cached_at < ttl

    def get_fresh(self, key: str, ttl: float) -> Optional[CacheEntry]:
        """Return the entry for ``key`` only if it is younger than ``ttl``."""
        entry = self.get(key)
        fresh = entry is not None and self.is_fresh(entry, ttl)
        with self._lock:
            self._stats["hits" if fresh else "misses"] += 1
        return entry if fresh else None

    def __len__(self) -> int:
        with self._lock:
            return len(self._entries)

    def stats(self) -> Dict[str, int]:
        with self._lock:
            return {**self._stats, "entries": len(self._entries)}
