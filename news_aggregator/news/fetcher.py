"""
GNews search client.

Translates provider and transport failures into the FetchError family so the
cache policies can decide per endpoint whether to degrade or surface them.
"""

import asyncio
from dataclasses import dataclass
from typing import Any, Dict, List, Optional, Sequence

import httpx
import structlog

from ..config import Settings, get_settings
from ..core.exceptions import FetchTimeoutError, ProviderError, ProviderUnconfiguredError
from .cache import Article

logger = structlog.get_logger(__name__)


@dataclass(frozen=True)
class SearchFilters:
    """Optional date range and ordering for a search query."""
    from_date: Optional[str] = None
    to_date: Optional[str] = None
    sort_by: Optional[str] = None

    def as_key_parts(self) -> Dict[str, Optional[str]]:
        return {"from": self.from_date, "to": self.to_date, "sortBy": self.sort_by}

    def as_params(self) -> Dict[str, str]:
        params = {}
        if self.from_date:
            params["from"] = self.from_date
        if self.to_date:
            params["to"] = self.to_date
        if self.sort_by:
            params["sortby"] = self.sort_by
        return params


def build_query(query_terms: Sequence[str]) -> str:
    terms = [term.strip() for term in query_terms if term and term.strip()]
    return " OR ".join(terms)


def _error_details(response: httpx.Response) -> str:
    try:
        body = response.json()
    except ValueError:
        return response.text or f"HTTP {response.status_code}"

    if isinstance(body, dict):
        if body.get("message"):
            return str(body["message"])
        errors = body.get("errors")
        if isinstance(errors, list) and errors:
            return "; ".join(str(e) for e in errors)
        if isinstance(errors, dict) and errors:
            return "; ".join(f"{k}: {v}" for k, v in errors.items())
    return f"HTTP {response.status_code}"


class NewsFetcher:
    """Async client for the provider's search endpoint."""

    def __init__(
        self,
        api_key: Optional[str],
        base_url: str = "https://gnews.io/api/v4",
        timeout_seconds: float = 10.0,
        max_results: int = 20,
        language: str = "en",
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self.api_key = api_key
        self.base_url = base_url.rstrip("/")
        self.timeout_seconds = timeout_seconds
        self.max_results = max_results
        self.language = language
        self.client = httpx.AsyncClient(timeout=timeout_seconds, transport=transport)

    @classmethod
    def from_settings(cls, settings: Optional[Settings] = None) -> "NewsFetcher":
        settings = settings or get_settings()
        return cls(
            api_key=settings.news_api_key,
            base_url=settings.news_api_base_url,
            timeout_seconds=settings.news_api_timeout_seconds,
            max_results=settings.news_api_max_results,
            language=settings.news_api_language,
        )

    @property
    def is_configured(self) -> bool:
        return bool(self.api_key)

    async def fetch(self, query_terms: Sequence[str], filters: Optional[SearchFilters] = None) -> List[Article]:
        """
        Search the provider for articles matching any of the query terms.

        Raises:
            ProviderUnconfiguredError: no API key is set; no request is made.
            FetchTimeoutError: the whole request, body included, took longer
                than the configured timeout.
            ProviderError: transport failure or non-2xx provider response.
        """
        if not self.is_configured:
            raise ProviderUnconfiguredError()

        params: Dict[str, Any] = {
            "apikey": self.api_key,
            "q": build_query(query_terms),
            "max": self.max_results,
            "lang": self.language,
        }
        if filters:
            params.update(filters.as_params())

        try:
            # httpx times each phase separately; wait_for caps the total.
            response = await asyncio.wait_for(
                self.client.get(f"{self.base_url}/search", params=params),
                self.timeout_seconds
            )
            response.raise_for_status()
        except (httpx.TimeoutException, asyncio.TimeoutError):
            logger.warning("News provider request timed out", query=params["q"], timeout=self.timeout_seconds)
            raise FetchTimeoutError(self.timeout_seconds)
        except httpx.HTTPStatusError as e:
            details = _error_details(e.response)
            logger.warning(
                "News provider returned an error",
                query=params["q"],
                status_code=e.response.status_code,
                details=details
            )
            raise ProviderError(details, status_code=e.response.status_code)
        except httpx.HTTPError as e:
            logger.warning("News provider request failed", query=params["q"], error=str(e))
            raise ProviderError(str(e) or e.__class__.__name__)

        try:
            payload = response.json()
        except ValueError:
            raise ProviderError("Provider returned a non-JSON response", status_code=response.status_code)

        articles = payload.get("articles") if isinstance(payload, dict) else None
        return list(articles or [])

    async def close(self):
        await self.client.aclose()
