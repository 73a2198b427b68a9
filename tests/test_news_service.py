import pytest

from news_aggregator.core.exceptions import (
    FetchTimeoutError,
    MissingQueryError,
    NoPreferencesError,
    ProviderError,
    ProviderUnconfiguredError,
)
from news_aggregator.news.cache import personalized_news_key
from news_aggregator.news.fetcher import SearchFilters
from news_aggregator.news.service import NewsService, PLACEHOLDER_ARTICLES


@pytest.fixture
def service(news_cache, mock_fetcher):
    return NewsService(news_cache, mock_fetcher, ttl_seconds=900)


@pytest.mark.asyncio
async def test_second_request_within_ttl_is_served_from_cache(service, mock_fetcher, sample_articles):
    first = await service.get_personalized_news(1, ["technology", "science"])
    second = await service.get_personalized_news(1, ["technology", "science"])

    assert first.source == "api"
    assert second.source == "cache"
    assert first.articles == second.articles == sample_articles
    mock_fetcher.fetch.assert_awaited_once_with(["science", "technology"], None)


@pytest.mark.asyncio
async def test_users_with_same_preference_set_share_an_entry(service, mock_fetcher):
    await service.get_personalized_news(1, ["technology", "science"])
    result = await service.get_personalized_news(2, ["Science", "technology"])

    assert result.source == "cache"
    assert mock_fetcher.fetch.await_count == 1


@pytest.mark.asyncio
async def test_stale_entry_is_refetched(service, mock_fetcher, clock):
    await service.get_personalized_news(1, ["technology"])
    clock.advance(900)

    result = await service.get_personalized_news(1, ["technology"])

    assert result.source == "api"
    assert mock_fetcher.fetch.await_count == 2


@pytest.mark.asyncio
@pytest.mark.parametrize("preferences", [[], ["", "  "]])
async def test_empty_preferences_fail_regardless_of_cache(service, news_cache, preferences):
    news_cache.put(personalized_news_key([]), [{"title": "x", "url": "y"}])

    with pytest.raises(NoPreferencesError):
        await service.get_personalized_news(1, preferences)


@pytest.mark.asyncio
async def test_unconfigured_provider_serves_placeholder(service, mock_fetcher, news_cache):
    mock_fetcher.is_configured = False

    result = await service.get_personalized_news(1, ["technology"])

    assert result.source == "placeholder"
    assert result.articles == PLACEHOLDER_ARTICLES
    mock_fetcher.fetch.assert_not_awaited()
    assert len(news_cache) == 0


@pytest.mark.asyncio
async def test_provider_error_degrades_to_placeholder_without_caching(service, mock_fetcher, news_cache):
    mock_fetcher.fetch.side_effect = ProviderError("quota exceeded", status_code=429)

    result = await service.get_personalized_news(1, ["technology"])

    assert result.source == "placeholder"
    assert result.articles == PLACEHOLDER_ARTICLES
    assert len(news_cache) == 0


@pytest.mark.asyncio
async def test_timeout_is_never_masked(service, mock_fetcher, news_cache):
    mock_fetcher.fetch.side_effect = FetchTimeoutError(10)

    with pytest.raises(FetchTimeoutError):
        await service.get_personalized_news(1, ["technology"])
    with pytest.raises(FetchTimeoutError):
        await service.search("technology")
    with pytest.raises(FetchTimeoutError):
        await service.search_by_keyword("technology")

    assert len(news_cache) == 0


@pytest.mark.asyncio
async def test_search_caches_by_query_and_filters(service, mock_fetcher):
    filters = SearchFilters(sort_by="relevance")

    first = await service.search("bitcoin", filters)
    second = await service.search("bitcoin", SearchFilters(sort_by="relevance"))
    third = await service.search("bitcoin")

    assert (first.source, second.source, third.source) == ("api", "cache", "api")
    mock_fetcher.fetch.assert_any_await(["bitcoin"], filters)
    assert mock_fetcher.fetch.await_count == 2


@pytest.mark.asyncio
@pytest.mark.parametrize("query", [None, "", "   "])
async def test_search_requires_query(service, query):
    with pytest.raises(MissingQueryError):
        await service.search(query)


@pytest.mark.asyncio
async def test_search_fails_when_unconfigured(service, mock_fetcher):
    mock_fetcher.is_configured = False

    with pytest.raises(ProviderUnconfiguredError):
        await service.search("bitcoin")


@pytest.mark.asyncio
async def test_search_surfaces_provider_errors(service, mock_fetcher, news_cache):
    mock_fetcher.fetch.side_effect = ProviderError("bad request", status_code=400)

    with pytest.raises(ProviderError):
        await service.search("bitcoin")
    assert len(news_cache) == 0


@pytest.mark.asyncio
async def test_keyword_search_uses_placeholder_when_unconfigured(service, mock_fetcher):
    mock_fetcher.is_configured = False

    result = await service.search_by_keyword("climate")

    assert result.source == "placeholder"
    assert result.articles[0]["title"] == "Mock article about climate"
    mock_fetcher.fetch.assert_not_awaited()


@pytest.mark.asyncio
async def test_keyword_search_caches_results(service, mock_fetcher):
    first = await service.search_by_keyword("climate")
    second = await service.search_by_keyword("climate")

    assert (first.source, second.source) == ("api", "cache")
    mock_fetcher.fetch.assert_awaited_once_with(["climate"], None)


@pytest.mark.asyncio
async def test_clear_cache_forces_a_fresh_fetch(service, mock_fetcher):
    await service.get_personalized_news(1, ["technology"])
    assert service.clear_cache() == 1

    result = await service.get_personalized_news(1, ["technology"])

    assert result.source == "api"
    assert mock_fetcher.fetch.await_count == 2
