from typing import Optional

import structlog
from fastapi import APIRouter, Depends, HTTPException, Query

from ...dependencies import get_current_user_required, get_news_service, get_reading_list_repository
from ....core.exceptions import (
    FetchTimeoutError,
    MissingQueryError,
    NoPreferencesError,
    ProviderError,
    ProviderUnconfiguredError,
)
from ....models.user import User
from ....news.fetcher import SearchFilters
from ....news.schemas import (
    ClearCacheResponse,
    FavoriteArticleResponse,
    FavoriteArticlesResponse,
    FavoriteRequest,
    KeywordSearchResponse,
    MarkReadResponse,
    PersonalizedNewsResponse,
    ReadArticlesResponse,
    SearchResponse,
)
from ....news.service import SOURCE_CACHE, SOURCE_PLACEHOLDER, NewsService
from ....repositories.reading_list_repository import ReadingListRepository

logger = structlog.get_logger(__name__)

router = APIRouter(dependencies=[Depends(get_current_user_required)])


def _provider_http_error(e: ProviderError, message: str) -> HTTPException:
    return HTTPException(
        status_code=502,
        detail={"error": message, "details": e.upstream_details}
    )


@router.get("", response_model=PersonalizedNewsResponse)
async def get_news(
    current_user: User = Depends(get_current_user_required),
    news_service: NewsService = Depends(get_news_service)
):
    """Articles for the caller's preferences, served from cache when fresh"""
    try:
        result = await news_service.get_personalized_news(current_user.id, current_user.preferences or [])
    except NoPreferencesError as e:
        raise HTTPException(status_code=400, detail=e.message)
    except FetchTimeoutError as e:
        raise HTTPException(status_code=504, detail=e.message)

    return PersonalizedNewsResponse(news=result.articles, source=result.source)


@router.get("/search", response_model=SearchResponse)
async def search_news(
    query: Optional[str] = Query(None, description="Search terms"),
    from_date: Optional[str] = Query(None, alias="from", description="Oldest publication date (ISO 8601)"),
    to_date: Optional[str] = Query(None, alias="to", description="Newest publication date (ISO 8601)"),
    sort_by: Optional[str] = Query(None, alias="sortBy", description="publishedAt or relevance"),
    news_service: NewsService = Depends(get_news_service)
):
    filters = SearchFilters(from_date=from_date, to_date=to_date, sort_by=sort_by)
    try:
        result = await news_service.search(query, filters)
    except MissingQueryError as e:
        raise HTTPException(status_code=400, detail=e.message)
    except ProviderUnconfiguredError as e:
        raise HTTPException(status_code=503, detail=e.message)
    except ProviderError as e:
        raise _provider_http_error(e, "Failed to search news from external API")
    except FetchTimeoutError:
        raise HTTPException(status_code=504, detail="Request timeout while searching news")

    from_cache = result.source == SOURCE_CACHE
    return SearchResponse(
        message="Search results fetched successfully" + (" (from cache)" if from_cache else ""),
        source=result.source,
        query=query.strip(),
        articles=result.articles,
        total_results=result.total_results,
    )


@router.get("/search/{keyword}", response_model=KeywordSearchResponse)
async def search_by_keyword(
    keyword: str,
    news_service: NewsService = Depends(get_news_service)
):
    try:
        result = await news_service.search_by_keyword(keyword)
    except MissingQueryError as e:
        raise HTTPException(status_code=400, detail=e.message)
    except ProviderError as e:
        raise _provider_http_error(e, "Failed to search news")
    except FetchTimeoutError:
        raise HTTPException(status_code=504, detail="Request timeout while searching news")

    messages = {
        SOURCE_CACHE: "Search results from cache",
        SOURCE_PLACEHOLDER: "Mock search results",
    }
    return KeywordSearchResponse(
        message=messages.get(result.source, "Search results fetched successfully"),
        source=result.source,
        keyword=keyword,
        articles=result.articles,
        total_results=result.total_results,
    )


@router.post("/clear-cache", response_model=ClearCacheResponse)
async def clear_cache(news_service: NewsService = Depends(get_news_service)):
    cleared = news_service.clear_cache()
    return ClearCacheResponse(message="Cache cleared successfully", cleared=cleared)


@router.get("/read", response_model=ReadArticlesResponse)
async def get_read_articles(
    current_user: User = Depends(get_current_user_required),
    reading_list: ReadingListRepository = Depends(get_reading_list_repository)
):
    read_articles = reading_list.list_read(current_user.id)
    return ReadArticlesResponse(
        message="Read articles retrieved successfully",
        read_articles=read_articles,
        total_read=len(read_articles),
    )


@router.get("/favorites", response_model=FavoriteArticlesResponse)
async def get_favorite_articles(
    current_user: User = Depends(get_current_user_required),
    reading_list: ReadingListRepository = Depends(get_reading_list_repository)
):
    favorites = [favorite.to_dict() for favorite in reading_list.list_favorites(current_user.id)]
    return FavoriteArticlesResponse(
        message="Favorite articles retrieved successfully",
        favorites=favorites,
        total_favorites=len(favorites),
    )


@router.post("/{article_id}/read", response_model=MarkReadResponse, response_model_exclude_none=True)
async def mark_as_read(
    article_id: str,
    current_user: User = Depends(get_current_user_required),
    reading_list: ReadingListRepository = Depends(get_reading_list_repository)
):
    created, total_read = reading_list.mark_read(current_user.id, article_id)
    if not created:
        return MarkReadResponse(message="Article already marked as read", article_id=article_id)

    return MarkReadResponse(
        message="Article marked as read successfully",
        article_id=article_id,
        total_read=total_read,
    )


@router.post("/{article_id}/favorite", response_model=FavoriteArticleResponse, response_model_exclude_none=True)
async def mark_as_favorite(
    article_id: str,
    request: FavoriteRequest,
    current_user: User = Depends(get_current_user_required),
    reading_list: ReadingListRepository = Depends(get_reading_list_repository)
):
    if not request.title or not request.url:
        raise HTTPException(status_code=400, detail="Article title and URL are required")

    favorite, created = reading_list.add_favorite(
        user_id=current_user.id,
        article_id=article_id,
        title=request.title,
        url=request.url,
        description=request.description,
        source=request.source,
    )
    if not created:
        return FavoriteArticleResponse(message="Article already in favorites", article=favorite.to_dict())

    logger.info("Article added to favorites", user_id=current_user.id, article_id=article_id)
    return FavoriteArticleResponse(
        message="Article added to favorites successfully",
        article=favorite.to_dict(),
        total_favorites=reading_list.count_favorites(current_user.id),
    )
