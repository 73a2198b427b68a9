"""News API request and response schemas"""

from typing import Any, Dict, List, Optional
from pydantic import BaseModel, Field


class PersonalizedNewsResponse(BaseModel):
    """Articles matching the caller's preferences"""
    news: List[Dict[str, Any]]
    source: Optional[str] = None  # cache, api or placeholder


class SearchResponse(BaseModel):
    message: str
    source: str
    query: str
    articles: List[Dict[str, Any]]
    total_results: int = Field(alias="totalResults")

    class Config:
        populate_by_name = True


class KeywordSearchResponse(BaseModel):
    message: str
    source: str
    keyword: str
    articles: List[Dict[str, Any]]
    total_results: int = Field(alias="totalResults")

    class Config:
        populate_by_name = True


class ClearCacheResponse(BaseModel):
    message: str
    cleared: int


class FavoriteRequest(BaseModel):
    """Article fields stored with a favorite; title and url are checked by the endpoint"""
    title: Optional[str] = None
    description: Optional[str] = None
    url: Optional[str] = None
    source: Optional[Any] = None


class MarkReadResponse(BaseModel):
    message: str
    article_id: str = Field(alias="articleId")
    total_read: Optional[int] = Field(default=None, alias="totalRead")

    class Config:
        populate_by_name = True


class ReadArticlesResponse(BaseModel):
    message: str
    read_articles: List[str] = Field(alias="readArticles")
    total_read: int = Field(alias="totalRead")

    class Config:
        populate_by_name = True


class FavoriteArticleResponse(BaseModel):
    message: str
    article: Dict[str, Any]
    total_favorites: Optional[int] = Field(default=None, alias="totalFavorites")

    class Config:
        populate_by_name = True


class FavoriteArticlesResponse(BaseModel):
    message: str
    favorites: List[Dict[str, Any]]
    total_favorites: int = Field(alias="totalFavorites")

    class Config:
        populate_by_name = True
