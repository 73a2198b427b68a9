from typing import Optional
from fastapi.security import HTTPBearer, HTTPAuthorizationCredentials
from fastapi import Depends, Request, HTTPException
from sqlalchemy.orm import Session

from ..core.database import get_db
from ..core.security import decode_access_token
from ..models.user import User
from ..news.context import NewsContext
from ..news.service import NewsService
from ..repositories.user_repository import UserRepository
from ..repositories.reading_list_repository import ReadingListRepository

security = HTTPBearer(auto_error=False)


def get_user_repository(db: Session = Depends(get_db)) -> UserRepository:
    return UserRepository(db)


def get_reading_list_repository(db: Session = Depends(get_db)) -> ReadingListRepository:
    return ReadingListRepository(db)


def get_news_context(request: Request) -> NewsContext:
    return request.app.state.news_context


def get_news_service(context: NewsContext = Depends(get_news_context)) -> NewsService:
    return context.news_service()


async def get_current_user_optional(
    db: Session = Depends(get_db),
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(security)
) -> Optional[User]:
    if not credentials or not credentials.credentials:
        return None

    claims = decode_access_token(credentials.credentials)
    if not claims:
        return None

    try:
        user_id = int(claims.get("sub"))
    except (TypeError, ValueError):
        return None

    return UserRepository(db).get_by_id(user_id)


async def get_current_user_required(
    user: Optional[User] = Depends(get_current_user_optional)
) -> User:
    if not user:
        raise HTTPException(
            status_code=401,
            detail="Authentication required. Please provide a valid access token."
        )
    return user
