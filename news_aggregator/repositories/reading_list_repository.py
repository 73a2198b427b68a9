from typing import Any, List, Optional, Tuple

import structlog
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from ..models.reading_list import ReadArticle, FavoriteArticle

logger = structlog.get_logger(__name__)


class ReadingListRepository:
    """Per-user read and favorite article lists."""

    def __init__(self, db: Session):
        self.db = db

    def mark_read(self, user_id: int, article_id: str) -> Tuple[bool, int]:
        """Returns (created, total_read)."""
        created = False
        if not self.get_read(user_id, article_id):
            self.db.add(ReadArticle(user_id=user_id, article_id=article_id))
            try:
                self.db.commit()
                created = True
            except IntegrityError:
                # A concurrent request inserted the same pair first.
                self.db.rollback()
                logger.info("Article already marked as read", user_id=user_id, article_id=article_id)

        return created, self.count_read(user_id)

    def get_read(self, user_id: int, article_id: str) -> Optional[ReadArticle]:
        return self.db.query(ReadArticle).filter(
            ReadArticle.user_id == user_id,
            ReadArticle.article_id == article_id
        ).first()

    def list_read(self, user_id: int) -> List[str]:
        rows = self.db.query(ReadArticle).filter(
            ReadArticle.user_id == user_id
        ).order_by(ReadArticle.id).all()
        return [row.article_id for row in rows]

    def count_read(self, user_id: int) -> int:
        return self.db.query(ReadArticle).filter(ReadArticle.user_id == user_id).count()

    def get_favorite(self, user_id: int, article_id: str) -> Optional[FavoriteArticle]:
        return self.db.query(FavoriteArticle).filter(
            FavoriteArticle.user_id == user_id,
            FavoriteArticle.article_id == article_id
        ).first()

    def add_favorite(
        self,
        user_id: int,
        article_id: str,
        title: str,
        url: str,
        description: Optional[str] = None,
        source: Optional[Any] = None,
    ) -> Tuple[FavoriteArticle, bool]:
        """Returns (favorite, created); an existing favorite is returned unchanged."""
        existing = self.get_favorite(user_id, article_id)
        if existing:
            return existing, False

        favorite = FavoriteArticle(
            user_id=user_id,
            article_id=article_id,
            title=title,
            url=url,
            description=description or "",
            source=source if source is not None else {"name": "Unknown"},
        )
        self.db.add(favorite)
        try:
            self.db.commit()
        except IntegrityError:
            self.db.rollback()
            logger.info("Article already in favorites", user_id=user_id, article_id=article_id)
            return self.get_favorite(user_id, article_id), False
        self.db.refresh(favorite)
        return favorite, True

    def list_favorites(self, user_id: int) -> List[FavoriteArticle]:
        return self.db.query(FavoriteArticle).filter(
            FavoriteArticle.user_id == user_id
        ).order_by(FavoriteArticle.id).all()

    def count_favorites(self, user_id: int) -> int:
        return self.db.query(FavoriteArticle).filter(FavoriteArticle.user_id == user_id).count()
