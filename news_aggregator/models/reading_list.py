from sqlalchemy import Column, Integer, String, Text, DateTime, JSON, ForeignKey, UniqueConstraint
from sqlalchemy.sql import func

from ..core.database import Base


class ReadArticle(Base):
    __tablename__ = "read_articles"
    __table_args__ = (UniqueConstraint("user_id", "article_id", name="uq_read_articles_user_article"),)

    id = Column(Integer, primary_key=True, autoincrement=True)
    user_id = Column(Integer, ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)
    article_id = Column(String, nullable=False)
    read_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)


class FavoriteArticle(Base):
    __tablename__ = "favorite_articles"
    __table_args__ = (UniqueConstraint("user_id", "article_id", name="uq_favorite_articles_user_article"),)

    id = Column(Integer, primary_key=True, autoincrement=True)
    user_id = Column(Integer, ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)
    article_id = Column(String, nullable=False)
    title = Column(String, nullable=False)
    description = Column(Text, nullable=False, default="")
    url = Column(String, nullable=False)
    source = Column(JSON, nullable=True)
    saved_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)

    def to_dict(self) -> dict:
        return {
            "id": self.article_id,
            "title": self.title,
            "description": self.description or "",
            "url": self.url,
            "source": self.source,
            "savedAt": self.saved_at.isoformat() if self.saved_at else None,
        }
