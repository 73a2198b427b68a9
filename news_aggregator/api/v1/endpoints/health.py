from datetime import datetime, timezone
from typing import Dict, Any

import structlog
from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.orm import Session
from sqlalchemy import text

from ...dependencies import get_db, get_news_context
from ....config import get_settings
from ....news.context import NewsContext

logger = structlog.get_logger(__name__)
settings = get_settings()

router = APIRouter()


@router.get("/health")
async def health_check(
    db: Session = Depends(get_db),
    news_context: NewsContext = Depends(get_news_context)
) -> Dict[str, Any]:
    try:
        db.execute(text("SELECT 1"))
    except Exception as e:
        logger.error("Database health check failed", error=str(e))
        raise HTTPException(
            status_code=503,
            detail={
                "status": "unhealthy",
                "database": "unhealthy",
                "error": "Database connectivity failed",
                "timestamp": datetime.now(timezone.utc).isoformat()
            }
        )

    return {
        "status": "healthy",
        "service": "News Aggregator API",
        "version": "1.0.0",
        "environment": "development" if settings.debug else "production",
        "database": "healthy",
        "news_provider_configured": news_context.fetcher.is_configured,
        "cache": news_context.cache.stats(),
        "refresher": news_context.refresher.status(),
        "timestamp": datetime.now(timezone.utc).isoformat(),
    }
