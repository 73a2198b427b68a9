import logging
from contextlib import asynccontextmanager
from typing import Optional

import structlog
from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from . import __version__
from .api.v1 import api_router
from .config import get_settings
from .core.database import create_tables
from .news.context import NewsContext
from .repositories.user_repository import load_preference_snapshots


def apply_logging_preferences():
    logging.getLogger("uvicorn.access").setLevel(logging.WARNING)
    logging.getLogger("httpx").setLevel(logging.WARNING)


settings = get_settings()

logging.basicConfig(
    level=getattr(logging, settings.log_level.upper(), logging.INFO),
    format="%(message)s"
)

apply_logging_preferences()

structlog.configure(
    processors=[
        structlog.stdlib.filter_by_level,
        structlog.stdlib.add_logger_name,
        structlog.stdlib.add_log_level,
        structlog.stdlib.PositionalArgumentsFormatter(),
        structlog.processors.TimeStamper(fmt="iso"),
        structlog.processors.StackInfoRenderer(),
        structlog.processors.format_exc_info,
        structlog.processors.UnicodeDecoder(),
        structlog.processors.JSONRenderer() if settings.log_format == "json" else structlog.dev.ConsoleRenderer(),
    ],
    context_class=dict,
    logger_factory=structlog.stdlib.LoggerFactory(),
    wrapper_class=structlog.stdlib.BoundLogger,
    cache_logger_on_first_use=True,
)

logger = structlog.get_logger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    # Startup
    apply_logging_preferences()
    logger.info("Starting News Aggregator API", version=__version__)
    try:
        create_tables()
        logger.info("Database tables created/verified")
    except Exception as e:
        logger.error("Failed to initialize database", error=str(e))
        raise

    news_context: NewsContext = app.state.news_context
    if not news_context.fetcher.is_configured:
        logger.warning("NEWS_API_KEY not set, personalized news will serve placeholder articles")
    if settings.news_refresh_enabled:
        news_context.refresher.start()

    yield

    logger.info("Shutting down News Aggregator API")
    await news_context.aclose()


def create_application(news_context: Optional[NewsContext] = None) -> FastAPI:
    app = FastAPI(
        title="News Aggregator",
        description="Personalized news with preference-based caching, search and reading lists",
        version=__version__,
        docs_url="/docs",
        redoc_url="/redoc",
        lifespan=lifespan,
    )

    # One cache, fetcher and refresher per process, shared by every request.
    app.state.news_context = news_context or NewsContext.create(user_source=load_preference_snapshots)

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.allowed_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    @app.exception_handler(Exception)
    async def global_exception_handler(request: Request, exc: Exception):
        logger.error(
            "Unhandled exception occurred",
            path=request.url.path,
            method=request.method,
            error=str(exc),
            exc_info=exc,
        )
        return JSONResponse(
            status_code=500,
            content={
                "error": "Internal server error",
                "message": "An unexpected error occurred. Please try again later.",
            }
        )

    @app.get("/", tags=["root"])
    async def root():
        return {
            "message": "News Aggregator API",
            "version": __version__,
            "endpoints": {
                "auth": "/users",
                "preferences": "/users/preferences",
                "news": "/news",
            },
        }

    app.include_router(api_router)

    return app


app = create_application()


if __name__ == "__main__":
    import uvicorn

    uvicorn.run(
        "news_aggregator.main:app",
        host=settings.api_host,
        port=settings.api_port,
        reload=settings.debug,
        log_level="info",
        access_log=False,
    )
