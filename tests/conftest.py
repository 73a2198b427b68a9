import pytest
from unittest.mock import MagicMock, AsyncMock
import httpx


class FakeClock:
    def __init__(self, start: float = 1_700_000_000.0):
        self.now = start

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float):
        self.now += seconds


class FakeProvider:
    """httpx.MockTransport handler standing in for the GNews search endpoint."""

    def __init__(self):
        self.requests = []
        self.mode = "ok"

    def handler(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        if self.mode == "timeout":
            raise httpx.ReadTimeout("timed out", request=request)
        if self.mode == "connect_error":
            raise httpx.ConnectError("connection refused", request=request)
        if self.mode == "error":
            return httpx.Response(403, json={"errors": ["You did not provide an API key."]})

        query = request.url.params.get("q")
        return httpx.Response(200, json={
            "totalArticles": 1,
            "articles": [
                {
                    "title": f"Article about {query}",
                    "description": f"Coverage of {query}",
                    "url": "https://news.example.com/1",
                    "source": {"name": "Example News", "url": "https://news.example.com"},
                }
            ],
        })


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def fake_provider():
    return FakeProvider()


@pytest.fixture
def sample_articles():
    return [
        {
            "title": "Chip makers rally",
            "description": "Semiconductor stocks climb",
            "url": "https://news.example.com/chips",
            "source": {"name": "Example News"},
        },
        {
            "title": "New exoplanet found",
            "description": "Astronomers report a rocky world",
            "url": "https://news.example.com/exoplanet",
            "source": {"name": "Science Daily"},
        },
    ]


@pytest.fixture
def mock_fetcher(sample_articles):
    from news_aggregator.news.fetcher import NewsFetcher

    fetcher = MagicMock(spec=NewsFetcher)
    fetcher.is_configured = True
    fetcher.timeout_seconds = 10.0
    fetcher.fetch = AsyncMock(return_value=sample_articles)
    fetcher.close = AsyncMock()
    return fetcher


@pytest.fixture
def news_cache(clock):
    from news_aggregator.news.cache import NewsCache
    return NewsCache(clock=clock)


@pytest.fixture
async def provider_fetcher(fake_provider):
    from news_aggregator.news.fetcher import NewsFetcher

    fetcher = NewsFetcher(api_key="test-news-key", transport=httpx.MockTransport(fake_provider.handler))
    yield fetcher
    await fetcher.close()


@pytest.fixture
def news_context(provider_fetcher, news_cache):
    from news_aggregator.news.context import NewsContext
    return NewsContext.create(user_source=lambda: [], fetcher=provider_fetcher, cache=news_cache)


@pytest.fixture
def test_db():
    from sqlalchemy import create_engine
    from sqlalchemy.orm import sessionmaker
    from sqlalchemy.pool import StaticPool
    from news_aggregator.core.database import Base
    from news_aggregator import models  # noqa: F401

    # Use in-memory SQLite for tests
    SQLALCHEMY_DATABASE_URL = "sqlite:///:memory:"
    engine = create_engine(
        SQLALCHEMY_DATABASE_URL,
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    TestingSessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)

    Base.metadata.create_all(bind=engine)

    db = TestingSessionLocal()
    try:
        yield db
    finally:
        db.close()
        Base.metadata.drop_all(bind=engine)


@pytest.fixture
def app(test_db, news_context):
    from news_aggregator.main import create_application
    from news_aggregator.core.database import get_db

    application = create_application(news_context=news_context)

    def override_get_db():
        try:
            yield test_db
        finally:
            pass

    application.dependency_overrides[get_db] = override_get_db
    yield application
    application.dependency_overrides.clear()


@pytest.fixture
async def async_client(app):
    from httpx import AsyncClient, ASGITransport

    # Use ASGITransport for direct app interaction
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as c:
        yield c


@pytest.fixture
def create_user(test_db):
    from news_aggregator.core.security import create_access_token, hash_password
    from news_aggregator.repositories.user_repository import UserRepository

    def _create(email="jane@example.com", password="password456", name="Jane Smith", preferences=None):
        user = UserRepository(test_db).create(
            email=email,
            name=name,
            password_hash=hash_password(password, iterations=1000),
            preferences=preferences,
        )
        token = create_access_token(user.id, user.email)
        return user, {"Authorization": f"Bearer {token}"}

    return _create


@pytest.fixture
def auth_headers(create_user):
    _, headers = create_user(preferences=["technology", "science"])
    return headers
