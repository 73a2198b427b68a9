import pytest

ARTICLE = {
    "title": "Test Article Title",
    "description": "This is a test article description",
    "url": "https://example.com/test-article",
    "source": {"name": "Test Source"},
}


@pytest.mark.asyncio
async def test_mark_as_read_is_idempotent(async_client, auth_headers):
    response = await async_client.post("/news/test-article-123/read", headers=auth_headers)
    assert response.status_code == 200
    assert response.json() == {
        "message": "Article marked as read successfully",
        "articleId": "test-article-123",
        "totalRead": 1,
    }

    response = await async_client.post("/news/test-article-123/read", headers=auth_headers)
    assert response.status_code == 200
    assert "already marked as read" in response.json()["message"]

    response = await async_client.post("/news/test-article-456/read", headers=auth_headers)
    assert response.json()["totalRead"] == 2


@pytest.mark.asyncio
async def test_get_read_articles(async_client, auth_headers):
    await async_client.post("/news/a-1/read", headers=auth_headers)
    await async_client.post("/news/a-2/read", headers=auth_headers)

    response = await async_client.get("/news/read", headers=auth_headers)

    assert response.status_code == 200
    assert response.json()["readArticles"] == ["a-1", "a-2"]
    assert response.json()["totalRead"] == 2


@pytest.mark.asyncio
async def test_add_favorite(async_client, auth_headers):
    response = await async_client.post("/news/test-article-123/favorite", json=ARTICLE, headers=auth_headers)

    assert response.status_code == 200
    body = response.json()
    assert body["article"]["id"] == "test-article-123"
    assert body["article"]["title"] == ARTICLE["title"]
    assert body["article"]["source"] == {"name": "Test Source"}
    assert body["article"]["savedAt"]
    assert body["totalFavorites"] == 1

    again = await async_client.post("/news/test-article-123/favorite", json=ARTICLE, headers=auth_headers)
    assert again.status_code == 200
    assert "already in favorites" in again.json()["message"]


@pytest.mark.asyncio
async def test_favorite_requires_title_and_url(async_client, auth_headers):
    response = await async_client.post(
        "/news/test-article-123/favorite",
        json={"description": "Only description"},
        headers=auth_headers,
    )
    assert response.status_code == 400


@pytest.mark.asyncio
async def test_favorite_without_source_defaults_to_unknown(async_client, auth_headers):
    response = await async_client.post(
        "/news/a-9/favorite",
        json={"title": "Bare", "url": "https://example.com/bare"},
        headers=auth_headers,
    )
    assert response.json()["article"]["source"] == {"name": "Unknown"}
    assert response.json()["article"]["description"] == ""


@pytest.mark.asyncio
async def test_list_favorites_is_per_user(async_client, auth_headers, create_user):
    await async_client.post("/news/test-article-123/favorite", json=ARTICLE, headers=auth_headers)
    await async_client.post(
        "/news/test-article-789/favorite",
        json={**ARTICLE, "title": "Second Test Article"},
        headers=auth_headers,
    )
    _, other_headers = create_user(email="other@example.com", preferences=["sports"])

    mine = await async_client.get("/news/favorites", headers=auth_headers)
    theirs = await async_client.get("/news/favorites", headers=other_headers)

    assert [a["id"] for a in mine.json()["favorites"]] == ["test-article-123", "test-article-789"]
    assert mine.json()["totalFavorites"] == 2
    assert theirs.json() == {
        "message": "Favorite articles retrieved successfully",
        "favorites": [],
        "totalFavorites": 0,
    }


@pytest.mark.asyncio
@pytest.mark.parametrize("method,path", [
    ("post", "/news/x/read"),
    ("get", "/news/read"),
    ("get", "/news/favorites"),
])
async def test_reading_lists_require_authentication(async_client, method, path):
    response = await getattr(async_client, method)(path)
    assert response.status_code == 401


@pytest.mark.asyncio
async def test_favorite_without_token(async_client):
    response = await async_client.post("/news/x/favorite", json={"title": "T", "url": "https://example.com"})
    assert response.status_code == 401


def test_mark_read_race_on_duplicate_pair(test_db, create_user, monkeypatch):
    from news_aggregator.repositories.reading_list_repository import ReadingListRepository

    user, _ = create_user()
    repository = ReadingListRepository(test_db)
    assert repository.mark_read(user.id, "a-1") == (True, 1)

    # Another request inserted the row between the lookup and the commit.
    monkeypatch.setattr(repository, "get_read", lambda user_id, article_id: None)

    assert repository.mark_read(user.id, "a-1") == (False, 1)
    assert repository.list_read(user.id) == ["a-1"]


def test_add_favorite_race_on_duplicate_pair(test_db, create_user, monkeypatch):
    from news_aggregator.repositories.reading_list_repository import ReadingListRepository

    user, _ = create_user()
    repository = ReadingListRepository(test_db)
    first, created = repository.add_favorite(user.id, "a-1", title="First", url="https://example.com/1")
    assert created

    real_get_favorite = repository.get_favorite
    lookups = iter([None])
    monkeypatch.setattr(
        repository,
        "get_favorite",
        lambda user_id, article_id: next(lookups, None) or real_get_favorite(user_id, article_id),
    )

    favorite, created = repository.add_favorite(user.id, "a-1", title="Second", url="https://example.com/2")

    assert not created
    assert favorite.id == first.id
    assert favorite.title == "First"
    assert repository.count_favorites(user.id) == 1
