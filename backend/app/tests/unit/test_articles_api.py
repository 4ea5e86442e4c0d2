############################################################
#
# inkwell - Versioned Content Management Backend
#
# test_articles_api.py: API tests for article and redirect endpoints
#
# Luke Sheneman
# Research Computing and Data Services (RCDS)
# Institute for Interdisciplinary Data Sciences (IIDS)
# University of Idaho
# sheneman@uidaho.edu
#
############################################################

"""API tests for article and redirect endpoints."""

import pytest
import pytest_asyncio
from datetime import datetime, timezone
from unittest.mock import AsyncMock, patch

from httpx import ASGITransport, AsyncClient
from sqlalchemy import select

from backend.app.core.exceptions import PersistenceError
from backend.app.db.models import Article
from backend.app.db.session import get_async_db
from backend.app.main import app
from backend.app.services.titles import TitleChangeService

PUBLISHED = datetime(2024, 1, 1, tzinfo=timezone.utc)


@pytest_asyncio.fixture
async def client(db):
    """HTTP client whose requests share the test session."""

    async def override_get_db():
        yield db

    app.dependency_overrides[get_async_db] = override_get_db
    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as ac:
        yield ac
    app.dependency_overrides.clear()


class TestHealth:
    """Tests for health endpoints."""

    @pytest.mark.asyncio
    async def test_healthz(self, client):
        response = await client.get("/healthz")
        assert response.status_code == 200
        assert response.json()["status"] == "alive"
        assert "x-request-id" in response.headers


class TestValidateTitleEndpoint:
    """Tests for GET /api/articles/validate-title."""

    @pytest.mark.asyncio
    async def test_available(self, client, make_article):
        await make_article(1, "About", "about")

        response = await client.get("/api/articles/validate-title", params={"title": "Contact"})

        assert response.status_code == 200
        assert response.json() == {"title": "Contact", "available": True}

    @pytest.mark.asyncio
    async def test_taken_and_self_excluded(self, client, make_article):
        await make_article(1, "About", "about")

        taken = await client.get("/api/articles/validate-title", params={"title": "about"})
        own = await client.get(
            "/api/articles/validate-title", params={"title": "about", "article_number": 1}
        )

        assert taken.json()["available"] is False
        assert own.json()["available"] is True

    @pytest.mark.asyncio
    async def test_reserved(self, client):
        response = await client.get("/api/articles/validate-title", params={"title": "admin"})
        assert response.json()["available"] is False


class TestUpdateTitleEndpoint:
    """Tests for PUT /api/articles/{article_number}/title."""

    @pytest.mark.asyncio
    async def test_rename(self, client, db, make_article):
        await make_article(5, "Old Name", "old-name", version_number=1, published=PUBLISHED)
        await make_article(5, "Old Name", "old-name", version_number=2, published=PUBLISHED)

        response = await client.put("/api/articles/5/title", json={"title": "New Name"})

        assert response.status_code == 200
        body = response.json()
        assert body["changed"] is True
        assert body["old_slug"] == "old-name"
        assert body["new_slug"] == "new-name"
        assert body["redirects"]["success_count"] == 1
        assert body["redirects"]["all_succeeded"] is True
        assert body["url_changes"][0]["old_path"] == "old-name"

        result = await db.execute(select(Article.url_path).where(Article.article_number == 5))
        assert set(result.scalars().all()) == {"new-name"}

        resolved = await client.get("/api/redirects/resolve", params={"path": "old-name"})
        assert resolved.status_code == 200
        assert resolved.json() == {"path": "old-name", "target": "new-name"}

    @pytest.mark.asyncio
    async def test_not_found(self, client):
        response = await client.put("/api/articles/404/title", json={"title": "Anything"})
        assert response.status_code == 404

    @pytest.mark.asyncio
    async def test_reserved_title(self, client, make_article):
        await make_article(1, "Contact", "contact")

        response = await client.put("/api/articles/1/title", json={"title": "Admin"})

        assert response.status_code == 409

    @pytest.mark.asyncio
    async def test_slug_conflict(self, client, db, make_article):
        await make_article(1, "First", "first")
        await make_article(2, "Second", "second")

        response = await client.put("/api/articles/2/title", json={"title": "First!"})

        assert response.status_code == 409
        assert "already in use" in response.json()["detail"]
        result = await db.execute(
            select(Article.title, Article.url_path).where(Article.article_number == 2)
        )
        assert result.all() == [("Second", "second")]

    @pytest.mark.asyncio
    async def test_persistence_failure(self, client, make_article):
        await make_article(1, "Old", "old")

        with patch.object(
            TitleChangeService,
            "handle_title_change",
            AsyncMock(side_effect=PersistenceError("write failed")),
        ):
            response = await client.put("/api/articles/1/title", json={"title": "New"})

        assert response.status_code == 500
        assert "write failed" not in response.text

    @pytest.mark.asyncio
    async def test_blank_title_rejected(self, client, make_article):
        await make_article(1, "Old", "old")
        response = await client.put("/api/articles/1/title", json={"title": ""})
        assert response.status_code == 422


class TestRedirectEndpoint:
    """Tests for GET /api/redirects/resolve."""

    @pytest.mark.asyncio
    async def test_unknown_path(self, client):
        response = await client.get("/api/redirects/resolve", params={"path": "nowhere"})
        assert response.status_code == 404
