############################################################
#
# inkwell - Versioned Content Management Backend
#
# conftest.py: Pytest configuration and shared test fixtures
#
# Luke Sheneman
# Research Computing and Data Services (RCDS)
# Institute for Interdisciplinary Data Sciences (IIDS)
# University of Idaho
# sheneman@uidaho.edu
#
############################################################

"""Pytest configuration and shared fixtures for Inkwell tests."""

import pytest
import pytest_asyncio
from datetime import datetime, timedelta, timezone
from typing import AsyncGenerator, List, Optional
from unittest.mock import AsyncMock

from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.pool import StaticPool

from backend.app.core.events import DomainEvent, DomainEventDispatcher
from backend.app.db import crud
from backend.app.db import models  # noqa: F401
from backend.app.db.base import Base
from backend.app.db.models import Article, ArticleType
from backend.app.services.publishing import PublishingService
from backend.app.services.titles import TitleChangeService

# Configure pytest-asyncio
pytest_plugins = ["pytest_asyncio"]


@pytest_asyncio.fixture
async def db_engine():
    """In-memory SQLite engine shared by every session of a test."""
    engine = create_async_engine(
        "sqlite+aiosqlite:///:memory:",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield engine
    await engine.dispose()


@pytest_asyncio.fixture
async def db(db_engine) -> AsyncGenerator[AsyncSession, None]:
    """Session configured like the application's."""
    factory = async_sessionmaker(bind=db_engine, class_=AsyncSession, expire_on_commit=False)
    async with factory() as session:
        yield session


@pytest.fixture
def future() -> datetime:
    """A publish time that has not arrived yet."""
    return datetime.now(timezone.utc) + timedelta(days=1)


@pytest.fixture
def make_article(db):
    """Factory that stores an article version and commits it."""

    async def _make(
        article_number: int,
        title: str,
        url_path: str,
        article_type: ArticleType = ArticleType.GENERAL,
        version_number: int = 1,
        blog_key: Optional[str] = None,
        content: str = "",
        introduction: Optional[str] = None,
        published: Optional[datetime] = None,
        **kwargs,
    ) -> Article:
        article = await crud.create_article(
            db,
            article_number=article_number,
            title=title,
            url_path=url_path,
            article_type=article_type,
            version_number=version_number,
            blog_key=blog_key,
            content=content,
            introduction=introduction,
            published=published,
            **kwargs,
        )
        await db.commit()
        return article

    return _make


@pytest.fixture
def events() -> List[DomainEvent]:
    """Events recorded by the ``dispatcher`` fixture."""
    return []


@pytest.fixture
def dispatcher(events) -> DomainEventDispatcher:
    """Dispatcher that records every event it sees."""
    dispatcher = DomainEventDispatcher()
    dispatcher.subscribe(DomainEvent, events.append)
    return dispatcher


@pytest.fixture
def publishing(db) -> PublishingService:
    """Real publishing service with ``publish`` spied on."""
    service = PublishingService(db)
    service.publish = AsyncMock(wraps=service.publish)
    return service


@pytest.fixture
def title_service(db, publishing, dispatcher) -> TitleChangeService:
    """Title service over the test session with recording collaborators."""
    return TitleChangeService(db, publishing=publishing, dispatcher=dispatcher)
