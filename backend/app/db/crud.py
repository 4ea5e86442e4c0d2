############################################################
#
# inkwell - Versioned Content Management Backend
#
# crud.py: Database CRUD operations for all entities
#
# Luke Sheneman
# Research Computing and Data Services (RCDS)
# Institute for Interdisciplinary Data Sciences (IIDS)
# University of Idaho
# sheneman@uidaho.edu
#
############################################################

"""Database CRUD operations for Inkwell.

Read helpers here never filter on publish state unless their name says so;
"non-deleted" means ``status_code != deleted``.
"""

from datetime import datetime, timezone
from typing import List, Optional

from sqlalchemy import delete, func, select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from backend.app.core.exceptions import PersistenceError
from backend.app.db.models import (
    Article,
    ArticleType,
    PublishedPage,
    Redirect,
    Setting,
    StatusCode,
    User,
    fold_title,
)


def _not_deleted():
    return Article.status_code != StatusCode.DELETED


async def commit_changes(db: AsyncSession) -> None:
    """Commit the session, surfacing store failures as PersistenceError."""
    try:
        await db.commit()
    except SQLAlchemyError as exc:
        await db.rollback()
        raise PersistenceError(f"Failed to persist content changes: {exc}") from exc


# User CRUD
async def get_user_by_id(db: AsyncSession, user_id: int) -> Optional[User]:
    """Get user by ID."""
    result = await db.execute(select(User).where(User.id == user_id))
    return result.scalar_one_or_none()


async def create_user(
    db: AsyncSession,
    username: str,
    email: str,
    full_name: Optional[str] = None,
) -> User:
    """Create a new user."""
    user = User(username=username, email=email, full_name=full_name)
    db.add(user)
    await db.flush()
    return user


# Article CRUD
async def create_article(
    db: AsyncSession,
    article_number: int,
    title: str,
    url_path: str,
    article_type: ArticleType = ArticleType.GENERAL,
    version_number: int = 1,
    blog_key: Optional[str] = None,
    content: str = "",
    introduction: Optional[str] = None,
    published: Optional[datetime] = None,
    status_code: StatusCode = StatusCode.ACTIVE,
    owner_user_id: Optional[int] = None,
) -> Article:
    """Create an article version row."""
    article = Article(
        article_number=article_number,
        version_number=version_number,
        title=title,
        url_path=url_path,
        article_type=article_type,
        blog_key=blog_key,
        content=content,
        introduction=introduction,
        published=published,
        status_code=status_code,
        owner_user_id=owner_user_id,
    )
    db.add(article)
    await db.flush()
    return article


async def get_article_by_id(db: AsyncSession, article_id: str) -> Optional[Article]:
    """Get a single version row by its ID."""
    result = await db.execute(select(Article).where(Article.id == article_id))
    return result.scalar_one_or_none()


async def get_latest_version(db: AsyncSession, article_number: int) -> Optional[Article]:
    """Get the newest non-deleted version of a logical article."""
    result = await db.execute(
        select(Article)
        .where(Article.article_number == article_number, _not_deleted())
        .order_by(Article.version_number.desc())
        .limit(1)
    )
    return result.scalar_one_or_none()


async def get_versions(
    db: AsyncSession,
    article_number: int,
    exclude_id: Optional[str] = None,
) -> List[Article]:
    """Get all non-deleted versions of a logical article, oldest first."""
    query = select(Article).where(Article.article_number == article_number, _not_deleted())
    if exclude_id is not None:
        query = query.where(Article.id != exclude_id)
    result = await db.execute(query.order_by(Article.version_number))
    return list(result.scalars().all())


async def find_by_url_path(
    db: AsyncSession,
    url_path: str,
    exclude_article_number: Optional[int] = None,
) -> Optional[Article]:
    """Find a non-deleted row whose URL path matches (case-insensitive)."""
    query = select(Article).where(
        func.lower(Article.url_path) == url_path.lower(),
        _not_deleted(),
    )
    if exclude_article_number is not None:
        query = query.where(Article.article_number != exclude_article_number)
    result = await db.execute(query.limit(1))
    return result.scalar_one_or_none()


async def find_by_title(
    db: AsyncSession,
    title: str,
    exclude_article_number: Optional[int] = None,
) -> Optional[Article]:
    """Find a non-deleted row whose title matches (trimmed, Unicode casefolded)."""
    query = select(Article).where(
        Article.title_key == fold_title(title),
        _not_deleted(),
    )
    if exclude_article_number is not None:
        query = query.where(Article.article_number != exclude_article_number)
    result = await db.execute(query.limit(1))
    return result.scalar_one_or_none()


async def get_articles_by_blog_key(
    db: AsyncSession,
    blog_key: str,
    article_type: Optional[ArticleType] = None,
) -> List[Article]:
    """Get non-deleted rows keyed to a blog stream, newest version first."""
    query = select(Article).where(Article.blog_key == blog_key, _not_deleted())
    if article_type is not None:
        query = query.where(Article.article_type == article_type)
    result = await db.execute(
        query.order_by(Article.article_number, Article.version_number.desc())
    )
    return list(result.scalars().all())


async def get_descendants(
    db: AsyncSession,
    url_path_prefix: str,
    exclude_article_number: Optional[int] = None,
) -> List[Article]:
    """Get non-deleted rows whose URL path starts with ``url_path_prefix``.

    The caller includes the trailing ``/`` in the prefix. LIKE is
    case-insensitive on some backends, so matches are re-checked exactly.
    """
    query = select(Article).where(
        Article.url_path.startswith(url_path_prefix, autoescape=True),
        _not_deleted(),
    )
    if exclude_article_number is not None:
        query = query.where(Article.article_number != exclude_article_number)
    result = await db.execute(
        query.order_by(Article.url_path, Article.article_number, Article.version_number.desc())
    )
    return [a for a in result.scalars().all() if a.url_path.startswith(url_path_prefix)]


async def get_live_blog_entries(
    db: AsyncSession,
    blog_key: str,
    exclude_article_number: Optional[int] = None,
    now: Optional[datetime] = None,
) -> List[Article]:
    """Get published (not scheduled) blog post rows for a stream."""
    now = now or datetime.now(timezone.utc)
    query = select(Article).where(
        Article.blog_key == blog_key,
        Article.article_type == ArticleType.BLOG_POST,
        Article.published.is_not(None),
        Article.published <= now,
        _not_deleted(),
    )
    if exclude_article_number is not None:
        query = query.where(Article.article_number != exclude_article_number)
    result = await db.execute(query.order_by(Article.published.desc()))
    return list(result.scalars().all())


# Redirect CRUD
async def get_redirect_by_old_path(db: AsyncSession, old_path: str) -> Optional[Redirect]:
    """Get the redirect registered for a source path."""
    result = await db.execute(select(Redirect).where(Redirect.old_path == old_path))
    return result.scalar_one_or_none()


async def get_redirects_targeting(db: AsyncSession, new_path: str) -> List[Redirect]:
    """Get active redirects whose target is ``new_path``."""
    result = await db.execute(
        select(Redirect).where(Redirect.new_path == new_path, Redirect.is_active.is_(True))
    )
    return list(result.scalars().all())


async def get_all_redirects(db: AsyncSession) -> List[Redirect]:
    """Get all redirects ordered by source path."""
    result = await db.execute(select(Redirect).order_by(Redirect.old_path))
    return list(result.scalars().all())


# Published page CRUD
async def get_published_page(db: AsyncSession, article_number: int) -> Optional[PublishedPage]:
    """Get the materialized page for a logical article."""
    result = await db.execute(
        select(PublishedPage).where(PublishedPage.article_number == article_number)
    )
    return result.scalar_one_or_none()


async def delete_published_page(db: AsyncSession, article_number: int) -> bool:
    """Delete the materialized page for a logical article."""
    result = await db.execute(
        delete(PublishedPage).where(PublishedPage.article_number == article_number)
    )
    return result.rowcount > 0


# Setting CRUD
async def get_setting_by_name(db: AsyncSession, name: str) -> Optional[Setting]:
    """Get a named setting."""
    result = await db.execute(select(Setting).where(Setting.name == name))
    return result.scalar_one_or_none()
