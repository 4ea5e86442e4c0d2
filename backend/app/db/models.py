############################################################
#
# inkwell - Versioned Content Management Backend
#
# models.py: SQLAlchemy ORM models for all database entities
#
# Luke Sheneman
# Research Computing and Data Services (RCDS)
# Institute for Interdisciplinary Data Sciences (IIDS)
# University of Idaho
# sheneman@uidaho.edu
#
############################################################

"""SQLAlchemy database models for Inkwell."""

from datetime import datetime, timezone
from enum import Enum as PyEnum
from typing import Optional
import uuid

from sqlalchemy import (
    Boolean,
    DateTime,
    Enum,
    ForeignKey,
    Index,
    Integer,
    String,
    Text,
)
from sqlalchemy.orm import Mapped, mapped_column, validates

from backend.app.db.base import Base, TimestampMixin, SoftDeleteMixin

# Use enum values (lowercase) for database storage, not enum names (uppercase)
_enum_values = lambda obj: [e.value for e in obj]


def ensure_aware(dt: Optional[datetime]) -> Optional[datetime]:
    """Ensure a datetime is timezone-aware (SQLite and MariaDB return naive datetimes)."""
    if dt is not None and dt.tzinfo is None:
        return dt.replace(tzinfo=timezone.utc)
    return dt


def fold_title(title: Optional[str]) -> str:
    """Comparison key for titles: trimmed and Unicode casefolded."""
    return (title or "").strip().casefold()


# Enums
class ArticleType(str, PyEnum):
    """Kinds of content item."""
    GENERAL = "general"
    BLOG_POST = "blog_post"
    BLOG_STREAM = "blog_stream"
    OTHER = "other"


class StatusCode(str, PyEnum):
    """Article row status."""
    ACTIVE = "active"
    DELETED = "deleted"


# User Model
class User(Base, TimestampMixin, SoftDeleteMixin):
    """Editor account; owns articles and is credited on redirects."""

    __tablename__ = "users"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    username: Mapped[str] = mapped_column(String(100), unique=True, nullable=False, index=True)
    email: Mapped[str] = mapped_column(String(255), unique=True, nullable=False, index=True)
    full_name: Mapped[Optional[str]] = mapped_column(String(255), nullable=True)
    is_active: Mapped[bool] = mapped_column(Boolean, default=True, nullable=False)


# Content Models
class Article(Base, TimestampMixin):
    """One version of a logical content item.

    All versions of the same item share ``article_number``.  Hierarchy is
    implicit: a row is a descendant of another when its ``url_path`` starts
    with the other's ``url_path`` followed by ``/``.
    """

    __tablename__ = "articles"

    id: Mapped[str] = mapped_column(
        String(36), primary_key=True, default=lambda: str(uuid.uuid4())
    )
    article_number: Mapped[int] = mapped_column(Integer, nullable=False, index=True)
    version_number: Mapped[int] = mapped_column(Integer, nullable=False, default=1)
    title: Mapped[str] = mapped_column(String(255), nullable=False)
    # casefolded title for duplicate checks; SQLite lower() only folds ASCII
    title_key: Mapped[str] = mapped_column(String(255), nullable=False, default="", index=True)
    url_path: Mapped[str] = mapped_column(String(1024), nullable=False, default="", index=True)
    article_type: Mapped[ArticleType] = mapped_column(
        Enum(ArticleType, values_callable=_enum_values),
        nullable=False,
        default=ArticleType.GENERAL,
    )
    blog_key: Mapped[Optional[str]] = mapped_column(String(1024), nullable=True, index=True)
    content: Mapped[str] = mapped_column(Text, nullable=False, default="")
    introduction: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    banner_image: Mapped[Optional[str]] = mapped_column(String(2048), nullable=True)
    published: Mapped[Optional[datetime]] = mapped_column(DateTime(timezone=True), nullable=True)
    status_code: Mapped[StatusCode] = mapped_column(
        Enum(StatusCode, values_callable=_enum_values),
        nullable=False,
        default=StatusCode.ACTIVE,
    )
    owner_user_id: Mapped[Optional[int]] = mapped_column(
        Integer, ForeignKey("users.id"), nullable=True
    )

    __table_args__ = (
        Index("ix_articles_number_version", "article_number", "version_number"),
        Index("ix_articles_blog_key_type", "blog_key", "article_type"),
    )

    @validates("title")
    def _fold_title(self, key: str, value: str) -> str:
        self.title_key = fold_title(value)
        return value

    def is_live(self, now: Optional[datetime] = None) -> bool:
        """Published with a publish time that is not in the future."""
        published = ensure_aware(self.published)
        if published is None:
            return False
        return published <= (now or datetime.now(timezone.utc))

    @property
    def is_deleted(self) -> bool:
        return self.status_code == StatusCode.DELETED

    def __repr__(self) -> str:
        return (
            f"Article(article_number={self.article_number!r}, "
            f"version={self.version_number!r}, url_path={self.url_path!r})"
        )


class Redirect(Base, TimestampMixin):
    """Maps a path that used to serve content to where it lives now."""

    __tablename__ = "redirects"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    old_path: Mapped[str] = mapped_column(String(1024), unique=True, nullable=False)
    new_path: Mapped[str] = mapped_column(String(1024), nullable=False, index=True)
    # inactive rows are kept for history; only active ones resolve
    is_active: Mapped[bool] = mapped_column(Boolean, default=True, nullable=False)
    created_by: Mapped[Optional[int]] = mapped_column(
        Integer, ForeignKey("users.id"), nullable=True
    )

    def __repr__(self) -> str:
        return f"Redirect({self.old_path!r} -> {self.new_path!r})"


class PublishedPage(Base, TimestampMixin):
    """Materialized rendering of the live version of one logical article."""

    __tablename__ = "published_pages"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    article_number: Mapped[int] = mapped_column(Integer, unique=True, nullable=False)
    article_id: Mapped[str] = mapped_column(String(36), ForeignKey("articles.id"), nullable=False)
    url_path: Mapped[str] = mapped_column(String(1024), nullable=False, index=True)
    title: Mapped[str] = mapped_column(String(255), nullable=False)
    html: Mapped[str] = mapped_column(Text, nullable=False, default="")
    published: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False)


class Setting(Base, TimestampMixin):
    """Named configuration value stored in the database."""

    __tablename__ = "settings"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    name: Mapped[str] = mapped_column(String(100), unique=True, nullable=False)
    value: Mapped[str] = mapped_column(Text, nullable=False, default="")
    group: Mapped[Optional[str]] = mapped_column(String(100), nullable=True)
    description: Mapped[Optional[str]] = mapped_column(String(500), nullable=True)
    is_required: Mapped[bool] = mapped_column(Boolean, default=False, nullable=False)
