############################################################
#
# inkwell - Versioned Content Management Backend
#
# titles.py: Title validation and the rename cascade for articles
#
# Luke Sheneman
# Research Computing and Data Services (RCDS)
# Institute for Interdisciplinary Data Sciences (IIDS)
# University of Idaho
# sheneman@uidaho.edu
#
############################################################

"""Title change service.

When an article's title changes its URL path is recomputed from the new
title and everything that hangs off the old path follows it:

- every other version of the article gets the new title and path,
- blog posts of a renamed blog stream are re-keyed and re-pathed,
- descendants of a renamed general page get the new path prefix,
- redirects are written from each old public path to its new one.

Hierarchy is purely textual: ``a/b`` is a child of ``a`` because its path
starts with ``a/``.  Nothing here takes a lock; two overlapping renames
running at the same time can interleave.
"""

from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Dict, List, Optional

from sqlalchemy.ext.asyncio import AsyncSession

from backend.app.core.events import (
    DomainEventDispatcher,
    RedirectCreatedEvent,
    TitleChangedEvent,
    get_dispatcher,
)
from backend.app.core.exceptions import RedirectCreationError, SlugConflictError
from backend.app.core.slugs import SlugService, get_slug_service
from backend.app.db import crud
from backend.app.db.models import Article, ArticleType
from backend.app.logging_config import get_logger
from backend.app.services.blog_rendering import BlogRenderingService
from backend.app.services.publishing import PublishingService
from backend.app.services.redirects import RedirectService
from backend.app.services.reserved_paths import ReservedPathService
from backend.app.settings import Settings, get_settings

logger = get_logger(__name__)

_BLOG_KINDS = (ArticleType.BLOG_POST, ArticleType.BLOG_STREAM)


@dataclass
class UrlChange:
    """One article whose public path moved."""
    article_number: int
    old_path: str
    new_path: str
    live: bool


@dataclass
class RedirectCreationResult:
    """Outcome of writing redirects for a rename."""
    success_count: int = 0
    skipped_count: int = 0
    failed: List[UrlChange] = field(default_factory=list)

    @property
    def all_succeeded(self) -> bool:
        return not self.failed

    @property
    def total_attempted(self) -> int:
        return self.success_count + len(self.failed)


@dataclass
class TitleChangeResult:
    """What a call to ``handle_title_change`` did."""
    changed: bool
    old_slug: str
    new_slug: str
    url_changes: List[UrlChange] = field(default_factory=list)
    redirects: RedirectCreationResult = field(default_factory=RedirectCreationResult)


class TitleChangeService:
    """Validates titles and carries a title change through the content tree."""

    def __init__(
        self,
        db: AsyncSession,
        slugs: Optional[SlugService] = None,
        redirects: Optional[RedirectService] = None,
        publishing: Optional[PublishingService] = None,
        reserved_paths: Optional[ReservedPathService] = None,
        blog_rendering: Optional[BlogRenderingService] = None,
        dispatcher: Optional[DomainEventDispatcher] = None,
        settings: Optional[Settings] = None,
    ):
        self.db = db
        self.slugs = slugs or get_slug_service()
        self.redirects = redirects or RedirectService(db, self.slugs)
        self.publishing = publishing or PublishingService(db)
        self.reserved_paths = reserved_paths or ReservedPathService(db)
        self.blog_rendering = blog_rendering or BlogRenderingService(db)
        self.dispatcher = dispatcher or get_dispatcher()
        self.settings = settings or get_settings()

    async def validate_title(self, title: Optional[str], article_number: Optional[int] = None) -> bool:
        """Whether ``title`` may be used by the article ``article_number``.

        A title is rejected when it is blank, collides with a reserved
        path, or is already used by a different article.  Passing the
        article's own number lets it keep its current title.
        """
        if title is None or not title.strip():
            return False

        with self.db.no_autoflush:
            if await self.reserved_paths.is_reserved(title):
                return False
            existing = await crud.find_by_title(self.db, title, exclude_article_number=article_number)

        return existing is None

    def build_article_url(self, article: Article) -> str:
        """URL path an article should have for its current title."""
        if article.article_type == ArticleType.BLOG_POST:
            return self.slugs.normalize(article.title, article.blog_key)
        return self.slugs.normalize(article.title)

    async def handle_title_change(
        self,
        article: Article,
        old_title: str,
        old_url_path: Optional[str] = None,
        acting_user_id: Optional[int] = None,
    ) -> TitleChangeResult:
        """Propagate a title change on ``article`` (its new title already set).

        Raises SlugConflictError before writing anything when the new path
        belongs to another article.  Store failures part-way through raise
        PersistenceError; batches committed before the failure stay
        committed.
        """
        if old_url_path:
            old_slug = old_url_path
        elif article.article_type == ArticleType.BLOG_POST:
            old_slug = self.slugs.normalize(old_title, article.blog_key)
        else:
            old_slug = self.slugs.normalize(old_title)
        new_slug = self.build_article_url(article)

        if old_slug.lower() == new_slug.lower() and article.url_path:
            logger.debug("title_change_noop", article_number=article.article_number, url_path=new_slug)
            return TitleChangeResult(changed=False, old_slug=old_slug, new_slug=new_slug)

        now = datetime.now(timezone.utc)
        root = self.settings.root_url_path

        logger.info(
            "title_change_started",
            article_number=article.article_number,
            old_title=old_title,
            new_title=article.title,
            old_slug=old_slug,
            new_slug=new_slug,
        )

        if article.url_path == root:
            await crud.commit_changes(self.db)
            await self._sync_versions(article)
            if article.is_live(now):
                await self.publishing.publish(article)
            await self.dispatcher.dispatch(
                TitleChangedEvent(article.article_number, old_title, article.title)
            )
            logger.info("title_change_completed", article_number=article.article_number, url_path=root)
            return TitleChangeResult(changed=True, old_slug=root, new_slug=root)

        with self.db.no_autoflush:
            holder = await crud.find_by_url_path(
                self.db, new_slug, exclude_article_number=article.article_number
            )
        if holder is not None:
            logger.warning(
                "title_change_conflict",
                article_number=article.article_number,
                url_path=new_slug,
                held_by=holder.article_number,
            )
            raise SlugConflictError(new_slug, holder.article_number)

        changes: Dict[str, UrlChange] = {
            old_slug: UrlChange(article.article_number, old_slug, new_slug, article.is_live(now))
        }

        article.url_path = new_slug
        if article.article_type == ArticleType.BLOG_STREAM:
            article.blog_key = new_slug
        await crud.commit_changes(self.db)

        if article.article_type == ArticleType.BLOG_STREAM:
            await self._cascade_blog_stream(article, old_slug, new_slug, changes, now)
        elif article.article_type == ArticleType.GENERAL:
            await self._cascade_children(article, old_slug, new_slug, changes, now)

        await self._sync_versions(article)

        if article.is_live(now):
            await self.publishing.publish(article)

        await crud.commit_changes(self.db)

        # A failed redirect rolls the session back and expires loaded rows
        article_number = article.article_number
        new_title = article.title
        user_id = acting_user_id if acting_user_id is not None else article.owner_user_id
        redirects = await self._create_redirects(list(changes.values()), user_id)
        if redirects.failed:
            await self.db.refresh(article)

        await self.dispatcher.dispatch(
            TitleChangedEvent(article_number, old_title, new_title)
        )

        logger.info(
            "title_change_completed",
            article_number=article_number,
            url_path=new_slug,
            moved=len(changes),
            redirects_created=redirects.success_count,
            redirects_failed=len(redirects.failed),
        )
        return TitleChangeResult(
            changed=True,
            old_slug=old_slug,
            new_slug=new_slug,
            url_changes=list(changes.values()),
            redirects=redirects,
        )

    async def _cascade_blog_stream(
        self,
        stream: Article,
        old_slug: str,
        new_slug: str,
        changes: Dict[str, UrlChange],
        now: datetime,
    ) -> None:
        rows = await crud.get_articles_by_blog_key(self.db, old_slug, ArticleType.BLOG_POST)

        for post in _canonical_rows(rows):
            old_path = post.url_path
            post.blog_key = new_slug
            post.url_path = self.slugs.normalize(post.title, new_slug)
            if post.url_path != old_path:
                changes.setdefault(
                    old_path,
                    UrlChange(post.article_number, old_path, post.url_path, post.is_live(now)),
                )

            await self._sync_versions(post)
            if post.is_live(now):
                await self.publishing.publish(post)

        stream.content = await self.blog_rendering.generate_blog_stream_html(stream)
        await crud.commit_changes(self.db)

    async def _cascade_children(
        self,
        parent: Article,
        old_slug: str,
        new_slug: str,
        changes: Dict[str, UrlChange],
        now: datetime,
    ) -> None:
        prefix = old_slug + "/"
        rows = await crud.get_descendants(self.db, prefix, exclude_article_number=parent.article_number)

        for child in _canonical_rows(rows):
            old_path = child.url_path
            child.url_path = new_slug + old_path[len(old_slug):]
            if child.url_path != old_path:
                changes.setdefault(
                    old_path,
                    UrlChange(child.article_number, old_path, child.url_path, child.is_live(now)),
                )

            await self._sync_versions(child)
            if child.is_live(now):
                await self.publishing.publish(child)

        await crud.commit_changes(self.db)

    async def _sync_versions(self, canonical: Article) -> int:
        """Copy title and path from ``canonical`` onto its other versions."""
        versions = await crud.get_versions(
            self.db, canonical.article_number, exclude_id=canonical.id
        )
        batch_size = self.settings.version_batch_size
        pending = 0

        for version in versions:
            version.title = canonical.title
            version.url_path = canonical.url_path
            if canonical.article_type in _BLOG_KINDS:
                version.blog_key = canonical.blog_key
            pending += 1

            if version.is_live():
                await crud.commit_changes(self.db)
                pending = 0
                await self.publishing.publish(version)
            elif pending >= batch_size:
                await crud.commit_changes(self.db)
                pending = 0

        if pending:
            await crud.commit_changes(self.db)

        if versions:
            logger.debug(
                "versions_synchronized",
                article_number=canonical.article_number,
                count=len(versions),
            )
        return len(versions)

    async def _create_redirects(
        self, changes: List[UrlChange], user_id: Optional[int]
    ) -> RedirectCreationResult:
        result = RedirectCreationResult()

        for change in changes:
            if not change.live:
                result.skipped_count += 1
                continue
            try:
                redirect = await self.redirects.create_or_update_redirect(
                    change.old_path, change.new_path, user_id
                )
            except RedirectCreationError as exc:
                logger.error(
                    "redirect_failed",
                    article_number=change.article_number,
                    old_path=change.old_path,
                    new_path=change.new_path,
                    error=exc.reason,
                )
                result.failed.append(change)
                continue

            if redirect is None:
                result.skipped_count += 1
                continue

            result.success_count += 1
            await self.dispatcher.dispatch(
                RedirectCreatedEvent(redirect.old_path, redirect.new_path)
            )

        return result


def _canonical_rows(rows: List[Article]) -> List[Article]:
    """Highest version of each article number, in first-seen order."""
    canonical: Dict[int, Article] = {}
    for row in rows:
        current = canonical.get(row.article_number)
        if current is None or row.version_number > current.version_number:
            canonical[row.article_number] = row
    return list(canonical.values())
