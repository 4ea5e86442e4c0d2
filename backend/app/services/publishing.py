############################################################
#
# inkwell - Versioned Content Management Backend
#
# publishing.py: Materializes the public rendering of article versions
#
# Luke Sheneman
# Research Computing and Data Services (RCDS)
# Institute for Interdisciplinary Data Sciences (IIDS)
# University of Idaho
# sheneman@uidaho.edu
#
############################################################

"""Publishing service."""

from datetime import datetime, timezone
from typing import Optional

import markdown
from sqlalchemy.ext.asyncio import AsyncSession

from backend.app.db import crud
from backend.app.db.models import Article, ArticleType, PublishedPage
from backend.app.logging_config import get_logger

logger = get_logger(__name__)


def render_markdown(text: str) -> str:
    """Render markdown to HTML with syntax highlighting."""
    return markdown.markdown(
        text or "",
        extensions=["fenced_code", "codehilite", "tables", "toc"],
        extension_configs={
            "codehilite": {"css_class": "codehilite", "guess_lang": False},
        },
    )


class PublishingService:
    """Keeps one published page per logical article in sync with a version."""

    def __init__(self, db: AsyncSession):
        self.db = db

    async def publish(self, article: Article, when: Optional[datetime] = None) -> PublishedPage:
        """Render ``article`` and make it the published page for its article number."""
        if article.published is None:
            article.published = when or datetime.now(timezone.utc)

        # Blog stream bodies are generated HTML already
        if article.article_type == ArticleType.BLOG_STREAM:
            html = article.content or ""
        else:
            html = render_markdown(article.content)

        page = await crud.get_published_page(self.db, article.article_number)
        if page is None:
            page = PublishedPage(article_number=article.article_number)
            self.db.add(page)

        page.article_id = article.id
        page.url_path = article.url_path
        page.title = article.title
        page.html = html
        page.published = article.published

        await crud.commit_changes(self.db)
        logger.info(
            "article_published",
            article_number=article.article_number,
            version=article.version_number,
            url_path=article.url_path,
        )
        return page

    async def unpublish(self, article: Article) -> None:
        """Withdraw the published page and return ``article`` to draft."""
        article.published = None
        removed = await crud.delete_published_page(self.db, article.article_number)
        await crud.commit_changes(self.db)
        logger.info("article_unpublished", article_number=article.article_number, removed=removed)
