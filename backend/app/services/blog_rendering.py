############################################################
#
# inkwell - Versioned Content Management Backend
#
# blog_rendering.py: Generates the aggregated listing of a blog stream
#
# Luke Sheneman
# Research Computing and Data Services (RCDS)
# Institute for Interdisciplinary Data Sciences (IIDS)
# University of Idaho
# sheneman@uidaho.edu
#
############################################################

"""Blog stream listing renderer."""

import html
import os
import re
from dataclasses import dataclass
from typing import Dict, List, Optional

from jinja2 import Environment, FileSystemLoader, select_autoescape
from sqlalchemy.ext.asyncio import AsyncSession

from backend.app.db import crud
from backend.app.db.models import Article, ensure_aware
from backend.app.logging_config import get_logger
from backend.app.services.publishing import render_markdown
from backend.app.settings import get_settings

logger = get_logger(__name__)

templates_path = os.path.join(os.path.dirname(__file__), "templates")
_env = Environment(
    loader=FileSystemLoader(templates_path),
    autoescape=select_autoescape(["html"]),
    trim_blocks=True,
    lstrip_blocks=True,
)

_FIRST_PARAGRAPH = re.compile(r"<p>(.*?)</p>", re.DOTALL)
_TAG = re.compile(r"<[^>]+>")


@dataclass
class BlogEntry:
    """Listing row for one blog post."""
    title: str
    url_path: str
    intro: str
    banner_image: Optional[str] = None


def first_paragraph(body: str) -> str:
    """Plain text of the first paragraph of a markdown body."""
    match = _FIRST_PARAGRAPH.search(render_markdown(body))
    if not match:
        return ""
    return html.unescape(_TAG.sub("", match.group(1))).strip()


class BlogRenderingService:
    """Renders the HTML listing stored on a blog stream article."""

    def __init__(self, db: AsyncSession):
        self.db = db
        self.max_entries = get_settings().blog_stream_max_entries

    async def get_stream_entries(self, stream: Article) -> List[Article]:
        """Live posts of ``stream``, one per article number, newest first."""
        rows = await crud.get_live_blog_entries(
            self.db, stream.blog_key or stream.url_path, exclude_article_number=stream.article_number
        )

        latest: Dict[int, Article] = {}
        for row in rows:
            current = latest.get(row.article_number)
            if current is None or ensure_aware(row.published) > ensure_aware(current.published):
                latest[row.article_number] = row

        ordered = sorted(latest.values(), key=lambda a: ensure_aware(a.published), reverse=True)
        return ordered[: self.max_entries]

    async def generate_blog_stream_html(self, stream: Article) -> str:
        """Render the listing for ``stream`` from its current entries."""
        entries = [
            BlogEntry(
                title=a.title,
                url_path=a.url_path,
                intro=a.introduction or first_paragraph(a.content),
                banner_image=a.banner_image,
            )
            for a in await self.get_stream_entries(stream)
        ]

        template = _env.get_template("blog_stream.html")
        rendered = template.render(stream=stream, entries=entries)
        logger.debug("blog_stream_rendered", blog_key=stream.blog_key, entries=len(entries))
        return rendered
