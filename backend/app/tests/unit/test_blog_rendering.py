############################################################
#
# inkwell - Versioned Content Management Backend
#
# test_blog_rendering.py: Unit tests for the blog stream renderer
#
# Luke Sheneman
# Research Computing and Data Services (RCDS)
# Institute for Interdisciplinary Data Sciences (IIDS)
# University of Idaho
# sheneman@uidaho.edu
#
############################################################

"""Unit tests for the blog stream renderer."""

import pytest
from datetime import datetime, timezone

from backend.app.db.models import ArticleType, StatusCode
from backend.app.services.blog_rendering import BlogRenderingService, first_paragraph

JAN = datetime(2024, 1, 1, tzinfo=timezone.utc)
FEB = datetime(2024, 2, 1, tzinfo=timezone.utc)
MAR = datetime(2024, 3, 1, tzinfo=timezone.utc)


@pytest.fixture
def make_stream(make_article):
    async def _make():
        return await make_article(
            100, "Tech Blog", "tech-blog",
            article_type=ArticleType.BLOG_STREAM, blog_key="tech-blog",
            introduction="Notes from the lab", published=JAN,
        )
    return _make


@pytest.fixture
def make_post(make_article):
    async def _make(number, title, published, **kwargs):
        kwargs.setdefault("blog_key", "tech-blog")
        kwargs.setdefault("url_path", f"{kwargs['blog_key']}/{title.lower().replace(' ', '-')}")
        return await make_article(
            number, title, article_type=ArticleType.BLOG_POST, published=published, **kwargs
        )
    return _make


def test_first_paragraph():
    body = "# Heading\n\nFirst para *here* &amp; there.\n\nSecond."
    assert first_paragraph(body) == "First para here & there."


def test_first_paragraph_empty():
    assert first_paragraph("") == ""


class TestBlogRenderingService:
    """Tests for BlogRenderingService."""

    @pytest.mark.asyncio
    async def test_lists_live_posts_newest_first(self, db, make_stream, make_post, future):
        stream = await make_stream()
        await make_post(1, "Older", JAN)
        await make_post(2, "Newer", MAR)
        await make_post(3, "Draft", None)
        await make_post(4, "Scheduled", future)
        await make_post(5, "Removed", FEB, status_code=StatusCode.DELETED)
        await make_post(6, "Elsewhere", FEB, blog_key="other-blog")

        entries = await BlogRenderingService(db).get_stream_entries(stream)

        assert [e.title for e in entries] == ["Newer", "Older"]

    @pytest.mark.asyncio
    async def test_one_entry_per_article(self, db, make_stream, make_post):
        stream = await make_stream()
        await make_post(1, "Post", JAN, version_number=1)
        await make_post(1, "Post", FEB, version_number=2, introduction="latest")

        entries = await BlogRenderingService(db).get_stream_entries(stream)

        assert len(entries) == 1
        assert entries[0].introduction == "latest"

    @pytest.mark.asyncio
    async def test_limit(self, db, make_stream, make_post):
        stream = await make_stream()
        for n in range(1, 6):
            await make_post(n, f"Post {n}", datetime(2024, 1, n, tzinfo=timezone.utc))

        service = BlogRenderingService(db)
        service.max_entries = 3
        entries = await service.get_stream_entries(stream)

        assert [e.title for e in entries] == ["Post 5", "Post 4", "Post 3"]

    @pytest.mark.asyncio
    async def test_generate_html(self, db, make_stream, make_post):
        stream = await make_stream()
        await make_post(1, "Hello World", JAN, content="Body intro.\n\nMore.")
        await make_post(2, "<Tags>", FEB, url_path="tech-blog/tags", introduction="Set intro")

        html = await BlogRenderingService(db).generate_blog_stream_html(stream)

        assert 'class="stream-title">Tech Blog<' in html
        assert "Notes from the lab" in html
        assert 'href="/tech-blog/hello-world"' in html
        assert "Body intro." in html
        assert "Set intro" in html
        assert "&lt;Tags&gt;" in html
        assert html.index("&lt;Tags&gt;") < html.index("Hello World")

    @pytest.mark.asyncio
    async def test_generate_html_without_entries(self, db, make_stream):
        stream = await make_stream()

        html = await BlogRenderingService(db).generate_blog_stream_html(stream)

        assert "blog-items" in html
        assert "blog-item\"" not in html
