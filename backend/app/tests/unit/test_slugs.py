############################################################
#
# inkwell - Versioned Content Management Backend
#
# test_slugs.py: Unit tests for slug normalization
#
# Luke Sheneman
# Research Computing and Data Services (RCDS)
# Institute for Interdisciplinary Data Sciences (IIDS)
# University of Idaho
# sheneman@uidaho.edu
#
############################################################

"""Unit tests for slug normalization."""

import pytest

from backend.app.core.slugs import SlugService, get_slug_service


@pytest.fixture
def slugs():
    return SlugService()


class TestNormalize:
    """Tests for SlugService.normalize."""

    @pytest.mark.parametrize(
        "text,expected",
        [
            ("Hello World", "hello-world"),
            ("  Old Name  ", "old-name"),
            ("Café Déjà Vu", "cafe-deja-vu"),
            ("C# & .NET", "c-net"),
            ("--Hello--", "hello"),
            ("Getting Started: Part 2", "getting-started-part-2"),
            ("docs/Getting Started", "docs/getting-started"),
        ],
    )
    def test_normalize(self, slugs, text, expected):
        assert slugs.normalize(text) == expected

    @pytest.mark.parametrize("text", [None, "", "   ", "!!!", "~._"])
    def test_empty_result(self, slugs, text):
        """Blank input and input with nothing sluggable yield an empty slug."""
        assert slugs.normalize(text) == ""

    @pytest.mark.parametrize("text,expected", [(".", "-"), ("..", "--"), (" .. ", "--")])
    def test_dot_segments(self, slugs, text, expected):
        """Bare dot-segments become separators and are not collapsed."""
        assert slugs.normalize(text) == expected

    def test_dots_inside_text_are_collapsed(self, slugs):
        assert slugs.normalize("...") == ""
        assert slugs.normalize("v1..2") == "v1-2"

    def test_idempotent(self, slugs):
        for text in ["Hello World", "Café Déjà Vu", "tech-blog/My Post", "A  --  B"]:
            once = slugs.normalize(text)
            assert slugs.normalize(once) == once

    def test_parent_slug(self, slugs):
        assert slugs.normalize("My Post", "tech-blog") == "tech-blog/my-post"

    def test_blank_parent_is_ignored(self, slugs):
        assert slugs.normalize("My Post", "  ") == "my-post"
        assert slugs.normalize("My Post", None) == "my-post"

    def test_parent_with_empty_slug(self, slugs):
        """An unsluggable title does not produce a dangling parent path."""
        assert slugs.normalize("???", "tech-blog") == ""

    def test_shared_instance(self):
        assert get_slug_service() is get_slug_service()
