############################################################
#
# inkwell - Versioned Content Management Backend
#
# slugs.py: URL slug normalization for article titles
#
# Luke Sheneman
# Research Computing and Data Services (RCDS)
# Institute for Interdisciplinary Data Sciences (IIDS)
# University of Idaho
# sheneman@uidaho.edu
#
############################################################

"""URL slug normalization.

A slug is built from free text by lowercasing it, stripping diacritics and
mapping every character outside ``[a-z0-9/]`` to a single ``-``.  Slashes
survive so that hierarchical paths (``docs/getting-started``) can be
normalized as a whole.  Apart from the bare dot-segments ``.`` and ``..``
the function is idempotent: ``normalize(normalize(x)) == normalize(x)``.
"""

import re
import unicodedata
from typing import Optional

SEPARATOR = "-"

_COMBINING_CATEGORIES = {"Mn", "Mc", "Me"}
_REPEATED_SEPARATOR = re.compile(f"{re.escape(SEPARATOR)}{{2,}}")
_TRIM_CHARS = SEPARATOR + "/._~"


class SlugService:
    """Maps titles to URL-safe path segments."""

    def normalize(self, text: Optional[str], parent_slug: Optional[str] = None) -> str:
        """Normalize ``text`` to a slug, optionally qualified as ``parent_slug/slug``."""
        if text is None or not text.strip():
            return ""

        decomposed = unicodedata.normalize("NFKD", text.strip().lower())

        chars = []
        for ch in decomposed:
            if unicodedata.category(ch) in _COMBINING_CATEGORIES:
                continue
            if ("a" <= ch <= "z") or ("0" <= ch <= "9") or ch == "/":
                chars.append(ch)
            else:
                chars.append(SEPARATOR)

        # "." and ".." are kept as separators so they never form a dot-segment
        if text.strip() in (".", ".."):
            return "".join(chars)

        slug = _REPEATED_SEPARATOR.sub(SEPARATOR, "".join(chars)).strip(_TRIM_CHARS)
        if not slug:
            return ""

        if parent_slug and parent_slug.strip():
            return f"{parent_slug.strip()}/{slug}"
        return slug


_slug_service = SlugService()


def get_slug_service() -> SlugService:
    """Get the shared slug service."""
    return _slug_service
