############################################################
#
# inkwell - Versioned Content Management Backend
#
# exceptions.py: Error taxonomy for content and title operations
#
# Luke Sheneman
# Research Computing and Data Services (RCDS)
# Institute for Interdisciplinary Data Sciences (IIDS)
# University of Idaho
# sheneman@uidaho.edu
#
############################################################

"""Exception types raised by the content services."""

from typing import Optional


class ContentError(Exception):
    """Base class for content-management errors."""


class TitleValidationError(ContentError):
    """A proposed title or slug cannot be used. Raised before any write."""


class SlugConflictError(TitleValidationError):
    """The new URL path already belongs to a different logical article."""

    def __init__(self, url_path: str, article_number: Optional[int] = None):
        self.url_path = url_path
        self.article_number = article_number
        super().__init__(f"The URL '{url_path}' is already in use by another article.")


class NotFoundError(ContentError):
    """The article or version an operation was invoked on does not exist."""


class PersistenceError(ContentError):
    """A content store write failed part-way through an operation.

    Batches committed before the failure are not rolled back.
    """


class RedirectCreationError(ContentError):
    """A redirect could not be written to the ledger."""

    def __init__(self, old_path: str, new_path: str, reason: str):
        self.old_path = old_path
        self.new_path = new_path
        self.reason = reason
        super().__init__(f"Redirect {old_path} -> {new_path} failed: {reason}")


class ReservedPathError(ContentError):
    """A system-required reserved path cannot be modified or removed."""
