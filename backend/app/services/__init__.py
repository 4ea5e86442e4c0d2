############################################################
#
# inkwell - Versioned Content Management Backend
#
# __init__.py: Services package exports
#
# Luke Sheneman
# Research Computing and Data Services (RCDS)
# Institute for Interdisciplinary Data Sciences (IIDS)
# University of Idaho
# sheneman@uidaho.edu
#
############################################################

"""Services for Inkwell."""

from backend.app.services.blog_rendering import BlogRenderingService
from backend.app.services.publishing import PublishingService
from backend.app.services.redirects import RedirectService
from backend.app.services.reserved_paths import ReservedPathService
from backend.app.services.titles import TitleChangeService

__all__ = [
    "BlogRenderingService",
    "PublishingService",
    "RedirectService",
    "ReservedPathService",
    "TitleChangeService",
]
