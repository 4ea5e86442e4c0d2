############################################################
#
# inkwell - Versioned Content Management Backend
#
# __init__.py: API endpoints package and router configuration
#
# Luke Sheneman
# Research Computing and Data Services (RCDS)
# Institute for Interdisciplinary Data Sciences (IIDS)
# University of Idaho
# sheneman@uidaho.edu
#
############################################################

"""API endpoints for Inkwell."""

from fastapi import APIRouter

from backend.app.api.articles import router as articles_router
from backend.app.api.health import router as health_router
from backend.app.api.redirects import router as redirects_router

# Create main API router
api_router = APIRouter()

# Include all sub-routers
api_router.include_router(health_router)
api_router.include_router(articles_router, prefix="/api/articles", tags=["articles"])
api_router.include_router(redirects_router, prefix="/api/redirects", tags=["redirects"])

__all__ = ["api_router"]
