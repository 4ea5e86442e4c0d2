############################################################
#
# inkwell - Versioned Content Management Backend
#
# articles.py: Article title validation and rename endpoints
#
# Luke Sheneman
# Research Computing and Data Services (RCDS)
# Institute for Interdisciplinary Data Sciences (IIDS)
# University of Idaho
# sheneman@uidaho.edu
#
############################################################

"""Article API endpoints."""

from typing import List, Optional

from fastapi import APIRouter, Depends, HTTPException, Query, status
from pydantic import BaseModel, Field
from sqlalchemy.ext.asyncio import AsyncSession

from backend.app.core.exceptions import PersistenceError, SlugConflictError
from backend.app.db import crud
from backend.app.db.session import get_async_db
from backend.app.logging_config import get_logger
from backend.app.services.titles import TitleChangeService

logger = get_logger(__name__)
router = APIRouter()


# Request/Response models
class TitleUpdateRequest(BaseModel):
    """Request to rename an article."""
    title: str = Field(..., min_length=1, max_length=255)
    user_id: Optional[int] = None


class TitleValidationResponse(BaseModel):
    """Whether a title may be used."""
    title: str
    available: bool


class UrlChangeResponse(BaseModel):
    """A public path that moved."""
    article_number: int
    old_path: str
    new_path: str
    live: bool

    class Config:
        from_attributes = True


class RedirectSummary(BaseModel):
    """Redirect outcome of a rename."""
    success_count: int
    skipped_count: int
    failed: List[UrlChangeResponse]
    all_succeeded: bool
    total_attempted: int

    class Config:
        from_attributes = True


class TitleChangeResponse(BaseModel):
    """Result of a rename."""
    changed: bool
    old_slug: str
    new_slug: str
    url_changes: List[UrlChangeResponse]
    redirects: RedirectSummary

    class Config:
        from_attributes = True


def get_title_service(db: AsyncSession = Depends(get_async_db)) -> TitleChangeService:
    """Build the title service on the request's session."""
    return TitleChangeService(db)


@router.get("/validate-title", response_model=TitleValidationResponse)
async def validate_title(
    title: str = Query(...),
    article_number: Optional[int] = Query(None),
    service: TitleChangeService = Depends(get_title_service),
):
    """Check whether a title is free for the given article."""
    available = await service.validate_title(title, article_number)
    return TitleValidationResponse(title=title, available=available)


@router.put("/{article_number}/title", response_model=TitleChangeResponse)
async def update_title(
    article_number: int,
    request: TitleUpdateRequest,
    service: TitleChangeService = Depends(get_title_service),
):
    """Rename an article and carry the new path through its dependents."""
    db = service.db
    article = await crud.get_latest_version(db, article_number)
    if not article:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=f"Article {article_number} not found",
        )

    if not await service.validate_title(request.title, article_number):
        raise HTTPException(
            status_code=status.HTTP_409_CONFLICT,
            detail=f"The title '{request.title}' is reserved or already in use.",
        )

    old_title = article.title
    old_url_path = article.url_path

    try:
        article.title = request.title.strip()
        await crud.commit_changes(db)
        result = await service.handle_title_change(
            article,
            old_title,
            old_url_path=old_url_path,
            acting_user_id=request.user_id,
        )
    except SlugConflictError as e:
        # The new title was committed before the conflict was found
        article.title = old_title
        await crud.commit_changes(db)
        raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail=str(e))
    except PersistenceError as e:
        logger.error("title_update_failed", article_number=article_number, error=str(e))
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Failed to save the title change",
        )

    return TitleChangeResponse.model_validate(result)
