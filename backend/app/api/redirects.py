############################################################
#
# inkwell - Versioned Content Management Backend
#
# redirects.py: Redirect lookup endpoint
#
# Luke Sheneman
# Research Computing and Data Services (RCDS)
# Institute for Interdisciplinary Data Sciences (IIDS)
# University of Idaho
# sheneman@uidaho.edu
#
############################################################

"""Redirect API endpoints."""

from fastapi import APIRouter, Depends, HTTPException, Query, status
from pydantic import BaseModel
from sqlalchemy.ext.asyncio import AsyncSession

from backend.app.db.session import get_async_db
from backend.app.services.redirects import RedirectService

router = APIRouter()


class RedirectResolution(BaseModel):
    """Where a moved path now lives."""
    path: str
    target: str


@router.get("/resolve", response_model=RedirectResolution)
async def resolve_redirect(
    path: str = Query(..., min_length=1),
    db: AsyncSession = Depends(get_async_db),
):
    """Look up the redirect target for a path."""
    target = await RedirectService(db).resolve(path)
    if target is None:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=f"No redirect for '{path}'",
        )
    return RedirectResolution(path=path, target=target)
