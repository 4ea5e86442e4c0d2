############################################################
#
# inkwell - Versioned Content Management Backend
#
# redirects.py: Redirect ledger for moved content paths
#
# Luke Sheneman
# Research Computing and Data Services (RCDS)
# Institute for Interdisciplinary Data Sciences (IIDS)
# University of Idaho
# sheneman@uidaho.edu
#
############################################################

"""Redirect ledger.

One redirect row per source path.  When a path moves again, redirects that
pointed at the previous location are repointed at the new one so visitors
never follow a chain.  Rows are never deleted: a path that serves content
again has its redirect deactivated, and a later move reactivates it.
"""

from typing import Optional

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from backend.app.core.exceptions import RedirectCreationError
from backend.app.core.slugs import SlugService, get_slug_service
from backend.app.db import crud
from backend.app.db.models import Redirect
from backend.app.logging_config import get_logger
from backend.app.settings import get_settings

logger = get_logger(__name__)


class RedirectService:
    """Idempotent upsert store of old path -> new path."""

    def __init__(self, db: AsyncSession, slugs: Optional[SlugService] = None):
        self.db = db
        self.slugs = slugs or get_slug_service()
        self.root_path = get_settings().root_url_path

    async def create_or_update_redirect(
        self,
        old_path: str,
        new_path: str,
        user_id: Optional[int] = None,
    ) -> Optional[Redirect]:
        """Point ``old_path`` at ``new_path``.

        Returns None without writing when the source is the root page or
        the two paths normalize to the same slug.
        """
        old_path = self.slugs.normalize(old_path)
        new_path = self.slugs.normalize(new_path)

        if not old_path or not new_path or old_path == self.root_path:
            return None
        if old_path == new_path:
            return None

        try:
            redirect = await crud.get_redirect_by_old_path(self.db, old_path)
            if redirect is None:
                redirect = Redirect(old_path=old_path, new_path=new_path, created_by=user_id)
                self.db.add(redirect)
            else:
                redirect.new_path = new_path
                redirect.is_active = True

            # Collapse chains: anything that led to old_path now leads to new_path
            for upstream in await crud.get_redirects_targeting(self.db, old_path):
                if upstream.old_path != new_path:
                    upstream.new_path = new_path

            # new_path serves content again, so it stops redirecting
            stale = await crud.get_redirect_by_old_path(self.db, new_path)
            if stale is not None and stale.is_active:
                stale.is_active = False

            await self.db.commit()
        except SQLAlchemyError as exc:
            # Everything the caller wrote before this call is already committed
            await self.db.rollback()
            raise RedirectCreationError(old_path, new_path, str(exc)) from exc

        logger.info("redirect_saved", old_path=old_path, new_path=new_path, user_id=user_id)
        return redirect

    async def resolve(self, path: str) -> Optional[str]:
        """Get the target for ``path``, or None if it is not redirected."""
        redirect = await crud.get_redirect_by_old_path(self.db, self.slugs.normalize(path))
        if redirect is None or not redirect.is_active:
            return None
        return redirect.new_path
