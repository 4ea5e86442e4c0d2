############################################################
#
# inkwell - Versioned Content Management Backend
#
# reserved_paths.py: Registry of URL paths content may not claim
#
# Luke Sheneman
# Research Computing and Data Services (RCDS)
# Institute for Interdisciplinary Data Sciences (IIDS)
# University of Idaho
# sheneman@uidaho.edu
#
############################################################

"""Reserved path registry.

Paths are stored as a JSON list in the ``ReservedPaths`` setting row.  A
path ending in ``*`` reserves every path starting with the text before the
asterisk; any other path is an exact (case-insensitive) match.
"""

from typing import List, Optional, Tuple

from pydantic import BaseModel, TypeAdapter
from sqlalchemy.ext.asyncio import AsyncSession

from backend.app.core.exceptions import ReservedPathError
from backend.app.db import crud
from backend.app.db.models import Setting
from backend.app.logging_config import get_logger

logger = get_logger(__name__)

RESERVED_PATHS_SETTING = "ReservedPaths"


class ReservedPath(BaseModel):
    """A route prefix or exact path owned by the application."""
    path: str
    system_required: bool = False
    notes: str = ""

    @property
    def is_wildcard(self) -> bool:
        return self.path.endswith("*")

    def matches(self, value: str) -> bool:
        """Whether ``value`` collides with this reservation (case-insensitive)."""
        candidate = value.strip().lower()
        reserved = self.path.lower()
        if self.is_wildcard:
            return candidate.startswith(reserved.rstrip("*"))
        return candidate == reserved


_reserved_list = TypeAdapter(List[ReservedPath])

DEFAULT_RESERVED_PATHS: List[ReservedPath] = [
    ReservedPath(path="root", system_required=True, notes="Home page alias"),
    # controllers
    ReservedPath(path="blog/*", system_required=True, notes="Blog root"),
    ReservedPath(path="editor/*", system_required=True, notes="Editor page alias"),
    ReservedPath(path="home/*", system_required=True, notes="Home page alias"),
    ReservedPath(path="layouts/*", system_required=True, notes="Layouts page alias"),
    ReservedPath(path="filemanager/*", system_required=True, notes="File Manager page alias"),
    ReservedPath(path="pub/*", system_required=True, notes="Public assets"),
    ReservedPath(path="roles/*", system_required=True, notes="Roles management"),
    ReservedPath(path="templates/*", system_required=True, notes="Templates management"),
    ReservedPath(path="users/*", system_required=True, notes="User management"),
    ReservedPath(path="admin", system_required=True, notes="Admin path"),
    ReservedPath(path="account", system_required=True, notes="Identity path"),
    ReservedPath(path="login", system_required=True, notes="Identity path"),
    ReservedPath(path="logout", system_required=True, notes="Identity path"),
    ReservedPath(path="register", system_required=True, notes="Identity path"),
    ReservedPath(path="blog/rss", system_required=True, notes="Blog RSS"),
    ReservedPath(path="api", system_required=True, notes="API route"),
    ReservedPath(path="rss", system_required=True, notes="RSS"),
    ReservedPath(path="sitemap.xml", system_required=True, notes="Sitemap"),
    ReservedPath(path="toc.json", system_required=True, notes="Table of contents"),
]


class ReservedPathService:
    """Reads and maintains the reserved path list."""

    def __init__(self, db: AsyncSession):
        self.db = db

    async def _load(self) -> Tuple[Optional[Setting], List[ReservedPath]]:
        # Reads never write: the defaults are only persisted on first change
        setting = await crud.get_setting_by_name(self.db, RESERVED_PATHS_SETTING)
        if setting is None:
            return None, [p.model_copy() for p in DEFAULT_RESERVED_PATHS]
        return setting, _reserved_list.validate_json(setting.value)

    async def _save(self, setting: Optional[Setting], paths: List[ReservedPath]) -> None:
        if setting is None:
            setting = Setting(
                name=RESERVED_PATHS_SETTING,
                group="System",
                description="Reserved paths that cannot be used for articles, pages, or other content.",
                is_required=True,
            )
            self.db.add(setting)
        setting.value = _reserved_list.dump_json(paths).decode()
        await crud.commit_changes(self.db)
        logger.info("reserved_paths_saved", count=len(paths))

    async def get_reserved_paths(self) -> List[ReservedPath]:
        """Get the reserved paths (the defaults until the list is first changed)."""
        _, paths = await self._load()
        return paths

    async def is_reserved(self, path: str) -> bool:
        """Whether ``path`` collides with any reservation."""
        return any(r.matches(path) for r in await self.get_reserved_paths())

    async def upsert(self, reserved: ReservedPath) -> None:
        """Add a reservation or update the notes of an existing one."""
        setting, paths = await self._load()
        existing = next((p for p in paths if p.path.lower() == reserved.path.lower()), None)

        if existing is None:
            paths.append(reserved)
        elif existing.system_required:
            raise ReservedPathError(f"Cannot update system required path '{existing.path}'.")
        else:
            existing.notes = reserved.notes

        await self._save(setting, paths)

    async def remove(self, path: str) -> bool:
        """Remove a reservation. Returns False if it did not exist."""
        setting, paths = await self._load()
        existing = next((p for p in paths if p.path.lower() == path.lower()), None)
        if existing is None:
            return False
        if existing.system_required:
            raise ReservedPathError(f"Cannot remove system required path '{existing.path}'.")

        paths.remove(existing)
        await self._save(setting, paths)
        return True
