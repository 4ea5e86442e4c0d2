############################################################
#
# inkwell - Versioned Content Management Backend
#
# test_reserved_paths.py: Unit tests for the reserved path registry
#
# Luke Sheneman
# Research Computing and Data Services (RCDS)
# Institute for Interdisciplinary Data Sciences (IIDS)
# University of Idaho
# sheneman@uidaho.edu
#
############################################################

"""Unit tests for the reserved path registry."""

import pytest

from backend.app.core.exceptions import ReservedPathError
from backend.app.db import crud
from backend.app.services.reserved_paths import (
    DEFAULT_RESERVED_PATHS,
    RESERVED_PATHS_SETTING,
    ReservedPath,
    ReservedPathService,
)


class TestReservedPathModel:
    """Tests for ReservedPath matching."""

    def test_exact_match_is_case_insensitive(self):
        reserved = ReservedPath(path="admin")
        assert reserved.matches("Admin")
        assert reserved.matches(" ADMIN ")
        assert not reserved.matches("administrator")

    def test_wildcard_matches_prefix(self):
        reserved = ReservedPath(path="blog/*")
        assert reserved.is_wildcard
        assert reserved.matches("blog/anything")
        assert reserved.matches("Blog/")
        assert not reserved.matches("blogger")


class TestReservedPathService:
    """Tests for ReservedPathService."""

    @pytest.mark.asyncio
    async def test_defaults_without_writing(self, db):
        service = ReservedPathService(db)

        paths = await service.get_reserved_paths()

        assert [p.path for p in paths] == [p.path for p in DEFAULT_RESERVED_PATHS]
        assert await crud.get_setting_by_name(db, RESERVED_PATHS_SETTING) is None

    @pytest.mark.asyncio
    @pytest.mark.parametrize("path", ["root", "admin", "Login", "sitemap.xml", "editor/page", "api"])
    async def test_is_reserved(self, db, path):
        assert await ReservedPathService(db).is_reserved(path)

    @pytest.mark.asyncio
    @pytest.mark.parametrize("path", ["about", "documentation", "administrator", "blogger"])
    async def test_is_not_reserved(self, db, path):
        assert not await ReservedPathService(db).is_reserved(path)

    @pytest.mark.asyncio
    async def test_upsert_persists(self, db):
        service = ReservedPathService(db)

        await service.upsert(ReservedPath(path="events/*", notes="Event calendar"))

        assert await service.is_reserved("events/2026")
        setting = await crud.get_setting_by_name(db, RESERVED_PATHS_SETTING)
        assert setting is not None
        assert "events/*" in setting.value
        # the defaults were saved along with the new entry
        assert await service.is_reserved("admin")

    @pytest.mark.asyncio
    async def test_upsert_updates_notes(self, db):
        service = ReservedPathService(db)
        await service.upsert(ReservedPath(path="events", notes="first"))
        await service.upsert(ReservedPath(path="EVENTS", notes="second"))

        matching = [p for p in await service.get_reserved_paths() if p.path.lower() == "events"]
        assert len(matching) == 1
        assert matching[0].notes == "second"

    @pytest.mark.asyncio
    async def test_system_required_cannot_change(self, db):
        service = ReservedPathService(db)

        with pytest.raises(ReservedPathError):
            await service.upsert(ReservedPath(path="admin", notes="mine now"))
        with pytest.raises(ReservedPathError):
            await service.remove("root")

    @pytest.mark.asyncio
    async def test_remove(self, db):
        service = ReservedPathService(db)
        await service.upsert(ReservedPath(path="events"))

        assert await service.remove("events") is True
        assert await service.remove("events") is False
        assert not await service.is_reserved("events")
