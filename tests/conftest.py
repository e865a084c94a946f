"""Shared fixtures: a migrated store on a temporary database."""

from __future__ import annotations

from pathlib import Path

import pytest_asyncio

from sitedata.core.origin import OriginResolver, StaticNameResolver
from sitedata.core.permissions import SitePermissions
from sitedata.core.store.database import SiteDataStore

ARCHIVE_KEY = "a" * 64
ALIASES = {"example.dat": ARCHIVE_KEY}


@pytest_asyncio.fixture
async def store(tmp_path: Path) -> SiteDataStore:
    s = SiteDataStore(
        tmp_path / "SiteData",
        OriginResolver(StaticNameResolver(ALIASES)),
    )
    await s.setup()
    yield s
    await s.close()


@pytest_asyncio.fixture
async def perms(store: SiteDataStore) -> SitePermissions:
    return SitePermissions(store)
