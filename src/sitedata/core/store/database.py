"""
SiteDataStore — async (origin, key) -> value store over one SQLite connection.

Every data operation waits for the one-shot setup signal, so callers may issue
requests before :meth:`SiteDataStore.setup` has finished migrating.

Usage::

    store = await open_store(Path("~/.sitedata").expanduser())
    await store.set("https://example.com/page", "zoom", 1.25)
    await store.get("https://example.com/other", "zoom")   # 1.25
    await store.close()
"""

from __future__ import annotations

import asyncio
import logging
import sqlite3
from collections.abc import Sequence
from pathlib import Path

import aiosqlite

from sitedata.core.constants import DB_FILENAME, TABLE_NAME
from sitedata.core.exceptions import StoreError, StoreNotReadyError
from sitedata.core.origin import OriginResolver
from sitedata.core.store.migrations import (
    MIGRATIONS,
    UPSERT_SQL,
    Migration,
    get_user_version,
    run_migrations,
)
from sitedata.core.store.seeds import Value

logger = logging.getLogger(__name__)


class SiteDataStore:
    """Owns the database connection and the setup-complete signal."""

    def __init__(
        self,
        db_path: Path | str,
        origin_resolver: OriginResolver | None = None,
        migrations: Sequence[Migration] = MIGRATIONS,
    ) -> None:
        self._db_path = Path(db_path).expanduser()
        self._origins = origin_resolver or OriginResolver()
        self._migrations = migrations
        self._db: aiosqlite.Connection | None = None
        self._ready = asyncio.Event()
        self._setup_started = False
        self._setup_error: BaseException | None = None

    @property
    def path(self) -> Path:
        return self._db_path

    @property
    def origin_resolver(self) -> OriginResolver:
        return self._origins

    # ------------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------------

    async def setup(self) -> None:
        """Open the database and run pending migrations. May only run once."""
        if self._setup_started:
            raise StoreError("SiteDataStore.setup() has already been called")
        self._setup_started = True
        try:
            self._db_path.parent.mkdir(parents=True, exist_ok=True)
            self._db = await aiosqlite.connect(str(self._db_path), isolation_level=None)
            self._db.row_factory = aiosqlite.Row
            version = await run_migrations(self._db, self._migrations)
            logger.debug("Site data store ready at %s (schema v%d)", self._db_path, version)
        except Exception as exc:
            self._setup_error = exc
            await self.close()
            if isinstance(exc, (sqlite3.Error, OSError)):
                raise StoreError(
                    f"Cannot open site data database {self._db_path}: {exc}"
                ) from exc
            raise
        except BaseException as exc:
            self._setup_error = exc
            raise
        finally:
            self._ready.set()

    async def close(self) -> None:
        if self._db is not None:
            await self._db.close()
            self._db = None

    async def wait_ready(self) -> aiosqlite.Connection:
        """Block until setup has finished; return the live connection."""
        await self._ready.wait()
        if self._setup_error is not None:
            raise StoreNotReadyError(
                f"Site data store setup failed: {self._setup_error}"
            ) from self._setup_error
        if self._db is None:
            raise StoreNotReadyError("Site data store is closed")
        return self._db

    # ------------------------------------------------------------------
    # Origins
    # ------------------------------------------------------------------

    async def resolve_origin(self, url: str, *, skip_origin_resolution: bool = False) -> str | None:
        if skip_origin_resolution:
            return url or None
        return await self._origins.resolve(url)

    # ------------------------------------------------------------------
    # Keyed values
    # ------------------------------------------------------------------

    async def set(
        self, url: str, key: str, value: Value, *, skip_origin_resolution: bool = False
    ) -> bool:
        """Upsert (origin, key) -> value. Returns False if the origin is unobtainable."""
        db = await self.wait_ready()
        origin = await self.resolve_origin(url, skip_origin_resolution=skip_origin_resolution)
        if not origin:
            return False
        await self._execute(db, UPSERT_SQL, (origin, key, value))
        return True

    async def get(
        self, url: str, key: str, *, skip_origin_resolution: bool = False
    ) -> Value:
        """Return the stored value, or None when absent or the origin is unobtainable."""
        db = await self.wait_ready()
        origin = await self.resolve_origin(url, skip_origin_resolution=skip_origin_resolution)
        if not origin:
            return None
        rows = await self._fetch(
            db, f"SELECT value FROM {TABLE_NAME} WHERE origin = ? AND key = ?", (origin, key)
        )
        return rows[0]["value"] if rows else None

    async def clear(self, url: str, key: str, *, skip_origin_resolution: bool = False) -> bool:
        """Delete one record. Returns True if a row was removed.

        False is still a success: either nothing was stored under the key or the
        origin is unobtainable. Storage failures raise :class:`StoreError`.
        """
        db = await self.wait_ready()
        origin = await self.resolve_origin(url, skip_origin_resolution=skip_origin_resolution)
        if not origin:
            return False
        deleted = await self._execute(
            db, f"DELETE FROM {TABLE_NAME} WHERE origin = ? AND key = ?", (origin, key)
        )
        return deleted > 0

    # ------------------------------------------------------------------
    # Prefix and bulk helpers
    # ------------------------------------------------------------------

    async def rows_with_key_prefix(self, origin: str, prefix: str) -> list[tuple[str, Value]]:
        """(key, value) pairs for *origin* whose key starts with *prefix*, oldest first."""
        db = await self.wait_ready()
        rows = await self._fetch(
            db,
            f"SELECT key, value FROM {TABLE_NAME} "
            "WHERE origin = ? AND key GLOB ? ORDER BY rowid",
            (origin, _glob_prefix(prefix)),
        )
        return [(row["key"], row["value"]) for row in rows]

    async def delete_key_prefix(self, origin: str, prefix: str) -> int:
        db = await self.wait_ready()
        return await self._execute(
            db,
            f"DELETE FROM {TABLE_NAME} WHERE origin = ? AND key GLOB ?",
            (origin, _glob_prefix(prefix)),
        )

    async def delete_key_everywhere(self, key: str) -> int:
        """Delete *key* under every origin. Returns the number of rows removed."""
        db = await self.wait_ready()
        return await self._execute(db, f"DELETE FROM {TABLE_NAME} WHERE key = ?", (key,))

    # ------------------------------------------------------------------
    # Inspection
    # ------------------------------------------------------------------

    async def schema_version(self) -> int:
        db = await self.wait_ready()
        return await get_user_version(db)

    async def count_records(self, origin: str | None = None) -> int:
        db = await self.wait_ready()
        if origin is None:
            rows = await self._fetch(db, f"SELECT count(*) AS n FROM {TABLE_NAME}", ())
        else:
            rows = await self._fetch(
                db, f"SELECT count(*) AS n FROM {TABLE_NAME} WHERE origin = ?", (origin,)
            )
        return int(rows[0]["n"])

    # ------------------------------------------------------------------
    # Internal
    # ------------------------------------------------------------------

    @staticmethod
    async def _execute(db: aiosqlite.Connection, sql: str, params: tuple) -> int:
        try:
            async with db.execute(sql, params) as cursor:
                return cursor.rowcount
        except sqlite3.Error as exc:
            raise StoreError(f"Site data write failed: {exc}") from exc

    @staticmethod
    async def _fetch(db: aiosqlite.Connection, sql: str, params: tuple) -> list[aiosqlite.Row]:
        try:
            async with db.execute(sql, params) as cursor:
                return list(await cursor.fetchall())
        except sqlite3.Error as exc:
            raise StoreError(f"Site data read failed: {exc}") from exc


def _glob_prefix(prefix: str) -> str:
    """GLOB pattern matching keys that start with *prefix* literally (case-sensitive)."""
    escaped = "".join(f"[{c}]" if c in "*?[" else c for c in prefix)
    return escaped + "*"


async def open_store(
    data_dir: Path | str,
    origin_resolver: OriginResolver | None = None,
) -> SiteDataStore:
    """Open (creating if absent) ``<data_dir>/SiteData`` and run migrations."""
    store = SiteDataStore(Path(data_dir).expanduser() / DB_FILENAME, origin_resolver)
    await store.setup()
    return store
