"""
Schema migrations for the sitedata database.

The schema version lives in SQLite's ``PRAGMA user_version``. Each step is
plain data (DDL statements plus seed records) applied by :func:`run_migrations`
inside one transaction together with the version bump, so a failed step leaves
the version where it was and is retried from scratch on the next start.

Steps must therefore be re-runnable from their starting state: DDL uses
``IF NOT EXISTS`` and seeds are upserts.
"""

from __future__ import annotations

import logging
import sqlite3
from collections.abc import Sequence
from dataclasses import dataclass, field

import aiosqlite

from sitedata.core.constants import TABLE_NAME
from sitedata.core.exceptions import MigrationError
from sitedata.core.store.seeds import V1_FAVICONS, V3_FAVICONS, V5_FAVICONS, SeedRecord

logger = logging.getLogger(__name__)

UPSERT_SQL = f"INSERT OR REPLACE INTO {TABLE_NAME} (origin, key, value) VALUES (?, ?, ?)"


@dataclass(frozen=True)
class Migration:
    version: int
    description: str
    statements: tuple[str, ...] = ()
    seeds: tuple[SeedRecord, ...] = field(default=(), repr=False)


MIGRATIONS: tuple[Migration, ...] = (
    Migration(
        version=1,
        description="create sitedata table; favicons for default bookmarks",
        statements=(
            f"""
            CREATE TABLE IF NOT EXISTS {TABLE_NAME} (
                origin NOT NULL,
                key    NOT NULL,
                value
            )
            """,
            f"CREATE UNIQUE INDEX IF NOT EXISTS {TABLE_NAME}_origin_key "
            f"ON {TABLE_NAME} (origin, key)",
        ),
        seeds=V1_FAVICONS,
    ),
    # the v2 favicons were later removed; the version is kept
    Migration(version=2, description="no-op"),
    Migration(version=3, description="more favicons for default bookmarks", seeds=V3_FAVICONS),
    # the v4 favicons were later removed; the version is kept
    Migration(version=4, description="no-op"),
    Migration(version=5, description="more favicons for default bookmarks", seeds=V5_FAVICONS),
)

LATEST_SCHEMA_VERSION = len(MIGRATIONS)


async def get_user_version(conn: aiosqlite.Connection) -> int:
    async with conn.execute("PRAGMA user_version") as cursor:
        row = await cursor.fetchone()
    return int(row[0]) if row else 0


def _check_sequence(migrations: Sequence[Migration]) -> None:
    for expected, migration in enumerate(migrations, start=1):
        if migration.version != expected:
            raise MigrationError(
                f"Migration list out of order: expected v{expected}, got v{migration.version}",
                version=migration.version,
            )


async def _apply(conn: aiosqlite.Connection, migration: Migration) -> None:
    await conn.execute("BEGIN")
    try:
        for statement in migration.statements:
            await conn.execute(statement)
        if migration.seeds:
            await conn.executemany(UPSERT_SQL, [s.as_params() for s in migration.seeds])
        # PRAGMA does not accept bound parameters; version is an int from our own table
        await conn.execute(f"PRAGMA user_version = {int(migration.version)}")
        await conn.execute("COMMIT")
    except sqlite3.Error as exc:
        if conn.in_transaction:
            await conn.execute("ROLLBACK")
        raise MigrationError(
            f"Migration v{migration.version} ({migration.description}) failed: {exc}",
            version=migration.version,
        ) from exc


async def run_migrations(
    conn: aiosqlite.Connection,
    migrations: Sequence[Migration] = MIGRATIONS,
) -> int:
    """Bring *conn* up to ``len(migrations)``; return the resulting version.

    The connection must be in autocommit mode (``isolation_level=None``) so
    that the explicit BEGIN/COMMIT here delimit each step.
    """
    _check_sequence(migrations)
    latest = len(migrations)
    current = await get_user_version(conn)

    if current > latest:
        raise MigrationError(
            f"Database schema is v{current}, but this version of sitedata "
            f"only supports up to v{latest}",
            version=current,
        )
    if current == latest:
        logger.debug("Database schema is up to date (v%d)", current)
        return current

    for migration in migrations[current:]:
        logger.info("Applying migration v%d: %s", migration.version, migration.description)
        await _apply(conn, migration)

    logger.info("Database migrated from v%d to v%d", current, latest)
    return latest
