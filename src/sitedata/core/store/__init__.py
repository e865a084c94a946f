"""
sitedata.core.store — SQLite persistence for per-origin values.

Modules:
    database     SiteDataStore: connection, setup signal, get/set/clear
    migrations   PRAGMA user_version schema steps and the runner
    seeds        default favicon records applied by migrations
"""

from sitedata.core.store.database import SiteDataStore, open_store
from sitedata.core.store.migrations import LATEST_SCHEMA_VERSION, MIGRATIONS

__all__ = ["LATEST_SCHEMA_VERSION", "MIGRATIONS", "SiteDataStore", "open_store"]
