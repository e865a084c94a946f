"""Sitedata constants: filesystem layout, key namespaces, and exit codes."""

from __future__ import annotations

from enum import IntEnum

# ---------------------------------------------------------------------------
# Exit codes
# ---------------------------------------------------------------------------


class ExitCode(IntEnum):
    SUCCESS = 0
    ERROR = 1
    CONFIG_ERROR = 2


# ---------------------------------------------------------------------------
# Filesystem layout
# ---------------------------------------------------------------------------

SITEDATA_DIR_NAME = ".sitedata"
CONFIG_FILENAME = "config.toml"
DB_FILENAME = "SiteData"

# ---------------------------------------------------------------------------
# Storage
# ---------------------------------------------------------------------------

TABLE_NAME = "sitedata"
FAVICON_KEY = "favicon"

# ---------------------------------------------------------------------------
# Origins
# ---------------------------------------------------------------------------

ALIAS_SCHEME = "dat:"
ARCHIVE_KEY_LENGTH = 64  # hex digits in a dat archive key

# ---------------------------------------------------------------------------
# Permission key namespace
# ---------------------------------------------------------------------------

PERM_PREFIX = "perm:"
PERM_NETWORK_PREFIX = "perm:network:"
PERM_APP_PREFIX = "perm:app:"
