"""
sitedata — per-origin settings and permission store for an application profile.

Values are kept in a single SQLite file keyed by (origin, key), where an
origin is a normalised scheme+host such as ``https:example.com``. Hosts under
the ``dat:`` alias scheme are resolved to their archive key before use.

Package layout (src/sitedata/):
  core/          — origin resolution, permissions, config, logging, errors
  core/store/    — SQLite store, schema migrations, seed data
  api.py         — stable RPC method table
  cli/           — Click CLI entry point
"""

__version__ = "0.3.0"
__all__ = ["__version__"]
