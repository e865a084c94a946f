"""Sitedata exception hierarchy."""

from __future__ import annotations


class SiteDataError(Exception):
    """Base exception for all sitedata errors."""


class ConfigError(SiteDataError):
    """Raised when the configuration is invalid or cannot be read."""


class ConfigNotFoundError(ConfigError):
    """Raised when the configuration file does not exist."""


class StoreError(SiteDataError):
    """Raised when the underlying SQLite database fails."""


class StoreNotReadyError(StoreError):
    """Raised by store operations after setup has failed."""


class MigrationError(StoreError):
    """Raised when a schema migration step cannot be applied."""

    def __init__(self, message: str, version: int | None = None) -> None:
        super().__init__(message)
        self.version = version


class NameResolutionError(SiteDataError):
    """Raised by a name resolver when a host cannot be resolved."""


class PermissionKeyError(SiteDataError, ValueError):
    """Raised when a permission key component is invalid."""
