"""
Stable method table exposed to other subsystems (e.g. an RPC bridge).

The names are part of the external contract and use the camelCase spelling
callers already depend on.
"""

from __future__ import annotations

from collections.abc import Awaitable, Callable
from typing import Any

from sitedata.core.permissions import SitePermissions
from sitedata.core.store.database import SiteDataStore

WEB_API_METHODS: tuple[str, ...] = (
    "get",
    "set",
    "getAllPermissions",
    "getPermission",
    "getAppPermissions",
    "setPermission",
    "setAppPermissions",
    "clearPermission",
    "clearPermissionEverywhere",
    "getNetworkPermissions",
)


def build_web_api(
    store: SiteDataStore,
    permissions: SitePermissions | None = None,
) -> dict[str, Callable[..., Awaitable[Any]]]:
    """Map each name in :data:`WEB_API_METHODS` to its bound coroutine method."""
    perms = permissions or SitePermissions(store)
    return {
        "get": store.get,
        "set": store.set,
        "getAllPermissions": perms.get_all_permissions,
        "getPermission": perms.get_permission,
        "getAppPermissions": perms.get_app_permissions,
        "setPermission": perms.set_permission,
        "setAppPermissions": perms.set_app_permissions,
        "clearPermission": perms.clear_permission,
        "clearPermissionEverywhere": perms.clear_permission_everywhere,
        "getNetworkPermissions": perms.get_network_permissions,
    }
