"""
Site permissions stored as ``perm:*`` keys in the site data store.

Key families::

    perm:<name>                    scalar permission, value 1/0
    perm:network:<origin>          network target allowed for the site
    perm:app:<api>:<capability>    app capability grant (row present = granted)

Network origins, API names and capabilities are escaped (``%`` -> ``%25``,
``:`` -> ``%3A``) when encoded, so they may contain colons. Rows written
without escaping still decode: a network key yields its last colon segment,
an app key splits on the first colon after ``perm:app:``.
"""

from __future__ import annotations

import logging
import re
from collections.abc import Mapping, Sequence
from dataclasses import dataclass
from typing import Any

from sitedata.core.constants import PERM_APP_PREFIX, PERM_NETWORK_PREFIX, PERM_PREFIX
from sitedata.core.exceptions import PermissionKeyError
from sitedata.core.store.database import SiteDataStore
from sitedata.core.store.seeds import Value

logger = logging.getLogger(__name__)

_UNESCAPE_RE = re.compile(r"%(25|3[aA])")


def escape_component(value: str) -> str:
    return value.replace("%", "%25").replace(":", "%3A")


def unescape_component(value: str) -> str:
    return _UNESCAPE_RE.sub(lambda m: "%" if m.group(1) == "25" else ":", value)


# ---------------------------------------------------------------------------
# Key variants
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class ScalarPermission:
    name: str

    def __post_init__(self) -> None:
        if not self.name:
            raise PermissionKeyError("Permission name must not be empty")

    def encode(self) -> str:
        return PERM_PREFIX + self.name


@dataclass(frozen=True)
class NetworkPermission:
    origin: str

    def __post_init__(self) -> None:
        if not self.origin:
            raise PermissionKeyError("Network permission origin must not be empty")

    def encode(self) -> str:
        return PERM_NETWORK_PREFIX + escape_component(self.origin)


@dataclass(frozen=True)
class AppPermission:
    api: str
    capability: str

    def __post_init__(self) -> None:
        if not self.api or not self.capability:
            raise PermissionKeyError("App permission needs both an API and a capability")

    def encode(self) -> str:
        return f"{PERM_APP_PREFIX}{escape_component(self.api)}:{escape_component(self.capability)}"


PermissionKey = ScalarPermission | NetworkPermission | AppPermission


def decode_permission_key(key: str) -> PermissionKey | None:
    """Decode a stored key; None if it is not a permission key at all."""
    if not key.startswith(PERM_PREFIX) or key == PERM_PREFIX:
        return None

    if key.startswith(PERM_NETWORK_PREFIX):
        rest = key[len(PERM_NETWORK_PREFIX) :]
        if ":" in rest:
            rest = rest.rsplit(":", 1)[1]
        if rest:
            return NetworkPermission(unescape_component(rest))

    elif key.startswith(PERM_APP_PREFIX):
        api, sep, capability = key[len(PERM_APP_PREFIX) :].partition(":")
        if api and sep and capability:
            return AppPermission(unescape_component(api), unescape_component(capability))

    # malformed family keys are still valid scalar names
    return ScalarPermission(key[len(PERM_PREFIX) :])


# ---------------------------------------------------------------------------
# Permission layer
# ---------------------------------------------------------------------------


class SitePermissions:
    """Permission operations layered on :class:`SiteDataStore`."""

    def __init__(self, store: SiteDataStore) -> None:
        self._store = store

    async def _origin(self, url: str) -> str | None:
        await self._store.wait_ready()
        return await self._store.resolve_origin(url)

    async def get_permission(self, url: str, name: str) -> Value:
        return await self._store.get(url, PERM_PREFIX + name)

    async def set_permission(self, url: str, name: str, value: Any) -> bool:
        return await self._store.set(url, PERM_PREFIX + name, 1 if value else 0)

    async def clear_permission(self, url: str, name: str) -> bool:
        return await self._store.clear(url, PERM_PREFIX + name)

    async def clear_permission_everywhere(self, name: str) -> int:
        """Remove ``perm:<name>`` from every origin; returns rows removed."""
        removed = await self._store.delete_key_everywhere(PERM_PREFIX + name)
        logger.debug("Cleared permission %r from %d origin(s)", name, removed)
        return removed

    async def get_all_permissions(self, url: str) -> dict[str, Value]:
        origin = await self._origin(url)
        if not origin:
            return {}
        rows = await self._store.rows_with_key_prefix(origin, PERM_PREFIX)
        return {key[len(PERM_PREFIX) :]: value for key, value in rows}

    async def get_network_permissions(self, url: str) -> list[str]:
        """Origins this site may reach; rows stored with a falsy value are skipped."""
        origin = await self._origin(url)
        if not origin:
            return []
        granted: list[str] = []
        for key, value in await self._store.rows_with_key_prefix(origin, PERM_NETWORK_PREFIX):
            if not value:
                continue
            decoded = decode_permission_key(key)
            if isinstance(decoded, NetworkPermission):
                granted.append(decoded.origin)
        return granted

    async def set_network_permission(self, url: str, target_origin: str, value: Any) -> bool:
        key = NetworkPermission(target_origin).encode()
        return await self._store.set(url, key, 1 if value else 0)

    async def get_app_permissions(self, url: str) -> dict[str, list[str]]:
        origin = await self._origin(url)
        if not origin:
            return {}
        grants: dict[str, list[str]] = {}
        for key, _value in await self._store.rows_with_key_prefix(origin, PERM_APP_PREFIX):
            decoded = decode_permission_key(key)
            if not isinstance(decoded, AppPermission):
                logger.debug("Ignoring malformed app permission key %r", key)
                continue
            grants.setdefault(decoded.api, []).append(decoded.capability)
        return grants

    async def set_app_permissions(
        self, url: str, grants: Mapping[str, Sequence[str]] | None
    ) -> bool:
        """Replace every app grant for the site with *grants*.

        Entries whose value is not a list or tuple are skipped. An empty API or
        capability name raises :class:`PermissionKeyError` before any stored
        grant is touched.
        """
        keys = [
            AppPermission(str(api), str(capability)).encode()
            for api, capabilities in (grants or {}).items()
            if isinstance(capabilities, (list, tuple))
            for capability in capabilities
        ]

        origin = await self._origin(url)
        if not origin:
            return False

        await self._store.delete_key_prefix(origin, PERM_APP_PREFIX)
        for key in keys:
            await self._store.set(origin, key, 1, skip_origin_resolution=True)
        return True
