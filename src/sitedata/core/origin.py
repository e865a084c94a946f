"""
Origin resolution.

An origin is the URL scheme (with its trailing colon) followed by the host,
e.g. ``https:example.com`` or ``http:localhost:8080``. Paths, queries and
credentials are dropped, so every page of a site shares one origin.

Hosts under the alias scheme (``dat:`` by default) are not usable as-is:
they are passed to a :class:`NameResolver` and replaced by the archive key it
returns. When that lookup fails the origin is unobtainable and callers treat
the operation as a no-op.
"""

from __future__ import annotations

import asyncio
import logging
import re
from collections.abc import Mapping
from typing import Protocol
from urllib.parse import urlsplit

from sitedata.core.constants import ALIAS_SCHEME, ARCHIVE_KEY_LENGTH
from sitedata.core.exceptions import NameResolutionError

logger = logging.getLogger(__name__)

_ARCHIVE_KEY_RE = re.compile(rf"[0-9a-fA-F]{{{ARCHIVE_KEY_LENGTH}}}")


class NameResolver(Protocol):
    """Resolves an alias-scheme host name to its canonical host."""

    async def resolve_name(self, name: str) -> str | None: ...


class StaticNameResolver:
    """
    Resolver backed by a fixed alias table.

    Names that already are archive keys resolve to themselves. Anything else
    must be present in *aliases*, otherwise :class:`NameResolutionError`.
    """

    def __init__(self, aliases: Mapping[str, str] | None = None) -> None:
        self._aliases = {k.lower(): v.lower() for k, v in (aliases or {}).items()}

    async def resolve_name(self, name: str) -> str | None:
        if is_archive_key(name):
            return name.lower()
        try:
            return self._aliases[name.lower()]
        except KeyError:
            raise NameResolutionError(f"No alias registered for {name!r}") from None


def is_archive_key(value: str) -> bool:
    return bool(_ARCHIVE_KEY_RE.fullmatch(value))


def _host_of(url: str, alias_scheme: str = ALIAS_SCHEME) -> tuple[str, str] | None:
    """Split *url* into (scheme, host[:port]); None if either part is missing.

    Under the alias scheme the slashes are optional, so ``dat:<key>/path``
    yields the same host as ``dat://<key>/path``.
    """
    try:
        parts = urlsplit(url)
        hostname = parts.hostname
        port = parts.port
    except ValueError:
        return None
    if not parts.scheme:
        return None
    if not parts.netloc and parts.scheme + ":" == alias_scheme:
        name = parts.path.split("/", 1)[0].lower()
        return (alias_scheme, name) if name and ":" not in name else None
    if not hostname:
        return None
    if ":" in hostname:  # IPv6 literal
        hostname = f"[{hostname}]"
    host = f"{hostname}:{port}" if port is not None else hostname
    return parts.scheme + ":", host


class OriginResolver:
    """
    Normalises URLs into origin strings.

    Usage::

        resolver = OriginResolver(StaticNameResolver({"example.org": key}))
        await resolver.resolve("https://Example.com/a/b?c")  # "https:example.com"
        await resolver.resolve("dat://example.org/")         # "dat:" + key
        await resolver.resolve("not a url")                  # None
    """

    def __init__(
        self,
        name_resolver: NameResolver | None = None,
        alias_scheme: str = ALIAS_SCHEME,
    ) -> None:
        self._names = name_resolver
        self._alias_scheme = alias_scheme

    @property
    def alias_scheme(self) -> str:
        return self._alias_scheme

    async def resolve(self, url: str) -> str | None:
        split = _host_of(url, self._alias_scheme)
        if split is None:
            return None
        scheme, host = split
        if scheme == self._alias_scheme:
            resolved = await self._resolve_alias(host)
            if not resolved:
                return None
            host = resolved
        return scheme + host

    async def _resolve_alias(self, host: str) -> str | None:
        if self._names is None:
            logger.debug("No name resolver configured; cannot resolve %s%s", self._alias_scheme, host)
            return None
        try:
            return await self._names.resolve_name(host)
        except (NameResolutionError, OSError, asyncio.TimeoutError) as exc:
            logger.debug("Name resolution failed for %s: %s", host, exc)
            return None
