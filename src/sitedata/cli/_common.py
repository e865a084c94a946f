"""Shared helpers for CLI commands: config loading, store construction, error exits."""

from __future__ import annotations

import asyncio
import sys
from collections.abc import Awaitable, Callable
from pathlib import Path
from typing import Any, TypeVar

import click
from rich.console import Console

from sitedata.core.config import SiteDataConfig, load_config
from sitedata.core.constants import ExitCode
from sitedata.core.exceptions import ConfigError, SiteDataError
from sitedata.core.logging_setup import configure_logging
from sitedata.core.origin import OriginResolver, StaticNameResolver
from sitedata.core.permissions import SitePermissions
from sitedata.core.store.database import SiteDataStore

T = TypeVar("T")

err_console = Console(stderr=True)


def cli_config(ctx: click.Context) -> SiteDataConfig:
    """Load config using the root group's --config / --data-dir options."""
    opts: dict[str, Any] = ctx.find_root().obj or {}
    config_path = opts.get("config_path")
    try:
        config = load_config(Path(config_path) if config_path else None)
    except ConfigError as exc:
        err_console.print(f"[red]Config error:[/red] {exc}")
        sys.exit(ExitCode.CONFIG_ERROR)
    if data_dir := opts.get("data_dir"):
        config.database.data_dir = data_dir
    configure_logging(config.logging)
    return config


def build_store(config: SiteDataConfig) -> SiteDataStore:
    resolver = OriginResolver(
        StaticNameResolver(config.resolver.aliases),
        alias_scheme=config.resolver.alias_scheme,
    )
    return SiteDataStore(config.db_path, resolver)


def with_store(
    config: SiteDataConfig,
    fn: Callable[[SiteDataStore, SitePermissions], Awaitable[T]],
) -> T:
    """Open the store, run *fn* against it, close it, and map errors to exit codes."""

    async def _run() -> T:
        store = build_store(config)
        try:
            await store.setup()
            return await fn(store, SitePermissions(store))
        finally:
            await store.close()

    try:
        return asyncio.run(_run())
    except SiteDataError as exc:
        err_console.print(f"[red]Error:[/red] {exc}")
        sys.exit(ExitCode.ERROR)


def parse_value(raw: str, value_type: str) -> str | int | float:
    try:
        if value_type == "int":
            return int(raw)
        if value_type == "float":
            return float(raw)
    except ValueError as exc:
        raise click.BadParameter(f"{raw!r} is not a valid {value_type}") from exc
    return raw
