"""CLI commands: sitedata config show | validate | alias-add | alias-remove."""

from __future__ import annotations

import json
import sys
from pathlib import Path
from typing import Any

import click
from pydantic import ValidationError
from rich.console import Console

from sitedata.cli._common import cli_config, err_console
from sitedata.core.config import SiteDataConfig, _config_file_path, save_config
from sitedata.core.constants import ExitCode
from sitedata.core.exceptions import ConfigError

console = Console()


@click.group("config")
def config_group() -> None:
    """View, validate, and edit sitedata configuration."""


@config_group.command("show")
@click.option("--json", "as_json", is_flag=True, default=False, help="Output as JSON")
@click.pass_context
def config_show(ctx: click.Context, as_json: bool) -> None:
    """Display the effective configuration (file, env overrides, defaults)."""
    cfg = cli_config(ctx)
    data = cfg.model_dump()
    data["_config_path"] = str(_target_path(ctx))
    data["_db_path"] = str(cfg.db_path)

    if as_json:
        click.echo(json.dumps(data, indent=2))
        return

    console.print(f"[bold]Config file[/bold]: {data['_config_path']}")
    console.print(f"[bold]Database[/bold]:    {data['_db_path']}")
    console.print(f"Log level:   {cfg.logging.level} ({cfg.logging.format})")
    console.print(f"Alias scheme: {cfg.resolver.alias_scheme}")
    if not cfg.resolver.aliases:
        console.print("Aliases:     [dim]none[/dim]")
    for name, key in sorted(cfg.resolver.aliases.items()):
        console.print(f"  {name} -> {key}")


@config_group.command("validate")
@click.pass_context
def config_validate(ctx: click.Context) -> None:
    """Validate the config file against the schema."""
    cli_config(ctx)
    console.print(f"[green]Config is valid:[/green] {_target_path(ctx)}")


@config_group.command("alias-add")
@click.argument("name")
@click.argument("key")
@click.pass_context
def config_alias_add(ctx: click.Context, name: str, key: str) -> None:
    """Map alias-scheme host NAME to archive KEY and save the config file."""
    path = _target_path(ctx)
    data = _read_raw(path)
    data.setdefault("resolver", {}).setdefault("aliases", {})[name.lower()] = key.lower()
    _validate_and_save(data, path)
    console.print(f"Added alias [cyan]{name.lower()}[/cyan] -> {key.lower()}")


@config_group.command("alias-remove")
@click.argument("name")
@click.pass_context
def config_alias_remove(ctx: click.Context, name: str) -> None:
    """Remove alias NAME from the config file."""
    path = _target_path(ctx)
    data = _read_raw(path)
    aliases = data.get("resolver", {}).get("aliases", {})
    if aliases.pop(name.lower(), None) is None:
        console.print(f"No alias named [cyan]{name.lower()}[/cyan].")
        return
    _validate_and_save(data, path)
    console.print(f"Removed alias [cyan]{name.lower()}[/cyan]")


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------


def _target_path(ctx: click.Context) -> Path:
    opts: dict[str, Any] = ctx.find_root().obj or {}
    config_path = opts.get("config_path")
    return Path(config_path) if config_path else _config_file_path()


def _read_raw(path: Path) -> dict[str, Any]:
    """Raw TOML contents of *path*, or an empty dict if it does not exist yet."""
    import tomllib

    if not path.exists():
        return {}
    try:
        with open(path, "rb") as f:
            return tomllib.load(f)
    except (OSError, tomllib.TOMLDecodeError) as exc:
        err_console.print(f"[red]Config error:[/red] Cannot read config file {path}: {exc}")
        sys.exit(ExitCode.CONFIG_ERROR)


def _validate_and_save(data: dict[str, Any], path: Path) -> None:
    try:
        SiteDataConfig.model_validate(data)
        save_config(data, path)
    except (ValidationError, ConfigError) as exc:
        err_console.print(f"[red]Config error:[/red] {exc}")
        sys.exit(ExitCode.CONFIG_ERROR)
