"""
Sitedata CLI entry point.

Commands:
  sitedata get URL KEY             — read a value for URL's origin
  sitedata set URL KEY VALUE       — store a value for URL's origin
  sitedata clear URL KEY           — delete a value for URL's origin
  sitedata perms list URL          — show stored permissions
  sitedata perms set URL NAME      — grant (or --deny) a permission
  sitedata perms clear URL NAME    — remove a permission
  sitedata perms clear-everywhere  — remove a permission from every origin
  sitedata perms apps URL          — show app capability grants
  sitedata perms network URL       — show allowed network origins
  sitedata db info                 — schema version and record count
  sitedata db migrate [--dry-run]  — apply pending schema migrations
  sitedata config show            — display the effective configuration
  sitedata config alias-add N KEY  — map an alias-scheme host to an archive key
  sitedata version                 — show version
"""

from __future__ import annotations

import json

import click
from rich.console import Console

from sitedata import __version__
from sitedata.cli._common import cli_config, parse_value, with_store
from sitedata.cli._config_cmd import config_group
from sitedata.cli._db import db_group
from sitedata.cli._perms import perms_group

console = Console()

_raw_origin = click.option(
    "--raw-origin",
    is_flag=True,
    default=False,
    help="Treat URL as an already-normalised origin (e.g. https:example.com)",
)


# ---------------------------------------------------------------------------
# Root group
# ---------------------------------------------------------------------------


@click.group(context_settings={"help_option_names": ["-h", "--help"]})
@click.version_option(__version__, "--version", "-V", message="sitedata %(version)s")
@click.option("--config", "config_path", default="", help="Path to config.toml")
@click.option("--data-dir", default="", help="Directory holding the SiteData database")
@click.pass_context
def cli(ctx: click.Context, config_path: str, data_dir: str) -> None:
    """sitedata — per-origin settings and permissions store."""
    ctx.obj = {"config_path": config_path, "data_dir": data_dir}


cli.add_command(config_group)
cli.add_command(db_group)
cli.add_command(perms_group)


# ---------------------------------------------------------------------------
# get / set / clear
# ---------------------------------------------------------------------------


@cli.command()
@click.argument("url")
@click.argument("key")
@_raw_origin
@click.option("--json", "as_json", is_flag=True, default=False)
@click.pass_context
def get(ctx: click.Context, url: str, key: str, raw_origin: bool, as_json: bool) -> None:
    """Print the value stored under KEY for URL's origin."""
    value = with_store(
        cli_config(ctx),
        lambda s, _p: s.get(url, key, skip_origin_resolution=raw_origin),
    )
    if as_json:
        click.echo(json.dumps(value))
    elif value is not None:
        click.echo(value)


@cli.command("set")
@click.argument("url")
@click.argument("key")
@click.argument("value")
@click.option(
    "--type", "value_type", type=click.Choice(["str", "int", "float"]), default="str"
)
@_raw_origin
@click.pass_context
def set_(
    ctx: click.Context, url: str, key: str, value: str, value_type: str, raw_origin: bool
) -> None:
    """Store VALUE under KEY for URL's origin."""
    parsed = parse_value(value, value_type)
    written = with_store(
        cli_config(ctx),
        lambda s, _p: s.set(url, key, parsed, skip_origin_resolution=raw_origin),
    )
    if not written:
        console.print(f"[yellow]No origin for {url}; nothing stored.[/yellow]")


@cli.command()
@click.argument("url")
@click.argument("key")
@_raw_origin
@click.pass_context
def clear(ctx: click.Context, url: str, key: str, raw_origin: bool) -> None:
    """Delete KEY for URL's origin."""
    with_store(
        cli_config(ctx),
        lambda s, _p: s.clear(url, key, skip_origin_resolution=raw_origin),
    )


# ---------------------------------------------------------------------------
# version
# ---------------------------------------------------------------------------


@cli.command()
def version() -> None:
    """Show version."""
    console.print(f"sitedata {__version__}")


def main() -> None:
    cli()


if __name__ == "__main__":
    main()
