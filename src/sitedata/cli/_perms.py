"""Permission inspection and editing CLI commands."""

from __future__ import annotations

import json

import click
from rich.console import Console
from rich.table import Table

from sitedata.cli._common import cli_config, with_store

console = Console()


@click.group("perms")
def perms_group() -> None:
    """Per-site permissions."""


@perms_group.command("list")
@click.argument("url")
@click.option("--json", "as_json", is_flag=True, default=False)
@click.pass_context
def perms_list(ctx: click.Context, url: str, as_json: bool) -> None:
    """Show every permission stored for URL's origin."""
    perms = with_store(cli_config(ctx), lambda _s, p: p.get_all_permissions(url))

    if as_json:
        click.echo(json.dumps(perms, indent=2))
        return
    if not perms:
        console.print("No permissions stored.")
        return

    table = Table("Permission", "Value")
    for name, value in perms.items():
        table.add_row(name, str(value))
    console.print(table)


@perms_group.command("set")
@click.argument("url")
@click.argument("name")
@click.option("--deny", is_flag=True, default=False, help="Store a denial (0) instead of a grant")
@click.pass_context
def perms_set(ctx: click.Context, url: str, name: str, deny: bool) -> None:
    """Grant (or deny) permission NAME for URL's origin."""
    written = with_store(cli_config(ctx), lambda _s, p: p.set_permission(url, name, not deny))
    if written:
        console.print(f"{'Denied' if deny else 'Granted'} [cyan]{name}[/cyan]")
    else:
        console.print(f"[yellow]No origin for {url}; nothing stored.[/yellow]")


@perms_group.command("clear")
@click.argument("url")
@click.argument("name")
@click.pass_context
def perms_clear(ctx: click.Context, url: str, name: str) -> None:
    """Remove permission NAME for URL's origin."""
    removed = with_store(cli_config(ctx), lambda _s, p: p.clear_permission(url, name))
    console.print(f"Cleared [cyan]{name}[/cyan]" if removed else "Nothing to clear.")


@perms_group.command("clear-everywhere")
@click.argument("name")
@click.pass_context
def perms_clear_everywhere(ctx: click.Context, name: str) -> None:
    """Remove permission NAME from every origin."""
    removed = with_store(cli_config(ctx), lambda _s, p: p.clear_permission_everywhere(name))
    console.print(f"Cleared [cyan]{name}[/cyan] from {removed} origin(s).")


@perms_group.command("apps")
@click.argument("url")
@click.option("--json", "as_json", is_flag=True, default=False)
@click.pass_context
def perms_apps(ctx: click.Context, url: str, as_json: bool) -> None:
    """Show app capability grants for URL's origin, grouped by API."""
    grants = with_store(cli_config(ctx), lambda _s, p: p.get_app_permissions(url))
    if as_json:
        click.echo(json.dumps(grants, indent=2))
        return
    if not grants:
        console.print("No app permissions granted.")
        return
    for api, capabilities in grants.items():
        console.print(f"[bold]{api}[/bold]: {', '.join(capabilities)}")


@perms_group.command("network")
@click.argument("url")
@click.option("--json", "as_json", is_flag=True, default=False)
@click.pass_context
def perms_network(ctx: click.Context, url: str, as_json: bool) -> None:
    """Show network origins URL's origin may reach."""
    origins = with_store(cli_config(ctx), lambda _s, p: p.get_network_permissions(url))
    if as_json:
        click.echo(json.dumps(origins, indent=2))
        return
    if not origins:
        console.print("No network permissions granted.")
        return
    for origin in origins:
        console.print(f"  {origin}")
