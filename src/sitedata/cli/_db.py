"""Database inspection and management CLI commands."""

from __future__ import annotations

import asyncio
import json
import sqlite3
import sys
from pathlib import Path

import aiosqlite
import click
from rich.console import Console

from sitedata.cli._common import cli_config, err_console, with_store
from sitedata.core.constants import TABLE_NAME, ExitCode
from sitedata.core.store.migrations import LATEST_SCHEMA_VERSION, MIGRATIONS, get_user_version

console = Console()


async def _inspect(db_path: Path) -> tuple[int, int]:
    """Return (schema version, record count) without running migrations."""
    async with aiosqlite.connect(str(db_path)) as conn:
        version = await get_user_version(conn)
        try:
            async with conn.execute(f"SELECT count(*) FROM {TABLE_NAME}") as cursor:  # noqa: S608
                row = await cursor.fetchone()
            records = row[0] if row else 0
        except sqlite3.OperationalError:
            records = -1  # table missing
    return version, records


@click.group("db")
def db_group() -> None:
    """Database inspection and management."""


@db_group.command("info")
@click.option("--json", "as_json", is_flag=True, default=False)
@click.pass_context
def db_info(ctx: click.Context, as_json: bool) -> None:
    """Show database path, schema version, and record count."""
    db_path = cli_config(ctx).db_path

    if not db_path.exists():
        if as_json:
            click.echo(json.dumps({"exists": False, "path": str(db_path)}))
        else:
            console.print(f"Database does not exist yet: {db_path}")
            console.print("It will be created on first use.")
        return

    version, records = asyncio.run(_inspect(db_path))
    size_kb = db_path.stat().st_size / 1024

    if as_json:
        click.echo(
            json.dumps(
                {
                    "exists": True,
                    "path": str(db_path),
                    "schema_version": version,
                    "latest_version": LATEST_SCHEMA_VERSION,
                    "size_kb": round(size_kb, 1),
                    "records": records,
                },
                indent=2,
            )
        )
        return

    console.print(f"[bold]Database[/bold]: {db_path}")
    console.print(f"Schema version: {version} (latest: {LATEST_SCHEMA_VERSION})")
    console.print(f"Size: {size_kb:.1f} KB")
    console.print(f"Records: {records if records >= 0 else '[red]table missing[/red]'}")


@db_group.command("migrate")
@click.option(
    "--dry-run", is_flag=True, default=False, help="Show pending migrations without applying them."
)
@click.option(
    "--json", "as_json", is_flag=True, default=False, help="Machine-readable JSON output."
)
@click.pass_context
def db_migrate(ctx: click.Context, dry_run: bool, as_json: bool) -> None:
    """Run (or preview) pending schema migrations."""
    config = cli_config(ctx)
    db_path = config.db_path

    current = asyncio.run(_inspect(db_path))[0] if db_path.exists() else 0

    if current > LATEST_SCHEMA_VERSION:
        message = (
            f"Database schema is v{current}, but this version of sitedata "
            f"only supports up to v{LATEST_SCHEMA_VERSION}"
        )
        if as_json:
            click.echo(
                json.dumps(
                    {
                        "path": str(db_path),
                        "current_version": current,
                        "latest_version": LATEST_SCHEMA_VERSION,
                        "pending_migrations": [],
                        "dry_run": dry_run,
                        "status": "unsupported",
                        "error": message,
                    },
                    indent=2,
                )
            )
        else:
            err_console.print(f"[red]Error:[/red] {message}")
        sys.exit(ExitCode.ERROR)

    pending = [m for m in MIGRATIONS if m.version > current]

    if pending and not dry_run:

        async def _current_version(store, _perms) -> int:
            return await store.schema_version()

        with_store(config, _current_version)

    status = "up_to_date" if not pending else ("dry_run" if dry_run else "applied")

    if as_json:
        click.echo(
            json.dumps(
                {
                    "path": str(db_path),
                    "current_version": current,
                    "latest_version": LATEST_SCHEMA_VERSION,
                    "pending_migrations": [
                        f"v{m.version - 1} -> v{m.version}: {m.description}" for m in pending
                    ],
                    "dry_run": dry_run,
                    "status": status,
                },
                indent=2,
            )
        )
        return

    if not pending:
        console.print(f"[green]Database is up to date[/green] (v{current}).")
        return

    if dry_run:
        console.print(f"[bold]Database[/bold]: {db_path}")
        console.print(f"Current schema version: {current}")
        console.print(f"Latest schema version:  {LATEST_SCHEMA_VERSION}")
        console.print(f"\n[yellow]Pending migrations ({len(pending)}):[/yellow]")
        for m in pending:
            console.print(f"  v{m.version - 1} -> v{m.version}  {m.description}")
        console.print("\nRun without [cyan]--dry-run[/cyan] to apply.")
        return

    console.print(
        f"[green]Migrations applied successfully[/green] (v{current} -> v{LATEST_SCHEMA_VERSION})."
    )
