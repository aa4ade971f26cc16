"""CLI command for loading the benchmark fixture.

Usage:
    workmem seed
    workmem seed --reset
"""

from __future__ import annotations

import asyncio

import typer

from workmem.cli.settings import settings_or_exit
from workmem.config import Settings

app = typer.Typer(help="Create and populate the fixture tables")


@app.callback(invoke_without_command=True)
def seed(
    reset: bool = typer.Option(
        False,
        "--reset",
        help="Drop the fixture tables before loading",
    ),
) -> None:
    """Load 10,000 players, 1,000 matches and 100,000 player_stats rows."""
    settings = settings_or_exit()
    asyncio.run(_seed(settings, reset))


async def _seed(settings: Settings, reset: bool) -> None:
    from rich.console import Console
    from sqlalchemy.exc import SQLAlchemyError

    from workmem.errors import StoreConnectionError
    from workmem.persistence.db import Database
    from workmem.persistence.seed import seed as seed_fixture

    console = Console()
    database = Database.from_settings(settings)
    try:
        count = await seed_fixture(database, reset=reset)
    except (StoreConnectionError, SQLAlchemyError) as e:
        console.print(f"[red]Seeding failed:[/red] {e}")
        raise typer.Exit(code=1) from e
    finally:
        await database.close()

    if count == 0:
        console.print("[yellow]Fixture already loaded.[/yellow] Pass --reset to reload it.")
    else:
        console.print(f"[green]Fixture loaded[/green] ({count} statements)")
