"""Database schema commands."""

import typer
from rich.console import Console

from src.library_api.core.services import DbManageService, DbSessionService
from src.library_api.runtime.context import get_config

console = Console()

db_app = typer.Typer(help="Manage the library database schema")


@db_app.command("init")
def init_db() -> None:
    """Create every library table that does not exist yet."""
    config = get_config()
    try:
        DbManageService(DbSessionService().engine).create_all()
    except Exception as e:
        console.print(f"[red]❌ Failed to initialize database: {e}[/red]")
        raise typer.Exit(code=1) from e
    console.print(f"[green]✅ Database ready at {config.database.url}[/green]")


@db_app.command("drop")
def drop_db(
    force: bool = typer.Option(False, "--force", "-f", help="Skip confirmation prompt"),
) -> None:
    """Drop every library table, including all transaction history."""
    if not force and not typer.confirm("Drop all library tables?"):
        console.print("[yellow]Aborted[/yellow]")
        raise typer.Exit(code=0)
    DbManageService(DbSessionService().engine).drop_all()
    console.print("[green]✅ Tables dropped[/green]")
