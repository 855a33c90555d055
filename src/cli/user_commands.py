"""Account administration CLI commands."""

import typer
from rich.console import Console
from rich.table import Table

from src.library_api.core.exceptions import ConflictError
from src.library_api.core.models.library import UserRegister
from src.library_api.core.services import (
    DbManageService,
    DbSessionService,
    PasswordService,
    UserManagementService,
)
from src.library_api.core.validation import check_password
from src.library_api.core.validation.rules import is_email
from src.library_api.entities.core.user import UserRepository, UserRole

console = Console()

users_app = typer.Typer(help="Manage library accounts")


@users_app.command("create-admin")
def create_admin(
    email: str = typer.Argument(..., help="Email address of the new admin"),
    full_name: str = typer.Option(..., "--full-name", "-n", help="Full name"),
    password: str = typer.Option(
        ..., "--password", "-p", prompt=True, hide_input=True, confirmation_prompt=True,
        help="Password (prompted when omitted)",
    ),
    username: str | None = typer.Option(None, "--username", "-u", help="Optional login name"),
) -> None:
    """Create an account with the ADMIN role."""
    ok, message = is_email()(email)
    if not ok:
        console.print(f"[red]❌ {message}[/red]")
        raise typer.Exit(code=1)

    problems = check_password(password)
    if problems:
        for problem in problems:
            console.print(f"[red]❌ {problem}[/red]")
        raise typer.Exit(code=1)

    db = DbSessionService()
    DbManageService(db.engine).create_all()

    session = db.get_session()
    try:
        service = UserManagementService(PasswordService(), session)
        user = service.register(
            UserRegister(full_name=full_name, email=email, password=password, username=username),
            role=UserRole.ADMIN,
        )
    except ConflictError as e:
        console.print(f"[red]❌ {e.message}[/red]")
        raise typer.Exit(code=1) from e
    finally:
        session.close()

    console.print(f"[green]✅ Created admin '{user.email}' with id {user.id}[/green]")


@users_app.command("list")
def list_users(
    limit: int = typer.Option(100, "--limit", "-l", help="Maximum number of users to show"),
    search: str | None = typer.Option(None, "--search", "-s", help="Filter by name, email or username"),
) -> None:
    """List library accounts."""
    with DbSessionService().session_scope() as session:
        users, total = UserRepository(session).list_page(0, limit, search)

    if not users:
        console.print("[yellow]No users found[/yellow]")
        return

    table = Table(title="Library users")
    table.add_column("ID", style="cyan")
    table.add_column("Email", style="blue")
    table.add_column("Username", style="green")
    table.add_column("Full Name", style="magenta")
    table.add_column("Role", style="yellow")

    for user in users:
        table.add_row(str(user.id), user.email, user.username or "", user.full_name, user.role.value)

    console.print(table)
    console.print(f"\n[green]Showing {len(users)} of {total} users[/green]")
