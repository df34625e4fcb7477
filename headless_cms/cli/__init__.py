"""
Command Line Interface for the Headless CMS.
"""

from typing import Optional

import typer
import uvicorn
from rich import print as rprint
from rich.console import Console
from rich.panel import Panel
from rich.table import Table

from ..config import get_settings
from ..db.base import get_session_local, init_database
from ..errors import CMSError
from ..logging_config import configure_logging
from ..policy.roles import RoleService, UserService, seed_defaults
from ..schemas.roles import UserCreate
from ..workflow.engine import WorkflowEngine

app = typer.Typer(help="Headless CMS - dynamic content types, field permissions and editorial workflow")
console = Console()


@app.callback()
def main() -> None:
    configure_logging(get_settings())


@app.command()
def serve(
    port: Optional[int] = typer.Option(None, help="Port to run the API server on"),
    host: Optional[str] = typer.Option(None, help="Host to bind the server to"),
    dev: bool = typer.Option(False, help="Run in development mode with auto-reload"),
):
    """Start the API server."""
    settings = get_settings()
    host = host or settings.api_host
    port = port or settings.api_port
    rprint(Panel.fit(f"Starting Headless CMS on http://{host}:{port}", style="bold blue"))
    uvicorn.run(
        "headless_cms.main:app",
        host=host,
        port=port,
        reload=dev or settings.debug,
        workers=1 if (dev or settings.debug) else settings.api_workers,
    )


@app.command("init-db")
def init_db():
    """Create all database tables."""
    init_database()
    console.print("✅ Database initialized")


@app.command()
def seed():
    """Seed default roles and workflow transitions (idempotent)."""
    init_database()
    db = get_session_local()()
    try:
        created = seed_defaults(db)
    finally:
        db.close()
    console.print(
        f"✅ Seeded {created['roles']} roles and {created['transitions']} transitions"
    )


@app.command()
def roles():
    """List roles and their permission counts."""
    db = get_session_local()()
    try:
        rows = RoleService(db).list()
        table = Table(title="Roles", show_header=True, header_style="bold magenta")
        table.add_column("Name", style="cyan")
        table.add_column("Permissions", justify="right")
        table.add_column("Description")
        for role in rows:
            table.add_row(role.name, str(len(role.permissions)), role.description or "")
    finally:
        db.close()
    console.print(table)


@app.command("create-user")
def create_user(
    email: str = typer.Argument(..., help="User email"),
    role: str = typer.Option("admin", help="Role name"),
    display_name: Optional[str] = typer.Option(None, help="Display name"),
):
    """Create a user bound to a role and print its id (the X-User-Id value)."""
    db = get_session_local()()
    try:
        user = UserService(db).create(
            UserCreate(email=email, role=role, display_name=display_name)
        )
        console.print(f"✅ Created user {user.email} ({role}): [bold]{user.id}[/bold]")
    except CMSError as e:
        console.print(f"❌ {e.message}")
        raise typer.Exit(code=1)
    finally:
        db.close()


@app.command()
def stats(content_type_id: str = typer.Argument(..., help="Content type id")):
    """Show workflow statistics for a content type."""
    db = get_session_local()()
    try:
        counts = WorkflowEngine(db).statistics(content_type_id)
    except CMSError as e:
        console.print(f"❌ {e.message}")
        raise typer.Exit(code=1)
    finally:
        db.close()

    table = Table(title="Workflow Statistics", show_header=True, header_style="bold magenta")
    table.add_column("Status", style="cyan")
    table.add_column("Entries", justify="right", style="green")
    for status, count in counts.items():
        table.add_row(status, str(count))
    console.print(table)


if __name__ == "__main__":
    app()
