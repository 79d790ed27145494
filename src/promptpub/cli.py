"""CLI commands for PromptPub."""

import asyncio
import sys
from pathlib import Path

import typer
from rich.console import Console
from rich.table import Table

from .core.config import settings
from .core.database import init_database, close_database, db_manager
from .core.database_setup import drop_all_tables, recreate_all_tables
from .core.exceptions import PromptPubError
from .models.diff import DiffLineType
from .services.diff_engine import compute_diff
from .services.version_service import VersionLifecycleManager

app = typer.Typer(
    name="promptpub",
    help="PromptPub prompt versioning CLI",
    add_completion=False,
)

console = Console()

DIFF_STYLES = {
    DiffLineType.ADDED: ("+", "green"),
    DiffLineType.REMOVED: ("-", "red"),
    DiffLineType.UNCHANGED: (" ", "dim"),
}


@app.command()
def version():
    """Show application version."""
    console.print(f"PromptPub v{settings.app_version}")


@app.command()
def serve(
    host: str = typer.Option(settings.host, "--host", "-h", help="Host to bind"),
    port: int = typer.Option(settings.port, "--port", "-p", help="Port to bind"),
    reload: bool = typer.Option(settings.reload, "--reload", "-r", help="Enable auto-reload"),
):
    """Start the web server."""
    import uvicorn

    console.print(f"🚀 Starting PromptPub on {host}:{port}")

    uvicorn.run(
        "promptpub.main:app",
        host=host,
        port=port,
        reload=reload,
        log_level=settings.log_level.lower(),
    )


@app.command()
def config():
    """Show current configuration."""
    table = Table(title="PromptPub Configuration")
    table.add_column("Setting", style="cyan")
    table.add_column("Value", style="green")

    table.add_row("Environment", settings.environment)
    table.add_row("Debug", str(settings.debug))
    table.add_row("Host", settings.host)
    table.add_row("Port", str(settings.port))
    table.add_row("Database URL", db_manager._mask_db_url())
    table.add_row("Log Level", settings.log_level)
    table.add_row("Log Format", settings.log_format)
    table.add_row("Diff Max Cells", str(settings.diff_max_cells))
    table.add_row("Default Changelog", settings.default_changelog)

    console.print(table)


@app.command()
def diff(
    old_file: Path = typer.Argument(..., exists=True, dir_okay=False, help="Old version of the text"),
    new_file: Path = typer.Argument(..., exists=True, dir_okay=False, help="New version of the text"),
):
    """Show a line diff between two text files."""
    result = compute_diff(
        old_file.read_text(encoding="utf-8"),
        new_file.read_text(encoding="utf-8"),
    )

    for line in result.lines:
        marker, style = DIFF_STYLES[line.type]
        console.print(f"{marker} {line.content}", style=style, markup=False, highlight=False)

    console.print(f"[green]+{result.added}[/green] [red]-{result.removed}[/red]")


@app.command()
def history(prompt_id: str = typer.Argument(..., help="Prompt ID")):
    """List the versions of a prompt, newest first."""
    async def _history():
        try:
            if not await init_database():
                console.print("❌ Failed to connect to database")
                sys.exit(1)

            async with db_manager.get_session() as db:
                versions = await VersionLifecycleManager(db).list_versions(prompt_id)

            table = Table(title=f"Versions of {prompt_id}")
            table.add_column("Version", style="cyan")
            table.add_column("Status", style="green")
            table.add_column("Changelog")
            table.add_column("Created At")
            table.add_column("ID", style="dim")

            for item in versions:
                table.add_row(
                    item.version,
                    item.status,
                    item.changelog or "",
                    item.created_at.isoformat(sep=" ", timespec="seconds"),
                    item.id,
                )

            console.print(table)
        except PromptPubError as e:
            console.print(f"❌ {e.message}")
            sys.exit(1)
        finally:
            await close_database()

    asyncio.run(_history())


@app.command()
def db_create():
    """Create all database tables."""
    async def _create():
        try:
            if await init_database():
                console.print("✅ Database tables created successfully")
            else:
                console.print("❌ Failed to connect to database")
                sys.exit(1)
        except Exception as e:
            console.print(f"❌ Failed to create tables: {e}")
            sys.exit(1)
        finally:
            await close_database()

    asyncio.run(_create())


@app.command()
def db_drop():
    """Drop all database tables (WARNING: This will delete all data!)."""
    if not typer.confirm("⚠️  This will delete ALL data. Are you sure?"):
        console.print("Operation cancelled")
        return

    async def _drop():
        try:
            success = await db_manager.initialize()
            if success:
                await drop_all_tables(db_manager.engine)
                console.print("✅ Database tables dropped successfully")
            else:
                console.print("❌ Failed to connect to database")
                sys.exit(1)
        except Exception as e:
            console.print(f"❌ Failed to drop tables: {e}")
            sys.exit(1)
        finally:
            await close_database()

    asyncio.run(_drop())


@app.command()
def db_recreate():
    """Drop and recreate all database tables (WARNING: This will delete all data!)."""
    if not typer.confirm("⚠️  This will delete ALL data and recreate tables. Are you sure?"):
        console.print("Operation cancelled")
        return

    async def _recreate():
        try:
            success = await db_manager.initialize()
            if success:
                await recreate_all_tables(db_manager.engine)
                console.print("✅ Database tables recreated successfully")
            else:
                console.print("❌ Failed to connect to database")
                sys.exit(1)
        except Exception as e:
            console.print(f"❌ Failed to recreate tables: {e}")
            sys.exit(1)
        finally:
            await close_database()

    asyncio.run(_recreate())


@app.command()
def db_status():
    """Check database connection and table status."""
    async def _status():
        try:
            success = await db_manager.initialize()
            if success:
                from sqlalchemy import inspect

                async with db_manager.engine.connect() as conn:
                    tables = await conn.run_sync(
                        lambda sync_conn: inspect(sync_conn).get_table_names()
                    )

                table = Table(title="Database Status")
                table.add_column("Property", style="cyan")
                table.add_column("Value", style="green")

                table.add_row("Connection", "✅ Connected")
                table.add_row("Database Type", db_manager._get_db_type())
                table.add_row("Tables Found", str(len(tables)))

                if tables:
                    table.add_row("Table Names", ", ".join(sorted(tables)))
                else:
                    table.add_row("Table Names", "No tables found")

                console.print(table)
            else:
                console.print("❌ Failed to connect to database")
                sys.exit(1)
        except Exception as e:
            console.print(f"❌ Database status check failed: {e}")
            sys.exit(1)
        finally:
            await close_database()

    asyncio.run(_status())


def main():
    """Main CLI entry point."""
    app()


if __name__ == "__main__":
    main()
