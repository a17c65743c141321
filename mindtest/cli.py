"""
mindtest CLI - Command line interface for the quiz analytics backend.

Usage:
    mindtest --help              Show all commands
    mindtest serve               Start the HTTP server
    mindtest init-db             Create the events and results tables
    mindtest migrate             Run alembic migrations
    mindtest dashboard           Print the dashboard summary as JSON
    mindtest realtime            Print the realtime snapshot as JSON
"""

import asyncio

import typer

app = typer.Typer(
    name="mindtest",
    help="mindtest CLI - quiz event and result collection",
    no_args_is_help=True,
)


def _print_success(message: str) -> None:
    """Print a success message."""
    typer.echo(f"  ✅ {message}")


def _print_error(message: str) -> None:
    """Print an error message to stderr."""
    typer.echo(f"❌ {message}", err=True)


async def _with_storage(action):
    """Run ``action(storage, settings)`` against a short-lived Storage."""
    from mindtest.config import get_settings
    from mindtest.core.storage import Storage

    settings = get_settings()
    storage = Storage.from_url(settings.database_url)
    try:
        return await action(storage, settings)
    finally:
        await storage.dispose()


@app.command()
def serve(
    reload: bool = typer.Option(False, "--reload", "-r", help="Enable hot reload"),
    host: str | None = typer.Option(None, "--host", help="Interface to bind (default from HOST)"),
    port: int | None = typer.Option(None, "--port", "-p", help="Port to run on (default from PORT)"),
):
    """Start the API server."""
    import uvicorn

    from mindtest.config import get_settings

    settings = get_settings()
    uvicorn.run(
        "mindtest.main:app",
        host=host or settings.host,
        port=port or settings.port,
        reload=reload,
    )


@app.command("init-db")
def init_db():
    """Create the events and results tables (and indexes) if missing."""
    from mindtest.core.errors import MindtestError
    from mindtest.core.logging import setup_logging

    setup_logging()

    async def run(storage, settings):
        await storage.create_all()

    try:
        asyncio.run(_with_storage(run))
    except MindtestError as e:
        _print_error(e.message)
        raise typer.Exit(1) from e
    _print_success("Tables ready")


@app.command()
def migrate():
    """Run database migrations (alembic upgrade head)."""
    import subprocess

    result = subprocess.run(["alembic", "upgrade", "head"], check=False)
    raise typer.Exit(result.returncode)


@app.command()
def dashboard():
    """Print the dashboard summary as JSON."""
    from mindtest.core.errors import MindtestError
    from mindtest.core.logging import setup_logging
    from mindtest.services.analytics import AnalyticsService

    setup_logging()

    async def run(storage, settings):
        return await AnalyticsService(storage, timezone=settings.timezone).dashboard()

    try:
        summary = asyncio.run(_with_storage(run))
    except MindtestError as e:
        _print_error(e.message)
        raise typer.Exit(1) from e
    typer.echo(summary.model_dump_json(indent=2))


@app.command()
def realtime():
    """Print the trailing five-minute activity snapshot as JSON."""
    from mindtest.core.errors import MindtestError
    from mindtest.core.logging import setup_logging
    from mindtest.services.analytics import AnalyticsService

    setup_logging()

    async def run(storage, settings):
        return await AnalyticsService(storage, timezone=settings.timezone).realtime()

    try:
        snapshot = asyncio.run(_with_storage(run))
    except MindtestError as e:
        _print_error(e.message)
        raise typer.Exit(1) from e
    typer.echo(snapshot.model_dump_json(indent=2))


if __name__ == "__main__":
    app()
