"""Car rental entity service CLI.

Provides commands to serve the REST API and to rebuild the search indexes
from the relational store.
"""

import asyncio
import logging
import sys
from typing import Optional

import structlog
import typer
import uvicorn

from carsonrent.config import Settings, load_settings
from carsonrent.services.factory import create_application_context
from carsonrent.services.resource import ReindexResult
from carsonrent.web.app import create_app


def configure_logging(level: str) -> None:
    structlog.configure(
        processors=[
            structlog.processors.add_log_level,
            structlog.processors.TimeStamper(fmt="iso"),
            structlog.dev.ConsoleRenderer(),
        ],
        logger_factory=lambda name=None: structlog.PrintLogger(file=sys.stderr),
        wrapper_class=structlog.make_filtering_bound_logger(logging.getLevelName(level.upper())),
        context_class=dict,
        cache_logger_on_first_use=False,
    )


logger = structlog.get_logger(__name__)

app = typer.Typer(
    name="carsonrent",
    help="""Serve the car rental REST API and maintain its search indexes.

Examples:

  # Start the REST API server
  uv run carsonrent serve --port 8080

  # Rebuild every search index from the database
  uv run carsonrent reindex""",
    rich_markup_mode="markdown",
)


def _settings(
    database: Optional[str],
    search_path: Optional[str],
    search_host: Optional[str],
    log_level: Optional[str],
) -> Settings:
    settings = load_settings(
        database_url=database,
        search_path=search_path,
        search_host=search_host,
        log_level=log_level,
    )
    configure_logging(settings.log_level)
    return settings


@app.command()
def serve(
    host: str = typer.Option(
        "127.0.0.1",
        "--host",
        "-h",
        help="Host to serve on",
    ),
    port: int = typer.Option(
        8080,
        "--port",
        "-p",
        help="Port to serve on",
    ),
    database: Optional[str] = typer.Option(
        None,
        "--database",
        "-d",
        help="SQLite database path or SQLAlchemy URL (default: $CARSONRENT_DATABASE_URL)",
    ),
    search_path: Optional[str] = typer.Option(
        None,
        "--search-path",
        help="Directory for the search index (default: $CARSONRENT_SEARCH_PATH)",
    ),
    search_host: Optional[str] = typer.Option(
        None,
        "--search-host",
        help="ChromaDB server host; overrides --search-path",
    ),
    log_level: Optional[str] = typer.Option(
        None,
        "--log-level",
        "-l",
        help="Log level (debug, info, warning, error)",
    ),
) -> None:
    """Start the REST API server."""
    settings = _settings(database, search_path, search_host, log_level)
    context = create_application_context(settings)

    logger.info("starting_api_server", host=host, port=port, database=settings.database_url)
    uvicorn.run(create_app(context), host=host, port=port, log_level=settings.log_level)


@app.command()
def reindex(
    database: Optional[str] = typer.Option(
        None,
        "--database",
        "-d",
        help="SQLite database path or SQLAlchemy URL (default: $CARSONRENT_DATABASE_URL)",
    ),
    search_path: Optional[str] = typer.Option(
        None,
        "--search-path",
        help="Directory for the search index (default: $CARSONRENT_SEARCH_PATH)",
    ),
    search_host: Optional[str] = typer.Option(
        None,
        "--search-host",
        help="ChromaDB server host; overrides --search-path",
    ),
    log_level: Optional[str] = typer.Option(
        None,
        "--log-level",
        "-l",
        help="Log level (debug, info, warning, error)",
    ),
) -> None:
    """Rebuild every search index from the database."""
    settings = _settings(database, search_path, search_host, log_level)

    async def run_reindex() -> dict[str, ReindexResult]:
        context = create_application_context(settings)
        try:
            await context.initialize()
            return await context.reindex()
        finally:
            await context.close()

    results = asyncio.run(run_reindex())

    for name, result in results.items():
        typer.echo(f"Reindexed {result.indexed} {name} entities")


@app.command()
def version() -> None:
    """Show version information."""
    from carsonrent import __version__

    typer.echo(f"carsonrent {__version__}")
