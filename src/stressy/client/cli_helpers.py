"""Helper functions for CLI commands."""

import logging

import click

from stressy.models import SourceCitation
from stressy.service.database import count_papers, create_database, database_exists
from stressy.settings import StressySettings

logger = logging.getLogger(__name__)


def ensure_database_exists(
    settings: StressySettings,
    create_if_missing: bool = False,
) -> bool:
    """Check if database exists, optionally create it.

    Args:
        settings: Settings naming the RavenDB server and database
        create_if_missing: If True, attempt to create the database

    Returns:
        True if database exists (or was created)

    Raises:
        click.Abort: If database doesn't exist and can't be created
    """
    url, db_name = settings.ravendb_url, settings.ravendb_database
    if database_exists(url, db_name):
        return True

    if create_if_missing:
        click.echo("Database does not exist. Creating database...")
        try:
            create_database(url, db_name)
            click.echo("✓ Database created successfully!")
            return True
        except Exception as e:
            click.echo(f"✗ Failed to create database: {e}", err=True)
            click.echo("\nPlease ensure RavenDB is running and accessible.", err=True)
            raise click.Abort()

    click.echo(f"✗ Error: Database '{db_name}' does not exist!", err=True)
    click.echo("\nPlease create the database first using:", err=True)
    click.echo("  stressy-ingest <files...> --owner <id> --create-database", err=True)
    raise click.Abort()


def format_citation(index: int, citation: SourceCitation, max_length: int = 120) -> str:
    """Format a source citation for display.

    Args:
        index: Citation number (1-based)
        citation: The citation to format
        max_length: Maximum snippet length before truncation

    Returns:
        Formatted string for display
    """
    snippet = " ".join(citation.content_snippet.split())
    if len(snippet) > max_length:
        snippet = snippet[:max_length] + "..."
    return f"{index}. [{citation.type}] {citation.title}\n   {snippet}"


def get_database_info(
    settings: StressySettings, owner_id: str | None = None
) -> tuple[str, str, int | None]:
    """Get database connection info and paper count.

    Returns:
        Tuple of (url, database_name, paper_count or None if it could not be counted)
    """
    url, db_name = settings.ravendb_url, settings.ravendb_database

    paper_count = None
    try:
        paper_count = count_papers(url, db_name, owner_id)
    except Exception as e:
        logger.debug(f"Could not count papers in {db_name}: {e}")

    return url, db_name, paper_count
