"""Command-line interface for Stressy using Click."""

import asyncio
import dataclasses
from pathlib import Path

import click

from stressy.client.cli_helpers import (
    ensure_database_exists,
    format_citation,
    get_database_info,
)
from stressy.errors import GenerationFailed, StressyError
from stressy.models import IngestionResult, QuerySelection
from stressy.service.bootstrap import Services, build_services
from stressy.service.database import database_exists, delete_database
from stressy.settings import StressySettings, configure_logging


async def _ingest_files(
    services: Services, owner_id: str, files: tuple[Path, ...]
) -> list[IngestionResult]:
    results = []
    for path in files:
        try:
            result = await services.ingestion.ingest(owner_id, path.name, path.read_bytes())
        except (OSError, StressyError) as e:
            click.echo(f"  ✗ Error processing {path.name}: {e}", err=True)
            continue
        click.echo(f"  ✓ {result.name}: {result.chunk_count} chunk(s), stored as {result.id}")
        results.append(result)
    return results


@click.command()
@click.argument(
    "files",
    nargs=-1,
    required=True,
    type=click.Path(exists=True, file_okay=True, dir_okay=False, path_type=Path),
)
@click.option(
    "--owner", required=True, envvar="STRESSY_OWNER", help="Owner id to store the papers under"
)
@click.option(
    "--create-database",
    "create_database_flag",
    is_flag=True,
    default=False,
    help="Create the RavenDB database if it doesn't exist",
)
@click.option(
    "--max-chunk-length",
    type=click.IntRange(min=1),
    default=None,
    help="Maximum characters per chunk (default: from MAX_CHUNK_LENGTH env or 1000)",
)
def ingest(
    files: tuple[Path, ...],
    owner: str,
    create_database_flag: bool,
    max_chunk_length: int | None,
) -> None:
    """Ingest paper FILES (PDF or text) into the Stressy knowledge base.

    Example:
        stressy-ingest paper.pdf --owner alice
        stressy-ingest papers/*.pdf --owner alice --create-database
    """
    configure_logging()
    settings = StressySettings.from_env()
    if max_chunk_length is not None:
        settings = dataclasses.replace(settings, max_chunk_length=max_chunk_length)

    ensure_database_exists(settings, create_if_missing=create_database_flag)

    click.echo(f"Found {len(files)} file(s)")
    click.echo(f"Using embedding model: {settings.embedding_model}")
    click.echo(f"Max chunk length: {settings.max_chunk_length}\n")

    services = build_services(settings)
    results = asyncio.run(_ingest_files(services, owner, files))

    if not results:
        click.echo("\n✗ No papers were ingested.", err=True)
        raise click.Abort()
    click.echo(f"\n✓ Ingestion complete! Stored {len(results)} of {len(files)} paper(s).")


@click.command()
@click.argument("query", type=str)
@click.option(
    "--owner", required=True, envvar="STRESSY_OWNER", help="Owner whose materials are used"
)
@click.option("--paper", "paper_ids", multiple=True, help="Paper id to include (repeatable)")
@click.option("--notes", is_flag=True, default=False, help="Include your notes")
@click.option("--whiteboard", is_flag=True, default=False, help="Include your whiteboard")
def ask(
    query: str,
    owner: str,
    paper_ids: tuple[str, ...],
    notes: bool,
    whiteboard: bool,
) -> None:
    """Ask Stressy Bot a research QUERY about your selected materials.

    Example:
        stressy-ask "What gaps do these papers leave?" --owner alice --paper 3f2a --notes
    """
    configure_logging()
    settings = StressySettings.from_env()
    selection = QuerySelection(
        document_ids=list(paper_ids), include_notes=notes, include_whiteboard=whiteboard
    )

    services = build_services(settings)
    try:
        result = asyncio.run(services.query.answer(query, selection, owner))
    except GenerationFailed as e:
        click.echo(f"✗ {e.user_message}", err=True)
        raise click.Abort()
    except StressyError as e:
        click.echo(f"✗ Error: {e}", err=True)
        raise click.Abort()

    click.echo(result.answer)
    if result.sources:
        click.echo("\nSources:")
        for i, citation in enumerate(result.sources, 1):
            click.echo(format_citation(i, citation))


@click.command()
@click.option("--owner", default=None, help="Only count papers of this owner")
def count(owner: str | None) -> None:
    """Show the number of papers in the database.

    Example:
        stressy-count
        stressy-count --owner alice
    """
    settings = StressySettings.from_env()
    ensure_database_exists(settings)
    _, _, paper_count = get_database_info(settings, owner)
    if paper_count is not None:
        click.echo(f"📊 Database contains {paper_count} paper(s)")
    else:
        click.echo("✗ Error counting papers", err=True)
        raise click.Abort()


@click.command()
@click.option("--yes", "-y", is_flag=True, default=False, help="Skip confirmation prompt")
def delete_db(yes: bool) -> None:
    """Delete the RavenDB database and all its contents.

    WARNING: This is irreversible and deletes all papers, notes and whiteboards.

    Example:
        stressy-delete-db          # Will prompt for confirmation
        stressy-delete-db --yes    # Skip confirmation
    """
    settings = StressySettings.from_env()
    url, db_name, paper_count = get_database_info(settings)

    if not database_exists(url, db_name):
        click.echo(f"✓ Database '{db_name}' does not exist at {url}")
        return

    if not yes:
        click.echo(f"⚠️  WARNING: You are about to delete the database '{db_name}'")
        click.echo(f"   Location: {url}\n")
        click.echo("This will permanently delete:")
        click.echo("  • All uploaded papers and their embeddings")
        click.echo("  • All notes and whiteboards\n")

        if paper_count is not None:
            click.echo(f"📊 Current database contains: {paper_count} paper(s)\n")

        if not click.confirm("Are you sure you want to proceed?", default=False):
            click.echo("Deletion cancelled.")
            return

    click.echo(f"🗑️  Deleting database '{db_name}'...")
    try:
        delete_database(url, db_name)
        click.echo(f"✓ Database '{db_name}' successfully deleted!")
        click.echo("\nTo create a new database, run:")
        click.echo("  stressy-ingest <files...> --owner <id> --create-database")
    except Exception as e:
        click.echo(f"✗ Error deleting database: {e}", err=True)
        raise click.Abort()


if __name__ == "__main__":
    ingest()
