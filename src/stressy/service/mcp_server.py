"""FastMCP server exposing paper ingestion and Stressy Bot queries as tools."""

import logging
from pathlib import Path
from typing import Any

from fastmcp import FastMCP

from stressy.errors import GenerationFailed, StressyError
from stressy.models import QuerySelection
from stressy.service.bootstrap import Services, build_services
from stressy.settings import StressySettings, configure_logging

logger = logging.getLogger(__name__)

# Create FastMCP instance
mcp = FastMCP("Stressy Research Assistant")

_services: Services | None = None


def get_services() -> Services:
    """Build the services on first use and reuse them afterwards."""
    global _services
    if _services is None:
        _services = build_services(StressySettings.from_env())
    return _services


async def ingest_paper_impl(
    services: Services, owner_id: str, file_path: str, name: str | None = None
) -> dict[str, Any]:
    """Ingest a paper from a local file.

    Returns:
        dict with success flag and either the paper summary or a message
    """
    path = Path(file_path)
    logger.info(f"📥 MCP Tool ingest_paper: {path} for owner {owner_id}")

    try:
        data = path.read_bytes()
        result = await services.ingestion.ingest(owner_id, name or path.name, data)
    except OSError as e:
        logger.error(f"❌ MCP Tool: Cannot read {path}: {e}")
        return {"success": False, "message": f"Cannot read file: {e}"}
    except StressyError as e:
        logger.error(f"❌ MCP Tool: Ingestion failed: {e}")
        return {"success": False, "message": str(e)}

    logger.info(f"✅ MCP Tool: Ingested {result.name} as {result.id}")
    return {"success": True, "paper": result.to_dict()}


async def ask_stressy_impl(
    services: Services,
    owner_id: str,
    query: str,
    paper_ids: list[str] | None = None,
    include_notes: bool = False,
    include_whiteboard: bool = False,
) -> dict[str, Any]:
    """Answer a question from the owner's selected materials.

    Returns:
        dict with answer, sources and insights, or an error message
    """
    logger.info(f"🔍 MCP Tool ask_stressy: '{query[:100]}'")
    selection = QuerySelection(
        document_ids=list(paper_ids or []),
        include_notes=include_notes,
        include_whiteboard=include_whiteboard,
    )

    try:
        result = await services.query.answer(query, selection, owner_id)
    except GenerationFailed as e:
        logger.error(f"❌ MCP Tool: Generation failed: {e.reason}")
        return {"error": e.user_message}
    except StressyError as e:
        logger.warning(f"⚠️ MCP Tool: {e}")
        return {"error": str(e)}

    return result.to_dict()


def list_papers_impl(services: Services, owner_id: str) -> list[dict[str, Any]]:
    """List the owner's papers as summaries."""
    papers = services.store.list_papers(owner_id)
    logger.info(f"📂 MCP Tool list_papers: {len(papers)} paper(s) for owner {owner_id}")
    return [paper.summary() for paper in papers]


@mcp.tool()
async def ingest_paper(owner_id: str, file_path: str, name: str | None = None) -> dict[str, Any]:
    """
    Reads a paper from a local file, splits it into chunks, embeds them and
    stores the paper with its document-level embedding.

    Args:
        owner_id: Owner the paper belongs to
        file_path: Path to a PDF or text file
        name: Optional display name (default: the file name)
    """
    return await ingest_paper_impl(get_services(), owner_id, file_path, name)


@mcp.tool()
async def ask_stressy(
    owner_id: str,
    query: str,
    paper_ids: list[str] | None = None,
    include_notes: bool = False,
    include_whiteboard: bool = False,
) -> dict[str, Any]:
    """
    Asks Stressy Bot a research question grounded in the selected papers,
    the owner's notes and/or whiteboard. Returns the answer, the sources
    used, and the answer split into titled insights.

    Args:
        owner_id: Owner whose materials are used
        query: The research question
        paper_ids: Papers to include
        include_notes: Include the owner's notes
        include_whiteboard: Include the owner's whiteboard
    """
    return await ask_stressy_impl(
        get_services(), owner_id, query, paper_ids, include_notes, include_whiteboard
    )


@mcp.tool()
async def list_papers(owner_id: str) -> list[dict[str, Any]]:
    """
    Lists the papers an owner has uploaded.

    Args:
        owner_id: Owner whose papers to list
    """
    return list_papers_impl(get_services(), owner_id)


def main() -> None:
    """Entry point for the MCP server command-line interface."""
    configure_logging()
    logger.info("🚀 Starting Stressy MCP Server...")
    mcp.run(transport="sse", host="0.0.0.0", port=8001)


if __name__ == "__main__":
    main()
