"""Builds the Stressy services from settings."""

import logging
from dataclasses import dataclass

from stressy.llm import get_llm_service
from stressy.llm.base import LLMService
from stressy.service.context import ContextAssembler
from stressy.service.database import RavenMaterialStore, create_document_store
from stressy.service.database.storage import MaterialStore
from stressy.service.embeddings import Embedder, Tokenizer
from stressy.service.pipeline import IngestionPipeline, QueryPipeline
from stressy.settings import StressySettings

logger = logging.getLogger(__name__)


@dataclass
class Services:
    """Everything an entrypoint needs to serve ingestion and queries."""

    settings: StressySettings
    store: MaterialStore
    llm_service: LLMService | None
    ingestion: IngestionPipeline
    query: QueryPipeline


def build_services(
    settings: StressySettings,
    store: MaterialStore | None = None,
    llm_service: LLMService | None = None,
    tokenizer: Tokenizer | None = None,
) -> Services:
    """Wire store, provider, embedder and pipelines together.

    Args:
        settings: Runtime settings
        store: Storage collaborator; a RavenDB store is created when omitted
        llm_service: Provider; built from settings when omitted
        tokenizer: Fallback tokenizer (default: tiktoken gpt2)

    Returns:
        Services: The wired services
    """
    logger.info("🔧 Initializing services...")

    if store is None:
        store = RavenMaterialStore(
            create_document_store(settings.ravendb_url, settings.ravendb_database)
        )
    if llm_service is None:
        llm_service = get_llm_service(settings.llm_config())

    embedder = Embedder(
        provider=llm_service,
        tokenizer=tokenizer,
        dimensions=settings.embedding_dimensions,
        timeout=settings.provider_timeout,
    )
    ingestion = IngestionPipeline(
        embedder=embedder,
        store=store,
        max_chunk_length=settings.max_chunk_length,
        concurrency=settings.embedding_concurrency,
    )
    query = QueryPipeline(
        assembler=ContextAssembler(store),
        generator=llm_service,
        timeout=settings.provider_timeout,
    )

    logger.info("✅ Services initialized")
    return Services(
        settings=settings,
        store=store,
        llm_service=llm_service,
        ingestion=ingestion,
        query=query,
    )
