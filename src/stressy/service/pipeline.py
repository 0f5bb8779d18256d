"""Ingestion and query pipelines.

Ingestion: extract text -> chunk -> embed every chunk concurrently ->
aggregate -> store one paper record. Nothing is written unless every step
succeeds.

Query: assemble context -> generate -> parse the answer into insights.
"""

import asyncio
import logging
import uuid

from stressy.constants import (
    DEFAULT_EMBEDDING_CONCURRENCY,
    DEFAULT_MAX_CHUNK_LENGTH,
    DEFAULT_PROVIDER_TIMEOUT_SECONDS,
)
from stressy.errors import EmptyDocument, GenerationFailed
from stressy.llm.base import (
    GenerationBlocked,
    GenerationError,
    GenerationParams,
    GenerationProvider,
    GenerationSuccess,
)
from stressy.models import Chunk, IngestionResult, QueryResult, QuerySelection
from stressy.service.aggregation import aggregate_embeddings, content_preview
from stressy.service.answers import parse_answer
from stressy.service.context import ContextAssembler
from stressy.service.database.models import PaperRecord
from stressy.service.database.storage import MaterialStore
from stressy.service.embeddings import Embedder
from stressy.service.ingest import chunk_text, extract_text

logger = logging.getLogger(__name__)


class IngestionPipeline:
    """Turns an uploaded file into a stored paper record."""

    def __init__(
        self,
        embedder: Embedder,
        store: MaterialStore,
        max_chunk_length: int = DEFAULT_MAX_CHUNK_LENGTH,
        concurrency: int = DEFAULT_EMBEDDING_CONCURRENCY,
    ) -> None:
        self.embedder = embedder
        self.store = store
        self.max_chunk_length = max_chunk_length
        self.concurrency = max(1, concurrency)

    async def embed_chunks(self, chunks: list[Chunk]) -> list[list[float]]:
        """Embed all chunks of one document in parallel.

        At most ``concurrency`` provider calls are in flight at once. If the
        surrounding task is cancelled, chunks still waiting for a slot are
        never sent to the provider.

        Args:
            chunks: The document's chunks

        Returns:
            list[list[float]]: One embedding per chunk, in chunk order
        """
        semaphore = asyncio.Semaphore(self.concurrency)

        async def embed_one(chunk: Chunk) -> list[float]:
            async with semaphore:
                return await self.embedder.aembed(chunk.text)

        async with asyncio.TaskGroup() as group:
            tasks = [group.create_task(embed_one(chunk)) for chunk in chunks]
        return [task.result() for task in tasks]

    async def ingest(
        self,
        owner_id: str,
        name: str,
        data: bytes,
        document_id: str | None = None,
    ) -> IngestionResult:
        """Ingest one document.

        Args:
            owner_id: Owner of the new paper
            name: Display name, usually the original filename
            data: Raw file bytes
            document_id: Identifier to store the paper under; generated when omitted

        Returns:
            IngestionResult: id, name, size and chunk count of the stored paper

        Raises:
            EmptyDocument: If the file has no extractable text
            DimensionMismatch: If chunk embeddings disagree on dimension
            PaperExists: If ``document_id`` is already taken
            StorageError: If the final write fails
        """
        paper_id = document_id or uuid.uuid4().hex
        logger.info(f"📥 Ingesting '{name}' ({len(data)} bytes) as {paper_id}")

        text = extract_text(data, name)
        chunks = chunk_text(text, self.max_chunk_length)
        if not chunks:
            raise EmptyDocument(name)
        logger.info(f"  Created {len(chunks)} chunks")

        embeddings = await self.embed_chunks(chunks)
        document_embedding = aggregate_embeddings(embeddings)

        record = PaperRecord(
            Id=paper_id,
            name=name,
            size_bytes=len(data),
            content=content_preview(text),
            embedding=document_embedding,
            owner_id=owner_id,
            chunk_count=len(chunks),
        )
        self.store.save_paper(record)

        logger.info(f"✅ Ingested '{name}' with {len(chunks)} chunks")
        return IngestionResult(
            id=paper_id, name=name, size_bytes=len(data), chunk_count=len(chunks)
        )


class QueryPipeline:
    """Answers a question from a user's selected materials."""

    def __init__(
        self,
        assembler: ContextAssembler,
        generator: GenerationProvider | None,
        params: GenerationParams | None = None,
        timeout: float = DEFAULT_PROVIDER_TIMEOUT_SECONDS,
    ) -> None:
        self.assembler = assembler
        self.generator = generator
        self.params = params or GenerationParams()
        self.timeout = timeout

    async def answer(self, query: str, selection: QuerySelection, owner_id: str) -> QueryResult:
        """Answer one query.

        Args:
            query: The user's question
            selection: Sources to include
            owner_id: Owner whose materials are read

        Returns:
            QueryResult: Answer text, citations and parsed insight sections

        Raises:
            EmptySelection: If nothing is selected
            SourceNotFound: If a selected paper is missing
            GenerationFailed: If no answer could be generated
        """
        context = self.assembler.assemble(query, selection, owner_id)

        if self.generator is None:
            raise GenerationFailed("Generation provider not configured")

        try:
            async with asyncio.timeout(self.timeout):
                result = await self.generator.generate(context.prompt, self.params)
        except TimeoutError:
            logger.error(f"❌ Generation timed out after {self.timeout}s")
            raise GenerationFailed(f"Generation timed out after {self.timeout}s") from None

        match result:
            case GenerationSuccess(text=text):
                return QueryResult(
                    answer=text, sources=context.citations, insights=parse_answer(text)
                )
            case GenerationBlocked(reason=reason):
                logger.warning(f"⚠️ Generation blocked: {reason}")
                raise GenerationFailed(f"Blocked by safety filter: {reason}")
            case GenerationError(message=message):
                logger.error(f"❌ Generation failed: {message}")
                raise GenerationFailed(message)
            case _:
                raise GenerationFailed(f"Unexpected generation result: {result!r}")
