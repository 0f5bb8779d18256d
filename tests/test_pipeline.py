"""Tests for the ingestion and query pipelines."""

import asyncio
import threading
import time

import pytest

from stressy.constants import GENERATION_APOLOGY
from stressy.errors import (
    DimensionMismatch,
    EmptyDocument,
    EmptySelection,
    GenerationFailed,
    PaperExists,
)
from stressy.llm.base import GenerationBlocked, GenerationError, GenerationSuccess
from stressy.models import InsightSection, QuerySelection
from stressy.service.context import ContextAssembler
from stressy.service.embeddings import Embedder
from stressy.service.ingest import chunk_text
from stressy.service.pipeline import IngestionPipeline, QueryPipeline

PAPER_TEXT = (
    "Chronic stress raises cortisol.\n\n"
    "Cortisol impairs memory consolidation.\n\n"
    "Sleep restores it."
)


class TestIngestionPipeline:
    """Tests for IngestionPipeline.ingest."""

    @pytest.mark.asyncio
    async def test_ingest_stores_aggregated_record(self, services, memory_store, fake_llm):
        """Test a document is chunked, embedded, aggregated and stored once."""
        result = await services.ingestion.ingest("alice", "paper.txt", PAPER_TEXT.encode())

        assert result.name == "paper.txt"
        assert result.size_bytes == len(PAPER_TEXT.encode())
        assert result.chunk_count == 3
        assert len(result.id) == 32

        record = memory_store.papers[result.id]
        assert record.owner_id == "alice"
        assert record.content == PAPER_TEXT
        assert record.embedding == [0.5] * 8
        assert record.chunk_count == 3
        assert memory_store.calls == ["save_paper"]
        assert len(fake_llm.embedded) == 3

    @pytest.mark.asyncio
    async def test_ingest_uses_supplied_id(self, services, memory_store):
        """Test a caller-supplied id is used as the paper id."""
        result = await services.ingestion.ingest(
            "alice", "paper.txt", b"Some text.", document_id="my-paper"
        )

        assert result.id == "my-paper"
        assert "my-paper" in memory_store.papers

    @pytest.mark.asyncio
    async def test_ingest_without_provider_uses_fallback(self, memory_store, fake_tokenizer):
        """Test ingestion succeeds on fallback embeddings of length D."""
        embedder = Embedder(None, tokenizer=fake_tokenizer, dimensions=8)
        pipeline = IngestionPipeline(embedder, memory_store, max_chunk_length=50)

        result = await pipeline.ingest("alice", "paper.txt", PAPER_TEXT.encode())

        assert len(memory_store.papers[result.id].embedding) == 8

    @pytest.mark.asyncio
    async def test_empty_document_is_rejected(self, services, memory_store, fake_llm):
        """Test a file with no text fails before any provider or storage call."""
        with pytest.raises(EmptyDocument):
            await services.ingestion.ingest("alice", "empty.txt", b"")

        assert fake_llm.embedded == []
        assert memory_store.papers == {}

    @pytest.mark.asyncio
    async def test_taken_id_is_refused(self, services, memory_store, stored_paper):
        """Test ingesting under another owner's paper id leaves that paper untouched."""
        with pytest.raises(PaperExists):
            await services.ingestion.ingest(
                "mallory", "paper.txt", b"Replacement.", document_id="paper-1"
            )

        assert memory_store.papers["paper-1"] is stored_paper
        assert memory_store.papers["paper-1"].owner_id == "alice"

    @pytest.mark.asyncio
    async def test_dimension_mismatch_writes_nothing(self, memory_store):
        """Test inconsistent chunk embeddings abort ingestion before storage."""

        class UnevenEmbedder:
            def __init__(self):
                self.sizes = iter([8, 4, 4])

            async def aembed(self, text):
                return [0.1] * next(self.sizes)

        pipeline = IngestionPipeline(UnevenEmbedder(), memory_store, max_chunk_length=50)

        with pytest.raises(DimensionMismatch):
            await pipeline.ingest("alice", "paper.txt", PAPER_TEXT.encode())

        assert memory_store.calls == []

    @pytest.mark.asyncio
    async def test_provider_vector_of_wrong_size_is_replaced(self, memory_store, fake_tokenizer):
        """Test a provider answering with the wrong dimension still yields a length D paper."""

        class ShortOnSecondCall:
            def __init__(self):
                self.calls = 0
                self.lock = threading.Lock()

            def embed(self, text):
                with self.lock:
                    self.calls += 1
                    size = 4 if self.calls == 2 else 8
                return [0.1] * size

        embedder = Embedder(ShortOnSecondCall(), tokenizer=fake_tokenizer, dimensions=8)
        pipeline = IngestionPipeline(embedder, memory_store, max_chunk_length=50)

        result = await pipeline.ingest("alice", "paper.txt", PAPER_TEXT.encode())

        assert len(memory_store.papers[result.id].embedding) == 8
        assert memory_store.calls == ["save_paper"]

    @pytest.mark.asyncio
    async def test_cancelled_ingest_stops_embedding_and_writes_nothing(
        self, memory_store, fake_tokenizer
    ):
        """Test cancelling mid-embedding sends no further chunks and stores nothing."""

        class GatedProvider:
            def __init__(self):
                self.calls = 0
                self.started = threading.Event()
                self.release = threading.Event()

            def embed(self, text):
                self.calls += 1
                self.started.set()
                self.release.wait(timeout=5)
                return [1.0] * 8

        provider = GatedProvider()
        embedder = Embedder(provider, tokenizer=fake_tokenizer, dimensions=8)
        pipeline = IngestionPipeline(embedder, memory_store, max_chunk_length=10, concurrency=1)
        text = "\n\n".join(f"Para {i}." for i in range(6))

        task = asyncio.create_task(pipeline.ingest("alice", "paper.txt", text.encode()))
        try:
            assert await asyncio.to_thread(provider.started.wait, 5)
            task.cancel()
            with pytest.raises(asyncio.CancelledError):
                await task
        finally:
            provider.release.set()

        assert provider.calls < 6
        assert memory_store.calls == []

    @pytest.mark.asyncio
    async def test_embedding_concurrency_is_bounded(self, memory_store, fake_tokenizer):
        """Test no more than ``concurrency`` provider calls run at once."""

        class SlowProvider:
            def __init__(self):
                self.active = 0
                self.peak = 0
                self.lock = threading.Lock()

            def embed(self, text):
                with self.lock:
                    self.active += 1
                    self.peak = max(self.peak, self.active)
                time.sleep(0.05)
                with self.lock:
                    self.active -= 1
                return [1.0] * 8

        provider = SlowProvider()
        embedder = Embedder(provider, tokenizer=fake_tokenizer, dimensions=8)
        pipeline = IngestionPipeline(embedder, memory_store, max_chunk_length=10, concurrency=2)
        text = "\n\n".join(f"Para {i}." for i in range(6))

        result = await pipeline.ingest("alice", "paper.txt", text.encode())

        assert result.chunk_count == 6
        assert 1 <= provider.peak <= 2

    @pytest.mark.asyncio
    async def test_embed_chunks_keeps_chunk_order(self, memory_store, fake_tokenizer):
        """Test results line up with chunks even when calls finish out of order."""

        class EchoProvider:
            def embed(self, text):
                time.sleep(0.01 * (5 - int(text[-2])))
                return [float(text[-2])]

        embedder = Embedder(EchoProvider(), tokenizer=fake_tokenizer, dimensions=1)
        pipeline = IngestionPipeline(embedder, memory_store, max_chunk_length=10, concurrency=4)
        text = "\n\n".join(f"Para {i}." for i in range(4))

        vectors = await pipeline.embed_chunks(chunk_text(text, 10))

        assert vectors == [[0.0], [1.0], [2.0], [3.0]]


class TestQueryPipeline:
    """Tests for QueryPipeline.answer."""

    @pytest.mark.asyncio
    async def test_answer_with_sources_and_insights(self, services, stored_paper, fake_llm):
        """Test a successful query returns answer, citations and insights."""
        result = await services.query.answer(
            "What does cortisol do?", QuerySelection(document_ids=["paper-1"]), "alice"
        )

        assert result.answer == "## Finding\nPapers agree."
        assert result.insights == [InsightSection(title="Finding", content="Papers agree.")]
        assert [source.title for source in result.sources] == ["stress.pdf"]
        assert "What does cortisol do?" in fake_llm.prompts[0]

    @pytest.mark.asyncio
    async def test_empty_selection_skips_generation(self, services, fake_llm):
        """Test an empty selection fails before the provider is called."""
        with pytest.raises(EmptySelection):
            await services.query.answer("Why?", QuerySelection(), "alice")

        assert fake_llm.prompts == []

    @pytest.mark.asyncio
    async def test_no_generator_fails_with_apology(self, memory_store, stored_paper):
        """Test a missing provider surfaces the generic apology."""
        pipeline = QueryPipeline(ContextAssembler(memory_store), generator=None)

        with pytest.raises(GenerationFailed) as exc_info:
            await pipeline.answer("Why?", QuerySelection(document_ids=["paper-1"]), "alice")

        assert exc_info.value.user_message == GENERATION_APOLOGY

    @pytest.mark.asyncio
    @pytest.mark.parametrize(
        "result",
        [GenerationBlocked(reason="SAFETY"), GenerationError(message="HTTP 500")],
    )
    async def test_unsuccessful_generation_fails_with_apology(
        self, memory_store, stored_paper, fake_llm, result
    ):
        """Test blocked and errored generations map to GenerationFailed."""
        fake_llm.result = result
        pipeline = QueryPipeline(ContextAssembler(memory_store), generator=fake_llm)

        with pytest.raises(GenerationFailed) as exc_info:
            await pipeline.answer("Why?", QuerySelection(document_ids=["paper-1"]), "alice")

        assert exc_info.value.user_message == GENERATION_APOLOGY
        assert "SAFETY" in exc_info.value.reason or "HTTP 500" in exc_info.value.reason

    @pytest.mark.asyncio
    async def test_generation_timeout(self, memory_store, stored_paper):
        """Test a generation call slower than the timeout fails with the apology."""

        class SlowGenerator:
            async def generate(self, prompt, params):
                await asyncio.sleep(1)
                return GenerationSuccess(text="too late")

        pipeline = QueryPipeline(
            ContextAssembler(memory_store), generator=SlowGenerator(), timeout=0.05
        )

        with pytest.raises(GenerationFailed, match="timed out"):
            await pipeline.answer("Why?", QuerySelection(document_ids=["paper-1"]), "alice")
