"""Pytest configuration and shared fixtures for the test suite."""

import requests

import pytest

from stressy.errors import PaperExists
from stressy.llm.base import GenerationParams, GenerationResult, GenerationSuccess
from stressy.service.bootstrap import build_services
from stressy.service.database.models import NoteRecord, PaperRecord, WhiteboardRecord
from stressy.settings import StressySettings

TEST_DIMENSIONS = 8


# Service availability checks
def ollama_available() -> bool:
    """Check if Ollama server is running and accessible.

    Returns:
        True if Ollama is available, False otherwise
    """
    try:
        response = requests.get("http://localhost:11434/api/tags", timeout=2)
        return response.status_code == 200
    except requests.RequestException:
        return False


def ravendb_available() -> bool:
    """Check if RavenDB server is running and accessible.

    Returns:
        True if RavenDB is available, False otherwise
    """
    try:
        response = requests.get("http://localhost:8080/databases", timeout=2)
        return response.status_code in (200, 401)  # Auth required is OK
    except requests.RequestException:
        return False


class FakeTokenizer:
    """Whitespace tokenizer: each word maps to the sum of its code points."""

    def encode(self, text: str) -> list[int]:
        return [sum(ord(char) for char in word) for word in text.split()]


class InMemoryMaterialStore:
    """Dict-backed ``MaterialStore`` with the same owner scoping as RavenDB."""

    def __init__(self) -> None:
        self.papers: dict[str, PaperRecord] = {}
        self.notes: dict[str, NoteRecord] = {}
        self.whiteboards: dict[str, WhiteboardRecord] = {}
        self.calls: list[str] = []

    def save_paper(self, record: PaperRecord) -> None:
        if record.Id in self.papers:
            raise PaperExists(record.Id)
        self.calls.append("save_paper")
        self.papers[record.Id] = record

    def get_paper(self, owner_id: str, paper_id: str) -> PaperRecord | None:
        self.calls.append("get_paper")
        paper = self.papers.get(paper_id)
        if paper is None or paper.owner_id != owner_id:
            return None
        return paper

    def list_papers(self, owner_id: str) -> list[PaperRecord]:
        self.calls.append("list_papers")
        owned = [paper for paper in self.papers.values() if paper.owner_id == owner_id]
        return sorted(owned, key=lambda paper: paper.created_at, reverse=True)

    def delete_paper(self, owner_id: str, paper_id: str) -> bool:
        self.calls.append("delete_paper")
        if self.get_paper(owner_id, paper_id) is None:
            return False
        del self.papers[paper_id]
        return True

    def get_note(self, owner_id: str) -> NoteRecord | None:
        self.calls.append("get_note")
        return self.notes.get(owner_id)

    def save_note(self, owner_id: str, content: str) -> NoteRecord:
        self.calls.append("save_note")
        record = NoteRecord(Id=f"notes/{owner_id}", owner_id=owner_id, content=content)
        self.notes[owner_id] = record
        return record

    def get_whiteboard(self, owner_id: str) -> WhiteboardRecord | None:
        self.calls.append("get_whiteboard")
        return self.whiteboards.get(owner_id)

    def save_whiteboard(self, owner_id: str, content: str) -> WhiteboardRecord:
        self.calls.append("save_whiteboard")
        record = WhiteboardRecord(Id=f"whiteboards/{owner_id}", owner_id=owner_id, content=content)
        self.whiteboards[owner_id] = record
        return record


class FakeLLMService:
    """Provider stub returning fixed embeddings and a fixed generation result."""

    model = "fake-model"

    def __init__(
        self,
        embedding: list[float] | None = None,
        result: GenerationResult | None = None,
    ) -> None:
        self.embedding = embedding if embedding is not None else [0.5] * TEST_DIMENSIONS
        self.result = result or GenerationSuccess(text="## Finding\nPapers agree.")
        self.embedded: list[str] = []
        self.prompts: list[str] = []

    def embed(self, text: str) -> list[float]:
        self.embedded.append(text)
        return list(self.embedding)

    async def generate(self, prompt: str, params: GenerationParams) -> GenerationResult:
        self.prompts.append(prompt)
        return self.result


@pytest.fixture
def fake_tokenizer() -> FakeTokenizer:
    return FakeTokenizer()


@pytest.fixture
def memory_store() -> InMemoryMaterialStore:
    return InMemoryMaterialStore()


@pytest.fixture
def fake_llm() -> FakeLLMService:
    return FakeLLMService()


@pytest.fixture
def test_settings() -> StressySettings:
    """Settings that never point at a live provider or database."""
    return StressySettings(
        llm_service="gemini",
        api_key=None,
        embedding_dimensions=TEST_DIMENSIONS,
        max_chunk_length=50,
        embedding_concurrency=2,
        provider_timeout=5.0,
    )


@pytest.fixture
def services(test_settings, memory_store, fake_llm, fake_tokenizer):
    """Fully wired services over the in-memory store and the fake provider."""
    return build_services(
        test_settings, store=memory_store, llm_service=fake_llm, tokenizer=fake_tokenizer
    )


@pytest.fixture
def stored_paper(memory_store) -> PaperRecord:
    """One paper owned by ``alice``."""
    paper = PaperRecord(
        Id="paper-1",
        name="stress.pdf",
        size_bytes=2048,
        content="Cortisol levels rise under chronic stress. " * 10,
        embedding=[0.1] * TEST_DIMENSIONS,
        owner_id="alice",
        chunk_count=3,
        created_at="2025-01-01T00:00:00+00:00",
    )
    memory_store.papers[paper.Id] = paper
    return paper


# Service fixtures with skip markers
@pytest.fixture
def ollama_service():
    """Provide OllamaService instance, skip if Ollama not available.

    Raises:
        pytest.skip: If Ollama server is not running
    """
    if not ollama_available():
        pytest.skip("Ollama server not running on localhost:11434")

    from stressy.llm import OllamaService

    return OllamaService(host="http://localhost:11434", model="llama3")


@pytest.fixture
def raven_material_store():
    """Provide a RavenMaterialStore on a scratch database, skip if RavenDB not available.

    Yields:
        RavenMaterialStore backed by a freshly created database

    Raises:
        pytest.skip: If RavenDB server is not running
    """
    if not ravendb_available():
        pytest.skip("RavenDB server not running on localhost:8080")

    from stressy.service.database import (
        RavenMaterialStore,
        create_database,
        create_document_store,
        database_exists,
        delete_database,
    )

    url, database = "http://localhost:8080", "stressy_test"
    if not database_exists(url, database):
        create_database(url, database)
    store = RavenMaterialStore(create_document_store(url, database))
    yield store
    store.close()
    delete_database(url, database)
