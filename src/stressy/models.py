"""Domain types shared by the ingestion and query pipelines."""

from dataclasses import asdict, dataclass, field
from typing import Any, Literal

SourceType = Literal["document", "note", "whiteboard"]


@dataclass(frozen=True)
class Chunk:
    """A contiguous span of source text.

    Attributes:
        text: The chunk text, never empty
        sequence_index: Zero-based position used to reconstruct the document
    """

    text: str
    sequence_index: int


@dataclass(frozen=True)
class SourceCitation:
    """A pointer back to a piece of content that was folded into a prompt."""

    title: str
    content_snippet: str
    type: SourceType

    def to_dict(self) -> dict[str, str]:
        return {"title": self.title, "content": self.content_snippet, "type": self.type}


@dataclass(frozen=True)
class InsightSection:
    """One titled section of a parsed answer."""

    title: str
    content: str

    def to_dict(self) -> dict[str, str]:
        return asdict(self)


@dataclass
class QuerySelection:
    """Sources the caller wants folded into a query.

    Attributes:
        document_ids: Paper identifiers, in the order they should appear
        include_notes: Whether to include the owner's notes
        include_whiteboard: Whether to include the owner's whiteboard
    """

    document_ids: list[str] = field(default_factory=list)
    include_notes: bool = False
    include_whiteboard: bool = False

    @property
    def is_empty(self) -> bool:
        return not self.document_ids and not self.include_notes and not self.include_whiteboard

    @classmethod
    def from_request(cls, context: dict[str, Any] | None) -> "QuerySelection":
        """Build a selection from a request body ``context`` object.

        Accepts ``papers`` (list of ids) and truthy ``notes`` / ``whiteboard``
        flags, matching the JSON the web client sends.
        """
        context = context if isinstance(context, dict) else {}
        papers = context.get("papers") or []
        if not isinstance(papers, (list, tuple)):
            papers = [papers]
        return cls(
            document_ids=[str(paper_id) for paper_id in papers],
            include_notes=bool(context.get("notes")),
            include_whiteboard=bool(context.get("whiteboard")),
        )


@dataclass(frozen=True)
class IngestionResult:
    """Caller-facing summary of a successfully ingested document."""

    id: str
    name: str
    size_bytes: int
    chunk_count: int

    def to_dict(self) -> dict[str, Any]:
        return asdict(self)


@dataclass
class QueryResult:
    """Caller-facing answer with the sources that informed it."""

    answer: str
    sources: list[SourceCitation] = field(default_factory=list)
    insights: list[InsightSection] = field(default_factory=list)

    def to_dict(self) -> dict[str, Any]:
        return {
            "answer": self.answer,
            "sources": [source.to_dict() for source in self.sources],
            "insights": [insight.to_dict() for insight in self.insights],
        }
