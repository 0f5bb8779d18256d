"""Data models for RavenDB document storage."""

from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any


def utc_now() -> str:
    """Current UTC time as an ISO-8601 string."""
    return datetime.now(timezone.utc).isoformat()


@dataclass(eq=False)
class PaperRecord:
    """One uploaded paper with its document-level embedding.

    Note: eq=False keeps instances hashable by identity, which RavenDB's
    session entity tracking requires.

    Attributes:
        Id: Paper identifier (caller-supplied or generated)
        name: Display name, usually the original filename
        size_bytes: Size of the uploaded file
        content: Preview of the extracted text (first 10,000 characters)
        embedding: Mean of the chunk embeddings
        owner_id: Owner of the paper
        chunk_count: Number of chunks the paper was split into
        created_at: ISO-8601 UTC creation time
    """

    Id: str | None = None
    name: str = ""
    size_bytes: int = 0
    content: str = ""
    embedding: list[float] = field(default_factory=list)
    owner_id: str = ""
    chunk_count: int = 0
    created_at: str = field(default_factory=utc_now)

    def __hash__(self) -> int:
        """Hash by object identity for RavenDB session tracking."""
        return id(self)

    def summary(self) -> dict[str, Any]:
        return {
            "id": self.Id,
            "name": self.name,
            "size_bytes": self.size_bytes,
            "chunk_count": self.chunk_count,
            "created_at": self.created_at,
        }


@dataclass(eq=False)
class NoteRecord:
    """The single notes document an owner keeps."""

    Id: str | None = None
    owner_id: str = ""
    content: str = ""
    updated_at: str = field(default_factory=utc_now)

    def __hash__(self) -> int:
        return id(self)


@dataclass(eq=False)
class WhiteboardRecord:
    """The single whiteboard an owner keeps, serialized drawing data."""

    Id: str | None = None
    owner_id: str = ""
    content: str = ""
    updated_at: str = field(default_factory=utc_now)

    def __hash__(self) -> int:
        return id(self)
