"""Owner-scoped storage of papers, notes and whiteboards in RavenDB."""

import logging
from dataclasses import fields
from typing import Any, Protocol, TypeVar

from ravendb import DocumentStore

from stressy.constants import NOTES_COLLECTION, PAPERS_COLLECTION, WHITEBOARDS_COLLECTION
from stressy.errors import PaperExists, StorageError
from stressy.service.database.models import NoteRecord, PaperRecord, WhiteboardRecord, utc_now

logger = logging.getLogger(__name__)

RecordT = TypeVar("RecordT", PaperRecord, NoteRecord, WhiteboardRecord)


class MaterialStore(Protocol):
    """Storage collaborator used by the pipelines.

    Every read and write is scoped to one owner; a record belonging to a
    different owner behaves exactly like a missing one.
    """

    def save_paper(self, record: PaperRecord) -> None: ...

    def get_paper(self, owner_id: str, paper_id: str) -> PaperRecord | None: ...

    def list_papers(self, owner_id: str) -> list[PaperRecord]: ...

    def delete_paper(self, owner_id: str, paper_id: str) -> bool: ...

    def get_note(self, owner_id: str) -> NoteRecord | None: ...

    def save_note(self, owner_id: str, content: str) -> NoteRecord: ...

    def get_whiteboard(self, owner_id: str) -> WhiteboardRecord | None: ...

    def save_whiteboard(self, owner_id: str, content: str) -> WhiteboardRecord: ...


def paper_key(paper_id: str) -> str:
    return f"papers/{paper_id}"


def note_key(owner_id: str) -> str:
    return f"notes/{owner_id}"


def whiteboard_key(owner_id: str) -> str:
    return f"whiteboards/{owner_id}"


def paper_id_from_key(key: str | None) -> str | None:
    """Inverse of ``paper_key``; RavenDB writes the full key back into ``Id``."""
    prefix = paper_key("")
    if key and key.startswith(prefix):
        return key[len(prefix):]
    return key


def _with_paper_id(record: PaperRecord | None) -> PaperRecord | None:
    if record is not None:
        record.Id = paper_id_from_key(record.Id)
    return record


def to_record(document: Any, record_type: type[RecordT]) -> RecordT | None:
    """Coerce a loaded document (entity or raw dict) into ``record_type``."""
    if document is None or isinstance(document, record_type):
        return document
    if isinstance(document, dict):
        names = {f.name for f in fields(record_type)}
        values = {key: value for key, value in document.items() if key in names}
        if "Id" not in values and "@metadata" in document:
            values["Id"] = document["@metadata"].get("@id")
        return record_type(**values)
    raise TypeError(f"Cannot convert {type(document).__name__} to {record_type.__name__}")


class RavenMaterialStore:
    """``MaterialStore`` backed by a RavenDB DocumentStore.

    Paper ids are stored under ``papers/<id>``; notes and whiteboards use the
    owner id as their key, so each owner has at most one of each.
    """

    def __init__(self, store: DocumentStore) -> None:
        self.store = store

    def close(self) -> None:
        self.store.close()

    def _store(self, session: Any, record: Any, key: str, collection: str) -> None:
        session.store(record, key)
        metadata = session.advanced.get_metadata_for(record)
        metadata["@collection"] = collection

    def _load_owned(
        self, key: str, owner_id: str, record_type: type[RecordT], operation: str
    ) -> RecordT | None:
        try:
            with self.store.open_session() as session:
                document = session.load(key, record_type)
        except Exception as e:
            raise StorageError(operation, key, e) from e

        record = to_record(document, record_type)
        if record is None or record.owner_id != owner_id:
            return None
        return record

    def save_paper(self, record: PaperRecord) -> None:
        """Persist a fully built paper record in a single transaction.

        A paper is created once; an id that is already taken, by this owner
        or any other, is refused.

        Args:
            record: The paper, with its aggregated embedding

        Raises:
            PaperExists: If a paper is already stored under ``record.Id``
            StorageError: If the write fails
        """
        key = paper_key(record.Id)
        try:
            with self.store.open_session() as session:
                if session.load(key, PaperRecord) is not None:
                    raise PaperExists(record.Id)
                self._store(session, record, key, PAPERS_COLLECTION)
                session.save_changes()
        except PaperExists:
            logger.warning(f"⚠️ Refused to overwrite existing paper {key}")
            raise
        except Exception as e:
            raise StorageError("save_paper", key, e) from e
        logger.info(f"💾 Stored paper {key} for owner {record.owner_id}")

    def get_paper(self, owner_id: str, paper_id: str) -> PaperRecord | None:
        return _with_paper_id(
            self._load_owned(paper_key(paper_id), owner_id, PaperRecord, "get_paper")
        )

    def list_papers(self, owner_id: str) -> list[PaperRecord]:
        """List an owner's papers, newest first.

        Args:
            owner_id: Owner whose papers to list

        Returns:
            list[PaperRecord]: The owner's papers

        Raises:
            StorageError: If the query fails
        """
        try:
            with self.store.open_session() as session:
                query = session.advanced.raw_query(
                    f"from {PAPERS_COLLECTION} where owner_id = $owner", object_type=dict
                ).add_parameter("owner", owner_id)
                documents = list(query)
        except Exception as e:
            raise StorageError("list_papers", owner_id, e) from e

        records = [_with_paper_id(to_record(document, PaperRecord)) for document in documents]
        return sorted(records, key=lambda record: record.created_at, reverse=True)

    def delete_paper(self, owner_id: str, paper_id: str) -> bool:
        """Delete one of the owner's papers.

        Returns:
            bool: False if the owner has no such paper
        """
        if self.get_paper(owner_id, paper_id) is None:
            return False

        key = paper_key(paper_id)
        try:
            with self.store.open_session() as session:
                session.delete(key)
                session.save_changes()
        except Exception as e:
            raise StorageError("delete_paper", key, e) from e
        logger.info(f"🗑️  Deleted paper {key}")
        return True

    def get_note(self, owner_id: str) -> NoteRecord | None:
        return self._load_owned(note_key(owner_id), owner_id, NoteRecord, "get_note")

    def save_note(self, owner_id: str, content: str) -> NoteRecord:
        record = NoteRecord(Id=note_key(owner_id), owner_id=owner_id, content=content)
        self._upsert(record, NOTES_COLLECTION, "save_note")
        return record

    def get_whiteboard(self, owner_id: str) -> WhiteboardRecord | None:
        return self._load_owned(
            whiteboard_key(owner_id), owner_id, WhiteboardRecord, "get_whiteboard"
        )

    def save_whiteboard(self, owner_id: str, content: str) -> WhiteboardRecord:
        record = WhiteboardRecord(Id=whiteboard_key(owner_id), owner_id=owner_id, content=content)
        self._upsert(record, WHITEBOARDS_COLLECTION, "save_whiteboard")
        return record

    def _upsert(
        self, record: NoteRecord | WhiteboardRecord, collection: str, operation: str
    ) -> None:
        record.updated_at = utc_now()
        try:
            with self.store.open_session() as session:
                existing = session.load(record.Id, type(record))
                if existing is not None:
                    existing.content = record.content
                    existing.updated_at = record.updated_at
                else:
                    self._store(session, record, record.Id, collection)
                session.save_changes()
        except Exception as e:
            raise StorageError(operation, record.Id, e) from e
