"""Tests for RavenDB storage and database administration."""

from unittest.mock import MagicMock, patch

import pytest

from stressy.errors import PaperExists, StorageError
from stressy.service.database import (
    NoteRecord,
    PaperRecord,
    RavenMaterialStore,
    WhiteboardRecord,
    count_papers,
    create_database,
    create_document_store,
    database_exists,
    delete_database,
)
from stressy.service.database.storage import paper_id_from_key, to_record


@pytest.fixture
def session():
    """A mock RavenDB session with metadata support."""
    session = MagicMock()
    session.load.return_value = None
    session.advanced.get_metadata_for.return_value = {}
    return session


@pytest.fixture
def raven_store(session):
    """RavenMaterialStore over a mock DocumentStore yielding ``session``."""
    document_store = MagicMock()
    document_store.open_session.return_value.__enter__.return_value = session
    return RavenMaterialStore(document_store)


class TestKeys:
    """Tests for document key helpers and record conversion."""

    def test_paper_id_from_key(self):
        assert paper_id_from_key("papers/abc") == "abc"
        assert paper_id_from_key("abc") == "abc"
        assert paper_id_from_key(None) is None

    def test_to_record_from_dict_uses_metadata_id(self):
        """Test raw query results are converted with their document id."""
        document = {
            "name": "a.pdf",
            "owner_id": "alice",
            "unknown_field": 1,
            "@metadata": {"@id": "papers/a", "@collection": "Papers"},
        }

        record = to_record(document, PaperRecord)

        assert record.Id == "papers/a"
        assert record.name == "a.pdf"
        assert record.owner_id == "alice"

    def test_to_record_passes_entities_through(self):
        note = NoteRecord(Id="notes/alice", owner_id="alice")
        assert to_record(note, NoteRecord) is note
        assert to_record(None, NoteRecord) is None

    def test_to_record_rejects_other_types(self):
        with pytest.raises(TypeError):
            to_record(42, PaperRecord)


class TestRavenMaterialStorePapers:
    """Tests for paper storage."""

    def test_save_paper_stores_in_papers_collection(self, raven_store, session):
        """Test a paper is stored under papers/<id> in one transaction."""
        record = PaperRecord(Id="p1", name="a.pdf", owner_id="alice")

        raven_store.save_paper(record)

        session.store.assert_called_once_with(record, "papers/p1")
        assert session.advanced.get_metadata_for.return_value["@collection"] == "Papers"
        session.save_changes.assert_called_once()

    def test_save_paper_refuses_existing_key(self, raven_store, session):
        """Test a paper id already taken by another owner is never overwritten."""
        session.load.return_value = PaperRecord(Id="papers/p1", owner_id="alice")

        with pytest.raises(PaperExists) as exc_info:
            raven_store.save_paper(PaperRecord(Id="p1", owner_id="mallory"))

        assert exc_info.value.paper_id == "p1"
        session.load.assert_called_once_with("papers/p1", PaperRecord)
        session.store.assert_not_called()
        session.save_changes.assert_not_called()

    def test_save_paper_failure_raises_storage_error(self, raven_store, session):
        """Test write errors are wrapped with the operation and key."""
        session.save_changes.side_effect = ConnectionError("server down")

        with pytest.raises(StorageError) as exc_info:
            raven_store.save_paper(PaperRecord(Id="p1", owner_id="alice"))

        assert exc_info.value.operation == "save_paper"
        assert exc_info.value.identifier == "papers/p1"
        assert isinstance(exc_info.value.__cause__, ConnectionError)

    def test_get_paper_strips_key_prefix(self, raven_store, session):
        """Test loaded papers expose the bare paper id."""
        session.load.return_value = PaperRecord(Id="papers/p1", name="a.pdf", owner_id="alice")

        paper = raven_store.get_paper("alice", "p1")

        assert paper.Id == "p1"
        session.load.assert_called_once_with("papers/p1", PaperRecord)

    def test_get_paper_of_other_owner_is_none(self, raven_store, session):
        """Test a paper owned by someone else behaves as missing."""
        session.load.return_value = PaperRecord(Id="papers/p1", owner_id="alice")

        assert raven_store.get_paper("bob", "p1") is None

    def test_get_missing_paper_is_none(self, raven_store):
        assert raven_store.get_paper("alice", "missing") is None

    def test_get_paper_failure_raises_storage_error(self, raven_store, session):
        session.load.side_effect = RuntimeError("timeout")

        with pytest.raises(StorageError, match="get_paper"):
            raven_store.get_paper("alice", "p1")

    def test_list_papers_newest_first(self, raven_store, session):
        """Test an owner's papers are queried by owner and sorted by creation time."""
        query = session.advanced.raw_query.return_value
        query.add_parameter.return_value = [
            {
                "name": "old.pdf",
                "owner_id": "alice",
                "created_at": "2025-01-01T00:00:00+00:00",
                "@metadata": {"@id": "papers/old"},
            },
            {
                "name": "new.pdf",
                "owner_id": "alice",
                "created_at": "2025-06-01T00:00:00+00:00",
                "@metadata": {"@id": "papers/new"},
            },
        ]

        papers = raven_store.list_papers("alice")

        assert [paper.Id for paper in papers] == ["new", "old"]
        rql = session.advanced.raw_query.call_args.args[0]
        assert rql == "from Papers where owner_id = $owner"
        query.add_parameter.assert_called_once_with("owner", "alice")

    def test_delete_paper(self, raven_store, session):
        """Test an owned paper is deleted by key."""
        session.load.return_value = PaperRecord(Id="papers/p1", owner_id="alice")

        assert raven_store.delete_paper("alice", "p1") is True
        session.delete.assert_called_once_with("papers/p1")
        session.save_changes.assert_called_once()

    def test_delete_other_owners_paper_is_refused(self, raven_store, session):
        """Test deleting another owner's paper reports not found and deletes nothing."""
        session.load.return_value = PaperRecord(Id="papers/p1", owner_id="alice")

        assert raven_store.delete_paper("bob", "p1") is False
        session.delete.assert_not_called()


class TestRavenMaterialStoreMaterials:
    """Tests for notes and whiteboard storage."""

    def test_save_new_note(self, raven_store, session):
        """Test a first note is stored under notes/<owner> in the Notes collection."""
        record = raven_store.save_note("alice", "My notes")

        assert record.Id == "notes/alice"
        assert record.content == "My notes"
        session.store.assert_called_once_with(record, "notes/alice")
        assert session.advanced.get_metadata_for.return_value["@collection"] == "Notes"
        session.save_changes.assert_called_once()

    def test_save_existing_note_updates_in_place(self, raven_store, session):
        """Test a second save replaces the content of the existing document."""
        existing = NoteRecord(Id="notes/alice", owner_id="alice", content="old")
        session.load.return_value = existing

        raven_store.save_note("alice", "new")

        assert existing.content == "new"
        session.store.assert_not_called()
        session.save_changes.assert_called_once()

    def test_save_whiteboard(self, raven_store, session):
        record = raven_store.save_whiteboard("alice", '{"strokes": [1]}')

        assert isinstance(record, WhiteboardRecord)
        session.store.assert_called_once_with(record, "whiteboards/alice")
        assert session.advanced.get_metadata_for.return_value["@collection"] == "Whiteboards"

    def test_get_whiteboard(self, raven_store, session):
        session.load.return_value = WhiteboardRecord(
            Id="whiteboards/alice", owner_id="alice", content="{}"
        )

        assert raven_store.get_whiteboard("alice").content == "{}"
        session.load.assert_called_once_with("whiteboards/alice", WhiteboardRecord)

    def test_get_missing_note_is_none(self, raven_store):
        assert raven_store.get_note("alice") is None

    def test_save_note_failure_raises_storage_error(self, raven_store, session):
        session.save_changes.side_effect = RuntimeError("conflict")

        with pytest.raises(StorageError, match="save_note"):
            raven_store.save_note("alice", "text")


class TestDatabaseOperations:
    """Tests for database administration helpers."""

    @patch("stressy.service.database.operations.DocumentStore")
    def test_create_document_store(self, mock_store_cls):
        store = create_document_store("http://raven:8080", "stressy")

        mock_store_cls.assert_called_once_with(["http://raven:8080"], "stressy")
        store.initialize.assert_called_once()

    @patch("stressy.service.database.operations.DocumentStore")
    def test_database_exists_true(self, mock_store_cls):
        assert database_exists("http://raven:8080", "stressy") is True
        mock_store_cls.return_value.close.assert_called_once()

    @patch("stressy.service.database.operations.DocumentStore")
    def test_database_exists_false_on_error(self, mock_store_cls):
        """Test any failure to query the database reports it as missing."""
        mock_store_cls.return_value.open_session.side_effect = RuntimeError("DatabaseDoesNotExist")

        assert database_exists("http://raven:8080", "stressy") is False

    @patch("stressy.service.database.operations.requests.put")
    def test_create_database(self, mock_put):
        create_database("http://raven:8080", "stressy")

        mock_put.assert_called_once_with(
            "http://raven:8080/admin/databases",
            json={"DatabaseName": "stressy", "Settings": {}, "Disabled": False},
            timeout=30,
        )
        mock_put.return_value.raise_for_status.assert_called_once()

    @patch("stressy.service.database.operations.DocumentStore")
    def test_delete_database(self, mock_store_cls):
        delete_database("http://raven:8080", "stressy")

        store = mock_store_cls.return_value
        store.maintenance.server.send.assert_called_once()
        store.close.assert_called_once()

    @patch("stressy.service.database.operations.DocumentStore")
    def test_count_papers_for_owner(self, mock_store_cls):
        """Test papers are counted with an owner filter when one is given."""
        session = mock_store_cls.return_value.open_session.return_value.__enter__.return_value
        query = session.advanced.raw_query.return_value
        query.add_parameter.return_value = [{}, {}, {}]

        assert count_papers("http://raven:8080", "stressy", owner_id="alice") == 3
        query.add_parameter.assert_called_once_with("owner", "alice")

    @patch("stressy.service.database.operations.DocumentStore")
    def test_count_all_papers(self, mock_store_cls):
        session = mock_store_cls.return_value.open_session.return_value.__enter__.return_value
        session.advanced.raw_query.return_value = [{}, {}]

        assert count_papers("http://raven:8080", "stressy") == 2
        assert session.advanced.raw_query.call_args.args[0] == "from Papers"


class TestRavenMaterialStoreIntegration:
    """Round trips against a live RavenDB server."""

    @pytest.mark.integration
    @pytest.mark.requires_ravendb
    def test_paper_and_notes_round_trip(self, raven_material_store):
        paper = PaperRecord(
            Id="integration-1",
            name="a.pdf",
            content="text",
            embedding=[0.1, 0.2],
            owner_id="alice",
        )
        raven_material_store.save_paper(paper)

        loaded = raven_material_store.get_paper("alice", "integration-1")
        assert loaded.name == "a.pdf"
        assert loaded.Id == "integration-1"
        assert raven_material_store.get_paper("bob", "integration-1") is None

        raven_material_store.save_note("alice", "first")
        raven_material_store.save_note("alice", "second")
        assert raven_material_store.get_note("alice").content == "second"

        assert raven_material_store.delete_paper("alice", "integration-1") is True
        assert raven_material_store.get_paper("alice", "integration-1") is None
