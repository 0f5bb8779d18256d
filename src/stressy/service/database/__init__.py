"""RavenDB storage for Stressy.

This package provides:
- Document store creation and database administration
- Owner-scoped storage for papers, notes and whiteboards

Usage:
    from stressy.service.database import RavenMaterialStore, create_document_store

    store = RavenMaterialStore(create_document_store(url, database))
"""

from stressy.service.database.models import NoteRecord, PaperRecord, WhiteboardRecord
from stressy.service.database.operations import (
    count_papers,
    create_database,
    create_document_store,
    database_exists,
    delete_database,
)
from stressy.service.database.storage import MaterialStore, RavenMaterialStore

__all__ = [
    # Models
    "PaperRecord",
    "NoteRecord",
    "WhiteboardRecord",
    # Operations
    "create_document_store",
    "database_exists",
    "create_database",
    "delete_database",
    "count_papers",
    # Storage
    "MaterialStore",
    "RavenMaterialStore",
]
