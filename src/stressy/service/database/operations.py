"""Database administration for RavenDB - connect, create, delete, count."""

import requests
from ravendb import DocumentStore
from ravendb.serverwide.operations.common import DeleteDatabaseOperation

from stressy.constants import PAPERS_COLLECTION


def create_document_store(url: str, database: str) -> DocumentStore:
    """Create and initialize a DocumentStore instance.

    Args:
        url: RavenDB server URL
        database: Database name

    Returns:
        DocumentStore: Initialized DocumentStore instance
    """
    store = DocumentStore([url], database)
    store.initialize()
    return store


def database_exists(url: str, database: str) -> bool:
    """Check if a database exists in RavenDB.

    Args:
        url: RavenDB server URL
        database: Database name

    Returns:
        bool: True if database exists, False otherwise
    """
    try:
        store = create_document_store(url, database)
        try:
            with store.open_session() as session:
                list(session.query().take(0))
        finally:
            store.close()
        return True
    except Exception:
        return False


def create_database(url: str, database: str) -> None:
    """Create a new database in RavenDB.

    Args:
        url: RavenDB server URL
        database: Database name

    Raises:
        requests.HTTPError: If the server rejects the request
    """
    api_url = f"{url}/admin/databases"
    payload = {"DatabaseName": database, "Settings": {}, "Disabled": False}

    response = requests.put(api_url, json=payload, timeout=30)
    response.raise_for_status()


def delete_database(url: str, database: str) -> None:
    """Delete a database from RavenDB.

    WARNING: This operation is irreversible and will delete all data in the database.

    Args:
        url: RavenDB server URL
        database: Database name
    """
    store = DocumentStore([url], database)
    try:
        store.initialize()
        operation = DeleteDatabaseOperation(database_name=database, hard_delete=True)
        store.maintenance.server.send(operation)
    finally:
        store.close()


def count_papers(url: str, database: str, owner_id: str | None = None) -> int:
    """Count stored papers, optionally for a single owner.

    Args:
        url: RavenDB server URL
        database: Database name
        owner_id: Only count papers owned by this owner when given

    Returns:
        int: Number of paper documents
    """
    store = create_document_store(url, database)
    try:
        with store.open_session() as session:
            rql_query = f"from {PAPERS_COLLECTION}"
            if owner_id is None:
                query = session.advanced.raw_query(rql_query, object_type=dict)
            else:
                query = session.advanced.raw_query(
                    f"{rql_query} where owner_id = $owner", object_type=dict
                ).add_parameter("owner", owner_id)
            return len(list(query))
    finally:
        store.close()
