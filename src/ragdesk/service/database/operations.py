"""Database operations for RavenDB - store creation, indexing and provisioning."""

import logging

import requests
from ravendb import DocumentStore
from ravendb.documents.indexes.definitions import (
    FieldIndexing,
    FieldStorage,
    IndexDefinition,
    IndexFieldOptions,
)
from ravendb.documents.indexes.vector.options import VectorOptions
from ravendb.documents.operations.indexes import GetIndexNamesOperation, PutIndexesOperation

from ragdesk.service.database.config import RavenDBConfig

logger = logging.getLogger(__name__)

VECTOR_INDEX_NAME = "DocumentChunks/ByEmbedding"


def create_document_store(url: str | None = None, database: str | None = None) -> DocumentStore:
    """Create and initialize a DocumentStore instance.

    Args:
        url: RavenDB server URL (defaults to value from RavenDBConfig.get_url())
        database: Database name (defaults to value from RavenDBConfig.get_database_name())

    Returns:
        DocumentStore: Initialized DocumentStore instance
    """
    if url is None:
        url = RavenDBConfig.get_url()
    if database is None:
        database = RavenDBConfig.get_database_name()

    store = DocumentStore([url], database)
    store.initialize()
    return store


def ensure_index_exists(store: DocumentStore, dimensions: int | None = None) -> bool:
    """Ensure the chunk vector search index exists in RavenDB.

    The index joins every chunk with its parent document so that queries can
    filter on the document's status and enabled flag without a second lookup.

    Args:
        store: Initialized DocumentStore instance
        dimensions: Embedding vector size (defaults to EMBEDDING_DIMENSIONS)

    Returns:
        bool: True if the index was created, False if it already existed
    """
    existing_indexes = store.maintenance.send(GetIndexNamesOperation(0, 100))
    if VECTOR_INDEX_NAME in existing_indexes:
        return False

    if dimensions is None:
        dimensions = RavenDBConfig.get_embedding_dimensions()

    index_definition = IndexDefinition()
    index_definition.name = VECTOR_INDEX_NAME

    index_definition.maps = {
        """from chunk in docs.DocumentChunks
        let document = LoadDocument(chunk.document_id, "Documents")
        where chunk.embedding != null
        select new {
            project_id = chunk.project_id,
            document_id = chunk.document_id,
            collection = chunk.collection,
            chunk_index = chunk.chunk_index,
            document_status = document.status,
            document_enabled = document.enabled,
            embedding = CreateField("embedding", chunk.embedding, new CreateFieldOptions { Storage = FieldStorage.Yes, Indexing = FieldIndexing.No })
        }"""
    }

    index_definition.fields = {
        "embedding": IndexFieldOptions(
            storage=FieldStorage.YES,
            indexing=FieldIndexing.NO,
            vector=VectorOptions(dimensions=dimensions),
        )
    }

    store.maintenance.send(PutIndexesOperation(index_definition))
    logger.info(f"✅ Created index {VECTOR_INDEX_NAME} ({dimensions} dimensions)")
    return True


def database_exists(url: str | None = None, database: str | None = None) -> bool:
    """Check if a database exists in RavenDB.

    Args:
        url: RavenDB server URL (defaults to value from RavenDBConfig.get_url())
        database: Database name (defaults to value from RavenDBConfig.get_database_name())

    Returns:
        bool: True if database exists, False otherwise
    """
    if url is None:
        url = RavenDBConfig.get_url()
    if database is None:
        database = RavenDBConfig.get_database_name()

    try:
        response = requests.get(f"{url}/databases/{database}/stats", timeout=10)
    except requests.RequestException as e:
        logger.warning(f"⚠️ Could not reach RavenDB at {url}: {e}")
        return False
    return response.status_code == 200


def create_database(url: str | None = None, database: str | None = None) -> None:
    """Create a new database in RavenDB.

    Args:
        url: RavenDB server URL (defaults to value from RavenDBConfig.get_url())
        database: Database name (defaults to value from RavenDBConfig.get_database_name())

    Raises:
        requests.HTTPError: If the server rejects the request
    """
    if url is None:
        url = RavenDBConfig.get_url()
    if database is None:
        database = RavenDBConfig.get_database_name()

    api_url = f"{url}/admin/databases"
    payload = {"DatabaseName": database, "Settings": {}, "Disabled": False}

    response = requests.put(api_url, json=payload, timeout=30)
    response.raise_for_status()
    logger.info(f"✅ Created database {database}")
