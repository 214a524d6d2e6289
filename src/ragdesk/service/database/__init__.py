"""Database configuration and connection management for RavenDB.

This package provides a unified interface for RavenDB operations:
- Configuration management (RavenDBConfig)
- Document store creation and index management
- Entity models (projects, actions, conversations, messages, documents, chunks)
- The chat repository and the chunk vector store

Usage:
    from ragdesk.service.database import (
        RavenDBRepository,
        RavenDBVectorStore,
        create_document_store,
    )
"""

# Re-export public API
from ragdesk.service.database.config import RavenDBConfig
from ragdesk.service.database.models import (
    Action,
    Conversation,
    Document,
    DocumentChunk,
    DocumentSource,
    Message,
    Project,
    RetrievalConfig,
)
from ragdesk.service.database.operations import (
    VECTOR_INDEX_NAME,
    create_database,
    create_document_store,
    database_exists,
    ensure_index_exists,
)
from ragdesk.service.database.repository import ChatRepository, RavenDBRepository
from ragdesk.service.database.utils import cosine_similarity
from ragdesk.service.database.vector_store import RavenDBVectorStore, SearchResult, VectorStore

__all__ = [
    # Config
    "RavenDBConfig",
    # Models
    "Action",
    "Conversation",
    "Document",
    "DocumentChunk",
    "DocumentSource",
    "Message",
    "Project",
    "RetrievalConfig",
    # Operations
    "VECTOR_INDEX_NAME",
    "create_document_store",
    "ensure_index_exists",
    "database_exists",
    "create_database",
    # Storage
    "ChatRepository",
    "RavenDBRepository",
    "RavenDBVectorStore",
    "SearchResult",
    "VectorStore",
    # Utils
    "cosine_similarity",
]
