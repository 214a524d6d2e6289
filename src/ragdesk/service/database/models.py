"""Data models for RavenDB document storage.

Every stored entity is a dataclass with ``eq=False`` so each instance is
hashable by identity, which RavenDB's session entity tracking requires.
Documents read back from raw queries arrive as dicts; ``from_document``
rebuilds the entity from one, ignoring unknown keys.
"""

from dataclasses import dataclass, field, fields
from typing import Any

from ragdesk.constants import (
    ALL_COLLECTIONS,
    DEFAULT_COLLECTION,
    DEFAULT_MIN_SCORE,
    DEFAULT_TOP_K,
    MAX_TOP_K,
    MIN_TOP_K,
)
from ragdesk.errors import ValidationError
from ragdesk.llm.prompt import ActionDescriptor

# Document lifecycle states
STATUS_PROCESSING = "processing"
STATUS_INDEXED = "indexed"
STATUS_FAILED = "failed"


class _Entity:
    """Shared (de)serialization helpers for stored dataclasses."""

    COLLECTION = ""

    def __hash__(self) -> int:
        """Hash by object identity for RavenDB session tracking."""
        return id(self)

    @classmethod
    def from_document(cls, data: dict[str, Any]):
        known = {f.name for f in fields(cls)}
        values = {k: v for k, v in data.items() if k in known}
        if not values.get("Id"):
            values["Id"] = data.get("@metadata", {}).get("@id")
        return cls(**values)


@dataclass(frozen=True)
class RetrievalConfig:
    """Per-project retrieval settings.

    Attributes:
        top_k: Maximum number of chunks to retrieve (1-20)
        min_score: Minimum similarity score to keep a chunk (0-1)
        enabled_collections: Collections to search; empty or containing
            "all" means every collection
    """

    top_k: int = DEFAULT_TOP_K
    min_score: float = DEFAULT_MIN_SCORE
    enabled_collections: tuple[str, ...] = (ALL_COLLECTIONS,)

    def __post_init__(self) -> None:
        if not MIN_TOP_K <= self.top_k <= MAX_TOP_K:
            raise ValidationError(f"topK must be between {MIN_TOP_K} and {MAX_TOP_K}")
        if not 0 <= self.min_score <= 1:
            raise ValidationError("minScore must be between 0 and 1")

    @property
    def collection_filter(self) -> list[str] | None:
        """Collections to restrict the search to, or None for no filter."""
        if not self.enabled_collections or ALL_COLLECTIONS in self.enabled_collections:
            return None
        return list(self.enabled_collections)


@dataclass(eq=False)
class Action(_Entity):
    """An operation the assistant may propose to the end user.

    Only ``name`` and ``description`` are ever shown to the model; the
    endpoint and headers stay server-side.
    """

    COLLECTION = "Actions"

    Id: str | None = None
    project_id: str = ""
    name: str = ""
    display_name: str = ""
    description: str = ""
    method: str = "POST"
    endpoint: str = ""
    headers: dict[str, str] = field(default_factory=dict)
    parameters: list[dict[str, Any]] = field(default_factory=list)
    requires_confirmation: bool = True
    enabled: bool = True

    def descriptor(self) -> ActionDescriptor:
        return ActionDescriptor(name=self.name, description=self.description)


@dataclass(eq=False)
class Project(_Entity):
    """A tenant: system prompt, retrieval settings and API key.

    ``actions`` is filled by the repository with the project's enabled
    actions when it is loaded; it is not part of the stored document.
    """

    COLLECTION = "Projects"

    Id: str | None = None
    name: str = ""
    system_prompt: str = ""
    api_key: str = ""
    top_k: int = DEFAULT_TOP_K
    min_score: float = DEFAULT_MIN_SCORE
    enabled_collections: list[str] = field(default_factory=lambda: [ALL_COLLECTIONS])
    actions: list[Action] = field(default_factory=list)

    @property
    def retrieval_config(self) -> RetrievalConfig:
        return RetrievalConfig(
            top_k=int(self.top_k),
            min_score=float(self.min_score),
            enabled_collections=tuple(self.enabled_collections or ()),
        )


@dataclass(eq=False)
class Document(_Entity):
    """An uploaded source document and its indexing state."""

    COLLECTION = "Documents"

    Id: str | None = None
    project_id: str = ""
    filename: str = ""
    collection: str = DEFAULT_COLLECTION
    content: str = ""
    status: str = STATUS_PROCESSING
    error_message: str | None = None
    embedding_ids: list[str] = field(default_factory=list)
    enabled: bool = True
    created_at: str = ""


@dataclass(eq=False)
class DocumentChunk(_Entity):
    """A document chunk with embedding for vector search.

    Attributes:
        Id: ``<document_id>_chunk_<chunk_index>``
        document_id: Parent document ID
        project_id: Owning project
        filename: Parent document filename
        collection: Parent document collection
        chunk_index: Position of this chunk in the document
        content: The chunk text
        embedding: Vector embedding of the text
    """

    COLLECTION = "DocumentChunks"

    Id: str | None = None
    document_id: str = ""
    project_id: str = ""
    filename: str = ""
    collection: str = DEFAULT_COLLECTION
    chunk_index: int = 0
    content: str = ""
    embedding: list[float] = field(default_factory=list)


@dataclass(eq=False)
class Conversation(_Entity):
    COLLECTION = "Conversations"

    Id: str | None = None
    project_id: str = ""
    created_at: str = ""
    last_message_at: str = ""


@dataclass(eq=False)
class Message(_Entity):
    """A stored chat turn. Assistant messages carry their sources."""

    COLLECTION = "Messages"

    Id: str | None = None
    conversation_id: str = ""
    role: str = "user"
    content: str = ""
    sources: list[dict[str, Any]] = field(default_factory=list)
    created_at: str = ""


@dataclass(frozen=True)
class DocumentSource:
    """A retrieved chunk as reported back to the client."""

    document_id: str
    filename: str
    content: str
    score: float

    def to_dict(self) -> dict[str, Any]:
        return {
            "documentId": self.document_id,
            "filename": self.filename,
            "content": self.content,
            "score": self.score,
        }
