"""Persistence for projects, actions, conversations, messages and documents."""

import logging
import uuid
from typing import Any, Protocol

from ravendb import DocumentStore

from ragdesk.errors import NotFoundError
from ragdesk.service.database.models import (
    STATUS_FAILED,
    STATUS_INDEXED,
    STATUS_PROCESSING,
    Action,
    Conversation,
    Document,
    Message,
    Project,
)
from ragdesk.service.database.utils import utc_now

logger = logging.getLogger(__name__)


class ChatRepository(Protocol):
    """Storage operations used by the pipeline, the routes and the CLI."""

    def get_project(self, project_id: str) -> Project | None: ...

    def get_project_by_api_key(self, api_key: str) -> Project | None: ...

    def create_conversation(self, project_id: str) -> str: ...

    def get_conversation(self, conversation_id: str) -> Conversation | None: ...

    def add_message(
        self,
        conversation_id: str,
        role: str,
        content: str,
        sources: list[dict[str, Any]] | None = None,
    ) -> str: ...

    def touch_conversation(self, conversation_id: str) -> None: ...

    def list_messages(self, conversation_id: str, limit: int) -> list[Message]: ...

    def create_document(
        self, project_id: str, filename: str, collection: str, content: str = ""
    ) -> Document: ...

    def get_document(self, document_id: str) -> Document | None: ...

    def mark_document_indexed(
        self, document_id: str, content: str, embedding_ids: list[str]
    ) -> None: ...

    def mark_document_failed(self, document_id: str, error_message: str) -> None: ...

    def delete_document(self, document_id: str) -> None: ...


class RavenDBRepository:
    """ChatRepository backed by a RavenDB DocumentStore.

    Entities are written as dataclasses and read back as dicts. Every method
    opens its own short-lived session, so instances are safe to share.
    """

    def __init__(self, store: DocumentStore) -> None:
        self.store = store

    # -- helpers ---------------------------------------------------------

    def _save(self, entity) -> None:
        with self.store.open_session() as session:
            session.store(entity, entity.Id)
            session.advanced.get_metadata_for(entity)["@collection"] = entity.COLLECTION
            session.save_changes()

    def _load(self, doc_id: str) -> dict[str, Any] | None:
        with self.store.open_session() as session:
            return session.load(doc_id, dict)

    def _query(self, collection: str, **filters: Any) -> list[dict[str, Any]]:
        with self.store.open_session() as session:
            query = session.query_collection(collection, object_type=dict)
            first = True
            for field_name, value in filters.items():
                if not first:
                    query = query.and_also()
                query = query.where_equals(field_name, value)
                first = False
            return list(query)

    @staticmethod
    def _new_id() -> str:
        return str(uuid.uuid4())

    # -- projects --------------------------------------------------------

    def _with_actions(self, project: Project) -> Project:
        project.actions = [
            Action.from_document(doc)
            for doc in self._query(Action.COLLECTION, project_id=project.Id, enabled=True)
        ]
        return project

    def get_project(self, project_id: str) -> Project | None:
        """Load a project with its enabled actions, or None if it does not exist."""
        data = self._load(project_id)
        if data is None:
            return None
        return self._with_actions(Project.from_document(data))

    def get_project_by_api_key(self, api_key: str) -> Project | None:
        matches = self._query(Project.COLLECTION, api_key=api_key)
        if not matches:
            return None
        return self._with_actions(Project.from_document(matches[0]))

    # -- conversations and messages --------------------------------------

    def create_conversation(self, project_id: str) -> str:
        now = utc_now()
        conversation = Conversation(
            Id=self._new_id(),
            project_id=project_id,
            created_at=now,
            last_message_at=now,
        )
        self._save(conversation)
        logger.debug(f"💬 Created conversation {conversation.Id}")
        return conversation.Id

    def get_conversation(self, conversation_id: str) -> Conversation | None:
        data = self._load(conversation_id)
        return Conversation.from_document(data) if data is not None else None

    def add_message(
        self,
        conversation_id: str,
        role: str,
        content: str,
        sources: list[dict[str, Any]] | None = None,
    ) -> str:
        message = Message(
            Id=self._new_id(),
            conversation_id=conversation_id,
            role=role,
            content=content,
            sources=list(sources or []),
            created_at=utc_now(),
        )
        self._save(message)
        return message.Id

    def touch_conversation(self, conversation_id: str) -> None:
        """Bump the conversation's last_message_at to now."""
        data = self._load(conversation_id)
        if data is None:
            logger.warning(f"⚠️ Conversation {conversation_id} not found, nothing to update")
            return
        conversation = Conversation.from_document(data)
        conversation.last_message_at = utc_now()
        self._save(conversation)

    def list_messages(self, conversation_id: str, limit: int) -> list[Message]:
        """Return the latest ``limit`` messages, oldest first."""
        if limit <= 0:
            return []
        with self.store.open_session() as session:
            docs = list(
                session.query_collection(Message.COLLECTION, object_type=dict)
                .where_equals("conversation_id", conversation_id)
                .order_by_descending("created_at")
                .take(limit)
            )
        return [Message.from_document(doc) for doc in reversed(docs)]

    # -- documents -------------------------------------------------------

    def create_document(
        self, project_id: str, filename: str, collection: str, content: str = ""
    ) -> Document:
        document = Document(
            Id=self._new_id(),
            project_id=project_id,
            filename=filename,
            collection=collection,
            content=content,
            status=STATUS_PROCESSING,
            created_at=utc_now(),
        )
        self._save(document)
        return document

    def get_document(self, document_id: str) -> Document | None:
        data = self._load(document_id)
        return Document.from_document(data) if data is not None else None

    def _require_document(self, document_id: str) -> Document:
        document = self.get_document(document_id)
        if document is None:
            raise NotFoundError("Document")
        return document

    def mark_document_indexed(
        self, document_id: str, content: str, embedding_ids: list[str]
    ) -> None:
        document = self._require_document(document_id)
        document.status = STATUS_INDEXED
        document.content = content
        document.embedding_ids = list(embedding_ids)
        document.error_message = None
        self._save(document)

    def mark_document_failed(self, document_id: str, error_message: str) -> None:
        document = self._require_document(document_id)
        document.status = STATUS_FAILED
        document.error_message = error_message
        self._save(document)

    def delete_document(self, document_id: str) -> None:
        with self.store.open_session() as session:
            session.delete(document_id)
            session.save_changes()
