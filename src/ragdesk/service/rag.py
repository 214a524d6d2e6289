"""Retrieval-augmented generation pipeline.

One chat turn: load the project, embed the question, search the project's
chunks, ask the LLM with the retrieved context, match a suggested action and
persist the assistant's answer. ``retrieve_and_generate`` returns the whole
result; ``retrieve_and_generate_stream`` yields events as they happen:

    sources -> delta* -> action? -> done | error
"""

import asyncio
import logging
from collections.abc import AsyncIterator, Sequence
from dataclasses import dataclass, field
from typing import Any

from ragdesk.errors import NotFoundError, ProviderError, RagDeskError, SearchTimeoutError
from ragdesk.llm.completion import ChatTurn, CompletionClient
from ragdesk.service.actions import match_action, parse_action_from_response
from ragdesk.service.database.models import Action, DocumentSource, Project
from ragdesk.service.database.repository import ChatRepository
from ragdesk.service.database.vector_store import VectorStore
from ragdesk.service.embeddings import EmbeddingGenerator

logger = logging.getLogger(__name__)

GENERIC_FAILURE_MESSAGE = "Failed to generate response"


def public_error_message(error: Exception) -> str:
    """Message safe to show an end user; provider internals are never leaked."""
    if isinstance(error, SearchTimeoutError):
        return error.message
    if isinstance(error, RagDeskError) and not isinstance(error, ProviderError):
        return error.message
    return GENERIC_FAILURE_MESSAGE


@dataclass(frozen=True)
class ActionSuggestion:
    action_id: str
    name: str
    parameters: dict[str, Any]
    explanation: str
    requires_confirmation: bool

    def to_dict(self) -> dict[str, Any]:
        return {
            "actionId": self.action_id,
            "name": self.name,
            "parameters": self.parameters,
            "explanation": self.explanation,
            "requiresConfirmation": self.requires_confirmation,
        }


@dataclass
class ChatResult:
    """Outcome of a synchronous turn. ``message_id`` is None if saving failed."""

    message_id: str | None
    conversation_id: str | None
    content: str
    sources: list[DocumentSource] = field(default_factory=list)
    action: ActionSuggestion | None = None

    def to_dict(self) -> dict[str, Any]:
        data: dict[str, Any] = {
            "messageId": self.message_id,
            "conversationId": self.conversation_id,
            "content": self.content,
            "sources": [source.to_dict() for source in self.sources],
        }
        if self.action is not None:
            data["action"] = self.action.to_dict()
        return data


class RagPipeline:
    """Coordinates embeddings, vector search, completion and persistence."""

    def __init__(
        self,
        repository: ChatRepository,
        embeddings: EmbeddingGenerator,
        vector_store: VectorStore,
        completion: CompletionClient,
    ) -> None:
        self.repository = repository
        self.embeddings = embeddings
        self.vector_store = vector_store
        self.completion = completion

    async def _load_project(self, project_id: str) -> Project | None:
        return await asyncio.to_thread(self.repository.get_project, project_id)

    async def _retrieve(
        self, project: Project, query_vector: list[float]
    ) -> tuple[list[str], list[DocumentSource]]:
        config = project.retrieval_config
        results = await self.vector_store.search(
            query_vector,
            project.Id,
            config.top_k,
            collections=config.collection_filter,
            min_score=config.min_score,
        )
        logger.info(f"🔍 Retrieved {len(results)} chunks for project {project.Id}")

        context = [r.metadata.get("content", "") for r in results]
        sources = [
            DocumentSource(
                document_id=r.metadata.get("document_id", ""),
                filename=r.metadata.get("filename", ""),
                content=r.metadata.get("content", ""),
                score=float(r.score),
            )
            for r in results
        ]
        return context, sources

    def _match(self, project: Project, text: str) -> Action | None:
        return match_action(parse_action_from_response(text), project.actions)

    async def _persist(
        self, conversation_id: str, content: str, sources: list[DocumentSource]
    ) -> str:
        message_id = await asyncio.to_thread(
            self.repository.add_message,
            conversation_id,
            "assistant",
            content,
            [source.to_dict() for source in sources],
        )
        await asyncio.to_thread(self.repository.touch_conversation, conversation_id)
        return message_id

    async def retrieve_and_generate(
        self,
        project_id: str,
        user_message: str,
        conversation_id: str | None = None,
        history: Sequence[ChatTurn] = (),
    ) -> ChatResult:
        """Run one chat turn and return the complete answer.

        A conversation is created when ``conversation_id`` is None.

        Raises:
            NotFoundError: If the project does not exist.
            ValidationError: If the message is empty.
            ProviderError: If embedding, search or completion fails.
        """
        project = await self._load_project(project_id)
        if project is None:
            raise NotFoundError("Project")

        query_vector = await self.embeddings.embed(user_message)
        context, sources = await self._retrieve(project, query_vector)

        content = await self.completion.complete(
            project.system_prompt,
            context,
            user_message,
            [action.descriptor() for action in project.actions],
            history,
        )

        action = None
        parsed = parse_action_from_response(content)
        matched = match_action(parsed, project.actions)
        if matched is not None:
            action = ActionSuggestion(
                action_id=matched.Id,
                name=matched.name,
                parameters=parsed.parameters,
                explanation=parsed.explanation,
                requires_confirmation=matched.requires_confirmation,
            )

        message_id = None
        try:
            if conversation_id is None:
                conversation_id = await asyncio.to_thread(
                    self.repository.create_conversation, project_id
                )
            message_id = await self._persist(conversation_id, content, sources)
        except Exception as e:
            logger.error(f"❌ Failed to save assistant message: {e}", exc_info=True)

        return ChatResult(
            message_id=message_id,
            conversation_id=conversation_id,
            content=content,
            sources=sources,
            action=action,
        )

    async def retrieve_and_generate_stream(
        self,
        project_id: str,
        user_message: str,
        conversation_id: str,
        history: Sequence[ChatTurn] = (),
    ) -> AsyncIterator[dict[str, Any]]:
        """Run one chat turn, yielding JSON-serializable events.

        The conversation must already exist. Failures become a final
        ``error`` event. If the consumer closes the generator early, the
        provider stream is closed and the partial answer is not saved.
        """
        try:
            project, query_vector = await asyncio.gather(
                self._load_project(project_id),
                self.embeddings.embed(user_message),
            )
            if project is None:
                yield {"type": "error", "message": "Project not found"}
                return

            context, sources = await self._retrieve(project, query_vector)
            yield {"type": "sources", "data": [source.to_dict() for source in sources]}

            parts: list[str] = []
            stream = self.completion.complete_stream(
                project.system_prompt,
                context,
                user_message,
                [action.descriptor() for action in project.actions],
                history,
            )
            try:
                async for delta in stream:
                    parts.append(delta)
                    yield {"type": "delta", "text": delta}
            finally:
                await stream.aclose()
            content = "".join(parts)
        except GeneratorExit:
            logger.info("⚠️ Client disconnected mid-stream, partial answer not saved")
            raise
        except Exception as e:
            logger.error(f"❌ Streaming turn failed: {e}", exc_info=True)
            yield {"type": "error", "message": public_error_message(e)}
            return

        matched = self._match(project, content)
        if matched is not None:
            yield {
                "type": "action",
                "action": {
                    "kind": "http",
                    "name": matched.name,
                    "requiresConfirmation": matched.requires_confirmation,
                },
            }

        message_id = None
        try:
            message_id = await self._persist(conversation_id, content, sources)
        except Exception as e:
            logger.error(f"❌ Failed to save streamed answer: {e}", exc_info=True)

        yield {"type": "done", "messageId": message_id, "conversationId": conversation_id}
