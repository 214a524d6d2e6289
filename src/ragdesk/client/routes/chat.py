"""Chat API routes using the RAG pipeline."""

import json
import logging
from dataclasses import dataclass

from flask import Blueprint, Response, jsonify, request

from ragdesk.client.routes.auth import (
    PROJECT_KEY_HEADER,
    error_response,
    require_project_access,
    require_uuid,
)
from ragdesk.client.routes.config import RouteConfig, get_config
from ragdesk.constants import MAX_MESSAGE_LENGTH
from ragdesk.errors import NotFoundError, RagDeskError, ValidationError
from ragdesk.llm import ChatTurn
from ragdesk.service.async_helpers import iterate_async, run_async

logger = logging.getLogger(__name__)

chat_bp = Blueprint("chat", __name__)


@dataclass(frozen=True)
class ChatRequest:
    project_id: str
    message: str
    conversation_id: str | None = None


def parse_chat_request(data) -> ChatRequest:
    """Validate a chat request body.

    Raises:
        ValidationError: On a missing or malformed field.
    """
    if not isinstance(data, dict):
        raise ValidationError("Request body must be a JSON object")

    project_id = require_uuid(data.get("projectId"), "projectId")

    message = data.get("message")
    if not isinstance(message, str) or not message:
        raise ValidationError("message is required")
    if len(message) > MAX_MESSAGE_LENGTH:
        raise ValidationError(f"message must be at most {MAX_MESSAGE_LENGTH} characters")

    conversation_id = data.get("conversationId")
    if conversation_id is not None:
        conversation_id = require_uuid(conversation_id, "conversationId")

    return ChatRequest(project_id=project_id, message=message, conversation_id=conversation_id)


def format_sse(event: dict) -> str:
    """Serialize one stream event as a server-sent event frame."""
    return f"data: {json.dumps(event)}\n\n"


def start_turn(config: RouteConfig, chat_request: ChatRequest) -> tuple[str, list[ChatTurn]]:
    """Authorize, resolve the conversation, load history and save the user message.

    History is loaded before the new user message is written, so it holds
    only prior turns.

    Returns:
        tuple: (conversation_id, history oldest-first)
    """
    repository = config.repository
    require_project_access(
        repository, request.headers.get(PROJECT_KEY_HEADER), chat_request.project_id
    )

    history: list[ChatTurn] = []
    conversation_id = chat_request.conversation_id
    if conversation_id is None:
        conversation_id = repository.create_conversation(chat_request.project_id)
    else:
        conversation = repository.get_conversation(conversation_id)
        if conversation is None or conversation.project_id != chat_request.project_id:
            raise NotFoundError("Conversation")
        history = [
            ChatTurn(role=m.role, content=m.content)
            for m in repository.list_messages(conversation_id, config.history_limit)
        ]

    repository.add_message(conversation_id, "user", chat_request.message)
    repository.touch_conversation(conversation_id)
    return conversation_id, history


@chat_bp.route("/api/chat", methods=["POST"])
def chat():
    """Answer a question in one response.

    Request:
        {"projectId": "<uuid>", "message": "...", "conversationId": "<uuid>"}

    Response:
        {"data": {"messageId", "conversationId", "content", "sources", "action"?}}
    """
    config = get_config()
    logger.info("📨 Received chat request")
    try:
        chat_request = parse_chat_request(request.get_json(silent=True))
        conversation_id, history = start_turn(config, chat_request)

        logger.info(f"🔍 Query: '{chat_request.message[:100]}'")
        result = run_async(
            config.pipeline.retrieve_and_generate(
                chat_request.project_id, chat_request.message, conversation_id, history
            )
        )
        logger.info("✅ Chat request completed successfully")
        return jsonify({"data": result.to_dict()})

    except RagDeskError as e:
        logger.warning(f"❌ Chat request failed: {e.message}")
        return error_response(e)
    except Exception as e:
        logger.error(f"❌ Error processing chat request: {e}", exc_info=True)
        return error_response(e)


@chat_bp.route("/api/chat/stream", methods=["POST"])
def chat_stream():
    """Answer a question as a server-sent event stream.

    Validation and authorization errors are returned as ordinary JSON errors;
    once the stream is open, failures arrive as a final ``error`` event.
    """
    config = get_config()
    logger.info("📨 Received streaming chat request")
    try:
        chat_request = parse_chat_request(request.get_json(silent=True))
        conversation_id, history = start_turn(config, chat_request)
    except RagDeskError as e:
        logger.warning(f"❌ Streaming chat request rejected: {e.message}")
        return error_response(e)
    except Exception as e:
        logger.error(f"❌ Error starting chat stream: {e}", exc_info=True)
        return error_response(e)

    events = iterate_async(
        config.pipeline.retrieve_and_generate_stream(
            chat_request.project_id, chat_request.message, conversation_id, history
        )
    )

    def generate():
        try:
            for event in events:
                yield format_sse(event)
        finally:
            events.close()

    return Response(
        generate(),
        mimetype="text/event-stream",
        headers={"Cache-Control": "no-cache", "X-Accel-Buffering": "no"},
    )
