"""Tests for the Flask application module."""

import json
from unittest.mock import AsyncMock, MagicMock, patch

import pytest

from conftest import OTHER_PROJECT_ID, PROJECT_ID, PROJECT_KEY
from ragdesk.client.app import app
from ragdesk.client.routes.chat import format_sse, parse_chat_request
from ragdesk.client.routes.config import RouteConfig
from ragdesk.errors import ValidationError

CONVERSATION_ID = "33333333-3333-4333-8333-333333333333"


@pytest.fixture
def route_config(pipeline, fake_repository, fake_vector_store, embedding_generator):
    """RouteConfig wired to the in-memory fakes."""
    return RouteConfig(
        pipeline=pipeline,
        repository=fake_repository,
        vector_store=fake_vector_store,
        embeddings=embedding_generator,
        history_limit=10,
    )


@pytest.fixture
def client(route_config):
    with (
        patch("ragdesk.client.routes.chat.get_config", return_value=route_config),
        patch("ragdesk.client.routes.documents.get_config", return_value=route_config),
        patch("ragdesk.client.routes.health.get_config", return_value=route_config),
    ):
        with app.test_client() as test_client:
            yield test_client


def post_json(client, url, body, key=PROJECT_KEY):
    headers = {"X-Project-Key": key} if key else {}
    return client.post(url, data=json.dumps(body), content_type="application/json", headers=headers)


def parse_sse(body: bytes) -> list[dict]:
    frames = body.decode("utf-8").split("\n\n")
    return [json.loads(frame[len("data: ") :]) for frame in frames if frame]


class TestParseChatRequest:
    """Tests for request validation."""

    def test_valid_request(self):
        chat_request = parse_chat_request(
            {"projectId": PROJECT_ID, "message": "hi", "conversationId": CONVERSATION_ID}
        )
        assert chat_request.project_id == PROJECT_ID
        assert chat_request.message == "hi"
        assert chat_request.conversation_id == CONVERSATION_ID

    @pytest.mark.parametrize(
        "body",
        [
            None,
            [],
            {"message": "hi"},
            {"projectId": "not-a-uuid", "message": "hi"},
            {"projectId": PROJECT_ID},
            {"projectId": PROJECT_ID, "message": ""},
            {"projectId": PROJECT_ID, "message": "x" * 2001},
            {"projectId": PROJECT_ID, "message": "hi", "conversationId": "abc"},
        ],
    )
    def test_invalid_requests_are_rejected(self, body):
        with pytest.raises(ValidationError):
            parse_chat_request(body)

    def test_message_at_length_limit_is_accepted(self):
        assert parse_chat_request({"projectId": PROJECT_ID, "message": "x" * 2000})


class TestFormatSse:
    def test_frame_format(self):
        assert format_sse({"type": "delta", "text": "Hi"}) == (
            'data: {"type": "delta", "text": "Hi"}\n\n'
        )


class TestHealthEndpoint:
    """Tests for the /health endpoint."""

    def test_health_reports_initialized_pipeline(self, client):
        response = client.get("/health")

        assert response.status_code == 200
        assert response.get_json() == {"status": "healthy", "pipeline": "initialized"}

    def test_health_reports_missing_pipeline(self):
        with patch("ragdesk.client.routes.health.get_config", return_value=RouteConfig()):
            with app.test_client() as test_client:
                response = test_client.get("/health")

        assert response.get_json()["pipeline"] == "not initialized"


class TestChatEndpoint:
    """Tests for the /api/chat endpoint."""

    def test_chat_success(self, client, fake_repository):
        response = post_json(
            client, "/api/chat", {"projectId": PROJECT_ID, "message": "cancel my plan"}
        )

        assert response.status_code == 200
        data = response.get_json()["data"]
        assert data["conversationId"] in fake_repository.conversations
        assert len(data["sources"]) == 3
        assert data["sources"][0]["documentId"] == "doc-1"
        assert data["action"]["name"] == "cancel_subscription"
        assert data["action"]["parameters"] == {"subscriptionId": "sub_123"}

        roles = [m.role for m in fake_repository.messages]
        assert roles == ["user", "assistant"]
        assert fake_repository.messages[0].content == "cancel my plan"
        assert data["messageId"] == fake_repository.messages[1].Id

    def test_validation_error_returns_400_envelope(self, client):
        response = post_json(client, "/api/chat", {"projectId": "nope", "message": "hi"})

        assert response.status_code == 400
        assert response.get_json() == {
            "error": {"message": "projectId must be a UUID", "code": "VALIDATION_ERROR"}
        }

    def test_missing_project_key_returns_401(self, client):
        response = post_json(client, "/api/chat", {"projectId": PROJECT_ID, "message": "hi"}, key=None)

        assert response.status_code == 401
        assert response.get_json()["error"]["code"] == "AUTHENTICATION_ERROR"

    def test_unknown_project_key_returns_401(self, client):
        response = post_json(
            client, "/api/chat", {"projectId": PROJECT_ID, "message": "hi"}, key="pk_wrong"
        )

        assert response.status_code == 401
        assert response.get_json()["error"]["message"] == "Invalid project key"

    def test_key_for_other_project_returns_403(self, client, fake_repository):
        response = post_json(
            client, "/api/chat", {"projectId": OTHER_PROJECT_ID, "message": "hi"}
        )

        assert response.status_code == 403
        assert response.get_json()["error"]["code"] == "AUTHORIZATION_ERROR"
        assert fake_repository.messages == []

    def test_unknown_conversation_returns_404(self, client):
        response = post_json(
            client,
            "/api/chat",
            {"projectId": PROJECT_ID, "message": "hi", "conversationId": CONVERSATION_ID},
        )

        assert response.status_code == 404
        assert response.get_json()["error"]["message"] == "Conversation not found"

    def test_history_excludes_current_message(self, client, fake_repository, stub_llm):
        conversation_id = fake_repository.create_conversation(PROJECT_ID)
        fake_repository.add_message(conversation_id, "user", "hi")
        fake_repository.add_message(conversation_id, "assistant", "Hello! How can I help?")

        response = post_json(
            client,
            "/api/chat",
            {"projectId": PROJECT_ID, "message": "cancel my plan", "conversationId": conversation_id},
        )

        assert response.status_code == 200
        messages = stub_llm.chat_calls[0]
        assert messages[0] == {"role": "user", "content": "hi"}
        assert messages[1] == {"role": "assistant", "content": "Hello! How can I help?"}
        assert len(messages) == 3
        assert messages[2]["content"].endswith("User: cancel my plan")

    def test_search_timeout_returns_408(self, client, fake_vector_store):
        from ragdesk.errors import SearchTimeoutError

        fake_vector_store.search_error = SearchTimeoutError()

        response = post_json(client, "/api/chat", {"projectId": PROJECT_ID, "message": "hi"})

        assert response.status_code == 408
        assert response.get_json()["error"] == {"message": "Search timeout", "code": "SEARCH_TIMEOUT"}

    def test_failed_turn_still_advances_last_message_at(self, client, fake_repository, stub_llm):
        conversation_id = fake_repository.create_conversation(PROJECT_ID)
        stub_llm.generate_response = AsyncMock(side_effect=RuntimeError("provider down"))

        response = post_json(
            client,
            "/api/chat",
            {"projectId": PROJECT_ID, "message": "hi", "conversationId": conversation_id},
        )

        assert response.status_code == 500
        (user_message,) = fake_repository.messages
        conversation = fake_repository.conversations[conversation_id]
        assert conversation.last_message_at >= user_message.created_at

    def test_unexpected_error_does_not_leak_details(self, client, route_config):
        route_config.pipeline = MagicMock()
        route_config.pipeline.retrieve_and_generate.side_effect = RuntimeError("password=hunter2")

        response = post_json(client, "/api/chat", {"projectId": PROJECT_ID, "message": "hi"})

        assert response.status_code == 500
        assert response.get_json() == {
            "error": {"message": "Internal server error", "code": "INTERNAL_ERROR"}
        }


class TestChatStreamEndpoint:
    """Tests for the /api/chat/stream endpoint."""

    def test_stream_emits_sse_frames(self, client, fake_repository):
        response = post_json(
            client, "/api/chat/stream", {"projectId": PROJECT_ID, "message": "cancel my plan"}
        )

        assert response.status_code == 200
        assert response.mimetype == "text/event-stream"
        assert response.headers["Cache-Control"] == "no-cache"

        events = parse_sse(response.data)
        types = [e["type"] for e in events]
        assert types[0] == "sources"
        assert types[-2:] == ["action", "done"]

        deltas = "".join(e["text"] for e in events if e["type"] == "delta")
        assistant = [m for m in fake_repository.messages if m.role == "assistant"]
        assert assistant[0].content == deltas
        assert events[-1]["messageId"] == assistant[0].Id

    def test_stream_rejects_bad_request_as_json(self, client):
        response = post_json(client, "/api/chat/stream", {"projectId": PROJECT_ID})

        assert response.status_code == 400
        assert response.get_json()["error"]["code"] == "VALIDATION_ERROR"

    def test_stream_rejects_wrong_project_key(self, client):
        response = post_json(
            client, "/api/chat/stream", {"projectId": PROJECT_ID, "message": "hi"}, key="pk_wrong"
        )

        assert response.status_code == 401

    def test_stream_reports_search_timeout_as_event(self, client, fake_vector_store):
        from ragdesk.errors import SearchTimeoutError

        fake_vector_store.search_error = SearchTimeoutError()

        response = post_json(client, "/api/chat/stream", {"projectId": PROJECT_ID, "message": "hi"})

        assert response.status_code == 200
        assert parse_sse(response.data) == [{"type": "error", "message": "Search timeout"}]


class TestDocumentEndpoints:
    """Tests for /api/documents."""

    def test_create_document_indexes_text(self, client, fake_repository, fake_vector_store):
        response = post_json(
            client,
            "/api/documents",
            {
                "projectId": PROJECT_ID,
                "filename": "faq.md",
                "text": "Refunds are issued within five business days.",
                "collection": "support",
            },
        )

        assert response.status_code == 201
        body = response.get_json()
        assert body["filename"] == "faq.md"
        assert body["status"] == "indexed"
        assert body["chunks"] == 1

        document = fake_repository.documents[body["documentId"]]
        assert document.status == "indexed"
        assert document.collection == "support"
        assert list(fake_vector_store.inserted) == [f"{body['documentId']}_chunk_0"]

    def test_create_document_requires_filename(self, client):
        response = post_json(client, "/api/documents", {"projectId": PROJECT_ID, "text": "hi"})

        assert response.status_code == 400

    def test_create_document_with_empty_text_fails(self, client, fake_repository):
        response = post_json(
            client, "/api/documents", {"projectId": PROJECT_ID, "filename": "a.md", "text": "  "}
        )

        assert response.status_code == 400
        (document,) = fake_repository.documents.values()
        assert document.status == "failed"

    def test_delete_document(self, client, fake_repository, fake_vector_store):
        document = fake_repository.create_document(PROJECT_ID, "faq.md", "support")
        fake_repository.mark_document_indexed(document.Id, "text", ["c1", "c2"])

        response = client.delete(
            f"/api/documents/{document.Id}", headers={"X-Project-Key": PROJECT_KEY}
        )

        assert response.status_code == 204
        assert fake_vector_store.deleted == ["c1", "c2"]
        assert document.Id not in fake_repository.documents

    def test_delete_missing_document_returns_404(self, client):
        response = client.delete(
            f"/api/documents/{CONVERSATION_ID}", headers={"X-Project-Key": PROJECT_KEY}
        )

        assert response.status_code == 404
        assert response.get_json()["error"]["message"] == "Document not found"

    def test_delete_other_projects_document_returns_403(self, client, fake_repository):
        document = fake_repository.create_document(OTHER_PROJECT_ID, "faq.md", "support")

        response = client.delete(
            f"/api/documents/{document.Id}", headers={"X-Project-Key": PROJECT_KEY}
        )

        assert response.status_code == 403
        assert document.Id in fake_repository.documents


class TestMain:
    """Tests for the main entry point."""

    @patch("ragdesk.client.app.app.run")
    @patch("ragdesk.client.app.initialize_services")
    def test_main_starts_server(self, mock_init, mock_run, monkeypatch):
        from ragdesk.client.app import main

        monkeypatch.setenv("FLASK_HOST", "127.0.0.1")
        monkeypatch.setenv("FLASK_PORT", "8123")
        monkeypatch.setenv("FLASK_ENV", "production")

        main()

        mock_init.assert_called_once()
        mock_run.assert_called_once_with(host="127.0.0.1", port=8123, debug=False, threaded=True)

    @patch("ragdesk.client.app.init_config")
    @patch("ragdesk.client.app.ensure_index_exists", side_effect=RuntimeError("down"))
    @patch("ragdesk.client.app.build_services")
    def test_initialize_services_tolerates_index_failure(
        self, mock_build, mock_ensure, mock_init_config
    ):
        from ragdesk.client.app import initialize_services

        initialize_services()

        mock_ensure.assert_called_once_with(mock_build.return_value.store)
        mock_init_config.assert_called_once()
        assert mock_init_config.call_args.kwargs["pipeline"] is mock_build.return_value.pipeline
