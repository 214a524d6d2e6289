"""Pytest configuration and shared fixtures for the test suite."""

import uuid

import pytest
import requests

from ragdesk.llm import CompletionClient
from ragdesk.service.database.models import Action, Conversation, Document, Message, Project
from ragdesk.service.database.vector_store import SearchResult
from ragdesk.service.embeddings import EmbeddingCache, EmbeddingGenerator
from ragdesk.service.rag import RagPipeline

PROJECT_ID = "11111111-1111-4111-8111-111111111111"
OTHER_PROJECT_ID = "22222222-2222-4222-8222-222222222222"
PROJECT_KEY = "pk_test_123"

ACTION_RESPONSE = (
    "I can help you cancel your plan.\n"
    "ACTION: cancel_subscription\n"
    'PARAMETERS: {"subscriptionId":"sub_123"}\n'
    "EXPLANATION: I will cancel your subscription."
)


# Service availability checks
def ollama_available() -> bool:
    """Check if Ollama server is running and accessible.

    Returns:
        True if Ollama is available, False otherwise
    """
    try:
        response = requests.get("http://localhost:11434/api/tags", timeout=2)
        return response.status_code == 200
    except requests.RequestException:
        return False


def ravendb_available() -> bool:
    """Check if RavenDB server is running and accessible.

    Returns:
        True if RavenDB is available, False otherwise
    """
    try:
        response = requests.get("http://localhost:8080/databases", timeout=2)
        return response.status_code in (200, 401)  # Auth required is OK
    except requests.RequestException:
        return False


# Fakes
class FakeClock:
    """Manually advanced monotonic clock."""

    def __init__(self, now: float = 1000.0) -> None:
        self.now = now

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


class StubLLMService:
    """Deterministic LLMService: fixed answer, streamed in small fragments."""

    def __init__(self, response: str = "Hello there.", fragment_size: int = 7) -> None:
        self.model = "stub-model"
        self.response = response
        self.fragment_size = fragment_size
        self.embed_calls: list[list[str]] = []
        self.chat_calls: list[list[dict]] = []
        self.stream_closed = False
        self.fail_stream_after: int | None = None
        self.embed_error: Exception | None = None

    async def generate_response(self, messages: list[dict]) -> str:
        self.chat_calls.append(messages)
        return self.response

    async def stream_response(self, messages: list[dict]):
        self.chat_calls.append(messages)
        try:
            for i in range(0, len(self.response), self.fragment_size):
                if self.fail_stream_after is not None and i >= self.fail_stream_after:
                    raise RuntimeError("provider connection reset")
                yield self.response[i : i + self.fragment_size]
        finally:
            self.stream_closed = True

    def generate_embeddings(self, texts: list[str], model: str | None = None) -> list[list[float]]:
        self.embed_calls.append(list(texts))
        if self.embed_error is not None:
            raise self.embed_error
        return [[float(len(text)), 1.0, 0.5] for text in texts]


class FakeVectorStore:
    """In-memory VectorStore returning canned search results."""

    def __init__(self, results: list[SearchResult] | None = None) -> None:
        self.results = results or []
        self.search_calls: list[dict] = []
        self.inserted: dict[str, tuple[list[float], dict]] = {}
        self.deleted: list[str] = []
        self.search_error: Exception | None = None

    async def search(self, query_vector, project_id, top_k, collections=None, min_score=None):
        self.search_calls.append(
            {
                "query_vector": query_vector,
                "project_id": project_id,
                "top_k": top_k,
                "collections": collections,
                "min_score": min_score,
            }
        )
        if self.search_error is not None:
            raise self.search_error
        results = self.results[:top_k]
        if min_score is not None:
            results = [r for r in results if r.score >= min_score]
        return results

    def insert(self, chunk_id, vector, metadata) -> None:
        self.inserted[chunk_id] = (vector, metadata)

    def delete(self, chunk_id) -> None:
        self.deleted.append(chunk_id)
        self.inserted.pop(chunk_id, None)


class FakeRepository:
    """In-memory ChatRepository."""

    def __init__(self) -> None:
        self.projects: dict[str, Project] = {}
        self.conversations: dict[str, Conversation] = {}
        self.messages: list[Message] = []
        self.documents: dict[str, Document] = {}
        self.touched: list[str] = []
        self.fail_writes = False
        self._tick = 0

    def _now(self) -> str:
        self._tick += 1
        return f"2026-01-01T00:00:{self._tick:02d}+00:00"

    def add_project(self, project: Project) -> Project:
        self.projects[project.Id] = project
        return project

    def get_project(self, project_id):
        return self.projects.get(project_id)

    def get_project_by_api_key(self, api_key):
        for project in self.projects.values():
            if project.api_key == api_key:
                return project
        return None

    def create_conversation(self, project_id):
        if self.fail_writes:
            raise RuntimeError("database unavailable")
        conversation_id = str(uuid.uuid4())
        now = self._now()
        self.conversations[conversation_id] = Conversation(
            Id=conversation_id, project_id=project_id, created_at=now, last_message_at=now
        )
        return conversation_id

    def get_conversation(self, conversation_id):
        return self.conversations.get(conversation_id)

    def add_message(self, conversation_id, role, content, sources=None):
        if self.fail_writes:
            raise RuntimeError("database unavailable")
        message = Message(
            Id=str(uuid.uuid4()),
            conversation_id=conversation_id,
            role=role,
            content=content,
            sources=list(sources or []),
            created_at=self._now(),
        )
        self.messages.append(message)
        return message.Id

    def touch_conversation(self, conversation_id):
        self.touched.append(conversation_id)
        conversation = self.conversations.get(conversation_id)
        if conversation is not None:
            conversation.last_message_at = self._now()

    def list_messages(self, conversation_id, limit):
        matching = [m for m in self.messages if m.conversation_id == conversation_id]
        return matching[-limit:] if limit > 0 else []

    def create_document(self, project_id, filename, collection, content=""):
        document = Document(
            Id=str(uuid.uuid4()),
            project_id=project_id,
            filename=filename,
            collection=collection,
            content=content,
        )
        self.documents[document.Id] = document
        return document

    def get_document(self, document_id):
        return self.documents.get(document_id)

    def mark_document_indexed(self, document_id, content, embedding_ids):
        document = self.documents[document_id]
        document.status = "indexed"
        document.content = content
        document.embedding_ids = list(embedding_ids)

    def mark_document_failed(self, document_id, error_message):
        document = self.documents[document_id]
        document.status = "failed"
        document.error_message = error_message

    def delete_document(self, document_id):
        self.documents.pop(document_id, None)


def make_result(index: int, score: float, content: str | None = None) -> SearchResult:
    """Build a SearchResult for chunk ``index`` of a FAQ document."""
    return SearchResult(
        id=f"doc-1_chunk_{index}",
        score=score,
        metadata={
            "document_id": "doc-1",
            "project_id": PROJECT_ID,
            "content": content or f"Billing FAQ section {index}",
            "filename": "billing-faq.md",
            "collection": "support",
            "chunk_index": index,
        },
    )


# Fixtures
@pytest.fixture
def fake_clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def stub_llm() -> StubLLMService:
    return StubLLMService(response=ACTION_RESPONSE)


@pytest.fixture
def project() -> Project:
    """A project with topK=5, minScore=0.7 and one enabled action."""
    return Project(
        Id=PROJECT_ID,
        name="Acme Support",
        system_prompt="You are Acme's support assistant.",
        api_key=PROJECT_KEY,
        top_k=5,
        min_score=0.7,
        enabled_collections=["all"],
        actions=[
            Action(
                Id="action-cancel",
                project_id=PROJECT_ID,
                name="cancel_subscription",
                display_name="Cancel subscription",
                description="Cancel the customer's subscription",
                endpoint="https://api.acme.test/subscriptions/cancel",
                headers={"Authorization": "Bearer secret-token"},
                requires_confirmation=True,
            )
        ],
    )


@pytest.fixture
def fake_repository(project) -> FakeRepository:
    repository = FakeRepository()
    repository.add_project(project)
    return repository


@pytest.fixture
def fake_vector_store() -> FakeVectorStore:
    return FakeVectorStore([make_result(0, 0.92), make_result(1, 0.85), make_result(2, 0.78)])


@pytest.fixture
def embedding_generator(stub_llm, fake_clock) -> EmbeddingGenerator:
    return EmbeddingGenerator(stub_llm, model="stub-embed", cache=EmbeddingCache(clock=fake_clock))


@pytest.fixture
def pipeline(fake_repository, embedding_generator, fake_vector_store, stub_llm) -> RagPipeline:
    return RagPipeline(
        fake_repository, embedding_generator, fake_vector_store, CompletionClient(stub_llm)
    )


# Service fixtures with skip markers
@pytest.fixture
def ollama_service():
    """Provide OllamaService instance, skip if Ollama not available.

    Raises:
        pytest.skip: If Ollama server is not running
    """
    if not ollama_available():
        pytest.skip("Ollama server not running on localhost:11434")

    from ragdesk.llm import OllamaService

    return OllamaService(host="http://localhost:11434", model="llama3")


@pytest.fixture
def ravendb_store():
    """Provide RavenDB DocumentStore, skip if RavenDB not available.

    Yields:
        Initialized DocumentStore instance

    Raises:
        pytest.skip: If RavenDB server is not running
    """
    if not ravendb_available():
        pytest.skip("RavenDB server not running on localhost:8080")

    from ragdesk.service.database import create_document_store

    store = create_document_store()
    yield store
    store.close()
