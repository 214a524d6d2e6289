"""Exception hierarchy for RagDesk.

Every error raised on purpose by the package derives from RagDeskError and
carries a machine-readable code plus the HTTP status the boundary should use.
Provider failures are chained to the original exception with ``raise ... from``.
"""


class RagDeskError(Exception):
    """Base class for all RagDesk errors."""

    code = "INTERNAL_ERROR"
    status_code = 500

    def __init__(self, message: str, status_code: int | None = None) -> None:
        super().__init__(message)
        self.message = message
        if status_code is not None:
            self.status_code = status_code


class ValidationError(RagDeskError):
    """Bad input, e.g. empty text to embed or a malformed chat request."""

    code = "VALIDATION_ERROR"
    status_code = 400


class AuthenticationError(RagDeskError):
    """Missing or unknown project key."""

    code = "AUTHENTICATION_ERROR"
    status_code = 401

    def __init__(self, message: str = "Authentication required") -> None:
        super().__init__(message)


class AuthorizationError(RagDeskError):
    """Project key does not grant access to the requested project."""

    code = "AUTHORIZATION_ERROR"
    status_code = 403

    def __init__(self, message: str = "Access denied") -> None:
        super().__init__(message)


class NotFoundError(RagDeskError):
    """A project, document, conversation or action does not exist."""

    code = "NOT_FOUND"
    status_code = 404

    def __init__(self, resource: str) -> None:
        super().__init__(f"{resource} not found")
        self.resource = resource


class ProviderError(RagDeskError):
    """An external provider (embeddings, vector store, LLM) failed."""

    code = "PROVIDER_ERROR"


class EmbeddingError(ProviderError):
    code = "EMBEDDING_ERROR"


class VectorStoreError(ProviderError):
    code = "VECTOR_STORE_ERROR"


class SearchTimeoutError(VectorStoreError):
    """Vector search did not answer within the configured timeout."""

    code = "SEARCH_TIMEOUT"
    status_code = 408

    def __init__(self, message: str = "Search timeout") -> None:
        super().__init__(message)


class CompletionError(ProviderError):
    """The LLM provider failed, before or during streaming."""

    code = "COMPLETION_ERROR"
