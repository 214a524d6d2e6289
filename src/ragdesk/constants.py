"""Application-wide constants and defaults for RagDesk.

This module provides a single source of truth for configuration defaults,
magic numbers, and other constants used throughout the application.
"""

import os

# =============================================================================
# Chat Request Limits
# =============================================================================
MAX_MESSAGE_LENGTH = 2000  # Characters allowed in a single user message
HISTORY_LIMIT = 10  # Prior messages forwarded to the LLM as conversation history

# =============================================================================
# LLM Settings
# =============================================================================
DEFAULT_MAX_TOKENS = 1024  # Completion token limit, fixed per process
COMPLETION_DEFAULTS = {
    "ollama": "llama3",
    "gemini": "gemini-2.5-flash",
}

# =============================================================================
# Retrieval Settings
# =============================================================================
DEFAULT_TOP_K = 5  # Default number of results for vector search
MIN_TOP_K = 1
MAX_TOP_K = 20
DEFAULT_MIN_SCORE = 0.7  # Default relevance threshold (cosine similarity)
ALL_COLLECTIONS = "all"  # Sentinel collection name meaning "no collection filter"
DEFAULT_COLLECTION = "default"
VECTOR_SEARCH_TIMEOUT_SECONDS = 2.0

# =============================================================================
# Chunking and Embedding Settings
# =============================================================================
DEFAULT_CHUNK_SIZE = 500  # Words per chunk
DEFAULT_CHUNK_OVERLAP = 50  # Words shared by consecutive chunks
EMBEDDING_BATCH_SIZE = 100  # Texts per provider call when indexing
EMBEDDING_CACHE_TTL_SECONDS = 5 * 60
EMBEDDING_CACHE_MAX_SIZE = 512

# =============================================================================
# Display Settings
# =============================================================================
CONTENT_PREVIEW_LENGTH = 200  # Characters to show in content previews

# =============================================================================
# Default URLs and Hosts
# =============================================================================
DEFAULT_OLLAMA_HOST = "http://localhost:11434"
DEFAULT_RAVENDB_URL = "http://localhost:8080"
DEFAULT_RAVENDB_DATABASE = "ragdesk"

# =============================================================================
# Embedding Model Defaults
# =============================================================================
EMBEDDING_DEFAULTS = {
    "ollama": "nomic-embed-text",
    "gemini": "text-embedding-004",
}

# Default embedding dimensions (for RavenDB vector index)
DEFAULT_EMBEDDING_DIMENSIONS = 768


def get_embedding_model(service: str | None = None) -> str:
    """Get the default embedding model for a given LLM service.

    Checks the EMBEDDING_MODEL environment variable first, then falls back
    to service-specific defaults.

    Args:
        service: The LLM service name ("ollama" or "gemini").
                If None, uses LLM_SERVICE env var or defaults to "ollama".

    Returns:
        str: The embedding model name to use.
    """
    # Environment variable takes precedence
    env_model = os.getenv("EMBEDDING_MODEL")
    if env_model:
        return env_model

    # Determine service if not provided
    if service is None:
        service = os.getenv("LLM_SERVICE", "ollama")

    # Return service-specific default
    return EMBEDDING_DEFAULTS.get(service, EMBEDDING_DEFAULTS["ollama"])


def get_completion_model(service: str | None = None) -> str:
    """Get the completion model for a given LLM service.

    Args:
        service: The LLM service name. If None, uses LLM_SERVICE env var.

    Returns:
        str: LLM_MODEL from the environment, or the service-specific default.
    """
    env_model = os.getenv("LLM_MODEL")
    if env_model:
        return env_model

    if service is None:
        service = os.getenv("LLM_SERVICE", "ollama")

    return COMPLETION_DEFAULTS.get(service, COMPLETION_DEFAULTS["ollama"])
