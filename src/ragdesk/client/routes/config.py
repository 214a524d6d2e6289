"""Shared configuration for route modules."""

from dataclasses import dataclass
from typing import Any

from ragdesk.constants import HISTORY_LIMIT


@dataclass
class RouteConfig:
    """Configuration container for Flask route dependencies.

    This replaces global variables with a proper configuration object
    that can be passed around and tested more easily.
    """

    pipeline: Any = None
    repository: Any = None
    vector_store: Any = None
    embeddings: Any = None
    history_limit: int = HISTORY_LIMIT


# Single shared config instance
_config = RouteConfig()


def get_config() -> RouteConfig:
    """Get the shared route configuration.

    Returns:
        RouteConfig instance with current settings
    """
    return _config


def init_config(
    pipeline: Any = None,
    repository: Any = None,
    vector_store: Any = None,
    embeddings: Any = None,
    history_limit: int | None = None,
) -> None:
    """Initialize the shared route configuration.

    Args:
        pipeline: RagPipeline instance
        repository: Chat repository
        vector_store: Chunk vector store
        embeddings: EmbeddingGenerator used for document indexing
        history_limit: Prior messages forwarded to the LLM
    """
    if pipeline is not None:
        _config.pipeline = pipeline
    if repository is not None:
        _config.repository = repository
    if vector_store is not None:
        _config.vector_store = vector_store
    if embeddings is not None:
        _config.embeddings = embeddings
    if history_limit is not None:
        _config.history_limit = history_limit
