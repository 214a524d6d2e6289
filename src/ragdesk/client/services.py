"""Composition root: builds the pipeline and its collaborators from the environment."""

import logging
import os
from dataclasses import dataclass

from dotenv import load_dotenv
from ravendb import DocumentStore

from ragdesk.constants import (
    EMBEDDING_CACHE_MAX_SIZE,
    EMBEDDING_CACHE_TTL_SECONDS,
    HISTORY_LIMIT,
    get_embedding_model,
)
from ragdesk.llm import CompletionClient, get_llm_service
from ragdesk.service.database import (
    RavenDBConfig,
    RavenDBRepository,
    RavenDBVectorStore,
    create_document_store,
)
from ragdesk.service.embeddings import EmbeddingCache, EmbeddingGenerator
from ragdesk.service.rag import RagPipeline

# Load environment variables
load_dotenv()

logger = logging.getLogger(__name__)


@dataclass
class Services:
    """Everything the routes and CLI commands need, wired together."""

    store: DocumentStore
    repository: RavenDBRepository
    vector_store: RavenDBVectorStore
    embeddings: EmbeddingGenerator
    pipeline: RagPipeline
    history_limit: int = HISTORY_LIMIT


def build_services(store: DocumentStore | None = None) -> Services:
    """Create the LLM service, embedding cache, RavenDB adapters and pipeline.

    The embedding cache is created here, once per process, and shared by
    every request through the EmbeddingGenerator.

    Args:
        store: Existing DocumentStore to reuse (default: a new one from RAVENDB_* env)
    """
    llm_service = get_llm_service()
    logger.info(f"✅ LLM service initialized (model: {llm_service.model})")

    cache = EmbeddingCache(
        ttl=float(os.getenv("EMBEDDING_CACHE_TTL", str(EMBEDDING_CACHE_TTL_SECONDS))),
        max_size=int(os.getenv("EMBEDDING_CACHE_SIZE", str(EMBEDDING_CACHE_MAX_SIZE))),
    )
    embeddings = EmbeddingGenerator(llm_service, model=get_embedding_model(), cache=cache)

    if store is None:
        store = create_document_store()
    vector_store = RavenDBVectorStore(store, timeout=RavenDBConfig.get_search_timeout())
    repository = RavenDBRepository(store)
    logger.info(f"✅ RavenDB adapters ready ({RavenDBConfig.get_url()})")

    pipeline = RagPipeline(repository, embeddings, vector_store, CompletionClient(llm_service))

    return Services(
        store=store,
        repository=repository,
        vector_store=vector_store,
        embeddings=embeddings,
        pipeline=pipeline,
        history_limit=int(os.getenv("HISTORY_LIMIT", str(HISTORY_LIMIT))),
    )
