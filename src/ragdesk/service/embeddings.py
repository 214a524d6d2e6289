"""Query embedding generation with an in-process, time-bounded cache."""

import asyncio
import logging
import re
import threading
import time
from collections.abc import Callable

from ragdesk.constants import (
    EMBEDDING_BATCH_SIZE,
    EMBEDDING_CACHE_MAX_SIZE,
    EMBEDDING_CACHE_TTL_SECONDS,
)
from ragdesk.errors import EmbeddingError, ValidationError
from ragdesk.llm.base import LLMService

logger = logging.getLogger(__name__)

_WHITESPACE = re.compile(r"\s+")


def normalize_cache_key(text: str) -> str:
    """Trim, lowercase and collapse whitespace runs to single spaces."""
    return _WHITESPACE.sub(" ", text.strip().lower())


class EmbeddingCache:
    """Bounded memo of query text -> embedding vector.

    Entries expire ``ttl`` seconds after insertion and are removed lazily when
    read. When full, the oldest-inserted entry is evicted (not true LRU).
    Shared across requests; a lock keeps eviction safe under threaded servers.
    """

    def __init__(
        self,
        ttl: float = EMBEDDING_CACHE_TTL_SECONDS,
        max_size: int = EMBEDDING_CACHE_MAX_SIZE,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        self.ttl = ttl
        self.max_size = max_size
        self._clock = clock
        self._entries: dict[str, tuple[list[float], float]] = {}
        self._lock = threading.Lock()

    def __len__(self) -> int:
        return len(self._entries)

    def get(self, text: str) -> list[float] | None:
        key = normalize_cache_key(text)
        with self._lock:
            entry = self._entries.get(key)
            if entry is None:
                return None
            embedding, expires_at = entry
            if self._clock() > expires_at:
                del self._entries[key]
                return None
            return embedding

    def set(self, text: str, embedding: list[float]) -> None:
        key = normalize_cache_key(text)
        with self._lock:
            if self.max_size <= 0:
                return
            if key not in self._entries and len(self._entries) >= self.max_size:
                oldest = next(iter(self._entries))
                del self._entries[oldest]
            self._entries[key] = (embedding, self._clock() + self.ttl)


class EmbeddingGenerator:
    """Turns text into vectors through an LLMService.

    Single queries go through the cache; batch indexing calls never do.
    """

    def __init__(
        self,
        service: LLMService,
        model: str | None = None,
        cache: EmbeddingCache | None = None,
        batch_size: int = EMBEDDING_BATCH_SIZE,
    ) -> None:
        self.service = service
        self.model = model
        self.cache = cache if cache is not None else EmbeddingCache()
        self.batch_size = batch_size

    async def embed(self, text: str) -> list[float]:
        """Embed a single query, consulting the cache first.

        Raises:
            ValidationError: If text is empty or whitespace-only.
            EmbeddingError: If the provider call fails.
        """
        if not text or not text.strip():
            raise ValidationError("Text cannot be empty")

        cached = self.cache.get(text)
        if cached is not None:
            logger.debug("🎯 Embedding cache hit")
            return cached

        try:
            vectors = await asyncio.to_thread(
                self.service.generate_embeddings, [text.strip()], self.model
            )
        except Exception as e:
            logger.error(f"❌ Embedding provider error: {e}", exc_info=True)
            raise EmbeddingError(f"Failed to generate embedding: {e}") from e

        if not vectors:
            raise EmbeddingError("No embedding returned from provider")

        embedding = vectors[0]
        self.cache.set(text, embedding)
        return embedding

    async def embed_batch(self, texts: list[str]) -> list[list[float]]:
        """Embed many texts, one provider call per batch, preserving order.

        Raises:
            EmbeddingError: If any batch fails or returns the wrong number of vectors.
        """
        if not texts:
            return []

        embeddings: list[list[float]] = []
        for start in range(0, len(texts), self.batch_size):
            batch = texts[start : start + self.batch_size]
            try:
                vectors = await asyncio.to_thread(
                    self.service.generate_embeddings, batch, self.model
                )
            except Exception as e:
                logger.error(f"❌ Embedding batch failed at offset {start}: {e}", exc_info=True)
                raise EmbeddingError(f"Failed to generate embeddings batch: {e}") from e

            if len(vectors) != len(batch):
                raise EmbeddingError(
                    f"Provider returned {len(vectors)} embeddings for {len(batch)} texts"
                )
            embeddings.extend(vectors)

        logger.info(f"✅ Embedded {len(embeddings)} texts in batches of {self.batch_size}")
        return embeddings
