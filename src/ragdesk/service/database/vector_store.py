"""Vector store adapter over the RavenDB chunk index."""

import asyncio
import logging
from dataclasses import dataclass
from typing import Any, Protocol

from ravendb import DocumentStore

from ragdesk.constants import ALL_COLLECTIONS, VECTOR_SEARCH_TIMEOUT_SECONDS
from ragdesk.errors import SearchTimeoutError, VectorStoreError
from ragdesk.service.database.models import DocumentChunk
from ragdesk.service.database.operations import VECTOR_INDEX_NAME
from ragdesk.service.database.utils import cosine_similarity

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class SearchResult:
    """A chunk hit. ``metadata`` holds document_id, project_id, content,
    filename, collection and chunk_index."""

    id: str
    score: float
    metadata: dict[str, Any]


class VectorStore(Protocol):
    """What the pipeline and the indexer need from a vector store."""

    async def search(
        self,
        query_vector: list[float],
        project_id: str,
        top_k: int,
        collections: list[str] | None = None,
        min_score: float | None = None,
    ) -> list[SearchResult]: ...

    def insert(self, chunk_id: str, vector: list[float], metadata: dict[str, Any]) -> None: ...

    def delete(self, chunk_id: str) -> None: ...


def _collection_filter(collections: list[str] | None) -> list[str] | None:
    if not collections or ALL_COLLECTIONS in collections:
        return None
    return list(collections)


class RavenDBVectorStore:
    """Searches chunk embeddings stored in RavenDB.

    Searches are bounded by ``timeout`` seconds; the blocking RavenDB call runs
    in a worker thread so the event loop stays free while it waits.
    """

    def __init__(
        self,
        store: DocumentStore,
        timeout: float = VECTOR_SEARCH_TIMEOUT_SECONDS,
        index_name: str = VECTOR_INDEX_NAME,
    ) -> None:
        self.store = store
        self.timeout = timeout
        self.index_name = index_name

    async def search(
        self,
        query_vector: list[float],
        project_id: str,
        top_k: int,
        collections: list[str] | None = None,
        min_score: float | None = None,
    ) -> list[SearchResult]:
        """Return up to ``top_k`` chunks of the project's indexed, enabled documents.

        Results are ordered by descending score. ``min_score`` is applied
        after the ``top_k`` cut, so fewer than ``top_k`` results may remain.

        Raises:
            SearchTimeoutError: If the store does not answer within the timeout.
            VectorStoreError: On any other store failure.
        """
        try:
            results = await asyncio.wait_for(
                asyncio.to_thread(
                    self._search_sync,
                    query_vector,
                    project_id,
                    top_k,
                    _collection_filter(collections),
                ),
                timeout=self.timeout,
            )
        except asyncio.TimeoutError as e:
            logger.warning(f"⏱️ Vector search timed out after {self.timeout}s")
            raise SearchTimeoutError() from e
        except Exception as e:
            logger.error(f"❌ Vector search failed: {e}", exc_info=True)
            raise VectorStoreError(f"Search failed: {e}") from e

        if min_score is not None:
            results = [r for r in results if r.score >= min_score]
        return results

    def _search_sync(
        self,
        query_vector: list[float],
        project_id: str,
        top_k: int,
        collections: list[str] | None,
    ) -> list[SearchResult]:
        clauses = [
            "project_id = $projectId",
            "document_status = 'indexed'",
            "document_enabled = true",
        ]
        parameters: dict[str, Any] = {"projectId": project_id, "vector": query_vector}
        if collections:
            clauses.append("collection in ($collections)")
            parameters["collections"] = collections
        clauses.append("vector.search(embedding, $vector)")

        rql = f"from index '{self.index_name}' where {' and '.join(clauses)} limit {int(top_k)}"

        with self.store.open_session() as session:
            query = session.advanced.raw_query(rql, object_type=dict)
            for name, value in parameters.items():
                query = query.add_parameter(name, value)
            documents = list(query)

        results = [self._to_result(doc, query_vector) for doc in documents]
        results.sort(key=lambda r: r.score, reverse=True)
        return results[:top_k]

    @staticmethod
    def _to_result(document: dict[str, Any], query_vector: list[float]) -> SearchResult:
        metadata = document.get("@metadata", {})
        index_score = metadata.get("@index-score")
        if index_score is not None:
            score = float(index_score)
        else:
            score = cosine_similarity(query_vector, document.get("embedding", []))

        return SearchResult(
            id=document.get("Id") or metadata.get("@id", ""),
            score=score,
            metadata={
                "document_id": document.get("document_id", ""),
                "project_id": document.get("project_id", ""),
                "content": document.get("content", ""),
                "filename": document.get("filename", ""),
                "collection": document.get("collection", ""),
                "chunk_index": document.get("chunk_index", 0),
            },
        )

    def insert(self, chunk_id: str, vector: list[float], metadata: dict[str, Any]) -> None:
        """Store (or overwrite) one chunk with its embedding."""
        chunk = DocumentChunk(
            Id=chunk_id,
            document_id=metadata["document_id"],
            project_id=metadata["project_id"],
            filename=metadata.get("filename", ""),
            collection=metadata.get("collection", ""),
            chunk_index=metadata.get("chunk_index", 0),
            content=metadata.get("content", ""),
            embedding=vector,
        )
        with self.store.open_session() as session:
            session.store(chunk, chunk_id)
            session.advanced.get_metadata_for(chunk)["@collection"] = DocumentChunk.COLLECTION
            session.save_changes()

    def delete(self, chunk_id: str) -> None:
        with self.store.open_session() as session:
            session.delete(chunk_id)
            session.save_changes()

