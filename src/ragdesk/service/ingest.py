"""Document indexing: chunk already-extracted text, embed it, store the vectors."""

import asyncio
import logging
from dataclasses import dataclass, field

from ragdesk.constants import DEFAULT_CHUNK_OVERLAP, DEFAULT_CHUNK_SIZE, DEFAULT_COLLECTION
from ragdesk.errors import ValidationError
from ragdesk.service.database.repository import ChatRepository
from ragdesk.service.database.vector_store import VectorStore
from ragdesk.service.embeddings import EmbeddingGenerator

logger = logging.getLogger(__name__)


def chunk_text(
    text: str, chunk_size: int = DEFAULT_CHUNK_SIZE, overlap: int = DEFAULT_CHUNK_OVERLAP
) -> list[str]:
    """Split text into overlapping chunks based on word count.

    Windows of ``chunk_size`` words start every ``chunk_size - overlap``
    words, so consecutive chunks share ``overlap`` words.

    Args:
        text: The text to chunk
        chunk_size: Target number of words per chunk (default: 500)
        overlap: Number of words to overlap between chunks (default: 50)

    Returns:
        list[str]: List of text chunks (empty for empty or blank text)
    """
    if overlap >= chunk_size:
        raise ValueError("overlap must be smaller than chunk_size")

    if not text or not text.strip():
        return []

    words = text.split()
    step = chunk_size - overlap
    chunks = []

    for start in range(0, len(words), step):
        chunk = " ".join(words[start : start + chunk_size])
        if chunk.strip():
            chunks.append(chunk)

    return chunks


@dataclass
class IndexResult:
    chunk_count: int
    embedding_ids: list[str] = field(default_factory=list)


async def index_document(
    embeddings: EmbeddingGenerator,
    vector_store: VectorStore,
    document_id: str,
    project_id: str,
    text: str,
    filename: str,
    collection: str = DEFAULT_COLLECTION,
) -> IndexResult:
    """Chunk, embed and store one document's text.

    Chunk ids are ``<document_id>_chunk_<i>``.

    Raises:
        ValidationError: If the text produces no chunks.
        EmbeddingError: If embedding generation fails.
    """
    chunks = chunk_text(text)
    if not chunks:
        raise ValidationError("Document produced no text chunks")

    logger.info(f"📄 Indexing {filename}: {len(chunks)} chunks")
    vectors = await embeddings.embed_batch(chunks)

    embedding_ids = []
    for i, (chunk, vector) in enumerate(zip(chunks, vectors)):
        embedding_id = f"{document_id}_chunk_{i}"
        await asyncio.to_thread(
            vector_store.insert,
            embedding_id,
            vector,
            {
                "document_id": document_id,
                "project_id": project_id,
                "content": chunk,
                "filename": filename,
                "collection": collection,
                "chunk_index": i,
            },
        )
        embedding_ids.append(embedding_id)

    logger.info(f"✅ Stored {len(embedding_ids)} chunks for {filename}")
    return IndexResult(chunk_count=len(chunks), embedding_ids=embedding_ids)


async def ingest_document(
    repository: ChatRepository,
    embeddings: EmbeddingGenerator,
    vector_store: VectorStore,
    project_id: str,
    text: str,
    filename: str,
    collection: str = DEFAULT_COLLECTION,
) -> tuple[str, IndexResult]:
    """Create a document record and index it, tracking its status.

    The document starts as ``processing`` and ends ``indexed`` or ``failed``.
    On failure the error is recorded on the document and re-raised.

    Returns:
        tuple: (document_id, IndexResult)
    """
    document = await asyncio.to_thread(
        repository.create_document, project_id, filename, collection
    )

    try:
        result = await index_document(
            embeddings, vector_store, document.Id, project_id, text, filename, collection
        )
    except Exception as e:
        logger.error(f"❌ Indexing failed for {filename}: {e}")
        await asyncio.to_thread(repository.mark_document_failed, document.Id, str(e))
        raise

    await asyncio.to_thread(
        repository.mark_document_indexed, document.Id, text, result.embedding_ids
    )
    return document.Id, result


def delete_document_embeddings(vector_store: VectorStore, embedding_ids: list[str]) -> None:
    """Remove a document's chunk vectors one by one."""
    for embedding_id in embedding_ids:
        vector_store.delete(embedding_id)
