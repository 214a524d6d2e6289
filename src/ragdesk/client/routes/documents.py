"""Document indexing API routes."""

import logging

from flask import Blueprint, jsonify, request

from ragdesk.client.routes.auth import (
    PROJECT_KEY_HEADER,
    error_response,
    require_project_access,
    require_uuid,
)
from ragdesk.client.routes.config import get_config
from ragdesk.constants import DEFAULT_COLLECTION
from ragdesk.errors import NotFoundError, RagDeskError, ValidationError
from ragdesk.service.async_helpers import run_async
from ragdesk.service.database.models import STATUS_INDEXED
from ragdesk.service.ingest import delete_document_embeddings, ingest_document

logger = logging.getLogger(__name__)

documents_bp = Blueprint("documents", __name__)


@documents_bp.route("/api/documents", methods=["POST"])
def create_document():
    """Index already-extracted text as a new document.

    Request:
        {"projectId": "<uuid>", "filename": "faq.md", "text": "...", "collection": "support"}

    Response (201):
        {"documentId", "filename", "status", "chunks"}
    """
    config = get_config()
    try:
        data = request.get_json(silent=True)
        if not isinstance(data, dict):
            raise ValidationError("Request body must be a JSON object")

        project_id = require_uuid(data.get("projectId"), "projectId")
        filename = data.get("filename")
        text = data.get("text")
        collection = data.get("collection") or DEFAULT_COLLECTION
        if not isinstance(filename, str) or not filename.strip():
            raise ValidationError("filename is required")
        if not isinstance(text, str):
            raise ValidationError("text is required")

        require_project_access(
            config.repository, request.headers.get(PROJECT_KEY_HEADER), project_id
        )

        logger.info(f"📄 Indexing {filename} into collection '{collection}'")
        document_id, result = run_async(
            ingest_document(
                config.repository,
                config.embeddings,
                config.vector_store,
                project_id,
                text,
                filename,
                collection,
            )
        )
        return (
            jsonify(
                {
                    "documentId": document_id,
                    "filename": filename,
                    "status": STATUS_INDEXED,
                    "chunks": result.chunk_count,
                }
            ),
            201,
        )

    except RagDeskError as e:
        logger.warning(f"❌ Document indexing failed: {e.message}")
        return error_response(e)
    except Exception as e:
        logger.error(f"❌ Error indexing document: {e}", exc_info=True)
        return error_response(e)


@documents_bp.route("/api/documents/<document_id>", methods=["DELETE"])
def delete_document(document_id: str):
    """Remove a document's vectors, then the document record."""
    config = get_config()
    try:
        document = config.repository.get_document(document_id)
        if document is None:
            raise NotFoundError("Document")
        require_project_access(
            config.repository, request.headers.get(PROJECT_KEY_HEADER), document.project_id
        )

        delete_document_embeddings(config.vector_store, document.embedding_ids)
        config.repository.delete_document(document_id)
        logger.info(f"🗑️ Deleted document {document_id} ({len(document.embedding_ids)} chunks)")
        return "", 204

    except RagDeskError as e:
        logger.warning(f"❌ Document deletion failed: {e.message}")
        return error_response(e)
    except Exception as e:
        logger.error(f"❌ Error deleting document: {e}", exc_info=True)
        return error_response(e)
