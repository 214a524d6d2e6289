"""Project key checks and the JSON error envelope shared by API routes."""

import logging
import uuid

from flask import jsonify

from ragdesk.errors import AuthenticationError, AuthorizationError, RagDeskError, ValidationError
from ragdesk.service.rag import public_error_message

logger = logging.getLogger(__name__)

PROJECT_KEY_HEADER = "X-Project-Key"


def require_uuid(value, field_name: str) -> str:
    """Return ``value`` if it is a UUID string, else raise ValidationError."""
    if not isinstance(value, str):
        raise ValidationError(f"{field_name} must be a UUID")
    try:
        uuid.UUID(value)
    except ValueError as e:
        raise ValidationError(f"{field_name} must be a UUID") from e
    return value


def require_project_access(repository, api_key: str | None, project_id: str):
    """Check that ``api_key`` belongs to ``project_id`` and return that project.

    Raises:
        AuthenticationError: If the key is missing or unknown.
        AuthorizationError: If the key belongs to another project.
    """
    if not api_key:
        raise AuthenticationError()
    project = repository.get_project_by_api_key(api_key)
    if project is None:
        raise AuthenticationError("Invalid project key")
    if project.Id != project_id:
        logger.warning(f"⚠️ Project key for {project.Id} used against {project_id}")
        raise AuthorizationError()
    return project


def error_response(error: Exception):
    """Flask response carrying ``{"error": {"message", "code"}}``."""
    if isinstance(error, RagDeskError):
        body = {"message": public_error_message(error), "code": error.code}
        return jsonify({"error": body}), error.status_code
    return jsonify({"error": {"message": "Internal server error", "code": "INTERNAL_ERROR"}}), 500
