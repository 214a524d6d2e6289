"""Utility functions for database operations."""

import math
from datetime import datetime, timezone


def cosine_similarity(vec_a: list[float], vec_b: list[float]) -> float:
    """Compute cosine similarity between two vectors.

    Args:
        vec_a: First embedding vector
        vec_b: Second embedding vector

    Returns:
        float: Cosine similarity score between -1 and 1 (0.0 for empty,
        mismatched or zero-magnitude vectors)
    """
    if not vec_a or not vec_b or len(vec_a) != len(vec_b):
        return 0.0

    dot_product = sum(a * b for a, b in zip(vec_a, vec_b))
    magnitude_a = math.sqrt(sum(a * a for a in vec_a))
    magnitude_b = math.sqrt(sum(b * b for b in vec_b))

    if magnitude_a == 0 or magnitude_b == 0:
        return 0.0

    return dot_product / (magnitude_a * magnitude_b)


def utc_now() -> str:
    """Current UTC time as an ISO-8601 string (sortable in RavenDB)."""
    return datetime.now(timezone.utc).isoformat()
