"""Configuration for RavenDB connection and vector search."""

import os

from dotenv import load_dotenv

from ragdesk.constants import (
    DEFAULT_EMBEDDING_DIMENSIONS,
    DEFAULT_RAVENDB_DATABASE,
    DEFAULT_RAVENDB_URL,
    VECTOR_SEARCH_TIMEOUT_SECONDS,
)

# Load environment variables
load_dotenv()


class RavenDBConfig:
    """Configuration class for RavenDB connection details."""

    @staticmethod
    def get_url() -> str:
        """Get the RavenDB server URL from environment variables.

        Returns:
            str: RavenDB server URL (default: http://localhost:8080)
        """
        return os.getenv("RAVENDB_URL", DEFAULT_RAVENDB_URL)

    @staticmethod
    def get_database_name() -> str:
        """Get the RavenDB database name from environment variables.

        Returns:
            str: Database name (default: ragdesk)
        """
        return os.getenv("RAVENDB_DATABASE", DEFAULT_RAVENDB_DATABASE)

    @staticmethod
    def get_embedding_dimensions() -> int:
        """Get the vector index dimensions (default: 768)."""
        return int(os.getenv("EMBEDDING_DIMENSIONS", str(DEFAULT_EMBEDDING_DIMENSIONS)))

    @staticmethod
    def get_search_timeout() -> float:
        """Get the vector search timeout in seconds (default: 2.0)."""
        return float(os.getenv("VECTOR_SEARCH_TIMEOUT", str(VECTOR_SEARCH_TIMEOUT_SECONDS)))
