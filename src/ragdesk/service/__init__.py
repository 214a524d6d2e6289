"""Retrieval, generation and persistence services for RagDesk."""
