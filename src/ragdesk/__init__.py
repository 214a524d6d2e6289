"""RagDesk: project-scoped retrieval-augmented chat with action suggestions."""

__version__ = "0.1.0"
