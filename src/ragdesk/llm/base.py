"""Base protocol for LLM services."""

from collections.abc import AsyncIterator
from typing import Protocol


class LLMService(Protocol):
    """Protocol defining the interface for LLM services.

    This protocol ensures type safety and allows for multiple LLM provider
    implementations while maintaining a consistent interface. Model name and
    token limit are fixed when the service is constructed, never per request.
    """

    model: str

    async def generate_response(self, messages: list[dict]) -> str:
        """Generate a response from the LLM based on the provided messages.

        Args:
            messages: List of message dictionaries with 'role' and 'content' keys.
                     Example: [{"role": "user", "content": "Hello"}]

        Returns:
            str: The generated response content from the LLM.
        """
        ...

    def stream_response(self, messages: list[dict]) -> AsyncIterator[str]:
        """Stream a response from the LLM as text fragments.

        Args:
            messages: List of message dictionaries with 'role' and 'content' keys.

        Returns:
            AsyncIterator[str]: Text deltas in generation order. The iterator is
            finite and cannot be restarted.
        """
        ...

    def generate_embeddings(self, texts: list[str], model: str | None = None) -> list[list[float]]:
        """Generate embeddings for a list of texts in a single provider call.

        Args:
            texts: List of text strings to embed
            model: Optional embedding model name. If None, uses a default for the service.

        Returns:
            list[list[float]]: One embedding vector per input text, in input order
        """
        ...
