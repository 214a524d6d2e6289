"""Ollama LLM service implementation."""

import asyncio
import logging
from collections.abc import AsyncIterator

import ollama

from ragdesk.constants import DEFAULT_MAX_TOKENS, get_embedding_model

logger = logging.getLogger(__name__)


class OllamaService:
    """Ollama LLM service implementation.

    This service uses the Ollama API to generate responses from local LLM models.
    The synchronous client is built on first use, so a missing or unreachable
    host only fails when a request is actually made.
    """

    def __init__(self, host: str, model: str, max_tokens: int = DEFAULT_MAX_TOKENS) -> None:
        """Initialize the Ollama service.

        Args:
            host: The Ollama server host URL (e.g., "http://localhost:11434")
            model: The model name to use (e.g., "llama3")
            max_tokens: Maximum number of tokens to generate per response
        """
        self.host = host
        self.model = model
        self.max_tokens = max_tokens
        self._client: ollama.Client | None = None
        logger.info(f"🤖 Initializing OllamaService: host={host}, model={model}")

    @property
    def client(self) -> ollama.Client:
        """Return the Ollama client, creating it on first access."""
        if self._client is None:
            self._client = ollama.Client(host=self.host)
        return self._client

    @client.setter
    def client(self, value: ollama.Client) -> None:
        self._client = value

    def _options(self) -> dict:
        return {"num_predict": self.max_tokens}

    async def generate_response(self, messages: list[dict]) -> str:
        """Generate a response using Ollama.

        Args:
            messages: List of message dictionaries with 'role' and 'content' keys.

        Returns:
            str: The generated response content from the model.
        """
        logger.info(f"🗣️  Generating response with {self.model}")
        logger.debug(f"Messages: {len(messages)} messages")

        try:
            # The Ollama client is synchronous; keep it off the event loop
            response = await asyncio.to_thread(
                self.client.chat,
                model=self.model,
                messages=messages,
                options=self._options(),
            )
            content = response.message.content or ""
            logger.info(f"✅ Response generated: {len(content)} characters")
            return content
        except Exception as e:
            logger.error(f"❌ Ollama API error: {e}", exc_info=True)
            raise

    async def stream_response(self, messages: list[dict]) -> AsyncIterator[str]:
        """Stream a response from Ollama, yielding text deltas as they arrive.

        A fresh AsyncClient is used per stream because its connection pool is
        bound to the event loop that created it.

        Args:
            messages: List of message dictionaries with 'role' and 'content' keys.

        Yields:
            str: Non-empty text fragments in generation order.
        """
        logger.info(f"🌊 Streaming response with {self.model}")
        async_client = ollama.AsyncClient(host=self.host)
        stream = await async_client.chat(
            model=self.model,
            messages=messages,
            stream=True,
            options=self._options(),
        )
        async for part in stream:
            text = part.message.content
            if text:
                yield text

    def generate_embeddings(self, texts: list[str], model: str | None = None) -> list[list[float]]:
        """Generate embeddings for a list of texts using Ollama.

        Args:
            texts: List of text strings to embed
            model: Optional embedding model name. If None, uses EMBEDDING_MODEL env var
                   or service-specific default.

        Returns:
            list[list[float]]: List of embedding vectors
        """
        embedding_model = model or get_embedding_model("ollama")
        response = self.client.embed(model=embedding_model, input=texts)
        embeddings = [list(vector) for vector in response["embeddings"]]

        logger.info(f"✅ Generated {len(embeddings)} embeddings with {embedding_model}")
        return embeddings
