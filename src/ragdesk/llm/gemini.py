"""Google Gemini LLM service implementation."""

import logging
from collections.abc import AsyncIterator

from google import genai

from ragdesk.constants import DEFAULT_MAX_TOKENS, get_embedding_model

logger = logging.getLogger(__name__)

# Gemini names the assistant turn "model"
_ROLE_MAP = {"user": "user", "assistant": "model", "model": "model"}


class GeminiService:
    """Google Gemini LLM service implementation.

    This service uses the Google Gemini API to generate responses from Google's LLM models.
    The API key is automatically retrieved from the GEMINI_API_KEY environment variable
    when the client is first used, not when the service is constructed.
    """

    def __init__(self, model: str, max_tokens: int = DEFAULT_MAX_TOKENS) -> None:
        """Initialize the Gemini service.

        Args:
            model: The model name to use (e.g., "gemini-2.5-flash")
            max_tokens: Maximum number of output tokens per response
        """
        self.model = model
        self.max_tokens = max_tokens
        self._client: genai.Client | None = None
        logger.info(f"🤖 Initializing GeminiService: model={model}")

    @property
    def client(self) -> genai.Client:
        """Return the Gemini client, creating it on first access."""
        if self._client is None:
            # The client gets the API key from the GEMINI_API_KEY environment variable
            self._client = genai.Client()
        return self._client

    @client.setter
    def client(self, value: genai.Client) -> None:
        self._client = value

    def _convert_messages(self, messages: list[dict]) -> list[genai.types.Content]:
        """Convert role/content dictionaries to Gemini Content objects.

        Args:
            messages: List of message dictionaries with 'role' and 'content' keys

        Returns:
            List of Gemini Content objects in the same order
        """
        return [
            genai.types.Content(
                role=_ROLE_MAP.get(msg.get("role", "user"), "user"),
                parts=[genai.types.Part.from_text(text=msg.get("content", ""))],
            )
            for msg in messages
        ]

    def _generation_config(self) -> genai.types.GenerateContentConfig:
        return genai.types.GenerateContentConfig(max_output_tokens=self.max_tokens)

    async def generate_response(self, messages: list[dict]) -> str:
        """Generate a response using Gemini.

        Args:
            messages: List of message dictionaries with 'role' and 'content' keys.

        Returns:
            str: The generated response content from the model.
        """
        logger.info(f"🗣️  Generating response with {self.model}")
        logger.debug(f"Messages: {len(messages)} messages")

        try:
            response = await self.client.aio.models.generate_content(
                model=self.model,
                contents=self._convert_messages(messages),
                config=self._generation_config(),
            )
            content = response.text or ""
            logger.info(f"✅ Response generated: {len(content)} characters")
            return content
        except Exception as e:
            logger.error(f"❌ Gemini API error: {e}", exc_info=True)
            raise

    async def stream_response(self, messages: list[dict]) -> AsyncIterator[str]:
        """Stream a response from Gemini, yielding text deltas as they arrive.

        Args:
            messages: List of message dictionaries with 'role' and 'content' keys.

        Yields:
            str: Non-empty text fragments in generation order.
        """
        logger.info(f"🌊 Streaming response with {self.model}")
        stream = await self.client.aio.models.generate_content_stream(
            model=self.model,
            contents=self._convert_messages(messages),
            config=self._generation_config(),
        )
        async for chunk in stream:
            if chunk.text:
                yield chunk.text

    def generate_embeddings(self, texts: list[str], model: str | None = None) -> list[list[float]]:
        """Generate embeddings for a list of texts using Gemini.

        Args:
            texts: List of text strings to embed
            model: Optional embedding model name. If None, uses EMBEDDING_MODEL env var
                   or service-specific default.

        Returns:
            list[list[float]]: List of embedding vectors
        """
        embedding_model = model or get_embedding_model("gemini")

        try:
            response = self.client.models.embed_content(model=embedding_model, contents=texts)
        except Exception as e:
            logger.error(f"❌ Gemini embedding error: {e}", exc_info=True)
            raise

        embeddings = [list(embedding.values) for embedding in response.embeddings]
        logger.info(f"✅ Generated {len(embeddings)} embeddings with {embedding_model}")
        return embeddings
