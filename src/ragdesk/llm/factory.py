"""Factory function for creating LLM service instances."""

import logging
import os

from dotenv import load_dotenv

from ragdesk.constants import DEFAULT_MAX_TOKENS, DEFAULT_OLLAMA_HOST, get_completion_model
from ragdesk.llm.base import LLMService
from ragdesk.llm.gemini import GeminiService
from ragdesk.llm.ollama import OllamaService

# Load environment variables
load_dotenv()

logger = logging.getLogger(__name__)


def get_llm_service(config: dict | None = None) -> LLMService:
    """Factory function to create an LLM service instance.

    Args:
        config: Optional configuration dictionary. If None, uses environment variables.
                Expected keys:
                - 'service': Service type (default: from LLM_SERVICE env, or "ollama")
                - 'host': Ollama host URL (default: from OLLAMA_HOST env)
                - 'model': Model name (default: from LLM_MODEL env)
                - 'max_tokens': Completion token limit (default: from MAX_TOKENS env)

    Returns:
        LLMService: An instance implementing the LLMService protocol.
    """
    if config is None:
        config = {}

    # Read service type from config, then env, then default to ollama
    service_type = config.get("service", os.getenv("LLM_SERVICE", "ollama"))
    max_tokens = int(config.get("max_tokens", os.getenv("MAX_TOKENS", DEFAULT_MAX_TOKENS)))

    if service_type == "ollama":
        host = config.get("host", os.getenv("OLLAMA_HOST", DEFAULT_OLLAMA_HOST))
        model = config.get("model", get_completion_model("ollama"))
        return OllamaService(host=host, model=model, max_tokens=max_tokens)

    if service_type == "gemini":
        model = config.get("model", get_completion_model("gemini"))
        return GeminiService(model=model, max_tokens=max_tokens)

    raise ValueError(f"Unsupported service type: {service_type}")
