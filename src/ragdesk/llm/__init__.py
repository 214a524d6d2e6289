"""LLM service abstraction layer for ragdesk.

This package provides a unified interface for multiple LLM providers:
- OllamaService: Local LLM via Ollama
- GeminiService: Google Gemini API

All services implement the LLMService protocol. CompletionClient adds prompt
assembly and provider error translation on top of any service.

Usage:
    from ragdesk.llm import CompletionClient, get_llm_service

    # Create service from environment config
    service = get_llm_service()

    # Or with explicit config
    service = get_llm_service({"service": "gemini", "model": "gemini-2.5-flash"})
    completion = CompletionClient(service)
"""

from ragdesk.llm.base import LLMService
from ragdesk.llm.completion import ChatTurn, CompletionClient
from ragdesk.llm.factory import get_llm_service
from ragdesk.llm.gemini import GeminiService
from ragdesk.llm.ollama import OllamaService
from ragdesk.llm.prompt import ActionDescriptor, build_prompt

__all__ = [
    "ActionDescriptor",
    "ChatTurn",
    "CompletionClient",
    "LLMService",
    "OllamaService",
    "GeminiService",
    "build_prompt",
    "get_llm_service",
]
