"""Completion client: prompt + history in, full text or text deltas out."""

import logging
from collections.abc import AsyncIterator, Sequence
from dataclasses import dataclass

from ragdesk.errors import CompletionError
from ragdesk.llm.base import LLMService
from ragdesk.llm.prompt import ActionDescriptor, build_prompt

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ChatTurn:
    """A prior turn of the conversation."""

    role: str  # "user" | "assistant"
    content: str


def _status_code_of(error: Exception) -> int:
    """Best-effort HTTP status from a provider exception (ollama / google-genai)."""
    for attr in ("status_code", "code"):
        value = getattr(error, attr, None)
        if isinstance(value, int) and 400 <= value <= 599:
            return value
    return 500


class CompletionClient:
    """Wraps an LLMService for single-shot and streaming completions.

    Every provider failure, including one raised mid-stream, is re-raised as a
    CompletionError carrying a message and a status code.
    """

    def __init__(self, service: LLMService) -> None:
        self.service = service

    def build_messages(
        self,
        system_prompt: str,
        context: Sequence[str],
        user_message: str,
        actions: Sequence[ActionDescriptor],
        history: Sequence[ChatTurn] = (),
    ) -> list[dict]:
        """Return history (oldest first) followed by the built prompt as a user turn."""
        prompt = build_prompt(system_prompt, context, user_message, actions)
        messages = [{"role": turn.role, "content": turn.content} for turn in history]
        messages.append({"role": "user", "content": prompt})
        return messages

    async def complete(
        self,
        system_prompt: str,
        context: Sequence[str],
        user_message: str,
        actions: Sequence[ActionDescriptor],
        history: Sequence[ChatTurn] = (),
    ) -> str:
        """Generate the whole answer in one call.

        Raises:
            CompletionError: If the provider fails.
        """
        messages = self.build_messages(system_prompt, context, user_message, actions, history)
        try:
            return await self.service.generate_response(messages)
        except Exception as e:
            raise CompletionError(f"Chat failed: {e}", _status_code_of(e)) from e

    async def complete_stream(
        self,
        system_prompt: str,
        context: Sequence[str],
        user_message: str,
        actions: Sequence[ActionDescriptor],
        history: Sequence[ChatTurn] = (),
    ) -> AsyncIterator[str]:
        """Yield text deltas as the provider produces them.

        The end of iteration is the end of the turn. Deltas already yielded stay
        valid if a CompletionError follows, but the answer is then incomplete.

        Raises:
            CompletionError: If the provider fails before or during streaming.
        """
        messages = self.build_messages(system_prompt, context, user_message, actions, history)
        stream = self.service.stream_response(messages)
        try:
            async for delta in stream:
                yield delta
        except Exception as e:
            logger.error(f"❌ Completion stream failed: {e}", exc_info=True)
            raise CompletionError(f"Stream failed: {e}", _status_code_of(e)) from e
        finally:
            aclose = getattr(stream, "aclose", None)
            if aclose is not None:
                await aclose()
