"""Prompt assembly for retrieval-augmented completions."""

from collections.abc import Sequence
from dataclasses import dataclass


@dataclass(frozen=True)
class ActionDescriptor:
    """The only parts of an action the model is allowed to see."""

    name: str
    description: str


CONTEXT_HEADER = "\nRelevant context from the knowledge base:\n"
ACTIONS_HEADER = "\nAvailable actions you can suggest:"
ACTION_FORMAT_INSTRUCTIONS = (
    "\nWhen suggesting an action, use EXACTLY this format at the end of your response:",
    "ACTION: <action_name>",
    "PARAMETERS: <json object>",
    "EXPLANATION: <one sentence explaining what will happen>",
)


def build_prompt(
    system_prompt: str,
    context: Sequence[str],
    user_message: str,
    available_actions: Sequence[ActionDescriptor],
) -> str:
    """Build the full instruction text sent to the LLM as the final user turn.

    Layout: system prompt, numbered context chunks (only if any), the action
    catalog and the ACTION/PARAMETERS/EXPLANATION directive (only if any action
    is available), and finally ``User: <message>``.

    Args:
        system_prompt: The project's system prompt
        context: Retrieved chunk texts, most relevant first
        user_message: The end-user question
        available_actions: Enabled actions the model may suggest

    Returns:
        str: The assembled prompt
    """
    parts: list[str] = [system_prompt]

    if context:
        parts.append(CONTEXT_HEADER)
        for i, chunk in enumerate(context, 1):
            parts.append(f"[{i}] {chunk}")

    if available_actions:
        parts.append(ACTIONS_HEADER)
        for action in available_actions:
            parts.append(f"- {action.name}: {action.description}")
        parts.extend(ACTION_FORMAT_INSTRUCTIONS)

    parts.append(f"\nUser: {user_message}")

    return "\n".join(parts)
