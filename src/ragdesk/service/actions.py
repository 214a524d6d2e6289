"""Action-suggestion parsing and matching.

The model is asked to end its answer with three literal lines::

    ACTION: <action_name>
    PARAMETERS: <json object>
    EXPLANATION: <one sentence>

Model output is untrusted; a malformed suggestion degrades to "no parameters"
or "no action", never to an exception.
"""

import json
import logging
import re
from collections.abc import Iterable
from dataclasses import dataclass, field
from typing import Any

logger = logging.getLogger(__name__)

ACTION_PATTERN = re.compile(r"^ACTION:\s*(\w+)\s*$", re.MULTILINE | re.ASCII)
PARAMETERS_PATTERN = re.compile(r"^PARAMETERS:\s*(.+?)\s*$", re.MULTILINE)
EXPLANATION_PATTERN = re.compile(r"^EXPLANATION:\s*(.+?)\s*$", re.MULTILINE)


@dataclass(frozen=True)
class ParsedAction:
    """An action suggestion as written by the model (not yet validated)."""

    action_name: str
    parameters: dict[str, Any] = field(default_factory=dict)
    explanation: str = ""


def _parse_parameters(raw: str) -> dict[str, Any]:
    try:
        value = json.loads(raw)
    except ValueError:
        logger.debug(f"⚠️ Ignoring unparseable action parameters: {raw[:80]}")
        return {}
    return value if isinstance(value, dict) else {}


def parse_action_from_response(text: str) -> ParsedAction | None:
    """Extract the trailing action suggestion from a model response.

    Returns:
        ParsedAction, or None when there is no ``ACTION: <word>`` line.
    """
    action_match = ACTION_PATTERN.search(text)
    if not action_match:
        return None

    params_match = PARAMETERS_PATTERN.search(text)
    explanation_match = EXPLANATION_PATTERN.search(text)

    return ParsedAction(
        action_name=action_match.group(1),
        parameters=_parse_parameters(params_match.group(1)) if params_match else {},
        explanation=explanation_match.group(1).strip() if explanation_match else "",
    )


def match_action(parsed: ParsedAction | None, actions: Iterable[Any]) -> Any | None:
    """Return the enabled action whose name equals the suggestion, if any."""
    if parsed is None:
        return None
    for action in actions:
        if action.name == parsed.action_name:
            return action
    logger.info(f"⚠️ Model suggested unknown action '{parsed.action_name}', ignoring")
    return None
