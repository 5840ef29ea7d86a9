"""
Conversation normalization for upstream chat requests.

The inbound history comes straight from the browser and is untrusted: it
may be long, may start with an assistant turn, and may carry the caller's
own system prompt or the UI's greeting placeholder. ``normalize_conversation``
turns it into a history the upstream provider accepts.
"""

import logging
from dataclasses import dataclass
from datetime import datetime
from typing import Any, Iterable, List, Optional, Sequence, Set

from pydantic import ValidationError

from .client.turn import Message, MessageRole
from .prompts.system_prompt import get_core_system_prompt

logger = logging.getLogger(__name__)

# Text of the placeholder greeting the chat page shows on first open.
GREETING_MARKER = "Tell me what you need"

DEFAULT_HISTORY_WINDOW = 10
DEFAULT_MODEL = "openai"


@dataclass
class NormalizedRequest:
    """A conversation ready to send upstream."""
    messages: List[Message]
    model: str = DEFAULT_MODEL
    dropped: int = 0


def _coerce_message(raw: Any) -> Optional[Message]:
    if isinstance(raw, Message):
        return raw
    if not isinstance(raw, dict):
        return None
    try:
        return Message.model_validate(raw)
    except ValidationError:
        return None


def _is_greeting(message: Message) -> bool:
    return (
        message.role == MessageRole.ASSISTANT
        and isinstance(message.content, str)
        and GREETING_MARKER in message.content
    )


def _drop_leading_assistant(messages: List[Message]) -> List[Message]:
    """Remove assistant turns that precede the first user turn."""
    result = []
    seen_user = False
    for message in messages:
        if message.role == MessageRole.USER:
            seen_user = True
        elif message.role == MessageRole.ASSISTANT and not seen_user:
            continue
        result.append(message)
    return result


def _drop_orphaned_tool_results(messages: List[Message]) -> List[Message]:
    """Remove tool results whose call was not issued earlier in the history."""
    issued: Set[str] = set()
    result = []
    for message in messages:
        if message.role == MessageRole.TOOL:
            if message.tool_call_id not in issued:
                continue
        elif message.role == MessageRole.ASSISTANT:
            issued.update(message.issued_call_ids())
        result.append(message)
    return result


def normalize_conversation(
    raw_messages: Optional[Sequence[Any]],
    now: Optional[datetime] = None,
    model: Optional[str] = None,
    history_window: int = DEFAULT_HISTORY_WINDOW,
    persona: Optional[str] = None
) -> NormalizedRequest:
    """
    Trim, filter and prefix an inbound conversation.

    Steps, in order:
    1. keep the last ``history_window`` records;
    2. drop records that are not valid messages, and every system message;
    3. drop the UI greeting placeholder;
    4. drop assistant turns that come before the first user turn, and tool
       results that answer no earlier tool call;
    5. prepend the dated system prompt.

    Never raises. Degenerate input yields just the system preamble.

    Args:
        raw_messages: Caller-supplied message records
        now: Timestamp for the system prompt date line
        model: Model id the caller asked for
        history_window: Number of trailing records kept
        persona: Optional replacement for the built-in persona

    Returns:
        NormalizedRequest with the outgoing messages and model id
    """
    records = list(raw_messages or [])
    window = records[-history_window:] if history_window > 0 else []

    kept: List[Message] = []
    for raw in window:
        message = _coerce_message(raw)
        if message is None:
            logger.debug("Skipping malformed message record")
            continue
        if message.role == MessageRole.SYSTEM or _is_greeting(message):
            continue
        kept.append(message)

    kept = _drop_leading_assistant(kept)
    kept = _drop_orphaned_tool_results(kept)

    system_message = Message.create_text_message(
        MessageRole.SYSTEM,
        get_core_system_prompt(now, persona)
    )

    return NormalizedRequest(
        messages=[system_message] + kept,
        model=model or DEFAULT_MODEL,
        dropped=len(records) - len(kept)
    )


def conversation_has_image(messages: Iterable[Any]) -> bool:
    """Check whether any message record carries an image_url part."""
    for raw in messages:
        message = _coerce_message(raw)
        if message is not None and message.has_image():
            return True
    return False


def resolve_model(
    messages: Sequence[Any],
    requested_model: Optional[str],
    vision_models: Sequence[str],
    default_model: str = DEFAULT_MODEL,
    fallback_vision_model: str = DEFAULT_MODEL
) -> str:
    """
    Pick the upstream model for a request.

    Conversations containing images are routed to ``fallback_vision_model``
    when the requested model cannot read images.

    Args:
        messages: Caller-supplied message records
        requested_model: Model the caller asked for, if any
        vision_models: Models that accept image parts
        default_model: Model used when none was requested
        fallback_vision_model: Model substituted for image conversations

    Returns:
        The model id to send upstream
    """
    model = requested_model or default_model
    if model not in vision_models and conversation_has_image(messages):
        logger.info(f"Model '{model}' cannot read images, using '{fallback_vision_model}'")
        return fallback_vision_model
    return model
