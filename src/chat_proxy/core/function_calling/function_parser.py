"""Parser for extracting tool calls from chat-completion responses."""

import json
import logging
import re
import time
from dataclasses import dataclass
from enum import Enum
from typing import Any, Dict, List, Optional, TYPE_CHECKING

if TYPE_CHECKING:
    from ...tools.registry import ToolRegistry

logger = logging.getLogger(__name__)


class CallFormat(Enum):
    """Wire encoding a tool call was found in."""
    STRUCTURED = "structured"
    LEGACY = "legacy"
    INLINE = "inline"


@dataclass(frozen=True)
class ToolCallRequest:
    """A normalized request to run one tool."""
    id: str
    tool_name: str
    raw_arguments: str  # JSON text, not yet validated
    format: CallFormat = CallFormat.STRUCTURED

    def parse_arguments(self) -> Any:
        """Decode the argument text. Blank text decodes to an empty object."""
        if not self.raw_arguments.strip():
            return {}
        return json.loads(self.raw_arguments)

    def to_openai(self) -> Dict[str, Any]:
        """Render as an entry of an assistant message's ``tool_calls``."""
        return {
            "id": self.id,
            "type": "function",
            "function": {
                "name": self.tool_name,
                "arguments": self.raw_arguments
            }
        }


# Inline pseudo-call syntax emitted by models that ignore structured tool
# calling. Arguments must be a flat JSON object (no nested braces), written
# either bare or wrapped in a JSON string literal:
#   functions.web_search({"query": "x"})
#   functions.web_search("{\"query\":\"x\"}")
#   [TOOL_CALL]web_search{"query": "x"}
#   [TOOL_CALLS]web_search{"query": "x"}
INLINE_FUNCTIONS_PATTERN = re.compile(
    r'functions\.([A-Za-z_][\w-]*)\s*\(\s*("(?:[^"\\]|\\.)*"|\{[^{}]*\})\s*\)'
)
INLINE_TOOL_CALL_PATTERN = re.compile(
    r'\[TOOL_CALLS?\]\s*([A-Za-z_][\w-]*)\s*(\{[^{}]*\})'
)


def _field(obj: Any, key: str) -> Any:
    if isinstance(obj, dict):
        return obj.get(key)
    return getattr(obj, key, None)


def _synthesize_id(round_index: int, position: int) -> str:
    # Unique within one request: rounds are consumed before the next starts.
    return f"call_{int(time.time() * 1000)}_{round_index}_{position}"


def _arguments_text(arguments: Any) -> str:
    if arguments is None:
        return "{}"
    if isinstance(arguments, str):
        return arguments
    return json.dumps(arguments, ensure_ascii=False)


def _message_text(message: Any) -> str:
    content = _field(message, "content")
    if isinstance(content, str):
        return content
    if isinstance(content, list):
        return "".join(
            part.get("text", "") for part in content
            if isinstance(part, dict) and isinstance(part.get("text"), str)
        )
    return ""


def _parse_structured_calls(tool_calls: List[Any], round_index: int) -> List[ToolCallRequest]:
    """
    Parse OpenAI-style tool calls.

    Each entry has this format:
    {
        "id": "call_abc123",
        "type": "function",
        "function": {
            "name": "function_name",
            "arguments": '{"param1": "value1"}'
        }
    }
    """
    calls = []
    for position, tool_call in enumerate(tool_calls):
        function = _field(tool_call, "function")
        name = _field(function, "name") if function is not None else None
        if not name:
            logger.debug(f"Skipping tool call without a function name: {tool_call!r}")
            continue
        call_id = _field(tool_call, "id") or _synthesize_id(round_index, position)
        calls.append(ToolCallRequest(
            id=str(call_id),
            tool_name=str(name),
            raw_arguments=_arguments_text(_field(function, "arguments")),
            format=CallFormat.STRUCTURED
        ))
    return calls


def _parse_legacy_call(function_call: Any, round_index: int) -> List[ToolCallRequest]:
    """Parse the legacy single ``function_call`` object, which carries no id."""
    name = _field(function_call, "name")
    if not name:
        return []
    return [ToolCallRequest(
        id=_synthesize_id(round_index, 0),
        tool_name=str(name),
        raw_arguments=_arguments_text(_field(function_call, "arguments")),
        format=CallFormat.LEGACY
    )]


def _decode_inline_arguments(text: str) -> Optional[str]:
    """Return the JSON object text of an inline call, or None if invalid."""
    try:
        value = json.loads(text)
    except json.JSONDecodeError:
        return None

    if isinstance(value, str):
        try:
            inner = json.loads(value)
        except json.JSONDecodeError:
            return None
        return value if isinstance(inner, dict) else None

    return text if isinstance(value, dict) else None


def _parse_text_function_calls(
    text: str,
    registry: "ToolRegistry",
    round_index: int
) -> List[ToolCallRequest]:
    """
    Parse tool calls written as pseudo-syntax in free text.

    Matches are accepted only when the name is a registered tool and the
    arguments decode to a JSON object; anything else is skipped silently.
    All ``functions.`` matches are listed before ``[TOOL_CALL]`` matches.
    """
    calls = []
    for pattern in (INLINE_FUNCTIONS_PATTERN, INLINE_TOOL_CALL_PATTERN):
        for match in pattern.finditer(text):
            name, arguments = match.group(1), match.group(2)
            if not registry.has_tool(name):
                logger.debug(f"Ignoring inline call to unregistered tool '{name}'")
                continue
            raw_arguments = _decode_inline_arguments(arguments)
            if raw_arguments is None:
                logger.debug(f"Ignoring inline call to '{name}' with invalid arguments")
                continue
            calls.append(ToolCallRequest(
                id=_synthesize_id(round_index, len(calls)),
                tool_name=name,
                raw_arguments=raw_arguments,
                format=CallFormat.INLINE
            ))
    return calls


def extract_tool_calls(
    message: Any,
    registry: "ToolRegistry",
    round_index: int = 0
) -> List[ToolCallRequest]:
    """
    Extract tool calls from an assistant message.

    Supports three mutually exclusive formats, tried in order (first match
    wins, formats are never merged):
    - structured ``tool_calls`` list
    - legacy single ``function_call``
    - inline pseudo-calls in the text content

    Args:
        message: Assistant message, as a dict or an object with attributes
        registry: Tool registry, used to vet inline calls
        round_index: Current round, used in synthesized call ids

    Returns:
        Tool calls in discovery order; empty when the model is done
    """
    if message is None:
        return []

    tool_calls = _field(message, "tool_calls")
    if tool_calls:
        return _parse_structured_calls(list(tool_calls), round_index)

    function_call = _field(message, "function_call")
    if function_call:
        return _parse_legacy_call(function_call, round_index)

    text = _message_text(message)
    if text:
        return _parse_text_function_calls(text, registry, round_index)

    return []


def format_tool_calls_for_display(calls: List[ToolCallRequest]) -> str:
    """
    Format tool calls for log or console display.

    Args:
        calls: List of tool calls

    Returns:
        One line per call
    """
    if not calls:
        return "No tool calls found"
    return "\n".join(
        f"{i}. {call.tool_name}({call.raw_arguments}) [{call.id}]"
        for i, call in enumerate(calls, 1)
    )
