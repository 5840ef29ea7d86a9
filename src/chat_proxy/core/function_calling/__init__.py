"""Tool calling: extraction, execution, the round loop and the event stream."""

from .schema_generator import generate_function_schema, generate_all_function_schemas
from .function_parser import ToolCallRequest, CallFormat, extract_tool_calls
from .tool_executor import ToolExecutor, ToolResult
from .orchestrator import (
    ChatOrchestrator,
    ChatOutcome,
    RoundState,
    LoopState,
    MAX_TOOL_ROUNDS,
    MAX_CALLS_PER_TOOL,
    FALLBACK_RESPONSE,
)
from .response_streamer import (
    StreamEvent,
    StreamEventType,
    build_events,
    stream_events,
    encode_sse,
    has_text,
)

__all__ = [
    'generate_function_schema',
    'generate_all_function_schemas',
    'ToolCallRequest',
    'CallFormat',
    'extract_tool_calls',
    'ToolExecutor',
    'ToolResult',
    'ChatOrchestrator',
    'ChatOutcome',
    'RoundState',
    'LoopState',
    'MAX_TOOL_ROUNDS',
    'MAX_CALLS_PER_TOOL',
    'FALLBACK_RESPONSE',
    'StreamEvent',
    'StreamEventType',
    'build_events',
    'stream_events',
    'encode_sse',
    'has_text',
]
