"""
Orchestrator for the multi-round tool-calling chat loop.

Each round sends the transcript upstream, extracts tool calls from the reply,
runs them concurrently, and appends the calls and their results to the
transcript. The loop stops when the model answers without (new) tool calls,
or when the round budget runs out.
"""

import logging
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, List, Optional, Protocol

from ..client.turn import Message
from ..conversation import NormalizedRequest
from .function_parser import ToolCallRequest, extract_tool_calls, format_tool_calls_for_display
from .response_streamer import has_text
from .tool_executor import ToolExecutor, ToolResult, get_execution_summary
from ...tools.registry import ToolRegistry

logger = logging.getLogger(__name__)

MAX_TOOL_ROUNDS = 5
MAX_CALLS_PER_TOOL = 3

FALLBACK_RESPONSE = (
    "I've gathered the information, but I couldn't put together a response. "
    "Please try asking again."
)


class ChatCompletionClient(Protocol):
    """The part of the upstream client the loop depends on."""

    async def complete(
        self,
        messages: List[Message],
        model: str,
        tools: Optional[List[Dict[str, Any]]] = None,
        tool_choice: Optional[str] = "auto"
    ) -> Dict[str, Any]:
        ...


class LoopState(Enum):
    """States of the tool loop."""
    AWAITING_MODEL = "awaiting_model"
    HAS_TOOL_CALLS = "has_tool_calls"
    TERMINAL = "terminal"


@dataclass
class RoundState:
    """Working state of one chat request."""
    transcript: List[Message]
    tool_call_counts: Dict[str, int] = field(default_factory=dict)
    status_labels: List[str] = field(default_factory=list)
    round_index: int = 0
    state: LoopState = LoopState.AWAITING_MODEL
    last_content: str = ""

    @property
    def tools_executed(self) -> int:
        return sum(self.tool_call_counts.values())


@dataclass
class ChatOutcome:
    """Final result of a chat request."""
    content: str
    status_labels: List[str]
    transcript: List[Message]
    tool_call_counts: Dict[str, int]
    rounds: int
    forced_stop: bool = False


class ChatOrchestrator:
    """Runs the bounded tool-calling loop against the upstream provider."""

    def __init__(
        self,
        client: ChatCompletionClient,
        tool_registry: ToolRegistry,
        max_tool_rounds: int = MAX_TOOL_ROUNDS,
        max_calls_per_tool: int = MAX_CALLS_PER_TOOL,
        executor: Optional[ToolExecutor] = None
    ):
        """
        Initialize the orchestrator.

        Args:
            client: Upstream chat-completion client
            tool_registry: Registry of available tools
            max_tool_rounds: Upper bound on upstream calls per request
            max_calls_per_tool: Upper bound on executions of one tool per request
            executor: Tool executor, built from the registry when omitted
        """
        self.client = client
        self.tool_registry = tool_registry
        self.max_tool_rounds = max_tool_rounds
        self.max_calls_per_tool = max_calls_per_tool
        self.executor = executor or ToolExecutor(tool_registry)
        self.function_schemas = tool_registry.get_function_schemas()

    async def run(self, request: NormalizedRequest) -> ChatOutcome:
        """
        Run the loop for one normalized request.

        Args:
            request: Normalized conversation and model id

        Returns:
            ChatOutcome with the final answer and the status labels

        Raises:
            UpstreamError: If any upstream call fails; no partial answer is kept
        """
        state = RoundState(transcript=list(request.messages))

        while state.round_index < self.max_tool_rounds:
            message = await self.client.complete(
                state.transcript,
                request.model,
                tools=self.function_schemas or None,
                tool_choice="auto"
            )
            state.last_content = _content_text(message)

            calls = self._within_budget(
                extract_tool_calls(message, self.tool_registry, state.round_index),
                state
            )

            if not calls:
                state.state = LoopState.TERMINAL
                content = state.last_content
                if not has_text(content) and state.tools_executed:
                    content = FALLBACK_RESPONSE
                logger.info(
                    f"Chat finished after {state.round_index + 1} round(s), "
                    f"{state.tools_executed} tool call(s)"
                )
                return self._outcome(state, content, rounds=state.round_index + 1)

            state.state = LoopState.HAS_TOOL_CALLS
            logger.debug(f"Round {state.round_index} tool calls:\n{format_tool_calls_for_display(calls)}")
            await self._run_tools(calls, state)
            state.round_index += 1
            state.state = LoopState.AWAITING_MODEL

        logger.warning(f"Tool round budget of {self.max_tool_rounds} exhausted, returning last content")
        state.state = LoopState.TERMINAL
        return self._outcome(state, state.last_content, rounds=state.round_index, forced_stop=True)

    def _within_budget(self, calls: List[ToolCallRequest], state: RoundState) -> List[ToolCallRequest]:
        """Drop calls to tools that already used up their per-request budget."""
        allowed = []
        pending: Dict[str, int] = {}
        for call in calls:
            used = state.tool_call_counts.get(call.tool_name, 0) + pending.get(call.tool_name, 0)
            if used >= self.max_calls_per_tool:
                logger.info(f"Dropping call to '{call.tool_name}': call budget reached")
                continue
            pending[call.tool_name] = pending.get(call.tool_name, 0) + 1
            allowed.append(call)
        return allowed

    async def _run_tools(self, calls: List[ToolCallRequest], state: RoundState) -> None:
        # Counts and labels change only here, outside the concurrent section.
        for call in calls:
            state.tool_call_counts[call.tool_name] = state.tool_call_counts.get(call.tool_name, 0) + 1
            state.status_labels.append(self.tool_registry.status_label(call.tool_name))

        results = await self.executor.execute(calls)
        logger.debug(f"Round {state.round_index} tool summary: {get_execution_summary(results)}")

        state.transcript.append(
            Message.create_tool_call_message([call.to_openai() for call in calls])
        )
        state.transcript.extend(_result_message(result) for result in results)

    def _outcome(
        self,
        state: RoundState,
        content: str,
        rounds: int,
        forced_stop: bool = False
    ) -> ChatOutcome:
        return ChatOutcome(
            content=content,
            status_labels=list(state.status_labels),
            transcript=state.transcript,
            tool_call_counts=dict(state.tool_call_counts),
            rounds=rounds,
            forced_stop=forced_stop
        )


def _content_text(message: Dict[str, Any]) -> str:
    content = message.get("content")
    if isinstance(content, str):
        return content
    if isinstance(content, list):
        return "".join(
            part.get("text", "") for part in content
            if isinstance(part, dict) and isinstance(part.get("text"), str)
        )
    return ""


def _result_message(result: ToolResult) -> Message:
    return Message.create_tool_result_message(result.tool_call_id, result.content)
