"""Shared fakes for the Chat Proxy test suite."""

import json
from typing import Any, Dict, List, Optional

import pytest

from chat_proxy.config.settings import ChatProxySettings
from chat_proxy.tools.base import BaseTool
from chat_proxy.tools.registry import ToolRegistry


class EchoTool(BaseTool):
    """Returns its arguments and records every call."""

    def __init__(self, name: str = "echo", status_label: Optional[str] = "Echoing..."):
        super().__init__(
            name=name,
            display_name="Echo",
            description="Echo the given text back",
            schema={
                "type": "object",
                "properties": {"text": {"type": "string", "description": "Text to echo"}},
                "required": [],
            },
            status_label=status_label,
        )
        self.calls: List[Dict[str, Any]] = []

    async def execute(self, params: Dict[str, Any]) -> Any:
        self.calls.append(params)
        return {"echo": params}


class FailingTool(BaseTool):
    """Always raises."""

    def __init__(self, name: str = "flaky", message: str = "network down"):
        super().__init__(
            name=name,
            display_name="Flaky",
            description="A tool whose backend is down",
            schema={"type": "object", "properties": {}, "required": []},
            status_label="Trying flaky backend...",
        )
        self.message = message
        self.calls = 0

    async def execute(self, params: Dict[str, Any]) -> Any:
        self.calls += 1
        raise RuntimeError(self.message)


class ScriptedClient:
    """Upstream client stand-in that replays a list of assistant messages.

    Entries that are exceptions are raised instead of returned. Once the
    script runs out, the last entry repeats.
    """

    def __init__(self, responses: List[Any]):
        self.responses = list(responses)
        self.requests: List[Dict[str, Any]] = []

    async def complete(self, messages, model, tools=None, tool_choice="auto"):
        self.requests.append({
            "messages": [m.to_openai() for m in messages],
            "model": model,
            "tools": tools,
            "tool_choice": tool_choice,
        })
        index = min(len(self.requests) - 1, len(self.responses) - 1)
        response = self.responses[index]
        if isinstance(response, Exception):
            raise response
        return response


def tool_call(call_id: str, name: str, arguments: Any) -> Dict[str, Any]:
    """Build one structured tool call entry."""
    if not isinstance(arguments, str):
        arguments = json.dumps(arguments)
    return {"id": call_id, "type": "function", "function": {"name": name, "arguments": arguments}}


def assistant(content: Optional[str] = None, tool_calls: Optional[List[Dict[str, Any]]] = None) -> Dict[str, Any]:
    """Build an upstream assistant message."""
    message: Dict[str, Any] = {"role": "assistant", "content": content}
    if tool_calls:
        message["tool_calls"] = tool_calls
    return message


@pytest.fixture
def echo_tool() -> EchoTool:
    return EchoTool()


@pytest.fixture
def failing_tool() -> FailingTool:
    return FailingTool()


@pytest.fixture
def registry(echo_tool, failing_tool) -> ToolRegistry:
    registry = ToolRegistry()
    registry.register_tool(echo_tool)
    registry.register_tool(failing_tool)
    return registry.freeze()


@pytest.fixture
def settings() -> ChatProxySettings:
    return ChatProxySettings(_env_file=None, api_key="test-key")
