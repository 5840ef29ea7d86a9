"""Tests for concurrent tool execution."""

import asyncio
import json
from typing import Any, Dict

import pytest

from chat_proxy.core.function_calling.function_parser import ToolCallRequest
from chat_proxy.core.function_calling.tool_executor import (
    ToolExecutor,
    ToolResult,
    get_execution_summary,
)
from chat_proxy.tools.base import BaseTool
from chat_proxy.tools.registry import ToolRegistry

from conftest import EchoTool


class SlowTool(BaseTool):
    """Sleeps, then reports the order in which it finished."""

    def __init__(self, finished):
        super().__init__(
            name="slow",
            display_name="Slow",
            description="Sleeps for a while",
            schema={
                "type": "object",
                "properties": {"delay": {"type": "number"}, "tag": {"type": "string"}},
                "required": ["delay"],
            },
        )
        self.finished = finished

    async def execute(self, params: Dict[str, Any]) -> Any:
        await asyncio.sleep(params["delay"])
        self.finished.append(params.get("tag"))
        return {"tag": params.get("tag")}


def request(call_id, name, arguments="{}"):
    return ToolCallRequest(id=call_id, tool_name=name, raw_arguments=arguments)


class TestToolExecutor:

    @pytest.mark.asyncio
    async def test_empty_round(self, registry):
        assert await ToolExecutor(registry).execute([]) == []

    @pytest.mark.asyncio
    async def test_successful_call(self, registry, echo_tool):
        results = await ToolExecutor(registry).execute([request("c1", "echo", '{"text": "hi"}')])

        assert results[0].success
        assert results[0].tool_call_id == "c1"
        assert results[0].payload == {"echo": {"text": "hi"}}
        assert echo_tool.calls == [{"text": "hi"}]

    @pytest.mark.asyncio
    async def test_unknown_tool(self, registry):
        results = await ToolExecutor(registry).execute([request("c1", "nope")])

        assert not results[0].success
        assert results[0].error == "Unknown tool: nope"

    @pytest.mark.asyncio
    async def test_malformed_arguments(self, registry, echo_tool):
        results = await ToolExecutor(registry).execute([request("c1", "echo", '{"text": ')])

        assert not results[0].success
        assert results[0].error
        assert echo_tool.calls == []

    @pytest.mark.asyncio
    async def test_non_object_arguments(self, registry):
        results = await ToolExecutor(registry).execute([request("c1", "echo", "[1, 2]")])

        assert results[0].error == "Tool arguments must be a JSON object"

    @pytest.mark.asyncio
    async def test_missing_required_parameter(self):
        registry = ToolRegistry()
        registry.register_tool(SlowTool([]))

        results = await ToolExecutor(registry).execute([request("c1", "slow", "{}")])

        assert not results[0].success
        assert "delay" in results[0].error

    @pytest.mark.asyncio
    async def test_exception_becomes_error_payload(self, registry):
        results = await ToolExecutor(registry).execute([request("c1", "flaky")])

        assert results[0].payload == {"error": "network down"}
        assert results[0].content == '{"error":"network down"}'

    @pytest.mark.asyncio
    async def test_failure_does_not_abort_siblings(self, registry, echo_tool):
        results = await ToolExecutor(registry).execute([
            request("c1", "flaky"),
            request("c2", "echo", '{"text": "still here"}'),
        ])

        assert [r.success for r in results] == [False, True]
        assert echo_tool.calls == [{"text": "still here"}]

    @pytest.mark.asyncio
    async def test_runs_concurrently_and_keeps_request_order(self):
        finished = []
        registry = ToolRegistry()
        registry.register_tool(SlowTool(finished))

        results = await ToolExecutor(registry).execute([
            request("c1", "slow", json.dumps({"delay": 0.05, "tag": "first"})),
            request("c2", "slow", json.dumps({"delay": 0.0, "tag": "second"})),
        ])

        assert finished == ["second", "first"]
        assert [r.tool_call_id for r in results] == ["c1", "c2"]


class StrictEchoTool(EchoTool):
    """Echo whose validator assumes a parameter is present."""

    def __init__(self):
        super().__init__(name="strict_echo")

    def validate_params(self, params: Dict[str, Any]):
        if params["n"] < 0:
            return "n must not be negative"
        return None


class TestValidatorFailures:

    @pytest.mark.asyncio
    async def test_raising_validator_becomes_error_payload(self, echo_tool):
        registry = ToolRegistry()
        registry.register_tool(StrictEchoTool())
        registry.register_tool(echo_tool)

        results = await ToolExecutor(registry).execute([
            request("c1", "strict_echo", "{}"),
            request("c2", "echo", '{"text": "sibling"}'),
        ])

        assert results[0].payload == {"error": "'n'"}
        assert not results[0].success
        assert results[1].success
        assert echo_tool.calls == [{"text": "sibling"}]

    @pytest.mark.asyncio
    async def test_validator_message_still_reported(self):
        registry = ToolRegistry()
        registry.register_tool(StrictEchoTool())

        results = await ToolExecutor(registry).execute([request("c1", "strict_echo", '{"n": -1}')])

        assert results[0].error == "n must not be negative"


class TestToolResult:

    def test_content_is_compact_json(self):
        result = ToolResult(tool_call_id="c1", tool_name="echo", payload={"a": [1, 2], "b": "ü"}, success=True)

        assert result.content == '{"a":[1,2],"b":"ü"}'
        assert result.error is None

    def test_execution_summary(self):
        results = [
            ToolResult("c1", "echo", {}, True, execution_time_ms=10),
            ToolResult("c2", "flaky", {"error": "x"}, False, execution_time_ms=30),
        ]

        summary = get_execution_summary(results)

        assert summary["total_calls"] == 2
        assert summary["successful"] == 1
        assert summary["failed"] == 1
        assert summary["average_time_ms"] == 20

    def test_summary_of_nothing(self):
        assert get_execution_summary([])["average_time_ms"] == 0


def test_echo_tool_schema_has_no_required():
    assert EchoTool().required_params == []
