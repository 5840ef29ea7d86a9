"""Tool executor for running model-requested tool calls concurrently."""

import asyncio
import json
import logging
import time
from dataclasses import dataclass
from typing import Any, Dict, List, Optional

from .function_parser import ToolCallRequest
from ...tools.registry import ToolRegistry

logger = logging.getLogger(__name__)


@dataclass
class ToolResult:
    """Outcome of one executed tool call."""
    tool_call_id: str
    tool_name: str
    payload: Any
    success: bool
    execution_time_ms: int = 0

    @property
    def error(self) -> Optional[str]:
        if self.success or not isinstance(self.payload, dict):
            return None
        return self.payload.get("error")

    @property
    def content(self) -> str:
        """Payload as compact JSON text, the form sent back to the model."""
        return json.dumps(self.payload, ensure_ascii=False, separators=(",", ":"), default=str)


def _error_payload(message: str) -> Dict[str, str]:
    return {"error": message}


class ToolExecutor:
    """Runs a round's tool calls and converts every outcome into a ToolResult."""

    def __init__(self, tool_registry: ToolRegistry):
        """
        Initialize tool executor.

        Args:
            tool_registry: Registry of available tools
        """
        self.tool_registry = tool_registry

    async def execute(self, requests: List[ToolCallRequest]) -> List[ToolResult]:
        """
        Execute tool calls concurrently.

        Waits for every call to settle. Failures never abort sibling calls;
        each becomes an ``{"error": ...}`` payload. No retries, no timeout.

        Args:
            requests: Tool calls for one round

        Returns:
            One result per request, in request order
        """
        if not requests:
            return []

        logger.info(f"Executing {len(requests)} tool calls")
        results = await asyncio.gather(*(self._execute_one(request) for request in requests))
        return list(results)

    async def _execute_one(self, request: ToolCallRequest) -> ToolResult:
        start = time.monotonic()

        def finish(payload: Any, success: bool) -> ToolResult:
            return ToolResult(
                tool_call_id=request.id,
                tool_name=request.tool_name,
                payload=payload,
                success=success,
                execution_time_ms=int((time.monotonic() - start) * 1000)
            )

        tool = self.tool_registry.get_tool(request.tool_name)
        if tool is None:
            logger.warning(f"Model requested unknown tool '{request.tool_name}'")
            return finish(_error_payload(f"Unknown tool: {request.tool_name}"), False)

        try:
            params = request.parse_arguments()
        except json.JSONDecodeError as e:
            logger.warning(f"Invalid arguments for '{request.tool_name}': {e}")
            return finish(_error_payload(str(e)), False)

        if not isinstance(params, dict):
            return finish(_error_payload("Tool arguments must be a JSON object"), False)

        try:
            validation_error = tool.validate_params(params)
            if validation_error:
                return finish(_error_payload(validation_error), False)
            payload = await tool.execute(params)
        except Exception as e:
            message = str(e) or e.__class__.__name__
            logger.warning(f"Tool '{request.tool_name}' failed: {message}")
            return finish(_error_payload(message), False)

        result = finish(payload, True)
        logger.debug(f"Tool '{request.tool_name}' completed in {result.execution_time_ms}ms")
        return result


def get_execution_summary(results: List[ToolResult]) -> Dict[str, Any]:
    """
    Get summary of tool execution results.

    Args:
        results: List of execution results

    Returns:
        Summary dictionary
    """
    successful = sum(1 for r in results if r.success)
    total_time = sum(r.execution_time_ms for r in results)
    return {
        "total_calls": len(results),
        "successful": successful,
        "failed": len(results) - successful,
        "total_time_ms": total_time,
        "average_time_ms": total_time / len(results) if results else 0
    }
