"""
Base tool system for Chat Proxy.

Tools are named, schema-described async functions the model may ask to run.
A tool returns any JSON-serializable value, or raises; the executor turns
either outcome into a tool-result message for the model.
"""

from abc import ABC, abstractmethod
from typing import Any, Dict, List, Optional

import aiohttp


class ToolError(RuntimeError):
    """A tool could not produce a result."""

    def __init__(self, message: str, *, status_code: Optional[int] = None) -> None:
        super().__init__(message)
        self.status_code = status_code


class BaseTool(ABC):
    """
    Base implementation for tools with common functionality.

    Concrete tools set their name, description and JSON-Schema parameters,
    and implement ``execute``.
    """

    def __init__(
        self,
        name: str,
        display_name: str,
        description: str,
        schema: Dict[str, Any],
        status_label: Optional[str] = None,
        timeout: float = 15.0
    ):
        self.name = name
        self.display_name = display_name
        self.description = description
        self.schema = schema
        self.status_label = status_label or f"Running {name}..."
        self.timeout = timeout

    @property
    def required_params(self) -> List[str]:
        return list(self.schema.get("required", []))

    def validate_params(self, params: Dict[str, Any]) -> Optional[str]:
        """
        Default parameter validation: every required parameter is present.

        Override this method in concrete tools for specific validation logic.

        Returns:
            Error message string if invalid, None if valid
        """
        missing = [name for name in self.required_params if params.get(name) in (None, "")]
        if missing:
            return f"Missing required parameter(s): {', '.join(missing)}"
        return None

    @abstractmethod
    async def execute(self, params: Dict[str, Any]) -> Any:
        """
        Run the tool.

        Args:
            params: Parsed arguments from the model

        Returns:
            A JSON-serializable result
        """
        pass

    async def fetch_json(
        self,
        url: str,
        params: Optional[Dict[str, Any]] = None,
        headers: Optional[Dict[str, str]] = None
    ) -> Any:
        """
        GET a URL and decode its JSON body.

        Raises:
            ToolError: On a non-200 response
        """
        async with aiohttp.ClientSession() as session:
            async with session.get(
                url,
                params=params,
                headers=headers,
                timeout=aiohttp.ClientTimeout(total=self.timeout)
            ) as response:
                if response.status != 200:
                    raise ToolError(
                        f"{self.display_name} request failed with status {response.status}",
                        status_code=response.status
                    )
                return await response.json(content_type=None)
