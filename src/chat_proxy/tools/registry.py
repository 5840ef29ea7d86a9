"""
Tool registry for Chat Proxy.

The registry is filled once at startup and then frozen. Lookups are plain
dictionary hits with an explicit not-found branch.
"""

import logging
from dataclasses import dataclass
from typing import Any, Dict, List, Optional

from .base import BaseTool

logger = logging.getLogger(__name__)


@dataclass
class ToolMetadata:
    """Metadata about a registered tool."""
    name: str
    display_name: str
    description: str
    status_label: str
    source: str  # "builtin" or "external"


class ToolRegistry:
    """Registry for managing tools."""

    def __init__(self):
        """Initialize the tool registry."""
        self._tools: Dict[str, BaseTool] = {}
        self._metadata: Dict[str, ToolMetadata] = {}
        self._frozen = False

    @property
    def frozen(self) -> bool:
        return self._frozen

    def freeze(self) -> "ToolRegistry":
        """Prevent further registrations."""
        self._frozen = True
        return self

    def register_tool(
        self,
        tool: BaseTool,
        source: str = "external",
        force: bool = False
    ) -> bool:
        """Register a tool instance.

        Args:
            tool: Tool instance to register
            source: Source of the tool ("builtin" or "external")
            force: Replace a tool already registered under the same name

        Returns:
            True if tool was registered successfully

        Raises:
            RuntimeError: If the registry has been frozen
        """
        if self._frozen:
            raise RuntimeError(f"Cannot register '{tool.name}': tool registry is frozen")

        if not force and tool.name in self._tools:
            logger.warning(f"Tool '{tool.name}' already registered. Use force=True to override.")
            return False

        self._tools[tool.name] = tool
        self._metadata[tool.name] = ToolMetadata(
            name=tool.name,
            display_name=tool.display_name,
            description=tool.description,
            status_label=tool.status_label,
            source=source
        )

        logger.debug(f"Registered tool: {tool.name} ({source})")
        return True

    def get_tool(self, name: str) -> Optional[BaseTool]:
        """Get a tool by name, or None if it is not registered."""
        return self._tools.get(name)

    def has_tool(self, name: str) -> bool:
        return name in self._tools

    def get_all_tools(self) -> List[BaseTool]:
        """Get all registered tools in registration order."""
        return list(self._tools.values())

    def get_tool_names(self) -> List[str]:
        """Get names of all registered tools."""
        return list(self._tools.keys())

    def get_tool_metadata(self, name: str) -> Optional[ToolMetadata]:
        return self._metadata.get(name)

    def status_label(self, name: str) -> str:
        """Human-readable progress label for a tool call."""
        metadata = self._metadata.get(name)
        if metadata is None:
            return f"Running {name}..."
        return metadata.status_label

    def get_function_schemas(self) -> List[Dict[str, Any]]:
        """OpenAI-style function declarations for every registered tool."""
        from ..core.function_calling.schema_generator import generate_all_function_schemas
        return generate_all_function_schemas(self)

    def __len__(self) -> int:
        return len(self._tools)

    def __contains__(self, name: object) -> bool:
        return name in self._tools


def create_default_registry(settings: Optional[Any] = None) -> ToolRegistry:
    """
    Build and freeze the registry holding the built-in tools.

    Args:
        settings: Optional ChatProxySettings supplying tool credentials

    Returns:
        A frozen ToolRegistry
    """
    from .clock import CurrentTimeTool
    from .crypto import CoinPriceTool
    from .weather import WeatherTool
    from .web.image_search_tool import ImageSearchTool
    from .web.web_search_tool import WebSearchTool

    timeout = getattr(settings, "tool_timeout", 15.0)
    registry = ToolRegistry()
    for tool in (
        WeatherTool(timeout=timeout),
        CurrentTimeTool(timeout=timeout),
        CoinPriceTool(timeout=timeout),
        WebSearchTool(api_key=getattr(settings, "brave_api_key", None), timeout=timeout),
        ImageSearchTool(api_key=getattr(settings, "serpapi_api_key", None), timeout=timeout),
    ):
        registry.register_tool(tool, source="builtin")

    logger.info(f"Registered {len(registry)} built-in tools")
    return registry.freeze()
