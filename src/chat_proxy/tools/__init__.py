"""
Tools package for Chat Proxy.

This package contains the tool base class, the registry, and the built-in
weather, time, coin price, web search and image search tools.
"""

from .base import BaseTool, ToolError
from .registry import ToolRegistry, ToolMetadata, create_default_registry

__all__ = ["BaseTool", "ToolError", "ToolRegistry", "ToolMetadata", "create_default_registry"]
