"""Web-backed tools: web search and image search."""

from .web_search_tool import WebSearchTool
from .image_search_tool import ImageSearchTool

__all__ = ["WebSearchTool", "ImageSearchTool"]
