"""Image search tool backed by SerpApi's Google Images engine."""

from typing import Any, Dict, List, Optional

from ..base import BaseTool, ToolError


class ImageSearchTool(BaseTool):
    """Finds images on the web and returns their titles and URLs."""

    NAME = "search_images"
    API_URL = "https://serpapi.com/search.json"

    def __init__(self, api_key: Optional[str] = None, timeout: float = 15.0, max_results: int = 5):
        schema = {
            "type": "object",
            "properties": {
                "query": {
                    "type": "string",
                    "description": "What to search images for"
                }
            },
            "required": ["query"]
        }
        super().__init__(
            name=self.NAME,
            display_name="Image Search",
            description="Search the web for images. Returns image titles and direct image URLs that can be shown with markdown.",
            schema=schema,
            status_label="Searching for images...",
            timeout=timeout
        )
        self.api_key = api_key
        self.max_results = max_results

    async def execute(self, params: Dict[str, Any]) -> List[Dict[str, str]]:
        if not self.api_key:
            raise ToolError("Image search is not configured")

        data = await self.fetch_json(
            self.API_URL,
            params={
                "engine": "google_images",
                "q": str(params["query"]).strip(),
                "hl": "en",
                "gl": "us",
                "api_key": self.api_key,
            }
        )

        results = data.get("images_results") or []
        return [
            {"title": result.get("title", ""), "url": result.get("original", "")}
            for result in results[:self.max_results]
            if result.get("original")
        ]
