"""Web search tool backed by the Brave Search API.

Returns a short list of result titles, URLs and descriptions for the model
to summarize and cite.
"""

from typing import Any, Dict, List, Optional

from ..base import BaseTool, ToolError


class WebSearchTool(BaseTool):
    """
    Performs web searches and returns the top results.

    Requires a Brave Search subscription token.
    """

    NAME = "web_search"
    API_URL = "https://api.search.brave.com/res/v1/web/search"

    def __init__(self, api_key: Optional[str] = None, timeout: float = 10.0, max_results: int = 3):
        schema = {
            "type": "object",
            "properties": {
                "query": {
                    "type": "string",
                    "description": "The search query to find information on the web"
                }
            },
            "required": ["query"]
        }

        super().__init__(
            name=self.NAME,
            display_name="Web Search",
            description="Performs a web search and returns the results. This tool is useful for finding current information on the internet based on a query.",
            schema=schema,
            status_label="Searching the web...",
            timeout=timeout
        )
        self.api_key = api_key
        self.max_results = max_results

    def validate_params(self, params: Dict[str, Any]) -> Optional[str]:
        """Validate the search parameters."""
        query = params.get("query")
        if not isinstance(query, str) or not query.strip():
            return "The 'query' parameter cannot be empty"
        return None

    async def execute(self, params: Dict[str, Any]) -> List[Dict[str, Any]]:
        if not self.api_key:
            raise ToolError("Web search is not configured")

        data = await self.fetch_json(
            self.API_URL,
            params={
                "q": params["query"].strip(),
                "count": self.max_results,
                "safesearch": "moderate",
            },
            headers={
                "X-Subscription-Token": self.api_key,
                "Accept": "application/json",
            }
        )

        results = (data.get("web") or {}).get("results") or []
        return [
            {
                "title": result.get("title", ""),
                "url": result.get("url", ""),
                "description": result.get("description", ""),
            }
            for result in results[:self.max_results]
        ]
