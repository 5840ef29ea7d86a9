"""Current time lookup backed by timeapi.io."""

from typing import Any, Dict

from .base import BaseTool


class CurrentTimeTool(BaseTool):
    """Returns the current date and time in an IANA timezone."""

    NAME = "get_current_time"
    API_URL = "https://timeapi.io/api/time/current/zone"

    def __init__(self, timeout: float = 15.0):
        schema = {
            "type": "object",
            "properties": {
                "timezone": {
                    "type": "string",
                    "description": "IANA timezone name, e.g. Europe/Amsterdam or America/New_York"
                }
            },
            "required": ["timezone"]
        }
        super().__init__(
            name=self.NAME,
            display_name="Current Time",
            description="Get the current date, time and day of week in a timezone.",
            schema=schema,
            status_label="Checking the time...",
            timeout=timeout
        )

    async def execute(self, params: Dict[str, Any]) -> Any:
        data = await self.fetch_json(self.API_URL, params={"timeZone": params["timezone"]})
        return {
            "timezone": data.get("timeZone"),
            "datetime": data.get("dateTime"),
            "date": data.get("date"),
            "time": data.get("time"),
            "dayOfWeek": data.get("dayOfWeek"),
        }
