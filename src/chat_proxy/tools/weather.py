"""Current weather lookup backed by the Open-Meteo forecast API."""

from typing import Any, Dict, Optional

from .base import BaseTool


class WeatherTool(BaseTool):
    """Returns the current weather for a latitude/longitude pair."""

    NAME = "get_current_weather"
    API_URL = "https://api.open-meteo.com/v1/forecast"

    def __init__(self, timeout: float = 15.0):
        schema = {
            "type": "object",
            "properties": {
                "latitude": {
                    "type": "number",
                    "description": "Latitude of the location, e.g. 52.52"
                },
                "longitude": {
                    "type": "number",
                    "description": "Longitude of the location, e.g. 13.41"
                }
            },
            "required": ["latitude", "longitude"]
        }
        super().__init__(
            name=self.NAME,
            display_name="Weather",
            description="Get the current weather (temperature, wind, weather code) at a latitude and longitude.",
            schema=schema,
            status_label="Getting weather data...",
            timeout=timeout
        )

    def validate_params(self, params: Dict[str, Any]) -> Optional[str]:
        error = super().validate_params(params)
        if error:
            return error
        for key, bound in (("latitude", 90), ("longitude", 180)):
            try:
                value = float(params[key])
            except (TypeError, ValueError):
                return f"'{key}' must be a number"
            if not -bound <= value <= bound:
                return f"'{key}' must be between -{bound} and {bound}"
        return None

    async def execute(self, params: Dict[str, Any]) -> Any:
        data = await self.fetch_json(
            self.API_URL,
            params={
                "latitude": params["latitude"],
                "longitude": params["longitude"],
                "current_weather": "true",
            }
        )
        return data.get("current_weather", data)
