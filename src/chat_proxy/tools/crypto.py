"""Cryptocurrency spot prices from the CoinGecko simple-price API."""

from typing import Any, Dict

from .base import BaseTool, ToolError


class CoinPriceTool(BaseTool):
    """Returns the current price of a coin in a fiat or crypto currency."""

    NAME = "get_current_coin_price"
    API_URL = "https://api.coingecko.com/api/v3/simple/price"

    def __init__(self, timeout: float = 15.0):
        schema = {
            "type": "object",
            "properties": {
                "coin": {
                    "type": "string",
                    "description": "CoinGecko coin id, e.g. bitcoin, ethereum, solana"
                },
                "currency": {
                    "type": "string",
                    "description": "Quote currency code, e.g. usd, eur, idr"
                }
            },
            "required": ["coin", "currency"]
        }
        super().__init__(
            name=self.NAME,
            display_name="Coin Price",
            description="Get the current price of a cryptocurrency in a given currency.",
            schema=schema,
            status_label="Checking coin prices...",
            timeout=timeout
        )

    async def execute(self, params: Dict[str, Any]) -> Any:
        coin = str(params["coin"]).strip().lower()
        currency = str(params["currency"]).strip().lower()
        data = await self.fetch_json(
            self.API_URL,
            params={"ids": coin, "vs_currencies": currency}
        )
        if not data:
            raise ToolError(f"No price found for '{coin}' in '{currency}'")
        return data
