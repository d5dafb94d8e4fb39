"""SportsData.io API client.

Authenticates with the Ocp-Apim-Subscription-Key header and returns JSON
bodies exactly as the API sends them.

API Documentation: https://sportsdata.io/developers/api-documentation/nba

Usage:
    from sportslake.clients.sportsdata import SportsDataClient

    async with SportsDataClient(api_key="your_key") as client:
        players = await client.get_endpoint("/scores/json/PlayersActiveBasic")
"""

from typing import Any

from sportslake.clients.base import BaseAsyncClient


SUBSCRIPTION_KEY_HEADER = "Ocp-Apim-Subscription-Key"


class SportsDataClient(BaseAsyncClient):
    """Async client for the SportsData.io API.

    Args:
        api_key: Subscription key
        base_url: API base URL (default: NBA v3)
        timeout: Request timeout in seconds
        max_retries: Retries on transient failures (default: 0)
    """

    def __init__(
        self,
        api_key: str,
        base_url: str = "https://api.sportsdata.io/v3/nba",
        timeout: float = 30.0,
        max_retries: int = 0,
    ) -> None:
        super().__init__(
            base_url=base_url,
            headers={SUBSCRIPTION_KEY_HEADER: api_key},
            timeout=timeout,
            max_retries=max_retries,
        )

    async def get_endpoint(self, endpoint: str) -> Any:
        """Get any JSON endpoint relative to the base URL."""
        return await self.get(endpoint)
