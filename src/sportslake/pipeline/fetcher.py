"""Fetcher — Sports API → payload.

One GET per run. The body is returned exactly as parsed; no schema is
assumed beyond valid JSON.
"""

import logging
from typing import Any

from sportslake.clients.sportsdata import SportsDataClient

logger = logging.getLogger(__name__)


class Fetcher:
    """Fetches the raw statistics payload.

    The client is opened for the duration of each fetch, so one client
    instance can be built at startup and injected here.

    Usage:
        fetcher = Fetcher(SportsDataClient(api_key="..."))
        payload = await fetcher.fetch()
    """

    def __init__(
        self,
        client: SportsDataClient,
        endpoint: str = "/scores/json/PlayersActiveBasic",
    ) -> None:
        self.client = client
        self.endpoint = endpoint

    async def fetch(self) -> Any:
        """Fetch the configured endpoint.

        Returns:
            Parsed JSON body, unchanged

        Raises:
            UpstreamRequestError: On network failure, non-2xx or invalid JSON
        """
        async with self.client:
            payload = await self.client.get_endpoint(self.endpoint)
        if isinstance(payload, list):
            logger.info("API data fetched successfully (%d records)", len(payload))
        else:
            logger.info("API data fetched successfully")
        return payload
