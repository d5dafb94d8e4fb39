"""Catalog Orchestrator — S3 data → Glue table.

Makes the uploaded payloads queryable:
1. Create the Glue database
2. Create (or update) the crawler pointing at the bucket
3. Start the crawler
4. Poll until the crawler is no longer RUNNING

Any state other than RUNNING ends the wait. Unless a success allow-list is
configured, a crawl that ended badly is treated exactly like one that
succeeded. With an allow-list the wait also covers STOPPING, since Glue only
records LastCrawl once the crawler is back to READY.
"""

import asyncio
import logging
from dataclasses import dataclass
from typing import Any, Awaitable, Callable

from botocore.exceptions import BotoCoreError, ClientError

from sportslake.errors import CatalogError
from sportslake.pipeline.polling import poll_until

logger = logging.getLogger(__name__)

RUNNING = "RUNNING"
STOPPING = "STOPPING"
_ALREADY_EXISTS = "AlreadyExistsException"


@dataclass(frozen=True)
class CrawlerJob:
    """Glue crawler definition. Identity is the name."""

    name: str
    database_name: str
    table_prefix: str
    s3_path: str
    role: str

    def to_glue_params(self) -> dict[str, Any]:
        """Parameters shared by CreateCrawler and UpdateCrawler."""
        return {
            "Name": self.name,
            "Role": self.role,
            "DatabaseName": self.database_name,
            "Targets": {"S3Targets": [{"Path": self.s3_path}]},
            "TablePrefix": self.table_prefix,
        }


def _error_code(error: Exception) -> str | None:
    if isinstance(error, ClientError):
        return error.response.get("Error", {}).get("Code")
    return None


class CatalogOrchestrator:
    """Registers the bucket contents as a table in the Glue catalog.

    Args:
        glue_client: boto3 Glue client
        job: Crawler definition
        database_description: Description stored on the Glue database
        poll_interval: Seconds between crawler status requests (default: 10)
        max_polls: Maximum crawler status requests (None = unbounded)
        success_states: Crawl outcomes accepted as success
            (None = any non-RUNNING state is done)
        reuse_existing: Accept an existing database and update an
            existing crawler instead of failing
        sleep: Awaitable sleep, replaceable in tests
    """

    def __init__(
        self,
        glue_client: Any,
        job: CrawlerJob,
        database_description: str = "Database for sports data",
        poll_interval: float = 10.0,
        max_polls: int | None = None,
        success_states: frozenset[str] | None = None,
        reuse_existing: bool = False,
        sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
    ) -> None:
        self.glue = glue_client
        self.job = job
        self.database_description = database_description
        self.poll_interval = poll_interval
        self.max_polls = max_polls
        self.success_states = success_states
        self.reuse_existing = reuse_existing
        self._sleep = sleep
        self._last_crawler: dict[str, Any] = {}

    async def _call(self, operation: str, **kwargs: Any) -> dict[str, Any]:
        """Run one Glue operation off the event loop."""
        method = getattr(self.glue, operation)
        return await asyncio.to_thread(method, **kwargs)

    async def ensure_database(self) -> None:
        """Create the Glue database.

        Raises:
            CatalogError: If creation fails (including "already exists"
                unless reuse_existing is set)
        """
        name = self.job.database_name
        try:
            await self._call(
                "create_database",
                DatabaseInput={"Name": name, "Description": self.database_description},
            )
        except (ClientError, BotoCoreError) as e:
            if self.reuse_existing and _error_code(e) == _ALREADY_EXISTS:
                logger.info('Database "%s" already exists, reusing it', name)
                return
            logger.error("Error creating Glue database %s: %s", name, e)
            raise CatalogError(f'Failed to create database "{name}": {e}') from e
        logger.info('Database "%s" created successfully', name)

    async def define_crawler(self) -> None:
        """Create the crawler, or update it when reuse_existing is set.

        Raises:
            CatalogError: If the crawler cannot be created or updated
        """
        name = self.job.name
        params = self.job.to_glue_params()
        try:
            await self._call("create_crawler", **params)
        except (ClientError, BotoCoreError) as e:
            if not (self.reuse_existing and _error_code(e) == _ALREADY_EXISTS):
                logger.error("Error creating Glue crawler %s: %s", name, e)
                raise CatalogError(f'Failed to create crawler "{name}": {e}') from e
        else:
            logger.info('Crawler "%s" created successfully', name)
            return

        try:
            await self._call("update_crawler", **params)
        except (ClientError, BotoCoreError) as e:
            logger.error("Error updating Glue crawler %s: %s", name, e)
            raise CatalogError(f'Failed to update crawler "{name}": {e}') from e
        logger.info('Crawler "%s" already existed, definition updated', name)

    async def start_crawler(self) -> None:
        """Start the crawler.

        Raises:
            CatalogError: If the start request fails
        """
        name = self.job.name
        try:
            await self._call("start_crawler", Name=name)
        except (ClientError, BotoCoreError) as e:
            logger.error("Error starting Glue crawler %s: %s", name, e)
            raise CatalogError(f'Failed to start crawler "{name}": {e}') from e
        logger.info('Crawler "%s" started successfully', name)

    async def get_crawler_state(self) -> str:
        """Fetch the crawler's current state (e.g. RUNNING, STOPPING, READY)."""
        try:
            response = await self._call("get_crawler", Name=self.job.name)
        except (ClientError, BotoCoreError) as e:
            logger.error("Error reading Glue crawler %s: %s", self.job.name, e)
            raise CatalogError(f'Failed to get crawler "{self.job.name}": {e}') from e
        self._last_crawler = response.get("Crawler", {})
        return self._last_crawler.get("State", "")

    def _crawl_outcome(self, state: str) -> str:
        """Last crawl status when the service reports one, else the state."""
        last_crawl = self._last_crawler.get("LastCrawl") or {}
        return last_crawl.get("Status") or state

    def _is_pending(self, state: str) -> bool:
        if self.success_states is None:
            return state == RUNNING
        return state in (RUNNING, STOPPING)

    async def wait_for_crawler(self) -> str:
        """Poll until the crawler leaves RUNNING.

        In strict mode (success_states set) polling continues through
        STOPPING so the crawl outcome is read from a settled LastCrawl.

        Returns:
            The first non-pending state observed

        Raises:
            PollTimeoutError: If max_polls is exceeded
            CatalogError: If strict mode rejects the crawl outcome
        """
        state = await poll_until(
            self.get_crawler_state,
            is_pending=self._is_pending,
            interval=self.poll_interval,
            max_polls=self.max_polls,
            sleep=self._sleep,
            description="Crawler",
        )
        logger.info("Crawler execution completed.")

        if self.success_states is not None:
            outcome = self._crawl_outcome(state)
            if outcome not in self.success_states:
                raise CatalogError(
                    f'Crawler "{self.job.name}" finished with {outcome}, '
                    f"expected one of {sorted(self.success_states)}"
                )
        return state

    async def run(self) -> str:
        """Database → crawler definition → start → wait.

        Returns:
            Final crawler state
        """
        await self.ensure_database()
        await self.define_crawler()
        await self.start_crawler()
        return await self.wait_for_crawler()
