"""Orchestrator — Fetch → Upload → Catalog → Query.

Each stage finishes before the next one starts and the first failure
aborts the run. Resources created before a failure (database, crawler,
uploaded object) are left in place.

Usage:
    pipeline = build_pipeline(settings)
    result = await pipeline.run()
"""

import json
import logging
from dataclasses import dataclass

from sportslake.config import Settings
from sportslake.clients import SportsDataClient, create_aws_clients
from sportslake.errors import CatalogError
from sportslake.pipeline.catalog import CatalogOrchestrator, CrawlerJob
from sportslake.pipeline.fetcher import Fetcher
from sportslake.pipeline.query import QueryResultSet, QueryRunner
from sportslake.pipeline.uploader import StoredObjectReference, Uploader

logger = logging.getLogger(__name__)


@dataclass
class PipelineResult:
    """Outputs of one complete run."""

    stored_object: StoredObjectReference
    crawler_state: str
    query_result: QueryResultSet

    def to_dict(self) -> dict:
        """Convert to dictionary for serialization."""
        return {
            "stored_object": self.stored_object.to_dict(),
            "crawler_state": self.crawler_state,
            "query_result": self.query_result.to_dict(),
        }


class Pipeline:
    """Runs the four stages in order.

    Stage components are injected; see build_pipeline() for the wiring
    used in production.

    Args:
        fetcher: Sports API stage
        uploader: S3 stage
        catalog: Glue stage
        query_runner: Athena stage
        sql: Query run once the table is cataloged
        output_location: s3:// prefix for Athena results
        verify_source_path: Fail if the uploaded object is outside the
            crawler's S3 path
    """

    def __init__(
        self,
        fetcher: Fetcher,
        uploader: Uploader,
        catalog: CatalogOrchestrator,
        query_runner: QueryRunner,
        sql: str,
        output_location: str,
        verify_source_path: bool = True,
    ) -> None:
        self.fetcher = fetcher
        self.uploader = uploader
        self.catalog = catalog
        self.query_runner = query_runner
        self.sql = sql
        self.output_location = output_location
        self.verify_source_path = verify_source_path

    def check_source_path(self, ref: StoredObjectReference) -> None:
        """Ensure the crawler will actually scan the uploaded object.

        Raises:
            CatalogError: If the object lies outside the crawler's S3 path
        """
        source_path = self.catalog.job.s3_path
        prefix = source_path if source_path.endswith("/") else f"{source_path}/"
        if not ref.location.startswith(prefix):
            raise CatalogError(
                f"Uploaded object {ref.location} is outside crawler path {source_path}"
            )

    async def run(self) -> PipelineResult:
        """Run the full pipeline.

        Returns:
            PipelineResult with the stored object, crawler state and rows

        Raises:
            PipelineError: Whichever stage failed first
        """
        logger.info("[1/4] Fetching sports data...")
        payload = await self.fetcher.fetch()

        logger.info("[2/4] Uploading payload...")
        ref = await self.uploader.upload(payload)
        logger.info("Data uploaded to S3 at: %s", ref.location)

        if self.verify_source_path:
            self.check_source_path(ref)

        logger.info("[3/4] Cataloging %s...", self.catalog.job.s3_path)
        crawler_state = await self.catalog.run()

        logger.info("[4/4] Querying %s...", self.catalog.job.database_name)
        result = await self.query_runner.run_query(
            self.sql,
            self.catalog.job.database_name,
            self.output_location,
        )
        logger.info("Athena Query Results: %s", json.dumps(result.raw, indent=2, default=str))

        return PipelineResult(
            stored_object=ref,
            crawler_state=crawler_state,
            query_result=result,
        )


def build_pipeline(config: Settings) -> Pipeline:
    """Construct every client once and wire the four stages.

    Args:
        config: Runtime settings

    Returns:
        Ready-to-run Pipeline
    """
    aws = create_aws_clients(config)
    http = SportsDataClient(
        api_key=config.sports_api_key,
        base_url=config.sports_api_base_url,
        timeout=config.sports_api_timeout,
        max_retries=config.sports_api_max_retries,
    )
    job = CrawlerJob(
        name=config.crawler_name,
        database_name=config.database_name,
        table_prefix=config.table_prefix,
        s3_path=config.source_path,
        role=config.glue_role_arn,
    )

    return Pipeline(
        fetcher=Fetcher(http, endpoint=config.sports_api_endpoint),
        uploader=Uploader(aws.s3, config.bucket_name, key_prefix=config.object_key_prefix),
        catalog=CatalogOrchestrator(
            aws.glue,
            job,
            database_description=config.database_description,
            poll_interval=config.crawler_poll_interval,
            max_polls=config.crawler_max_polls,
            success_states=config.success_states,
            reuse_existing=config.reuse_existing_resources,
        ),
        query_runner=QueryRunner(
            aws.athena,
            poll_interval=config.query_poll_interval,
            max_polls=config.query_max_polls,
        ),
        sql=config.query_sql,
        output_location=config.output_location,
        verify_source_path=config.verify_source_path,
    )
