"""Pipeline orchestration — API → S3 → Glue → Athena.

The pipeline runs four stages strictly in order:
1. Fetch raw JSON from the sports API
2. Store it as a timestamped S3 object
3. Crawl the bucket into a Glue table
4. Query the table with Athena

Components:
- Pipeline: Main coordinator
- Fetcher: API → payload
- Uploader: payload → S3
- CatalogOrchestrator: S3 → Glue table
- QueryRunner: SQL → Athena results
"""

from sportslake.pipeline.catalog import CatalogOrchestrator, CrawlerJob
from sportslake.pipeline.fetcher import Fetcher
from sportslake.pipeline.orchestrator import Pipeline, PipelineResult, build_pipeline
from sportslake.pipeline.polling import poll_until
from sportslake.pipeline.query import QueryResultSet, QueryRunner
from sportslake.pipeline.uploader import StoredObjectReference, Uploader

__all__ = [
    "CatalogOrchestrator",
    "CrawlerJob",
    "Fetcher",
    "Pipeline",
    "PipelineResult",
    "build_pipeline",
    "poll_until",
    "QueryResultSet",
    "QueryRunner",
    "StoredObjectReference",
    "Uploader",
]
