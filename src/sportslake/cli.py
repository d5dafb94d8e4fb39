"""Command-line interface for SPORTSLAKE.

Runs the fetch → upload → crawl → query pipeline once.

Usage:
    sportslake run
    sportslake run --sql 'SELECT count(*) FROM "sportsdata_db"."sports_nbadatalake"'
    sportslake run --format json
"""

import argparse
import asyncio
import json
import logging
import sys
from concurrent.futures import ThreadPoolExecutor
from typing import Optional

from sportslake import __version__
from sportslake.config import settings
from sportslake.errors import PipelineError
from sportslake.pipeline.orchestrator import build_pipeline

logger = logging.getLogger(__name__)

_executor = ThreadPoolExecutor(max_workers=1)


def create_parser() -> argparse.ArgumentParser:
    """Create the CLI argument parser.

    Returns:
        Configured ArgumentParser with all commands and arguments.
    """
    parser = argparse.ArgumentParser(
        prog="sportslake",
        description="SPORTSLAKE — Sports API → S3 → Glue → Athena",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  sportslake run
  sportslake run --format json
  sportslake run --log-level DEBUG

Configuration is read from environment variables and .env.
        """,
    )

    subparsers = parser.add_subparsers(dest="command", help="Available commands")

    run_parser = subparsers.add_parser(
        "run",
        help="Run the full pipeline once",
        description="Fetch, upload, crawl and query",
    )
    run_parser.add_argument(
        "--sql",
        type=str,
        default=None,
        help="SQL to run after cataloging (default: QUERY_SQL setting)",
    )
    run_parser.add_argument(
        "--format",
        type=str,
        choices=["text", "json"],
        default="text",
        help="Output format (default: text)",
    )
    run_parser.add_argument(
        "--log-level",
        type=str.upper,
        choices=["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"],
        default=None,
        help="Logging level (default: LOG_LEVEL setting)",
    )

    subparsers.add_parser(
        "version",
        help="Show version information",
    )

    return parser


def _run_async(coro):
    """Run an async coroutine from synchronous CLI context.

    Spins up a new event loop in a dedicated thread to avoid conflicts
    with any existing event loop. A KeyboardInterrupt in the calling
    thread cancels the running task before it propagates.
    """
    loop = asyncio.new_event_loop()
    running: dict[str, asyncio.Task] = {}

    def _target():
        try:
            running["task"] = loop.create_task(coro)
            return loop.run_until_complete(running["task"])
        finally:
            loop.close()

    future = _executor.submit(_target)
    try:
        return future.result()
    except KeyboardInterrupt:
        task = running.get("task")
        if task is not None and not loop.is_closed():
            loop.call_soon_threadsafe(task.cancel)
        raise


def _format_text(result) -> str:
    rows = result.query_result.rows
    lines = [
        f"Stored:   {result.stored_object.location}",
        f"Crawler:  {result.crawler_state}",
        f"Query:    {result.query_result.execution_id} ({len(rows)} rows)",
    ]
    lines.extend("  " + " | ".join("" if v is None else v for v in row) for row in rows)
    return "\n".join(lines)


def cmd_run(args: argparse.Namespace) -> int:
    """Execute the run command.

    Args:
        args: Parsed command-line arguments

    Returns:
        Exit code (0 for success, 1 for any pipeline failure)
    """
    logging.getLogger().setLevel(args.log_level or settings.log_level)

    config = settings
    if args.sql:
        config = settings.model_copy(update={"query_sql": args.sql})

    try:
        pipeline = build_pipeline(config)
        result = _run_async(pipeline.run())
    except KeyboardInterrupt:
        logger.warning("Interrupted by user")
        return 130
    except PipelineError as e:
        logger.error("Error in processing: %s", e)
        return 1
    except Exception as e:
        logger.error("Error in processing: %s", e, exc_info=True)
        return 1

    if args.format == "json":
        print(json.dumps(result.to_dict(), indent=2))
    else:
        print(_format_text(result))
    return 0


def cmd_version(args: argparse.Namespace) -> int:
    """Execute the version command."""
    print(f"SPORTSLAKE v{__version__}")
    print("Sports API → S3 → Glue → Athena")
    return 0


def main(argv: Optional[list[str]] = None) -> int:
    """Main CLI entry point.

    Args:
        argv: Command-line arguments (defaults to sys.argv[1:])

    Returns:
        Exit code (0 for success, non-zero for failure)
    """
    logging.basicConfig(
        level=logging.INFO,
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
    )
    parser = create_parser()
    args = parser.parse_args(argv)

    if args.command == "run":
        return cmd_run(args)
    elif args.command == "version":
        return cmd_version(args)
    else:
        parser.print_help()
        return 0


def cli_entry() -> None:
    """Console script entry point for setuptools."""
    sys.exit(main())


if __name__ == "__main__":
    cli_entry()
