"""Query Runner — SQL → Athena → result set."""

import asyncio
import logging
from dataclasses import dataclass, field
from typing import Any, Awaitable, Callable

from botocore.exceptions import BotoCoreError, ClientError

from sportslake.errors import QueryError
from sportslake.pipeline.polling import poll_until

logger = logging.getLogger(__name__)

SUCCEEDED = "SUCCEEDED"
PENDING_STATES = frozenset({"QUEUED", "RUNNING"})


@dataclass
class QueryResultSet:
    """Rows returned by a successful query.

    `rows` holds the cell values of every row Athena returned, header row
    included (Athena repeats column names as the first row for SELECTs).
    """

    execution_id: str
    columns: list[str]
    rows: list[list[str | None]]
    raw: dict[str, Any] = field(default_factory=dict, repr=False)

    @classmethod
    def from_response(cls, execution_id: str, response: dict[str, Any]) -> "QueryResultSet":
        """Build from a GetQueryResults response."""
        result_set = response.get("ResultSet", {})
        column_info = result_set.get("ResultSetMetadata", {}).get("ColumnInfo", [])
        rows = [
            [datum.get("VarCharValue") for datum in row.get("Data", [])]
            for row in result_set.get("Rows", [])
        ]
        return cls(
            execution_id=execution_id,
            columns=[c.get("Name", "") for c in column_info],
            rows=rows,
            raw=response,
        )

    def to_dict(self) -> dict:
        """Convert to dictionary for serialization."""
        return {
            "execution_id": self.execution_id,
            "columns": self.columns,
            "rows": self.rows,
        }


class QueryRunner:
    """Runs SQL on Athena and waits for the results.

    Args:
        athena_client: boto3 Athena client
        poll_interval: Seconds between status requests (default: 5)
        max_polls: Maximum status requests (None = unbounded)
        sleep: Awaitable sleep, replaceable in tests
    """

    def __init__(
        self,
        athena_client: Any,
        poll_interval: float = 5.0,
        max_polls: int | None = None,
        sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
    ) -> None:
        self.athena = athena_client
        self.poll_interval = poll_interval
        self.max_polls = max_polls
        self._sleep = sleep
        self._reason: str | None = None

    async def submit(self, sql: str, database_name: str, output_location: str) -> str:
        """Start the query and return its execution id."""
        try:
            response = await asyncio.to_thread(
                self.athena.start_query_execution,
                QueryString=sql,
                QueryExecutionContext={"Database": database_name},
                ResultConfiguration={"OutputLocation": output_location},
            )
        except (ClientError, BotoCoreError) as e:
            logger.error("Error starting Athena query: %s", e)
            raise QueryError(f"Failed to start query: {e}") from e

        execution_id = response["QueryExecutionId"]
        logger.info("Athena query started successfully: %s", execution_id)
        return execution_id

    async def get_status(self, execution_id: str) -> str:
        """Current state of an execution (QUEUED, RUNNING, SUCCEEDED, ...)."""
        try:
            response = await asyncio.to_thread(
                self.athena.get_query_execution,
                QueryExecutionId=execution_id,
            )
        except (ClientError, BotoCoreError) as e:
            logger.error("Error reading Athena query %s: %s", execution_id, e)
            raise QueryError(f"Failed to get query execution {execution_id}: {e}") from e

        status = response.get("QueryExecution", {}).get("Status", {})
        self._reason = status.get("StateChangeReason")
        return status.get("State", "")

    async def wait_for_completion(self, execution_id: str) -> None:
        """Poll while QUEUED or RUNNING; fail on any terminal state but SUCCEEDED.

        Raises:
            QueryError: If the query ends FAILED, CANCELLED or anything else
            PollTimeoutError: If max_polls is exceeded
        """
        state = await poll_until(
            lambda: self.get_status(execution_id),
            is_pending=lambda s: s in PENDING_STATES,
            interval=self.poll_interval,
            max_polls=self.max_polls,
            sleep=self._sleep,
            description="Athena query",
        )
        if state != SUCCEEDED:
            message = f"Athena query failed with state: {state}"
            if self._reason:
                message = f"{message} ({self._reason})"
            raise QueryError(message, status=state)

    async def fetch_results(self, execution_id: str) -> QueryResultSet:
        """Fetch the result set of a finished execution."""
        try:
            response = await asyncio.to_thread(
                self.athena.get_query_results,
                QueryExecutionId=execution_id,
            )
        except (ClientError, BotoCoreError) as e:
            logger.error("Error fetching Athena results for %s: %s", execution_id, e)
            raise QueryError(f"Failed to get results for {execution_id}: {e}") from e
        return QueryResultSet.from_response(execution_id, response)

    async def run_query(
        self,
        sql: str,
        database_name: str,
        output_location: str,
    ) -> QueryResultSet:
        """Submit, wait, and fetch results.

        Args:
            sql: Query text
            database_name: Database context for unqualified table names
            output_location: s3:// prefix Athena writes results to

        Returns:
            Result set of the execution

        Raises:
            QueryError: On submission failure or non-success terminal state
            PollTimeoutError: If max_polls is exceeded
        """
        execution_id = await self.submit(sql, database_name, output_location)
        await self.wait_for_completion(execution_id)
        return await self.fetch_results(execution_id)
