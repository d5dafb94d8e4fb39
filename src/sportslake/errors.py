"""SPORTSLAKE exception hierarchy.

One error type per pipeline stage so a failure can be traced back to the
external service that produced it. Nothing here is recovered locally:
stages raise, the CLI logs and exits.
"""


class PipelineError(Exception):
    """Base exception for all pipeline failures."""


class UpstreamRequestError(PipelineError):
    """Raised when the sports API request fails (network, non-2xx, bad JSON)."""

    def __init__(
        self,
        message: str,
        status_code: int | None = None,
        response_body: str | None = None,
    ) -> None:
        super().__init__(message)
        self.status_code = status_code
        self.response_body = response_body


class StorageWriteError(PipelineError):
    """Raised when the object store rejects or fails a write."""


class CatalogError(PipelineError):
    """Raised for Glue database and crawler failures."""


class QueryError(PipelineError):
    """Raised when an Athena query cannot be submitted or does not succeed."""

    def __init__(self, message: str, status: str | None = None) -> None:
        super().__init__(message)
        self.status = status


class PollTimeoutError(PipelineError):
    """Raised when a polled operation is still pending after the poll bound."""

    def __init__(self, message: str, last_status: str | None, attempts: int) -> None:
        super().__init__(message)
        self.last_status = last_status
        self.attempts = attempts
