"""Uploader — payload → S3 object.

Writes each fetched payload as a new `<prefix><epoch-millis>.json` object.
Two uploads in the same millisecond would share a key; that is accepted.
"""

import asyncio
import json
import logging
import time
from dataclasses import dataclass
from typing import Any, Callable

from botocore.exceptions import BotoCoreError, ClientError

from sportslake.errors import StorageWriteError

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class StoredObjectReference:
    """Where an uploaded payload landed."""

    bucket: str
    key: str
    etag: str | None = None

    @property
    def location(self) -> str:
        """S3 URI of the object."""
        return f"s3://{self.bucket}/{self.key}"

    def to_dict(self) -> dict:
        """Convert to dictionary for serialization."""
        return {
            "bucket": self.bucket,
            "key": self.key,
            "etag": self.etag,
            "location": self.location,
        }


def _epoch_millis() -> int:
    return time.time_ns() // 1_000_000


class Uploader:
    """Stores payloads in an S3 bucket.

    Args:
        s3_client: boto3 S3 client
        bucket: Destination bucket
        key_prefix: Object key prefix (default: "sportsdata-")
        clock: Returns epoch milliseconds; replaceable in tests
    """

    def __init__(
        self,
        s3_client: Any,
        bucket: str,
        key_prefix: str = "sportsdata-",
        clock: Callable[[], int] = _epoch_millis,
    ) -> None:
        self.s3 = s3_client
        self.bucket = bucket
        self.key_prefix = key_prefix
        self._clock = clock

    def make_key(self) -> str:
        """Build the object key from the current time in milliseconds."""
        return f"{self.key_prefix}{self._clock()}.json"

    async def upload(self, payload: Any) -> StoredObjectReference:
        """Write the payload as a single JSON object.

        Args:
            payload: Parsed JSON from the Fetcher

        Returns:
            Reference to the stored object

        Raises:
            StorageWriteError: On any object store failure
        """
        body = json.dumps(payload)
        key = self.make_key()

        try:
            response = await asyncio.to_thread(
                self.s3.put_object,
                Bucket=self.bucket,
                Key=key,
                Body=body.encode("utf-8"),
                ContentType="application/json",
            )
        except (ClientError, BotoCoreError) as e:
            logger.error("Error uploading to S3: %s", e)
            raise StorageWriteError(f"Failed to write s3://{self.bucket}/{key}: {e}") from e

        ref = StoredObjectReference(bucket=self.bucket, key=key, etag=response.get("ETag"))
        logger.info("File uploaded to S3: %s", ref.location)
        return ref
