"""Tests for Uploader — payload → S3 object."""

import json
from unittest.mock import MagicMock

import pytest
from botocore.exceptions import ClientError, EndpointConnectionError

from sportslake.errors import StorageWriteError
from sportslake.pipeline.uploader import StoredObjectReference, Uploader


def make_s3() -> MagicMock:
    s3 = MagicMock()
    s3.put_object.return_value = {"ETag": '"abc123"'}
    return s3


class TestKeys:
    """Object key generation."""

    def test_key_uses_epoch_millis(self):
        """Key is <prefix><millis>.json."""
        uploader = Uploader(make_s3(), "nbadatalake", clock=lambda: 1700000000123)
        assert uploader.make_key() == "sportsdata-1700000000123.json"

    def test_keys_unique_across_milliseconds(self):
        """Calls at different milliseconds produce different keys."""
        ticks = iter([1700000000123, 1700000000124])
        uploader = Uploader(make_s3(), "nbadatalake", clock=lambda: next(ticks))

        assert uploader.make_key() != uploader.make_key()

    def test_default_clock_is_milliseconds(self):
        """The real clock yields a 13-digit millisecond timestamp."""
        key = Uploader(make_s3(), "b").make_key()
        millis = key.removeprefix("sportsdata-").removesuffix(".json")
        assert millis.isdigit()
        assert len(millis) == 13


class TestUpload:
    """upload() behavior."""

    @pytest.mark.asyncio
    async def test_single_put_with_json_content_type(self):
        """One put_object call with bucket, key, JSON body and content type."""
        s3 = make_s3()
        uploader = Uploader(s3, "nbadatalake", clock=lambda: 42)

        ref = await uploader.upload([{"PlayerID": 1}])

        s3.put_object.assert_called_once()
        kwargs = s3.put_object.call_args.kwargs
        assert kwargs["Bucket"] == "nbadatalake"
        assert kwargs["Key"] == "sportsdata-42.json"
        assert kwargs["ContentType"] == "application/json"
        assert ref == StoredObjectReference(
            bucket="nbadatalake", key="sportsdata-42.json", etag='"abc123"'
        )
        assert ref.location == "s3://nbadatalake/sportsdata-42.json"

    @pytest.mark.asyncio
    async def test_body_parses_back_to_payload(self):
        """The uploaded body is the payload serialized as JSON."""
        s3 = make_s3()
        payload = {"players": [{"id": 1, "name": "Jokić", "stats": {"pts": 27.5}}]}

        await Uploader(s3, "b").upload(payload)

        body = s3.put_object.call_args.kwargs["Body"]
        assert json.loads(body) == payload

    @pytest.mark.asyncio
    async def test_client_error_raises_storage_error(self):
        """Access denied → StorageWriteError."""
        s3 = MagicMock()
        s3.put_object.side_effect = ClientError(
            {"Error": {"Code": "AccessDenied", "Message": "Access Denied"}}, "PutObject"
        )

        with pytest.raises(StorageWriteError, match="AccessDenied"):
            await Uploader(s3, "nbadatalake").upload({})

    @pytest.mark.asyncio
    async def test_missing_bucket_raises_storage_error(self):
        """NoSuchBucket → StorageWriteError, no retry."""
        s3 = MagicMock()
        s3.put_object.side_effect = ClientError(
            {"Error": {"Code": "NoSuchBucket", "Message": "missing"}}, "PutObject"
        )

        with pytest.raises(StorageWriteError):
            await Uploader(s3, "missing-bucket").upload({})

        assert s3.put_object.call_count == 1

    @pytest.mark.asyncio
    async def test_network_error_raises_storage_error(self):
        """botocore connection failures are wrapped too."""
        s3 = MagicMock()
        s3.put_object.side_effect = EndpointConnectionError(endpoint_url="https://s3.amazonaws.com")

        with pytest.raises(StorageWriteError):
            await Uploader(s3, "b").upload({})


class TestStoredObjectReference:
    """StoredObjectReference serialization."""

    def test_to_dict(self):
        ref = StoredObjectReference(bucket="b", key="k.json")
        assert ref.to_dict() == {
            "bucket": "b",
            "key": "k.json",
            "etag": None,
            "location": "s3://b/k.json",
        }
