"""AWS client construction.

Builds the S3, Glue and Athena clients once from a single boto3 session so
every stage talks to the same account and region. Stages receive these
clients by injection.
"""

import logging
from dataclasses import dataclass
from typing import Any

import boto3

from sportslake.config import Settings

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class AwsClients:
    """boto3 clients used by the pipeline."""

    s3: Any
    glue: Any
    athena: Any


def create_session(config: Settings) -> boto3.session.Session:
    """Create a boto3 session from explicit credentials when configured.

    Unset values are left out so boto3 can fall back to its default
    credential chain (profile, instance role, ...).
    """
    session_kwargs: dict[str, str] = {}
    if config.aws_access_key_id:
        session_kwargs["aws_access_key_id"] = config.aws_access_key_id
    if config.aws_secret_access_key:
        session_kwargs["aws_secret_access_key"] = config.aws_secret_access_key
    if config.aws_session_token:
        session_kwargs["aws_session_token"] = config.aws_session_token
    if config.aws_region:
        session_kwargs["region_name"] = config.aws_region
    return boto3.session.Session(**session_kwargs)


def create_aws_clients(config: Settings) -> AwsClients:
    """Create the S3, Glue and Athena clients.

    Args:
        config: Runtime settings with optional credentials and region.

    Returns:
        AwsClients bundle.
    """
    session = create_session(config)
    logger.debug("Creating AWS clients (region=%s)", session.region_name)
    return AwsClients(
        s3=session.client("s3"),
        glue=session.client("glue"),
        athena=session.client("athena"),
    )
