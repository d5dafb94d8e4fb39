"""Client layer for SPORTSLAKE.

- SportsData.io: async HTTP client for the raw statistics
- AWS: boto3 S3, Glue and Athena clients built from one session
"""

from sportslake.clients.base import BaseAsyncClient
from sportslake.clients.sportsdata import SportsDataClient
from sportslake.clients.aws import AwsClients, create_aws_clients

__all__ = [
    "BaseAsyncClient",
    "SportsDataClient",
    "AwsClients",
    "create_aws_clients",
]
