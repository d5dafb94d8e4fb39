"""Configuration management for SPORTSLAKE.

Loads API keys, AWS credentials and resource names from environment
variables using Pydantic. Secrets belong in .env or the environment
(never hardcoded).

Credentials are deliberately not required here: a missing or wrong key
surfaces as an authentication failure from the service that rejects it.

Usage:
    from sportslake.config import settings

    print(settings.bucket_name)
    print(settings.log_level)
"""

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """SPORTSLAKE configuration from environment variables.

    Loads from .env file automatically. Validates on instantiation.

    Attributes:
        sports_api_key: SportsData.io subscription key
        aws_region: Region for the S3, Glue and Athena clients
        glue_role_arn: IAM role the crawler runs as
        bucket_name: Bucket receiving the raw payloads
        database_name: Glue database the crawler writes tables into
        crawler_name: Name of the Glue crawler (reused across runs)
        crawler_max_polls: Poll bound for the crawler (None = unbounded)
        query_max_polls: Poll bound for the Athena query (None = unbounded)
        crawler_success_states: Strict allow-list of crawl outcomes
            (None = any non-RUNNING state counts as done)
        log_level: Logging verbosity (DEBUG, INFO, WARNING, ERROR)
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",  # Ignore unknown env vars
    )

    # Sports API
    sports_api_key: str = Field(default="", description="SportsData.io subscription key")
    sports_api_base_url: str = Field(
        default="https://api.sportsdata.io/v3/nba",
        description="SportsData.io base URL",
    )
    sports_api_endpoint: str = Field(
        default="/scores/json/PlayersActiveBasic",
        description="Endpoint fetched on every run",
    )
    sports_api_timeout: float = Field(default=30.0, gt=0, description="HTTP timeout (seconds)")
    sports_api_max_retries: int = Field(
        default=0,
        ge=0,
        le=10,
        description="Retries on transient HTTP failures (0 = fail on first error)",
    )

    # AWS credentials (optional — boto3 falls back to its default chain)
    aws_access_key_id: str | None = Field(default=None, description="AWS access key id")
    aws_secret_access_key: str | None = Field(default=None, description="AWS secret key")
    aws_session_token: str | None = Field(default=None, description="AWS session token")
    aws_region: str | None = Field(default=None, description="AWS region")
    glue_role_arn: str = Field(default="", description="Execution role for the Glue crawler")

    # Resource names
    bucket_name: str = Field(default="nbadatalake", min_length=3, description="S3 bucket")
    object_key_prefix: str = Field(default="sportsdata-", description="Uploaded object key prefix")
    database_name: str = Field(default="sportsdata_db", description="Glue database name")
    database_description: str = Field(
        default="Database for sports data",
        description="Glue database description",
    )
    crawler_name: str = Field(default="sportsdata-crawler", description="Glue crawler name")
    table_prefix: str = Field(default="sports_", description="Prefix for crawled table names")
    crawler_s3_path: str | None = Field(
        default=None,
        description="S3 path the crawler scans (default: s3://<bucket_name>/)",
    )
    athena_output_location: str | None = Field(
        default=None,
        description="Athena results location (default: s3://<bucket_name>/athena-results/)",
    )
    query_sql: str = Field(
        default='SELECT * FROM "sportsdata_db"."sports_nbadatalake" LIMIT 10;',
        description="SQL run against the cataloged table",
    )

    # Polling
    crawler_poll_interval: float = Field(default=10.0, ge=0, description="Crawler poll interval (seconds)")
    query_poll_interval: float = Field(default=5.0, ge=0, description="Query poll interval (seconds)")
    crawler_max_polls: int | None = Field(default=360, ge=1, description="Max crawler status requests")
    query_max_polls: int | None = Field(default=360, ge=1, description="Max query status requests")
    crawler_success_states: str | None = Field(
        default=None,
        description="Comma-separated crawl outcomes accepted as success (None = any non-RUNNING state)",
    )

    # Behavior switches
    reuse_existing_resources: bool = Field(
        default=False,
        description="Treat an existing database as success and update an existing crawler",
    )
    verify_source_path: bool = Field(
        default=True,
        description="Check the uploaded object lies under the crawler's S3 path",
    )

    # System Settings
    log_level: str = Field(default="INFO", description="Logging level")

    @field_validator("log_level")
    @classmethod
    def validate_log_level(cls, v: str) -> str:
        """Ensure log level is valid."""
        valid = {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"}
        v_upper = v.upper()
        if v_upper not in valid:
            raise ValueError(f"log_level must be one of {valid}, got {v}")
        return v_upper

    @field_validator("crawler_success_states")
    @classmethod
    def validate_success_states(cls, v: str | None) -> str | None:
        """Normalize to an uppercase comma-separated list."""
        if v is None:
            return None
        states = [s.strip().upper() for s in v.split(",") if s.strip()]
        if "RUNNING" in states:
            raise ValueError("crawler_success_states cannot contain RUNNING")
        return ",".join(states) or None

    @field_validator("crawler_s3_path", "athena_output_location")
    @classmethod
    def validate_s3_uri(cls, v: str | None) -> str | None:
        """Ensure S3 locations are s3:// URIs ending with a slash."""
        if v is None:
            return None
        if not v.startswith("s3://"):
            raise ValueError(f"expected an s3:// URI, got '{v}'")
        return v if v.endswith("/") else f"{v}/"

    @property
    def success_states(self) -> frozenset[str] | None:
        """Strict crawl-outcome allow-list, or None for permissive mode."""
        if not self.crawler_success_states:
            return None
        return frozenset(self.crawler_success_states.split(","))

    @property
    def source_path(self) -> str:
        """S3 path scanned by the crawler."""
        return self.crawler_s3_path or f"s3://{self.bucket_name}/"

    @property
    def output_location(self) -> str:
        """S3 location Athena writes query results to."""
        return self.athena_output_location or f"s3://{self.bucket_name}/athena-results/"


# Global settings instance — loaded once at import
settings = Settings()
