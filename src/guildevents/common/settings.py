"""Configuration management using pydantic-settings."""

from functools import lru_cache
from typing import Literal
from urllib.parse import urlparse

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

from guildevents.common.errors import BucketConfigError


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_prefix="GUILDEVENTS_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # Bucket
    bucket_region: str = Field(
        default="",
        description="Region identifier of the bucket (e.g. eu-west-2)",
    )
    bucket_host: str | None = Field(
        default=None,
        description="Host used in the signed 'host' header (defaults to the base URL host)",
    )
    bucket_base_url: str = Field(
        default="",
        description="Base URL of the bucket, e.g. https://my-bucket.s3.eu-west-2.amazonaws.com/",
    )
    access_key: str | None = Field(
        default=None,
        description="Access key ID used in the credential scope",
    )
    secret_key: str | None = Field(
        default=None,
        repr=False,
        description="Secret access key used to derive the signing key",
    )

    # Timeouts
    http_timeout: float = Field(
        default=30.0,
        description="HTTP request timeout in seconds",
    )

    # Local cache
    cache_storage: Literal["memory", "sqlite"] = Field(
        default="sqlite",
        description="Storage backend for fetched resources",
    )
    cache_sqlite_path: str = Field(
        default="data/resources.sqlite",
        description="SQLite path for the resource cache",
    )

    # Logging
    log_level: str = Field(
        default="INFO",
        description="Root log level",
    )
    log_json: bool = Field(
        default=False,
        description="Render log lines as JSON instead of console output",
    )

    # Tracing
    tracing_enabled: bool = Field(
        default=False,
        description="Enable OpenTelemetry tracing",
    )
    tracing_otlp_endpoint: str | None = Field(
        default=None,
        description="OTLP collector endpoint (e.g. http://localhost:4317)",
    )
    tracing_console: bool = Field(
        default=False,
        description="Emit traces to console (debug only)",
    )
    tracing_service_name: str | None = Field(
        default=None,
        description="Service name for tracing (defaults to guildevents)",
    )

    @property
    def effective_bucket_host(self) -> str:
        """Get the signed host (bucket_host or fallback to the base URL host)."""
        if self.bucket_host:
            return self.bucket_host
        return urlparse(self.bucket_base_url).netloc

    def require_credentials(self) -> None:
        """Raise BucketConfigError unless every bucket setting is present."""
        missing = [
            name
            for name, value in (
                ("bucket_region", self.bucket_region),
                ("bucket_base_url", self.bucket_base_url),
                ("bucket_host", self.effective_bucket_host),
                ("access_key", self.access_key),
                ("secret_key", self.secret_key),
            )
            if not value
        ]
        if missing:
            raise BucketConfigError(missing)


@lru_cache
def get_settings() -> Settings:
    """Get cached application settings."""
    return Settings()
