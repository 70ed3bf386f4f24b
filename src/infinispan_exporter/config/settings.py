"""
Exporter settings using Pydantic.

Provides environment-based configuration loading with the
INFINISPAN_EXPORTER_ prefix.
"""

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

from infinispan_exporter.collector.assembler import FailurePolicy


class Settings(BaseSettings):
    """Exporter settings."""

    # Jolokia agent
    jolokia_url: str = "http://localhost:8080/jolokia"
    jolokia_username: str | None = None
    jolokia_password: str | None = None

    # HTTP client settings
    http_timeout: float = Field(10.0, gt=0)
    http_max_retries: int = Field(3, ge=0)
    http_retry_backoff_factor: float = Field(0.5, ge=0)

    # Collection
    failure_policy: FailurePolicy = FailurePolicy.ISOLATE

    # Scrape endpoint
    listen_address: str = "0.0.0.0"
    listen_port: int = Field(9404, ge=0, le=65535)

    # Logging
    log_level: str = "INFO"
    log_json: bool = True

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        env_prefix="INFINISPAN_EXPORTER_",
        extra="ignore",
    )
