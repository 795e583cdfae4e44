"""Configuration models for the Doppler client.

Pydantic models for client, retry and logging settings. Configuration can be
built in code or loaded from a YAML file:

    api_host: api.doppler.com
    timeout_seconds: 30
    retry:
      max_attempts: 5
      base_delay_seconds: 0.5
    logging:
      level: INFO
      format: console
"""

from __future__ import annotations

from pathlib import Path
from typing import Literal

import yaml
from pydantic import BaseModel, Field, field_validator, model_validator

from secrets_fetch.core.constants import (
    BASE_DELAY_SECONDS,
    DEFAULT_API_HOST,
    DEFAULT_TIMEOUT_SECONDS,
    MAX_ATTEMPTS,
)


class RetryConfig(BaseModel):
    """Configuration for retry behavior of API operations."""

    max_attempts: int = Field(
        default=MAX_ATTEMPTS,
        ge=1,
        description="Total attempts per operation, first try included",
    )
    base_delay_seconds: float = Field(
        default=BASE_DELAY_SECONDS,
        ge=0,
        description="Base delay for exponential backoff and upper bound of jitter",
    )


class LogConfig(BaseModel):
    """Configuration for structured logging."""

    level: Literal["DEBUG", "INFO", "WARNING", "ERROR"] = Field(
        default="INFO",
        description="Minimum log level to capture",
    )
    format: Literal["json", "console", "both"] = Field(
        default="console",
        description="Output format: json for structured, console for human-readable, "
        "both for console to stderr and JSON to file",
    )
    file_path: Path | None = Field(
        default=None,
        description="Path for log file output (required if format='both')",
    )
    max_file_size_mb: int = Field(
        default=50,
        gt=0,
        le=1000,
        description="Maximum log file size before rotation (MB)",
    )
    backup_count: int = Field(
        default=5,
        ge=0,
        le=100,
        description="Number of rotated log files to keep",
    )
    include_timestamps: bool = Field(
        default=True,
        description="Include ISO8601 UTC timestamps in log entries",
    )
    include_context: bool = Field(
        default=True,
        description="Include operation context (operation, request_id) in log entries",
    )

    @model_validator(mode="after")
    def _check_file_path_required(self) -> LogConfig:
        """Validate that file_path is set when format requires file output."""
        if self.format == "both" and self.file_path is None:
            raise ValueError(
                f"file_path is required when format='{self.format}'"
            )
        return self


class ClientConfig(BaseModel):
    """Top-level configuration for the Doppler client."""

    api_host: str = Field(
        default=DEFAULT_API_HOST,
        min_length=1,
        description="Doppler API host, without scheme or path",
    )
    timeout_seconds: float = Field(
        default=DEFAULT_TIMEOUT_SECONDS,
        gt=0,
        description="Per-request timeout in seconds",
    )
    retry: RetryConfig = Field(default_factory=RetryConfig)
    logging: LogConfig = Field(default_factory=LogConfig)

    @field_validator("api_host")
    @classmethod
    def _validate_api_host(cls, value: str) -> str:
        value = value.strip()
        if not value:
            raise ValueError("api_host must not be empty")
        if "://" in value or "/" in value:
            raise ValueError(
                f"api_host must be a bare host name (got {value!r}); "
                "the https scheme and API paths are added by the client"
            )
        return value

    @classmethod
    def from_yaml(cls, path: Path) -> ClientConfig:
        """Load client configuration from a YAML file."""
        with open(path) as f:
            data = yaml.safe_load(f)
        return cls.model_validate(data or {})

    @classmethod
    def from_yaml_string(cls, yaml_str: str) -> ClientConfig:
        """Load client configuration from a YAML string."""
        data = yaml.safe_load(yaml_str)
        return cls.model_validate(data or {})
