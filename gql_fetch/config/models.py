"""
Configuration models for gql_fetch.

This module defines the configuration data models with validation and defaults.
"""

from __future__ import annotations

from enum import Enum
from pathlib import Path
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator

from ..transport import TransportConfig


class LogLevel(str, Enum):
    """Logging levels."""

    DEBUG = "DEBUG"
    INFO = "INFO"
    WARNING = "WARNING"
    ERROR = "ERROR"
    CRITICAL = "CRITICAL"


class LoggingConfig(BaseModel):
    """Logging configuration."""

    level: LogLevel = Field(default=LogLevel.WARNING, description="Level of the gql_fetch logger")
    format: str = Field(
        default="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
        description="Log message format",
    )
    file_path: Optional[Path] = Field(default=None, description="Log file path")
    max_file_size: int = Field(
        default=10 * 1024 * 1024, ge=1, description="Max log file size in bytes"
    )
    backup_count: int = Field(default=5, ge=0, description="Number of backup log files")
    enable_console: bool = Field(default=True, description="Enable console logging")
    enable_structured: bool = Field(
        default=False, description="Enable structured JSON logging"
    )
    mask_sensitive: bool = Field(
        default=True, description="Mask credentials and tokens in log messages"
    )

    # Component-specific log levels, e.g. {"gql_fetch.client": "DEBUG"}
    component_levels: Dict[str, LogLevel] = Field(
        default_factory=dict, description="Per-component log levels"
    )


class ClientConfig(BaseModel):
    """Configuration for a GraphQLClient."""

    model_config = ConfigDict(extra="forbid")

    endpoint: Optional[str] = Field(default=None, description="GraphQL endpoint URL")
    headers: Dict[str, List[str]] = Field(
        default_factory=dict, description="Headers added to every request"
    )
    immediate_close: bool = Field(
        default=False, description="Close the connection after each exchange"
    )
    timeout: Optional[float] = Field(
        default=None, gt=0, description="Per-exchange deadline in seconds"
    )

    @field_validator("headers", mode="before")
    @classmethod
    def single_values_as_lists(cls, v: Any) -> Any:
        """Accept a plain string as a single header value."""
        if isinstance(v, dict):
            return {
                name: [values] if isinstance(values, str) else values
                for name, values in v.items()
            }
        return v


class GQLFetchSettings(BaseModel):
    """Top-level gql_fetch configuration."""

    client: ClientConfig = Field(default_factory=ClientConfig)
    transport: TransportConfig = Field(default_factory=TransportConfig)
    logging: LoggingConfig = Field(default_factory=LoggingConfig)
