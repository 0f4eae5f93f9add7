"""
Configuration management for gql_fetch.

This module provides configuration models and loading from JSON files and
environment variables.
"""

from .loader import ConfigLoader, load_config
from .models import ClientConfig, GQLFetchSettings, LoggingConfig, LogLevel
from ..transport import TransportConfig

__all__ = [
    "ConfigLoader",
    "load_config",
    "ClientConfig",
    "GQLFetchSettings",
    "LoggingConfig",
    "LogLevel",
    "TransportConfig",
]
