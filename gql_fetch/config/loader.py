"""
Configuration loader for gql_fetch.

This module loads configuration from a JSON file and from ``GQL_FETCH_*``
environment variables. Environment variables take precedence over the file.
"""

from __future__ import annotations

import json
import logging
import os
from pathlib import Path
from typing import Any, Callable, Dict, Mapping, Optional, Tuple, Union

from pydantic import ValidationError

from ..exceptions import ConfigurationError
from .models import GQLFetchSettings

logger = logging.getLogger(__name__)


def _parse_bool(value: str) -> bool:
    lower = value.strip().lower()
    if lower in ("true", "yes", "1", "on"):
        return True
    if lower in ("false", "no", "0", "off"):
        return False
    raise ValueError(f"not a boolean: {value!r}")


class ConfigLoader:
    """Configuration loader with support for a JSON file and the environment."""

    def __init__(self, env_prefix: str = "GQL_FETCH_") -> None:
        """
        Initialize configuration loader.

        Args:
            env_prefix: Prefix of recognised environment variables
        """
        self.config_paths = [
            Path("gql_fetch.json"),
            Path("config/gql_fetch.json"),
            Path.home() / ".gql_fetch" / "config.json",
        ]
        self.env_prefix = env_prefix

        # Environment variable -> (config path, converter)
        self.env_mappings: Dict[str, Tuple[Tuple[str, ...], Callable[[str], Any]]] = {
            # Client
            f"{env_prefix}ENDPOINT": (("client", "endpoint"), str),
            f"{env_prefix}HEADERS": (("client", "headers"), json.loads),
            f"{env_prefix}IMMEDIATE_CLOSE": (("client", "immediate_close"), _parse_bool),
            f"{env_prefix}TIMEOUT": (("client", "timeout"), float),
            # Transport
            f"{env_prefix}CONNECT_TIMEOUT": (("transport", "connect_timeout"), float),
            f"{env_prefix}MAX_CONNECTIONS": (("transport", "max_connections"), int),
            f"{env_prefix}USER_AGENT": (("transport", "user_agent"), str),
            # Logging
            f"{env_prefix}LOG_LEVEL": (("logging", "level"), str.upper),
            f"{env_prefix}LOG_FILE": (("logging", "file_path"), str),
            f"{env_prefix}LOG_STRUCTURED": (("logging", "enable_structured"), _parse_bool),
        }

    def load_config(
        self,
        config_file: Optional[Union[str, Path]] = None,
        environ: Optional[Mapping[str, str]] = None,
    ) -> GQLFetchSettings:
        """
        Load configuration from all available sources.

        Args:
            config_file: Specific config file to load; the default locations
                are searched if None
            environ: Environment to read (``os.environ`` if None)

        Returns:
            GQLFetchSettings with merged configuration

        Raises:
            ConfigurationError: If a source cannot be read or the merged
                configuration is invalid
        """
        config_data: Dict[str, Any] = {}

        file_config = self._load_from_file(config_file)
        if file_config:
            config_data.update(file_config)

        env_config = self._load_from_environment(os.environ if environ is None else environ)
        if env_config:
            config_data = self._deep_merge(config_data, env_config)

        try:
            return GQLFetchSettings.model_validate(config_data)
        except ValidationError as e:
            raise ConfigurationError(f"Invalid configuration: {e}", original_error=e) from e

    def _load_from_file(
        self, config_file: Optional[Union[str, Path]] = None
    ) -> Optional[Dict[str, Any]]:
        """Load configuration from file."""
        if config_file:
            config_path = Path(config_file)
            if not config_path.exists():
                raise ConfigurationError(f"Config file not found: {config_path}")
            return self._parse_config_file(config_path)

        for config_path in self.config_paths:
            if config_path.exists():
                return self._parse_config_file(config_path)

        return None

    def _parse_config_file(self, config_path: Path) -> Dict[str, Any]:
        """Parse a JSON configuration file."""
        if config_path.suffix.lower() != ".json":
            raise ConfigurationError(
                f"Unsupported config file format: {config_path.suffix}"
            )
        try:
            with open(config_path, "r", encoding="utf-8") as f:
                data = json.load(f) or {}
        except (OSError, ValueError) as e:
            raise ConfigurationError(
                f"Failed to parse config file {config_path}: {e}", original_error=e
            ) from e

        if not isinstance(data, dict):
            raise ConfigurationError(f"Config file {config_path} must hold a JSON object")
        logger.debug("Loaded configuration from %s", config_path)
        return data

    def _load_from_environment(self, environ: Mapping[str, str]) -> Dict[str, Any]:
        """Load configuration from environment variables."""
        config: Dict[str, Any] = {}

        for env_var, (config_path, convert) in self.env_mappings.items():
            value = environ.get(env_var)
            if value is None:
                continue
            try:
                converted_value = convert(value)
            except ValueError as e:
                raise ConfigurationError(
                    f"Invalid value for {env_var}: {e}", original_error=e
                ) from e

            current = config
            for key in config_path[:-1]:
                current = current.setdefault(key, {})
            current[config_path[-1]] = converted_value

        return config

    def _deep_merge(
        self, base: Dict[str, Any], override: Dict[str, Any]
    ) -> Dict[str, Any]:
        """Deep merge two dictionaries."""
        result = base.copy()

        for key, value in override.items():
            if (
                key in result
                and isinstance(result[key], dict)
                and isinstance(value, dict)
            ):
                result[key] = self._deep_merge(result[key], value)
            else:
                result[key] = value

        return result


def load_config(
    config_file: Optional[Union[str, Path]] = None,
    environ: Optional[Mapping[str, str]] = None,
) -> GQLFetchSettings:
    """Load configuration using a default :class:`ConfigLoader`."""
    return ConfigLoader().load_config(config_file, environ)
