"""
Logging manager for gql_fetch.

This module configures the ``gql_fetch`` logger hierarchy. It does not touch
the root logger, so applications keep control of their own logging.
"""

import logging
import logging.handlers
import sys
from pathlib import Path
from typing import Dict

from ..config.models import LoggingConfig
from .filters import SensitiveDataFilter
from .formatters import ColoredFormatter, StructuredFormatter

LIBRARY_LOGGER = "gql_fetch"


class LoggingManager:
    """Centralized logging manager."""

    def __init__(self, logger_name: str = LIBRARY_LOGGER) -> None:
        """
        Initialize logging manager.

        Args:
            logger_name: Name of the logger hierarchy to configure
        """
        self.logger_name = logger_name
        self._configured = False
        self._handlers: Dict[str, logging.Handler] = {}
        self._loggers: Dict[str, logging.Logger] = {}

    @property
    def logger(self) -> logging.Logger:
        return logging.getLogger(self.logger_name)

    def setup_logging(self, config: LoggingConfig) -> None:
        """
        Setup logging based on configuration.

        Args:
            config: Logging configuration
        """
        if self._configured:
            self.cleanup()

        self.logger.setLevel(getattr(logging, config.level.value))
        self.logger.propagate = False

        if config.enable_console:
            self._setup_console_handler(config)

        if config.file_path:
            self._setup_file_handler(config)

        self._setup_component_loggers(config)

        self._configured = True
        self.logger.debug("Logging configured (level=%s)", config.level.value)

    def _formatter(self, config: LoggingConfig, console: bool) -> logging.Formatter:
        if config.enable_structured:
            return StructuredFormatter()
        if console:
            return ColoredFormatter(config.format)
        return logging.Formatter(config.format)

    def _setup_console_handler(self, config: LoggingConfig) -> None:
        """Setup console logging handler."""
        handler = logging.StreamHandler(sys.stderr)
        handler.setFormatter(self._formatter(config, console=True))
        if config.mask_sensitive:
            handler.addFilter(SensitiveDataFilter())
        self.add_handler("console", handler)

    def _setup_file_handler(self, config: LoggingConfig) -> None:
        """Setup rotating file logging handler."""
        assert config.file_path is not None
        log_path = Path(config.file_path)
        log_path.parent.mkdir(parents=True, exist_ok=True)

        handler = logging.handlers.RotatingFileHandler(
            filename=str(log_path),
            maxBytes=config.max_file_size,
            backupCount=config.backup_count,
            encoding="utf-8",
        )
        handler.setFormatter(self._formatter(config, console=False))
        if config.mask_sensitive:
            handler.addFilter(SensitiveDataFilter())
        self.add_handler("file", handler)

    def _setup_component_loggers(self, config: LoggingConfig) -> None:
        """Setup component-specific loggers."""
        for component, level in config.component_levels.items():
            logger = logging.getLogger(component)
            logger.setLevel(getattr(logging, level.value))
            self._loggers[component] = logger

    def get_logger(self, name: str) -> logging.Logger:
        """
        Get logger for specific component.

        Args:
            name: Logger name

        Returns:
            Logger instance
        """
        return logging.getLogger(name)

    def add_handler(self, name: str, handler: logging.Handler) -> None:
        """
        Add a named handler to the library logger.

        Args:
            name: Handler name
            handler: Logging handler
        """
        self.remove_handler(name)
        self.logger.addHandler(handler)
        self._handlers[name] = handler

    def remove_handler(self, name: str) -> None:
        """
        Remove logging handler.

        Args:
            name: Handler name
        """
        handler = self._handlers.pop(name, None)
        if handler is not None:
            self.logger.removeHandler(handler)
            handler.close()

    def cleanup(self) -> None:
        """Remove and close every handler added by this manager."""
        for name in list(self._handlers):
            self.remove_handler(name)
        for logger in self._loggers.values():
            logger.setLevel(logging.NOTSET)
        self._loggers.clear()
        self.logger.setLevel(logging.NOTSET)
        self.logger.propagate = True
        self._configured = False

    def is_configured(self) -> bool:
        """Check if logging is configured."""
        return self._configured


# Global logging manager instance
_logging_manager = LoggingManager()


def setup_logging(config: LoggingConfig) -> None:
    """
    Setup logging with configuration.

    Args:
        config: Logging configuration
    """
    _logging_manager.setup_logging(config)


def get_logger(name: str) -> logging.Logger:
    """
    Get logger for component.

    Args:
        name: Logger name

    Returns:
        Logger instance
    """
    return _logging_manager.get_logger(name)


def cleanup_logging() -> None:
    """Cleanup logging system."""
    _logging_manager.cleanup()
