"""
gql_fetch - a low-level, inspectable GraphQL-over-HTTP client for asyncio.

The client sends one GraphQL operation per exchange, returns decoded data
together with any protocol errors the server reported, and keeps a snapshot
of everything that went over the wire for inspection afterwards.
"""

__version__ = "0.1.0"

from .client import GraphQLClient, InspectData
from .config import ClientConfig, GQLFetchSettings, LoggingConfig, load_config
from .context import ExchangeContext
from .exceptions import (
    ClientBusyError,
    ConfigurationError,
    ContextCancelled,
    ContextDeadlineExceeded,
    ContextError,
    DecodingError,
    EncodingError,
    GQLFetchError,
    HTTPStatusError,
    ReadError,
    TransportError,
)
from .models import (
    GraphQLErrorRecord,
    GraphQLRequest,
    GraphQLResponse,
    SourceLocation,
    merge_headers,
)
from .transport import TransportConfig, close_default_session, create_session, default_session

__all__ = [
    "__version__",
    # Client
    "GraphQLClient",
    "InspectData",
    "ExchangeContext",
    # Models
    "GraphQLRequest",
    "GraphQLResponse",
    "GraphQLErrorRecord",
    "SourceLocation",
    "merge_headers",
    # Transport
    "TransportConfig",
    "create_session",
    "default_session",
    "close_default_session",
    # Configuration
    "ClientConfig",
    "GQLFetchSettings",
    "LoggingConfig",
    "load_config",
    # Exceptions
    "GQLFetchError",
    "ContextError",
    "ContextCancelled",
    "ContextDeadlineExceeded",
    "ClientBusyError",
    "EncodingError",
    "TransportError",
    "HTTPStatusError",
    "ReadError",
    "DecodingError",
    "ConfigurationError",
]
