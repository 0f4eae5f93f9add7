"""
Exception hierarchy for gql_fetch.

Every failure raised by this library derives from :class:`GQLFetchError`,
except transport failures, which are the underlying aiohttp exceptions
propagated unchanged (see :data:`TransportError`).

GraphQL protocol errors are not exceptions: a successful exchange carries
them on :attr:`gql_fetch.models.GraphQLResponse.errors`.
"""

from __future__ import annotations

from typing import Any, Optional

import aiohttp

# Transport-level failures (connection refused, DNS, TLS, ...) reach the caller
# as the aiohttp exception that caused them.
TransportError = aiohttp.ClientError


class GQLFetchError(Exception):
    """
    Base exception for all gql_fetch operations.

    Attributes:
        message: Human-readable error message
        url: Endpoint that was being called (if applicable)
        original_error: Wrapped underlying exception, if any
        details: Additional error details as keyword arguments
    """

    def __init__(
        self,
        message: str,
        url: Optional[str] = None,
        original_error: Optional[BaseException] = None,
        **kwargs: Any,
    ) -> None:
        super().__init__(message)
        self.message = message
        self.url = url
        self.original_error = original_error
        self.details = kwargs


class ContextError(GQLFetchError):
    """Raised when an exchange context is done before or during an exchange."""

    pass


class ContextCancelled(ContextError):
    """The exchange context was cancelled."""

    def __init__(self, message: str = "context cancelled", **kwargs: Any) -> None:
        super().__init__(message, **kwargs)


class ContextDeadlineExceeded(ContextError):
    """The exchange context's deadline passed."""

    def __init__(
        self,
        message: str = "context deadline exceeded",
        timeout_value: Optional[float] = None,
        **kwargs: Any,
    ) -> None:
        super().__init__(message, **kwargs)
        self.timeout_value = timeout_value


class ClientBusyError(GQLFetchError):
    """
    Raised when an exchange is started on a client that is already running one.

    A client handles one exchange at a time; use separate clients for
    concurrent requests.
    """

    pass


class EncodingError(GQLFetchError):
    """Raised when the request envelope cannot be serialized."""

    pass


class HTTPStatusError(GQLFetchError):
    """Raised when the server answers with a status other than 200 OK."""

    def __init__(
        self,
        message: str,
        status_code: int,
        url: Optional[str] = None,
        **kwargs: Any,
    ) -> None:
        super().__init__(message, url, **kwargs)
        self.status_code = status_code


class ReadError(GQLFetchError):
    """Raised when the response body cannot be read completely."""

    pass


class DecodingError(GQLFetchError):
    """Raised when the response body is not a valid GraphQL response envelope."""

    def __init__(
        self,
        message: str,
        url: Optional[str] = None,
        original_error: Optional[BaseException] = None,
        response_text: Optional[str] = None,
        **kwargs: Any,
    ) -> None:
        super().__init__(message, url, original_error, **kwargs)
        self.response_text = response_text


class ConfigurationError(GQLFetchError):
    """Raised when configuration cannot be loaded or is invalid."""

    pass
