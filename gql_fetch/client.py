"""
GraphQL client implementation.

This module provides a low-level GraphQL-over-HTTP client. Its aims are to
follow the GraphQL-over-HTTP conventions and to make every request and
response fully inspectable, not to be the fastest client around.

A :class:`GraphQLClient` is not safe for concurrent use and is not meant to
be: it keeps the state of the last exchange (headers and body sent, status,
headers and body received) in :attr:`GraphQLClient.inspect_run`, which is
reset at the beginning of every :meth:`GraphQLClient.run`. Use one client per
concurrent stream of requests.
"""

from __future__ import annotations

import asyncio
import json
import logging
from typing import Any, Dict, Mapping, MutableMapping, Optional

import aiohttp
from multidict import CIMultiDict
from pydantic import BaseModel, PydanticUserError, TypeAdapter, ValidationError

from .config.models import ClientConfig
from .context import ExchangeContext
from .exceptions import (
    ClientBusyError,
    DecodingError,
    EncodingError,
    HTTPStatusError,
    ReadError,
)
from .models import (
    GraphQLRequest,
    GraphQLResponse,
    HeadersInput,
    ResponseEnvelope,
    add_headers,
    default_client_headers,
    merge_headers,
)
from .transport import default_session

logger = logging.getLogger(__name__)

# Keys of GraphQLClient.inspect_run, in the order they are recorded.
INSPECT_REQUEST_BODY = "request_body"
INSPECT_REQUEST_HEADERS = "request_headers"
INSPECT_RESPONSE_STATUS = "response_status"
INSPECT_RESPONSE_HEADERS = "response_headers"
INSPECT_RESPONSE_COOKIES = "response_cookies"
INSPECT_RESPONSE_CONTENT_LENGTH = "response_content_length"
INSPECT_RESPONSE_BODY = "response_body"

InspectData = Dict[str, Any]


def _target_adapter(target: Any) -> Optional[TypeAdapter[Any]]:
    """Resolve how ``data`` is decoded; None or a mapping needs no adapter."""
    if target is None or isinstance(target, MutableMapping):
        return None
    message = (
        "target must be None, a type or a mutable mapping, "
        f"got {type(target).__name__} instance"
    )
    # Model instances expose their class schema hook, so pydantic accepts them.
    if isinstance(target, (BaseModel, list, tuple, set, frozenset)):
        raise TypeError(message)
    try:
        return TypeAdapter(target)
    except (PydanticUserError, TypeError) as e:
        raise TypeError(message) from e


class GraphQLClient:
    """
    Client for running GraphQL operations against one endpoint.

    Every request carries ``Content-Type`` and ``Accept`` headers of
    ``application/json; charset=utf-8``, then the client headers, then the
    request headers. Headers are always added, never replaced: a name set on
    both the client and the request is sent with both values. To replace a
    client header, assign it directly (``client.headers["Accept"] = ...``).

    Examples:
        Basic query:
        ```python
        client = GraphQLClient(
            "https://countries.trevorblades.com/",
            headers={"Authorization": "Bearer <token>"},
        )
        request = GraphQLRequest(
            '''
            query continent($code: ID!) {
                continent(code: $code) { code name }
            }
            ''',
            variables={"code": "AF"},
            operation_name="continent",
        )

        response = await client.run(request, dict)
        if response.has_errors:
            for error in response.errors:
                print(error)
        print(response.data["continent"]["name"])
        ```

        Decoding into a model:
        ```python
        class Continent(BaseModel):
            code: str
            name: str

        class Data(BaseModel):
            continent: Continent

        response = await client.run(request, Data)
        response.data.continent.name
        ```

        Inspecting the exchange afterwards:
        ```python
        client.inspect_run["request_headers"]
        client.inspect_run["response_body"]
        ```
    """

    def __init__(
        self,
        endpoint: str,
        *,
        headers: Optional[HeadersInput] = None,
        session: Optional[aiohttp.ClientSession] = None,
        immediate_close: bool = False,
        timeout: Optional[float] = None,
    ) -> None:
        """
        Initialize GraphQL client.

        Args:
            endpoint: GraphQL endpoint URL (not validated)
            headers: Headers added to every request, after the defaults
            session: aiohttp session to use; the shared default session
                for the running event loop is used if None
            immediate_close: Close the connection after each exchange
                instead of returning it to the pool
            timeout: Deadline in seconds applied when ``run`` is called
                without a context
        """
        self.endpoint = endpoint
        self.headers: CIMultiDict[str] = default_client_headers()
        add_headers(self.headers, headers)
        self.immediate_close = immediate_close
        self.timeout = timeout
        self._session = session

        # State of the last exchange; replaced at the start of every run.
        self.inspect_run: InspectData = {}
        self._running = False

    @classmethod
    def from_config(
        cls,
        config: ClientConfig,
        session: Optional[aiohttp.ClientSession] = None,
    ) -> "GraphQLClient":
        """Create a client from a :class:`ClientConfig`."""
        if config.endpoint is None:
            raise ValueError("ClientConfig.endpoint is required to create a client")
        return cls(
            config.endpoint,
            headers=config.headers,
            session=session,
            immediate_close=config.immediate_close,
            timeout=config.timeout,
        )

    @property
    def session(self) -> aiohttp.ClientSession:
        """The session used for exchanges."""
        return self._session if self._session is not None else default_session()

    @property
    def is_running(self) -> bool:
        """Check whether an exchange is in progress."""
        return self._running

    async def run(
        self,
        request: GraphQLRequest,
        target: Any = None,
        context: Optional[ExchangeContext] = None,
    ) -> GraphQLResponse:
        """
        Run one GraphQL exchange.

        Args:
            request: Operation to send
            target: Where to decode the ``data`` member: None skips data
                decoding, a type or annotation is validated with pydantic,
                and a mutable mapping is updated in place
            context: Cancellation/deadline context; a context with
                ``self.timeout`` (or no deadline) is used if None

        Returns:
            GraphQLResponse with decoded data and any protocol errors

        Raises:
            TypeError: If ``target`` is none of the accepted shapes; raised
                before anything is sent
            ContextCancelled: If the context is or becomes cancelled
            ContextDeadlineExceeded: If the context deadline passes
            ClientBusyError: If this client is already running an exchange
            EncodingError: If the request cannot be serialized
            aiohttp.ClientError: If the HTTP call itself fails
            HTTPStatusError: If the response status is not 200
            ReadError: If the response body cannot be read
            DecodingError: If the response is not a valid envelope
        """
        adapter = _target_adapter(target)

        if context is None:
            context = (
                ExchangeContext.with_timeout(self.timeout)
                if self.timeout is not None
                else ExchangeContext()
            )
        context.raise_if_done()

        if self._running:
            raise ClientBusyError(
                "client is already running an exchange; "
                "use separate clients for concurrent requests",
                url=self.endpoint,
            )

        self._running = True
        try:
            return await self._run(request, target, adapter, context)
        finally:
            self._running = False

    async def _run(
        self,
        request: GraphQLRequest,
        target: Any,
        adapter: Optional[TypeAdapter[Any]],
        context: ExchangeContext,
    ) -> GraphQLResponse:
        self.inspect_run = {}

        envelope = request.to_envelope()
        self.inspect_run[INSPECT_REQUEST_BODY] = envelope
        try:
            body = json.dumps(envelope, allow_nan=False).encode("utf-8")
        except (TypeError, ValueError) as e:
            raise EncodingError(
                f"encode body: {e}", url=self.endpoint, original_error=e
            ) from e

        headers = merge_headers(self.headers, request.headers)
        if self.immediate_close:
            headers["Connection"] = "close"
        self.inspect_run[INSPECT_REQUEST_HEADERS] = headers

        logger.debug(
            "POST %s (operation=%s, %d bytes)",
            self.endpoint,
            request.operation_name,
            len(body),
        )
        response = await context.bind(
            self.session.request("POST", self.endpoint, data=body, headers=headers)
        )

        try:
            self._record_response(response)

            if response.status != 200:
                logger.warning(
                    "GraphQL server %s returned HTTP %d", self.endpoint, response.status
                )
                raise HTTPStatusError(
                    f"HTTP Error {response.status}: "
                    "graphql server returned a non-200 status code",
                    status_code=response.status,
                    url=self.endpoint,
                )

            try:
                raw = await context.bind(response.read())
            except (aiohttp.ClientError, asyncio.TimeoutError, OSError) as e:
                raise ReadError(
                    f"reading body: {e}", url=self.endpoint, original_error=e
                ) from e

            text = raw.decode("utf-8", errors="replace")
            self.inspect_run[INSPECT_RESPONSE_BODY] = text
            logger.debug(
                "Received HTTP %d from %s (%d bytes)",
                response.status,
                self.endpoint,
                len(raw),
            )

            return self._decode(raw, text, target, adapter)
        finally:
            if self.immediate_close:
                response.close()
            else:
                response.release()

    def _record_response(self, response: aiohttp.ClientResponse) -> None:
        self.inspect_run[INSPECT_RESPONSE_STATUS] = response.status
        self.inspect_run[INSPECT_RESPONSE_HEADERS] = CIMultiDict(response.headers)
        self.inspect_run[INSPECT_RESPONSE_COOKIES] = response.cookies
        self.inspect_run[INSPECT_RESPONSE_CONTENT_LENGTH] = response.content_length

    def _decode(
        self,
        raw: bytes,
        text: str,
        target: Any,
        adapter: Optional[TypeAdapter[Any]],
    ) -> GraphQLResponse:
        try:
            payload = json.loads(raw)
        except ValueError as e:
            raise self._decoding_error(f"decoding response: {e}", text, e) from e

        if not isinstance(payload, dict):
            raise self._decoding_error(
                "decoding response: expected a JSON object, "
                f"got {type(payload).__name__}",
                text,
            )

        try:
            envelope = ResponseEnvelope.model_validate(payload)
        except ValidationError as e:
            raise self._decoding_error(f"decoding response errors: {e}", text, e) from e

        data = self._decode_data(payload.get("data"), target, adapter, text)
        errors = envelope.errors or []
        if errors:
            logger.info(
                "GraphQL server %s returned %d error(s)", self.endpoint, len(errors)
            )
        return GraphQLResponse(data=data, errors=errors)

    def _decode_data(
        self,
        data: Any,
        target: Any,
        adapter: Optional[TypeAdapter[Any]],
        text: str,
    ) -> Any:
        if target is None:
            return None

        if isinstance(target, MutableMapping):
            if data is None:
                return target
            if not isinstance(data, Mapping):
                raise self._decoding_error(
                    "decoding response data: expected a JSON object, "
                    f"got {type(data).__name__}",
                    text,
                )
            target.update(data)
            return target

        # Partial responses may carry "data": null next to errors.
        if data is None:
            return None

        try:
            return adapter.validate_python(data)
        except ValidationError as e:
            raise self._decoding_error(f"decoding response data: {e}", text, e) from e

    def _decoding_error(
        self,
        message: str,
        text: str,
        cause: Optional[BaseException] = None,
    ) -> DecodingError:
        return DecodingError(
            message, url=self.endpoint, original_error=cause, response_text=text
        )

    def __repr__(self) -> str:
        return f"<GraphQLClient endpoint={self.endpoint!r}>"
