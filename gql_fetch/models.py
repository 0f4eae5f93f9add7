"""
GraphQL models and data structures.

This module defines the request and response shapes of a GraphQL exchange
and the header-set helpers used to build outgoing requests.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Dict, Iterable, Iterator, List, Mapping, Optional, Sequence, Tuple, Union

from multidict import CIMultiDict, MultiMapping
from pydantic import BaseModel, ConfigDict, Field, field_validator

CONTENT_TYPE_JSON = "application/json; charset=utf-8"

HeaderValues = Union[str, Sequence[str]]
HeadersInput = Union[
    "MultiMapping[str]",
    Mapping[str, HeaderValues],
    Iterable[Tuple[str, str]],
]


def iter_header_items(headers: Optional[HeadersInput]) -> Iterator[Tuple[str, str]]:
    """
    Iterate ``(name, value)`` pairs of any accepted header input.

    Accepts a multidict (every stored pair), a mapping of name to a single
    value or a sequence of values, or an iterable of pairs.
    """
    if headers is None:
        return
    if isinstance(headers, MultiMapping):
        yield from headers.items()
    elif isinstance(headers, Mapping):
        for name, values in headers.items():
            if isinstance(values, str):
                yield name, values
            else:
                for value in values:
                    yield name, value
    else:
        for name, value in headers:
            yield name, value


def add_headers(target: CIMultiDict[str], headers: Optional[HeadersInput]) -> None:
    """Append every header of ``headers`` to ``target`` without replacing values."""
    for name, value in iter_header_items(headers):
        target.add(name, value)


def merge_headers(*header_sets: Optional[HeadersInput]) -> CIMultiDict[str]:
    """
    Merge header sets additively into a new multidict.

    Sets are applied in order; a name present in several sets ends up with
    all of their values. None of the inputs is modified.
    """
    merged: CIMultiDict[str] = CIMultiDict()
    for headers in header_sets:
        add_headers(merged, headers)
    return merged


def default_client_headers() -> CIMultiDict[str]:
    """Headers every client starts with."""
    return CIMultiDict(
        [
            ("Content-Type", CONTENT_TYPE_JSON),
            ("Accept", CONTENT_TYPE_JSON),
        ]
    )


@dataclass
class GraphQLRequest:
    """
    A single GraphQL operation to send.

    The query text is opaque: it is sent as-is and never parsed.
    An empty ``operation_name`` is treated as not set.

    Examples:
        ```python
        request = GraphQLRequest(
            query='''
                query continent($code: ID!) {
                    continent(code: $code) { code name }
                }
            ''',
            variables={"code": "AF"},
            operation_name="continent",
            headers={"X-Request-Id": "abc"},
        )
        ```
    """

    query: str
    variables: Optional[Dict[str, Any]] = None
    operation_name: Optional[str] = None
    headers: CIMultiDict[str] = field(default_factory=CIMultiDict)

    def __post_init__(self) -> None:
        if not self.operation_name:
            self.operation_name = None
        if not isinstance(self.headers, CIMultiDict):
            self.headers = merge_headers(self.headers)

    def set_variables(self, variables: Optional[Dict[str, Any]]) -> None:
        """Replace the request variables."""
        self.variables = variables

    def to_envelope(self) -> Dict[str, Any]:
        """
        Build the wire request envelope.

        ``variables`` and ``operationName`` are always present and are None
        (JSON null) when unset.
        """
        return {
            "query": self.query,
            "variables": self.variables,
            "operationName": self.operation_name,
        }


class SourceLocation(BaseModel):
    """Position in the query document an error refers to."""

    line: int
    column: int


class GraphQLErrorRecord(BaseModel):
    """
    A protocol-level error reported by the GraphQL server.

    Example payload:
        ```json
        {
            "message": "Name for character with ID 1002 could not be fetched.",
            "locations": [{"line": 6, "column": 7}],
            "path": ["hero", "heroFriends", 1, "name"],
            "extensions": {"code": "CAN_NOT_FETCH_BY_ID"}
        }
        ```
    """

    model_config = ConfigDict(extra="allow")

    message: str = ""
    locations: List[SourceLocation] = Field(default_factory=list)
    path: List[Union[str, int]] = Field(default_factory=list)
    extensions: Dict[str, Any] = Field(default_factory=dict)

    @field_validator("message", mode="before")
    @classmethod
    def _null_as_empty_str(cls, value: Any) -> Any:
        return "" if value is None else value

    @field_validator("locations", "path", mode="before")
    @classmethod
    def _null_as_empty_list(cls, value: Any) -> Any:
        return [] if value is None else value

    @field_validator("extensions", mode="before")
    @classmethod
    def _null_as_empty_dict(cls, value: Any) -> Any:
        return {} if value is None else value

    @property
    def code(self) -> Optional[str]:
        """The ``extensions.code`` value, if the server provided one."""
        code = self.extensions.get("code")
        return None if code is None else str(code)

    def __str__(self) -> str:
        return f"graphql error: {self.message}, on path {self.path}"


class ResponseEnvelope(BaseModel):
    """Error channel of the wire response envelope; ``data`` is decoded separately."""

    model_config = ConfigDict(extra="ignore")

    errors: Optional[List[GraphQLErrorRecord]] = None


@dataclass
class GraphQLResponse:
    """
    Result of a completed exchange.

    ``errors`` holds the protocol errors the server reported alongside
    (possibly partial) ``data``. It is empty when there were none.
    ``data`` is None when the caller asked for no data decoding.
    """

    data: Any = None
    errors: List[GraphQLErrorRecord] = field(default_factory=list)

    @property
    def has_errors(self) -> bool:
        """Check if the server reported protocol errors."""
        return len(self.errors) > 0

    @property
    def error_messages(self) -> List[str]:
        """Get list of error messages."""
        return [error.message for error in self.errors]

    def get_data(self, path: Optional[str] = None) -> Any:
        """
        Get data from result with optional path.

        Args:
            path: Dot-separated path to data (e.g., "user.profile.name")

        Returns:
            Data at the specified path, full data if no path, or None if
            the path does not exist
        """
        if self.data is None:
            return None

        if not path:
            return self.data

        current = self.data
        for key in path.split("."):
            if isinstance(current, Mapping) and key in current:
                current = current[key]
            elif isinstance(current, BaseModel) and hasattr(current, key):
                current = getattr(current, key)
            else:
                return None

        return current
