"""
Shared test fixtures and configuration for the gql_fetch test suite.
"""

import json
from contextlib import asynccontextmanager
from typing import Any, AsyncGenerator, AsyncIterator, Awaitable, Callable, Dict, List

import aioresponses
import pytest
from aiohttp import ClientSession, web
from aiohttp.test_utils import TestServer

from gql_fetch import GraphQLClient, GraphQLRequest
from gql_fetch.logging import cleanup_logging

ENDPOINT = "https://api.example.com/graphql"

Handler = Callable[[web.Request], Awaitable[web.StreamResponse]]


@pytest.fixture(autouse=True)
def reset_logging():
    """Undo logging configuration done by a test."""
    yield
    cleanup_logging()


@pytest.fixture
def mock_aiohttp():
    """Mock aiohttp responses for testing."""
    with aioresponses.aioresponses() as m:
        yield m


@pytest.fixture
async def session() -> AsyncGenerator[ClientSession, None]:
    """An aiohttp session owned by the test."""
    async with ClientSession() as s:
        yield s


@pytest.fixture
def client(session: ClientSession) -> GraphQLClient:
    """A client bound to the test session."""
    return GraphQLClient(ENDPOINT, session=session)


@pytest.fixture
def continent_request() -> GraphQLRequest:
    """A request with variables and an operation name."""
    return GraphQLRequest(
        """
        query continent($code: ID!) {
            continent(code: $code) {
                code
                name
            }
        }
        """,
        variables={"code": "AF"},
        operation_name="continent",
    )


@pytest.fixture
def sample_error_payload() -> Dict[str, Any]:
    """A response with partial data and one protocol error."""
    return {
        "data": {"hero": {"name": "R2-D2", "heroFriends": [{"name": "Luke"}, None]}},
        "errors": [
            {
                "message": "Name for character with ID 1002 could not be fetched.",
                "locations": [{"line": 6, "column": 7}],
                "path": ["hero", "heroFriends", 1, "name"],
                "extensions": {
                    "code": "CAN_NOT_FETCH_BY_ID",
                    "timestamp": "Fri Feb 9 14:33:09 UTC 2018",
                },
            }
        ],
    }


def sent_requests(mock: aioresponses.aioresponses) -> List[Any]:
    """All requests recorded by aioresponses, in no particular key order."""
    return [call for calls in mock.requests.values() for call in calls]


def sent_body(call: Any) -> Dict[str, Any]:
    """Decode the JSON body of a recorded aioresponses call."""
    return json.loads(call.kwargs["data"])


@asynccontextmanager
async def graphql_server(handler: Handler) -> AsyncIterator[TestServer]:
    """Serve ``handler`` at ``/graphql`` on a local test server."""
    app = web.Application()
    app.router.add_post("/graphql", handler)
    async with TestServer(app) as server:
        yield server
