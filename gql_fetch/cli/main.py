"""
gql-fetch command-line tool.

Runs a single GraphQL exchange and prints the decoded data and protocol
errors as JSON. With ``--inspect`` the client's diagnostic snapshot (headers
and body sent, status, headers and body received) is written to stderr.

Exit status: 0 on a clean exchange, 1 on failure, 2 on usage errors and
3 when the server reported GraphQL errors.
"""

import asyncio
import json
import sys
from pathlib import Path
from typing import Any, Dict, List, Optional, TextIO, Tuple

import aiohttp
import click

from .. import __version__
from ..client import GraphQLClient
from ..config import ClientConfig, LoggingConfig, LogLevel, TransportConfig, load_config
from ..exceptions import ConfigurationError, GQLFetchError
from ..logging import setup_logging
from ..models import GraphQLRequest, GraphQLResponse
from ..transport import create_session
from .utils import parse_headers, parse_variables, to_jsonable

EXIT_OK = 0
EXIT_FAILURE = 1
EXIT_GRAPHQL_ERRORS = 3


async def run_exchange(
    client_config: ClientConfig,
    transport_config: TransportConfig,
    request: GraphQLRequest,
) -> Tuple[GraphQLClient, Optional[GraphQLResponse], Optional[BaseException]]:
    """
    Run one exchange with a session created for it.

    Returns the client (for its diagnostic snapshot), the response, and the
    failure, exactly one of which is not None.
    """
    async with create_session(transport_config) as session:
        client = GraphQLClient.from_config(client_config, session=session)
        try:
            response = await client.run(request, Any)
        except (GQLFetchError, aiohttp.ClientError, asyncio.TimeoutError) as e:
            return client, None, e
        return client, response, None


@click.command()
@click.version_option(__version__, prog_name="gql-fetch")
@click.argument("query_file", type=click.File("r"))
@click.option("--endpoint", "-e", help="GraphQL endpoint URL (overrides config)")
@click.option("--header", "-H", "headers", multiple=True, help='Request header "Name: value" (repeatable)')
@click.option("--var", "-V", "var_strings", multiple=True, help="Variable name=value, value parsed as JSON (repeatable)")
@click.option("--variables-file", type=click.Path(exists=True, dir_okay=False, path_type=Path), help="JSON file with variables")
@click.option("--operation-name", "-o", default="", help="Operation to run in a multi-operation document")
@click.option("--timeout", "-t", type=click.FloatRange(min=0, min_open=True), help="Exchange deadline in seconds")
@click.option("--immediate-close", is_flag=True, help="Close the connection after the exchange")
@click.option("--inspect", is_flag=True, help="Write the diagnostic snapshot to stderr")
@click.option("--config", "-c", "config_file", type=click.Path(exists=True, dir_okay=False), help="JSON configuration file")
@click.option("--verbose", "-v", is_flag=True, help="Enable debug logging")
def main(
    query_file: TextIO,
    endpoint: Optional[str],
    headers: Tuple[str, ...],
    var_strings: Tuple[str, ...],
    variables_file: Optional[Path],
    operation_name: str,
    timeout: Optional[float],
    immediate_close: bool,
    inspect: bool,
    config_file: Optional[str],
    verbose: bool,
) -> None:
    """Run the GraphQL operation in QUERY_FILE ("-" for stdin)."""
    try:
        settings = load_config(config_file)
    except ConfigurationError as e:
        raise click.ClickException(str(e)) from e

    logging_config: LoggingConfig = settings.logging
    if verbose:
        logging_config = logging_config.model_copy(update={"level": LogLevel.DEBUG})
    setup_logging(logging_config)

    overrides: Dict[str, Any] = {}
    if endpoint:
        overrides["endpoint"] = endpoint
    if timeout is not None:
        overrides["timeout"] = timeout
    if immediate_close:
        overrides["immediate_close"] = True
    client_config = settings.client.model_copy(update=overrides)
    if not client_config.endpoint:
        raise click.UsageError(
            "No endpoint given: use --endpoint, GQL_FETCH_ENDPOINT or a config file"
        )

    try:
        request_headers: List[Tuple[str, str]] = parse_headers(headers)
        variables: Optional[Dict[str, Any]] = None
        # A given but empty set of variables is sent as {}, not null.
        if variables_file is not None or var_strings:
            variables = _load_variables(variables_file)
            variables.update(parse_variables(var_strings))
    except ValueError as e:
        raise click.BadParameter(str(e)) from e

    request = GraphQLRequest(
        query_file.read(),
        variables=variables,
        operation_name=operation_name,
        headers=request_headers,
    )

    client, response, error = asyncio.run(
        run_exchange(client_config, settings.transport, request)
    )

    if inspect:
        click.echo(
            json.dumps(to_jsonable(client.inspect_run), indent=2, default=str),
            err=True,
        )

    if error is not None:
        click.echo(f"Error: {error}", err=True)
        sys.exit(EXIT_FAILURE)

    assert response is not None
    click.echo(
        json.dumps(
            {
                "data": response.data,
                "errors": [e.model_dump(mode="json") for e in response.errors],
            },
            indent=2,
        )
    )
    sys.exit(EXIT_GRAPHQL_ERRORS if response.has_errors else EXIT_OK)


def _load_variables(path: Optional[Path]) -> Dict[str, Any]:
    if path is None:
        return {}
    with open(path, "r", encoding="utf-8") as f:
        data = json.load(f)
    if not isinstance(data, dict):
        raise ValueError(f"{path} must contain a JSON object")
    return data


if __name__ == "__main__":
    main()
