"""
Tests for the gql-fetch command-line tool.
"""

import json
from http.cookies import SimpleCookie

import pytest
from click.testing import CliRunner
from multidict import CIMultiDict

from conftest import ENDPOINT, sent_body, sent_requests
from gql_fetch import __version__
from gql_fetch.cli.main import EXIT_FAILURE, EXIT_GRAPHQL_ERRORS, EXIT_OK, main
from gql_fetch.cli.utils import parse_headers, parse_variables, to_jsonable

pytestmark = pytest.mark.cli

QUERY = "query continent($code: ID!) { continent(code: $code) { name } }"


@pytest.fixture
def runner():
    return CliRunner()


@pytest.fixture
def query_file(tmp_path, monkeypatch):
    """A query file in a directory without configuration files."""
    home = tmp_path / "home"
    home.mkdir()
    monkeypatch.setenv("HOME", str(home))
    monkeypatch.chdir(tmp_path)
    for name in ("ENDPOINT", "HEADERS", "TIMEOUT", "IMMEDIATE_CLOSE", "LOG_LEVEL", "LOG_FILE"):
        monkeypatch.delenv(f"GQL_FETCH_{name}", raising=False)

    path = tmp_path / "continent.graphql"
    path.write_text(QUERY)
    return str(path)


class TestMain:
    """Test the gql-fetch command."""

    def test_success(self, runner, mock_aiohttp, query_file):
        mock_aiohttp.post(ENDPOINT, payload={"data": {"continent": {"name": "Africa"}}})

        result = runner.invoke(
            main, [query_file, "-e", ENDPOINT, "-V", "code=AF", "-o", "continent"]
        )

        assert result.exit_code == EXIT_OK, result.output
        assert json.loads(result.output) == {
            "data": {"continent": {"name": "Africa"}},
            "errors": [],
        }
        (call,) = sent_requests(mock_aiohttp)
        assert sent_body(call) == {
            "query": QUERY,
            "variables": {"code": "AF"},
            "operationName": "continent",
        }

    def test_protocol_errors(self, runner, mock_aiohttp, query_file):
        mock_aiohttp.post(
            ENDPOINT,
            payload={
                "data": None,
                "errors": [{"message": "no such continent", "path": ["continent"]}],
            },
        )

        result = runner.invoke(main, [query_file, "-e", ENDPOINT])

        assert result.exit_code == EXIT_GRAPHQL_ERRORS
        output = json.loads(result.output)
        assert output["data"] is None
        assert output["errors"][0]["message"] == "no such continent"
        assert output["errors"][0]["path"] == ["continent"]

    def test_http_status_failure(self, runner, mock_aiohttp, query_file):
        mock_aiohttp.post(ENDPOINT, status=503, body="unavailable")

        result = runner.invoke(main, [query_file, "-e", ENDPOINT])

        assert result.exit_code == EXIT_FAILURE
        assert "Error: HTTP Error 503" in result.output

    def test_decoding_failure(self, runner, mock_aiohttp, query_file):
        mock_aiohttp.post(ENDPOINT, body="<html>oops</html>")

        result = runner.invoke(main, [query_file, "-e", ENDPOINT])

        assert result.exit_code == EXIT_FAILURE
        assert "decoding response" in result.output

    def test_headers_and_variables(self, runner, mock_aiohttp, query_file, tmp_path):
        variables_file = tmp_path / "vars.json"
        variables_file.write_text(json.dumps({"code": "EU", "limit": 1}))
        mock_aiohttp.post(ENDPOINT, payload={"data": {}})

        result = runner.invoke(
            main,
            [
                query_file,
                "-e", ENDPOINT,
                "-H", "X-A: 1",
                "-H", "X-A: 2",
                "--variables-file", str(variables_file),
                "-V", "limit=5",
                "-V", "tags=[\"a\"]",
            ],
        )

        assert result.exit_code == EXIT_OK, result.output
        (call,) = sent_requests(mock_aiohttp)
        assert call.kwargs["headers"].getall("X-A") == ["1", "2"]
        assert sent_body(call)["variables"] == {"code": "EU", "limit": 5, "tags": ["a"]}

    def test_empty_variables_file(self, runner, mock_aiohttp, query_file, tmp_path):
        variables_file = tmp_path / "vars.json"
        variables_file.write_text("{}")
        mock_aiohttp.post(ENDPOINT, payload={"data": {}})

        result = runner.invoke(
            main, [query_file, "-e", ENDPOINT, "--variables-file", str(variables_file)]
        )

        assert result.exit_code == EXIT_OK, result.output
        (call,) = sent_requests(mock_aiohttp)
        assert sent_body(call)["variables"] == {}

    def test_no_variables_sent_as_null(self, runner, mock_aiohttp, query_file):
        mock_aiohttp.post(ENDPOINT, payload={"data": {}})

        result = runner.invoke(main, [query_file, "-e", ENDPOINT])

        assert result.exit_code == EXIT_OK, result.output
        (call,) = sent_requests(mock_aiohttp)
        assert sent_body(call)["variables"] is None

    def test_endpoint_from_environment(self, runner, mock_aiohttp, query_file, monkeypatch):
        monkeypatch.setenv("GQL_FETCH_ENDPOINT", ENDPOINT)
        monkeypatch.setenv("GQL_FETCH_HEADERS", '{"Authorization": "Bearer env"}')
        mock_aiohttp.post(ENDPOINT, payload={"data": {"ok": True}})

        result = runner.invoke(main, [query_file])

        assert result.exit_code == EXIT_OK, result.output
        (call,) = sent_requests(mock_aiohttp)
        assert call.kwargs["headers"]["Authorization"] == "Bearer env"

    def test_config_file(self, runner, mock_aiohttp, query_file, tmp_path):
        config_file = tmp_path / "custom.json"
        config_file.write_text(
            json.dumps({"client": {"endpoint": ENDPOINT, "immediate_close": True}})
        )
        mock_aiohttp.post(ENDPOINT, payload={"data": {}})

        result = runner.invoke(main, [query_file, "-c", str(config_file)])

        assert result.exit_code == EXIT_OK, result.output
        (call,) = sent_requests(mock_aiohttp)
        assert call.kwargs["headers"]["Connection"] == "close"

    def test_inspect(self, runner, mock_aiohttp, query_file):
        mock_aiohttp.post(ENDPOINT, payload={"data": {"a": 1}})

        result = runner.invoke(main, [query_file, "-e", ENDPOINT, "--inspect"])

        assert result.exit_code == EXIT_OK
        assert '"request_headers"' in result.output
        assert '"response_status": 200' in result.output

    def test_missing_endpoint(self, runner, query_file):
        result = runner.invoke(main, [query_file])

        assert result.exit_code == 2
        assert "No endpoint given" in result.output

    def test_bad_header(self, runner, query_file):
        result = runner.invoke(main, [query_file, "-e", ENDPOINT, "-H", "no-colon"])

        assert result.exit_code == 2
        assert "Invalid header format" in result.output

    def test_invalid_configuration(self, runner, query_file, monkeypatch):
        monkeypatch.setenv("GQL_FETCH_TIMEOUT", "never")

        result = runner.invoke(main, [query_file, "-e", ENDPOINT])

        assert result.exit_code == 1
        assert "GQL_FETCH_TIMEOUT" in result.output

    def test_version(self, runner):
        result = runner.invoke(main, ["--version"])

        assert result.exit_code == 0
        assert __version__ in result.output


class TestUtils:
    """Test CLI argument helpers."""

    def test_parse_headers(self):
        assert parse_headers(["Authorization: Bearer t", "X-A:1", "X-A: 2"]) == [
            ("Authorization", "Bearer t"),
            ("X-A", "1"),
            ("X-A", "2"),
        ]

    def test_parse_headers_keeps_colons_in_value(self):
        assert parse_headers(["X-Time: 12:30"]) == [("X-Time", "12:30")]

    @pytest.mark.parametrize("bad", ["no-colon", ": value"])
    def test_parse_headers_invalid(self, bad):
        with pytest.raises(ValueError):
            parse_headers([bad])

    def test_parse_variables(self):
        assert parse_variables(["code=AF", "n=3", "ok=true", "ids=[1,2]", "eq=a=b"]) == {
            "code": "AF",
            "n": 3,
            "ok": True,
            "ids": [1, 2],
            "eq": "a=b",
        }

    def test_parse_variables_invalid(self):
        with pytest.raises(ValueError):
            parse_variables(["novalue"])

    def test_to_jsonable(self):
        cookies = SimpleCookie()
        cookies["sid"] = "s-1"
        snapshot = {
            "request_headers": CIMultiDict([("X-A", "1"), ("X-A", "2")]),
            "response_cookies": cookies,
            "response_status": 200,
        }

        assert to_jsonable(snapshot) == {
            "request_headers": {"X-A": ["1", "2"]},
            "response_cookies": {"sid": "s-1"},
            "response_status": 200,
        }
