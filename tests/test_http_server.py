"""Tests for the hosted HTTP/SSE transport."""

import pytest
from starlette.requests import Request
from starlette.testclient import TestClient

from tests._fakes import make_config
from yepcode_mcp import __version__
from yepcode_mcp.config import GROUP_ENV_VARS
from yepcode_mcp.server import YepCodeMcpServer
from yepcode_mcp.transport import YepCodeHttpServer


def _request(query: bytes) -> Request:
    return Request({"type": "http", "method": "GET", "query_string": query, "headers": []})


@pytest.fixture
def http_server(clients):
    return YepCodeHttpServer(YepCodeMcpServer(make_config(), clients=clients), port=9999)


def test_health_endpoint(http_server):
    client = TestClient(http_server.app)
    response = client.get("/health")
    assert response.status_code == 200
    assert response.json() == {
        "status": "ok",
        "transport": "http",
        "server": "yepcode-mcp-server",
        "version": __version__,
    }


def test_bind_address_defaults_to_config(http_server):
    assert http_server.host == "127.0.0.1"
    assert http_server.port == 9999


def test_no_query_reuses_base_server(http_server):
    assert http_server.server_for(_request(b"")) is http_server.mcp_server


def test_query_overrides_build_session_server(http_server):
    session = http_server.server_for(_request(b"tools=env_vars&options=disableRunCodeTool"))

    assert session is not http_server.mcp_server
    assert session.clients is http_server.mcp_server.clients
    assert session.config.tools.groups == {GROUP_ENV_VARS}
    assert session.config.options.disable_run_code_tool
    assert session.config.api_token == "test-token"


@pytest.mark.asyncio
async def test_session_server_lists_only_selected_tools(http_server):
    session = http_server.server_for(_request(b"tools=env_vars"))
    names = [tool.name for tool in await session.dispatcher.list_tools()]
    assert names == ["set_env_var", "remove_env_var"]
