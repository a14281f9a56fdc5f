import json

import httpx
import pytest
from fastmcp import Client
from unittest.mock import MagicMock

from marsmcp.core.services.tool_service import TOOL_DEFINITIONS, ToolService
from marsmcp.infrastructure.mcp.server import SERVER_NAME, create_server, run_server


def payload(result):
    """Decodes the JSON text content of a tool call result."""
    return json.loads(result.content[0].text)


@pytest.fixture
def mcp_server(make_client):
    def handler(request: httpx.Request) -> httpx.Response:
        if request.url.path.endswith("/reports/1280"):
            return httpx.Response(200, json={"results": [{"report_date": "01/02/2024"}]})
        if request.url.path.endswith("/offices"):
            return httpx.Response(503)
        return httpx.Response(200, json=[{"slug_id": "1280"}])

    return create_server(ToolService(make_client(handler)))


async def test_all_tools_registered(mcp_server):
    async with Client(mcp_server) as client:
        tools = await client.list_tools()
    assert sorted(tool.name for tool in tools) == sorted(tool.name for tool in TOOL_DEFINITIONS)


async def test_mars_health_tool(mcp_server):
    async with Client(mcp_server) as client:
        result = await client.call_tool("mars_health", {})
    assert payload(result) == {"ok": True, "message": "MARS client ready", "base_url": "https://example.com/api/"}


async def test_mars_get_report_tool(mcp_server):
    async with Client(mcp_server) as client:
        result = await client.call_tool("mars_get_report", {"slug_id": "1280", "last_reports": 1})
    body = payload(result)
    assert body["ok"] is True
    assert body["data"] == {"results": [{"report_date": "01/02/2024"}]}


async def test_upstream_failure_is_a_structured_result(mcp_server):
    async with Client(mcp_server) as client:
        result = await client.call_tool("mars_list_offices", {})
    body = payload(result)
    assert body["ok"] is False
    assert body["error"]["kind"] == "server_error"
    assert body["error"]["http_status"] == 503


async def test_invalid_arguments_are_tool_errors(mcp_server):
    async with Client(mcp_server) as client:
        with pytest.raises(Exception, match="non-empty string"):
            await client.call_tool("mars_get", {"path": ""})


def test_run_server_stdio():
    mcp = MagicMock()
    run_server(mcp, transport="stdio")
    mcp.run.assert_called_once_with()


def test_run_server_http():
    mcp = MagicMock()
    run_server(mcp, transport="http", host="0.0.0.0", port=8080)
    mcp.run.assert_called_once_with(transport="http", host="0.0.0.0", port=8080)


def test_run_server_rejects_unknown_transport():
    with pytest.raises(ValueError, match="Unsupported transport"):
        run_server(MagicMock(), transport="sse")


def test_server_name(make_client):
    mcp = create_server(ToolService(make_client(lambda request: httpx.Response(200))))
    assert mcp.name == SERVER_NAME
