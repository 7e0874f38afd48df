"""
Server-level tests: talk to the FastMCP server through fastmcp's in-memory
Client, with the dispatcher's HTTP client replaced by FakeClient.
"""

import asyncio

from fastmcp import Client
from mcp.shared.exceptions import McpError
from mcp.types import METHOD_NOT_FOUND

from conftest import NOW, FakeClient
from core.auth import ORGANIZATION_MODE, PROJECT_MODE
from core.config import Settings
from core.dispatcher import Dispatcher
from tools import mcp_server
from tools.mcp_server import SERVER_NAME, SERVER_VERSION, create_server


def _server(mode, client):
    settings = Settings(auth_mode=mode.name)
    dispatcher = Dispatcher(mode, client, "42", clock=lambda: NOW)
    return create_server(settings, dispatcher=dispatcher)


def _list_tools(server):
    async def scenario():
        async with Client(server) as client:
            return await client.list_tools()
    return asyncio.run(scenario())


def _call_tool(server, name, arguments):
    async def scenario():
        async with Client(server) as client:
            return await client.call_tool(name, arguments)
    return asyncio.run(scenario())


def _protocol_error(server, name, arguments):
    """Call a tool over the raw MCP session and return the JSON-RPC error, if any."""
    async def scenario():
        async with Client(server) as client:
            try:
                await client.call_tool_mcp(name, arguments)
            except McpError as exc:
                return exc
        return None
    return asyncio.run(scenario())


def test_server_name():
    assert _server(PROJECT_MODE, FakeClient()).name == SERVER_NAME


def test_server_version():
    assert _server(PROJECT_MODE, FakeClient())._mcp_server.version == SERVER_VERSION


def test_lists_registry_tools_with_their_schemas():
    tools = _list_tools(_server(PROJECT_MODE, FakeClient()))
    names = [tool.name for tool in tools]
    assert set(names) == set(PROJECT_MODE.tool_names)
    details = next(tool for tool in tools if tool.name == "get_session_details")
    assert details.inputSchema["required"] == ["sessionId"]
    assert "sessionId" in details.inputSchema["properties"]


def test_organization_server_lists_its_tools():
    names = {tool.name for tool in _list_tools(_server(ORGANIZATION_MODE, FakeClient()))}
    assert {"list_projects", "get_user_sessions"} <= names


def test_call_returns_pretty_printed_payload():
    client = FakeClient(payload={"total": 3})
    result = _call_tool(_server(PROJECT_MODE, client), "get_session_details", {"sessionId": "abc"})
    assert len(result.content) == 1
    assert result.content[0].type == "text"
    assert result.content[0].text == '{\n  "total": 3\n}'
    assert client.requests[0].path == "/v1/projects/42/sessions/abc"


def test_unsupported_call_is_a_normal_result():
    client = FakeClient()
    result = _call_tool(_server(ORGANIZATION_MODE, client), "get_performance_metrics", {"metrics": ["load_time"]})
    assert "organization API key" in result.content[0].text
    assert client.requests == []


def test_unknown_tool_is_method_not_found():
    client = FakeClient()
    error = _protocol_error(_server(PROJECT_MODE, client), "drop_all_sessions", {})
    assert isinstance(error, McpError)
    assert error.error.code == METHOD_NOT_FOUND
    assert error.error.message == "Unknown tool: drop_all_sessions"
    assert client.requests == []


def test_organization_only_tool_is_method_not_found_in_project_mode():
    error = _protocol_error(_server(PROJECT_MODE, FakeClient()), "list_projects", {})
    assert error is not None
    assert error.error.code == METHOD_NOT_FOUND


def test_failing_tool_is_a_result_not_a_protocol_error():
    client = FakeClient(error=RuntimeError("boom"))
    server = _server(PROJECT_MODE, client)
    assert _protocol_error(server, "get_errors_issues", {}) is None
    result = _call_tool(server, "get_errors_issues", {})
    assert result.content[0].text == "Error: boom"


def test_main_closes_the_http_client(monkeypatch):
    client = FakeClient()
    monkeypatch.setattr(mcp_server, "_dispatcher", Dispatcher(PROJECT_MODE, client, "42"))
    monkeypatch.setattr(mcp_server.mcp, "run", lambda: None)
    mcp_server.main()
    assert client.closed
