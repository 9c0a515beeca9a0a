import asyncio
import json
from contextlib import asynccontextmanager

import anyio
import pytest
from mcp import types
from mcp.server.fastmcp import FastMCP
from mcp.shared.memory import create_client_server_memory_streams

from mcp_tool_tester import connection as connection_module
from mcp_tool_tester.connection import (
    ConnectionTarget,
    InvalidServerURL,
    MCPConnection,
    TransportKind,
    endpoint_for,
    normalize_tool,
    open_transport,
    parse_target,
)
from mcp_tool_tester.display import render_result
from mcp_tool_tester.logging_mcp import MCPLogger


def test_default_target_is_local_websocket():
    target = parse_target([])
    assert target.server_url == "ws://localhost:8000/ws"
    assert target.transport_kind is TransportKind.WEBSOCKET


@pytest.mark.parametrize("value", ["localhost:9000", "example.com", "10.0.0.5:8080/base"])
def test_url_without_scheme_gets_websocket_prefix(value):
    target = parse_target(["--verbose", f"--url={value}"])
    assert target.server_url == f"ws://{value}"
    assert target.transport_kind is TransportKind.WEBSOCKET


@pytest.mark.parametrize("value", ["http://localhost:8000", "https://tools.example.com/api"])
def test_http_urls_use_sse(value):
    target = parse_target([f"--url={value}"])
    assert target.server_url == value
    assert target.transport_kind is TransportKind.SSE


def test_wss_url_keeps_scheme():
    target = parse_target(["--url=wss://tools.example.com"])
    assert target.server_url == "wss://tools.example.com"
    assert target.transport_kind is TransportKind.WEBSOCKET


def test_url_value_keeps_everything_after_first_equals():
    target = parse_target(["--url=http://host:8000/?token=abc"])
    assert target.server_url == "http://host:8000/?token=abc"


def test_endpoint_replaces_base_path():
    assert endpoint_for(ConnectionTarget("http://host:8000", TransportKind.SSE)) == "http://host:8000/sse"
    assert endpoint_for(ConnectionTarget("http://host:8000/api/", TransportKind.SSE)) == "http://host:8000/sse"
    assert endpoint_for(ConnectionTarget("ws://localhost:8000/ws", TransportKind.WEBSOCKET)) == "ws://localhost:8000/ws"


def test_endpoint_rejects_url_without_host():
    with pytest.raises(InvalidServerURL):
        endpoint_for(ConnectionTarget("ws://", TransportKind.WEBSOCKET))


def test_normalize_tool_from_sdk_model():
    tool = types.Tool(name="ping", description=None, inputSchema={"type": "object"})
    assert normalize_tool(tool) == {"name": "ping", "description": "", "inputSchema": {"type": "object"}}


def test_normalize_tool_from_dict():
    assert normalize_tool({"name": "echo"}) == {"name": "echo", "description": "", "inputSchema": {}}


def test_failed_handshake_propagates_and_leaves_connection_closed():
    @asynccontextmanager
    async def refused(target):
        raise ConnectionError("connection refused")
        yield

    connection = MCPConnection(parse_target([]), transport_factory=refused)

    with pytest.raises(ConnectionError, match="refused"):
        asyncio.run(connection.connect())
    assert not connection.connected
    # close sobre una conexión nunca abierta no hace nada
    asyncio.run(connection.close())


def test_calls_require_an_open_session():
    connection = MCPConnection(parse_target([]))
    with pytest.raises(RuntimeError):
        asyncio.run(connection.list_tools())


def make_echo_server():
    server = FastMCP("echo-server")

    @server.tool(description="Echo the given text back")
    def echo(text: str) -> str:
        return text

    return server


def in_memory_transport(server):
    @asynccontextmanager
    async def transport(target):
        async with create_client_server_memory_streams() as (client_streams, server_streams):
            async with anyio.create_task_group() as tg:
                tg.start_soon(
                    server._mcp_server.run,
                    server_streams[0],
                    server_streams[1],
                    server._mcp_server.create_initialization_options(),
                )
                yield client_streams
                tg.cancel_scope.cancel()

    return transport


def test_session_against_in_memory_server(tmp_path):
    log_file = tmp_path / "mcp.log"
    connection = MCPConnection(parse_target([]), logger=MCPLogger(log_file=str(log_file)),
                               transport_factory=in_memory_transport(make_echo_server()))

    async def scenario():
        await connection.connect()
        assert connection.connected
        tools = await connection.list_tools()
        result = await connection.call_tool("echo", {"text": "hello"})
        await connection.close()
        await connection.close()
        return tools, result

    tools, result = asyncio.run(scenario())

    assert [t["name"] for t in tools] == ["echo"]
    assert tools[0]["description"] == "Echo the given text back"
    assert "text" in tools[0]["inputSchema"]["properties"]
    assert render_result(result) == ["hello"]
    assert not connection.connected

    types_logged = []
    for line in log_file.read_text(encoding="utf-8").splitlines():
        types_logged.append(json.loads(line.split("MCP Interaction: ", 1)[1])["type"])
    assert types_logged == [
        "CONNECTION_ATTEMPTING",
        "CONNECTION_SUCCESS",
        "TOOLS_LISTED",
        "TOOL_CALL",
        "TOOL_RESPONSE",
        "CONNECTION_CLOSED",
    ]


def test_open_transport_picks_client_by_kind(monkeypatch):
    monkeypatch.setattr(connection_module, "sse_client", lambda url: ("sse", url))
    monkeypatch.setattr(connection_module, "websocket_client", lambda url: ("ws", url))

    assert open_transport(parse_target(["--url=http://host:8000/api"])) == ("sse", "http://host:8000/sse")
    assert open_transport(parse_target(["--url=host:9000"])) == ("ws", "ws://host:9000/ws")
