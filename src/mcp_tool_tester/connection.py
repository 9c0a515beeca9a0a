"""
Conexión con el servidor MCP remoto (WebSocket o SSE) usando el SDK oficial
"""
import time
from contextlib import AsyncExitStack
from dataclasses import dataclass
from enum import Enum
from typing import Any, Callable, Dict, List, Optional, Sequence
from urllib.parse import urljoin, urlparse

from mcp import types
from mcp.client.session import ClientSession
from mcp.client.sse import sse_client
from mcp.client.websocket import websocket_client

from .config import DEFAULT_SERVER_URL
from .logging_mcp import MCPLogger

URL_FLAG = "--url="


class InvalidServerURL(ValueError):
    """La URL del servidor no se puede resolver a un endpoint"""


class TransportKind(str, Enum):
    WEBSOCKET = "ws"
    SSE = "sse"


@dataclass(frozen=True)
class ConnectionTarget:
    server_url: str
    transport_kind: TransportKind


def parse_target(argv: Sequence[str]) -> ConnectionTarget:
    """Extrae --url=<valor> de los argumentos e infiere el transporte por el esquema"""
    server_url = DEFAULT_SERVER_URL
    url_arg = next((arg for arg in argv if arg.startswith(URL_FLAG)), None)
    if url_arg is not None:
        server_url = url_arg[len(URL_FLAG):]
        # Protocolo por defecto si no viene ninguno
        if not server_url.startswith("http") and not server_url.startswith("ws"):
            server_url = f"ws://{server_url}"

    kind = TransportKind.SSE if server_url.startswith("http") else TransportKind.WEBSOCKET
    return ConnectionTarget(server_url=server_url, transport_kind=kind)


def endpoint_for(target: ConnectionTarget) -> str:
    """Resuelve /sse o /ws contra la URL base (reemplaza el path de la base)"""
    parsed = urlparse(target.server_url)
    if not parsed.scheme or not parsed.netloc:
        raise InvalidServerURL(f"Invalid URL: {target.server_url}")
    path = "/sse" if target.transport_kind is TransportKind.SSE else "/ws"
    return urljoin(target.server_url, path)


def open_transport(target: ConnectionTarget):
    """Devuelve el context manager del transporte que corresponde al target"""
    endpoint = endpoint_for(target)
    if target.transport_kind is TransportKind.SSE:
        return sse_client(endpoint)
    return websocket_client(endpoint)


def normalize_tool(tool: Any) -> Dict[str, Any]:
    """Convierte un Tool del SDK (o un dict) en {name, description, inputSchema}"""
    if isinstance(tool, dict):
        name = tool.get("name")
        desc = tool.get("description")
        schema = tool.get("inputSchema")
    else:
        name = getattr(tool, "name", None)
        desc = getattr(tool, "description", None)
        schema = getattr(tool, "inputSchema", None)

    if hasattr(schema, "model_dump"):
        schema = schema.model_dump()

    return {"name": name, "description": desc or "", "inputSchema": schema or {}}


class MCPConnection:
    """
    Sesión con un servidor MCP: transporte + ClientSession.
    close() es idempotente: el transporte se cierra una sola vez.
    """

    def __init__(self, target: ConnectionTarget, logger: Optional[MCPLogger] = None,
                 client_name: str = "webdraw", client_version: str = "1.0.0",
                 transport_factory: Callable[[ConnectionTarget], Any] = open_transport):
        self.target = target
        self.logger = logger or MCPLogger(log_file=None)
        self._client_info = types.Implementation(name=client_name, version=client_version)
        self._transport_factory = transport_factory
        self._stack: Optional[AsyncExitStack] = None
        self.session: Optional[ClientSession] = None

    @property
    def server_url(self) -> str:
        return self.target.server_url

    @property
    def connected(self) -> bool:
        return self.session is not None

    async def connect(self):
        self.logger.log_connection(self.server_url, "ATTEMPTING", self.target.transport_kind.value)
        stack = AsyncExitStack()
        try:
            read_stream, write_stream = await stack.enter_async_context(
                self._transport_factory(self.target)
            )
            session = await stack.enter_async_context(
                ClientSession(read_stream, write_stream, client_info=self._client_info)
            )
            await session.initialize()
        except BaseException as e:
            # Cierre limpio si falla el handshake
            self.logger.log_connection(self.server_url, "FAILED", str(e))
            await stack.aclose()
            raise

        self._stack = stack
        self.session = session
        self.logger.log_connection(self.server_url, "SUCCESS")

    async def list_tools(self) -> List[Dict[str, Any]]:
        resp = await self._require_session().list_tools()
        tools = [normalize_tool(t) for t in getattr(resp, "tools", []) or []]
        self.logger.log_interaction(self.server_url, "TOOLS_LISTED", {
            "tools_count": len(tools),
            "tool_names": [t["name"] for t in tools],
        })
        return tools

    async def call_tool(self, name: str, arguments: Dict[str, Any]) -> Any:
        session = self._require_session()
        self.logger.log_tool_call(self.server_url, name, arguments)
        start_time = time.time()
        try:
            result = await session.call_tool(name=name, arguments=arguments)
        except Exception as e:
            self.logger.log_error(self.server_url, "TOOL_ERROR", str(e), {"tool": name})
            raise
        duration = (time.time() - start_time) * 1000
        self.logger.log_tool_response(self.server_url, name, result, duration)
        return result

    async def close(self):
        if self._stack is None:
            return
        stack, self._stack = self._stack, None
        self.session = None
        try:
            await stack.aclose()
        finally:
            self.logger.log_connection(self.server_url, "CLOSED")

    def _require_session(self) -> ClientSession:
        if self.session is None:
            raise RuntimeError(f"No active session for {self.server_url}")
        return self.session
