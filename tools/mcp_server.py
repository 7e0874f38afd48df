# =============================================================================
# tools/mcp_server.py  -  FastMCP Tool Server (ALL tools in one place)
# =============================================================================
#
# WHAT THIS FILE DOES:
#   Exposes the OpenReplay tool catalog over MCP.  Each tool is a thin
#   wrapper: FastMCP hands it the model's argument dict, the wrapper passes
#   it to core.dispatcher.Dispatcher, and the dispatcher's ToolResult goes
#   back as MCP text content.
#
# HOW IT WORKS (the flow):
#   1. The MCP client asks for the tool list -> one entry per registry tool
#      served by the configured auth mode, with the registry's JSON schema
#   2. The client calls a tool by name (e.g., "search_sessions")
#   3. FastMCP routes the call to the matching OpenReplayTool.run()
#   4. run() awaits Dispatcher.handle() in a worker thread; the single HTTP
#      call inside it is the only place a call ever waits
#   5. The client receives one text block: pretty-printed JSON, an error
#      message, or an "unavailable with this key" explanation
#
# WHY NOT @mcp.tool() FUNCTIONS?
#   FastMCP derives a schema from a function signature.  Here the schemas
#   are data (core/registry.py) and differ per auth mode, so each tool is a
#   small Tool subclass instance carrying the registry schema as-is.
#
# Unknown tool names never reach the dispatcher.  The MCP SDK reports any
# exception raised during a tool call as an ordinary isError result, so the
# call-tool handler is wrapped to answer names this server does not serve
# with a JSON-RPC METHOD_NOT_FOUND error instead.
#
# RUNNING THIS SERVER:
#     a) Standalone:  python -m tools.mcp_server   (or `openreplay-mcp`)
#     b) Spawned by the ADK agent over stdio (agent/analytics_agent.py)
# =============================================================================

import asyncio
import json
import logging
import sys
from typing import Any

from fastmcp import FastMCP
from fastmcp.tools.tool import Tool, ToolResult as MCPToolResult
from mcp.shared.exceptions import McpError
from mcp.types import METHOD_NOT_FOUND, CallToolRequest, ErrorData, TextContent
from pydantic import Field

from core.config import Settings
from core.dispatcher import Dispatcher
from core.errors import UnknownToolError
from core.models import ToolResult

SERVER_NAME = "openreplay-mcp"
SERVER_VERSION = "0.1.0"

# =============================================================================
# Logging Setup
# =============================================================================
# STDOUT carries the MCP JSON stream, so every log line goes to STDERR.
#
#   - CYAN for incoming requests (tool name + parameters)
#   - GREEN for response text (truncated)
#   - YELLOW for status messages
# =============================================================================

_CYAN = "\033[36m"
_GREEN = "\033[32m"
_YELLOW = "\033[33m"
_RESET = "\033[0m"

# Longest response preview written to the log.
_LOG_PREVIEW_CHARS = 500

log = logging.getLogger("openreplay_mcp")


def configure_logging(level: str = "INFO") -> None:
    logging.basicConfig(
        level=getattr(logging, level.upper(), logging.INFO),
        format="%(asctime)s [MCP] %(message)s",
        datefmt="%H:%M:%S",
        stream=sys.stderr,
    )


def _log_request(tool_name: str, params: dict[str, Any]) -> None:
    """Log an incoming tool call with its parameters in CYAN."""
    param_str = ", ".join(f"{k}={v!r}" for k, v in params.items())
    log.info(f"{_CYAN}{tool_name} called with: {param_str}{_RESET}")


def _log_status(message: str) -> None:
    """Log a status message in YELLOW."""
    log.info(f"{_YELLOW}  → {message}{_RESET}")


def _log_response(tool_name: str, result: ToolResult) -> ToolResult:
    """Log a compact preview of the tool response in GREEN, then return it."""
    text = result.first_text
    preview = json.dumps(text[:_LOG_PREVIEW_CHARS])
    if len(text) > _LOG_PREVIEW_CHARS:
        preview += f" ... ({len(text)} chars)"
    marker = "error" if result.is_error else "response"
    log.info(f"{_GREEN}  ← {tool_name} {marker}: {preview}{_RESET}")
    return result


# =============================================================================
# The tool wrapper
# =============================================================================

class OpenReplayTool(Tool):
    """An MCP tool whose schema comes from the registry and whose work is
    done by the shared Dispatcher."""

    dispatcher: Any = Field(exclude=True)

    async def run(self, arguments: dict[str, Any]) -> MCPToolResult:
        _log_request(self.name, arguments)
        result = await asyncio.to_thread(self.dispatcher.handle, self.name, arguments)
        _log_response(self.name, result)
        return MCPToolResult(
            content=[TextContent(type="text", text=item.text) for item in result.content]
        )


def _reject_unknown_tools(server: FastMCP, served: set[str]) -> None:
    """Answer calls to unserved tool names with a METHOD_NOT_FOUND error."""
    handlers = server._mcp_server.request_handlers
    call_tool = handlers[CallToolRequest]

    async def handler(request: CallToolRequest):
        name = request.params.name
        if name not in served:
            _log_status(f"rejected unknown tool {name!r}")
            raise McpError(ErrorData(code=METHOD_NOT_FOUND, message=str(UnknownToolError(name))))
        return await call_tool(request)

    handlers[CallToolRequest] = handler


def create_server(settings: Settings | None = None, dispatcher: Dispatcher | None = None) -> FastMCP:
    """Build a FastMCP server exposing the tools of the configured auth mode.

    Args:
        settings: Configuration; read from the environment when omitted.
        dispatcher: Pre-built dispatcher (tests inject one with a fake client).
    """
    settings = settings or Settings.from_env()
    dispatcher = dispatcher or Dispatcher.from_settings(settings)

    server = FastMCP(
        SERVER_NAME,
        version=SERVER_VERSION,
        instructions=(
            "Session analytics for OpenReplay. Every tool forwards to the OpenReplay API and "
            "returns its JSON response as text. Dates default to the last 7 days."
        ),
    )
    definitions = dispatcher.list_tools()
    for definition in definitions:
        server.add_tool(OpenReplayTool(
            name=definition.name,
            description=definition.description,
            parameters=definition.input_schema,
            dispatcher=dispatcher,
        ))
    _reject_unknown_tools(server, {definition.name for definition in definitions})

    _log_status(
        f"{SERVER_NAME} ready: auth_mode={dispatcher.auth_mode.name}, "
        f"api_url={settings.api_url}, tools={len(definitions)}"
    )
    return server


# =============================================================================
# Create the server instance
# =============================================================================
# Settings are read once here; they never change for the life of the process.
_settings = Settings.from_env()
configure_logging(_settings.log_level)
_dispatcher = Dispatcher.from_settings(_settings)
mcp = create_server(_settings, dispatcher=_dispatcher)


def main() -> None:
    log.info("OpenReplay MCP Server running on stdio")
    try:
        mcp.run()
    finally:
        # Release the pooled HTTP connections once stdio closes.
        _dispatcher.client.close()


if __name__ == "__main__":
    main()
