# =============================================================================
# core/__init__.py
# =============================================================================
# This package contains ALL translation logic for the OpenReplay MCP server.
#
# CRITICAL ARCHITECTURAL RULE:
#   Nothing in this package imports FastMCP, Google ADK, or any orchestration
#   framework.  The only third-party imports are `requests` (the HTTP client)
#   and `python-dotenv` (configuration loading).
#
# Layering (each module only imports the ones above it):
#   errors      -> exception hierarchy
#   models      -> ToolDefinition, OutboundRequest, ToolResult
#   builders    -> per-tool request builders (defaults + path/query/body)
#   registry    -> the static tool catalog (schemas, declared defaults)
#   auth        -> auth-mode strategies (which tools, which builders)
#   config      -> Settings read once from the environment
#   client      -> the one place that talks HTTP
#   dispatcher  -> handle(tool_name, arguments) -> ToolResult
# =============================================================================
