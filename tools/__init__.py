# =============================================================================
# tools/__init__.py
# =============================================================================
# This package contains the FastMCP server.
#
# ARCHITECTURAL ROLE:
#   tools/ is the protocol edge.  It:
#     1. Turns core.registry entries into MCP tools
#     2. Hands each call to core.dispatcher.Dispatcher
#     3. Converts the dispatcher's ToolResult into MCP text content
#     4. Owns logging (to stderr; stdout belongs to the protocol)
#
# WHAT TOOLS DO NOT DO:
#   - They do NOT build HTTP requests or fill defaults (that's in core/)
#   - They do NOT know about Google ADK
# =============================================================================
