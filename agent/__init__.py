# =============================================================================
# agent/__init__.py
# =============================================================================
# This package contains the Google ADK agent configuration.
#
# ARCHITECTURAL ROLE:
#   The agent/ layer is an MCP *client* of tools/mcp_server.py.  It:
#     1. Receives the user's question ("Why did checkout errors spike?")
#     2. Decides which OpenReplay tools to call, and with which filters
#     3. Summarizes the raw JSON the tools return
#
# WHAT THE AGENT IS NOT:
#   - It is NOT the translation layer (that's in core/)
#   - It is NOT the MCP server (that's in tools/)
#   - It does NOT compute analytics; OpenReplay does
# =============================================================================
