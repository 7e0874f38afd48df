# =============================================================================
# agent/analytics_agent.py  -  Google ADK Agent Configuration
# =============================================================================
#
# WHAT THIS FILE DOES:
#   Configures the Google ADK agent that answers analytics questions by
#   calling the OpenReplay MCP server.
#
# HOW IT WORKS (simplified):
#
#   Google ADK Agent ──(LiteLlm)──▶ LLM reasoning
#          │
#          └──(MCP over stdio)──▶ tools/mcp_server.py ──(HTTPS)──▶ OpenReplay
#
# MCP CONNECTION:
#   ADK starts the server as a subprocess (`uv run python -m tools.mcp_server`
#   from the project root) and talks to it over stdin/stdout.  The server
#   reads the same OPENREPLAY_* environment as this process.
# =============================================================================

import os

from google.adk.agents import Agent
from google.adk.models.lite_llm import LiteLlm
from google.adk.tools.mcp_tool import MCPToolset
from mcp import StdioServerParameters

from agent.prompt import get_analytics_prompt
from core.config import Settings

PROJECT_ROOT = os.path.dirname(os.path.dirname(os.path.abspath(__file__)))


def server_parameters() -> StdioServerParameters:
    """How ADK launches the MCP server subprocess.

    `uv run` makes the subprocess use the project's .venv so fastmcp and the
    core package are importable; running as a module from the project root
    keeps `core` on the import path.
    """
    return StdioServerParameters(
        command="uv",
        args=["run", "python", "-m", "tools.mcp_server"],
        cwd=PROJECT_ROOT,
        env=dict(os.environ),
    )


def create_agent(settings: Settings | None = None) -> Agent:
    """Create the OpenReplay analytics agent.

    The agent itself has NO analytics logic.  It has a system prompt, a
    model (via LiteLlm, so any provider string works) and one MCP toolset.

    Args:
        settings: Configuration; read from the environment when omitted.
            `agent_model` picks the LiteLlm model string and `auth_mode`
            tailors the prompt.
    """
    settings = settings or Settings.from_env()

    mcp_tools = MCPToolset(connection_params=server_parameters())

    return Agent(
        name="openreplay_analyst",
        model=LiteLlm(model=settings.agent_model),
        instruction=get_analytics_prompt(settings.auth_mode),
        tools=[mcp_tools],
    )
