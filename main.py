# =============================================================================
# main.py  -  Interactive console for the OpenReplay analytics agent
# =============================================================================
#
# HOW TO RUN:
#   uv run python main.py
#
# WHAT HAPPENS:
#   1. Loads .env (OPENREPLAY_* settings and the LLM provider key)
#   2. Creates the Google ADK agent (agent/analytics_agent.py), which spawns
#      the OpenReplay MCP server as a stdio subprocess
#   3. Reads questions from the console and streams the agent's answer,
#      printing each tool call as it happens
#
# To run ONLY the MCP server (e.g. for Claude Desktop or another MCP client):
#   uv run python -m tools.mcp_server
# =============================================================================

import asyncio

from dotenv import load_dotenv

# Must run BEFORE the agent is created: LiteLlm reads the provider API key
# from the environment when it initializes.
load_dotenv()

from google.adk.runners import Runner
from google.adk.sessions import InMemorySessionService
from google.genai import types

from agent.analytics_agent import create_agent
from core.config import Settings

APP_NAME = "openreplay_analyst"
USER_ID = "console_user"


async def run_agent():
    """Run the analytics agent interactively until the user quits."""
    settings = Settings.from_env()

    print("=" * 70)
    print("  OPENREPLAY ANALYTICS AGENT")
    print(f"  Model: {settings.agent_model}  |  Auth mode: {settings.auth_mode}")
    print("=" * 70)
    print("\n🔧 Initializing agent...")
    agent = create_agent(settings)

    # InMemorySessionService keeps the conversation in RAM for this run only.
    session_service = InMemorySessionService()
    runner = Runner(agent=agent, app_name=APP_NAME, session_service=session_service)
    session = await session_service.create_session(app_name=APP_NAME, user_id=USER_ID)

    print("✅ Agent initialized and ready!\n")
    print("💬 Ask about your users' sessions, errors, funnels or performance.")
    print("   (Type 'quit' to exit)\n")
    print("-" * 70)

    while True:
        try:
            user_input = input("\n🧑 You: ").strip()
        except (EOFError, KeyboardInterrupt):
            print("\n\n👋 Goodbye!")
            break

        if user_input.lower() in ("quit", "exit", "q"):
            print("\n👋 Goodbye!")
            break

        if not user_input:
            continue

        user_message = types.Content(role="user", parts=[types.Part(text=user_input)])

        print("\n🤖 Agent is thinking...\n")
        print("-" * 70)

        final_response = ""
        async for event in runner.run_async(
            user_id=USER_ID,
            session_id=session.id,
            new_message=user_message,
        ):
            if event.content and event.content.parts:
                for part in event.content.parts:
                    if getattr(part, "text", None):
                        final_response = part.text
                    if getattr(part, "function_call", None):
                        print(f"  🔧 Calling tool: {part.function_call.name}")

        print("-" * 70)
        if final_response:
            print(f"\n🤖 Agent:\n\n{final_response}")
        else:
            print("\n⚠️  No response generated. The agent may have encountered an error.")

        print("\n" + "=" * 70)


if __name__ == "__main__":
    asyncio.run(run_agent())
