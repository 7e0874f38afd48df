# =============================================================================
# core/dispatcher.py  -  handle(tool_name, arguments) -> ToolResult
# =============================================================================
#
# HOW A CALL FLOWS (same steps for every tool):
#   1. Unknown tool for this auth mode   -> raise UnknownToolError
#   2. Tool known but not servable       -> fixed explanatory text
#   3. Required argument missing         -> "Error: Missing required ..." text
#   4. Build ONE OutboundRequest (defaults relative to this call's clock)
#   5. Send it once
#   6. Success -> the raw body pretty-printed as JSON, untouched
#   7. Failure -> "Error: <message>" text
#
# Step 1 is the ONLY exception that leaves this module.  Everything else comes
# back as a ToolResult so the calling model always has something to read.
#
# The dispatcher holds no per-call state: configuration, auth mode and the
# client are fixed at construction, and `now` is read fresh for every call.
# =============================================================================

import json
import logging
from datetime import datetime, timezone
from typing import Any, Callable

from core import registry
from core.auth import AuthMode, resolve_auth_mode
from core.builders import RequestContext, is_absent
from core.client import OpenReplayClient
from core.config import Settings
from core.errors import RemoteCallError, UnknownToolError, UnsupportedToolError
from core.models import OutboundRequest, ToolDefinition, ToolInvocation, ToolResult

logger = logging.getLogger(__name__)


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


def format_payload(payload: Any) -> str:
    """Pretty-print a remote response body (2-space indent, like JSON.stringify)."""
    return json.dumps(payload, indent=2, ensure_ascii=False)


class Dispatcher:
    """Maps a tool invocation to exactly one OpenReplay API call."""

    def __init__(
        self,
        auth_mode: AuthMode,
        client,
        project: str,
        clock: Callable[[], datetime] = utcnow,
    ):
        self.auth_mode = auth_mode
        self.client = client
        self.project = project
        self.clock = clock

    @classmethod
    def from_settings(cls, settings: Settings, session=None) -> "Dispatcher":
        """Wire the auth mode, HTTP client and project identifier from settings."""
        auth_mode = resolve_auth_mode(settings.auth_mode)
        client = OpenReplayClient(settings, auth_mode, session=session)
        return cls(auth_mode, client, settings.project_identifier)

    def list_tools(self) -> list[ToolDefinition]:
        return registry.list_tools(self.auth_mode)

    def build_request(self, tool_name: str, arguments: dict[str, Any] | None = None) -> OutboundRequest:
        """Resolve the request a call would send, without sending it.

        Raises UnknownToolError, or UnsupportedToolError when the auth mode
        cannot serve the call.
        """
        invocation = ToolInvocation(tool_name, dict(arguments or {}))
        self._check_known(invocation.tool_name)
        if not self.auth_mode.is_supported(invocation.tool_name):
            raise UnsupportedToolError(self.auth_mode.unsupported[invocation.tool_name])
        builder = self.auth_mode.builders[invocation.tool_name]
        context = RequestContext(project=self.project, now=self.clock())
        return builder(invocation.arguments, context)

    def handle(self, tool_name: str, arguments: dict[str, Any] | None = None) -> ToolResult:
        """Run one tool call end to end.  Only UnknownToolError propagates."""
        arguments = dict(arguments or {})
        self._check_known(tool_name)

        if not self.auth_mode.is_supported(tool_name):
            logger.info("%s is not available in %s mode", tool_name, self.auth_mode.name)
            return ToolResult.text(self.auth_mode.unsupported[tool_name])

        missing = self._missing_required(tool_name, arguments)
        if missing:
            return ToolResult.text(
                f"Error: Missing required argument(s): {', '.join(missing)}", is_error=True
            )

        try:
            request = self.build_request(tool_name, arguments)
        except UnsupportedToolError as exc:
            logger.info("%s refused: %s", tool_name, exc)
            return ToolResult.text(str(exc))
        except (TypeError, ValueError, OverflowError) as exc:
            logger.info("%s rejected its arguments: %s", tool_name, exc)
            return _error_result(exc)

        try:
            payload = self.client.send(request)
        except RemoteCallError as exc:
            logger.warning("%s %s failed: %s", request.method, request.path, exc)
            return _error_result(exc)
        except Exception as exc:
            # Anything the client did not anticipate still ends up as text.
            logger.exception("%s %s failed unexpectedly", request.method, request.path)
            return _error_result(exc)

        return ToolResult.text(format_payload(payload))

    # ---------------------------------------------------------------------
    # Internals
    # ---------------------------------------------------------------------

    def _check_known(self, tool_name: str) -> None:
        if tool_name not in registry.TOOL_DEFINITIONS or not self.auth_mode.serves(tool_name):
            raise UnknownToolError(tool_name)

    def _missing_required(self, tool_name: str, arguments: dict[str, Any]) -> list[str]:
        definition = registry.resolve_tool(tool_name, self.auth_mode)
        return [name for name in definition.required_fields if is_absent(arguments.get(name))]


def _error_result(exc: Exception) -> ToolResult:
    return ToolResult.text(f"Error: {str(exc) or 'Unknown error occurred'}", is_error=True)
