# =============================================================================
# core/errors.py  -  Exception hierarchy
# =============================================================================
#
# Only ONE of these ever reaches the protocol layer: UnknownToolError.
# Everything else is caught by the dispatcher and turned into a text result
# so the calling model always gets something it can reason about.
# =============================================================================


class OpenReplayMCPError(Exception):
    """Base class for every error raised by this package."""


class UnknownToolError(OpenReplayMCPError, LookupError):
    """A tool name that is not served under the active auth mode."""

    def __init__(self, tool_name: str):
        super().__init__(f"Unknown tool: {tool_name}")
        self.tool_name = tool_name


class UnsupportedToolError(OpenReplayMCPError):
    """The tool exists but the active credentials cannot serve this call.

    The message is shown to the model verbatim, so it should explain the
    limitation and point at an alternative.
    """


class RemoteCallError(OpenReplayMCPError):
    """The OpenReplay API call failed (network, timeout, non-2xx, bad body)."""

    def __init__(self, message: str, status_code: int | None = None):
        super().__init__(message)
        self.status_code = status_code


class ConfigurationError(OpenReplayMCPError, ValueError):
    """Invalid startup configuration."""
