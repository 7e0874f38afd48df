# =============================================================================
# core/auth.py  -  Auth-mode strategies
# =============================================================================
#
# OpenReplay hands out two kinds of credentials and they see different APIs:
#
#   "project"       A full-access token sent as `Authorization: Bearer <key>`.
#                   Every analytics endpoint under /v1/projects/{projectId}.
#
#   "organization"  An organization API key sent as `Authorization: <key>`.
#                   Only the public /api/v1 endpoints: projects, per-user
#                   sessions, session events.
#
# Instead of two dispatch tables, each mode is ONE AuthMode value saying
# which tools it serves, how each is built, and which ones get a fixed
# explanation instead of an HTTP call.  The active mode is picked once from
# configuration; it is never negotiated at runtime.
# =============================================================================

from dataclasses import dataclass, field
from typing import Any

from core.builders import (
    ORGANIZATION_BUILDERS,
    ORGANIZATION_JOURNEY_WINDOW_DAYS,
    PROJECT_BUILDERS,
    RequestBuilder,
)
from core.errors import ConfigurationError


@dataclass(frozen=True)
class AuthMode:
    """Tool availability and request shaping for one credential type."""

    name: str
    project_field: str                                     # Settings attribute holding the path identifier
    bearer: bool
    builders: dict[str, RequestBuilder]
    unsupported: dict[str, str] = field(default_factory=dict)
    overrides: dict[str, dict[str, Any]] = field(default_factory=dict)

    @property
    def tool_names(self) -> tuple[str, ...]:
        return tuple(self.builders) + tuple(n for n in self.unsupported if n not in self.builders)

    def serves(self, tool_name: str) -> bool:
        return tool_name in self.builders or tool_name in self.unsupported

    def is_supported(self, tool_name: str) -> bool:
        return tool_name in self.builders

    def authorization(self, api_key: str) -> str:
        return f"Bearer {api_key}" if self.bearer else api_key


def _unavailable(what: str, alternative: str) -> str:
    return (
        f"{what} is not available with an organization API key. The public OpenReplay API "
        f"does not expose this data to organization keys; configure a full-access project "
        f"token (OPENREPLAY_AUTH_MODE=project) to use it. {alternative}"
    )


PROJECT_MODE = AuthMode(
    name="project",
    project_field="project_id",
    bearer=True,
    builders=dict(PROJECT_BUILDERS),
)

ORGANIZATION_MODE = AuthMode(
    name="organization",
    project_field="project_key",
    bearer=False,
    builders=dict(ORGANIZATION_BUILDERS),
    unsupported={
        "get_session_details": _unavailable(
            "Fetching full session details",
            "Use get_session_events to read the session's event stream instead.",
        ),
        "aggregate_sessions": _unavailable(
            "Session aggregation",
            "Use get_user_sessions to inspect individual users' sessions instead.",
        ),
        "get_errors_issues": _unavailable(
            "Error and issue search",
            "Use get_session_events and look for ERROR events in specific sessions instead.",
        ),
        "get_funnel_analysis": _unavailable(
            "Funnel analysis",
            "Use get_user_journey to follow individual users through their sessions instead.",
        ),
        "get_performance_metrics": _unavailable(
            "Performance metrics",
            "Use get_session_events to inspect individual sessions instead.",
        ),
        "execute_custom_query": _unavailable(
            "Custom query execution",
            "Use list_projects, get_user_sessions or get_session_events instead.",
        ),
    },
    overrides={
        "search_sessions": {
            "description": (
                "Search sessions for one user. With an organization API key a userId is "
                "needed; date range defaults to the last 7 days."
            ),
            "properties": {
                "userId": {"type": "string", "description": "User ID whose sessions to search"},
            },
        },
        "get_user_journey": {
            "description": (
                "Get the complete journey of a user across multiple sessions "
                f"(defaults to the last {ORGANIZATION_JOURNEY_WINDOW_DAYS} days)"
            ),
            "properties": {
                "startDate": {
                    "type": "string",
                    "description": (
                        f"Start date in ISO format (defaults to {ORGANIZATION_JOURNEY_WINDOW_DAYS} "
                        "days before now)"
                    ),
                },
            },
        },
    },
)

AUTH_MODES: dict[str, AuthMode] = {mode.name: mode for mode in (PROJECT_MODE, ORGANIZATION_MODE)}


def resolve_auth_mode(name: str) -> AuthMode:
    try:
        return AUTH_MODES[name]
    except KeyError:
        raise ConfigurationError(
            f"Unknown auth mode {name!r}; expected one of {sorted(AUTH_MODES)}"
        ) from None
