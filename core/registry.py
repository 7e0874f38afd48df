# =============================================================================
# core/registry.py  -  The static tool catalog
# =============================================================================
#
# WHAT THIS MODULE DOES:
#   Declares every tool this server can expose: its name, the description the
#   calling model reads to decide WHEN to use it, and the JSON schema it reads
#   to decide WHAT to pass.  Pure data, no behavior.
#
# WHY A TABLE (and not one decorated function per tool)?
#   Two auth modes serve different subsets of these tools, and the
#   organization mode tweaks a couple of schemas.  Keeping the catalog as data
#   lets `list_tools(mode)` derive each mode's view, and lets the tests check
#   that every catalog entry has a handler in every mode that serves it.
#
# TOOL NAMING CONVENTIONS (same as before):
#   get_*     -> read-only retrieval
#   search_*  -> query with filters
#   list_*    -> enumeration
#   All tools are read-only from the server's point of view.
#
# DEFAULTS:
#   Fixed defaults are declared with JSON-schema "default" and come from the
#   same constants the request builders use.  Date defaults are relative to
#   the call time, so they are described in prose instead.
# =============================================================================

import copy
from typing import Any

from core.builders import (
    DEFAULT_ERROR_GROUPING,
    DEFAULT_LIMIT,
    DEFAULT_MIN_OCCURRENCES,
    DEFAULT_OFFSET,
    DEFAULT_PERCENTILES,
    DEFAULT_SORT,
    DEFAULT_WINDOW_DAYS,
)
from core.errors import UnknownToolError
from core.models import ToolDefinition

# Shared schema fragments
_DATE = {
    "type": "string",
    "description": f"Start date in ISO format (defaults to {DEFAULT_WINDOW_DAYS} days before now)",
}
_END_DATE = {"type": "string", "description": "End date in ISO format (defaults to now)"}


def _schema(properties: dict[str, Any], required: list[str] | None = None) -> dict[str, Any]:
    return {"type": "object", "properties": properties, "required": required or []}


# -----------------------------------------------------------------------------
# The catalog
# -----------------------------------------------------------------------------
# Order matters: it is the order tools are listed to the model.
# -----------------------------------------------------------------------------
_DEFINITIONS = [
    ToolDefinition(
        name="search_sessions",
        description=(
            "Search and filter sessions with various criteria like date range, user "
            "properties, errors, performance metrics, custom events, etc."
        ),
        input_schema=_schema({
            "startDate": _DATE,
            "endDate": _END_DATE,
            "filters": {
                "type": "array",
                "description": "Array of filters to apply",
                "default": [],
                "items": {
                    "type": "object",
                    "properties": {
                        "type": {
                            "type": "string",
                            "description": (
                                "Filter type (e.g., USER_ID, USER_BROWSER, USER_OS, USER_DEVICE, "
                                "USER_COUNTRY, DURATION, ERROR, CUSTOM, METADATA, etc.)"
                            ),
                        },
                        "operator": {
                            "type": "string",
                            "description": (
                                "Operator (is, is_not, contains, starts_with, ends_with, "
                                "greater, less, between)"
                            ),
                        },
                        "value": {"type": ["string", "number", "array"], "description": "Filter value"},
                    },
                },
            },
            "limit": {"type": "number", "description": "Number of sessions to return", "default": DEFAULT_LIMIT},
            "offset": {"type": "number", "description": "Offset for pagination", "default": DEFAULT_OFFSET},
            "sort": {
                "type": "object",
                "default": dict(DEFAULT_SORT),
                "properties": {
                    "field": {
                        "type": "string",
                        "description": "Field to sort by (startedAt, duration, errorCount, etc.)",
                    },
                    "order": {"type": "string", "enum": ["asc", "desc"], "description": "Sort order"},
                },
            },
        }),
    ),
    ToolDefinition(
        name="get_session_details",
        description=(
            "Get detailed information about a specific session including all events, errors, "
            "network requests, console logs, custom events, and performance metrics"
        ),
        input_schema=_schema(
            {"sessionId": {"type": "string", "description": "The session ID to retrieve"}},
            required=["sessionId"],
        ),
    ),
    ToolDefinition(
        name="get_session_events",
        description="Get all events from a session with optional filtering by event type",
        input_schema=_schema(
            {
                "sessionId": {"type": "string", "description": "The session ID"},
                "eventTypes": {
                    "type": "array",
                    "items": {"type": "string"},
                    "description": "Filter by specific event types (CLICK, INPUT, LOCATION, CUSTOM, ERROR, etc.)",
                },
                "startTime": {"type": "number", "description": "Start timestamp (ms)"},
                "endTime": {"type": "number", "description": "End timestamp (ms)"},
            },
            required=["sessionId"],
        ),
    ),
    ToolDefinition(
        name="aggregate_sessions",
        description="Aggregate session data with various metrics and groupings",
        input_schema=_schema(
            {
                "startDate": _DATE,
                "endDate": _END_DATE,
                "metrics": {
                    "type": "array",
                    "description": "Metrics to calculate",
                    "items": {
                        "type": "string",
                        "enum": ["count", "avg_duration", "error_rate", "bounce_rate", "unique_users", "page_views"],
                    },
                },
                "groupBy": {
                    "type": "array",
                    "description": "Fields to group by",
                    "default": [],
                    "items": {
                        "type": "string",
                        "enum": ["hour", "day", "week", "browser", "device", "country", "page", "error_type"],
                    },
                },
                "filters": {"type": "array", "description": "Same filter format as search_sessions", "default": []},
            },
            required=["metrics"],
        ),
    ),
    ToolDefinition(
        name="get_user_journey",
        description="Get the complete journey of a user across multiple sessions",
        input_schema=_schema(
            {
                "userId": {"type": "string", "description": "User ID or anonymous ID"},
                "startDate": _DATE,
                "endDate": _END_DATE,
                "includeEvents": {"type": "boolean", "description": "Include detailed events (default false)"},
            },
            required=["userId"],
        ),
    ),
    ToolDefinition(
        name="get_errors_issues",
        description="Get errors and issues with their impact and affected sessions",
        input_schema=_schema({
            "startDate": _DATE,
            "endDate": _END_DATE,
            "errorTypes": {
                "type": "array",
                "default": [],
                "items": {"type": "string"},
                "description": "Filter by error types (js_exception, missing_resource, etc.)",
            },
            "minOccurrences": {
                "type": "number",
                "description": "Minimum number of occurrences",
                "default": DEFAULT_MIN_OCCURRENCES,
            },
            "groupBy": {
                "type": "string",
                "enum": ["message", "stack", "url"],
                "description": "How to group errors",
                "default": DEFAULT_ERROR_GROUPING,
            },
        }),
    ),
    ToolDefinition(
        name="get_funnel_analysis",
        description="Analyze user funnels and conversion paths",
        input_schema=_schema(
            {
                "steps": {
                    "type": "array",
                    "description": "Funnel steps in order",
                    "items": {
                        "type": "object",
                        "properties": {
                            "name": {"type": "string", "description": "Step name"},
                            "eventType": {"type": "string", "description": "Event type (LOCATION, CLICK, CUSTOM)"},
                            "eventValue": {"type": "string", "description": "Event value to match"},
                        },
                    },
                },
                "startDate": _DATE,
                "endDate": _END_DATE,
                "filters": {"type": "array", "description": "Additional filters", "default": []},
            },
            required=["steps"],
        ),
    ),
    ToolDefinition(
        name="get_performance_metrics",
        description=(
            "Get performance metrics like page load times, largest contentful paint, "
            "time to interactive, etc."
        ),
        input_schema=_schema(
            {
                "startDate": _DATE,
                "endDate": _END_DATE,
                "metrics": {
                    "type": "array",
                    "items": {
                        "type": "string",
                        "enum": [
                            "load_time", "dom_complete", "first_paint", "first_contentful_paint",
                            "largest_contentful_paint", "time_to_interactive", "cpu_load", "memory_usage",
                        ],
                    },
                },
                "groupBy": {
                    "type": "array",
                    "items": {"type": "string", "enum": ["page", "browser", "device", "country"]},
                    "default": [],
                },
                "percentiles": {
                    "type": "array",
                    "items": {"type": "number"},
                    "description": "Percentiles to calculate (e.g., [50, 75, 90, 95, 99])",
                    "default": list(DEFAULT_PERCENTILES),
                },
            },
            required=["metrics"],
        ),
    ),
    ToolDefinition(
        name="execute_custom_query",
        description="Execute a custom query on the session data (supports SQL-like syntax for ClickHouse)",
        input_schema=_schema(
            {
                "query": {"type": "string", "description": "Custom query to execute"},
                "parameters": {"type": "object", "description": "Query parameters", "default": {}},
            },
            required=["query"],
        ),
    ),
    # --- Organization API key mode only ---
    ToolDefinition(
        name="list_projects",
        description="List the projects accessible with the configured organization API key",
        input_schema=_schema({}),
    ),
    ToolDefinition(
        name="get_user_sessions",
        description="Get the sessions recorded for a single user, optionally within a date range",
        input_schema=_schema(
            {
                "userId": {"type": "string", "description": "User ID as set by the tracker"},
                "startDate": {
                    "type": ["string", "number"],
                    "description": "Start of the range (ISO date or epoch milliseconds)",
                },
                "endDate": {
                    "type": ["string", "number"],
                    "description": "End of the range (ISO date or epoch milliseconds)",
                },
            },
            required=["userId"],
        ),
    ),
]

TOOL_DEFINITIONS: dict[str, ToolDefinition] = {d.name: d for d in _DEFINITIONS}


def get_tool(name: str) -> ToolDefinition:
    """Look up a catalog entry, raising UnknownToolError if absent."""
    try:
        return TOOL_DEFINITIONS[name]
    except KeyError:
        raise UnknownToolError(name) from None


def resolve_tool(name: str, auth_mode) -> ToolDefinition:
    """The catalog entry for `name` as seen under `auth_mode`."""
    return _apply_override(get_tool(name), auth_mode.overrides.get(name))


def list_tools(auth_mode) -> list[ToolDefinition]:
    """Return the tools served under `auth_mode`, with its overrides applied.

    `auth_mode` is anything exposing `tool_names` and `overrides` (see
    core/auth.py).  Catalog order is preserved.
    """
    served = set(auth_mode.tool_names)
    return [
        _apply_override(definition, auth_mode.overrides.get(definition.name))
        for definition in _DEFINITIONS
        if definition.name in served
    ]


def _apply_override(definition: ToolDefinition, override: dict[str, Any] | None) -> ToolDefinition:
    # Overrides may replace the description, add properties, or replace
    # the required list.  The shared catalog entry is never mutated.
    if not override:
        return definition
    schema = copy.deepcopy(definition.input_schema)
    schema["properties"].update(copy.deepcopy(override.get("properties", {})))
    if "required" in override:
        schema["required"] = list(override["required"])
    return ToolDefinition(
        name=definition.name,
        description=override.get("description", definition.description),
        input_schema=schema,
    )
