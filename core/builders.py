# =============================================================================
# core/builders.py  -  Tool arguments -> OutboundRequest
# =============================================================================
#
# WHAT THIS MODULE DOES:
#   One small pure function per (auth mode, tool).  Each takes the model's
#   loosely-typed argument dict plus a RequestContext and returns exactly one
#   OutboundRequest: method, path (with the project identifier interpolated),
#   and either query params (GET) or a JSON body (POST).
#
# DEFAULTS:
#   Date ranges are computed from `context.now`, which the dispatcher captures
#   once per invocation.  Nothing here reads the clock, so the same arguments
#   and the same `now` always produce the same request.
#
#   "Absent" means: key missing, None, or "".  Anything else the model passed
#   is forwarded untouched; type/enum strictness is the remote API's job.
#
# DATE FORMATS:
#   - project mode (full access):   ISO-8601 strings, millisecond precision
#   - organization mode (public v1): epoch milliseconds
# =============================================================================

from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from typing import Any, Callable
from urllib.parse import quote

from core.errors import UnsupportedToolError
from core.models import OutboundRequest

DEFAULT_WINDOW_DAYS = 7
ORGANIZATION_JOURNEY_WINDOW_DAYS = 30
DEFAULT_LIMIT = 50
DEFAULT_OFFSET = 0
DEFAULT_SORT = {"field": "startedAt", "order": "desc"}
DEFAULT_PERCENTILES = [50, 75, 90, 95, 99]
DEFAULT_MIN_OCCURRENCES = 1
DEFAULT_ERROR_GROUPING = "message"


@dataclass(frozen=True)
class RequestContext:
    """Per-invocation inputs that are not tool arguments."""

    project: str
    now: datetime


RequestBuilder = Callable[[dict[str, Any], RequestContext], OutboundRequest]


# =============================================================================
# Helpers
# =============================================================================

def is_absent(value: Any) -> bool:
    return value is None or value == ""


def _get(args: dict[str, Any], key: str, default: Any = None) -> Any:
    value = args.get(key)
    return default if is_absent(value) else value


def iso_timestamp(moment: datetime) -> str:
    """Format like JavaScript's Date.toISOString(): 2025-01-31T12:00:00.000Z"""
    moment = moment.astimezone(timezone.utc)
    return moment.strftime("%Y-%m-%dT%H:%M:%S.") + f"{moment.microsecond // 1000:03d}Z"


def epoch_millis(moment: datetime) -> int:
    return int(moment.timestamp() * 1000)


def to_epoch_millis(value: Any) -> Any:
    """Best-effort conversion of a model-supplied date to epoch milliseconds.

    Numbers and digit strings are taken as milliseconds already; ISO strings
    are parsed.  Anything unparseable is forwarded as-is for the remote API
    to reject.
    """
    if isinstance(value, bool):
        return value
    if isinstance(value, (int, float)):
        return int(value)
    if isinstance(value, str):
        text = value.strip()
        if text.isdigit():
            return int(text)
        try:
            parsed = datetime.fromisoformat(text.replace("Z", "+00:00"))
        except ValueError:
            return value
        if parsed.tzinfo is None:
            parsed = parsed.replace(tzinfo=timezone.utc)
        return epoch_millis(parsed)
    return value


def _segment(value: Any) -> str:
    # Identifiers go into a single path segment, so "/" must be escaped too.
    return quote(str(value), safe="")


def _query(**params: Any) -> dict[str, Any]:
    # requests would send True as "True"; the API expects JSON-style booleans.
    query = {}
    for key, value in params.items():
        if value is None:
            continue
        if isinstance(value, bool):
            value = "true" if value else "false"
        query[key] = value
    return query


def _iso_range(args: dict[str, Any], context: RequestContext, days: int = DEFAULT_WINDOW_DAYS):
    start = _get(args, "startDate") or iso_timestamp(context.now - timedelta(days=days))
    end = _get(args, "endDate") or iso_timestamp(context.now)
    return start, end


def _millis_range(args: dict[str, Any], context: RequestContext, days: int):
    start = _get(args, "startDate")
    end = _get(args, "endDate")
    start = to_epoch_millis(start) if start is not None else epoch_millis(context.now - timedelta(days=days))
    end = to_epoch_millis(end) if end is not None else epoch_millis(context.now)
    return start, end


# =============================================================================
# Project mode (full-access token, /v1/projects/{projectId}/...)
# =============================================================================

def _project_path(context: RequestContext, suffix: str) -> str:
    return f"/v1/projects/{context.project}/{suffix}"


def search_sessions(args, context):
    start, end = _iso_range(args, context)
    return OutboundRequest(
        method="POST",
        path=_project_path(context, "sessions/search"),
        body={
            "startDate": start,
            "endDate": end,
            "filters": _get(args, "filters", []),
            "limit": _get(args, "limit", DEFAULT_LIMIT),
            "offset": _get(args, "offset", DEFAULT_OFFSET),
            "sort": _get(args, "sort", dict(DEFAULT_SORT)),
        },
    )


def get_session_details(args, context):
    return OutboundRequest(
        method="GET",
        path=_project_path(context, f"sessions/{_segment(args['sessionId'])}"),
    )


def get_session_events(args, context):
    return OutboundRequest(
        method="GET",
        path=_project_path(context, f"sessions/{_segment(args['sessionId'])}/events"),
        params=_query(
            eventTypes=_get(args, "eventTypes"),
            startTime=_get(args, "startTime"),
            endTime=_get(args, "endTime"),
        ),
    )


def aggregate_sessions(args, context):
    start, end = _iso_range(args, context)
    return OutboundRequest(
        method="POST",
        path=_project_path(context, "sessions/aggregate"),
        body={
            "startDate": start,
            "endDate": end,
            "metrics": args.get("metrics"),
            "groupBy": _get(args, "groupBy", []),
            "filters": _get(args, "filters", []),
        },
    )


def get_user_journey(args, context):
    start, end = _iso_range(args, context)
    return OutboundRequest(
        method="GET",
        path=_project_path(context, f"users/{_segment(args['userId'])}/journey"),
        params=_query(startDate=start, endDate=end, includeEvents=_get(args, "includeEvents")),
    )


def get_errors_issues(args, context):
    start, end = _iso_range(args, context)
    return OutboundRequest(
        method="POST",
        path=_project_path(context, "errors/search"),
        body={
            "startDate": start,
            "endDate": end,
            "errorTypes": _get(args, "errorTypes", []),
            "minOccurrences": _get(args, "minOccurrences", DEFAULT_MIN_OCCURRENCES),
            "groupBy": _get(args, "groupBy", DEFAULT_ERROR_GROUPING),
        },
    )


def get_funnel_analysis(args, context):
    start, end = _iso_range(args, context)
    return OutboundRequest(
        method="POST",
        path=_project_path(context, "funnels/analyze"),
        body={
            "steps": args.get("steps"),
            "startDate": start,
            "endDate": end,
            "filters": _get(args, "filters", []),
        },
    )


def get_performance_metrics(args, context):
    start, end = _iso_range(args, context)
    return OutboundRequest(
        method="POST",
        path=_project_path(context, "performance/metrics"),
        body={
            "startDate": start,
            "endDate": end,
            "metrics": args.get("metrics"),
            "groupBy": _get(args, "groupBy", []),
            "percentiles": _get(args, "percentiles", list(DEFAULT_PERCENTILES)),
        },
    )


def execute_custom_query(args, context):
    return OutboundRequest(
        method="POST",
        path=_project_path(context, "query"),
        body={"query": args.get("query"), "parameters": _get(args, "parameters", {})},
    )


PROJECT_BUILDERS: dict[str, RequestBuilder] = {
    "search_sessions": search_sessions,
    "get_session_details": get_session_details,
    "get_session_events": get_session_events,
    "aggregate_sessions": aggregate_sessions,
    "get_user_journey": get_user_journey,
    "get_errors_issues": get_errors_issues,
    "get_funnel_analysis": get_funnel_analysis,
    "get_performance_metrics": get_performance_metrics,
    "execute_custom_query": execute_custom_query,
}


# =============================================================================
# Organization mode (organization API key, /api/v1/{projectKey}/...)
# =============================================================================
# The public API only exposes per-user session lists, session events and the
# project list.  Everything else is answered with a fixed explanation (see
# core/auth.py), and search_sessions only works when narrowed to one user.
# =============================================================================

UNFILTERED_SEARCH_MESSAGE = (
    "Searching all sessions is not available with an organization API key: the public "
    "API can only list sessions for a specific user. Pass a userId to search_sessions, "
    "or use get_user_sessions."
)


def _org_path(context: RequestContext, suffix: str) -> str:
    return f"/api/v1/{context.project}/{suffix}"


def _user_sessions(args, context, window_days: int | None) -> OutboundRequest:
    if window_days is None:
        start = _get(args, "startDate")
        end = _get(args, "endDate")
        params = _query(
            start_date=to_epoch_millis(start) if start is not None else None,
            end_date=to_epoch_millis(end) if end is not None else None,
        )
    else:
        start, end = _millis_range(args, context, window_days)
        params = _query(start_date=start, end_date=end)
    return OutboundRequest(
        method="GET",
        path=_org_path(context, f"users/{_segment(args['userId'])}/sessions"),
        params=params,
    )


def org_search_sessions(args, context):
    if is_absent(args.get("userId")):
        raise UnsupportedToolError(UNFILTERED_SEARCH_MESSAGE)
    return _user_sessions(args, context, DEFAULT_WINDOW_DAYS)


def org_get_session_events(args, context):
    return OutboundRequest(
        method="GET",
        path=_org_path(context, f"sessions/{_segment(args['sessionId'])}/events"),
        params=_query(
            eventTypes=_get(args, "eventTypes"),
            startTime=_get(args, "startTime"),
            endTime=_get(args, "endTime"),
        ),
    )


def org_get_user_journey(args, context):
    return _user_sessions(args, context, ORGANIZATION_JOURNEY_WINDOW_DAYS)


def org_list_projects(args, context):
    return OutboundRequest(method="GET", path="/api/v1/projects")


def org_get_user_sessions(args, context):
    return _user_sessions(args, context, None)


ORGANIZATION_BUILDERS: dict[str, RequestBuilder] = {
    "search_sessions": org_search_sessions,
    "get_session_events": org_get_session_events,
    "get_user_journey": org_get_user_journey,
    "list_projects": org_list_projects,
    "get_user_sessions": org_get_user_sessions,
}
