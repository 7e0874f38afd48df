"""
Shared fixtures for the OpenReplay MCP tests.

Nothing here talks to the network: the dispatcher tests use FakeClient, and
the HTTP client tests stub `requests` with the `responses` library.
"""

from datetime import datetime, timezone

import pytest

from core.auth import ORGANIZATION_MODE, PROJECT_MODE
from core.dispatcher import Dispatcher

# A fixed wall-clock instant so date defaults are reproducible.
NOW = datetime(2025, 3, 10, 12, 30, 45, 123456, tzinfo=timezone.utc)
NOW_ISO = "2025-03-10T12:30:45.123Z"
WEEK_AGO_ISO = "2025-03-03T12:30:45.123Z"

DAY_MS = 24 * 60 * 60 * 1000

# Minimal arguments that satisfy each tool's required fields.
REQUIRED_ARGS = {
    "search_sessions": {},
    "get_session_details": {"sessionId": "abc"},
    "get_session_events": {"sessionId": "abc"},
    "aggregate_sessions": {"metrics": ["count"]},
    "get_user_journey": {"userId": "user-1"},
    "get_errors_issues": {},
    "get_funnel_analysis": {"steps": [{"name": "Landing", "eventType": "LOCATION", "eventValue": "/"}]},
    "get_performance_metrics": {"metrics": ["load_time"]},
    "execute_custom_query": {"query": "SELECT count() FROM sessions"},
    "list_projects": {},
    "get_user_sessions": {"userId": "user-1"},
}


class FakeClient:
    """Records every OutboundRequest and answers with a canned payload."""

    def __init__(self, payload=None, error: Exception | None = None):
        self.payload = {"ok": True} if payload is None else payload
        self.error = error
        self.requests = []
        self.closed = False

    def send(self, request):
        self.requests.append(request)
        if self.error is not None:
            raise self.error
        return self.payload

    def close(self):
        self.closed = True


@pytest.fixture
def fake_client():
    return FakeClient()


@pytest.fixture
def project_dispatcher(fake_client):
    return Dispatcher(PROJECT_MODE, fake_client, "42", clock=lambda: NOW)


@pytest.fixture
def org_dispatcher(fake_client):
    return Dispatcher(ORGANIZATION_MODE, fake_client, "proj-key", clock=lambda: NOW)
