"""
HTTP client tests.  `responses` intercepts requests.Session traffic, so no
network is touched.
"""

import json
from unittest.mock import MagicMock

import pytest
import requests
import responses

from conftest import NOW
from core.auth import ORGANIZATION_MODE, PROJECT_MODE
from core.client import OpenReplayClient
from core.config import Settings
from core.dispatcher import Dispatcher
from core.errors import RemoteCallError
from core.models import OutboundRequest

BASE = "https://openreplay.example.test"
SETTINGS = Settings(api_url=BASE, api_key="secret", project_id="42")


@responses.activate
def test_project_mode_posts_json_with_bearer_token():
    responses.add(responses.POST, f"{BASE}/v1/projects/42/sessions/search", json={"sessions": []})
    client = OpenReplayClient(SETTINGS, PROJECT_MODE)

    body = client.send(OutboundRequest("POST", "/v1/projects/42/sessions/search", body={"limit": 50}))

    assert body == {"sessions": []}
    sent = responses.calls[0].request
    assert sent.headers["Authorization"] == "Bearer secret"
    assert sent.headers["Content-Type"] == "application/json"
    assert json.loads(sent.body) == {"limit": 50}


@responses.activate
def test_organization_mode_sends_raw_key_and_query_params():
    responses.add(responses.GET, f"{BASE}/api/v1/key/sessions/abc/events", json=[])
    client = OpenReplayClient(SETTINGS, ORGANIZATION_MODE)

    client.send(OutboundRequest("GET", "/api/v1/key/sessions/abc/events", params={"eventTypes": ["CLICK", "ERROR"]}))

    sent = responses.calls[0].request
    assert sent.headers["Authorization"] == "secret"
    assert "eventTypes=CLICK&eventTypes=ERROR" in sent.url


@responses.activate
def test_non_2xx_raises_with_status_and_detail():
    responses.add(
        responses.GET, f"{BASE}/v1/projects/42/sessions/missing",
        json={"errors": ["Session not found"]}, status=404,
    )
    client = OpenReplayClient(SETTINGS, PROJECT_MODE)

    with pytest.raises(RemoteCallError) as excinfo:
        client.send(OutboundRequest("GET", "/v1/projects/42/sessions/missing"))

    assert str(excinfo.value) == "Request failed with status code 404: Session not found"
    assert excinfo.value.status_code == 404


@responses.activate
def test_non_2xx_without_body():
    responses.add(responses.POST, f"{BASE}/v1/projects/42/query", body="", status=500)
    client = OpenReplayClient(SETTINGS, PROJECT_MODE)

    with pytest.raises(RemoteCallError, match="^Request failed with status code 500$"):
        client.send(OutboundRequest("POST", "/v1/projects/42/query", body={"query": "x"}))


@responses.activate
def test_connection_error_keeps_its_message():
    responses.add(
        responses.GET, f"{BASE}/v1/projects/42/sessions/abc",
        body=requests.ConnectionError("ECONNRESET"),
    )
    client = OpenReplayClient(SETTINGS, PROJECT_MODE)

    with pytest.raises(RemoteCallError, match="ECONNRESET"):
        client.send(OutboundRequest("GET", "/v1/projects/42/sessions/abc"))


@responses.activate
def test_timeout_is_reported():
    responses.add(
        responses.GET, f"{BASE}/v1/projects/42/sessions/abc",
        body=requests.Timeout("read timed out"),
    )
    client = OpenReplayClient(SETTINGS, PROJECT_MODE)

    with pytest.raises(RemoteCallError, match="timed out"):
        client.send(OutboundRequest("GET", "/v1/projects/42/sessions/abc"))


@responses.activate
def test_malformed_body_is_an_error():
    responses.add(
        responses.GET, f"{BASE}/v1/projects/42/sessions/abc",
        body="<html>gateway</html>", content_type="text/html",
    )
    client = OpenReplayClient(SETTINGS, PROJECT_MODE)

    with pytest.raises(RemoteCallError, match="Malformed response body"):
        client.send(OutboundRequest("GET", "/v1/projects/42/sessions/abc"))


@responses.activate
def test_empty_body_is_none():
    responses.add(responses.GET, f"{BASE}/api/v1/projects", body="", status=204)
    client = OpenReplayClient(SETTINGS, ORGANIZATION_MODE)

    assert client.send(OutboundRequest("GET", "/api/v1/projects")) is None


def test_configured_timeout_is_passed_to_requests():
    response = MagicMock(ok=True, content=b'{"a": 1}', status_code=200)
    response.json.return_value = {"a": 1}
    session = MagicMock()
    session.headers = {}
    session.request.return_value = response
    client = OpenReplayClient(Settings(api_url=BASE, timeout=12.5), PROJECT_MODE, session=session)

    client.send(OutboundRequest("GET", "/v1/projects/42/sessions/abc"))

    session.request.assert_called_once_with(
        "GET", f"{BASE}/v1/projects/42/sessions/abc", params=None, json=None, timeout=12.5
    )


# --- dispatcher + real client ------------------------------------------------

@responses.activate
def test_session_details_end_to_end():
    responses.add(responses.GET, f"{BASE}/v1/projects/42/sessions/abc", json={"total": 3})
    dispatcher = Dispatcher.from_settings(SETTINGS)
    dispatcher.clock = lambda: NOW

    result = dispatcher.handle("get_session_details", {"sessionId": "abc"})

    assert result.first_text == '{\n  "total": 3\n}'
    assert len(responses.calls) == 1


@responses.activate
def test_connection_reset_end_to_end_does_not_raise():
    responses.add(
        responses.POST, f"{BASE}/v1/projects/42/errors/search",
        body=requests.ConnectionError("ECONNRESET"),
    )
    dispatcher = Dispatcher.from_settings(SETTINGS)

    result = dispatcher.handle("get_errors_issues", {})

    assert result.first_text == "Error: ECONNRESET"
    assert len(responses.calls) == 1
