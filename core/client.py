# =============================================================================
# core/client.py  -  The one place that talks HTTP
# =============================================================================
#
# A thin wrapper around a `requests.Session` preconfigured with the base URL
# and auth header.  `send()` issues exactly ONE request per OutboundRequest:
# no retries, no backoff, no circuit breaking.  Every failure is normalized
# into RemoteCallError so the dispatcher has a single thing to catch.
# =============================================================================

import logging
from typing import Any

import requests

from core.auth import AuthMode
from core.config import Settings
from core.errors import RemoteCallError
from core.models import OutboundRequest

logger = logging.getLogger(__name__)

# Longest remote error detail echoed back to the model.
_MAX_DETAIL_CHARS = 500


class OpenReplayClient:
    """HTTP client bound to one base URL, credential and auth mode."""

    def __init__(self, settings: Settings, auth_mode: AuthMode, session: requests.Session | None = None):
        self.base_url = settings.api_url.rstrip("/")
        self.timeout = settings.timeout
        self.session = session or requests.Session()
        self.session.headers.update({
            "Authorization": auth_mode.authorization(settings.api_key),
            "Content-Type": "application/json",
        })

    def send(self, request: OutboundRequest) -> Any:
        """Issue the request and return the decoded JSON body.

        Raises:
            RemoteCallError: network failure, timeout, non-2xx status, or a
                body that is not JSON.
        """
        url = f"{self.base_url}{request.path}"
        logger.debug("%s %s params=%s", request.method, url, request.params)
        try:
            response = self.session.request(
                request.method,
                url,
                params=request.params or None,
                json=request.body,
                timeout=self.timeout,
            )
        except requests.Timeout as exc:
            raise RemoteCallError(f"Request timed out: {exc}") from exc
        except requests.RequestException as exc:
            raise RemoteCallError(str(exc) or exc.__class__.__name__) from exc

        if not response.ok:
            raise RemoteCallError(_status_message(response), status_code=response.status_code)

        if not response.content or not response.content.strip():
            return None
        try:
            return response.json()
        except ValueError as exc:
            raise RemoteCallError(
                f"Malformed response body from {request.method} {request.path}: {exc}",
                status_code=response.status_code,
            ) from exc

    def close(self) -> None:
        self.session.close()


def _status_message(response: requests.Response) -> str:
    message = f"Request failed with status code {response.status_code}"
    detail = _error_detail(response)
    return f"{message}: {detail}" if detail else message


def _error_detail(response: requests.Response) -> str:
    # OpenReplay reports errors as {"errors": [...]}, {"error": "..."} or
    # plain text depending on the endpoint.
    try:
        payload = response.json()
    except ValueError:
        return response.text.strip()[:_MAX_DETAIL_CHARS]
    if isinstance(payload, dict):
        for key in ("errors", "error", "message", "detail"):
            if payload.get(key):
                value = payload[key]
                if isinstance(value, list):
                    value = "; ".join(str(v) for v in value)
                return str(value)[:_MAX_DETAIL_CHARS]
    return str(payload)[:_MAX_DETAIL_CHARS]
