# =============================================================================
# core/config.py  -  Process-wide settings
# =============================================================================
#
# Settings are read ONCE at startup and never change afterwards (frozen
# dataclass).  Values come from the process environment; a local `.env`
# file is honored through python-dotenv, same as the entry points.
#
# Deliberately NOT validated here: an empty API key or project identifier.
# Calls simply fail remotely and the model sees the error text.
# =============================================================================

import os
from dataclasses import dataclass
from typing import Mapping

from dotenv import load_dotenv

from core.auth import AUTH_MODES, PROJECT_MODE
from core.errors import ConfigurationError

DEFAULT_API_URL = "https://api.openreplay.com"
DEFAULT_AUTH_MODE = PROJECT_MODE.name
DEFAULT_TIMEOUT_SECONDS = 30.0
DEFAULT_AGENT_MODEL = "openrouter/openai/gpt-4o"


@dataclass(frozen=True)
class Settings:
    """Immutable configuration for one server process."""

    api_url: str = DEFAULT_API_URL
    api_key: str = ""
    auth_mode: str = DEFAULT_AUTH_MODE
    project_id: str = ""                  # used by the "project" auth mode
    project_key: str = ""                 # used by the "organization" auth mode
    timeout: float | None = DEFAULT_TIMEOUT_SECONDS
    log_level: str = "INFO"
    agent_model: str = DEFAULT_AGENT_MODEL

    @property
    def project_identifier(self) -> str:
        """The identifier interpolated into request paths for this auth mode."""
        return getattr(self, AUTH_MODES[self.auth_mode].project_field)

    @classmethod
    def from_env(cls, environ: Mapping[str, str] | None = None) -> "Settings":
        """Build settings from the environment (loading `.env` first).

        Passing an explicit mapping skips `.env` loading entirely, which
        keeps tests independent of the developer's shell.
        """
        if environ is None:
            load_dotenv()
            environ = os.environ

        auth_mode = (environ.get("OPENREPLAY_AUTH_MODE") or DEFAULT_AUTH_MODE).strip().lower()
        if auth_mode not in AUTH_MODES:
            raise ConfigurationError(
                f"OPENREPLAY_AUTH_MODE must be one of {sorted(AUTH_MODES)}, got {auth_mode!r}"
            )

        return cls(
            api_url=(environ.get("OPENREPLAY_API_URL") or DEFAULT_API_URL).rstrip("/"),
            api_key=environ.get("OPENREPLAY_API_KEY", ""),
            auth_mode=auth_mode,
            project_id=environ.get("OPENREPLAY_PROJECT_ID", ""),
            project_key=environ.get("OPENREPLAY_PROJECT_KEY", ""),
            timeout=_parse_timeout(environ.get("OPENREPLAY_TIMEOUT")),
            log_level=(environ.get("OPENREPLAY_LOG_LEVEL") or "INFO").upper(),
            agent_model=environ.get("OPENREPLAY_AGENT_MODEL") or DEFAULT_AGENT_MODEL,
        )


def _parse_timeout(raw: str | None) -> float | None:
    # Unset -> default, "0" -> no client-side timeout at all.
    if raw is None or raw.strip() == "":
        return DEFAULT_TIMEOUT_SECONDS
    try:
        value = float(raw)
    except ValueError:
        raise ConfigurationError(f"OPENREPLAY_TIMEOUT must be a number of seconds, got {raw!r}") from None
    if value < 0:
        raise ConfigurationError(f"OPENREPLAY_TIMEOUT must not be negative, got {raw!r}")
    return value or None
