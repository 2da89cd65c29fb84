"""Runtime configuration loaded from AGENTWEAVE_* environment variables."""

from __future__ import annotations

from functools import lru_cache

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class AgentweaveSettings(BaseSettings):
    """Agentweave runtime settings.

    All fields are read from environment variables with the ``AGENTWEAVE_``
    prefix.  For example, ``AGENTWEAVE_LOG_LEVEL=DEBUG`` maps to ``log_level``.

    Model provider keys (``GEMINI_API_KEY``, ``GOOGLE_API_KEY``) are **not**
    managed here -- backends read them directly.
    """

    model_config = SettingsConfigDict(
        env_prefix="AGENTWEAVE_",
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # -- Logging ---------------------------------------------------------------
    log_level: str = "INFO"
    log_json: bool = False
    """Write one serialized JSON record per line instead of coloured text."""

    # -- Runner ----------------------------------------------------------------
    app_name: str = "agentweave"
    """Application name used to scope sessions when none is given."""

    # -- Model backend ---------------------------------------------------------
    default_model: str = "gemini-2.0-flash"
    gemini_base_url: str = "https://generativelanguage.googleapis.com"
    request_timeout: float = Field(default=60.0, gt=0)
    """Seconds before a backend HTTP request is abandoned."""

    max_model_steps: int = Field(default=5, ge=1)
    """Model calls per ModelAgent run when the RunConfig sets no ``max_steps``."""


def get_settings() -> AgentweaveSettings:
    """Return a cached settings instance.

    Reads from environment variables and ``.env`` on first call, then returns
    the same object.  Call ``_get_settings_cached.cache_clear()`` in tests to
    force a re-read after overriding env vars.
    """
    return _get_settings_cached()


@lru_cache(maxsize=1)
def _get_settings_cached() -> AgentweaveSettings:
    return AgentweaveSettings()
