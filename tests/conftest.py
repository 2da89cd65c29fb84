"""Shared test fixtures.

Every test runs with a clean settings cache and no ``AGENTWEAVE_*`` or model
API-key variables from the surrounding environment.  Nothing here touches the
network: model backends are scripted (see ``fakes.py``) or mocked with
``httpx.MockTransport``.
"""

from __future__ import annotations

import os
import sys
from collections.abc import Callable, Iterator

import pytest
from loguru import logger

from agentweave.runtime.agents import Agent
from agentweave.runtime.context import InvocationContext, new_invocation_id
from agentweave.runtime.settings import _get_settings_cached
from agentweave.runtime.store import InMemorySessionService

APP_NAME = "test-app"
USER_ID = "alice"


@pytest.fixture(autouse=True)
def _isolated_env(monkeypatch: pytest.MonkeyPatch) -> Iterator[None]:
    for key in list(os.environ):
        if key.startswith("AGENTWEAVE_") or key in ("GEMINI_API_KEY", "GOOGLE_API_KEY"):
            monkeypatch.delenv(key)
    _get_settings_cached.cache_clear()
    yield
    _get_settings_cached.cache_clear()


@pytest.fixture
def log_messages() -> Iterator[list[str]]:
    """Collect loguru messages (all levels) emitted during the test."""
    messages: list[str] = []
    handler_id = logger.add(lambda message: messages.append(str(message).rstrip("\n")), level="DEBUG", format="{message}")
    yield messages
    logger.remove(handler_id)


@pytest.fixture
def restore_logging() -> Iterator[None]:
    """Reset loguru to a single stderr sink after tests that reconfigure it."""
    yield
    logger.remove()
    logger.add(sys.stderr)


# ---------------------------------------------------------------------------
# Sessions and contexts
# ---------------------------------------------------------------------------


@pytest.fixture
def session_service() -> InMemorySessionService:
    return InMemorySessionService()


@pytest.fixture
def make_context(session_service: InMemorySessionService) -> Callable[..., InvocationContext]:
    """Build an InvocationContext over a fresh session for *agent*."""

    def _make(agent: Agent, **kwargs) -> InvocationContext:
        session = session_service.create_session(app_name=APP_NAME, user_id=USER_ID)
        return InvocationContext(
            session=session,
            agent=agent,
            invocation_id=new_invocation_id(),
            session_service=session_service,
            **kwargs,
        )

    return _make
