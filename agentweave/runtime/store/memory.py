"""In-process session service.

Reference implementation of :class:`SessionService` backed by nested dicts::

    {app_name: {user_id: {session_id: Session}}}

Single-writer assumption: there is no locking, and nothing survives the
process.  Concurrent runs against one session id must be serialized by the
caller.

App- and user-scoped state live beside the sessions.  Writing an ``app:`` or
``user:`` key to any session also records it (prefix stripped) in the scoped
map, and new sessions start with the current scoped values under their
prefixes.
"""

from __future__ import annotations

import uuid
from typing import TYPE_CHECKING, Any

from loguru import logger

from agentweave.runtime.models.session import APP_PREFIX, USER_PREFIX, Session

if TYPE_CHECKING:
    from collections.abc import Mapping

    from agentweave.runtime.models.events import Event


def split_scoped_delta(delta: Mapping[str, Any]) -> tuple[dict[str, Any], dict[str, Any]]:
    """Extract the ``app:`` and ``user:`` entries of *delta*, prefixes stripped."""
    app_delta: dict[str, Any] = {}
    user_delta: dict[str, Any] = {}
    for key, value in delta.items():
        if key.startswith(APP_PREFIX):
            app_delta[key.removeprefix(APP_PREFIX)] = value
        elif key.startswith(USER_PREFIX):
            user_delta[key.removeprefix(USER_PREFIX)] = value
    return app_delta, user_delta


class InMemorySessionService:
    """Dict-backed session service for development and tests."""

    def __init__(self) -> None:
        self._sessions: dict[str, dict[str, dict[str, Session]]] = {}
        self._user_state: dict[str, dict[str, dict[str, Any]]] = {}
        self._app_state: dict[str, dict[str, Any]] = {}

    # -- Create ----------------------------------------------------------------

    def create_session(
        self,
        *,
        app_name: str,
        user_id: str,
        initial_state: Mapping[str, Any] | None = None,
    ) -> Session:
        state: dict[str, Any] = {}
        state.update({f"{APP_PREFIX}{k}": v for k, v in self.get_app_state(app_name=app_name).items()})
        state.update({
            f"{USER_PREFIX}{k}": v for k, v in self.get_user_state(app_name=app_name, user_id=user_id).items()
        })
        if initial_state:
            state.update(initial_state)
            self._record_scoped(app_name, user_id, initial_state)

        session = Session(
            id=f"session-{uuid.uuid4()}",
            app_name=app_name,
            user_id=user_id,
            state=state,
        )
        self._sessions.setdefault(app_name, {}).setdefault(user_id, {})[session.id] = session
        logger.debug("Session created: {} (app={}, user={})", session.id, app_name, user_id)
        return session

    # -- Read ------------------------------------------------------------------

    def get_session(self, *, app_name: str, user_id: str, session_id: str) -> Session | None:
        return self._sessions.get(app_name, {}).get(user_id, {}).get(session_id)

    def list_sessions(self, *, app_name: str, user_id: str) -> list[Session]:
        return list(self._sessions.get(app_name, {}).get(user_id, {}).values())

    # -- Mutation --------------------------------------------------------------

    def update_session(
        self,
        *,
        app_name: str,
        user_id: str,
        session_id: str,
        state_updates: Mapping[str, Any],
    ) -> Session | None:
        session = self.get_session(app_name=app_name, user_id=user_id, session_id=session_id)
        if session is None:
            return None
        session.state.update(state_updates)
        self._record_scoped(app_name, user_id, state_updates)
        session.touch()
        return session

    def append_event(self, *, app_name: str, user_id: str, session_id: str, event: Event) -> Session | None:
        session = self.get_session(app_name=app_name, user_id=user_id, session_id=session_id)
        if session is None:
            return None
        session.events.append(event)
        session.touch()
        return session

    def delete_session(self, *, app_name: str, user_id: str, session_id: str) -> bool:
        sessions = self._sessions.get(app_name, {}).get(user_id, {})
        if session_id not in sessions:
            return False
        del sessions[session_id]
        logger.debug("Session deleted: {}", session_id)
        return True

    # -- Scoped state ----------------------------------------------------------

    def get_user_state(self, *, app_name: str, user_id: str) -> dict[str, Any]:
        return dict(self._user_state.get(app_name, {}).get(user_id, {}))

    def update_user_state(self, *, app_name: str, user_id: str, state_updates: Mapping[str, Any]) -> dict[str, Any]:
        user_state = self._user_state.setdefault(app_name, {}).setdefault(user_id, {})
        user_state.update(state_updates)
        return dict(user_state)

    def get_app_state(self, *, app_name: str) -> dict[str, Any]:
        return dict(self._app_state.get(app_name, {}))

    def update_app_state(self, *, app_name: str, state_updates: Mapping[str, Any]) -> dict[str, Any]:
        app_state = self._app_state.setdefault(app_name, {})
        app_state.update(state_updates)
        return dict(app_state)

    def _record_scoped(self, app_name: str, user_id: str, delta: Mapping[str, Any]) -> None:
        app_delta, user_delta = split_scoped_delta(delta)
        if app_delta:
            self.update_app_state(app_name=app_name, state_updates=app_delta)
        if user_delta:
            self.update_user_state(app_name=app_name, user_id=user_id, state_updates=user_delta)
