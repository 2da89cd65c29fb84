"""Session service interface.

These six operations are the entire boundary a storage backend implements
to replace the in-memory default.  Lookups of unknown sessions return
``None`` (or ``False`` for delete); they never raise.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any, Protocol, runtime_checkable

if TYPE_CHECKING:
    from collections.abc import Mapping

    from agentweave.runtime.models.events import Event
    from agentweave.runtime.models.session import Session


@runtime_checkable
class SessionService(Protocol):
    """Synchronous protocol for storing sessions and their event logs.

    Sessions are keyed by ``(app_name, user_id, session_id)``.
    """

    def create_session(
        self,
        *,
        app_name: str,
        user_id: str,
        initial_state: Mapping[str, Any] | None = None,
    ) -> Session:
        """Create a session with a freshly allocated unique id."""
        ...

    def get_session(self, *, app_name: str, user_id: str, session_id: str) -> Session | None:
        """Return the session, or ``None`` if not found."""
        ...

    def update_session(
        self,
        *,
        app_name: str,
        user_id: str,
        session_id: str,
        state_updates: Mapping[str, Any],
    ) -> Session | None:
        """Merge *state_updates* into state and bump the timestamp.  ``None`` if not found."""
        ...

    def append_event(self, *, app_name: str, user_id: str, session_id: str, event: Event) -> Session | None:
        """Append *event* to the log and bump the timestamp.  ``None`` if not found."""
        ...

    def delete_session(self, *, app_name: str, user_id: str, session_id: str) -> bool:
        """Remove the session.  Returns whether it existed."""
        ...

    def list_sessions(self, *, app_name: str, user_id: str) -> list[Session]:
        """All sessions of a user, in creation order."""
        ...
