"""Invocation context and its narrower views.

``InvocationContext`` binds one ``Runner.run`` call to one session.  Agents
receive it directly; collaborators get a narrower facade:

- ``ReadonlyContext``  -- frozen state snapshot, for instruction templating
- ``CallbackContext``  -- live session state, for agent/model callbacks
- ``ToolContext``      -- callback view plus auth / artifact / memory hooks
"""

from __future__ import annotations

import uuid
from dataclasses import dataclass, field
from types import MappingProxyType
from typing import TYPE_CHECKING, Any

from agentweave.runtime.errors import AgentError
from agentweave.runtime.models.config import ContextCacheConfig, RunConfig

if TYPE_CHECKING:
    from collections.abc import Mapping

    from agentweave.runtime.agents.base import Agent
    from agentweave.runtime.models.events import Event
    from agentweave.runtime.models.session import Session
    from agentweave.runtime.store.base import SessionService


def new_invocation_id(prefix: str = "inv") -> str:
    return f"{prefix}-{uuid.uuid4()}"


# ---------------------------------------------------------------------------
# Views
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class ReadonlyContext:
    """Read-only view with a frozen copy of the session state."""

    invocation_id: str
    agent_name: str
    state: Mapping[str, Any]

    def __post_init__(self) -> None:
        object.__setattr__(self, "state", MappingProxyType(dict(self.state)))


@dataclass
class CallbackContext:
    """View handed to agent and model callbacks.  State writes hit the session."""

    invocation_id: str
    agent_name: str
    session: Session

    @property
    def state(self) -> dict[str, Any]:
        return self.session.state

    def update_state(self, updates: Mapping[str, Any]) -> None:
        self.session.state.update(updates)


@dataclass
class ToolContext(CallbackContext):
    """View handed to tools and tool callbacks."""

    invocation_context: InvocationContext | None = None
    auth_service: Any = None
    artifact_service: Any = None
    memory_service: Any = None

    def request_auth(self, auth_type: str, **options: Any) -> Any:
        if self.auth_service is None:
            msg = "Auth service not available"
            raise AgentError(msg)
        return self.auth_service.request_auth(auth_type, options)

    def list_artifacts(self) -> list[Any]:
        if self.artifact_service is None:
            return []
        return self.artifact_service.list_artifacts()

    def search_memory(self, query: str) -> list[Any]:
        if self.memory_service is None:
            return []
        return self.memory_service.search(query)


# ---------------------------------------------------------------------------
# Invocation context
# ---------------------------------------------------------------------------


@dataclass
class InvocationContext:
    """Per-turn state shared by every agent in the tree.

    Created by the runner at the start of ``run``; discarded when the turn
    ends.  ``agent`` is the root agent of the invocation.
    """

    session: Session
    agent: Agent
    invocation_id: str
    session_service: SessionService | None = None
    artifact_service: Any = None
    memory_service: Any = None

    agent_states: dict[str, dict[str, Any]] = field(default_factory=dict)
    """Per-agent-name scratch state, separate from conversation state."""

    context_cache_config: ContextCacheConfig = field(default_factory=ContextCacheConfig)
    run_config: RunConfig = field(default_factory=RunConfig)

    # -- Session state ---------------------------------------------------------

    @property
    def state(self) -> dict[str, Any]:
        return self.session.state

    def update_state(self, updates: Mapping[str, Any]) -> None:
        self.session.state.update(updates)

    @property
    def events(self) -> list[Event]:
        """The session's event log (same list, not a copy)."""
        return self.session.events

    def add_event(self, event: Event) -> None:
        self.session.events.append(event)

    # -- Agent scratch state ---------------------------------------------------

    def get_agent_state(self, agent_name: str) -> dict[str, Any]:
        return self.agent_states.get(agent_name, {})

    def update_agent_state(self, agent_name: str, state: dict[str, Any]) -> None:
        self.agent_states[agent_name] = state

    # -- Views -----------------------------------------------------------------

    def to_readonly_context(self, agent_name: str | None = None) -> ReadonlyContext:
        return ReadonlyContext(
            invocation_id=self.invocation_id,
            agent_name=agent_name or self.agent.name,
            state=self.session.state,
        )

    def to_callback_context(self, agent_name: str | None = None) -> CallbackContext:
        return CallbackContext(
            invocation_id=self.invocation_id,
            agent_name=agent_name or self.agent.name,
            session=self.session,
        )

    def to_tool_context(self, agent_name: str | None = None, *, auth_service: Any = None) -> ToolContext:
        return ToolContext(
            invocation_id=self.invocation_id,
            agent_name=agent_name or self.agent.name,
            session=self.session,
            invocation_context=self,
            auth_service=auth_service,
            artifact_service=self.artifact_service,
            memory_service=self.memory_service,
        )
