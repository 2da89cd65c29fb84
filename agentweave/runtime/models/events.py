"""Event models.

An :class:`Event` is the immutable record of one step of agent output: a
piece of text, a batch of function calls, or the responses to them.  Events
are created by agents and the runner, appended to the session log, and never
mutated afterwards.
"""

from __future__ import annotations

import uuid
from collections.abc import Mapping
from datetime import UTC, datetime
from types import MappingProxyType
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, field_serializer, field_validator

from agentweave.runtime.models.enums import Role


def utcnow() -> datetime:
    return datetime.now(tz=UTC)


def iso_seconds(value: datetime) -> str:
    """ISO-8601 timestamp truncated to whole seconds (the wire precision)."""
    return value.replace(microsecond=0).isoformat()


def _new_call_id() -> str:
    return f"call-{uuid.uuid4()}"


# -- Function calling --------------------------------------------------------


class FunctionCall(BaseModel):
    """A tool invocation requested by the model."""

    model_config = ConfigDict(frozen=True)

    id: str = Field(default_factory=_new_call_id)
    name: str
    arguments: dict[str, Any] = Field(default_factory=dict)


class FunctionResponse(BaseModel):
    """The result of a tool invocation, matched to its call by ``id``."""

    model_config = ConfigDict(frozen=True)

    id: str
    name: str
    response: dict[str, Any] = Field(default_factory=dict)
    is_error: bool = False


# -- Actions -----------------------------------------------------------------


class EventActions(BaseModel):
    """Structured side effects attached to an event.

    The delta mappings are read-only views over private copies.
    """

    model_config = ConfigDict(frozen=True, validate_default=True)

    state_delta: Mapping[str, Any] = Field(default_factory=dict)
    """Keys merged into session state by the runner."""

    agent_state: Mapping[str, Any] | None = None
    """Replacement for the authoring agent's scratch state."""

    artifact_delta: Mapping[str, Any] = Field(default_factory=dict)
    transfer_to_agent: str | None = None
    escalate: bool = False
    skip_summarization: bool = False
    end_of_agent: bool = False
    requested_auth_configs: dict[str, Any] | None = None
    requested_tool_confirmations: dict[str, Any] | None = None
    rewind_before_invocation_id: str | None = None
    compaction: dict[str, Any] | None = None

    @field_validator("state_delta", "artifact_delta", "agent_state", mode="after")
    @classmethod
    def _freeze_mapping(cls, value: Mapping[str, Any] | None) -> Mapping[str, Any] | None:
        return None if value is None else MappingProxyType(dict(value))

    @field_serializer("state_delta", "artifact_delta", "agent_state")
    def _serialize_mapping(self, value: Mapping[str, Any] | None) -> dict[str, Any] | None:
        return None if value is None else dict(value)

    def to_dict(self) -> dict[str, Any]:
        """Serialize, omitting empty and default fields."""
        return self.model_dump(mode="json", exclude_defaults=True)


# -- Event -------------------------------------------------------------------


class Event(BaseModel):
    """One step of conversational output, tagged with its author."""

    model_config = ConfigDict(frozen=True)

    id: str = Field(default_factory=lambda: Event.new_id())
    invocation_id: str
    author: str
    timestamp: datetime = Field(default_factory=utcnow)
    content: str | None = None
    function_calls: tuple[FunctionCall, ...] = ()
    function_responses: tuple[FunctionResponse, ...] = ()
    long_running_tool_ids: frozenset[str] = frozenset()
    branch: str | None = None
    actions: EventActions | None = None

    @staticmethod
    def new_id() -> str:
        return str(uuid.uuid4())

    @property
    def is_final_response(self) -> bool:
        """False only when the event hands control to another agent."""
        if self.author == Role.USER:
            return True
        if self.actions is None:
            return True
        return self.actions.transfer_to_agent is None

    @field_serializer("timestamp", when_used="json")
    def _serialize_timestamp(self, value: datetime) -> str:
        return iso_seconds(value)

    @field_serializer("long_running_tool_ids", when_used="json")
    def _serialize_tool_ids(self, value: frozenset[str]) -> list[str]:
        return sorted(value)

    def to_dict(self) -> dict[str, Any]:
        """JSON-compatible dict; ``branch`` and ``actions`` only when set."""
        data = self.model_dump(mode="json", exclude={"branch", "actions"})
        if self.branch is not None:
            data["branch"] = self.branch
        if self.actions is not None:
            data["actions"] = self.actions.to_dict()
        return data

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> Event:
        return cls.model_validate(data)
