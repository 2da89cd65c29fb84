"""Session data model.

A session is the durable record of one user's conversation with one
application: a flat state map plus the append-only event log.

State keys follow a prefix convention that is documented, not enforced:

- ``app:``  -- shared by every session of the application
- ``user:`` -- shared by every session of the same user
- ``temp:`` -- scratch values for the current invocation
- no prefix -- private to the session
"""

from __future__ import annotations

from datetime import datetime
from typing import Any

from pydantic import BaseModel, Field, field_serializer

from agentweave.runtime.models.events import Event, iso_seconds, utcnow

# -- State prefixes ----------------------------------------------------------

APP_PREFIX = "app:"
USER_PREFIX = "user:"
TEMP_PREFIX = "temp:"


# -- Session -----------------------------------------------------------------


class Session(BaseModel):
    """Conversation record owned by a session service."""

    id: str
    app_name: str
    user_id: str
    state: dict[str, Any] = Field(default_factory=dict)
    events: list[Event] = Field(default_factory=list)
    last_update_time: datetime = Field(default_factory=utcnow)

    @field_serializer("last_update_time", when_used="json")
    def _serialize_last_update(self, value: datetime) -> str:
        return iso_seconds(value)

    def touch(self) -> None:
        self.last_update_time = utcnow()

    def to_dict(self) -> dict[str, Any]:
        data = self.model_dump(mode="json", exclude={"events"})
        data["events"] = [event.to_dict() for event in self.events]
        return data

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> Session:
        return cls.model_validate(data)
