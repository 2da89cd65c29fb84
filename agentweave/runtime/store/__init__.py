"""Session service implementations."""

from agentweave.runtime.store.base import SessionService
from agentweave.runtime.store.memory import InMemorySessionService

__all__ = ["InMemorySessionService", "SessionService"]
