"""Data models for the agent runtime."""

from agentweave.runtime.models.config import ContextCacheConfig, RunConfig
from agentweave.runtime.models.enums import AggregationStrategy, MessageRole, Role
from agentweave.runtime.models.events import (
    Event,
    EventActions,
    FunctionCall,
    FunctionResponse,
)
from agentweave.runtime.models.session import (
    APP_PREFIX,
    TEMP_PREFIX,
    USER_PREFIX,
    Session,
)

__all__ = [
    "APP_PREFIX",
    "TEMP_PREFIX",
    "USER_PREFIX",
    # Enums
    "AggregationStrategy",
    # Config
    "ContextCacheConfig",
    # Events
    "Event",
    "EventActions",
    "FunctionCall",
    "FunctionResponse",
    "MessageRole",
    "Role",
    "RunConfig",
    # Session
    "Session",
]
