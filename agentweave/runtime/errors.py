"""Exception hierarchy for the agent runtime.

Configuration errors abort construction and always reach the caller.
Runtime failures raised while an agent produces events are caught at the
nearest workflow boundary and reported as diagnostic events instead.
"""

from __future__ import annotations


class AgentweaveError(Exception):
    """Base class for all runtime errors."""


class ConfigurationError(AgentweaveError):
    """Invalid agent tree, missing required field, or bad backend setup."""


class AgentError(AgentweaveError):
    """An agent or one of its context facades cannot perform an operation."""


class ToolError(AgentweaveError):
    """A tool could not be resolved or invoked."""


class BackendError(AgentweaveError):
    """The model backend rejected or failed a request."""

    def __init__(self, message: str, *, status_code: int | None = None) -> None:
        super().__init__(message)
        self.status_code = status_code
