"""Shared enumerations used across the agent runtime."""

from __future__ import annotations

from enum import StrEnum

# -- Authors -----------------------------------------------------------------


class Role(StrEnum):
    """Reserved event authors that are not agent names."""

    USER = "user"
    SYSTEM = "system"


# -- Workflow ----------------------------------------------------------------


class AggregationStrategy(StrEnum):
    """How a ParallelAgent combines its children's results.

    Values outside this set are accepted and fall back to a plain count.
    """

    ALL = "all"
    FIRST = "first"


# -- Model conversation ------------------------------------------------------


class MessageRole(StrEnum):
    """Speaker of a message sent to a model backend."""

    USER = "user"
    MODEL = "model"
