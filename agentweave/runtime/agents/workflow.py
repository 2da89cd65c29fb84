"""Shared machinery for workflow agents.

A workflow agent is defined entirely by how it sequences its children's
event streams.  Every child run goes through :func:`drive_child`, which
forwards the child's events and reports the run as a :class:`ChildOutcome`.
This is the one place where a child's runtime failure is caught; the
workflow then decides which diagnostic event to emit.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING

from loguru import logger

from agentweave.runtime.agents.base import Agent, implements_run
from agentweave.runtime.context import new_invocation_id
from agentweave.runtime.models.events import Event

if TYPE_CHECKING:
    from collections.abc import Generator

    from agentweave.runtime.context import InvocationContext


@dataclass
class ChildOutcome:
    """How one child run ended."""

    agent_name: str
    content: str | None = None
    """Content of the child's last content-bearing event."""

    error: Exception | None = None
    missing_run: bool = False
    escalated: bool = False

    @property
    def failed(self) -> bool:
        return self.error is not None


def drive_child(
    child: Agent,
    message: str,
    context: InvocationContext | None,
) -> Generator[Event, None, ChildOutcome]:
    """Run *child* on *message*, yielding its events; return the outcome.

    Use with ``outcome = yield from drive_child(...)``.  Events produced
    before a failure have already been forwarded when the error is recorded.
    """
    outcome = ChildOutcome(agent_name=child.name)
    if not implements_run(child):
        outcome.missing_run = True
        return outcome

    try:
        events = iter(child.run(message, context))
    except Exception as exc:
        logger.warning("Agent {} failed to start: {}", child.name, exc)
        outcome.error = exc
        return outcome

    while True:
        try:
            event = next(events)
        except StopIteration:
            break
        except Exception as exc:
            logger.warning("Agent {} failed: {}", child.name, exc)
            outcome.error = exc
            break

        if event.content is not None:
            outcome.content = event.content
        if event.actions is not None and event.actions.escalate:
            outcome.escalated = True
        yield event

    return outcome


class WorkflowAgent(Agent):
    """Base for composite agents.  Requires at least one child."""

    invocation_prefix = "wf"

    def _validate_sub_agents(self, agents: list[Agent]) -> None:
        if not agents:
            msg = f"{type(self).__name__} '{self.name}' requires at least one agent"
            raise ValueError(msg)
        super()._validate_sub_agents(agents)

    def _invocation_id(self, context: InvocationContext | None) -> str:
        if context is not None:
            return context.invocation_id
        return new_invocation_id(self.invocation_prefix)

    def _event(self, invocation_id: str, content: str) -> Event:
        return Event(invocation_id=invocation_id, author=self.name, content=content)
