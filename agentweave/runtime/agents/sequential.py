"""Sequential workflow: children run in declared order, each fed the previous output."""

from __future__ import annotations

from typing import TYPE_CHECKING

from agentweave.runtime.agents.workflow import WorkflowAgent, drive_child

if TYPE_CHECKING:
    from collections.abc import Iterable, Iterator

    from agentweave.runtime.agents.base import Agent, AgentCallback
    from agentweave.runtime.context import InvocationContext
    from agentweave.runtime.models.events import Event


class SequentialAgent(WorkflowAgent):
    """Runs its agents one after another as a pipeline.

    Each child receives the content of the previous child's last
    content-bearing event (the first child receives the original message).
    When a child raises, the pipeline restarts from the original message for
    the next child rather than from the last good value.
    """

    invocation_prefix = "seq"

    def __init__(
        self,
        *,
        name: str,
        agents: Iterable[Agent],
        description: str | None = None,
        before_agent_callback: AgentCallback | None = None,
        after_agent_callback: AgentCallback | None = None,
    ) -> None:
        super().__init__(
            name=name,
            description=description,
            sub_agents=agents,
            before_agent_callback=before_agent_callback,
            after_agent_callback=after_agent_callback,
        )
        if self.description is None:
            self.description = f"Executes {len(self._sub_agents)} agents sequentially"

    @property
    def agents(self) -> list[Agent]:
        return self.sub_agents

    def _run_impl(self, message: str, context: InvocationContext | None) -> Iterator[Event]:
        invocation_id = self._invocation_id(context)
        agents = self.sub_agents
        total = len(agents)

        yield self._event(invocation_id, f"Starting sequential execution with {total} agents")

        current_input = message
        for index, agent in enumerate(agents, start=1):
            yield self._event(invocation_id, f"Executing agent {index}/{total}: {agent.name}")

            outcome = yield from drive_child(agent, current_input, context)
            if outcome.missing_run:
                yield self._event(invocation_id, f"Agent {agent.name} does not implement run")
            elif outcome.failed:
                yield self._event(invocation_id, f"Error in agent {agent.name}: {outcome.error}")
                current_input = message
            elif outcome.content is not None:
                current_input = outcome.content

        yield self._event(invocation_id, f"Completed sequential execution. Final output: {current_input}")
