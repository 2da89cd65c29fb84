"""Loop workflow: one child run repeatedly, each pass fed the previous result."""

from __future__ import annotations

from typing import TYPE_CHECKING, Any

from agentweave.runtime.agents.workflow import WorkflowAgent, drive_child

if TYPE_CHECKING:
    from collections.abc import Callable, Iterator

    from agentweave.runtime.agents.base import Agent, AgentCallback
    from agentweave.runtime.context import InvocationContext
    from agentweave.runtime.models.events import Event

    LoopCondition = Callable[[str | None, int], Any]

DEFAULT_MAX_ITERATIONS = 10


class LoopAgent(WorkflowAgent):
    """Runs ``agent`` up to ``max_iterations`` times.

    Before each pass, ``loop_condition(last_result, iteration)`` is consulted
    (when given); a falsy answer stops the loop.  The loop also stops after a
    pass in which the child escalated.  A failing pass is reported and still
    counts as an iteration.
    """

    invocation_prefix = "loop"

    def __init__(
        self,
        *,
        name: str,
        agent: Agent,
        description: str | None = None,
        loop_condition: LoopCondition | None = None,
        max_iterations: int = DEFAULT_MAX_ITERATIONS,
        before_agent_callback: AgentCallback | None = None,
        after_agent_callback: AgentCallback | None = None,
    ) -> None:
        if max_iterations < 1:
            msg = f"max_iterations must be at least 1, got {max_iterations}"
            raise ValueError(msg)
        super().__init__(
            name=name,
            description=description,
            sub_agents=[agent],
            before_agent_callback=before_agent_callback,
            after_agent_callback=after_agent_callback,
        )
        if self.description is None:
            self.description = f"Executes {agent.name} in a loop"
        self.loop_condition = loop_condition
        self.max_iterations = max_iterations

    @property
    def agent(self) -> Agent:
        return self._sub_agents[0]

    def _validate_sub_agents(self, agents: list[Agent]) -> None:
        super()._validate_sub_agents(agents)
        if len(agents) != 1:
            msg = f"LoopAgent '{self.name}' wraps exactly one agent, got {len(agents)}"
            raise ValueError(msg)

    def _run_impl(self, message: str, context: InvocationContext | None) -> Iterator[Event]:
        invocation_id = self._invocation_id(context)
        agent = self.agent

        yield self._event(invocation_id, f"Starting loop execution with agent {agent.name}")

        current_input = message
        last_result: str | None = None
        iteration = 0
        while iteration < self.max_iterations:
            if self.loop_condition is not None and not self.loop_condition(last_result, iteration):
                break

            yield self._event(invocation_id, f"Iteration {iteration + 1}/{self.max_iterations}")

            outcome = yield from drive_child(agent, current_input, context)
            if outcome.failed:
                yield self._event(invocation_id, f"Error in iteration {iteration + 1}: {outcome.error}")
            else:
                if outcome.missing_run:
                    yield self._event(invocation_id, f"Agent {agent.name} does not implement run")
                last_result = outcome.content if outcome.content is not None else current_input
                current_input = last_result
            iteration += 1

            if outcome.escalated:
                break

        final = last_result if last_result is not None else ""
        yield self._event(invocation_id, f"Completed loop execution after {iteration} iterations. Final result: {final}")
