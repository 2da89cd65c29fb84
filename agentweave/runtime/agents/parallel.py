"""Parallel workflow: every child answers the same message; results are aggregated.

Children run one at a time in declared order on the caller's thread.  The
aggregation contract only depends on declaration order, so a concurrent
scheduler could replace the loop without changing results.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

from agentweave.runtime.agents.workflow import WorkflowAgent, drive_child
from agentweave.runtime.models.enums import AggregationStrategy

if TYPE_CHECKING:
    from collections.abc import Iterable, Iterator

    from agentweave.runtime.agents.base import Agent, AgentCallback
    from agentweave.runtime.context import InvocationContext
    from agentweave.runtime.models.events import Event

NO_RESULTS = "Completed parallel execution but no agents returned results"


class ParallelAgent(WorkflowAgent):
    """Fans one message out to all agents and reports a single summary event.

    A failing child is recorded and reported; it never stops its siblings.
    """

    invocation_prefix = "par"

    def __init__(
        self,
        *,
        name: str,
        agents: Iterable[Agent],
        description: str | None = None,
        aggregation_strategy: AggregationStrategy | str = AggregationStrategy.ALL,
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
            self.description = f"Executes {len(self._sub_agents)} agents in parallel"
        self.aggregation_strategy = aggregation_strategy

    @property
    def agents(self) -> list[Agent]:
        return self.sub_agents

    def _run_impl(self, message: str, context: InvocationContext | None) -> Iterator[Event]:
        invocation_id = self._invocation_id(context)
        agents = self.sub_agents

        yield self._event(invocation_id, f"Starting parallel execution with {len(agents)} agents")

        results: dict[str, str] = {}
        failed: list[str] = []
        for agent in agents:
            outcome = yield from drive_child(agent, message, context)
            if outcome.missing_run:
                yield self._event(invocation_id, f"Agent {agent.name} does not implement run")
            elif outcome.failed:
                failed.append(agent.name)
                yield self._event(invocation_id, f"Agent {agent.name} failed: {outcome.error}")
            elif outcome.content is not None:
                results[agent.name] = outcome.content

        yield self._event(invocation_id, self.aggregate(results, failed))

    def aggregate(self, results: dict[str, str], failed: list[str]) -> str:
        """Summarize per-agent results (in declaration order) and failures."""
        failed_suffix = f" ({len(failed)} agents failed)" if failed else ""
        strategy = self.aggregation_strategy

        if strategy not in (AggregationStrategy.ALL, AggregationStrategy.FIRST):
            return f"Completed parallel execution with {len(results)} results"
        if not results:
            return NO_RESULTS + failed_suffix

        if strategy == AggregationStrategy.FIRST:
            agent_name, result = next(iter(results.items()))
            return f"Completed parallel execution using first agent result ({agent_name}): {result}{failed_suffix}"

        summary = "; ".join(f"{agent_name}: {result}" for agent_name, result in results.items())
        return f"Completed parallel execution. Results from {len(results)} agents: {summary}{failed_suffix}"
