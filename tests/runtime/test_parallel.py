"""Unit tests for ParallelAgent aggregation."""

from __future__ import annotations

import pytest
from fakes import ScriptedAgent

from agentweave.runtime.agents import Agent, ParallelAgent
from agentweave.runtime.models import AggregationStrategy


def _summary(agent: ParallelAgent, message: str = "task") -> str:
    events = list(agent.run(message))
    return events[-1].content


def test_every_child_gets_original_message() -> None:
    a = ScriptedAgent(name="a", replies=["ra"])
    b = ScriptedAgent(name="b", replies=["rb"])

    events = list(ParallelAgent(name="fan", agents=[a, b]).run("task"))

    assert a.received == ["task"]
    assert b.received == ["task"]
    assert events[0].content == "Starting parallel execution with 2 agents"


def test_all_strategy_lists_results_in_declaration_order() -> None:
    agent = ParallelAgent(
        name="fan",
        agents=[ScriptedAgent(name="a", replies=["ra"]), ScriptedAgent(name="b", replies=["draft", "rb"])],
    )

    assert _summary(agent) == "Completed parallel execution. Results from 2 agents: a: ra; b: rb"


def test_all_strategy_reports_failures() -> None:
    agent = ParallelAgent(
        name="fan",
        agents=[ScriptedAgent(name="a", replies=["ra"]), ScriptedAgent(name="b", error=RuntimeError("down"))],
    )

    events = list(agent.run("task"))

    assert "Agent b failed: down" in [event.content for event in events]
    assert events[-1].content == "Completed parallel execution. Results from 1 agents: a: ra (1 agents failed)"


def test_first_strategy_with_failing_second_child() -> None:
    x = ScriptedAgent(name="x", replies=["rx"])
    y = ScriptedAgent(name="y", error=RuntimeError("boom"))
    agent = ParallelAgent(name="fan", agents=[x, y], aggregation_strategy=AggregationStrategy.FIRST)

    assert _summary(agent) == "Completed parallel execution using first agent result (x): rx (1 agents failed)"


def test_first_strategy_skips_failed_leading_child() -> None:
    agent = ParallelAgent(
        name="fan",
        agents=[ScriptedAgent(name="y", error=RuntimeError("boom")), ScriptedAgent(name="x", replies=["rx"])],
        aggregation_strategy="first",
    )

    assert _summary(agent) == "Completed parallel execution using first agent result (x): rx (1 agents failed)"


def test_failure_does_not_stop_siblings() -> None:
    late = ScriptedAgent(name="late", replies=["ok"])
    agent = ParallelAgent(name="fan", agents=[ScriptedAgent(name="early", error=RuntimeError("boom")), late])

    list(agent.run("task"))

    assert late.received == ["task"]


def test_no_results() -> None:
    agent = ParallelAgent(
        name="fan",
        agents=[
            ScriptedAgent(name="a", error=RuntimeError("one")),
            ScriptedAgent(name="b", error=RuntimeError("two")),
        ],
    )

    assert _summary(agent) == "Completed parallel execution but no agents returned results (2 agents failed)"


def test_no_results_without_failures() -> None:
    agent = ParallelAgent(name="fan", agents=[ScriptedAgent(name="silent")], aggregation_strategy="first")

    assert _summary(agent) == "Completed parallel execution but no agents returned results"


def test_unknown_strategy_reports_count() -> None:
    agent = ParallelAgent(
        name="fan",
        agents=[ScriptedAgent(name="a", replies=["ra"]), ScriptedAgent(name="b", replies=["rb"])],
        aggregation_strategy="majority",
    )

    assert _summary(agent) == "Completed parallel execution with 2 results"


def test_child_without_run_is_reported() -> None:
    agent = ParallelAgent(name="fan", agents=[Agent(name="plain"), ScriptedAgent(name="a", replies=["ra"])])

    events = list(agent.run("task"))

    assert "Agent plain does not implement run" in [event.content for event in events]
    assert events[-1].content == "Completed parallel execution. Results from 1 agents: a: ra"


def test_defaults() -> None:
    agent = ParallelAgent(name="fan", agents=[ScriptedAgent(name="a"), ScriptedAgent(name="b")])

    assert agent.description == "Executes 2 agents in parallel"
    assert agent.aggregation_strategy == AggregationStrategy.ALL
    assert list(agent.run("task"))[0].invocation_id.startswith("par-")


def test_empty_agent_list_rejected() -> None:
    with pytest.raises(ValueError):
        ParallelAgent(name="fan", agents=[])
