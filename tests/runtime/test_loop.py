"""Unit tests for LoopAgent iteration control."""

from __future__ import annotations

import pytest
from fakes import ScriptedAgent, suffix

from agentweave.runtime.agents import Agent, LoopAgent
from agentweave.runtime.errors import ConfigurationError
from agentweave.runtime.models import EventActions


def _iteration_markers(events) -> list[str]:
    return [event.content for event in events if event.content and event.content.startswith("Iteration ")]


def test_runs_exactly_max_iterations_without_condition() -> None:
    child = ScriptedAgent(name="child", replies=[suffix("1")])
    loop = LoopAgent(name="loop", agent=child, max_iterations=3)

    events = list(loop.run("x"))

    assert events[0].content == "Starting loop execution with agent child"
    assert _iteration_markers(events) == ["Iteration 1/3", "Iteration 2/3", "Iteration 3/3"]
    assert child.received == ["x", "x+1", "x+1+1"]
    assert events[-1].content == "Completed loop execution after 3 iterations. Final result: x+1+1+1"


def test_failing_iterations_still_count() -> None:
    child = ScriptedAgent(name="child", error=RuntimeError("boom"))
    loop = LoopAgent(name="loop", agent=child, max_iterations=3)

    events = list(loop.run("x"))
    contents = [event.content for event in events]

    assert len(_iteration_markers(events)) == 3
    assert [c for c in contents if c.startswith("Error in iteration")] == [
        "Error in iteration 1: boom",
        "Error in iteration 2: boom",
        "Error in iteration 3: boom",
    ]
    assert contents[-1] == "Completed loop execution after 3 iterations. Final result: "


def test_condition_limits_iterations() -> None:
    seen: list[tuple[str | None, int]] = []

    def keep_going(last_result: str | None, iteration: int) -> bool:
        seen.append((last_result, iteration))
        return iteration < 2

    child = ScriptedAgent(name="child", replies=[suffix("1")])
    loop = LoopAgent(name="loop", agent=child, loop_condition=keep_going)

    events = list(loop.run("x"))

    assert len(child.received) == 2
    assert seen == [(None, 0), ("x+1", 1), ("x+1+1", 2)]
    assert events[-1].content == "Completed loop execution after 2 iterations. Final result: x+1+1"


def test_condition_false_at_start_runs_nothing() -> None:
    child = ScriptedAgent(name="child", replies=["never"])
    loop = LoopAgent(name="loop", agent=child, loop_condition=lambda last, i: False)

    events = list(loop.run("x"))

    assert child.received == []
    assert events[-1].content == "Completed loop execution after 0 iterations. Final result: "


def test_max_iterations_caps_condition() -> None:
    child = ScriptedAgent(name="child", replies=["again"])
    loop = LoopAgent(name="loop", agent=child, loop_condition=lambda last, i: True, max_iterations=4)

    list(loop.run("x"))

    assert len(child.received) == 4


def test_default_cap_is_ten() -> None:
    child = ScriptedAgent(name="child", replies=["again"])

    list(LoopAgent(name="loop", agent=child).run("x"))

    assert len(child.received) == 10


def test_silent_child_keeps_input() -> None:
    child = ScriptedAgent(name="child")

    events = list(LoopAgent(name="loop", agent=child, max_iterations=2).run("x"))

    assert child.received == ["x", "x"]
    assert events[-1].content == "Completed loop execution after 2 iterations. Final result: x"


def test_escalation_ends_loop() -> None:
    child = ScriptedAgent(name="child", replies=["done"], actions=EventActions(escalate=True))

    events = list(LoopAgent(name="loop", agent=child, max_iterations=5).run("x"))

    assert len(child.received) == 1
    assert events[-1].content == "Completed loop execution after 1 iterations. Final result: done"


def test_child_without_run() -> None:
    loop = LoopAgent(name="loop", agent=Agent(name="plain"), max_iterations=2)

    contents = [event.content for event in loop.run("x")]

    assert contents.count("Agent plain does not implement run") == 2
    assert contents[-1] == "Completed loop execution after 2 iterations. Final result: x"


def test_defaults_and_validation() -> None:
    child = ScriptedAgent(name="child")
    loop = LoopAgent(name="loop", agent=child)

    assert loop.agent is child
    assert loop.description == "Executes child in a loop"
    assert loop.max_iterations == 10

    with pytest.raises(ValueError):
        LoopAgent(name="bad", agent=ScriptedAgent(name="c"), max_iterations=0)
    with pytest.raises(ValueError, match="exactly one"):
        loop.sub_agents = [ScriptedAgent(name="a"), ScriptedAgent(name="b")]
    with pytest.raises(ConfigurationError):
        LoopAgent(name="bad name", agent=ScriptedAgent(name="d"))
