"""Unit tests for FunctionTool and AgentTool."""

from __future__ import annotations

import pytest
from fakes import ScriptedAgent

from agentweave.runtime.agents import Agent
from agentweave.runtime.errors import ToolError
from agentweave.runtime.tools import AgentTool, BaseTool, FunctionTool
from agentweave.runtime.tools.function_tool import json_type


def convert(amount: float, currency: str, days: int = 1, rounded: bool = False, tags: list[str] | None = None) -> dict:
    """Convert an amount of money."""
    return {"amount": amount, "currency": currency}


# ---------------------------------------------------------------------------
# FunctionTool
# ---------------------------------------------------------------------------


def test_schema_from_annotations() -> None:
    tool = FunctionTool(name="convert", func=convert)

    assert tool.schema() == {
        "type": "object",
        "properties": {
            "amount": {"type": "number"},
            "currency": {"type": "string"},
            "days": {"type": "integer"},
            "rounded": {"type": "boolean"},
            "tags": {"type": "array"},
        },
        "required": ["amount", "currency"],
    }


def test_schema_skips_tool_context_and_defaults_to_string() -> None:
    def lookup(query, limit: int, tool_context=None) -> list:
        return []

    schema = FunctionTool(name="lookup", func=lookup).schema()

    assert schema["properties"] == {"query": {"type": "string"}, "limit": {"type": "integer"}}
    assert schema["required"] == ["query", "limit"]


def test_explicit_schema_wins() -> None:
    explicit = {"type": "object", "properties": {"x": {"type": "string"}}, "required": ["x"]}

    assert FunctionTool(name="convert", func=convert, parameters_schema=explicit).schema() == explicit


def test_declaration_uses_docstring() -> None:
    declaration = FunctionTool(name="convert", func=convert).declaration()

    assert declaration.name == "convert"
    assert declaration.description == "Convert an amount of money."
    assert declaration.parameters["required"] == ["amount", "currency"]


def test_declaration_without_description() -> None:
    declaration = FunctionTool(name="anon", func=lambda: None).declaration()

    assert declaration.description == "Tool anon"


def test_call_passes_keywords() -> None:
    tool = FunctionTool(name="convert", func=convert)

    assert tool.call({"amount": 5, "currency": "EUR"}) == {"amount": 5, "currency": "EUR"}


def test_call_passes_tool_context_only_when_declared() -> None:
    seen = []

    def wants(tool_context) -> str:
        seen.append(tool_context)
        return "ok"

    marker = object()
    FunctionTool(name="wants", func=wants).call({}, marker)

    assert seen == [marker]
    with pytest.raises(TypeError):
        FunctionTool(name="convert", func=convert).call({"amount": 1, "currency": "USD", "tool_context": marker})


def test_call_errors_propagate() -> None:
    def broken() -> None:
        raise RuntimeError("nope")

    with pytest.raises(RuntimeError):
        FunctionTool(name="broken", func=broken).call({})


def test_from_callable_names() -> None:
    assert FunctionTool.from_callable(convert).name == "convert"
    assert FunctionTool.from_callable(lambda: 1).name.startswith("function_")


@pytest.mark.parametrize(
    ("annotation", "expected"),
    [
        (str, "string"),
        (int, "integer"),
        (float, "number"),
        (bool, "boolean"),
        (dict[str, int], "object"),
        (list[int], "array"),
        (int | None, "integer"),
        (int | str, "string"),
        (bytes, "string"),
    ],
)
def test_json_type(annotation, expected: str) -> None:
    assert json_type(annotation) == expected


def test_base_tool_is_abstract() -> None:
    tool = BaseTool(name="base")

    with pytest.raises(NotImplementedError):
        tool.call({})
    with pytest.raises(NotImplementedError):
        tool.schema()


# ---------------------------------------------------------------------------
# AgentTool
# ---------------------------------------------------------------------------


def test_agent_tool_returns_last_content() -> None:
    agent = ScriptedAgent(name="helper", description="A helper", replies=["first", "last"])
    tool = AgentTool(agent)

    assert tool.name == "helper"
    assert tool.description == "A helper"
    assert tool.call({"message": "question"}) == "last"
    assert agent.received == ["question"]


def test_agent_tool_without_output() -> None:
    assert AgentTool(ScriptedAgent(name="silent")).call({"message": "hi"}) == "No response"


def test_agent_tool_uses_invocation_context(make_context) -> None:
    seen = []

    class Peek(Agent):
        def _run_impl(self, message, context):
            seen.append(context)
            yield self._make_event(context, "ok")

    agent = Peek(name="peek")
    context = make_context(agent)

    assert AgentTool(agent).call({"message": "hi"}, context.to_tool_context()) == "ok"
    assert seen[0] is context


def test_agent_tool_schema() -> None:
    declaration = AgentTool(ScriptedAgent(name="helper")).declaration()

    assert declaration.parameters["required"] == ["message"]
    assert declaration.parameters["properties"]["message"]["type"] == "string"
    assert declaration.description == "Tool helper"


def test_agent_tool_requires_runnable_agent() -> None:
    with pytest.raises(ToolError, match="cannot be executed"):
        AgentTool(Agent(name="plain")).call({"message": "hi"})
