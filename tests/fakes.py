"""In-process fakes shared by the test suite.

No network access: agents are scripted, and model backends replay canned
responses.
"""

from __future__ import annotations

from collections.abc import Callable, Iterator
from typing import Any

from agentweave.runtime.agents import Agent
from agentweave.runtime.backends import ModelMessage, ModelResponse, ResponsePart, ToolDeclaration
from agentweave.runtime.context import InvocationContext
from agentweave.runtime.models import Event, EventActions, FunctionCall, RunConfig
from agentweave.runtime.runner import BasePlugin

Reply = str | Callable[[str], str]


# ---------------------------------------------------------------------------
# Agents
# ---------------------------------------------------------------------------


class ScriptedAgent(Agent):
    """Yields one event per reply, then raises ``error`` if one is set.

    A reply may be a string or a function of the incoming message.
    """

    def __init__(
        self,
        *,
        name: str,
        replies: list[Reply] | None = None,
        error: Exception | None = None,
        actions: EventActions | None = None,
        **kwargs: Any,
    ) -> None:
        super().__init__(name=name, **kwargs)
        self.replies = list(replies or [])
        self.error = error
        self.actions = actions
        self.received: list[str] = []

    def _run_impl(self, message: str, context: InvocationContext | None) -> Iterator[Event]:
        self.received.append(message)
        for reply in self.replies:
            content = reply(message) if callable(reply) else reply
            yield self._make_event(context, content, actions=self.actions)
        if self.error is not None:
            raise self.error


def suffix(tag: str) -> Callable[[str], str]:
    """Reply that appends ``+tag`` to the incoming message."""
    return lambda message: f"{message}+{tag}"


# ---------------------------------------------------------------------------
# Model backend
# ---------------------------------------------------------------------------


class ScriptedBackend:
    """Replays responses in order; an exception in the script is raised instead.

    Once the script is exhausted every call returns an empty response.
    """

    def __init__(self, *script: ModelResponse | Exception) -> None:
        self.script = list(script)
        self.calls: list[dict[str, Any]] = []

    def generate(
        self,
        *,
        model: str,
        messages: list[ModelMessage],
        tools: list[ToolDeclaration] | None = None,
        system_instruction: str | None = None,
        run_config: RunConfig | None = None,
    ) -> ModelResponse:
        self.calls.append({
            "model": model,
            "messages": list(messages),
            "tools": tools,
            "system_instruction": system_instruction,
            "run_config": run_config,
        })
        if not self.script:
            return ModelResponse()
        item = self.script.pop(0)
        if isinstance(item, Exception):
            raise item
        return item


def text_response(*texts: str) -> ModelResponse:
    return ModelResponse(parts=[ResponsePart(text=text) for text in texts])


def call_response(name: str, **arguments: Any) -> ModelResponse:
    return ModelResponse(parts=[ResponsePart(function_call=FunctionCall(name=name, arguments=arguments))])


# ---------------------------------------------------------------------------
# Plugins
# ---------------------------------------------------------------------------


class RecordingPlugin(BasePlugin):
    """Records every hook call as ``(hook, payload)``."""

    name = "recording"

    def __init__(self) -> None:
        self.calls: list[tuple[str, Any]] = []

    @property
    def hooks(self) -> list[str]:
        return [hook for hook, _ in self.calls]

    def on_user_message(self, context: InvocationContext, message: str) -> None:
        self.calls.append(("on_user_message", message))

    def on_event(self, context: InvocationContext, event: Event) -> None:
        self.calls.append(("on_event", event))

    def on_agent_start(self, context: InvocationContext) -> None:
        self.calls.append(("on_agent_start", context.invocation_id))

    def on_agent_end(self, context: InvocationContext) -> None:
        self.calls.append(("on_agent_end", context.invocation_id))
