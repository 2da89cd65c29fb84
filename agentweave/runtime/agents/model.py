"""Model-backed agent.

A :class:`ModelAgent` sends the incoming message to a language-model backend
and turns the response into events.  When the model asks for tools, the
agent runs them, reports calls and results as events, and feeds the results
back to the model until it answers without calling anything (or the step
budget runs out).

Failures stay inside the agent: a backend fault becomes one explanatory
event, a tool fault becomes an error function response the model can see.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any, Self

from loguru import logger

from agentweave.runtime.agents.base import Agent
from agentweave.runtime.agents.instructions import render_instructions
from agentweave.runtime.backends.base import ModelMessage, ModelRequest, ModelResponse
from agentweave.runtime.context import InvocationContext, ReadonlyContext
from agentweave.runtime.errors import ConfigurationError
from agentweave.runtime.models.config import RunConfig
from agentweave.runtime.models.enums import MessageRole
from agentweave.runtime.models.events import FunctionCall, FunctionResponse
from agentweave.runtime.settings import get_settings
from agentweave.runtime.tools import AgentTool, BaseTool, FunctionTool

if TYPE_CHECKING:
    from collections.abc import Callable, Iterable, Iterator

    from agentweave.runtime.agents.base import AgentCallback
    from agentweave.runtime.backends.base import ModelBackend
    from agentweave.runtime.context import CallbackContext, ToolContext
    from agentweave.runtime.models.events import Event

    BeforeModelCallback = Callable[[CallbackContext | None, ModelRequest], ModelResponse | None]
    AfterModelCallback = Callable[[CallbackContext | None, ModelResponse], ModelResponse | None]
    BeforeToolCallback = Callable[[BaseTool, dict[str, Any], ToolContext | None], dict[str, Any] | None]
    AfterToolCallback = Callable[[BaseTool, dict[str, Any], ToolContext | None, Any], Any]

FALLBACK_RESPONSE = "I'm sorry, I couldn't process that request."


def _as_response(result: Any) -> dict[str, Any]:
    if isinstance(result, dict):
        return result
    return {"result": result}


class ModelAgent(Agent):
    """Agent that answers through a language model, optionally using tools.

    ``tools`` may mix :class:`BaseTool` instances, agents (wrapped in
    :class:`AgentTool`) and plain callables (wrapped in :class:`FunctionTool`).
    """

    def __init__(
        self,
        *,
        name: str,
        model: str | None = None,
        instructions: str | None = None,
        description: str | None = None,
        tools: Iterable[BaseTool | Agent | Callable[..., Any]] = (),
        sub_agents: Iterable[Agent] = (),
        inherit_parent_model: bool = False,
        backend: ModelBackend | None = None,
        before_model_callback: BeforeModelCallback | None = None,
        after_model_callback: AfterModelCallback | None = None,
        before_tool_callback: BeforeToolCallback | None = None,
        after_tool_callback: AfterToolCallback | None = None,
        before_agent_callback: AgentCallback | None = None,
        after_agent_callback: AgentCallback | None = None,
    ) -> None:
        super().__init__(
            name=name,
            description=description,
            sub_agents=sub_agents,
            before_agent_callback=before_agent_callback,
            after_agent_callback=after_agent_callback,
        )
        if model is None and not inherit_parent_model:
            msg = f"ModelAgent '{name}' requires a model (or inherit_parent_model=True)"
            raise ConfigurationError(msg)

        self.model = model
        self.instructions = instructions
        self.tools = list(tools)
        self.inherit_parent_model = inherit_parent_model
        self.backend = backend
        self._owns_backend = False
        self.before_model_callback = before_model_callback
        self.after_model_callback = after_model_callback
        self.before_tool_callback = before_tool_callback
        self.after_tool_callback = after_tool_callback

    # -- Resolution ------------------------------------------------------------

    @property
    def canonical_model(self) -> str:
        """Own model, else the nearest ModelAgent ancestor's when inheriting."""
        if self.model:
            return self.model
        if self.inherit_parent_model:
            node = self.parent_agent
            while node is not None:
                if isinstance(node, ModelAgent):
                    return node.canonical_model
                node = node.parent_agent
        msg = f"No model specified for agent {self.name}"
        raise ConfigurationError(msg)

    def canonical_instructions(self, context: InvocationContext | ReadonlyContext | None) -> str:
        if isinstance(context, InvocationContext):
            context = context.to_readonly_context(self.name)
        state = context.state if context is not None else {}
        return render_instructions(self.instructions, state)

    @property
    def canonical_tools(self) -> list[BaseTool]:
        tools: list[BaseTool] = []
        for tool in self.tools:
            if isinstance(tool, BaseTool):
                tools.append(tool)
            elif isinstance(tool, Agent):
                tools.append(AgentTool(tool))
            elif callable(tool):
                tools.append(FunctionTool.from_callable(tool))
            else:
                msg = f"Unsupported tool for agent {self.name}: {tool!r}"
                raise ConfigurationError(msg)
        return tools

    def get_backend(self) -> ModelBackend:
        """The configured backend, or a Gemini backend created on first use."""
        if self.backend is None:
            from agentweave.runtime.backends.gemini import GeminiBackend

            self.backend = GeminiBackend()
            self._owns_backend = True
        return self.backend

    def close(self) -> None:
        """Close the backend created by :meth:`get_backend`.  Injected backends are left open."""
        if self._owns_backend and self.backend is not None:
            close = getattr(self.backend, "close", None)
            if close is not None:
                close()
            self.backend = None
        self._owns_backend = False

    def clone(self, **overrides: Any) -> Self:
        cloned = super().clone(**overrides)
        if self._owns_backend and "backend" not in overrides:
            cloned.backend = None
        cloned._owns_backend = False
        return cloned

    # -- Execution -------------------------------------------------------------

    def _run_impl(self, message: str, context: InvocationContext | None) -> Iterator[Event]:
        run_config = context.run_config if context is not None else RunConfig()
        callback_context = context.to_callback_context(self.name) if context is not None else None
        try:
            tools = self.canonical_tools
            request = ModelRequest(
                model=self.canonical_model,
                messages=[ModelMessage(role=MessageRole.USER, text=message)],
                tools=[tool.declaration() for tool in tools],
                system_instruction=self.canonical_instructions(context) or None,
                run_config=run_config,
            )
        except Exception as exc:
            logger.warning("Could not prepare model request for agent {}: {}", self.name, exc)
            yield self._make_event(context, f"Error calling model backend: {exc}")
            return

        tools_by_name = {tool.name: tool for tool in tools}
        max_steps = run_config.max_steps or get_settings().max_model_steps

        for _ in range(max_steps):
            try:
                response = self._call_model(request, callback_context)
            except Exception as exc:
                logger.warning("Model call failed for agent {}: {}", self.name, exc)
                yield self._make_event(context, f"Error calling model backend: {exc}")
                return

            if response.is_empty:
                yield self._make_event(context, FALLBACK_RESPONSE)
                return

            for text in response.texts:
                request.messages.append(ModelMessage(role=MessageRole.MODEL, text=text))
                yield self._make_event(context, text)

            calls = response.function_calls
            if not calls:
                return

            yield self._make_event(context, None, function_calls=tuple(calls))
            responses = [self._execute_tool(call, tools_by_name, context) for call in calls]
            yield self._make_event(context, None, function_responses=tuple(responses))

            for call, result in zip(calls, responses, strict=True):
                request.messages.append(ModelMessage(role=MessageRole.MODEL, function_call=call))
                request.messages.append(ModelMessage(role=MessageRole.USER, function_response=result))

        logger.info("Agent {} stopped after {} model calls", self.name, max_steps)

    def _call_model(self, request: ModelRequest, callback_context: CallbackContext | None) -> ModelResponse:
        response: ModelResponse | None = None
        if self.before_model_callback is not None:
            response = self.before_model_callback(callback_context, request)

        if response is None:
            response = self.get_backend().generate(
                model=request.model,
                messages=list(request.messages),
                tools=request.tools or None,
                system_instruction=request.system_instruction,
                run_config=request.run_config,
            )

        if self.after_model_callback is not None:
            replacement = self.after_model_callback(callback_context, response)
            if replacement is not None:
                response = replacement
        return response

    def _execute_tool(
        self,
        call: FunctionCall,
        tools_by_name: dict[str, BaseTool],
        context: InvocationContext | None,
    ) -> FunctionResponse:
        tool = tools_by_name.get(call.name)
        if tool is None:
            logger.warning("Agent {} requested unknown tool {}", self.name, call.name)
            return FunctionResponse(
                id=call.id,
                name=call.name,
                response={"error": f"Tool not found: {call.name}"},
                is_error=True,
            )

        tool_context = context.to_tool_context(self.name) if context is not None else None
        arguments = dict(call.arguments)
        try:
            result = None
            if self.before_tool_callback is not None:
                result = self.before_tool_callback(tool, arguments, tool_context)
            if result is None:
                result = tool.call(arguments, tool_context)
            if self.after_tool_callback is not None:
                replacement = self.after_tool_callback(tool, arguments, tool_context, result)
                if replacement is not None:
                    result = replacement
        except Exception as exc:
            logger.warning("Tool {} failed: {}", call.name, exc)
            return FunctionResponse(
                id=call.id,
                name=call.name,
                response={"error": f"Tool error: {exc}"},
                is_error=True,
            )

        return FunctionResponse(id=call.id, name=call.name, response=_as_response(result))
