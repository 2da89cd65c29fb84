"""Agent tree node.

Every agent is a named node that exclusively owns an ordered list of child
agents.  Children hold only a weak reference back to their parent, so a
subtree can be dropped without cycles keeping it alive.

Subclasses implement :meth:`Agent._run_impl`; :meth:`Agent.run` wraps it
with the lifecycle callbacks.  Construction errors (bad name, duplicate or
cyclic children) raise :class:`ConfigurationError` and are never caught
inside the runtime.
"""

from __future__ import annotations

import copy
import re
import weakref
from typing import TYPE_CHECKING, Any, Self

from pydantic import BaseModel, Field, ValidationError

from agentweave.runtime.context import new_invocation_id
from agentweave.runtime.errors import ConfigurationError
from agentweave.runtime.models.events import Event

if TYPE_CHECKING:
    from collections.abc import Callable, Iterable, Iterator, Mapping

    from agentweave.runtime.context import CallbackContext, InvocationContext

    AgentCallback = Callable[[CallbackContext | None], str | None]

AGENT_NAME_PATTERN = re.compile(r"[a-zA-Z][a-zA-Z0-9_-]*")


class AgentConfig(BaseModel):
    """Declarative description of a plain agent tree (see ``Agent.from_config``)."""

    name: str
    description: str | None = None
    sub_agents: list[AgentConfig] = Field(default_factory=list)


def validate_agent_name(name: str) -> str:
    if not isinstance(name, str) or AGENT_NAME_PATTERN.fullmatch(name) is None:
        msg = f"Agent name must match {AGENT_NAME_PATTERN.pattern!r}. Got: {name!r}"
        raise ConfigurationError(msg)
    return name


def implements_run(agent: object) -> bool:
    """Whether *agent* provides an execution strategy of its own."""
    return isinstance(agent, Agent) and type(agent)._run_impl is not Agent._run_impl


class Agent:
    """Named, composable unit that turns a message into a stream of events.

    The bare class is usable as a structural node (for building and searching
    trees) but has no execution strategy: ``run`` raises ``NotImplementedError``.
    """

    def __init__(
        self,
        *,
        name: str,
        description: str | None = None,
        sub_agents: Iterable[Agent] = (),
        before_agent_callback: AgentCallback | None = None,
        after_agent_callback: AgentCallback | None = None,
    ) -> None:
        self._name = validate_agent_name(name)
        self.description = description
        self.before_agent_callback = before_agent_callback
        self.after_agent_callback = after_agent_callback
        self._parent_ref: weakref.ref[Agent] | None = None
        self._sub_agents: list[Agent] = []
        self.sub_agents = list(sub_agents)

    def __repr__(self) -> str:
        return f"{type(self).__name__}(name={self._name!r})"

    # -- Identity --------------------------------------------------------------

    @property
    def name(self) -> str:
        return self._name

    @property
    def parent_agent(self) -> Agent | None:
        return self._parent_ref() if self._parent_ref is not None else None

    # -- Children --------------------------------------------------------------

    @property
    def sub_agents(self) -> list[Agent]:
        """Copy of the child list.  Replace it wholesale to change children."""
        return list(self._sub_agents)

    @sub_agents.setter
    def sub_agents(self, agents: Iterable[Agent]) -> None:
        agents = list(agents)
        self._validate_sub_agents(agents)

        for agent in self._sub_agents:
            agent._parent_ref = None
        self._sub_agents = agents
        for agent in agents:
            agent._parent_ref = weakref.ref(self)

    def _validate_sub_agents(self, agents: list[Agent]) -> None:
        """Check uniqueness, ownership and acyclicity of a new child list."""
        for agent in agents:
            if not isinstance(agent, Agent):
                msg = f"Sub-agents of '{self._name}' must be Agent instances, got {type(agent).__name__}"
                raise ConfigurationError(msg)

        names = [agent.name for agent in agents]
        if len(names) != len(set(names)):
            msg = f"Sub-agent names must be unique under '{self._name}': {names}"
            raise ConfigurationError(msg)

        ancestors = {id(node) for node in self._lineage()}
        for agent in agents:
            if id(agent) in ancestors:
                msg = f"Agent '{agent.name}' cannot be a sub-agent of its own descendant '{self._name}'"
                raise ConfigurationError(msg)
            parent = agent.parent_agent
            if parent is not None and parent is not self:
                msg = f"Agent '{agent.name}' already belongs to '{parent.name}'"
                raise ConfigurationError(msg)

    def _lineage(self) -> Iterator[Agent]:
        node: Agent | None = self
        while node is not None:
            yield node
            node = node.parent_agent

    # -- Lookup ----------------------------------------------------------------

    def find(self, name: str) -> Agent | None:
        """Depth-first search of the subtree rooted here (self included)."""
        if self._name == name:
            return self
        for agent in self._sub_agents:
            found = agent.find(name)
            if found is not None:
                return found
        return None

    def find_child(self, name: str) -> Agent | None:
        """Direct children only."""
        return next((agent for agent in self._sub_agents if agent.name == name), None)

    # -- Copy ------------------------------------------------------------------

    def clone(self, **overrides: Any) -> Self:
        """Return an independent copy of this subtree with *overrides* applied.

        Children are cloned recursively unless ``sub_agents`` is overridden.
        List, dict and set attributes get their own container; their items
        and other attributes are shared.
        """
        for key in overrides:
            if key not in ("name", "sub_agents") and (key.startswith("_") or key not in vars(self)):
                msg = f"Cannot override unknown field '{key}' when cloning '{self._name}'"
                raise ConfigurationError(msg)

        if "sub_agents" in overrides:
            sub_agents = list(overrides.pop("sub_agents"))
        else:
            sub_agents = [agent.clone() for agent in self._sub_agents]
        name = validate_agent_name(overrides.pop("name", self._name))

        cloned = copy.copy(self)
        for key, value in list(vars(cloned).items()):
            if isinstance(value, list | dict | set):
                setattr(cloned, key, copy.copy(value))
        cloned._name = name
        cloned._parent_ref = None
        cloned._sub_agents = []
        for key, value in overrides.items():
            setattr(cloned, key, value)
        cloned.sub_agents = sub_agents
        return cloned

    # -- Execution -------------------------------------------------------------

    def run(self, message: str, context: InvocationContext | None = None) -> Iterator[Event]:
        """Produce this agent's events for *message*.

        Finite and forward-only.  ``before_agent_callback`` may return text to
        answer in place of the agent; ``after_agent_callback`` may return text
        to append one more event.
        """
        if not implements_run(self):
            msg = f"Agent '{self._name}' does not implement run"
            raise NotImplementedError(msg)
        return self._run_with_callbacks(message, context)

    def _run_with_callbacks(self, message: str, context: InvocationContext | None) -> Iterator[Event]:
        callback_context = context.to_callback_context(self._name) if context is not None else None

        if self.before_agent_callback is not None:
            override = self.before_agent_callback(callback_context)
            if override is not None:
                yield self._make_event(context, str(override))
                return

        yield from self._run_impl(message, context)

        if self.after_agent_callback is not None:
            extra = self.after_agent_callback(callback_context)
            if extra is not None:
                yield self._make_event(context, str(extra))

    def _run_impl(self, message: str, context: InvocationContext | None) -> Iterator[Event]:
        raise NotImplementedError

    def run_live(self, context: InvocationContext | None = None) -> Iterator[Event]:
        """Streaming audio/video execution.  Not supported."""
        msg = f"Agent '{self._name}' does not support live execution"
        raise NotImplementedError(msg)

    def _make_event(
        self,
        context: InvocationContext | None,
        content: str | None,
        **kwargs: Any,
    ) -> Event:
        invocation_id = context.invocation_id if context is not None else new_invocation_id()
        return Event(invocation_id=invocation_id, author=self._name, content=content, **kwargs)

    # -- Factory ---------------------------------------------------------------

    @staticmethod
    def from_config(config: AgentConfig | Mapping[str, Any]) -> Agent:
        """Build a plain agent tree from a nested ``{name, description, sub_agents}`` mapping."""
        if not isinstance(config, AgentConfig):
            try:
                config = AgentConfig.model_validate(config)
            except ValidationError as exc:
                msg = f"Invalid agent config: {exc}"
                raise ConfigurationError(msg) from exc
        return Agent(
            name=config.name,
            description=config.description,
            sub_agents=[Agent.from_config(child) for child in config.sub_agents],
        )
