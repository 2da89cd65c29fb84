"""Expose an agent to a ModelAgent as a callable tool."""

from __future__ import annotations

from typing import TYPE_CHECKING, Any

from agentweave.runtime.errors import ToolError
from agentweave.runtime.tools.base import BaseTool

if TYPE_CHECKING:
    from agentweave.runtime.agents.base import Agent
    from agentweave.runtime.context import ToolContext

NO_RESPONSE = "No response"

MESSAGE_SCHEMA: dict[str, Any] = {
    "type": "object",
    "properties": {
        "message": {"type": "string", "description": "Message to send to the agent"},
    },
    "required": ["message"],
}


class AgentTool(BaseTool):
    """Run ``agent`` on ``params["message"]`` and return its last event's content."""

    def __init__(self, agent: Agent) -> None:
        super().__init__(name=agent.name, description=agent.description)
        self.agent = agent

    def call(self, params: dict[str, Any], tool_context: ToolContext | None = None) -> Any:
        from agentweave.runtime.agents.base import implements_run

        if not implements_run(self.agent):
            msg = f"Agent {self.agent.name} cannot be executed"
            raise ToolError(msg)

        message = str(params.get("message", ""))
        context = tool_context.invocation_context if tool_context is not None else None

        last = None
        for event in self.agent.run(message, context):
            last = event
        if last is None or last.content is None:
            return NO_RESPONSE
        return last.content

    def schema(self) -> dict[str, Any]:
        return MESSAGE_SCHEMA
