"""Tools callable by model agents."""

from agentweave.runtime.tools.agent_tool import AgentTool
from agentweave.runtime.tools.base import BaseTool
from agentweave.runtime.tools.function_tool import FunctionTool

__all__ = [
    "AgentTool",
    "BaseTool",
    "FunctionTool",
]
