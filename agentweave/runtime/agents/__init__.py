"""Agent tree: the base node, the model agent and the workflow agents."""

from agentweave.runtime.agents.base import Agent, AgentConfig, implements_run, validate_agent_name
from agentweave.runtime.agents.loop import LoopAgent
from agentweave.runtime.agents.model import ModelAgent
from agentweave.runtime.agents.parallel import ParallelAgent
from agentweave.runtime.agents.sequential import SequentialAgent
from agentweave.runtime.agents.workflow import ChildOutcome, WorkflowAgent, drive_child

__all__ = [
    "Agent",
    "AgentConfig",
    "ChildOutcome",
    "LoopAgent",
    "ModelAgent",
    "ParallelAgent",
    "SequentialAgent",
    "WorkflowAgent",
    "drive_child",
    "implements_run",
    "validate_agent_name",
]
