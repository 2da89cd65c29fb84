"""Model backends."""

from agentweave.runtime.backends.base import (
    ModelBackend,
    ModelMessage,
    ModelRequest,
    ModelResponse,
    ResponsePart,
    ToolDeclaration,
)
from agentweave.runtime.backends.gemini import GeminiBackend

__all__ = [
    "GeminiBackend",
    "ModelBackend",
    "ModelMessage",
    "ModelRequest",
    "ModelResponse",
    "ResponsePart",
    "ToolDeclaration",
]
