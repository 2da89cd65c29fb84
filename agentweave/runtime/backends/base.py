"""Model backend interface.

A backend turns a conversation (plus tool declarations and a system
instruction) into one model response.  Backends are synchronous; transport
and API faults surface as :class:`~agentweave.runtime.errors.BackendError`.
"""

from __future__ import annotations

from typing import Any, Protocol, runtime_checkable

from pydantic import BaseModel, Field, model_validator

from agentweave.runtime.models.config import RunConfig
from agentweave.runtime.models.enums import MessageRole
from agentweave.runtime.models.events import FunctionCall, FunctionResponse


class ModelMessage(BaseModel):
    """One conversation turn: text, a function call, or a function response."""

    role: MessageRole
    text: str | None = None
    function_call: FunctionCall | None = None
    function_response: FunctionResponse | None = None

    @model_validator(mode="after")
    def _check_single_payload(self) -> ModelMessage:
        payloads = [self.text, self.function_call, self.function_response]
        if sum(payload is not None for payload in payloads) != 1:
            msg = "ModelMessage carries exactly one of text, function_call, function_response"
            raise ValueError(msg)
        return self


class ToolDeclaration(BaseModel):
    """What the model is told about a callable tool."""

    name: str
    description: str
    parameters: dict[str, Any] = Field(default_factory=lambda: {"type": "object", "properties": {}})


class ResponsePart(BaseModel):
    """A single part of a model response: text or a function call."""

    text: str | None = None
    function_call: FunctionCall | None = None


class ModelResponse(BaseModel):
    parts: list[ResponsePart] = Field(default_factory=list)

    @property
    def texts(self) -> list[str]:
        return [part.text for part in self.parts if part.text]

    @property
    def function_calls(self) -> list[FunctionCall]:
        return [part.function_call for part in self.parts if part.function_call is not None]

    @property
    def is_empty(self) -> bool:
        return not self.texts and not self.function_calls


class ModelRequest(BaseModel):
    """Everything a backend call needs.  Handed to model callbacks before the call."""

    model: str
    messages: list[ModelMessage]
    tools: list[ToolDeclaration] = Field(default_factory=list)
    system_instruction: str | None = None
    run_config: RunConfig = Field(default_factory=RunConfig)


@runtime_checkable
class ModelBackend(Protocol):
    """Synchronous protocol for calling a language model."""

    def generate(
        self,
        *,
        model: str,
        messages: list[ModelMessage],
        tools: list[ToolDeclaration] | None = None,
        system_instruction: str | None = None,
        run_config: RunConfig | None = None,
    ) -> ModelResponse:
        """Return the model's response.  Raises ``BackendError`` on API faults."""
        ...
