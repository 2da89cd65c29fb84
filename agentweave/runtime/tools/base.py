"""Tool base class."""

from __future__ import annotations

from typing import TYPE_CHECKING, Any

from agentweave.runtime.backends.base import ToolDeclaration

if TYPE_CHECKING:
    from agentweave.runtime.context import ToolContext


class BaseTool:
    """A named capability a ModelAgent can call.

    Subclasses implement :meth:`call` and :meth:`schema`.  ``call`` may raise;
    the calling agent turns the failure into an error function response.
    """

    def __init__(self, *, name: str, description: str | None = None) -> None:
        self.name = name
        self.description = description

    def __repr__(self) -> str:
        return f"{type(self).__name__}(name={self.name!r})"

    def call(self, params: dict[str, Any], tool_context: ToolContext | None = None) -> Any:
        raise NotImplementedError

    def schema(self) -> dict[str, Any]:
        """JSON schema of the parameters object."""
        raise NotImplementedError

    def declaration(self) -> ToolDeclaration:
        return ToolDeclaration(
            name=self.name,
            description=self.description or f"Tool {self.name}",
            parameters=self.schema(),
        )
