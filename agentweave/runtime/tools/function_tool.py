"""Tools backed by plain Python callables."""

from __future__ import annotations

import inspect
import types
import typing
from typing import TYPE_CHECKING, Any

from agentweave.runtime.tools.base import BaseTool

if TYPE_CHECKING:
    from collections.abc import Callable

    from agentweave.runtime.context import ToolContext

TOOL_CONTEXT_PARAM = "tool_context"

JSON_TYPES: dict[type, str] = {
    str: "string",
    int: "integer",
    float: "number",
    bool: "boolean",
    list: "array",
    tuple: "array",
    dict: "object",
}


def json_type(annotation: Any) -> str:
    """JSON schema type for a parameter annotation.  Unknown types are strings."""
    origin = typing.get_origin(annotation) or annotation
    if origin in (typing.Union, types.UnionType):
        args = [arg for arg in typing.get_args(annotation) if arg is not type(None)]
        return json_type(args[0]) if len(args) == 1 else "string"
    return JSON_TYPES.get(origin, "string")


class FunctionTool(BaseTool):
    """Wrap ``func``; model-supplied arguments are passed as keywords.

    When ``func`` declares a ``tool_context`` parameter it receives the
    calling agent's :class:`ToolContext`.
    """

    def __init__(
        self,
        *,
        name: str,
        func: Callable[..., Any],
        description: str | None = None,
        parameters_schema: dict[str, Any] | None = None,
    ) -> None:
        super().__init__(name=name, description=description or inspect.getdoc(func))
        self.func = func
        self.parameters_schema = parameters_schema
        self._signature = inspect.signature(func)

    @classmethod
    def from_callable(cls, func: Callable[..., Any]) -> FunctionTool:
        name = getattr(func, "__name__", None) or type(func).__name__
        if name == "<lambda>":
            name = f"function_{id(func)}"
        return cls(name=name, func=func)

    @property
    def wants_tool_context(self) -> bool:
        return TOOL_CONTEXT_PARAM in self._signature.parameters

    def call(self, params: dict[str, Any], tool_context: ToolContext | None = None) -> Any:
        kwargs = dict(params)
        if self.wants_tool_context:
            kwargs[TOOL_CONTEXT_PARAM] = tool_context
        return self.func(**kwargs)

    def schema(self) -> dict[str, Any]:
        if self.parameters_schema is not None:
            return self.parameters_schema

        try:
            hints = typing.get_type_hints(self.func)
        except (NameError, TypeError):
            hints = {}

        properties: dict[str, Any] = {}
        required: list[str] = []
        for param in self._signature.parameters.values():
            if param.name == TOOL_CONTEXT_PARAM:
                continue
            if param.kind in (inspect.Parameter.VAR_POSITIONAL, inspect.Parameter.VAR_KEYWORD):
                continue
            annotation = hints.get(param.name, param.annotation)
            properties[param.name] = {"type": json_type(annotation)}
            if param.default is inspect.Parameter.empty:
                required.append(param.name)

        return {"type": "object", "properties": properties, "required": required}
