"""Built-in runner plugins."""

from __future__ import annotations

from typing import TYPE_CHECKING

from loguru import logger

from agentweave.runtime.runner import BasePlugin

if TYPE_CHECKING:
    from agentweave.runtime.context import InvocationContext
    from agentweave.runtime.models.events import Event

PREVIEW_LENGTH = 80


def _preview(text: str | None) -> str:
    if text is None:
        return ""
    if len(text) <= PREVIEW_LENGTH:
        return text
    return text[: PREVIEW_LENGTH - 3] + "..."


class LoggingPlugin(BasePlugin):
    """Log every runner hook through loguru."""

    name = "logging"

    def on_user_message(self, context: InvocationContext, message: str) -> None:
        logger.info("[{}] user message: {}", context.invocation_id, _preview(message))

    def on_event(self, context: InvocationContext, event: Event) -> None:
        if event.function_calls:
            logger.debug(
                "[{}] {} called {}",
                context.invocation_id,
                event.author,
                ", ".join(call.name for call in event.function_calls),
            )
        elif event.function_responses:
            logger.debug("[{}] {} received {} tool results", context.invocation_id, event.author, len(event.function_responses))
        else:
            logger.debug("[{}] {}: {}", context.invocation_id, event.author, _preview(event.content))

    def on_agent_start(self, context: InvocationContext) -> None:
        logger.info("[{}] agent {} started (session {})", context.invocation_id, context.agent.name, context.session.id)

    def on_agent_end(self, context: InvocationContext) -> None:
        logger.info("[{}] agent {} finished", context.invocation_id, context.agent.name)
