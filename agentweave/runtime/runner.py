"""Runner -- drives one user turn through an agent tree and a session store.

The runner owns the turn lifecycle:

1. **Setup**: load or create the session, allocate the invocation id
2. **Execute**: record the user message, then drive the root agent and
   record every event it yields
3. **Finalize**: notify plugins and close the agent stream

Every event is persisted through the session service *before* it is
yielded, so the stored log always equals the yielded sequence.  A failure
inside the agent tree ends the turn with one ``system`` error event; plugin
failures are not caught.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any

from loguru import logger

from agentweave.runtime.context import InvocationContext, new_invocation_id
from agentweave.runtime.models.config import RunConfig
from agentweave.runtime.models.enums import Role
from agentweave.runtime.models.events import Event
from agentweave.runtime.settings import get_settings
from agentweave.runtime.store.memory import InMemorySessionService

if TYPE_CHECKING:
    from collections.abc import Iterable, Iterator

    from agentweave.runtime.agents.base import Agent
    from agentweave.runtime.models.session import Session
    from agentweave.runtime.store.base import SessionService


# ---------------------------------------------------------------------------
# Plugins
# ---------------------------------------------------------------------------


class BasePlugin:
    """Observer of runner lifecycle hooks.  Every hook is a no-op by default.

    Return values are ignored.  Exceptions propagate to the runner's caller.
    """

    name = "plugin"

    def on_user_message(self, context: InvocationContext, message: str) -> None:
        pass

    def on_event(self, context: InvocationContext, event: Event) -> None:
        pass

    def on_agent_start(self, context: InvocationContext) -> None:
        pass

    def on_agent_end(self, context: InvocationContext) -> None:
        pass


# ---------------------------------------------------------------------------
# Runner
# ---------------------------------------------------------------------------


class Runner:
    """Runs ``agent`` for one user turn at a time."""

    def __init__(
        self,
        *,
        agent: Agent,
        app_name: str,
        session_service: SessionService | None = None,
        plugins: Iterable[BasePlugin] | None = None,
        artifact_service: Any = None,
        memory_service: Any = None,
        run_config: RunConfig | None = None,
    ) -> None:
        self.agent = agent
        self.app_name = app_name
        self.session_service: SessionService = session_service or InMemorySessionService()
        self.plugins = list(plugins or [])
        self.artifact_service = artifact_service
        self.memory_service = memory_service
        self.run_config = run_config or RunConfig()

    def run(
        self,
        *,
        user_id: str,
        message: str,
        session_id: str | None = None,
        new_session: bool = False,
    ) -> Iterator[Event]:
        """Run one turn, yielding the user event followed by the agent's events.

        Closing the returned generator early still runs ``on_agent_end``.
        """
        session = self._resolve_session(user_id=user_id, session_id=session_id, new_session=new_session)
        context = InvocationContext(
            session=session,
            agent=self.agent,
            invocation_id=new_invocation_id(),
            session_service=self.session_service,
            artifact_service=self.artifact_service,
            memory_service=self.memory_service,
            run_config=self.run_config,
        )
        logger.debug("Run {} started for session {} (user {})", context.invocation_id, session.id, user_id)

        user_event = Event(invocation_id=context.invocation_id, author=Role.USER, content=message)
        self._notify("on_user_message", context, message)
        yield self._record(context, user_event, user_id=user_id)

        self._notify("on_agent_start", context)
        events: Iterator[Event] | None = None
        try:
            try:
                events = iter(self.agent.run(message, context))
            except Exception as exc:
                logger.exception("Agent {} failed to start", self.agent.name)
                yield self._record(context, self._error_event(context, exc), user_id=user_id)
                return

            while True:
                try:
                    event = next(events)
                except StopIteration:
                    break
                except Exception as exc:
                    logger.exception("Agent {} failed during run {}", self.agent.name, context.invocation_id)
                    yield self._record(context, self._error_event(context, exc), user_id=user_id)
                    break

                yield self._record(context, event, user_id=user_id)
                if event.actions is not None and event.actions.transfer_to_agent:
                    logger.debug("Event {} transfers to {}", event.id, event.actions.transfer_to_agent)
                    break
        finally:
            close = getattr(events, "close", None)
            if close is not None:
                close()
            self._notify("on_agent_end", context)
            logger.debug("Run {} finished", context.invocation_id)

    def run_live(self, *, user_id: str, session_id: str | None = None) -> Iterator[Event]:
        """Streaming audio/video turns.  Not supported."""
        msg = "Live execution is not supported"
        raise NotImplementedError(msg)

    # -- Helpers ---------------------------------------------------------------

    def _resolve_session(self, *, user_id: str, session_id: str | None, new_session: bool) -> Session:
        if session_id is not None and not new_session:
            session = self.session_service.get_session(app_name=self.app_name, user_id=user_id, session_id=session_id)
            if session is not None:
                return session
            logger.info("Session {} not found for user {}; creating a new one", session_id, user_id)
        return self.session_service.create_session(app_name=self.app_name, user_id=user_id)

    def _record(self, context: InvocationContext, event: Event, *, user_id: str) -> Event:
        """Persist *event*, apply its actions, and notify plugins."""
        session_id = context.session.id
        updated = self.session_service.append_event(
            app_name=self.app_name, user_id=user_id, session_id=session_id, event=event
        )
        if updated is None:
            logger.warning("Session {} disappeared; event {} was not stored", session_id, event.id)
        else:
            context.session = updated

        actions = event.actions
        if actions is not None and actions.state_delta:
            updated = self.session_service.update_session(
                app_name=self.app_name, user_id=user_id, session_id=session_id, state_updates=actions.state_delta
            )
            if updated is not None:
                context.session = updated
        if actions is not None and actions.agent_state is not None:
            context.update_agent_state(event.author, dict(actions.agent_state))

        self._notify("on_event", context, event)
        return event

    @staticmethod
    def _error_event(context: InvocationContext, exc: Exception) -> Event:
        return Event(invocation_id=context.invocation_id, author=Role.SYSTEM, content=f"Error: {exc}")

    def _notify(self, hook: str, context: InvocationContext, *args: Any) -> None:
        for plugin in self.plugins:
            getattr(plugin, hook)(context, *args)


class InMemoryRunner(Runner):
    """Runner with its own fresh :class:`InMemorySessionService`."""

    def __init__(
        self,
        *,
        agent: Agent,
        app_name: str | None = None,
        plugins: Iterable[BasePlugin] | None = None,
        run_config: RunConfig | None = None,
    ) -> None:
        super().__init__(
            agent=agent,
            app_name=app_name or get_settings().app_name,
            session_service=InMemorySessionService(),
            plugins=plugins,
            run_config=run_config,
        )
