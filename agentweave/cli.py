import click


@click.group()
def main() -> None:
    """Agentweave - composable agents driven from the command line."""


@main.command()
@click.argument("message")
@click.option("--model", default=None, help="Model name (default: from AGENTWEAVE_DEFAULT_MODEL).")
@click.option("--instructions", default=None, help="System instructions for the agent.")
@click.option("--user-id", default="cli-user", show_default=True, help="User the session belongs to.")
@click.option("--session-id", default=None, help="Existing session to continue.")
@click.option("--log-level", default=None, help="Log level (default: from AGENTWEAVE_LOG_LEVEL or INFO).")
def chat(
    message: str,
    model: str | None,
    instructions: str | None,
    user_id: str,
    session_id: str | None,
    log_level: str | None,
) -> None:
    """Send MESSAGE to a model agent and print every event."""
    from agentweave.runtime.agents import ModelAgent
    from agentweave.runtime.errors import ConfigurationError
    from agentweave.runtime.log import setup_logging
    from agentweave.runtime.plugins import LoggingPlugin
    from agentweave.runtime.runner import InMemoryRunner
    from agentweave.runtime.settings import get_settings

    settings = get_settings()
    setup_logging(log_level)

    agent = ModelAgent(
        name="assistant",
        model=model or settings.default_model,
        instructions=instructions,
        description="Command-line assistant",
    )
    runner = InMemoryRunner(agent=agent, app_name=settings.app_name, plugins=[LoggingPlugin()])

    try:
        for event in runner.run(user_id=user_id, message=message, session_id=session_id):
            if event.content is not None:
                click.echo(f"[{event.author}] {event.content}")
            for call in event.function_calls:
                click.echo(f"[{event.author}] -> {call.name}({call.arguments})")
            for response in event.function_responses:
                click.echo(f"[{event.author}] <- {response.name}: {response.response}")
    except ConfigurationError as exc:
        raise click.ClickException(str(exc)) from exc
    finally:
        agent.close()
