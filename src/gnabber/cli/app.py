"""Main CLI application using Typer."""
import asyncio
from pathlib import Path

import typer
from dotenv import load_dotenv
from pydantic import ValidationError
from rich.console import Console
from rich.markup import escape

from ..chat import ChatMessage, UsernameChanged, init, update
from ..config import RECEIVE_EVENT
from ..errors import HubConnectionError, SendError
from ..logging_config import TARGET_CONSOLE, TARGET_TEXTUAL, configure_logging
from ..runtime import EffectExecutor, Program
from ..ui.formatting import format_chat_line
from .providers import HubSettings, get_connection_manager, get_settings

# Load environment variables
load_dotenv()

# Create Typer app
app = typer.Typer(
    name="gnabber",
    help="Real-time chat client for SignalR-style message hubs",
    no_args_is_help=True,
    add_completion=True,
)

# Console for rich output
console = Console()


def _load_settings(**overrides: object) -> HubSettings:
    try:
        return get_settings(**overrides)
    except ValidationError as e:
        console.print(f"[red]Error: invalid configuration: {e.errors()[0]['msg']}[/red]")
        raise typer.Exit(code=1)


@app.command()
def chat(
    url: str | None = typer.Option(
        None,
        "--url",
        "-u",
        help="Hub endpoint URL (default: GNABBER_HUB_URL or the public gnabber hub)"
    ),
    username: str | None = typer.Option(
        None,
        "--username",
        "-n",
        help="Username to prefill on the login page"
    ),
    transport: str | None = typer.Option(
        None,
        "--transport",
        "-t",
        help="Transport: websocket or memory (offline echo hub)"
    ),
    log_level: str | None = typer.Option(
        None,
        "--log-level",
        "-l",
        help="Log level: debug, info, warning or error"
    ),
    log_file: Path | None = typer.Option(
        None,
        "--log-file",
        help="Also write log records to this file"
    ),
    trace: bool = typer.Option(
        False,
        "--trace",
        help="Log every message and state change at DEBUG level"
    ),
):
    """Launch the interactive chat TUI."""
    settings = _load_settings(url=url, username=username, transport=transport, log_level=log_level)
    configure_logging(
        "DEBUG" if trace else settings.log_level,
        target=TARGET_TEXTUAL,
        log_file=log_file,
    )

    async def _chat():
        from ..ui import run_chat_app

        manager = get_connection_manager(settings)
        executor = EffectExecutor(manager, settings.url)
        state, effects = init()
        # Prefill before the view mounts so the focused username input shows it
        if settings.username:
            state, _ = update(state, UsernameChanged(username=settings.username))
        program = Program(state, update, executor.execute, initial_effects=effects, trace=trace)

        await run_chat_app(program, manager)

    asyncio.run(_chat())


@app.command()
def send(
    username: str = typer.Argument(..., help="Username to send as"),
    message: str = typer.Argument(..., help="Message text"),
    url: str | None = typer.Option(
        None,
        "--url",
        "-u",
        help="Hub endpoint URL"
    ),
    transport: str | None = typer.Option(
        None,
        "--transport",
        "-t",
        help="Transport: websocket or memory"
    ),
    log_level: str | None = typer.Option(
        None,
        "--log-level",
        "-l",
        help="Log level: debug, info, warning or error"
    ),
):
    """Send a single message and exit."""
    settings = _load_settings(url=url, transport=transport, log_level=log_level)
    configure_logging(settings.log_level, target=TARGET_CONSOLE)

    async def _send():
        manager = get_connection_manager(settings)
        try:
            console.print(f"[dim]Connecting to {settings.url}...[/dim]")
            handle = await manager.connect(settings.url)
            await manager.send(handle, ChatMessage.compose(username, message))
            console.print("[green]Message sent[/green]")
        except (HubConnectionError, SendError) as e:
            console.print(f"[red]Error: {escape(str(e))}[/red]")
            raise typer.Exit(code=1)
        finally:
            await manager.close()

    asyncio.run(_send())


@app.command()
def listen(
    url: str | None = typer.Option(
        None,
        "--url",
        "-u",
        help="Hub endpoint URL"
    ),
    transport: str | None = typer.Option(
        None,
        "--transport",
        "-t",
        help="Transport: websocket or memory"
    ),
    count: int = typer.Option(
        0,
        "--count",
        "-c",
        min=0,
        help="Exit after this many messages (0 = run until interrupted)"
    ),
    log_level: str | None = typer.Option(
        None,
        "--log-level",
        "-l",
        help="Log level: debug, info, warning or error"
    ),
):
    """Print incoming chat messages as they arrive."""
    settings = _load_settings(url=url, transport=transport, log_level=log_level)
    configure_logging(settings.log_level, target=TARGET_CONSOLE)

    async def _listen():
        manager = get_connection_manager(settings)
        received = 0
        done = asyncio.Event()

        def on_message(chat_message: ChatMessage) -> None:
            nonlocal received
            received += 1
            console.print(format_chat_line(chat_message))
            if count and received >= count:
                done.set()

        try:
            handle = await manager.connect(settings.url)
            manager.subscribe(handle, RECEIVE_EVENT, on_message)
            console.print(f"[dim]Listening on {settings.url} (Ctrl+C to stop)[/dim]")
            await done.wait()
        except HubConnectionError as e:
            console.print(f"[red]Error: {escape(str(e))}[/red]")
            raise typer.Exit(code=1)
        finally:
            await manager.close()

    try:
        asyncio.run(_listen())
    except KeyboardInterrupt:
        console.print("\n[dim]Goodbye![/dim]")


if __name__ == "__main__":
    app()
