"""
GemChat CLI

Command-line interface for GemChat.

Usage:
    gemchat chat                  # Interactive chat with typing animation
    gemchat chat --no-animation   # Show responses immediately
    gemchat serve                 # Run the API server
    gemchat sessions list         # Show stored identities and their expiry
    gemchat sessions purge        # Delete expired conversations
"""

import asyncio
import logging
import subprocess
import sys
from datetime import datetime

import click
from rich.console import Console, Group
from rich.live import Live
from rich.panel import Panel
from rich.table import Table
from rich.text import Text

from gemchat import __version__
from gemchat.client import ChatOrchestrator, RenderedMessage, create_chat_client, render_conversation
from gemchat.config import get_settings
from gemchat.scheduling import AsyncioScheduler
from gemchat.session import SessionManager, StorageKeys
from gemchat.storage import create_store

console = Console()

CURSOR = "▌"
EXIT_COMMANDS = {"exit", "quit", "/exit", "/quit"}
CLEAR_COMMAND = "/clear"
ANIMATION_REFRESH_SECONDS = 0.02


def configure_cli_logging() -> None:
    """Keep library and application logs out of the interactive UI."""
    logging.disable(logging.WARNING)
    for logger_name in ("gemchat", "httpx", "httpcore", "asyncio"):
        logging.getLogger(logger_name).setLevel(logging.ERROR)


def _format_ms(timestamp_ms: int) -> str:
    return datetime.fromtimestamp(timestamp_ms / 1000).strftime("%Y-%m-%d %H:%M:%S")


def _message_renderable(message: RenderedMessage) -> Text:
    if message.is_user:
        text = Text("You: ", style="bold cyan")
        text.append(message.text)
        return text
    text = Text("Gemini: ", style="bold green")
    text.append(message.text)
    if message.show_cursor:
        text.append(CURSOR, style="blink")
    return text


def _print_message(message: RenderedMessage) -> None:
    console.print(_message_renderable(message))


def _session_manager() -> SessionManager:
    settings = get_settings()
    return SessionManager(
        store=create_store(settings.storage),
        clock=AsyncioScheduler().now_ms,
        keys=StorageKeys(prefix=settings.storage.key_prefix),
        ttl_seconds=settings.session.ttl_seconds,
    )


async def _play_reveal(orchestrator: ChatOrchestrator, message_id: str) -> None:
    """Render the assistant message until the engine stops revealing it."""
    engine = orchestrator.engine

    def current() -> Text:
        for rendered in render_conversation(orchestrator.messages, engine):
            if rendered.message_id == message_id:
                return _message_renderable(rendered)
        return Text("")

    with Live(current(), console=console, refresh_per_second=30, transient=False) as live:
        try:
            while engine.is_revealing(message_id):
                await asyncio.sleep(ANIMATION_REFRESH_SECONDS)
                live.update(current())
        except asyncio.CancelledError:
            engine.stop()
            raise
        live.update(current())


async def _run_chat(orchestrator: ChatOrchestrator) -> None:
    history = await orchestrator.start()
    if not orchestrator.identity:
        console.print("[red]Local storage is unavailable; chat input is disabled.[/red]")
        return

    for rendered in render_conversation(history, orchestrator.engine):
        _print_message(rendered)

    try:
        while True:
            # Read input off the loop so debounce timers keep firing
            text = await asyncio.to_thread(console.input, "[bold cyan]You:[/bold cyan] ")
            orchestrator.record_activity()
            command = text.strip().lower()

            if not command:
                continue
            if command in EXIT_COMMANDS:
                console.print("\n[yellow]Goodbye![/yellow]")
                break
            if command == CLEAR_COMMAND:
                orchestrator.clear()
                console.print("[yellow]Conversation cleared.[/yellow]")
                continue

            with console.status("[cyan]Thinking...[/cyan]", spinner="dots"):
                reply = await orchestrator.submit(text)
            if reply is None:
                continue

            await _play_reveal(orchestrator, reply.id)
            if orchestrator.error:
                console.print(f"[red]Error: {orchestrator.error}[/red]")
    finally:
        await orchestrator.close()


@click.group()
@click.version_option(version=__version__, prog_name="GemChat")
def cli():
    """GemChat - Terminal chat with Gemini."""


@cli.command()
@click.option("--no-animation", is_flag=True, help="Show responses without the typing effect.")
@click.option("--api-url", default=None, help="GemChat API base URL (default: CLIENT_API_URL).")
def chat(no_animation: bool, api_url: str | None):
    """Interactive chat mode. Type '/clear' to reset, 'exit' or 'quit' to leave."""
    configure_cli_logging()
    settings = get_settings()
    if api_url:
        settings = settings.model_copy(
            update={"client": settings.client.model_copy(update={"api_url": api_url})}
        )

    console.print(
        Panel.fit(
            "[bold green]GemChat[/bold green]\n"
            "Type a message and press Enter. '/clear' resets the conversation, "
            "'exit' or 'quit' leaves.",
            border_style="green",
        )
    )

    async def run() -> None:
        orchestrator = create_chat_client(settings, animate=not no_animation)
        await _run_chat(orchestrator)

    try:
        asyncio.run(run())
    except (KeyboardInterrupt, EOFError):
        console.print("\n[yellow]Goodbye![/yellow]")


@cli.command()
@click.option("--host", default=None, help="Bind host (default: API_HOST).")
@click.option("--port", default=None, type=int, help="Bind port (default: API_PORT).")
@click.option("--reload", is_flag=True, help="Reload on code changes.")
def serve(host: str | None, port: int | None, reload: bool):
    """Run the GemChat API server with uvicorn."""
    settings = get_settings()
    cmd = [
        sys.executable,
        "-m",
        "uvicorn",
        "gemchat.api.main:app",
        "--host",
        host or settings.api_host,
        "--port",
        str(port or settings.api_port),
    ]
    if reload:
        cmd.append("--reload")

    console.print(f"[cyan]Starting API server:[/cyan] {' '.join(cmd)}")
    process = subprocess.Popen(cmd)
    try:
        process.wait()
    except KeyboardInterrupt:
        console.print("\n[yellow]Stopping API server...[/yellow]")
        process.terminate()
        try:
            process.wait(timeout=5)
        except subprocess.TimeoutExpired:
            process.kill()


@cli.group(name="sessions")
def sessions():
    """Inspect and purge stored conversations."""


@sessions.command(name="list")
def list_sessions():
    """List stored identities with their last access and expiration."""
    manager = _session_manager()
    entries = manager.list_sessions()
    if not entries:
        console.print("[yellow]No stored sessions.[/yellow]")
        return

    now = AsyncioScheduler().now_ms()
    table = Table(title="Sessions")
    table.add_column("Identity", style="cyan")
    table.add_column("Last access")
    table.add_column("Expires")
    table.add_column("Status")
    for identity, session in sorted(entries.items()):
        if session is None:
            table.add_row(identity, "-", "-", "[red]corrupt[/red]")
            continue
        status = "[red]expired[/red]" if session.is_expired(now) else "[green]active[/green]"
        table.add_row(
            identity,
            _format_ms(session.last_access),
            _format_ms(session.expiration),
            status,
        )
    console.print(table)


@sessions.command(name="purge")
def purge_sessions():
    """Delete conversations whose session window has lapsed."""
    purged = _session_manager().purge_expired_sessions()
    console.print(f"[green]Purged {len(purged)} expired session(s).[/green]")


def main():
    """Main entry point for CLI."""
    cli()


if __name__ == "__main__":
    main()
