"""
Main CLI application entry point.

This module contains the Typer application and command handlers for
Chat Proxy: a one-shot ``chat`` command, a ``tools`` listing and ``serve``.
"""

from typing import Optional
import asyncio
import logging

import typer
from rich.console import Console
from rich.table import Table

from chat_proxy import VERSION
from chat_proxy.config.settings import ChatProxySettings, get_settings
from chat_proxy.core.chat_service import ChatService
from chat_proxy.core.client.errors import ChatProxyError, create_user_friendly_message
from chat_proxy.core.function_calling.response_streamer import StreamEventType, stream_events
from chat_proxy.tools.registry import create_default_registry

# Create the main Typer application
app = typer.Typer(
    name="chat-proxy",
    help="Chat Proxy - tool-augmented chat completion proxy",
    add_completion=False,
    rich_markup_mode="rich",
)

# Rich console for output
console = Console()


def _configure_logging(settings: ChatProxySettings) -> None:
    level = "DEBUG" if settings.debug else settings.log_level
    logging.basicConfig(level=level, format="%(asctime)s %(name)s:%(levelname)s: %(message)s")


def version_callback(value: bool) -> None:
    """Display version information and exit."""
    if value:
        console.print(f"[bold blue]Chat Proxy[/bold blue] version [green]{VERSION}[/green]")
        raise typer.Exit()


@app.callback()
def callback(
    version: Optional[bool] = typer.Option(
        None,
        "--version",
        "-v",
        callback=version_callback,
        is_eager=True,
        help="Show version and exit",
    ),
) -> None:
    """
    Chat Proxy - tool-augmented chat completion proxy.

    Forwards conversations to a hosted LLM, runs the tools it asks for,
    and returns the final answer.
    """
    pass


@app.command("chat")
def chat_command(
    message: str = typer.Argument(..., help="Message to send to AI"),
    model: Optional[str] = typer.Option(None, "--model", "-m", help="AI model to use"),
    api_key: Optional[str] = typer.Option(None, "--api-key", help="Upstream API key (overrides CHAT_PROXY_API_KEY)"),
) -> None:
    """Send a single message and print the tool activity and the answer."""
    settings = get_settings()
    _configure_logging(settings)
    asyncio.run(_async_chat_command(settings, message, model, api_key))


async def _async_chat_command(
    settings: ChatProxySettings,
    message: str,
    model: Optional[str],
    api_key: Optional[str],
) -> None:
    """Async implementation of chat command."""
    service = ChatService(settings)
    console.print(f"[yellow]You:[/yellow] {message}")

    try:
        with console.status("[dim]Thinking...[/dim]"):
            outcome = await service.respond(
                [{"role": "user", "content": message}],
                model=model,
                api_key=api_key
            )
    except ChatProxyError as e:
        console.print(f"[red]Error:[/red] {create_user_friendly_message(e)}")
        if settings.debug:
            console.print(f"[dim]{e}[/dim]")
        raise typer.Exit(1)

    for event in stream_events(outcome):
        if event.type == StreamEventType.STATUS and event.value:
            console.print(f"[dim]🔧 {event.value}[/dim]")
        elif event.type == StreamEventType.CONTENT:
            console.print(f"[blue]AI:[/blue] {event.value}")

    if outcome.forced_stop:
        console.print("[dim](tool round limit reached)[/dim]")


@app.command("tools")
def tools_command() -> None:
    """List the tools the model can call."""
    registry = create_default_registry(get_settings())

    table = Table(title="Available Tools")
    table.add_column("Name", style="cyan")
    table.add_column("Status label", style="green")
    table.add_column("Parameters")
    table.add_column("Description")

    for tool in registry.get_all_tools():
        params = ", ".join(tool.schema.get("properties", {}).keys())
        table.add_row(tool.name, tool.status_label, params, tool.description)

    console.print(table)


@app.command("serve")
def serve_command(
    host: Optional[str] = typer.Option(None, "--host", help="Bind address"),
    port: Optional[int] = typer.Option(None, "--port", "-p", help="Bind port"),
) -> None:
    """Run the HTTP server."""
    import uvicorn

    settings = get_settings()
    _configure_logging(settings)
    if not settings.is_configured:
        console.print("[yellow]Warning:[/yellow] CHAT_PROXY_API_KEY is not set; requests must pass ?apiKey=")

    uvicorn.run(
        "chat_proxy.server.app:create_app",
        factory=True,
        host=host or settings.host,
        port=port or settings.port,
        log_level=settings.log_level.lower(),
    )


def main() -> None:
    """Console script entry point."""
    app()


if __name__ == "__main__":
    main()
