"""Main CLI application using Typer."""
import asyncio
import contextlib
import signal

import typer
from dotenv import load_dotenv
from rich.console import Console
from rich.markup import escape
from rich.table import Table

from ..config import ASSISTANT_MISSING_NOTICE, ASSISTANT_UNREACHABLE_NOTICE
from ..session import ChatSessionController, Message, Role
from .providers import get_companion_api, get_playback_manager, get_stream_provider
from .render import ConsoleSessionCallback, make_debug_printer

# Load environment variables
load_dotenv()

# Create Typer app
app = typer.Typer(
    name="jyotchat",
    help="Terminal client for the JyotChat retrieval assistant",
    no_args_is_help=True,
    add_completion=True,
)

# Console for rich output
console = Console()

HELP_TEXT = """[dim]Commands:
  /regen [N]      regenerate reply N (default: last)
  /translate [N]  toggle translation of reply N
  /read [N]       read reply N aloud, or stop reading
  /ask N          ask suggested question N
  /files          list the assistant's documents
  /quit           leave
Press Ctrl+C while a reply streams to stop it.[/dim]
"""


def _assistant_messages(controller: ChatSessionController) -> list[Message]:
    return [m for m in controller.messages if m.role == Role.ASSISTANT]


def _pick_reply(controller: ChatSessionController, arg: str) -> Message | None:
    """Resolve a 1-based reply number (default: last reply)."""
    replies = _assistant_messages(controller)
    if not replies:
        console.print("[yellow]No replies yet.[/yellow]")
        return None
    if not arg:
        return replies[-1]
    try:
        index = int(arg)
    except ValueError:
        console.print(f"[red]Not a reply number: {escape(arg)}[/red]")
        return None
    if not 1 <= index <= len(replies):
        console.print(f"[red]Reply number must be between 1 and {len(replies)}[/red]")
        return None
    return replies[index - 1]


def _print_files(controller: ChatSessionController) -> None:
    if not controller.files:
        console.print("[dim]No files.[/dim]")
        return
    cited = {ref.name for ref in controller.referenced_files}
    table = Table(title="Assistant Files")
    table.add_column("Name", style="cyan")
    table.add_column("Status")
    table.add_column("Cited", justify="center")
    for file in controller.files:
        table.add_row(file.name, file.status or "", "*" if file.name in cited else "")
    console.print(table)


async def _with_stop_on_interrupt(controller: ChatSessionController, coro):
    """Run a streaming operation with Ctrl+C mapped to controller.stop()."""
    loop = asyncio.get_running_loop()
    installed = False
    with contextlib.suppress(NotImplementedError, RuntimeError):
        loop.add_signal_handler(signal.SIGINT, controller.stop)
        installed = True
    try:
        return await coro
    finally:
        if installed:
            loop.remove_signal_handler(signal.SIGINT)


@app.command()
def chat(
    log_level: str = typer.Option(
        None,
        "--log-level",
        "-l",
        help="Show log messages at or above this level (debug, info, warning, error)"
    ),
):
    """Interactive chat with the assistant."""
    async def _chat():
        callback = ConsoleSessionCallback(console)
        debug = make_debug_printer(console, log_level)
        stream_provider = get_stream_provider(console)
        api = get_companion_api()
        playback = get_playback_manager(api, callback)
        controller = ChatSessionController(stream_provider, api, callback=callback)
        controller.set_debug_callback(debug)
        playback.set_debug_callback(debug)

        try:
            console.print("[dim]Connecting to JyotChat...[/dim]")
            info = await controller.load_assistant()
            if info is None or not info.exists:
                raise typer.Exit(code=1)

            console.print(f"[bold cyan]{escape(info.display_name)}[/bold cyan]")
            console.print(HELP_TEXT)

            while True:
                try:
                    line = await asyncio.to_thread(console.input, "[bold yellow]You:[/bold yellow] ")
                except (KeyboardInterrupt, EOFError):
                    console.print("\n[dim]Goodbye![/dim]")
                    break

                line = line.strip()
                if not line:
                    continue
                command, _, arg = line.partition(" ")
                arg = arg.strip()

                if command.lower() in ("/quit", "exit", "quit", "q"):
                    console.print("[dim]Goodbye![/dim]")
                    break
                elif command == "/help":
                    console.print(HELP_TEXT)
                elif command == "/files":
                    _print_files(controller)
                elif command == "/regen":
                    reply = _pick_reply(controller, arg)
                    if reply is not None:
                        await _with_stop_on_interrupt(controller, controller.regenerate(reply.id))
                elif command == "/translate":
                    reply = _pick_reply(controller, arg)
                    if reply is not None:
                        await controller.toggle_translation(reply.id)
                elif command == "/read":
                    reply = _pick_reply(controller, arg)
                    if reply is not None:
                        await playback.toggle(reply.id, controller.displayed_content(reply.id))
                elif command == "/ask":
                    try:
                        index = int(arg) - 1
                        await _with_stop_on_interrupt(controller, controller.select_suggestion(index))
                    except (ValueError, IndexError):
                        console.print("[red]Pick a suggested question by its number.[/red]")
                else:
                    controller.input = line
                    await _with_stop_on_interrupt(controller, controller.submit())

        finally:
            await playback.close()
            await stream_provider.close()
            await api.close()

    asyncio.run(_chat())


@app.command()
def info():
    """Show the assistant's name and documents."""
    async def _info():
        stream_provider = get_stream_provider(console)
        api = get_companion_api()
        try:
            controller = ChatSessionController(stream_provider, api)
            assistant = await controller.load_assistant()
            if assistant is None:
                console.print(f"[red]{ASSISTANT_UNREACHABLE_NOTICE}[/red]")
                raise typer.Exit(code=1)
            if not assistant.exists:
                console.print(f"[yellow]{ASSISTANT_MISSING_NOTICE}[/yellow]")
                raise typer.Exit(code=1)
            console.print(f"[bold]Assistant:[/bold] {escape(assistant.display_name)}")
            _print_files(controller)
        finally:
            await stream_provider.close()
            await api.close()

    asyncio.run(_info())


def main():
    """Main entry point for the CLI."""
    app()


if __name__ == "__main__":
    main()
