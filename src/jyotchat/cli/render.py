"""Rich console rendering of a chat session."""

from rich.console import Console
from rich.markup import escape

from ..config import TRANSLATING_PLACEHOLDER, LogLevel
from ..session import Message, Role, SessionCallback

SEVERITY_STYLES = {
    "information": "cyan",
    "warning": "yellow",
    "error": "bold red",
}


class ConsoleSessionCallback(SessionCallback):
    """Writes session updates to a Rich console.

    Streamed content is printed incrementally; replaced content
    (regeneration, translation) is printed again in full.
    """

    def __init__(self, console: Console) -> None:
        self.console = console
        self._printed: dict[str, str] = {}
        self._live: set[str] = set()

    def _write(self, text: str) -> None:
        self.console.print(text, end="", markup=False, highlight=False, soft_wrap=True)

    def message_added(self, message: Message) -> None:
        if message.role == Role.ASSISTANT:
            self._live.add(message.id)
            self._printed[message.id] = ""
            self.console.print("[bold green]JyotChat:[/bold green] ", end="")

    def message_updated(self, message: Message, displayed: str) -> None:
        printed = self._printed.get(message.id, "")
        if message.id in self._live and displayed.startswith(printed):
            self._write(displayed[len(printed):])
            self._printed[message.id] = displayed
            return

        if displayed == TRANSLATING_PLACEHOLDER:
            self.console.print(f"[dim]{TRANSLATING_PLACEHOLDER}[/dim]")
            return
        if displayed == printed:
            return
        self.console.print("[bold green]JyotChat:[/bold green] ", end="")
        self._write(displayed)
        self.console.print()
        self._printed[message.id] = displayed

    def streaming_changed(self, active: bool) -> None:
        if not active:
            if self._live:
                self.console.print()
            self._live.clear()

    def regenerating_changed(self, message_id: str, active: bool) -> None:
        if active:
            self.console.print("[dim]Regenerating...[/dim]")
            self._live.add(message_id)
            self._printed[message_id] = ""
            self.console.print("[bold green]JyotChat:[/bold green] ", end="")
        elif message_id in self._live:
            self._live.discard(message_id)
            self.console.print()

    def playback_changed(self, message_id: str, state: str) -> None:
        if state == "loading":
            self.console.print("[dim]Fetching audio...[/dim]")
        elif state == "playing":
            self.console.print("[dim]Playing. Use /read again to stop.[/dim]")

    def suggestions_changed(self, questions: list[str]) -> None:
        if not questions:
            return
        self.console.print("[bold cyan]Suggested questions:[/bold cyan]")
        for i, question in enumerate(questions, 1):
            self.console.print(f"  [cyan]{i}.[/cyan] {escape(question)}", highlight=False)
        self.console.print("[dim]Use /ask N to ask one.[/dim]")

    def notify(self, text: str, severity: str = "information") -> None:
        style = SEVERITY_STYLES.get(severity, "cyan")
        self.console.print(f"[{style}]{escape(text)}[/{style}]")


def make_debug_printer(console: Console, log_level: str | None):
    """Route debug messages at or above a level to the console.

    Returns:
        Callable(level, component, message), or None when logging is off
    """
    if log_level is None:
        return None
    threshold = LogLevel.from_string(log_level)

    def _print(level: str, component: str, message: str) -> None:
        numeric = LogLevel.from_string(level)
        if numeric < threshold:
            return
        style = SEVERITY_STYLES.get("error" if numeric >= LogLevel.ERROR else level, "dim")
        console.print(
            f"[dim]{LogLevel.name(numeric)}[/dim] [{style}]{component}[/{style}] {escape(message)}",
            highlight=False,
        )

    return _print
