"""Terminal input and output for the practice session."""
from abc import ABC, abstractmethod
from typing import Iterable, Optional

from prompt_toolkit import PromptSession
from prompt_toolkit.completion import WordCompleter
from prompt_toolkit.styles import Style
from rich.console import Console
from rich.panel import Panel
from rich.table import Table
from rich.text import Text

from phrasecoach.models.models import UserStats
from phrasecoach.models.session_models import SessionState

PROMPT_STYLE = Style.from_dict({
    "prompt": "cyan bold",
})

COMMAND_HELP = {
    "skip": "Move on to the next phrase",
    "explain": "Explain the current phrase",
    "help": "Show this list",
    "exit": "End the session",
}


class SessionIO(ABC):
    """Line reader and renderer used by the session."""

    @abstractmethod
    async def read_line(self, prompt: str) -> str:
        """Wait for one line of user input."""

    @abstractmethod
    def show_phrase(self, phrase: str, keyword: str, state: SessionState) -> None:
        """Present a new phrase."""

    @abstractmethod
    def show_correct(self, lesson: str, state: SessionState) -> None:
        """Tell the user the attempt was correct."""

    @abstractmethod
    def show_incorrect(self, lesson: str, state: SessionState) -> None:
        """Tell the user the attempt was wrong."""

    @abstractmethod
    def show_message(self, message: str, style: str = "") -> None:
        """Print an informational line."""

    @abstractmethod
    def show_explanation(self, phrase: str, explanation: Optional[str]) -> None:
        """Render an explanation, or a notice that none is available."""

    @abstractmethod
    def show_help(self, prefix: str) -> None:
        """List the available commands."""

    @abstractmethod
    def show_summary(self, state: SessionState, stats: UserStats) -> None:
        """Render the end-of-session summary."""


class ConsoleIO(SessionIO):
    """Session IO on a terminal with command completion and colors."""

    def __init__(self, console: Optional[Console] = None, commands: Iterable[str] = COMMAND_HELP, prefix: str = "/"):
        self.console = console or Console()
        self.prompt_session = PromptSession(
            completer=WordCompleter([f"{prefix}{name}" for name in commands], sentence=True),
            style=PROMPT_STYLE,
        )

    async def read_line(self, prompt: str) -> str:
        return await self.prompt_session.prompt_async([("class:prompt", prompt)])

    @staticmethod
    def _status(state: SessionState) -> Text:
        text = Text()
        text.append(f"Streak: {state.streak}", style="bright_green")
        if state.lives is not None:
            text.append(" | ", style="dim")
            text.append("Lives: " + "♥" * state.lives, style="red")
        return text

    def show_phrase(self, phrase: str, keyword: str, state: SessionState) -> None:
        body = Text()
        body.append(phrase, style="bold")
        body.append(f"\n\nKeyword: {keyword}", style="cyan")
        self.console.print(Panel(body, title="New phrase", subtitle=self._status(state), border_style="blue"))
        self.console.print(
            "[dim]Type your translation, press Enter or type 'skip' to move on, '/help' for commands.[/dim]"
        )

    def show_correct(self, lesson: str, state: SessionState) -> None:
        self.console.print(f"[bold green]Correct![/bold green] Streak: {state.streak}")
        if lesson:
            self.console.print(f"[green]{lesson}[/green]")

    def show_incorrect(self, lesson: str, state: SessionState) -> None:
        if lesson:
            self.console.print(f"[yellow]{lesson}[/yellow]")
        self.console.print("[bold red]Incorrect.[/bold red] Try again or type 'skip' to move on.")
        self.console.print(self._status(state))

    def show_message(self, message: str, style: str = "") -> None:
        self.console.print(Text(message, style=style))

    def show_explanation(self, phrase: str, explanation: Optional[str]) -> None:
        if not explanation:
            self.console.print("[yellow]No explanation available for this phrase.[/yellow]")
            return
        self.console.print(Panel(explanation, title=phrase, border_style="magenta"))

    def show_help(self, prefix: str) -> None:
        table = Table(title="Commands", show_header=False)
        table.add_column(style="cyan")
        table.add_column()
        for name, description in COMMAND_HELP.items():
            table.add_row(f"{prefix}{name}", description)
        self.console.print(table)

    def show_summary(self, state: SessionState, stats: UserStats) -> None:
        table = Table(title="Session summary", show_header=False)
        table.add_column(style="cyan")
        table.add_column(justify="right")
        table.add_row("Attempts", str(state.attempts))
        table.add_row("Accuracy", f"{state.accuracy:.0%}")
        table.add_row("Best streak", str(state.best_streak))
        table.add_row("Keywords practiced", str(len(state.keywords_covered)))
        table.add_row("Phrases learned (all time)", str(stats.total_phrases_learned))
        table.add_row("Keywords learned (all time)", str(stats.total_keywords_learned))
        table.add_row("Accuracy (all time)", f"{stats.accuracy:.0%}")
        self.console.print(table)
