import logging
from typing import Any, Sequence

from rich.console import Console
from rich.panel import Panel
from rich.box import ROUNDED, HEAVY, SIMPLE
from rich.text import Text
from rich.table import Table

from ytcomments.domain.interfaces.user_interface import UserInterface
from ytcomments.domain.models.common import TaskOutcome, TaskState

logger = logging.getLogger(__name__)

STATE_STYLES = {
    TaskState.SUCCEEDED: "bold green",
    TaskState.EXHAUSTED: "bold red",
    TaskState.CANCELLED: "bold yellow",
}


class ConsoleDisplay(UserInterface):
    """Concrete implementation of UserInterface using the rich library for console output."""

    def __init__(self):
        """Initializes the rich Console."""
        self._console = Console()

    @property
    def console(self):
        """Get the Rich console instance for direct operations."""
        return self._console

    def display_output(self, output: str, **kwargs: Any) -> None:
        """Displays plain output text.

        Args:
            output: The string to display.
            **kwargs: Additional arguments including:
                - style: Rich style for the text
        """
        style = kwargs.get("style")
        self.console.print(Text(str(output), style=style) if style else str(output))

    def get_prompt(self, prompt_message: str = "> ") -> str:
        """Gets input from the user, with the prompt shown in cyan.

        Args:
            prompt_message: The message to display before the input cursor.

        Returns:
            The text input by the user.
        """
        return self.console.input(f"[cyan]{prompt_message}[/cyan]")

    def display_error(self, error_message: str, **kwargs: Any) -> None:
        """Displays an error message in a distinct style.

        Args:
            error_message: The error message to display.
        """
        panel = Panel(
            Text(error_message, style="white"),
            title="[bold red]Error[/bold red]",
            border_style="red",
            box=HEAVY,
            padding=(0, 1)
        )
        self.console.print(panel)

    def display_info(self, info_message: str, **kwargs: Any) -> None:
        """Displays an informational message.

        Args:
            info_message: The informational message to display.
        """
        panel = Panel(
            Text(info_message, style="white"),
            title="[bold blue]Info[/bold blue]",
            border_style="blue",
            box=SIMPLE,
            padding=(0, 1)
        )
        self.console.print(panel)

    def display_warning(self, warning_message: str, **kwargs: Any) -> None:
        """Displays a warning message.

        Args:
            warning_message: The warning message to display.
        """
        logger.warning(f"Display warning: {warning_message}")
        panel = Panel(
            Text(warning_message, style="white"),
            title="[bold yellow]Warning[/bold yellow]",
            border_style="yellow",
            box=HEAVY,
            padding=(0, 1)
        )
        self.console.print(panel)

    def display_outcomes(self, outcomes: Sequence[TaskOutcome]) -> None:
        """Displays one table row per fetch task."""
        if not outcomes:
            return
        table = Table(show_header=True, box=ROUNDED, border_style="cyan", padding=(0, 1))
        table.add_column("Video", style="white")
        table.add_column("Status", style="bold")
        table.add_column("Attempts", justify="right")
        table.add_column("Comments", justify="right")
        table.add_column("Output / Error", style="dim")

        for outcome in outcomes:
            state_style = STATE_STYLES.get(outcome.state, "white")
            detail = outcome.output_path if outcome.succeeded else (outcome.error_message or "")
            table.add_row(
                Text(outcome.video_id or outcome.locator),
                f"[{state_style}]{outcome.state.value}[/{state_style}]",
                str(outcome.attempts),
                str(outcome.records_written),
                Text(detail or ""),
            )
        self.console.print(table)

    def ask_yes_no_question(self, question: str) -> bool:
        """Asks a yes/no question until the answer is Y/Yes or N/No.

        Args:
            question: The question to ask

        Returns:
            True if the answer is yes, False otherwise
        """
        logger.debug(f"Asking yes/no question: {question}")
        while True:
            response = self.console.input(f"[cyan]{question} (Y/N): [/cyan]").strip().lower()
            if response in ("y", "yes"):
                return True
            if response in ("n", "no"):
                return False
            self.console.print("[bold red]Invalid input. Please enter Y or N.[/bold red]")
