"""
Rich Terminal Output for the DataDAO Wizard CLI

Provides styled messages, panels and tables for deployment progress,
configuration issues and recovery suggestions. Uses the Rich library for all
formatting.
"""

from typing import TYPE_CHECKING, Any

from rich.console import Console
from rich.markup import escape
from rich.panel import Panel
from rich.table import Table

if TYPE_CHECKING:
    from ..state.recovery import RecoverySuggestion
    from ..state.step_machine import NextAction, StepProgress


class OutputManager:
    """
    Manages rich terminal output for the DataDAO wizard CLI.

    Provides consistent styling and formatting for:
    - Status messages (success, error, warning, info)
    - Tables for step progress and record details
    - Panels for the next action and recovery advice
    """

    # Status icons
    ICONS = {
        "complete": "[green]v[/green]",
        "pending": "[dim]o[/dim]",
        "failed": "[red]x[/red]",
    }

    # Fields never printed in clear text
    SENSITIVE_FIELDS = (
        "privateKey",
        "pinataApiSecret",
        "googleClientSecret",
    )

    def __init__(self, console: Console | None = None):
        """
        Initialize the output manager.

        Args:
            console: Optional Rich console instance
        """
        self.console = console or Console()

    # ==================== Basic Output ====================

    def print(self, message: str = "", style: str | None = None) -> None:
        """Print a message with optional styling."""
        self.console.print(message, style=style)

    def print_header(self, title: str, subtitle: str | None = None) -> None:
        """
        Print a styled header.

        Args:
            title: Header title
            subtitle: Optional subtitle
        """
        self.console.print()
        self.console.print(f"[bold blue]{escape(title)}[/bold blue]")
        if subtitle:
            self.console.print(f"[dim]{escape(subtitle)}[/dim]")
        self.console.print()

    def print_success(self, message: str) -> None:
        """Print a success message."""
        self.console.print(f"[green]v[/green] {escape(message)}")

    def print_error(self, message: str) -> None:
        """Print an error message."""
        self.console.print(f"[red]x[/red] {escape(message)}")

    def print_warning(self, message: str) -> None:
        """Print a warning message."""
        self.console.print(f"[yellow]![/yellow] {escape(message)}")

    def print_info(self, message: str) -> None:
        """Print an info message."""
        self.console.print(f"[blue]i[/blue] {escape(message)}")

    # ==================== Panels ====================

    def panel(
        self,
        content: str,
        title: str | None = None,
        border_style: str = "blue"
    ) -> None:
        """
        Display content in a panel.

        Args:
            content: Panel content (Rich markup allowed)
            title: Optional panel title
            border_style: Border color style
        """
        self.console.print(Panel(content, title=title, border_style=border_style))

    def next_action_panel(self, action: "NextAction") -> None:
        """Display the command the operator should run next."""
        content = (
            f"{escape(action.description)}\n\n"
            f"[cyan]{escape(action.command)}[/cyan]"
        )
        border = "green" if action.step is None else "blue"
        self.panel(content, title="Next Step", border_style=border)

    # ==================== Tables ====================

    def progress_table(
        self,
        rows: list["StepProgress"],
        failed: set[str] | None = None,
        title: str = "Deployment Progress",
    ) -> None:
        """
        Display step completion as a table.

        Args:
            rows: Steps in execution order
            failed: Keys of steps with a recorded error
            title: Table title
        """
        failed = failed or set()

        table = Table(title=title)
        table.add_column("#", style="dim", width=4)
        table.add_column("Step", style="white")
        table.add_column("Key", style="cyan")
        table.add_column("Status", width=12)

        for i, row in enumerate(rows, 1):
            if row.completed:
                status = f"{self.ICONS['complete']} done"
            elif row.step.value in failed:
                status = f"{self.ICONS['failed']} failed"
            else:
                status = f"{self.ICONS['pending']} pending"
            table.add_row(str(i), row.display_name, row.step.value, status)

        self.console.print(table)

    def details_table(self, details: dict[str, Any], title: str = "Deployment Details") -> None:
        """
        Display record fields as a two-column table.

        Sensitive fields are masked. Unset fields are skipped.
        """
        table = Table(title=title)
        table.add_column("Field", style="cyan")
        table.add_column("Value", style="white")

        for key, value in details.items():
            if value is None or value == "":
                continue
            if key in self.SENSITIVE_FIELDS:
                value = "***"
            table.add_row(key, escape(str(value)))

        self.console.print(table)

    def issues_list(self, issues: list[str], title: str = "Configuration Issues") -> None:
        """Display configuration issues, one per line."""
        self.console.print(f"[bold yellow]{title}[/bold yellow]")
        for issue in issues:
            self.console.print(f"  [yellow]![/yellow] {escape(issue)}")
        self.console.print()

    def recovery_suggestions(self, suggestions: list["RecoverySuggestion"]) -> None:
        """Display recovery advice for every recorded failure."""
        for suggestion in suggestions:
            lines = [
                f"[red]{escape(suggestion.description)}[/red]",
                f"[dim]{escape(suggestion.timestamp)}[/dim]",
                "",
                f"Error: {escape(suggestion.message)}",
                "",
                "[bold]Suggested solutions:[/bold]",
            ]
            for solution in suggestion.solutions:
                lines.append(f"  - {escape(solution)}")
            self.panel(
                "\n".join(lines),
                title=suggestion.display_name,
                border_style="red",
            )
