import json
import logging
from typing import Any, Dict, List

from rich.console import Console
from rich.panel import Panel
from rich.table import Table
from rich.box import ROUNDED

from marsmcp.domain.interfaces.user_interface import UserInterface

logger = logging.getLogger(__name__)


class ConsoleDisplay(UserInterface):
    """Concrete implementation of UserInterface using the rich library for console output."""

    def __init__(self):
        """Initializes the rich Consoles: data on stdout, messages on stderr."""
        self._console = Console()
        self._err_console = Console(stderr=True)

    @property
    def console(self):
        """Get the Rich console instance for direct operations."""
        return self._console

    def display_json(self, data: Any, **kwargs: Any) -> None:
        """Prints data as indented JSON on stdout so it can be piped."""
        title = kwargs.get("title")
        if title:
            self._err_console.print(f"[bold cyan]{title}[/bold cyan]")
        self._console.print_json(json.dumps(data, default=str), indent=2)

    def display_error(self, error_message: str, **kwargs: Any) -> None:
        logger.debug(f"display_error: {error_message}")
        self._err_console.print(Panel(
            error_message,
            title="[bold red]Error[/bold red]",
            border_style="red",
            box=ROUNDED,
        ))

    def display_warning(self, warning_message: str, **kwargs: Any) -> None:
        self._err_console.print(f"[yellow]Warning:[/yellow] {warning_message}")

    def display_info(self, info_message: str, **kwargs: Any) -> None:
        self._err_console.print(f"[dim]{info_message}[/dim]")

    def display_table(self, title: str, columns: List[str], rows: List[List[str]]) -> None:
        table = Table(title=title, box=ROUNDED, show_lines=False)
        for column in columns:
            table.add_column(column, overflow="fold")
        for row in rows:
            table.add_row(*row)
        self._console.print(table)

    def display_mapping(self, title: str, values: Dict[str, Any]) -> None:
        table = Table(title=title, box=ROUNDED, show_header=False)
        table.add_column("Setting", style="bold")
        table.add_column("Value")
        for key, value in values.items():
            table.add_row(key, "-" if value is None else str(value))
        self._console.print(table)
