"""
ConsoleUI - Rich-based console output.
"""

from typing import Iterable, List, Optional

from rich.console import Console
from rich.table import Table
from rich import box


class ConsoleUI:
    """Rich console interface for notetune."""

    def __init__(self, console: Optional[Console] = None, quiet: bool = False):
        self.console = console or Console()
        self.quiet = quiet

    def text(self, line: str = ""):
        """Print a line verbatim (no markup, no wrapping)."""
        if self.quiet:
            return
        self.console.print(line, markup=False, highlight=False, soft_wrap=True)

    def lines(self, lines: Iterable[str]):
        for line in lines:
            self.text(line)

    def print_error(self, message: str):
        self.console.print(message, style="bold red", markup=False, highlight=False)

    def print_object_table(self, title: str, rows: List[List[str]], columns: List[str]):
        """Print a simple table of objects."""
        if self.quiet:
            return
        table = Table(title=title, box=box.SIMPLE, show_lines=False)
        for column in columns:
            table.add_column(column)
        for row in rows:
            table.add_row(*row)
        self.console.print(table)
