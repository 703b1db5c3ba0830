"""Console output with severity markers."""

from rich.console import Console
from rich.markup import escape


class Reporter:
    """Writes tagged log lines to stdout, and errors to stderr.

    Messages are escaped before printing, so paths and ignore rules such as
    ``*.py[cod]`` are shown literally instead of being read as markup.
    """

    def __init__(self, console: Console | None = None, err_console: Console | None = None) -> None:
        self.console = console or Console(highlight=False)
        self.err_console = err_console or Console(stderr=True, highlight=False)

    def step(self, title: str) -> None:
        self.console.print(f"\n[bold blue]{escape(title)}[/bold blue]")

    def info(self, message: str) -> None:
        self.console.print(f"[cyan]ℹ️  {escape(message)}[/cyan]")

    def success(self, message: str) -> None:
        self.console.print(f"[green]✔  {escape(message)}[/green]")

    def warn(self, message: str) -> None:
        self.console.print(f"[yellow]⚠️  {escape(message)}[/yellow]")

    def error(self, message: str) -> None:
        self.err_console.print(f"[red]❌ {escape(message)}[/red]")

    def action(self, description: str) -> None:
        """Log a side effect that a dry run skips."""
        self.console.print(f"[magenta]🧪 DRY-RUN › {escape(description)}[/magenta]")
