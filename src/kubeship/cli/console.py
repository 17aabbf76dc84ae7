"""Rich output for the kubeship commands."""

from __future__ import annotations

from collections.abc import Callable
from functools import wraps

import typer
from rich.console import Console, ConsoleRenderable
from rich.panel import Panel
from rich.status import Status

from kubeship.errors import DeploymentAborted, DeploymentError
from kubeship.operations.types import ManifestChange

# Symbol and style per change action
ACTION_STYLES: dict[str, tuple[str, str]] = {
    "create": ("+", "green"),
    "update": ("~", "yellow"),
    "unchanged": ("=", "dim"),
    "delete": ("-", "red"),
}


class CLIConsole:
    """Thin wrapper over a rich Console with kubeship's message styles."""

    def __init__(self, console: Console | None = None) -> None:
        self.console = console or Console()

    def print(self, renderable: ConsoleRenderable | str | None = None) -> None:
        self.console.print(renderable)

    def status(self, message: str) -> Status:
        return self.console.status(message)

    def info(self, message: str) -> None:
        self.console.print(f"[cyan]•[/cyan] {message}")

    def ok(self, message: str) -> None:
        self.console.print(f"[green]✔[/green] {message}")

    def error(self, message: str) -> None:
        self.console.print(f"[red]✘[/red] {message}")

    def header(self, title: str, *, dry_run: bool = False) -> None:
        """Boxed title for a command run; dry runs are marked in the box."""
        suffix = " [yellow](dry-run)[/yellow]" if dry_run else ""
        self.console.print(Panel.fit(f"[bold]{title}[/bold]{suffix}", border_style="blue"))

    def section(self, title: str) -> None:
        self.console.print(f"\n[bold underline]{title}[/bold underline]")

    def change(self, change: ManifestChange, *, indent: int = 2, suffix: str = "") -> None:
        """One line per manifest change; invalid manifests show their error."""
        pad = " " * indent
        if not change.validated:
            self.console.print(
                f"{pad}[red]✗ {change.ref}[/red] [dim]{change.validation_error}[/dim]{suffix}"
            )
            return
        symbol, style = ACTION_STYLES[change.action]
        self.console.print(
            f"{pad}[{style}]{symbol} {change.ref}[/{style}] [dim]({change.action})[/dim]{suffix}"
        )

    def fail(self, error: DeploymentError, exit_code: int = 1) -> None:
        """Report a kubeship error and stop the command.

        Raises:
            typer.Exit: Always, with ``exit_code``
        """
        self.error(f"[bold red]{error.message}[/bold red]")
        if isinstance(error, DeploymentAborted):
            self.console.print(f"[dim]{type(error.cause).__name__}[/dim]")
        if error.details:
            self.console.print(Panel(error.details, title="Details", border_style="red"))
        raise typer.Exit(exit_code)


console = CLIConsole()


def with_error_handling(func: Callable[..., None]) -> Callable[..., None]:
    """Turn kubeship errors into a formatted message and exit code 1.

    Ctrl-C exits with 130.
    """

    @wraps(func)
    def wrapper(*args: object, **kwargs: object) -> None:
        try:
            func(*args, **kwargs)
        except DeploymentError as e:
            console.fail(e)
        except KeyboardInterrupt:
            console.print("\n[dim]Cancelled.[/dim]")
            raise typer.Exit(130) from None

    return wrapper
