"""
Rendering functions for xbrew output.

Services report plain strings and result objects; this module makes
them human-readable.
"""

from rich.console import Console
from rich.markup import escape
from rich.table import Table
from rich import box

from .domain import PinResult, ResolvedTarget

console = Console(highlight=False)
err_console = Console(stderr=True, highlight=False)


def echo(message: str) -> None:
    """Print a status line."""
    console.print(escape(message))


def render_plan(target: ResolvedTarget) -> None:
    """
    Show what is about to happen before anything is changed.

    Args:
        target: Resolved formula, URL and tap
    """
    table = Table(box=box.SIMPLE, show_header=False, padding=(0, 1))
    table.add_column("Field", style="bold")
    table.add_column("Value")

    tap = escape(target.tap)
    if target.defaulted_tap:
        tap += " [dim](default)[/dim]"
    table.add_row("Tap:", tap)
    table.add_row("Action:", target.action.value)
    table.add_row("Formula:", escape(target.formula))
    table.add_row("Source:", escape(target.source_url))
    table.add_row("Layout:", f"[dim]{target.layout.value}[/dim]")

    console.print(table)


def render_done(result: PinResult) -> None:
    """Print the closing summary of a successful run."""
    target = result.target
    console.print()
    if result.install.fell_back:
        console.print("[yellow]Reinstall fell back to install.[/yellow]")
    console.print(
        f"[green]Done:[/green] {target.action.value} completed for "
        f"[bold]{escape(target.formula)}[/bold] from {escape(target.source_url)} "
        f"(tap: {escape(target.tap)})."
    )
    console.print(
        f"[dim]xbrew does not pin formulae; run 'brew pin {escape(target.qualified_name)}' "
        f"to hold this version.[/dim]"
    )


def render_error(message: str) -> None:
    """Print a one-line diagnostic on stderr."""
    err_console.print(f"[red]Error:[/red] {escape(message)}")
