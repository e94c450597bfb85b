"""Rich-based CLI output formatting."""

import json
from typing import Any, Callable

from rich.console import Console
from rich.markup import escape
from rich.panel import Panel
from rich.progress import Progress, SpinnerColumn, TextColumn, BarColumn
from rich.table import Table


console = Console()


def print_header(title: str) -> None:
    """Print a styled header."""
    console.print()
    console.print(Panel(title, style="bold blue"))
    console.print()


def print_success(message: str) -> None:
    """Print a success message."""
    console.print(f"[green]✓[/green] {escape(message)}")


def print_error(message: str) -> None:
    """Print an error message."""
    console.print(f"[red]✗[/red] {escape(message)}")


def print_warning(message: str) -> None:
    """Print a warning message."""
    console.print(f"[yellow]![/yellow] {escape(message)}")


def print_info(message: str) -> None:
    """Print an info message."""
    console.print(f"[blue]ℹ[/blue] {escape(message)}")


def make_logger(verbose: bool = False) -> Callable[[str, str], None]:
    """
    Build a (level, message) callback for library diagnostics.

    Info messages are only shown when verbose.
    """
    def log(level: str, message: str) -> None:
        if level == "error":
            print_error(message)
        elif level == "warning":
            print_warning(message)
        elif verbose:
            print_info(message)

    return log


def print_run_summary(result: dict[str, Any]) -> None:
    """Print the outcome of a classification run."""
    title = "Run Summary (dry run)" if result.get("dry_run") else "Run Summary"
    table = Table(title=title, show_header=False)
    table.add_column("Metric", style="cyan")
    table.add_column("Value", style="green")

    mutations = result.get("mutations", [])
    added = sum(1 for m in mutations if m["action"] == "add")
    removed = sum(1 for m in mutations if m["action"] == "remove")

    table.add_row("Query", escape(result.get("query", "")))
    table.add_row("Messages Found", str(result.get("total", 0)))
    table.add_row("Processed", str(result.get("processed", 0)))
    table.add_row("Skipped", str(result.get("skipped", 0)))
    table.add_row("Script Errors", str(result.get("script_errors", 0)))
    table.add_row("Labels Added", str(added))
    table.add_row("Labels Removed", str(removed))
    table.add_row("Failed Requests", str(result.get("failed_mutations", 0)))

    console.print(table)


def print_mutations(mutations: list[dict[str, Any]], limit: int = 50) -> None:
    """Print the label requests made by the script."""
    if not mutations:
        console.print("[dim]The script requested no label changes.[/dim]")
        return

    table = Table(title="Label Changes")
    table.add_column("Message", style="dim")
    table.add_column("Action", style="cyan")
    table.add_column("Label", max_width=40)
    table.add_column("Status", justify="right")

    for mutation in mutations[:limit]:
        if mutation.get("error"):
            status = "[red]failed[/red]"
        elif mutation.get("applied"):
            status = "[green]applied[/green]"
        else:
            status = "[yellow]not sent[/yellow]"

        table.add_row(
            mutation.get("message_id", ""),
            mutation.get("action", ""),
            escape(mutation.get("label_name", "")),
            status,
        )

    console.print(table)

    if len(mutations) > limit:
        console.print(f"[dim]... and {len(mutations) - limit} more[/dim]")


def print_fact_records(records: list[dict[str, Any]]) -> None:
    """Print fact records as JSON, one object per message."""
    for record in records:
        console.print_json(json.dumps(record, ensure_ascii=False))


def create_progress() -> Progress:
    """Create a progress bar for long operations."""
    return Progress(
        SpinnerColumn(),
        TextColumn("[progress.description]{task.description}"),
        BarColumn(),
        TextColumn("[progress.percentage]{task.percentage:>3.0f}%"),
        console=console,
    )


def confirm_action(message: str) -> bool:
    """Ask for user confirmation."""
    response = console.input(f"{message} [y/N]: ")
    return response.lower() in ("y", "yes")
