"""Rich terminal display for devstrip."""

from datetime import datetime

from rich.console import Console
from rich.panel import Panel
from rich.progress import BarColumn, Progress, SpinnerColumn, TextColumn, TimeElapsedColumn
from rich.table import Table

from devstrip.models import Category, CleanupReport, CleanupResult, Plan, RetentionPolicy, ScanWarning

console = Console()

# Warnings shown before the rest are summarized
MAX_WARNINGS_SHOWN = 10


def format_size(size_bytes: int) -> str:
    """Format bytes to human-readable string (decimal units like macOS)."""
    if size_bytes >= 1000**4:
        return f"{size_bytes / (1000**4):.1f} TB"
    elif size_bytes >= 1000**3:
        return f"{size_bytes / (1000**3):.1f} GB"
    elif size_bytes >= 1000**2:
        return f"{size_bytes / (1000**2):.1f} MB"
    elif size_bytes >= 1000:
        return f"{size_bytes / 1000:.1f} KB"
    else:
        return f"{size_bytes} B"


def size_style(size_bytes: int) -> str:
    """Pick a color for a size, bigger is louder."""
    if size_bytes >= 1000**4:
        return "cyan"
    elif size_bytes >= 1000**3:
        return "yellow"
    elif size_bytes >= 1000**2:
        return "blue"
    elif size_bytes >= 1000:
        return "green"
    return "dim"


def format_timestamp(ts: datetime | None) -> str:
    """Format a modification time for the plan table, in local time."""
    if ts is None:
        return "-"
    return ts.astimezone().strftime("%Y-%m-%d %H:%M")


def retention_label(policy: RetentionPolicy) -> str:
    """Get styled label for a retention policy."""
    labels = {
        RetentionPolicy.NONE: "[dim]-[/dim]",
        RetentionPolicy.KEEP_LATEST_DERIVED: "[cyan]keep newest (derived)[/cyan]",
        RetentionPolicy.KEEP_LATEST_CACHE: "[cyan]keep newest (cache)[/cyan]",
    }
    return labels.get(policy, "?")


def show_plan(plan: Plan, dry_run: bool = False) -> None:
    """Display the ranked deletion plan."""
    if dry_run:
        console.print("[yellow]DRY RUN - No files will be deleted[/yellow]\n")

    table = Table(title="Cleanup Candidates", show_header=True, header_style="bold")
    table.add_column("#", style="dim", justify="right")
    table.add_column("Category", style="cyan")
    table.add_column("Size", justify="right")
    table.add_column("Last Used", style="dim")
    table.add_column("Reason", style="dim", overflow="ellipsis", max_width=48)
    table.add_column("Path", overflow="fold")

    for i, candidate in enumerate(plan.candidates, 1):
        size = candidate.size_bytes or 0
        style = size_style(size)
        table.add_row(
            f"{i:02d}",
            candidate.category.group,
            f"[{style}]{format_size(size)}[/{style}]",
            format_timestamp(candidate.modified),
            candidate.reason,
            candidate.display_name,
        )

    console.print(table)
    console.print(f"\n[bold]Reclaimable space: {format_size(plan.total_bytes)}[/bold]")

    if plan.kept:
        console.print(
            f"[dim]Kept {len(plan.kept)} newest item(s) protected by retention policies[/dim]"
        )


def show_warnings(warnings: tuple[ScanWarning, ...] | list[ScanWarning]) -> None:
    """Display the batched scan warnings."""
    if not warnings:
        return

    console.print()
    console.print(f"[yellow]! {len(warnings)} path(s) could not be read:[/yellow]")
    for warning in warnings[:MAX_WARNINGS_SHOWN]:
        console.print(f"  [dim]{warning.path}: {warning.message}[/dim]")
    if len(warnings) > MAX_WARNINGS_SHOWN:
        console.print(f"  [dim]... and {len(warnings) - MAX_WARNINGS_SHOWN} more[/dim]")


def show_categories(categories: list[Category]) -> None:
    """Display the category catalog."""
    table = Table(title="Categories", show_header=True, header_style="bold")
    table.add_column("ID", style="bold")
    table.add_column("Name")
    table.add_column("Group", style="cyan")
    table.add_column("Retention")

    for category in categories:
        table.add_row(
            category.id,
            category.name,
            category.group,
            retention_label(category.retention),
        )

    console.print(table)


def show_scanning_progress() -> Progress:
    """Create spinner for scanning."""
    return Progress(
        SpinnerColumn(),
        TextColumn("[progress.description]{task.description}"),
        TimeElapsedColumn(),
        console=console,
        transient=True,
    )


def show_cleanup_progress() -> Progress:
    """Create and return a progress bar for cleanup."""
    return Progress(
        SpinnerColumn(),
        TextColumn("[progress.description]{task.description}"),
        BarColumn(),
        TextColumn("{task.completed}/{task.total}"),
        TimeElapsedColumn(),
        console=console,
    )


def show_cleanup_result(result: CleanupResult) -> None:
    """Display result of a single removal."""
    if result.success:
        console.print(
            f"  [green]✓[/green] {result.candidate.display_name}: "
            f"{format_size(result.bytes_freed)} freed"
        )
    else:
        console.print(f"  [red]✗[/red] {result.candidate.display_name}: {result.error}")


def show_cleanup_summary(report: CleanupReport) -> None:
    """Display cleanup summary."""
    dry_run = any(r.dry_run for r in report.results)
    title = "Dry Run Complete" if dry_run else "Cleanup Complete"

    table = Table(show_header=False)
    table.add_column("Metric", style="bold")
    table.add_column("Value", justify="right")

    freed_label = "Space that would be freed" if dry_run else "Space freed"
    table.add_row(freed_label, format_size(report.bytes_freed))
    table.add_row("Items removed", str(report.success_count))
    if report.failure_count > 0:
        table.add_row("[red]Failed[/red]", str(report.failure_count))

    console.print()
    console.print(Panel(table, title=f"[bold green]{title}[/bold green]", border_style="green"))

    if report.failures:
        console.print("[red]Failed to remove the following targets:[/red]")
        for failure in report.failures:
            show_cleanup_result(failure)


def confirm_action(message: str) -> bool:
    """Ask for confirmation."""
    from rich.prompt import Confirm

    return Confirm.ask(message, console=console)
