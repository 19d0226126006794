"""CLI interface for devstrip."""

from datetime import timedelta
from pathlib import Path
from typing import Optional

import typer

from devstrip import __version__
from devstrip.categories import get_all_categories
from devstrip.cleaner import review_and_execute
from devstrip.config import (
    DEFAULT_KEEP_LATEST,
    DEFAULT_MAX_DEPTH,
    DEFAULT_MIN_AGE_DAYS,
    ScanConfig,
    canonical,
    normalize_paths,
    resolve_roots,
)
from devstrip.display import (
    confirm_action,
    console,
    show_categories,
    show_cleanup_progress,
    show_cleanup_summary,
    show_plan,
    show_scanning_progress,
    show_warnings,
)
from devstrip.errors import ConfigError
from devstrip.logging import setup_logging
from devstrip.models import Candidate, Plan
from devstrip.planner import create_plan

# Create Typer app
app = typer.Typer(
    name="devstrip",
    help="Developer disk cleanup - remove stale build outputs and caches safely",
    add_completion=False,
)


def version_callback(value: bool) -> None:
    """Print version and exit."""
    if value:
        console.print(f"devstrip version {__version__}")
        raise typer.Exit()


@app.callback(invoke_without_command=True)
def main(
    ctx: typer.Context,
    version: bool = typer.Option(
        None,
        "--version",
        "-V",
        help="Show version and exit.",
        callback=version_callback,
        is_eager=True,
    ),
) -> None:
    """devstrip - developer disk cleanup CLI."""
    if ctx.invoked_subcommand is None:
        console.print(ctx.get_help())


def build_scan_config(
    paths: list[Path],
    excludes: list[Path],
    min_age_days: int,
    max_depth: int,
    keep_latest_derived: int,
    keep_latest_cache: int,
    all_: bool = False,
    include_system: bool = True,
    workers: int = 4,
    home: Path | None = None,
    cwd: Path | None = None,
) -> ScanConfig:
    """
    Turn command-line values into a validated ScanConfig.

    Raises:
        ConfigError: If any value is invalid or an explicit root is missing
    """
    if min_age_days < 0:
        raise ConfigError(f"--min-age-days must not be negative (got {min_age_days})")

    home = canonical(home or Path.home())
    exclude_paths = normalize_paths(excludes)
    roots = resolve_roots(paths, home=home, cwd=cwd or Path.cwd(), excludes=exclude_paths)

    config = ScanConfig.create(
        roots=roots,
        excludes=exclude_paths,
        min_age=timedelta(days=min_age_days),
        max_depth=max_depth,
        keep_latest_derived=keep_latest_derived,
        keep_latest_cache=keep_latest_cache,
        home=home,
        include_system=include_system,
        max_workers=workers,
    )
    return config.aggressive() if all_ else config


@app.command()
def scan(
    paths: Optional[list[Path]] = typer.Argument(
        None,
        help="Extra directories to scan (the current directory and ~/Projects etc. "
        "are always scanned)",
    ),
    roots: Optional[list[Path]] = typer.Option(None, "--roots", help="Additional directory to scan"),
    exclude: Optional[list[Path]] = typer.Option(
        None, "--exclude", "-x", help="Path to leave untouched (repeatable)"
    ),
    min_age_days: int = typer.Option(
        DEFAULT_MIN_AGE_DAYS,
        "--min-age-days",
        envvar="DEVSTRIP_MIN_AGE_DAYS",
        help="Only remove items not modified for this many days",
    ),
    max_depth: int = typer.Option(
        DEFAULT_MAX_DEPTH,
        "--max-depth",
        envvar="DEVSTRIP_MAX_DEPTH",
        help="How deep to search below each root",
    ),
    keep_latest_derived: int = typer.Option(
        DEFAULT_KEEP_LATEST,
        "--keep-latest-derived",
        envvar="DEVSTRIP_KEEP_LATEST_DERIVED",
        help="Newest Xcode DerivedData/Archives entries to keep",
    ),
    keep_latest_cache: int = typer.Option(
        DEFAULT_KEEP_LATEST,
        "--keep-latest-cache",
        envvar="DEVSTRIP_KEEP_LATEST_CACHE",
        help="Newest Homebrew cache entries to keep",
    ),
    yes: bool = typer.Option(False, "-y", "--yes", help="Skip confirmation prompt"),
    dry_run: bool = typer.Option(False, "--dry-run", help="Show the plan without deleting"),
    no_color: bool = typer.Option(False, "--no-color", help="Disable colored output"),
    all_: bool = typer.Option(
        False, "--all", "-a", help="Ignore age, depth and keep-latest limits"
    ),
    no_system: bool = typer.Option(
        False, "--no-system", help="Skip well-known cache locations under your home directory"
    ),
    workers: int = typer.Option(4, "--workers", help="Threads used to size candidates"),
    verbose: int = typer.Option(0, "--verbose", "-v", count=True, help="Increase log verbosity"),
) -> None:
    """Scan for stale build artifacts and caches, then clean them up."""
    if no_color:
        console.no_color = True
    setup_logging(verbose)

    try:
        config = build_scan_config(
            paths=list(paths or []) + list(roots or []),
            excludes=list(exclude or []),
            min_age_days=min_age_days,
            max_depth=max_depth,
            keep_latest_derived=keep_latest_derived,
            keep_latest_cache=keep_latest_cache,
            all_=all_,
            include_system=not no_system,
            workers=workers,
        )
    except ConfigError as e:
        console.print(f"[red]Error: {e}[/red]")
        raise typer.Exit(1)

    with show_scanning_progress() as progress:
        task = progress.add_task("Scanning for cleanup candidates...", total=None)

        def update_progress(message: str) -> None:
            progress.update(task, description=message[:80])

        plan = create_plan(config, progress_callback=update_progress)

    if plan.is_empty:
        console.print("[yellow]No safe cleanup targets were found.[/yellow]")
        show_warnings(plan.warnings)
        raise typer.Exit(0)

    show_plan(plan, dry_run=dry_run)
    show_warnings(plan.warnings)

    if dry_run:
        console.print("[dim]Dry-run: no files will be removed.[/dim]")
        raise typer.Exit(0)

    def approve(plan: Plan) -> bool:
        if yes:
            return True
        console.print()
        return confirm_action("Proceed with cleanup?")

    progress = show_cleanup_progress()
    clean_task = None

    def cleanup_progress(candidate: Candidate, current: int, total: int) -> None:
        nonlocal clean_task
        if clean_task is None:
            progress.start()
            clean_task = progress.add_task("Cleaning...", total=total)
        progress.update(clean_task, completed=current, description=f"Cleaning {candidate.path.name}")

    try:
        report = review_and_execute(
            plan,
            approve=approve,
            progress_callback=cleanup_progress,
            home=config.home,
        )
    finally:
        progress.stop()

    if report is None:
        console.print("[yellow]Cleanup aborted.[/yellow]")
        raise typer.Exit(0)

    show_cleanup_summary(report)

    if report.failure_count:
        raise typer.Exit(1)


@app.command(name="categories")
def list_categories() -> None:
    """List all cleanup categories."""
    show_categories(get_all_categories())
    console.print("[dim]Run [bold]devstrip scan --dry-run[/bold] to preview a cleanup[/dim]")


if __name__ == "__main__":
    app()
