"""Cleanup execution with safety checks for devstrip."""

import logging
import os
import shutil
from concurrent.futures import ThreadPoolExecutor
from pathlib import Path
from typing import Callable, Iterable, Sequence, Union

from devstrip.models import Candidate, CleanupReport, CleanupResult, Plan

logger = logging.getLogger(__name__)

# Paths that should NEVER be deleted, relative to home
BLOCKED_HOME_PATHS = [
    "Documents",
    "Desktop",
    "Pictures",
    "Music",
    "Movies",
    "Library",
    "Projects",
    "Work",
]

# Absolute paths that should NEVER be deleted
BLOCKED_SYSTEM_PATHS = [
    "/",
    "/System",
    "/Library",
    "/Applications",
    "/usr",
    "/bin",
    "/sbin",
    "/var",
    "/private",
    "/Users",
    "/home",
]

# approve(plan) -> True (everything), False or empty (abort) or a subset
Approval = Union[bool, Sequence[Candidate]]


def is_path_safe(path: Path, home: Path | None = None) -> bool:
    """
    Check if a path is safe to delete.

    Args:
        path: Path to check
        home: Home directory (defaults to the current user's)

    Returns:
        True if safe to delete, False otherwise
    """
    home = home or Path.home()
    blocked = {Path(p) for p in BLOCKED_SYSTEM_PATHS}
    blocked.add(home)
    blocked.update(home / p for p in BLOCKED_HOME_PATHS)

    return path not in blocked and path.parent != path


def delete_path(path: Path, dry_run: bool = False) -> str | None:
    """
    Delete a directory tree (or a single file).

    Args:
        path: Path to delete
        dry_run: If True, don't actually delete

    Returns:
        Error message, or None on success
    """
    if not os.path.lexists(path):
        return "Path no longer exists"

    if dry_run:
        return None

    try:
        if path.is_dir() and not path.is_symlink():
            shutil.rmtree(path)
        else:
            path.unlink()
        return None

    except PermissionError as e:
        return f"Permission denied: {e}"
    except OSError as e:
        return f"OS error: {e}"


def remove_candidate(
    candidate: Candidate,
    dry_run: bool = False,
    home: Path | None = None,
) -> CleanupResult:
    """Remove one candidate and record the outcome."""
    if not is_path_safe(candidate.path, home):
        error = f"Blocked path: {candidate.path}"
    else:
        error = delete_path(candidate.path, dry_run)

    if error:
        logger.warning("Failed to remove %s: %s", candidate.path, error)
        return CleanupResult(candidate=candidate, success=False, error=error, dry_run=dry_run)

    logger.debug("Removed %s", candidate.path)
    return CleanupResult(
        candidate=candidate,
        success=True,
        bytes_freed=candidate.size_bytes or 0,
        dry_run=dry_run,
    )


def execute_plan(
    candidates: Iterable[Candidate],
    dry_run: bool = False,
    progress_callback: Callable[[Candidate, int, int], None] | None = None,
    max_workers: int = 1,
    home: Path | None = None,
) -> CleanupReport:
    """
    Remove every approved candidate.

    Each removal is independent: a failure is recorded against its candidate
    and the remaining removals still run. Results are collected in the order
    the candidates were given.

    Args:
        candidates: Approved candidates (the whole plan or a subset)
        dry_run: If True, report what would be removed without deleting
        progress_callback: Optional callback(candidate, current, total)
        max_workers: Number of removals to run in parallel
        home: Home directory for the safety check

    Returns:
        CleanupReport with one result per candidate
    """
    items = list(candidates)
    total = len(items)
    report = CleanupReport()

    if max_workers <= 1:
        for i, candidate in enumerate(items):
            if progress_callback:
                progress_callback(candidate, i + 1, total)
            report.results.append(remove_candidate(candidate, dry_run, home))
        return report

    with ThreadPoolExecutor(max_workers=max_workers) as executor:
        futures = [executor.submit(remove_candidate, c, dry_run, home) for c in items]
        for i, future in enumerate(futures):
            result = future.result()
            if progress_callback:
                progress_callback(result.candidate, i + 1, total)
            report.results.append(result)

    return report


def review_and_execute(
    plan: Plan,
    approve: Callable[[Plan], Approval],
    dry_run: bool = False,
    progress_callback: Callable[[Candidate, int, int], None] | None = None,
    max_workers: int = 1,
    home: Path | None = None,
) -> CleanupReport | None:
    """
    Ask for approval and remove what was approved.

    Args:
        plan: Plan to review
        approve: Callback deciding what to remove; True approves the whole
            plan, False or an empty sequence aborts, a sequence approves a
            subset of the plan
        dry_run: If True, don't actually delete
        progress_callback: Optional callback(candidate, current, total)
        max_workers: Number of removals to run in parallel
        home: Home directory for the safety check

    Returns:
        CleanupReport, or None if nothing was approved
    """
    if plan.is_empty:
        return None

    decision = approve(plan)
    if decision is True:
        approved = list(plan.candidates)
    elif not decision:
        logger.info("Cleanup declined")
        return None
    else:
        planned = set(plan.candidates)
        approved = [c for c in decision if c in planned]
        if len(approved) != len(decision):
            raise ValueError("Approved candidates must come from the plan")

    return execute_plan(
        approved,
        dry_run=dry_run,
        progress_callback=progress_callback,
        max_workers=max_workers,
        home=home,
    )
