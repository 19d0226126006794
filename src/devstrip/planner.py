"""Candidate selection and plan building for devstrip."""

import logging
import threading
from collections import defaultdict
from datetime import datetime, timedelta, timezone
from pathlib import Path
from typing import Callable, Iterable

from devstrip.config import ScanConfig, is_excluded
from devstrip.models import Candidate, Plan, RetentionPolicy, ScanWarning
from devstrip.scanner import scan_candidates

logger = logging.getLogger(__name__)


def is_eligible(
    candidate: Candidate,
    min_age: timedelta,
    excludes: Iterable[Path] = (),
    now: datetime | None = None,
) -> bool:
    """
    Check whether a candidate is old enough and outside every exclude.

    The age boundary is inclusive: a candidate modified exactly min_age ago
    is eligible.

    Args:
        candidate: Candidate to check
        min_age: Minimum time since the directory was last modified
        excludes: Paths whose subtrees must never be deleted
        now: Timezone-aware reference time (defaults to the current UTC time)

    Returns:
        True if the candidate may appear in a plan
    """
    now = now or datetime.now(timezone.utc)
    if now - candidate.modified < min_age:
        return False
    return not is_excluded(candidate.path, excludes)


def _retention_key(candidate: Candidate) -> tuple[float, str]:
    # Newest first, then path ascending
    return (-candidate.modified.timestamp(), str(candidate.path))


def apply_retention(
    candidates: Iterable[Candidate],
    keep_latest_derived: int,
    keep_latest_cache: int,
) -> tuple[list[Candidate], list[Candidate]]:
    """
    Protect the newest entries of every retained category.

    Candidates are grouped by category. In groups with a keep-latest policy
    the N most recently modified entries are kept (ties broken by path);
    everything else passes through unchanged.

    Args:
        candidates: Sized candidates
        keep_latest_derived: N for keep_latest_derived categories
        keep_latest_cache: N for keep_latest_cache categories

    Returns:
        Tuple of (deletable, kept)
    """
    keep_counts = {
        RetentionPolicy.NONE: 0,
        RetentionPolicy.KEEP_LATEST_DERIVED: keep_latest_derived,
        RetentionPolicy.KEEP_LATEST_CACHE: keep_latest_cache,
    }

    groups: dict[tuple[str, RetentionPolicy], list[Candidate]] = defaultdict(list)
    for candidate in candidates:
        groups[(candidate.category.id, candidate.category.retention)].append(candidate)

    deletable: list[Candidate] = []
    kept: list[Candidate] = []
    for (category_id, policy), members in groups.items():
        keep = keep_counts[policy]
        if keep == 0:
            deletable.extend(members)
            continue
        ordered = sorted(members, key=_retention_key)
        kept.extend(ordered[:keep])
        deletable.extend(ordered[keep:])
        logger.debug(
            "Retention for %s: keeping %d of %d", category_id, min(keep, len(ordered)), len(ordered)
        )

    return deletable, kept


def _check_no_nesting(candidates: list[Candidate]) -> None:
    paths = {c.path for c in candidates}
    for candidate in candidates:
        assert not any(
            parent in paths for parent in candidate.path.parents
        ), f"Nested candidate in plan: {candidate.path}"


def build_plan(
    candidates: Iterable[Candidate],
    kept: Iterable[Candidate] = (),
    warnings: Iterable[ScanWarning] = (),
) -> Plan:
    """
    Sort candidates by size (largest first, ties by path) and total them.

    Args:
        candidates: Sized candidates selected for deletion
        kept: Candidates protected by retention, for display
        warnings: Warnings collected during the scan

    Returns:
        Immutable Plan
    """
    ordered = sorted(candidates, key=lambda c: (-c.size_bytes, str(c.path)))
    _check_no_nesting(ordered)
    return Plan(
        candidates=tuple(ordered),
        total_bytes=sum(c.size_bytes for c in ordered),
        kept=tuple(sorted(kept, key=lambda c: str(c.path))),
        warnings=tuple(warnings),
    )


def select_candidates(
    candidates: Iterable[Candidate],
    config: ScanConfig,
    now: datetime | None = None,
) -> tuple[list[Candidate], list[Candidate]]:
    """
    Apply the retention, size, age and exclusion filters.

    Retention ranks every discovered entry of a category, so an entry that
    is too young to delete still counts towards the newest N.

    Returns:
        Tuple of (deletable, kept)
    """
    now = now or datetime.now(timezone.utc)
    retained, kept = apply_retention(
        candidates, config.keep_latest_derived, config.keep_latest_cache
    )
    deletable = [
        c
        for c in retained
        if c.size_bytes >= config.min_size_bytes
        and is_eligible(c, config.min_age, config.excludes, now)
    ]
    return deletable, kept


def create_plan(
    config: ScanConfig,
    now: datetime | None = None,
    progress_callback: Callable[[str], None] | None = None,
    cancel: threading.Event | None = None,
) -> Plan:
    """
    Scan, filter and rank. Never touches the filesystem beyond reading it.

    Args:
        config: Scan configuration
        now: Reference time for the age filter
        progress_callback: Optional callback(message) with status text
        cancel: Optional event to stop the walk early

    Returns:
        Plan ready for review
    """
    candidates, warnings = scan_candidates(config, progress_callback=progress_callback, cancel=cancel)
    deletable, kept = select_candidates(candidates, config, now=now)
    plan = build_plan(deletable, kept=kept, warnings=warnings)
    logger.info(
        "Plan: %d candidates, %d bytes, %d kept", len(plan), plan.total_bytes, len(plan.kept)
    )
    return plan
