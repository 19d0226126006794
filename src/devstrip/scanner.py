"""Size estimation and scan orchestration for devstrip."""

import logging
import os
import stat
import threading
from concurrent.futures import Future, ThreadPoolExecutor
from pathlib import Path
from typing import Callable

from devstrip.config import ScanConfig, canonical
from devstrip.models import Candidate, ScanWarning
from devstrip.rules import anchored_rules, build_rules
from devstrip.walker import WalkTarget, system_walk_roots, walk

logger = logging.getLogger(__name__)


def get_directory_size(
    path: Path,
    on_warning: Callable[[ScanWarning], None] | None = None,
) -> int:
    """
    Sum the apparent size of every regular file below a path.

    Uses an explicit stack and os.scandir so only one directory listing is
    held at a time. Symlinks are never followed. Unreadable entries are
    reported through on_warning and skipped; the sum of everything that
    could be read is returned.

    Args:
        path: Directory (or file) to size
        on_warning: Optional callback for entries that could not be read

    Returns:
        Total bytes
    """

    def _report(p: Path | str, error: OSError) -> None:
        warning = ScanWarning(path=str(p), message=error.strerror or str(error))
        logger.debug("Could not size %s: %s", warning.path, warning.message)
        if on_warning:
            on_warning(warning)

    try:
        st = os.lstat(path)
    except OSError as e:
        _report(path, e)
        return 0

    if stat.S_ISREG(st.st_mode):
        return st.st_size
    if not stat.S_ISDIR(st.st_mode):
        return 0

    total = 0
    stack = [Path(path)]
    while stack:
        current = stack.pop()
        try:
            with os.scandir(current) as entries:
                for entry in entries:
                    try:
                        if entry.is_file(follow_symlinks=False):
                            total += entry.stat(follow_symlinks=False).st_size
                        elif entry.is_dir(follow_symlinks=False):
                            stack.append(Path(entry.path))
                    except OSError as e:
                        _report(entry.path, e)
        except OSError as e:
            _report(current, e)

    return total


def build_walk_targets(config: ScanConfig) -> list[WalkTarget]:
    """
    Turn a config into the list of roots to walk.

    User roots are walked with every rule up to max_depth. When a home
    directory is configured and include_system is set, the well-known cache
    locations are walked one level deep with anchored rules only.
    """
    home = canonical(config.home) if config.home is not None else None
    rules = build_rules(home)
    targets = [WalkTarget(root, rules, config.max_depth) for root in config.roots]

    if home is not None and config.include_system:
        system_rules = anchored_rules(rules)
        targets.extend(WalkTarget(root, system_rules, 0) for root in system_walk_roots(system_rules))

    return targets


def _size_candidate(candidate: Candidate) -> tuple[Candidate, list[ScanWarning]]:
    warnings: list[ScanWarning] = []
    size = get_directory_size(candidate.path, on_warning=warnings.append)
    return candidate.with_size(size), warnings


def scan_candidates(
    config: ScanConfig,
    progress_callback: Callable[[str], None] | None = None,
    cancel: threading.Event | None = None,
) -> tuple[list[Candidate], list[ScanWarning]]:
    """
    Walk the configured roots and size every candidate.

    Each candidate is handed to the thread pool as soon as the walker yields
    it, so sizing overlaps with discovery. All sizing finishes before this
    function returns.

    Args:
        config: Scan configuration
        progress_callback: Optional callback(message) with status text
        cancel: Optional event to stop the walk early

    Returns:
        Tuple of (sized candidates in discovery order, warnings)
    """
    warnings: list[ScanWarning] = []

    def on_visit(path: Path) -> None:
        if progress_callback:
            progress_callback(f"Scanning: {path}")

    futures: list[Future] = []
    with ThreadPoolExecutor(max_workers=config.max_workers) as executor:
        for candidate in walk(
            build_walk_targets(config),
            excludes=config.excludes,
            on_warning=warnings.append,
            on_visit=on_visit,
            cancel=cancel,
        ):
            futures.append(executor.submit(_size_candidate, candidate))

    sized: list[Candidate] = []
    for future in futures:
        candidate, size_warnings = future.result()
        sized.append(candidate)
        warnings.extend(size_warnings)

    logger.debug("Scan found %d candidates with %d warnings", len(sized), len(warnings))
    return sized, warnings
