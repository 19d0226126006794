"""Bounded-depth directory discovery for developer artifacts.

This module walks the scan roots and yields a Candidate for every directory
the rule catalog recognises, without ever descending into a matched
directory.
"""

import logging
import os
import threading
from collections import deque
from datetime import datetime, timezone
from pathlib import Path
from typing import Callable, Generator, Iterable, NamedTuple

from devstrip.config import canonical, is_excluded
from devstrip.models import Candidate, ScanWarning
from devstrip.rules import MatchKind, Rule, match

logger = logging.getLogger(__name__)

# Directories never descended into (performance + safety)
SKIP_DIRECTORIES = frozenset(
    {
        ".git",
        ".hg",
        ".svn",
        ".idea",
        ".vscode",
    }
)


class WalkTarget(NamedTuple):
    """A root to walk, the rules to apply below it and the depth budget."""

    root: Path
    rules: tuple[Rule, ...]
    max_depth: int | None


def system_walk_roots(rules: Iterable[Rule]) -> list[Path]:
    """
    Directories to walk (depth 0) to reach every anchored location.

    CHILD_OF anchors are walked directly so their children are classified;
    EXACT anchors are reached through their parent.
    """
    roots: list[Path] = []
    for rule in rules:
        if not rule.anchored:
            continue
        root = rule.anchor if rule.kind == MatchKind.CHILD_OF else rule.anchor.parent
        if root not in roots:
            roots.append(root)
    return roots


def _inside_emitted(path: Path, emitted: set[Path]) -> bool:
    return any(parent in emitted for parent in path.parents)


def _warn(
    on_warning: Callable[[ScanWarning], None] | None, path: Path, error: OSError
) -> None:
    warning = ScanWarning(path=str(path), message=error.strerror or str(error))
    logger.debug("Skipping %s: %s", warning.path, warning.message)
    if on_warning:
        on_warning(warning)


def walk(
    targets: Iterable[WalkTarget],
    excludes: Iterable[Path] = (),
    on_warning: Callable[[ScanWarning], None] | None = None,
    on_visit: Callable[[Path], None] | None = None,
    cancel: threading.Event | None = None,
) -> Generator[Candidate, None, None]:
    """
    Walk every target breadth-first and yield unsized candidates.

    Roots are visited outermost first. A candidate that equals or lies below
    an already emitted candidate is dropped, so overlapping roots never yield
    duplicates or nested candidates. Symlinks are never followed.

    Args:
        targets: Roots with their rules and depth budgets
        excludes: Canonical paths pruned together with their subtrees
        on_warning: Optional callback for unreadable directories
        on_visit: Optional callback(path) for each directory read
        cancel: Optional event; the walk stops between directory visits once set

    Yields:
        Candidates with size unset
    """
    excludes = tuple(excludes)
    emitted: set[Path] = set()
    ordered = sorted(
        (target._replace(root=canonical(target.root)) for target in targets),
        key=lambda t: (len(t.root.parts), str(t.root)),
    )

    for target in ordered:
        root = target.root
        if root in emitted or _inside_emitted(root, emitted):
            continue
        if is_excluded(root, excludes) or not root.is_dir():
            continue

        queue: deque[tuple[Path, int]] = deque([(root, 0)])
        while queue:
            if cancel is not None and cancel.is_set():
                logger.info("Scan cancelled")
                return

            current, depth = queue.popleft()
            if on_visit:
                on_visit(current)

            try:
                with os.scandir(current) as it:
                    entries = sorted(it, key=lambda e: e.name)
            except OSError as e:
                _warn(on_warning, current, e)
                continue

            for entry in entries:
                try:
                    if not entry.is_dir(follow_symlinks=False):
                        continue
                except OSError:
                    continue

                path = Path(entry.path)
                if is_excluded(path, excludes):
                    continue

                rule = match(path, target.rules)
                if rule is not None:
                    if path in emitted or _inside_emitted(path, emitted):
                        continue
                    try:
                        mtime = entry.stat(follow_symlinks=False).st_mtime
                    except OSError as e:
                        _warn(on_warning, path, e)
                        continue
                    emitted.add(path)
                    logger.debug("Matched %s (%s)", path, rule.category_id)
                    yield Candidate(
                        path=path,
                        category=rule.category,
                        modified=datetime.fromtimestamp(mtime, tz=timezone.utc),
                        reason=rule.reason,
                    )
                    # Don't descend into a match; it is sized as a unit
                    continue

                if entry.name in SKIP_DIRECTORIES:
                    continue

                if target.max_depth is None or depth < target.max_depth:
                    queue.append((path, depth + 1))
