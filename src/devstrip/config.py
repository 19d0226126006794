"""Scan configuration and root resolution for devstrip."""

import os
from datetime import timedelta
from pathlib import Path
from typing import Iterable, Optional

from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator

from devstrip.errors import ConfigError

# Project folders under the home directory that are scanned by default
DEFAULT_HOME_PROJECT_DIRS = ("Projects", "workspace", "Work", "Developer")

DEFAULT_MIN_AGE_DAYS = 2
DEFAULT_MAX_DEPTH = 5
DEFAULT_KEEP_LATEST = 1


class ScanConfig(BaseModel):
    """Everything the engine needs to know to produce a plan."""

    model_config = ConfigDict(frozen=True)

    roots: tuple[Path, ...] = Field(default_factory=tuple, description="Directories to walk")
    excludes: tuple[Path, ...] = Field(
        default_factory=tuple, description="Paths pruned from the walk and the plan"
    )
    min_age: timedelta = Field(
        timedelta(days=DEFAULT_MIN_AGE_DAYS),
        description="Candidates modified more recently than this are skipped",
    )
    max_depth: Optional[int] = Field(
        DEFAULT_MAX_DEPTH, ge=0, description="How deep to descend below each root (None = no limit)"
    )
    keep_latest_derived: int = Field(DEFAULT_KEEP_LATEST, ge=0)
    keep_latest_cache: int = Field(DEFAULT_KEEP_LATEST, ge=0)
    home: Optional[Path] = Field(None, description="Home directory for well-known cache locations")
    include_system: bool = Field(True, description="Also scan well-known locations under home")
    min_size_bytes: int = Field(1, ge=0, description="Smaller candidates are dropped")
    max_workers: int = Field(4, ge=1, description="Threads used for sizing")

    @field_validator("min_age")
    @classmethod
    def _non_negative_age(cls, value: timedelta) -> timedelta:
        if value < timedelta(0):
            raise ValueError("min_age must not be negative")
        return value

    @classmethod
    def create(cls, **kwargs) -> "ScanConfig":
        """Build a config, reporting invalid values as ConfigError."""
        try:
            return cls(**kwargs)
        except ValidationError as e:
            problems = "; ".join(
                f"{'.'.join(str(p) for p in err['loc']) or 'config'}: {err['msg']}"
                for err in e.errors()
            )
            raise ConfigError(f"Invalid scan configuration: {problems}") from e

    def aggressive(self) -> "ScanConfig":
        """Return a copy that ignores age, depth and retention limits."""
        return self.model_copy(
            update={
                "min_age": timedelta(0),
                "max_depth": None,
                "keep_latest_derived": 0,
                "keep_latest_cache": 0,
            }
        )


def expand_path(path: str | Path) -> Path:
    """Expand ~ and environment variables in path."""
    return Path(os.path.expanduser(os.path.expandvars(str(path))))


def canonical(path: Path) -> Path:
    """Resolve symlinks and relative components, tolerating missing paths."""
    try:
        return Path(os.path.realpath(path))
    except OSError:
        return path


def normalize_paths(paths: Iterable[str | Path]) -> tuple[Path, ...]:
    """Expand and canonicalize a list of paths."""
    return tuple(canonical(expand_path(p)) for p in paths)


def is_excluded(path: Path, excludes: Iterable[Path]) -> bool:
    """Check whether path equals or lies below any excluded path."""
    return any(path == exclude or path.is_relative_to(exclude) for exclude in excludes)


def default_roots(home: Path | None, cwd: Path) -> list[Path]:
    """
    Roots scanned on every run, before any the user names.

    Pure: existence is checked by resolve_roots, not here.

    Args:
        home: Home directory, or None if unknown
        cwd: Current working directory

    Returns:
        Working directory followed by the conventional project folders under home
    """
    roots = [cwd]
    if home is not None:
        roots.extend(home / name for name in DEFAULT_HOME_PROJECT_DIRS)
    return roots


def resolve_roots(
    explicit: Iterable[str | Path],
    home: Path | None,
    cwd: Path,
    excludes: Iterable[Path] = (),
) -> tuple[Path, ...]:
    """
    Work out the final list of scan roots.

    Explicit roots are added after the defaults and must be existing
    directories. Default roots that do not exist are silently skipped.

    Returns:
        Canonical, de-duplicated roots that are not excluded

    Raises:
        ConfigError: If an explicit root does not exist or is not a directory
    """
    excludes = tuple(excludes)
    requested = [expand_path(p) for p in explicit]

    for root in requested:
        if not root.exists():
            raise ConfigError(f"Root does not exist: {root}")
        if not root.is_dir():
            raise ConfigError(f"Root is not a directory: {root}")

    candidates = [p for p in default_roots(home, cwd) if p.is_dir()]
    candidates.extend(requested)

    unique: list[Path] = []
    seen: set[Path] = set()
    for root in candidates:
        resolved = canonical(root)
        if resolved in seen or is_excluded(resolved, excludes):
            continue
        seen.add(resolved)
        unique.append(resolved)
    return tuple(unique)
