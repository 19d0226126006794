"""Data models for devstrip."""

from datetime import datetime, timezone
from enum import Enum
from pathlib import Path
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field, model_validator


class RetentionPolicy(str, Enum):
    """How many of the newest entries in a category survive a cleanup."""

    NONE = "none"  # Every match is a deletion candidate
    KEEP_LATEST_DERIVED = "keep_latest_derived"  # Xcode DerivedData / Archives
    KEEP_LATEST_CACHE = "keep_latest_cache"  # Package manager download caches


class Category(BaseModel):
    """Definition of a cleanup category."""

    model_config = ConfigDict(frozen=True)

    id: str = Field(..., description="Unique identifier for the category")
    name: str = Field(..., description="Human-readable label")
    group: str = Field(..., description="Tool or ecosystem the category belongs to")
    retention: RetentionPolicy = Field(
        RetentionPolicy.NONE, description="Retention policy class for this category"
    )
    description: str = Field("", description="What this category contains")


class Candidate(BaseModel):
    """A directory proposed for deletion."""

    model_config = ConfigDict(frozen=True)

    path: Path = Field(..., description="Absolute, canonical path of the directory")
    category: Category = Field(..., description="Why the directory was matched")
    modified: datetime = Field(
        ..., description="Modification time of the directory itself, timezone-aware (UTC)"
    )
    size_bytes: Optional[int] = Field(None, description="Apparent size, unset until sized")
    reason: str = Field("", description="Short explanation shown to the user")

    @property
    def is_sized(self) -> bool:
        return self.size_bytes is not None

    @property
    def display_name(self) -> str:
        return str(self.path)

    def with_size(self, size_bytes: int) -> "Candidate":
        """Return a sized copy of this candidate."""
        if self.size_bytes is not None:
            raise ValueError(f"Candidate already sized: {self.path}")
        return self.model_copy(update={"size_bytes": size_bytes})


class ScanWarning(BaseModel):
    """A non-fatal problem encountered while walking or sizing."""

    model_config = ConfigDict(frozen=True)

    path: str = Field(..., description="Path that could not be read")
    message: str = Field(..., description="What went wrong")


class Plan(BaseModel):
    """Ranked, totaled set of candidates proposed for deletion."""

    model_config = ConfigDict(frozen=True)

    candidates: tuple[Candidate, ...] = Field(default_factory=tuple)
    total_bytes: int = Field(0, description="Sum of all candidate sizes")
    kept: tuple[Candidate, ...] = Field(
        default_factory=tuple, description="Candidates protected by a retention policy"
    )
    warnings: tuple[ScanWarning, ...] = Field(default_factory=tuple)

    @model_validator(mode="after")
    def _check_total(self) -> "Plan":
        if any(c.size_bytes is None for c in self.candidates):
            raise ValueError("Every planned candidate must be sized")
        if self.total_bytes != sum(c.size_bytes for c in self.candidates):
            raise ValueError("Plan total does not match candidate sizes")
        return self

    @property
    def is_empty(self) -> bool:
        return not self.candidates

    def __len__(self) -> int:
        return len(self.candidates)


class CleanupResult(BaseModel):
    """Result of removing a single candidate."""

    candidate: Candidate
    success: bool = Field(True, description="Whether removal succeeded")
    error: Optional[str] = Field(None, description="Error message if failed")
    bytes_freed: int = Field(0, description="Bytes freed (zero on failure)")
    dry_run: bool = Field(False, description="Whether this was a dry run")


class CleanupReport(BaseModel):
    """Outcome of executing an approved plan."""

    timestamp: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))
    results: list[CleanupResult] = Field(default_factory=list)

    @property
    def bytes_freed(self) -> int:
        """Total bytes freed by successful removals."""
        return sum(r.bytes_freed for r in self.results if r.success)

    @property
    def success_count(self) -> int:
        return sum(1 for r in self.results if r.success)

    @property
    def failure_count(self) -> int:
        return sum(1 for r in self.results if not r.success)

    @property
    def failures(self) -> list[CleanupResult]:
        return [r for r in self.results if not r.success]
