"""Shared fixtures for devstrip tests."""

import os
import time
from datetime import datetime, timedelta, timezone
from pathlib import Path

import pytest

from devstrip.categories import get_category
from devstrip.models import Candidate


def populate(directory: Path, files: dict[str, int], age: timedelta | None = None) -> Path:
    """Create a directory holding files of the given sizes, optionally back-dated."""
    directory.mkdir(parents=True, exist_ok=True)
    for name, size in files.items():
        target = directory / name
        target.parent.mkdir(parents=True, exist_ok=True)
        target.write_bytes(b"x" * size)
    if age is not None:
        stamp = time.time() - age.total_seconds()
        os.utime(directory, (stamp, stamp))
    return directory


@pytest.fixture
def tmp_path(tmp_path):
    """Canonical tmp_path, so it compares equal to paths the walker resolves."""
    return Path(os.path.realpath(tmp_path))


@pytest.fixture
def make_candidate():
    """Factory for sized candidates that don't need to exist on disk."""

    def _make(
        path: str,
        size: int | None = 100,
        category_id: str = "project_artifact",
        modified: datetime | None = None,
        age: timedelta = timedelta(days=30),
    ) -> Candidate:
        return Candidate(
            path=Path(path),
            category=get_category(category_id),
            modified=modified or datetime.now(timezone.utc) - age,
            size_bytes=size,
            reason="test",
        )

    return _make


@pytest.fixture
def local_timezone(monkeypatch):
    """Switch the process's local time zone for the duration of a test."""
    if not hasattr(time, "tzset"):
        pytest.skip("time.tzset is not available")

    def _set(name: str) -> None:
        monkeypatch.setenv("TZ", name)
        time.tzset()

    yield _set
    monkeypatch.undo()
    time.tzset()
