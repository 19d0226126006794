"""Tests for directory discovery."""

import logging
import os
import threading
from pathlib import Path
from unittest.mock import patch

import pytest

from devstrip.rules import anchored_rules, build_rules
from devstrip.walker import WalkTarget, system_walk_roots, walk


def targets(*roots, home=None, max_depth=5):
    rules = build_rules(home)
    return [WalkTarget(Path(root), rules, max_depth) for root in roots]


def paths(candidates):
    return sorted(c.path for c in candidates)


class TestWalk:
    def test_finds_matching_directory(self, tmp_path):
        """Find a single matching directory."""
        node_modules = tmp_path / "project" / "node_modules"
        node_modules.mkdir(parents=True)
        (node_modules / "package.json").write_text("{}")

        results = list(walk(targets(tmp_path)))
        assert len(results) == 1
        assert results[0].path == node_modules
        assert results[0].category.id == "project_artifact"
        assert results[0].size_bytes is None

    def test_finds_nested_projects(self, tmp_path):
        """Every project's node_modules is found."""
        for project in ["project1", "project2", "project3"]:
            (tmp_path / project / "node_modules").mkdir(parents=True)

        results = list(walk(targets(tmp_path)))
        assert len(results) == 3

    def test_does_not_descend_into_match(self, tmp_path):
        """Don't report node_modules inside node_modules."""
        outer = tmp_path / "project" / "node_modules"
        inner = outer / "some-package" / "node_modules"
        inner.mkdir(parents=True)
        (outer / "dist").mkdir()

        results = list(walk(targets(tmp_path)))
        assert paths(results) == [outer]

    def test_root_itself_is_not_classified(self, tmp_path):
        """A root named like an artifact is walked, not planned."""
        root = tmp_path / "build"
        (root / "src").mkdir(parents=True)

        results = list(walk(targets(root)))
        assert results == []

    def test_respects_max_depth(self, tmp_path):
        """Directories below max_depth are not visited."""
        deep = tmp_path
        for i in range(6):
            deep = deep / f"level{i}"
        target = deep / "node_modules"
        target.mkdir(parents=True)

        # level0 is at depth 0, node_modules at depth 6
        assert list(walk(targets(tmp_path, max_depth=5))) == []
        assert paths(walk(targets(tmp_path, max_depth=6))) == [target]
        assert paths(walk(targets(tmp_path, max_depth=None))) == [target]

    def test_max_depth_zero_classifies_children_only(self, tmp_path):
        """Depth zero looks at the root's direct children only."""
        (tmp_path / "dist").mkdir()
        (tmp_path / "app" / "dist").mkdir(parents=True)

        results = list(walk(targets(tmp_path, max_depth=0)))
        assert paths(results) == [tmp_path / "dist"]

    def test_skips_version_control_directories(self, tmp_path):
        """.git and friends are never entered."""
        (tmp_path / ".git" / "build").mkdir(parents=True)

        assert list(walk(targets(tmp_path))) == []

    def test_does_not_follow_symlinks(self, tmp_path):
        """A symlinked directory is neither matched nor entered."""
        real = tmp_path / "real"
        (real / "node_modules").mkdir(parents=True)
        (tmp_path / "project").mkdir()
        os.symlink(real, tmp_path / "project" / "link")
        os.symlink(real / "node_modules", tmp_path / "project" / "node_modules")

        results = list(walk(targets(tmp_path / "project")))
        assert results == []

    def test_prunes_excluded_subtree(self, tmp_path):
        """Nothing below an excluded folder is reported."""
        keep = tmp_path / "keep"
        (keep / "node_modules").mkdir(parents=True)
        (tmp_path / "other" / "node_modules").mkdir(parents=True)

        results = list(walk(targets(tmp_path), excludes=[keep]))
        assert paths(results) == [tmp_path / "other" / "node_modules"]

    def test_excluded_candidate_itself(self, tmp_path):
        """An excluded match is dropped."""
        target = tmp_path / "app" / "target"
        target.mkdir(parents=True)

        assert list(walk(targets(tmp_path), excludes=[target])) == []

    def test_excluded_root(self, tmp_path):
        """An excluded root is not walked at all."""
        (tmp_path / "node_modules").mkdir()

        assert list(walk(targets(tmp_path), excludes=[tmp_path])) == []

    def test_overlapping_roots_no_duplicates(self, tmp_path):
        """A root inside another root yields each candidate once."""
        node_modules = tmp_path / "project" / "node_modules"
        node_modules.mkdir(parents=True)

        results = list(walk(targets(tmp_path, tmp_path / "project", tmp_path)))
        assert paths(results) == [node_modules]

    def test_root_inside_candidate_is_skipped(self, tmp_path):
        """A root under an already matched folder adds nothing."""
        outer = tmp_path / "app" / "build"
        (outer / "sub" / "node_modules").mkdir(parents=True)

        # Listed innermost first on purpose: walking order is outermost first
        results = list(walk(targets(outer / "sub", tmp_path)))
        assert paths(results) == [outer]

    def test_nonexistent_root_is_ignored(self, tmp_path):
        assert list(walk(targets(tmp_path / "missing"))) == []

    def test_records_mtime(self, tmp_path):
        """The candidate carries the directory's own modification time."""
        target = tmp_path / "dist"
        target.mkdir()
        os.utime(target, (1_600_000_000, 1_600_000_000))

        [candidate] = walk(targets(tmp_path))
        assert candidate.modified.timestamp() == pytest.approx(1_600_000_000)

    def test_unreadable_directory_is_a_warning(self, tmp_path):
        """An unreadable folder is reported and the walk goes on."""
        (tmp_path / "locked").mkdir()
        (tmp_path / "open" / "node_modules").mkdir(parents=True)
        real_scandir = os.scandir

        def fake_scandir(path):
            if Path(path).name == "locked":
                raise PermissionError(13, "Permission denied", str(path))
            return real_scandir(path)

        warnings = []
        with patch("devstrip.walker.os.scandir", side_effect=fake_scandir):
            results = list(walk(targets(tmp_path), on_warning=warnings.append))

        assert paths(results) == [tmp_path / "open" / "node_modules"]
        assert len(warnings) == 1
        assert warnings[0].path == str(tmp_path / "locked")
        assert "Permission denied" in warnings[0].message

    def test_unreadable_root(self, tmp_path):
        """An unreadable root yields one warning and no candidates."""
        warnings = []
        with patch("devstrip.walker.os.scandir", side_effect=PermissionError("Access denied")):
            results = list(walk(targets(tmp_path), on_warning=warnings.append))

        assert results == []
        assert len(warnings) == 1

    def test_skipped_directory_logged_at_debug(self, tmp_path, caplog):
        """Skips are logged quietly; the warning list carries them to the user."""
        with caplog.at_level(logging.DEBUG, logger="devstrip"):
            with patch("devstrip.walker.os.scandir", side_effect=PermissionError("Access denied")):
                list(walk(targets(tmp_path), on_warning=lambda w: None))

        skipped = [r for r in caplog.records if r.name == "devstrip.walker"
                   and r.getMessage().startswith("Skipping")]
        assert len(skipped) == 1
        assert skipped[0].levelno == logging.DEBUG
        assert not [r for r in caplog.records if r.levelno >= logging.WARNING]

    def test_cancel_stops_walk(self, tmp_path):
        """A set cancel event stops the walk before the first visit."""
        (tmp_path / "node_modules").mkdir()
        cancel = threading.Event()
        cancel.set()

        assert list(walk(targets(tmp_path), cancel=cancel)) == []

    def test_is_lazy(self, tmp_path):
        """Candidates are produced as the walk goes."""
        (tmp_path / "a" / "dist").mkdir(parents=True)
        (tmp_path / "b" / "dist").mkdir(parents=True)

        iterator = walk(targets(tmp_path))
        first = next(iterator)
        assert first.path == tmp_path / "a" / "dist"

    def test_visit_callback(self, tmp_path):
        (tmp_path / "src").mkdir()
        visited = []

        list(walk(targets(tmp_path), on_visit=visited.append))
        assert visited == [tmp_path, tmp_path / "src"]


class TestSystemLocations:
    def test_derived_data_children(self, tmp_path):
        """Each DerivedData entry is its own candidate."""
        derived = tmp_path / "Library" / "Developer" / "Xcode" / "DerivedData"
        (derived / "AppA").mkdir(parents=True)
        (derived / "AppB").mkdir()

        rules = anchored_rules(build_rules(tmp_path))
        system = [WalkTarget(root, rules, 0) for root in system_walk_roots(rules)]
        results = list(walk(system))

        assert paths(results) == [derived / "AppA", derived / "AppB"]
        assert {c.category.id for c in results} == {"xcode_derived_data"}

    def test_exact_targets_reached_through_parent(self, tmp_path):
        """Exact cache targets are found by walking their parent."""
        (tmp_path / ".cache" / "pip").mkdir(parents=True)
        (tmp_path / ".cache" / "unrelated" / "build").mkdir(parents=True)

        rules = anchored_rules(build_rules(tmp_path))
        system = [WalkTarget(root, rules, 0) for root in system_walk_roots(rules)]
        results = list(walk(system))

        assert paths(results) == [tmp_path / ".cache" / "pip"]

    def test_home_as_root_keeps_system_classification(self, tmp_path):
        """Scanning home still classifies known caches by location."""
        derived = tmp_path / "Library" / "Developer" / "Xcode" / "DerivedData"
        (derived / "AppA").mkdir(parents=True)
        (tmp_path / ".cache" / "pip").mkdir(parents=True)

        results = list(walk(targets(tmp_path, home=tmp_path)))

        by_path = {c.path: c.category.id for c in results}
        assert by_path == {
            derived / "AppA": "xcode_derived_data",
            tmp_path / ".cache" / "pip": "python_cache",
        }

    def test_system_roots_unique(self, tmp_path):
        rules = anchored_rules(build_rules(tmp_path))
        roots = system_walk_roots(rules)
        assert len(roots) == len(set(roots))
        assert tmp_path / ".cache" in roots
        assert tmp_path / "Library" / "Caches" / "Homebrew" in roots
