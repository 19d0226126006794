"""Rule catalog mapping directories to cleanup categories.

Rules are evaluated in order and the first match wins. Rules anchored at
well-known locations under the home directory come first; generic rules that
match a directory name anywhere come after. A directory that lies on the way
to an anchored location (for example ``~/.cache`` on the way to
``~/.cache/pip``) is never claimed by a generic rule, so a name rule such as
``.cache`` cannot swallow a location that has its own category.
"""

from enum import Enum
from pathlib import Path
from typing import Iterable, Optional

from pydantic import BaseModel, ConfigDict, Field

from devstrip.categories import CATEGORIES
from devstrip.models import Category


class MatchKind(str, Enum):
    """How a rule matches a directory."""

    CHILD_OF = "child_of"  # Any direct child of an absolute anchor
    EXACT = "exact"  # The absolute anchor itself
    PARENT_NAME = "parent_name"  # Any direct child of a directory with this name, anywhere
    NAME = "name"  # Directory name, anywhere
    SUFFIX = "suffix"  # Directory name suffix, anywhere


# Directory names that mark stale project build output or tool caches
PROJECT_PATTERNS: tuple[str, ...] = (
    "build",
    "dist",
    "out",
    "_build",
    "target",
    "node_modules",
    ".pytest_cache",
    ".mypy_cache",
    ".ruff_cache",
    ".tox",
    ".eggs",
    "coverage",
    "__pycache__",
    ".parcel-cache",
    ".gradle",
    ".sass-cache",
    ".cache",
)

PROJECT_SUFFIXES: tuple[str, ...] = (".egg-info",)

# Folders whose entries are retained per entry, wherever they live
# (e.g. xcodebuild -derivedDataPath); (folder name, category id, reason)
PARENT_PATTERNS: tuple[tuple[str, str, str], ...] = (
    ("DerivedData", "xcode_derived_data", "Old DerivedData project"),
)

# (path relative to home, category id, reason)
CACHE_TARGETS: tuple[tuple[str, str, str], ...] = (
    ("Library/Caches/pip", "python_cache", "pip cache"),
    (".cache/pip", "python_cache", "pip cache"),
    (".cache/pip-tools", "python_cache", "pip-tools cache"),
    (".cache/pipenv", "python_cache", "pipenv cache"),
    (".cache/pre-commit", "python_cache", "pre-commit cache"),
    (".cache/matplotlib", "python_cache", "matplotlib cache"),
    (".cache/pytest", "python_cache", "pytest cache"),
    (".cache/ruff", "python_cache", "ruff cache"),
    (".cache/uv", "python_cache", "uv cache"),
    (".npm", "node_cache", "npm cache"),
    ("Library/Caches/npm", "node_cache", "npm cache"),
    ("Library/Caches/Yarn", "node_cache", "Yarn cache"),
    (".cache/yarn", "node_cache", "Yarn cache"),
    ("Library/Caches/CocoaPods", "cocoapods_cache", "CocoaPods cache"),
    (".gradle/caches", "gradle_cache", "Gradle caches"),
    (".gradle/daemon", "gradle_cache", "Gradle daemons"),
    (".gradle/native", "gradle_cache", "Gradle native cache"),
    ("Library/Caches/JetBrains", "jetbrains_cache", "JetBrains IDE caches"),
    ("Library/Application Support/Code/Cache", "vscode_cache", "VSCode cache"),
    ("Library/Application Support/Code/CachedData", "vscode_cache", "VSCode cached data"),
    (
        "Library/Application Support/Slack/Service Worker/CacheStorage",
        "slack_cache",
        "Slack cache",
    ),
)


class Rule(BaseModel):
    """A single (predicate, category) entry of the catalog."""

    model_config = ConfigDict(frozen=True)

    kind: MatchKind
    category_id: str
    reason: str
    anchor: Optional[Path] = Field(None, description="Absolute location for anchored rules")
    name: Optional[str] = Field(None, description="Directory name or suffix for generic rules")

    @property
    def category(self) -> Category:
        return CATEGORIES[self.category_id]

    @property
    def anchored(self) -> bool:
        return self.kind in (MatchKind.CHILD_OF, MatchKind.EXACT)

    def matches(self, path: Path) -> bool:
        """Check whether this rule classifies ``path``."""
        if self.kind == MatchKind.CHILD_OF:
            return path.parent == self.anchor
        if self.kind == MatchKind.EXACT:
            return path == self.anchor
        if self.kind == MatchKind.PARENT_NAME:
            return path.parent.name == self.name and path.parent != path
        if self.kind == MatchKind.NAME:
            return path.name == self.name
        return path.name.endswith(self.name)

    def leads_to(self, path: Path) -> bool:
        """Check whether ``path`` must be traversed to reach this rule's anchor."""
        if not self.anchored:
            return False
        if self.kind == MatchKind.CHILD_OF and path == self.anchor:
            return True
        return path in self.anchor.parents


def build_rules(home: Path | None) -> tuple[Rule, ...]:
    """
    Build the ordered rule catalog.

    Args:
        home: Home directory for anchored rules, or None to use generic rules only

    Returns:
        Tuple of rules, anchored rules first
    """
    rules: list[Rule] = []

    if home is not None:
        developer = home / "Library" / "Developer"
        rules.append(
            Rule(
                kind=MatchKind.CHILD_OF,
                anchor=developer / "Xcode" / "DerivedData",
                category_id="xcode_derived_data",
                reason="Old DerivedData project",
            )
        )
        rules.append(
            Rule(
                kind=MatchKind.CHILD_OF,
                anchor=developer / "Xcode" / "Archives",
                category_id="xcode_archives",
                reason="Old Xcode archive",
            )
        )
        rules.append(
            Rule(
                kind=MatchKind.EXACT,
                anchor=developer / "CoreSimulator" / "Caches",
                category_id="core_simulator_caches",
                reason="CoreSimulator caches",
            )
        )
        rules.append(
            Rule(
                kind=MatchKind.CHILD_OF,
                anchor=home / "Library" / "Caches" / "Homebrew",
                category_id="homebrew_cache",
                reason="Homebrew download cache",
            )
        )
        for relative, category_id, reason in CACHE_TARGETS:
            rules.append(
                Rule(
                    kind=MatchKind.EXACT,
                    anchor=home / relative,
                    category_id=category_id,
                    reason=reason,
                )
            )

    for parent, category_id, reason in PARENT_PATTERNS:
        rules.append(
            Rule(kind=MatchKind.PARENT_NAME, name=parent, category_id=category_id, reason=reason)
        )
    for pattern in PROJECT_PATTERNS:
        rules.append(
            Rule(
                kind=MatchKind.NAME,
                name=pattern,
                category_id="project_artifact",
                reason=f"Stale build or cache ({pattern})",
            )
        )
    for suffix in PROJECT_SUFFIXES:
        rules.append(
            Rule(
                kind=MatchKind.SUFFIX,
                name=suffix,
                category_id="project_artifact",
                reason=f"Stale build or cache (*{suffix})",
            )
        )

    return tuple(rules)


def anchored_rules(rules: Iterable[Rule]) -> tuple[Rule, ...]:
    """Keep only the rules anchored at well-known locations."""
    return tuple(rule for rule in rules if rule.anchored)


def match(path: Path, rules: Iterable[Rule]) -> Rule | None:
    """
    Find the first rule that classifies a directory.

    Args:
        path: Absolute directory path
        rules: Ordered rules, anchored rules first

    Returns:
        The matching rule, or None if the directory is not a candidate
    """
    on_anchor_path = False
    for rule in rules:
        if rule.anchored:
            if rule.matches(path):
                return rule
            if rule.leads_to(path):
                on_anchor_path = True
        elif not on_anchor_path and rule.matches(path):
            return rule
    return None


def classify(path: Path, rules: Iterable[Rule]) -> Category | None:
    """Return the category of a directory, or None if no rule matches."""
    rule = match(path, rules)
    return rule.category if rule is not None else None
