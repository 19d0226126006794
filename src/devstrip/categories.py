"""Cleanup category definitions for devstrip."""

from devstrip.models import Category, RetentionPolicy

# All cleanup categories with their metadata
CATEGORIES: dict[str, Category] = {
    # =============================================================================
    # XCODE - keep the newest entries, everything older is rebuildable
    # =============================================================================
    "xcode_derived_data": Category(
        id="xcode_derived_data",
        name="Xcode DerivedData",
        group="Xcode",
        retention=RetentionPolicy.KEEP_LATEST_DERIVED,
        description="Per-project build products and indexes; rebuilt on next compile",
    ),
    "xcode_archives": Category(
        id="xcode_archives",
        name="Xcode Archives",
        group="Xcode",
        retention=RetentionPolicy.KEEP_LATEST_DERIVED,
        description="Archived app builds; only needed to re-sign or symbolicate old releases",
    ),
    "core_simulator_caches": Category(
        id="core_simulator_caches",
        name="CoreSimulator Caches",
        group="Xcode",
        description="iOS simulator dyld and runtime caches",
    ),
    # =============================================================================
    # PACKAGE MANAGER CACHES
    # =============================================================================
    "homebrew_cache": Category(
        id="homebrew_cache",
        name="Homebrew Download Cache",
        group="Homebrew",
        retention=RetentionPolicy.KEEP_LATEST_CACHE,
        description="Downloaded bottles and casks; re-downloaded on next install",
    ),
    "python_cache": Category(
        id="python_cache",
        name="Python Tool Caches",
        group="Python",
        description="pip, pipenv, uv, pre-commit and test tool caches",
    ),
    "node_cache": Category(
        id="node_cache",
        name="Node Package Caches",
        group="Node",
        description="npm and Yarn download caches",
    ),
    "cocoapods_cache": Category(
        id="cocoapods_cache",
        name="CocoaPods Cache",
        group="CocoaPods",
        description="Downloaded pod sources and specs",
    ),
    "gradle_cache": Category(
        id="gradle_cache",
        name="Gradle Caches",
        group="Gradle",
        description="Gradle dependency caches, daemon logs and native libraries",
    ),
    # =============================================================================
    # IDE AND APP CACHES
    # =============================================================================
    "jetbrains_cache": Category(
        id="jetbrains_cache",
        name="JetBrains IDE Caches",
        group="JetBrains",
        description="Indexes and caches for IntelliJ-based IDEs",
    ),
    "vscode_cache": Category(
        id="vscode_cache",
        name="VSCode Caches",
        group="VSCode",
        description="Electron cache and cached extension data",
    ),
    "slack_cache": Category(
        id="slack_cache",
        name="Slack Cache",
        group="Slack",
        description="Service worker cache storage",
    ),
    # =============================================================================
    # PROJECT BUILD ARTIFACTS - found anywhere under the scan roots
    # =============================================================================
    "project_artifact": Category(
        id="project_artifact",
        name="Project Build Artifacts",
        group="Project",
        description="Build outputs, dependency folders and tool caches inside projects",
    ),
}


def get_category(category_id: str) -> Category | None:
    """Get a category by ID."""
    return CATEGORIES.get(category_id)


def get_all_categories() -> list[Category]:
    """Get all categories."""
    return list(CATEGORIES.values())


def get_retained_categories() -> list[Category]:
    """Get categories that protect their newest entries."""
    return [c for c in CATEGORIES.values() if c.retention != RetentionPolicy.NONE]
