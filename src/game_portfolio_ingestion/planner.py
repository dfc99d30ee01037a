"""Unpack planning: decide whether a package needs one layer flattened.

Packages are often zipped from their parent folder, so everything sits one
directory deeper than the site expects. When the package root holds nothing
but a single folder, that folder's contents become the destination root.
"""

import re
from pathlib import Path

from .core.types import UnpackPlan
from .sources.base import PackageSource

# Version patterns tried in order against a package name
ZIP_VERSION_PATTERNS = [
    re.compile(r"[_-]v?(\d+\.\d+\.\d+)\.zip$", re.IGNORECASE),
    re.compile(r"[_-]v?(\d+\.\d+)\.zip$", re.IGNORECASE),
    re.compile(r"[_-]v?(\d+)\.zip$", re.IGNORECASE),
]
DIR_VERSION_PATTERNS = [
    re.compile(r"[_-]v?(\d+\.\d+\.\d+)$", re.IGNORECASE),
    re.compile(r"[_-]v?(\d+\.\d+)$", re.IGNORECASE),
]


def plan_from_entries(top_level: set[str], containers: set[str]) -> UnpackPlan:
    """Compute the unpack plan from the package's top-level entries.

    Args:
        top_level: Names directly at the package root
        containers: Subset of ``top_level`` that are directories

    Returns:
        Flatten plan when the root holds exactly one directory and nothing else
    """
    if len(top_level) != 1:
        return UnpackPlan(flatten=False)

    (only,) = top_level
    if only not in containers:
        return UnpackPlan(flatten=False)
    return UnpackPlan(flatten=True, root_prefix=only)


def plan_unpack(source: PackageSource) -> UnpackPlan:
    """Inspect a package and return its unpack plan."""
    top_level = source.list_top_level_entries()
    containers = {name for name in top_level if source.is_container(name)}
    return plan_from_entries(top_level, containers)


def planned_root(plan: UnpackPlan) -> str:
    """Package-relative prefix that becomes the destination root."""
    return plan.root_prefix if plan.flatten and plan.root_prefix else ""


def extract_version_from_name(name: str, is_directory: bool = False) -> str | None:
    """Pull a version out of a package name.

    Example:
        "my-game-v1.0.0.zip" -> "1.0.0"
        "WTS-1.49.2" (directory) -> "1.49.2"

    Returns:
        The version string, or None when no pattern matches
    """
    patterns = DIR_VERSION_PATTERNS if is_directory else ZIP_VERSION_PATTERNS
    for pattern in patterns:
        match = pattern.search(name)
        if match:
            return match.group(1)
    return None


def version_hint_name(source: PackageSource, plan: UnpackPlan) -> str:
    """Name to extract a version from: the flattened folder for directories."""
    if source.kind == "directory" and plan.flatten and plan.root_prefix:
        return plan.root_prefix
    return Path(source.path).name
