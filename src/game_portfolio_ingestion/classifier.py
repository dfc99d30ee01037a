"""Project classification: buildable Ren'Py source, compiled build, or static.

The same scan runs over zip archives and directories through the
PackageSource interface, so a zip and the folder it extracts to always
classify the same way.
"""

from pathlib import Path

from .core.types import ProjectClassification, UnpackPlan
from .planner import planned_root
from .platforms.directory.source import DirectoryPackageSource
from .sources.base import PackageSource

GAME_SUBDIR = "game"
SOURCE_SUFFIX = ".rpy"
COMPILED_SUFFIX = ".rpyc"


def _join(prefix: str, name: str) -> str:
    return f"{prefix}/{name}" if prefix else name


def scan_markers(source: PackageSource, root: str) -> tuple[bool, bool]:
    """Look for source and compiled markers anywhere under ``<root>/game/``.

    Returns:
        Tuple of (has_source, has_compiled)
    """
    game_dir = _join(root, GAME_SUBDIR)
    if not source.is_container(game_dir):
        return False, False

    has_source = has_compiled = False
    for entry in source.list_entries_under_prefix(game_dir):
        if entry.is_dir:
            continue
        lowered = entry.name.lower()
        if lowered.endswith(SOURCE_SUFFIX):
            has_source = True
        elif lowered.endswith(COMPILED_SUFFIX):
            has_compiled = True
        if has_source and has_compiled:
            break
    return has_source, has_compiled


def classify_root(source: PackageSource, root: str) -> ProjectClassification:
    """Classify one package-relative root."""
    has_source, has_compiled = scan_markers(source, root)
    if has_source:
        return ProjectClassification.BUILDABLE
    if has_compiled:
        return ProjectClassification.PREBUILT_DISTRIBUTION
    return ProjectClassification.STATIC_BUNDLE


def _candidate_roots(source: PackageSource, root: str) -> list[str]:
    """The root itself, then its only subdirectory when it has exactly one."""
    candidates = [root]
    subdirs = [
        entry.path
        for entry in source.list_entries_under_prefix(root)
        if entry.is_dir and "/" not in entry.path[len(root):].strip("/")
    ]
    if len(subdirs) == 1:
        candidates.append(subdirs[0])
    return candidates


def find_project_prefix(
    source: PackageSource,
    plan: UnpackPlan,
    kind: ProjectClassification = ProjectClassification.BUILDABLE,
) -> str | None:
    """Locate the package-relative root that classifies as ``kind``.

    Checks the planned root and, failing that, its single subdirectory (a
    project zipped together with loose files such as a README).

    Returns:
        The prefix, "" for the planned root itself, or None if not found
    """
    root = planned_root(plan)
    for candidate in _candidate_roots(source, root):
        if classify_root(source, candidate) is kind:
            return candidate
    return None


def classify(source: PackageSource, plan: UnpackPlan) -> ProjectClassification:
    """Classify the planned root of a package.

    Never raises for a missing game/ directory; that is a static bundle.
    """
    for kind in (
        ProjectClassification.BUILDABLE,
        ProjectClassification.PREBUILT_DISTRIBUTION,
    ):
        if find_project_prefix(source, plan, kind) is not None:
            return kind
    return ProjectClassification.STATIC_BUNDLE


def find_project_root(directory: Path, kind: ProjectClassification) -> Path | None:
    """Locate a project of ``kind`` inside a materialized directory."""
    if not directory.is_dir():
        return None
    prefix = find_project_prefix(
        DirectoryPackageSource(directory), UnpackPlan(flatten=False), kind
    )
    if prefix is None:
        return None
    return directory / prefix if prefix else directory
