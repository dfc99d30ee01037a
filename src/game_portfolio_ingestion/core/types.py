"""Type definitions for the game catalog and the ingestion pipeline.

GameEntry and Catalog mirror the JSON schema in
``core/schemas/catalog.schema.json``; the dataclasses and enums describe the
intermediate values the pipeline passes between its stages.
"""

from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path
from typing import TypedDict


class GameType(str, Enum):
    """Closed set of game types accepted in the catalog."""

    HTML = "html"
    RENPY = "renpy"
    RPGMAKER = "rpgmaker"
    DOWNLOAD_ONLY = "download-only"

    @classmethod
    def values(cls) -> list[str]:
        return [member.value for member in cls]


class ProjectClassification(str, Enum):
    """What the planned root of a package turned out to be."""

    BUILDABLE = "buildable"  # game/ holds uncompiled .rpy sources
    PREBUILT_DISTRIBUTION = "prebuilt-distribution"  # game/ holds only .rpyc
    STATIC_BUNDLE = "static-bundle"


class PipelineState(str, Enum):
    INSPECTING = "inspecting"
    MATERIALIZING = "materializing"
    BUILDING = "building"
    RESOLVING = "resolving"
    RECONCILING = "reconciling"
    COMMITTED = "committed"
    FAILED = "failed"


class GameEntry(TypedDict, total=False):
    """One game record in the catalog."""

    id: str  # Stable slug, unique across the catalog
    name: str  # Human-readable title
    type: str  # One of GameType values
    version: str  # Free-form, usually semver
    description: str
    thumbnail: str  # Public path, e.g. /images/games/<id>.png
    playable: bool  # type != download-only
    lastUpdated: str  # ISO date (YYYY-MM-DD)
    entryPoint: str  # Root-relative HTML filename


class Catalog(TypedDict):
    """Whole catalog document."""

    games: list[GameEntry]


@dataclass(frozen=True)
class EntryMeta:
    """A single file or directory inside a package.

    Attributes:
        path: Forward-slash path relative to the package root
        is_dir: True for containers
        size: File size in bytes (0 for directories)
    """

    path: str
    is_dir: bool
    size: int = 0

    @property
    def name(self) -> str:
        return self.path.rstrip("/").rsplit("/", 1)[-1]


@dataclass(frozen=True)
class UnpackPlan:
    """How a package is laid onto the destination.

    ``root_prefix`` is set only when ``flatten`` is true and always names a
    single top-level container.
    """

    flatten: bool
    root_prefix: str | None = None

    def __post_init__(self) -> None:
        if self.flatten:
            if not self.root_prefix or "/" in self.root_prefix or "\\" in self.root_prefix:
                raise ValueError(f"Invalid flatten root: {self.root_prefix!r}")
        elif self.root_prefix is not None:
            raise ValueError("root_prefix is only valid when flattening")

    def describe(self) -> str:
        if self.flatten:
            return f'Single folder "{self.root_prefix}" (will flatten)'
        return "Root level"


@dataclass(frozen=True)
class BuildResult:
    """Where the external build left its web output."""

    output_root: Path
    is_archive: bool


@dataclass(frozen=True)
class ThumbnailCandidate:
    file_path: Path
    extension: str  # Lowercase, with leading dot
    score: int
    size: int


@dataclass(frozen=True)
class GameDetails:
    """Descriptive fields a new catalog entry needs."""

    name: str
    type: str
    description: str


@dataclass
class IngestReport:
    """Summary of one pipeline run, used by the CLI for its output."""

    game_id: str
    source_kind: str
    version: str
    plan: UnpackPlan
    classification: ProjectClassification
    is_new: bool
    destination: Path
    dry_run: bool = False
    entry_point: str | None = None
    thumbnail: str | None = None
    thumbnail_found: bool = False
    built: bool = False
    state: PipelineState = PipelineState.INSPECTING
    planned_actions: list[str] = field(default_factory=list)
