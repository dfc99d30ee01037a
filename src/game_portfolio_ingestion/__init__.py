"""Game Portfolio - Ingestion Module.

This package ingests game packages (zip archives or directories), builds
Ren'Py projects for the web, picks an entry point and thumbnail, and records
the result in the site's game catalog.
"""

# Core library interface
from .pipeline import IngestionPipeline
from .registry import SourceRegistry
from .sources.base import PackageSource

# Pipeline components
from .builder import BuildOrchestrator
from .catalog import CatalogStore, RunFields, ensure_catalog, reconcile, remove_entry
from .classifier import classify
from .entrypoint import resolve_entry_point
from .planner import plan_unpack
from .prompts import (
    DefaultInputProvider,
    InputProvider,
    InteractiveInputProvider,
    PresetInputProvider,
)
from .removal import remove_game
from .thumbnail import select_thumbnail

# Core utilities
from .core import (
    CatalogError,
    ExternalToolError,
    GameEntry,
    GameType,
    IngestError,
    InputError,
    ProjectClassification,
    Settings,
    StructureError,
    UnpackPlan,
    validate_catalog,
)

# CLI
from .cli import main

__version__ = "0.1.0"

# Auto-discover and register all platforms
SourceRegistry.discover_platforms()

__all__ = [
    # Primary library interface
    "IngestionPipeline",
    "SourceRegistry",
    "PackageSource",
    # Pipeline components
    "BuildOrchestrator",
    "CatalogStore",
    "RunFields",
    "classify",
    "ensure_catalog",
    "plan_unpack",
    "reconcile",
    "remove_entry",
    "remove_game",
    "resolve_entry_point",
    "select_thumbnail",
    "DefaultInputProvider",
    "InputProvider",
    "InteractiveInputProvider",
    "PresetInputProvider",
    # Core utilities
    "CatalogError",
    "ExternalToolError",
    "GameEntry",
    "GameType",
    "IngestError",
    "InputError",
    "ProjectClassification",
    "Settings",
    "StructureError",
    "UnpackPlan",
    "validate_catalog",
    # CLI
    "main",
]
