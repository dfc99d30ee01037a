"""Core utilities for the ingestion pipeline.

This package contains type definitions, the error hierarchy, runtime
settings and catalog schema validation shared by every pipeline stage.
"""

from .config import Settings
from .errors import CatalogError, ExternalToolError, IngestError, InputError, StructureError
from .types import (
    BuildResult,
    Catalog,
    EntryMeta,
    GameDetails,
    GameEntry,
    GameType,
    IngestReport,
    PipelineState,
    ProjectClassification,
    ThumbnailCandidate,
    UnpackPlan,
)
from .validator import validate_catalog, validate_catalog_with_error_details

__all__ = [
    "BuildResult",
    "Catalog",
    "CatalogError",
    "EntryMeta",
    "ExternalToolError",
    "GameDetails",
    "GameEntry",
    "GameType",
    "IngestError",
    "IngestReport",
    "InputError",
    "PipelineState",
    "ProjectClassification",
    "Settings",
    "StructureError",
    "ThumbnailCandidate",
    "UnpackPlan",
    "validate_catalog",
    "validate_catalog_with_error_details",
]
