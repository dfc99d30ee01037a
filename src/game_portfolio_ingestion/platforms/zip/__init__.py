"""Zip platform for the ingestion pipeline.

Reads zip archives in place; nothing is extracted until the pipeline
materializes the destination.
"""

import zipfile
from pathlib import Path

from .source import ZipPackageSource

# Auto-register with the registry
from ...registry import SourceRegistry


def _create_zip_source(path: Path, **kwargs) -> ZipPackageSource:
    """Factory function for creating zip sources.

    Args:
        path: Archive file
        **kwargs: Additional parameters (unused for zip)
    """
    return ZipPackageSource(path)


def _matches_zip(path: Path) -> bool:
    return path.is_file() and (path.suffix.lower() == ".zip" or zipfile.is_zipfile(path))


# Auto-register at module import
SourceRegistry.register_factory("zip", _create_zip_source, _matches_zip)

__all__ = ["ZipPackageSource"]
