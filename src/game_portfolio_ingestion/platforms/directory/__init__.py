"""Directory platform for the ingestion pipeline.

Lets the pipeline ingest a loose folder exactly as it would the equivalent
zip archive.
"""

from pathlib import Path

from .source import DirectoryPackageSource

# Auto-register with the registry
from ...registry import SourceRegistry


def _create_directory_source(path: Path, **kwargs) -> DirectoryPackageSource:
    """Factory function for creating directory sources.

    Args:
        path: Directory to read
        **kwargs: Additional parameters (unused for directories)
    """
    return DirectoryPackageSource(path)


def _matches_directory(path: Path) -> bool:
    return path.is_dir()


# Auto-register at module import
SourceRegistry.register_factory("directory", _create_directory_source, _matches_directory)

__all__ = ["DirectoryPackageSource"]
