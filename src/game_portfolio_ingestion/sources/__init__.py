"""Package accessors for the ingestion pipeline.

This package contains the abstract accessor interface. Concrete zip and
directory implementations live in the platforms/ directory.
"""

from .base import PackageSource, normalize_entry_path, validate_path_safety

__all__ = ["PackageSource", "normalize_entry_path", "validate_path_safety"]
