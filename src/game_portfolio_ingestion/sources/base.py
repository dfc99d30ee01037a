"""Base abstraction for package accessors.

A package is whatever the operator hands to ``add-game``: a zip archive or a
loose directory. Both are exposed through the same read-only interface so
the planner and classifier never need to know which one they are looking at.
"""

from abc import ABC, abstractmethod
from pathlib import Path

from ..core.errors import StructureError
from ..core.types import EntryMeta


def normalize_entry_path(raw: str) -> str:
    """Return a forward-slash relative path with no empty segments."""
    parts = [part for part in raw.replace("\\", "/").split("/") if part not in ("", ".")]
    return "/".join(parts)


def validate_path_safety(path: Path, base_dir: Path) -> None:
    """Validate that a path stays within the base directory.

    This prevents path traversal (zip-slip) when materializing a package.

    Raises:
        StructureError: If path escapes the base directory
    """
    resolved_path = path.resolve()
    resolved_base = base_dir.resolve()

    if not resolved_path.is_relative_to(resolved_base):
        raise StructureError(f"Path {path} escapes base directory {base_dir}")


class PackageSource(ABC):
    """Uniform read-only view over a package.

    Paths are always forward-slash strings relative to the package root.
    Implementations must return identical answers for a zip archive and the
    directory tree it would extract to.
    """

    kind: str = "package"

    def __init__(self, path: Path):
        self.path = path

    @abstractmethod
    def list_top_level_entries(self) -> set[str]:
        """Names of the entries directly at the package root."""

    @abstractmethod
    def list_entries_under_prefix(self, prefix: str = "") -> list[EntryMeta]:
        """Every file and directory below ``prefix``, recursively.

        Args:
            prefix: Relative directory path; empty string means the root

        Returns:
            Entries in traversal order, paths relative to the package root
        """

    @abstractmethod
    def read_entry(self, path: str) -> bytes:
        """Read a file's bytes.

        Raises:
            KeyError: If no file exists at ``path``
        """

    @abstractmethod
    def exists(self, path: str) -> bool:
        """True if a file or directory exists at ``path``."""

    @abstractmethod
    def is_container(self, path: str) -> bool:
        """True if ``path`` names a directory."""

    @abstractmethod
    def extract_all(self, dest: Path, prefix: str = "") -> int:
        """Copy every file under ``prefix`` into ``dest``, stripping the prefix.

        Args:
            dest: Existing destination directory
            prefix: Relative directory whose contents land at ``dest``

        Returns:
            Number of files written

        Raises:
            StructureError: If an entry would escape ``dest`` or reading fails
        """

    def entry_count(self) -> int:
        return len(self.list_entries_under_prefix(""))

    def close(self) -> None:
        """Release any underlying handle."""

    def __enter__(self) -> "PackageSource":
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.close()

    def __repr__(self) -> str:
        return f"{type(self).__name__}({str(self.path)!r})"
