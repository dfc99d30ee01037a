"""Directory package accessor.

This module provides a PackageSource implementation backed by a loose
directory on the local filesystem.
"""

import logging
import os
import shutil
from pathlib import Path

from ...core.errors import InputError, StructureError
from ...core.types import EntryMeta
from ...sources.base import PackageSource, normalize_entry_path

logger = logging.getLogger(__name__)


class DirectoryPackageSource(PackageSource):
    """Package accessor for a filesystem directory.

    Example:
        >>> source = DirectoryPackageSource(Path('/incoming/MyGame'))
        >>> source.list_top_level_entries()
        {'MyGame'}
    """

    kind = "directory"

    def __init__(self, path: Path):
        """Initialize directory source.

        Raises:
            InputError: If path doesn't exist or isn't a directory
        """
        super().__init__(path.resolve())

        if not self.path.exists():
            raise InputError(f"Path does not exist: {self.path}")

        if not self.path.is_dir():
            raise InputError(f"Path is not a directory: {self.path}")

    def _resolve(self, path: str) -> Path:
        relative = normalize_entry_path(path)
        return self.path / relative if relative else self.path

    def list_top_level_entries(self) -> set[str]:
        return {entry.name for entry in os.scandir(self.path)}

    def list_entries_under_prefix(self, prefix: str = "") -> list[EntryMeta]:
        base = self._resolve(prefix)
        if not base.is_dir():
            return []

        entries: list[EntryMeta] = []
        for dirpath, dirnames, filenames in os.walk(base):
            dirnames.sort()
            current = Path(dirpath)
            for dirname in dirnames:
                rel = (current / dirname).relative_to(self.path).as_posix()
                entries.append(EntryMeta(path=rel, is_dir=True))
            for filename in sorted(filenames):
                file_path = current / filename
                try:
                    size = file_path.stat().st_size
                except OSError as e:
                    logger.warning("Failed to stat %s: %s", file_path, e)
                    size = 0
                rel = file_path.relative_to(self.path).as_posix()
                entries.append(EntryMeta(path=rel, is_dir=False, size=size))
        return entries

    def read_entry(self, path: str) -> bytes:
        target = self._resolve(path)
        if not target.is_file():
            raise KeyError(path)
        return target.read_bytes()

    def exists(self, path: str) -> bool:
        return self._resolve(path).exists()

    def is_container(self, path: str) -> bool:
        return self._resolve(path).is_dir()

    def extract_all(self, dest: Path, prefix: str = "") -> int:
        src = self._resolve(prefix)
        if not src.is_dir():
            raise StructureError(f"Directory not found in package: {prefix or '.'}")

        count = 0
        try:
            for entry in os.scandir(src):
                target = dest / entry.name
                if entry.is_dir():
                    shutil.copytree(entry.path, target, dirs_exist_ok=True)
                    count += sum(len(files) for _, _, files in os.walk(target))
                else:
                    shutil.copy2(entry.path, target)
                    count += 1
        except OSError as e:
            raise StructureError(f"Failed to copy directory: {e}") from e
        return count
