"""Zip archive package accessor.

This module provides a PackageSource implementation backed by a zip file.
Directories are inferred from entry names, since many archivers omit
explicit directory entries.
"""

import logging
import zipfile
import zlib
from pathlib import Path

from ...core.errors import InputError, StructureError
from ...core.types import EntryMeta
from ...sources.base import PackageSource, normalize_entry_path, validate_path_safety

logger = logging.getLogger(__name__)


class ZipPackageSource(PackageSource):
    """Package accessor for a zip archive.

    Example:
        >>> with ZipPackageSource(Path('/incoming/my-game-v1.0.0.zip')) as source:
        ...     plan = plan_unpack(source)
    """

    kind = "zip"

    def __init__(self, path: Path):
        """Open the archive.

        Raises:
            InputError: If path doesn't exist
            StructureError: If the file is not a readable zip archive
        """
        super().__init__(path.resolve())

        if not self.path.exists():
            raise InputError(f"Path does not exist: {self.path}")

        try:
            self._zip = zipfile.ZipFile(self.path)
        except (zipfile.BadZipFile, OSError) as e:
            raise StructureError(f"Failed to open zip file: {e}") from e

        self._files: dict[str, zipfile.ZipInfo] = {}
        self._dirs: set[str] = set()
        self._order: list[str] = []
        for info in self._zip.infolist():
            name = normalize_entry_path(info.filename)
            if not name:
                continue
            parts = name.split("/")
            for depth in range(1, len(parts)):
                self._add_dir("/".join(parts[:depth]))
            if info.is_dir():
                self._add_dir(name)
            elif name not in self._files:
                self._files[name] = info
                self._order.append(name)

    def _add_dir(self, name: str) -> None:
        if name not in self._dirs:
            self._dirs.add(name)
            self._order.append(name)

    def close(self) -> None:
        self._zip.close()

    def list_top_level_entries(self) -> set[str]:
        return {name.split("/", 1)[0] for name in self._order}

    def list_entries_under_prefix(self, prefix: str = "") -> list[EntryMeta]:
        base = normalize_entry_path(prefix)
        lead = f"{base}/" if base else ""

        entries: list[EntryMeta] = []
        for name in sorted(self._order):
            if not name.startswith(lead) or name == base:
                continue
            if name in self._dirs:
                entries.append(EntryMeta(path=name, is_dir=True))
            else:
                entries.append(EntryMeta(path=name, is_dir=False, size=self._files[name].file_size))
        return entries

    def read_entry(self, path: str) -> bytes:
        info = self._files.get(normalize_entry_path(path))
        if info is None:
            raise KeyError(path)
        return self._zip.read(info)

    def exists(self, path: str) -> bool:
        name = normalize_entry_path(path)
        return not name or name in self._files or name in self._dirs

    def is_container(self, path: str) -> bool:
        name = normalize_entry_path(path)
        return not name or name in self._dirs

    def entry_count(self) -> int:
        return len(self._zip.infolist())

    def extract_all(self, dest: Path, prefix: str = "") -> int:
        base = normalize_entry_path(prefix)
        lead = f"{base}/" if base else ""
        if base and base not in self._dirs:
            raise StructureError(f"Folder not found in zip: {base}")

        count = 0
        for name in self._order:
            if not name.startswith(lead):
                continue
            relative = name[len(lead):]
            target = dest / relative
            validate_path_safety(target, dest)
            try:
                if name in self._dirs:
                    target.mkdir(parents=True, exist_ok=True)
                    continue
                target.parent.mkdir(parents=True, exist_ok=True)
                with self._zip.open(self._files[name]) as src, target.open("wb") as out:
                    while chunk := src.read(1024 * 1024):
                        out.write(chunk)
                count += 1
            except (OSError, EOFError, zipfile.BadZipFile, zlib.error, RuntimeError) as e:
                raise StructureError(f"Failed to extract zip entry {name}: {e}") from e
        logger.debug("Extracted %d files from %s", count, self.path.name)
        return count
