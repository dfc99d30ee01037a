"""Catalog store and reconciler.

The catalog is one YAML (or JSON) document holding an ordered list of game
entries. ``CatalogStore`` does the file I/O; ``reconcile`` and
``remove_entry`` are pure functions over the document value, so the merge
rules are testable without touching disk.

There is no locking: two runs against the same catalog at once can lose an
update. The store re-reads the document right before each write and
replaces the file atomically, which keeps the window small and the file
never half-written.
"""

import copy
import datetime
import json
import logging
import os
import shutil
import tempfile
from dataclasses import dataclass
from pathlib import Path
from typing import Any

import yaml

from .core.errors import CatalogError, InputError
from .core.types import Catalog, GameDetails, GameEntry, GameType
from .core.validator import validate_catalog_with_error_details

logger = logging.getLogger(__name__)

# Fields that stay strings even when YAML would load them as dates or numbers
STRING_FIELDS = ("id", "name", "version", "description", "thumbnail", "lastUpdated", "entryPoint")


@dataclass(frozen=True)
class RunFields:
    """Fields an ingestion run produces for an entry.

    ``thumbnail`` is None when no candidate was found this run; the stored
    thumbnail is then left alone.
    """

    version: str
    entry_point: str
    last_updated: str
    thumbnail: str | None = None


def empty_catalog() -> Catalog:
    return {"games": []}


def today() -> str:
    return datetime.date.today().isoformat()


def validate_game_type(value: str) -> str:
    """Reject anything outside the closed set of game types.

    Raises:
        InputError: For unknown types
    """
    normalized = value.strip().lower()
    if normalized not in GameType.values():
        raise InputError(
            f"Unknown game type: {value!r}. Expected one of: {', '.join(GameType.values())}"
        )
    return normalized


def _normalize_entry(raw: dict[str, Any]) -> GameEntry:
    entry = dict(raw)
    for key in STRING_FIELDS:
        value = entry.get(key)
        if isinstance(value, (datetime.date, datetime.datetime)):
            entry[key] = value.isoformat()[:10]
        elif isinstance(value, (int, float)) and not isinstance(value, bool):
            entry[key] = str(value)
    return entry  # type: ignore[return-value]


def normalize_catalog(data: Any) -> Catalog:
    """Coerce a loaded document into catalog shape.

    Raises:
        CatalogError: If the document is not a mapping with a games list
    """
    if data is None:
        return empty_catalog()
    if not isinstance(data, dict):
        raise CatalogError("Catalog document must be a mapping with a 'games' list")

    games = data.get("games") or []
    if not isinstance(games, list) or not all(isinstance(g, dict) for g in games):
        raise CatalogError("Catalog 'games' must be a list of mappings")

    catalog = dict(data)
    catalog["games"] = [_normalize_entry(g) for g in games]
    return catalog  # type: ignore[return-value]


def find_entry(catalog: Catalog, game_id: str) -> GameEntry | None:
    for entry in catalog["games"]:
        if entry.get("id") == game_id:
            return entry
    return None


def reconcile(
    catalog: Catalog,
    game_id: str,
    fields: RunFields,
    details: GameDetails | None = None,
    default_thumbnail: str = "",
) -> tuple[Catalog, bool]:
    """Insert or update the entry for ``game_id``.

    Existing entries only get the fields this run produced; everything
    else, including a stored thumbnail when no new one was found, is kept.

    Args:
        catalog: Current document (not modified)
        game_id: Entry key
        fields: Values produced by this run
        details: Name, type and description, required for a new entry
        default_thumbnail: Thumbnail path for a new entry without a candidate

    Returns:
        Tuple of (new document, is_new)

    Raises:
        InputError: New entry without details, or an unknown type
    """
    updated = copy.deepcopy(catalog)
    existing = find_entry(updated, game_id)

    if existing is not None:
        existing["version"] = fields.version
        existing["lastUpdated"] = fields.last_updated
        existing["entryPoint"] = fields.entry_point
        if fields.thumbnail:
            existing["thumbnail"] = fields.thumbnail
        return updated, False

    if details is None:
        raise InputError(f"Game details are required to add new game '{game_id}'")

    game_type = validate_game_type(details.type)
    entry: GameEntry = {
        "id": game_id,
        "name": details.name,
        "type": game_type,
        "version": fields.version,
        "description": details.description,
        "thumbnail": fields.thumbnail or default_thumbnail,
        "playable": game_type != GameType.DOWNLOAD_ONLY.value,
        "lastUpdated": fields.last_updated,
        "entryPoint": fields.entry_point,
    }
    updated["games"].append(entry)
    return updated, True


def remove_entry(catalog: Catalog, game_id: str) -> tuple[Catalog, GameEntry | None]:
    """Drop the entry for ``game_id``.

    Returns:
        Tuple of (new document, removed entry or None)
    """
    updated = copy.deepcopy(catalog)
    for index, entry in enumerate(updated["games"]):
        if entry.get("id") == game_id:
            del updated["games"][index]
            return updated, entry
    return updated, None


class CatalogStore:
    """Reads and writes the catalog document at ``path``.

    The format follows the extension: ``.json`` is JSON, anything else YAML.
    """

    def __init__(self, path: Path):
        self.path = path

    @property
    def is_json(self) -> bool:
        return self.path.suffix.lower() == ".json"

    def read(self) -> Catalog:
        """Load the document; a missing file is an empty catalog.

        Raises:
            CatalogError: If the file can't be read or parsed
        """
        if not self.path.exists():
            return empty_catalog()

        try:
            with self.path.open("r", encoding="utf-8") as f:
                data = json.load(f) if self.is_json else yaml.safe_load(f)
        except (OSError, yaml.YAMLError, json.JSONDecodeError) as e:
            raise CatalogError(f"Failed to read metadata file {self.path}: {e}") from e

        return normalize_catalog(data)

    def dumps(self, catalog: Catalog) -> str:
        if self.is_json:
            return json.dumps(catalog, indent=2, ensure_ascii=False) + "\n"
        return yaml.safe_dump(
            catalog, sort_keys=False, allow_unicode=True, default_flow_style=False, indent=2
        )

    def write(self, catalog: Catalog) -> None:
        """Validate and atomically replace the document.

        Raises:
            CatalogError: If validation fails or the file can't be written
        """
        valid, message = validate_catalog_with_error_details(catalog)
        if not valid:
            raise CatalogError(f"Catalog not written. {message}")

        content = self.dumps(catalog)
        try:
            self.path.parent.mkdir(parents=True, exist_ok=True)
            fd, tmp_name = tempfile.mkstemp(
                prefix=f".{self.path.name}.", suffix=".tmp", dir=self.path.parent
            )
            try:
                with os.fdopen(fd, "w", encoding="utf-8") as f:
                    f.write(content)
                os.replace(tmp_name, self.path)
            except BaseException:
                Path(tmp_name).unlink(missing_ok=True)
                raise
        except OSError as e:
            raise CatalogError(f"Failed to write metadata file {self.path}: {e}") from e

    def upsert(
        self,
        game_id: str,
        fields: RunFields,
        details: GameDetails | None = None,
        default_thumbnail: str = "",
    ) -> tuple[GameEntry, bool]:
        """Read, reconcile and write in one step.

        Returns:
            Tuple of (stored entry, is_new)
        """
        current = self.read()
        updated, is_new = reconcile(current, game_id, fields, details, default_thumbnail)
        self.write(updated)
        entry = find_entry(updated, game_id)
        if entry is None:
            raise CatalogError(f"Entry {game_id!r} missing after writing {self.path}")
        return entry, is_new


def ensure_catalog(path: Path) -> str:
    """Make sure the catalog file exists.

    Migrates a legacy ``games.json`` beside it, else copies
    ``<name>.example``, else writes an empty catalog.

    Returns:
        What was done: "exists", "migrated", "copied" or "created"
    """
    if path.exists():
        return "exists"

    store = CatalogStore(path)
    legacy = path.with_suffix(".json")
    example = path.with_name(path.name + ".example")

    if legacy.exists() and legacy != path:
        store.write(CatalogStore(legacy).read())
        logger.info("Migrated %s -> %s", legacy.name, path.name)
        return "migrated"

    if example.exists():
        path.parent.mkdir(parents=True, exist_ok=True)
        shutil.copyfile(example, path)
        logger.info("Copied %s -> %s", example.name, path.name)
        return "copied"

    store.write(empty_catalog())
    logger.info("Created empty catalog %s", path)
    return "created"
