"""Game removal.

Deletes a game's directory, its download copy, its thumbnail and its
catalog entry. The package originally used to add the game is never touched.
"""

import logging
import shutil
from dataclasses import dataclass, field
from pathlib import Path

from .catalog import CatalogStore, find_entry, remove_entry
from .core.config import Settings
from .core.errors import InputError

logger = logging.getLogger(__name__)


@dataclass
class RemovalReport:
    game_id: str
    name: str
    dry_run: bool = False
    removed_paths: list[Path] = field(default_factory=list)


def _existing_targets(settings: Settings, game_id: str, thumbnail: str | None) -> list[Path]:
    thumbnail_path = (
        settings.public_path(thumbnail)
        if thumbnail
        else settings.thumbnails_dir / f"{game_id}.png"
    )
    targets = [
        settings.destination_for(game_id),
        settings.downloads_dir / f"{game_id}.zip",
        thumbnail_path,
    ]
    # A thumbnail path pointing outside public/ is not ours to delete
    return [
        target
        for target in targets
        if target.exists() and target.resolve().is_relative_to(settings.public_dir.resolve())
    ]


def remove_game(settings: Settings, game_id: str, dry_run: bool = False) -> RemovalReport:
    """Remove a game and everything the site stores for it.

    Raises:
        InputError: If the game is not in the catalog
        CatalogError: If the catalog can't be read or written
    """
    store = CatalogStore(settings.catalog_file)
    catalog = store.read()
    entry = find_entry(catalog, game_id)
    if entry is None:
        raise InputError(f"Game not found: {game_id}")

    report = RemovalReport(game_id=game_id, name=entry.get("name", game_id), dry_run=dry_run)
    targets = _existing_targets(settings, game_id, entry.get("thumbnail"))
    report.removed_paths = targets

    if dry_run:
        return report

    for target in targets:
        if target.is_dir():
            shutil.rmtree(target)
        else:
            target.unlink()
        logger.info("Removed: %s", target)

    # Re-read so the write starts from the latest document
    updated, _ = remove_entry(store.read(), game_id)
    store.write(updated)
    logger.info('Removed "%s" from %s', game_id, settings.catalog_file)
    return report
