"""Thumbnail selection and publication.

Scores every image in the game directory:

- +100 when it sits at the game root
- +50 minus the hint rank for the first name hint its stem contains
- +10 when it is larger than 1000 bytes

Ties go to the larger file, then to the first one found.
"""

import logging
import os
import shutil
from pathlib import Path

from .core.config import THUMBNAIL_URL_PREFIX, Settings
from .core.types import ThumbnailCandidate

logger = logging.getLogger(__name__)

IMAGE_EXTENSIONS = frozenset({".png", ".jpg", ".jpeg", ".webp", ".gif"})
THUMBNAIL_NAME_HINTS = (
    "thumbnail",
    "icon",
    "screenshot",
    "preview",
    "banner",
    "cover",
    "logo",
    "splash",
    "poster",
    "title",
    "keyart",
)
ROOT_BONUS = 100
HINT_BASE = 50
SIZE_BONUS = 10
SIZE_THRESHOLD = 1000


def score_image(relative_path: Path, size: int) -> int:
    """Score one image by location, name and size."""
    score = ROOT_BONUS if len(relative_path.parts) == 1 else 0

    stem = relative_path.stem.lower()
    for rank, hint in enumerate(THUMBNAIL_NAME_HINTS):
        if hint in stem:
            score += HINT_BASE - rank
            break

    if size > SIZE_THRESHOLD:
        score += SIZE_BONUS
    return score


def collect_candidates(directory: Path) -> list[ThumbnailCandidate]:
    """Score every readable image under ``directory`` in traversal order."""
    candidates: list[ThumbnailCandidate] = []

    for dirpath, dirnames, filenames in os.walk(directory):
        dirnames.sort()
        for filename in sorted(filenames):
            file_path = Path(dirpath) / filename
            extension = file_path.suffix.lower()
            if extension not in IMAGE_EXTENSIONS:
                continue
            try:
                if not os.access(file_path, os.R_OK):
                    raise PermissionError("not readable")
                size = file_path.stat().st_size
            except OSError as e:
                logger.warning("Skipping unreadable image %s: %s", file_path, e)
                continue

            relative = file_path.relative_to(directory)
            candidates.append(
                ThumbnailCandidate(
                    file_path=file_path,
                    extension=extension,
                    score=score_image(relative, size),
                    size=size,
                )
            )
    return candidates


def select_thumbnail(directory: Path) -> ThumbnailCandidate | None:
    """Return the best thumbnail candidate, or None if there are no images."""
    best: ThumbnailCandidate | None = None
    for candidate in collect_candidates(directory):
        if best is None or (candidate.score, candidate.size) > (best.score, best.size):
            best = candidate
    return best


def publish_thumbnail(
    candidate: ThumbnailCandidate,
    game_id: str,
    settings: Settings,
) -> str | None:
    """Copy the candidate into the thumbnails directory.

    Returns:
        Public path of the copy, or None if copying failed
    """
    target = settings.thumbnails_dir / f"{game_id}{candidate.extension}"
    try:
        target.parent.mkdir(parents=True, exist_ok=True)
        shutil.copyfile(candidate.file_path, target)
    except OSError as e:
        logger.warning("Failed to copy thumbnail %s: %s", candidate.file_path, e)
        return None

    logger.info(
        "Thumbnail copied: %s -> %s", candidate.file_path.name, target.relative_to(settings.site_root)
    )
    return f"{THUMBNAIL_URL_PREFIX}{game_id}{candidate.extension}"
