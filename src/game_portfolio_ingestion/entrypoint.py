"""Entry-point resolution: which root HTML file launches the game."""

import logging
from pathlib import Path

from .classifier import find_project_root
from .core.errors import StructureError
from .core.types import ProjectClassification
from .prompts import InputProvider

logger = logging.getLogger(__name__)

ENTRY_SUFFIX = ".html"

COMPILED_DISTRIBUTION_MESSAGE = (
    "This looks like a Ren'Py PC distribution (compiled game), not the project source. "
    "To host the game on the web we need either: (1) the Ren'Py project with .rpy source "
    "files, which we can build for web automatically, or (2) a zip or folder that already "
    "contains the web build (HTML/JS files at the root)."
)
NO_CONTENT_MESSAGE = (
    "No HTML files found at the root of the game. Add at least one .html file at the "
    "root of the zip or folder, or use a Ren'Py project (with .rpy source) so it can "
    "be built for web."
)


def list_entry_candidates(directory: Path) -> list[str]:
    """HTML files directly inside ``directory``, sorted."""
    if not directory.is_dir():
        return []
    return sorted(
        entry.name
        for entry in directory.iterdir()
        if entry.is_file() and entry.name.lower().endswith(ENTRY_SUFFIX)
    )


def choose_candidate(candidates: list[str], answer: str) -> str:
    """Interpret an operator answer as a 1-based number or a filename.

    Anything else falls back to the first candidate.
    """
    answer = answer.strip()
    if answer.isdigit():
        index = int(answer)
        if 1 <= index <= len(candidates):
            return candidates[index - 1]
    if answer in candidates:
        return answer

    logger.warning("Using first option: %s", candidates[0])
    return candidates[0]


def resolve_entry_point(destination: Path, inputs: InputProvider) -> str:
    """Pick the game's entry HTML file.

    Raises:
        StructureError: When there is no candidate, with a distinct message
            for compiled Ren'Py distributions
    """
    candidates = list_entry_candidates(destination)

    if not candidates:
        if find_project_root(destination, ProjectClassification.PREBUILT_DISTRIBUTION):
            raise StructureError(COMPILED_DISTRIBUTION_MESSAGE)
        raise StructureError(NO_CONTENT_MESSAGE)

    if len(candidates) == 1:
        logger.info("Using sole root HTML as entry: %s", candidates[0])
        return candidates[0]

    listing = "\n".join(f"  {i}. {name}" for i, name in enumerate(candidates, start=1))
    answer = inputs.ask(
        "entry_point",
        f"Which HTML file at the root should be the game entry point?\n{listing}\n"
        f"Enter number (1-{len(candidates)}) or filename",
        default="1",
    )
    entry_point = choose_candidate(candidates, answer)
    logger.info("Entry point: %s", entry_point)
    return entry_point
