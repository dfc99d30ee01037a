"""Ingestion pipeline controller.

Sequences one ``add-game`` run:

    Inspecting -> Materializing -> Building (Ren'Py only) -> Resolving
        -> Reconciling -> Committed

Any fatal error moves the run to Failed. If the run had already cleared or
created the destination directory and the failure happened before the
catalog step, the destination is deleted again. A catalog failure leaves the
materialized game in place; it is the last step and the files are complete.

Dry runs stop after inspection and only report what would happen.
"""

import logging
import re
import shutil
from pathlib import Path

from .builder import BuildOrchestrator
from .catalog import CatalogStore, RunFields, find_entry, today, validate_game_type
from .classifier import classify, find_project_root
from .core.config import Settings
from .core.errors import IngestError, InputError, StructureError
from .core.types import (
    GameDetails,
    GameType,
    IngestReport,
    PipelineState,
    ProjectClassification,
    UnpackPlan,
)
from .entrypoint import resolve_entry_point
from .planner import extract_version_from_name, plan_unpack, planned_root, version_hint_name
from .prompts import DefaultInputProvider, InputProvider
from .registry import SourceRegistry
from .sources.base import PackageSource
from .thumbnail import publish_thumbnail, select_thumbnail

logger = logging.getLogger(__name__)

DEFAULT_VERSION = "1.0.0"
GAME_ID_PATTERN = re.compile(r"^[a-z0-9][a-z0-9._-]*$", re.IGNORECASE)

# States in which the destination may hold partial content
_ROLLBACK_STATES = {
    PipelineState.MATERIALIZING,
    PipelineState.BUILDING,
    PipelineState.RESOLVING,
}


def validate_game_id(game_id: str) -> str:
    """Ids double as directory and file names, so keep them to a slug.

    Raises:
        InputError: If the id is empty or not a slug
    """
    if not game_id or not GAME_ID_PATTERN.match(game_id) or game_id in (".", ".."):
        raise InputError(
            f"Invalid game id: {game_id!r}. Use letters, digits, '.', '_' and '-' only."
        )
    return game_id


class IngestionPipeline:
    """Adds or updates one game from a zip archive or directory.

    Example:
        >>> pipeline = IngestionPipeline(Settings.from_env(), inputs=DefaultInputProvider())
        >>> report = pipeline.run("my-game", Path("incoming/my-game-v1.0.0.zip"))
        >>> report.entry_point
        'index.html'
    """

    def __init__(
        self,
        settings: Settings,
        inputs: InputProvider | None = None,
        builder: BuildOrchestrator | None = None,
    ):
        self.settings = settings
        self.inputs = inputs or DefaultInputProvider()
        self.builder = builder or BuildOrchestrator(settings)
        self.store = CatalogStore(settings.catalog_file)
        self.state = PipelineState.INSPECTING
        self._owns_destination = False

    def _enter(self, state: PipelineState) -> None:
        logger.debug("Pipeline state: %s -> %s", self.state.value, state.value)
        self.state = state

    def run(
        self,
        game_id: str,
        source_path: Path,
        version: str | None = None,
        dry_run: bool = False,
    ) -> IngestReport:
        """Run the pipeline end to end.

        Args:
            game_id: Catalog id, also the destination directory name
            source_path: Zip archive or directory to ingest
            version: Explicit version; skips detection and prompting
            dry_run: Inspect and report only

        Raises:
            IngestError: Any fatal error, after rollback
        """
        self.state = PipelineState.INSPECTING
        self._owns_destination = False
        destination: Path | None = None

        try:
            validate_game_id(game_id)
            destination = self.settings.destination_for(game_id)

            with SourceRegistry.open(Path(source_path)) as source:
                self._check_overlap(source, destination)
                report = self._inspect(game_id, source, version, dry_run)
                if dry_run:
                    self._plan_actions(report, source)
                    report.state = self.state
                    return report
                details = self._collect_details(report)

                self._enter(PipelineState.MATERIALIZING)
                self._materialize(source, report)

            if report.classification is ProjectClassification.BUILDABLE:
                self._enter(PipelineState.BUILDING)
                self._build(report)

            self._enter(PipelineState.RESOLVING)
            report.entry_point = resolve_entry_point(destination, self.inputs)
            candidate = select_thumbnail(destination)
            published = publish_thumbnail(candidate, game_id, self.settings) if candidate else None
            if published:
                report.thumbnail = published
                report.thumbnail_found = True
            else:
                logger.warning(
                    "No image found for thumbnail. Add one manually to %s",
                    self.settings.thumbnails_dir / f"{game_id}.png",
                )

            self._enter(PipelineState.RECONCILING)
            entry, report.is_new = self.store.upsert(
                game_id,
                RunFields(
                    version=report.version,
                    entry_point=report.entry_point,
                    last_updated=today(),
                    thumbnail=report.thumbnail if report.thumbnail_found else None,
                ),
                details=details,
                default_thumbnail=self.settings.default_thumbnail(game_id),
            )
            report.thumbnail = entry.get("thumbnail")
            logger.info("%s game metadata: %s", "Added" if report.is_new else "Updated", game_id)

            self._enter(PipelineState.COMMITTED)
            report.state = self.state
            return report

        except IngestError:
            self._fail(destination)
            raise
        except OSError as e:
            self._fail(destination)
            raise IngestError(f"Filesystem error: {e}") from e
        except Exception as e:
            self._fail(destination)
            raise IngestError(f"Unexpected error: {e}") from e

    def _check_overlap(self, source: PackageSource, destination: Path) -> None:
        """The package is never modified, so it can't overlap the destination."""
        resolved = destination.resolve()
        if source.path.is_relative_to(resolved) or resolved.is_relative_to(source.path):
            raise InputError(
                f"Source {source.path} overlaps the game directory {destination}"
            )

    def _inspect(
        self,
        game_id: str,
        source: PackageSource,
        version: str | None,
        dry_run: bool,
    ) -> IngestReport:
        logger.info("Processing game: %s", game_id)
        logger.info("Source: %s (%s)", source.path, source.kind)

        plan = plan_unpack(source)
        logger.info("%s structure: %s", source.kind.capitalize(), plan.describe())

        classification = classify(source, plan)
        logger.info("Classification: %s", classification.value)

        final_version = self._resolve_version(source, plan, version, dry_run)
        logger.info("Version: %s", final_version)

        existing = find_entry(self.store.read(), game_id)
        if existing is None:
            logger.info('New game detected. Will create entry for "%s"', game_id)
        else:
            logger.info("Updating existing game: %s", existing.get("name", game_id))

        return IngestReport(
            game_id=game_id,
            source_kind=source.kind,
            version=final_version,
            plan=plan,
            classification=classification,
            is_new=existing is None,
            destination=self.settings.destination_for(game_id),
            dry_run=dry_run,
        )

    def _resolve_version(
        self,
        source: PackageSource,
        plan: UnpackPlan,
        version: str | None,
        dry_run: bool,
    ) -> str:
        if version:
            return version

        hint = version_hint_name(source, plan)
        detected = extract_version_from_name(hint, is_directory=source.kind == "directory")
        if detected:
            return detected

        if dry_run:
            logger.info("Would prompt for version (using %s for dry run)", DEFAULT_VERSION)
            return DEFAULT_VERSION
        answer = self.inputs.ask("version", "Enter version (e.g., 1.0.0)", default=DEFAULT_VERSION)
        return answer or DEFAULT_VERSION

    def _collect_details(self, report: IngestReport) -> GameDetails | None:
        """Ask for name, type and description before anything is written."""
        if not report.is_new:
            return None

        game_id = report.game_id
        default_type = (
            GameType.RENPY.value
            if report.classification is ProjectClassification.BUILDABLE
            else GameType.HTML.value
        )
        name = self.inputs.ask("name", "Game name", default=game_id) or game_id
        game_type = validate_game_type(
            self.inputs.ask(
                "type",
                f"Type ({'/'.join(GameType.values())})",
                default=default_type,
            )
            or default_type
        )
        description = self.inputs.ask(
            "description", "Description", default=f"A {game_type} game."
        ) or f"A {game_type} game."
        return GameDetails(name=name, type=game_type, description=description)

    def _materialize(self, source: PackageSource, report: IngestReport) -> None:
        destination = report.destination
        if destination.exists():
            # The run owns the directory from the moment it clears it
            self._owns_destination = True
            shutil.rmtree(destination)
            logger.info("Cleared existing directory: %s", destination)
        destination.mkdir(parents=True)
        self._owns_destination = True

        count = source.extract_all(destination, planned_root(report.plan))
        logger.info("Copied %d files to: %s", count, destination)

    def _build(self, report: IngestReport) -> None:
        project = find_project_root(report.destination, ProjectClassification.BUILDABLE)
        if project is None:
            raise StructureError(f"Ren'Py project not found in {report.destination}")
        self.builder.build(project, report.destination)
        report.built = True

    def _plan_actions(self, report: IngestReport, source: PackageSource) -> None:
        destination = report.destination
        actions = [
            f"{'Create' if not destination.exists() else 'Clear and recreate'} directory: {destination}",
        ]
        if source.kind == "zip":
            actions.append(f"Extract zip ({source.entry_count()} entries)")
        else:
            actions.append(f"Copy directory {source.path / planned_root(report.plan)} to game dir")

        if report.classification is ProjectClassification.BUILDABLE:
            actions.append(
                "Detect Ren'Py project; build to web (requires SDK + Renpyweb) "
                "then use web output as game content"
            )
        elif report.classification is ProjectClassification.PREBUILT_DISTRIBUTION:
            actions.append(
                "Detect Ren'Py PC distribution (compiled); would error: need project "
                "source (.rpy) or pre-built web zip"
            )
        if report.is_new:
            actions.append("Prompt for game name, type and description")
        actions.append("Select the root HTML file that is the game entry point")
        actions.append(f"Try to copy an image to {self.settings.thumbnails_dir} as thumbnail")
        actions.append(f"Update metadata with version {report.version} and entryPoint")
        report.planned_actions = actions

    def _fail(self, destination: Path | None) -> None:
        failed_in = self.state
        self._enter(PipelineState.FAILED)
        if destination is None or not self._owns_destination:
            return
        if failed_in not in _ROLLBACK_STATES:
            return
        if destination.exists():
            try:
                shutil.rmtree(destination)
                logger.info("Removed partially created directory: %s", destination)
            except OSError as e:
                logger.warning("Failed to remove %s: %s", destination, e)
