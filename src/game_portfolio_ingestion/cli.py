"""Command-line interface for the game ingestion tools.

Entry points:
    add-game        ingest a zip or directory into the site
    remove-game     delete a game and its catalog entry
    ensure-catalog  create or migrate the catalog file
"""

import argparse
import logging
import sys
from pathlib import Path

from .catalog import ensure_catalog
from .core.config import Settings
from .core.errors import ExternalToolError, IngestError
from .core.types import IngestReport
from .pipeline import IngestionPipeline
from .prompts import build_input_provider
from .removal import remove_game


def configure_logging(verbose: bool = False) -> None:
    """Send progress messages to stderr as plain lines."""
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.INFO,
        format="%(message)s",
        stream=sys.stderr,
        force=True,
    )


def report_error(error: Exception) -> None:
    print(f"Error: {error}", file=sys.stderr)
    if isinstance(error, ExternalToolError) and error.diagnostics:
        print("--- build output ---", file=sys.stderr)
        print(error.diagnostics, file=sys.stderr)


def _settings(args: argparse.Namespace) -> Settings:
    try:
        return Settings.from_env(args.root)
    except ValueError as e:
        raise IngestError(str(e)) from e


def _add_common_arguments(parser: argparse.ArgumentParser) -> None:
    parser.add_argument(
        "--root", help="Site root directory (default: $GAME_PORTFOLIO_ROOT or cwd)"
    )
    parser.add_argument("--dry-run", action="store_true", help="Report only, change nothing")
    parser.add_argument("-v", "--verbose", action="store_true", help="Show debug output")


def print_dry_run(report: IngestReport) -> None:
    print("", file=sys.stderr)
    print("Would perform the following actions:", file=sys.stderr)
    for action in report.planned_actions:
        print(f"  - {action}", file=sys.stderr)
    print("", file=sys.stderr)
    print("Dry run complete. No changes were made.", file=sys.stderr)


def print_summary(report: IngestReport) -> None:
    print("", file=sys.stderr)
    print("=" * 40, file=sys.stderr)
    print(f'Game "{report.game_id}" updated successfully!', file=sys.stderr)
    print("=" * 40, file=sys.stderr)
    print("", file=sys.stderr)
    print("Next steps:", file=sys.stderr)

    steps = []
    if not report.thumbnail_found:
        steps.append(f"Add a thumbnail image to: public{report.thumbnail}")
    steps.append(f"Game is playable at: /play/{report.game_id}/{report.entry_point}")
    steps.append("Rebuild the site")
    steps.append("Deploy the updated site")
    for number, step in enumerate(steps, start=1):
        print(f"  {number}. {step}", file=sys.stderr)


def build_add_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="add-game",
        description="Add or update a game from a zip archive or directory",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  add-game my-game ./incoming/my-game-v1.0.0.zip
  add-game wts ./incoming/WTS
  add-game my-game ./incoming/my-game.zip --version 1.2.0 --dry-run

  # Non-interactive
  add-game my-game ./incoming/my-game.zip --version 1.0.0 \\
      --name "My Game" --type html --description "A small game."
        """,
    )
    parser.add_argument("game_id", help="Catalog id, also the /play/<id>/ directory name")
    parser.add_argument("source", help="Zip archive or directory holding the game")
    parser.add_argument("--version", help="Version to record (skips detection and prompt)")
    parser.add_argument("--name", help="Name for a new game (env GAME_NAME)")
    parser.add_argument(
        "--type",
        dest="game_type",
        help="Type for a new game: html, renpy, rpgmaker, download-only (env GAME_TYPE)",
    )
    parser.add_argument("--description", help="Description for a new game (env GAME_DESCRIPTION)")
    parser.add_argument(
        "--entry-point", help="Root HTML file to use when there are several (env GAME_ENTRY_POINT)"
    )
    parser.add_argument(
        "--no-input", action="store_true", help="Never prompt; use defaults for missing values"
    )
    _add_common_arguments(parser)
    return parser


def main(argv: list[str] | None = None) -> int:
    """Entry point for add-game."""
    args = build_add_parser().parse_args(argv)
    configure_logging(args.verbose)

    if args.dry_run:
        print("DRY RUN MODE - No changes will be made", file=sys.stderr)

    try:
        settings = _settings(args)
        inputs = build_input_provider(
            {
                "name": args.name,
                "type": args.game_type,
                "description": args.description,
                "entry_point": args.entry_point,
            },
            interactive=False if args.no_input else None,
        )
        pipeline = IngestionPipeline(settings, inputs=inputs)
        report = pipeline.run(
            args.game_id,
            Path(args.source),
            version=args.version,
            dry_run=args.dry_run,
        )
    except IngestError as e:
        report_error(e)
        return 1

    if report.dry_run:
        print_dry_run(report)
    else:
        print_summary(report)
    return 0


def remove_main(argv: list[str] | None = None) -> int:
    """Entry point for remove-game."""
    parser = argparse.ArgumentParser(
        prog="remove-game",
        description="Remove a game: files, download copy, thumbnail and catalog entry",
    )
    parser.add_argument("game_id", help="Catalog id of the game to remove")
    _add_common_arguments(parser)
    args = parser.parse_args(argv)
    configure_logging(args.verbose)

    try:
        report = remove_game(_settings(args), args.game_id, dry_run=args.dry_run)
    except IngestError as e:
        report_error(e)
        return 1

    if report.dry_run:
        print("Would remove:", file=sys.stderr)
        for path in report.removed_paths:
            print(f"  - {path}", file=sys.stderr)
        print(f'  - metadata entry for "{report.game_id}"', file=sys.stderr)
        print("Dry run complete. No changes were made.", file=sys.stderr)
    else:
        print(
            f'Game "{report.game_id}" removed. Original package was not touched.',
            file=sys.stderr,
        )
    return 0


def ensure_catalog_main(argv: list[str] | None = None) -> int:
    """Entry point for ensure-catalog."""
    parser = argparse.ArgumentParser(
        prog="ensure-catalog",
        description="Create the catalog file, migrating games.json if present",
    )
    parser.add_argument("--root", help="Site root directory (default: $GAME_PORTFOLIO_ROOT or cwd)")
    args = parser.parse_args(argv)
    configure_logging()

    try:
        ensure_catalog(_settings(args).catalog_file)
    except IngestError as e:
        report_error(e)
        return 1
    return 0


if __name__ == "__main__":
    sys.exit(main())
