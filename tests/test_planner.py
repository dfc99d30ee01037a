"""Tests for unpack planning and version detection."""

from pathlib import Path

import pytest

from game_portfolio_ingestion.core.types import UnpackPlan
from game_portfolio_ingestion.planner import (
    extract_version_from_name,
    plan_from_entries,
    plan_unpack,
    planned_root,
)
from game_portfolio_ingestion.platforms.directory.source import DirectoryPackageSource
from game_portfolio_ingestion.platforms.zip.source import ZipPackageSource

from builders import write_tree, write_zip


class TestPlanFromEntries:
    """Test the pure planning rule."""

    def test_single_container_flattens(self) -> None:
        """A lone top-level folder is flattened."""
        plan = plan_from_entries({"MyGame"}, {"MyGame"})
        assert plan == UnpackPlan(flatten=True, root_prefix="MyGame")

    def test_empty_package_does_not_flatten(self) -> None:
        """Nothing to flatten in an empty package."""
        assert plan_from_entries(set(), set()) == UnpackPlan(flatten=False)

    def test_single_file_does_not_flatten(self) -> None:
        """Only containers are flattened."""
        assert plan_from_entries({"index.html"}, set()) == UnpackPlan(flatten=False)

    def test_multiple_entries_do_not_flatten(self) -> None:
        """A folder next to other entries stays as-is."""
        plan = plan_from_entries({"MyGame", "README.txt"}, {"MyGame"})
        assert plan.flatten is False
        assert planned_root(plan) == ""


class TestUnpackPlanInvariants:
    """Test that invalid plans cannot be built."""

    @pytest.mark.parametrize("prefix", ["", None, "a/b", "a\\b"])
    def test_rejects_bad_flatten_root(self, prefix) -> None:
        """Flatten roots are single, non-empty top-level names."""
        with pytest.raises(ValueError):
            UnpackPlan(flatten=True, root_prefix=prefix)

    def test_rejects_prefix_without_flatten(self) -> None:
        """A prefix only makes sense when flattening."""
        with pytest.raises(ValueError):
            UnpackPlan(flatten=False, root_prefix="MyGame")


class TestPlanUnpack:
    """Test planning against real packages."""

    def test_zip_without_directory_entries(self, tmp_path: Path) -> None:
        """Folders are inferred from file names when the zip omits them."""
        archive = write_zip(tmp_path / "g.zip", {"MyVN/game/script.rpy": "label start:"})
        with ZipPackageSource(archive) as source:
            assert plan_unpack(source) == UnpackPlan(flatten=True, root_prefix="MyVN")

    def test_zip_single_file(self, tmp_path: Path) -> None:
        """A zip holding one file keeps it at the root."""
        archive = write_zip(tmp_path / "g.zip", {"index.html": "<html></html>"})
        with ZipPackageSource(archive) as source:
            assert plan_unpack(source).flatten is False

    def test_directory_single_folder(self, tmp_path: Path) -> None:
        """A directory holding one folder flattens it."""
        root = write_tree(tmp_path / "pkg", {"Inner/index.html": "x"})
        source = DirectoryPackageSource(root)
        assert plan_unpack(source) == UnpackPlan(flatten=True, root_prefix="Inner")

    def test_extract_strips_flattened_segment(self, tmp_path: Path) -> None:
        """Flattened files land at the destination root and nothing else does."""
        archive = write_zip(
            tmp_path / "g.zip",
            {"Inner/index.html": "x", "Inner/js/app.js": "y"},
        )
        dest = tmp_path / "dest"
        dest.mkdir()
        with ZipPackageSource(archive) as source:
            plan = plan_unpack(source)
            source.extract_all(dest, planned_root(plan))

        files = sorted(p.relative_to(dest).as_posix() for p in dest.rglob("*") if p.is_file())
        assert files == ["index.html", "js/app.js"]


class TestExtractVersionFromName:
    """Test version detection from package names."""

    @pytest.mark.parametrize(
        "name,expected",
        [
            ("my-game-v1.0.0.zip", "1.0.0"),
            ("my_game_1.2.3.zip", "1.2.3"),
            ("game-1.0.zip", "1.0"),
            ("game-v2.zip", "2"),
            ("GAME-V3.1.4.ZIP", "3.1.4"),
            ("my-game.zip", None),
        ],
    )
    def test_zip_names(self, name: str, expected: str | None) -> None:
        """Zip names carry the version before the extension."""
        assert extract_version_from_name(name) == expected

    @pytest.mark.parametrize(
        "name,expected",
        [("WTS-1.49.2", "1.49.2"), ("game_v0.9", "0.9"), ("WTS", None)],
    )
    def test_directory_names(self, name: str, expected: str | None) -> None:
        """Directory names carry the version at the end."""
        assert extract_version_from_name(name, is_directory=True) == expected
