"""Shared fixtures for the ingestion tests."""

from pathlib import Path

import pytest

from game_portfolio_ingestion.core.config import Settings
from game_portfolio_ingestion.prompts import PresetInputProvider


@pytest.fixture
def site(tmp_path: Path) -> Settings:
    """Settings rooted at an empty temporary site."""
    root = tmp_path / "site"
    root.mkdir()
    return Settings(site_root=root, build_timeout=5)


@pytest.fixture
def inputs() -> PresetInputProvider:
    """Non-interactive answers for new-game details."""
    return PresetInputProvider(
        {"name": "Test Game", "type": "html", "description": "A test game."}
    )


@pytest.fixture
def static_files() -> dict[str, bytes | str]:
    """A plain HTML game: index page, script and a 2000-byte logo."""
    return {
        "index.html": "<html><body>game</body></html>",
        "main.js": "console.log('hi');",
        "logo.png": b"\x89PNG" + b"\x00" * 1996,
    }
