"""Runtime configuration for the ingestion tools.

All paths derive from a single site root, matching the layout of the static
site that serves the catalog:

    <root>/public/play/<id>/         game content (destination)
    <root>/public/images/games/      thumbnails
    <root>/public/downloads/         download copies
    <root>/src/data/games.yaml       catalog document
    <root>/vendor/renpy/             Ren'Py SDK installs
"""

import os
from dataclasses import dataclass
from pathlib import Path

DEFAULT_RENPY_VERSION = "8.5.2"
DEFAULT_BUILD_TIMEOUT = 300.0
THUMBNAIL_URL_PREFIX = "/images/games/"

ENV_ROOT = "GAME_PORTFOLIO_ROOT"
ENV_RENPY_VERSION = "RENPY_VERSION"
ENV_RENPY_SDK_ROOT = "RENPY_SDK_ROOT"
ENV_BUILD_TIMEOUT = "GAME_BUILD_TIMEOUT"


@dataclass(frozen=True)
class Settings:
    """Paths and tunables shared by every pipeline stage."""

    site_root: Path
    renpy_version: str = DEFAULT_RENPY_VERSION
    build_timeout: float = DEFAULT_BUILD_TIMEOUT
    sdk_root_override: Path | None = None
    catalog_path: Path | None = None

    def __post_init__(self) -> None:
        object.__setattr__(self, "site_root", Path(self.site_root).resolve())

    @classmethod
    def from_env(cls, root: str | Path | None = None) -> "Settings":
        """Build settings from the environment.

        Args:
            root: Explicit site root; falls back to GAME_PORTFOLIO_ROOT, then cwd

        Raises:
            ValueError: If GAME_BUILD_TIMEOUT is not a positive number
        """
        site_root = Path(root or os.environ.get(ENV_ROOT) or Path.cwd())

        timeout = DEFAULT_BUILD_TIMEOUT
        raw_timeout = os.environ.get(ENV_BUILD_TIMEOUT)
        if raw_timeout:
            timeout = float(raw_timeout)
            if timeout <= 0:
                raise ValueError(f"{ENV_BUILD_TIMEOUT} must be positive, got {raw_timeout}")

        sdk_override = os.environ.get(ENV_RENPY_SDK_ROOT)

        return cls(
            site_root=site_root,
            renpy_version=os.environ.get(ENV_RENPY_VERSION) or DEFAULT_RENPY_VERSION,
            build_timeout=timeout,
            sdk_root_override=Path(sdk_override).expanduser() if sdk_override else None,
        )

    @property
    def catalog_file(self) -> Path:
        if self.catalog_path is not None:
            return Path(self.catalog_path)
        return self.site_root / "src" / "data" / "games.yaml"

    @property
    def public_dir(self) -> Path:
        return self.site_root / "public"

    @property
    def games_dir(self) -> Path:
        return self.public_dir / "play"

    @property
    def thumbnails_dir(self) -> Path:
        return self.public_dir / "images" / "games"

    @property
    def downloads_dir(self) -> Path:
        return self.public_dir / "downloads"

    @property
    def renpy_vendor_dir(self) -> Path:
        return self.site_root / "vendor" / "renpy"

    @property
    def sdk_root(self) -> Path:
        """Expected location of the Ren'Py SDK for the configured version."""
        if self.sdk_root_override is not None:
            return self.sdk_root_override
        return self.renpy_vendor_dir / f"renpy-{self.renpy_version}"

    def destination_for(self, game_id: str) -> Path:
        return self.games_dir / game_id

    def default_thumbnail(self, game_id: str) -> str:
        return f"{THUMBNAIL_URL_PREFIX}{game_id}.png"

    def public_path(self, url_path: str) -> Path:
        """Map a public URL path such as /images/games/x.png to a file."""
        return self.public_dir / url_path.lstrip("/")
