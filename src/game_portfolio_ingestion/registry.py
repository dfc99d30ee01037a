"""Source registry for factory-based package opening.

This module provides a central registry for package accessor factories,
so the pipeline can open a zip archive or a directory without knowing
which implementation handles it.
"""

import importlib
import logging
from pathlib import Path
from typing import TYPE_CHECKING, Callable

from .core.errors import InputError

if TYPE_CHECKING:
    from .sources.base import PackageSource

logger = logging.getLogger(__name__)


class SourceRegistry:
    """Central registry for package accessor factories.

    Platforms register a factory plus a predicate that decides whether a
    given path is theirs. Platforms register themselves when imported, and
    the registry can automatically discover all available platforms.
    """

    _factories: dict[str, Callable[..., "PackageSource"]] = {}
    _matchers: dict[str, Callable[[Path], bool]] = {}

    @classmethod
    def register_factory(
        cls,
        name: str,
        factory: Callable[..., "PackageSource"],
        matcher: Callable[[Path], bool] | None = None,
    ) -> None:
        """Register a factory function for creating package sources.

        Args:
            name: Name of the source kind (e.g., 'zip', 'directory')
            factory: Callable that creates a PackageSource instance
            matcher: Predicate telling whether a path belongs to this kind

        Example:
            >>> SourceRegistry.register_factory('zip', ZipPackageSource, is_zip)
        """
        cls._factories[name] = factory
        if matcher is not None:
            cls._matchers[name] = matcher

    @classmethod
    def create_source(cls, source_name: str, **kwargs) -> "PackageSource":
        """Create a package source of a named kind.

        Raises:
            ValueError: If source_name is not registered
        """
        if source_name not in cls._factories:
            available = ", ".join(cls._factories.keys()) or "none"
            raise ValueError(
                f"Unknown source: '{source_name}'. Available sources: {available}"
            )
        return cls._factories[source_name](**kwargs)

    @classmethod
    def open(cls, path: Path) -> "PackageSource":
        """Open whatever lives at ``path`` with the first matching platform.

        Raises:
            InputError: If the path is missing or no platform accepts it
        """
        if not path.exists():
            raise InputError(f"Path not found: {path.resolve()}")

        for name, matcher in cls._matchers.items():
            if matcher(path):
                logger.debug("Opening %s as %s", path, name)
                return cls.create_source(name, path=path)

        raise InputError(
            f"Unsupported package: {path}. Expected a zip archive or a directory."
        )

    @classmethod
    def discover_platforms(cls) -> None:
        """Auto-discover and import all platforms.

        Iterates through the platforms/ directory and imports each platform
        module, which registers itself via its __init__.py. Platforms with
        missing dependencies are skipped.
        """
        platforms_dir = Path(__file__).parent / "platforms"

        if not platforms_dir.exists():
            return

        for platform_path in sorted(platforms_dir.iterdir()):
            if not platform_path.is_dir():
                continue

            if not (platform_path / "__init__.py").exists():
                continue

            platform_name = platform_path.name

            try:
                importlib.import_module(
                    f".platforms.{platform_name}",
                    package="game_portfolio_ingestion",
                )
            except ImportError as e:
                logger.debug("Skipping platform %s: %s", platform_name, e)
