"""Ren'Py SDK discovery.

The SDK is an external collaborator: we only need to find its install, check
that the web platform is present and pick the launcher for this OS.
"""

import logging
import sys
from dataclasses import dataclass
from pathlib import Path

from .core.config import Settings
from .core.errors import ExternalToolError

logger = logging.getLogger(__name__)

WEB_SUPPORT_DIR = "web"
INSTALL_HINT = "Install the Ren'Py SDK and Renpyweb into vendor/renpy (or set RENPY_SDK_ROOT)."


@dataclass(frozen=True)
class RenpySdk:
    root: Path
    launcher: Path
    cwd: Path


def get_sdk_root(settings: Settings) -> Path | None:
    """Return the configured SDK root if it exists."""
    root = settings.sdk_root
    return root if root.is_dir() else None


def has_web_support(sdk_root: Path) -> bool:
    return (sdk_root / WEB_SUPPORT_DIR).is_dir()


def get_launcher(sdk_root: Path, platform: str | None = None) -> Path | None:
    """Pick the launcher executable for ``platform`` (defaults to this OS)."""
    platform = platform or sys.platform
    candidates: list[Path] = []
    if platform.startswith("win"):
        candidates.append(sdk_root / "renpy.exe")
    elif platform == "darwin":
        candidates.append(sdk_root / "renpy.app" / "Contents" / "MacOS" / "renpy")
        candidates.append(sdk_root / "renpy.sh")
    else:
        candidates.append(sdk_root / "renpy.sh")

    for candidate in candidates:
        if candidate.exists():
            return candidate
    return None


def get_launcher_cwd(sdk_root: Path, launcher: Path, platform: str | None = None) -> Path:
    """Mac app bundles must run from their MacOS directory; others from the SDK root."""
    platform = platform or sys.platform
    if platform == "darwin" and "renpy.app" in launcher.parts:
        return launcher.parent
    return sdk_root


def locate_sdk(settings: Settings, platform: str | None = None) -> RenpySdk:
    """Find a usable SDK install or fail with the specific missing piece.

    Raises:
        ExternalToolError: SDK missing, web support missing, or no launcher
    """
    sdk_root = get_sdk_root(settings)
    if sdk_root is None:
        raise ExternalToolError(
            f"Ren'Py project detected but SDK {settings.renpy_version} is not installed "
            f"at {settings.sdk_root}. {INSTALL_HINT}"
        )

    if not has_web_support(sdk_root):
        raise ExternalToolError(
            f"Ren'Py project detected but Renpyweb is not installed in {sdk_root}. {INSTALL_HINT}"
        )

    launcher = get_launcher(sdk_root, platform)
    if launcher is None:
        raise ExternalToolError(f"Ren'Py launcher not found in SDK: {sdk_root}")

    logger.debug("Using Ren'Py launcher %s", launcher)
    return RenpySdk(
        root=sdk_root,
        launcher=launcher,
        cwd=get_launcher_cwd(sdk_root, launcher, platform),
    )
