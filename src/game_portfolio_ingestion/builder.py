"""Build orchestration for Ren'Py projects.

Turns a Ren'Py project that has been materialized into the destination into
its web build:

1. Check the SDK (install, web support, launcher).
2. Make sure the project has an ``update.pem`` and move icon files aside.
3. Run ``<launcher> <sdk> distribute --package web <project>`` with a timeout.
4. Find ``<project>-*-dists/*web*`` beside the project and install it into
   the destination, replacing the project source.
5. Hoist a web bundle nested one folder deep up to the destination root.
"""

import logging
import re
import shutil
import subprocess
import tempfile
import time
from collections.abc import Iterator
from contextlib import contextmanager
from pathlib import Path
from typing import Callable

from cryptography.hazmat.primitives import serialization
from cryptography.hazmat.primitives.asymmetric import ec

from .core.config import Settings
from .core.errors import ExternalToolError, StructureError
from .core.types import BuildResult
from .entrypoint import list_entry_candidates
from .platforms.zip.source import ZipPackageSource
from .sdk import RenpySdk, locate_sdk

logger = logging.getLogger(__name__)

SIGNING_KEY_FILE = "update.pem"
ICON_FILES = ("icon.ico", "icon.icns")
HIDDEN_ICON_SUFFIX = ".bak"
DISTS_SUFFIX = "-dists"
TARGET_PLATFORM = "web"
MAX_DIAGNOSTIC_CHARS = 4000

Runner = Callable[..., subprocess.CompletedProcess]


def ensure_signing_key(project: Path) -> bool:
    """Write a throwaway EC private key to update.pem if none exists.

    The web distribute step only checks the file is there; the key is never
    used to sign anything we publish.

    Returns:
        True if a key was generated
    """
    pem_path = project / SIGNING_KEY_FILE
    if pem_path.exists():
        return False

    private_key = ec.generate_private_key(ec.SECP256R1())
    pem = private_key.private_bytes(
        encoding=serialization.Encoding.PEM,
        format=serialization.PrivateFormat.PKCS8,
        encryption_algorithm=serialization.NoEncryption(),
    )
    pem_path.write_bytes(pem)
    logger.debug("Generated signing key placeholder %s", pem_path)
    return True


@contextmanager
def hidden_icons(project: Path) -> Iterator[list[Path]]:
    """Rename project icon files out of the way for the duration of a build.

    Distribute processes icon.ico even for web builds, and a malformed icon
    makes it crash. Icons are restored on every exit path.

    Yields:
        Original paths of the icons that were hidden
    """
    hidden: list[Path] = []
    try:
        for name in ICON_FILES:
            icon = project / name
            if icon.exists():
                icon.rename(icon.with_name(name + HIDDEN_ICON_SUFFIX))
                hidden.append(icon)
        yield hidden
    finally:
        for icon in hidden:
            backup = icon.with_name(icon.name + HIDDEN_ICON_SUFFIX)
            try:
                if backup.exists():
                    backup.rename(icon)
            except OSError as e:
                logger.warning("Failed to restore %s: %s", icon, e)


def _tail(*outputs: str | bytes | None) -> str:
    text = "\n".join(
        out.decode("utf-8", errors="replace") if isinstance(out, bytes) else out
        for out in outputs
        if out
    )
    return text[-MAX_DIAGNOSTIC_CHARS:]


def run_distribute(
    sdk: RenpySdk,
    project: Path,
    timeout: float,
    runner: Runner = subprocess.run,
) -> str:
    """Run the web distribute command and wait for it.

    Returns:
        Combined output of the build

    Raises:
        ExternalToolError: On non-zero exit, timeout, or launch failure
    """
    command = [
        str(sdk.launcher),
        str(sdk.root),
        "distribute",
        "--package",
        TARGET_PLATFORM,
        str(project),
    ]
    logger.info("Building Ren'Py project to web...")
    logger.debug("Running %s (cwd=%s)", command, sdk.cwd)

    try:
        completed = runner(
            command,
            cwd=str(sdk.cwd),
            capture_output=True,
            text=True,
            timeout=timeout,
        )
    except subprocess.TimeoutExpired as e:
        raise ExternalToolError(
            f"Ren'Py web build timed out after {timeout:g} seconds.",
            diagnostics=_tail(e.stdout, e.stderr),
        ) from e
    except OSError as e:
        raise ExternalToolError(f"Failed to start Ren'Py launcher {sdk.launcher}: {e}") from e

    output = _tail(completed.stdout, completed.stderr)
    if completed.returncode != 0:
        raise ExternalToolError(
            f"Ren'Py web build failed with exit code {completed.returncode}. "
            "Check the SDK, Renpyweb and the build log below.",
            diagnostics=output,
        )
    return output


def dists_name_prefix(project: Path) -> str:
    """Lowercased project name with whitespace runs replaced by underscores."""
    return re.sub(r"\s+", "_", project.name).lower()


def locate_build_output(project: Path) -> BuildResult:
    """Find the web output distribute wrote beside the project.

    Raises:
        ExternalToolError: If the dists directory or web entry is missing
    """
    parent = project.parent
    prefix = dists_name_prefix(project)
    dists = [
        entry
        for entry in parent.iterdir()
        if entry.is_dir()
        and entry.name.endswith(DISTS_SUFFIX)
        and entry.name.lower().startswith(prefix)
    ]
    if not dists:
        raise ExternalToolError(
            f"Ren'Py web build output not found under {parent} "
            f"(expected a *{DISTS_SUFFIX} directory)."
        )
    # Newest first, in case stale output from an older build is lying around
    dists_dir = max(dists, key=lambda d: (d.stat().st_mtime, d.name))

    web_entries = sorted(
        entry for entry in dists_dir.iterdir() if TARGET_PLATFORM in entry.name.lower()
    )
    if not web_entries:
        raise ExternalToolError(
            f"Ren'Py web build output (web folder or zip) not found under {dists_dir}."
        )

    web = web_entries[0]
    if web.is_dir():
        return BuildResult(output_root=web, is_archive=False)
    if web.suffix.lower() == ".zip":
        return BuildResult(output_root=web, is_archive=True)
    raise ExternalToolError(f"Unexpected Ren'Py web build output: {web}")


def install_build_output(result: BuildResult, destination: Path) -> None:
    """Replace the destination's contents with the web build.

    The output is staged in a temporary directory first since it may live
    inside the destination itself.
    """
    staging = Path(tempfile.mkdtemp(prefix=f"renpy-web-{destination.name}-"))
    try:
        if result.is_archive:
            with ZipPackageSource(result.output_root) as archive:
                archive.extract_all(staging)
        else:
            shutil.copytree(result.output_root, staging, dirs_exist_ok=True)

        shutil.rmtree(destination)
        shutil.copytree(staging, destination)
    except OSError as e:
        raise ExternalToolError(f"Failed to install Ren'Py web build: {e}") from e
    finally:
        shutil.rmtree(staging, ignore_errors=True)


def hoist_nested_bundle(destination: Path) -> bool:
    """Move a web bundle nested one level deep up to the destination root.

    Applies only when the root has no HTML file and exactly one immediate
    subdirectory has some. The new tree is assembled in a staging directory
    beside the destination and swapped in once complete.

    Returns:
        True if the destination was rewritten
    """
    if list_entry_candidates(destination):
        return False

    nested = [
        entry
        for entry in sorted(destination.iterdir())
        if entry.is_dir() and list_entry_candidates(entry)
    ]
    if len(nested) != 1:
        return False
    bundle = nested[0]

    staging = Path(tempfile.mkdtemp(prefix=f".{destination.name}-hoist-", dir=destination.parent))
    try:
        for entry in destination.iterdir():
            if entry == bundle:
                continue
            if entry.is_dir():
                shutil.copytree(entry, staging / entry.name)
            else:
                shutil.copy2(entry, staging / entry.name)
        shutil.copytree(bundle, staging, dirs_exist_ok=True)
    except OSError as e:
        shutil.rmtree(staging, ignore_errors=True)
        raise StructureError(f"Failed to flatten nested web build {bundle.name}: {e}") from e

    retired = staging.with_name(staging.name + "-old")
    try:
        destination.rename(retired)
        try:
            staging.rename(destination)
        except OSError:
            retired.rename(destination)
            raise
    except OSError as e:
        shutil.rmtree(staging, ignore_errors=True)
        raise StructureError(f"Failed to swap in flattened web build: {e}") from e
    shutil.rmtree(retired, ignore_errors=True)
    logger.info("Moved nested web build %s/ up to the game root", bundle.name)
    return True


class BuildOrchestrator:
    """Runs the Ren'Py web build for a project inside a destination.

    Example:
        >>> orchestrator = BuildOrchestrator(settings)
        >>> orchestrator.build(destination / "MyVN", destination)
    """

    def __init__(
        self,
        settings: Settings,
        runner: Runner = subprocess.run,
        platform: str | None = None,
    ):
        self.settings = settings
        self.runner = runner
        self.platform = platform

    def check_sdk(self) -> RenpySdk:
        """Verify the SDK preconditions before touching the project."""
        return locate_sdk(self.settings, self.platform)

    def build(self, project: Path, destination: Path) -> BuildResult:
        """Build ``project`` for web and install the result into ``destination``.

        Raises:
            ExternalToolError: Missing SDK pieces, failed build, or output
                that doesn't follow the naming convention
        """
        sdk = self.check_sdk()
        ensure_signing_key(project)

        started = time.time()
        with hidden_icons(project):
            run_distribute(sdk, project, self.settings.build_timeout, self.runner)

        result = locate_build_output(project)
        dists_dir = result.output_root.parent
        install_build_output(result, destination)
        self._discard_dists(dists_dir, destination, started)
        logger.info("Ren'Py web build installed to game directory")

        hoist_nested_bundle(destination)
        return result

    def _discard_dists(self, dists_dir: Path, destination: Path, started: float) -> None:
        # Output inside the destination went away with the project source
        if not dists_dir.exists() or dists_dir.is_relative_to(destination):
            return
        try:
            if dists_dir.stat().st_mtime + 1 < started:
                return
            shutil.rmtree(dists_dir)
        except OSError as e:
            logger.warning("Failed to remove build output %s: %s", dists_dir, e)
