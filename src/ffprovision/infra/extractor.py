"""Infrastructure: archive extraction via the platform's own tools.

Dispatch is purely on the archive file name:

* ``.zip``: ``Expand-Archive`` through PowerShell on Windows, ``unzip``
  elsewhere.
* ``.tar.xz`` / ``.tar.gz`` / ``.tgz`` / ``.tar.bz2``: ``tar`` with the
  top-level directory stripped.

When the tool is missing or fails, the error names the utility the user
has to install and appends the tool's own message.
"""

from __future__ import annotations

import logging
import shutil
import subprocess
from pathlib import Path

from ffprovision.core.models import PlatformKey
from ffprovision.core.protocols import CommandResult, CommandRunner
from ffprovision.exceptions import ExtractionError, ExtractionToolMissingError
from ffprovision.infra.platform_info import detect_platform
from ffprovision.infra.process import SubprocessRunner, first_line


_LOGGER = logging.getLogger(__name__)

EXTRACT_TIMEOUT: float = 600.0

ZIP_SUFFIXES: tuple[str, ...] = (".zip",)
TARBALL_SUFFIXES: tuple[str, ...] = (".tar.xz", ".tar.gz", ".tgz", ".tar.bz2", ".txz")

_POWERSHELL_EXPAND = (
    "Expand-Archive -LiteralPath $env:FFPROVISION_ARCHIVE "
    "-DestinationPath $env:FFPROVISION_DEST -Force"
)

_ZIP_WINDOWS_MESSAGE = (
    "Extraction failed: PowerShell Expand-Archive failed. "
    "Ensure PowerShell is available and try again."
)
_ZIP_POSIX_MESSAGE = (
    "Extraction failed: `unzip` is not available or failed. "
    "Install `unzip` and try again."
)
_TAR_MESSAGE = (
    "Extraction failed: `tar` is not available or the archive is corrupted. "
    "Install `tar` and try again."
)


def archive_kind(archive: Path) -> str | None:
    """Return ``"zip"``, ``"tar"`` or ``None`` from *archive*'s name."""
    name = archive.name.lower()
    if name.endswith(ZIP_SUFFIXES):
        return "zip"
    if name.endswith(TARBALL_SUFFIXES):
        return "tar"
    return None


class ArchiveExtractor:
    """Concrete :class:`~ffprovision.core.protocols.Extractor`."""

    def __init__(
        self,
        runner: CommandRunner | None = None,
        platform_key: PlatformKey | None = None,
    ) -> None:
        self._runner: CommandRunner = runner or SubprocessRunner()
        self._platform: PlatformKey = platform_key or detect_platform()

    # ------------------------------------------------------------------
    # Protocol method
    # ------------------------------------------------------------------

    def extract(
        self,
        archive: Path,
        destination: Path,
        inner_path: str,
        executable_name: str,
    ) -> None:
        """Unpack *archive* into *destination*.

        When *inner_path* is set the executable is copied from
        ``destination/inner_path/executable_name`` to
        ``destination/executable_name``.  A missing nested file is not an
        error here; callers check for the executable afterwards.

        Raises
        ------
        ExtractionToolMissingError
            When the extraction utility is missing or exits non-zero.
        ExtractionError
            When the archive type is not recognised.
        """
        destination.mkdir(parents=True, exist_ok=True)
        kind = archive_kind(archive)
        _LOGGER.info("Extracting %s (%s) into %s", archive, kind, destination)

        if kind == "zip":
            self._extract_zip(archive, destination)
        elif kind == "tar":
            self._extract_tarball(archive, destination)
        else:
            raise ExtractionError(f"Unsupported archive format: {archive.name}")

        if inner_path:
            self._promote_nested_executable(destination, inner_path, executable_name)

    # ------------------------------------------------------------------
    # Format handlers
    # ------------------------------------------------------------------

    def _extract_zip(self, archive: Path, destination: Path) -> None:
        if self._platform.is_windows:
            self._run_tool(
                [
                    "powershell.exe",
                    "-NoProfile",
                    "-NonInteractive",
                    "-Command",
                    _POWERSHELL_EXPAND,
                ],
                failure_message=_ZIP_WINDOWS_MESSAGE,
                env={
                    "FFPROVISION_ARCHIVE": str(archive),
                    "FFPROVISION_DEST": str(destination),
                },
            )
            return
        self._run_tool(
            ["unzip", "-o", str(archive), "-d", str(destination)],
            failure_message=_ZIP_POSIX_MESSAGE,
        )

    def _extract_tarball(self, archive: Path, destination: Path) -> None:
        self._run_tool(
            ["tar", "-xf", str(archive), "-C", str(destination), "--strip-components=1"],
            failure_message=_TAR_MESSAGE,
        )

    def _run_tool(
        self,
        args: list[str],
        *,
        failure_message: str,
        env: dict[str, str] | None = None,
    ) -> CommandResult:
        try:
            result = self._runner.run(args, timeout=EXTRACT_TIMEOUT, env=env)
        except (OSError, subprocess.SubprocessError) as exc:
            raise ExtractionToolMissingError(
                f"{failure_message} ({exc})",
                hint=f"`{args[0]}` could not be started.",
            ) from exc
        if not result.ok:
            detail = first_line(result.stderr) or first_line(result.stdout)
            suffix = f" ({detail})" if detail else f" (exit status {result.returncode})"
            raise ExtractionToolMissingError(failure_message + suffix)
        return result

    # ------------------------------------------------------------------
    # Layout normalisation
    # ------------------------------------------------------------------

    @staticmethod
    def _promote_nested_executable(
        destination: Path,
        inner_path: str,
        executable_name: str,
    ) -> None:
        nested = destination.joinpath(*inner_path.split("/")) / executable_name
        if not nested.is_file():
            _LOGGER.warning(
                "Expected %s inside the archive but it is missing", nested,
            )
            return
        final = destination / executable_name
        shutil.copyfile(nested, final)
        shutil.copymode(nested, final)
        _LOGGER.debug("Copied %s to %s", nested, final)
