"""Infrastructure: Apple Silicon alternate install path.

On macOS/arm64 the generic catalog build is an Intel binary, so the
installer first tries to obtain a native ffmpeg:

1. Homebrew available: adopt an installed ``ffmpeg`` formula, or offer
   ``brew install ffmpeg``.
2. Homebrew missing: offer to install Homebrew (second consent
   required, it runs a remote script), to download a prebuilt Apple
   Silicon binary, or to cancel.
3. Prebuilt fallback: download the osxexperts archive, compare it with
   the digest published on the osxexperts page, extract, clear the
   quarantine attribute, verify and adopt.

:meth:`HomebrewInstaller.install` never raises: any failure becomes
``False`` and the caller continues with the direct download.
"""

from __future__ import annotations

import enum
import logging
import shutil
import subprocess
from collections.abc import Callable, Sequence
from pathlib import Path

from ffprovision.core.activation import (
    activate,
    make_executable,
    new_staging_dir,
    remove_file,
    remove_tree,
)
from ffprovision.core.cancellation import CancellationToken
from ffprovision.core.layout import storage_root
from ffprovision.core.models import BinaryDescriptor, ChecksumRecord, InstallationState
from ffprovision.core.protocols import (
    CommandResult,
    CommandRunner,
    Extractor,
    ProgressUpdate,
    Prompter,
    Storage,
    Transport,
    Verifier,
)
from ffprovision.exceptions import ChecksumMismatchError
from ffprovision.infra.checksum import checksum_record
from ffprovision.infra.process import SubprocessRunner, first_line


_LOGGER = logging.getLogger(__name__)

FORMULA: str = "ffmpeg"
EXECUTABLE_NAME: str = "ffmpeg"

OSX_ARM_URL: str = "https://www.osxexperts.net/ffmpeg80arm.zip"
OSX_ARM_ARCHIVE: str = "ffmpeg_osx_arm.zip"

HOMEBREW_INSTALL_SCRIPT: str = (
    "https://raw.githubusercontent.com/Homebrew/install/HEAD/install.sh"
)
HOMEBREW_DEFAULT_BREW: str = "/opt/homebrew/bin/brew"

BREW_TIMEOUT: float = 1800.0

# Prompt options
INSTALL_NOW = "Install now"
CANCEL = "Cancel"
INSTALL_HOMEBREW = "Install Homebrew"
DOWNLOAD_BINARY = "Download Apple Silicon binary"
INSTALL = "Install"
CONTINUE = "Continue"


class _Decision(enum.Enum):
    HOMEBREW = "homebrew"
    PREBUILT = "prebuilt"
    CANCEL = "cancel"


class HomebrewInstaller:
    """Concrete :class:`~ffprovision.core.protocols.AlternateInstaller`."""

    def __init__(
        self,
        state: InstallationState,
        *,
        prompter: Prompter,
        transport: Transport,
        extractor: Extractor,
        verifier: Verifier,
        storage: Storage,
        runner: CommandRunner | None = None,
        which: Callable[[str], str | None] = shutil.which,
    ) -> None:
        self._state = state
        self._prompter = prompter
        self._transport = transport
        self._extractor = extractor
        self._verifier = verifier
        self._storage = storage
        self._runner: CommandRunner = runner or SubprocessRunner()
        self._which = which
        self._brew: str = which("brew") or "brew"

    # ------------------------------------------------------------------
    # Protocol method
    # ------------------------------------------------------------------

    def install(
        self,
        install_dir: Path,
        descriptor: BinaryDescriptor,
        update: ProgressUpdate,
        cancel_token: CancellationToken,
    ) -> bool:
        """Try Homebrew, then the prebuilt Apple Silicon binary.

        *descriptor* is the generic catalog entry the caller falls back
        to; it is not used here.
        """
        try:
            return self._run(install_dir, update, cancel_token)
        except Exception as exc:  # noqa: BLE001
            _LOGGER.warning(
                "Apple Silicon install flow failed, falling back to direct download: %s",
                exc,
                exc_info=_LOGGER.isEnabledFor(logging.DEBUG),
            )
            return False

    # ------------------------------------------------------------------
    # Flow
    # ------------------------------------------------------------------

    def _run(
        self,
        install_dir: Path,
        update: ProgressUpdate,
        cancel_token: CancellationToken,
    ) -> bool:
        if self._brew_available():
            if self._adopt_or_install_formula(update):
                return True
        else:
            decision = self._ask_install_homebrew()
            if decision is _Decision.CANCEL:
                _LOGGER.info("Apple Silicon install canceled by user")
                return False
            if decision is _Decision.HOMEBREW and self._install_homebrew_and_formula(update):
                return True

        return self._install_prebuilt(install_dir, update, cancel_token)

    def _brew_available(self) -> bool:
        return self._succeeds([self._brew, "--version"])

    def _adopt_or_install_formula(self, update: ProgressUpdate) -> bool:
        if self._succeeds([self._brew, "list", FORMULA]):
            _LOGGER.info("ffmpeg already installed through Homebrew")
            return self._adopt_formula()

        choice = self._prompter.confirm(
            "Homebrew detected. Install FFmpeg via Homebrew (recommended)?",
            [INSTALL_NOW, CANCEL],
        )
        if choice != INSTALL_NOW:
            return False

        update(5, "Installing via Homebrew...")
        if self._succeeds([self._brew, "install", FORMULA], timeout=BREW_TIMEOUT):
            return self._adopt_formula()
        self._prompter.notify("Homebrew installation failed. Falling back.", level="error")
        return False

    def _ask_install_homebrew(self) -> _Decision:
        choice = self._prompter.confirm(
            "Homebrew not detected. Install Homebrew (recommended)?",
            [INSTALL_HOMEBREW, DOWNLOAD_BINARY, CANCEL],
        )
        if choice == INSTALL_HOMEBREW:
            return _Decision.HOMEBREW
        if choice == DOWNLOAD_BINARY:
            return _Decision.PREBUILT
        return _Decision.CANCEL

    def _install_homebrew_and_formula(self, update: ProgressUpdate) -> bool:
        consent = self._prompter.confirm(
            "Installing Homebrew will run a remote script and may prompt for "
            "your password. Continue?",
            [INSTALL, CANCEL],
            level="warning",
        )
        if consent != INSTALL:
            return False

        update(5, "Installing Homebrew...")
        # The script URL is passed as $0, never spliced into the command.
        installed = self._succeeds(
            ["/bin/bash", "-c", '/bin/bash -c "$(curl -fsSL "$0")"', HOMEBREW_INSTALL_SCRIPT],
            timeout=BREW_TIMEOUT,
        )
        if installed:
            self._brew = self._which("brew") or HOMEBREW_DEFAULT_BREW
            installed = self._succeeds([self._brew, "install", FORMULA], timeout=BREW_TIMEOUT)
        if installed:
            return self._adopt_formula()

        self._prompter.notify(
            "Homebrew or FFmpeg installation failed. Falling back.", level="error",
        )
        return False

    def _adopt_formula(self) -> bool:
        result = self._run_quiet(["which", FORMULA])
        resolved = first_line(result.stdout) if result is not None and result.ok else ""
        path: Path | str = Path(resolved) if resolved else FORMULA
        self._state.adopt(path)
        _LOGGER.info("Adopted Homebrew ffmpeg at %s", path)
        return True

    # ------------------------------------------------------------------
    # Prebuilt fallback
    # ------------------------------------------------------------------

    def _install_prebuilt(
        self,
        install_dir: Path,
        update: ProgressUpdate,
        cancel_token: CancellationToken,
    ) -> bool:
        root = storage_root(self._storage)
        archive = root / OSX_ARM_ARCHIVE
        try:
            update(5, "Downloading Apple Silicon binary (osxexperts)...")
            self._transport.download(OSX_ARM_URL, archive, update, cancel_token)
            self._verify_archive(archive)

            update(90, "Extracting...")
            final = self._extract_and_activate(archive, root, install_dir)
        finally:
            remove_file(archive)

        if final is None:
            return False
        self._state.adopt(final)
        return True

    def _verify_archive(self, archive: Path) -> ChecksumRecord:
        record = checksum_record(archive, self._transport)
        if record.matches is None:
            _LOGGER.info("No published checksum found; proceeding with %s", archive.name)
        elif record.matches:
            _LOGGER.info("Checksum verified for %s", archive.name)
        else:
            choice = self._prompter.confirm(
                "Checksum mismatch for Apple Silicon binary "
                f"(expected {record.expected}, got {record.actual}). Continue anyway?",
                [CONTINUE, CANCEL],
                level="warning",
            )
            if choice != CONTINUE:
                raise ChecksumMismatchError(
                    f"Checksum mismatch for {archive.name}",
                    hint=f"expected {record.expected}, got {record.actual}",
                )
            _LOGGER.warning("Continuing despite checksum mismatch for %s", archive.name)
        return record

    def _extract_and_activate(
        self,
        archive: Path,
        root: Path,
        install_dir: Path,
    ) -> Path | None:
        staging = new_staging_dir(root)
        try:
            self._extractor.extract(archive, staging, "", EXECUTABLE_NAME)
            staged = staging / EXECUTABLE_NAME
            if not staged.is_file():
                _LOGGER.warning("Apple Silicon archive did not contain %s", EXECUTABLE_NAME)
                return None
            self._clear_quarantine(staged)
            make_executable(staged)
            self._verifier.probe(staged)
            return activate(staged, install_dir)
        finally:
            remove_tree(staging)

    def _clear_quarantine(self, path: Path) -> None:
        result = self._run_quiet(["xattr", "-dr", "com.apple.quarantine", str(path)])
        if result is None or not result.ok:
            _LOGGER.debug("No quarantine attribute cleared on %s", path)

    # ------------------------------------------------------------------
    # Process helpers
    # ------------------------------------------------------------------

    def _run_quiet(
        self,
        args: Sequence[str],
        *,
        timeout: float | None = None,
    ) -> CommandResult | None:
        try:
            return self._runner.run(args, timeout=timeout)
        except (OSError, subprocess.SubprocessError) as exc:
            _LOGGER.debug("%s could not run: %s", args[0], exc)
            return None

    def _succeeds(self, args: Sequence[str], *, timeout: float | None = None) -> bool:
        result = self._run_quiet(args, timeout=timeout)
        return result is not None and result.ok

