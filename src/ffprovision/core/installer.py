"""Core installer: drives one ffmpeg acquisition attempt.

The installer is a small state machine::

    IDLE -> RESOLVING_DESCRIPTOR -> [ALTERNATE_PATH] -> DIRECT_DOWNLOAD
         -> EXTRACTING -> ACTIVATING -> INSTALLED
                                      \\-> FAILED (from any stage)

It owns no I/O of its own beyond the install directory and its staging
area: downloading, extracting and probing go through the collaborators
injected at construction time.  This is also the only place where
:class:`~ffprovision.exceptions.FfprovisionError` subclasses are turned
into :class:`~ffprovision.core.models.InstallResult` values and shown to
the user.

Guarantees
----------
* At most one attempt runs per :class:`InstallationState`; a concurrent
  caller gets :attr:`InstallOutcome.BUSY` immediately.
* The scratch archive and staging directory are removed on every exit.
* The previously installed executable and the cached path only change
  when the new executable has been verified and activated.
* Progress reported to the prompter never decreases.
"""

from __future__ import annotations

import logging
from pathlib import Path

from ffprovision.core.activation import (
    activate,
    make_executable,
    new_staging_dir,
    remove_file,
    remove_tree,
)
from ffprovision.core.cancellation import CancellationToken
from ffprovision.core.catalog import resolve_descriptor
from ffprovision.core.layout import install_dir as layout_install_dir
from ffprovision.core.layout import storage_root
from ffprovision.core.models import (
    BinaryDescriptor,
    DownloadTarget,
    InstallationState,
    InstallOutcome,
    InstallResult,
    InstallStage,
    PlatformKey,
)
from ffprovision.core.protocols import (
    AlternateInstaller,
    Extractor,
    ProgressUpdate,
    Prompter,
    Storage,
    Transport,
    Verifier,
)
from ffprovision.exceptions import (
    DownloadCanceledError,
    ExtractionError,
    FfprovisionError,
    InstallBusyError,
    UnsupportedPlatformError,
)


_LOGGER = logging.getLogger(__name__)

PROGRESS_TITLE: str = "Downloading FFmpeg"

# Progress milestones on the 0..100 scale; the download owns 0..80.
EXTRACT_PERCENT: int = 90
VERIFY_PERCENT: int = 95
DONE_PERCENT: int = 100


class MonotonicProgress:
    """Wraps an ``update`` callback so reported percentages never regress.

    Values are clamped to ``0..100``; a value lower than the last one
    is raised to it, so a message can still change without the bar
    moving backwards.  A repeated value with no message is dropped.
    """

    def __init__(self, update: ProgressUpdate) -> None:
        self._update = update
        self.last_percent = 0
        self._reported = False

    def __call__(self, percent: float, message: str | None = None) -> None:
        value = int(max(0, min(DONE_PERCENT, percent)))
        value = max(value, self.last_percent)
        if value == self.last_percent and message is None and self._reported:
            return
        self.last_percent = value
        self._reported = True
        self._update(value, message)


class FfmpegInstaller:
    """Installs ffmpeg into the app-owned storage root.

    Parameters
    ----------
    state:
        Shared cache and single-flight guard.
    platform_key:
        Normalised host platform; selects the catalog entry.
    alternate:
        Optional platform-specific flow tried first on Apple Silicon.
    """

    def __init__(
        self,
        state: InstallationState,
        *,
        prompter: Prompter,
        transport: Transport,
        extractor: Extractor,
        verifier: Verifier,
        storage: Storage,
        platform_key: PlatformKey,
        alternate: AlternateInstaller | None = None,
    ) -> None:
        self._state = state
        self._prompter = prompter
        self._transport = transport
        self._extractor = extractor
        self._verifier = verifier
        self._storage = storage
        self._platform = platform_key
        self._alternate = alternate
        self.stage: InstallStage = InstallStage.IDLE

    # ------------------------------------------------------------------
    # Public API
    # ------------------------------------------------------------------

    def install(
        self,
        force: bool = False,
        cancel_token: CancellationToken | None = None,
    ) -> InstallResult:
        """Run one install attempt and report its outcome.

        Never raises for expected failures; the returned
        :class:`InstallResult` carries the mapped exception instead.
        """
        if not self._state.try_begin():
            _LOGGER.info("Install requested while another one is running")
            busy = InstallBusyError("FFmpeg download already in progress...")
            self._prompter.notify(str(busy))
            return InstallResult(InstallOutcome.BUSY, error=busy)

        token = cancel_token or CancellationToken()
        try:
            return self._install_locked(force, token)
        finally:
            self._state.end()

    # ------------------------------------------------------------------
    # State machine
    # ------------------------------------------------------------------

    def _install_locked(self, force: bool, token: CancellationToken) -> InstallResult:
        self._enter(InstallStage.RESOLVING_DESCRIPTOR)
        try:
            descriptor = resolve_descriptor(self._platform)
        except UnsupportedPlatformError as exc:
            self._enter(InstallStage.FAILED)
            self._prompter.notify(str(exc), level="error")
            return InstallResult(InstallOutcome.UNSUPPORTED, error=exc)

        install_dir = layout_install_dir(self._storage)
        existing = install_dir / descriptor.executable_name
        if not force and existing.exists():
            self._enter(InstallStage.IDLE)
            self._prompter.notify("FFmpeg is already installed.")
            return InstallResult(InstallOutcome.ALREADY_INSTALLED, path=existing)

        root = storage_root(self._storage)
        target: DownloadTarget | None = None
        try:
            root.mkdir(parents=True, exist_ok=True)
            install_dir.mkdir(parents=True, exist_ok=True)
            target = DownloadTarget(
                install_dir=install_dir,
                archive_path=root / descriptor.archive_name,
                staging_dir=new_staging_dir(root),
                use_alternate_path=self._platform.is_darwin_arm and self._alternate is not None,
            )
            path = self._prompter.report_progress(
                PROGRESS_TITLE,
                lambda update: self._perform(descriptor, target, MonotonicProgress(update), token),
            )
        except DownloadCanceledError as exc:
            self._enter(InstallStage.FAILED)
            _LOGGER.info("Install canceled")
            self._prompter.notify("FFmpeg download canceled.", level="warning")
            return InstallResult(InstallOutcome.CANCELED, error=exc)
        except FfprovisionError as exc:
            return self._fail(exc)
        except OSError as exc:
            return self._fail(FfprovisionError(f"Filesystem error: {exc}"), cause=exc)
        finally:
            if target is not None:
                remove_file(target.archive_path)
                remove_tree(target.staging_dir)

        self._enter(InstallStage.INSTALLED)
        self._prompter.notify("FFmpeg installed successfully!")
        return InstallResult(InstallOutcome.INSTALLED, path=path)

    def _perform(
        self,
        descriptor: BinaryDescriptor,
        target: DownloadTarget,
        update: MonotonicProgress,
        token: CancellationToken,
    ) -> Path | str:
        if target.use_alternate_path and self._alternate is not None:
            self._enter(InstallStage.ALTERNATE_PATH)
            if self._alternate.install(target.install_dir, descriptor, update, token):
                adopted = self._state.cached_path
                return adopted if adopted is not None else target.install_dir / descriptor.executable_name
            _LOGGER.info("Alternate path declined or failed; using direct download")

        self._enter(InstallStage.DIRECT_DOWNLOAD)
        token.raise_if_canceled()
        self._transport.download(descriptor.url, target.archive_path, update, token)
        token.raise_if_canceled()

        self._enter(InstallStage.EXTRACTING)
        update(EXTRACT_PERCENT, "Extracting...")
        self._extractor.extract(
            target.archive_path,
            target.staging_dir,
            descriptor.inner_path,
            descriptor.executable_name,
        )
        staged = target.staging_dir / descriptor.executable_name
        if not staged.is_file():
            raise ExtractionError(
                f"{descriptor.executable_name} was not found in the downloaded archive",
            )
        if not self._platform.is_windows:
            make_executable(staged)

        self._enter(InstallStage.ACTIVATING)
        update(VERIFY_PERCENT, "Verifying...")
        self._verifier.probe(staged)
        final = activate(staged, target.install_dir)
        self._state.adopt(final)
        update(DONE_PERCENT, "Done")
        return final

    # ------------------------------------------------------------------
    # Helpers
    # ------------------------------------------------------------------

    def _enter(self, stage: InstallStage) -> None:
        _LOGGER.debug("Installer stage: %s -> %s", self.stage.value, stage.value)
        self.stage = stage

    def _fail(self, exc: FfprovisionError, *, cause: Exception | None = None) -> InstallResult:
        if cause is not None:
            exc.__cause__ = cause
        self._enter(InstallStage.FAILED)
        _LOGGER.warning("Install failed: %s", exc, exc_info=_LOGGER.isEnabledFor(logging.DEBUG))
        self._prompter.notify(f"FFmpeg install error: {exc}", level="error")
        return InstallResult(InstallOutcome.FAILED, error=exc)
