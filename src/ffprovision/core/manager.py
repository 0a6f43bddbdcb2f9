"""Core manager: the facade a host application talks to.

Construct one :class:`FfmpegManager` at startup and pass it around; it
owns the :class:`~ffprovision.core.models.InstallationState` shared by
the locator and the installer.  Use
:func:`ffprovision.infra.factory.build_manager` for the default wiring.
"""

from __future__ import annotations

import logging
from pathlib import Path

from ffprovision.core.cancellation import CancellationToken
from ffprovision.core.installer import FfmpegInstaller
from ffprovision.core.models import (
    VERSION_ERROR,
    VERSION_NOT_INSTALLED,
    InstallationState,
    InstallResult,
)
from ffprovision.core.protocols import (
    SETTING_AUTO_INSTALL,
    Locator,
    Prompter,
    Settings,
    Verifier,
)
from ffprovision.exceptions import NotExecutableError


_LOGGER = logging.getLogger(__name__)

YES = "Yes"
NO = "No"


class FfmpegManager:
    """Locate, install and verify ffmpeg for one host application."""

    def __init__(
        self,
        state: InstallationState,
        *,
        locator: Locator,
        installer: FfmpegInstaller,
        verifier: Verifier,
        settings: Settings,
        prompter: Prompter,
    ) -> None:
        self.state = state
        self._locator = locator
        self._installer = installer
        self._verifier = verifier
        self._settings = settings
        self._prompter = prompter

    # ------------------------------------------------------------------
    # Public API
    # ------------------------------------------------------------------

    def locate(self) -> Path | str | None:
        """Return a working ffmpeg executable, or ``None``."""
        return self._locator.resolve()

    def install_result(
        self,
        force: bool = False,
        cancel_token: CancellationToken | None = None,
    ) -> InstallResult:
        return self._installer.install(force=force, cancel_token=cancel_token)

    def install(
        self,
        force: bool = False,
        cancel_token: CancellationToken | None = None,
    ) -> bool:
        """Install ffmpeg; ``True`` when a working executable is in place."""
        return bool(self.install_result(force=force, cancel_token=cancel_token))

    def probe_version(self) -> str:
        """Return the located ffmpeg's version.

        Returns ``"not installed"`` when nothing is found and ``"error"``
        when the located executable fails its probe; in that case the
        cached path is dropped so the next lookup searches again.
        """
        path = self.locate()
        if path is None:
            return VERSION_NOT_INSTALLED
        try:
            return self._verifier.probe(path)
        except NotExecutableError as exc:
            _LOGGER.warning("ffmpeg at %s failed its version probe: %s", path, exc)
            if self.state.cached_path == path:
                self.state.clear()
            return VERSION_ERROR

    def ensure(self, cancel_token: CancellationToken | None = None) -> Path | str | None:
        """Locate ffmpeg, offering to install it when it is missing."""
        existing = self.locate()
        if existing is not None:
            return existing

        if not self._settings.get(SETTING_AUTO_INSTALL, True):
            self._prompter.notify(
                "FFmpeg is required. Install it or enable automatic installation in settings.",
                level="error",
            )
            return None

        choice = self._prompter.confirm(
            "FFmpeg is not installed. Download it automatically (~40-80MB)?",
            [YES, NO],
        )
        if choice != YES:
            _LOGGER.info("Automatic install declined")
            return None
        if not self.install(cancel_token=cancel_token):
            return None
        return self.locate()
