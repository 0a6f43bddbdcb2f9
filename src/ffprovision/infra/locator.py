"""Infrastructure: find an ffmpeg executable that already works.

Resolution order (first hit wins):

0. A user-configured override path (``ffmpeg_path`` setting).
1. The path cached in :class:`~ffprovision.core.models.InstallationState`,
   while it still exists on disk.
2. The bundled install directory under the storage root.
3. The system search path (``where`` on Windows, :func:`shutil.which`
   elsewhere) and, as a last resort, the bare ``ffmpeg`` command.

Every candidate except the cached one must pass a ``-version`` probe;
a broken binary is skipped, never returned.
"""

from __future__ import annotations

import logging
import shutil
import subprocess
from collections.abc import Callable
from pathlib import Path

from ffprovision.core.catalog import executable_name_for
from ffprovision.core.layout import bundled_executable
from ffprovision.core.models import InstallationState, PlatformKey
from ffprovision.core.protocols import (
    SETTING_FFMPEG_PATH,
    CommandRunner,
    Settings,
    Storage,
    Verifier,
)
from ffprovision.exceptions import NotExecutableError
from ffprovision.infra.platform_info import detect_platform
from ffprovision.infra.process import SubprocessRunner, first_line
from ffprovision.infra.verifier import VersionVerifier


_LOGGER = logging.getLogger(__name__)

BARE_COMMAND: str = "ffmpeg"


class FfmpegLocator:
    """Concrete :class:`~ffprovision.core.protocols.Locator`."""

    def __init__(
        self,
        state: InstallationState,
        *,
        storage: Storage,
        settings: Settings,
        verifier: Verifier | None = None,
        runner: CommandRunner | None = None,
        platform_key: PlatformKey | None = None,
        which: Callable[[str], str | None] = shutil.which,
    ) -> None:
        self._state = state
        self._storage = storage
        self._settings = settings
        self._runner: CommandRunner = runner or SubprocessRunner()
        self._verifier: Verifier = verifier or VersionVerifier(self._runner)
        self._platform: PlatformKey = platform_key or detect_platform()
        self._which = which

    # ------------------------------------------------------------------
    # Public API
    # ------------------------------------------------------------------

    def resolve(self) -> Path | str | None:
        """Return a working ffmpeg path, or ``None`` when none is found."""
        for source, lookup in (
            ("settings override", self._from_override),
            ("cache", self._from_cache),
            ("install directory", self._from_install_dir),
            ("system PATH", self._from_system_path),
        ):
            found = lookup()
            if found is not None:
                _LOGGER.info("Using ffmpeg from %s: %s", source, found)
                self._state.adopt(found)
                return found
        _LOGGER.info("ffmpeg not found")
        return None

    # ------------------------------------------------------------------
    # Individual sources
    # ------------------------------------------------------------------

    def _from_override(self) -> Path | None:
        raw = self._settings.get(SETTING_FFMPEG_PATH, None)
        if not raw:
            return None
        candidate = Path(str(raw)).expanduser()
        if candidate.is_file() and self._probes(candidate):
            return candidate
        _LOGGER.warning("Configured ffmpeg path %s is not usable; ignoring", candidate)
        return None

    def _from_cache(self) -> Path | str | None:
        cached = self._state.cached_path
        if cached is None:
            return None
        if cached == BARE_COMMAND or Path(cached).exists():
            return cached
        _LOGGER.debug("Cached ffmpeg path %s vanished", cached)
        self._state.clear()
        return None

    def _from_install_dir(self) -> Path | None:
        candidate = bundled_executable(
            self._storage, executable_name_for(self._platform.system),
        )
        if candidate.exists() and self._probes(candidate):
            return candidate
        return None

    def _from_system_path(self) -> Path | str | None:
        resolved = self._resolve_on_path()
        if resolved is not None and self._probes(resolved):
            return resolved
        # Last resort: the bare command may still run even when it
        # could not be resolved to an absolute path.
        if self._probes(BARE_COMMAND):
            return BARE_COMMAND
        return None

    def _resolve_on_path(self) -> Path | None:
        if self._platform.is_windows:
            try:
                result = self._runner.run(["where", BARE_COMMAND])
            except (OSError, subprocess.SubprocessError):
                return None
            line = first_line(result.stdout) if result.ok else ""
            return Path(line) if line else None
        found = self._which(BARE_COMMAND)
        return Path(found) if found else None

    def _probes(self, candidate: Path | str) -> bool:
        try:
            self._verifier.probe(candidate)
        except NotExecutableError as exc:
            _LOGGER.debug("Probe of %s failed: %s", candidate, exc)
            return False
        return True
