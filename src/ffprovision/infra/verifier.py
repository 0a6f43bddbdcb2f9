"""Infrastructure: ffmpeg version probe.

A candidate executable is considered genuine when ``<exe> -version``
exits with status 0.  The version token is parsed from the first line
of output; an unrecognisable banner yields :data:`VERSION_UNKNOWN`
instead of a failure.
"""

from __future__ import annotations

import logging
import re
import subprocess
from pathlib import Path

from ffprovision.core.models import VERSION_UNKNOWN
from ffprovision.core.protocols import CommandRunner
from ffprovision.exceptions import NotExecutableError
from ffprovision.infra.process import SubprocessRunner, first_line


_LOGGER = logging.getLogger(__name__)

PROBE_TIMEOUT: float = 15.0

_VERSION_PATTERN = re.compile(r"version\s+(\S+)")


def parse_version(output: str) -> str:
    """Extract the version token from ``-version`` output.

    >>> parse_version("ffmpeg version 6.1.1 Copyright (c) 2000-2023")
    '6.1.1'
    """
    match = _VERSION_PATTERN.search(first_line(output))
    return match.group(1) if match else VERSION_UNKNOWN


class VersionVerifier:
    """Concrete :class:`~ffprovision.core.protocols.Verifier`."""

    def __init__(self, runner: CommandRunner | None = None) -> None:
        self._runner: CommandRunner = runner or SubprocessRunner()

    def probe(self, executable: Path | str) -> str:
        """Run ``executable -version`` and return the parsed version.

        Raises
        ------
        NotExecutableError
            On a non-zero exit, a missing file, a permission error or a
            timeout.
        """
        try:
            result = self._runner.run([str(executable), "-version"], timeout=PROBE_TIMEOUT)
        except (OSError, subprocess.SubprocessError) as exc:
            raise NotExecutableError(
                f"Cannot run {executable}: {exc}",
            ) from exc

        if not result.ok:
            detail = first_line(result.stderr) or f"exit status {result.returncode}"
            raise NotExecutableError(f"{executable} -version failed ({detail})")

        version = parse_version(result.stdout or result.stderr)
        _LOGGER.debug("Probed %s: version %s", executable, version)
        return version

    def is_runnable(self, executable: Path | str) -> bool:
        try:
            self.probe(executable)
        except NotExecutableError:
            return False
        return True
