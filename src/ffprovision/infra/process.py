"""Infrastructure: external process invocation.

Every external program (ffmpeg probes, ``unzip``, ``tar``, ``brew``,
``xattr`` ...) is started through :class:`SubprocessRunner`, always from
a discrete argument list.  No shell strings are ever built, so paths
containing spaces or quotes need no escaping on any platform.
"""

from __future__ import annotations

import logging
import os
import subprocess
from collections.abc import Mapping, Sequence

from ffprovision.core.protocols import CommandResult


_LOGGER = logging.getLogger(__name__)

DEFAULT_TIMEOUT: float = 60.0
"""Seconds before a probe or extraction command is abandoned."""


class SubprocessRunner:
    """Concrete :class:`~ffprovision.core.protocols.CommandRunner`.

    Wraps :func:`subprocess.run` with captured, text-decoded output and
    ``check=False``: callers inspect :attr:`CommandResult.returncode`.
    ``FileNotFoundError`` / ``PermissionError`` /
    ``subprocess.TimeoutExpired`` propagate unchanged so each caller can
    map them to its own domain error.
    """

    def __init__(self, default_timeout: float | None = DEFAULT_TIMEOUT) -> None:
        self._default_timeout = default_timeout

    def run(
        self,
        args: Sequence[str],
        *,
        timeout: float | None = None,
        env: Mapping[str, str] | None = None,
    ) -> CommandResult:
        argv = [str(arg) for arg in args]
        merged_env: dict[str, str] | None = None
        if env:
            merged_env = dict(os.environ)
            merged_env.update(env)

        _LOGGER.debug("Running %s", argv)
        completed = subprocess.run(  # noqa: S603
            argv,
            capture_output=True,
            text=True,
            encoding="utf-8",
            errors="replace",
            timeout=timeout if timeout is not None else self._default_timeout,
            env=merged_env,
            check=False,
        )
        _LOGGER.debug("%s exited with %s", argv[0], completed.returncode)
        return CommandResult(
            returncode=completed.returncode,
            stdout=completed.stdout or "",
            stderr=completed.stderr or "",
        )


def first_line(text: str) -> str:
    """Return the first non-blank line of *text*, stripped, or ``""``."""
    for line in text.splitlines():
        stripped = line.strip()
        if stripped:
            return stripped
    return ""
