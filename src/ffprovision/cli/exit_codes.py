"""Process exit codes and their mapping from install outcomes.

``ffprovision install`` and ``ffprovision ensure`` are meant to be
scripted, so each :class:`~ffprovision.core.models.InstallOutcome`
maps to one stable code.
"""

from __future__ import annotations

from ffprovision.core.models import InstallOutcome

SUCCESS: int = 0
"""ffmpeg is available (installed now or already present)."""

GENERAL_ERROR: int = 1
"""A known FfprovisionError was reported, or ffmpeg could not be provided."""

UNEXPECTED_ERROR: int = 2
"""An unhandled exception escaped all known error boundaries."""

BUSY: int = 75
"""Another install is running in this process (``EX_TEMPFAIL``); retry later."""

KEYBOARD_INTERRUPT: int = 130
"""User pressed Ctrl+C or canceled the download.  128 + SIGINT."""


_OUTCOME_CODES: dict[InstallOutcome, int] = {
    InstallOutcome.INSTALLED: SUCCESS,
    InstallOutcome.ALREADY_INSTALLED: SUCCESS,
    InstallOutcome.BUSY: BUSY,
    InstallOutcome.CANCELED: KEYBOARD_INTERRUPT,
    InstallOutcome.FAILED: GENERAL_ERROR,
    InstallOutcome.UNSUPPORTED: GENERAL_ERROR,
}


def for_outcome(outcome: InstallOutcome) -> int:
    return _OUTCOME_CODES.get(outcome, GENERAL_ERROR)
