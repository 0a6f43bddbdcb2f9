"""Custom exception hierarchy for ffprovision.

All exceptions that cross layer boundaries must inherit from
:class:`FfprovisionError`.  Raw third-party exceptions (``requests``,
``subprocess``, ``OSError``) must NEVER propagate beyond the
infrastructure layer: they must be caught and re-raised as a typed
subclass defined here.

Hierarchy
---------
FfprovisionError
├── UnsupportedPlatformError
├── NetworkError
├── DownloadCanceledError
├── ExtractionError
│   └── ExtractionToolMissingError
├── ChecksumMismatchError
├── NotExecutableError
├── InstallBusyError
└── EnvironmentError
"""

from __future__ import annotations


class FfprovisionError(Exception):
    """Base exception for all ffprovision errors.

    Every user-visible error condition must map to a subclass of this
    exception so that the installer boundary and the CLI error boundary
    can render a clean message without leaking internal stack traces.
    """

    def __init__(self, message: str, *, hint: str | None = None) -> None:
        super().__init__(message)
        self.hint: str | None = hint
        """Optional actionable guidance shown below the error message."""


# --- Catalog ---------------------------------------------------------------

class UnsupportedPlatformError(FfprovisionError):
    """Raised when no catalog entry exists for the current platform."""

    def __init__(self, system: str, arch: str) -> None:
        super().__init__(
            f"Unsupported platform: {system}-{arch}. Please install FFmpeg manually.",
            hint="See https://ffmpeg.org/download.html for official builds.",
        )
        self.system: str = system
        self.arch: str = arch


# --- Transport -------------------------------------------------------------

class NetworkError(FfprovisionError):
    """Raised on a non-success HTTP status or a connection failure."""

    def __init__(
        self,
        message: str,
        *,
        status_code: int | None = None,
        hint: str | None = None,
    ) -> None:
        super().__init__(message, hint=hint)
        self.status_code: int | None = status_code


class DownloadCanceledError(FfprovisionError):
    """Raised when the user cancels an in-flight download."""


# --- Extraction ------------------------------------------------------------

class ExtractionError(FfprovisionError):
    """Raised when an archive cannot be unpacked."""


class ExtractionToolMissingError(ExtractionError):
    """Raised when the system extraction utility is missing or failed."""


# --- Verification ----------------------------------------------------------

class ChecksumMismatchError(FfprovisionError):
    """Raised when a downloaded archive does not match its published digest."""


class NotExecutableError(FfprovisionError):
    """Raised when a candidate executable cannot be run."""


# --- Installer -------------------------------------------------------------

class InstallBusyError(FfprovisionError):
    """Raised when an install is requested while another one is running."""


# --- Environment / tooling -------------------------------------------------

class EnvironmentError(FfprovisionError):
    """Raised when a required runtime dependency is not available."""


def append_manual_install_suggestion(hint: str | None) -> str:
    """Append manual-install guidance to an existing hint text.

    The suggestion is appended only once and preserves the original
    hint content verbatim.
    """
    marker = "You can also install FFmpeg manually:"
    if hint and marker in hint:
        return hint
    lines = [hint] if hint else []
    lines.extend(
        (
            marker,
            "    https://ffmpeg.org/download.html",
        )
    )
    return "\n".join(lines)
