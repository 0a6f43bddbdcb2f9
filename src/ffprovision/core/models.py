"""Domain models for ffprovision.

Value objects are **frozen** dataclasses with no behaviour beyond data
access.  :class:`InstallationState` is the single exception: it is the
only long-lived, shared mutable entity and is owned by whoever
constructs the :class:`~ffprovision.core.manager.FfmpegManager`.
"""

from __future__ import annotations

import enum
import threading
from dataclasses import dataclass, field
from pathlib import Path


# ---------------------------------------------------------------------------
# Catalog entries
# ---------------------------------------------------------------------------

@dataclass(frozen=True, slots=True)
class PlatformKey:
    """Normalised ``(system, arch)`` pair used as a catalog key."""

    system: str
    """Operating system family: ``win32``, ``darwin`` or ``linux``."""

    arch: str
    """CPU architecture: ``x64``, ``ia32``, ``arm64``, ``arm`` ..."""

    def __str__(self) -> str:
        return f"{self.system}-{self.arch}"

    @property
    def is_windows(self) -> bool:
        return self.system == "win32"

    @property
    def is_darwin_arm(self) -> bool:
        """Whether this platform routes through the Homebrew alternate path."""
        return self.system == "darwin" and self.arch == "arm64"


@dataclass(frozen=True, slots=True)
class BinaryDescriptor:
    """Where and how to obtain ffmpeg for one ``(system, arch)`` pair."""

    url: str
    """Download URL of the archive."""

    archive_name: str
    """File name used for the scratch archive (suffix drives extraction)."""

    inner_path: str
    """Directory of the executable inside the extracted archive, or ``""``."""

    executable_name: str
    """Platform-specific executable file name (``ffmpeg`` / ``ffmpeg.exe``)."""


# ---------------------------------------------------------------------------
# Per-attempt values
# ---------------------------------------------------------------------------

@dataclass(frozen=True, slots=True)
class DownloadTarget:
    """Filesystem locations used by a single install attempt."""

    install_dir: Path
    """Durable directory expected to hold the final executable."""

    archive_path: Path
    """Scratch location of the downloaded archive; always removed."""

    staging_dir: Path
    """Scratch extraction directory; always removed."""

    use_alternate_path: bool = False
    """Whether this attempt goes through the Homebrew flow first."""


@dataclass(frozen=True, slots=True)
class ChecksumRecord:
    """Expected versus computed digest of a downloaded archive."""

    expected: str | None
    """Published SHA-256 hex digest, or ``None`` when none was found."""

    actual: str
    """SHA-256 hex digest computed over the downloaded file."""

    @property
    def matches(self) -> bool | None:
        """``None`` when nothing was published, else whether digests agree."""
        if self.expected is None:
            return None
        return self.expected.lower() == self.actual.lower()


# ---------------------------------------------------------------------------
# Install outcomes
# ---------------------------------------------------------------------------

class InstallStage(enum.Enum):
    """States of the installer state machine."""

    IDLE = "idle"
    RESOLVING_DESCRIPTOR = "resolving-descriptor"
    ALTERNATE_PATH = "alternate-path"
    DIRECT_DOWNLOAD = "direct-download"
    EXTRACTING = "extracting"
    ACTIVATING = "activating"
    INSTALLED = "installed"
    FAILED = "failed"


class InstallOutcome(enum.Enum):
    """Terminal result kinds of one ``install`` call."""

    INSTALLED = "installed"
    ALREADY_INSTALLED = "already-installed"
    BUSY = "busy"
    CANCELED = "canceled"
    FAILED = "failed"
    UNSUPPORTED = "unsupported"


@dataclass(frozen=True, slots=True)
class InstallResult:
    """Outcome of an install attempt.

    Truthy only when a working executable is in place afterwards.
    """

    outcome: InstallOutcome
    path: Path | str | None = None
    error: Exception | None = None

    def __bool__(self) -> bool:
        return self.outcome in (InstallOutcome.INSTALLED, InstallOutcome.ALREADY_INSTALLED)


# Version probe sentinels
VERSION_UNKNOWN: str = "unknown"
VERSION_NOT_INSTALLED: str = "not installed"
VERSION_ERROR: str = "error"


# ---------------------------------------------------------------------------
# Shared state
# ---------------------------------------------------------------------------

@dataclass(slots=True)
class InstallationState:
    """Cached executable path plus the single-flight install guard.

    ``try_begin`` never blocks: a second caller is rejected while an
    attempt is running, never queued.
    """

    cached_path: Path | str | None = None
    _guard: threading.Lock = field(default_factory=threading.Lock, repr=False)

    @property
    def in_progress(self) -> bool:
        return self._guard.locked()

    def try_begin(self) -> bool:
        """Claim the install slot; ``False`` if another attempt holds it."""
        return self._guard.acquire(blocking=False)

    def end(self) -> None:
        """Release the install slot (no-op when not held)."""
        if self._guard.locked():
            self._guard.release()

    def adopt(self, path: Path | str) -> None:
        self.cached_path = path

    def clear(self) -> None:
        self.cached_path = None
