"""Protocols (interfaces) consumed by the core layer.

These define the contracts that infrastructure and CLI adapters must
satisfy.  Core code depends ONLY on these protocols, never on concrete
implementations, so the installer can be driven by a terminal or a test
double.
"""

from __future__ import annotations

from collections.abc import Callable, Mapping, Sequence
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Protocol, TypeVar

from ffprovision.core.cancellation import CancellationToken
from ffprovision.core.models import BinaryDescriptor


T = TypeVar("T")

ProgressUpdate = Callable[..., None]
"""``update(percent, message=None)``: *percent* is on a 0..100 scale."""


# ---------------------------------------------------------------------------
# Host-application collaborators
# ---------------------------------------------------------------------------

class Prompter(Protocol):
    """User-facing consent, notification and progress surface.

    The acquisition engine never renders UI directly; everything the
    user sees goes through an implementation of this protocol.
    """

    def confirm(
        self,
        message: str,
        options: Sequence[str],
        *,
        level: str = "info",
    ) -> str | None:
        """Ask the user to pick one of *options*; ``None`` when dismissed."""
        ...  # pragma: no cover

    def notify(self, message: str, *, level: str = "info") -> None:
        """Show a dismissible message (``info`` / ``warning`` / ``error``)."""
        ...  # pragma: no cover

    def report_progress(
        self,
        title: str,
        attempt: Callable[[ProgressUpdate], T],
    ) -> T:
        """Run *attempt* with an ``update(percent, message)`` callback."""
        ...  # pragma: no cover


SETTING_FFMPEG_PATH: str = "ffmpeg_path"
SETTING_AUTO_INSTALL: str = "auto_install"


class Settings(Protocol):
    """User-configurable settings lookup."""

    def get(self, key: str, default: Any) -> Any:
        ...  # pragma: no cover


class Storage(Protocol):
    """App-owned persistent storage root."""

    def persistent_storage_path(self) -> Path | None:
        """Directory under which the install directory lives, if any."""
        ...  # pragma: no cover


# ---------------------------------------------------------------------------
# Infrastructure collaborators
# ---------------------------------------------------------------------------

@dataclass(frozen=True, slots=True)
class CommandResult:
    """Captured result of an external process invocation."""

    returncode: int
    stdout: str
    stderr: str

    @property
    def ok(self) -> bool:
        return self.returncode == 0


class CommandRunner(Protocol):
    """Runs an external program from a discrete argument list."""

    def run(
        self,
        args: Sequence[str],
        *,
        timeout: float | None = None,
        env: Mapping[str, str] | None = None,
    ) -> CommandResult:
        """Run *args* and capture output.

        Raises
        ------
        FileNotFoundError
            When the program does not exist.
        subprocess.TimeoutExpired
            When *timeout* elapses.
        """
        ...  # pragma: no cover


class Transport(Protocol):
    """Archive download and opportunistic remote text lookup."""

    def download(
        self,
        url: str,
        destination: Path,
        on_progress: ProgressUpdate | None = None,
        cancel_token: CancellationToken | None = None,
    ) -> None:
        """Stream *url* to *destination*.

        Raises
        ------
        NetworkError
            Non-success status or connection failure.
        DownloadCanceledError
            When *cancel_token* fires mid-transfer.
        """
        ...  # pragma: no cover

    def fetch_remote_text(self, url: str) -> str | None:
        """Return the body of *url*, or ``None`` on any failure."""
        ...  # pragma: no cover


class Extractor(Protocol):
    """Unpacks a downloaded archive into a directory."""

    def extract(
        self,
        archive: Path,
        destination: Path,
        inner_path: str,
        executable_name: str,
    ) -> None:
        """Extract *archive* and surface the executable at the top level.

        Raises
        ------
        ExtractionError
            When the archive format is unknown or extraction fails.
        """
        ...  # pragma: no cover


class Verifier(Protocol):
    """Confirms a candidate executable runs and reports its version."""

    def probe(self, executable: Path | str) -> str:
        """Return the version token of *executable*.

        Raises
        ------
        NotExecutableError
            When the executable cannot be run.
        """
        ...  # pragma: no cover


class AlternateInstaller(Protocol):
    """Platform-specific preferred flow tried before the direct download."""

    def install(
        self,
        install_dir: Path,
        descriptor: BinaryDescriptor,
        update: ProgressUpdate,
        cancel_token: CancellationToken,
    ) -> bool:
        """Return ``True`` when ffmpeg was installed and adopted."""
        ...  # pragma: no cover


class Locator(Protocol):
    """Finds an already-available ffmpeg executable."""

    def resolve(self) -> Path | str | None:
        ...  # pragma: no cover
