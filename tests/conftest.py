"""Shared pytest fixtures and test doubles for the ffprovision test suite.

Guidelines
----------
* No internet access in any test.
* External processes and HTTP are faked at the protocol boundary.
* Filesystem work happens under ``tmp_path`` only.
"""

from __future__ import annotations

import shutil
from collections.abc import Callable, Mapping, Sequence
from pathlib import Path
from typing import Any

import pytest

from ffprovision.core.cancellation import CancellationToken
from ffprovision.core.models import InstallationState, PlatformKey
from ffprovision.core.protocols import CommandResult, ProgressUpdate
from ffprovision.exceptions import NotExecutableError


LINUX_X64 = PlatformKey("linux", "x64")
DARWIN_ARM = PlatformKey("darwin", "arm64")
WIN_X64 = PlatformKey("win32", "x64")


# ---------------------------------------------------------------------------
# Host-application doubles
# ---------------------------------------------------------------------------

class FakePrompter:
    """Records every interaction; answers ``confirm`` from a script."""

    def __init__(self, answers: Sequence[str | None] = ()) -> None:
        self.answers: list[str | None] = list(answers)
        self.confirms: list[tuple[str, list[str], str]] = []
        self.notifications: list[tuple[str, str]] = []
        self.progress: list[tuple[int, str | None]] = []
        self.titles: list[str] = []

    def confirm(
        self,
        message: str,
        options: Sequence[str],
        *,
        level: str = "info",
    ) -> str | None:
        self.confirms.append((message, list(options), level))
        return self.answers.pop(0) if self.answers else None

    def notify(self, message: str, *, level: str = "info") -> None:
        self.notifications.append((message, level))

    def report_progress(self, title: str, attempt: Callable[[ProgressUpdate], Any]) -> Any:
        self.titles.append(title)
        return attempt(self._update)

    def _update(self, percent: int, message: str | None = None) -> None:
        self.progress.append((percent, message))

    def messages(self, level: str | None = None) -> list[str]:
        return [m for m, lvl in self.notifications if level is None or lvl == level]


class FakeStorage:
    def __init__(self, root: Path | None) -> None:
        self.root = root

    def persistent_storage_path(self) -> Path | None:
        return self.root


class FakeSettings:
    def __init__(self, values: Mapping[str, Any] | None = None) -> None:
        self.values = dict(values or {})

    def get(self, key: str, default: Any) -> Any:
        return self.values.get(key, default)


# ---------------------------------------------------------------------------
# Infrastructure doubles
# ---------------------------------------------------------------------------

class FakeRunner:
    """Maps an argv prefix to a canned :class:`CommandResult` or exception.

    The longest matching prefix wins; unmatched commands raise
    ``FileNotFoundError`` like a missing program would.
    """

    def __init__(self, responses: Mapping[tuple[str, ...], Any] | None = None) -> None:
        self.responses: dict[tuple[str, ...], Any] = dict(responses or {})
        self.calls: list[list[str]] = []
        self.envs: list[Mapping[str, str] | None] = []

    def run(
        self,
        args: Sequence[str],
        *,
        timeout: float | None = None,
        env: Mapping[str, str] | None = None,
    ) -> CommandResult:
        argv = [str(a) for a in args]
        self.calls.append(argv)
        self.envs.append(env)
        for length in range(len(argv), 0, -1):
            key = tuple(argv[:length])
            if key in self.responses:
                response = self.responses[key]
                if isinstance(response, BaseException):
                    raise response
                if callable(response):
                    return response(argv)
                return response
        raise FileNotFoundError(argv[0])

    def called(self, *prefix: str) -> bool:
        return any(tuple(call[: len(prefix)]) == prefix for call in self.calls)


def ok(stdout: str = "", stderr: str = "") -> CommandResult:
    return CommandResult(0, stdout, stderr)


def fail(stderr: str = "boom", returncode: int = 1) -> CommandResult:
    return CommandResult(returncode, "", stderr)


class FakeVerifier:
    """Accepts any existing file (or the listed names) and reports *version*."""

    def __init__(self, version: str = "6.1", accept: Sequence[str] = ()) -> None:
        self.version = version
        self.accept = set(accept)
        self.probed: list[str] = []
        self.broken: set[str] = set()

    def probe(self, executable: Path | str) -> str:
        name = str(executable)
        self.probed.append(name)
        if name in self.broken:
            raise NotExecutableError(f"{name} is broken")
        if name in self.accept or Path(name).is_file():
            return self.version
        raise NotExecutableError(f"{name} not found")


class FakeTransport:
    """Writes *payload* (or copies *source*) to the destination."""

    def __init__(
        self,
        payload: bytes = b"archive",
        *,
        source: Path | None = None,
        error: BaseException | None = None,
        page: str | None = None,
    ) -> None:
        self.payload = payload
        self.source = source
        self.error = error
        self.page = page
        self.downloads: list[tuple[str, Path]] = []

    def download(
        self,
        url: str,
        destination: Path,
        on_progress: ProgressUpdate | None = None,
        cancel_token: CancellationToken | None = None,
    ) -> None:
        self.downloads.append((url, destination))
        if self.error is not None:
            raise self.error
        destination.parent.mkdir(parents=True, exist_ok=True)
        if self.source is not None:
            shutil.copyfile(self.source, destination)
        else:
            destination.write_bytes(self.payload)
        if on_progress is not None:
            on_progress(40, "Downloading...")
            on_progress(80, "Downloading...")

    def fetch_remote_text(self, url: str) -> str | None:
        return self.page


class FakeExtractor:
    """Creates ``destination/<executable_name>`` unless told to fail."""

    def __init__(self, error: BaseException | None = None, content: str = "#!/bin/sh\n") -> None:
        self.error = error
        self.content = content
        self.calls: list[tuple[Path, Path, str, str]] = []

    def extract(
        self,
        archive: Path,
        destination: Path,
        inner_path: str,
        executable_name: str,
    ) -> None:
        self.calls.append((archive, destination, inner_path, executable_name))
        if self.error is not None:
            raise self.error
        destination.mkdir(parents=True, exist_ok=True)
        (destination / executable_name).write_text(self.content)


# ---------------------------------------------------------------------------
# Fixtures
# ---------------------------------------------------------------------------

@pytest.fixture()
def state() -> InstallationState:
    return InstallationState()


@pytest.fixture()
def prompter() -> FakePrompter:
    return FakePrompter()


@pytest.fixture()
def storage(tmp_path: Path) -> FakeStorage:
    return FakeStorage(tmp_path / "storage")


@pytest.fixture(autouse=True)
def _reset_package_logger() -> Any:
    """Undo handlers installed by ``configure_logging`` in CLI tests."""
    import logging

    logger = logging.getLogger("ffprovision")
    handlers, level, propagate = list(logger.handlers), logger.level, logger.propagate
    yield
    logger.handlers[:] = handlers
    logger.setLevel(level)
    logger.propagate = propagate
