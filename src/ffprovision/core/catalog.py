"""Static ffmpeg binary catalog.

Every function in this module is a **pure** lookup: no I/O, no side
effects.  Unknown platforms are reported with
:class:`~ffprovision.exceptions.UnsupportedPlatformError` before any
network or filesystem work happens.
"""

from __future__ import annotations

from collections.abc import Iterator

from ffprovision.core.models import BinaryDescriptor, PlatformKey
from ffprovision.exceptions import UnsupportedPlatformError


_BTBN_RELEASES = "https://github.com/BtbN/FFmpeg-Builds/releases/download/latest"
_EVERMEET_ZIP = "https://evermeet.cx/ffmpeg/getrelease/ffmpeg/zip"
_JOHNVANSICKLE_BUILDS = "https://johnvansickle.com/ffmpeg/builds"

GENERIC_ARM_ARCH: str = "arm64"
"""Catalog entry tried for ARM variants without an exact match."""


# ---------------------------------------------------------------------------
# Catalog
# ---------------------------------------------------------------------------

CATALOG: dict[str, dict[str, BinaryDescriptor]] = {
    "win32": {
        "x64": BinaryDescriptor(
            url=f"{_BTBN_RELEASES}/ffmpeg-master-latest-win64-gpl.zip",
            archive_name="ffmpeg.zip",
            inner_path="ffmpeg-master-latest-win64-gpl/bin",
            executable_name="ffmpeg.exe",
        ),
        "ia32": BinaryDescriptor(
            url=f"{_BTBN_RELEASES}/ffmpeg-master-latest-win32-gpl.zip",
            archive_name="ffmpeg.zip",
            inner_path="ffmpeg-master-latest-win32-gpl/bin",
            executable_name="ffmpeg.exe",
        ),
    },
    "darwin": {
        "x64": BinaryDescriptor(
            url=_EVERMEET_ZIP,
            archive_name="ffmpeg.zip",
            inner_path="",
            executable_name="ffmpeg",
        ),
        "arm64": BinaryDescriptor(
            url=_EVERMEET_ZIP,
            archive_name="ffmpeg.zip",
            inner_path="",
            executable_name="ffmpeg",
        ),
    },
    "linux": {
        "x64": BinaryDescriptor(
            url=f"{_JOHNVANSICKLE_BUILDS}/ffmpeg-git-amd64-static.tar.xz",
            archive_name="ffmpeg.tar.xz",
            inner_path="",
            executable_name="ffmpeg",
        ),
        "arm64": BinaryDescriptor(
            url=f"{_JOHNVANSICKLE_BUILDS}/ffmpeg-git-arm64-static.tar.xz",
            archive_name="ffmpeg.tar.xz",
            inner_path="",
            executable_name="ffmpeg",
        ),
    },
}


# ---------------------------------------------------------------------------
# Normalisation
# ---------------------------------------------------------------------------

_SYSTEM_ALIASES: dict[str, str] = {
    "windows": "win32",
    "win32": "win32",
    "cygwin": "win32",
    "darwin": "darwin",
    "macos": "darwin",
    "linux": "linux",
}

_ARCH_ALIASES: dict[str, str] = {
    "x86_64": "x64",
    "amd64": "x64",
    "x64": "x64",
    "i386": "ia32",
    "i686": "ia32",
    "x86": "ia32",
    "ia32": "ia32",
    "aarch64": "arm64",
    "arm64": "arm64",
    "armv8l": "arm64",
    "armv7l": "arm",
    "armv6l": "arm",
}


def normalize_system(raw: str) -> str:
    """Map a ``platform.system()`` value to a catalog system key."""
    lowered = raw.strip().lower()
    return _SYSTEM_ALIASES.get(lowered, lowered)


def normalize_arch(raw: str) -> str:
    """Map a ``platform.machine()`` value to a catalog arch key."""
    lowered = raw.strip().lower()
    return _ARCH_ALIASES.get(lowered, lowered)


def make_platform_key(system: str, machine: str) -> PlatformKey:
    return PlatformKey(system=normalize_system(system), arch=normalize_arch(machine))


# ---------------------------------------------------------------------------
# Lookup
# ---------------------------------------------------------------------------

def resolve_descriptor(key: PlatformKey) -> BinaryDescriptor:
    """Return the descriptor for *key*.

    ARM variants without an exact entry fall back to the generic
    ``arm64`` entry of the same system.

    Raises
    ------
    UnsupportedPlatformError
        When neither lookup matches.
    """
    entries = CATALOG.get(key.system, {})
    descriptor = entries.get(key.arch)
    if descriptor is None and key.arch.startswith("arm"):
        descriptor = entries.get(GENERIC_ARM_ARCH)
    if descriptor is None:
        raise UnsupportedPlatformError(key.system, key.arch)
    return descriptor


def executable_name_for(system: str) -> str:
    """``ffmpeg.exe`` on Windows, ``ffmpeg`` everywhere else."""
    return "ffmpeg.exe" if normalize_system(system) == "win32" else "ffmpeg"


def supported_platforms() -> Iterator[PlatformKey]:
    """Yield every ``(system, arch)`` pair present in the catalog."""
    for system, entries in CATALOG.items():
        for arch in entries:
            yield PlatformKey(system=system, arch=arch)
