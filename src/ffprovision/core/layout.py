"""On-disk layout of the app-owned storage root.

::

    <storage>/
    ├── ffmpeg/                 install directory (durable)
    │   └── ffmpeg[.exe]
    ├── ffmpeg.zip | .tar.xz    scratch archive (per attempt)
    └── .ffmpeg-staging-*/      scratch extraction (per attempt)

Presence of the executable inside the install directory is the only
durable state; no metadata file is written.
"""

from __future__ import annotations

import tempfile
from pathlib import Path

from ffprovision.core.protocols import Storage


INSTALL_DIR_NAME: str = "ffmpeg"
STAGING_PREFIX: str = ".ffmpeg-staging-"


def storage_root(storage: Storage) -> Path:
    """Persistent storage root, falling back to the OS temp directory."""
    root = storage.persistent_storage_path()
    if root is None:
        return Path(tempfile.gettempdir())
    return Path(root)


def install_dir(storage: Storage) -> Path:
    return storage_root(storage) / INSTALL_DIR_NAME


def bundled_executable(storage: Storage, executable_name: str) -> Path:
    return install_dir(storage) / executable_name
