"""Staging and activation of a freshly extracted executable.

Archives are never unpacked straight into the install directory.  They
go to a scratch staging directory next to it; only a verified
executable is moved into place with :func:`os.replace`, so a failed
attempt leaves the previously installed binary untouched.
"""

from __future__ import annotations

import logging
import os
import shutil
import stat
import tempfile
from pathlib import Path

from ffprovision.core.layout import STAGING_PREFIX


_LOGGER = logging.getLogger(__name__)

EXECUTABLE_MODE: int = (
    stat.S_IRWXU | stat.S_IRGRP | stat.S_IXGRP | stat.S_IROTH | stat.S_IXOTH
)  # 0o755


def new_staging_dir(root: Path) -> Path:
    root.mkdir(parents=True, exist_ok=True)
    return Path(tempfile.mkdtemp(prefix=STAGING_PREFIX, dir=root))


def make_executable(path: Path) -> None:
    """Set ``rwxr-xr-x`` on *path*."""
    os.chmod(path, EXECUTABLE_MODE)


def activate(staged: Path, install_dir: Path) -> Path:
    """Move *staged* into *install_dir*, replacing any previous copy."""
    install_dir.mkdir(parents=True, exist_ok=True)
    final = install_dir / staged.name
    os.replace(staged, final)
    _LOGGER.info("Activated %s", final)
    return final


def remove_file(path: Path) -> None:
    """Best-effort delete of a scratch file."""
    try:
        path.unlink(missing_ok=True)
    except OSError as exc:
        _LOGGER.warning("Could not remove %s: %s", path, exc)


def remove_tree(path: Path) -> None:
    """Best-effort delete of a scratch directory."""
    if not path.exists():
        return
    shutil.rmtree(path, ignore_errors=True)
    if path.exists():
        _LOGGER.warning("Could not fully remove %s", path)
