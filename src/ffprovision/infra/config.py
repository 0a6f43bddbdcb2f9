"""Infrastructure: settings and storage adapters.

There is no configuration file.  Settings come from environment
variables, optionally overridden by explicit values (the CLI passes its
flags here).  The storage root follows each platform's per-user data
directory convention.

Environment variables
---------------------
``FFPROVISION_FFMPEG_PATH``
    Explicit ffmpeg executable to use instead of searching.
``FFPROVISION_AUTO_INSTALL``
    ``0`` / ``false`` / ``no`` / ``off`` disables automatic installation.
``FFPROVISION_HOME``
    Overrides the persistent storage root.
"""

from __future__ import annotations

import os
import platform
from collections.abc import Mapping
from pathlib import Path
from typing import Any

from ffprovision.core.protocols import SETTING_AUTO_INSTALL, SETTING_FFMPEG_PATH


ENV_PREFIX: str = "FFPROVISION_"

_FALSY: frozenset[str] = frozenset({"0", "false", "no", "off", ""})


def _coerce(raw: str, default: Any) -> Any:
    """Coerce an environment string to the type of *default*."""
    if isinstance(default, bool):
        return raw.strip().lower() not in _FALSY
    if isinstance(default, int):
        try:
            return int(raw)
        except ValueError:
            return default
    return raw


class EnvSettings:
    """Concrete :class:`~ffprovision.core.protocols.Settings`.

    Lookup order: explicit *overrides*, then ``FFPROVISION_<KEY>``
    environment variables, then the caller's default.
    """

    def __init__(
        self,
        overrides: Mapping[str, Any] | None = None,
        environ: Mapping[str, str] | None = None,
    ) -> None:
        self._overrides: dict[str, Any] = {
            key: value for key, value in (overrides or {}).items() if value is not None
        }
        self._environ: Mapping[str, str] = environ if environ is not None else os.environ

    def get(self, key: str, default: Any) -> Any:
        if key in self._overrides:
            return self._overrides[key]
        raw = self._environ.get(f"{ENV_PREFIX}{key.upper()}")
        if raw is None:
            return default
        return _coerce(raw, default)


class UserDataStorage:
    """Concrete :class:`~ffprovision.core.protocols.Storage`."""

    APP_DIR_NAME: str = "ffprovision"

    def __init__(
        self,
        root: Path | None = None,
        environ: Mapping[str, str] | None = None,
    ) -> None:
        self._root = root
        self._environ: Mapping[str, str] = environ if environ is not None else os.environ

    def persistent_storage_path(self) -> Path | None:
        if self._root is not None:
            return self._root
        override = self._environ.get(f"{ENV_PREFIX}HOME")
        if override:
            return Path(override).expanduser()
        return self._platform_default()

    def _platform_default(self) -> Path | None:
        system = platform.system().lower()
        if system == "windows":
            base = self._environ.get("LOCALAPPDATA") or self._environ.get("APPDATA")
            return Path(base) / self.APP_DIR_NAME if base else None
        try:
            home = Path.home()
        except RuntimeError:
            return None
        if system == "darwin":
            return home / "Library" / "Application Support" / self.APP_DIR_NAME
        xdg = self._environ.get("XDG_DATA_HOME")
        base_dir = Path(xdg) if xdg else home / ".local" / "share"
        return base_dir / self.APP_DIR_NAME


__all__ = [
    "ENV_PREFIX",
    "SETTING_AUTO_INSTALL",
    "SETTING_FFMPEG_PATH",
    "EnvSettings",
    "UserDataStorage",
]
