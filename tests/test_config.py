"""Tests for settings and storage adapters (infra/config.py)."""

from __future__ import annotations

from pathlib import Path
from unittest.mock import patch

import pytest

from ffprovision.infra.config import EnvSettings, UserDataStorage


class TestEnvSettings:
    def test_default_when_unset(self) -> None:
        assert EnvSettings(environ={}).get("auto_install", True) is True

    @pytest.mark.parametrize("raw", ["0", "false", "No", "off", ""])
    def test_falsy_strings(self, raw: str) -> None:
        settings = EnvSettings(environ={"FFPROVISION_AUTO_INSTALL": raw})
        assert settings.get("auto_install", True) is False

    def test_truthy_string(self) -> None:
        settings = EnvSettings(environ={"FFPROVISION_AUTO_INSTALL": "yes"})
        assert settings.get("auto_install", False) is True

    def test_string_setting(self) -> None:
        settings = EnvSettings(environ={"FFPROVISION_FFMPEG_PATH": "/opt/ff"})
        assert settings.get("ffmpeg_path", None) == "/opt/ff"

    def test_overrides_beat_environment(self) -> None:
        settings = EnvSettings(
            overrides={"auto_install": False},
            environ={"FFPROVISION_AUTO_INSTALL": "1"},
        )
        assert settings.get("auto_install", True) is False

    def test_none_override_defers_to_environment(self) -> None:
        settings = EnvSettings(
            overrides={"ffmpeg_path": None},
            environ={"FFPROVISION_FFMPEG_PATH": "/env/ff"},
        )
        assert settings.get("ffmpeg_path", None) == "/env/ff"


class TestUserDataStorage:
    def test_explicit_root(self, tmp_path: Path) -> None:
        assert UserDataStorage(root=tmp_path, environ={}).persistent_storage_path() == tmp_path

    def test_home_override(self, tmp_path: Path) -> None:
        storage = UserDataStorage(environ={"FFPROVISION_HOME": str(tmp_path)})
        assert storage.persistent_storage_path() == tmp_path

    @patch("ffprovision.infra.config.platform.system", return_value="Linux")
    def test_linux_xdg(self, _mock_system: object, tmp_path: Path) -> None:
        storage = UserDataStorage(environ={"XDG_DATA_HOME": str(tmp_path)})
        assert storage.persistent_storage_path() == tmp_path / "ffprovision"

    @patch("ffprovision.infra.config.platform.system", return_value="Windows")
    def test_windows_local_appdata(self, _mock_system: object) -> None:
        storage = UserDataStorage(environ={"LOCALAPPDATA": "C:/Users/me/AppData/Local"})
        assert storage.persistent_storage_path() == Path("C:/Users/me/AppData/Local/ffprovision")

    @patch("ffprovision.infra.config.platform.system", return_value="Windows")
    def test_windows_without_appdata(self, _mock_system: object) -> None:
        assert UserDataStorage(environ={}).persistent_storage_path() is None

    @patch("ffprovision.infra.config.platform.system", return_value="Darwin")
    def test_macos_application_support(self, _mock_system: object) -> None:
        path = UserDataStorage(environ={}).persistent_storage_path()
        assert path is not None
        assert path.parts[-3:] == ("Library", "Application Support", "ffprovision")
