"""Tests for the manager facade (core/manager.py)."""

from __future__ import annotations

from pathlib import Path
from unittest.mock import MagicMock

import pytest

from conftest import FakePrompter, FakeSettings
from ffprovision.core.cancellation import CancellationToken
from ffprovision.core.manager import FfmpegManager
from ffprovision.core.models import InstallationState, InstallOutcome, InstallResult
from ffprovision.exceptions import NotExecutableError


FOUND = Path("/opt/ffmpeg/ffmpeg")


def _manager(
    state: InstallationState,
    *,
    locate: list[Path | str | None] | None = None,
    install: InstallResult | None = None,
    prompter: FakePrompter | None = None,
    settings: FakeSettings | None = None,
    verifier: MagicMock | None = None,
) -> tuple[FfmpegManager, MagicMock, MagicMock]:
    locator = MagicMock()
    locator.resolve.side_effect = list(locate or [None])
    installer = MagicMock()
    installer.install.return_value = (
        install if install is not None else InstallResult(InstallOutcome.INSTALLED, FOUND)
    )
    manager = FfmpegManager(
        state,
        locator=locator,
        installer=installer,
        verifier=verifier or MagicMock(),
        settings=settings or FakeSettings(),
        prompter=prompter or FakePrompter(),
    )
    return manager, locator, installer


class TestInstall:
    def test_install_is_boolean_view_of_result(self, state: InstallationState) -> None:
        manager, _, installer = _manager(state)
        assert manager.install(force=True) is True
        installer.install.assert_called_once_with(force=True, cancel_token=None)

    def test_busy_is_false(self, state: InstallationState) -> None:
        manager, _, _ = _manager(state, install=InstallResult(InstallOutcome.BUSY))
        assert manager.install() is False


class TestProbeVersion:
    def test_not_installed(self, state: InstallationState) -> None:
        manager, _, _ = _manager(state)
        assert manager.probe_version() == "not installed"

    def test_reports_version(self, state: InstallationState) -> None:
        verifier = MagicMock()
        verifier.probe.return_value = "6.1"
        manager, _, _ = _manager(state, locate=[FOUND], verifier=verifier)
        assert manager.probe_version() == "6.1"

    def test_failing_cached_path_is_cleared(self, state: InstallationState) -> None:
        state.adopt(FOUND)
        verifier = MagicMock()
        verifier.probe.side_effect = NotExecutableError("boom")
        manager, _, _ = _manager(state, locate=[FOUND], verifier=verifier)

        assert manager.probe_version() == "error"
        assert state.cached_path is None


class TestEnsure:
    def test_existing_path_returned(self, state: InstallationState) -> None:
        prompter = FakePrompter()
        manager, _, installer = _manager(state, locate=[FOUND], prompter=prompter)
        assert manager.ensure() == FOUND
        assert prompter.confirms == []
        installer.install.assert_not_called()

    def test_consent_installs_and_relocates(self, state: InstallationState) -> None:
        prompter = FakePrompter(["Yes"])
        manager, _, installer = _manager(state, locate=[None, FOUND], prompter=prompter)

        assert manager.ensure() == FOUND
        message, options, _level = prompter.confirms[0]
        assert message == "FFmpeg is not installed. Download it automatically (~40-80MB)?"
        assert options == ["Yes", "No"]
        installer.install.assert_called_once()

    def test_cancel_token_reaches_installer(self, state: InstallationState) -> None:
        token = CancellationToken()
        manager, _, installer = _manager(state, locate=[None, FOUND], prompter=FakePrompter(["Yes"]))

        manager.ensure(cancel_token=token)

        assert installer.install.call_args.kwargs["cancel_token"] is token

    @pytest.mark.parametrize("answer", ["No", None])
    def test_decline_returns_none(self, state: InstallationState, answer: str | None) -> None:
        manager, _, installer = _manager(state, prompter=FakePrompter([answer]))
        assert manager.ensure() is None
        installer.install.assert_not_called()

    def test_failed_install_returns_none(self, state: InstallationState) -> None:
        manager, _, _ = _manager(
            state,
            prompter=FakePrompter(["Yes"]),
            install=InstallResult(InstallOutcome.FAILED),
        )
        assert manager.ensure() is None

    def test_auto_install_disabled(self, state: InstallationState) -> None:
        prompter = FakePrompter()
        manager, _, installer = _manager(
            state, prompter=prompter, settings=FakeSettings({"auto_install": False}),
        )

        assert manager.ensure() is None
        assert prompter.confirms == []
        assert prompter.messages("error") == [
            "FFmpeg is required. Install it or enable automatic installation in settings.",
        ]
        installer.install.assert_not_called()
