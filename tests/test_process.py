"""Tests for the subprocess runner (infra/process.py).

``subprocess.run`` is patched; no program is started.
"""

from __future__ import annotations

import subprocess
from unittest.mock import MagicMock, patch

import pytest

from ffprovision.infra.process import SubprocessRunner, first_line


class TestSubprocessRunner:
    @patch("ffprovision.infra.process.subprocess.run")
    def test_runs_argument_list_without_shell(self, mock_run: MagicMock) -> None:
        mock_run.return_value = subprocess.CompletedProcess(["tar"], 0, "out", "")

        result = SubprocessRunner().run(["tar", "-xf", "a b.tar.xz"], timeout=5)

        args, kwargs = mock_run.call_args
        assert args[0] == ["tar", "-xf", "a b.tar.xz"]
        assert "shell" not in kwargs
        assert kwargs["timeout"] == 5
        assert kwargs["check"] is False
        assert kwargs["env"] is None
        assert result.ok and result.stdout == "out"

    @patch("ffprovision.infra.process.subprocess.run")
    def test_env_is_merged_with_process_environment(
        self, mock_run: MagicMock, monkeypatch: pytest.MonkeyPatch,
    ) -> None:
        monkeypatch.setenv("KEEP_ME", "1")
        mock_run.return_value = subprocess.CompletedProcess(["x"], 0, None, None)

        result = SubprocessRunner().run(["x"], env={"EXTRA": "2"})

        env = mock_run.call_args.kwargs["env"]
        assert env["KEEP_ME"] == "1"
        assert env["EXTRA"] == "2"
        assert result.stdout == "" and result.stderr == ""

    @patch("ffprovision.infra.process.subprocess.run", side_effect=FileNotFoundError("nope"))
    def test_missing_program_propagates(self, _mock_run: MagicMock) -> None:
        with pytest.raises(FileNotFoundError):
            SubprocessRunner().run(["nope"])


class TestFirstLine:
    @pytest.mark.parametrize(
        ("text", "expected"),
        [("a\nb", "a"), ("\r\n  C:\\ff.exe \r\nD:\\x", "C:\\ff.exe"), ("", ""), ("\n\n", "")],
    )
    def test_first_non_blank(self, text: str, expected: str) -> None:
        assert first_line(text) == expected
