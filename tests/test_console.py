"""Tests for stderr rendering helpers (cli/console.py)."""

from __future__ import annotations

import sys

import pytest

from ffprovision.cli.console import console, strip_markup
from ffprovision.exceptions import NetworkError


def _hide_rich(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setitem(sys.modules, "rich", None)
    monkeypatch.setitem(sys.modules, "rich.console", None)


class TestStripMarkup:
    def test_removes_style_tags(self) -> None:
        assert strip_markup("[bold red]Error:[/bold red] boom") == "Error: boom"

    def test_keeps_plain_brackets(self) -> None:
        assert strip_markup("answer [y/N]") == "answer [y/N]"


class TestPlainFallback:
    def test_error_and_hint_without_rich(
        self, monkeypatch: pytest.MonkeyPatch, capsys: pytest.CaptureFixture[str],
    ) -> None:
        _hide_rich(monkeypatch)

        console.error(NetworkError("HTTP 503", status_code=503, hint="Try again later."))

        captured = capsys.readouterr()
        assert captured.out == ""
        assert captured.err.splitlines() == ["Error: HTTP 503", "Hint: Try again later."]

    def test_empty_hint_prints_nothing(
        self, monkeypatch: pytest.MonkeyPatch, capsys: pytest.CaptureFixture[str],
    ) -> None:
        _hide_rich(monkeypatch)
        console.hint(None)
        assert capsys.readouterr().err == ""
