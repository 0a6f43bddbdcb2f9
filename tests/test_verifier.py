"""Tests for the ``-version`` probe (infra/verifier.py)."""

from __future__ import annotations

import subprocess

import pytest

from conftest import FakeRunner, fail, ok
from ffprovision.exceptions import NotExecutableError
from ffprovision.infra.verifier import VersionVerifier, parse_version


class TestParseVersion:
    @pytest.mark.parametrize(
        ("output", "expected"),
        [
            ("ffmpeg version 6.1.1 Copyright (c) 2000-2023 the FFmpeg developers", "6.1.1"),
            ("ffmpeg version N-113000-g1234abcd-static https://johnvansickle.com", "N-113000-g1234abcd-static"),
            ("\nffmpeg version 7.0\nbuilt with gcc", "7.0"),
            ("something unexpected", "unknown"),
            ("", "unknown"),
        ],
    )
    def test_parse(self, output: str, expected: str) -> None:
        assert parse_version(output) == expected


class TestProbe:
    def test_success(self) -> None:
        runner = FakeRunner({("/x/ffmpeg", "-version"): ok("ffmpeg version 6.0 ...")})
        assert VersionVerifier(runner).probe("/x/ffmpeg") == "6.0"

    def test_banner_on_stderr(self) -> None:
        runner = FakeRunner({("ffmpeg", "-version"): ok("", "ffmpeg version 5.1.4")})
        assert VersionVerifier(runner).probe("ffmpeg") == "5.1.4"

    def test_unrecognised_banner_is_unknown_not_failure(self) -> None:
        runner = FakeRunner({("ffmpeg", "-version"): ok("hello")})
        assert VersionVerifier(runner).probe("ffmpeg") == "unknown"

    def test_non_zero_exit(self) -> None:
        runner = FakeRunner({("ffmpeg", "-version"): fail("Illegal instruction", 132)})
        with pytest.raises(NotExecutableError, match="Illegal instruction"):
            VersionVerifier(runner).probe("ffmpeg")

    def test_missing_program(self) -> None:
        with pytest.raises(NotExecutableError):
            VersionVerifier(FakeRunner()).probe("/nope/ffmpeg")

    def test_timeout(self) -> None:
        runner = FakeRunner({("ffmpeg",): subprocess.TimeoutExpired("ffmpeg", 15)})
        assert VersionVerifier(runner).is_runnable("ffmpeg") is False
