"""Tests for domain models (core/models.py).

Value objects are frozen dataclasses; :class:`InstallationState` is the
one mutable entity and owns the single-flight guard.
"""

from __future__ import annotations

import dataclasses
from pathlib import Path

import pytest

from ffprovision.core.models import (
    BinaryDescriptor,
    ChecksumRecord,
    InstallationState,
    InstallOutcome,
    InstallResult,
    PlatformKey,
)


# ---------------------------------------------------------------------------
# PlatformKey / BinaryDescriptor
# ---------------------------------------------------------------------------

class TestPlatformKey:
    def test_str(self) -> None:
        assert str(PlatformKey("linux", "x64")) == "linux-x64"

    def test_flags(self) -> None:
        assert PlatformKey("win32", "x64").is_windows
        assert PlatformKey("darwin", "arm64").is_darwin_arm
        assert not PlatformKey("darwin", "x64").is_darwin_arm

    def test_frozen(self) -> None:
        key = PlatformKey("linux", "x64")
        with pytest.raises(dataclasses.FrozenInstanceError):
            key.arch = "arm64"  # type: ignore[misc]


class TestBinaryDescriptor:
    def test_equality(self) -> None:
        a = BinaryDescriptor("https://x/a.zip", "a.zip", "", "ffmpeg")
        b = BinaryDescriptor("https://x/a.zip", "a.zip", "", "ffmpeg")
        assert a == b
        assert hash(a) == hash(b)


# ---------------------------------------------------------------------------
# ChecksumRecord
# ---------------------------------------------------------------------------

class TestChecksumRecord:
    def test_no_expected_digest(self) -> None:
        assert ChecksumRecord(expected=None, actual="ab").matches is None

    def test_match_is_case_insensitive(self) -> None:
        assert ChecksumRecord(expected="ABCD", actual="abcd").matches is True

    def test_mismatch(self) -> None:
        assert ChecksumRecord(expected="abcd", actual="ef01").matches is False


# ---------------------------------------------------------------------------
# InstallResult
# ---------------------------------------------------------------------------

class TestInstallResult:
    @pytest.mark.parametrize(
        ("outcome", "truthy"),
        [
            (InstallOutcome.INSTALLED, True),
            (InstallOutcome.ALREADY_INSTALLED, True),
            (InstallOutcome.BUSY, False),
            (InstallOutcome.CANCELED, False),
            (InstallOutcome.FAILED, False),
            (InstallOutcome.UNSUPPORTED, False),
        ],
    )
    def test_truthiness(self, outcome: InstallOutcome, truthy: bool) -> None:
        assert bool(InstallResult(outcome)) is truthy


# ---------------------------------------------------------------------------
# InstallationState
# ---------------------------------------------------------------------------

class TestInstallationState:
    def test_guard_rejects_second_claim(self) -> None:
        state = InstallationState()
        assert state.try_begin() is True
        assert state.in_progress
        assert state.try_begin() is False
        state.end()
        assert not state.in_progress
        assert state.try_begin() is True
        state.end()

    def test_end_without_begin_is_noop(self) -> None:
        state = InstallationState()
        state.end()
        assert not state.in_progress

    def test_adopt_and_clear(self) -> None:
        state = InstallationState()
        state.adopt(Path("/opt/ffmpeg"))
        assert state.cached_path == Path("/opt/ffmpeg")
        state.clear()
        assert state.cached_path is None

    def test_instances_are_independent(self) -> None:
        first, second = InstallationState(), InstallationState()
        assert first.try_begin()
        assert second.try_begin()
        first.end()
        second.end()
