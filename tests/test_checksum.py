"""Tests for archive hashing and published-digest lookup (infra/checksum.py)."""

from __future__ import annotations

import hashlib
from pathlib import Path

from conftest import FakeTransport
from ffprovision.infra.checksum import (
    calculate_sha256,
    checksum_record,
    fetch_expected_checksum,
    parse_osxexperts_checksum,
)


DIGEST = "ab" * 32

PAGE = f"""
<h2>Download ffmpeg 8.0 (Apple Silicon)</h2>
<p>Some text</p>
<p>SHA256 checksum of FFmpeg file : {DIGEST.upper()}</p>
"""


class TestCalculateSha256:
    def test_matches_hashlib(self, tmp_path: Path) -> None:
        data = b"x" * 200_000
        target = tmp_path / "blob"
        target.write_bytes(data)
        assert calculate_sha256(target) == hashlib.sha256(data).hexdigest()


class TestParse:
    def test_extracts_lowercased_digest(self) -> None:
        assert parse_osxexperts_checksum(PAGE) == DIGEST

    def test_missing_section(self) -> None:
        assert parse_osxexperts_checksum("<html>nothing here</html>") is None


class TestFetchExpected:
    def test_unreachable_page(self) -> None:
        assert fetch_expected_checksum(FakeTransport(page=None)) is None

    def test_record_combines_expected_and_actual(self, tmp_path: Path) -> None:
        archive = tmp_path / "ffmpeg.zip"
        archive.write_bytes(b"zip")
        record = checksum_record(archive, FakeTransport(page=PAGE))
        assert record.expected == DIGEST
        assert record.actual == hashlib.sha256(b"zip").hexdigest()
        assert record.matches is False
