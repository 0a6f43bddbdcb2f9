"""Hashing helpers for downloaded-archive verification."""

from __future__ import annotations

import hashlib
import re
from pathlib import Path

from ffprovision.core.models import ChecksumRecord
from ffprovision.core.protocols import Transport


OSXEXPERTS_PAGE_URL: str = "https://www.osxexperts.net/"

_OSXEXPERTS_DIGEST = re.compile(
    r"Download ffmpeg 8\.0 \(Apple Silicon\)[\s\S]*?"
    r"SHA256 checksum of FFmpeg file\s*:\s*([a-f0-9]{64})",
    re.IGNORECASE,
)


def calculate_sha256(path: Path) -> str:
    digest = hashlib.sha256()
    with path.open("rb") as source:
        for chunk in iter(lambda: source.read(65536), b""):
            digest.update(chunk)
    return digest.hexdigest()


def parse_osxexperts_checksum(page: str) -> str | None:
    """Pull the Apple Silicon ffmpeg digest out of the osxexperts page."""
    match = _OSXEXPERTS_DIGEST.search(page)
    return match.group(1).lower() if match else None


def fetch_expected_checksum(transport: Transport, url: str = OSXEXPERTS_PAGE_URL) -> str | None:
    """Opportunistic lookup; ``None`` whenever the page or digest is missing."""
    page = transport.fetch_remote_text(url)
    if not page:
        return None
    return parse_osxexperts_checksum(page)


def checksum_record(archive: Path, transport: Transport) -> ChecksumRecord:
    return ChecksumRecord(
        expected=fetch_expected_checksum(transport),
        actual=calculate_sha256(archive),
    )
