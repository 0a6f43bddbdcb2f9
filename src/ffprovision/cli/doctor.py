"""``ffprovision doctor``: environment diagnostics command.

Gathers system information and renders a Rich table summarising
whether this machine can locate, download and unpack ffmpeg.

This module lives in the CLI layer: it may import from ``infra``
and ``core``, and it renders via Rich.  No business logic resides
here; it purely collects and displays diagnostic data.
"""

from __future__ import annotations

import platform
import shutil
import sys
from collections.abc import Callable

from ffprovision.cli import exit_codes
from ffprovision.cli.console import console
from ffprovision.core.catalog import resolve_descriptor
from ffprovision.core.layout import storage_root
from ffprovision.core.manager import FfmpegManager
from ffprovision.core.models import VERSION_ERROR, VERSION_NOT_INSTALLED, PlatformKey
from ffprovision.core.protocols import Storage
from ffprovision.exceptions import UnsupportedPlatformError
from ffprovision.version import __version__


Check = tuple[str, str, str]

OK = "[green]OK[/green]"
WARN = "[yellow]WARN[/yellow]"


# ---------------------------------------------------------------------------
# Diagnostic collectors
# ---------------------------------------------------------------------------

def _python_version_check() -> Check:
    """Return (label, value, status) for the Python version row."""
    version = platform.python_version()
    ok = sys.version_info[:2] >= (3, 10)
    status = OK if ok else "[red]FAIL (>=3.10 required)[/red]"
    return "Python", version, status


def _os_check() -> Check:
    """Return (label, value, status) for the OS row."""
    system_raw = platform.system()
    system_display = {
        "Windows": "Windows",
        "Linux": "Linux",
        "Darwin": "macOS",
    }.get(system_raw, system_raw)
    value = f"{system_display} {platform.release()} ({platform.machine()})"
    return "OS", value, OK


def _ffprovision_version_check() -> Check:
    return "ffprovision", __version__, OK


def _catalog_check(platform_key: PlatformKey) -> Check:
    """Return the catalog row: which archive would be downloaded here."""
    try:
        descriptor = resolve_descriptor(platform_key)
    except UnsupportedPlatformError:
        return "Catalog", f"{platform_key} (no build)", "[red]FAIL[/red]"
    return "Catalog", f"{platform_key}: {descriptor.archive_name}", OK


def _ffmpeg_checks(manager: FfmpegManager) -> list[Check]:
    """Return the ffmpeg path and version rows."""
    path = manager.locate()
    if path is None:
        return [
            ("ffmpeg", "not found", WARN),
            ("ffmpeg version", VERSION_NOT_INSTALLED, WARN),
        ]
    version = manager.probe_version()
    version_status = WARN if version in (VERSION_ERROR, VERSION_NOT_INSTALLED) else OK
    return [
        ("ffmpeg", str(path), OK),
        ("ffmpeg version", version, version_status),
    ]


def _extraction_tool_checks(
    platform_key: PlatformKey,
    which: Callable[[str], str | None],
) -> list[Check]:
    """Return one row per archive utility the installer may shell out to."""
    tools = ("powershell",) if platform_key.is_windows else ("unzip", "tar")
    rows: list[Check] = []
    for tool in tools:
        found = which(tool)
        rows.append((tool, found or "not found", OK if found else WARN))
    return rows


def _storage_check(storage: Storage) -> Check:
    root = storage_root(storage)
    status = OK if storage.persistent_storage_path() is not None else WARN
    return "Storage", str(root), status


def _status_plain(status: str) -> str:
    """Convert rich-markup status to plain text."""
    if "FAIL" in status:
        return "FAIL"
    if "WARN" in status:
        return "WARN"
    if "OK" in status:
        return "OK"
    return status


def _print_plain_doctor_table(checks: list[Check]) -> None:
    """Render doctor output without Rich."""
    print("\nffprovision doctor", file=sys.stderr)
    print("=" * 72, file=sys.stderr)
    print(f"{'Component':<16} {'Value':<44} {'Status':<8}", file=sys.stderr)
    print("-" * 72, file=sys.stderr)
    for label, value, status in checks:
        print(f"{label:<16} {value:<44} {_status_plain(status):<8}", file=sys.stderr)
    print(file=sys.stderr)


def collect_checks(
    manager: FfmpegManager,
    *,
    storage: Storage,
    platform_key: PlatformKey,
    which: Callable[[str], str | None] = shutil.which,
) -> list[Check]:
    return [
        _ffprovision_version_check(),
        _python_version_check(),
        _os_check(),
        _catalog_check(platform_key),
        *_ffmpeg_checks(manager),
        *_extraction_tool_checks(platform_key, which),
        _storage_check(storage),
    ]


# ---------------------------------------------------------------------------
# Public entry point
# ---------------------------------------------------------------------------

def run_doctor(
    manager: FfmpegManager,
    *,
    storage: Storage,
    platform_key: PlatformKey,
    which: Callable[[str], str | None] = shutil.which,
) -> int:
    """Execute all diagnostic checks and render a Rich summary table.

    Returns
    -------
    int
        :data:`exit_codes.SUCCESS` when no check failed,
        :data:`exit_codes.GENERAL_ERROR` otherwise.  A missing ffmpeg is
        only a warning: ``ffprovision install`` can fix it.
    """
    checks = collect_checks(manager, storage=storage, platform_key=platform_key, which=which)
    has_failure = any("FAIL" in status for _, _, status in checks)

    rich_available = True
    try:
        from rich.table import Table
    except ModuleNotFoundError:
        rich_available = False

    if rich_available:
        table = Table(
            title="ffprovision doctor",
            show_header=True,
            header_style="bold cyan",
            border_style="dim",
        )
        table.add_column("Component", style="bold", min_width=12)
        table.add_column("Value", min_width=20)
        table.add_column("Status", justify="center", min_width=8)

        for label, value, status in checks:
            table.add_row(label, value, status)

        console.print()
        console.print(table)
        console.print()
    else:
        _print_plain_doctor_table(checks)

    if manager.state.cached_path is None:
        console.print("ffmpeg is not available. Run `ffprovision install` to download it.")

    if has_failure:
        console.print("Some checks failed.")
        return exit_codes.GENERAL_ERROR

    console.print("All checks passed.")
    return exit_codes.SUCCESS
