"""CLI application entry point and command routing for ffprovision.

This module is the **sole error boundary** for the entire application.
It catches :class:`~ffprovision.exceptions.FfprovisionError`,
``KeyboardInterrupt``, and any unexpected ``Exception``, rendering
user-friendly messages via Rich and returning well-defined exit codes.

Architecture notes
------------------
* No business logic lives here: all work is delegated to the
  :class:`~ffprovision.core.manager.FfmpegManager`.
* The terminal plays the host application: it supplies the prompter,
  the settings (environment plus flags) and the storage root.
* This module is the only place that translates between the domain world
  and the OS process exit code.
"""

from __future__ import annotations

import argparse
import contextlib
import logging
import signal
import sys
import threading
from collections.abc import Iterator
from pathlib import Path
from typing import Any

from ffprovision.cli import exit_codes
from ffprovision.cli.console import console
from ffprovision.core.cancellation import CancellationToken
from ffprovision.core.models import VERSION_ERROR, VERSION_NOT_INSTALLED, InstallOutcome
from ffprovision.core.protocols import SETTING_AUTO_INSTALL, SETTING_FFMPEG_PATH
from ffprovision.exceptions import FfprovisionError, append_manual_install_suggestion
from ffprovision.version import __version__


_LOGGER = logging.getLogger(__name__)


# ---------------------------------------------------------------------------
# Argument parser
# ---------------------------------------------------------------------------

def _build_parser() -> argparse.ArgumentParser:
    """Construct the top-level argument parser.

    Sub-commands:
    * ``ffprovision locate``  : print the resolved ffmpeg path
    * ``ffprovision install`` : download and install ffmpeg
    * ``ffprovision version`` : print the ffmpeg version
    * ``ffprovision ensure``  : locate, offering to install when missing
    * ``ffprovision doctor``  : environment diagnostics
    """
    parser = argparse.ArgumentParser(
        prog="ffprovision",
        description="Locate, download and verify an ffmpeg executable.",
    )
    parser.add_argument(
        "-V",
        "--version",
        action="version",
        version=f"%(prog)s {__version__}",
    )
    parser.add_argument(
        "-v",
        "--verbose",
        action="count",
        default=0,
        help="Increase log output (-v info, -vv debug).",
    )
    parser.add_argument(
        "--storage-dir",
        type=Path,
        default=None,
        help="Directory that holds the installed ffmpeg (default: per-user data dir).",
    )
    parser.add_argument(
        "--ffmpeg-path",
        default=None,
        help="Use this ffmpeg executable instead of searching for one.",
    )
    parser.add_argument(
        "--no-auto-install",
        action="store_true",
        help="Never offer to download ffmpeg automatically.",
    )

    commands = parser.add_subparsers(dest="command", metavar="command")
    commands.add_parser("locate", help="Print the path of a working ffmpeg.")

    install = commands.add_parser("install", help="Download and install ffmpeg.")
    install.add_argument(
        "--force",
        action="store_true",
        help="Reinstall even when ffmpeg is already installed.",
    )
    install.add_argument(
        "-y",
        "--yes",
        action="store_true",
        help="Answer every prompt with its default choice.",
    )

    commands.add_parser("version", help="Print the version of the located ffmpeg.")

    ensure = commands.add_parser("ensure", help="Locate ffmpeg, installing it if needed.")
    ensure.add_argument(
        "-y",
        "--yes",
        action="store_true",
        help="Answer every prompt with its default choice.",
    )

    commands.add_parser("doctor", help="Show environment diagnostics.")
    return parser


# ---------------------------------------------------------------------------
# Wiring
# ---------------------------------------------------------------------------

def _settings_overrides(args: argparse.Namespace) -> dict[str, Any]:
    overrides: dict[str, Any] = {SETTING_FFMPEG_PATH: args.ffmpeg_path}
    if args.no_auto_install:
        overrides[SETTING_AUTO_INSTALL] = False
    return overrides


def _build_context(args: argparse.Namespace) -> tuple[Any, Any, Any]:
    """Return ``(manager, storage, platform_key)`` for *args*."""
    from ffprovision.cli.prompts import AutoPrompter, QuestionaryPrompter
    from ffprovision.infra.config import EnvSettings, UserDataStorage
    from ffprovision.infra.factory import build_manager
    from ffprovision.infra.platform_info import detect_platform

    prompter = AutoPrompter() if getattr(args, "yes", False) else QuestionaryPrompter()
    storage = UserDataStorage(root=args.storage_dir)
    platform_key = detect_platform()
    manager = build_manager(
        prompter,
        settings=EnvSettings(overrides=_settings_overrides(args)),
        storage=storage,
        platform_key=platform_key,
    )
    return manager, storage, platform_key


@contextlib.contextmanager
def _cancel_on_interrupt(token: CancellationToken) -> Iterator[None]:
    """Turn the first Ctrl+C into a cooperative cancel of *token*.

    A second Ctrl+C raises ``KeyboardInterrupt`` as usual.
    """
    if threading.current_thread() is not threading.main_thread():
        yield
        return

    def _handler(signum: int, frame: object) -> None:
        if token.is_canceled:
            raise KeyboardInterrupt
        _LOGGER.info("Interrupt received, canceling download")
        token.cancel()

    previous = signal.signal(signal.SIGINT, _handler)
    try:
        yield
    finally:
        signal.signal(signal.SIGINT, previous)


# ---------------------------------------------------------------------------
# Command dispatch
# ---------------------------------------------------------------------------

def _handle_locate(manager: Any) -> int:
    path = manager.locate()
    if path is None:
        console.print("[yellow]ffmpeg not found.[/yellow]")
        return exit_codes.GENERAL_ERROR
    print(path)
    return exit_codes.SUCCESS


def _handle_install(manager: Any, *, force: bool) -> int:
    token = CancellationToken()
    with _cancel_on_interrupt(token):
        result = manager.install_result(force=force, cancel_token=token)
    code = exit_codes.for_outcome(result.outcome)
    if result.outcome in (InstallOutcome.FAILED, InstallOutcome.UNSUPPORTED):
        console.hint(append_manual_install_suggestion(getattr(result.error, "hint", None)))
    if code != exit_codes.SUCCESS:
        return code
    if result.path is not None:
        print(result.path)
    return exit_codes.SUCCESS


def _handle_version(manager: Any) -> int:
    version = manager.probe_version()
    print(version)
    if version in (VERSION_NOT_INSTALLED, VERSION_ERROR):
        return exit_codes.GENERAL_ERROR
    return exit_codes.SUCCESS


def _handle_ensure(manager: Any) -> int:
    token = CancellationToken()
    with _cancel_on_interrupt(token):
        path = manager.ensure(cancel_token=token)
    if path is None:
        if token.is_canceled:
            return exit_codes.KEYBOARD_INTERRUPT
        return exit_codes.GENERAL_ERROR
    print(path)
    return exit_codes.SUCCESS


def _handle_doctor(manager: Any, storage: Any, platform_key: Any) -> int:
    """Dispatch the ``doctor`` diagnostics command."""
    from ffprovision.cli.doctor import run_doctor

    return run_doctor(manager, storage=storage, platform_key=platform_key)


# ---------------------------------------------------------------------------
# Main entry point
# ---------------------------------------------------------------------------

def main(argv: list[str] | None = None) -> int:
    """Run the ffprovision CLI.

    Parameters
    ----------
    argv:
        Explicit argument list.  When ``None`` (default), ``sys.argv[1:]``
        is used.  Accepting *argv* enables deterministic testing without
        monkeypatching.

    Returns
    -------
    int
        OS process exit code.
    """
    parser = _build_parser()
    args = parser.parse_args(argv)

    if args.command is None:
        parser.print_help()
        return exit_codes.SUCCESS

    from ffprovision.cli.logging_config import configure_logging

    configure_logging(args.verbose)
    manager, storage, platform_key = _build_context(args)

    if args.command == "locate":
        return _handle_locate(manager)
    if args.command == "install":
        return _handle_install(manager, force=args.force)
    if args.command == "version":
        return _handle_version(manager)
    if args.command == "ensure":
        return _handle_ensure(manager)
    return _handle_doctor(manager, storage, platform_key)


# ---------------------------------------------------------------------------
# Script-level error boundary
# ---------------------------------------------------------------------------

def cli() -> None:
    """Top-level error boundary invoked by the console-script entry point.

    This function wraps :func:`main` and guarantees the process never
    exits with a raw stack trace during normal usage.
    """
    try:
        code = main()
        sys.exit(code)
    except FfprovisionError as exc:
        console.error(exc)
        sys.exit(exit_codes.GENERAL_ERROR)
    except KeyboardInterrupt:
        console.print("\n[yellow]Aborted by user.[/yellow]")
        sys.exit(exit_codes.KEYBOARD_INTERRUPT)
    except Exception as exc:  # noqa: BLE001
        console.print(
            "[bold red]Unexpected error.[/bold red] "
            "Please report this issue.\n"
            f"  {type(exc).__name__}: {exc}"
        )
        sys.exit(exit_codes.UNEXPECTED_ERROR)
