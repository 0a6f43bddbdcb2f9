"""Terminal implementation of the installer's ``Prompter`` protocol.

This module is responsible for:

* Asking consent questions via questionary arrow-key selection.
* Rendering notifications through the Rich console.
* Hosting the installer's progress updates in a Rich progress bar.

:class:`AutoPrompter` answers questions without a terminal (``--yes``),
for scripted use.  It never grants warning-level overrides.
"""

from __future__ import annotations

import logging
from collections.abc import Callable, Sequence
from typing import Any, TypeVar

from ffprovision.cli.console import console
from ffprovision.cli.progress import RichProgressReporter
from ffprovision.core.protocols import ProgressUpdate
from ffprovision.exceptions import EnvironmentError


_LOGGER = logging.getLogger(__name__)

T = TypeVar("T")

_LEVEL_STYLES: dict[str, str] = {
    "info": "[bold cyan]Info:[/bold cyan]",
    "warning": "[bold yellow]Warning:[/bold yellow]",
    "error": "[bold red]Error:[/bold red]",
}


def _import_questionary() -> Any:
    """Import questionary lazily for interactive selection."""
    try:
        import questionary
    except ModuleNotFoundError as exc:
        raise EnvironmentError(
            "questionary is not installed. Install with: pip install questionary",
        ) from exc
    return questionary


def format_notification(message: str, level: str = "info") -> str:
    """Prefix *message* with the Rich markup for *level*."""
    prefix = _LEVEL_STYLES.get(level, _LEVEL_STYLES["info"])
    return f"{prefix} {message}"


class QuestionaryPrompter:
    """Interactive prompter backed by questionary and Rich."""

    def __init__(self) -> None:
        self._active: RichProgressReporter | None = None

    # ------------------------------------------------------------------
    # Prompter protocol
    # ------------------------------------------------------------------

    def confirm(
        self,
        message: str,
        options: Sequence[str],
        *,
        level: str = "info",
    ) -> str | None:
        """Ask the user to pick one of *options*.

        Returns ``None`` when the prompt is dismissed (Esc / Ctrl+C).
        A running progress bar is paused for the duration of the prompt.
        """
        paused = self._active.pause() if self._active is not None else False
        try:
            return self._ask(message, options, level)
        finally:
            if paused and self._active is not None:
                self._active.resume()

    def notify(self, message: str, *, level: str = "info") -> None:
        console.print(format_notification(message, level))

    def report_progress(
        self,
        title: str,
        attempt: Callable[[ProgressUpdate], T],
    ) -> T:
        with RichProgressReporter(title) as reporter:
            self._active = reporter
            try:
                return attempt(reporter)
            finally:
                self._active = None

    # ------------------------------------------------------------------
    # Internals
    # ------------------------------------------------------------------

    def _ask(self, message: str, options: Sequence[str], level: str) -> str | None:
        questionary = _import_questionary()
        if level != "info":
            console.print(format_notification(message, level))
        selected: str | None = questionary.select(
            message,
            choices=list(options),
            use_arrow_keys=True,
            use_shortcuts=False,
        ).ask()  # Returns None on Ctrl+C / Esc
        _LOGGER.debug("Prompt %r answered with %r", message, selected)
        return selected


class AutoPrompter(QuestionaryPrompter):
    """Non-interactive prompter for ``--yes``.

    Ordinary questions get their first (default) option.  Warning-level
    questions guard overrides such as a checksum mismatch or running a
    remote script; they get the last option, which is always the
    refusal, so those still need an interactive run.
    """

    def _ask(self, message: str, options: Sequence[str], level: str) -> str | None:
        if not options:
            choice = None
        elif level == "info":
            choice = options[0]
        else:
            choice = options[-1]
        console.print(format_notification(f"{message} -> {choice}", level))
        _LOGGER.info("Auto-answered %r with %r", message, choice)
        return choice
