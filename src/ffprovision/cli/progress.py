"""Rich-based progress display driven by the installer's ``update`` calls.

The installer reports ``update(percent, message)`` on a fixed 0..100
scale (the download owns 0..80, extraction, verification and
activation the rest).  :class:`RichProgressReporter` renders that as a
single Rich :class:`~rich.progress.Progress` task.

Design
------
* Shutdown-safe: if the progress bar is stopped, updates are silently
  ignored.
* :meth:`pause` / :meth:`resume` let interactive prompts take over the
  terminal while an attempt is running.
* No ``print()``; Rich handles all rendering.
"""

from __future__ import annotations

from typing import Any

from ffprovision.cli.console import get_rich_console
from ffprovision.exceptions import EnvironmentError


PROGRESS_TOTAL: int = 100


class RichProgressReporter:
    """Callable ``update(percent, message=None)`` adapter for Rich.

    Usage::

        with RichProgressReporter("Downloading FFmpeg") as update:
            installer_step(update)
    """

    def __init__(self, title: str) -> None:
        try:
            from rich.progress import (
                BarColumn,
                Progress,
                SpinnerColumn,
                TaskProgressColumn,
                TextColumn,
                TimeElapsedColumn,
            )
        except ModuleNotFoundError as exc:
            raise EnvironmentError(
                "rich is not installed. Install with: pip install rich",
            ) from exc

        self.title = title
        self._progress: Any = Progress(
            SpinnerColumn(),
            TextColumn("[bold blue]{task.description}"),
            BarColumn(),
            TaskProgressColumn(),
            TimeElapsedColumn(),
            console=get_rich_console(),
            transient=False,
        )
        self._task_id: Any = None
        self._started: bool = False
        self.last_percent: int = 0

    # ------------------------------------------------------------------
    # Context manager
    # ------------------------------------------------------------------

    def __enter__(self) -> RichProgressReporter:
        self.start()
        return self

    def __exit__(self, *_args: object) -> None:
        self.stop()

    # ------------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------------

    def start(self) -> None:
        """Start the Rich progress display."""
        if self._started:
            return
        if self._task_id is None:
            self._task_id = self._progress.add_task(self.title, total=PROGRESS_TOTAL)
        self._progress.start()
        self._started = True

    def stop(self) -> None:
        """Stop the Rich progress display (idempotent)."""
        if self._started:
            self._progress.stop()
            self._started = False

    def pause(self) -> bool:
        """Stop rendering; return whether the display was running."""
        was_running = self._started
        self.stop()
        return was_running

    def resume(self) -> None:
        self.start()

    # ------------------------------------------------------------------
    # Update callback
    # ------------------------------------------------------------------

    def __call__(self, percent: float, message: str | None = None) -> None:
        """Advance the bar to *percent* and show *message* when given."""
        if not self._started or self._task_id is None:
            return
        self.last_percent = int(percent)
        fields: dict[str, Any] = {"completed": self.last_percent}
        if message:
            fields["description"] = message
        self._progress.update(self._task_id, **fields)
