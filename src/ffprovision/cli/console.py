"""Stderr rendering for the CLI, with optional Rich support.

stdout is reserved for machine-readable results (an ffmpeg path, a
version string) so ``$(ffprovision locate)`` works in scripts.  Every
human-facing line goes to stderr through :data:`console`.

Rich is imported lazily: ``--help``, ``--version`` and the plain-text
fallbacks keep working when it is not installed.
"""

from __future__ import annotations

import re
import sys
from typing import Any

from ffprovision.exceptions import EnvironmentError, FfprovisionError


_MARKUP = re.compile(r"\[/?[a-z ]+\]")


def _load_rich_console_class() -> type[Any]:
	"""Return ``rich.console.Console`` class or raise ``EnvironmentError``."""
	try:
		from rich.console import Console
	except ModuleNotFoundError as exc:
		raise EnvironmentError(
			"rich is not installed. Install with: pip install rich",
		) from exc
	return Console


def get_rich_console() -> Any:
	"""Create a Rich console instance targeting stderr."""
	console_class = _load_rich_console_class()
	return console_class(stderr=True)


def strip_markup(text: str) -> str:
	"""Drop Rich style tags such as ``[bold red]`` for plain output."""
	return _MARKUP.sub("", text)


class _ConsoleProxy:
	"""``print``-compatible stderr writer with Rich fallback."""

	def print(self, *objects: object) -> None:
		"""Render with Rich when available, else plain stderr print."""
		try:
			rich_console = get_rich_console()
		except EnvironmentError:
			plain = [strip_markup(o) if isinstance(o, str) else o for o in objects]
			print(*plain, file=sys.stderr)
			return
		rich_console.print(*objects)

	def hint(self, hint: str | None) -> None:
		if hint:
			self.print(f"[yellow]Hint:[/yellow] {hint}")

	def error(self, exc: FfprovisionError) -> None:
		"""Show *exc* and its hint, if any."""
		self.print(f"[bold red]Error:[/bold red] {exc}")
		self.hint(exc.hint)


console = _ConsoleProxy()
