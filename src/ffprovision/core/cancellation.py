"""Cooperative cancellation for long-running install steps.

A :class:`CancellationToken` is passed down through every layer that
can suspend (currently only the network download).  Layers either poll
:attr:`CancellationToken.is_canceled` between units of work or register
a teardown hook with :meth:`CancellationToken.on_cancel`.
"""

from __future__ import annotations

import logging
import threading
from collections.abc import Callable

from ffprovision.exceptions import DownloadCanceledError


_LOGGER = logging.getLogger(__name__)


class CancellationToken:
    """Thread-safe, one-shot cancellation signal."""

    def __init__(self) -> None:
        self._event = threading.Event()
        self._lock = threading.Lock()
        self._callbacks: list[Callable[[], None]] = []

    @property
    def is_canceled(self) -> bool:
        return self._event.is_set()

    def cancel(self) -> None:
        """Fire the signal and run registered hooks (idempotent)."""
        with self._lock:
            if self._event.is_set():
                return
            self._event.set()
            callbacks = list(self._callbacks)
            self._callbacks.clear()
        for callback in callbacks:
            try:
                callback()
            except Exception:  # noqa: BLE001
                _LOGGER.debug("Cancellation hook %r raised", callback, exc_info=True)

    def on_cancel(self, callback: Callable[[], None]) -> Callable[[], None]:
        """Register *callback*; runs immediately if already canceled.

        Returns a function that unregisters the callback.
        """
        with self._lock:
            if not self._event.is_set():
                self._callbacks.append(callback)
                return lambda: self._unregister(callback)
        callback()
        return lambda: None

    def raise_if_canceled(self) -> None:
        if self._event.is_set():
            raise DownloadCanceledError("Download canceled.")

    def _unregister(self, callback: Callable[[], None]) -> None:
        with self._lock:
            if callback in self._callbacks:
                self._callbacks.remove(callback)
