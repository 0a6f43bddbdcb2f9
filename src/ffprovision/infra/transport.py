"""Infrastructure: HTTP download with progress, redirects and cancellation.

This module is the **only** place in the codebase that imports
``requests``.  All ``requests`` exceptions are caught here and re-raised
as :class:`~ffprovision.exceptions.NetworkError` or
:class:`~ffprovision.exceptions.DownloadCanceledError`.

Progress convention
-------------------
The installer reserves the first 80 % of its 0..100 scale for the
download.  :class:`HttpTransport` therefore reports
``floor(downloaded / total * progress_span)`` and only when that integer
increases: never the same value twice, never a smaller one, even
across redirects and retries.
"""

from __future__ import annotations

import logging
import time
from collections.abc import Callable, Mapping
from pathlib import Path
from typing import Any
from urllib.parse import urljoin

import requests

from ffprovision.core.cancellation import CancellationToken
from ffprovision.core.protocols import ProgressUpdate
from ffprovision.exceptions import DownloadCanceledError, NetworkError
from ffprovision.version import __version__


_LOGGER = logging.getLogger(__name__)

USER_AGENT: str = f"ffprovision/{__version__}"
DEFAULT_PROGRESS_SPAN: int = 80

_MIB = 1024 * 1024


class _ProgressTracker:
    """Turns byte counts into strictly increasing integer percentages."""

    def __init__(self, callback: ProgressUpdate | None, span: int) -> None:
        self._callback = callback
        self._span = span
        self.last_percent = 0

    def advance(self, downloaded: int, total: int | None) -> None:
        if self._callback is None or not total:
            return
        percent = min(self._span, (downloaded * self._span) // total)
        if percent <= self.last_percent:
            return
        self.last_percent = percent
        self._callback(
            percent,
            f"Downloading... {downloaded / _MIB:.1f}MB / {total / _MIB:.1f}MB",
        )


def _content_length(headers: Mapping[str, Any]) -> int | None:
    raw = headers.get("content-length") or headers.get("Content-Length")
    if raw is None:
        return None
    try:
        value = int(raw)
    except (TypeError, ValueError):
        return None
    return value if value > 0 else None


def _remove_partial(destination: Path) -> None:
    try:
        destination.unlink(missing_ok=True)
    except OSError as exc:
        _LOGGER.warning("Could not remove partial download %s: %s", destination, exc)


class HttpTransport:
    """Concrete :class:`~ffprovision.core.protocols.Transport`.

    Parameters
    ----------
    session:
        ``requests.Session`` to use; a fresh one is created when omitted.
    progress_span:
        Upper bound of the percentages reported while downloading.
    """

    MAX_REDIRECTS: int = 5
    MAX_RETRIES: int = 3
    RETRY_DELAY: float = 1.0  # seconds, multiplied by the attempt number
    CHUNK_SIZE: int = 64 * 1024
    TIMEOUT: tuple[float, float] = (10.0, 60.0)  # connect, read
    REDIRECT_STATUSES: frozenset[int] = frozenset({301, 302, 303, 307, 308})

    def __init__(
        self,
        session: requests.Session | None = None,
        *,
        progress_span: int = DEFAULT_PROGRESS_SPAN,
        retry_delay: float | None = None,
        sleep: Callable[[float], None] = time.sleep,
    ) -> None:
        self._session = session or requests.Session()
        self._headers: dict[str, str] = {"User-Agent": USER_AGENT}
        self._span = progress_span
        self._retry_delay = self.RETRY_DELAY if retry_delay is None else retry_delay
        self._sleep = sleep

    # ------------------------------------------------------------------
    # Protocol methods
    # ------------------------------------------------------------------

    def download(
        self,
        url: str,
        destination: Path,
        on_progress: ProgressUpdate | None = None,
        cancel_token: CancellationToken | None = None,
    ) -> None:
        """Stream *url* into *destination*.

        Raises
        ------
        NetworkError
            Non-200 final status, too many redirects, or a connection
            failure that persisted through every retry.
        DownloadCanceledError
            When *cancel_token* fires; the partial file is deleted.
        """
        token = cancel_token or CancellationToken()
        tracker = _ProgressTracker(on_progress, self._span)
        destination.parent.mkdir(parents=True, exist_ok=True)
        _LOGGER.info("Downloading %s -> %s", url, destination)
        try:
            self._download_with_retries(url, destination, tracker, token)
        except BaseException:
            _remove_partial(destination)
            raise
        _LOGGER.info("Downloaded %s", destination)

    def fetch_remote_text(self, url: str) -> str | None:
        """Return the body of *url* as text, or ``None`` on any failure."""
        try:
            response = self._session.get(url, headers=self._headers, timeout=self.TIMEOUT)
            try:
                response.raise_for_status()
                return response.text
            finally:
                response.close()
        except (requests.RequestException, ValueError) as exc:
            _LOGGER.info("Could not fetch %s: %s", url, exc)
            return None

    # ------------------------------------------------------------------
    # Internals
    # ------------------------------------------------------------------

    def _download_with_retries(
        self,
        url: str,
        destination: Path,
        tracker: _ProgressTracker,
        token: CancellationToken,
    ) -> None:
        for attempt in range(1, self.MAX_RETRIES + 1):
            token.raise_if_canceled()
            try:
                self._fetch(url, destination, tracker, token, redirects=0)
                return
            except (requests.ConnectionError, requests.Timeout) as exc:
                # Closing the response from a cancel hook surfaces here.
                if token.is_canceled:
                    raise DownloadCanceledError("Download canceled.") from exc
                if attempt == self.MAX_RETRIES:
                    raise NetworkError(
                        f"Download failed after {attempt} attempts: {exc}",
                        hint="Check your network connection and try again.",
                    ) from exc
                _LOGGER.warning(
                    "Download attempt %s/%s failed: %s", attempt, self.MAX_RETRIES, exc,
                )
                self._sleep(self._retry_delay * attempt)
            except requests.RequestException as exc:
                if token.is_canceled:
                    raise DownloadCanceledError("Download canceled.") from exc
                raise NetworkError(f"Download failed: {exc}") from exc
            except (OSError, ValueError, AttributeError) as exc:
                # A response closed under a blocked read fails inside
                # http.client before requests can wrap the error.
                if token.is_canceled:
                    raise DownloadCanceledError("Download canceled.") from exc
                raise

    def _fetch(
        self,
        url: str,
        destination: Path,
        tracker: _ProgressTracker,
        token: CancellationToken,
        *,
        redirects: int,
    ) -> None:
        response = self._session.get(
            url,
            headers=self._headers,
            stream=True,
            allow_redirects=False,
            timeout=self.TIMEOUT,
        )
        try:
            status = int(response.status_code)
            location = response.headers.get("location") or response.headers.get("Location")
            if status in self.REDIRECT_STATUSES and location:
                if redirects >= self.MAX_REDIRECTS:
                    raise NetworkError(
                        f"Too many redirects while downloading {url}",
                        status_code=status,
                    )
                target = urljoin(url, location)
                _LOGGER.debug("HTTP %s redirect to %s", status, target)
                response.close()
                self._fetch(target, destination, tracker, token, redirects=redirects + 1)
                return

            if status != 200:
                raise NetworkError(f"HTTP {status}", status_code=status)

            total = _content_length(response.headers)
            unregister = token.on_cancel(response.close)
            try:
                self._stream_body(response, destination, tracker, token, total)
            finally:
                unregister()
        finally:
            response.close()

    def _stream_body(
        self,
        response: requests.Response,
        destination: Path,
        tracker: _ProgressTracker,
        token: CancellationToken,
        total: int | None,
    ) -> None:
        downloaded = 0
        with destination.open("wb") as sink:
            for chunk in response.iter_content(chunk_size=self.CHUNK_SIZE):
                token.raise_if_canceled()
                if not chunk:
                    continue
                sink.write(chunk)
                downloaded += len(chunk)
                tracker.advance(downloaded, total)
        token.raise_if_canceled()
        _LOGGER.debug("Wrote %s bytes to %s", downloaded, destination)
