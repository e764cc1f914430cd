"""
Asset page fetcher.
"""

from __future__ import annotations

import logging
import threading
import time

import requests

from app.config import DealScanSettings
from app.domain.errors import FetchFailure
from app.scanning.logging_utils import log_event

logger = logging.getLogger(__name__)

_CHUNK_SIZE = 8192


class PageFetcher:
    """
    Fetch one page with a bounded timeout and no retries.

    The timeout covers the whole request, body included, and the body is
    capped at ``max_page_bytes``. A failed fetch is reported to the caller,
    who re-triggers the scan.
    """

    def __init__(
        self,
        *,
        settings: DealScanSettings,
        session: requests.Session | None = None,
    ) -> None:
        self._settings = settings
        self._session = session or requests.Session()
        self._headers = {"User-Agent": settings.user_agent}

    def fetch(self, url: str) -> str:
        deadline = time.monotonic() + self._settings.timeout_seconds
        try:
            response = self._session.get(
                url,
                headers=self._headers,
                timeout=self._settings.timeout_seconds,
                allow_redirects=True,
                stream=True,
            )
        except requests.Timeout as exc:
            raise self._timed_out(url, exc) from exc
        except requests.RequestException as exc:
            log_event(logger, logging.WARNING, "asset_fetch_failed", url=url, error=str(exc))
            raise FetchFailure(
                "Failed to fetch asset website.",
                url=url,
                reason=str(exc),
            ) from exc

        # Closing the response unblocks a read stuck on a slow server.
        watchdog = threading.Timer(max(0.0, deadline - time.monotonic()), response.close)
        watchdog.daemon = True
        watchdog.start()
        try:
            body = self._read_body(response, url=url, deadline=deadline)
        finally:
            watchdog.cancel()
            response.close()

        if response.status_code >= 400:
            # The body is still scanned; an error page simply yields Missing items.
            log_event(
                logger,
                logging.WARNING,
                "asset_fetch_error_status",
                url=url,
                status_code=response.status_code,
            )
        return _decode(body, response.encoding)

    def _read_body(self, response: requests.Response, *, url: str, deadline: float) -> bytes:
        max_bytes = self._settings.max_page_bytes
        chunks: list[bytes] = []
        size = 0
        try:
            for chunk in response.iter_content(chunk_size=_CHUNK_SIZE):
                if time.monotonic() >= deadline:
                    raise self._timed_out(url)
                size += len(chunk)
                if size > max_bytes:
                    log_event(
                        logger,
                        logging.WARNING,
                        "asset_fetch_too_large",
                        url=url,
                        max_bytes=max_bytes,
                    )
                    raise FetchFailure(
                        "Asset page exceeds the size limit.",
                        url=url,
                        max_bytes=max_bytes,
                    )
                chunks.append(chunk)
        except (requests.RequestException, OSError, ValueError) as exc:
            if time.monotonic() >= deadline or isinstance(exc, requests.Timeout):
                raise self._timed_out(url, exc) from exc
            if not isinstance(exc, requests.RequestException):
                raise
            log_event(logger, logging.WARNING, "asset_fetch_failed", url=url, error=str(exc))
            raise FetchFailure(
                "Failed to fetch asset website.",
                url=url,
                reason=str(exc),
            ) from exc

        # A watchdog close can end the stream early without an error.
        if time.monotonic() >= deadline:
            raise self._timed_out(url)
        return b"".join(chunks)

    def _timed_out(self, url: str, exc: Exception | None = None) -> FetchFailure:
        reason = str(exc) if exc is not None else (
            f"exceeded {self._settings.timeout_seconds}s"
        )
        log_event(logger, logging.WARNING, "asset_fetch_timeout", url=url, error=reason)
        return FetchFailure(
            "Timed out fetching asset website.",
            url=url,
            reason=reason,
        )


def _decode(body: bytes, encoding: str | None) -> str:
    try:
        return body.decode(encoding or "utf-8", errors="replace")
    except LookupError:
        return body.decode("utf-8", errors="replace")
