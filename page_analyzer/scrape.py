"""Page fetching with bounded time and size."""
from __future__ import annotations

import logging
import os
import socket
import threading
import time
from concurrent.futures import ThreadPoolExecutor
from concurrent.futures import TimeoutError as FutureTimeoutError
from http import HTTPStatus

import requests

from .errors import HTTPStatusError, ReadError, TransportError
from .schemas import FetchedPage

logger = logging.getLogger(__name__)

USER_AGENT = os.getenv("PAGE_ANALYZER_USER_AGENT", "PageAnalyzerBot/1.0")
REQUEST_TIMEOUT = 10
MAX_BODY_BYTES = 10 * 1024 * 1024
MAX_REDIRECTS = 10
CHUNK_SIZE = 64 * 1024

_SCHEMES = ("http://", "https://")


def normalise_url(url: str) -> str:
    """Prefix ``https://`` when the input has no http(s) scheme.

    Nothing else is validated here; a malformed URL is reported by the
    transport layer when the request is attempted.
    """

    if url.startswith(_SCHEMES):
        return url
    return "https://" + url


def status_description(status_code: int, reason: str | None = None) -> str:
    try:
        phrase = HTTPStatus(status_code).phrase
    except ValueError:
        phrase = reason or ""
    return f"HTTP {status_code}: {phrase}"


def _charset_from_content_type(content_type: str | None) -> str | None:
    if not content_type:
        return None
    for param in content_type.split(";")[1:]:
        key, _, value = param.strip().partition("=")
        if key.strip().lower() == "charset":
            value = value.strip().strip("'\"")
            return value or None
    return None


class _InFlightFetch:
    """A request running on a worker thread, abortable from the caller."""

    def __init__(self, url: str, deadline: float) -> None:
        self.url = url
        self.deadline = deadline
        self.cancelled = threading.Event()
        self.response: requests.Response | None = None

    def expired(self) -> bool:
        return self.cancelled.is_set() or time.monotonic() > self.deadline

    def abort(self) -> None:
        """Stop the worker: shutting the socket down wakes a blocked ``recv``."""

        self.cancelled.set()
        response = self.response
        if response is None:
            return
        connection = getattr(response.raw, "connection", None)
        sock = getattr(connection, "sock", None)
        if sock is None:
            return
        try:
            sock.shutdown(socket.SHUT_RDWR)
        except OSError as exc:
            logger.debug("Socket for %s already closed: %s", self.url, exc)

    def timed_out(self) -> TransportError:
        return TransportError(f"Failed to fetch URL: timed out after {REQUEST_TIMEOUT}s ({self.url})")

    def read_body(self, response: requests.Response) -> tuple[bytes, bool]:
        chunks: list[bytes] = []
        loaded = 0
        truncated = False
        try:
            for chunk in response.iter_content(chunk_size=CHUNK_SIZE):
                if self.expired():
                    raise self.timed_out()
                if not chunk:
                    continue
                if loaded + len(chunk) > MAX_BODY_BYTES:
                    chunks.append(chunk[: MAX_BODY_BYTES - loaded])
                    loaded = MAX_BODY_BYTES
                    truncated = True
                    break
                chunks.append(chunk)
                loaded += len(chunk)
        except requests.RequestException as exc:
            # Read timeouts and aborted sockets both surface as stream errors.
            if self.expired():
                raise self.timed_out() from exc
            raise ReadError(f"Failed to read response: {exc}", status_code=response.status_code) from exc
        return b"".join(chunks), truncated

    def run(self) -> FetchedPage:
        if self.expired():
            raise self.timed_out()
        with requests.Session() as session:
            session.max_redirects = MAX_REDIRECTS
            try:
                response = session.get(
                    self.url,
                    headers={"User-Agent": USER_AGENT},
                    timeout=REQUEST_TIMEOUT,
                    allow_redirects=True,
                    stream=True,
                )
            except (requests.RequestException, ValueError) as exc:
                if self.expired():
                    raise self.timed_out() from exc
                logger.warning("Failed to fetch %s: %s", self.url, exc)
                raise TransportError(f"Failed to fetch URL: {exc}") from exc

            self.response = response
            with response:
                status_code = response.status_code
                if status_code < 200 or status_code >= 400:
                    logger.info("Skipping %s due to status %s", self.url, status_code)
                    raise HTTPStatusError(
                        status_description(status_code, response.reason), status_code=status_code
                    )
                if self.expired():
                    raise self.timed_out()

                content, truncated = self.read_body(response)

        if truncated:
            logger.debug("Body of %s truncated at %d bytes", self.url, MAX_BODY_BYTES)
        logger.debug("Fetched %s (%s, %d bytes)", self.url, status_code, len(content))

        return FetchedPage(
            url=self.url,
            status_code=status_code,
            content=content,
            encoding=_charset_from_content_type(response.headers.get("Content-Type")),
            truncated=truncated,
        )


def fetch_page(url: str) -> FetchedPage:
    """Fetch ``url`` and return its (possibly truncated) body.

    The whole exchange (connect, redirects, headers and body) must finish
    within ``REQUEST_TIMEOUT`` seconds. ``requests`` only bounds each socket
    operation, so the request runs on a worker thread and is aborted when the
    deadline passes.

    Raises :class:`TransportError` when the server cannot be reached in time,
    :class:`HTTPStatusError` for statuses outside ``[200, 400)`` and
    :class:`ReadError` when the body stream breaks.
    """

    url = normalise_url(url)
    fetch = _InFlightFetch(url, time.monotonic() + REQUEST_TIMEOUT)

    executor = ThreadPoolExecutor(max_workers=1, thread_name_prefix="page-fetch")
    try:
        future = executor.submit(fetch.run)
        try:
            return future.result(timeout=max(0.0, fetch.deadline - time.monotonic()))
        except FutureTimeoutError as exc:
            fetch.abort()
            logger.warning("Fetching %s exceeded %ss; aborted", url, REQUEST_TIMEOUT)
            raise fetch.timed_out() from exc
    finally:
        executor.shutdown(wait=False)
