"""Polite HTTP fetcher: per-instance rate limit plus bounded retries."""
from __future__ import annotations

import threading
import time
from datetime import datetime
from typing import Any, Callable

import requests

from skillscout.errors import FetchCancelled, NetworkError
from skillscout.log import get_logger
from skillscout.retry import retry

log = get_logger(__name__)

DEFAULT_HEADERS: dict[str, str] = {
    "User-Agent": (
        "Mozilla/5.0 (Windows NT 10.0; Win64; x64) AppleWebKit/537.36 "
        "(KHTML, like Gecko) Chrome/124.0 Safari/537.36"
    ),
    "Accept": "text/html,application/xhtml+xml,application/xml;q=0.9,*/*;q=0.8",
    "Accept-Language": "en-US,en;q=0.9",
    "Connection": "keep-alive",
}


class Fetcher:
    """Fetch documents over HTTP without hammering the remote host.

    Consecutive ``fetch`` calls on one instance are spaced at least
    ``rate_limit_ms`` apart; the caller is suspended until the interval has
    elapsed. Transient failures (connection errors, timeouts, non-2xx
    responses) are retried ``max_retries`` times in total with a delay of
    ``2 ** attempt * retry_base_ms`` after each failed attempt. When the last
    attempt fails a :class:`NetworkError` is raised carrying that failure.

    Waits go through a :class:`threading.Event`, so :meth:`cancel` from another
    thread wakes a suspended caller with :class:`FetchCancelled`.
    """

    def __init__(
        self,
        *,
        name: str = "fetcher",
        rate_limit_ms: int = 3000,
        max_retries: int = 2,
        retry_base_ms: int = 1000,
        timeout_s: float = 10.0,
        session: requests.Session | None = None,
        clock: Callable[[], float] = time.monotonic,
        cancel_event: threading.Event | None = None,
    ) -> None:
        self.name = name
        self.rate_limit_ms = rate_limit_ms
        self.max_retries = max(1, max_retries)
        self.retry_base_ms = retry_base_ms
        self.timeout_s = timeout_s
        self.session = session or requests.Session()
        self._clock = clock
        self._cancel = cancel_event or threading.Event()
        self._lock = threading.Lock()
        self._last_request_mono: float | None = None
        self.last_request_at: datetime | None = None
        self.request_count = 0

    def fetch(self, url: str, headers: dict[str, str] | None = None, params: dict[str, Any] | None = None) -> str:
        """Return the response body for *url*, or raise NetworkError."""
        self._enforce_rate_limit()

        merged = dict(DEFAULT_HEADERS)
        if headers:
            merged.update(headers)

        get = retry(
            max_attempts=self.max_retries,
            base_delay=self.retry_base_ms / 1000.0,
            retryable=(requests.RequestException,),
            sleep=self._sleep,
        )(self._get)

        log.info("[%s] Fetching %s", self.name, url)
        try:
            return get(url, merged, params)
        except requests.RequestException as exc:
            raise NetworkError(url, exc, self.max_retries) from exc

    def _get(self, url: str, headers: dict[str, str], params: dict[str, Any] | None) -> str:
        resp = self.session.get(url, headers=headers, params=params, timeout=self.timeout_s)
        resp.raise_for_status()
        return resp.text

    def _enforce_rate_limit(self) -> None:
        with self._lock:
            if self._last_request_mono is not None:
                elapsed_ms = (self._clock() - self._last_request_mono) * 1000
                remaining_ms = self.rate_limit_ms - elapsed_ms
                if remaining_ms > 0:
                    log.debug("[%s] Rate limit: waiting %.0fms", self.name, remaining_ms)
                    self._sleep(remaining_ms / 1000.0)
            self._last_request_mono = self._clock()
            self.last_request_at = datetime.now()
            self.request_count += 1

    def _sleep(self, seconds: float) -> None:
        if self._cancel.wait(seconds):
            raise FetchCancelled(f"[{self.name}] wait cancelled")

    def cancel(self) -> None:
        """Wake any suspended caller; subsequent waits fail immediately."""
        self._cancel.set()

    def get_stats(self) -> dict[str, Any]:
        return {
            "source": self.name,
            "request_count": self.request_count,
            "last_request": self.last_request_at,
        }
