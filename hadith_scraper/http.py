"""HTTP utilities with polite rate limiting."""

from __future__ import annotations

import logging
import random
import time
from dataclasses import dataclass
from typing import Optional

import requests

from .config import REQUEST_TIMEOUT, USER_AGENT, ScraperSettings

LOGGER = logging.getLogger(__name__)


class HttpError(RuntimeError):
    """Raised when sunnah.com answers with a non-success status."""


@dataclass
class RateLimiter:
    """Simple per-process rate limiter.

    The wait happens before a request, so no delay is spent after the last
    page of a run.
    """

    min_interval: float = 1.5
    jitter: float = 0.0
    _last_call: Optional[float] = None

    def wait(self) -> None:
        now = time.monotonic()
        if self._last_call is not None:
            elapsed = now - self._last_call
            target = self.min_interval + (random.uniform(0, self.jitter) if self.jitter else 0.0)
            if elapsed < target:
                time.sleep(target - elapsed)
        self._last_call = time.monotonic()


class HttpClient:
    """Minimal HTTP client tailored for sunnah.com pages.

    Retrying is left to the caller so that each attempt is rate limited and
    the attempt count follows the run's settings.
    """

    def __init__(
        self,
        rate_limiter: RateLimiter | None = None,
        *,
        user_agent: str = USER_AGENT,
        timeout: float = REQUEST_TIMEOUT,
        session: requests.Session | None = None,
    ) -> None:
        self._session = session or requests.Session()
        self._session.headers.update({
            "User-Agent": user_agent,
            "Accept": "text/html,application/xhtml+xml",
            "Accept-Language": "en-US,en;q=0.9,ar;q=0.8",
        })
        self._rate_limiter = rate_limiter or RateLimiter()
        self._timeout = timeout

    @classmethod
    def from_settings(cls, settings: ScraperSettings) -> "HttpClient":
        return cls(
            RateLimiter(min_interval=settings.rate_limit_seconds),
            user_agent=settings.user_agent,
            timeout=settings.request_timeout,
        )

    def fetch_text(self, url: str) -> str:
        self._rate_limiter.wait()
        LOGGER.debug("GET %s", url)
        response = self._session.get(url, timeout=self._timeout)
        if response.status_code >= 400:
            raise HttpError(f"HTTP {response.status_code} for {url}")
        response.encoding = response.apparent_encoding or response.encoding
        return response.text

    def close(self) -> None:
        self._session.close()

    def __enter__(self) -> "HttpClient":
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.close()
