"""HTTP access to the paper feed with a bounded retry policy."""

from __future__ import annotations

import logging
import time
from dataclasses import dataclass, field
from typing import Callable, TypeVar

import requests

from config import CrawlConfig

MAX_ATTEMPTS = 3

LOGGER = logging.getLogger(__name__)

T = TypeVar("T")


class FeedRequestError(RuntimeError):
    """Raised when a feed request keeps failing after every allowed attempt."""

    def __init__(self, uri: str, attempts: int, cause: Exception | None = None) -> None:
        super().__init__(f"Feed request failed after {attempts} attempts: uri={uri} error={cause}")
        self.uri = uri
        self.attempts = attempts


@dataclass(frozen=True)
class RetryPolicy:
    """Fixed-delay retry: at most ``max_attempts`` calls, ``delay_seconds`` apart."""

    max_attempts: int = MAX_ATTEMPTS
    delay_seconds: float = 5.0
    sleep: Callable[[float], None] = field(default=time.sleep, compare=False, repr=False)

    def call(
        self,
        fn: Callable[[], T],
        *,
        retry_on: tuple[type[BaseException], ...],
        uri: str,
    ) -> T:
        last_error: Exception | None = None
        for attempt in range(1, self.max_attempts + 1):
            try:
                return fn()
            except retry_on as exc:
                last_error = exc
                LOGGER.warning(
                    "Feed request failed uri=%s attempt=%s/%s: %s",
                    uri,
                    attempt,
                    self.max_attempts,
                    exc,
                )
                if attempt < self.max_attempts:
                    self.sleep(self.delay_seconds)

        raise FeedRequestError(uri, self.max_attempts, last_error) from last_error


class Pause:
    """Fixed blocking pause between consecutive calls; the first call never waits."""

    def __init__(self, seconds: float, sleep: Callable[[float], None] = time.sleep) -> None:
        self.seconds = seconds
        self._sleep = sleep
        self._primed = False

    def wait(self) -> None:
        if self._primed and self.seconds > 0:
            self._sleep(self.seconds)
        self._primed = True


class FeedClient:
    """Blocking GET client; retries only connection failures and timeouts."""

    def __init__(
        self,
        user_agent: str,
        timeout_seconds: float,
        retry_policy: RetryPolicy | None = None,
        session: requests.Session | None = None,
    ) -> None:
        self.user_agent = user_agent
        self.timeout_seconds = timeout_seconds
        self.retry_policy = retry_policy or RetryPolicy()
        self.session = session or requests.Session()

    @classmethod
    def from_config(cls, config: CrawlConfig) -> FeedClient:
        return cls(
            user_agent=config.user_agent,
            timeout_seconds=config.request_timeout_seconds,
            retry_policy=RetryPolicy(delay_seconds=config.retry_delay_seconds),
        )

    def get(self, uri: str) -> str:
        """Return the response body for ``uri`` whatever its HTTP status."""
        response = self.retry_policy.call(
            lambda: self.session.get(
                uri,
                headers={"User-Agent": self.user_agent},
                timeout=self.timeout_seconds,
            ),
            retry_on=(requests.ConnectionError, requests.Timeout),
            uri=uri,
        )
        if not response.ok:
            LOGGER.warning("Feed returned HTTP %s for uri=%s", response.status_code, uri)
        return response.text

    def close(self) -> None:
        self.session.close()
