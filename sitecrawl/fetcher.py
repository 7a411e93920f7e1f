import logging
import time
from typing import Callable, Optional, Tuple

from .config import CrawlConfig
from .errors import FetchNetworkError
from .hosts import HostStateTracker
from .metrics import Metrics
from .parsing import UrlTools
from .types import FetchResult, HttpClientProtocol


logger = logging.getLogger(__name__)


class RetryingFetcher:
    """One logical fetch per call, retried with exponential backoff on network failure.

    Any HTTP status counts as success here. Before each attempt the host's
    slow-delay (if any) is slept; after a success that took at least
    ``slow_host_threshold`` seconds the host is marked slow.
    """

    def __init__(
        self,
        http: HttpClientProtocol,
        config: CrawlConfig,
        hosts: HostStateTracker,
        metrics: Optional[Metrics] = None,
        sleep: Callable[[float], None] | None = None,
        now: Callable[[], float] | None = None,
    ):
        self.http = http
        self.config = config
        self.hosts = hosts
        self.metrics = metrics
        self._sleep = sleep or time.sleep
        self._now = now or time.monotonic

    def backoff_delay(self, attempt: int) -> float:
        return self.config.retry_delay * (2 ** attempt)

    def fetch(self, url: str) -> Tuple[FetchResult, float]:
        host = UrlTools.host(url)
        attempts = self.config.attempts
        for attempt in range(attempts):
            slow_delay = self.hosts.delay_for(host)
            if slow_delay:
                logger.info("Slow host %s: waiting %.2fs before %s", host, slow_delay, url)
                self._sleep(slow_delay)

            logger.debug("GET %s (attempt %d/%d)", url, attempt + 1, attempts)
            t0 = self._now()
            try:
                response = self.http.fetch(url)
            except FetchNetworkError as exc:
                elapsed = self._now() - t0
                if self.metrics:
                    self.metrics.record_fetch(False, 0, elapsed * 1000.0)
                if attempt + 1 >= attempts:
                    logger.warning("Giving up on %s after %d attempts: %s", url, attempts, exc)
                    raise
                delay = self.backoff_delay(attempt)
                logger.info("Retry %d/%d for %s in %.2fs: %s", attempt + 1, self.config.max_retries, url, delay, exc)
                if self.metrics:
                    self.metrics.record_retry()
                self._sleep(delay)
                continue

            elapsed = self._now() - t0
            if self.metrics:
                self.metrics.record_fetch(True, response.size_bytes, elapsed * 1000.0)
            if elapsed >= self.config.slow_host_threshold:
                applied = self.hosts.mark_slow(host, elapsed)
                logger.warning("Marked %s slow (%.2fs response, next delay %.2fs)", host, elapsed, applied)
                if self.metrics:
                    self.metrics.record_slow_host()
            return response, elapsed
