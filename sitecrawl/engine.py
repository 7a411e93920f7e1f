import logging
import threading
import time
from concurrent.futures import ThreadPoolExecutor
from datetime import datetime, timezone
from typing import Callable, List, Optional, Set

from .collector import CrawlSummary, ResultCollector
from .config import CrawlConfig
from .errors import FetchNetworkError
from .fetcher import RetryingFetcher
from .frontier import Frontier
from .hosts import HostStateTracker
from .metrics import Metrics, StatsLogger
from .net import HttpClient
from .parsing import Extractor, UrlTools
from .storage import JsonlWriter
from .types import CrawlError, CrawlResult, FrontierEntry, HttpClientProtocol, LinkExtractorProtocol


logger = logging.getLogger(__name__)

ErrorCallback = Callable[[CrawlError], None]


class CrawlSession:
    """State of a single crawl run. Built fresh by ``Crawler.run`` and never reused."""

    def __init__(
        self,
        config: CrawlConfig,
        fetcher: RetryingFetcher,
        extractor: LinkExtractorProtocol,
        hosts: HostStateTracker,
        sleep: Callable[[float], None],
        on_error: Optional[ErrorCallback] = None,
        writer: Optional[JsonlWriter] = None,
    ):
        self.config = config
        self.fetcher = fetcher
        self.extractor = extractor
        self.hosts = hosts
        self.frontier = Frontier(config.max_depth)
        self.collector = ResultCollector()
        self.errors: List[CrawlError] = []
        self.seed_url: Optional[str] = None
        self._visited: Set[str] = set()
        self._visited_lock = threading.Lock()
        self._errors_lock = threading.Lock()
        self._sleep = sleep
        self._on_error = on_error
        self._writer = writer

    @property
    def results(self) -> List[CrawlResult]:
        return self.collector.results

    @property
    def visited(self) -> Set[str]:
        with self._visited_lock:
            return set(self._visited)

    def _claim(self, url: str) -> bool:
        with self._visited_lock:
            if url in self._visited:
                return False
            self._visited.add(url)
            return True

    def _emit_error(self, url: str, cause: BaseException) -> None:
        err = CrawlError(url=url, cause=cause, message=str(cause))
        with self._errors_lock:
            self.errors.append(err)
        logger.error("Failed to crawl %s: %s", url, err.message)
        if self._on_error:
            self._on_error(err)

    def _process(self, entry: FrontierEntry) -> None:
        url, depth = entry
        response, response_time = self.fetcher.fetch(url)

        title = None
        links: List[str] = []
        if response.body and UrlTools.is_hypertext(response.content_type):
            page = self.extractor.extract(response.body, response.url)
            title, links = page.title, page.links
            # Links are checked against the origin the page was actually served from.
            origin = UrlTools.origin(response.url)
            admitted = sum(1 for link in links if self.frontier.admit(link, depth + 1, origin))
            logger.debug("%s: %d links found, %d admitted", url, len(links), admitted)

        result = CrawlResult(
            url=url,
            depth=depth,
            title=title,
            status=response.status,
            content_type=response.content_type,
            links_found=len(links),
            timestamp=datetime.now(timezone.utc).isoformat(),
            response_time=response_time,
        )
        self.collector.add(result)
        if self._writer:
            self._writer.write(result)
        count = self.collector.count
        if count % 10 == 0:
            logger.info("Crawled %d pages", count)

    def worker(self) -> None:
        while True:
            entry = self.frontier.take()
            if entry is None:
                return
            try:
                if not self._claim(entry.url):
                    continue
                try:
                    self._process(entry)
                except FetchNetworkError as exc:
                    self._emit_error(entry.url, exc)
                except Exception as exc:
                    logger.exception("Unexpected error while crawling %s", entry.url)
                    self._emit_error(entry.url, exc)
            finally:
                self.frontier.task_done()
            if self.config.delay_between_requests > 0:
                self._sleep(self.config.delay_between_requests)

    def run(self, seed_url: str) -> List[CrawlResult]:
        self.seed_url = self.frontier.seed(seed_url)
        logger.info(
            "Starting crawl of %s (max_depth=%d, workers=%d)",
            self.seed_url,
            self.config.max_depth,
            self.config.max_concurrency,
        )
        self.collector.start()
        try:
            with ThreadPoolExecutor(
                max_workers=self.config.max_concurrency, thread_name_prefix="crawl-worker"
            ) as executor:
                futures = [executor.submit(self.worker) for _ in range(self.config.max_concurrency)]
                for future in futures:
                    future.result()
        finally:
            self.collector.finish()
        logger.info(
            "Finished. Pages crawled: %d, discovered: %d, errors: %d",
            self.collector.count,
            self.frontier.discovered_count,
            len(self.errors),
        )
        return self.results

    def search(self, keyword: str) -> List[CrawlResult]:
        return self.collector.search(keyword)

    def summary(self) -> CrawlSummary:
        return self.collector.summary(
            total_discovered=self.frontier.discovered_count,
            total_errors=len(self.errors),
            slow_hosts=self.hosts.slow_hosts(),
        )


class Crawler:
    def __init__(
        self,
        config: Optional[CrawlConfig] = None,
        http_client: HttpClientProtocol | None = None,
        extractor: LinkExtractorProtocol | None = None,
        sleep: Callable[[float], None] | None = None,
        now: Callable[[], float] | None = None,
    ):
        self.config = config or CrawlConfig()
        self._owns_http = http_client is None
        self.http = http_client or HttpClient(self.config)
        self.extractor = extractor or Extractor()
        self.metrics = Metrics()
        self._sleep = sleep or time.sleep
        self._now = now

    def new_session(self, on_error: Optional[ErrorCallback] = None, writer: Optional[JsonlWriter] = None) -> CrawlSession:
        hosts = HostStateTracker()
        fetcher = RetryingFetcher(self.http, self.config, hosts, self.metrics, sleep=self._sleep, now=self._now)
        return CrawlSession(self.config, fetcher, self.extractor, hosts, self._sleep, on_error=on_error, writer=writer)

    def run(self, seed_url: str, on_error: Optional[ErrorCallback] = None) -> CrawlSession:
        # Validate before opening output files or starting threads.
        UrlTools.normalize_seed(seed_url)
        writer = JsonlWriter(self.config.output_path) if self.config.output_path else None
        session = self.new_session(on_error=on_error, writer=writer)
        stats_thread: Optional[StatsLogger] = None
        if self.config.metrics_interval > 0:
            stats_thread = StatsLogger(self.metrics, self.config.metrics_interval, logger.info)
            stats_thread.start()
        try:
            session.run(seed_url)
        finally:
            if stats_thread:
                stats_thread.stop()
            if writer:
                writer.close()
        return session

    def close(self) -> None:
        """Release the HTTP client if this crawler created it."""
        if self._owns_http:
            self.http.close()


def crawl(
    seed_url: str,
    config: Optional[CrawlConfig] = None,
    http_client: HttpClientProtocol | None = None,
    extractor: LinkExtractorProtocol | None = None,
    on_error: Optional[ErrorCallback] = None,
) -> List[CrawlResult]:
    """Crawl from ``seed_url`` and return every successful result.

    Raises InvalidSeedURL before any work starts. Network failures never
    abort the run; they are passed to ``on_error`` instead.
    """
    crawler = Crawler(config, http_client=http_client, extractor=extractor)
    try:
        return crawler.run(seed_url, on_error=on_error).results
    finally:
        crawler.close()
