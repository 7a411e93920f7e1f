import logging
import threading
from typing import Optional

from prometheus_client import CollectorRegistry, Counter, Gauge, start_http_server

from .metrics import Metrics


logger = logging.getLogger(__name__)


class PrometheusExporter:
    def __init__(self, metrics: Metrics, port: int = 8000, registry: Optional[CollectorRegistry] = None) -> None:
        self.metrics = metrics
        self.port = port
        self.registry = registry or CollectorRegistry()
        self._server_thread: threading.Thread | None = None
        self._stop_event = threading.Event()

        self.attempts_total = Counter('sitecrawl_fetch_attempts_total', 'Total HTTP fetch attempts', registry=self.registry)
        self.pages_total = Counter('sitecrawl_pages_total', 'Total number of pages fetched', registry=self.registry)
        self.bytes_total = Counter('sitecrawl_bytes_total', 'Total number of bytes downloaded', registry=self.registry)
        self.failures_total = Counter('sitecrawl_fetch_failures_total', 'Network-level fetch failures', registry=self.registry)
        self.retries_total = Counter('sitecrawl_retries_total', 'Backoff retries scheduled', registry=self.registry)
        self.slow_marks_total = Counter('sitecrawl_slow_host_marks_total', 'Responses that marked a host slow', registry=self.registry)
        self.pages_per_second = Gauge('sitecrawl_pages_per_second', 'Current crawl rate in pages per second', registry=self.registry)
        self.avg_fetch_duration_seconds = Gauge('sitecrawl_avg_fetch_duration_seconds', 'Average fetch duration in seconds', registry=self.registry)

        self._last = {"attempts": 0, "fetched": 0, "bytes": 0, "failures": 0, "retries": 0, "slow_marks": 0}

    def start(self) -> None:
        start_http_server(self.port, registry=self.registry)
        logger.info("Prometheus metrics server started on port %d", self.port)

        self._server_thread = threading.Thread(
            target=self._update_metrics_loop,
            name="prometheus-updater",
            daemon=True
        )
        self._server_thread.start()

    def _update_metrics_loop(self) -> None:
        while not self._stop_event.is_set():
            self.update()
            self._stop_event.wait(5.0)

    def update(self) -> None:
        totals, elapsed = self.metrics.snapshot()
        counters = {
            "attempts": self.attempts_total,
            "fetched": self.pages_total,
            "bytes": self.bytes_total,
            "failures": self.failures_total,
            "retries": self.retries_total,
            "slow_marks": self.slow_marks_total,
        }
        for name, counter in counters.items():
            value = getattr(totals, name)
            delta = value - self._last[name]
            if delta > 0:
                counter.inc(delta)
            self._last[name] = value

        if elapsed > 0:
            self.pages_per_second.set(totals.fetched / elapsed)
        if totals.attempts > 0:
            self.avg_fetch_duration_seconds.set(totals.fetch_ms_sum / totals.attempts / 1000.0)

    def stop(self) -> None:
        self._stop_event.set()
        if self._server_thread:
            self._server_thread.join(timeout=2.0)
        self.update()
