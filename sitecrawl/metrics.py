import threading
import time
from dataclasses import dataclass


@dataclass
class Totals:
    attempts: int = 0
    fetched: int = 0
    bytes: int = 0
    failures: int = 0
    retries: int = 0
    slow_marks: int = 0
    fetch_ms_sum: float = 0.0


class Metrics:
    def __init__(self):
        self._totals = Totals()
        self._lock = threading.Lock()
        self._start = time.time()

    def record_fetch(self, ok: bool, bytes_read: int, fetch_ms: float) -> None:
        with self._lock:
            self._totals.attempts += 1
            if ok:
                self._totals.fetched += 1
                self._totals.bytes += max(0, bytes_read)
            else:
                self._totals.failures += 1
            self._totals.fetch_ms_sum += fetch_ms

    def record_retry(self) -> None:
        with self._lock:
            self._totals.retries += 1

    def record_slow_host(self) -> None:
        with self._lock:
            self._totals.slow_marks += 1

    def snapshot(self) -> tuple[Totals, float]:
        with self._lock:
            t = Totals(**vars(self._totals))
        elapsed = max(1e-6, time.time() - self._start)
        return t, elapsed


class StatsLogger(threading.Thread):
    daemon = True

    def __init__(self, metrics: Metrics, interval_s: float, log_fn):
        super().__init__(name="stats-logger")
        self._metrics = metrics
        self._interval = max(0.5, interval_s)
        self._log = log_fn
        self._stop_event = threading.Event()

    def run(self) -> None:
        while not self._stop_event.is_set():
            self._stop_event.wait(self._interval)
            if self._stop_event.is_set():
                break
            totals, elapsed = self._metrics.snapshot()
            pps = totals.fetched / elapsed
            mb = totals.bytes / (1024 * 1024)
            avg_ms = totals.fetch_ms_sum / max(1, totals.attempts)
            self._log(
                "Perf: fetched=%d, failures=%d, retries=%d, slow_marks=%d, MB=%.2f, avg_fetch_ms=%.1f, pages/sec=%.2f",
                totals.fetched,
                totals.failures,
                totals.retries,
                totals.slow_marks,
                mb,
                avg_ms,
                pps,
            )

    def stop(self) -> None:
        self._stop_event.set()
