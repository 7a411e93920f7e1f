import threading
import time
from dataclasses import asdict, dataclass, field
from datetime import datetime, timezone
from typing import Any, Callable, Dict, List, Optional

from .parsing import UrlTools
from .types import CrawlResult


def _iso(ts: Optional[float]) -> Optional[str]:
    if ts is None:
        return None
    return datetime.fromtimestamp(ts, tz=timezone.utc).isoformat()


@dataclass(frozen=True)
class CrawlSummary:
    start_time: Optional[str]
    end_time: Optional[str]
    duration_seconds: float
    total_crawled: int
    total_discovered: int
    pages_per_second: float
    distinct_hosts_crawled: int
    total_errors: int = 0
    slow_hosts: List[str] = field(default_factory=list)

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)


class ResultCollector:
    """Crawl results in completion order, plus the aggregate numbers derived from them."""

    def __init__(self, clock: Callable[[], float] | None = None):
        self._results: List[CrawlResult] = []
        self._lock = threading.Lock()
        self._clock = clock or time.time
        self._start: Optional[float] = None
        self._end: Optional[float] = None

    def start(self) -> None:
        self._start = self._clock()
        self._end = None

    def finish(self) -> None:
        self._end = self._clock()

    def add(self, result: CrawlResult) -> None:
        with self._lock:
            self._results.append(result)

    @property
    def results(self) -> List[CrawlResult]:
        with self._lock:
            return list(self._results)

    @property
    def count(self) -> int:
        with self._lock:
            return len(self._results)

    def elapsed(self) -> float:
        if self._start is None:
            return 0.0
        end = self._end if self._end is not None else self._clock()
        return max(0.0, end - self._start)

    def pages_per_second(self) -> float:
        elapsed = self.elapsed()
        if elapsed <= 0:
            return 0.0
        return self.count / elapsed

    def distinct_hosts(self) -> int:
        with self._lock:
            return len({UrlTools.host(r.url) for r in self._results})

    def search(self, keyword: str) -> List[CrawlResult]:
        needle = keyword.lower()
        with self._lock:
            return [
                r for r in self._results
                if needle in r.url.lower() or (r.title is not None and needle in r.title.lower())
            ]

    def summary(self, total_discovered: int, total_errors: int = 0, slow_hosts: Optional[List[str]] = None) -> CrawlSummary:
        return CrawlSummary(
            start_time=_iso(self._start),
            end_time=_iso(self._end),
            duration_seconds=round(self.elapsed(), 3),
            total_crawled=self.count,
            total_discovered=total_discovered,
            pages_per_second=round(self.pages_per_second(), 2),
            distinct_hosts_crawled=self.distinct_hosts(),
            total_errors=total_errors,
            slow_hosts=list(slow_hosts or []),
        )
