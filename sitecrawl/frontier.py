import logging
import threading
from collections import deque
from typing import Deque, Optional, Set

from .parsing import Origin, UrlTools
from .types import FrontierEntry


logger = logging.getLogger(__name__)


class Frontier:
    """Deduplicating FIFO of (url, depth) entries shared by all workers.

    ``take()`` blocks while the queue is empty but some worker is still
    active, since that worker may admit new links. It returns ``None`` only
    once the queue is empty and the active count is zero. Every entry handed
    out by ``take()`` must be paired with one ``task_done()``.
    """

    def __init__(self, max_depth: int):
        self.max_depth = max_depth
        self._queue: Deque[FrontierEntry] = deque()
        self._discovered: Set[str] = set()
        self._active = 0
        self._cond = threading.Condition()

    def seed(self, url: str) -> str:
        normalized = UrlTools.normalize_seed(url)
        with self._cond:
            if normalized not in self._discovered:
                self._discovered.add(normalized)
                self._queue.append(FrontierEntry(normalized, 0))
                self._cond.notify()
        return normalized

    def admit(self, url: str, depth: int, origin: Optional[Origin]) -> bool:
        if depth > self.max_depth:
            return False
        if not UrlTools.is_same_origin(url, origin):
            return False
        with self._cond:
            if url in self._discovered:
                return False
            self._discovered.add(url)
            self._queue.append(FrontierEntry(url, depth))
            self._cond.notify()
        logger.debug("Admitted %s at depth %d", url, depth)
        return True

    def take(self) -> Optional[FrontierEntry]:
        with self._cond:
            while not self._queue:
                if self._active == 0:
                    self._cond.notify_all()
                    return None
                self._cond.wait()
            self._active += 1
            return self._queue.popleft()

    def task_done(self) -> None:
        with self._cond:
            if self._active <= 0:
                raise ValueError("task_done() called more times than take() returned entries")
            self._active -= 1
            if self._active == 0:
                # Waiters either pick up what is left or see the drained state.
                self._cond.notify_all()

    @property
    def discovered(self) -> Set[str]:
        with self._cond:
            return set(self._discovered)

    @property
    def discovered_count(self) -> int:
        with self._cond:
            return len(self._discovered)

    @property
    def pending(self) -> int:
        with self._cond:
            return len(self._queue)

    @property
    def active(self) -> int:
        with self._cond:
            return self._active

    def is_drained(self) -> bool:
        with self._cond:
            return not self._queue and self._active == 0
