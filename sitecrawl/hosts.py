import threading
from dataclasses import dataclass
from typing import Dict, List, Optional


MAX_HOST_DELAY = 10.0


@dataclass
class HostState:
    host: str
    slow: bool = False
    delay: float = 0.0


class HostStateTracker:
    """Per-host slow marking. A slow host stays slow for the whole run."""

    def __init__(self, max_delay: float = MAX_HOST_DELAY):
        self.max_delay = max_delay
        self._hosts: Dict[str, HostState] = {}
        self._lock = threading.Lock()

    def delay_for(self, host: str) -> Optional[float]:
        with self._lock:
            state = self._hosts.get(host)
            if state is None or not state.slow:
                return None
            return state.delay

    def mark_slow(self, host: str, response_time: float) -> float:
        delay = min(max(0.0, response_time), self.max_delay)
        with self._lock:
            state = self._hosts.setdefault(host, HostState(host=host))
            state.slow = True
            state.delay = delay
        return delay

    def is_slow(self, host: str) -> bool:
        return self.delay_for(host) is not None

    def slow_hosts(self) -> List[str]:
        with self._lock:
            return sorted(h for h, s in self._hosts.items() if s.slow)

    def snapshot(self) -> Dict[str, HostState]:
        with self._lock:
            return {h: HostState(host=s.host, slow=s.slow, delay=s.delay) for h, s in self._hosts.items()}
