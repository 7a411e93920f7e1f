from dataclasses import dataclass
from typing import Optional


DEFAULT_USER_AGENT = "sitecrawl/1.0 (+https://example.com; contact: crawler@example.com)"


@dataclass(frozen=True)
class CrawlConfig:
    max_depth: int = 3
    max_concurrency: int = 5
    timeout: float = 30.0
    max_retries: int = 3
    retry_delay: float = 1.0
    delay_between_requests: float = 0.1
    slow_host_threshold: float = 15.0
    connect_timeout: float = 5.0
    max_redirects: int = 5
    max_connections: int = 16
    user_agent: str = DEFAULT_USER_AGENT
    output_path: Optional[str] = None
    metrics_interval: float = 0.0

    def __post_init__(self) -> None:
        if self.max_depth < 0:
            raise ValueError("max_depth must be >= 0")
        if self.max_concurrency < 1:
            raise ValueError("max_concurrency must be >= 1")
        if self.max_retries < 0:
            raise ValueError("max_retries must be >= 0")
        if self.timeout <= 0:
            raise ValueError("timeout must be > 0")
        for name in ("retry_delay", "delay_between_requests", "slow_host_threshold", "metrics_interval"):
            if getattr(self, name) < 0:
                raise ValueError(f"{name} must be >= 0")

    @property
    def attempts(self) -> int:
        return self.max_retries + 1
