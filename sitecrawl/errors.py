from typing import Optional


class CrawlerError(Exception):
    """Base class for everything the crawler raises on purpose."""


class InvalidSeedURL(CrawlerError, ValueError):
    def __init__(self, url: str, reason: str = "not an absolute http(s) URL"):
        self.url = url
        self.reason = reason
        super().__init__(f"Invalid seed URL {url!r}: {reason}")


class FetchNetworkError(CrawlerError):
    """Network-level failure (timeout, refused connection, DNS, protocol).

    HTTP error statuses are not network failures and never raise this.
    """

    def __init__(self, url: str, cause: Optional[BaseException] = None, message: Optional[str] = None):
        self.url = url
        self.cause = cause
        super().__init__(message or f"Failed to fetch {url}: {cause}")
