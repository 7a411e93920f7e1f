import logging
from urllib.parse import urljoin

import urllib3
from urllib3 import exceptions as urllib3_exc
from urllib3.util.retry import Retry

from .config import CrawlConfig
from .errors import FetchNetworkError
from .types import FetchResult


logger = logging.getLogger(__name__)


def _final_url(url: str, response) -> str:
    # Redirect locations may be relative to the hop that produced them.
    current = url
    retries = getattr(response, "retries", None)
    for hop in getattr(retries, "history", ()) or ():
        if hop.redirect_location:
            current = urljoin(current, hop.redirect_location)
    return current


class HttpClient:
    """urllib3 transport. Only follows redirects; retrying is RetryingFetcher's job."""

    def __init__(self, config: CrawlConfig):
        self.user_agent = config.user_agent
        self.timeout = urllib3.Timeout(
            connect=min(config.connect_timeout, config.timeout),
            total=config.timeout,
        )
        self.http = urllib3.PoolManager(
            num_pools=max(8, config.max_concurrency),
            maxsize=config.max_connections,
            headers={
                "User-Agent": config.user_agent,
                "Accept": "text/html,application/xhtml+xml,*/*;q=0.8",
                "Accept-Encoding": "gzip, deflate",
            },
            retries=Retry(
                total=None,
                connect=0,
                read=0,
                status=0,
                other=0,
                redirect=config.max_redirects,
                raise_on_redirect=False,
                raise_on_status=False,
            ),
        )

    def fetch(self, url: str) -> FetchResult:
        try:
            response = self.http.request(
                "GET",
                url,
                timeout=self.timeout,
                preload_content=True,
            )
        except urllib3_exc.HTTPError as exc:
            logger.debug("Network error for %s: %r", url, exc)
            raise FetchNetworkError(url, exc) from exc
        body = response.data or b""
        final_url = _final_url(url, response)
        return FetchResult(
            url=final_url,
            status=response.status,
            content_type=response.headers.get("Content-Type", ""),
            body=body,
            size_bytes=len(body),
        )

    def close(self) -> None:
        self.http.clear()
