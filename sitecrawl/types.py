from dataclasses import asdict, dataclass, field
from typing import Any, Dict, List, NamedTuple, Optional, Protocol


class FrontierEntry(NamedTuple):
    url: str
    depth: int


@dataclass(frozen=True)
class FetchResult:
    url: str
    status: int
    content_type: str
    body: bytes
    size_bytes: int


@dataclass(frozen=True)
class PageLinks:
    title: Optional[str]
    links: List[str] = field(default_factory=list)


@dataclass(frozen=True)
class CrawlResult:
    url: str
    depth: int
    title: Optional[str]
    status: int
    content_type: str
    links_found: int
    timestamp: str
    response_time: float

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)


@dataclass(frozen=True)
class CrawlError:
    url: str
    cause: BaseException
    message: str


class HttpClientProtocol(Protocol):
    def fetch(self, url: str) -> FetchResult: ...


class LinkExtractorProtocol(Protocol):
    def extract(self, body: bytes, base_url: str) -> PageLinks: ...
