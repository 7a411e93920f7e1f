from typing import List, Optional, Tuple
from urllib.parse import urldefrag, urljoin, urlsplit, urlunsplit

from bs4 import BeautifulSoup

from .errors import InvalidSeedURL
from .types import PageLinks


DEFAULT_PORTS = {"http": 80, "https": 443}
HYPERTEXT_TYPES = ("text/html", "application/xhtml+xml")

Origin = Tuple[str, str, int]


class UrlTools:
    @staticmethod
    def canonical(url: str) -> str:
        url, _ = urldefrag(url)
        parts = urlsplit(url)
        scheme = parts.scheme.lower()
        path = parts.path or "/"
        return urlunsplit((scheme, UrlTools._netloc(parts, scheme), path, parts.query, ""))

    @staticmethod
    def _netloc(parts, scheme: str) -> str:
        # Explicit default ports are dropped so ":443" and "" dedupe together.
        if not parts.hostname:
            return parts.netloc.lower()
        try:
            port = parts.port
        except ValueError:
            return parts.netloc.lower()
        host = parts.hostname
        if ":" in host:
            host = f"[{host}]"
        netloc = host
        if port is not None and port != DEFAULT_PORTS.get(scheme):
            netloc = f"{host}:{port}"
        if "@" in parts.netloc:
            userinfo = parts.netloc.rsplit("@", 1)[0]
            netloc = f"{userinfo}@{netloc}"
        return netloc

    @staticmethod
    def normalize_seed(url: str) -> str:
        if not isinstance(url, str) or not url.strip():
            raise InvalidSeedURL(str(url), "empty")
        url = url.strip()
        parts = urlsplit(url)
        if parts.scheme.lower() not in DEFAULT_PORTS:
            raise InvalidSeedURL(url)
        if not parts.hostname:
            raise InvalidSeedURL(url, "missing host")
        try:
            parts.port
        except ValueError:
            raise InvalidSeedURL(url, "bad port") from None
        return UrlTools.canonical(url)

    @staticmethod
    def normalize_link(base_url: str, href: str) -> Optional[str]:
        if not href:
            return None
        href = href.strip()
        if href.startswith(("mailto:", "javascript:", "tel:", "#")):
            return None
        try:
            absolute = urljoin(base_url, href)
        except ValueError:
            return None
        parsed = urlsplit(absolute)
        if parsed.scheme not in DEFAULT_PORTS or not parsed.netloc:
            return None
        return UrlTools.canonical(absolute)

    @staticmethod
    def origin(url: str) -> Optional[Origin]:
        """(scheme, host, port) with the scheme's default port filled in, or None if unparseable."""
        parts = urlsplit(url)
        scheme = parts.scheme.lower()
        if not parts.hostname:
            return None
        try:
            port = parts.port
        except ValueError:
            return None
        if port is None:
            port = DEFAULT_PORTS.get(scheme, 0)
        return scheme, parts.hostname.lower(), port

    @staticmethod
    def is_same_origin(url: str, origin: Optional[Origin]) -> bool:
        if origin is None:
            return False
        return UrlTools.origin(url) == origin

    @staticmethod
    def host(url: str) -> str:
        return (urlsplit(url).hostname or "").lower()

    @staticmethod
    def is_hypertext(content_type: str) -> bool:
        ct = (content_type or "").lower()
        return any(t in ct for t in HYPERTEXT_TYPES)


class Extractor:
    """Default link extraction: BeautifulSoup over the raw document bytes."""

    def extract(self, body: bytes, base_url: str) -> PageLinks:
        soup = BeautifulSoup(body, "html.parser")
        title_el = soup.find("title")
        title = title_el.get_text(strip=True) if title_el else ""
        links: List[str] = []
        for el in soup.find_all(["a", "link"], href=True):
            normalized = UrlTools.normalize_link(base_url, el["href"])
            if normalized:
                links.append(normalized)
        return PageLinks(title=title or None, links=links)
