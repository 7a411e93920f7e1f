import json

import crawl as cli
from sitecrawl.engine import Crawler
from sitecrawl.types import FetchResult, HttpClientProtocol


class TinySite(HttpClientProtocol):
    pages = {
        "https://a.test/": b'<html><head><title>Home</title></head><body><a href="/about">a</a></body></html>',
        "https://a.test/about": b"<html><head><title>About us</title></head></html>",
    }

    def fetch(self, url):
        body = self.pages.get(url, b"")
        return FetchResult(url=url, status=200 if body else 404, content_type="text/html", body=body, size_bytes=len(body))


def test_invalid_seed_exit_code(capsys):
    assert cli.main(["not-a-url"]) == 2
    assert "Invalid seed URL" in capsys.readouterr().err


def test_cli_prints_summary_and_exports(monkeypatch, tmp_path, capsys):
    monkeypatch.setattr(cli, "Crawler", lambda config: Crawler(config, http_client=TinySite()))
    export = tmp_path / "crawl-results.json"
    code = cli.main(["https://a.test/", "--delay", "0", "--export", str(export), "--search", "about"])
    assert code == 0

    out = capsys.readouterr().out
    assert "https://a.test/about\tAbout us" in out
    summary = json.loads(out[out.index("{"):])
    assert summary["total_crawled"] == 2
    assert summary["total_discovered"] == 2

    data = json.loads(export.read_text(encoding="utf-8"))
    assert len(data["results"]) == 2
