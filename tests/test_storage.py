import json

from sitecrawl.collector import ResultCollector
from sitecrawl.storage import JsonlWriter, export_json
from sitecrawl.types import CrawlResult


def make_result(url, title=None, depth=0):
    return CrawlResult(
        url=url,
        depth=depth,
        title=title,
        status=200,
        content_type="text/html",
        links_found=0,
        timestamp="2026-01-01T00:00:00+00:00",
        response_time=0.1,
    )


def test_jsonl_writer(tmp_path):
    path = tmp_path / "nested" / "out.jsonl"
    with JsonlWriter(str(path)) as writer:
        writer.write(make_result("https://a.test/", "Ä title"))
        writer.write(make_result("https://a.test/b", depth=1))
    lines = path.read_text(encoding="utf-8").splitlines()
    assert len(lines) == 2
    first = json.loads(lines[0])
    assert first["title"] == "Ä title"
    assert json.loads(lines[1])["depth"] == 1

    with JsonlWriter(str(path), append=True) as writer:
        writer.write(make_result("https://a.test/c"))
    assert len(path.read_text(encoding="utf-8").splitlines()) == 3


def test_export_json(tmp_path):
    ticks = iter([100.0, 104.0])
    collector = ResultCollector(clock=lambda: next(ticks))
    collector.start()
    collector.add(make_result("https://a.test/"))
    collector.add(make_result("https://a.test/b"))
    collector.finish()
    summary = collector.summary(total_discovered=5)

    path = export_json(str(tmp_path / "crawl-results.json"), summary, collector.results)
    data = json.loads(path.read_text(encoding="utf-8"))
    assert data["metadata"]["total_crawled"] == 2
    assert data["metadata"]["total_discovered"] == 5
    assert data["metadata"]["duration_seconds"] == 4.0
    assert data["metadata"]["pages_per_second"] == 0.5
    assert [r["url"] for r in data["results"]] == ["https://a.test/", "https://a.test/b"]
