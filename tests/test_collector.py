import threading

from sitecrawl.collector import ResultCollector
from sitecrawl.types import CrawlResult


def make_result(url, title=None):
    return CrawlResult(
        url=url,
        depth=0,
        title=title,
        status=200,
        content_type="text/html",
        links_found=0,
        timestamp="2026-01-01T00:00:00+00:00",
        response_time=0.0,
    )


def test_empty_collector():
    c = ResultCollector()
    assert c.count == 0
    assert c.pages_per_second() == 0.0
    summary = c.summary(total_discovered=0)
    assert summary.start_time is None
    assert summary.total_crawled == 0


def test_search_is_case_insensitive_over_url_and_title():
    c = ResultCollector()
    c.add(make_result("https://a.test/Docs", "Guide"))
    c.add(make_result("https://a.test/x", "IP Fabric Docs"))
    c.add(make_result("https://a.test/y"))
    assert [r.url for r in c.search("docs")] == ["https://a.test/Docs", "https://a.test/x"]
    assert [r.url for r in c.search("GUIDE")] == ["https://a.test/Docs"]
    assert c.search("nothing") == []


def test_throughput_and_hosts():
    ticks = iter([10.0, 12.0])
    c = ResultCollector(clock=lambda: next(ticks))
    c.start()
    for u in ("https://a.test/", "https://a.test/b", "http://b.test/", "https://A.test/c"):
        c.add(make_result(u))
    c.finish()
    assert c.elapsed() == 2.0
    assert c.pages_per_second() == 2.0
    assert c.distinct_hosts() == 2
    summary = c.summary(total_discovered=7, total_errors=1, slow_hosts=["b.test"])
    assert summary.to_dict()["distinct_hosts_crawled"] == 2
    assert summary.slow_hosts == ["b.test"]
    assert summary.total_errors == 1


def test_concurrent_adds_keep_every_result():
    c = ResultCollector()

    def add(n):
        for i in range(100):
            c.add(make_result(f"https://a.test/{n}/{i}"))

    threads = [threading.Thread(target=add, args=(n,)) for n in range(8)]
    for t in threads:
        t.start()
    for t in threads:
        t.join()
    assert c.count == 800
