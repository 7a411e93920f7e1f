#!/usr/bin/env python3
import argparse
import json
import logging
import sys
from typing import List, Optional

from sitecrawl.config import CrawlConfig, DEFAULT_USER_AGENT
from sitecrawl.engine import Crawler
from sitecrawl.errors import InvalidSeedURL
from sitecrawl.prometheus_exporter import PrometheusExporter
from sitecrawl.storage import export_json
from sitecrawl.types import CrawlError


def parse_args(argv: Optional[List[str]] = None) -> argparse.Namespace:
    defaults = CrawlConfig()
    parser = argparse.ArgumentParser(description="Same-origin, depth-limited web crawler with retry and slow-host pacing.")
    parser.add_argument("seed", help="Absolute http(s) URL to start from.")
    parser.add_argument("--max-depth", type=int, default=defaults.max_depth, help="Maximum link hops from the seed.")
    parser.add_argument("--concurrency", type=int, default=defaults.max_concurrency, help="Number of concurrent workers.")
    parser.add_argument("--timeout", type=float, default=defaults.timeout, help="Per-request timeout in seconds.")
    parser.add_argument("--connect-timeout", type=float, default=defaults.connect_timeout, help="Connect timeout in seconds.")
    parser.add_argument("--max-retries", type=int, default=defaults.max_retries, help="Retries after a network failure.")
    parser.add_argument("--retry-delay", type=float, default=defaults.retry_delay, help="Backoff base in seconds.")
    parser.add_argument("--delay", type=float, default=defaults.delay_between_requests, help="Per-worker politeness delay in seconds.")
    parser.add_argument("--slow-threshold", type=float, default=defaults.slow_host_threshold, help="Response time in seconds that marks a host slow.")
    parser.add_argument("--max-redirects", type=int, default=defaults.max_redirects, help="Redirects followed per request.")
    parser.add_argument("--max-connections", type=int, default=defaults.max_connections, help="Max connections per pool for HTTP client.")
    parser.add_argument("--user-agent", default=DEFAULT_USER_AGENT, help="User-Agent header to send.")
    parser.add_argument("--out", dest="output_path", default=None, help="Stream results to this JSONL file.")
    parser.add_argument("--export", dest="export_path", default=None, help="Write metadata and results to this JSON file.")
    parser.add_argument("--search", default=None, help="Print results whose URL or title contains this keyword.")
    parser.add_argument("--metrics-interval", type=float, default=0.0, help="Seconds between perf logs (0 to disable).")
    parser.add_argument("--prometheus-port", type=int, default=None, help="Serve Prometheus metrics on this port.")
    parser.add_argument("-v", "--verbose", action="count", default=0, help="Increase logging verbosity.")
    return parser.parse_args(argv)


def main(argv: Optional[List[str]] = None) -> int:
    args = parse_args(argv)
    log_level = logging.WARNING
    if args.verbose == 1:
        log_level = logging.INFO
    elif args.verbose >= 2:
        log_level = logging.DEBUG
    logging.basicConfig(
        level=log_level,
        format="%(asctime)s %(levelname)s %(threadName)s %(message)s",
    )

    config = CrawlConfig(
        max_depth=max(0, args.max_depth),
        max_concurrency=max(1, args.concurrency),
        timeout=max(0.1, args.timeout),
        connect_timeout=max(0.1, args.connect_timeout),
        max_retries=max(0, args.max_retries),
        retry_delay=max(0.0, args.retry_delay),
        delay_between_requests=max(0.0, args.delay),
        slow_host_threshold=max(0.0, args.slow_threshold),
        max_redirects=max(0, args.max_redirects),
        max_connections=max(1, args.max_connections),
        user_agent=args.user_agent,
        output_path=args.output_path,
        metrics_interval=max(0.0, args.metrics_interval),
    )

    crawler = Crawler(config)
    exporter = None
    if args.prometheus_port:
        exporter = PrometheusExporter(crawler.metrics, port=args.prometheus_port)
        exporter.start()
        logging.info("Prometheus metrics available at http://0.0.0.0:%d/metrics", args.prometheus_port)

    def report(err: CrawlError) -> None:
        print(f"[ERROR] Failed to crawl {err.url}: {err.message}", file=sys.stderr)

    try:
        session = crawler.run(args.seed, on_error=report)
    except InvalidSeedURL as exc:
        print(str(exc), file=sys.stderr)
        return 2
    finally:
        crawler.close()
        if exporter:
            exporter.stop()

    summary = session.summary()
    if args.export_path:
        path = export_json(args.export_path, summary, session.results)
        logging.info("Exported %d results to %s", summary.total_crawled, path)
    if args.search:
        for result in session.search(args.search):
            print(f"{result.url}\t{result.title or ''}")
    print(json.dumps(summary.to_dict(), indent=2))
    return 0


if __name__ == "__main__":
    sys.exit(main())
