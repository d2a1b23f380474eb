"""
site_spider
===========
Breadth-first spider that renders every page of one web site in a
headless browser and archives it to local disk, together with image
lists, optional screenshots and link/broken-link reports.

Package structure
-----------------
site_spider/
├── __init__.py       – package init and public API
├── __main__.py       – ``python -m site_spider``
├── cli.py            – argparse CLI
├── config.py         – configuration constants
├── errors.py         – exception hierarchy
├── session.py        – requests.Session factory, status probe, downloads
├── core/             – crawl engine
│   ├── frontier.py   – FIFO queue + visited set
│   ├── classifier.py – same-domain / image / dedup gate
│   ├── fetcher.py    – per-URL probe → render → persist → expand
│   ├── report.py     – CSV / text / JSON crawl reports
│   ├── storage.py    – filesystem writes
│   └── crawler.py    – Crawler class and crawl() entry point
├── extraction/       – HTML link/image extraction, sitemaps, seed files
├── render/           – Playwright renderer, cookie banners, WebP encoding
└── utils/            – URL normalisation, output paths, logging

Quick start
-----------
    from pathlib import Path
    from site_spider import crawl

    summary = crawl(
        ["https://example.com/"],
        max_depth=2,
        rate_limit_ms=1000,
        download_images=True,
        capture_screenshot=False,
        output_dir=Path("output/example.com"),
    )
    print(summary.total, summary.broken)
"""

from site_spider.core.crawler import Crawler, CrawlSummary, crawl
from site_spider.errors import (
    FatalCrawlError,
    FilesystemError,
    MalformedURL,
    NetworkError,
    ProbeFailure,
    RenderError,
    SpiderError,
)
from site_spider.utils.url import normalize_url, output_location

__version__ = "1.0.0"

__all__ = [
    "CrawlSummary",
    "Crawler",
    "FatalCrawlError",
    "FilesystemError",
    "MalformedURL",
    "NetworkError",
    "ProbeFailure",
    "RenderError",
    "SpiderError",
    "crawl",
    "normalize_url",
    "output_location",
]
