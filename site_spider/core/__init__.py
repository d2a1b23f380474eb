"""Core crawl engine – frontier, link classifier, fetch coordinator, report."""

from site_spider.core.classifier import LinkClassifier, is_image_url
from site_spider.core.crawler import Crawler, CrawlSummary, crawl
from site_spider.core.fetcher import PageFetcher
from site_spider.core.frontier import CrawlTask, Frontier, VisitedSet
from site_spider.core.report import CrawlReport, CrawlResult, LinkRecord
from site_spider.core.storage import ensure_output_root, save_file, save_text

__all__ = [
    "CrawlReport",
    "CrawlResult",
    "CrawlSummary",
    "CrawlTask",
    "Crawler",
    "Frontier",
    "LinkClassifier",
    "LinkRecord",
    "PageFetcher",
    "VisitedSet",
    "crawl",
    "ensure_output_root",
    "is_image_url",
    "save_file",
    "save_text",
]
