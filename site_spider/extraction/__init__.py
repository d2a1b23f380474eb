"""Link, image and sitemap extraction."""

from site_spider.extraction.html_parser import (
    absolutize_references,
    extract_hyperlinks,
    extract_image_urls,
)
from site_spider.extraction.seeds import filter_ignored, read_urls_from_file
from site_spider.extraction.sitemap import fetch_sitemap_urls, parse_sitemap

__all__ = [
    "absolutize_references",
    "extract_hyperlinks",
    "extract_image_urls",
    "fetch_sitemap_urls",
    "filter_ignored",
    "parse_sitemap",
    "read_urls_from_file",
]
