"""
Sitemap XML reader used to seed the frontier.
"""

import gzip

import requests
from bs4 import BeautifulSoup

from site_spider.config import SITEMAP_MAX_NESTING, SITEMAP_TIMEOUT
from site_spider.session import download
from site_spider.utils.log import log


def _soup(xml: str | bytes) -> BeautifulSoup:
    return BeautifulSoup(xml, "xml")


def _locs(soup: BeautifulSoup, entry: str) -> list[str]:
    urls: list[str] = []
    for el in soup.find_all(entry):
        loc = el.find("loc")
        if loc is not None:
            text = loc.get_text(strip=True)
            if text:
                urls.append(text)
    return urls


def parse_sitemap(xml: str | bytes) -> list[str]:
    """Return the page URLs listed in a ``<urlset>`` sitemap."""
    return _locs(_soup(xml), "url")


def parse_sitemap_index(xml: str | bytes) -> list[str]:
    """Return the child sitemap URLs listed in a ``<sitemapindex>``."""
    return _locs(_soup(xml), "sitemap")


def is_sitemap_index(xml: str | bytes) -> bool:
    return _soup(xml).find("sitemapindex") is not None


def fetch_sitemap_urls(
    session: requests.Session,
    sitemap_url: str,
    timeout: float = SITEMAP_TIMEOUT,
    max_nesting: int = SITEMAP_MAX_NESTING,
) -> list[str]:
    """
    Download *sitemap_url* and return every page URL it lists.

    Sitemap indexes are followed up to *max_nesting* levels; gzipped
    sitemaps are decompressed.  A sitemap that cannot be fetched is
    logged and contributes no URLs.
    """
    log.info("Fetching sitemap: %s", sitemap_url)
    try:
        body = download(session, sitemap_url, timeout)
    except requests.RequestException as exc:
        log.error("[ERR] Sitemap %s could not be fetched – %s", sitemap_url, exc)
        return []

    if body[:2] == b"\x1f\x8b":
        try:
            body = gzip.decompress(body)
        except OSError as exc:
            log.error("[ERR] Sitemap %s is not valid gzip – %s", sitemap_url, exc)
            return []

    if is_sitemap_index(body):
        if max_nesting <= 0:
            log.warning("Sitemap index nesting limit reached at %s", sitemap_url)
            return []
        urls: list[str] = []
        for child in parse_sitemap_index(body):
            urls.extend(fetch_sitemap_urls(session, child, timeout, max_nesting - 1))
        return urls

    urls = parse_sitemap(body)
    log.info("Found %d URL(s) in sitemap %s", len(urls), sitemap_url)
    return urls
