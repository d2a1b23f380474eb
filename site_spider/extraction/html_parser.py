"""
HTML link/image extraction and reference rewriting via BeautifulSoup.
"""

import urllib.parse

from bs4 import BeautifulSoup

from site_spider.config import REWRITE_ATTRS

_BS4_PARSER = "lxml"

# References that must be left exactly as written
_KEEP_AS_IS = ("#", "data:", "javascript:", "mailto:", "tel:", "about:", "blob:")


def _soup(html: str) -> BeautifulSoup:
    return BeautifulSoup(html, _BS4_PARSER)


def _join(base: str, raw: str) -> str:
    try:
        return urllib.parse.urljoin(base, raw)
    except ValueError:
        # left for the normaliser to reject
        return raw


def document_base(soup: BeautifulSoup, page_url: str) -> str:
    """Resolve ``<base href>`` against *page_url* (or return *page_url*)."""
    base_el = soup.find("base", href=True)
    if base_el is not None:
        href = base_el["href"].strip()
        if href:
            return _join(page_url, href)
    return page_url


def extract_hyperlinks(html: str, page_url: str) -> list[str]:
    """
    Return every ``<a href>`` / ``<area href>`` target in *html*, resolved
    against the document base, in document order and without duplicates.

    Fragment-only links (``#top``) point back at the same document and
    are dropped.  Non-HTTP schemes are returned untouched so the caller's
    normaliser can reject them.
    """
    soup = _soup(html)
    base = document_base(soup, page_url)
    found: dict[str, None] = {}
    for el in soup.find_all(("a", "area"), href=True):
        raw = el["href"].strip()
        if not raw or raw.startswith("#"):
            continue
        found.setdefault(_join(base, raw), None)
    return list(found)


def extract_image_urls(html: str, page_url: str) -> list[str]:
    """Absolute ``<img src>`` URLs in document order, without duplicates."""
    soup = _soup(html)
    base = document_base(soup, page_url)
    found: dict[str, None] = {}
    for el in soup.find_all("img", src=True):
        raw = el["src"].strip()
        if not raw or raw.startswith("data:"):
            continue
        found.setdefault(_join(base, raw), None)
    return list(found)


def absolutize_references(html: str, page_url: str) -> str:
    """
    Rewrite relative ``src``/``href`` attributes in *html* to absolute
    URLs so the archived copy still points at the live site.

    Fragment-only, ``data:``, ``javascript:``, ``mailto:`` and similar
    references are kept verbatim.
    """
    soup = _soup(html)
    base = document_base(soup, page_url)
    for attr in REWRITE_ATTRS:
        for el in soup.find_all(attrs={attr: True}):
            raw = el[attr]
            if not isinstance(raw, str):
                continue
            value = raw.strip()
            if not value or value.lower().startswith(_KEEP_AS_IS):
                continue
            try:
                if urllib.parse.urlsplit(value).scheme:
                    continue
            except ValueError:
                continue
            el[attr] = _join(base, value)
    return str(soup)
