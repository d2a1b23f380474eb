"""
Decides whether a discovered link may enter the frontier.
"""

import urllib.parse

from site_spider.config import IMAGE_EXTENSIONS, IMAGE_PATH_RE, IMAGE_QUERY_KEYS
from site_spider.core.frontier import Frontier
from site_spider.utils.log import log
from site_spider.utils.url import host_of

_IMAGE_SUFFIXES = tuple(f".{ext}" for ext in IMAGE_EXTENSIONS)


def is_image_url(url: str) -> bool:
    """
    Return ``True`` if *url* points at an image rather than a page.

    Matches a plain image extension (``logo.png``), an image disguised
    as a page (``logo.png.html``), and query strings that name an image
    (``?img=…``, ``?image=…`` or a parameter value ending in an image
    extension).
    """
    parts = urllib.parse.urlsplit(url)
    if IMAGE_PATH_RE.search(parts.path):
        return True
    for key, value in urllib.parse.parse_qsl(parts.query, keep_blank_values=True):
        if key.lower() in IMAGE_QUERY_KEYS:
            return True
        if value.lower().endswith(_IMAGE_SUFFIXES):
            return True
    return False


class LinkClassifier:
    """
    Gatekeeper between link extraction and the :class:`Frontier`.

    A candidate is crawlable when it lives on *source_domain*, is not an
    image asset, and has not been queued or visited yet.  Acceptance
    claims the URL in the frontier immediately, so the same link found on
    two pages is enqueued once.
    """

    def __init__(self, source_domain: str, frontier: Frontier) -> None:
        self.source_domain = source_domain.lower()
        self.frontier = frontier

    def is_same_domain(self, url: str) -> bool:
        return host_of(url) == self.source_domain

    def classify(self, candidate: str) -> bool:
        if not self.is_same_domain(candidate):
            log.debug("[SKIP] cross-domain: %s", candidate)
            return False
        if is_image_url(candidate):
            log.debug("[SKIP] image asset: %s", candidate)
            return False
        return self.frontier.claim(candidate)
