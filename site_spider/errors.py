"""
Exception hierarchy for the crawl engine.

Per-URL errors (``MalformedURL``, ``ProbeFailure``, ``RenderError``,
``FilesystemError``) are contained by the page fetcher and turned into
report rows.  Only ``FatalCrawlError`` escapes :func:`site_spider.crawl`.
"""


class SpiderError(Exception):
    """Base class for every error raised by site_spider."""


class MalformedURL(SpiderError, ValueError):
    """A link that cannot be turned into a crawlable absolute URL."""

    def __init__(self, raw: str, reason: str = "unparsable URL") -> None:
        super().__init__(f"{reason}: {raw!r}")
        self.raw = raw
        self.reason = reason


class ProbeFailure(SpiderError):
    """The status probe could not reach the server (timeout, DNS, TLS …)."""

    def __init__(self, url: str, cause: Exception | None = None) -> None:
        msg = f"probe failed for {url}"
        if cause is not None:
            msg += f": {cause}"
        super().__init__(msg)
        self.url = url
        self.cause = cause


NetworkError = ProbeFailure


class RenderError(SpiderError):
    """The headless browser failed to load or serialise a page."""


class FilesystemError(SpiderError):
    """An artifact could not be written below the output root."""


class FatalCrawlError(SpiderError):
    """The crawl cannot start (renderer, output root or seeds unusable)."""
