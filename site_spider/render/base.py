"""
Renderer interface – what the crawl engine needs from a headless browser.
"""

import abc
from dataclasses import dataclass, field
from typing import Any, Callable


@dataclass
class RenderedPage:
    """
    Fully rendered page, still open in the renderer until :meth:`close`.

    ``handle`` is the backend's own page object (a Playwright ``Page``
    for :class:`~site_spider.render.browser.PlaywrightRenderer`); the
    crawl engine never touches it.
    """

    url: str
    final_url: str
    html: str
    image_urls: list[str] = field(default_factory=list)
    handle: Any = field(default=None, repr=False)
    _closer: Callable[[], None] | None = field(default=None, repr=False)

    def close(self) -> None:
        closer, self._closer = self._closer, None
        self.handle = None
        if closer is not None:
            closer()

    def __enter__(self) -> "RenderedPage":
        return self

    def __exit__(self, *exc_info) -> None:
        self.close()


class Renderer(abc.ABC):
    """
    A shared, heavyweight browser.  Acquired once per crawl with
    ``with renderer:`` and released on every exit path; pages are cheap
    and opened one per task.
    """

    def start(self) -> None:
        """Acquire the browser.  Raise ``FatalCrawlError`` on failure."""

    def close(self) -> None:
        """Release the browser.  Safe to call more than once."""

    @abc.abstractmethod
    def render(self, url: str, timeout_ms: int) -> RenderedPage:
        """Load *url*, run its scripts, dismiss overlays and return the
        DOM as HTML.  Raise ``RenderError`` on failure."""

    @abc.abstractmethod
    def capture(self, page: RenderedPage) -> bytes:
        """Return a full-page PNG of an open *page*.  Raise
        ``RenderError`` on failure."""

    def __enter__(self) -> "Renderer":
        self.start()
        return self

    def __exit__(self, *exc_info) -> None:
        self.close()
