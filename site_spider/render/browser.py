"""
Headless Chromium renderer built on Playwright's sync API.

One browser process and one browser context serve the whole crawl;
every task gets its own page (tab), closed as soon as the task is done.
"""

from functools import partial

from playwright.sync_api import Error as PlaywrightError
from playwright.sync_api import sync_playwright

from site_spider.config import (
    RENDER_SETTLE_MS,
    RENDER_WAIT_UNTIL,
    SCREENSHOT_SETTLE_MS,
    SCROLL_INTERVAL_MS,
    SCROLL_STEP_PX,
    USER_AGENT,
    VIEWPORT,
)
from site_spider.errors import FatalCrawlError, RenderError
from site_spider.extraction.html_parser import extract_image_urls
from site_spider.render.base import RenderedPage, Renderer
from site_spider.render.cookies import CookieBannerHandler
from site_spider.utils.log import log

# Scroll to the bottom in small steps so lazy-loaded images are fetched
_AUTO_SCROLL_JS = """
([step, interval]) => new Promise((resolve) => {
    let total = 0;
    const timer = setInterval(() => {
        window.scrollBy(0, step);
        total += step;
        if (total >= document.body.scrollHeight) {
            clearInterval(timer);
            resolve();
        }
    }, interval);
})
"""


class PlaywrightRenderer(Renderer):
    """Renders pages in headless Chromium."""

    def __init__(
        self,
        cookie_handler: CookieBannerHandler | None = None,
        headless: bool = True,
        viewport: dict[str, int] | None = None,
        user_agent: str = USER_AGENT,
        settle_ms: int = RENDER_SETTLE_MS,
    ) -> None:
        self.cookie_handler = cookie_handler or CookieBannerHandler()
        self.headless = headless
        self.viewport = dict(viewport or VIEWPORT)
        self.user_agent = user_agent
        self.settle_ms = settle_ms
        self._playwright = None
        self._browser = None
        self._context = None

    # ------------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------------

    def start(self) -> None:
        if self._context is not None:
            return
        try:
            self._playwright = sync_playwright().start()
            self._browser = self._playwright.chromium.launch(
                headless=self.headless,
                args=["--no-sandbox", "--disable-setuid-sandbox"],
            )
            self._context = self._browser.new_context(
                viewport=self.viewport,
                user_agent=self.user_agent,
            )
        except PlaywrightError as exc:
            self.close()
            raise FatalCrawlError(f"cannot start headless browser: {exc}") from exc
        log.info("[RENDER] Chromium started (headless=%s, viewport=%dx%d)",
                 self.headless, self.viewport["width"], self.viewport["height"])

    def close(self) -> None:
        for name in ("_context", "_browser"):
            obj = getattr(self, name)
            setattr(self, name, None)
            if obj is None:
                continue
            try:
                obj.close()
            except PlaywrightError as exc:
                log.debug("[RENDER] Error closing %s: %s", name.lstrip("_"), exc)
        if self._playwright is not None:
            playwright, self._playwright = self._playwright, None
            try:
                playwright.stop()
            except PlaywrightError as exc:
                log.debug("[RENDER] Error stopping Playwright: %s", exc)
            log.info("[RENDER] Chromium closed")

    # ------------------------------------------------------------------
    # Pages
    # ------------------------------------------------------------------

    def render(self, url: str, timeout_ms: int) -> RenderedPage:
        if self._context is None:
            raise RenderError("renderer has not been started")
        try:
            page = self._context.new_page()
        except PlaywrightError as exc:
            raise RenderError(f"cannot open a page for {url}: {exc}") from exc

        try:
            page.goto(url, wait_until=RENDER_WAIT_UNTIL, timeout=timeout_ms)
            self.cookie_handler.dismiss(page, url)
            page.wait_for_timeout(self.settle_ms)
            html = page.content()
            final_url = page.url
        except PlaywrightError as exc:
            self._close_page(page)
            raise RenderError(f"render failed for {url}: {exc}") from exc

        return RenderedPage(
            url=url,
            final_url=final_url,
            html=html,
            image_urls=extract_image_urls(html, final_url),
            handle=page,
            _closer=partial(self._close_page, page),
        )

    def capture(self, page: RenderedPage) -> bytes:
        pw_page = page.handle
        if pw_page is None:
            raise RenderError(f"page for {page.url} is already closed")
        try:
            pw_page.evaluate(_AUTO_SCROLL_JS, [SCROLL_STEP_PX, SCROLL_INTERVAL_MS])
            pw_page.wait_for_timeout(SCREENSHOT_SETTLE_MS)
            pw_page.evaluate("() => window.scrollTo(0, 0)")
            pw_page.wait_for_timeout(SCREENSHOT_SETTLE_MS // 2)
            return pw_page.screenshot(full_page=True, type="png")
        except PlaywrightError as exc:
            raise RenderError(f"screenshot failed for {page.url}: {exc}") from exc

    @staticmethod
    def _close_page(page) -> None:
        try:
            page.close()
        except PlaywrightError as exc:
            log.debug("[RENDER] Error closing page: %s", exc)
