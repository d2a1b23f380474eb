"""
Page fetch coordinator – resolves one :class:`CrawlTask` end to end.

probe → content-type gate → render & persist → link extraction → pause
"""

import hashlib
import time
import urllib.parse
from pathlib import Path

import requests

from site_spider.config import (
    HTML_CONTENT_TYPES,
    IMAGE_TIMEOUT,
    IMAGES_LIST_FILE,
    PROBE_TIMEOUT,
    RENDER_TIMEOUT_MS,
    STATUS_ERROR,
)
from site_spider.core.classifier import LinkClassifier
from site_spider.core.frontier import CrawlTask, Frontier
from site_spider.core.report import CrawlReport, CrawlResult
from site_spider.core.storage import safe_filename, save_file, save_text
from site_spider.errors import (
    FilesystemError,
    MalformedURL,
    ProbeFailure,
    RenderError,
)
from site_spider.extraction.html_parser import absolutize_references, extract_hyperlinks
from site_spider.render.base import RenderedPage, Renderer
from site_spider.render.screenshot import encode_webp
from site_spider.session import ProbeResult, download, probe
from site_spider.utils.log import log
from site_spider.utils.url import normalize_url, output_location


class PageFetcher:
    """
    Fetches, archives and expands one task at a time.

    Every per-URL failure is caught in :meth:`process` and returned as a
    :class:`CrawlResult`; nothing raised while handling one task stops
    the crawl.
    """

    def __init__(
        self,
        *,
        session: requests.Session,
        renderer: Renderer,
        frontier: Frontier,
        classifier: LinkClassifier,
        report: CrawlReport,
        output_dir: Path,
        scheme: str | None = None,
        rate_limit_ms: int = 0,
        download_images: bool = True,
        capture_screenshot: bool = False,
        probe_timeout: float = PROBE_TIMEOUT,
        render_timeout_ms: int = RENDER_TIMEOUT_MS,
    ) -> None:
        self.session = session
        self.renderer = renderer
        self.frontier = frontier
        self.classifier = classifier
        self.report = report
        self.output_dir = output_dir
        self.scheme = scheme
        self.rate_limit_ms = rate_limit_ms
        self.download_images = download_images
        self.capture_screenshot = capture_screenshot
        self.probe_timeout = probe_timeout
        self.render_timeout_ms = render_timeout_ms

    # ------------------------------------------------------------------
    # Public API
    # ------------------------------------------------------------------

    def process(self, task: CrawlTask) -> CrawlResult:
        """Resolve *task*, record its result, then honour the rate limit."""
        try:
            result = self._process(task)
        finally:
            self._pause()
        self.report.add_result(result)
        return result

    # ------------------------------------------------------------------
    # Steps
    # ------------------------------------------------------------------

    def _process(self, task: CrawlTask) -> CrawlResult:
        log.info("[CRAWL] depth %d  %s  (%d queued)",
                 task.depth, task.url, len(self.frontier))

        # 1. status probe
        try:
            probed = probe(self.session, task.url, self.probe_timeout)
        except ProbeFailure as exc:
            log.warning("[BROKEN] %s – %s", task.url, exc.cause or exc)
            return CrawlResult(task.url, task.depth, STATUS_ERROR)

        if not probed.ok:
            log.warning("[BROKEN] HTTP %d  %s", probed.status, task.url)
            return CrawlResult(task.url, task.depth, probed.status,
                               probed.content_type)

        log.debug("[PROBE] HTTP %d  %s  %s",
                  probed.status, probed.mime_type or "-", task.url)

        # 2. content-type and redirect gate
        if not self._follow_redirect(task, probed):
            return CrawlResult(task.url, task.depth, probed.status,
                               probed.content_type)
        if probed.mime_type and probed.mime_type not in HTML_CONTENT_TYPES:
            log.info("[LEAF] non-HTML (%s): %s", probed.mime_type, task.url)
            return CrawlResult(task.url, task.depth, probed.status,
                               probed.content_type)

        # 3 + 4. render, persist, extract
        error = None
        try:
            with self.renderer.render(task.url, self.render_timeout_ms) as page:
                self._persist(task, page)
                self._expand(task, page)
        except (RenderError, FilesystemError) as exc:
            log.error("[ERR] %s – %s", task.url, exc)
            error = str(exc)

        return CrawlResult(task.url, task.depth, probed.status,
                           probed.content_type, error)

    def _follow_redirect(self, task: CrawlTask, probed: ProbeResult) -> bool:
        """Register a same-domain redirect target as visited; ``False``
        when the redirect leaves the crawl domain."""
        try:
            final = normalize_url(probed.final_url, scheme=self.scheme)
        except MalformedURL:
            return True
        if final == task.url:
            return True
        if not self.classifier.is_same_domain(final):
            log.info("[LEAF] redirected off-site to %s: %s", final, task.url)
            return False
        log.debug("[PROBE] redirect %s → %s", task.url, final)
        self.frontier.mark_visited(final)
        return True

    def _persist(self, task: CrawlTask, page: RenderedPage) -> None:
        location = output_location(task.url)
        html = absolutize_references(page.html, page.final_url or task.url)
        html_path = self.output_dir / location.html_path
        save_text(html_path, f"<!-- {task.url} -->\n{html}")
        log.info("[SAVE] %s", html_path)

        if page.image_urls:
            images_dir = self.output_dir / location.images_dir
            save_text(images_dir / IMAGES_LIST_FILE, "\n".join(page.image_urls) + "\n")
            if self.download_images:
                self._download_images(page.image_urls, images_dir)

        if self.capture_screenshot:
            shot_path = self.output_dir / location.screenshot_path
            save_file(shot_path, encode_webp(self.renderer.capture(page)))
            log.info("[SHOT] %s", shot_path)

    def _download_images(self, image_urls: list[str], images_dir: Path) -> None:
        """Best effort: a failed image is logged and the page carries on."""
        for index, url in enumerate(image_urls, 1):
            path = urllib.parse.urlsplit(url).path
            # /a/logo.png and /b/logo.png must not share a file
            digest = hashlib.sha256(url.encode("utf-8")).hexdigest()[:8]
            name = safe_filename(urllib.parse.unquote(path), f"image_{index}", tag=digest)
            try:
                content = download(self.session, url, IMAGE_TIMEOUT)
            except requests.RequestException as exc:
                log.warning("[IMG] Failed %s – %s", url, exc)
                continue
            try:
                save_file(images_dir / name, content)
            except FilesystemError as exc:
                log.warning("[IMG] Cannot save %s – %s", url, exc)
                continue
            log.debug("[IMG] %s → %s", url, images_dir / name)

    def _expand(self, task: CrawlTask, page: RenderedPage) -> None:
        expand = self.frontier.can_expand(task)
        added = 0
        for raw in extract_hyperlinks(page.html, page.final_url or task.url):
            try:
                link = normalize_url(raw, scheme=self.scheme)
            except MalformedURL as exc:
                log.debug("[SKIP] %s", exc)
                continue
            self.report.add_link(task.url, link)
            if expand and self.classifier.classify(link):
                if self.frontier.push(CrawlTask(link, task.depth + 1)):
                    added += 1
        if added:
            log.debug("[QUEUE] +%d new URL(s) from %s", added, task.url)
        elif not expand:
            log.debug("[QUEUE] depth limit reached, links not followed: %s", task.url)

    def _pause(self) -> None:
        if self.rate_limit_ms > 0:
            time.sleep(self.rate_limit_ms / 1000)
