"""
Breadth-first site crawler.

Starts from one or more seed URLs on a single host, renders every
reachable same-domain page with a headless browser and archives it
below the output directory.  Supports:

* Depth limit (``max_depth`` hops from the seeds)
* Fixed pause between page fetches (``rate_limit_ms``)
* Status probe before rendering; broken URLs are reported, not rendered
* Per-page image list and optional image download
* Optional full-page WebP screenshot
* Cookie-consent overlay dismissal from an injected selector table
* Link provenance and broken-link reports
"""

import time
import urllib.parse
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Iterable, Mapping

import requests
from tqdm import tqdm

from site_spider.config import (
    DEFAULT_CAPTURE_SCREENSHOT,
    DEFAULT_DOWNLOAD_IMAGES,
    DEFAULT_MAX_DEPTH,
    DEFAULT_RATE_LIMIT_MS,
    PROBE_TIMEOUT,
    RENDER_TIMEOUT_MS,
)
from site_spider.core.classifier import LinkClassifier
from site_spider.core.fetcher import PageFetcher
from site_spider.core.frontier import Frontier
from site_spider.core.report import CrawlReport, CrawlResult
from site_spider.core.storage import ensure_output_root
from site_spider.errors import FatalCrawlError, FilesystemError, MalformedURL
from site_spider.render.base import Renderer
from site_spider.render.browser import PlaywrightRenderer
from site_spider.render.cookies import CookieBannerHandler
from site_spider.session import build_session
from site_spider.utils.log import log
from site_spider.utils.url import host_of, normalize_url


@dataclass
class CrawlSummary:
    """What :func:`crawl` hands back once the report is written."""

    output_dir: Path
    results: list[CrawlResult] = field(default_factory=list)
    discovered: int = 0
    elapsed: float = 0.0

    @property
    def total(self) -> int:
        return len(self.results)

    @property
    def ok(self) -> int:
        return sum(1 for r in self.results if not r.is_broken and not r.failed)

    @property
    def broken(self) -> int:
        return sum(1 for r in self.results if r.is_broken)

    @property
    def failed(self) -> int:
        return sum(1 for r in self.results if r.failed)


class Crawler:
    """
    BFS crawler bound to the host of its first seed.  One instance runs
    one crawl; build a new one for the next.
    """

    def __init__(
        self,
        seed_urls: Iterable[str],
        output_dir: Path,
        max_depth: int = DEFAULT_MAX_DEPTH,
        rate_limit_ms: int = DEFAULT_RATE_LIMIT_MS,
        download_images: bool = DEFAULT_DOWNLOAD_IMAGES,
        capture_screenshot: bool = DEFAULT_CAPTURE_SCREENSHOT,
        renderer: Renderer | None = None,
        session: requests.Session | None = None,
        cookie_selectors: Mapping[str, Mapping[str, Any]] | None = None,
        probe_timeout: float = PROBE_TIMEOUT,
        render_timeout_ms: int = RENDER_TIMEOUT_MS,
        verify_ssl: bool = True,
        progress: bool = True,
    ) -> None:
        if max_depth < 0:
            raise ValueError(f"max_depth must be >= 0, got {max_depth}")
        if rate_limit_ms < 0:
            raise ValueError(f"rate_limit_ms must be >= 0, got {rate_limit_ms}")

        self.seeds = self._validate_seeds(seed_urls)
        first = urllib.parse.urlsplit(self.seeds[0])
        self.scheme = first.scheme
        self.domain = host_of(self.seeds[0])
        self.output_dir = Path(output_dir)
        self.max_depth = max_depth
        self.progress = progress

        # a session built here is closed by run(); an injected one is not
        self._owns_session = session is None
        self.session = session or build_session(verify_ssl=verify_ssl)
        self.renderer = renderer or PlaywrightRenderer(
            cookie_handler=CookieBannerHandler(cookie_selectors),
        )
        self.frontier = Frontier(max_depth)
        self.classifier = LinkClassifier(self.domain, self.frontier)
        self.report = CrawlReport(self.output_dir)
        self.fetcher = PageFetcher(
            session=self.session,
            renderer=self.renderer,
            frontier=self.frontier,
            classifier=self.classifier,
            report=self.report,
            output_dir=self.output_dir,
            scheme=self.scheme,
            rate_limit_ms=rate_limit_ms,
            download_images=download_images,
            capture_screenshot=capture_screenshot,
            probe_timeout=probe_timeout,
            render_timeout_ms=render_timeout_ms,
        )

    # ------------------------------------------------------------------
    # Public API
    # ------------------------------------------------------------------

    def run(self) -> CrawlSummary:
        started = time.monotonic()
        log.info("Output directory : %s", self.output_dir.resolve())
        log.info("Seed URL(s)      : %d", len(self.seeds))
        log.info("Allowed host     : %s", self.domain)
        log.info("Max depth        : %d", self.max_depth)

        try:
            self._crawl()
        finally:
            if self._owns_session:
                self.session.close()

        summary = CrawlSummary(
            output_dir=self.output_dir,
            results=list(self.report.results),
            discovered=len(self.report.discovered),
            elapsed=time.monotonic() - started,
        )
        log.info(
            "Crawl complete. fetched=%d  ok=%d  broken=%d  failed=%d  links=%d  (%.1fs)",
            summary.total, summary.ok, summary.broken, summary.failed,
            summary.discovered, summary.elapsed,
        )
        log.info("Files saved in: %s", self.output_dir.resolve())
        return summary

    # ------------------------------------------------------------------
    # Internal helpers
    # ------------------------------------------------------------------

    def _validate_seeds(self, seed_urls: Iterable[str]) -> list[str]:
        """Normalise the seeds and keep those on the first seed's host."""
        normalized: list[str] = []
        for raw in seed_urls:
            try:
                normalized.append(normalize_url(raw))
            except MalformedURL as exc:
                log.warning("[SKIP] Malformed seed – %s", exc)
        if not normalized:
            raise FatalCrawlError("no valid seed URL")

        domain = host_of(normalized[0])
        seeds = []
        for url in normalized:
            if host_of(url) != domain:
                log.warning("[SKIP] Seed outside %s: %s", domain, url)
                continue
            seeds.append(url)
        return seeds

    def _crawl(self) -> None:
        # the browser comes up before anything touches the disk
        with self.renderer:
            ensure_output_root(self.output_dir)
            try:
                self.report.open()
            except FilesystemError as exc:
                raise FatalCrawlError(str(exc)) from exc

            try:
                for url in self.frontier.seed(self.seeds, scheme=self.scheme):
                    self.report.add_seed(url)
                log.info("Crawl started. %d URL(s) queued.", len(self.frontier))
                if self.progress:
                    self._run_with_progress()
                else:
                    self._run()
            finally:
                self._write_report()

    def _run(self) -> None:
        while True:
            task = self.frontier.pop()
            if task is None:
                break
            self.fetcher.process(task)

    def _run_with_progress(self) -> None:
        """BFS loop with a tqdm progress bar."""
        bar = tqdm(
            desc="Crawling",
            unit="URL",
            dynamic_ncols=True,
            bar_format="{l_bar}{bar}| {n}/{total} [{elapsed}<{remaining}] {postfix}",
        )
        bar.total = len(self.frontier)

        try:
            while True:
                task = self.frontier.pop()
                if task is None:
                    break
                prev_q = len(self.frontier)
                result = self.fetcher.process(task)
                new_items = len(self.frontier) - prev_q
                if new_items > 0:
                    bar.total += new_items
                bar.update(1)
                bar.set_postfix(
                    queued=len(self.frontier),
                    broken=len(self.report.broken()),
                    last=result.status,
                )
        finally:
            bar.close()

    def _write_report(self) -> None:
        try:
            self.report.write()
        except FilesystemError as exc:
            raise FatalCrawlError(f"cannot write crawl report: {exc}") from exc


def crawl(
    seed_urls: Iterable[str],
    max_depth: int = DEFAULT_MAX_DEPTH,
    rate_limit_ms: int = DEFAULT_RATE_LIMIT_MS,
    download_images: bool = DEFAULT_DOWNLOAD_IMAGES,
    capture_screenshot: bool = DEFAULT_CAPTURE_SCREENSHOT,
    *,
    output_dir: Path,
    renderer: Renderer | None = None,
    session: requests.Session | None = None,
    cookie_selectors: Mapping[str, Mapping[str, Any]] | None = None,
    **options: Any,
) -> CrawlSummary:
    """Crawl the site of ``seed_urls[0]`` and archive it under *output_dir*.

    Raises :class:`~site_spider.errors.FatalCrawlError` when the crawl
    cannot start: no valid seed, the renderer fails to launch, or the
    output directory cannot be created.  Any other failure is recorded
    per URL in the report.

    Extra keyword *options* are passed to :class:`Crawler`
    (``probe_timeout``, ``render_timeout_ms``, ``verify_ssl``,
    ``progress``).
    """
    crawler = Crawler(
        seed_urls,
        output_dir,
        max_depth=max_depth,
        rate_limit_ms=rate_limit_ms,
        download_images=download_images,
        capture_screenshot=capture_screenshot,
        renderer=renderer,
        session=session,
        cookie_selectors=cookie_selectors,
        **options,
    )
    return crawler.run()
