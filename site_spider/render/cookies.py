"""
Cookie-consent overlay dismissal.

The selector table is injected at crawl start, keyed by host name::

    {
      "www.example.co.uk": {"clickSelector": "#onetrust-accept-btn-handler"},
      "www.example.com":   {"shadowSelectors": ["#usercentrics-root",
                                                "button[data-testid=uc-accept-all-button]"]}
    }

``clickSelector`` is tried first; ``shadowSelectors`` is a chain of
selectors, each one looked up inside the previous element's (open)
shadow root.  Hosts without an entry are left alone.
"""

import json
from pathlib import Path
from typing import Any, Mapping

from playwright.sync_api import Error as PlaywrightError

from site_spider.config import COOKIE_SELECTOR_TIMEOUT_MS, COOKIE_SETTLE_MS
from site_spider.utils.log import log
from site_spider.utils.url import host_of


def load_cookie_selectors(path: Path) -> dict[str, dict[str, Any]]:
    """Read the selector table from a JSON file."""
    data = json.loads(Path(path).read_text(encoding="utf-8"))
    if not isinstance(data, dict):
        raise ValueError(f"{path}: expected an object mapping host → selectors")
    table: dict[str, dict[str, Any]] = {}
    for host, entry in data.items():
        if not isinstance(entry, dict):
            raise ValueError(f"{path}: entry for {host!r} must be an object")
        table[host.lower()] = entry
    return table


class CookieBannerHandler:
    """Dismisses the consent overlay of a page using the injected table."""

    def __init__(
        self,
        selectors: Mapping[str, Mapping[str, Any]] | None = None,
        timeout_ms: int = COOKIE_SELECTOR_TIMEOUT_MS,
        settle_ms: int = COOKIE_SETTLE_MS,
    ) -> None:
        self.selectors = {k.lower(): v for k, v in (selectors or {}).items()}
        self.timeout_ms = timeout_ms
        self.settle_ms = settle_ms

    def config_for(self, url: str) -> Mapping[str, Any] | None:
        host = host_of(url) or url.lower()
        config = self.selectors.get(host)
        if config is None and host.startswith("www."):
            config = self.selectors.get(host[4:])
        return config

    def dismiss(self, page, url: str) -> bool:
        """Try to close the overlay on *page*; ``True`` when a button was
        clicked."""
        config = self.config_for(url)
        if not config:
            log.debug("[COOKIE] No overlay config for %s", host_of(url))
            return False

        click_selector = config.get("clickSelector")
        if click_selector:
            try:
                page.wait_for_selector(click_selector, timeout=self.timeout_ms)
                page.click(click_selector, timeout=self.timeout_ms)
                log.info("[COOKIE] Dismissed via selector %s", click_selector)
                page.wait_for_timeout(self.settle_ms)
                return True
            except PlaywrightError as exc:
                log.info("[COOKIE] Selector %s failed on %s – %s",
                         click_selector, host_of(url), exc)

        shadow_selectors = config.get("shadowSelectors") or []
        if shadow_selectors:
            # Playwright CSS locators pierce open shadow roots
            locator = page.locator(shadow_selectors[0])
            for selector in shadow_selectors[1:]:
                locator = locator.locator(selector)
            try:
                locator.first.click(timeout=self.timeout_ms)
                log.info("[COOKIE] Dismissed via shadow DOM on %s", host_of(url))
                page.wait_for_timeout(self.settle_ms)
                return True
            except PlaywrightError as exc:
                log.info("[COOKIE] Shadow DOM dismissal failed on %s – %s",
                         host_of(url), exc)

        return False
