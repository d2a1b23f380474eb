"""
Tests for cookie banner dismissal, screenshot encoding and the
Playwright renderer lifecycle (browser mocked).
"""

import io
import json
import tempfile
import unittest
from pathlib import Path
from unittest.mock import MagicMock, patch

from PIL import Image
from playwright.sync_api import Error as PlaywrightError

from site_spider.config import VIEWPORT
from site_spider.errors import FatalCrawlError, RenderError
from site_spider.render.base import RenderedPage
from site_spider.render.browser import PlaywrightRenderer
from site_spider.render.cookies import CookieBannerHandler, load_cookie_selectors
from site_spider.render.screenshot import encode_webp


def _png(width=40, height=30, color=(200, 30, 30)) -> bytes:
    buf = io.BytesIO()
    Image.new("RGB", (width, height), color).save(buf, format="PNG")
    return buf.getvalue()


# ------------------------------------------------------------------ #
# Cookie banners
# ------------------------------------------------------------------ #

class TestCookieBannerHandler(unittest.TestCase):
    SELECTORS = {
        "www.example.co.uk": {"clickSelector": "#accept"},
        "shadow.example.com": {
            "shadowSelectors": ["#usercentrics-root", "button[data-testid=accept]"],
        },
    }

    def test_no_entry_is_noop(self):
        handler = CookieBannerHandler(self.SELECTORS)
        page = MagicMock()
        self.assertFalse(handler.dismiss(page, "https://unknown.com/"))
        page.click.assert_not_called()
        page.locator.assert_not_called()

    def test_click_selector(self):
        handler = CookieBannerHandler(self.SELECTORS, settle_ms=0)
        page = MagicMock()
        self.assertTrue(handler.dismiss(page, "https://www.example.co.uk/page"))
        page.wait_for_selector.assert_called_once()
        self.assertEqual(page.click.call_args[0][0], "#accept")

    def test_www_fallback(self):
        handler = CookieBannerHandler({"example.org": {"clickSelector": "#ok"}})
        self.assertIsNotNone(handler.config_for("https://www.example.org/"))

    def test_shadow_chain(self):
        handler = CookieBannerHandler(self.SELECTORS, settle_ms=0)
        page = MagicMock()
        self.assertTrue(handler.dismiss(page, "https://shadow.example.com/"))
        page.locator.assert_called_once_with("#usercentrics-root")
        inner = page.locator.return_value.locator
        inner.assert_called_once_with("button[data-testid=accept]")
        inner.return_value.first.click.assert_called_once()

    def test_click_failure_is_contained(self):
        handler = CookieBannerHandler(self.SELECTORS, settle_ms=0)
        page = MagicMock()
        page.wait_for_selector.side_effect = PlaywrightError("Timeout 5000ms exceeded")
        self.assertFalse(handler.dismiss(page, "https://www.example.co.uk/"))

    def test_host_keys_case_insensitive(self):
        handler = CookieBannerHandler({"WWW.Example.CO.UK": {"clickSelector": "#a"}})
        self.assertIsNotNone(handler.config_for("https://www.example.co.uk/"))

    def test_load_cookie_selectors(self):
        with tempfile.TemporaryDirectory() as tmp:
            path = Path(tmp) / "cookies.json"
            path.write_text(json.dumps(self.SELECTORS), encoding="utf-8")
            table = load_cookie_selectors(path)
        self.assertEqual(table["www.example.co.uk"]["clickSelector"], "#accept")

    def test_load_rejects_non_object(self):
        with tempfile.TemporaryDirectory() as tmp:
            path = Path(tmp) / "cookies.json"
            path.write_text("[1, 2]", encoding="utf-8")
            with self.assertRaises(ValueError):
                load_cookie_selectors(path)


# ------------------------------------------------------------------ #
# Screenshot encoding
# ------------------------------------------------------------------ #

class TestEncodeWebp(unittest.TestCase):
    def test_png_to_webp(self):
        data = encode_webp(_png())
        self.assertEqual(data[:4], b"RIFF")
        self.assertEqual(data[8:12], b"WEBP")
        with Image.open(io.BytesIO(data)) as img:
            self.assertEqual(img.size, (40, 30))

    def test_garbage_raises_render_error(self):
        with self.assertRaises(RenderError):
            encode_webp(b"not an image")

    def test_oversized_scaled_down(self):
        with patch("site_spider.render.screenshot.WEBP_MAX_DIMENSION", 20):
            data = encode_webp(_png(40, 10))
        with Image.open(io.BytesIO(data)) as img:
            self.assertLessEqual(max(img.size), 20)


# ------------------------------------------------------------------ #
# Playwright renderer
# ------------------------------------------------------------------ #

class TestPlaywrightRenderer(unittest.TestCase):
    def _started(self):
        pw = MagicMock()
        with patch("site_spider.render.browser.sync_playwright") as sp:
            sp.return_value.start.return_value = pw
            renderer = PlaywrightRenderer(cookie_handler=CookieBannerHandler(), settle_ms=0)
            renderer.start()
        return renderer, pw

    def test_start_configures_context(self):
        renderer, pw = self._started()
        pw.chromium.launch.assert_called_once()
        browser = pw.chromium.launch.return_value
        kwargs = browser.new_context.call_args.kwargs
        self.assertEqual(kwargs["viewport"], VIEWPORT)
        renderer.close()
        browser.close.assert_called_once()
        pw.stop.assert_called_once()

    def test_start_failure_is_fatal(self):
        with patch("site_spider.render.browser.sync_playwright") as sp:
            sp.return_value.start.return_value.chromium.launch.side_effect = (
                PlaywrightError("Executable doesn't exist")
            )
            renderer = PlaywrightRenderer()
            with self.assertRaises(FatalCrawlError):
                renderer.start()
            sp.return_value.start.return_value.stop.assert_called_once()

    def test_render_returns_page(self):
        renderer, pw = self._started()
        context = pw.chromium.launch.return_value.new_context.return_value
        page = context.new_page.return_value
        page.content.return_value = '<html><body><img src="/a.png"></body></html>'
        page.url = "https://example.com/"

        rendered = renderer.render("https://example.com/", 1000)
        self.assertEqual(rendered.final_url, "https://example.com/")
        self.assertEqual(rendered.image_urls, ["https://example.com/a.png"])
        page.goto.assert_called_once_with(
            "https://example.com/", wait_until="networkidle", timeout=1000,
        )
        rendered.close()
        page.close.assert_called_once()
        self.assertIsNone(rendered.handle)

    def test_render_failure_closes_page(self):
        renderer, pw = self._started()
        context = pw.chromium.launch.return_value.new_context.return_value
        page = context.new_page.return_value
        page.goto.side_effect = PlaywrightError("net::ERR_NAME_NOT_RESOLVED")
        with self.assertRaises(RenderError):
            renderer.render("https://example.com/", 1000)
        page.close.assert_called_once()

    def test_render_before_start(self):
        with self.assertRaises(RenderError):
            PlaywrightRenderer().render("https://example.com/", 1000)

    def test_capture_scrolls_then_screenshots(self):
        renderer, _ = self._started()
        handle = MagicMock()
        handle.screenshot.return_value = b"png"
        page = RenderedPage("https://example.com/", "https://example.com/", "", handle=handle)
        with patch("site_spider.render.browser.SCREENSHOT_SETTLE_MS", 0):
            self.assertEqual(renderer.capture(page), b"png")
        self.assertEqual(handle.evaluate.call_count, 2)
        handle.screenshot.assert_called_once_with(full_page=True, type="png")

    def test_capture_closed_page(self):
        renderer, _ = self._started()
        page = RenderedPage("https://example.com/", "https://example.com/", "")
        with self.assertRaises(RenderError):
            renderer.capture(page)


if __name__ == "__main__":
    unittest.main()
