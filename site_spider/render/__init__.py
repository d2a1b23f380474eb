"""Headless rendering collaborators: browser, overlay dismissal, encoder."""

from site_spider.render.base import RenderedPage, Renderer
from site_spider.render.browser import PlaywrightRenderer
from site_spider.render.cookies import CookieBannerHandler, load_cookie_selectors
from site_spider.render.screenshot import encode_webp

__all__ = [
    "CookieBannerHandler",
    "PlaywrightRenderer",
    "RenderedPage",
    "Renderer",
    "encode_webp",
    "load_cookie_selectors",
]
