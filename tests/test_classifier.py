"""
Tests for image detection and the link classifier.
"""

import unittest

from site_spider.core.classifier import LinkClassifier, is_image_url
from site_spider.core.frontier import CrawlTask, Frontier


class TestIsImageUrl(unittest.TestCase):
    def test_plain_extensions(self):
        for url in (
            "https://example.com/logo.png",
            "https://example.com/a/photo.JPG",
            "https://example.com/icon.svg",
            "https://example.com/favicon.ico",
            "https://example.com/pic.webp",
        ):
            with self.subTest(url=url):
                self.assertTrue(is_image_url(url))

    def test_image_disguised_as_page(self):
        self.assertTrue(is_image_url("https://example.com/logo.png.html"))

    def test_query_key(self):
        self.assertTrue(is_image_url("https://example.com/view?img=42"))
        self.assertTrue(is_image_url("https://example.com/view?image=cat"))

    def test_query_value_extension(self):
        self.assertTrue(is_image_url("https://example.com/resize?src=cat.jpeg&w=100"))

    def test_pages_are_not_images(self):
        for url in (
            "https://example.com/",
            "https://example.com/about",
            "https://example.com/gallery.html",
            "https://example.com/png-guide",
            "https://example.com/search?q=png",
        ):
            with self.subTest(url=url):
                self.assertFalse(is_image_url(url))


class TestLinkClassifier(unittest.TestCase):
    def setUp(self):
        self.frontier = Frontier(max_depth=2)
        self.classifier = LinkClassifier("example.com", self.frontier)

    def test_same_domain_page_accepted(self):
        self.assertTrue(self.classifier.classify("https://example.com/about"))
        self.assertTrue(self.frontier.is_queued("https://example.com/about"))

    def test_cross_domain_rejected(self):
        self.assertFalse(self.classifier.classify("https://other.com/"))
        self.assertFalse(self.frontier.is_known("https://other.com/"))

    def test_subdomain_is_cross_domain(self):
        self.assertFalse(self.classifier.classify("https://blog.example.com/"))

    def test_image_rejected(self):
        self.assertFalse(self.classifier.classify("https://example.com/logo.png"))

    def test_second_sighting_rejected(self):
        self.assertTrue(self.classifier.classify("https://example.com/about"))
        self.assertFalse(self.classifier.classify("https://example.com/about"))

    def test_visited_rejected(self):
        self.frontier.push(CrawlTask("https://example.com/", 0))
        self.frontier.pop()
        self.assertFalse(self.classifier.classify("https://example.com/"))

    def test_domain_case_insensitive(self):
        classifier = LinkClassifier("Example.COM", self.frontier)
        self.assertTrue(classifier.is_same_domain("https://example.com/x"))


if __name__ == "__main__":
    unittest.main()
