"""
Tests for URL normalisation and output path mapping.
"""

import unittest
from pathlib import Path

from site_spider.errors import MalformedURL
from site_spider.utils.url import (
    host_of,
    normalize_url,
    output_location,
    sanitize_segment,
)


class TestNormalizeUrl(unittest.TestCase):
    PAGE = "https://example.com/blog/post.html"

    def test_equivalent_forms_collapse(self):
        forms = [
            "https://example.com/a?a=1&b=2",
            "https://example.com/a/?a=1&b=2",
            "https://example.com/a?b=2&a=1",
            "https://example.com/a?a=1&b=2#section",
            "HTTPS://Example.COM/a?a=1&b=2",
            "http://example.com/a?a=1&b=2",
            "https://example.com:443/a?a=1&b=2",
        ]
        results = {normalize_url(f, scheme="https") for f in forms}
        self.assertEqual(results, {"https://example.com/a?a=1&b=2"})

    def test_idempotent(self):
        once = normalize_url("HTTP://Example.com:80/a/b/?z=1&y=2#top")
        self.assertEqual(normalize_url(once), once)

    def test_root_keeps_slash(self):
        self.assertEqual(normalize_url("https://example.com"), "https://example.com/")
        self.assertEqual(normalize_url("https://example.com/"), "https://example.com/")

    def test_single_trailing_slash_removed(self):
        self.assertEqual(
            normalize_url("https://example.com/docs/"),
            "https://example.com/docs",
        )

    def test_relative_resolved_against_base(self):
        self.assertEqual(
            normalize_url("../images/logo.png", base=self.PAGE),
            "https://example.com/images/logo.png",
        )

    def test_root_relative(self):
        self.assertEqual(
            normalize_url("/about", base=self.PAGE),
            "https://example.com/about",
        )

    def test_scheme_forced(self):
        self.assertEqual(
            normalize_url("https://example.com/x", scheme="http"),
            "http://example.com/x",
        )

    def test_scheme_kept_without_force(self):
        self.assertEqual(
            normalize_url("http://example.com/x"),
            "http://example.com/x",
        )

    def test_non_default_port_kept(self):
        self.assertEqual(
            normalize_url("https://example.com:8443/x"),
            "https://example.com:8443/x",
        )

    def test_repeated_keys_keep_relative_order(self):
        self.assertEqual(
            normalize_url("https://example.com/s?t=2&a=1&t=1"),
            "https://example.com/s?a=1&t=2&t=1",
        )

    def test_fragment_only_difference(self):
        self.assertEqual(
            normalize_url("https://example.com/page#one"),
            normalize_url("https://example.com/page#two"),
        )

    def test_mailto_rejected(self):
        with self.assertRaises(MalformedURL):
            normalize_url("mailto:someone@example.com")

    def test_javascript_rejected(self):
        with self.assertRaises(MalformedURL):
            normalize_url("javascript:void(0)", base=self.PAGE)

    def test_empty_rejected(self):
        with self.assertRaises(MalformedURL):
            normalize_url("   ")

    def test_missing_host_rejected(self):
        with self.assertRaises(MalformedURL):
            normalize_url("https:///nohost")

    def test_bad_port_rejected(self):
        with self.assertRaises(MalformedURL):
            normalize_url("https://example.com:99999/")

    def test_malformed_is_value_error(self):
        with self.assertRaises(ValueError):
            normalize_url("ftp://example.com/file")


class TestHostOf(unittest.TestCase):
    def test_lowercased(self):
        self.assertEqual(host_of("https://WWW.Example.com/x"), "www.example.com")

    def test_port_dropped(self):
        self.assertEqual(host_of("https://example.com:8080/"), "example.com")

    def test_no_host(self):
        self.assertEqual(host_of("/relative/path"), "")


class TestSanitizeSegment(unittest.TestCase):
    def test_safe_chars_untouched(self):
        self.assertEqual(sanitize_segment("my-page_1.v2"), "my-page_1.v2")

    def test_unsafe_chars_replaced(self):
        self.assertEqual(sanitize_segment("a b:c*d"), "a_b_c_d")

    def test_dot_segments_neutralised(self):
        self.assertEqual(sanitize_segment(".."), "__")
        self.assertEqual(sanitize_segment("."), "_")


class TestOutputLocation(unittest.TestCase):
    def test_root_uses_host(self):
        loc = output_location("https://example.com/")
        self.assertEqual(loc.directory, Path("example.com"))
        self.assertEqual(loc.base_name, "example.com")
        self.assertEqual(loc.html_path, Path("example.com/example.com.html"))

    def test_nested_path(self):
        loc = output_location("https://example.com/blog/post")
        self.assertEqual(loc.directory, Path("example.com/blog/post"))
        self.assertEqual(loc.base_name, "post")
        self.assertEqual(loc.html_path, Path("example.com/blog/post/post.html"))
        self.assertEqual(loc.screenshot_path, Path("example.com/blog/post/post.webp"))
        self.assertEqual(loc.images_dir, Path("example.com/blog/post/images"))

    def test_port_in_host_directory(self):
        loc = output_location("https://example.com:8443/a")
        self.assertEqual(loc.directory, Path("example.com_8443/a"))

    def test_deterministic(self):
        url = "https://example.com/a/b?x=1"
        self.assertEqual(output_location(url), output_location(url))

    def test_query_distinguishes_pages(self):
        one = output_location("https://example.com/list?page=1")
        two = output_location("https://example.com/list?page=2")
        self.assertEqual(one.directory, two.directory)
        self.assertNotEqual(one.base_name, two.base_name)
        self.assertTrue(one.base_name.startswith("list__q"))

    def test_traversal_cannot_escape(self):
        loc = output_location("https://example.com/%2e%2e/secret")
        for part in loc.directory.parts:
            self.assertNotIn(part, ("..", "."))

    def test_unsafe_characters_sanitised(self):
        loc = output_location("https://example.com/a%20b/c:d")
        self.assertEqual(loc.directory, Path("example.com/a_20b/c_d"))


if __name__ == "__main__":
    unittest.main()
