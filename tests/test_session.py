"""
Tests for session construction, the status probe and downloads.
"""

import unittest
from unittest.mock import MagicMock

import requests

from site_spider.config import USER_AGENT
from site_spider.errors import NetworkError, ProbeFailure
from site_spider.session import ProbeResult, build_session, download, probe


def _response(status=200, content_type="text/html", url="https://example.com/",
              content=b""):
    resp = MagicMock()
    resp.status_code = status
    resp.headers = {"Content-Type": content_type} if content_type else {}
    resp.url = url
    resp.content = content
    if status >= 400:
        resp.raise_for_status.side_effect = requests.HTTPError(f"{status} error")
    return resp


class TestBuildSession(unittest.TestCase):
    def test_headers_and_adapters(self):
        session = build_session()
        self.assertEqual(session.headers["User-Agent"], USER_AGENT)
        adapter = session.get_adapter("https://example.com/")
        self.assertEqual(adapter.max_retries.total, 0)
        self.assertTrue(session.verify)

    def test_verify_disabled(self):
        self.assertFalse(build_session(verify_ssl=False).verify)


class TestProbe(unittest.TestCase):
    def test_head_ok(self):
        session = MagicMock()
        session.head.return_value = _response(200, "text/html; charset=utf-8")
        result = probe(session, "https://example.com/", timeout=5)
        self.assertEqual(result.status, 200)
        self.assertEqual(result.mime_type, "text/html")
        self.assertTrue(result.ok)
        session.head.assert_called_once_with(
            "https://example.com/", timeout=5, allow_redirects=True,
        )
        session.head.return_value.close.assert_called_once()

    def test_not_found(self):
        session = MagicMock()
        session.head.return_value = _response(404)
        result = probe(session, "https://example.com/gone")
        self.assertEqual(result.status, 404)
        self.assertFalse(result.ok)

    def test_head_not_allowed_falls_back_to_get(self):
        session = MagicMock()
        session.head.return_value = _response(405)
        session.get.return_value = _response(200)
        result = probe(session, "https://example.com/")
        self.assertEqual(result.status, 200)
        self.assertTrue(session.get.call_args.kwargs["stream"])

    def test_redirect_final_url(self):
        session = MagicMock()
        session.head.return_value = _response(200, url="https://example.com/home")
        result = probe(session, "https://example.com/")
        self.assertEqual(result.final_url, "https://example.com/home")

    def test_missing_content_type(self):
        session = MagicMock()
        session.head.return_value = _response(200, content_type=None)
        self.assertEqual(probe(session, "https://example.com/").mime_type, "")

    def test_network_error(self):
        session = MagicMock()
        session.head.side_effect = requests.Timeout("timed out")
        with self.assertRaises(ProbeFailure) as ctx:
            probe(session, "https://example.com/")
        self.assertIsInstance(ctx.exception.cause, requests.Timeout)
        self.assertIs(NetworkError, ProbeFailure)


class TestProbeResult(unittest.TestCase):
    def test_redirect_codes_ok(self):
        self.assertTrue(ProbeResult(301, "", "u").ok)
        self.assertFalse(ProbeResult(500, "", "u").ok)


class TestDownload(unittest.TestCase):
    def test_returns_body(self):
        session = MagicMock()
        session.get.return_value = _response(200, content=b"\x89PNG")
        self.assertEqual(download(session, "https://example.com/a.png", 5), b"\x89PNG")

    def test_http_error_raised(self):
        session = MagicMock()
        session.get.return_value = _response(404)
        with self.assertRaises(requests.HTTPError):
            download(session, "https://example.com/a.png", 5)


if __name__ == "__main__":
    unittest.main()
