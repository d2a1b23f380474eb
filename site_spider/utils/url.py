"""
URL normalisation and output path-mapping helpers.
"""

import hashlib
import re
import urllib.parse
from dataclasses import dataclass
from pathlib import Path

from site_spider.config import CRAWLABLE_SCHEMES, IMAGES_DIR
from site_spider.errors import MalformedURL

_DEFAULT_PORTS = {"http": 80, "https": 443}

# Anything outside this set is replaced with "_" in output path segments
_UNSAFE_SEGMENT_RE = re.compile(r"[^A-Za-z0-9._-]")


def normalize_url(raw: str, base: str | None = None, scheme: str | None = None) -> str:
    """
    Return the canonical form of *raw*, the crawl's deduplication key.

    Rules, applied in order:

    1. resolve *raw* relative to *base*;
    2. force *scheme* (the crawl's initial scheme) when given;
    3. drop the fragment;
    4. drop a single trailing slash, except for the bare root ``/``;
    5. sort query parameters by key (repeated keys keep their order).

    Scheme and host are lower-cased and a default port is dropped, so
    ``HTTP://Example.com:80/a/?b=2&a=1#top`` and
    ``https://example.com/a?a=1&b=2`` collapse to the same value when
    the crawl runs over HTTPS.

    Raises :class:`~site_spider.errors.MalformedURL` for empty input,
    unparsable URLs, non-HTTP schemes (``mailto:``, ``javascript:`` …)
    and URLs without a host.
    """
    if raw is None:
        raise MalformedURL("", "empty URL")
    raw = raw.strip()
    if not raw:
        raise MalformedURL(raw, "empty URL")

    try:
        absolute = urllib.parse.urljoin(base, raw) if base else raw
        parts = urllib.parse.urlsplit(absolute)
        port = parts.port
    except ValueError as exc:
        raise MalformedURL(raw, str(exc)) from exc

    resolved_scheme = parts.scheme.lower()
    if resolved_scheme not in CRAWLABLE_SCHEMES:
        raise MalformedURL(raw, f"unsupported scheme {resolved_scheme or '(none)'}")

    host = parts.hostname
    if not host:
        raise MalformedURL(raw, "missing host")
    if ":" in host:
        host = f"[{host}]"

    final_scheme = (scheme or resolved_scheme).lower()
    netloc = host
    if port is not None and port not in (
        _DEFAULT_PORTS.get(resolved_scheme), _DEFAULT_PORTS.get(final_scheme)
    ):
        netloc = f"{host}:{port}"

    path = parts.path or "/"
    if path != "/" and path.endswith("/"):
        path = path[:-1]

    query = _sorted_query(parts.query)

    return urllib.parse.urlunsplit((final_scheme, netloc, path, query, ""))


def _sorted_query(query: str) -> str:
    """Sort ``k=v`` pairs by key without re-encoding them."""
    if not query:
        return ""
    pairs = [p for p in query.split("&") if p]
    pairs.sort(key=lambda p: p.split("=", 1)[0])
    return "&".join(pairs)


def host_of(url: str) -> str:
    """Lower-cased host name of *url* (empty string when absent)."""
    try:
        return (urllib.parse.urlsplit(url).hostname or "").lower()
    except ValueError:
        return ""


# ---------------------------------------------------------------------------
# Output path mapping
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class OutputLocation:
    """Where the artifacts of one crawled page live, relative to the
    crawl's output directory."""

    directory: Path
    base_name: str

    @property
    def html_path(self) -> Path:
        return self.directory / f"{self.base_name}.html"

    @property
    def screenshot_path(self) -> Path:
        return self.directory / f"{self.base_name}.webp"

    @property
    def images_dir(self) -> Path:
        return self.directory / IMAGES_DIR


def sanitize_segment(segment: str) -> str:
    """Make *segment* safe as a single file-system path component."""
    clean = _UNSAFE_SEGMENT_RE.sub("_", segment)
    # "." and ".." would walk the tree
    if clean and not clean.strip("."):
        clean = "_" * len(clean)
    return clean


def output_location(url: str) -> OutputLocation:
    """
    Map *url* to ``host/seg1/.../segN``.

    The last segment (or the host for the root path) is the base name of
    the page's HTML/screenshot pair.  A query string adds a short digest
    to the base name so ``/list?page=1`` and ``/list?page=2`` do not
    overwrite each other.  Pure function: nothing is created on disk.
    """
    parts = urllib.parse.urlsplit(url)
    netloc = parts.netloc.rsplit("@", 1)[-1].lower()
    host = sanitize_segment(netloc) or "unknown_host"

    segments = [sanitize_segment(s) for s in parts.path.split("/") if s]
    directory = Path(host, *segments)
    base_name = segments[-1] if segments else host

    if parts.query:
        digest = hashlib.sha256(parts.query.encode("utf-8")).hexdigest()[:8]
        base_name = f"{base_name}__q{digest}"

    return OutputLocation(directory=directory, base_name=base_name)
