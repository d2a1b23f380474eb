"""
HTTP session creation and the lightweight status probe.

The probe only asks whether a URL exists and what it serves; page
content always comes from the headless renderer.
"""

from dataclasses import dataclass

import requests
from requests.adapters import HTTPAdapter
from urllib3.util.retry import Retry

from site_spider.config import HEAD_FALLBACK_STATUS, PROBE_TIMEOUT, USER_AGENT
from site_spider.errors import ProbeFailure
from site_spider.utils.log import log


def build_session(verify_ssl: bool = True) -> requests.Session:
    """Return a ``requests.Session`` with keep-alive pooling and a
    browser User-Agent.

    Retries are disabled: a broken URL is reported once, never retried.
    """
    session = requests.Session()
    adapter = HTTPAdapter(
        max_retries=Retry(total=0, raise_on_status=False),
        pool_connections=10,
        pool_maxsize=10,
    )
    session.mount("http://", adapter)
    session.mount("https://", adapter)
    session.verify = verify_ssl
    session.headers.update({
        "User-Agent": USER_AGENT,
        "Accept": (
            "text/html,application/xhtml+xml,application/xml;q=0.9,"
            "image/avif,image/webp,image/apng,*/*;q=0.8"
        ),
        "Accept-Language": "en-GB,en;q=0.9",
        "Connection": "keep-alive",
    })
    return session


@dataclass(frozen=True)
class ProbeResult:
    status: int
    content_type: str
    final_url: str

    @property
    def ok(self) -> bool:
        return 200 <= self.status < 400

    @property
    def mime_type(self) -> str:
        return self.content_type.split(";")[0].strip().lower()


def probe(
    session: requests.Session,
    url: str,
    timeout: float = PROBE_TIMEOUT,
) -> ProbeResult:
    """
    Check that *url* exists with a ``HEAD`` request (redirects followed).

    Servers that answer HEAD with 405/501 are asked again with a streamed
    ``GET`` whose body is never downloaded.

    Raises :class:`~site_spider.errors.ProbeFailure` when no HTTP answer
    arrives (timeout, DNS failure, refused connection, TLS error).
    """
    try:
        resp = session.head(url, timeout=timeout, allow_redirects=True)
        if resp.status_code in HEAD_FALLBACK_STATUS:
            log.debug("[PROBE] HEAD refused (%d), retrying with GET: %s",
                      resp.status_code, url)
            resp.close()
            resp = session.get(url, timeout=timeout, allow_redirects=True,
                               stream=True)
    except requests.RequestException as exc:
        raise ProbeFailure(url, exc) from exc

    try:
        return ProbeResult(
            status=resp.status_code,
            content_type=resp.headers.get("Content-Type", ""),
            final_url=resp.url or url,
        )
    finally:
        resp.close()


def download(
    session: requests.Session,
    url: str,
    timeout: float,
) -> bytes:
    """GET *url* and return the body; raises ``requests`` errors and
    ``HTTPError`` for non-2xx answers."""
    resp = session.get(url, timeout=timeout)
    resp.raise_for_status()
    return resp.content
