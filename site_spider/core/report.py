"""
Crawl report builder.

Results stream into ``spider-report.csv`` as each task finishes, so an
interrupted crawl still leaves a usable record.  :meth:`CrawlReport.write`
then (re)writes every artifact from the accumulated state; calling it
again with the same state rewrites identical files.
"""

import csv
import json
from dataclasses import dataclass
from pathlib import Path
from typing import IO

from site_spider.config import (
    ALL_LINKS_FILE,
    BROKEN_LINKS_FILE,
    INCOMING_LINKS_FILE,
    OUTGOING_LINKS_FILE,
    SPIDER_REPORT_FILE,
    STATUS_ERROR,
)
from site_spider.core.storage import save_text
from site_spider.errors import FilesystemError
from site_spider.utils.log import log

Status = int | str

_CSV_HEADER = ("url", "depth", "status", "content_type", "error")


def is_broken_status(status: Status | None) -> bool:
    """``ERROR`` and anything outside 2xx/3xx count as broken."""
    if status is None:
        return False
    if status == STATUS_ERROR or not isinstance(status, int):
        return True
    return not 200 <= status < 400


@dataclass
class CrawlResult:
    """Outcome of one dequeued task."""

    url: str
    depth: int
    status: Status
    content_type: str = ""
    error: str | None = None

    @property
    def is_broken(self) -> bool:
        return is_broken_status(self.status)

    @property
    def failed(self) -> bool:
        return self.error is not None

    def as_row(self) -> tuple:
        return (self.url, self.depth, self.status, self.content_type,
                self.error or "")


@dataclass(frozen=True)
class LinkRecord:
    """One hyperlink observed on a fetched page.

    ``status`` is ``None`` while the target has not been probed
    (cross-domain links, images, links beyond the depth limit).
    """

    source_url: str
    target_url: str
    status: Status | None = None


class CrawlReport:
    """Accumulates results and link provenance for one crawl."""

    def __init__(self, output_dir: Path) -> None:
        self.output_dir = output_dir
        self.results: list[CrawlResult] = []
        self._statuses: dict[str, Status] = {}
        self._links: list[tuple[str, str]] = []
        self._link_pairs: set[tuple[str, str]] = set()
        # dict keeps first-seen order
        self._discovered: dict[str, None] = {}
        self._stream: IO[str] | None = None
        self._writer = None

    # ------------------------------------------------------------------
    # Streaming
    # ------------------------------------------------------------------

    def open(self) -> None:
        """Start (or restart) the streamed CSV report."""
        path = self.output_dir / SPIDER_REPORT_FILE
        try:
            self._stream = path.open("w", newline="", encoding="utf-8")
        except OSError as exc:
            raise FilesystemError(f"cannot open {path}: {exc}") from exc
        self._writer = csv.writer(self._stream)
        self._writer.writerow(_CSV_HEADER)
        self._stream.flush()

    def close(self) -> None:
        if self._stream is not None:
            self._stream.close()
            self._stream = None
            self._writer = None

    def add_seed(self, url: str) -> None:
        self._discovered.setdefault(url, None)

    def add_result(self, result: CrawlResult) -> None:
        self.results.append(result)
        self._statuses[result.url] = result.status
        if self._writer is not None:
            try:
                self._writer.writerow(result.as_row())
                self._stream.flush()
            except OSError as exc:
                log.warning("[ERR] Could not stream report row for %s: %s",
                            result.url, exc)

    def add_link(self, source_url: str, target_url: str) -> None:
        self._discovered.setdefault(target_url, None)
        pair = (source_url, target_url)
        if pair not in self._link_pairs:
            self._link_pairs.add(pair)
            self._links.append(pair)

    # ------------------------------------------------------------------
    # Views
    # ------------------------------------------------------------------

    def status_of(self, url: str) -> Status | None:
        return self._statuses.get(url)

    @property
    def discovered(self) -> list[str]:
        return list(self._discovered)

    def link_records(self) -> list[LinkRecord]:
        return [LinkRecord(src, dst, self._statuses.get(dst))
                for src, dst in self._links]

    def broken(self) -> list[CrawlResult]:
        return [r for r in self.results if r.is_broken]

    def failed(self) -> list[CrawlResult]:
        return [r for r in self.results if r.failed]

    def incoming(self) -> dict[str, list[str]]:
        """target → sorted pages linking to it."""
        incoming: dict[str, set[str]] = {}
        for src, dst in self._links:
            incoming.setdefault(dst, set()).add(src)
        return {dst: sorted(srcs) for dst, srcs in incoming.items()}

    def outgoing(self) -> dict[str, list[str]]:
        """source → targets in the order they appear on the page."""
        outgoing: dict[str, list[str]] = {}
        for src, dst in self._links:
            outgoing.setdefault(src, []).append(dst)
        return outgoing

    # ------------------------------------------------------------------
    # Final artifacts
    # ------------------------------------------------------------------

    def write(self) -> None:
        """Write every report artifact, overwriting earlier runs."""
        self.close()
        out = self.output_dir

        save_text(out / ALL_LINKS_FILE, _lines(self.discovered))
        save_text(
            out / BROKEN_LINKS_FILE,
            _lines(f"{r.url}\t{r.status}" for r in self.broken()),
        )
        save_text(out / INCOMING_LINKS_FILE, _json(self.incoming()))
        save_text(out / OUTGOING_LINKS_FILE, _json(self.outgoing()))
        self._rewrite_csv(out / SPIDER_REPORT_FILE)

        log.info("[REPORT] %d result(s), %d broken, %d link(s) → %s",
                 len(self.results), len(self.broken()),
                 len(self._discovered), out)

    def _rewrite_csv(self, path: Path) -> None:
        try:
            with path.open("w", newline="", encoding="utf-8") as fh:
                writer = csv.writer(fh)
                writer.writerow(_CSV_HEADER)
                writer.writerows(r.as_row() for r in self.results)
        except OSError as exc:
            raise FilesystemError(f"cannot write {path}: {exc}") from exc


def _lines(items) -> str:
    text = "\n".join(items)
    return text + "\n" if text else ""


def _json(obj) -> str:
    return json.dumps(obj, indent=2, ensure_ascii=False) + "\n"
