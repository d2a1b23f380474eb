"""
Breadth-first work queue paired with the visited/queued set.
"""

import enum
import threading
from collections import deque
from dataclasses import dataclass
from typing import Iterable

from site_spider.errors import MalformedURL
from site_spider.utils.log import log
from site_spider.utils.url import normalize_url


@dataclass(frozen=True)
class CrawlTask:
    """One normalised URL waiting to be fetched, and its distance from
    the seeds."""

    url: str
    depth: int


class Mark(enum.Enum):
    QUEUED = "queued"
    VISITED = "visited"


class VisitedSet:
    """
    Every URL the crawl has already claimed, tagged ``QUEUED`` (waiting
    in the frontier) or ``VISITED`` (dequeued).  Entries are only ever
    added or promoted from ``QUEUED`` to ``VISITED``; nothing is removed.
    """

    def __init__(self) -> None:
        self._marks: dict[str, Mark] = {}

    def __contains__(self, url: object) -> bool:
        return url in self._marks

    def __len__(self) -> int:
        return len(self._marks)

    def mark(self, url: str) -> Mark | None:
        return self._marks.get(url)

    def is_visited(self, url: str) -> bool:
        return self._marks.get(url) is Mark.VISITED

    def is_queued(self, url: str) -> bool:
        return self._marks.get(url) is Mark.QUEUED

    def add_queued(self, url: str) -> None:
        self._marks.setdefault(url, Mark.QUEUED)

    def add_visited(self, url: str) -> None:
        self._marks[url] = Mark.VISITED

    def count(self, mark: Mark) -> int:
        return sum(1 for m in self._marks.values() if m is mark)


class Frontier:
    """
    FIFO queue of :class:`CrawlTask` plus the :class:`VisitedSet`.

    Invariants:

    * no URL is dequeued twice;
    * no task deeper than *max_depth* is ever enqueued or dequeued;
    * tasks leave in the order they entered, so the crawl is
      breadth-first across all seeds.

    A task at exactly *max_depth* is still dequeued and fetched, but
    :meth:`can_expand` is false for it, so its links are not followed.

    All state changes happen under one lock; :meth:`claim` tests and
    marks a URL in a single critical section.
    """

    def __init__(self, max_depth: int) -> None:
        if max_depth < 0:
            raise ValueError(f"max_depth must be >= 0, got {max_depth}")
        self.max_depth = max_depth
        self._queue: deque[CrawlTask] = deque()
        self._seen = VisitedSet()
        self._lock = threading.Lock()

    def __len__(self) -> int:
        with self._lock:
            return len(self._queue)

    def __bool__(self) -> bool:
        return len(self) > 0

    @property
    def visited_count(self) -> int:
        with self._lock:
            return self._seen.count(Mark.VISITED)

    # ------------------------------------------------------------------
    # Enqueue side
    # ------------------------------------------------------------------

    def seed(self, urls: Iterable[str], scheme: str | None = None) -> list[str]:
        """Normalise and enqueue *urls* at depth 0.

        Malformed and duplicate seeds are skipped.  Returns the seeds
        that were actually enqueued, in order.
        """
        accepted: list[str] = []
        for raw in urls:
            try:
                url = normalize_url(raw, scheme=scheme)
            except MalformedURL as exc:
                log.warning("[SKIP] Malformed seed – %s", exc)
                continue
            if self.claim(url) and self.push(CrawlTask(url, 0)):
                accepted.append(url)
        return accepted

    def claim(self, url: str) -> bool:
        """Mark *url* as queued unless it is already known.

        Returns ``True`` when the caller now owns the right to enqueue it.
        """
        with self._lock:
            if url in self._seen:
                return False
            self._seen.add_queued(url)
            return True

    def push(self, task: CrawlTask) -> bool:
        """Append a claimed *task*; refuses tasks deeper than max_depth."""
        if task.depth > self.max_depth:
            log.debug("[QUEUE] depth %d > %d, not enqueued: %s",
                      task.depth, self.max_depth, task.url)
            return False
        with self._lock:
            if self._seen.is_visited(task.url):
                return False
            self._seen.add_queued(task.url)
            self._queue.append(task)
        return True

    def mark_visited(self, url: str) -> None:
        """Record *url* as done without it passing through the queue
        (e.g. the target of a same-domain redirect)."""
        with self._lock:
            self._seen.add_visited(url)

    # ------------------------------------------------------------------
    # Dequeue side
    # ------------------------------------------------------------------

    def pop(self) -> CrawlTask | None:
        """Return the oldest task, or ``None`` when the frontier is empty."""
        with self._lock:
            while self._queue:
                task = self._queue.popleft()
                if self._seen.is_visited(task.url):
                    # only mark_visited() can get here: a redirect target
                    log.info("[SKIP] %s already archived as a redirect target",
                             task.url)
                    continue
                if task.depth > self.max_depth:
                    log.warning("[QUEUE] Dropping over-deep task %s (depth %d)",
                                task.url, task.depth)
                    continue
                self._seen.add_visited(task.url)
                return task
        return None

    def can_expand(self, task: CrawlTask) -> bool:
        """True when links found on *task*'s page may be enqueued."""
        return task.depth < self.max_depth

    # ------------------------------------------------------------------
    # Queries
    # ------------------------------------------------------------------

    def is_known(self, url: str) -> bool:
        with self._lock:
            return url in self._seen

    def is_visited(self, url: str) -> bool:
        with self._lock:
            return self._seen.is_visited(url)

    def is_queued(self, url: str) -> bool:
        with self._lock:
            return self._seen.is_queued(url)
