# sitecrawl/crawler/session.py
"""
Crawl session: the state shared by the coordinator and its workers for one
run. It is created at crawl start and dropped once every worker has joined.
"""
from __future__ import annotations

import threading
from contextlib import contextmanager
from typing import Iterator, Optional

from sitecrawl.crawler.frontier import URLFrontier
from sitecrawl.crawler.registry import VisitedRegistry
from sitecrawl.crawler.resolver import authority, canonicalize, in_scope, resolve

__all__ = ("WorkCounter", "CrawlSession")


class WorkCounter:
    """Non-negative counter whose transition to zero can be awaited."""

    def __init__(self) -> None:
        self._value = 0
        self._cond = threading.Condition(threading.Lock())

    def increment(self) -> int:
        with self._cond:
            self._value += 1
            return self._value

    def decrement(self) -> int:
        with self._cond:
            if self._value == 0:
                raise RuntimeError("work counter decremented below zero")
            self._value -= 1
            if self._value == 0:
                self._cond.notify_all()
            return self._value

    @property
    def value(self) -> int:
        with self._cond:
            return self._value

    def wait_for_zero(self, timeout: Optional[float] = None) -> bool:
        """Block until the counter is zero; False if *timeout* ran out first."""
        with self._cond:
            return self._cond.wait_for(lambda: self._value == 0, timeout)

    @contextmanager
    def track(self) -> Iterator[None]:
        """Hold one unit for the duration of the ``with`` block."""
        self.increment()
        try:
            yield
        finally:
            self.decrement()


class CrawlSession:
    """
    Frontier, visited registry and work counters of a single crawl.

    ``pending`` counts frontier items from push until a worker is done with
    them, so it reaches zero only when nothing is queued and nothing is being
    processed. ``active`` counts claimed URLs currently in a worker's hands
    and is informational.
    """

    def __init__(self, seed: str) -> None:
        canonical = canonicalize(seed)
        if canonical is None:
            raise ValueError(f"seed must be an absolute http(s) URL: {seed!r}")
        self.seed: str = canonical
        self.scope: str = authority(canonical)  # type: ignore[assignment]
        self.frontier = URLFrontier()
        self.visited = VisitedRegistry()
        self.pending = WorkCounter()
        self.active = WorkCounter()

    def schedule(self, url: str) -> None:
        """Count *url* as pending, then hand it to the frontier."""
        self.pending.increment()
        self.frontier.push(url)

    def item_done(self) -> None:
        """Release the pending unit of one popped frontier item."""
        self.pending.decrement()

    def admit(self, page_url: str, href: str) -> Optional[str]:
        """Resolve *href* found on *page_url*; None unless it is crawlable and in scope."""
        resolved = resolve(page_url, href)
        if resolved is None:
            return None
        url = canonicalize(resolved)
        if url is None or not in_scope(url, self.scope):
            return None
        return url
