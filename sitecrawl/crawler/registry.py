# sitecrawl/crawler/registry.py
"""
Visited registry: the single dedup gate of the crawl.
"""
from __future__ import annotations

import threading
from typing import FrozenSet, Set


class VisitedRegistry:
    """Thread-safe, grow-only set of claimed URLs."""

    def __init__(self) -> None:
        self._urls: Set[str] = set()
        self._lock = threading.Lock()

    def claim(self, url: str) -> bool:
        """Insert *url* if absent; True only for the caller that inserted it."""
        with self._lock:
            if url in self._urls:
                return False
            self._urls.add(url)
            return True

    def size(self) -> int:
        with self._lock:
            return len(self._urls)

    def snapshot(self) -> FrozenSet[str]:
        with self._lock:
            return frozenset(self._urls)

    def __contains__(self, url: object) -> bool:
        with self._lock:
            return url in self._urls

    __len__ = size
