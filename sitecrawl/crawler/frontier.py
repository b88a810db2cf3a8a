# sitecrawl/crawler/frontier.py
"""
URL frontier: a blocking, thread-safe FIFO of URLs waiting to be fetched.

Any number of workers may push and pop concurrently. ``pop`` blocks while the
queue is empty; ``request_stop`` releases every blocked consumer at once.
"""
from __future__ import annotations

import threading
from collections import deque
from typing import Deque, Final, Union

__all__ = ("STOPPED", "URLFrontier")


class _Stopped:
    """Type of the :data:`STOPPED` sentinel returned by a stopped frontier."""

    __slots__ = ()

    def __repr__(self) -> str:
        return "STOPPED"

    def __bool__(self) -> bool:
        return False


STOPPED: Final = _Stopped()


class URLFrontier:
    """Monitor-style MPMC queue with a permanent stop signal."""

    def __init__(self) -> None:
        self._items: Deque[str] = deque()
        self._cond = threading.Condition(threading.Lock())
        self._stopping = False

    def push(self, url: str) -> None:
        """Append *url* to the tail and wake one waiting consumer."""
        with self._cond:
            self._items.append(url)
            self._cond.notify()

    def pop(self) -> Union[str, _Stopped]:
        """
        Remove and return the head of the queue.

        Blocks until an item is available or a stop was requested. Items
        queued before the stop are still handed out; once the queue is empty
        and stopping, :data:`STOPPED` is returned instead of blocking.
        """
        with self._cond:
            while not self._items and not self._stopping:
                self._cond.wait()
            if not self._items:
                return STOPPED
            return self._items.popleft()

    def request_stop(self, *, discard_pending: bool = False) -> int:
        """
        Mark the frontier as stopping and wake all blocked consumers.

        Idempotent. With *discard_pending* the queued items are dropped so
        consumers see :data:`STOPPED` on their next pop. Returns the number
        of discarded items.
        """
        with self._cond:
            self._stopping = True
            dropped = 0
            if discard_pending:
                dropped = len(self._items)
                self._items.clear()
            self._cond.notify_all()
            return dropped

    @property
    def stopping(self) -> bool:
        with self._cond:
            return self._stopping

    def is_empty(self) -> bool:
        """Point-in-time snapshot; not a termination test on its own."""
        with self._cond:
            return not self._items

    def __len__(self) -> int:
        with self._cond:
            return len(self._items)
