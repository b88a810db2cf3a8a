# File: tests/conftest.py
from __future__ import annotations

import threading
import time
from contextlib import contextmanager
from collections.abc import AsyncIterator
from typing import Callable, Dict, Iterator, List, Union

import pytest
from aiohttp import web

from sitecrawl.config import CrawlerConfig
from sitecrawl.crawler.models import FetchResult
from sitecrawl.logger import configure


def pytest_configure(config):
    """Register custom markers so that `--strict-markers` does not fail."""
    config.addinivalue_line(
        "markers",
        "slow: marks tests as slow (deselect with '-m \"not slow\"')",
    )


@pytest.fixture(autouse=True)
def _reset_logging():
    """Re-bind the project logger to the current stderr for every test."""
    configure(level="DEBUG")
    yield


def _html_page(url: str, *hrefs: str) -> FetchResult:
    """A 200 text/html FetchResult whose body links to *hrefs*."""
    anchors = "".join(f'<a href="{href}">link</a>' for href in hrefs)
    return FetchResult(url, 200, "text/html; charset=utf-8", f"<html><body>{anchors}</body></html>")


Entry = Union[FetchResult, Exception, Callable[[str], FetchResult]]


class StubSite:
    """
    In-memory stand-in for the HTTP fetcher.

    ``pages`` maps URLs to a FetchResult, an exception to raise, or a callable
    producing the result. Unknown URLs answer 404. Calls are recorded.
    """

    def __init__(self, pages: Dict[str, Entry], delay: float = 0.0) -> None:
        self.pages = pages
        self.delay = delay
        self.calls: List[str] = []
        self.opened = 0
        self.closed = 0
        self._lock = threading.Lock()

    def fetch(self, url: str) -> FetchResult:
        with self._lock:
            self.calls.append(url)
        if self.delay:
            time.sleep(self.delay)
        entry = self.pages.get(url)
        if entry is None:
            return FetchResult(url, 404, "text/html")
        if isinstance(entry, Exception):
            raise entry
        if callable(entry):
            return entry(url)
        return entry

    @contextmanager
    def session(self) -> Iterator[StubSite]:
        """Usable as a Coordinator ``fetcher_factory``."""
        with self._lock:
            self.opened += 1
        try:
            yield self
        finally:
            with self._lock:
                self.closed += 1


@pytest.fixture()
def basic_config() -> CrawlerConfig:
    """A valid config for stubbed crawls: fast progress ticks, four workers."""
    return CrawlerConfig(
        start_url="https://site.test/",
        threads=4,
        user_agent="TestAgent/1.0",
        progress_interval=0.05,
    )


async def _serve_app(app: web.Application, port: int) -> AsyncIterator[str]:
    """Start *app* on *port*, yield base URL, ensure cleanup."""
    runner = web.AppRunner(app)
    await runner.setup()
    site = web.TCPSite(runner, "localhost", port)
    await site.start()
    try:
        yield f"http://localhost:{port}"
    finally:
        await runner.cleanup()


@pytest.fixture()
def html_page():
    """Builder for a 200 text/html FetchResult linking to the given hrefs."""
    return _html_page


@pytest.fixture()
def stub_site():
    """Factory for :class:`StubSite` instances."""
    return StubSite


@pytest.fixture()
def serve_app():
    """Async generator serving an aiohttp app on a port, yielding its base URL."""
    return _serve_app
