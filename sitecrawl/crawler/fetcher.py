# sitecrawl/crawler/fetcher.py
"""
Fetcher module: one private HTTP client per worker thread.

Each :class:`Fetcher` owns its own asyncio event loop and aiohttp
``ClientSession``, so worker threads never share per-request resources. The
blocking :meth:`Fetcher.fetch` drives that private loop until the request
completes or the configured timeouts expire.
"""
from __future__ import annotations

import asyncio
from typing import Optional

from aiohttp import ClientError, ClientSession, ClientTimeout, TCPConnector
from sitecrawl.config import CrawlerConfig
from sitecrawl.crawler.models import FetchResult


class FetchError(Exception):
    """Transport-level failure: DNS, connect, TLS, timeout or a malformed URL."""

    def __init__(self, url: str, reason: str) -> None:
        super().__init__(f"{url}: {reason}")
        self.url = url
        self.reason = reason


def _describe(exc: BaseException) -> str:
    return str(exc) or type(exc).__name__


class Fetcher:
    """Handles HTTP GETs with redirects, TLS verification and timeouts.

    Use as a context manager; the loop and session live between ``__enter__``
    and ``__exit__``.
    """

    def __init__(self, config: CrawlerConfig) -> None:
        self.config = config
        self._loop: Optional[asyncio.AbstractEventLoop] = None
        self._session: Optional[ClientSession] = None

    def __enter__(self) -> Fetcher:
        self._loop = asyncio.new_event_loop()
        try:
            self._session = self._loop.run_until_complete(self._open_session())
        except BaseException:
            self._loop.close()
            self._loop = None
            raise
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.close()

    def close(self) -> None:
        """Close the session and the private loop; safe to call twice."""
        loop = self._loop
        if loop is None:
            return
        try:
            if self._session is not None and not self._session.closed:
                loop.run_until_complete(self._session.close())
            loop.run_until_complete(loop.shutdown_asyncgens())
        finally:
            loop.close()
            self._loop = None
            self._session = None

    async def _open_session(self) -> ClientSession:
        timeout = ClientTimeout(
            total=self.config.total_timeout,
            connect=self.config.connect_timeout,
        )
        return ClientSession(
            timeout=timeout,
            connector=TCPConnector(ssl=self.config.verify_tls),
            headers={"User-Agent": self.config.user_agent},
            raise_for_status=False,
        )

    def fetch(self, url: str) -> FetchResult:
        """
        GET *url*, following redirects.

        Returns a FetchResult for any HTTP status; raises FetchError when no
        response could be obtained.
        """
        if self._loop is None or self._session is None:
            raise RuntimeError("Fetcher is not open")
        return self._loop.run_until_complete(self._fetch(url))

    async def _fetch(self, url: str) -> FetchResult:
        assert self._session is not None
        try:
            async with self._session.get(url, allow_redirects=True) as resp:
                ctype = resp.headers.get("Content-Type", "")
                body = ""
                # only textual bodies are read; binaries are never parsed
                if 200 <= resp.status < 300 and ctype.lower().startswith("text/"):
                    body = await resp.text(errors="replace")
                return FetchResult(str(resp.url), resp.status, ctype, body)
        except (ClientError, asyncio.TimeoutError, ValueError) as exc:
            raise FetchError(url, _describe(exc)) from exc
