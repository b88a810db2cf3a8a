# sitecrawl/crawler/worker.py
"""
Crawler worker thread.

Each Worker repeatedly:
  1. pops the next URL from the frontier (blocking),
  2. claims it in the visited registry, skipping URLs someone else owns,
  3. checks the fetch permission, when one is configured,
  4. downloads the page with its private fetcher,
  5. extracts, resolves and scope-filters the links of HTML pages,
  6. schedules the surviving links.

Failures end the current URL only; the thread keeps serving the frontier
until it is stopped.
"""
from __future__ import annotations

import threading
from typing import Callable, ContextManager, Dict, Optional, Protocol, Sequence

from bs4 import ParserRejectedMarkup

from sitecrawl.crawler.fetcher import FetchError
from sitecrawl.crawler.frontier import STOPPED
from sitecrawl.crawler.link_extractor import extract_links
from sitecrawl.crawler.models import FetchResult, Outcome
from sitecrawl.crawler.robots import FetchPermission
from sitecrawl.crawler.session import CrawlSession
from sitecrawl.logger import logger

__all__ = ("Worker", "FetcherFactory", "LinkExtractor")


class _Fetches(Protocol):
    def fetch(self, url: str) -> FetchResult:
        ...


FetcherFactory = Callable[[], ContextManager[_Fetches]]
LinkExtractor = Callable[[str], Sequence[str]]


class Worker(threading.Thread):
    """Runs the fetch-parse pipeline until the frontier reports STOPPED."""

    def __init__(
        self,
        worker_id: int,
        session: CrawlSession,
        fetcher_factory: FetcherFactory,
        extract: LinkExtractor = extract_links,
        permission: Optional[FetchPermission] = None,
    ) -> None:
        super().__init__(name=f"Worker-{worker_id}", daemon=True)
        self.worker_id = worker_id
        self.session = session
        self._fetcher_factory = fetcher_factory
        self._extract = extract
        self._permission = permission
        # private to this thread until it has been joined
        self.outcomes: Dict[str, Outcome] = {}
        self.skipped = 0

    def run(self) -> None:
        logger.debug("Worker started")
        with self._fetcher_factory() as fetcher:
            while True:
                url = self.session.frontier.pop()
                if url is STOPPED:
                    break
                try:
                    self._handle(url, fetcher)
                finally:
                    self.session.item_done()
        logger.debug("Worker finished after %d pages", len(self.outcomes))

    def _handle(self, url: str, fetcher: _Fetches) -> None:
        if not self.session.visited.claim(url):
            self.skipped += 1
            return
        with self.session.active.track():
            try:
                outcome = self._process(url, fetcher)
            except Exception:
                logger.exception("Unexpected error while processing %s", url)
                outcome = Outcome.ERROR
        self.outcomes[url] = outcome

    def _process(self, url: str, fetcher: _Fetches) -> Outcome:
        if self._permission is not None and not self._permission.allows(url):
            logger.info("Disallowed by robots.txt: %s", url)
            return Outcome.DISALLOWED

        logger.debug("Fetching %s", url)
        try:
            result = fetcher.fetch(url)
        except FetchError as exc:
            logger.warning("Fetch failed %s", exc)
            return Outcome.FETCH_FAILED

        if not result.ok:
            logger.info("HTTP %s for %s", result.status, url)
            return Outcome.NON_SUCCESS
        if not result.is_html:
            logger.debug("Skipping non-HTML content (%s): %s", result.content_type or "n/a", url)
            return Outcome.NOT_HTML

        try:
            hrefs = self._extract(result.body)
        except ParserRejectedMarkup as exc:
            logger.warning("Failed to parse %s: %s", url, exc)
            return Outcome.PARSE_FAILED

        queued = 0
        for href in hrefs:
            link = self.session.admit(url, href)
            if link is None or link in self.session.visited:
                continue
            self.session.schedule(link)
            queued += 1
        logger.info(
            "Visited %s (%d links, %d queued, %d visited)",
            url, len(hrefs), queued, self.session.visited.size(),
        )
        return Outcome.DONE
