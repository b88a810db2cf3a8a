# sitecrawl/crawler/coordinator.py
"""
Quiescence coordinator: seeds the frontier, runs the worker pool, and stops
it exactly when the crawl has run out of work.
"""
from __future__ import annotations

import threading
import time
from functools import partial
from typing import List, Optional

from sitecrawl.aggregator import CrawlSummary, aggregate_results
from sitecrawl.config import CrawlerConfig
from sitecrawl.crawler.fetcher import Fetcher
from sitecrawl.crawler.link_extractor import extract_links
from sitecrawl.crawler.robots import FetchPermission, RobotsPolicy
from sitecrawl.crawler.session import CrawlSession
from sitecrawl.crawler.worker import FetcherFactory, LinkExtractor, Worker
from sitecrawl.logger import logger

__all__ = ("Coordinator",)


class Coordinator:
    """Owns one crawl session from seeding to the final join.

    Termination rests on the session's pending-work counter alone: it is
    raised before every push and lowered after a worker is done with the
    popped item, and a page's links are pushed before the page itself is
    released. Zero therefore means nothing queued and nothing in progress.
    """

    def __init__(
        self,
        config: CrawlerConfig,
        *,
        fetcher_factory: Optional[FetcherFactory] = None,
        extract: LinkExtractor = extract_links,
        permission: Optional[FetchPermission] = None,
    ) -> None:
        self.config = config
        self._fetcher_factory: FetcherFactory = fetcher_factory or partial(Fetcher, config)
        self._extract = extract
        self._permission = permission
        self._stop_requested = threading.Event()
        self.session: Optional[CrawlSession] = None

    def stop(self) -> None:
        """Ask a running crawl to finish early; observed at the next progress tick."""
        self._stop_requested.set()

    def run(self) -> CrawlSummary:
        session = CrawlSession(self.config.seed_url)
        self.session = session
        start = time.monotonic()
        logger.info(
            "Starting crawl: %s (scope %s, %d workers)",
            session.seed, session.scope, self.config.threads,
        )

        permission = self._load_permission(session)
        session.schedule(session.seed)
        workers = [
            Worker(i, session, self._fetcher_factory, self._extract, permission)
            for i in range(self.config.threads)
        ]
        for worker in workers:
            worker.start()

        try:
            self._await_quiescence(session, workers)
        except KeyboardInterrupt:
            logger.warning("Interrupted; waiting for workers to finish their current page")
            self._stop_requested.set()
        finally:
            interrupted = self._stop_requested.is_set()
            dropped = session.frontier.request_stop(discard_pending=interrupted)
            if dropped:
                logger.info("Discarded %d queued URLs", dropped)
            for worker in workers:
                worker.join()

        elapsed = time.monotonic() - start
        summary = aggregate_results(
            session.seed,
            session.scope,
            session.visited.snapshot(),
            (worker.outcomes for worker in workers),
            skipped=sum(worker.skipped for worker in workers),
            elapsed=elapsed,
            interrupted=interrupted,
        )
        logger.info(
            "Finished: %d unique pages in %.2f s", summary.visited_count, elapsed
        )
        return summary

    def _load_permission(self, session: CrawlSession) -> Optional[FetchPermission]:
        if self._permission is not None or not self.config.respect_robots:
            return self._permission
        with self._fetcher_factory() as fetcher:
            return RobotsPolicy.load(fetcher, session.scope, self.config.user_agent)

    def _await_quiescence(self, session: CrawlSession, workers: List[Worker]) -> None:
        while not session.pending.wait_for_zero(timeout=self.config.progress_interval):
            if self._stop_requested.is_set():
                logger.warning("Stop requested with %d items pending", session.pending.value)
                return
            if not any(worker.is_alive() for worker in workers):
                raise RuntimeError(
                    f"all workers exited with {session.pending.value} items pending"
                )
            logger.info(
                "Progress: pending=%d active=%d queued=%d visited=%d",
                session.pending.value,
                session.active.value,
                len(session.frontier),
                session.visited.size(),
            )
        logger.info("No work left; requesting stop")
