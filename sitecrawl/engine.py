# File: sitecrawl/engine.py
"""sitecrawl.engine: orchestration layer that runs a crawl for a configuration."""

from __future__ import annotations

from typing import Optional

from sitecrawl.aggregator import CrawlSummary
from sitecrawl.config import CrawlerConfig
from sitecrawl.crawler.coordinator import Coordinator
from sitecrawl.logger import logger

__all__ = ["Engine", "start_crawl"]


class Engine:
    """Facade used by the CLI: runs one crawl for a validated config."""

    def __init__(self, config: CrawlerConfig) -> None:
        self.config = config
        self.coordinator: Optional[Coordinator] = None

    def start_crawl(self) -> CrawlSummary:
        """Run the crawl to quiescence and return its summary."""
        self.coordinator = Coordinator(self.config)
        try:
            return self.coordinator.run()
        except Exception as exc:
            logger.error("Crawl failed: %s", exc)
            raise


def start_crawl(cfg: CrawlerConfig) -> CrawlSummary:
    """Run a crawl for *cfg* and return its summary."""
    return Engine(cfg).start_crawl()
