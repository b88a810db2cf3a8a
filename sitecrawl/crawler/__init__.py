# sitecrawl/crawler/__init__.py
"""Concurrent crawl engine: frontier, registry, workers and their coordinator.

The coordinator is imported from :mod:`sitecrawl.crawler.coordinator`
directly; it depends on :mod:`sitecrawl.aggregator`, which in turn uses the
models of this package.
"""
from sitecrawl.crawler.frontier import STOPPED, URLFrontier
from sitecrawl.crawler.registry import VisitedRegistry
from sitecrawl.crawler.resolver import resolve

__all__ = ["STOPPED", "URLFrontier", "VisitedRegistry", "resolve"]
