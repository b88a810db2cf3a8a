# File: sitecrawl/aggregator.py
"""sitecrawl.aggregator: folds per-worker outcome records into a crawl summary."""

from __future__ import annotations

import json
from collections import Counter
from dataclasses import asdict, dataclass, field
from typing import Dict, Iterable, List, Mapping

from sitecrawl.crawler.models import Outcome


@dataclass(slots=True)
class CrawlSummary:
    """Result of one crawl run: the visited set and how each URL ended."""

    seed: str
    scope: str
    visited: List[str] = field(default_factory=list)
    outcomes: Dict[str, int] = field(default_factory=dict)
    failed: Dict[str, str] = field(default_factory=dict)
    elapsed: float = 0.0
    interrupted: bool = False

    @property
    def visited_count(self) -> int:
        return len(self.visited)

    def json(self, *, pretty: bool = False) -> str:
        """JSON representation for the CLI."""
        output = asdict(self)
        output["visited_count"] = self.visited_count
        return json.dumps(output, ensure_ascii=False, indent=2 if pretty else None)


def aggregate_results(
    seed: str,
    scope: str,
    visited: Iterable[str],
    records: Iterable[Mapping[str, Outcome]],
    *,
    skipped: int = 0,
    elapsed: float = 0.0,
    interrupted: bool = False,
) -> CrawlSummary:
    """Build a CrawlSummary from the registry snapshot and worker records."""
    counts: Counter[str] = Counter()
    failed: Dict[str, str] = {}
    for record in records:
        for url, outcome in record.items():
            counts[outcome.value] += 1
            if outcome is not Outcome.DONE:
                failed[url] = outcome.value
    if skipped:
        counts[Outcome.SKIPPED.value] += skipped
    return CrawlSummary(
        seed=seed,
        scope=scope,
        visited=sorted(visited),
        outcomes=dict(sorted(counts.items())),
        failed=dict(sorted(failed.items())),
        elapsed=round(elapsed, 3),
        interrupted=interrupted,
    )
