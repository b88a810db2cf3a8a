# sitecrawl/crawler/models.py
"""
Data models shared by the crawler components.
"""
from __future__ import annotations

from dataclasses import dataclass
from enum import Enum


class Outcome(str, Enum):
    """Terminal state of one URL taken off the frontier."""

    SKIPPED = "skipped"
    DISALLOWED = "disallowed"
    FETCH_FAILED = "fetch_failed"
    NON_SUCCESS = "non_success"
    NOT_HTML = "not_html"
    PARSE_FAILED = "parse_failed"
    ERROR = "error"
    DONE = "done"


@dataclass(slots=True, frozen=True)
class FetchResult:
    """Response of a single GET: final status, content type and text body.

    ``body`` is only populated for textual 2xx responses.
    """

    url: str
    status: int
    content_type: str
    body: str = ""

    @property
    def ok(self) -> bool:
        return 200 <= self.status < 300

    @property
    def is_html(self) -> bool:
        return "text/html" in self.content_type.lower()
