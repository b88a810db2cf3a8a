# sitecrawl/crawler/link_extractor.py
"""
Link extraction from HTML documents.
"""
from __future__ import annotations

from typing import List

from bs4 import BeautifulSoup
from bs4.element import Tag


def extract_links(html: str) -> List[str]:
    """
    Return the raw ``href`` values of all anchor elements, in document order.

    Values are returned as written in the markup; resolving them against the
    page URL is left to :func:`sitecrawl.crawler.resolver.resolve`. Raises
    :class:`bs4.ParserRejectedMarkup` when the parser gives up on the input.
    """
    soup = BeautifulSoup(html, "html.parser")
    links: List[str] = []
    for tag in soup.find_all("a", href=True):
        if not isinstance(tag, Tag):
            continue
        href_val = tag.get("href")
        if isinstance(href_val, str):
            links.append(href_val)
    return links
