# sitecrawl/crawler/robots.py
"""
robots.txt support: a rule parser and the fetch-permission policy built on it.
"""
from __future__ import annotations

import re
from typing import Dict, List, Optional, Protocol, Tuple
from urllib.parse import urlsplit

from sitecrawl.crawler.fetcher import FetchError
from sitecrawl.crawler.models import FetchResult
from sitecrawl.logger import logger

__all__ = ("RobotsTxtRules", "RobotsPolicy", "FetchPermission")

_Directive = Tuple[str, str]


class RobotsTxtRules:
    """
    Parses robots.txt (RFC 9309).
    An empty Disallow allows every path. Groups naming the same agent are
    merged; the ``*`` groups apply only when no group names the agent.
    """
    _WILDCARD_RE = re.compile(r"(\*|\$)")

    def __init__(self, text: str) -> None:
        self._groups: List[Dict[str, list]] = []
        self._regex_cache: Dict[str, re.Pattern[str]] = {}
        self._parse(text)

    def can_fetch(self, user_agent: str, path: str) -> bool:
        best_len = -1
        allow: Optional[bool] = None
        for directive, pattern in self._directives_for(user_agent):
            if not self._match_path(path, pattern):
                continue
            length = self._rule_len(pattern)
            if length > best_len or (length == best_len and directive == "allow" and allow is False):
                best_len = length
                allow = directive == "allow"
        return True if allow is None else allow

    def _parse(self, text: str) -> None:
        current: Optional[Dict[str, list]] = None
        # a rule line closes the run of User-agent lines heading a group
        in_agents = False
        for raw in text.splitlines():
            line = raw.split("#", 1)[0].strip()
            if not line:
                continue
            key, _, val = line.partition(":")
            key = key.lower().strip()
            val = val.strip()
            if key == "user-agent":
                if not in_agents:
                    current = {"agents": [], "directives": []}
                    self._groups.append(current)
                current["agents"].append(val.lower())
                in_agents = True
            elif key in ("allow", "disallow"):
                in_agents = False
                if key == "disallow" and val == "":
                    continue
                if current is None:
                    current = {"agents": ["*"], "directives": []}
                    self._groups.append(current)
                current["directives"].append((key, val))

    def _directives_for(self, user_agent: str) -> List[_Directive]:
        ua = user_agent.lower()
        specific: List[_Directive] = []
        wildcard: List[_Directive] = []
        named = False
        for group in self._groups:
            if any(a != "*" and ua.startswith(a) for a in group["agents"]):
                named = True
                specific.extend(group["directives"])
            elif "*" in group["agents"]:
                wildcard.extend(group["directives"])
        return specific if named else wildcard

    def _match_path(self, path: str, pattern: str) -> bool:
        if pattern not in self._regex_cache:
            esc = re.escape(pattern).replace(r"\*", ".*")
            if pattern.endswith("$"):
                esc = esc[:-2] + "$"
            else:
                esc += ".*"
            self._regex_cache[pattern] = re.compile(f"^{esc}")
        return bool(self._regex_cache[pattern].match(path))

    @classmethod
    def _rule_len(cls, pattern: str) -> int:
        return len(cls._WILDCARD_RE.sub("", pattern))


class FetchPermission(Protocol):
    """Pre-fetch capability check consulted by the workers."""

    def allows(self, url: str) -> bool:
        ...


class _Fetches(Protocol):
    def fetch(self, url: str) -> FetchResult:
        ...


class RobotsPolicy:
    """Immutable robots.txt verdicts for one crawl scope and user agent."""

    def __init__(self, rules: Optional[RobotsTxtRules], user_agent: str) -> None:
        self._rules = rules
        self._user_agent = user_agent

    def allows(self, url: str) -> bool:
        if self._rules is None:
            return True
        parts = urlsplit(url)
        path = parts.path or "/"
        if parts.query:
            path = f"{path}?{parts.query}"
        return self._rules.can_fetch(self._user_agent, path)

    @classmethod
    def load(cls, fetcher: _Fetches, scope: str, user_agent: str) -> RobotsPolicy:
        """Fetch ``<scope>/robots.txt``; anything but a 2xx reply allows all."""
        robots_url = f"{scope}/robots.txt"
        try:
            result = fetcher.fetch(robots_url)
        except FetchError as exc:
            logger.warning("Error loading robots.txt: %s", exc)
            return cls(None, user_agent)
        if not result.ok:
            logger.debug("robots.txt %s -> HTTP %s", robots_url, result.status)
            return cls(None, user_agent)
        logger.info("Loaded robots.txt from %s", robots_url)
        return cls(RobotsTxtRules(result.body), user_agent)
