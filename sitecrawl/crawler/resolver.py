# sitecrawl/crawler/resolver.py
"""
URL resolution and scope utilities.

:func:`resolve` turns a raw ``href`` found on a page into an absolute URL, or
``None`` when the link is not a fetchable resource. Nothing in this module
raises for bad input; rejection is always signalled by ``None``.
"""
from __future__ import annotations

import re
from typing import Optional, Sequence
from urllib.parse import quote, urljoin, urlsplit, urlunsplit

__all__: Sequence[str] = ("resolve", "authority", "in_scope", "canonicalize")

_SCHEME_RE = re.compile(r"^[a-zA-Z][a-zA-Z0-9+.\-]*:")
_ABSOLUTE_PREFIXES = ("http://", "https://")
_REJECTED_PREFIXES = ("javascript:", "mailto:")
_DEFAULT_PORTS = {"http": 80, "https": 443}
# RFC 3986 sub-delims and unreserved characters stay literal; "'" is
# escaped in queries the same way pydantic escapes it in the seed URL
_PATH_SAFE = "/%:@!$&'()*+,;=-._~"
_QUERY_SAFE = "/?%:@!$&()*+,;=-._~"
_ESCAPE_RE = re.compile(r"%[0-9a-fA-F]{2}")


def resolve(base: str, raw_href: str) -> Optional[str]:
    """
    Resolve *raw_href* against the page URL *base*.

    Rules, in order:

    * empty hrefs, ``javascript:``/``mailto:`` links, anything containing a
      fragment marker and any other non-HTTP scheme are rejected;
    * ``http://`` and ``https://`` hrefs are returned unchanged;
    * ``//host/path`` inherits the scheme of *base*;
    * ``/path`` is appended to the scheme and authority of *base*;
    * anything else is relative to the directory of *base*'s path.
    """
    href = raw_href.strip()
    if not href or "#" in href:
        return None
    lowered = href.lower()
    if lowered.startswith(_REJECTED_PREFIXES):
        return None
    if lowered.startswith(_ABSOLUTE_PREFIXES):
        return href
    if _SCHEME_RE.match(href):
        return None

    parts = urlsplit(base)
    if not parts.scheme or not parts.netloc:
        return None
    if href.startswith("//"):
        return f"{parts.scheme}:{href}"

    root = f"{parts.scheme}://{parts.netloc}"
    if href.startswith("/"):
        return root + href
    path = parts.path
    if not path:
        return f"{root}/{href}"
    return root + path[: path.rfind("/") + 1] + href


def _netloc(scheme: str, url: str) -> Optional[str]:
    parts = urlsplit(url)
    try:
        port = parts.port
    except ValueError:
        return None
    host = (parts.hostname or "").lower()
    if not host:
        return None
    if not host.isascii():
        try:
            host = host.encode("idna").decode("ascii")
        except UnicodeError:
            return None
    if ":" in host:
        host = f"[{host}]"
    if port is not None and port != _DEFAULT_PORTS[scheme]:
        return f"{host}:{port}"
    return host


def authority(url: str) -> Optional[str]:
    """Return ``scheme://host[:port]`` of *url* in lower case, or None."""
    scheme = urlsplit(url).scheme.lower()
    if scheme not in _DEFAULT_PORTS:
        return None
    netloc = _netloc(scheme, url)
    if netloc is None:
        return None
    return f"{scheme}://{netloc}"


def in_scope(url: str, scope: str) -> bool:
    """True when *url* lives under the authority *scope*."""
    return authority(url) == scope


def canonicalize(url: str) -> Optional[str]:
    """
    Canonical form used for dedup: lower-case scheme and IDNA host, default
    port and fragment dropped, dot segments removed, empty path becomes
    ``/``. Path and query are percent-encoded as UTF-8 with upper-case
    escapes, so ``/café`` and ``/caf%c3%a9`` both become ``/caf%C3%A9``.
    """
    url = url.strip()
    base = authority(url)
    if base is None:
        return None
    parts = urlsplit(url)
    path = parts.path or "/"
    if "/." in path and not path.startswith("//"):
        path = urlsplit(urljoin(base + "/", path)).path
    path = _encode(path, _PATH_SAFE)
    query = _encode(parts.query, _QUERY_SAFE)
    scheme, netloc = base.split("://", 1)
    return urlunsplit((scheme, netloc, path, query, ""))


def _encode(component: str, safe: str) -> str:
    # existing escapes are kept ("%" is safe) and only their case normalised
    quoted = quote(component, safe=safe, encoding="utf-8", errors="replace")
    return _ESCAPE_RE.sub(lambda m: m.group(0).upper(), quoted)
