"""
URL normalization and the policies deciding which links and responses to follow.
"""
from __future__ import annotations

import hashlib
from typing import Optional
from urllib.parse import urldefrag, urljoin, urlparse, urlunparse

from newscrawler.errors import MalformedUrl

# Non-document extensions never enqueued (denylist: unknown extensions pass)
SKIP_EXTENSIONS: frozenset[str] = frozenset((
    ".jpg", ".jpeg", ".png", ".gif", ".bmp", ".webp", ".svg", ".ico",
    ".ttf", ".woff", ".woff2", ".eot",
    ".xml", ".json", ".pdf",
    ".zip", ".rar", ".7z", ".gz", ".tar",
    ".mp3", ".mp4",
    ".css", ".js",
))

HTML_CONTENT_TYPES: frozenset[str] = frozenset(("text/html", "application/xhtml+xml"))


def is_valid_url(url: str) -> bool:
    """Reject URLs whose path ends with a known non-document extension."""
    path_lower = (urlparse(url).path or "").lower()
    return not any(path_lower.endswith(ext) for ext in SKIP_EXTENSIONS)


def normalize_url(url: str, base: Optional[str] = None) -> Optional[str]:
    """
    Normalize URL for deduplication and comparison.

    - Joins relative URLs against base
    - Drops fragments (#...)
    - Normalizes scheme/host case
    - Removes default ports (:80, :443)
    - Keeps querystrings (they matter for uniqueness)

    Returns None for empty or non-http(s) URLs and raises MalformedUrl when
    the URL cannot be parsed.
    """
    if not url or not url.strip():
        return None

    try:
        joined, _ = urldefrag(urljoin(base, url.strip()) if base else url.strip())
        parsed = urlparse(joined)
        port = parsed.port
    except ValueError as e:
        raise MalformedUrl(f"{url!r}: {e}") from e

    if parsed.scheme.lower() not in ("http", "https"):
        return None

    hostname = (parsed.hostname or "").lower()
    if not hostname:
        raise MalformedUrl(f"{url!r}: missing host")

    scheme = parsed.scheme.lower()
    if (scheme == "http" and port == 80) or (scheme == "https" and port == 443):
        netloc = hostname
    elif port:
        netloc = f"{hostname}:{port}"
    else:
        netloc = hostname

    return urlunparse((
        scheme,
        netloc,
        parsed.path or "/",
        parsed.params,
        parsed.query,
        "",
    ))


def host_of(url: str) -> str:
    """Lowercased hostname of a URL."""
    return (urlparse(url).hostname or "").lower()


def is_html_content_type(content_type: Optional[str]) -> bool:
    """True for text/html (and XHTML) responses, ignoring parameters."""
    if not content_type:
        return False
    return content_type.split(";")[0].strip().lower() in HTML_CONTENT_TYPES


def content_digest(body: str) -> str:
    """Digest of a page body used to detect unchanged content."""
    return hashlib.sha256(body.encode("utf-8")).hexdigest()
