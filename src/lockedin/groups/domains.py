"""Domain normalization shared by tracked sites and visit reports.

Both sides must agree exactly or detection silently misses: a domain is
the lowercase hostname with one leading ``www.`` removed.
"""

from __future__ import annotations

from collections.abc import Iterable
from urllib.parse import urlsplit

from lockedin.exceptions import ValidationError


def normalize_domain(value: str | None) -> str:
    """Normalize a hostname or URL.

    >>> normalize_domain("WWW.Example.com")
    'example.com'
    >>> normalize_domain("https://www.reddit.com/r/python")
    'reddit.com'
    """
    raw = (value or "").strip().lower()
    if "://" in raw:
        host = urlsplit(raw).hostname or ""
    else:
        host = raw.split("/", 1)[0].split(":", 1)[0]
    if host.startswith("www."):
        host = host[len("www."):]
    host = host.rstrip(".")
    if not host:
        msg = "domain is required"
        raise ValidationError(msg)
    return host


def normalize_sites(sites: Iterable[str] | None) -> list[str]:
    """Normalize and de-duplicate a tracked-site list, keeping first-seen order. Blank entries are skipped."""
    seen: dict[str, None] = {}
    for site in sites or []:
        if not site or not site.strip():
            continue
        seen.setdefault(normalize_domain(site), None)
    return list(seen)
