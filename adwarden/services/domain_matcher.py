"""
Domain Matcher - map an extension page domain onto a registered platform

Matching key is the lower-cased hostname. Two hosts match when they are equal
or share the same root domain (last two labels), so "m.instagram.com" and
"www.instagram.com" both resolve to a platform registered as "instagram.com".
"""
from typing import Iterable, Optional, TypeVar
from urllib.parse import urlsplit

from adwarden.models import Platform

P = TypeVar("P", bound=Platform)


def normalize_domain_for_match(domain: str) -> str:
    """Lowercase hostname only (scheme, port, path and query removed)"""
    trimmed = domain.strip().lower()
    if not trimmed:
        return trimmed
    url = trimmed if "://" in trimmed else f"https://{trimmed}"
    try:
        hostname = urlsplit(url).hostname
    except ValueError:
        return trimmed
    return hostname or trimmed


def canonical_display_domain(hostname: str) -> str:
    """Strip a leading www. for listing"""
    host = hostname.strip().lower()
    if host.startswith("www."):
        return host[4:]
    return host


def extract_root_domain(hostname: str) -> str:
    parts = hostname.split(".")
    if len(parts) >= 2:
        return ".".join(parts[-2:])
    return hostname


def domains_match(domain1: str, domain2: str) -> bool:
    host1 = normalize_domain_for_match(domain1)
    host2 = normalize_domain_for_match(domain2)
    if not host1 or not host2:
        return False
    if host1 == host2:
        return True
    root1 = extract_root_domain(host1)
    root2 = extract_root_domain(host2)
    return root1 == root2 and len(root1) > 0


def resolve_platform(page_domain: str, active_platforms: Iterable[P]) -> Optional[P]:
    """First platform whose domain matches the page domain, or None"""
    for platform in active_platforms:
        if platform.domain and domains_match(platform.domain, page_domain):
            return platform
    return None
