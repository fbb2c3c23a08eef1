"""
Visitor country from CDN/proxy headers

The headers are set by the hosting edge and are not authenticated; the value
is only a targeting hint.
"""
import re
from typing import Mapping, Optional

COUNTRY_HEADERS = ("x-vercel-ip-country", "cf-ipcountry")
UNKNOWN_COUNTRY = "XX"

_COUNTRY_RE = re.compile(r"^[A-Z]{2}$")


def normalize_country(value: Optional[str]) -> Optional[str]:
    if not value:
        return None
    code = value.strip().upper()
    if not _COUNTRY_RE.match(code) or code == UNKNOWN_COUNTRY:
        return None
    return code


def country_from_headers(headers: Mapping[str, str]) -> Optional[str]:
    """First valid two-letter code among the known headers, else None"""
    for name in COUNTRY_HEADERS:
        code = normalize_country(headers.get(name))
        if code:
            return code
    return None
