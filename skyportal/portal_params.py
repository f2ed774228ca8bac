from types import MappingProxyType
from typing import Mapping
from urllib.parse import parse_qs, urlsplit

from skyportal.errors import ParseError

# Query keys the splash gateway appends to its redirect.
PORTAL_KEYS = ("UI", "NI", "UIP", "MA", "RN", "PORT", "RAD", "PP", "PMS", "SIP", "OS")

PortalParameters = Mapping[str, str]


def parse_portal_url(url: str) -> PortalParameters:
    """Return the recognized redirect parameters of a captive portal URL.

    Only the first value of a repeated key is kept. Keys outside PORTAL_KEYS are
    dropped and keys missing from the query are simply absent.
    """
    if not isinstance(url, str):
        raise ParseError(f"parsing URL {url!r}: not a string")
    try:
        parts = urlsplit(url)
    except ValueError as exc:
        raise ParseError(f"parsing URL {url!r}: {exc}") from exc

    query = parse_qs(parts.query, keep_blank_values=True)
    data = {key: query[key][0] for key in PORTAL_KEYS if query.get(key)}
    return MappingProxyType(data)
