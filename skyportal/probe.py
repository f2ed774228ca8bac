import logging
from dataclasses import dataclass
from typing import Optional
from urllib.parse import urlparse

import requests

from skyportal.errors import ParseError, TransportError, UnexpectedDomainError
from skyportal.portal_params import PortalParameters, parse_portal_url

logger = logging.getLogger(__name__)

CHECK_URL = "http://detectportal.firefox.com/success.txt?ipv4"
ONLINE_BODY = b"success\n"
PORTAL_HOST = "splash.skyadmin.io"


@dataclass(frozen=True)
class PortalDetection:
    url: str
    params: PortalParameters
    body: str
    status_code: int


def check_device_status(
    session: requests.Session,
    check_url: str = CHECK_URL,
    portal_host: str = PORTAL_HOST,
    timeout: int = 10,
) -> Optional[PortalDetection]:
    """Return None when online, or the captive portal landing page we were sent to."""
    logger.debug("Checking device status url=%s", check_url)
    try:
        response = session.get(check_url, allow_redirects=True, timeout=timeout)
    except requests.RequestException as exc:
        logger.error("Failed to check device status error=%s", exc)
        raise TransportError(f"device status check failed: {exc}") from exc
    except ValueError as exc:
        # redirect Location that is not a URL
        logger.error("Failed to follow captive portal redirect error=%s", exc)
        raise ParseError(f"failed to parse captive portal URL: {exc}") from exc

    if response.status_code == 200 and response.content == ONLINE_BODY:
        logger.info("Device is online and responding correctly")
        return None

    captive_url = response.url or check_url
    try:
        host = urlparse(captive_url).hostname or ""
    except ValueError as exc:
        logger.error("Failed to parse captive portal URL url=%s error=%s", captive_url, exc)
        raise ParseError(f"failed to parse captive portal URL {captive_url!r}: {exc}") from exc
    if host != portal_host:
        logger.warning("Unexpected captive portal domain host=%s", host)
        raise UnexpectedDomainError(host)

    logger.warning(
        "Captive portal detected status=%s url=%s", response.status_code, captive_url
    )
    return PortalDetection(
        url=captive_url,
        params=parse_portal_url(captive_url),
        body=response.text,
        status_code=response.status_code,
    )
