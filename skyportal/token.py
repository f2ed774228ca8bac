import logging
import re
from urllib.parse import urljoin

import requests

from skyportal.config.logging_config import mask_value

logger = logging.getLogger(__name__)

API_TOKEN_RE = re.compile(r'E="([A-Za-z0-9]{32})"')
APP_SCRIPT_RE = re.compile(r'(?:src|href)=["\']?(/js/app\.[^"\'\s>]+\.js)\b', re.IGNORECASE)
ANY_SCRIPT_RE = re.compile(r'(?:src|href)=["\']?(/js/[^"\'\s>]+\.js)\b', re.IGNORECASE)


def extract_api_token(body: str) -> str:
    if not body:
        return ""
    match = API_TOKEN_RE.search(body)
    return match.group(1) if match else ""


def find_script_path(html: str) -> str:
    """Locate the portal's bundled app script, e.g. ``/js/app.e360d181.js``."""
    if not html:
        return ""
    match = APP_SCRIPT_RE.search(html) or ANY_SCRIPT_RE.search(html)
    return match.group(1) if match else ""


def fetch_script_token(
    session: requests.Session,
    portal_url: str,
    html: str,
    timeout: int,
) -> str:
    script_path = find_script_path(html)
    if not script_path:
        logger.debug("No app script referenced by portal page")
        return ""

    script_url = urljoin(portal_url, script_path)
    logger.debug("Fetching portal script url=%s", script_url)
    try:
        response = session.get(script_url, timeout=timeout)
        response.raise_for_status()
    except requests.RequestException as exc:
        logger.warning("Failed to fetch portal script url=%s error=%s", script_url, exc)
        return ""
    return extract_api_token(response.text)


def discover_api_token(
    session: requests.Session,
    portal_url: str,
    html: str,
    timeout: int,
) -> str:
    token = fetch_script_token(session, portal_url, html, timeout)
    source = "script"
    if not token:
        token = extract_api_token(html)
        source = "page"

    if token:
        logger.debug("Found API token source=%s token=%s", source, mask_value(token))
    else:
        logger.warning("No API token found in captive portal content")
    return token
