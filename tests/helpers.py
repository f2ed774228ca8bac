from __future__ import annotations

import json
import types
from collections import defaultdict

import requests

ENV_KEYS = (
    "API_TOKEN",
    "VLAN",
    "MAC_ADDRESS",
    "IP_ADDRESS",
    "NSEID",
    "LASTNAME",
    "ROOMNUMBER",
    "PROPERTYID",
    "REGMETHODID",
    "RATEPLANID",
    "LOG_LEVEL",
)

PORTAL_URL = (
    "https://splash.skyadmin.io/?UI=a39d49&NI=ab12cd&UIP=10.0.24.1&MA=D4CA6DA65E0E"
    "&RN=101&PORT=3300&RAD=1&PP=0&PMS=1&SIP=10.0.24.21"
    "&OS=http%3A%2F%2Fdetectportal.firefox.com%2Fsuccess.txt"
)
SCRIPT_URL = "https://splash.skyadmin.io/js/app.e360d181.js"
PORTAL_HTML = (
    "<!DOCTYPE html><html><head>"
    '<link href="/js/chunk-vendors.1a2b3c4d.js" rel="preload" as="script">'
    '<link href="/js/app.e360d181.js" rel="preload" as="script">'
    "</head><body><div id=app></div>"
    '<script src="/js/chunk-vendors.1a2b3c4d.js"></script>'
    '<script src="/js/app.e360d181.js"></script>'
    "</body></html>"
)
SCRIPT_TOKEN = "6dbb801a63dcec89d06e9ccdbce7948a"
SCRIPT_BODY = (
    ')}],v=(t("8e6e"),t("ac6a")),y="https://skyadmin.io/api/",'
    f'S="https://dev.skyadmin.io/api/",E="{SCRIPT_TOKEN}",C=R.a.create({{baseU'
)


def make_response(
    status_code: int = 200,
    body: bytes | str = b"",
    url: str = "http://example.invalid/",
    json_body: object = None,
) -> requests.Response:
    if json_body is not None:
        body = json.dumps(json_body)
    if isinstance(body, str):
        body = body.encode("utf-8")
    response = requests.Response()
    response.status_code = status_code
    response._content = body
    response.url = url
    response.encoding = "utf-8"
    return response


class FakeSession:
    """
    Stands in for requests.Session.

    Responses (or exceptions) are queued per (method, url) and handed out in
    order; a request with nothing queued fails like an unreachable host.
    """

    def __init__(self) -> None:
        self.routes: dict[tuple[str, str], list] = defaultdict(list)
        self.calls: list[types.SimpleNamespace] = []

    def add(self, method: str, url: str, result) -> None:
        self.routes[(method.upper(), url)].append(result)

    def get(self, url, **kwargs):
        return self._handle("GET", url, kwargs)

    def post(self, url, **kwargs):
        return self._handle("POST", url, kwargs)

    def calls_to(self, method: str, url: str) -> list[types.SimpleNamespace]:
        return [c for c in self.calls if c.method == method and c.url == url]

    def _handle(self, method, url, kwargs):
        self.calls.append(types.SimpleNamespace(method=method, url=url, **kwargs))
        queue = self.routes.get((method, url))
        if not queue:
            raise requests.ConnectionError(f"no route to {method} {url}")
        result = queue.pop(0)
        if isinstance(result, Exception):
            raise result
        return result
