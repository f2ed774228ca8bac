import requests
from requests.adapters import HTTPAdapter
from urllib3.util.retry import Retry


class FixedBackoffRetry(Retry):
    """Retry that waits the same ``backoff_factor`` seconds before every retry."""

    def get_backoff_time(self) -> float:
        if not self.history:
            return 0
        return self.backoff_factor


def build_session(
    user_agent: str = "",
    retries: int = 3,
    backoff_seconds: float = 2,
) -> requests.Session:
    session = requests.Session()
    # POST is not in the default allowed_methods, so registration calls only
    # get connect retries and are never replayed after the server saw them.
    retry = FixedBackoffRetry(
        total=retries,
        backoff_factor=backoff_seconds,
        status_forcelist=[502, 503, 504],
        raise_on_status=False,
    )
    adapter = HTTPAdapter(max_retries=retry)
    session.mount("http://", adapter)
    session.mount("https://", adapter)
    if user_agent:
        session.headers.update({"User-Agent": user_agent})
    return session
