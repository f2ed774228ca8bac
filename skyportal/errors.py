from typing import Optional


class SkyportalError(Exception):
    """Base class for failures that end a check cycle early."""


class ParseError(SkyportalError):
    """Raised when a captive portal redirect is not a URL at all."""


class TransportError(SkyportalError):
    """Raised when the connectivity probe cannot reach anything."""


class UnexpectedDomainError(SkyportalError):
    def __init__(self, host: str) -> None:
        super().__init__(f"unexpected domain: {host}")
        self.host = host


class APIError(SkyportalError):
    """Raised when a registration API call fails or returns an unusable body."""

    def __init__(
        self,
        message: str,
        status_code: Optional[int] = None,
        body: str = "",
    ) -> None:
        super().__init__(message)
        self.status_code = status_code
        self.body = body

    def __str__(self) -> str:
        message = super().__str__()
        if self.status_code is None:
            return message
        return f"{message} (status={self.status_code} body={self.body[:200]!r})"
