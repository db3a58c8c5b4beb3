"""
staffdash/core/errors.py
Failures raised by the HTTP client wrapper. Hooks turn all of them into
HookState.error; nothing here escapes a hook.
"""

from typing import Optional


class DashboardApiError(Exception):
    """Base class for every upstream failure."""


class NetworkError(DashboardApiError):
    """Transport failure: DNS, refused connection, timeout."""


class HttpStatusError(DashboardApiError):
    def __init__(self, status_code: int, url: str = ""):
        self.status_code = status_code
        self.url = url
        super().__init__(f"HTTP error! status: {status_code}")


class InvalidPayloadError(DashboardApiError):
    """Body was not valid JSON."""


class UpstreamError(DashboardApiError):
    """Envelope came back with success = false."""

    def __init__(self, message: Optional[str] = None):
        super().__init__(message or "API returned unsuccessful response")
