"""
staffdash/core/http_client.py
Shared async httpx client for the upstream staff/cash API.
  • api_client()  → process-wide ApiClient (lazy, recreated if closed)
  • ApiClient.get_json() → GET + JSON decode + envelope unwrap
  • close_all()   → called from the app lifespan on shutdown
"""

import logging
from typing import Any, Optional

import httpx

from staffdash.core.config import API_BASE, API_HEADERS, HTTP_CONNECT_S, HTTP_TIMEOUT_S
from staffdash.core.errors import HttpStatusError, InvalidPayloadError, NetworkError, UpstreamError

log = logging.getLogger("http_client")

_LIMITS  = httpx.Limits(max_connections=10, max_keepalive_connections=5)
_TIMEOUT = httpx.Timeout(HTTP_TIMEOUT_S, connect=HTTP_CONNECT_S)


def unwrap_envelope(body: Any) -> Any:
    """{success, data, error?} → data. Anything that is not an envelope passes through."""
    if isinstance(body, dict) and "success" in body:
        if not body.get("success"):
            raise UpstreamError(body.get("error"))
        return body.get("data")
    return body


class ApiClient:
    def __init__(
        self,
        base_url: str = API_BASE,
        *,
        headers: Optional[dict] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self._http = httpx.AsyncClient(
            base_url=base_url,
            headers=headers if headers is not None else API_HEADERS,
            timeout=_TIMEOUT,
            follow_redirects=True,
            limits=_LIMITS,
            transport=transport,
        )

    @property
    def is_closed(self) -> bool:
        return self._http.is_closed

    async def get_json(self, path: str, params: Optional[dict] = None) -> Any:
        try:
            r = await self._http.get(path, params=params)
        except httpx.RequestError as ex:
            log.warning(f"GET {path} failed: {ex!r}")
            raise NetworkError(str(ex) or type(ex).__name__) from ex

        log.debug(f"GET {r.request.url} → {r.status_code}")
        if not r.is_success:
            raise HttpStatusError(r.status_code, str(r.request.url))

        try:
            body = r.json()
        except ValueError as ex:
            raise InvalidPayloadError(f"Invalid JSON from {path}: {ex}") from ex

        return unwrap_envelope(body)

    async def aclose(self) -> None:
        if not self._http.is_closed:
            await self._http.aclose()


_client: Optional[ApiClient] = None


def api_client() -> ApiClient:
    global _client
    if _client is None or _client.is_closed:
        _client = ApiClient()
    return _client


async def close_all() -> None:
    if _client is not None:
        await _client.aclose()
